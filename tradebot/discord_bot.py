import re
import asyncio
import discord
import httpx
import logging
from typing import Dict, Optional, Set
from discord.ext import commands
from tradebot.config.settings import DISCORD_BOT_TOKEN, BACKEND_URL, BACKEND_TIMEOUT
from tradebot.models.chat import ChatSession
from tradebot.services.sessions import SessionStore

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DISCORD_MESSAGE_LIMIT = 2000
BUSY_MESSAGE = "⏳ I'm still working on your previous message. Please wait for my reply."
HELP_REQUESTS = ['help', 'commands', '?', 'what can you do', '!help', '!commands']

HELP_MESSAGE = """
**Trading Agent Commands:**

**Market Data:**
`!price <asset>` - Current price (bitcoin, ethereum, solana)
`!top` - Top 5 cryptocurrencies by market cap
`!memes [trending]` - Top or trending memecoins

**Trading (on-chain):**
`!trade <request>` - e.g. `!trade deposit 0.25 ETH`, `!trade buy 0.1 ETH for USDC`, `!trade show my balance`

**Chat History:**
`!new` - Start a new chat
`!history` - List saved chats
`!open <id>` - Continue a saved chat
`!rename <title>` - Rename the current chat
`!delete <id>` - Delete a saved chat

You can also DM or mention me and chat naturally. Start a message with `/trade` to run a trade.
"""

def strip_mention(content: str, user_id: int) -> str:
    """Remove both @user and @nickname mention forms of the bot"""
    return re.sub(rf"<@!?{user_id}>", "", content).strip()

async def ask_backend(message: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> str:
    """Send a chat message to the backend and return its reply"""
    try:
        async with httpx.AsyncClient(timeout=BACKEND_TIMEOUT, transport=transport) as client:
            response = await client.post(BACKEND_URL, json={"message": message})
        data = response.json()
        return data.get("reply") or "Sorry, I couldn't generate a response."
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Error calling backend: {e}")
        return f"Sorry, I encountered an error: {e}. Please try again."

class TradingAgentBot(commands.Bot):
    """Discord chat client. Each channel writes into its current session in the store."""

    def __init__(self, store: SessionStore):
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(command_prefix="!", intents=intents)
        self.store = store
        self.current_sessions: Dict[int, str] = {}
        self.busy: Set[int] = set()

    async def setup_hook(self):
        self.store.load()

    async def close(self):
        self.store.close()
        await super().close()

    def session_for(self, channel_id: int) -> ChatSession:
        session_id = self.current_sessions.get(channel_id)
        session = self.store.get(session_id) if session_id else None
        if session is None:
            session = self.store.create()
            self.current_sessions[channel_id] = session.id
        return session

    def new_session(self, channel_id: int) -> ChatSession:
        session = self.store.create()
        self.current_sessions[channel_id] = session.id
        return session

    async def converse(self, channel, content: str):
        """Record the message, wait for the backend reply, record and send it"""
        # one message in flight per channel
        if channel.id in self.busy:
            await channel.send(BUSY_MESSAGE)
            return

        self.busy.add(channel.id)
        try:
            session = await asyncio.to_thread(self.session_for, channel.id)
            await asyncio.to_thread(self.store.append, session.id, "user", content)
            async with channel.typing():
                reply = await ask_backend(content)
            await asyncio.to_thread(self.store.append, session.id, "agent", reply)
            await channel.send(reply[:DISCORD_MESSAGE_LIMIT])
        finally:
            self.busy.discard(channel.id)

bot = TradingAgentBot(SessionStore())

@bot.event
async def on_ready():
    logger.info(f"Trading agent is online as {bot.user}")
    logger.info(f"Loaded {len(bot.store.list())} saved chats")

@bot.event
async def on_message(message):
    if message.author == bot.user:
        return

    # Check if message is a command
    if message.content.startswith('!'):
        await bot.process_commands(message)
        return

    # Handle natural language if mentioned or in DM
    if bot.user.mentioned_in(message) or isinstance(message.channel, discord.DMChannel):
        content = strip_mention(message.content, bot.user.id)
        if content.lower() in HELP_REQUESTS:
            await message.channel.send(HELP_MESSAGE)
            return
        if not content:
            return
        await bot.converse(message.channel, content)

@bot.command(name="price")
async def price(ctx, asset: str):
    """Get current price of a cryptocurrency"""
    await bot.converse(ctx.channel, f"what is the price of {asset}")

@bot.command(name="top")
async def top(ctx):
    """Top cryptocurrencies by market cap"""
    await bot.converse(ctx.channel, "top coins")

@bot.command(name="memes")
async def memes(ctx, mode: str = ""):
    """Top or trending memecoins"""
    await bot.converse(ctx.channel, "trending memecoins" if mode.lower() == "trending" else "latest memecoins")

@bot.command(name="trade")
async def trade(ctx, *, request: str = ""):
    """Run a /trade request"""
    await bot.converse(ctx.channel, f"/trade {request}".strip())

@bot.command(name="new")
async def new_chat(ctx):
    session = bot.new_session(ctx.channel.id)
    await ctx.send(f"🆕 Started a new chat `{session.id[:8]}`.\n{session.messages[0].content}")

@bot.command(name="history")
async def history(ctx):
    sessions = bot.store.list()
    if not sessions:
        await ctx.send("No saved chats yet.")
        return
    lines = [
        f"`{s.id[:8]}` {s.title} ({len(s.messages)} messages, {s.updated_at:%b %d %H:%M})"
        for s in sessions[:20]
    ]
    await ctx.send("**Saved chats:**\n" + "\n".join(lines))

def _find_session(prefix: str) -> Optional[ChatSession]:
    matches = [s for s in bot.store.list() if s.id.startswith(prefix)]
    return matches[0] if len(matches) == 1 else None

@bot.command(name="open")
async def open_chat(ctx, session_id: str):
    session = _find_session(session_id)
    if session is None:
        await ctx.send(f"❌ No chat matches `{session_id}`")
        return
    bot.current_sessions[ctx.channel.id] = session.id
    last = session.messages[-1].content if session.messages else ""
    await ctx.send(f"📂 Continuing **{session.title}**\n{last[:DISCORD_MESSAGE_LIMIT - 100]}")

@bot.command(name="rename")
async def rename_chat(ctx, *, title: str):
    session = bot.session_for(ctx.channel.id)
    bot.store.rename(session.id, title)
    await ctx.send(f"✏️ Renamed chat to **{title}**")

@bot.command(name="delete")
async def delete_chat(ctx, session_id: str):
    session = _find_session(session_id)
    if session is None or not bot.store.delete(session.id):
        await ctx.send(f"❌ No chat matches `{session_id}`")
        return
    for channel_id, current in list(bot.current_sessions.items()):
        if current == session.id:
            del bot.current_sessions[channel_id]
    await ctx.send(f"🗑️ Deleted chat **{session.title}**")

@bot.command(name="commands")
async def show_commands(ctx):
    """Show available commands"""
    await ctx.send(HELP_MESSAGE)

if __name__ == "__main__":
    try:
        bot.run(DISCORD_BOT_TOKEN)
    except Exception as e:
        logger.error(f"Error starting Discord bot: {e}")
