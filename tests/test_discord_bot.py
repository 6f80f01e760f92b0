import asyncio
import threading
import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from tradebot.discord_bot import BUSY_MESSAGE, DISCORD_MESSAGE_LIMIT, TradingAgentBot, ask_backend, strip_mention
from tradebot.services.sessions import SessionStore

def test_ask_backend_returns_reply():
    def handler(request):
        assert request.method == "POST"
        return httpx.Response(200, json={"reply": "💰 Your balance: 1.5 ETH"})

    reply = asyncio.run(ask_backend("/trade balance", transport=httpx.MockTransport(handler)))
    assert reply == "💰 Your balance: 1.5 ETH"

def test_ask_backend_passes_error_replies_through():
    def handler(request):
        return httpx.Response(500, json={"reply": "Sorry, the AI service is not properly configured."})

    reply = asyncio.run(ask_backend("hi", transport=httpx.MockTransport(handler)))
    assert reply == "Sorry, the AI service is not properly configured."

def test_ask_backend_connection_error():
    def handler(request):
        raise httpx.ConnectError("connection refused")

    reply = asyncio.run(ask_backend("hi", transport=httpx.MockTransport(handler)))
    assert reply.startswith("Sorry, I encountered an error: connection refused")

@pytest.fixture
def agent_bot(tmp_path):
    return TradingAgentBot(SessionStore(tmp_path / "sessions.json"))

@pytest.fixture
def channel():
    channel = MagicMock()
    channel.id = 42
    channel.send = AsyncMock()
    return channel

def test_converse_records_both_sides(agent_bot, channel):
    with patch("tradebot.discord_bot.ask_backend", AsyncMock(return_value="x" * 2500)) as backend:
        asyncio.run(agent_bot.converse(channel, "buy 1 eth for usdc"))

    backend.assert_awaited_once_with("buy 1 eth for usdc")
    channel.send.assert_awaited_once_with("x" * DISCORD_MESSAGE_LIMIT)

    session = agent_bot.session_for(channel.id)
    assert [m.role for m in session.messages] == ["agent", "user", "agent"]
    assert session.title == "buy 1 eth for usdc"
    assert channel.id not in agent_bot.busy

def test_busy_channel_is_rejected(agent_bot, channel):
    agent_bot.busy.add(channel.id)
    with patch("tradebot.discord_bot.ask_backend", AsyncMock()) as backend:
        asyncio.run(agent_bot.converse(channel, "hello"))

    backend.assert_not_awaited()
    channel.send.assert_awaited_once_with(BUSY_MESSAGE)

def test_new_session_switches_channel(agent_bot, channel):
    first = agent_bot.session_for(channel.id)
    second = agent_bot.new_session(channel.id)

    assert first.id != second.id
    assert agent_bot.session_for(channel.id).id == second.id
    assert len(agent_bot.store.list()) == 2

@pytest.mark.parametrize("content", [
    "<@1234> /trade deposit 1 eth",
    "<@!1234> /trade deposit 1 eth",
    "/trade deposit 1 eth <@!1234>",
])
def test_strip_mention_handles_nickname_form(content):
    assert strip_mention(content, 1234) == "/trade deposit 1 eth"

def test_strip_mention_keeps_other_users():
    assert strip_mention("<@!99> hi", 1234) == "<@!99> hi"

def test_session_writes_run_off_the_event_loop(agent_bot, channel):
    loop_thread = threading.get_ident()
    writer_threads = []
    append = agent_bot.store.append

    def recording_append(*args):
        writer_threads.append(threading.get_ident())
        return append(*args)

    agent_bot.store.append = recording_append
    with patch("tradebot.discord_bot.ask_backend", AsyncMock(return_value="ok")):
        asyncio.run(agent_bot.converse(channel, "hello"))

    assert len(writer_threads) == 2
    assert loop_thread not in writer_threads
