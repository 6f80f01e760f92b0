import re
import logging
from typing import Optional
from tradebot.models.result import (
    Err,
    ErrorKind,
    Ok,
    Result,
    SOURCE_MEMECOINS,
    SOURCE_PRICE,
    SOURCE_TOP_COINS
)
from tradebot.services.classifier import TRADE_PREFIX
from tradebot.services.llm import LLMService
from tradebot.services.market_data import (
    MarketDataService,
    format_memecoins,
    format_search_results,
    format_top_coins,
    format_trending
)

logger = logging.getLogger(__name__)

HELP_TEXT = """I can help you with trading operations! Here's what I can do:

💰 **Trading Operations:**
- Execute trades between supported tokens
- Deposit ETH or tokens into your account
- Withdraw funds from your account
- Check your balances
- Register as a user or AI agent

🔧 **How to trade:**
Simply tell me what you want to do after /trade, for example:
- "/trade I want to trade 0.1 ETH for USDC"
- "/trade deposit 1 ETH into my account"
- "/trade show my ETH balance"
- "/trade register me as a user"

I'll execute your trade directly on the blockchain using our smart contract."""

HELP_KEYWORDS = (
    "trade", "buy", "sell", "swap", "exchange", "execute trade",
    "deposit", "withdraw", "balance", "register", "agent registration"
)

# message keyword -> (CoinGecko id, display name)
PRICE_ASSETS = {
    "bitcoin": ("bitcoin", "Bitcoin"),
    "btc": ("bitcoin", "Bitcoin"),
    "ethereum": ("ethereum", "Ethereum"),
    "solana": ("solana", "Solana"),
}

TOP_COIN_KEYWORDS = ("top coins", "top cryptocurrencies", "best coins", "market cap")
MEMECOIN_KEYWORDS = ("meme", "memecoin", "dog", "shiba", "latest coin", "new coin")
SEARCH_NOISE = re.compile(r"search|find|for|meme|coin", re.IGNORECASE)

MEMECOIN_NOTE = "Note: Always do your own research before investing in memecoins as they are highly volatile."

class Assistant:
    """Answers everything that is not a chain action: help, market data, then the LLM"""

    def __init__(self, market_data: Optional[MarketDataService] = None, llm: Optional[LLMService] = None):
        self.market_data = market_data or MarketDataService()
        self.llm = llm or LLMService()

    def answer(self, message: str) -> Result:
        lower_msg = message.lower().strip()

        if lower_msg.startswith(TRADE_PREFIX):
            trade_query = lower_msg[len(TRADE_PREFIX):].strip()
            if not trade_query or any(k in trade_query for k in HELP_KEYWORDS):
                return Ok(HELP_TEXT)
            logger.info("/trade used but query not trade-related, forwarding to AI")

        for keyword, (coin_id, name) in PRICE_ASSETS.items():
            if keyword in lower_msg:
                return self.price(coin_id, name)

        if any(k in lower_msg for k in TOP_COIN_KEYWORDS):
            return self.top_coins()

        if any(k in lower_msg for k in MEMECOIN_KEYWORDS):
            return self.memecoins(message, lower_msg)

        logger.info("Forwarding message to LLM")
        return self.llm.complete(message)

    def price(self, coin_id: str, name: str) -> Result:
        price = self.market_data.get_price(coin_id)
        if price is None:
            return Err(ErrorKind.UPSTREAM, SOURCE_PRICE, name)
        return Ok(f"The current {name} price is ${price:,} USD.")

    def top_coins(self) -> Result:
        coins = self.market_data.get_top_coins()
        if coins is None:
            return Err(ErrorKind.UPSTREAM, SOURCE_TOP_COINS)
        return Ok(f"Here are the top 5 cryptocurrencies by market cap:\n{format_top_coins(coins)}")

    def memecoins(self, message: str, lower_msg: str) -> Result:
        logger.info("Detected memecoin query, fetching data...")

        if "trending" in lower_msg or "popular" in lower_msg:
            coins = self.market_data.get_trending()
            if coins is None:
                return Err(ErrorKind.UPSTREAM, SOURCE_MEMECOINS)
            return Ok(f"Here are the currently trending memecoins:\n{format_trending(coins)}")

        if "search" in lower_msg or "find" in lower_msg:
            query = " ".join(SEARCH_NOISE.sub("", message).split())
            if query:
                coins = self.market_data.search(query)
                if coins is None:
                    return Err(ErrorKind.UPSTREAM, SOURCE_MEMECOINS)
                return Ok(f'Search results for "{query}":\n{format_search_results(coins)}')

        coins = self.market_data.get_memecoins()
        if coins is None:
            return Err(ErrorKind.UPSTREAM, SOURCE_MEMECOINS)
        return Ok(f"Here are the top memecoins by market cap:\n{format_memecoins(coins)}\n\n{MEMECOIN_NOTE}")
