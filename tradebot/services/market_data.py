import requests
import logging
from typing import Any, Dict, List, Optional
from tradebot.config.settings import COINGECKO_API_KEY, COINGECKO_API_URL

logger = logging.getLogger(__name__)

def _fmt(value, fmt: str = ",") -> str:
    return format(value, fmt) if isinstance(value, (int, float)) else "N/A"

class MarketDataService:
    """Public CoinGecko market data. Every method returns None when the fetch fails."""

    def __init__(self, api_key: Optional[str] = COINGECKO_API_KEY, base_url: str = COINGECKO_API_URL,
                 session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["X-CG-Demo-API-Key"] = self.api_key
        return headers

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        try:
            response = self.session.get(f"{self.base_url}{path}", params=params, headers=self._headers())
            if response.status_code != 200:
                logger.error(f"CoinGecko API error {response.status_code} for {path}")
                return None
            return response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Error fetching {path}: {e}")
            return None

    def get_price(self, coin_id: str, vs_currency: str = "usd") -> Optional[float]:
        """Get the current price of a coin by CoinGecko id"""
        data = self._get("/simple/price", {"ids": coin_id, "vs_currencies": vs_currency})
        if data is None:
            return None
        price = data.get(coin_id, {}).get(vs_currency)
        return float(price) if price is not None else None

    def get_top_coins(self, limit: int = 5) -> Optional[List[Dict]]:
        return self._get("/coins/markets", {
            "vs_currency": "usd",
            "order": "market_cap_desc",
            "per_page": limit,
            "page": 1,
        })

    def get_trending(self, limit: int = 5) -> Optional[List[Dict]]:
        data = self._get("/search/trending")
        if data is None:
            return None
        return [coin.get("item", {}) for coin in data.get("coins", [])[:limit]]

    def get_memecoins(self, limit: int = 10) -> Optional[List[Dict]]:
        return self._get("/coins/markets", {
            "vs_currency": "usd",
            "category": "memecoin",
            "order": "market_cap_desc",
            "per_page": limit,
            "page": 1,
            "sparkline": "false",
            "price_change_percentage": "24h",
        })

    def search(self, query: str, limit: int = 5) -> Optional[List[Dict]]:
        data = self._get("/search", {"query": query})
        if data is None:
            return None
        return data.get("coins", [])[:limit]

def format_top_coins(coins: List[Dict]) -> str:
    return "\n".join(
        f"{i}. {coin.get('name')} ({str(coin.get('symbol', '')).upper()}): ${_fmt(coin.get('current_price'))}"
        for i, coin in enumerate(coins, 1)
    )

def format_trending(coins: List[Dict]) -> str:
    return "\n".join(
        f"{i}. {coin.get('name')} ({str(coin.get('symbol', '')).upper()}): "
        f"{_fmt(coin.get('price_btc'), '.8f')} BTC - Market Cap Rank: {coin.get('market_cap_rank') or 'N/A'}"
        for i, coin in enumerate(coins, 1)
    )

def format_memecoins(coins: List[Dict]) -> str:
    return "\n".join(
        f"{i}. {coin.get('name')} ({str(coin.get('symbol', '')).upper()}): ${_fmt(coin.get('current_price'))}"
        f" - 24h Change: {_fmt(coin.get('price_change_percentage_24h'), '.2f')}%"
        f" - Market Cap: ${_fmt(coin.get('market_cap'))}"
        for i, coin in enumerate(coins, 1)
    )

def format_search_results(coins: List[Dict]) -> str:
    if not coins:
        return "No memecoins found matching your search."
    return "\n".join(
        f"{i}. {coin.get('name')} ({str(coin.get('symbol', '')).upper()}) - "
        f"Market Cap Rank: {coin.get('market_cap_rank') or 'N/A'}"
        for i, coin in enumerate(coins, 1)
    )
