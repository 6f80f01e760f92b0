import pytest
import requests
from unittest.mock import MagicMock
from tradebot.services.market_data import (
    MarketDataService,
    format_memecoins,
    format_search_results,
    format_top_coins,
    format_trending
)

def make_response(status_code, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    return response

@pytest.fixture
def session():
    return MagicMock()

@pytest.fixture
def service(session):
    return MarketDataService(api_key=None, base_url="https://api.example.com/v3/", session=session)

def test_get_price(service, session):
    session.get.return_value = make_response(200, {"bitcoin": {"usd": 67000.5}})

    assert service.get_price("bitcoin") == 67000.5
    url = session.get.call_args[0][0]
    assert url == "https://api.example.com/v3/simple/price"
    assert session.get.call_args.kwargs["params"] == {"ids": "bitcoin", "vs_currencies": "usd"}

def test_api_key_header(session):
    session.get.return_value = make_response(200, [])
    MarketDataService(api_key="demo-key", session=session).get_top_coins()

    assert session.get.call_args.kwargs["headers"]["X-CG-Demo-API-Key"] == "demo-key"

def test_non_2xx_returns_none(service, session):
    session.get.return_value = make_response(500)

    assert service.get_price("bitcoin") is None
    assert service.get_top_coins() is None
    assert service.get_trending() is None
    assert service.search("pepe") is None

def test_transport_failure_returns_none(service, session):
    session.get.side_effect = requests.ConnectionError("connection refused")
    assert service.get_memecoins() is None

def test_bad_json_returns_none(service, session):
    response = make_response(200)
    response.json.side_effect = ValueError("not json")
    session.get.return_value = response
    assert service.get_top_coins() is None

def test_trending_unwraps_items(service, session):
    session.get.return_value = make_response(200, {"coins": [
        {"item": {"name": f"Coin {i}", "symbol": f"c{i}"}} for i in range(7)
    ]})

    coins = service.get_trending()
    assert len(coins) == 5
    assert coins[0] == {"name": "Coin 0", "symbol": "c0"}

def test_search_limits_results(service, session):
    session.get.return_value = make_response(200, {"coins": [{"name": str(i)} for i in range(8)]})

    assert len(service.search("dog")) == 5
    assert session.get.call_args.kwargs["params"] == {"query": "dog"}

def test_memecoin_request(service, session):
    session.get.return_value = make_response(200, [])
    service.get_memecoins()

    params = session.get.call_args.kwargs["params"]
    assert params["category"] == "memecoin"
    assert params["per_page"] == 10

def test_format_top_coins():
    text = format_top_coins([
        {"name": "Bitcoin", "symbol": "btc", "current_price": 67000.5},
        {"name": "Mystery", "symbol": "mys", "current_price": None},
    ])
    assert text == "1. Bitcoin (BTC): $67,000.5\n2. Mystery (MYS): $N/A"

def test_format_trending():
    text = format_trending([{"name": "Pepe", "symbol": "pepe", "price_btc": 0.00000012, "market_cap_rank": None}])
    assert text == "1. Pepe (PEPE): 0.00000012 BTC - Market Cap Rank: N/A"

def test_format_memecoins():
    text = format_memecoins([{"name": "Dogecoin", "symbol": "doge", "current_price": 0.15,
                              "price_change_percentage_24h": -2.345, "market_cap": 21000000000}])
    assert text == "1. Dogecoin (DOGE): $0.15 - 24h Change: -2.35% - Market Cap: $21,000,000,000"

def test_format_search_results():
    assert format_search_results([]) == "No memecoins found matching your search."
    assert format_search_results([{"name": "Pepe", "symbol": "pepe", "market_cap_rank": 30}]) == \
        "1. Pepe (PEPE) - Market Cap Rank: 30"
