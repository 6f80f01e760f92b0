import pytest
from unittest.mock import MagicMock
from tradebot.models.result import Ok

SIGNER = "0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266"
TX_HASH = "0x" + "ab" * 32

@pytest.fixture
def contract():
    """A TradingContract stand-in that records calls"""
    contract = MagicMock()
    contract.address = SIGNER
    contract.contract_address = "0x5fbdb2315678afecb367f032d93f642f64180aa3"
    contract.execute_trade.return_value = TX_HASH
    contract.deposit_eth.return_value = TX_HASH
    contract.deposit_token.return_value = TX_HASH
    contract.withdraw_eth.return_value = TX_HASH
    contract.register_user.return_value = TX_HASH
    contract.get_user_balance.return_value = "1.5"
    return contract

@pytest.fixture
def assistant():
    assistant = MagicMock()
    assistant.answer.return_value = Ok("general answer")
    return assistant

@pytest.fixture
def market_data():
    market_data = MagicMock()
    market_data.get_price.return_value = 67000.5
    market_data.get_top_coins.return_value = [
        {"name": "Bitcoin", "symbol": "btc", "current_price": 67000.5},
        {"name": "Ethereum", "symbol": "eth", "current_price": 3500},
    ]
    market_data.get_trending.return_value = [
        {"name": "Pepe", "symbol": "pepe", "price_btc": 0.00000012, "market_cap_rank": 30},
    ]
    market_data.get_memecoins.return_value = [
        {"name": "Dogecoin", "symbol": "doge", "current_price": 0.15,
         "price_change_percentage_24h": -2.345, "market_cap": 21000000000},
    ]
    market_data.search.return_value = [
        {"name": "Pepe", "symbol": "pepe", "market_cap_rank": 30},
    ]
    return market_data

@pytest.fixture
def llm():
    llm = MagicMock()
    llm.complete.return_value = Ok("llm answer")
    return llm
