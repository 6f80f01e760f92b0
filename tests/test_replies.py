import pytest
from tradebot.models.result import (
    Err,
    ErrorKind,
    Ok,
    REASON_INVALID_RESPONSE,
    SOURCE_CHAT,
    SOURCE_MEMECOINS,
    SOURCE_PRICE,
    SOURCE_REQUEST
)
from tradebot.models.trade import TradeAction
from tradebot.services.replies import CHAIN_NOT_CONFIGURED, INVALID_REQUEST, render, status_for

def test_ok_renders_text():
    assert render(Ok("done")) == "done"
    assert status_for(Ok("done")) == 200

def test_price_failure():
    result = Err(ErrorKind.UPSTREAM, SOURCE_PRICE, "Bitcoin")
    assert render(result) == "Sorry, I couldn't fetch the current Bitcoin price. Please try again later."
    assert status_for(result) == 200

def test_memecoin_failure():
    assert render(Err(ErrorKind.UPSTREAM, SOURCE_MEMECOINS)) == \
        "Sorry, I couldn't fetch memecoin data. Please try again later."

@pytest.mark.parametrize("result, fragment", [
    (Err(ErrorKind.CONFIG, SOURCE_CHAT, "TOGETHER_API_KEY is not set"), "not properly configured"),
    (Err(ErrorKind.UPSTREAM, SOURCE_CHAT, "timeout"), "temporarily unavailable"),
    (Err(ErrorKind.UPSTREAM, SOURCE_CHAT, "missing", REASON_INVALID_RESPONSE), "invalid response"),
])
def test_chat_failures_are_server_errors(result, fragment):
    assert fragment in render(result)
    assert status_for(result) == 500

def test_request_errors():
    result = Err(ErrorKind.INPUT, SOURCE_REQUEST)
    assert render(result) == INVALID_REQUEST
    assert status_for(result) == 400

def test_trade_input_error():
    result = Err(ErrorKind.INPUT, TradeAction.EXECUTE_TRADE.value, "Invalid token address")
    assert render(result).startswith("❌ Invalid token address. Please specify a valid token")
    assert status_for(result) == 200

def test_trade_failure():
    result = Err(ErrorKind.UPSTREAM, TradeAction.EXECUTE_TRADE.value, "execution reverted")
    assert render(result) == "❌ Trade execution failed: execution reverted\n\nPlease check your balances and try again."

def test_defaults():
    assert render(Err(ErrorKind.INPUT, TradeAction.DEPOSIT_ETH.value, "Invalid amount: x")) == "❌ Invalid amount: x"
    assert render(Err(ErrorKind.CONFIG, TradeAction.GET_BALANCE.value)) == CHAIN_NOT_CONFIGURED
    assert render(Err(ErrorKind.UPSTREAM, "something", "boom")) == "Sorry, an unexpected error occurred: boom"
