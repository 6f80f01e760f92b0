"""Turns dispatch results into user-facing text and HTTP status codes."""
from tradebot.models.result import (
    Err,
    ErrorKind,
    Result,
    REASON_INVALID_RESPONSE,
    SOURCE_CHAT,
    SOURCE_MEMECOINS,
    SOURCE_PRICE,
    SOURCE_REQUEST,
    SOURCE_TOP_COINS
)
from tradebot.models.trade import TradeAction

INVALID_REQUEST = "Invalid request format. Please send valid JSON."
EMPTY_MESSAGE = "Please enter a valid message."
UNEXPECTED_ERROR = "Sorry, an unexpected error occurred: {detail}"

CHAIN_NOT_CONFIGURED = "❌ Blockchain access is not configured on this server."

REASON_REPLIES = {
    (SOURCE_CHAT, REASON_INVALID_RESPONSE): "Sorry, I received an invalid response from the AI service.",
}

REPLIES = {
    (SOURCE_CHAT, ErrorKind.CONFIG): "Sorry, the AI service is not properly configured. Please check the server configuration.",
    (SOURCE_CHAT, ErrorKind.UPSTREAM): "Sorry, the AI service is temporarily unavailable. Please try again later.",
    (SOURCE_PRICE, ErrorKind.UPSTREAM): "Sorry, I couldn't fetch the current {detail} price. Please try again later.",
    (SOURCE_TOP_COINS, ErrorKind.UPSTREAM): "Sorry, I couldn't fetch the top cryptocurrencies. Please try again later.",
    (SOURCE_MEMECOINS, ErrorKind.UPSTREAM): "Sorry, I couldn't fetch memecoin data. Please try again later.",
    (SOURCE_REQUEST, ErrorKind.INPUT): INVALID_REQUEST,
    (TradeAction.EXECUTE_TRADE.value, ErrorKind.INPUT):
        "❌ {detail}. Please specify a valid token for the trade. For example: '/trade buy 0.1 ETH for USDC'",
    (TradeAction.EXECUTE_TRADE.value, ErrorKind.UPSTREAM):
        "❌ Trade execution failed: {detail}\n\nPlease check your balances and try again.",
    (TradeAction.DEPOSIT_ETH.value, ErrorKind.UPSTREAM): "❌ Deposit failed: {detail}",
    (TradeAction.DEPOSIT_TOKEN.value, ErrorKind.UPSTREAM): "❌ Token deposit failed: {detail}",
    (TradeAction.WITHDRAW_ETH.value, ErrorKind.UPSTREAM): "❌ Withdrawal failed: {detail}",
    (TradeAction.REGISTER_USER.value, ErrorKind.UPSTREAM): "❌ Registration failed: {detail}",
    (TradeAction.GET_BALANCE.value, ErrorKind.UPSTREAM): "❌ Balance check failed: {detail}",
}

DEFAULT_REPLIES = {
    ErrorKind.INPUT: "❌ {detail}",
    ErrorKind.UPSTREAM: UNEXPECTED_ERROR,
    ErrorKind.CONFIG: CHAIN_NOT_CONFIGURED,
}

def render(result: Result) -> str:
    if not isinstance(result, Err):
        return result.text

    template = (
        REASON_REPLIES.get((result.source, result.reason))
        or REPLIES.get((result.source, result.kind))
        or DEFAULT_REPLIES[result.kind]
    )
    return template.format(detail=result.detail)

def status_for(result: Result) -> int:
    if not isinstance(result, Err):
        return 200
    if result.source == SOURCE_REQUEST:
        return 400
    if result.source == SOURCE_CHAT:
        return 500
    return 200
