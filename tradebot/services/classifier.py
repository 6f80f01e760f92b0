"""Keyword classifier for chat messages.

A message is only ever a trade command when it starts with ``/trade``. The
remainder is checked against the keyword sets and then run through an ordered
decision table; the first matching rule decides the action.
"""
import re
from decimal import Decimal, InvalidOperation
from dataclasses import asdict
from typing import Callable, Dict, List, Optional, Tuple
from tradebot.models.trade import TradeAction, TradeIntent, TradeParams

TRADE_PREFIX = "/trade"

ACTION_KEYWORDS = ("buy", "sell", "swap", "exchange", "execute", "deposit", "withdraw", "register")
INFO_KEYWORDS = ("balance", "portfolio", "holdings", "account")

QUESTION_ABOUT_TRADE = re.compile(r"\b(what|how|explain|define)\b")
TRADE_WORDS = re.compile(r"trade|trading|buy|sell")
QUESTION = re.compile(r"\b(what|how|explain|define|tell me about)\b")

NATIVE_TOKEN_ADDRESS = "0x0000000000000000000000000000000000000000"
UNRESOLVED_TOKEN_ADDRESS = "0xYourTokenAddressHere"

# Checked in this order
KNOWN_TOKENS: Dict[str, str] = {
    "usdc": "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
    "usdt": "0xdAC17F958D2ee523a2206206994597C13D831ec7",
    "dai": "0x6B175474E89094C44Da98b954EedeAC495271d0F",
}

ETH_AMOUNT = re.compile(r"(\d+\.?\d*)\s*(eth|ether)", re.IGNORECASE)
TOKEN_AMOUNT = re.compile(r"(\d+\.?\d*)\s*(usdc|usdt|dai)\b", re.IGNORECASE)
DEFAULT_AMOUNT = "0.1"
MIN_OUT_RATIO = Decimal("0.98")

def resolve_token(message: str) -> Tuple[Optional[str], str]:
    """Return (symbol, address) of the first known token mentioned"""
    lower_msg = message.lower()
    for symbol, address in KNOWN_TOKENS.items():
        if re.search(rf"\b{symbol}\b", lower_msg):
            return symbol, address
    return None, UNRESOLVED_TOKEN_ADDRESS

def extract_amount(message: str, pattern: re.Pattern = ETH_AMOUNT) -> str:
    match = pattern.search(message)
    return match.group(1) if match else DEFAULT_AMOUNT

def expected_output(amount_in: str) -> str:
    try:
        return format((Decimal(amount_in) * MIN_OUT_RATIO).normalize(), "f")
    except InvalidOperation:
        return amount_in

def is_trade_query(query: str) -> bool:
    """Whether the text after the prefix asks for a trade operation"""
    if not query:
        return True

    words = query.split()
    has_action = any(k in words or k in query for k in ACTION_KEYWORDS)
    has_info = any(k in words or k in query for k in INFO_KEYWORDS)

    # "what is a trade?" must not place an order
    question_about_trade = bool(QUESTION_ABOUT_TRADE.search(query) and TRADE_WORDS.search(query))

    return (has_action or has_info) and not question_about_trade

def _balance(message: str) -> Dict:
    return {"token_address": NATIVE_TOKEN_ADDRESS, "token_symbol": "ETH"}

def _deposit(message: str) -> Dict:
    return {"amount_in": extract_amount(message)}

def _token_deposit(message: str) -> Dict:
    amount, symbol = TOKEN_AMOUNT.search(message).groups()
    return {
        "token_address": KNOWN_TOKENS[symbol.lower()],
        "token_symbol": symbol.upper(),
        "amount_in": amount,
    }

def _no_params(message: str) -> Dict:
    return {}

def _trade(message: str) -> Dict:
    _, token_out = resolve_token(message)
    amount_in = extract_amount(message)
    params = TradeParams(
        user_address=None,  # the dispatcher signs for its own account
        token_in=NATIVE_TOKEN_ADDRESS,
        token_out=token_out,
        amount_in=amount_in,
        expected_amount_out=expected_output(amount_in),
        agent_signature=f"AI Trade: {message}",
    )
    return asdict(params)

def _mentions(*words: str) -> Callable[[str], bool]:
    return lambda lower_msg: any(w in lower_msg for w in words)

def _is_token_deposit(lower_msg: str) -> bool:
    # the token has to be the deposit unit, an ETH amount wins
    return (
        "deposit" in lower_msg
        and TOKEN_AMOUNT.search(lower_msg) is not None
        and ETH_AMOUNT.search(lower_msg) is None
    )

def _is_trade(lower_msg: str) -> bool:
    return _mentions("trade", "buy", "sell")(lower_msg) and _mentions("eth", "usdc", "token")(lower_msg)

# (predicate, action, params builder), evaluated top-down
RULES: List[Tuple[Callable[[str], bool], TradeAction, Callable[[str], Dict]]] = [
    (_mentions("balance", "holdings"), TradeAction.GET_BALANCE, _balance),
    (_is_token_deposit, TradeAction.DEPOSIT_TOKEN, _token_deposit),
    (_mentions("deposit"), TradeAction.DEPOSIT_ETH, _deposit),
    (_mentions("withdraw"), TradeAction.WITHDRAW_ETH, _deposit),
    (_mentions("register"), TradeAction.REGISTER_USER, _no_params),
    (_is_trade, TradeAction.EXECUTE_TRADE, _trade),
]

def parse_trade_intent(message: str) -> TradeIntent:
    lower_msg = message.lower()
    for predicate, action, build in RULES:
        if predicate(lower_msg):
            return TradeIntent(action=action, params=build(message), message=message)
    return TradeIntent(action=TradeAction.INFO, message=message)

def classify(message: str) -> TradeIntent:
    """Classify a chat message into a TradeIntent"""
    text = message.strip()
    lower_msg = text.lower()

    if not lower_msg.startswith(TRADE_PREFIX):
        return TradeIntent(action=TradeAction.GENERAL, message=message)

    query = lower_msg[len(TRADE_PREFIX):].strip()
    if not query:
        return TradeIntent(action=TradeAction.INFO, message=message)

    if not is_trade_query(query) or QUESTION.search(query):
        return TradeIntent(action=TradeAction.GENERAL, message=message)

    return parse_trade_intent(text)
