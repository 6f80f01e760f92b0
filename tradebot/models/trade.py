from enum import Enum
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

class TradeAction(str, Enum):
    EXECUTE_TRADE = "executeTrade"
    DEPOSIT_ETH = "depositETH"
    DEPOSIT_TOKEN = "depositToken"
    WITHDRAW_ETH = "withdrawETH"
    REGISTER_USER = "registerUser"
    GET_BALANCE = "getBalance"
    INFO = "info"
    GENERAL = "general"

# Actions that touch the contract
CHAIN_ACTIONS = frozenset({
    TradeAction.EXECUTE_TRADE,
    TradeAction.DEPOSIT_ETH,
    TradeAction.DEPOSIT_TOKEN,
    TradeAction.WITHDRAW_ETH,
    TradeAction.REGISTER_USER,
    TradeAction.GET_BALANCE,
})

@dataclass(frozen=True)
class TradeIntent:
    action: TradeAction
    params: Dict[str, Any] = field(default_factory=dict)
    message: str = ""  # original text, forwarded on the general-query path

    @property
    def is_trade(self) -> bool:
        return self.action in CHAIN_ACTIONS

@dataclass
class TradeParams:
    user_address: Optional[str]
    token_in: str
    token_out: str
    amount_in: str  # decimal, ether units
    expected_amount_out: str  # decimal, ether units
    agent_signature: str
