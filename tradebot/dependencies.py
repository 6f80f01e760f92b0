from functools import lru_cache
from typing import Optional
from tradebot.config.settings import ADMIN_API_TOKEN
from tradebot.services.agent import TradingAgent
from tradebot.services.contract import TradingContract
from tradebot.services.dispatcher import ActionDispatcher

@lru_cache(maxsize=1)
def get_contract() -> Optional[TradingContract]:
    return TradingContract.from_settings()

@lru_cache(maxsize=1)
def get_agent() -> TradingAgent:
    return TradingAgent(ActionDispatcher(contract=get_contract()))

def get_admin_token() -> Optional[str]:
    return ADMIN_API_TOKEN
