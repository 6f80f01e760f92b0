from enum import Enum
from typing import Union
from dataclasses import dataclass

class ErrorKind(str, Enum):
    INPUT = "input"  # malformed request or parameters, never sent downstream
    UPSTREAM = "upstream"  # market data, LLM or chain call failed
    CONFIG = "config"  # credentials or endpoints missing

# Error sources outside of the trade actions
SOURCE_PRICE = "price"
SOURCE_TOP_COINS = "top_coins"
SOURCE_MEMECOINS = "memecoins"
SOURCE_CHAT = "chat"
SOURCE_REQUEST = "request"

REASON_INVALID_RESPONSE = "invalid_response"

@dataclass(frozen=True)
class Ok:
    text: str

    @property
    def ok(self) -> bool:
        return True

@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    source: str
    detail: str = ""
    reason: str = ""

    @property
    def ok(self) -> bool:
        return False

Result = Union[Ok, Err]
