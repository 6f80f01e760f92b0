import logging
from typing import Optional
from tradebot.models.result import Result
from tradebot.services.classifier import classify
from tradebot.services.contract import TradingContract
from tradebot.services.dispatcher import ActionDispatcher
from tradebot.services.replies import render

logger = logging.getLogger(__name__)

class TradingAgent:
    def __init__(self, dispatcher: Optional[ActionDispatcher] = None):
        self.dispatcher = dispatcher or ActionDispatcher(contract=TradingContract.from_settings())

    def handle(self, message: str) -> Result:
        """Classify a chat message and run the matching action"""
        intent = classify(message)
        logger.info(f"Classified message as {intent.action.value}")
        return self.dispatcher.dispatch(intent)

    def chat(self, message: str) -> str:
        return render(self.handle(message))
