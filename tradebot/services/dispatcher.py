import logging
from typing import Optional
from web3 import Web3
from tradebot.models.result import Err, ErrorKind, Ok, Result
from tradebot.models.trade import CHAIN_ACTIONS, TradeAction, TradeIntent, TradeParams
from tradebot.services.assistant import Assistant
from tradebot.services.classifier import UNRESOLVED_TOKEN_ADDRESS
from tradebot.services.contract import TradingContract, to_units

logger = logging.getLogger(__name__)

class ActionDispatcher:
    """Runs exactly one external effect for a classified intent"""

    def __init__(self, contract: Optional[TradingContract] = None, assistant: Optional[Assistant] = None):
        self.contract = contract
        self.assistant = assistant or Assistant()
        self.handlers = {
            TradeAction.EXECUTE_TRADE: self.execute_trade,
            TradeAction.DEPOSIT_ETH: self.deposit_eth,
            TradeAction.DEPOSIT_TOKEN: self.deposit_token,
            TradeAction.WITHDRAW_ETH: self.withdraw_eth,
            TradeAction.REGISTER_USER: self.register_user,
            TradeAction.GET_BALANCE: self.get_balance,
        }

    def dispatch(self, intent: TradeIntent) -> Result:
        if intent.action not in CHAIN_ACTIONS:
            return self.assistant.answer(intent.message)

        if self.contract is None:
            logger.error(f"Cannot run {intent.action.value}: blockchain access not configured")
            return Err(ErrorKind.CONFIG, intent.action.value, "blockchain access is not configured")

        logger.info(f"Dispatching {intent.action.value} with {intent.params}")
        return self.handlers[intent.action](intent.params)

    def _invalid_amount(self, action: TradeAction, amount: str) -> Optional[Err]:
        try:
            to_units(amount)
        except ValueError as e:
            return Err(ErrorKind.INPUT, action.value, str(e))
        return None

    def execute_trade(self, params: dict) -> Result:
        source = TradeAction.EXECUTE_TRADE.value
        trade = TradeParams(**params)
        if trade.user_address is None:
            trade.user_address = self.contract.address

        if not Web3.is_address(trade.user_address):
            return Err(ErrorKind.INPUT, source, "Invalid user address")
        if (not Web3.is_address(trade.token_in) or not Web3.is_address(trade.token_out)
                or trade.token_out == UNRESOLVED_TOKEN_ADDRESS):
            return Err(ErrorKind.INPUT, source, "Invalid token address")
        error = self._invalid_amount(TradeAction.EXECUTE_TRADE, trade.amount_in)
        if error:
            return error

        try:
            tx_hash = self.contract.execute_trade(trade)
        except Exception as e:
            logger.error(f"Trade execution error: {e}")
            return Err(ErrorKind.UPSTREAM, source, str(e))

        return Ok(
            "✅ Trade executed successfully!\n"
            f"- Transaction Hash: {tx_hash}\n"
            f"- Token In: {trade.token_in}\n"
            f"- Token Out: {trade.token_out}\n"
            f"- Amount: {trade.amount_in}\n"
            "- Status: Confirmed\n\n"
            "I've executed your trade on the blockchain. The transaction has been confirmed."
        )

    def deposit_eth(self, params: dict) -> Result:
        amount = params["amount_in"]
        error = self._invalid_amount(TradeAction.DEPOSIT_ETH, amount)
        if error:
            return error
        try:
            tx_hash = self.contract.deposit_eth(amount)
        except Exception as e:
            logger.error(f"Deposit error: {e}")
            return Err(ErrorKind.UPSTREAM, TradeAction.DEPOSIT_ETH.value, str(e))
        return Ok(f"✅ ETH deposit successful! Amount: {amount} ETH, Tx: {tx_hash}")

    def deposit_token(self, params: dict) -> Result:
        amount = params["amount_in"]
        error = self._invalid_amount(TradeAction.DEPOSIT_TOKEN, amount)
        if error:
            return error
        try:
            tx_hash = self.contract.deposit_token(params["token_address"], amount)
        except Exception as e:
            # approval may already be mined, nothing is rolled back
            logger.error(f"Token deposit error: {e}")
            return Err(ErrorKind.UPSTREAM, TradeAction.DEPOSIT_TOKEN.value, str(e))
        return Ok(f"✅ Token deposit successful! Amount: {amount} {params['token_symbol']}, Tx: {tx_hash}")

    def withdraw_eth(self, params: dict) -> Result:
        amount = params["amount_in"]
        error = self._invalid_amount(TradeAction.WITHDRAW_ETH, amount)
        if error:
            return error
        try:
            tx_hash = self.contract.withdraw_eth(amount)
        except Exception as e:
            logger.error(f"Withdrawal error: {e}")
            return Err(ErrorKind.UPSTREAM, TradeAction.WITHDRAW_ETH.value, str(e))
        return Ok(f"✅ ETH withdrawal successful! Amount: {amount} ETH, Tx: {tx_hash}")

    def register_user(self, params: dict) -> Result:
        try:
            tx_hash = self.contract.register_user()
        except Exception as e:
            logger.error(f"Registration error: {e}")
            return Err(ErrorKind.UPSTREAM, TradeAction.REGISTER_USER.value, str(e))
        return Ok(f"✅ User registered successfully on the trading platform! Tx: {tx_hash}")

    def get_balance(self, params: dict) -> Result:
        try:
            balance = self.contract.get_user_balance(self.contract.address, params["token_address"])
        except Exception as e:
            logger.error(f"Balance check error: {e}")
            return Err(ErrorKind.UPSTREAM, TradeAction.GET_BALANCE.value, str(e))
        return Ok(f"💰 Your balance: {balance} {params.get('token_symbol') or 'tokens'}")
