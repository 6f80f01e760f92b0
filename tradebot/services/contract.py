import json
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional
from web3 import Web3
from eth_account import Account
from tradebot.config.settings import (
    RPC_URL,
    CONTRACT_ADDRESS,
    CONTRACT_ABI_PATH,
    PRIVATE_KEY,
    TRADE_GAS_LIMIT,
    TX_RECEIPT_TIMEOUT
)
from tradebot.models.trade import TradeParams

logger = logging.getLogger(__name__)

# Minimal ERC20 surface needed before a token deposit
ERC20_APPROVE_ABI = [{
    "type": "function",
    "name": "approve",
    "stateMutability": "nonpayable",
    "inputs": [{"name": "spender", "type": "address"}, {"name": "amount", "type": "uint256"}],
    "outputs": [{"name": "", "type": "bool"}],
}]

class ContractCallError(Exception):
    """A contract call was rejected by the provider or reverted"""

def to_units(amount: str, decimals: int = 18) -> int:
    """Convert a decimal string into a fixed-point integer amount"""
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {amount}")
    if not value.is_finite() or value < 0:
        raise ValueError(f"Invalid amount: {amount}")
    scaled = value * (Decimal(10) ** decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"Invalid amount: {amount} has more than {decimals} decimal places")
    return int(scaled)

def from_units(raw: int, decimals: int = 18) -> str:
    value = Decimal(raw) / (Decimal(10) ** decimals)
    text = format(value.normalize(), "f")
    return text if "." in text else f"{text}.0"

def load_abi(path: str = CONTRACT_ABI_PATH) -> List[Dict]:
    with open(path) as f:
        return json.load(f)

class TradingContract:
    """Wrapper around the AITradingPlatform contract.

    Every write builds, signs and sends one transaction with the configured
    key, then blocks until the receipt arrives. A receipt with status 0 is
    raised as ContractCallError. Nothing is retried.
    """

    def __init__(self, w3, contract_address: str, abi: List[Dict], private_key,
                 trade_gas_limit: int = TRADE_GAS_LIMIT, receipt_timeout: int = TX_RECEIPT_TIMEOUT):
        self.w3 = w3
        self.account = Account.from_key(private_key)
        self.contract_address = Web3.to_checksum_address(contract_address)
        self.contract = w3.eth.contract(address=self.contract_address, abi=abi)
        self.trade_gas_limit = trade_gas_limit
        self.receipt_timeout = receipt_timeout

    @classmethod
    def from_settings(cls) -> Optional["TradingContract"]:
        """Build the client from the environment, or None if chain access is not configured"""
        if not (RPC_URL and CONTRACT_ADDRESS and PRIVATE_KEY):
            logger.warning("Blockchain access not configured (RPC_URL, CONTRACT_ADDRESS, PRIVATE_KEY)")
            return None
        try:
            w3 = Web3(Web3.HTTPProvider(RPC_URL))
            return cls(w3, CONTRACT_ADDRESS, load_abi(), PRIVATE_KEY)
        except Exception as e:
            logger.error(f"Could not initialize blockchain components: {e}")
            return None

    @property
    def address(self) -> str:
        return self.account.address

    def _transact(self, fn, value: int = 0, gas: Optional[int] = None) -> str:
        tx_params = {"from": self.address}
        if value:
            tx_params["value"] = value
        if gas:
            tx_params["gas"] = gas

        try:
            tx_params["nonce"] = self.w3.eth.get_transaction_count(self.address)
            tx = fn.build_transaction(tx_params)
            signed = self.w3.eth.account.sign_transaction(tx, self.account.key)
            tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
            tx_hex = Web3.to_hex(tx_hash)
            logger.info(f"Transaction sent: {tx_hex}")
            receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        except Exception as e:
            raise ContractCallError(str(e)) from e

        if receipt["status"] != 1:
            raise ContractCallError(f"Transaction {tx_hex} reverted")
        logger.info(f"Transaction confirmed: {tx_hex}")
        return tx_hex

    def _call(self, fn) -> Any:
        try:
            return fn.call()
        except Exception as e:
            raise ContractCallError(str(e)) from e

    # Trading
    def execute_trade(self, params: TradeParams) -> str:
        logger.info(f"Executing trade: {params}")
        fn = self.contract.functions.executeTrade(
            Web3.to_checksum_address(params.user_address),
            Web3.to_checksum_address(params.token_in),
            Web3.to_checksum_address(params.token_out),
            to_units(params.amount_in),
            to_units(params.expected_amount_out),
            params.agent_signature,
        )
        return self._transact(fn, gas=self.trade_gas_limit)

    def get_trade(self, trade_id: int):
        return self._call(self.contract.functions.getTrade(trade_id))

    # Deposits and withdrawals
    def deposit_eth(self, amount: str) -> str:
        return self._transact(self.contract.functions.depositETH(), value=to_units(amount))

    def deposit_token(self, token_address: str, amount: str) -> str:
        """Approve the platform for ``amount`` then deposit it"""
        amount_units = to_units(amount)
        token = self.w3.eth.contract(address=Web3.to_checksum_address(token_address), abi=ERC20_APPROVE_ABI)
        self._transact(token.functions.approve(self.contract_address, amount_units))
        return self._transact(self.contract.functions.depositToken(
            Web3.to_checksum_address(token_address), amount_units))

    def withdraw_eth(self, amount: str) -> str:
        return self._transact(self.contract.functions.withdrawETH(to_units(amount)))

    def withdraw_token(self, token_address: str, amount: str) -> str:
        return self._transact(self.contract.functions.withdrawToken(
            Web3.to_checksum_address(token_address), to_units(amount)))

    def emergency_withdraw(self, token_address: str, amount: str) -> str:
        return self._transact(self.contract.functions.emergencyWithdraw(
            Web3.to_checksum_address(token_address), to_units(amount)))

    # Users and agents
    def register_user(self) -> str:
        return self._transact(self.contract.functions.registerUser())

    def get_user_info(self, user_address: str):
        return self._call(self.contract.functions.getUserInfo(Web3.to_checksum_address(user_address)))

    def get_user_balance(self, user_address: str, token_address: str) -> str:
        raw = self._call(self.contract.functions.getUserBalance(
            Web3.to_checksum_address(user_address), Web3.to_checksum_address(token_address)))
        return from_units(raw)

    def register_ai_agent(self, agent_name: str) -> str:
        return self._transact(self.contract.functions.registerAIAgent(agent_name))

    def get_ai_agent_info(self, agent_address: str):
        return self._call(self.contract.functions.getAIAgentInfo(Web3.to_checksum_address(agent_address)))

    # Tokens and prices
    def get_supported_tokens(self) -> List[str]:
        return list(self._call(self.contract.functions.getSupportedTokens()))

    def add_supported_token(self, token_address: str) -> str:
        return self._transact(self.contract.functions.addSupportedToken(Web3.to_checksum_address(token_address)))

    def remove_supported_token(self, token_address: str) -> str:
        return self._transact(self.contract.functions.removeSupportedToken(Web3.to_checksum_address(token_address)))

    def get_latest_price(self, token_address: str) -> str:
        return str(self._call(self.contract.functions.getLatestPrice(Web3.to_checksum_address(token_address))))

    def update_price(self, token_address: str, price: str) -> str:
        return self._transact(self.contract.functions.updatePrice(
            Web3.to_checksum_address(token_address), to_units(price)))

    def update_price_batch(self, token_addresses: List[str], prices: List[str]) -> str:
        if len(token_addresses) != len(prices):
            raise ValueError("tokens and prices must have the same length")
        return self._transact(self.contract.functions.updatePriceBatch(
            [Web3.to_checksum_address(t) for t in token_addresses],
            [to_units(p) for p in prices]))

    def token_amount_to_usd(self, token_address: str, amount: str, decimals: int) -> str:
        return str(self._call(self.contract.functions.tokenAmountToUsd(
            Web3.to_checksum_address(token_address), to_units(amount, decimals), decimals)))

    # Platform administration
    def update_platform_fee(self, new_fee: str) -> str:
        return self._transact(self.contract.functions.updatePlatformFee(to_units(new_fee)))

    def get_platform_fee(self) -> str:
        return str(self._call(self.contract.functions.platformFee()))

    def pause(self) -> str:
        return self._transact(self.contract.functions.pause())

    def unpause(self) -> str:
        return self._transact(self.contract.functions.unpause())

    def is_paused(self) -> bool:
        return bool(self._call(self.contract.functions.paused()))

    def transfer_ownership(self, new_owner: str) -> str:
        return self._transact(self.contract.functions.transferOwnership(Web3.to_checksum_address(new_owner)))

    def renounce_ownership(self) -> str:
        return self._transact(self.contract.functions.renounceOwnership())
