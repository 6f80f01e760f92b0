import hmac
import logging
from typing import Dict, Optional
from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel
from web3 import Web3
from tradebot.dependencies import get_admin_token, get_contract
from tradebot.services.contract import ContractCallError, TradingContract

logger = logging.getLogger(__name__)

class PriceUpdate(BaseModel):
    prices: Dict[str, str]  # token address -> price in USD, 18 decimals on chain

class TokenRequest(BaseModel):
    token: str

class FeeUpdate(BaseModel):
    fee: str

class OwnershipTransfer(BaseModel):
    new_owner: str

async def require_admin(x_admin_token: Optional[str] = Header(None),
                        admin_token: Optional[str] = Depends(get_admin_token)):
    """Validate the admin token header"""
    if not admin_token:
        logger.error("ADMIN_API_TOKEN not configured")
        raise HTTPException(status_code=500, detail="Admin API is not configured")
    if not x_admin_token or not hmac.compare_digest(x_admin_token, admin_token):
        raise HTTPException(status_code=401, detail="Invalid admin token")

async def require_contract(contract: Optional[TradingContract] = Depends(get_contract)) -> TradingContract:
    if contract is None:
        raise HTTPException(status_code=500, detail="Blockchain access is not configured")
    return contract

def _check_address(address: str):
    if not Web3.is_address(address):
        raise HTTPException(status_code=400, detail=f"Invalid address: {address}")

async def _run(fn, *args):
    try:
        return await run_in_threadpool(fn, *args)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ContractCallError as e:
        logger.error(f"Admin contract call failed: {e}")
        raise HTTPException(status_code=502, detail=f"Contract call failed: {e}")

router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])

@router.get("/status")
async def status(contract: TradingContract = Depends(require_contract)):
    return {
        "contract": contract.contract_address,
        "signer": contract.address,
        "paused": await _run(contract.is_paused),
        "platform_fee": await _run(contract.get_platform_fee),
        "supported_tokens": await _run(contract.get_supported_tokens),
    }

@router.post("/pause")
async def pause(contract: TradingContract = Depends(require_contract)):
    return {"tx_hash": await _run(contract.pause), "message": "Contract paused"}

@router.post("/unpause")
async def unpause(contract: TradingContract = Depends(require_contract)):
    return {"tx_hash": await _run(contract.unpause), "message": "Contract unpaused"}

@router.post("/prices")
async def update_prices(req: PriceUpdate, contract: TradingContract = Depends(require_contract)):
    if not req.prices:
        raise HTTPException(status_code=400, detail="No prices given")
    for token in req.prices:
        _check_address(token)

    if len(req.prices) == 1:
        token, price = next(iter(req.prices.items()))
        tx_hash = await _run(contract.update_price, token, price)
    else:
        tx_hash = await _run(contract.update_price_batch, list(req.prices), list(req.prices.values()))
    return {"tx_hash": tx_hash, "message": f"Updated {len(req.prices)} price(s)"}

@router.post("/tokens")
async def add_token(req: TokenRequest, contract: TradingContract = Depends(require_contract)):
    _check_address(req.token)
    tx_hash = await _run(contract.add_supported_token, req.token)
    return {"tx_hash": tx_hash, "message": f"Token {req.token} added to supported tokens"}

@router.delete("/tokens/{token}")
async def remove_token(token: str, contract: TradingContract = Depends(require_contract)):
    _check_address(token)
    tx_hash = await _run(contract.remove_supported_token, token)
    return {"tx_hash": tx_hash, "message": f"Token {token} removed from supported tokens"}

@router.post("/fee")
async def update_fee(req: FeeUpdate, contract: TradingContract = Depends(require_contract)):
    tx_hash = await _run(contract.update_platform_fee, req.fee)
    return {"tx_hash": tx_hash, "message": "Platform fee updated"}

@router.post("/ownership")
async def transfer_ownership(req: OwnershipTransfer, contract: TradingContract = Depends(require_contract)):
    _check_address(req.new_owner)
    tx_hash = await _run(contract.transfer_ownership, req.new_owner)
    return {"tx_hash": tx_hash, "message": f"Ownership transferred to {req.new_owner}"}
