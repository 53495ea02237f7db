"""Payment routes: signed payment, permissionless allowance payment, faucet."""

import logging
import secrets
import time
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from basedlink.deps import get_generation_service, get_payment_gateway, require_gateway
from basedlink.generation import GenerationService
from basedlink.payment_gateway import TIER_PRICES, PaymentGateway
from basedlink.schemas import ExecutePaymentRequest, FaucetRequest, PaymentRequest

logger = logging.getLogger("basedlink.routes.payment")

router = APIRouter(prefix="/api", tags=["payment"])


def new_content_id() -> str:
    return f"linkid-{int(time.time() * 1000)}-{secrets.token_hex(4)}"


@router.post("/payment")
async def process_payment(
    payload: PaymentRequest,
    gateway: Optional[PaymentGateway] = Depends(get_payment_gateway),
    service: GenerationService = Depends(get_generation_service),
):
    if payload.missing_fields():
        return JSONResponse(status_code=400, content={"success": False, "error": "Missing required fields"})
    if payload.tier not in TIER_PRICES:
        return JSONResponse(status_code=400, content={"success": False, "error": "Invalid tier"})

    tx_hash = await require_gateway(gateway).settle_payment(payload)

    logger.info("Payment settled for %s (tier %s), generating content", payload.content_id, payload.tier)
    result = await service.generate_tiered_content(payload.tier, payload.content_id)
    return {"success": True, "txHash": tx_hash, "result": result}


@router.post("/execute-payment")
async def execute_payment(
    payload: ExecutePaymentRequest,
    gateway: Optional[PaymentGateway] = Depends(get_payment_gateway),
    service: GenerationService = Depends(get_generation_service),
):
    if not payload.user_address or not payload.tier:
        return JSONResponse(status_code=400, content={"success": False, "error": "Missing userAddress or tier"})

    tx_hash = await require_gateway(gateway).execute_permissionless(payload.user_address, payload.tier)

    content_id = new_content_id()
    logger.info("Permissionless payment settled, generating %s", content_id)
    content = await service.generate_tiered_content(payload.tier, content_id)
    return {"success": True, "contentId": content_id, "txHash": tx_hash, "content": content}


@router.post("/faucet")
async def faucet(payload: FaucetRequest, gateway: Optional[PaymentGateway] = Depends(get_payment_gateway)):
    if not payload.user_address:
        return JSONResponse(status_code=400, content={"error": "Missing userAddress"})

    tx_hash = await require_gateway(gateway).send_faucet(payload.user_address)
    return {"success": True, "txHash": tx_hash}
