"""Checkout API endpoint."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from storefront.core.dependencies import Services, get_current_user_id, get_services
from storefront.services.checkout.orchestrator import CheckoutEvent

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/api/checkout", response_model=CheckoutEvent)
async def checkout(
    user_id: Optional[str] = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    """
    Place the order held in the cart.

    Returns the outcome event; a failed attempt is still a 200 with
    ``kind == "error"``. 409 when another checkout is already running.
    """
    logger.info(f"[CHECKOUT API] Checkout requested - user: {user_id}")
    event = await services.checkout.checkout()
    if event is None:
        raise HTTPException(status_code=409, detail="A checkout is already in progress")
    return event
