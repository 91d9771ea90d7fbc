"""Order session API endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from storefront.core.dependencies import Services, get_services
from storefront.services.order_session.models import OrderContext
from storefront.services.ordering.models import FulfillmentMode

router = APIRouter()
logger = logging.getLogger(__name__)


class StartOrderRequest(BaseModel):
    """Start an order with a mode and, for delivery, an address."""

    mode: FulfillmentMode
    address_id: Optional[str] = None


class OrderSessionResponse(BaseModel):
    """Current order session."""

    mode: Optional[FulfillmentMode] = None
    address_id: Optional[str] = None
    browsing_only: bool = False
    is_active: bool = False

    @classmethod
    def from_context(cls, context: OrderContext) -> "OrderSessionResponse":
        return cls(
            mode=context.mode,
            address_id=context.address_id,
            browsing_only=context.browsing_only,
            is_active=context.is_active,
        )


@router.get("/api/order-session", response_model=OrderSessionResponse)
async def get_order_session(services: Services = Depends(get_services)):
    """Get the current order session."""
    return OrderSessionResponse.from_context(services.order_session.context)


@router.post("/api/order-session/start", response_model=OrderSessionResponse)
async def start_order(body: StartOrderRequest, services: Services = Depends(get_services)):
    """Start an order; the cart follows the chosen mode for new additions."""
    context = await services.order_session.start_order(body.mode, body.address_id)
    services.cart.set_mode(body.mode)
    return OrderSessionResponse.from_context(context)


@router.post("/api/order-session/browse", response_model=OrderSessionResponse)
async def browse_only(services: Services = Depends(get_services)):
    """Just looking: forget mode and address."""
    context = await services.order_session.set_browsing_only()
    return OrderSessionResponse.from_context(context)


@router.delete("/api/order-session", response_model=OrderSessionResponse)
async def clear_order_session(services: Services = Depends(get_services)):
    """Reset the session (logout, account deletion)."""
    context = await services.order_session.clear()
    return OrderSessionResponse.from_context(context)
