"""Order history API endpoints."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from storefront.core.dependencies import Services, get_current_user_id, get_services
from storefront.services.ordering.models import Cart
from storefront.services.ordering.reorder import add_from_reorder_lines
from storefront.services.persistence.models import OrderSummary

router = APIRouter()
logger = logging.getLogger(__name__)


class ReorderResponse(BaseModel):
    """Cart after re-adding a past order."""

    added_lines: int
    cart: Cart


def _require_user(user_id: Optional[str]) -> str:
    if not user_id:
        raise HTTPException(status_code=401, detail="Sign in to see your orders")
    return user_id


@router.get("/api/orders", response_model=List[OrderSummary])
async def list_orders(
    limit: int = 20,
    user_id: Optional[str] = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    """Latest orders of the signed-in user."""
    user_id = _require_user(user_id)
    logger.info(f"[ORDERS] History requested - user: {user_id}, limit: {limit}")
    try:
        return await services.orders.list_user_orders(user_id, limit=limit)
    except Exception as e:
        logger.error(
            f"[ORDERS] Error fetching order history - user: {user_id}, "
            f"Error: {type(e).__name__}: {str(e)}",
            exc_info=True,
        )
        raise HTTPException(status_code=500, detail=f"Error fetching order history: {str(e)}")


@router.post("/api/orders/{order_id}/reorder", response_model=ReorderResponse)
async def reorder(
    order_id: str,
    user_id: Optional[str] = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    """Add the lines of a past order to the cart again."""
    user_id = _require_user(user_id)
    order = await services.orders.get_order(order_id)
    if order is None or order.user_id != user_id:
        raise HTTPException(status_code=404, detail=f"Order '{order_id}' not found")

    added = await add_from_reorder_lines(
        services.cart, order.reorder_lines, services.catalog
    )
    logger.info(f"[ORDERS] Reordered {order_id} - {added} lines added")
    return ReorderResponse(added_lines=added, cart=services.cart.state)
