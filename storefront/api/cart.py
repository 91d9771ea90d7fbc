"""Cart API endpoints."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from storefront.api.schemas import (
    AddMenuRequest,
    AddProductRequest,
    to_customization,
    to_selections,
)
from storefront.core.dependencies import Services, get_services
from storefront.core.errors import CatalogItemNotFoundError
from storefront.services.ordering.models import Cart, FulfillmentMode
from storefront.services.ordering.validator import validate_menu_selections

router = APIRouter()
logger = logging.getLogger(__name__)


class SetModeRequest(BaseModel):
    """Switch the cart's fulfillment mode."""

    mode: FulfillmentMode


class UpdateQuantityRequest(BaseModel):
    """Set a line's quantity; zero or less removes the line."""

    qty: int = Field(...)


@router.get("/api/cart", response_model=Cart)
async def get_cart(services: Services = Depends(get_services)):
    """Get the current cart."""
    return services.cart.state


@router.put("/api/cart/mode", response_model=Cart)
async def set_mode(body: SetModeRequest, services: Services = Depends(get_services)):
    """Switch mode for future additions."""
    services.cart.set_mode(body.mode)
    return services.cart.state


@router.post("/api/cart/products", response_model=Cart)
async def add_product(body: AddProductRequest, services: Services = Depends(get_services)):
    """Add a product to the cart."""
    try:
        product = await services.catalog.require_product(body.product_id)
    except CatalogItemNotFoundError as e:
        logger.info(f"[CART] Add of unknown product {body.product_id}")
        raise HTTPException(status_code=404, detail=str(e))

    services.cart.add_product(
        product, to_customization(body.removed_ingredients), qty=body.qty
    )
    return services.cart.state


@router.post("/api/cart/menus", response_model=Cart)
async def add_menu(body: AddMenuRequest, services: Services = Depends(get_services)):
    """Add a configured menu to the cart after validating its picks."""
    try:
        menu = await services.catalog.require_menu(body.menu_id)
    except CatalogItemNotFoundError as e:
        logger.info(f"[CART] Add of unknown menu {body.menu_id}")
        raise HTTPException(status_code=404, detail=str(e))

    selections = to_selections(body.selections)
    violations = validate_menu_selections(menu, selections)
    if violations:
        logger.info(f"[CART] Menu {menu.id} rejected with {len(violations)} violations")
        raise HTTPException(
            status_code=422,
            detail={
                "message": "Menu selection is not valid",
                "violations": [v.model_dump() for v in violations],
            },
        )

    services.cart.add_menu(menu, selections, qty=body.qty)
    return services.cart.state


@router.patch("/api/cart/lines/{line_id}", response_model=Cart)
async def update_quantity(
    line_id: str,
    body: UpdateQuantityRequest,
    services: Services = Depends(get_services),
):
    """Set a line's quantity."""
    services.cart.update_quantity(line_id, body.qty)
    return services.cart.state


@router.delete("/api/cart/lines/{line_id}", response_model=Cart)
async def remove_line(line_id: str, services: Services = Depends(get_services)):
    """Remove a line. Unknown ids are ignored."""
    services.cart.remove(line_id)
    return services.cart.state


@router.delete("/api/cart", response_model=Cart)
async def clear_cart(services: Services = Depends(get_services)):
    """Empty the cart."""
    services.cart.clear()
    return services.cart.state
