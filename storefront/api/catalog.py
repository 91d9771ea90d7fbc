"""Catalog API endpoints."""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from storefront.api.schemas import MenuSelectionsRequest, to_selections
from storefront.core.dependencies import Services, get_services
from storefront.core.errors import CatalogItemNotFoundError
from storefront.services.catalog.base import Category, MenuDefinition, Product
from storefront.services.ordering.models import FulfillmentMode
from storefront.services.ordering.pricing import PriceBreakdown, compute_menu_total
from storefront.services.ordering.validator import (
    MenuSelectionError,
    default_selections,
    validate_menu_selections,
)

router = APIRouter()
logger = logging.getLogger(__name__)


class CatalogResponse(BaseModel):
    """Active catalog."""

    categories: List[Category]
    products: List[Product]
    menus: List[MenuDefinition]


class MenuPreviewResponse(BaseModel):
    """Price and violations for a menu configuration."""

    menu_id: str
    mode: FulfillmentMode
    price: PriceBreakdown
    violations: List[MenuSelectionError]


@router.get("/api/catalog", response_model=CatalogResponse)
async def get_catalog(services: Services = Depends(get_services)):
    """Get the active categories, products and menus."""
    catalog = services.catalog
    return CatalogResponse(
        categories=await catalog.list_categories(),
        products=await catalog.list_products(),
        menus=await catalog.list_menus(),
    )


@router.post("/api/catalog/menus/{menu_id}/preview", response_model=MenuPreviewResponse)
async def preview_menu(
    menu_id: str,
    body: MenuSelectionsRequest,
    services: Services = Depends(get_services),
):
    """
    Price and validate a menu configuration at the cart's current mode.

    Without selections, the menu's default options are used.
    """
    try:
        menu = await services.catalog.require_menu(menu_id)
    except CatalogItemNotFoundError as e:
        logger.info(f"[CATALOG] Preview for unknown menu {menu_id}")
        raise HTTPException(status_code=404, detail=str(e))

    if body.selections is None:
        selections = default_selections(menu)
    else:
        selections = to_selections(body.selections)

    mode = services.cart.state.mode
    return MenuPreviewResponse(
        menu_id=menu.id,
        mode=mode,
        price=compute_menu_total(menu, selections, mode),
        violations=validate_menu_selections(menu, selections),
    )
