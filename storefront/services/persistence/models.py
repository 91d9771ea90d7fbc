"""Submitted order read models."""
from datetime import datetime
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from storefront.services.ordering.models import FulfillmentMode


class OrderLinePreview(BaseModel):
    """Short line used when listing orders."""

    qty: int
    text: str


class ReorderSelection(BaseModel):
    """A stored menu pick."""

    product_id: str
    removed_ingredients: List[str] = []


class ReorderProduct(BaseModel):
    """A stored product line that can be added to the cart again."""

    type: Literal["product"] = "product"
    product_id: str
    name: Optional[str] = None
    image_path: Optional[str] = None
    unit_price_cents: int
    qty: int
    removed_ingredients: List[str] = []


class ReorderMenu(BaseModel):
    """A stored menu line that can be added to the cart again."""

    type: Literal["menu"] = "menu"
    menu_id: str
    name: Optional[str] = None
    image_path: Optional[str] = None
    unit_price_cents: int
    qty: int
    selections: Dict[str, List[ReorderSelection]] = {}


ReorderLine = Annotated[Union[ReorderProduct, ReorderMenu], Field(discriminator="type")]


class OrderSummary(BaseModel):
    """Order as listed in the user's history."""

    id: str
    user_id: str
    created_at: Optional[datetime] = None
    status: str
    total_cents: int
    mode: FulfillmentMode
    address_id: Optional[str] = None
    items_count: int
    previews: List[OrderLinePreview] = []
    reorder_lines: List[ReorderLine] = []
