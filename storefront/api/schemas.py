"""Request models shared by the API routers."""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from storefront.services.ordering.models import Customization, MenuPick, MenuSelections


class MenuPickRequest(BaseModel):
    """One pick inside a menu group."""

    product_id: str
    removed_ingredients: List[str] = []

    def to_pick(self) -> MenuPick:
        return MenuPick(
            product_id=self.product_id,
            customization=to_customization(self.removed_ingredients),
        )


def to_customization(removed: List[str]) -> Optional[Customization]:
    """Build a customization, None when nothing is removed."""
    if not removed:
        return None
    return Customization(removed_ingredients=frozenset(removed))


def to_selections(selections: Dict[str, List[MenuPickRequest]]) -> MenuSelections:
    """Convert request picks into domain selections."""
    return {
        group_id: [pick.to_pick() for pick in picks]
        for group_id, picks in selections.items()
    }


class MenuSelectionsRequest(BaseModel):
    """Picks per group id."""

    selections: Optional[Dict[str, List[MenuPickRequest]]] = None


class AddProductRequest(BaseModel):
    """Add a product to the cart."""

    product_id: str
    removed_ingredients: List[str] = []
    qty: int = Field(default=1, ge=1)


class AddMenuRequest(BaseModel):
    """Add a configured menu to the cart."""

    menu_id: str
    selections: Dict[str, List[MenuPickRequest]] = {}
    qty: int = Field(default=1, ge=1)
