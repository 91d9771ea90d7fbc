"""Order models: fulfillment mode, customizations and cart lines."""
from enum import Enum
from typing import Annotated, Dict, FrozenSet, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field


class FulfillmentMode(str, Enum):
    """How the order reaches the customer."""

    PICKUP = "PICKUP"
    DELIVERY = "DELIVERY"

    @property
    def other(self) -> "FulfillmentMode":
        if self is FulfillmentMode.PICKUP:
            return FulfillmentMode.DELIVERY
        return FulfillmentMode.PICKUP


class Customization(BaseModel):
    """Ingredients the customer asked to leave out."""

    model_config = ConfigDict(frozen=True)

    removed_ingredients: FrozenSet[str] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not self.removed_ingredients


class MenuPick(BaseModel):
    """One option chosen inside a menu group."""

    model_config = ConfigDict(frozen=True)

    product_id: str
    customization: Optional[Customization] = None

    @property
    def removed_ingredients(self) -> FrozenSet[str]:
        if self.customization is None:
            return frozenset()
        return self.customization.removed_ingredients


# group id -> picks for that group
MenuSelections = Dict[str, List[MenuPick]]


class _LineBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    line_id: str
    name: str  # snapshot at add time
    image_path: Optional[str] = None  # snapshot at add time
    unit_price_cents: int
    qty: int

    @computed_field  # type: ignore[misc]
    @property
    def subtotal_cents(self) -> int:
        return self.unit_price_cents * self.qty


class ProductLine(_LineBase):
    """A single product, possibly with ingredients removed."""

    type: Literal["product"] = "product"
    product_id: str
    customization: Optional[Customization] = None


class MenuLine(_LineBase):
    """A configured menu with its picks per group."""

    type: Literal["menu"] = "menu"
    menu_id: str
    selections: MenuSelections = {}


CartLine = Annotated[Union[ProductLine, MenuLine], Field(discriminator="type")]


class Cart(BaseModel):
    """Immutable snapshot of the cart."""

    model_config = ConfigDict(frozen=True)

    mode: FulfillmentMode
    items: Tuple[CartLine, ...] = ()

    @computed_field  # type: ignore[misc]
    @property
    def total_items(self) -> int:
        return sum(line.qty for line in self.items)

    @computed_field  # type: ignore[misc]
    @property
    def total_cents(self) -> int:
        return sum(line.subtotal_cents for line in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find_line(self, line_id: str) -> Optional[CartLine]:
        """Return the line with the given id, if any."""
        for line in self.items:
            if line.line_id == line_id:
                return line
        return None
