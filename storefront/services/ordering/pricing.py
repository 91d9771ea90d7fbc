"""Mode-aware pricing rules. All amounts are integer cents."""
from typing import Mapping, Optional, Sequence

from pydantic import BaseModel, computed_field

from storefront.services.catalog.base import MenuDefinition, Prices
from storefront.services.ordering.models import FulfillmentMode, MenuPick


class PriceBreakdown(BaseModel):
    """Menu price split into base and surcharges."""

    base: int
    deltas: int
    extras: int = 0

    @computed_field  # type: ignore[misc]
    @property
    def total(self) -> int:
        return self.base + self.deltas + self.extras


def _mode_price(prices: Prices, mode: FulfillmentMode) -> Optional[int]:
    if mode is FulfillmentMode.DELIVERY:
        return prices.delivery
    return prices.pickup


def price_for(prices: Optional[Prices], mode: FulfillmentMode) -> int:
    """
    Resolve a price for the given mode.

    Falls back to the other mode's price when the active one is missing,
    and to 0 when both are.
    """
    if prices is None:
        return 0
    price = _mode_price(prices, mode)
    if price is None:
        price = _mode_price(prices, mode.other)
    return price if price is not None else 0


def delta_for(delta: Optional[Prices], mode: FulfillmentMode) -> int:
    """Surcharge of a menu option for the given mode, 0 when that mode has none."""
    if delta is None:
        return 0
    price = _mode_price(delta, mode)
    return price if price is not None else 0


def compute_menu_total(
    menu: MenuDefinition,
    selections: Mapping[str, Sequence[MenuPick]],
    mode: FulfillmentMode,
) -> PriceBreakdown:
    """Price a configured menu: base price plus the delta of every known pick."""
    base = price_for(menu.prices, mode)
    deltas = 0
    for group in menu.groups:
        for pick in selections.get(group.id, ()):
            allowed = group.find_allowed(pick.product_id)
            # Picks no longer in the menu (catalog edited) add nothing
            if allowed is not None:
                deltas += delta_for(allowed.delta, mode)
    return PriceBreakdown(base=base, deltas=deltas)


def menu_unit_price(
    menu: MenuDefinition,
    selections: Mapping[str, Sequence[MenuPick]],
    mode: FulfillmentMode,
) -> int:
    """Unit price of a configured menu in cents."""
    return compute_menu_total(menu, selections, mode).total
