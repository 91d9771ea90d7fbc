"""In-memory cart store."""
import logging
import threading
import uuid
from typing import Callable, Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple

from storefront.core.state import StateCell
from storefront.services.catalog.base import MenuDefinition, Product
from storefront.services.ordering.models import (
    Cart,
    CartLine,
    Customization,
    FulfillmentMode,
    MenuLine,
    MenuPick,
    ProductLine,
)
from storefront.services.ordering.pricing import menu_unit_price, price_for

logger = logging.getLogger(__name__)

NormalizedSelections = Tuple[Tuple[str, Tuple[Tuple[str, Tuple[str, ...]], ...]], ...]


def _removed(customization: Optional[Customization]) -> FrozenSet[str]:
    if customization is None:
        return frozenset()
    return customization.removed_ingredients


def normalize_selections(selections: Mapping[str, Sequence[MenuPick]]) -> NormalizedSelections:
    """
    Reduce menu picks to an order-independent key.

    Groups are sorted by id and each pick becomes (product_id, removed
    ingredients), sorted, so equal configurations compare equal no matter
    how they were built.
    """
    return tuple(
        (
            group_id,
            tuple(
                sorted(
                    (pick.product_id, tuple(sorted(pick.removed_ingredients)))
                    for pick in selections[group_id]
                )
            ),
        )
        for group_id in sorted(selections)
    )


def _copy_selections(selections: Mapping[str, Sequence[MenuPick]]) -> Dict[str, List[MenuPick]]:
    return {group_id: list(picks) for group_id, picks in selections.items()}


def _new_line_id() -> str:
    return str(uuid.uuid4())


class CartStore:
    """
    Owns the single mutable cart.

    Every mutation runs under one lock and publishes a new immutable
    ``Cart`` snapshot; ``state`` is a lock-free read of the last one.
    """

    def __init__(self, mode: FulfillmentMode = FulfillmentMode.PICKUP):
        self._lock = threading.RLock()
        self._cell: StateCell[Cart] = StateCell(Cart(mode=mode))

    @property
    def state(self) -> Cart:
        """Current cart snapshot."""
        return self._cell.value

    def subscribe(self, listener: Callable[[Cart], None]) -> Callable[[], None]:
        """Observe every cart snapshot. Returns an unsubscribe callable."""
        return self._cell.subscribe(listener)

    def set_mode(self, mode: FulfillmentMode) -> None:
        """Switch mode for future additions. Existing lines keep their prices."""
        with self._lock:
            current = self._cell.value
            if current.mode is mode:
                return
            self._cell.publish(current.model_copy(update={"mode": mode}))
        logger.info(f"[CART] Mode set to {mode.value}")

    def add_product(
        self,
        product: Product,
        customization: Optional[Customization] = None,
        qty: int = 1,
    ) -> None:
        """Add a product, merging with an identical line if there is one."""
        if qty <= 0:
            return
        removed = _removed(customization)
        with self._lock:
            current = self._cell.value
            unit = price_for(product.prices, current.mode)

            def matches(line: CartLine) -> bool:
                return (
                    isinstance(line, ProductLine)
                    and line.product_id == product.id
                    and _removed(line.customization) == removed
                )

            new_line = ProductLine(
                line_id=_new_line_id(),
                product_id=product.id,
                name=product.name,
                image_path=product.image_path,
                unit_price_cents=unit,
                qty=qty,
                customization=customization,
            )
            self._merge_or_append(current, matches, new_line, qty)
        logger.info(f"[CART] Added product {product.id} x{qty} at {unit} cents")

    def add_menu(
        self,
        menu: MenuDefinition,
        selections: Mapping[str, Sequence[MenuPick]],
        qty: int = 1,
    ) -> None:
        """Add a configured menu, merging with an equivalent configuration."""
        if qty <= 0:
            return
        key = normalize_selections(selections)
        with self._lock:
            current = self._cell.value
            unit = menu_unit_price(menu, selections, current.mode)

            def matches(line: CartLine) -> bool:
                return (
                    isinstance(line, MenuLine)
                    and line.menu_id == menu.id
                    and normalize_selections(line.selections) == key
                )

            new_line = MenuLine(
                line_id=_new_line_id(),
                menu_id=menu.id,
                name=menu.name,
                image_path=menu.image_path,
                unit_price_cents=unit,
                qty=qty,
                selections=_copy_selections(selections),
            )
            self._merge_or_append(current, matches, new_line, qty)
        logger.info(f"[CART] Added menu {menu.id} x{qty} at {unit} cents")

    def update_quantity(self, line_id: str, qty: int) -> None:
        """Set a line's quantity exactly; zero or less removes it."""
        if qty <= 0:
            self.remove(line_id)
            return
        with self._lock:
            current = self._cell.value
            if current.find_line(line_id) is None:
                logger.debug(f"[CART] update_quantity ignored, no line {line_id}")
                return
            items = tuple(
                line.model_copy(update={"qty": qty}) if line.line_id == line_id else line
                for line in current.items
            )
            self._cell.publish(current.model_copy(update={"items": items}))

    def remove(self, line_id: str) -> None:
        """Delete a line. Unknown ids are ignored."""
        with self._lock:
            current = self._cell.value
            items = tuple(line for line in current.items if line.line_id != line_id)
            if len(items) == len(current.items):
                return
            self._cell.publish(current.model_copy(update={"items": items}))
        logger.info(f"[CART] Removed line {line_id}")

    def clear(self) -> None:
        """Empty the cart, keeping the mode."""
        with self._lock:
            current = self._cell.value
            self._cell.publish(current.model_copy(update={"items": ()}))
        logger.info("[CART] Cleared")

    def _merge_or_append(
        self,
        current: Cart,
        matches: Callable[[CartLine], bool],
        new_line: CartLine,
        qty: int,
    ) -> None:
        items = list(current.items)
        for index, line in enumerate(items):
            if matches(line):
                items[index] = line.model_copy(update={"qty": line.qty + qty})
                break
        else:
            items.append(new_line)
        self._cell.publish(current.model_copy(update={"items": tuple(items)}))
