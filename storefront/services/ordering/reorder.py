"""Re-add the lines of a past order to the cart."""
import logging
from typing import Optional, Sequence

from storefront.services.cart.store import CartStore
from storefront.services.catalog.repository import CatalogRepository
from storefront.services.ordering.models import Customization, MenuPick
from storefront.services.persistence.models import ReorderLine, ReorderMenu, ReorderProduct

logger = logging.getLogger(__name__)


def _customization(removed: Sequence[str]) -> Optional[Customization]:
    if not removed:
        return None
    return Customization(removed_ingredients=frozenset(removed))


async def add_from_reorder_lines(
    cart: CartStore,
    lines: Sequence[ReorderLine],
    catalog: CatalogRepository,
) -> int:
    """
    Add past order lines through the normal cart operations.

    Prices are recomputed for the current mode. Lines whose product or menu
    left the catalog are skipped.

    Returns:
        Number of lines added
    """
    added = 0
    for line in lines:
        if isinstance(line, ReorderProduct):
            product = await catalog.get_product(line.product_id)
            if product is None:
                logger.info(f"[REORDER] Skipping product {line.product_id}, not in catalog")
                continue
            cart.add_product(product, _customization(line.removed_ingredients), qty=line.qty)
        elif isinstance(line, ReorderMenu):
            menu = await catalog.get_menu(line.menu_id)
            if menu is None:
                logger.info(f"[REORDER] Skipping menu {line.menu_id}, not in catalog")
                continue
            selections = {
                group_id: [
                    MenuPick(
                        product_id=pick.product_id,
                        customization=_customization(pick.removed_ingredients),
                    )
                    for pick in picks
                ]
                for group_id, picks in line.selections.items()
            }
            cart.add_menu(menu, selections, qty=line.qty)
        added += 1
    return added
