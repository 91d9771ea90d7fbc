"""Order persistence service."""
import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from storefront.core.errors import OrderPermissionDenied, OrderValidationFailed
from storefront.db.models import Address as AddressRecord
from storefront.db.models import Order, OrderLine
from storefront.services.ordering.models import (
    Cart,
    CartLine,
    FulfillmentMode,
    MenuLine,
    ProductLine,
)
from storefront.services.persistence.models import (
    OrderLinePreview,
    OrderSummary,
    ReorderMenu,
    ReorderProduct,
    ReorderSelection,
)

logger = logging.getLogger(__name__)


class OrderSubmitter(ABC):
    """Backend that accepts orders."""

    @abstractmethod
    async def submit(
        self,
        cart: Cart,
        mode: FulfillmentMode,
        address_id: Optional[str],
        user_id: Optional[str] = None,
    ) -> str:
        """
        Create an order from a cart snapshot.

        Returns:
            The new order id

        Raises:
            OrderSubmissionError: when the backend rejects the order
        """
        pass


def _line_fields(line: CartLine) -> Dict[str, Any]:
    if isinstance(line, ProductLine):
        removed = sorted(line.customization.removed_ingredients) if line.customization else []
        return {"type": "product", "item_id": line.product_id, "removed_ingredients": removed}
    if isinstance(line, MenuLine):
        selections = {
            group_id: [
                {"product_id": pick.product_id, "removed_ingredients": sorted(pick.removed_ingredients)}
                for pick in picks
            ]
            for group_id, picks in line.selections.items()
        }
        return {"type": "menu", "item_id": line.menu_id, "selections": selections}
    raise TypeError(f"Unknown cart line type: {type(line).__name__}")


class OrderPersistenceService(OrderSubmitter):
    """Service for persisting order data."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def submit(
        self,
        cart: Cart,
        mode: FulfillmentMode,
        address_id: Optional[str],
        user_id: Optional[str] = None,
    ) -> str:
        """Create an order with its lines in one transaction."""
        if not user_id:
            raise OrderPermissionDenied("You must sign in to place an order.")

        logger.info(
            f"[ORDERS] submit - user: {user_id}, mode: {mode.value}, address: {address_id}, "
            f"lines: {len(cart.items)}, total: {cart.total_cents}"
        )

        async with self.session_factory() as db:
            if mode is FulfillmentMode.DELIVERY:
                if not address_id:
                    raise OrderValidationFailed("A delivery order needs an address.")
                address = await db.get(AddressRecord, address_id)
                if address is None or address.user_id != user_id:
                    raise OrderValidationFailed(
                        f"Address '{address_id}' is not valid for this user."
                    )

            order_id = str(uuid.uuid4())
            order = Order(
                id=order_id,
                user_id=user_id,
                mode=mode.value,
                address_id=address_id if mode is FulfillmentMode.DELIVERY else None,
                status="PENDING",
                total_cents=cart.total_cents,
            )
            for position, line in enumerate(cart.items):
                order.lines.append(
                    OrderLine(
                        position=position,
                        name=line.name,
                        image_path=line.image_path,
                        unit_price_cents=line.unit_price_cents,
                        qty=line.qty,
                        subtotal_cents=line.subtotal_cents,
                        **_line_fields(line),
                    )
                )
            db.add(order)
            await db.commit()

        logger.info(f"[ORDERS] Order created - id: {order_id}")
        return order_id

    async def get_order(self, order_id: str) -> Optional[OrderSummary]:
        """Get order by ID with its lines."""
        async with self.session_factory() as db:
            result = await db.execute(
                select(Order).where(Order.id == order_id).options(selectinload(Order.lines))
            )
            order = result.scalar_one_or_none()
        return self._to_summary(order) if order else None

    async def list_user_orders(self, user_id: str, limit: int = 20) -> List[OrderSummary]:
        """Latest orders of a user, newest first."""
        async with self.session_factory() as db:
            result = await db.execute(
                select(Order)
                .where(Order.user_id == user_id)
                .options(selectinload(Order.lines))
                .order_by(desc(Order.created_at))
                .limit(limit)
            )
            orders = result.scalars().all()
        return [self._to_summary(order) for order in orders]

    def _to_summary(self, order: Order) -> OrderSummary:
        previews = []
        reorder_lines = []
        for line in order.lines:
            previews.append(OrderLinePreview(qty=line.qty, text=line.name or line.item_id))
            if line.type == "menu":
                reorder_lines.append(
                    ReorderMenu(
                        menu_id=line.item_id,
                        name=line.name,
                        image_path=line.image_path,
                        unit_price_cents=line.unit_price_cents,
                        qty=line.qty,
                        selections={
                            group_id: [ReorderSelection(**pick) for pick in picks]
                            for group_id, picks in (line.selections or {}).items()
                        },
                    )
                )
            else:
                reorder_lines.append(
                    ReorderProduct(
                        product_id=line.item_id,
                        name=line.name,
                        image_path=line.image_path,
                        unit_price_cents=line.unit_price_cents,
                        qty=line.qty,
                        removed_ingredients=line.removed_ingredients or [],
                    )
                )
        return OrderSummary(
            id=order.id,
            user_id=order.user_id,
            created_at=order.created_at,
            status=order.status,
            total_cents=order.total_cents,
            mode=FulfillmentMode(order.mode),
            address_id=order.address_id,
            items_count=sum(line.qty for line in order.lines),
            previews=previews,
            reorder_lines=reorder_lines,
        )
