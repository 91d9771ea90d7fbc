"""Order session store."""
import asyncio
import logging
from typing import Callable, Optional

from storefront.core.state import StateCell
from storefront.services.order_session.models import OrderContext
from storefront.services.order_session.storage import OrderSessionStorage
from storefront.services.ordering.models import FulfillmentMode

logger = logging.getLogger(__name__)


class OrderSessionStore:
    """
    Single source of truth for the current order intent.

    Writes go to durable storage first and are then published in memory.
    One writer at a time: every write holds ``_write_lock`` for the whole
    persist-and-publish sequence.
    """

    def __init__(self, storage: OrderSessionStorage):
        self.storage = storage
        self._write_lock = asyncio.Lock()
        self._cell: StateCell[OrderContext] = StateCell(OrderContext())

    @property
    def context(self) -> OrderContext:
        """Current session snapshot."""
        return self._cell.value

    def subscribe(self, listener: Callable[[OrderContext], None]) -> Callable[[], None]:
        """Observe every session snapshot. Returns an unsubscribe callable."""
        return self._cell.subscribe(listener)

    async def load(self) -> OrderContext:
        """Hydrate the in-memory session from storage."""
        async with self._write_lock:
            stored = await self.storage.read()
            context = stored or OrderContext()
            self._cell.publish(context)
        logger.info(
            f"[ORDER SESSION] Loaded - mode: {context.mode}, "
            f"address: {context.address_id}, browsing: {context.browsing_only}"
        )
        return context

    async def start_order(
        self, mode: FulfillmentMode, address_id: Optional[str] = None
    ) -> OrderContext:
        """Start or update the order with a mode and optional address."""
        context = OrderContext(mode=mode, address_id=address_id, browsing_only=False)
        await self._write(context)
        logger.info(f"[ORDER SESSION] Started order - mode: {mode.value}, address: {address_id}")
        return context

    async def set_browsing_only(self) -> OrderContext:
        """Mark the user as just browsing and forget mode and address."""
        context = OrderContext(browsing_only=True)
        await self._write(context)
        logger.info("[ORDER SESSION] Browsing only")
        return context

    async def clear(self) -> OrderContext:
        """Reset the session, e.g. on logout or account deletion."""
        context = OrderContext()
        async with self._write_lock:
            await self.storage.erase()
            self._cell.publish(context)
        logger.info("[ORDER SESSION] Cleared")
        return context

    async def _write(self, context: OrderContext) -> None:
        async with self._write_lock:
            await self.storage.write(context)
            self._cell.publish(context)
