"""Durable storage for the order session."""
import logging
from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.db.models import OrderSessionRecord
from storefront.services.order_session.models import OrderContext
from storefront.services.ordering.models import FulfillmentMode

logger = logging.getLogger(__name__)

DEFAULT_SESSION_KEY = "default"


class OrderSessionStorage(ABC):
    """Abstract base class for order session storage."""

    @abstractmethod
    async def read(self) -> Optional[OrderContext]:
        """Read the stored session, None if nothing was stored."""
        pass

    @abstractmethod
    async def write(self, context: OrderContext) -> None:
        """Replace the stored session."""
        pass

    @abstractmethod
    async def erase(self) -> None:
        """Remove the stored session."""
        pass


class InMemoryOrderSessionStorage(OrderSessionStorage):
    """Process-local storage, for tests and ephemeral runs."""

    def __init__(self, initial: Optional[OrderContext] = None):
        self._context = initial

    async def read(self) -> Optional[OrderContext]:
        return self._context

    async def write(self, context: OrderContext) -> None:
        self._context = context

    async def erase(self) -> None:
        self._context = None


class SqlOrderSessionStorage(OrderSessionStorage):
    """Stores the session as one row in the ``order_sessions`` table."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        key: str = DEFAULT_SESSION_KEY,
    ):
        self.session_factory = session_factory
        self.key = key

    async def read(self) -> Optional[OrderContext]:
        async with self.session_factory() as db:
            result = await db.execute(
                select(OrderSessionRecord).where(OrderSessionRecord.key == self.key)
            )
            record = result.scalar_one_or_none()
        if record is None:
            return None

        mode = None
        if record.mode:
            try:
                mode = FulfillmentMode(record.mode)
            except ValueError:
                logger.warning(
                    f"[ORDER SESSION] Ignoring unknown stored mode '{record.mode}'"
                )
        return OrderContext(
            mode=mode,
            address_id=record.address_id,
            browsing_only=bool(record.browsing_only),
        )

    async def write(self, context: OrderContext) -> None:
        async with self.session_factory() as db:
            record = await db.get(OrderSessionRecord, self.key)
            if record is None:
                record = OrderSessionRecord(key=self.key)
                db.add(record)
            record.mode = context.mode.value if context.mode else None
            record.address_id = context.address_id
            record.browsing_only = context.browsing_only
            await db.commit()

    async def erase(self) -> None:
        async with self.session_factory() as db:
            await db.execute(
                delete(OrderSessionRecord).where(OrderSessionRecord.key == self.key)
            )
            await db.commit()
