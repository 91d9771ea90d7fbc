"""Unit tests for the order session store and its storage."""
import asyncio

import pytest

from storefront.db.models import OrderSessionRecord
from storefront.services.order_session.models import OrderContext
from storefront.services.order_session.storage import (
    InMemoryOrderSessionStorage,
    SqlOrderSessionStorage,
)
from storefront.services.order_session.store import OrderSessionStore
from storefront.services.ordering.models import FulfillmentMode


class TestOrderContext:
    """Test the derived ``is_active`` flag."""

    def test_empty_context_is_inactive(self):
        assert OrderContext().is_active is False

    def test_pickup_is_active(self):
        assert OrderContext(mode=FulfillmentMode.PICKUP).is_active is True

    def test_delivery_needs_address(self):
        """Test delivery only counts once an address is set."""
        assert OrderContext(mode=FulfillmentMode.DELIVERY).is_active is False
        assert OrderContext(mode=FulfillmentMode.DELIVERY, address_id="a").is_active is True

    def test_browsing_is_never_active(self):
        context = OrderContext(mode=FulfillmentMode.PICKUP, browsing_only=True)
        assert context.is_active is False


class TestOrderSessionStore:
    """Test writes, publication and hydration."""

    async def test_start_order_publishes_and_persists(self):
        """Test start_order is visible in memory and in storage."""
        storage = InMemoryOrderSessionStorage()
        store = OrderSessionStore(storage)

        await store.start_order(FulfillmentMode.DELIVERY, "addr-1")

        assert store.context == OrderContext(mode=FulfillmentMode.DELIVERY, address_id="addr-1")
        assert await storage.read() == store.context

    async def test_start_order_resets_browsing(self, session_store):
        """Test starting an order leaves browsing mode."""
        await session_store.set_browsing_only()
        await session_store.start_order(FulfillmentMode.PICKUP)

        assert session_store.context.browsing_only is False
        assert session_store.context.is_active is True

    async def test_set_browsing_only_clears_mode_and_address(self, session_store):
        await session_store.start_order(FulfillmentMode.DELIVERY, "addr-1")

        context = await session_store.set_browsing_only()

        assert context == OrderContext(browsing_only=True)
        assert session_store.context == context

    async def test_clear_erases_storage(self):
        """Test clear resets memory and removes the stored session."""
        storage = InMemoryOrderSessionStorage()
        store = OrderSessionStore(storage)
        await store.start_order(FulfillmentMode.PICKUP)

        await store.clear()

        assert store.context == OrderContext()
        assert await storage.read() is None

    async def test_load_hydrates_from_storage(self):
        """Test load publishes what a previous run stored."""
        stored = OrderContext(mode=FulfillmentMode.DELIVERY, address_id="addr-9")
        store = OrderSessionStore(InMemoryOrderSessionStorage(initial=stored))

        assert store.context == OrderContext()
        loaded = await store.load()

        assert loaded == stored
        assert store.context == stored

    async def test_load_without_stored_session(self, session_store):
        assert await session_store.load() == OrderContext()

    async def test_subscribers_see_every_write(self, session_store):
        seen = []
        session_store.subscribe(lambda context: seen.append(context.mode))

        await session_store.start_order(FulfillmentMode.PICKUP)
        await session_store.start_order(FulfillmentMode.DELIVERY, "addr-1")
        await session_store.clear()

        assert seen == [None, FulfillmentMode.PICKUP, FulfillmentMode.DELIVERY, None]

    async def test_concurrent_writes_end_consistent(self):
        """Test memory and storage agree after racing writers."""
        storage = InMemoryOrderSessionStorage()
        store = OrderSessionStore(storage)

        await asyncio.gather(
            *[store.start_order(FulfillmentMode.DELIVERY, f"addr-{i}") for i in range(10)],
            store.set_browsing_only(),
        )

        assert await storage.read() == store.context

    async def test_failed_write_publishes_nothing(self, session_store):
        """Test a storage failure leaves the in-memory session unchanged."""
        await session_store.start_order(FulfillmentMode.PICKUP)

        async def broken_write(context):
            raise RuntimeError("disk full")

        session_store.storage.write = broken_write

        with pytest.raises(RuntimeError):
            await session_store.start_order(FulfillmentMode.DELIVERY, "addr-1")

        assert session_store.context.mode is FulfillmentMode.PICKUP


class TestSqlOrderSessionStorage:
    """Test the SQL-backed session storage."""

    async def test_read_empty(self, session_factory):
        storage = SqlOrderSessionStorage(session_factory)
        assert await storage.read() is None

    async def test_write_read_erase(self, session_factory):
        """Test writes replace the row and erase removes it."""
        storage = SqlOrderSessionStorage(session_factory)

        await storage.write(OrderContext(mode=FulfillmentMode.PICKUP))
        await storage.write(OrderContext(mode=FulfillmentMode.DELIVERY, address_id="addr-1"))

        assert await storage.read() == OrderContext(
            mode=FulfillmentMode.DELIVERY, address_id="addr-1"
        )

        await storage.erase()
        assert await storage.read() is None

    async def test_store_survives_restart(self, session_factory):
        """Test a new store on the same database hydrates the last session."""
        first = OrderSessionStore(SqlOrderSessionStorage(session_factory))
        await first.start_order(FulfillmentMode.DELIVERY, "addr-2")

        second = OrderSessionStore(SqlOrderSessionStorage(session_factory))
        context = await second.load()

        assert context.mode is FulfillmentMode.DELIVERY
        assert context.address_id == "addr-2"

    async def test_keys_are_isolated(self, session_factory):
        kiosk = SqlOrderSessionStorage(session_factory, key="kiosk")
        web = SqlOrderSessionStorage(session_factory, key="web")

        await kiosk.write(OrderContext(mode=FulfillmentMode.PICKUP))

        assert await web.read() is None

    async def test_unknown_stored_mode_is_ignored(self, session_factory):
        """Test a corrupt mode value reads back as no mode."""
        async with session_factory() as db:
            db.add(OrderSessionRecord(key="default", mode="TELEPORT", browsing_only=False))
            await db.commit()

        context = await SqlOrderSessionStorage(session_factory).read()

        assert context == OrderContext()
