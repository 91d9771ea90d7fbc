"""Shared test fixtures and configuration."""
import os
from pathlib import Path
from typing import List
from unittest.mock import AsyncMock

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing the app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RESTAURANT_NAME", "Test Kebab")

from storefront.core.dependencies import build_services, get_services
from storefront.db.models import Base
from storefront.main import app
from storefront.services.addresses.directory import AddressDirectory
from storefront.services.addresses.models import Address
from storefront.services.cart.store import CartStore
from storefront.services.catalog.base import (
    MenuAllowed,
    MenuDefinition,
    MenuGroup,
    Prices,
    Product,
)
from storefront.services.catalog.in_memory_catalog import InMemoryCatalogProvider
from storefront.services.catalog.repository import CatalogRepository
from storefront.services.identity import StaticIdentityProvider
from storefront.services.order_session.storage import InMemoryOrderSessionStorage
from storefront.services.order_session.store import OrderSessionStore
from storefront.services.ordering.models import FulfillmentMode
from storefront.services.persistence.orders import OrderSubmitter


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_db_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(test_db_engine):
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        test_db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
def test_catalog_path():
    """Return path to test catalog YAML file."""
    return Path(__file__).parent / "fixtures" / "test_catalog.yaml"


@pytest.fixture
def test_catalog_repository(test_catalog_path):
    """Catalog repository with test data."""
    return CatalogRepository(InMemoryCatalogProvider(catalog_file=str(test_catalog_path)))


@pytest.fixture
def kebab():
    """Product priced in both modes."""
    return Product(
        id="kebab",
        name="Kebab",
        image_path="products/kebab.jpg",
        ingredients=["onion", "tomato", "sauce"],
        prices=Prices(pickup=600, delivery=700),
    )


@pytest.fixture
def fries():
    """Product with a pickup price only."""
    return Product(id="fries", name="Fries", prices=Prices(pickup=250))


@pytest.fixture
def combo_menu():
    """Menu with a fixed main, a priced side choice and optional drinks."""
    return MenuDefinition(
        id="combo",
        name="Combo",
        prices=Prices(pickup=800, delivery=950),
        groups=[
            MenuGroup(
                id="main",
                name="Main",
                min=1,
                max=1,
                allowed=[MenuAllowed(product_id="kebab", default=True)],
            ),
            MenuGroup(
                id="side",
                name="Side",
                min=1,
                max=1,
                allowed=[
                    MenuAllowed(product_id="fries", default=True, delta=Prices(pickup=100)),
                    MenuAllowed(product_id="salad", delta=Prices(pickup=150, delivery=200)),
                ],
            ),
            MenuGroup(
                id="drink",
                name="Drink",
                min=0,
                max=2,
                allowed=[MenuAllowed(product_id="soda")],
            ),
        ],
    )


@pytest.fixture
def cart_store():
    """Empty cart in pickup mode."""
    return CartStore(mode=FulfillmentMode.PICKUP)


@pytest.fixture
def session_store():
    """Order session store backed by process memory."""
    return OrderSessionStore(InMemoryOrderSessionStorage())


@pytest.fixture
def make_addresses():
    """Build addresses with the given ids, in order."""
    def _make(*ids: str) -> List[Address]:
        return [
            Address(id=address_id, street="Main St", number="1", city="Town")
            for address_id in ids
        ]
    return _make


@pytest.fixture
def address_directory():
    """Address directory mock: no addresses, no default."""
    directory = AsyncMock(spec=AddressDirectory)
    directory.list_addresses = AsyncMock(return_value=[])
    directory.default_address_id = AsyncMock(return_value=None)
    return directory


@pytest.fixture
def order_submitter():
    """Order submitter mock that always succeeds."""
    submitter = AsyncMock(spec=OrderSubmitter)
    submitter.submit = AsyncMock(return_value="order-1")
    return submitter


@pytest.fixture
def identity():
    """Signed-in user ``user-1``."""
    return StaticIdentityProvider("user-1")


@pytest.fixture
def services(session_factory, test_catalog_path):
    """Full service graph on the test database and catalog."""
    return build_services(
        session_factory,
        catalog_provider=InMemoryCatalogProvider(catalog_file=str(test_catalog_path)),
    )


@pytest.fixture
async def test_client(services):
    """HTTP client for the app with test services."""
    app.dependency_overrides[get_services] = lambda: services

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as an asyncio test"
    )
