"""Service wiring and FastAPI dependencies."""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.core.config import Settings, settings
from storefront.services.addresses.directory import SqlAddressDirectory
from storefront.services.cart.store import CartStore
from storefront.services.catalog.base import CatalogProvider
from storefront.services.catalog.in_memory_catalog import InMemoryCatalogProvider
from storefront.services.catalog.repository import CatalogRepository
from storefront.services.checkout.orchestrator import CheckoutOrchestrator
from storefront.services.identity import RequestIdentityProvider
from storefront.services.order_session.storage import SqlOrderSessionStorage
from storefront.services.order_session.store import OrderSessionStore
from storefront.services.persistence.orders import OrderPersistenceService


@dataclass
class Services:
    """Process-wide stores and collaborators."""

    catalog: CatalogRepository
    cart: CartStore
    order_session: OrderSessionStore
    addresses: SqlAddressDirectory
    orders: OrderPersistenceService
    identity: RequestIdentityProvider
    checkout: CheckoutOrchestrator


def build_services(
    session_factory: async_sessionmaker[AsyncSession],
    catalog_provider: Optional[CatalogProvider] = None,
    config: Settings = settings,
) -> Services:
    """Construct every store once and wire them together."""
    if catalog_provider is None:
        catalog_provider = InMemoryCatalogProvider(catalog_file=config.catalog_file)

    cart = CartStore(mode=config.default_mode)
    order_session = OrderSessionStore(SqlOrderSessionStorage(session_factory))
    addresses = SqlAddressDirectory(session_factory)
    orders = OrderPersistenceService(session_factory)
    identity = RequestIdentityProvider()
    checkout = CheckoutOrchestrator(
        cart=cart,
        session=order_session,
        addresses=addresses,
        submitter=orders,
        identity=identity,
        event_buffer=config.checkout_event_buffer,
    )
    return Services(
        catalog=CatalogRepository(provider=catalog_provider),
        cart=cart,
        order_session=order_session,
        addresses=addresses,
        orders=orders,
        identity=identity,
        checkout=checkout,
    )


def get_services(request: Request) -> Services:
    """Get the services built at startup."""
    return request.app.state.services


async def get_current_user_id(
    x_user_id: Optional[str] = Header(default=None),
    services: Services = Depends(get_services),
) -> Optional[str]:
    """Bind the caller's user id (``X-User-Id`` header) for this request."""
    user_id = x_user_id or None
    services.identity.bind(user_id)
    return user_id
