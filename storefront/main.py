"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from storefront.api import addresses, cart, catalog, checkout, health, order_session, orders
from storefront.core.config import settings
from storefront.core.dependencies import build_services
from storefront.core.logging import setup_logging
from storefront.db.database import AsyncSessionLocal, init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    await init_db()
    services = build_services(AsyncSessionLocal)
    context = await services.order_session.load()
    if context.mode is not None:
        services.cart.set_mode(context.mode)
    app.state.services = services
    logger.info(f"[STARTUP] {settings.restaurant_name} storefront ready")
    yield


app = FastAPI(
    title="Storefront",
    description="Cart, order session and checkout for a quick-service restaurant",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router, tags=["health"])
app.include_router(catalog.router, tags=["catalog"])
app.include_router(cart.router, tags=["cart"])
app.include_router(order_session.router, tags=["order-session"])
app.include_router(checkout.router, tags=["checkout"])
app.include_router(orders.router, tags=["orders"])
app.include_router(addresses.router, tags=["addresses"])
