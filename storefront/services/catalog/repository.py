"""Catalog repository."""
from typing import List, Optional

from storefront.core.errors import CatalogItemNotFoundError
from storefront.services.catalog.base import (
    Catalog,
    CatalogProvider,
    Category,
    MenuDefinition,
    Product,
)


class CatalogRepository:
    """Repository for catalog reads."""

    def __init__(self, provider: CatalogProvider):
        self.provider = provider

    async def get_catalog(self) -> Catalog:
        """Get the full catalog."""
        return await self.provider.get_catalog()

    async def list_categories(self) -> List[Category]:
        """Active categories sorted by their display order."""
        catalog = await self.get_catalog()
        return sorted((c for c in catalog.categories if c.active), key=lambda c: c.order)

    async def list_products(self, category_id: Optional[str] = None) -> List[Product]:
        """Active products, optionally filtered by category."""
        catalog = await self.get_catalog()
        products = [
            p
            for p in catalog.products
            if p.active and (category_id is None or p.category_id == category_id)
        ]
        return sorted(products, key=lambda p: p.order)

    async def list_menus(self) -> List[MenuDefinition]:
        """Active menus sorted by their display order."""
        catalog = await self.get_catalog()
        return sorted((m for m in catalog.menus if m.active), key=lambda m: m.order)

    async def get_product(self, product_id: str) -> Optional[Product]:
        """Get a product by id."""
        return await self.provider.get_product(product_id)

    async def get_menu(self, menu_id: str) -> Optional[MenuDefinition]:
        """Get a menu by id."""
        return await self.provider.get_menu(menu_id)

    async def get_products_by_ids(self, product_ids: List[str]) -> List[Product]:
        """Get every product whose id is in the list."""
        return await self.provider.get_products_by_ids(product_ids)

    async def require_product(self, product_id: str) -> Product:
        """Get a product or raise CatalogItemNotFoundError."""
        product = await self.get_product(product_id)
        if product is None:
            raise CatalogItemNotFoundError("Product", product_id)
        return product

    async def require_menu(self, menu_id: str) -> MenuDefinition:
        """Get a menu or raise CatalogItemNotFoundError."""
        menu = await self.get_menu(menu_id)
        if menu is None:
            raise CatalogItemNotFoundError("Menu", menu_id)
        return menu
