"""In-memory catalog provider."""
import logging
from pathlib import Path
from typing import List, Optional

import yaml

from storefront.services.catalog.base import (
    Catalog,
    CatalogProvider,
    Category,
    MenuDefinition,
    Product,
)

logger = logging.getLogger(__name__)


class InMemoryCatalogProvider(CatalogProvider):
    """In-memory catalog provider using YAML configuration."""

    def __init__(self, catalog_file: Optional[str] = None):
        """Initialize with optional catalog file path."""
        if catalog_file is None:
            catalog_file = Path(__file__).parent / "data" / "catalog.yaml"
        self.catalog_file = Path(catalog_file)
        self._catalog: Optional[Catalog] = None

    async def _load_catalog(self) -> Catalog:
        """Load catalog from YAML file."""
        if self._catalog is None:
            if not self.catalog_file.exists():
                logger.warning(
                    f"[CATALOG] Catalog file {self.catalog_file} not found, using empty catalog"
                )
                self._catalog = Catalog()
            else:
                with open(self.catalog_file, "r") as f:
                    data = yaml.safe_load(f) or {}
                self._catalog = Catalog(
                    categories=[Category(**c) for c in data.get("categories", [])],
                    products=[Product(**p) for p in data.get("products", [])],
                    menus=[MenuDefinition(**m) for m in data.get("menus", [])],
                )
                logger.info(
                    f"[CATALOG] Loaded {len(self._catalog.products)} products, "
                    f"{len(self._catalog.menus)} menus from {self.catalog_file}"
                )
        return self._catalog

    async def get_catalog(self) -> Catalog:
        """Get the full catalog."""
        return await self._load_catalog()

    async def get_product(self, product_id: str) -> Optional[Product]:
        """Get a product by id."""
        catalog = await self._load_catalog()
        for product in catalog.products:
            if product.id == product_id:
                return product
        return None

    async def get_menu(self, menu_id: str) -> Optional[MenuDefinition]:
        """Get a menu by id."""
        catalog = await self._load_catalog()
        for menu in catalog.menus:
            if menu.id == menu_id:
                return menu
        return None

    async def get_products_by_ids(self, product_ids: List[str]) -> List[Product]:
        """Get every product whose id is in the list."""
        catalog = await self._load_catalog()
        wanted = set(product_ids)
        return [p for p in catalog.products if p.id in wanted]
