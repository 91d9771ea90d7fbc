"""Catalog provider interface."""
from abc import ABC, abstractmethod
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class Prices(BaseModel):
    """Per-mode prices in cents. Either side may be missing."""

    model_config = ConfigDict(frozen=True)

    pickup: Optional[int] = None
    delivery: Optional[int] = None


class Category(BaseModel):
    """Catalog category."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    order: int = 0
    active: bool = True


class Product(BaseModel):
    """Catalog product."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: Optional[str] = None
    image_path: Optional[str] = None
    category_id: Optional[str] = None
    active: bool = True
    order: int = 0
    ingredients: List[str] = []
    prices: Prices = Prices()


class MenuAllowed(BaseModel):
    """An option allowed inside a menu group."""

    model_config = ConfigDict(frozen=True)

    product_id: str
    delta: Optional[Prices] = None  # surcharge over the menu base price
    default: bool = False
    allow_ingredient_removal: bool = True


class MenuGroup(BaseModel):
    """One choice step of a menu, e.g. "main", "side", "drink"."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    min: int = 1
    max: int = 1
    allowed: List[MenuAllowed] = []

    def find_allowed(self, product_id: str) -> Optional[MenuAllowed]:
        for option in self.allowed:
            if option.product_id == product_id:
                return option
        return None


class MenuDefinition(BaseModel):
    """A configurable menu."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: Optional[str] = None
    image_path: Optional[str] = None
    active: bool = True
    order: int = 0
    prices: Prices = Prices()
    groups: List[MenuGroup] = []


class Catalog(BaseModel):
    """Full catalog snapshot."""

    categories: List[Category] = []
    products: List[Product] = []
    menus: List[MenuDefinition] = []


class CatalogProvider(ABC):
    """Abstract base class for catalog providers."""

    @abstractmethod
    async def get_catalog(self) -> Catalog:
        """Get the full catalog."""
        pass

    @abstractmethod
    async def get_product(self, product_id: str) -> Optional[Product]:
        """Get a product by id."""
        pass

    @abstractmethod
    async def get_menu(self, menu_id: str) -> Optional[MenuDefinition]:
        """Get a menu by id."""
        pass

    @abstractmethod
    async def get_products_by_ids(self, product_ids: List[str]) -> List[Product]:
        """Get every product whose id is in the list."""
        pass
