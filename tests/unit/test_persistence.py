"""Unit tests for persistence services (orders and addresses)."""
import pytest

from storefront.core.errors import (
    AddressNotFoundError,
    OrderPermissionDenied,
    OrderValidationFailed,
)
from storefront.db.models import UserProfile
from storefront.services.addresses.directory import SqlAddressDirectory
from storefront.services.addresses.models import AddressInput
from storefront.services.cart.store import CartStore
from storefront.services.ordering.models import Customization, FulfillmentMode, MenuPick
from storefront.services.persistence.models import ReorderMenu, ReorderProduct
from storefront.services.persistence.orders import OrderPersistenceService


@pytest.fixture
def filled_cart(kebab, combo_menu):
    """Cart with a customized product and a menu."""
    cart = CartStore(mode=FulfillmentMode.PICKUP)
    cart.add_product(
        kebab, Customization(removed_ingredients=frozenset(["onion"])), qty=2
    )
    cart.add_menu(
        combo_menu,
        {
            "main": [MenuPick(product_id="kebab")],
            "side": [MenuPick(product_id="salad")],
        },
    )
    return cart.state


@pytest.fixture
def addresses(session_factory):
    return SqlAddressDirectory(session_factory)


class TestOrderPersistence:
    """Test order persistence service."""

    @pytest.mark.asyncio
    async def test_submit_pickup_order(self, session_factory, filled_cart):
        """Test submitting stores the order with its lines."""
        service = OrderPersistenceService(session_factory)

        order_id = await service.submit(
            filled_cart, FulfillmentMode.PICKUP, None, user_id="user-1"
        )
        order = await service.get_order(order_id)

        assert order is not None
        assert order.id == order_id
        assert order.user_id == "user-1"
        assert order.status == "PENDING"
        assert order.mode is FulfillmentMode.PICKUP
        assert order.address_id is None
        assert order.total_cents == filled_cart.total_cents == 2 * 600 + 950
        assert order.items_count == 3
        assert [(p.qty, p.text) for p in order.previews] == [(2, "Kebab"), (1, "Combo")]

    @pytest.mark.asyncio
    async def test_reorder_lines_keep_customizations(self, session_factory, filled_cart):
        """Test stored lines come back with removals and menu picks."""
        service = OrderPersistenceService(session_factory)
        order_id = await service.submit(
            filled_cart, FulfillmentMode.PICKUP, None, user_id="user-1"
        )

        order = await service.get_order(order_id)
        product, menu = order.reorder_lines

        assert isinstance(product, ReorderProduct)
        assert product.product_id == "kebab"
        assert product.removed_ingredients == ["onion"]
        assert product.qty == 2
        assert isinstance(menu, ReorderMenu)
        assert menu.menu_id == "combo"
        assert menu.selections["side"][0].product_id == "salad"

    @pytest.mark.asyncio
    async def test_submit_without_user_is_denied(self, session_factory, filled_cart):
        service = OrderPersistenceService(session_factory)

        with pytest.raises(OrderPermissionDenied):
            await service.submit(filled_cart, FulfillmentMode.PICKUP, None)

    @pytest.mark.asyncio
    async def test_delivery_without_address_fails(self, session_factory, filled_cart):
        service = OrderPersistenceService(session_factory)

        with pytest.raises(OrderValidationFailed):
            await service.submit(
                filled_cart, FulfillmentMode.DELIVERY, None, user_id="user-1"
            )

    @pytest.mark.asyncio
    async def test_delivery_with_foreign_address_fails(
        self, session_factory, addresses, filled_cart
    ):
        """Test an address of another user is rejected."""
        address_id = await addresses.upsert_address(
            "user-2", None, AddressInput(street="Elm St", city="Town")
        )
        service = OrderPersistenceService(session_factory)

        with pytest.raises(OrderValidationFailed):
            await service.submit(
                filled_cart, FulfillmentMode.DELIVERY, address_id, user_id="user-1"
            )

    @pytest.mark.asyncio
    async def test_delivery_with_own_address(self, session_factory, addresses, filled_cart):
        address_id = await addresses.upsert_address(
            "user-1", None, AddressInput(street="Elm St", city="Town")
        )
        service = OrderPersistenceService(session_factory)

        order_id = await service.submit(
            filled_cart, FulfillmentMode.DELIVERY, address_id, user_id="user-1"
        )

        order = await service.get_order(order_id)
        assert order.mode is FulfillmentMode.DELIVERY
        assert order.address_id == address_id

    @pytest.mark.asyncio
    async def test_get_unknown_order(self, session_factory):
        service = OrderPersistenceService(session_factory)
        assert await service.get_order("missing") is None

    @pytest.mark.asyncio
    async def test_list_user_orders(self, session_factory, filled_cart):
        """Test listing returns only the user's orders, capped by limit."""
        service = OrderPersistenceService(session_factory)
        mine = {
            await service.submit(filled_cart, FulfillmentMode.PICKUP, None, user_id="user-1")
            for _ in range(3)
        }
        await service.submit(filled_cart, FulfillmentMode.PICKUP, None, user_id="user-2")

        orders = await service.list_user_orders("user-1")
        limited = await service.list_user_orders("user-1", limit=2)

        assert {order.id for order in orders} == mine
        assert len(limited) == 2


class TestAddressDirectory:
    """Test the SQL address directory."""

    @pytest.mark.asyncio
    async def test_upsert_creates_and_lists(self, addresses):
        address_id = await addresses.upsert_address(
            "user-1", None, AddressInput(label="Home", street="Main St", number="4")
        )

        listed = await addresses.list_addresses("user-1")

        assert [a.id for a in listed] == [address_id]
        assert listed[0].label == "Home"
        assert await addresses.list_addresses("user-2") == []

    @pytest.mark.asyncio
    async def test_upsert_merges_fields(self, addresses):
        """Test None fields leave stored values untouched."""
        address_id = await addresses.upsert_address(
            "user-1", None, AddressInput(label="Home", street="Main St")
        )

        await addresses.upsert_address("user-1", address_id, AddressInput(street="Side St"))

        (address,) = await addresses.list_addresses("user-1")
        assert address.label == "Home"
        assert address.street == "Side St"

    @pytest.mark.asyncio
    async def test_upsert_with_new_id_creates(self, addresses):
        address_id = await addresses.upsert_address("user-1", "addr-x", AddressInput(city="Town"))

        assert address_id == "addr-x"
        assert await addresses.address_exists("user-1", "addr-x")
        assert not await addresses.address_exists("user-2", "addr-x")

    @pytest.mark.asyncio
    async def test_set_default(self, addresses):
        address_id = await addresses.upsert_address("user-1", None, AddressInput(city="Town"))

        await addresses.set_default_address("user-1", address_id)

        assert await addresses.default_address_id("user-1") == address_id

    @pytest.mark.asyncio
    async def test_set_default_unknown_address(self, addresses):
        with pytest.raises(AddressNotFoundError):
            await addresses.set_default_address("user-1", "missing")

    @pytest.mark.asyncio
    async def test_delete_default_clears_profile(self, session_factory, addresses):
        """Test deleting the default address also clears the profile pointer."""
        address_id = await addresses.upsert_address("user-1", None, AddressInput(city="Town"))
        await addresses.set_default_address("user-1", address_id)

        await addresses.delete_address("user-1", address_id)

        assert await addresses.list_addresses("user-1") == []
        assert await addresses.default_address_id("user-1") is None
        async with session_factory() as db:
            assert await db.get(UserProfile, "user-1") is not None

    @pytest.mark.asyncio
    async def test_delete_other_address_keeps_default(self, addresses):
        keep = await addresses.upsert_address("user-1", None, AddressInput(city="A"))
        drop = await addresses.upsert_address("user-1", None, AddressInput(city="B"))
        await addresses.set_default_address("user-1", keep)

        await addresses.delete_address("user-1", drop)

        assert await addresses.default_address_id("user-1") == keep

    @pytest.mark.asyncio
    async def test_delete_foreign_address_is_ignored(self, addresses):
        address_id = await addresses.upsert_address("user-1", None, AddressInput(city="A"))

        await addresses.delete_address("user-2", address_id)

        assert await addresses.address_exists("user-1", address_id)

    @pytest.mark.asyncio
    async def test_upsert_foreign_address_is_rejected(self, addresses):
        """Test another user's id can be neither updated nor reused."""
        address_id = await addresses.upsert_address(
            "user-1", None, AddressInput(street="Main St")
        )

        with pytest.raises(AddressNotFoundError):
            await addresses.upsert_address("user-2", address_id, AddressInput(street="Elm St"))

        (address,) = await addresses.list_addresses("user-1")
        assert address.street == "Main St"
        assert await addresses.list_addresses("user-2") == []
