"""Checkout orchestration: one cart, one order, one submission at a time."""
import asyncio
import logging
from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel

from storefront.core.errors import OrderPermissionDenied, OrderValidationFailed
from storefront.services.addresses.directory import AddressDirectory
from storefront.services.addresses.models import Address
from storefront.services.cart.store import CartStore
from storefront.services.identity import IdentityProvider
from storefront.services.order_session.store import OrderSessionStore
from storefront.services.ordering.models import FulfillmentMode
from storefront.services.persistence.orders import OrderSubmitter

logger = logging.getLogger(__name__)

EMPTY_CART_MESSAGE = "Your cart is empty."
NO_MODE_MESSAGE = "Choose pickup or delivery before checking out."
NOT_SIGNED_IN_MESSAGE = "Sign in to place a delivery order."
NO_VALID_ADDRESS_MESSAGE = "No valid delivery address. Add an address to continue."
REJECTED_MESSAGE = "Could not place the order. Check the mode and the delivery address."
FALLBACK_MESSAGE = "Could not place the order."


class CheckoutFailureReason(str, Enum):
    """Why a checkout attempt ended without an order."""

    EMPTY_CART = "empty_cart"
    NO_MODE = "no_mode"
    NOT_SIGNED_IN = "not_signed_in"
    NO_VALID_ADDRESS = "no_valid_address"
    SUBMISSION_FAILED = "submission_failed"


class CheckoutSucceeded(BaseModel):
    """The order was created."""

    kind: Literal["success"] = "success"
    order_id: str


class CheckoutFailed(BaseModel):
    """The attempt failed; the cart is left as it was."""

    kind: Literal["error"] = "error"
    reason: CheckoutFailureReason
    message: str


CheckoutEvent = Union[CheckoutSucceeded, CheckoutFailed]


class _CheckoutAborted(Exception):
    def __init__(self, reason: CheckoutFailureReason, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message


def resolve_delivery_address(
    session_address_id: Optional[str],
    default_address_id: Optional[str],
    addresses: List[Address],
) -> Optional[str]:
    """
    Pick the address a delivery order should use.

    Priority: the session's address, then the profile default, then the
    first known address. Ids that no longer exist are skipped.
    """
    live_ids = [address.id for address in addresses]
    if session_address_id is not None and session_address_id in live_ids:
        return session_address_id
    if default_address_id is not None and default_address_id in live_ids:
        return default_address_id
    if live_ids:
        return live_ids[0]
    return None


class CheckoutOrchestrator:
    """
    Turns the cart and the order session into exactly one submitted order.

    Only one attempt runs at a time; a call made while another is in
    flight is dropped and returns None. Once started, an attempt runs to
    completion even if the caller is cancelled. Outcomes are returned and
    also put on ``events`` for observers.
    """

    def __init__(
        self,
        cart: CartStore,
        session: OrderSessionStore,
        addresses: AddressDirectory,
        submitter: OrderSubmitter,
        identity: IdentityProvider,
        event_buffer: int = 16,
    ):
        self.cart = cart
        self.session = session
        self.addresses = addresses
        self.submitter = submitter
        self.identity = identity
        self.events: "asyncio.Queue[CheckoutEvent]" = asyncio.Queue(maxsize=event_buffer)
        self._lock = asyncio.Lock()
        self._attempt: Optional["asyncio.Task[CheckoutEvent]"] = None

    @property
    def in_flight(self) -> bool:
        return self._lock.locked()

    async def checkout(self) -> Optional[CheckoutEvent]:
        """
        Run one checkout attempt.

        Returns:
            The outcome event, or None when another attempt was in flight
        """
        if self._lock.locked():
            logger.warning("[CHECKOUT] Attempt dropped, another checkout is in flight")
            return None

        # Uncontended, so this acquires without yielding
        await self._lock.acquire()
        self._attempt = asyncio.create_task(self._attempt_checkout())
        return await asyncio.shield(self._attempt)

    async def _attempt_checkout(self) -> CheckoutEvent:
        try:
            event = await self._run()
            self._emit(event)
            return event
        finally:
            self._lock.release()

    async def next_event(self) -> CheckoutEvent:
        """Wait for the next checkout outcome."""
        return await self.events.get()

    async def _run(self) -> CheckoutEvent:
        try:
            order_id = await self._submit()
        except _CheckoutAborted as e:
            logger.info(f"[CHECKOUT] Aborted - reason: {e.reason.value}")
            return CheckoutFailed(reason=e.reason, message=e.message)
        except (OrderPermissionDenied, OrderValidationFailed) as e:
            logger.warning(f"[CHECKOUT] Order rejected - {type(e).__name__}: {e}")
            return CheckoutFailed(
                reason=CheckoutFailureReason.SUBMISSION_FAILED,
                message=REJECTED_MESSAGE,
            )
        except Exception as e:
            logger.error(
                f"[CHECKOUT] Submission failed - {type(e).__name__}: {e}", exc_info=True
            )
            return CheckoutFailed(
                reason=CheckoutFailureReason.SUBMISSION_FAILED,
                message=str(e) or FALLBACK_MESSAGE,
            )

        self.cart.clear()
        logger.info(f"[CHECKOUT] Order placed - id: {order_id}")
        return CheckoutSucceeded(order_id=order_id)

    async def _submit(self) -> str:
        # Snapshots are taken here, once the lock is held
        cart = self.cart.state
        context = self.session.context

        if cart.is_empty:
            raise _CheckoutAborted(CheckoutFailureReason.EMPTY_CART, EMPTY_CART_MESSAGE)
        if context.mode is None:
            raise _CheckoutAborted(CheckoutFailureReason.NO_MODE, NO_MODE_MESSAGE)

        user_id = self.identity.current_user_id()
        address_id: Optional[str] = None
        if context.mode is FulfillmentMode.DELIVERY:
            address_id = await self._reconcile_address(user_id, context.address_id)

        logger.info(
            f"[CHECKOUT] Submitting - mode: {context.mode.value}, address: {address_id}, "
            f"lines: {len(cart.items)}, total: {cart.total_cents}"
        )
        return await self.submitter.submit(cart, context.mode, address_id, user_id=user_id)

    async def _reconcile_address(
        self, user_id: Optional[str], session_address_id: Optional[str]
    ) -> str:
        if not user_id:
            raise _CheckoutAborted(CheckoutFailureReason.NOT_SIGNED_IN, NOT_SIGNED_IN_MESSAGE)

        addresses = await self.addresses.list_addresses(user_id)
        default_id = await self.addresses.default_address_id(user_id)
        resolved = resolve_delivery_address(session_address_id, default_id, addresses)
        if resolved is None:
            raise _CheckoutAborted(
                CheckoutFailureReason.NO_VALID_ADDRESS, NO_VALID_ADDRESS_MESSAGE
            )

        if resolved != session_address_id:
            logger.info(
                f"[CHECKOUT] Session address {session_address_id} replaced by {resolved}"
            )
            await self.session.start_order(FulfillmentMode.DELIVERY, resolved)
        return resolved

    def _emit(self, event: CheckoutEvent) -> None:
        if self.events.full():
            # Nobody is draining; keep the newest outcomes
            self.events.get_nowait()
        self.events.put_nowait(event)
