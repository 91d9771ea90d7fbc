"""Storefront exception hierarchy."""


class StorefrontError(Exception):
    """Base class for storefront errors."""


class OrderSubmissionError(StorefrontError):
    """The order backend rejected a submission."""


class OrderPermissionDenied(OrderSubmissionError):
    """The current user may not place this order."""


class OrderValidationFailed(OrderSubmissionError):
    """The order document failed backend validation (mode, address, ...)."""


class AddressNotFoundError(StorefrontError):
    """An address id does not exist for the given user."""

    def __init__(self, user_id: str, address_id: str):
        super().__init__(f"Address '{address_id}' not found for user '{user_id}'")
        self.user_id = user_id
        self.address_id = address_id


class CatalogItemNotFoundError(StorefrontError):
    """A product or menu id is not in the catalog."""

    def __init__(self, kind: str, item_id: str):
        super().__init__(f"{kind} '{item_id}' not found")
        self.kind = kind
        self.item_id = item_id
