"""Order session models."""
from typing import Optional

from pydantic import BaseModel, ConfigDict

from storefront.services.ordering.models import FulfillmentMode


class OrderContext(BaseModel):
    """
    What the user is currently trying to do.

    ``browsing_only`` means the user is just looking; with DELIVERY the
    address may stay unset until checkout.
    """

    model_config = ConfigDict(frozen=True)

    mode: Optional[FulfillmentMode] = None
    address_id: Optional[str] = None
    browsing_only: bool = False

    @property
    def is_active(self) -> bool:
        """True when an order is in progress and has what it needs."""
        if self.browsing_only or self.mode is None:
            return False
        if self.mode is FulfillmentMode.DELIVERY:
            return self.address_id is not None
        return True
