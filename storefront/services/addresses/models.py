"""Address models."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Address(BaseModel):
    """Delivery address as seen by the domain."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    label: Optional[str] = None
    recipient_name: Optional[str] = None
    phone: Optional[str] = None
    street: str = ""
    number: str = ""
    floor_door: Optional[str] = None
    city: str = ""
    province: Optional[str] = None
    postal_code: str = ""
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AddressInput(BaseModel):
    """Create/edit payload. Only non-null fields are written."""

    label: Optional[str] = None
    recipient_name: Optional[str] = None
    phone: Optional[str] = None
    street: Optional[str] = None
    number: Optional[str] = None
    floor_door: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    postal_code: Optional[str] = None
    notes: Optional[str] = None
