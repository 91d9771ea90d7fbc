"""Address book API endpoints."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from storefront.core.dependencies import Services, get_current_user_id, get_services
from storefront.core.errors import AddressNotFoundError
from storefront.services.addresses.models import Address, AddressInput

router = APIRouter()
logger = logging.getLogger(__name__)


class AddressBookResponse(BaseModel):
    """User's addresses and which one is the default."""

    addresses: List[Address]
    default_address_id: Optional[str] = None


def _require_user(user_id: Optional[str]) -> str:
    if not user_id:
        raise HTTPException(status_code=401, detail="Sign in to manage addresses")
    return user_id


@router.get("/api/addresses", response_model=AddressBookResponse)
async def list_addresses(
    user_id: Optional[str] = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    """List the signed-in user's addresses."""
    user_id = _require_user(user_id)
    return AddressBookResponse(
        addresses=await services.addresses.list_addresses(user_id),
        default_address_id=await services.addresses.default_address_id(user_id),
    )


@router.post("/api/addresses", response_model=Address)
async def create_address(
    body: AddressInput,
    user_id: Optional[str] = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    """Create an address."""
    user_id = _require_user(user_id)
    address_id = await services.addresses.upsert_address(user_id, None, body)
    return await _get_address(services, user_id, address_id)


@router.put("/api/addresses/{address_id}", response_model=Address)
async def update_address(
    address_id: str,
    body: AddressInput,
    user_id: Optional[str] = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    """Merge-update an address (created if missing)."""
    user_id = _require_user(user_id)
    try:
        await services.addresses.upsert_address(user_id, address_id, body)
    except AddressNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return await _get_address(services, user_id, address_id)


@router.delete("/api/addresses/{address_id}")
async def delete_address(
    address_id: str,
    user_id: Optional[str] = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    """Delete an address; clears the default if it pointed here."""
    user_id = _require_user(user_id)
    await services.addresses.delete_address(user_id, address_id)
    return {"deleted": address_id}


@router.put("/api/addresses/{address_id}/default", response_model=AddressBookResponse)
async def set_default_address(
    address_id: str,
    user_id: Optional[str] = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    """Make an address the profile default."""
    user_id = _require_user(user_id)
    try:
        await services.addresses.set_default_address(user_id, address_id)
    except AddressNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return await list_addresses(user_id=user_id, services=services)


async def _get_address(services: Services, user_id: str, address_id: str) -> Address:
    for address in await services.addresses.list_addresses(user_id):
        if address.id == address_id:
            return address
    raise HTTPException(status_code=404, detail=f"Address '{address_id}' not found")
