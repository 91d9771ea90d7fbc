"""Address directory: live addresses and the profile default."""
import logging
import uuid
from abc import ABC, abstractmethod
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.core.errors import AddressNotFoundError
from storefront.db.models import Address as AddressRecord
from storefront.db.models import UserProfile
from storefront.services.addresses.models import Address, AddressInput

logger = logging.getLogger(__name__)


class AddressDirectory(ABC):
    """Read side used by checkout."""

    @abstractmethod
    async def list_addresses(self, user_id: str) -> List[Address]:
        """Latest known addresses of the user."""
        pass

    @abstractmethod
    async def default_address_id(self, user_id: str) -> Optional[str]:
        """Default address id from the user's profile, if any."""
        pass


class SqlAddressDirectory(AddressDirectory):
    """Addresses and profile defaults stored with SQLAlchemy."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def list_addresses(self, user_id: str) -> List[Address]:
        async with self.session_factory() as db:
            result = await db.execute(
                select(AddressRecord)
                .where(AddressRecord.user_id == user_id)
                .order_by(AddressRecord.created_at, AddressRecord.id)
            )
            return [Address.model_validate(r) for r in result.scalars().all()]

    async def default_address_id(self, user_id: str) -> Optional[str]:
        async with self.session_factory() as db:
            profile = await db.get(UserProfile, user_id)
            return profile.default_address_id if profile else None

    async def address_exists(self, user_id: str, address_id: str) -> bool:
        """Check that the address exists and belongs to the user."""
        async with self.session_factory() as db:
            return await self._get_owned(db, user_id, address_id) is not None

    async def upsert_address(
        self, user_id: str, address_id: Optional[str], data: AddressInput
    ) -> str:
        """
        Create or merge-update an address.

        Args:
            user_id: Owner of the address
            address_id: None to create, an id to update (or create with that id)
            data: Fields to write; None values leave stored values untouched

        Returns:
            The address id

        Raises:
            AddressNotFoundError: when the id belongs to another user
        """
        fields = data.model_dump(exclude_none=True)
        async with self.session_factory() as db:
            record = None
            if address_id is not None:
                record = await db.get(AddressRecord, address_id)
                if record is not None and record.user_id != user_id:
                    raise AddressNotFoundError(user_id, address_id)
            if record is None:
                record = AddressRecord(id=address_id or str(uuid.uuid4()), user_id=user_id)
                db.add(record)
                logger.info(f"[ADDRESSES] Creating address {record.id} for user {user_id}")
            for name, value in fields.items():
                setattr(record, name, value)
            await db.commit()
            return record.id

    async def delete_address(self, user_id: str, address_id: str) -> None:
        """Delete an address, clearing the profile default in the same transaction."""
        async with self.session_factory() as db:
            async with db.begin():
                record = await self._get_owned(db, user_id, address_id)
                if record is None:
                    return
                await db.delete(record)
                profile = await db.get(UserProfile, user_id)
                if profile is not None and profile.default_address_id == address_id:
                    profile.default_address_id = None
                    logger.info(
                        f"[ADDRESSES] Cleared default address of user {user_id}"
                    )
        logger.info(f"[ADDRESSES] Deleted address {address_id} of user {user_id}")

    async def set_default_address(self, user_id: str, address_id: str) -> None:
        """Point the profile's default at an existing address."""
        async with self.session_factory() as db:
            async with db.begin():
                if await self._get_owned(db, user_id, address_id) is None:
                    raise AddressNotFoundError(user_id, address_id)
                profile = await db.get(UserProfile, user_id)
                if profile is None:
                    profile = UserProfile(user_id=user_id)
                    db.add(profile)
                profile.default_address_id = address_id

    async def _get_owned(
        self, db: AsyncSession, user_id: str, address_id: str
    ) -> Optional[AddressRecord]:
        record = await db.get(AddressRecord, address_id)
        if record is None or record.user_id != user_id:
            return None
        return record
