from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import update
from sqlmodel import select

from circleage.models.emergency import (
    EmergencyContact,
    EmergencyContactCreate,
    EmergencyContactUpdate
)

class ContactNotFoundError(Exception):
    """Raised when a contact does not exist, is inactive or belongs to another user"""

class EmergencyContactService:
    """Emergency contact storage. Contacts are soft-deleted through is_active."""

    async def _clear_primary(self, db: AsyncSession, user_id: int, keep_id: Optional[int] = None):
        statement = (
            update(EmergencyContact)
            .where(EmergencyContact.user_id == user_id, EmergencyContact.is_primary == True)
            .values(is_primary=False)
        )
        if keep_id is not None:
            statement = statement.where(EmergencyContact.id != keep_id)
        await db.execute(statement)

    async def create_contact(
        self,
        db: AsyncSession,
        user_id: int,
        contact_data: EmergencyContactCreate
    ) -> EmergencyContact:
        # Only one primary contact per user
        if contact_data.is_primary:
            await self._clear_primary(db, user_id)

        contact = EmergencyContact(**contact_data.model_dump(), user_id=user_id)
        db.add(contact)
        await db.commit()
        await db.refresh(contact)
        return contact

    async def list_active_contacts(self, db: AsyncSession, user_id: int) -> List[EmergencyContact]:
        """Active contacts, primary first then by name"""
        result = await db.execute(
            select(EmergencyContact)
            .where(
                EmergencyContact.user_id == user_id,
                EmergencyContact.is_active == True
            )
            .order_by(EmergencyContact.is_primary.desc(), EmergencyContact.name.asc())
        )
        return list(result.scalars().all())

    async def get_contact(self, db: AsyncSession, user_id: int, contact_id: int) -> EmergencyContact:
        result = await db.execute(
            select(EmergencyContact).where(
                EmergencyContact.id == contact_id,
                EmergencyContact.user_id == user_id,
                EmergencyContact.is_active == True
            )
        )
        contact = result.scalar_one_or_none()
        if contact is None:
            raise ContactNotFoundError(f"Emergency contact {contact_id} not found")
        return contact

    async def update_contact(
        self,
        db: AsyncSession,
        user_id: int,
        contact_id: int,
        contact_data: EmergencyContactUpdate
    ) -> EmergencyContact:
        contact = await self.get_contact(db, user_id, contact_id)

        changes = contact_data.model_dump(exclude_unset=True)
        if changes.get("is_primary"):
            await self._clear_primary(db, user_id, keep_id=contact.id)

        for field, value in changes.items():
            setattr(contact, field, value)
        contact.updated_at = datetime.now(timezone.utc)

        db.add(contact)
        await db.commit()
        await db.refresh(contact)
        return contact

    async def deactivate_contact(self, db: AsyncSession, user_id: int, contact_id: int) -> EmergencyContact:
        contact = await self.get_contact(db, user_id, contact_id)

        contact.is_active = False
        contact.is_primary = False
        contact.updated_at = datetime.now(timezone.utc)

        db.add(contact)
        await db.commit()
        await db.refresh(contact)
        return contact

contact_service = EmergencyContactService()
