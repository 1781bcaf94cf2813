from typing import List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from circleage.models.medication import Medication, MedicationCreate, MedicationUpdate

class MedicationNotFoundError(Exception):
    """Raised when a medication does not exist, is inactive or belongs to another user"""

class MedicationService:
    """Medication schedules. Deleting a medication only deactivates it."""

    async def create_medication(
        self,
        db: AsyncSession,
        user_id: int,
        medication_data: MedicationCreate
    ) -> Medication:
        medication = Medication(**medication_data.model_dump(), user_id=user_id)
        db.add(medication)
        await db.commit()
        await db.refresh(medication)
        return medication

    async def list_active_medications(self, db: AsyncSession, user_id: int) -> List[Medication]:
        """Active medications ordered by time of day"""
        result = await db.execute(
            select(Medication)
            .where(Medication.user_id == user_id, Medication.active == True)
            .order_by(Medication.timing)
        )
        return list(result.scalars().all())

    async def get_medication(self, db: AsyncSession, user_id: int, medication_id: int) -> Medication:
        result = await db.execute(
            select(Medication).where(
                Medication.id == medication_id,
                Medication.user_id == user_id,
                Medication.active == True
            )
        )
        medication = result.scalar_one_or_none()
        if medication is None:
            raise MedicationNotFoundError(f"Medication {medication_id} not found")
        return medication

    async def update_medication(
        self,
        db: AsyncSession,
        user_id: int,
        medication_id: int,
        medication_data: MedicationUpdate
    ) -> Medication:
        medication = await self.get_medication(db, user_id, medication_id)

        for field, value in medication_data.model_dump(exclude_unset=True).items():
            setattr(medication, field, value)

        db.add(medication)
        await db.commit()
        await db.refresh(medication)
        return medication

    async def deactivate_medication(self, db: AsyncSession, user_id: int, medication_id: int) -> Medication:
        medication = await self.get_medication(db, user_id, medication_id)

        medication.active = False

        db.add(medication)
        await db.commit()
        await db.refresh(medication)
        return medication

medication_service = MedicationService()
