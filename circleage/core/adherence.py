import logging
from datetime import datetime, time, timedelta, timezone
from typing import List, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, and_

from circleage.config import Settings, settings
from circleage.core.emergency_alert import EmergencyAlertService, emergency_service
from circleage.models.emergency import AlertRequest
from circleage.models.medication import Medication, MedicationLog, OverdueMedication

logger = logging.getLogger(__name__)

MISSED_MEDICATION_ALERT = "missed_medication"

class MedicationAdherenceService:
    """Detects doses missed today and escalates them to emergency contacts"""

    def __init__(self, alert_service: EmergencyAlertService, config: Settings = settings):
        self.alert_service = alert_service
        self.threshold_minutes = config.MISSED_DOSE_THRESHOLD_MINUTES
        self.tz = ZoneInfo(config.TIMEZONE)

    def _local_now(self, now: Optional[datetime]) -> datetime:
        if now is None:
            return datetime.now(self.tz)
        if now.tzinfo is None:
            return now.replace(tzinfo=self.tz)
        return now.astimezone(self.tz)

    async def find_overdue_medications(
        self,
        db: AsyncSession,
        user_id: int,
        now: Optional[datetime] = None
    ) -> List[OverdueMedication]:
        """
        Active medications with no dose logged today whose scheduled time
        passed more than the threshold ago
        """
        now = self._local_now(now)
        day_start = datetime.combine(now.date(), time.min, tzinfo=self.tz)
        # Logs are stored in UTC
        window_start = day_start.astimezone(timezone.utc)
        window_end = (day_start + timedelta(days=1)).astimezone(timezone.utc)

        result = await db.execute(
            select(Medication)
            .outerjoin(
                MedicationLog,
                and_(
                    MedicationLog.medication_id == Medication.id,
                    MedicationLog.taken_at >= window_start,
                    MedicationLog.taken_at < window_end
                )
            )
            .where(
                Medication.user_id == user_id,
                Medication.active == True,
                MedicationLog.id == None
            )
            .order_by(Medication.timing)
        )

        overdue: List[OverdueMedication] = []
        for medication in result.scalars().all():
            scheduled = datetime.combine(now.date(), medication.timing, tzinfo=self.tz)
            minutes_late = int((now - scheduled).total_seconds() // 60)

            if minutes_late > self.threshold_minutes:
                overdue.append(OverdueMedication(
                    medication_id=medication.id,
                    name=medication.name,
                    dosage=medication.dosage,
                    timing=medication.timing,
                    minutes_late=minutes_late
                ))

        return overdue

    async def check_adherence(
        self,
        db: AsyncSession,
        user_id: int,
        now: Optional[datetime] = None
    ) -> List[OverdueMedication]:
        """
        Find overdue doses and raise a single missed_medication alert for them

        Errors from the alert dispatch (including a user without emergency
        contacts) propagate to the caller.
        """
        overdue = await self.find_overdue_medications(db, user_id, now)

        if overdue:
            names = ", ".join(medication.name for medication in overdue)
            logger.info(f"User {user_id} has {len(overdue)} overdue medication(s): {names}")

            await self.alert_service.trigger_alert(
                db,
                user_id,
                AlertRequest(
                    alert_type=MISSED_MEDICATION_ALERT,
                    message=f"Medications missed for more than {self.threshold_minutes / 60:g} hours: {names}"
                )
            )

        return overdue

    async def log_dose(
        self,
        db: AsyncSession,
        medication: Medication,
        taken_at: Optional[datetime] = None,
        notes: Optional[str] = None
    ) -> MedicationLog:
        """Record a dose as taken"""
        taken_at = self._local_now(taken_at).astimezone(timezone.utc)

        log = MedicationLog(
            medication_id=medication.id,
            user_id=medication.user_id,
            taken_at=taken_at,
            notes=notes
        )
        db.add(log)
        await db.commit()
        await db.refresh(log)
        return log

# Global instance
adherence_service = MedicationAdherenceService(emergency_service)
