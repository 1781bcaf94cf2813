"""Tests for missed dose detection in `circleage/core/adherence.py`."""

from datetime import datetime, time, timezone
from unittest.mock import AsyncMock
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from circleage.config import Settings
from circleage.core.adherence import MISSED_MEDICATION_ALERT, MedicationAdherenceService
from circleage.core.emergency_alert import EmergencyAlertService, NoEmergencyContactsError
from circleage.models.medication import Medication

SGT = ZoneInfo("Asia/Singapore")
NOON = datetime(2026, 3, 2, 12, 0, tzinfo=SGT)
CONFIG = Settings(MISSED_DOSE_THRESHOLD_MINUTES=120, TIMEZONE="Asia/Singapore")


async def add_medication(db: AsyncSession, name: str, timing: time, active: bool = True, user_id: int = 1) -> Medication:
    medication = Medication(name=name, dosage="1 tablet", timing=timing, active=active, user_id=user_id)
    db.add(medication)
    await db.commit()
    await db.refresh(medication)
    return medication


@pytest.fixture
def alerts() -> AsyncMock:
    return AsyncMock(spec=EmergencyAlertService)


@pytest.fixture
def service(alerts: AsyncMock) -> MedicationAdherenceService:
    return MedicationAdherenceService(alerts, CONFIG)


class TestFindOverdue:
    @pytest.mark.asyncio
    async def test_only_doses_past_threshold_are_overdue(
        self, db: AsyncSession, service: MedicationAdherenceService
    ) -> None:
        await add_medication(db, "Aspirin", time(9, 30))
        await add_medication(db, "Metformin", time(8, 0))
        await add_medication(db, "Vitamin D", time(11, 0))
        await add_medication(db, "Exactly two hours", time(10, 0))

        overdue = await service.find_overdue_medications(db, 1, NOON)

        assert [(m.name, m.minutes_late) for m in overdue] == [("Metformin", 240), ("Aspirin", 150)]

    @pytest.mark.asyncio
    async def test_dose_logged_today_is_not_overdue(
        self, db: AsyncSession, service: MedicationAdherenceService
    ) -> None:
        taken = await add_medication(db, "Metformin", time(8, 0))
        await add_medication(db, "Aspirin", time(8, 0))

        # 07:30 local is still the previous day in UTC
        await service.log_dose(db, taken, taken_at=datetime(2026, 3, 2, 7, 30, tzinfo=SGT))

        overdue = await service.find_overdue_medications(db, 1, NOON)

        assert [m.name for m in overdue] == ["Aspirin"]

    @pytest.mark.asyncio
    async def test_dose_logged_yesterday_does_not_count(
        self, db: AsyncSession, service: MedicationAdherenceService
    ) -> None:
        medication = await add_medication(db, "Metformin", time(8, 0))
        await service.log_dose(db, medication, taken_at=datetime(2026, 3, 1, 20, 0, tzinfo=SGT))

        overdue = await service.find_overdue_medications(db, 1, NOON)

        assert [m.name for m in overdue] == ["Metformin"]

    @pytest.mark.asyncio
    async def test_inactive_and_other_users_medications_are_ignored(
        self, db: AsyncSession, service: MedicationAdherenceService
    ) -> None:
        await add_medication(db, "Stopped", time(8, 0), active=False)
        await add_medication(db, "Someone else's", time(8, 0), user_id=2)

        assert await service.find_overdue_medications(db, 1, NOON) == []


class TestCheckAdherence:
    @pytest.mark.asyncio
    async def test_single_alert_names_every_overdue_dose(
        self, db: AsyncSession, service: MedicationAdherenceService, alerts: AsyncMock
    ) -> None:
        await add_medication(db, "Metformin", time(8, 0))
        await add_medication(db, "Aspirin", time(9, 30))

        overdue = await service.check_adherence(db, 1, NOON)

        assert len(overdue) == 2
        alerts.trigger_alert.assert_awaited_once()
        _, user_id, request = alerts.trigger_alert.await_args.args
        assert user_id == 1
        assert request.alert_type == MISSED_MEDICATION_ALERT
        assert request.message == "Medications missed for more than 2 hours: Metformin, Aspirin"

    @pytest.mark.asyncio
    async def test_nothing_overdue_sends_nothing(
        self, db: AsyncSession, service: MedicationAdherenceService, alerts: AsyncMock
    ) -> None:
        await add_medication(db, "Vitamin D", time(11, 0))

        assert await service.check_adherence(db, 1, NOON) == []
        alerts.trigger_alert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_contacts_propagate(self, db: AsyncSession) -> None:
        sms = AsyncMock()
        service = MedicationAdherenceService(EmergencyAlertService(sms_service=sms), CONFIG)
        await add_medication(db, "Metformin", time(8, 0))

        with pytest.raises(NoEmergencyContactsError):
            await service.check_adherence(db, 1, NOON)


class TestLogDose:
    @pytest.mark.asyncio
    async def test_naive_time_is_local_and_stored_in_utc(
        self, db: AsyncSession, service: MedicationAdherenceService
    ) -> None:
        medication = await add_medication(db, "Metformin", time(8, 0))

        log = await service.log_dose(db, medication, taken_at=datetime(2026, 3, 2, 8, 5), notes="with food")

        assert log.id is not None
        assert log.medication_id == medication.id
        assert log.user_id == 1
        assert log.notes == "with food"
        assert log.taken_at.replace(tzinfo=timezone.utc) == datetime(2026, 3, 2, 0, 5, tzinfo=timezone.utc)
