import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, desc

from circleage.core.contacts import EmergencyContactService, contact_service
from circleage.models.emergency import (
    AlertDispatchResult,
    AlertHistory,
    AlertRequest,
    AlertStatus,
    ContactNotificationResult,
    EmergencyContact,
    NotificationStatus
)
from circleage.utils.notifications import SMSService

logger = logging.getLogger(__name__)

class NoEmergencyContactsError(Exception):
    """Raised when an alert is triggered for a user without active contacts"""

    def __init__(self, message: str = "No emergency contacts found"):
        super().__init__(message)

class AlertNotFoundError(Exception):
    """Raised when an alert does not exist or belongs to another user"""

class EmergencyAlertService:
    def __init__(
        self,
        sms_service: Optional[SMSService] = None,
        contacts: EmergencyContactService = contact_service
    ):
        self.sms_service = sms_service or SMSService()
        self.contacts = contacts

    async def trigger_alert(
        self,
        db: AsyncSession,
        user_id: int,
        alert: AlertRequest
    ) -> AlertDispatchResult:
        """
        Record an alert and notify every active emergency contact by SMS

        Contacts are notified one after another, primary first. A failed send
        is recorded against that contact and the remaining contacts are still
        notified.
        """
        contacts = await self.contacts.list_active_contacts(db, user_id)
        if not contacts:
            raise NoEmergencyContactsError()

        # History captures the contacts considered, not the ones reached
        history = AlertHistory(
            user_id=user_id,
            alert_type=alert.alert_type,
            message=alert.message,
            medication_id=alert.medication_id,
            contacts_notified=len(contacts)
        )
        db.add(history)
        await db.commit()
        await db.refresh(history)

        logger.info(
            f"Alert {history.id} ({alert.alert_type}) triggered for user {user_id}, "
            f"notifying {len(contacts)} contact(s)"
        )

        results: List[ContactNotificationResult] = []
        for contact in contacts:
            results.append(await self._notify_contact(contact, alert))

        sent = sum(1 for result in results if result.status == NotificationStatus.SENT)
        logger.info(f"Alert {history.id}: {sent}/{len(results)} notifications sent")

        return AlertDispatchResult(
            alert_id=history.id,
            contacts_notified=len(contacts),
            results=results
        )

    async def _notify_contact(
        self,
        contact: EmergencyContact,
        alert: AlertRequest
    ) -> ContactNotificationResult:
        try:
            await self.sms_service.send_sms_alert(contact, alert)
            return ContactNotificationResult(
                contact_id=contact.id,
                name=contact.name,
                phone_number=contact.phone_number,
                status=NotificationStatus.SENT
            )
        except Exception as e:
            logger.warning(f"Failed to notify contact {contact.id}: {e}")
            return ContactNotificationResult(
                contact_id=contact.id,
                name=contact.name,
                phone_number=contact.phone_number,
                status=NotificationStatus.FAILED,
                error=str(e)
            )

    async def get_alert_history(
        self,
        db: AsyncSession,
        user_id: int,
        limit: int = 50,
        status: AlertStatus = AlertStatus.ALL
    ) -> List[AlertHistory]:
        """Alerts for a user, newest first, optionally only active or acknowledged ones"""
        statement = select(AlertHistory).where(AlertHistory.user_id == user_id)
        if status == AlertStatus.ACTIVE:
            statement = statement.where(AlertHistory.acknowledged == False)
        elif status == AlertStatus.ACKNOWLEDGED:
            statement = statement.where(AlertHistory.acknowledged == True)

        result = await db.execute(
            statement
            .order_by(desc(AlertHistory.triggered_at), desc(AlertHistory.id))
            .limit(limit)
        )
        return list(result.scalars().all())

    async def acknowledge_alert(
        self,
        db: AsyncSession,
        user_id: int,
        alert_id: int,
        notes: Optional[str] = None
    ) -> AlertHistory:
        """Mark one of the user's alerts as acknowledged"""
        result = await db.execute(
            select(AlertHistory).where(
                AlertHistory.id == alert_id,
                AlertHistory.user_id == user_id
            )
        )
        alert = result.scalar_one_or_none()
        if alert is None:
            raise AlertNotFoundError(f"Alert {alert_id} not found")

        alert.acknowledged = True
        alert.acknowledged_at = datetime.now(timezone.utc)
        alert.acknowledge_notes = notes

        db.add(alert)
        await db.commit()
        await db.refresh(alert)

        logger.info(f"Alert {alert_id} acknowledged by user {user_id}")
        return alert

# Global instance
emergency_service = EmergencyAlertService()
