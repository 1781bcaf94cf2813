from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Any, List, Optional

from circleage.database import SessionDep
from circleage.models.emergency import (
    AlertAcknowledgeRequest,
    AlertDispatchResult,
    AlertHistoryRead,
    AlertRequest,
    AlertStatus,
    EmergencyContactCreate,
    EmergencyContactRead,
    EmergencyContactUpdate
)
from circleage.api.auth import get_current_user_id
from circleage.api.medication import get_medication_service
from circleage.core.contacts import ContactNotFoundError, EmergencyContactService, contact_service
from circleage.core.emergency_alert import (
    AlertNotFoundError,
    EmergencyAlertService,
    NoEmergencyContactsError,
    emergency_service
)
from circleage.core.medications import MedicationNotFoundError, MedicationService

router = APIRouter()

def get_contact_service() -> EmergencyContactService:
    return contact_service

def get_alert_service() -> EmergencyAlertService:
    return emergency_service

@router.post("/contacts", response_model=EmergencyContactRead, status_code=status.HTTP_201_CREATED)
async def create_contact(
    db: SessionDep,
    contact_data: EmergencyContactCreate,
    user_id: int = Depends(get_current_user_id),
    contacts: EmergencyContactService = Depends(get_contact_service)
):
    return await contacts.create_contact(db, user_id, contact_data)

@router.get("/contacts", response_model=List[EmergencyContactRead])
async def list_contacts(
    db: SessionDep,
    user_id: int = Depends(get_current_user_id),
    contacts: EmergencyContactService = Depends(get_contact_service)
):
    return await contacts.list_active_contacts(db, user_id)

@router.get("/contacts/{contact_id}", response_model=EmergencyContactRead)
async def get_contact(
    db: SessionDep,
    contact_id: int,
    user_id: int = Depends(get_current_user_id),
    contacts: EmergencyContactService = Depends(get_contact_service)
):
    try:
        return await contacts.get_contact(db, user_id, contact_id)
    except ContactNotFoundError:
        raise HTTPException(status_code=404, detail="Emergency contact not found")

@router.put("/contacts/{contact_id}", response_model=EmergencyContactRead)
async def update_contact(
    db: SessionDep,
    contact_id: int,
    contact_data: EmergencyContactUpdate,
    user_id: int = Depends(get_current_user_id),
    contacts: EmergencyContactService = Depends(get_contact_service)
):
    if not contact_data.model_dump(exclude_unset=True):
        raise HTTPException(status_code=400, detail="At least one field must be provided for update")

    try:
        return await contacts.update_contact(db, user_id, contact_id, contact_data)
    except ContactNotFoundError:
        raise HTTPException(status_code=404, detail="Emergency contact not found")

@router.delete("/contacts/{contact_id}")
async def delete_contact(
    db: SessionDep,
    contact_id: int,
    user_id: int = Depends(get_current_user_id),
    contacts: EmergencyContactService = Depends(get_contact_service)
) -> dict[str, str]:
    try:
        await contacts.deactivate_contact(db, user_id, contact_id)
    except ContactNotFoundError:
        raise HTTPException(status_code=404, detail="Emergency contact not found")

    return {"message": "Emergency contact deleted successfully"}

@router.post("/alerts", response_model=AlertDispatchResult)
async def trigger_emergency_alert(
    db: SessionDep,
    alert: AlertRequest,
    user_id: int = Depends(get_current_user_id),
    alerts: EmergencyAlertService = Depends(get_alert_service),
    medications: MedicationService = Depends(get_medication_service)
):
    if alert.medication_id is not None:
        try:
            await medications.get_medication(db, user_id, alert.medication_id)
        except MedicationNotFoundError:
            raise HTTPException(status_code=404, detail="Medication not found")

    try:
        return await alerts.trigger_alert(db, user_id, alert)
    except NoEmergencyContactsError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.get("/alerts/history")
async def get_alert_history(
    db: SessionDep,
    limit: int = 50,
    status_filter: AlertStatus = Query(AlertStatus.ALL, alias="status"),
    user_id: int = Depends(get_current_user_id),
    alerts: EmergencyAlertService = Depends(get_alert_service)
) -> dict[str, Any]:
    history = await alerts.get_alert_history(db, user_id, limit=min(max(limit, 1), 200), status=status_filter)
    return {"history": [AlertHistoryRead.model_validate(entry) for entry in history]}

@router.post("/alerts/{alert_id}/acknowledge", response_model=AlertHistoryRead)
async def acknowledge_alert(
    db: SessionDep,
    alert_id: int,
    acknowledgement: Optional[AlertAcknowledgeRequest] = None,
    user_id: int = Depends(get_current_user_id),
    alerts: EmergencyAlertService = Depends(get_alert_service)
):
    notes = acknowledgement.notes if acknowledgement else None
    try:
        return await alerts.acknowledge_alert(db, user_id, alert_id, notes=notes)
    except AlertNotFoundError:
        raise HTTPException(status_code=404, detail="Alert not found")
