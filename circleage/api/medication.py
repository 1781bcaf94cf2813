from fastapi import APIRouter, Depends, HTTPException, status
from typing import Any, List

from circleage.database import SessionDep
from circleage.models.medication import (
    AdherenceCheckResponse,
    DoseLogRequest,
    MedicationCreate,
    MedicationRead,
    MedicationUpdate
)
from circleage.api.auth import get_current_user_id
from circleage.core.adherence import MedicationAdherenceService, adherence_service
from circleage.core.emergency_alert import NoEmergencyContactsError
from circleage.core.medications import MedicationNotFoundError, MedicationService, medication_service

router = APIRouter()

def get_medication_service() -> MedicationService:
    return medication_service

def get_adherence_service() -> MedicationAdherenceService:
    return adherence_service

@router.post("", response_model=MedicationRead, status_code=status.HTTP_201_CREATED)
async def create_medication(
    db: SessionDep,
    medication_data: MedicationCreate,
    user_id: int = Depends(get_current_user_id),
    medications: MedicationService = Depends(get_medication_service)
):
    return await medications.create_medication(db, user_id, medication_data)

@router.get("", response_model=List[MedicationRead])
async def list_medications(
    db: SessionDep,
    user_id: int = Depends(get_current_user_id),
    medications: MedicationService = Depends(get_medication_service)
):
    return await medications.list_active_medications(db, user_id)

@router.post("/adherence/check", response_model=AdherenceCheckResponse)
async def check_medication_adherence(
    db: SessionDep,
    user_id: int = Depends(get_current_user_id),
    adherence: MedicationAdherenceService = Depends(get_adherence_service)
):
    try:
        missed = await adherence.check_adherence(db, user_id)
    except NoEmergencyContactsError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return AdherenceCheckResponse(missed_medications=missed, alert_triggered=bool(missed))

@router.get("/{medication_id}", response_model=MedicationRead)
async def get_medication(
    db: SessionDep,
    medication_id: int,
    user_id: int = Depends(get_current_user_id),
    medications: MedicationService = Depends(get_medication_service)
):
    try:
        return await medications.get_medication(db, user_id, medication_id)
    except MedicationNotFoundError:
        raise HTTPException(status_code=404, detail="Medication not found")

@router.put("/{medication_id}", response_model=MedicationRead)
async def update_medication(
    db: SessionDep,
    medication_id: int,
    medication_data: MedicationUpdate,
    user_id: int = Depends(get_current_user_id),
    medications: MedicationService = Depends(get_medication_service)
):
    if not medication_data.model_dump(exclude_unset=True):
        raise HTTPException(status_code=400, detail="At least one field must be provided for update")

    try:
        return await medications.update_medication(db, user_id, medication_id, medication_data)
    except MedicationNotFoundError:
        raise HTTPException(status_code=404, detail="Medication not found")

@router.delete("/{medication_id}")
async def delete_medication(
    db: SessionDep,
    medication_id: int,
    user_id: int = Depends(get_current_user_id),
    medications: MedicationService = Depends(get_medication_service)
) -> dict[str, str]:
    try:
        await medications.deactivate_medication(db, user_id, medication_id)
    except MedicationNotFoundError:
        raise HTTPException(status_code=404, detail="Medication not found")

    return {"message": "Medication deleted successfully"}

@router.post("/{medication_id}/taken")
async def log_medication_taken(
    db: SessionDep,
    medication_id: int,
    dose: DoseLogRequest,
    user_id: int = Depends(get_current_user_id),
    medications: MedicationService = Depends(get_medication_service),
    adherence: MedicationAdherenceService = Depends(get_adherence_service)
) -> dict[str, Any]:
    try:
        medication = await medications.get_medication(db, user_id, medication_id)
    except MedicationNotFoundError:
        raise HTTPException(status_code=404, detail="Medication not found")

    log = await adherence.log_dose(db, medication, taken_at=dose.taken_at, notes=dose.notes)

    return {
        "message": "Medication marked as taken",
        "log_id": log.id,
        "taken_at": log.taken_at
    }
