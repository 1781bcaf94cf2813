from sqlmodel import SQLModel, Field, Column, DateTime
from pydantic import ValidationInfo, field_validator
from datetime import datetime, time, timezone
from typing import Any, Optional

class MedicationBase(SQLModel):
    name: str
    dosage: str
    frequency: str = "daily"
    timing: time  # scheduled time of day
    instructions: Optional[str] = None

class Medication(MedicationBase, table=True):

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True)
    active: bool = True
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True))
    )

class MedicationCreate(MedicationBase):
    pass

class MedicationUpdate(SQLModel):
    name: Optional[str] = None
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    timing: Optional[time] = None
    instructions: Optional[str] = None

    @field_validator("name", "dosage", "frequency", "timing")
    @classmethod
    def check_not_null(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value

class MedicationRead(MedicationBase):
    id: int
    user_id: int
    active: bool

class MedicationLog(SQLModel, table=True):

    id: Optional[int] = Field(default=None, primary_key=True)
    medication_id: int = Field(foreign_key="medication.id", index=True)
    user_id: int = Field(index=True)
    taken_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True))
    )
    notes: Optional[str] = None

class DoseLogRequest(SQLModel):
    taken_at: Optional[datetime] = None
    notes: Optional[str] = None

class OverdueMedication(SQLModel):
    """A scheduled dose that is past the threshold with nothing logged today"""
    medication_id: int
    name: str
    dosage: str
    timing: time
    minutes_late: int

class AdherenceCheckResponse(SQLModel):
    missed_medications: list[OverdueMedication]
    alert_triggered: bool
