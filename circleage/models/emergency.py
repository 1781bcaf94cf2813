from sqlmodel import SQLModel, Field, Column, DateTime, JSON
from pydantic import ValidationInfo, field_validator
from datetime import datetime, timezone
from typing import Any, List, Optional
from enum import Enum
import re

RELATIONSHIPS = [
    "spouse", "child", "parent", "sibling", "relative", "friend",
    "neighbor", "caregiver", "doctor", "nurse", "social_worker"
]

# Singapore numbers: optional +65 followed by 8 digits starting with 6, 8 or 9
SG_PHONE_PATTERN = re.compile(r"^(\+65)?[689]\d{7}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

def _validate_name(value: str) -> str:
    value = value.strip()
    if len(value) < 2:
        raise ValueError("Contact name must be at least 2 characters long")
    if len(value) > 100:
        raise ValueError("Contact name must not exceed 100 characters")
    return value

def _validate_relationship(value: str) -> str:
    if value not in RELATIONSHIPS:
        raise ValueError("Valid relationship is required. Options: " + ", ".join(RELATIONSHIPS))
    return value

def _validate_phone(value: str) -> str:
    cleaned = re.sub(r"[\s\-\(\)]", "", value)
    if not SG_PHONE_PATTERN.match(cleaned):
        raise ValueError("Invalid Singapore phone number format. Use format: +6591234567 or 91234567")
    return cleaned

def _not_null(value: Any, field_name: str) -> Any:
    if value is None:
        raise ValueError(f"{field_name} cannot be null")
    return value

def _validate_email(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return None
    if len(value) > 255:
        raise ValueError("Email must not exceed 255 characters")
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Invalid email format")
    return value

class EmergencyContactBase(SQLModel):
    name: str
    relationship: str
    phone_number: str
    email: Optional[str] = None
    is_primary: bool = False
    alert_preferences: Optional[dict[str, Any]] = None

class EmergencyContact(EmergencyContactBase, table=True):

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True)
    alert_preferences: Optional[dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    is_active: bool = True
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True))
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True))
    )

class EmergencyContactCreate(EmergencyContactBase):

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return _validate_name(value)

    @field_validator("relationship")
    @classmethod
    def check_relationship(cls, value: str) -> str:
        return _validate_relationship(value)

    @field_validator("phone_number")
    @classmethod
    def check_phone(cls, value: str) -> str:
        return _validate_phone(value)

    @field_validator("email")
    @classmethod
    def check_email(cls, value: Optional[str]) -> Optional[str]:
        return _validate_email(value)

class EmergencyContactUpdate(SQLModel):
    name: Optional[str] = None
    relationship: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    is_primary: Optional[bool] = None
    alert_preferences: Optional[dict[str, Any]] = None

    # Omitted means unchanged; an explicit null cannot clear a required column
    @field_validator("is_primary")
    @classmethod
    def check_is_primary(cls, value: Optional[bool], info: ValidationInfo) -> bool:
        return _not_null(value, info.field_name)

    @field_validator("name")
    @classmethod
    def check_name(cls, value: Optional[str], info: ValidationInfo) -> str:
        return _validate_name(_not_null(value, info.field_name))

    @field_validator("relationship")
    @classmethod
    def check_relationship(cls, value: Optional[str], info: ValidationInfo) -> str:
        return _validate_relationship(_not_null(value, info.field_name))

    @field_validator("phone_number")
    @classmethod
    def check_phone(cls, value: Optional[str], info: ValidationInfo) -> str:
        return _validate_phone(_not_null(value, info.field_name))

    @field_validator("email")
    @classmethod
    def check_email(cls, value: Optional[str]) -> Optional[str]:
        return _validate_email(value)

class EmergencyContactRead(EmergencyContactBase):
    id: int
    user_id: int
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime]

class AlertHistoryBase(SQLModel):
    alert_type: str
    message: str
    medication_id: Optional[int] = None

class AlertHistory(AlertHistoryBase, table=True):

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True)
    contacts_notified: int = 0
    acknowledged: bool = False
    acknowledged_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True))
    )
    acknowledge_notes: Optional[str] = None
    triggered_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True))
    )

class AlertHistoryRead(AlertHistoryBase):
    id: int
    user_id: int
    contacts_notified: int
    acknowledged: bool
    acknowledged_at: Optional[datetime] = None
    acknowledge_notes: Optional[str] = None
    triggered_at: datetime

class AlertStatus(str, Enum):
    ALL = "all"
    ACTIVE = "active"  # not yet acknowledged
    ACKNOWLEDGED = "acknowledged"

class AlertAcknowledgeRequest(SQLModel):
    notes: Optional[str] = Field(default=None, max_length=500)

class AlertRequest(SQLModel):
    alert_type: str = "emergency"  # emergency, missed_medication, health_concern
    message: str
    medication_id: Optional[int] = None

    @field_validator("message")
    @classmethod
    def check_message(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Alert message is required")
        return value

class NotificationStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"

class ContactNotificationResult(SQLModel):
    contact_id: int
    name: str
    phone_number: str
    status: NotificationStatus
    error: Optional[str] = None

class AlertDispatchResult(SQLModel):
    alert_id: int
    contacts_notified: int
    results: List[ContactNotificationResult]
