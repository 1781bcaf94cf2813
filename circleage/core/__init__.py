"""
Core modules for the CircleAge backend

This package contains the core business logic:
- geofencing: Haversine distance and Singapore boundary checks
- contacts: Emergency contact storage with soft delete
- medications: Medication schedules with soft delete
- emergency_alert: Alert history and per-contact SMS dispatch
- adherence: Missed medication detection and escalation
"""

from .geofencing import (
    calculate_distance,
    is_within_singapore,
    parse_lat_lng,
    FALLBACK_ORIGIN
)

from .contacts import (
    ContactNotFoundError,
    EmergencyContactService,
    contact_service
)

from .medications import (
    MedicationNotFoundError,
    MedicationService,
    medication_service
)

from .emergency_alert import (
    AlertNotFoundError,
    EmergencyAlertService,
    NoEmergencyContactsError,
    emergency_service
)

from .adherence import (
    MedicationAdherenceService,
    adherence_service
)

__all__ = [
    # Geofencing
    "calculate_distance",
    "is_within_singapore",
    "parse_lat_lng",
    "FALLBACK_ORIGIN",

    # Contacts
    "ContactNotFoundError",
    "EmergencyContactService",
    "contact_service",

    # Medications
    "MedicationNotFoundError",
    "MedicationService",
    "medication_service",

    # Alerts
    "AlertNotFoundError",
    "EmergencyAlertService",
    "NoEmergencyContactsError",
    "emergency_service",

    # Adherence
    "MedicationAdherenceService",
    "adherence_service"
]
