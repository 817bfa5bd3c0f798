"""
Data Transfer Objects (DTOs) and validation schemas.

Following SOLID principles:
- Single Responsibility: Each schema validates one specific data contract
- Open/Closed: Schemas can be extended without modification
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional

from clinic.domain.entities import AppointmentStatus, TimeSlot


def validate_appointment_date(value) -> None:
    """Reject anything that is not a plain calendar day."""
    # datetime is a date subclass; a timestamp is not a calendar day
    if not isinstance(value, date) or isinstance(value, datetime):
        raise ValueError("Appointment date must be a date")


@dataclass
class AppointmentCreateRequest:
    """DTO for appointment booking requests."""

    doctor_id: int
    patient_id: int
    date: date
    time_slot: TimeSlot

    def validate(self) -> None:
        """Validate the request data."""
        if self.doctor_id <= 0:
            raise ValueError("Valid doctor_id is required")
        if self.patient_id <= 0:
            raise ValueError("Valid patient_id is required")
        validate_appointment_date(self.date)
        try:
            self.time_slot = TimeSlot(self.time_slot)
        except ValueError:
            raise ValueError(f"Invalid time slot: {self.time_slot}") from None


@dataclass
class AppointmentResponse:
    """DTO for appointment responses."""

    id: int
    doctor_id: int
    patient_id: int
    date: date
    time_slot: TimeSlot
    status: AppointmentStatus
    created_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, appointment) -> "AppointmentResponse":
        """Create response from domain entity."""
        return cls(
            id=appointment.id,
            doctor_id=appointment.doctor_id,
            patient_id=appointment.patient_id,
            date=appointment.date,
            time_slot=appointment.time_slot,
            status=appointment.status,
            created_at=appointment.created_at,
        )


class AppointmentOutcome(str, Enum):
    """Closed set of results a scheduling operation can report."""

    BOOKED = "booked"
    MODIFIED = "modified"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    BLOCKED = "blocked"
    UNAVAILABLE = "unavailable"
    NOT_FOUND = "not_found"


_MESSAGES = {
    AppointmentOutcome.BOOKED: "Appointment booked successfully!",
    AppointmentOutcome.MODIFIED: "Appointment modified successfully!",
    AppointmentOutcome.CANCELLED: "Appointment cancelled successfully!",
    AppointmentOutcome.COMPLETED: "Appointment marked as completed!",
    AppointmentOutcome.BLOCKED: "The selected time slot is blocked by the doctor.",
    AppointmentOutcome.UNAVAILABLE: "The selected time slot is unavailable.",
    AppointmentOutcome.NOT_FOUND: "Appointment not found.",
}

_NEW_SLOT_MESSAGES = {
    AppointmentOutcome.BLOCKED: "The selected new time slot is blocked by the doctor.",
    AppointmentOutcome.UNAVAILABLE: "The selected new time slot is unavailable.",
}

_SUCCESS_OUTCOMES = {
    AppointmentOutcome.BOOKED,
    AppointmentOutcome.MODIFIED,
    AppointmentOutcome.CANCELLED,
    AppointmentOutcome.COMPLETED,
}


@dataclass
class AppointmentResult:
    """Outcome of a booking, modification, cancellation or completion.

    ``appointment`` is set for successful outcomes only.
    """

    outcome: AppointmentOutcome
    appointment: Optional[AppointmentResponse] = None
    message: str = ""

    def __post_init__(self):
        if not self.message:
            self.message = _MESSAGES[self.outcome]

    @property
    def succeeded(self) -> bool:
        return self.outcome in _SUCCESS_OUTCOMES

    @classmethod
    def for_new_slot(cls, outcome: AppointmentOutcome) -> "AppointmentResult":
        """Conflict result worded for the target slot of a modification."""
        return cls(outcome=outcome, message=_NEW_SLOT_MESSAGES[outcome])
