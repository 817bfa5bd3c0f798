"""
Domain entities - Pure business logic, no framework dependencies.

Following SOLID principles:
- Single Responsibility: Each entity represents one business concept
- Open/Closed: Entities can be extended without modification
"""

from dataclasses import dataclass
from datetime import date as date_type
from datetime import datetime, time
from enum import Enum
from typing import Optional


class UserRole(str, Enum):
    DOCTOR = "doctor"
    PATIENT = "patient"


class AppointmentStatus(str, Enum):
    BOOKED = "BOOKED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class TimeSlot(str, Enum):
    """Fixed half-hour bands of a clinic day."""

    MORNING_1 = "MORNING_1"
    MORNING_2 = "MORNING_2"
    MORNING_3 = "MORNING_3"
    MORNING_4 = "MORNING_4"
    MORNING_5 = "MORNING_5"
    MORNING_6 = "MORNING_6"
    AFTERNOON_1 = "AFTERNOON_1"
    AFTERNOON_2 = "AFTERNOON_2"
    AFTERNOON_3 = "AFTERNOON_3"
    AFTERNOON_4 = "AFTERNOON_4"
    AFTERNOON_5 = "AFTERNOON_5"
    AFTERNOON_6 = "AFTERNOON_6"

    @property
    def start_time(self) -> time:
        return _SLOT_BOUNDS[self][0]

    @property
    def end_time(self) -> time:
        return _SLOT_BOUNDS[self][1]

    @property
    def label(self) -> str:
        """Return the slot as 'HH:MM-HH:MM'."""
        return f"{self.start_time:%H:%M}-{self.end_time:%H:%M}"


_SLOT_BOUNDS = {
    TimeSlot.MORNING_1: (time(9, 0), time(9, 30)),
    TimeSlot.MORNING_2: (time(9, 30), time(10, 0)),
    TimeSlot.MORNING_3: (time(10, 0), time(10, 30)),
    TimeSlot.MORNING_4: (time(10, 30), time(11, 0)),
    TimeSlot.MORNING_5: (time(11, 0), time(11, 30)),
    TimeSlot.MORNING_6: (time(11, 30), time(12, 0)),
    TimeSlot.AFTERNOON_1: (time(14, 0), time(14, 30)),
    TimeSlot.AFTERNOON_2: (time(14, 30), time(15, 0)),
    TimeSlot.AFTERNOON_3: (time(15, 0), time(15, 30)),
    TimeSlot.AFTERNOON_4: (time(15, 30), time(16, 0)),
    TimeSlot.AFTERNOON_5: (time(16, 0), time(16, 30)),
    TimeSlot.AFTERNOON_6: (time(16, 30), time(17, 0)),
}


@dataclass
class User:
    """Domain entity representing a doctor or patient.

    Referenced by appointments, never mutated by the scheduling core.
    """

    id: Optional[int] = None
    name: str = ""
    email: str = ""
    role: UserRole = UserRole.PATIENT

    def __post_init__(self):
        """Validate domain rules."""
        if not self.name:
            raise ValueError("Name is required")
        if self.email and "@" not in self.email:
            raise ValueError("Invalid email format")
        self.role = UserRole(self.role)

    @property
    def is_doctor(self) -> bool:
        return self.role == UserRole.DOCTOR


@dataclass
class Appointment:
    """Domain entity for Appointment business logic."""

    id: Optional[int] = None
    doctor_id: int = 0
    patient_id: int = 0
    date: Optional[date_type] = None
    time_slot: Optional[TimeSlot] = None
    status: AppointmentStatus = AppointmentStatus.BOOKED
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate business rules."""
        if self.doctor_id <= 0:
            raise ValueError("Valid doctor_id is required")
        if self.patient_id <= 0:
            raise ValueError("Valid patient_id is required")
        if self.date is None:
            raise ValueError("Appointment date is required")
        if self.time_slot is None:
            raise ValueError("Time slot is required")
        self.time_slot = TimeSlot(self.time_slot)
        self.status = AppointmentStatus(self.status)


@dataclass
class DoctorAvailability:
    """Marker that a doctor's (date, time_slot) is occupied.

    Absence of a row means the slot is free.
    """

    doctor_id: int
    date: date_type
    time_slot: TimeSlot
    id: Optional[int] = None

    def __post_init__(self):
        self.time_slot = TimeSlot(self.time_slot)


@dataclass
class DoctorBlock:
    """Doctor-defined blackout. A block without time_slot covers the whole day."""

    doctor_id: int
    date: date_type
    time_slot: Optional[TimeSlot] = None
    reason: Optional[str] = None
    id: Optional[int] = None

    def __post_init__(self):
        if self.doctor_id <= 0:
            raise ValueError("Valid doctor_id is required")
        if self.time_slot is not None:
            self.time_slot = TimeSlot(self.time_slot)

    def covers(self, time_slot: TimeSlot) -> bool:
        return self.time_slot is None or self.time_slot == time_slot
