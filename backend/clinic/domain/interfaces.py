"""
Abstract interfaces for repositories following Interface Segregation Principle.

These interfaces define contracts without implementation details,
enabling dependency injection and easier testing.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional, Set

from .entities import (
    Appointment,
    AppointmentStatus,
    DoctorAvailability,
    DoctorBlock,
    TimeSlot,
    User,
)


class IUserReader(ABC):
    """Interface for user read operations - Interface Segregation Principle."""

    @abstractmethod
    def get_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        pass

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        pass


class IUserWriter(ABC):
    """Interface for user write operations - Interface Segregation Principle."""

    @abstractmethod
    def create(self, user: User) -> User:
        """Create a new user."""
        pass


class IUserRepository(IUserReader, IUserWriter):
    """Complete user repository interface combining read/write operations."""

    pass


class IAppointmentReader(ABC):
    """Interface for appointment read operations."""

    @abstractmethod
    def get_by_id(self, appointment_id: int) -> Optional[Appointment]:
        """Get appointment by ID."""
        pass

    @abstractmethod
    def get_by_patient_id_and_status(
        self, patient_id: int, status: AppointmentStatus
    ) -> List[Appointment]:
        """Get a patient's appointments with the given status, in storage order."""
        pass

    @abstractmethod
    def get_by_doctor_id_and_status(
        self, doctor_id: int, status: AppointmentStatus
    ) -> List[Appointment]:
        """Get a doctor's appointments with the given status, in storage order."""
        pass


class IAppointmentWriter(ABC):
    """Interface for appointment write operations."""

    @abstractmethod
    def create(self, appointment: Appointment) -> Appointment:
        """Create a new appointment."""
        pass

    @abstractmethod
    def update(self, appointment: Appointment) -> Appointment:
        """Update an existing appointment."""
        pass


class IAppointmentRepository(IAppointmentReader, IAppointmentWriter):
    """Complete appointment repository interface."""

    pass


class IDoctorAvailabilityRepository(ABC):
    """Interface for the slot-occupancy store."""

    @abstractmethod
    def find_by_doctor_date_slot(
        self, doctor_id: int, on_date: date, time_slot: TimeSlot
    ) -> Optional[DoctorAvailability]:
        """Get the occupancy row for a slot, if any."""
        pass

    @abstractmethod
    def save(self, availability: DoctorAvailability) -> DoctorAvailability:
        """Mark a slot as occupied."""
        pass

    @abstractmethod
    def delete_by_doctor_date_slot(
        self, doctor_id: int, on_date: date, time_slot: TimeSlot
    ) -> int:
        """Free a slot. Returns the number of rows removed."""
        pass

    @abstractmethod
    def get_taken_slots(self, doctor_id: int, on_date: date) -> Set[TimeSlot]:
        """Get every occupied slot of a doctor on a date."""
        pass


class IDoctorBlockChecker(ABC):
    """Predicate over doctor-defined blackout periods."""

    @abstractmethod
    def is_time_slot_blocked(
        self, doctor_id: int, on_date: date, time_slot: TimeSlot
    ) -> bool:
        """Return True if the doctor has blocked this slot."""
        pass


class IDoctorBlockRepository(IDoctorBlockChecker):
    """Block predicate plus management of the blocks themselves."""

    @abstractmethod
    def add(self, block: DoctorBlock) -> DoctorBlock:
        """Create a new block."""
        pass

    @abstractmethod
    def delete(self, block_id: int) -> bool:
        """Delete a block."""
        pass

    @abstractmethod
    def get_for_doctor_on(self, doctor_id: int, on_date: date) -> List[DoctorBlock]:
        """Get a doctor's blocks on a date."""
        pass
