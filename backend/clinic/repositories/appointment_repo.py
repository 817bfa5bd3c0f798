"""
Appointment repository implementation following SOLID principles.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from clinic.db.base import Appointment as DbAppointment
from clinic.domain.entities import Appointment as DomainAppointment
from clinic.domain.entities import AppointmentStatus
from clinic.domain.interfaces import IAppointmentRepository


class AppointmentRepository(IAppointmentRepository):
    """Repository for Appointment persistence operations.

    Writes are flushed, not committed; the caller owns the transaction.
    """

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_by_id(self, appointment_id: int) -> Optional[DomainAppointment]:
        """Get appointment by ID."""
        db_appointment = self.db.get(DbAppointment, appointment_id)
        return self._to_domain(db_appointment) if db_appointment else None

    def get_by_patient_id_and_status(
        self, patient_id: int, status: AppointmentStatus
    ) -> List[DomainAppointment]:
        """Get a patient's appointments with the given status."""
        db_appointments = (
            self.db.query(DbAppointment)
            .filter_by(patient_id=patient_id, status=status)
            .order_by(DbAppointment.id)
            .all()
        )
        return [self._to_domain(apt) for apt in db_appointments]

    def get_by_doctor_id_and_status(
        self, doctor_id: int, status: AppointmentStatus
    ) -> List[DomainAppointment]:
        """Get a doctor's appointments with the given status."""
        db_appointments = (
            self.db.query(DbAppointment)
            .filter_by(doctor_id=doctor_id, status=status)
            .order_by(DbAppointment.id)
            .all()
        )
        return [self._to_domain(apt) for apt in db_appointments]

    def create(self, appointment: DomainAppointment) -> DomainAppointment:
        """Create a new appointment."""
        db_appointment = DbAppointment(
            doctor_id=appointment.doctor_id,
            patient_id=appointment.patient_id,
            date=appointment.date,
            time_slot=appointment.time_slot,
            status=appointment.status,
        )
        self.db.add(db_appointment)
        self.db.flush()
        return self._to_domain(db_appointment)

    def update(self, appointment: DomainAppointment) -> DomainAppointment:
        """Update an existing appointment."""
        if not appointment.id:
            raise ValueError("Appointment ID is required for update")

        db_appointment = self.db.get(DbAppointment, appointment.id)
        if not db_appointment:
            raise ValueError(f"Appointment with ID {appointment.id} not found")

        db_appointment.date = appointment.date
        db_appointment.time_slot = appointment.time_slot
        db_appointment.status = appointment.status
        self.db.flush()
        return self._to_domain(db_appointment)

    def _to_domain(self, db_appointment: DbAppointment) -> DomainAppointment:
        """Convert database model to domain entity."""
        return DomainAppointment(
            id=db_appointment.id,
            doctor_id=db_appointment.doctor_id,
            patient_id=db_appointment.patient_id,
            date=db_appointment.date,
            time_slot=db_appointment.time_slot,
            status=db_appointment.status,
            created_at=db_appointment.created_at,
            updated_at=db_appointment.updated_at,
        )
