"""
Appointment service following SOLID principles.

Books, moves, cancels and completes appointments while keeping the
doctor availability rows in step with them.
"""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from clinic.core.exceptions import UserNotFoundError
from clinic.db.session import atomic
from clinic.domain.entities import Appointment as DomainAppointment
from clinic.domain.entities import AppointmentStatus, DoctorAvailability, TimeSlot
from clinic.domain.interfaces import (
    IAppointmentRepository,
    IDoctorAvailabilityRepository,
    IDoctorBlockChecker,
    IUserReader,
)
from clinic.schemas.dtos import (
    AppointmentCreateRequest,
    AppointmentOutcome,
    AppointmentResponse,
    AppointmentResult,
    validate_appointment_date,
)

logger = logging.getLogger(__name__)


class AppointmentService:
    """Application service for appointment-related use-cases.

    Every mutating operation runs inside a single transaction on ``session``:
    the appointment and availability writes commit together or not at all.
    Expected business conditions come back as an ``AppointmentResult``;
    only unknown users and storage failures raise.
    """

    def __init__(
        self,
        session: Session,
        appointment_repo: IAppointmentRepository,
        availability_repo: IDoctorAvailabilityRepository,
        user_repo: IUserReader,
        block_checker: IDoctorBlockChecker,
    ):
        self.session = session
        self.appointment_repo = appointment_repo
        self.availability_repo = availability_repo
        self.user_repo = user_repo
        self.block_checker = block_checker

    def book_appointment(self, request: AppointmentCreateRequest) -> AppointmentResult:
        """Book a slot for a patient with a doctor.

        Business Rules:
        - Doctor and patient must exist (UserNotFoundError otherwise)
        - Slot must not be blocked by the doctor
        - Slot must not already be occupied
        """
        request.validate()

        with atomic(self.session):
            doctor = self.user_repo.get_by_id(request.doctor_id)
            if doctor is None:
                raise UserNotFoundError("doctor", request.doctor_id)

            patient = self.user_repo.get_by_id(request.patient_id)
            if patient is None:
                raise UserNotFoundError("patient", request.patient_id)

            if self.block_checker.is_time_slot_blocked(
                doctor.id, request.date, request.time_slot
            ):
                self._log_conflict(
                    "book",
                    AppointmentOutcome.BLOCKED,
                    request.doctor_id,
                    request.date,
                    request.time_slot,
                )
                return AppointmentResult(AppointmentOutcome.BLOCKED)

            if self._is_slot_taken(doctor.id, request.date, request.time_slot):
                self._log_conflict(
                    "book",
                    AppointmentOutcome.UNAVAILABLE,
                    request.doctor_id,
                    request.date,
                    request.time_slot,
                )
                return AppointmentResult(AppointmentOutcome.UNAVAILABLE)

            self.availability_repo.save(
                DoctorAvailability(
                    doctor_id=doctor.id,
                    date=request.date,
                    time_slot=request.time_slot,
                )
            )
            created = self.appointment_repo.create(
                DomainAppointment(
                    doctor_id=doctor.id,
                    patient_id=patient.id,
                    date=request.date,
                    time_slot=request.time_slot,
                    status=AppointmentStatus.BOOKED,
                )
            )

        logger.info(
            "Appointment booked",
            extra={
                "context": {
                    "appointment_id": created.id,
                    "doctor_id": created.doctor_id,
                    "patient_id": created.patient_id,
                    "date": created.date.isoformat(),
                    "time_slot": created.time_slot.value,
                }
            },
        )
        return AppointmentResult(
            AppointmentOutcome.BOOKED, AppointmentResponse.from_domain(created)
        )

    def cancel_appointment(self, appointment_id: int) -> AppointmentResult:
        """Cancel an appointment and free its slot.

        The slot row is deleted by (doctor, date, slot) whether or not it
        still belongs to this appointment. Cancelling twice repeats both steps.
        """
        with atomic(self.session):
            appointment = self.appointment_repo.get_by_id(appointment_id)
            if appointment is None:
                self._log_not_found("cancel", appointment_id)
                return AppointmentResult(AppointmentOutcome.NOT_FOUND)

            appointment.status = AppointmentStatus.CANCELLED
            updated = self.appointment_repo.update(appointment)

            self.availability_repo.delete_by_doctor_date_slot(
                appointment.doctor_id, appointment.date, appointment.time_slot
            )

        logger.info(
            "Appointment cancelled",
            extra={"context": {"appointment_id": appointment_id}},
        )
        return AppointmentResult(
            AppointmentOutcome.CANCELLED, AppointmentResponse.from_domain(updated)
        )

    def modify_appointment(
        self, appointment_id: int, new_date: date, new_time_slot: TimeSlot
    ) -> AppointmentResult:
        """Move an appointment to another date and slot.

        The old slot is released before the new one is checked. When the new
        slot is blocked or taken the release is still committed and the
        appointment keeps its old date and slot.
        """
        validate_appointment_date(new_date)
        new_time_slot = TimeSlot(new_time_slot)

        with atomic(self.session):
            appointment = self.appointment_repo.get_by_id(appointment_id)
            if appointment is None:
                self._log_not_found("modify", appointment_id)
                return AppointmentResult(AppointmentOutcome.NOT_FOUND)

            self.availability_repo.delete_by_doctor_date_slot(
                appointment.doctor_id, appointment.date, appointment.time_slot
            )

            if self.block_checker.is_time_slot_blocked(
                appointment.doctor_id, new_date, new_time_slot
            ):
                self._log_conflict(
                    "modify",
                    AppointmentOutcome.BLOCKED,
                    appointment.doctor_id,
                    new_date,
                    new_time_slot,
                )
                return AppointmentResult.for_new_slot(AppointmentOutcome.BLOCKED)

            if self._is_slot_taken(appointment.doctor_id, new_date, new_time_slot):
                self._log_conflict(
                    "modify",
                    AppointmentOutcome.UNAVAILABLE,
                    appointment.doctor_id,
                    new_date,
                    new_time_slot,
                )
                return AppointmentResult.for_new_slot(AppointmentOutcome.UNAVAILABLE)

            self.availability_repo.save(
                DoctorAvailability(
                    doctor_id=appointment.doctor_id,
                    date=new_date,
                    time_slot=new_time_slot,
                )
            )
            appointment.date = new_date
            appointment.time_slot = new_time_slot
            updated = self.appointment_repo.update(appointment)

        logger.info(
            "Appointment modified",
            extra={
                "context": {
                    "appointment_id": appointment_id,
                    "date": new_date.isoformat(),
                    "time_slot": new_time_slot.value,
                }
            },
        )
        return AppointmentResult(
            AppointmentOutcome.MODIFIED, AppointmentResponse.from_domain(updated)
        )

    def complete_appointment(self, appointment_id: int) -> AppointmentResult:
        """Mark an appointment as completed. The slot row is left in place."""
        with atomic(self.session):
            appointment = self.appointment_repo.get_by_id(appointment_id)
            if appointment is None:
                self._log_not_found("complete", appointment_id)
                return AppointmentResult(AppointmentOutcome.NOT_FOUND)

            appointment.status = AppointmentStatus.COMPLETED
            updated = self.appointment_repo.update(appointment)

        logger.info(
            "Appointment completed",
            extra={"context": {"appointment_id": appointment_id}},
        )
        return AppointmentResult(
            AppointmentOutcome.COMPLETED, AppointmentResponse.from_domain(updated)
        )

    def get_upcoming_appointments_for_patient(
        self, patient_id: int
    ) -> List[AppointmentResponse]:
        return self._by_patient(patient_id, AppointmentStatus.BOOKED)

    def get_upcoming_appointments_for_doctor(
        self, doctor_id: int
    ) -> List[AppointmentResponse]:
        return self._by_doctor(doctor_id, AppointmentStatus.BOOKED)

    def get_completed_appointments_for_patient(
        self, patient_id: int
    ) -> List[AppointmentResponse]:
        return self._by_patient(patient_id, AppointmentStatus.COMPLETED)

    def get_completed_appointments_for_doctor(
        self, doctor_id: int
    ) -> List[AppointmentResponse]:
        return self._by_doctor(doctor_id, AppointmentStatus.COMPLETED)

    def get_appointment(self, appointment_id: int) -> Optional[AppointmentResponse]:
        """Get a single appointment by ID."""
        appointment = self.appointment_repo.get_by_id(appointment_id)
        return AppointmentResponse.from_domain(appointment) if appointment else None

    def get_available_time_slots(self, doctor_id: int, on_date: date) -> List[TimeSlot]:
        """Get the slots of a day that are neither blocked nor occupied."""
        taken = self.availability_repo.get_taken_slots(doctor_id, on_date)
        return [
            slot
            for slot in TimeSlot
            if slot not in taken
            and not self.block_checker.is_time_slot_blocked(doctor_id, on_date, slot)
        ]

    def _by_patient(
        self, patient_id: int, status: AppointmentStatus
    ) -> List[AppointmentResponse]:
        appointments = self.appointment_repo.get_by_patient_id_and_status(
            patient_id, status
        )
        return [AppointmentResponse.from_domain(apt) for apt in appointments]

    def _by_doctor(
        self, doctor_id: int, status: AppointmentStatus
    ) -> List[AppointmentResponse]:
        appointments = self.appointment_repo.get_by_doctor_id_and_status(
            doctor_id, status
        )
        return [AppointmentResponse.from_domain(apt) for apt in appointments]

    def _is_slot_taken(
        self, doctor_id: int, on_date: date, time_slot: TimeSlot
    ) -> bool:
        existing = self.availability_repo.find_by_doctor_date_slot(
            doctor_id, on_date, time_slot
        )
        return existing is not None

    def _log_conflict(
        self,
        operation: str,
        outcome: AppointmentOutcome,
        doctor_id: int,
        on_date: date,
        time_slot: TimeSlot,
    ) -> None:
        logger.warning(
            f"Cannot {operation} appointment: slot {outcome.value}",
            extra={
                "context": {
                    "doctor_id": doctor_id,
                    "date": on_date.isoformat(),
                    "time_slot": time_slot.value,
                }
            },
        )

    def _log_not_found(self, operation: str, appointment_id: int) -> None:
        logger.warning(
            f"Cannot {operation} appointment: not found",
            extra={"context": {"appointment_id": appointment_id}},
        )


def build_appointment_service(session: Session) -> AppointmentService:
    """Wire an AppointmentService to the SQLAlchemy repositories on ``session``."""
    from clinic.repositories.appointment_repo import AppointmentRepository
    from clinic.repositories.availability_repo import DoctorAvailabilityRepository
    from clinic.repositories.doctor_block_repo import DoctorBlockRepository
    from clinic.repositories.user_repo import UserRepository

    return AppointmentService(
        session=session,
        appointment_repo=AppointmentRepository(session),
        availability_repo=DoctorAvailabilityRepository(session),
        user_repo=UserRepository(session),
        block_checker=DoctorBlockRepository(session),
    )
