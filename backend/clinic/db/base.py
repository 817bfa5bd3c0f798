import datetime as dt
from typing import Optional

from sqlalchemy import (
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinic.domain.entities import AppointmentStatus, TimeSlot

from .session import Base

TimeSlotType = Enum(TimeSlot, native_enum=False, length=20, name="time_slot")
AppointmentStatusType = Enum(
    AppointmentStatus, native_enum=False, length=20, name="appointment_status"
)


class User(Base):
    """Doctor or patient known to the clinic"""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(
        String(100), unique=True, nullable=True
    )
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="patient"
    )  # 'doctor', 'patient'
    created_at: Mapped[Optional[dt.datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self):
        return f"<User(id={self.id}, name='{self.name}', role='{self.role}')>"


class DoctorAvailability(Base):
    """Occupied (doctor, date, time_slot) triple. Absence means the slot is free."""

    __tablename__ = "doctor_availability"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    doctor_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time_slot: Mapped[TimeSlot] = mapped_column(TimeSlotType, nullable=False)

    doctor = relationship("User", foreign_keys=[doctor_id])

    __table_args__ = (
        # One row per slot; a racing second insert fails at flush
        UniqueConstraint(
            "doctor_id", "date", "time_slot", name="uq_doctor_availability_slot"
        ),
    )

    def __repr__(self):
        return (
            f"<DoctorAvailability(doctor_id={self.doctor_id}, date={self.date}, "
            f"time_slot={self.time_slot})>"
        )


class Appointment(Base):
    """Appointment between a doctor and a patient"""

    __tablename__ = "appointments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    doctor_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    patient_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time_slot: Mapped[TimeSlot] = mapped_column(TimeSlotType, nullable=False)
    status: Mapped[AppointmentStatus] = mapped_column(
        AppointmentStatusType, nullable=False, default=AppointmentStatus.BOOKED
    )
    created_at: Mapped[Optional[dt.datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[Optional[dt.datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )

    doctor = relationship("User", foreign_keys=[doctor_id])
    patient = relationship("User", foreign_keys=[patient_id])

    __table_args__ = (
        Index("ix_appointments_patient_status", "patient_id", "status"),
        Index("ix_appointments_doctor_status", "doctor_id", "status"),
    )

    def __repr__(self):
        return (
            f"<Appointment(id={self.id}, doctor_id={self.doctor_id}, "
            f"patient_id={self.patient_id}, status={self.status})>"
        )


class DoctorBlock(Base):
    """Doctor-defined blackout; NULL time_slot blocks the whole day"""

    __tablename__ = "doctor_blocks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    doctor_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time_slot: Mapped[Optional[TimeSlot]] = mapped_column(TimeSlotType, nullable=True)
    reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[Optional[dt.datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (Index("ix_doctor_blocks_doctor_date", "doctor_id", "date"),)

    def __repr__(self):
        return (
            f"<DoctorBlock(doctor_id={self.doctor_id}, date={self.date}, "
            f"time_slot={self.time_slot})>"
        )
