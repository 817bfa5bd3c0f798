from datetime import date
from typing import Optional, Set

from sqlalchemy.orm import Session

from clinic.db.base import DoctorAvailability as DbAvailability
from clinic.domain.entities import DoctorAvailability, TimeSlot
from clinic.domain.interfaces import IDoctorAvailabilityRepository


class DoctorAvailabilityRepository(IDoctorAvailabilityRepository):
    """Slot-occupancy store keyed by (doctor_id, date, time_slot).

    Writes are flushed, not committed; the caller owns the transaction. The
    unique constraint on the table rejects a second row for the same key at
    flush time.
    """

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def find_by_doctor_date_slot(
        self, doctor_id: int, on_date: date, time_slot: TimeSlot
    ) -> Optional[DoctorAvailability]:
        db_row = (
            self.db.query(DbAvailability)
            .filter_by(doctor_id=doctor_id, date=on_date, time_slot=time_slot)
            .first()
        )
        return self._to_domain(db_row) if db_row else None

    def save(self, availability: DoctorAvailability) -> DoctorAvailability:
        db_row = DbAvailability(
            doctor_id=availability.doctor_id,
            date=availability.date,
            time_slot=availability.time_slot,
        )
        self.db.add(db_row)
        self.db.flush()
        return self._to_domain(db_row)

    def delete_by_doctor_date_slot(
        self, doctor_id: int, on_date: date, time_slot: TimeSlot
    ) -> int:
        deleted = (
            self.db.query(DbAvailability)
            .filter_by(doctor_id=doctor_id, date=on_date, time_slot=time_slot)
            .delete(synchronize_session="fetch")
        )
        return deleted

    def get_taken_slots(self, doctor_id: int, on_date: date) -> Set[TimeSlot]:
        rows = (
            self.db.query(DbAvailability.time_slot)
            .filter_by(doctor_id=doctor_id, date=on_date)
            .all()
        )
        return {row.time_slot for row in rows}

    def _to_domain(self, db_row: DbAvailability) -> DoctorAvailability:
        return DoctorAvailability(
            id=db_row.id,
            doctor_id=db_row.doctor_id,
            date=db_row.date,
            time_slot=db_row.time_slot,
        )
