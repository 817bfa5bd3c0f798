from datetime import date
from typing import List

from sqlalchemy import or_
from sqlalchemy.orm import Session

from clinic.db.base import DoctorBlock as DbDoctorBlock
from clinic.domain.entities import DoctorBlock, TimeSlot
from clinic.domain.interfaces import IDoctorBlockRepository


class DoctorBlockRepository(IDoctorBlockRepository):
    """Doctor blackout periods, and the predicate the scheduler consults."""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def is_time_slot_blocked(
        self, doctor_id: int, on_date: date, time_slot: TimeSlot
    ) -> bool:
        """Return True if a whole-day or slot-specific block matches."""
        match = (
            self.db.query(DbDoctorBlock.id)
            .filter(
                DbDoctorBlock.doctor_id == doctor_id,
                DbDoctorBlock.date == on_date,
                or_(
                    DbDoctorBlock.time_slot.is_(None),
                    DbDoctorBlock.time_slot == time_slot,
                ),
            )
            .first()
        )
        return match is not None

    def add(self, block: DoctorBlock) -> DoctorBlock:
        db_block = DbDoctorBlock(
            doctor_id=block.doctor_id,
            date=block.date,
            time_slot=block.time_slot,
            reason=block.reason,
        )
        self.db.add(db_block)
        self.db.flush()
        return self._to_domain(db_block)

    def delete(self, block_id: int) -> bool:
        db_block = self.db.get(DbDoctorBlock, block_id)
        if not db_block:
            return False
        self.db.delete(db_block)
        self.db.flush()
        return True

    def get_for_doctor_on(self, doctor_id: int, on_date: date) -> List[DoctorBlock]:
        db_blocks = (
            self.db.query(DbDoctorBlock)
            .filter_by(doctor_id=doctor_id, date=on_date)
            .order_by(DbDoctorBlock.id)
            .all()
        )
        return [self._to_domain(b) for b in db_blocks]

    def _to_domain(self, db_block: DbDoctorBlock) -> DoctorBlock:
        return DoctorBlock(
            id=db_block.id,
            doctor_id=db_block.doctor_id,
            date=db_block.date,
            time_slot=db_block.time_slot,
            reason=db_block.reason,
        )
