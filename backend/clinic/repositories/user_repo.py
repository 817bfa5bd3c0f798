from typing import Optional

from sqlalchemy.orm import Session

from clinic.db.base import User as DbUser
from clinic.domain.entities import User as DomainUser
from clinic.domain.interfaces import IUserRepository


class UserRepository(IUserRepository):
    """Repository for User persistence operations following SOLID principles.

    This implementation:
    - Implements IUserRepository interface (Dependency Inversion)
    - Handles data access only (Single Responsibility)
    - Maps between domain entities and database models

    Writes are flushed, not committed; the caller owns the transaction.
    """

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_by_id(self, user_id: int) -> Optional[DomainUser]:
        """Get user by ID, returning domain entity."""
        db_user = self.db.get(DbUser, user_id)
        return self._to_domain(db_user) if db_user else None

    def get_by_email(self, email: str) -> Optional[DomainUser]:
        """Get user by email, returning domain entity."""
        db_user = self.db.query(DbUser).filter_by(email=email).first()
        return self._to_domain(db_user) if db_user else None

    def create(self, user: DomainUser) -> DomainUser:
        """Create a new user from domain entity."""
        db_user = DbUser(
            name=user.name,
            # Empty email stored as NULL so the unique constraint allows many
            email=user.email or None,
            role=user.role.value,
        )
        self.db.add(db_user)
        self.db.flush()
        return self._to_domain(db_user)

    def _to_domain(self, db_user: DbUser) -> DomainUser:
        """Convert database model to domain entity."""
        return DomainUser(
            id=db_user.id,
            name=db_user.name,
            email=db_user.email or "",
            role=db_user.role,
        )
