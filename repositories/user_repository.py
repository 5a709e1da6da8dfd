"""
User repository for identity persistence.
"""

from typing import List, Optional
from sqlmodel import Session, select

from models.user import User, Role
from repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for managing user identities."""

    def __init__(self, db_session: Session):
        super().__init__(db_session, User)

    def get_by_email(self, email: str) -> Optional[User]:
        """
        Find a user by email (case-insensitive, emails are stored lowercased).

        Args:
            email: User email

        Returns:
            User or None
        """
        if not email:
            return None
        statement = select(User).where(User.email == email.strip().lower())
        return self.db.exec(statement).first()

    def list_by_role(self, role: Role, limit: int = 500) -> List[User]:
        statement = (
            select(User)
            .where(User.role == role.value)
            .order_by(User.created_at.desc())
            .limit(limit)
        )
        return list(self.db.exec(statement).all())
