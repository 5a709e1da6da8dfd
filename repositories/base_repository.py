"""
Base repository with common persistence operations.

Records are never deleted by the platform. Interview updates go through the
version-checked writes in InterviewRepository, so only reads and inserts
live here.
"""

from typing import TypeVar, Generic, Optional, Type, Any
from sqlmodel import Session, SQLModel

T = TypeVar("T", bound=SQLModel)


class BaseRepository(Generic[T]):
    """
    Generic base repository.

    Type Parameters:
        T: SQLModel entity type
    """

    def __init__(self, db_session: Session, model_class: Type[T]):
        """
        Initialize repository.

        Args:
            db_session: SQLModel database session
            model_class: The SQLModel class this repository manages
        """
        self.db = db_session
        self.model_class = model_class

    def get_by_id(self, id: Any) -> Optional[T]:
        """Get entity by primary key, None when missing."""
        return self.db.get(self.model_class, id)

    def create(self, entity: T) -> T:
        """
        Insert a new entity and commit.

        Returns:
            Created entity refreshed from the database
        """
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity
