from datetime import datetime, timezone
from enum import Enum
import uuid

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field


class Role(str, Enum):
    """Roles an identity can hold"""
    CANDIDATE = "candidate"
    INTERVIEWER = "interviewer"


class User(SQLModel, table=True):
    """Identity record for candidates and interviewers."""
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field()
    email: str = Field(index=True, sa_column_kwargs={"unique": True})
    password_hash: str = Field(nullable=False)
    role: str = Field(default=Role.CANDIDATE.value, index=True)  # candidate | interviewer
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), sa_type=DateTime(timezone=True)
    )
