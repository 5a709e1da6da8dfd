from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
import uuid

from pydantic import BaseModel, Field as PydanticField
from sqlmodel import SQLModel, Field, Column, JSON
from sqlalchemy import DateTime, Text


class InterviewStatus(str, Enum):
    """Lifecycle states of an interview"""
    PENDING = "pending"          # questions assigned by an interviewer, not started
    IN_PROGRESS = "in-progress"  # candidate is answering
    COMPLETED = "completed"      # scored, summarized and persisted
    FAILED = "failed"            # finalize raised before completion was stored


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


# Seconds allotted per question
TIME_LIMITS: Dict[str, int] = {
    Difficulty.EASY.value: 30,
    Difficulty.MEDIUM.value: 50,
    Difficulty.HARD.value: 80,
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def time_limit_for(difficulty: str) -> int:
    """Return the time limit for a difficulty, raising ValueError when unknown."""
    key = (difficulty or "").strip().lower()
    if key not in TIME_LIMITS:
        raise ValueError(f"Unknown difficulty: {difficulty!r}")
    return TIME_LIMITS[key]


class Question(BaseModel):
    """One interview question as stored inside Interview.questions."""
    question: str
    difficulty: Difficulty
    time_limit: int
    answer: str = ""
    score: Optional[int] = PydanticField(default=None, ge=0, le=100)

    @property
    def is_answered(self) -> bool:
        return bool(self.answer and self.answer.strip())


class Interview(SQLModel, table=True):
    """
    One interview attempt by a candidate.

    Questions live in a single JSON column so the interview is written
    as one document: an answer or a score update is one row update.
    Updates are compare-and-set on ``version`` (see InterviewRepository).
    """
    __tablename__ = "interviews"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    candidate_id: str = Field(foreign_key="users.id", index=True)
    interviewer_id: Optional[str] = Field(default=None, foreign_key="users.id", nullable=True)

    # Resume data (write-once)
    resume_text: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    candidate_phone: Optional[str] = Field(default=None)

    questions: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    total_score: int = Field(default=0)
    summary: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    status: str = Field(default=InterviewStatus.PENDING.value, index=True)
    # Bumped by every write; writers only apply changes to the version they read
    version: int = Field(default=1)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    completed_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True), nullable=True)

    def get_questions(self) -> List[Question]:
        return [Question.model_validate(item) for item in (self.questions or [])]

    @staticmethod
    def dump_questions(questions: List[Question]) -> List[Dict[str, Any]]:
        return [q.model_dump(mode="json") for q in questions]

    def set_questions(self, questions: List[Question]) -> None:
        # Assign a new list so SQLAlchemy detects the JSON change
        self.questions = self.dump_questions(questions)
