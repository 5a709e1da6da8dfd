from models.user import User, Role
from models.interview import (
    Interview,
    InterviewStatus,
    Question,
    Difficulty,
    TIME_LIMITS,
    time_limit_for,
)

__all__ = [
    "User",
    "Role",
    "Interview",
    "InterviewStatus",
    "Question",
    "Difficulty",
    "TIME_LIMITS",
    "time_limit_for",
]
