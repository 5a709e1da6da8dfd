"""
Repositories module - Data Access Layer.

Provides repository classes for database operations following the Repository pattern.
Each repository handles persistence for a specific domain entity.

Usage:
    from repositories import InterviewRepository, UserRepository

    # Initialize with a database session
    interview_repo = InterviewRepository(db_session)
    user_repo = UserRepository(db_session)

    interview = interview_repo.get_owned(interview_id, candidate_id)
"""

from repositories.base_repository import BaseRepository
from repositories.user_repository import UserRepository
from repositories.interview_repository import InterviewRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "InterviewRepository",
]
