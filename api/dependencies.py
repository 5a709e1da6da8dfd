"""
Shared FastAPI dependencies for the interview routers.
"""

from functools import lru_cache

from fastapi import Depends
from sqlmodel import Session

from config.settings import settings
from services import InterviewCollaborators, InterviewService, build_collaborators
from utils.database import get_db


@lru_cache()
def get_collaborators() -> InterviewCollaborators:
    """Collaborators built once per process from validated settings."""
    return build_collaborators(settings)


def get_interview_service(
    db: Session = Depends(get_db),
    collaborators: InterviewCollaborators = Depends(get_collaborators),
) -> InterviewService:
    """Get InterviewService instance with injected dependencies."""
    return InterviewService(db, collaborators)
