"""
Services module - Business Logic Layer.

Contains application services that orchestrate business logic,
sitting between the API layer (routes) and the data layer (repositories).

Services handle:
- Business rule validation (ownership, status guards)
- Orchestrating repository operations
- Coordinating with external collaborators (LLM, email)

Usage:
    from services import InterviewService, build_collaborators

    service = InterviewService(db, build_collaborators(settings))
    interview = service.start_interview(candidate, resume_text)
"""

from services.auth_service import AuthService, TokenError
from services.collaborators import InterviewCollaborators, build_collaborators
from services.interview_service import InterviewService, compute_total_score

__all__ = [
    "AuthService",
    "TokenError",
    "InterviewCollaborators",
    "build_collaborators",
    "InterviewService",
    "compute_total_score",
]
