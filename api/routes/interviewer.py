"""
Interviewer API Routes.

Endpoints:
- GET /interviewer/scoreboard - Completed interviews with scores
- GET /interviewer/interview-details/{interview_id} - Full report for one interview
- GET /interviewer/resume/{interview_id} - Raw résumé text
- GET /interviewer/candidates - Registered candidates
- POST /interviewer/questions/{candidate_id} - Assign questions to a candidate
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from api.auth import interviewer_only
from api.dependencies import get_interview_service
from api.models.auth_schemas import UserResponse
from api.models.common import ErrorResponse
from api.models.interview_schemas import (
    AssignQuestionsRequest,
    CandidateListResponse,
    CandidateRef,
    InterviewDetailResponse,
    InterviewDetailSchema,
    InterviewMessageResponse,
    InterviewSchema,
    ScoreboardEntry,
    ScoreboardResponse,
)
from models.interview import Question
from models.user import User
from services import InterviewService
from services.exceptions import InterviewConflictError, InterviewNotFoundError, InterviewValidationError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/interviewer",
    tags=["Interviewer"],
    dependencies=[Depends(interviewer_only)]
)


def _candidate_ref(user: Optional[User]) -> Optional[CandidateRef]:
    if user is None:
        return None
    return CandidateRef(id=user.id, name=user.name, email=user.email)


@router.get("/scoreboard", response_model=ScoreboardResponse)
def scoreboard(service: InterviewService = Depends(get_interview_service)):
    """Completed interviews, newest first."""
    entries = [
        ScoreboardEntry(
            id=row["interview"].id,
            candidate=_candidate_ref(row["candidate"]),
            total_score=row["interview"].total_score,
            summary=row["interview"].summary,
            created_at=row["interview"].created_at,
        )
        for row in service.get_scoreboard()
    ]
    return ScoreboardResponse(scoreboard=entries)


@router.get(
    "/interview-details/{interview_id}",
    response_model=InterviewDetailResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}
)
def interview_details(interview_id: str, service: InterviewService = Depends(get_interview_service)):
    """Questions, answers, scores and summary of one interview, with its candidate."""
    try:
        interview = service.get_interview(interview_id)
    except InterviewValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InterviewNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    base = InterviewSchema.from_interview(interview)
    detail = InterviewDetailSchema(
        **base.model_dump(),
        candidate=_candidate_ref(service.get_user(interview.candidate_id)),
    )
    return InterviewDetailResponse(interview=detail)


@router.get(
    "/resume/{interview_id}",
    response_class=PlainTextResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}
)
def resume_text(interview_id: str, service: InterviewService = Depends(get_interview_service)):
    """Raw résumé text as `text/plain`."""
    try:
        return PlainTextResponse(service.get_resume_text(interview_id))
    except InterviewValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InterviewNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/candidates", response_model=CandidateListResponse)
def candidates(service: InterviewService = Depends(get_interview_service)):
    return CandidateListResponse(
        candidates=[UserResponse.model_validate(u) for u in service.list_candidates()]
    )


@router.post(
    "/questions/{candidate_id}",
    response_model=InterviewMessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Empty or invalid question list, unknown candidate"},
        409: {"model": ErrorResponse, "description": "Interview changed concurrently, retry"},
    }
)
def assign_questions(
    candidate_id: str,
    request: AssignQuestionsRequest,
    user: User = Depends(interviewer_only),
    service: InterviewService = Depends(get_interview_service),
):
    """
    Assign questions to a candidate.

    Replaces the questions of the candidate's latest interview (or creates one)
    and resets it to `pending`. The candidate starts it with `begin-interview`.
    """
    questions = [
        Question(question=q.question, difficulty=q.difficulty, time_limit=q.time_limit)
        for q in request.questions
    ]
    try:
        interview = service.assign_questions(user, candidate_id, questions)
    except InterviewValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InterviewConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return InterviewMessageResponse(
        message="Questions assigned successfully",
        interview=InterviewSchema.from_interview(interview),
    )
