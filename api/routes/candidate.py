"""
Candidate API Routes - Thin Controller Layer.

Handles HTTP concerns (upload, request/response, status codes)
and delegates the interview lifecycle to InterviewService.

Endpoints:
- POST /candidate/start - Upload résumé and start an interview
- GET /candidate/interviews - List own interviews
- GET /candidate/interview/{interview_id} - Get own interview
- POST /candidate/begin-interview - Start an interview assigned by an interviewer
- POST /candidate/submit-answer - Save the answer to one question
- POST /candidate/finalize-interview - Score, summarize and email results
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from api.auth import candidate_only
from api.dependencies import get_interview_service
from api.models.common import ErrorResponse
from api.models.interview_schemas import (
    FinalizeResponse,
    InterviewIdRequest,
    InterviewListResponse,
    InterviewMessageResponse,
    InterviewResponse,
    InterviewSchema,
    SubmitAnswerRequest,
    SubmitAnswerResponse,
)
from config.settings import settings
from models.user import User
from services import InterviewService
from services.exceptions import (
    CollaboratorError,
    InterviewConflictError,
    InterviewNotFoundError,
    InterviewStateError,
    InterviewValidationError,
)
from utils.document_extractor import DocumentExtractor, SUPPORTED_EXTENSIONS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/candidate", tags=["Candidate"])

# Read uploads in chunks so oversized files are rejected early
UPLOAD_CHUNK_BYTES = 64 * 1024


def _save_upload(upload: UploadFile, suffix: str) -> str:
    """Spool the upload to a temporary file and return its path."""
    written = 0
    fd, path = tempfile.mkstemp(prefix="resume_", suffix=suffix)
    with os.fdopen(fd, "wb") as out:
        while True:
            chunk = upload.file.read(UPLOAD_CHUNK_BYTES)
            if not chunk:
                break
            written += len(chunk)
            if written > settings.MAX_RESUME_BYTES:
                out.close()
                os.remove(path)
                raise InterviewValidationError("Resume file is too large")
            out.write(chunk)
    return path


@router.post(
    "/start",
    response_model=InterviewMessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing, unsupported, oversized or empty résumé"},
        500: {"model": ErrorResponse, "description": "Résumé could not be read or questions could not be generated"},
    }
)
def start_interview(
    resume: Optional[UploadFile] = File(None, description="Résumé file (.pdf, .docx, .txt, .md)"),
    phone: Optional[str] = Form(None),
    user: User = Depends(candidate_only),
    service: InterviewService = Depends(get_interview_service),
):
    """
    Upload a résumé and start an interview.

    The résumé text is extracted, six questions are generated from it and the
    interview starts `in-progress`. The résumé text is not echoed back.
    """
    if resume is None or not resume.filename:
        raise HTTPException(status_code=400, detail="Resume file required")

    suffix = Path(resume.filename).suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported resume format. Use one of: {', '.join(SUPPORTED_EXTENSIONS)}"
        )

    temp_path = None
    try:
        temp_path = _save_upload(resume, suffix)

        try:
            resume_text = DocumentExtractor.extract_text_from_path(temp_path, resume.filename)
        except Exception:
            logger.exception("Could not extract text from %s", resume.filename)
            raise CollaboratorError("Failed to read resume file.")

        interview = service.start_interview(user, resume_text, phone)
        return InterviewMessageResponse(
            message="Interview started with AI-generated questions",
            interview=InterviewSchema.from_interview(interview),
        )

    except InterviewValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CollaboratorError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception:
        logger.exception("Error starting interview for %s", user.id)
        raise HTTPException(status_code=500, detail="Failed to start interview.")
    finally:
        if temp_path and os.path.exists(temp_path):
            try:
                os.remove(temp_path)
            except OSError:
                logger.warning("Failed to clean up uploaded file %s", temp_path)


@router.get("/interviews", response_model=InterviewListResponse)
def list_interviews(
    user: User = Depends(candidate_only),
    service: InterviewService = Depends(get_interview_service),
):
    """All of the caller's interviews, newest first."""
    interviews = service.list_candidate_interviews(user.id)
    return InterviewListResponse(interviews=[InterviewSchema.from_interview(i) for i in interviews])


@router.get(
    "/interview/{interview_id}",
    response_model=InterviewResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Malformed interview id"},
        404: {"model": ErrorResponse, "description": "Interview not found or not owned by caller"},
    }
)
def get_interview(
    interview_id: str,
    user: User = Depends(candidate_only),
    service: InterviewService = Depends(get_interview_service),
):
    try:
        interview = service.get_candidate_interview(interview_id, user.id)
    except InterviewValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InterviewNotFoundError:
        raise HTTPException(status_code=404, detail="Interview not found or not owned by user.")

    return InterviewResponse(interview=InterviewSchema.from_interview(interview))


@router.post(
    "/begin-interview",
    response_model=InterviewMessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Interview is not pending"},
        404: {"model": ErrorResponse, "description": "Interview not found"},
        409: {"model": ErrorResponse, "description": "Interview changed concurrently, retry"},
    }
)
def begin_interview(
    request: InterviewIdRequest,
    user: User = Depends(candidate_only),
    service: InterviewService = Depends(get_interview_service),
):
    """Move an interview assigned by an interviewer from `pending` to `in-progress`."""
    try:
        interview = service.begin_interview(request.interview_id, user.id)
    except (InterviewValidationError, InterviewStateError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InterviewNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InterviewConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return InterviewMessageResponse(message="Interview started", interview=InterviewSchema.from_interview(interview))


@router.post(
    "/submit-answer",
    response_model=SubmitAnswerResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid index, missing answer or interview not in progress"},
        404: {"model": ErrorResponse, "description": "Interview not found"},
        409: {"model": ErrorResponse, "description": "Interview changed concurrently, retry"},
    }
)
def submit_answer(
    request: SubmitAnswerRequest,
    user: User = Depends(candidate_only),
    service: InterviewService = Depends(get_interview_service),
):
    """
    Save the answer to question `questionIndex`.

    **Returns:**
    - `nextQuestionIndex`: index of the following question
    - `isFinished`: true when this was the last question
    """
    try:
        result = service.submit_answer(
            interview_id=request.interview_id,
            candidate_id=user.id,
            question_index=request.question_index,
            answer=request.answer,
        )
    except (InterviewValidationError, InterviewStateError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InterviewNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InterviewConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception:
        logger.exception("Error submitting answer for interview %s", request.interview_id)
        raise HTTPException(status_code=500, detail="Failed to submit answer.")

    return SubmitAnswerResponse(message="Answer saved successfully", **result)


@router.post(
    "/finalize-interview",
    response_model=FinalizeResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing id, already completed or not started"},
        404: {"model": ErrorResponse, "description": "Interview not found"},
        409: {"model": ErrorResponse, "description": "Interview changed concurrently, retry"},
        500: {"model": ErrorResponse, "description": "Scoring, summary or email failed"},
    }
)
def finalize_interview(
    request: InterviewIdRequest,
    user: User = Depends(candidate_only),
    service: InterviewService = Depends(get_interview_service),
):
    """
    Score every answer, compute the total, write the summary and email the results.

    If anything fails before the results are saved, the interview is marked
    `failed` and finalization can be retried.
    """
    try:
        interview = service.finalize_interview(request.interview_id, user)
    except (InterviewValidationError, InterviewStateError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InterviewNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InterviewConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except CollaboratorError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception:
        logger.exception("Error finalizing interview %s", request.interview_id)
        raise HTTPException(status_code=500, detail="Error finalizing interview or sending email.")

    return FinalizeResponse(
        message="Interview finalized, scored, and results emailed!",
        total_score=interview.total_score,
        summary=interview.summary,
    )
