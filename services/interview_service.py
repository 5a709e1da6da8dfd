"""
Interview Service - Business Logic Layer.

Owns the interview lifecycle:
- Creation from a résumé (in-progress) or from interviewer-assigned questions (pending)
- Answer collection while in-progress
- Finalization: concurrent scoring, aggregation, summary, persistence, email
- Compensating "failed" marker when finalization breaks before completion is stored

Status flow: pending -> in-progress -> completed, with in-progress -> failed.
"""

import logging
import time
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlmodel import Session

from models.interview import Interview, InterviewStatus, Question, utc_now
from models.user import Role, User
from repositories import InterviewRepository, UserRepository
from services.collaborators import InterviewCollaborators
from services.exceptions import (
    CollaboratorError,
    InterviewConflictError,
    InterviewNotFoundError,
    InterviewStateError,
    InterviewValidationError,
)
from services.notification_service import RESULTS_SUBJECT, render_results_email

logger = logging.getLogger(__name__)
# Operator alert channel for records that could not be repaired automatically
alert_logger = logging.getLogger("interview.alerts")

# Compare-and-set attempts before a write gives up on concurrent changes
WRITE_ATTEMPTS = 5

CONFLICT_MESSAGE = "Interview was modified by another request, please retry."


def compute_total_score(scores: Sequence[Optional[int]], question_count: int) -> int:
    """
    Percentage of points earned over the maximum for all questions.

    Unanswered questions (score None) count as 0 and stay in the denominator.
    Rounds half up: round(100 * sum / (100 * N)) == (2 * sum + N) // (2 * N).
    """
    if question_count <= 0:
        return 0
    earned = sum(score or 0 for score in scores)
    return (2 * earned + question_count) // (2 * question_count)


def parse_interview_id(raw_id: Any) -> str:
    """Validate an interview id, raising InterviewValidationError when malformed."""
    if raw_id is None or (isinstance(raw_id, str) and not raw_id.strip()):
        raise InterviewValidationError("Missing interviewId")
    try:
        return str(uuid.UUID(str(raw_id)))
    except (ValueError, AttributeError, TypeError):
        raise InterviewValidationError("Invalid Interview ID format.")


class InterviewService:
    """
    Application service for interview operations.

    Responsibilities:
    - Enforce ownership (foreign interviews are "not found") and status guards
    - Call the question, scoring, summary and notification collaborators
    - Persist every state change through the repositories
    """

    def __init__(self, db_session: Session, collaborators: InterviewCollaborators):
        self.db = db_session
        self.collaborators = collaborators

        # Repositories
        self.interview_repo = InterviewRepository(db_session)
        self.user_repo = UserRepository(db_session)

    # ============ CANDIDATE LIFECYCLE ============

    def start_interview(
        self,
        candidate: User,
        resume_text: str,
        phone: Optional[str] = None
    ) -> Interview:
        """
        Create an in-progress interview with questions generated from the résumé.

        Raises:
            InterviewValidationError: résumé text is empty
            CollaboratorError: question generation failed
        """
        if not resume_text or not resume_text.strip():
            raise InterviewValidationError("Could not read any text from the resume")

        questions = self.collaborators.question_generator.generate(resume_text)

        interview = Interview(
            candidate_id=candidate.id,
            resume_text=resume_text,
            candidate_phone=phone or None,
            status=InterviewStatus.IN_PROGRESS.value,
        )
        interview.set_questions(questions)
        interview = self.interview_repo.create(interview)

        logger.info(
            "Started interview %s for candidate %s with %d questions",
            interview.id, candidate.id, len(questions)
        )
        return interview

    def list_candidate_interviews(self, candidate_id: str) -> List[Interview]:
        return self.interview_repo.list_by_candidate(candidate_id)

    def get_candidate_interview(self, interview_id: Any, candidate_id: str) -> Interview:
        """
        Fetch an interview owned by the candidate.

        Raises:
            InterviewValidationError: malformed id
            InterviewNotFoundError: missing or owned by someone else
        """
        interview_id = parse_interview_id(interview_id)
        interview = self.interview_repo.get_owned(interview_id, candidate_id)
        if not interview:
            logger.warning("Interview %s not found for candidate %s", interview_id, candidate_id)
            raise InterviewNotFoundError("Interview not found")
        return interview

    def begin_interview(self, interview_id: Any, candidate_id: str) -> Interview:
        """Move an interviewer-assigned interview from pending to in-progress."""
        interview = self.get_candidate_interview(interview_id, candidate_id)
        if interview.status != InterviewStatus.PENDING.value:
            raise InterviewStateError(
                f"Interview is {interview.status}; only pending interviews can be started",
                interview.status,
            )
        if not self.interview_repo.compare_and_set(interview, status=InterviewStatus.IN_PROGRESS.value):
            raise InterviewConflictError(CONFLICT_MESSAGE)
        logger.info("Candidate %s began assigned interview %s", candidate_id, interview.id)
        return interview

    def submit_answer(
        self,
        interview_id: Any,
        candidate_id: str,
        question_index: Any,
        answer: Optional[str]
    ) -> Dict[str, Any]:
        """
        Store the answer for one question.

        The index is checked against the question list before the status, so an
        index equal to the number of questions is always reported as out of bounds.

        Returns:
            Dict with next_question_index and is_finished
        """
        if (
            not isinstance(question_index, int)
            or isinstance(question_index, bool)
            or question_index < 0
            or not answer
            or not answer.strip()
        ):
            raise InterviewValidationError("Invalid questionIndex or missing answer")

        interview = self.get_candidate_interview(interview_id, candidate_id)

        for attempt in range(1, WRITE_ATTEMPTS + 1):
            questions = interview.get_questions()

            if question_index >= len(questions):
                raise InterviewValidationError("Question index out of bounds")

            if interview.status != InterviewStatus.IN_PROGRESS.value:
                raise InterviewStateError(
                    f"Interview is {interview.status}; answers are accepted only while in-progress",
                    interview.status,
                )

            questions[question_index].answer = answer
            if self.interview_repo.compare_and_set(interview, questions=Interview.dump_questions(questions)):
                return {
                    "next_question_index": question_index + 1,
                    "is_finished": question_index == len(questions) - 1,
                }

            # Another write landed first; interview now holds it, so redo the change on top
            logger.info(
                "Interview %s changed while saving answer %d (attempt %d/%d)",
                interview.id, question_index, attempt, WRITE_ATTEMPTS
            )

        raise InterviewConflictError(CONFLICT_MESSAGE)

    def finalize_interview(self, interview_id: Any, candidate: User) -> Interview:
        """
        Score, aggregate, summarize, persist as completed, then email the candidate.

        A failure before the completed status is stored triggers the compensating
        "failed" marker and re-raises. A failure of the email itself happens after
        the results are durable and leaves the interview completed.

        Raises:
            InterviewStateError: already completed, or never started
            InterviewConflictError: concurrent writes kept winning over the results
            CollaboratorError: scoring, summary or email failed
        """
        interview = self.get_candidate_interview(interview_id, candidate.id)
        interview_id = interview.id
        self._check_finalizable(interview)

        if interview.status == InterviewStatus.FAILED.value:
            logger.info("Retrying finalization of failed interview %s", interview_id)

        try:
            for attempt in range(1, WRITE_ATTEMPTS + 1):
                questions, newly_scored = self._score_questions(interview)

                # Scores are stored before the summary so a summary failure keeps them
                if newly_scored and not self.interview_repo.compare_and_set(
                    interview, questions=Interview.dump_questions(questions)
                ):
                    self._log_finalize_conflict(interview_id, attempt)
                    self._check_finalizable(interview)
                    continue

                total_score = compute_total_score([q.score for q in questions], len(questions))
                logger.info("Interview %s total score: %d", interview_id, total_score)

                summary = self.collaborators.summary_generator.generate(questions, total_score)

                if self.interview_repo.compare_and_set(
                    interview,
                    questions=Interview.dump_questions(questions),
                    total_score=total_score,
                    summary=summary,
                    status=InterviewStatus.COMPLETED.value,
                    completed_at=utc_now(),
                ):
                    break

                self._log_finalize_conflict(interview_id, attempt)
                self._check_finalizable(interview)
            else:
                raise InterviewConflictError(CONFLICT_MESSAGE)
        except InterviewStateError:
            # Completed or reset by a concurrent request; nothing to compensate
            raise
        except Exception:
            logger.exception("Error finalizing interview %s", interview_id)
            self._mark_failed(interview_id)
            raise

        self._send_results(candidate, interview)
        return interview

    # ============ INTERVIEWER OPERATIONS ============

    def assign_questions(
        self,
        interviewer: User,
        candidate_id: str,
        questions: List[Question]
    ) -> Interview:
        """
        Create or overwrite the candidate's pending interview with the given questions.

        An existing interview gets its questions replaced and its status reset to
        pending; nothing is appended.
        """
        if not questions:
            raise InterviewValidationError("Questions must be a non-empty array")

        candidate = self.user_repo.get_by_id(candidate_id)
        if not candidate or candidate.role != Role.CANDIDATE.value:
            raise InterviewValidationError("Unknown candidate id")

        # Only the question definitions are taken from the interviewer
        fresh = [
            Question(question=q.question, difficulty=q.difficulty, time_limit=q.time_limit)
            for q in questions
        ]

        interview = self.interview_repo.get_latest_by_candidate(candidate_id)
        if interview is None:
            interview = Interview(
                candidate_id=candidate_id,
                interviewer_id=interviewer.id,
                status=InterviewStatus.PENDING.value,
            )
            interview.set_questions(fresh)
            interview = self.interview_repo.create(interview)
        else:
            replaced = self.interview_repo.compare_and_set(
                interview,
                questions=Interview.dump_questions(fresh),
                status=InterviewStatus.PENDING.value,
                interviewer_id=interviewer.id,
                total_score=0,
                summary=None,
                completed_at=None,
            )
            if not replaced:
                raise InterviewConflictError(CONFLICT_MESSAGE)

        logger.info(
            "Interviewer %s assigned %d questions to candidate %s (interview %s)",
            interviewer.id, len(fresh), candidate_id, interview.id
        )
        return interview

    def get_scoreboard(self) -> List[Dict[str, Any]]:
        """Completed interviews with their candidate, newest first."""
        rows = []
        for interview in self.interview_repo.list_completed():
            rows.append({
                "interview": interview,
                "candidate": self.user_repo.get_by_id(interview.candidate_id),
            })
        return rows

    def get_interview(self, interview_id: Any) -> Interview:
        """Interviewer access to any interview."""
        interview_id = parse_interview_id(interview_id)
        interview = self.interview_repo.get_by_id(interview_id)
        if not interview:
            raise InterviewNotFoundError("Interview not found")
        return interview

    def get_resume_text(self, interview_id: Any) -> str:
        interview = self.get_interview(interview_id)
        if not interview.resume_text:
            raise InterviewNotFoundError("Resume text not found")
        return interview.resume_text

    def list_candidates(self) -> List[User]:
        return self.user_repo.list_by_role(Role.CANDIDATE)

    def get_user(self, user_id: str) -> Optional[User]:
        return self.user_repo.get_by_id(user_id)

    # ============ INTERNALS ============

    def _check_finalizable(self, interview: Interview) -> None:
        if interview.status == InterviewStatus.COMPLETED.value:
            logger.warning("Interview already completed: %s", interview.id)
            raise InterviewStateError("Interview already completed.", interview.status)
        if interview.status == InterviewStatus.PENDING.value:
            raise InterviewStateError("Interview has not been started.", interview.status)

    def _log_finalize_conflict(self, interview_id: str, attempt: int) -> None:
        logger.info(
            "Interview %s changed during finalization (attempt %d/%d); rescoring",
            interview_id, attempt, WRITE_ATTEMPTS
        )

    def _score_questions(self, interview: Interview) -> Tuple[List[Question], bool]:
        """
        Score every answered, unscored question concurrently.

        Scores that did come back are persisted before the first failure is
        re-raised, so a retried finalize does not score them again.

        Returns:
            (questions with scores filled in, whether any new score was produced)
        """
        questions = interview.get_questions()
        pending = [i for i, q in enumerate(questions) if q.is_answered and q.score is None]
        if not pending:
            return questions, False

        scorer = self.collaborators.answer_scorer
        resume_text = interview.resume_text
        errors = []

        logger.info("Scoring %d answers for interview %s", len(pending), interview.id)
        with ThreadPoolExecutor(max_workers=max(1, self.collaborators.max_workers)) as executor:
            future_to_index = {
                executor.submit(
                    scorer.score,
                    questions[i].question,
                    questions[i].answer,
                    questions[i].difficulty.value,
                    resume_text,
                ): i
                for i in pending
            }

            for future in as_completed(future_to_index):
                index = future_to_index[future]
                try:
                    questions[index].score = future.result()
                except Exception as e:
                    logger.error("Scoring question %d of interview %s failed: %s", index, interview.id, e)
                    errors.append(e)

        if errors:
            if len(errors) < len(pending) and not self.interview_repo.compare_and_set(
                interview, questions=Interview.dump_questions(questions)
            ):
                logger.warning("Interview %s changed during scoring; partial scores not saved", interview.id)
            first = errors[0]
            if isinstance(first, CollaboratorError):
                raise first
            raise CollaboratorError("Failed to score answers.") from first

        return questions, True

    def _mark_failed(self, interview_id: str) -> None:
        """
        Compensating action: flag the interview as failed.

        Retried with backoff; if every attempt fails the record is reported on the
        alert channel because it would otherwise stay in-progress unnoticed.
        """
        attempts = max(1, self.collaborators.failure_mark_retries)
        for attempt in range(1, attempts + 1):
            try:
                self.db.rollback()
                updated = self.interview_repo.mark_failed(interview_id)
                if updated:
                    logger.warning("Interview %s marked as failed", interview_id)
                else:
                    logger.warning("Interview %s not marked failed: already completed or missing", interview_id)
                return
            except Exception:
                logger.exception(
                    "Attempt %d/%d to mark interview %s as failed did not succeed",
                    attempt, attempts, interview_id
                )
                if attempt < attempts:
                    time.sleep(self.collaborators.failure_mark_backoff * attempt)

        alert_logger.error(
            "Interview %s could not be marked as failed after %d attempts; manual repair required",
            interview_id, attempts
        )

    def _send_results(self, candidate: User, interview: Interview) -> None:
        body = render_results_email(candidate.name, interview.total_score, interview.summary or "")
        try:
            self.collaborators.notifier.send(candidate.email, RESULTS_SUBJECT, body)
        except Exception as e:
            logger.exception("Results email for interview %s to %s failed", interview.id, candidate.email)
            raise CollaboratorError(
                "Interview was scored and saved, but the results email could not be sent."
            ) from e
