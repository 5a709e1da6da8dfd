"""
Interview repository for interview persistence.

Every candidate-facing lookup filters by owner so that another candidate's
interview looks exactly like a missing one.
"""

from typing import Any, List, Optional
from sqlalchemy import update as sa_update
from sqlmodel import Session, select

from models.interview import Interview, InterviewStatus, utc_now
from repositories.base_repository import BaseRepository


class InterviewRepository(BaseRepository[Interview]):
    """Repository for managing interviews."""

    def __init__(self, db_session: Session):
        super().__init__(db_session, Interview)

    def get_owned(self, interview_id: str, candidate_id: str) -> Optional[Interview]:
        """
        Get an interview only if it belongs to the candidate.

        Args:
            interview_id: Interview identifier
            candidate_id: Owning candidate

        Returns:
            Interview if found and owned, None otherwise
        """
        statement = select(Interview).where(
            Interview.id == interview_id,
            Interview.candidate_id == candidate_id
        )
        return self.db.exec(statement).first()

    def get_latest_by_candidate(self, candidate_id: str) -> Optional[Interview]:
        """
        Get the most recent interview for a candidate.

        Args:
            candidate_id: The candidate ID

        Returns:
            The most recent Interview or None if not found
        """
        statement = select(Interview).where(
            Interview.candidate_id == candidate_id
        ).order_by(Interview.created_at.desc())
        return self.db.exec(statement).first()

    def list_by_candidate(self, candidate_id: str, limit: int = 50) -> List[Interview]:
        statement = (
            select(Interview)
            .where(Interview.candidate_id == candidate_id)
            .order_by(Interview.created_at.desc())
            .limit(limit)
        )
        return list(self.db.exec(statement).all())

    def list_completed(self, limit: int = 500) -> List[Interview]:
        """
        Get completed interviews, newest first.

        Args:
            limit: Maximum number of results

        Returns:
            List of completed interviews
        """
        statement = (
            select(Interview)
            .where(Interview.status == InterviewStatus.COMPLETED.value)
            .order_by(Interview.created_at.desc())
            .limit(limit)
        )
        return list(self.db.exec(statement).all())

    def compare_and_set(self, interview: Interview, **values: Any) -> bool:
        """
        Write column values only if the row is still at the version it was read at.

        A successful write bumps the version. ``interview`` is refreshed either
        way, so after a miss it holds the state written by the other request.

        Args:
            interview: Interview as last read by the caller
            **values: Column values to set

        Returns:
            True if the write was applied
        """
        statement = (
            sa_update(Interview)
            .where(Interview.id == interview.id)
            .where(Interview.version == interview.version)
            .values(version=Interview.version + 1, updated_at=utc_now(), **values)
            .execution_options(synchronize_session=False)
        )
        result = self.db.exec(statement)
        self.db.commit()
        self.db.refresh(interview)
        return result.rowcount == 1

    def mark_failed(self, interview_id: str) -> bool:
        """
        Flag an interview as failed unless it already reached completed.

        Issued as a single conditional UPDATE so it never overwrites a
        completion stored by a concurrent request.

        Returns:
            True if a row was updated
        """
        statement = (
            sa_update(Interview)
            .where(Interview.id == interview_id)
            .where(Interview.status != InterviewStatus.COMPLETED.value)
            .values(
                status=InterviewStatus.FAILED.value,
                version=Interview.version + 1,
                updated_at=utc_now(),
            )
        )
        result = self.db.exec(statement)
        self.db.commit()
        return bool(result.rowcount)
