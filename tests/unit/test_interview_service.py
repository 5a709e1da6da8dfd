"""
Unit tests for InterviewService against an in-memory database.

Covers the lifecycle guards, finalization, and the compensating "failed" write.
Run: pytest tests/unit/test_interview_service.py -v
"""

import logging
import threading
from datetime import timezone

import pytest
from sqlmodel import Session

from models.interview import Difficulty, Interview, InterviewStatus, Question
from models.user import User
from repositories import InterviewRepository
from services.exceptions import (
    CollaboratorError,
    InterviewConflictError,
    InterviewNotFoundError,
    InterviewStateError,
    InterviewValidationError,
)
from services.interview_service import WRITE_ATTEMPTS, InterviewService, parse_interview_id
from utils.database import build_engine, init_db

SAMPLE_RESUME = "Jane Smith\nSenior Python Engineer\nFastAPI, PostgreSQL, Docker, AWS"


@pytest.fixture
def make_user(db_session):
    def _make(email, role="candidate", name="User"):
        user = User(name=name, email=email, password_hash="x", role=role)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make


@pytest.fixture
def service(db_session, collaborators):
    return InterviewService(db_session, collaborators)


@pytest.fixture
def candidate(make_user):
    return make_user("jane@example.com", name="Jane")


def answer_all(service, interview, candidate_id, count=None):
    total = len(interview.get_questions())
    for i in range(total if count is None else count):
        service.submit_answer(interview.id, candidate_id, i, f"Answer {i}")


def reload(engine, interview_id):
    with Session(engine) as session:
        return session.get(Interview, interview_id)


class TestTimestamps:
    def test_new_records_default_to_utc(self):
        user = User(name="Jane", email="jane@example.com", password_hash="x")
        interview = Interview(candidate_id=user.id)
        assert user.created_at.tzinfo == timezone.utc
        assert interview.created_at.tzinfo == timezone.utc
        assert interview.updated_at.tzinfo == timezone.utc

    def test_columns_store_timezone(self):
        for column in ("created_at", "updated_at", "completed_at"):
            assert Interview.__table__.c[column].type.timezone is True
        assert User.__table__.c["created_at"].type.timezone is True


class TestParseInterviewId:
    def test_normalizes_uuid(self):
        raw = "3F6C1A2E-8F7B-4A53-9F0E-2B9D4C1E7A10"
        assert parse_interview_id(raw) == raw.lower()

    @pytest.mark.parametrize("raw", ["abc", "123", "3f6c1a2e-8f7b"])
    def test_malformed(self, raw):
        with pytest.raises(InterviewValidationError):
            parse_interview_id(raw)

    @pytest.mark.parametrize("raw", [None, "", "  "])
    def test_missing(self, raw):
        with pytest.raises(InterviewValidationError) as exc:
            parse_interview_id(raw)
        assert str(exc.value) == "Missing interviewId"


class TestStartInterview:
    def test_creates_in_progress_with_six_questions(self, service, candidate):
        interview = service.start_interview(candidate, SAMPLE_RESUME, phone="+1 555 0100")
        assert interview.status == InterviewStatus.IN_PROGRESS.value
        assert interview.candidate_phone == "+1 555 0100"
        questions = interview.get_questions()
        assert len(questions) == 6
        assert all(q.answer == "" and q.score is None for q in questions)

    def test_empty_resume_rejected_before_generation(self, service, candidate, collaborators):
        with pytest.raises(InterviewValidationError):
            service.start_interview(candidate, "   ")
        assert collaborators.question_generator.calls == []

    def test_generation_failure_creates_nothing(self, service, candidate, collaborators):
        collaborators.question_generator.error = CollaboratorError("Failed to generate structured questions from AI.")
        with pytest.raises(CollaboratorError):
            service.start_interview(candidate, SAMPLE_RESUME)
        assert service.list_candidate_interviews(candidate.id) == []


class TestOwnership:
    def test_foreign_interview_is_not_found(self, service, candidate, make_user):
        other = make_user("eve@example.com")
        interview = service.start_interview(candidate, SAMPLE_RESUME)
        with pytest.raises(InterviewNotFoundError):
            service.get_candidate_interview(interview.id, other.id)
        with pytest.raises(InterviewNotFoundError):
            service.submit_answer(interview.id, other.id, 0, "hijack")
        with pytest.raises(InterviewNotFoundError):
            service.finalize_interview(interview.id, other)


class TestSubmitAnswer:
    def test_reports_next_index_and_finished(self, service, candidate):
        interview = service.start_interview(candidate, SAMPLE_RESUME)
        assert service.submit_answer(interview.id, candidate.id, 0, "first") == {
            "next_question_index": 1, "is_finished": False
        }
        assert service.submit_answer(interview.id, candidate.id, 5, "last") == {
            "next_question_index": 6, "is_finished": True
        }

    def test_overwrites_previous_answer(self, service, candidate, engine):
        interview = service.start_interview(candidate, SAMPLE_RESUME)
        service.submit_answer(interview.id, candidate.id, 2, "draft")
        service.submit_answer(interview.id, candidate.id, 2, "final")
        assert reload(engine, interview.id).get_questions()[2].answer == "final"

    @pytest.mark.parametrize("index,answer", [(-1, "x"), (None, "x"), (True, "x"), (0, ""), (0, "   "), (0, None)])
    def test_invalid_input(self, service, candidate, index, answer):
        interview = service.start_interview(candidate, SAMPLE_RESUME)
        with pytest.raises(InterviewValidationError) as exc:
            service.submit_answer(interview.id, candidate.id, index, answer)
        assert str(exc.value) == "Invalid questionIndex or missing answer"

    def test_index_equal_to_length_is_out_of_bounds(self, service, candidate):
        interview = service.start_interview(candidate, SAMPLE_RESUME)
        with pytest.raises(InterviewValidationError) as exc:
            service.submit_answer(interview.id, candidate.id, 6, "x")
        assert str(exc.value) == "Question index out of bounds"

    def test_bounds_checked_before_status(self, service, candidate):
        interview = service.start_interview(candidate, SAMPLE_RESUME)
        answer_all(service, interview, candidate.id)
        service.finalize_interview(interview.id, candidate)
        with pytest.raises(InterviewValidationError):
            service.submit_answer(interview.id, candidate.id, 6, "late")
        with pytest.raises(InterviewStateError):
            service.submit_answer(interview.id, candidate.id, 0, "late")


class TestFinalize:
    def test_scores_answered_questions_only(self, service, candidate, collaborators, engine):
        interview = service.start_interview(candidate, SAMPLE_RESUME)
        answer_all(service, interview, candidate.id, count=3)
        collaborators.answer_scorer.scores = {"Question 1?": 90, "Question 2?": 60, "Question 3?": 30}

        result = service.finalize_interview(interview.id, candidate)

        # (90 + 60 + 30) / 600 = 30%
        assert result.total_score == 30
        assert result.status == InterviewStatus.COMPLETED.value
        assert sorted(collaborators.answer_scorer.calls) == ["Question 1?", "Question 2?", "Question 3?"]
        stored = reload(engine, interview.id)
        assert [q.score for q in stored.get_questions()] == [90, 60, 30, None, None, None]
        assert stored.completed_at is not None

    def test_email_sent_after_persistence(self, service, candidate, collaborators):
        interview = service.start_interview(candidate, SAMPLE_RESUME)
        answer_all(service, interview, candidate.id)
        service.finalize_interview(interview.id, candidate)

        (recipient, subject, body), = collaborators.notifier.sent
        assert recipient == "jane@example.com"
        assert subject == "Your AI Interview Results are Ready"
        assert "80%" in body

    def test_second_finalize_rejected(self, service, candidate, collaborators, engine):
        interview = service.start_interview(candidate, SAMPLE_RESUME)
        answer_all(service, interview, candidate.id)
        first = service.finalize_interview(interview.id, candidate)
        total_score, summary = first.total_score, first.summary

        collaborators.answer_scorer.default = 10
        with pytest.raises(InterviewStateError) as exc:
            service.finalize_interview(interview.id, candidate)
        assert str(exc.value) == "Interview already completed."

        stored = reload(engine, interview.id)
        assert stored.status == InterviewStatus.COMPLETED.value
        assert (stored.total_score, stored.summary) == (total_score, summary)
        assert len(collaborators.summary_generator.calls) == 1
        assert len(collaborators.notifier.sent) == 1

    def test_pending_interview_cannot_be_finalized(self, service, candidate, make_user):
        lead = make_user("lead@example.com", role="interviewer")
        interview = service.assign_questions(
            lead, candidate.id, [Question(question="Q?", difficulty=Difficulty.EASY, time_limit=30)]
        )
        with pytest.raises(InterviewStateError):
            service.finalize_interview(interview.id, candidate)

    def test_scoring_failure_marks_failed_and_keeps_partial_scores(self, service, candidate, collaborators, engine):
        interview = service.start_interview(candidate, SAMPLE_RESUME)
        answer_all(service, interview, candidate.id)
        collaborators.answer_scorer.fail_on = {"Question 4?"}

        with pytest.raises(CollaboratorError):
            service.finalize_interview(interview.id, candidate)

        stored = reload(engine, interview.id)
        assert stored.status == InterviewStatus.FAILED.value
        scores = [q.score for q in stored.get_questions()]
        assert scores[3] is None
        assert [s for i, s in enumerate(scores) if i != 3] == [80] * 5
        assert collaborators.notifier.sent == []

    def test_retry_after_failure_scores_only_missing(self, service, candidate, collaborators, engine):
        interview = service.start_interview(candidate, SAMPLE_RESUME)
        answer_all(service, interview, candidate.id)
        collaborators.answer_scorer.fail_on = {"Question 4?"}
        with pytest.raises(CollaboratorError):
            service.finalize_interview(interview.id, candidate)

        collaborators.answer_scorer.fail_on = set()
        collaborators.answer_scorer.calls.clear()
        result = service.finalize_interview(interview.id, candidate)

        assert collaborators.answer_scorer.calls == ["Question 4?"]
        assert result.status == InterviewStatus.COMPLETED.value
        assert result.total_score == 80

    def test_summary_failure_marks_failed(self, service, candidate, collaborators, engine):
        interview = service.start_interview(candidate, SAMPLE_RESUME)
        answer_all(service, interview, candidate.id)
        collaborators.summary_generator.error = CollaboratorError("Failed to generate interview summary.")

        with pytest.raises(CollaboratorError) as exc:
            service.finalize_interview(interview.id, candidate)

        assert str(exc.value) == "Failed to generate interview summary."
        assert reload(engine, interview.id).status == InterviewStatus.FAILED.value

    def test_summary_failure_keeps_scores_for_retry(self, service, candidate, collaborators, engine):
        interview = service.start_interview(candidate, SAMPLE_RESUME)
        answer_all(service, interview, candidate.id)
        collaborators.summary_generator.error = CollaboratorError("Failed to generate interview summary.")

        with pytest.raises(CollaboratorError):
            service.finalize_interview(interview.id, candidate)

        stored = reload(engine, interview.id)
        assert stored.status == InterviewStatus.FAILED.value
        assert [q.score for q in stored.get_questions()] == [80] * 6

        collaborators.summary_generator.error = None
        collaborators.answer_scorer.calls.clear()
        result = service.finalize_interview(interview.id, candidate)

        assert collaborators.answer_scorer.calls == []
        assert result.status == InterviewStatus.COMPLETED.value
        assert result.total_score == 80

    def test_email_failure_keeps_completed(self, service, candidate, collaborators, engine):
        interview = service.start_interview(candidate, SAMPLE_RESUME)
        answer_all(service, interview, candidate.id)
        collaborators.notifier.error = OSError("SMTP down")

        with pytest.raises(CollaboratorError) as exc:
            service.finalize_interview(interview.id, candidate)

        assert "saved" in str(exc.value)
        stored = reload(engine, interview.id)
        assert stored.status == InterviewStatus.COMPLETED.value
        assert stored.total_score == 80

    def test_failed_marker_retries_then_alerts(self, service, candidate, collaborators, monkeypatch, caplog):
        interview = service.start_interview(candidate, SAMPLE_RESUME)
        collaborators.summary_generator.error = CollaboratorError("Failed to generate interview summary.")

        attempts = []

        def broken_mark_failed(interview_id):
            attempts.append(interview_id)
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(service.interview_repo, "mark_failed", broken_mark_failed)

        with caplog.at_level(logging.ERROR, logger="interview.alerts"):
            with pytest.raises(CollaboratorError) as exc:
                service.finalize_interview(interview.id, candidate)

        # The original error reaches the caller, not the marker failure
        assert str(exc.value) == "Failed to generate interview summary."
        assert attempts == [interview.id] * collaborators.failure_mark_retries
        alerts = [r for r in caplog.records if r.name == "interview.alerts"]
        assert len(alerts) == 1
        assert interview.id in alerts[0].getMessage()

    def test_failed_marker_recovers_on_later_attempt(self, service, candidate, collaborators, monkeypatch, engine, caplog):
        interview = service.start_interview(candidate, SAMPLE_RESUME)
        collaborators.summary_generator.error = CollaboratorError("Failed to generate interview summary.")

        real_mark_failed = service.interview_repo.mark_failed
        calls = []

        def flaky_mark_failed(interview_id):
            calls.append(interview_id)
            if len(calls) == 1:
                raise RuntimeError("transient")
            return real_mark_failed(interview_id)

        monkeypatch.setattr(service.interview_repo, "mark_failed", flaky_mark_failed)

        with caplog.at_level(logging.ERROR, logger="interview.alerts"):
            with pytest.raises(CollaboratorError):
                service.finalize_interview(interview.id, candidate)

        assert len(calls) == 2
        assert reload(engine, interview.id).status == InterviewStatus.FAILED.value
        assert not [r for r in caplog.records if r.name == "interview.alerts"]


class TestConcurrentWrites:
    def test_answers_to_different_questions_both_persist(self, tmp_path, collaborators, monkeypatch):
        # A file database gives each thread its own connection
        engine = build_engine(f"sqlite:///{tmp_path / 'interviews.db'}")
        init_db(engine)
        with Session(engine) as session:
            owner = User(name="Jane", email="jane@example.com", password_hash="x")
            session.add(owner)
            session.commit()
            session.refresh(owner)
            interview = InterviewService(session, collaborators).start_interview(owner, SAMPLE_RESUME)
            interview_id, owner_id = interview.id, owner.id

        # Both requests read the interview before either one writes
        barrier = threading.Barrier(2, timeout=10)
        seen = threading.local()
        real_get_owned = InterviewRepository.get_owned

        def get_owned_then_wait(repo, *args):
            found = real_get_owned(repo, *args)
            if not getattr(seen, "waited", False):
                seen.waited = True
                barrier.wait()
            return found

        monkeypatch.setattr(InterviewRepository, "get_owned", get_owned_then_wait)

        errors = []

        def answer(index):
            try:
                with Session(engine) as session:
                    InterviewService(session, collaborators).submit_answer(
                        interview_id, owner_id, index, f"answer {index}"
                    )
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=answer, args=(index,)) for index in (0, 1)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert errors == []
        stored = reload(engine, interview_id)
        assert [q.answer for q in stored.get_questions()][:2] == ["answer 0", "answer 1"]
        assert stored.version == 3
        engine.dispose()

    def test_stale_write_is_rejected_and_refreshed(self, service, candidate, engine):
        interview = service.start_interview(candidate, SAMPLE_RESUME)
        with Session(engine) as other:
            stale = other.get(Interview, interview.id)
            service.submit_answer(interview.id, candidate.id, 0, "fresh")

            applied = InterviewRepository(other).compare_and_set(stale, summary="overwritten")

            assert applied is False
            assert stale.get_questions()[0].answer == "fresh"
            assert stale.summary is None

    def test_gives_up_after_repeated_conflicts(self, service, candidate, monkeypatch, engine):
        interview = service.start_interview(candidate, SAMPLE_RESUME)
        attempts = []

        def always_stale(target, **values):
            attempts.append(values)
            return False

        monkeypatch.setattr(service.interview_repo, "compare_and_set", always_stale)

        with pytest.raises(InterviewConflictError):
            service.submit_answer(interview.id, candidate.id, 0, "lost")
        assert len(attempts) == WRITE_ATTEMPTS
        assert reload(engine, interview.id).get_questions()[0].answer == ""

    def test_finalize_includes_answer_saved_during_summary(self, service, candidate, collaborators, engine):
        interview = service.start_interview(candidate, SAMPLE_RESUME)
        answer_all(service, interview, candidate.id, count=5)
        real_generate = collaborators.summary_generator.generate
        late = []

        def generate_after_late_answer(questions, total_score):
            # The last answer arrives through another request while the summary is written
            if not late:
                late.append(True)
                with Session(engine) as other:
                    InterviewService(other, collaborators).submit_answer(interview.id, candidate.id, 5, "late")
            return real_generate(questions, total_score)

        collaborators.summary_generator.generate = generate_after_late_answer

        result = service.finalize_interview(interview.id, candidate)

        assert result.status == InterviewStatus.COMPLETED.value
        stored = reload(engine, interview.id)
        assert stored.get_questions()[5].answer == "late"
        assert [q.score for q in stored.get_questions()] == [80] * 6
        assert stored.total_score == 80


class TestAssignQuestions:
    def test_creates_pending_interview(self, service, candidate, make_user):
        lead = make_user("lead@example.com", role="interviewer")
        interview = service.assign_questions(lead, candidate.id, [
            Question(question="Explain closures", difficulty=Difficulty.MEDIUM, time_limit=45),
        ])
        assert interview.status == InterviewStatus.PENDING.value
        assert interview.interviewer_id == lead.id
        assert interview.get_questions()[0].time_limit == 45

    def test_overwrites_latest_interview(self, service, candidate, make_user, engine):
        lead = make_user("lead@example.com", role="interviewer")
        started = service.start_interview(candidate, SAMPLE_RESUME)
        answer_all(service, started, candidate.id)
        service.finalize_interview(started.id, candidate)

        assigned = service.assign_questions(lead, candidate.id, [
            Question(question="Q1", difficulty=Difficulty.EASY, time_limit=30),
            Question(question="Q2", difficulty=Difficulty.HARD, time_limit=80),
        ])

        assert assigned.id == started.id
        stored = reload(engine, started.id)
        assert stored.status == InterviewStatus.PENDING.value
        assert [q.question for q in stored.get_questions()] == ["Q1", "Q2"]
        assert stored.total_score == 0
        assert stored.summary is None
        assert len(service.list_candidate_interviews(candidate.id)) == 1

    def test_begin_then_answer(self, service, candidate, make_user):
        lead = make_user("lead@example.com", role="interviewer")
        interview = service.assign_questions(lead, candidate.id, [
            Question(question="Q1", difficulty=Difficulty.EASY, time_limit=30),
        ])
        with pytest.raises(InterviewStateError):
            service.submit_answer(interview.id, candidate.id, 0, "too early")

        service.begin_interview(interview.id, candidate.id)
        assert service.submit_answer(interview.id, candidate.id, 0, "now")["is_finished"] is True

        with pytest.raises(InterviewStateError):
            service.begin_interview(interview.id, candidate.id)

    def test_unknown_candidate(self, service, make_user):
        lead = make_user("lead@example.com", role="interviewer")
        with pytest.raises(InterviewValidationError):
            service.assign_questions(lead, "no-such-user", [
                Question(question="Q1", difficulty=Difficulty.EASY, time_limit=30),
            ])

    def test_interviewer_is_not_a_candidate(self, service, make_user):
        lead = make_user("lead@example.com", role="interviewer")
        with pytest.raises(InterviewValidationError):
            service.assign_questions(lead, lead.id, [
                Question(question="Q1", difficulty=Difficulty.EASY, time_limit=30),
            ])

    def test_empty_list(self, service, candidate, make_user):
        lead = make_user("lead@example.com", role="interviewer")
        with pytest.raises(InterviewValidationError):
            service.assign_questions(lead, candidate.id, [])


class TestInterviewerReads:
    def test_scoreboard_lists_completed_only(self, service, candidate, make_user):
        other = make_user("bob@example.com", name="Bob")
        done = service.start_interview(candidate, SAMPLE_RESUME)
        answer_all(service, done, candidate.id)
        service.finalize_interview(done.id, candidate)
        service.start_interview(other, SAMPLE_RESUME)

        rows = service.get_scoreboard()
        assert [row["interview"].id for row in rows] == [done.id]
        assert rows[0]["candidate"].email == "jane@example.com"

    def test_resume_text(self, service, candidate):
        interview = service.start_interview(candidate, SAMPLE_RESUME)
        assert service.get_resume_text(interview.id) == SAMPLE_RESUME

    def test_resume_missing_for_assigned_interview(self, service, candidate, make_user):
        lead = make_user("lead@example.com", role="interviewer")
        interview = service.assign_questions(lead, candidate.id, [
            Question(question="Q1", difficulty=Difficulty.EASY, time_limit=30),
        ])
        with pytest.raises(InterviewNotFoundError):
            service.get_resume_text(interview.id)

    def test_list_candidates_excludes_interviewers(self, service, candidate, make_user):
        make_user("lead@example.com", role="interviewer")
        assert [u.email for u in service.list_candidates()] == ["jane@example.com"]
