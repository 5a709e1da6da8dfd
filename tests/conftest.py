"""
Shared fixtures: in-memory database, fake collaborators and an API client.

Run: pytest tests -v
"""

import os
import sys
import threading
from pathlib import Path

# Add project root to Python path (for direct invocation)
sys.path.insert(0, str(Path(__file__).parent.parent))

# Settings are read at import time, so the environment is fixed before any project import
os.environ["JWT_SECRET_KEY"] = "test-secret-key-0123456789abcdef"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EMAIL_ENABLED"] = "false"
os.environ["LLM_PROVIDER"] = "openai"
os.environ["OPENAI_API_KEY"] = "test-openai-key"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from models.interview import Difficulty, Question, time_limit_for
from services.collaborators import InterviewCollaborators
from services.exceptions import CollaboratorError
from utils.database import build_engine, init_db

SAMPLE_RESUME = "Jane Smith\nSenior Python Engineer\nFastAPI, PostgreSQL, Docker, AWS"


# ---------------------------------------------------------------------------
# Fake collaborators
# ---------------------------------------------------------------------------

class FakeQuestionGenerator:
    def __init__(self):
        self.calls = []
        self.error = None

    def generate(self, resume_text):
        self.calls.append(resume_text)
        if self.error:
            raise self.error
        difficulties = [Difficulty.EASY, Difficulty.EASY, Difficulty.MEDIUM,
                        Difficulty.MEDIUM, Difficulty.HARD, Difficulty.HARD]
        return [
            Question(question=f"Question {i + 1}?", difficulty=d, time_limit=time_limit_for(d.value))
            for i, d in enumerate(difficulties)
        ]


class FakeAnswerScorer:
    """Scores from a per-question table (default 80); questions in fail_on raise."""

    def __init__(self):
        self.scores = {}
        self.default = 80
        self.fail_on = set()
        self.calls = []
        self._lock = threading.Lock()

    def score(self, question, answer, difficulty, resume_text):
        with self._lock:
            self.calls.append(question)
        if question in self.fail_on:
            raise CollaboratorError("Failed to score answer.")
        return self.scores.get(question, self.default)


class FakeSummaryGenerator:
    def __init__(self):
        self.calls = []
        self.error = None

    def generate(self, questions, total_score):
        self.calls.append((questions, total_score))
        if self.error:
            raise self.error
        return f"Overall score {total_score}. Solid fundamentals."


class FakeNotifier:
    def __init__(self):
        self.sent = []
        self.error = None

    def send(self, recipient, subject, html_body):
        if self.error:
            raise self.error
        self.sent.append((recipient, subject, html_body))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def collaborators():
    return InterviewCollaborators(
        question_generator=FakeQuestionGenerator(),
        answer_scorer=FakeAnswerScorer(),
        summary_generator=FakeSummaryGenerator(),
        notifier=FakeNotifier(),
        max_workers=4,
        failure_mark_retries=2,
        failure_mark_backoff=0,
    )


@pytest.fixture
def client(engine, collaborators):
    from api.dependencies import get_collaborators
    from api.main import app
    from utils.database import get_db

    def override_get_db():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_collaborators] = lambda: collaborators

    # Not used as a context manager: startup validation and table creation are covered elsewhere
    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Sign up and log in a user; returns (user json, auth headers)."""

    def _register(email="jane@example.com", role="candidate", name="Jane", password="pw-123456"):
        payload = {"name": name, "email": email, "password": password}
        if role:
            payload["role"] = role
        response = client.post("/api/auth/signup", json=payload)
        assert response.status_code == 200, response.text
        login = client.post("/api/auth/login", json={"email": email, "password": password})
        assert login.status_code == 200, login.text
        body = login.json()
        return body["user"], {"Authorization": f"Bearer {body['token']}"}

    return _register


@pytest.fixture
def candidate(register):
    return register("jane@example.com", "candidate", "Jane")


@pytest.fixture
def interviewer(register):
    return register("lead@example.com", "interviewer", "Lead")


@pytest.fixture
def start_interview(client):
    """Upload a text résumé as the given candidate; returns the response."""

    def _start(headers, content=SAMPLE_RESUME, filename="resume.txt", phone=None):
        data = {"phone": phone} if phone else None
        return client.post(
            "/api/candidate/start",
            files={"resume": (filename, content.encode("utf-8"), "text/plain")},
            data=data,
            headers=headers,
        )

    return _start


@pytest.fixture
def answer_all(client):
    """Answer the first ``count`` questions of an interview over HTTP."""

    def _answer(headers, interview_id, count):
        for index in range(count):
            response = client.post(
                "/api/candidate/submit-answer",
                json={"interviewId": interview_id, "questionIndex": index, "answer": f"Answer {index}"},
                headers=headers,
            )
            assert response.status_code == 200, response.text

    return _answer
