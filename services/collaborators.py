"""
Explicit wiring of the external collaborators used by the interview lifecycle.

The collaborators are built once from Settings at startup and handed to
InterviewService, so a misconfigured deployment fails before serving traffic
instead of running with placeholder clients.
"""

from dataclasses import dataclass
from typing import Any, Optional

from config.settings import Settings
from services.answer_scorer import AnswerScorer
from services.notification_service import EmailNotifier, LogOnlyNotifier
from services.question_generator import QuestionGenerator
from services.summary_generator import SummaryGenerator
from utils.llm_service import LLMService
from utils.prompt_loader import PromptLoader


@dataclass(frozen=True)
class InterviewCollaborators:
    """
    Everything InterviewService calls outside the database.

    Attributes:
        question_generator: generate(resume_text) -> list[Question]
        answer_scorer: score(question, answer, difficulty, resume_text) -> int
        summary_generator: generate(questions, total_score) -> str
        notifier: send(recipient, subject, html_body) -> None, raises on failure
        max_workers: thread pool size for concurrent scoring
        failure_mark_retries: attempts for the compensating "failed" write
        failure_mark_backoff: seconds between those attempts (multiplied by attempt)
    """
    question_generator: Any
    answer_scorer: Any
    summary_generator: Any
    notifier: Any
    max_workers: int = 4
    failure_mark_retries: int = 3
    failure_mark_backoff: float = 0.5


def build_collaborators(
    config: Settings,
    llm_service: Optional[LLMService] = None,
    prompt_loader: Optional[PromptLoader] = None,
) -> InterviewCollaborators:
    """
    Build collaborators from validated settings.

    Raises:
        ConfigurationError: when settings are not fit for serving
    """
    config.validate_for_serving()

    llm_service = llm_service or LLMService(config)
    prompt_loader = prompt_loader or PromptLoader()

    notifier = EmailNotifier(config) if config.EMAIL_ENABLED else LogOnlyNotifier()

    return InterviewCollaborators(
        question_generator=QuestionGenerator(llm_service, prompt_loader, config.QUESTION_COUNT),
        answer_scorer=AnswerScorer(llm_service, prompt_loader),
        summary_generator=SummaryGenerator(llm_service, prompt_loader),
        notifier=notifier,
        max_workers=config.MAX_WORKER_THREADS,
        failure_mark_retries=config.FAILURE_MARK_RETRIES,
        failure_mark_backoff=config.FAILURE_MARK_BACKOFF_SECONDS,
    )
