import logging
from typing import List, Optional

from models.interview import Question
from services.exceptions import CollaboratorError
from utils.llm_service import LLMService, LLMServiceError
from utils.prompt_loader import PromptLoader

logger = logging.getLogger(__name__)

ANSWER_EXCERPT_CHARS = 100


def format_interview_details(questions: List[Question]) -> str:
    """One line per question: difficulty, text, score and an answer excerpt."""
    lines = []
    for q in questions:
        answer = q.answer or ""
        excerpt = answer[:ANSWER_EXCERPT_CHARS] + ("..." if len(answer) > ANSWER_EXCERPT_CHARS else "")
        score = q.score if q.score is not None else "unanswered"
        lines.append(
            f"Difficulty: {q.difficulty.value}, Question: {q.question}, "
            f"Score: {score}, Answer: {excerpt or '(no answer)'}"
        )
    return "\n".join(lines)


class SummaryGenerator:
    """Writes the interviewer-facing report for a scored interview."""

    def __init__(self, llm_service: LLMService, prompt_loader: Optional[PromptLoader] = None):
        self.llm_service = llm_service
        self.prompt_loader = prompt_loader or PromptLoader()

    def generate(self, questions: List[Question], total_score: int) -> str:
        prompt = self.prompt_loader.load(
            "summarize_interview",
            total_score=total_score,
            interview_details=format_interview_details(questions),
        )
        try:
            return self.llm_service.generate(prompt)
        except LLMServiceError as e:
            raise CollaboratorError("Failed to generate interview summary.") from e
