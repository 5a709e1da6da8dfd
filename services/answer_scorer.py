import logging
from typing import Optional

from services.exceptions import CollaboratorError
from utils.llm_service import LLMService, LLMServiceError
from utils.prompt_loader import PromptLoader

logger = logging.getLogger(__name__)

SCORE_SCHEMA = {"score": "integer 0-100", "rationale": "string"}

# Only the head of the résumé is sent as scoring context
RESUME_CONTEXT_CHARS = 500


def clamp_score(value) -> int:
    """Coerce a model-provided score into an int between 0 and 100."""
    if isinstance(value, bool):
        raise ValueError(f"score is not a number: {value!r}")
    score = int(round(float(value)))
    return max(0, min(100, score))


class AnswerScorer:
    """Scores a single answer with the LLM."""

    def __init__(self, llm_service: LLMService, prompt_loader: Optional[PromptLoader] = None):
        self.llm_service = llm_service
        self.prompt_loader = prompt_loader or PromptLoader()

    def score(self, question: str, answer: str, difficulty: str, resume_text: Optional[str]) -> int:
        """
        Score one answer from 0 to 100.

        Raises:
            CollaboratorError: if the model fails or returns no usable score
        """
        resume_context = (resume_text or "")[:RESUME_CONTEXT_CHARS] or "(no resume provided)"
        prompt = self.prompt_loader.load(
            "score_answer",
            difficulty=difficulty,
            question=question,
            answer=answer,
            resume_context=resume_context,
        )

        try:
            payload = self.llm_service.generate_json(
                system_prompt="You grade technical interview answers.",
                human_prompt=prompt,
                schema=SCORE_SCHEMA,
            )
        except LLMServiceError as e:
            if e.raw_output is not None:
                logger.error("Scoring output is not valid JSON. Raw output: %s", e.raw_output[:1000])
            raise CollaboratorError("Failed to score answer.") from e

        try:
            return clamp_score(payload["score"])
        except (KeyError, TypeError, ValueError):
            logger.error("Scoring output has no usable score: %r", payload)
            raise CollaboratorError("Failed to score answer.")
