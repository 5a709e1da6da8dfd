"""
Question generation from résumé text.
"""

import logging
from typing import Any, List, Optional

from models.interview import Difficulty, Question, time_limit_for
from services.exceptions import CollaboratorError
from utils.llm_service import LLMService, LLMServiceError
from utils.prompt_loader import PromptLoader

logger = logging.getLogger(__name__)

QUESTIONS_SCHEMA = {
    "questions": [
        {"question": "string", "difficulty": "easy | medium | hard"}
    ]
}

# Raw model output kept in logs is truncated to this many characters
RAW_OUTPUT_LOG_LIMIT = 2000


def difficulty_split(question_count: int):
    """Split a question count into (easy, medium, hard), as even as possible."""
    base, extra = divmod(question_count, 3)
    easy = base + (1 if extra > 0 else 0)
    medium = base + (1 if extra > 1 else 0)
    return easy, medium, base


class QuestionGenerator:
    """Generates a fixed-size, difficulty-tagged question list for a résumé."""

    def __init__(
        self,
        llm_service: LLMService,
        prompt_loader: Optional[PromptLoader] = None,
        question_count: int = 6,
    ):
        self.llm_service = llm_service
        self.prompt_loader = prompt_loader or PromptLoader()
        self.question_count = question_count

    def generate(self, resume_text: str) -> List[Question]:
        """
        Generate exactly ``question_count`` questions for the résumé.

        Raises:
            CollaboratorError: if the model fails or its output cannot be used
        """
        easy, medium, hard = difficulty_split(self.question_count)
        prompt = self.prompt_loader.load(
            "generate_questions",
            question_count=self.question_count,
            easy_count=easy,
            medium_count=medium,
            hard_count=hard,
            resume_text=resume_text,
        )

        try:
            payload = self.llm_service.generate_json(
                system_prompt="You write technical interview questions.",
                human_prompt=prompt,
                schema=QUESTIONS_SCHEMA,
            )
        except LLMServiceError as e:
            if e.raw_output is not None:
                logger.error(
                    "Question generation output is not valid JSON. Raw output: %s",
                    e.raw_output[:RAW_OUTPUT_LOG_LIMIT],
                )
            raise CollaboratorError("Failed to generate structured questions from AI.") from e

        return self.parse(payload)

    def parse(self, payload: Any) -> List[Question]:
        """
        Turn the model's JSON into Question objects with time limits assigned.

        Accepts either {"questions": [...]} or a bare array.
        """
        items = payload.get("questions") if isinstance(payload, dict) else payload
        if not isinstance(items, list):
            logger.error("Question generation returned unexpected structure: %r", payload)
            raise CollaboratorError("Failed to generate structured questions from AI.")

        if len(items) != self.question_count:
            logger.error(
                "Question generation returned %d questions, expected %d. Raw output: %r",
                len(items), self.question_count, payload,
            )
            raise CollaboratorError("Failed to generate structured questions from AI.")

        questions = []
        for item in items:
            text = item.get("question") if isinstance(item, dict) else None
            difficulty = item.get("difficulty") if isinstance(item, dict) else None
            if not isinstance(text, str) or not text.strip() or not isinstance(difficulty, str):
                logger.error("Malformed generated question: %r", item)
                raise CollaboratorError("Failed to generate structured questions from AI.")
            try:
                limit = time_limit_for(difficulty)
            except ValueError:
                logger.error("Generated question has unknown difficulty: %r", item)
                raise CollaboratorError("Failed to generate structured questions from AI.")

            questions.append(Question(
                question=text.strip(),
                difficulty=Difficulty(difficulty.strip().lower()),
                time_limit=limit,
            ))

        return questions
