import json
import logging
import re
from enum import Enum
from typing import Any, Dict, Optional

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI

from config.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


class LLMServiceError(RuntimeError):
    """Raised when the provider call fails or returns unusable output."""

    def __init__(self, message: str, raw_output: Optional[str] = None):
        super().__init__(message)
        self.raw_output = raw_output


class LLMProvider(Enum):
    GEMINI = "gemini"
    OPENAI = "openai"
    OLLAMA = "ollama"
    OPENROUTER = "openrouter"


def extract_json(text: str) -> Any:
    """
    Parse JSON out of a model reply.

    Models sometimes wrap the payload in markdown fences or add a sentence
    around it, so the outermost object or array is cut out before parsing.

    Raises:
        ValueError: if no JSON value can be parsed
    """
    if not text:
        raise ValueError("empty model output")

    cleaned = _FENCE_RE.sub("", text).strip()
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    for opener, closer in (("{", "}"), ("[", "]")):
        start = cleaned.find(opener)
        end = cleaned.rfind(closer)
        if start != -1 and end > start:
            try:
                return json.loads(cleaned[start:end + 1])
            except json.JSONDecodeError:
                continue

    raise ValueError("model output is not valid JSON")


class LLMService:
    """
    Provider-agnostic LLM wrapper that supports:
    - OpenAI
    - OpenRouter (OpenAI-compatible)
    - Gemini
    - Ollama (local, OpenAI-compatible)

    Unlike a best-effort helper, every failure raises LLMServiceError so the
    interview lifecycle can react to it.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        provider: Optional[str] = None,
        model_name: Optional[str] = None,
        temperature: Optional[float] = None,
    ):
        self.config = config or default_settings
        self.provider = (provider or self.config.LLM_PROVIDER).lower()
        self.model_name = model_name or self.config.LLM_MODEL
        self.temperature = self.config.LLM_TEMPERATURE if temperature is None else temperature

        self.model = self._load_provider_model()

    # ---------------------------------------------------------------------
    # Provider Loader
    # ---------------------------------------------------------------------
    def _load_provider_model(self):
        provider = self.provider
        timeout = self.config.LLM_REQUEST_TIMEOUT

        if provider == LLMProvider.OPENAI.value:
            return ChatOpenAI(
                api_key=self.config.OPENAI_API_KEY,
                model=self.model_name,
                temperature=self.temperature,
                timeout=timeout,
            )

        if provider == LLMProvider.OPENROUTER.value:
            return ChatOpenAI(
                api_key=self.config.OPENROUTER_API_KEY,
                base_url="https://openrouter.ai/api/v1",
                model=self.model_name,
                temperature=self.temperature,
                timeout=timeout,
            )

        if provider == LLMProvider.OLLAMA.value:
            return ChatOpenAI(
                api_key="ollama",  # not used
                base_url="http://localhost:11434/v1",
                model=self.model_name,
                temperature=self.temperature,
                timeout=timeout,
            )

        if provider == LLMProvider.GEMINI.value:
            return ChatGoogleGenerativeAI(
                model=self.model_name,
                google_api_key=self.config.GEMINI_API_KEY,
                temperature=self.temperature,
                timeout=timeout,
            )

        raise ValueError(f"Unsupported LLM provider: {provider}")

    @staticmethod
    def _content_text(response) -> str:
        # LangChain models return text in different formats
        if isinstance(response.content, str):
            return response.content
        parts = []
        for part in response.content:
            if isinstance(part, dict):
                parts.append(part.get("text", ""))
            else:
                parts.append(str(part))
        return "".join(parts)

    # ---------------------------------------------------------------------
    # Main Text Generator
    # ---------------------------------------------------------------------
    def generate(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """
        Generate raw text response from LLM

        Args:
            prompt: The main prompt/question
            system_prompt: Optional system prompt for context

        Returns:
            Raw text response from LLM

        Raises:
            LLMServiceError: if the provider call fails or returns nothing
        """
        messages = []
        if system_prompt:
            messages.append(SystemMessage(content=system_prompt))
        messages.append(HumanMessage(content=prompt))

        try:
            response = self.model.invoke(messages)
        except Exception as e:
            logger.exception("LLM call failed (provider=%s, model=%s)", self.provider, self.model_name)
            raise LLMServiceError(f"LLM call failed: {e}") from e

        text = self._content_text(response).strip()
        if not text:
            raise LLMServiceError("LLM returned an empty response")
        return text

    # ---------------------------------------------------------------------
    # Main JSON Generator
    # ---------------------------------------------------------------------
    def generate_json(
        self,
        system_prompt: str,
        human_prompt: str,
        schema: Dict[str, Any]
    ) -> Any:
        """
        Generate a JSON value matching ``schema``.

        Raises:
            LLMServiceError: if the call fails or the reply is not JSON.
                The raw reply is kept on the exception for diagnosis.
        """
        messages = [
            SystemMessage(content=self._inject_json_rules(system_prompt, schema)),
            HumanMessage(content=human_prompt)
        ]

        try:
            # For providers that support response_format, pass it dynamically
            if self.provider in [LLMProvider.OPENAI.value, LLMProvider.OPENROUTER.value]:
                response = self.model.invoke(
                    messages,
                    response_format={"type": "json_object"}
                )
            else:
                # For Gemini and Ollama, rely on system prompt enforcement
                response = self.model.invoke(messages)
        except Exception as e:
            logger.exception("LLM JSON call failed (provider=%s, model=%s)", self.provider, self.model_name)
            raise LLMServiceError(f"LLM call failed: {e}") from e

        content = self._content_text(response)
        try:
            return extract_json(content)
        except ValueError as e:
            raise LLMServiceError(str(e), raw_output=content) from e

    # ---------------------------------------------------------------------
    # JSON Enforcement Layer
    # ---------------------------------------------------------------------
    def _inject_json_rules(self, system_prompt: str, schema: Dict[str, Any]) -> str:
        """
        Ensures all providers return the correct JSON, especially Gemini and Ollama.
        """

        return f"""
{system_prompt}

You MUST return ONLY valid JSON matching this schema:

{json.dumps(schema, indent=2)}

Rules:
- Output **only** a JSON object.
- No commentary, no markdown, no code fences.
- Do not explain the JSON, only output it.
- Keys and structure must match the schema exactly.
"""
