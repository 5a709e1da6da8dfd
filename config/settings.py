from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
from dotenv import load_dotenv

# Load .env file into os.environ BEFORE pydantic reads it so every library
# that reads the environment (LangChain providers included) sees the same values
load_dotenv()


class ConfigurationError(RuntimeError):
    """Raised at startup when the service cannot run with the current settings."""

    def __init__(self, problems: List[str]):
        self.problems = problems
        super().__init__("Invalid configuration: " + "; ".join(problems))


class Settings(BaseSettings):
    # LLM Configuration
    LLM_PROVIDER: str = "gemini"
    LLM_MODEL: str = "gemini-2.5-pro"
    LLM_TEMPERATURE: float = 0.4
    LLM_REQUEST_TIMEOUT: float = 60.0

    # Provider keys
    OPENROUTER_API_KEY: Optional[str] = None
    OPENAI_API_KEY: Optional[str] = None
    GEMINI_API_KEY: Optional[str] = None

    # Interview rules
    QUESTION_COUNT: int = 6
    MAX_WORKER_THREADS: int = 4  # Max threads for concurrent answer scoring
    FAILURE_MARK_RETRIES: int = 3
    FAILURE_MARK_BACKOFF_SECONDS: float = 0.5
    MAX_RESUME_BYTES: int = 5 * 1024 * 1024

    # Database
    DATABASE_URL: str = "sqlite:///interview.db"

    # API
    API_HOST: str = "127.0.0.1"
    API_PORT: int = 8000
    API_PREFIX: str = "/api"
    ALLOWED_ORIGINS: str = "*"

    # Session tokens
    JWT_SECRET_KEY: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_MINUTES: int = 60

    # Email (results notification)
    EMAIL_ENABLED: bool = True
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 465
    SMTP_USE_SSL: bool = True
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    EMAIL_FROM: Optional[str] = None
    SMTP_TIMEOUT: float = 30.0

    # Logging
    LOG_LEVEL: str = "INFO"

    # pydantic-settings v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",  # ignore unknown env vars instead of raising errors
    )

    @property
    def allowed_origins(self) -> List[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    def provider_api_key(self) -> Optional[str]:
        """Return the API key that belongs to the configured LLM provider."""
        provider = self.LLM_PROVIDER.lower()
        if provider == "gemini":
            return self.GEMINI_API_KEY
        if provider == "openrouter":
            return self.OPENROUTER_API_KEY
        if provider == "openai":
            return self.OPENAI_API_KEY
        # ollama runs locally without a key
        return "ollama" if provider == "ollama" else None

    def validate_for_serving(self) -> None:
        """
        Check every value the API needs before it accepts traffic.

        Raises:
            ConfigurationError: listing every missing or invalid value
        """
        problems = []

        if not self.JWT_SECRET_KEY or len(self.JWT_SECRET_KEY) < 16:
            problems.append("JWT_SECRET_KEY must be set to at least 16 characters")

        if self.LLM_PROVIDER.lower() not in {"gemini", "openai", "openrouter", "ollama"}:
            problems.append(f"Unsupported LLM_PROVIDER: {self.LLM_PROVIDER}")
        elif not self.provider_api_key():
            problems.append(f"API key for LLM_PROVIDER={self.LLM_PROVIDER} is not set")

        if self.QUESTION_COUNT < 1:
            problems.append("QUESTION_COUNT must be positive")

        if self.EMAIL_ENABLED:
            if not self.SMTP_USER or not self.SMTP_PASSWORD:
                problems.append("SMTP_USER and SMTP_PASSWORD are required when EMAIL_ENABLED=true")

        if not self.DATABASE_URL:
            problems.append("DATABASE_URL is not set")

        if problems:
            raise ConfigurationError(problems)


settings = Settings()
