"""Environment-based configuration for the document extractor."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Document extractor settings, loaded from environment variables."""

    # Model provider (required: a missing key fails at import time)
    ANTHROPIC_API_KEY: str
    ANTHROPIC_BASE_URL: str = "https://api.anthropic.com"
    ANTHROPIC_VERSION: str = "2023-06-01"
    MODEL_ID: str = "claude-opus-4-1-20250805"

    # Token budgets per extraction mode
    TEXT_MAX_TOKENS: int = 1024
    STRUCTURED_MAX_TOKENS: int = 500

    # Unset = no timeout; deadlines are the caller's job
    MODEL_TIMEOUT_SECONDS: float | None = None
    FETCH_TIMEOUT_SECONDS: float | None = None

    # CLI retry policy (1 attempt = no retry)
    RETRY_ATTEMPTS: int = 1
    RETRY_DELAY: float = 2.0
    RETRY_BACKOFF: float = 2.0

    LOG_LEVEL: str = "INFO"

    model_config = {
        "env_prefix": "",
        "case_sensitive": True,
        "env_file": ".env",
        "extra": "ignore",
    }


settings = Settings()
