"""
Configuration management for the Gita problem search backend.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database configuration
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "gita_dev"
    POSTGRES_USER: str = "gita"
    POSTGRES_PASSWORD: str

    # Service configuration
    SERVICE_HOST: str = "0.0.0.0"
    SERVICE_PORT: int = 8008
    LOG_LEVEL: str = "INFO"

    # LLM API Keys
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_BASE_URL: Optional[str] = None  # OpenAI-compatible gateway, None = api.openai.com
    ANTHROPIC_API_KEY: Optional[str] = None

    # Problem classifier configuration
    AI_PROVIDER: str = "openai"
    AI_MODEL: str = "gpt-4o-mini"
    CLASSIFIER_TIMEOUT: int = 10  # seconds, hung provider falls back to keywords
    CLASSIFIER_TEMPERATURE: float = 0.3
    CLASSIFIER_MAX_TOKENS: int = 300
    CLASSIFIER_MAX_CATEGORIES: int = 3

    # Search configuration
    SEARCH_RESULT_LIMIT: int = 5
    MAX_QUERY_LENGTH: int = 2000  # Characters forwarded to the model

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def database_url(self) -> str:
        """Construct PostgreSQL connection URL."""
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def async_database_url(self) -> str:
        """Construct async PostgreSQL connection URL."""
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


# Global settings instance
settings = Settings()
