"""Configuration management for the election coordinator service."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Service configuration
    SERVICE_NAME: str = "election-coordinator"
    API_VERSION: str = "v1"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Server configuration
    HOST: str = "127.0.0.1"
    PORT: int = 8080

    # Rate limiting
    RATE_LIMIT: str = "10000/second"

    # Upper bound on a single request; a timeout is reported as 503
    REQUEST_TIMEOUT_SECONDS: float = 5.0

    # CORS settings
    CORS_ORIGINS: list = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = False
    CORS_ALLOW_METHODS: list = ["*"]
    CORS_ALLOW_HEADERS: list = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
