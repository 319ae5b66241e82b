import os
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global configuration for environment variables."""

    APP_NAME: str = "Multi-AI Chat"
    ENV: str = os.getenv("ENV", "development")

    # Server config
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", 8080))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Provider API keys. A key starting with "sk-or-v1" is routed through the proxy.
    OPENAI_API_KEY: str | None = os.getenv("OPENAI_API_KEY")
    ANTHROPIC_API_KEY: str | None = os.getenv("ANTHROPIC_API_KEY")
    GEMINI_API_KEY: str | None = os.getenv("GEMINI_API_KEY")
    GOOGLE_GEMMA_API_KEY: str | None = os.getenv("GOOGLE_GEMMA_API_KEY")
    MISTRAL_API_KEY: str | None = os.getenv("MISTRAL_API_KEY")
    COHERE_API_KEY: str | None = os.getenv("COHERE_API_KEY")

    # Upstream endpoints
    OPENAI_BASE_URL: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    ANTHROPIC_BASE_URL: str = os.getenv("ANTHROPIC_BASE_URL", "https://api.anthropic.com")
    ANTHROPIC_VERSION: str = os.getenv("ANTHROPIC_VERSION", "2023-06-01")
    GEMINI_BASE_URL: str = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
    MISTRAL_BASE_URL: str = os.getenv("MISTRAL_BASE_URL", "https://api.mistral.ai/v1")
    COHERE_BASE_URL: str = os.getenv("COHERE_BASE_URL", "https://api.cohere.ai/v1")
    PROXY_BASE_URL: str = os.getenv("PROXY_BASE_URL", "https://openrouter.ai/api/v1")
    PROXY_REFERER: str = os.getenv("PROXY_REFERER", "http://localhost:3000")

    # Upstream call limits
    REQUEST_TIMEOUT_MS: int = int(os.getenv("REQUEST_TIMEOUT_MS", "60000"))
    COMPARE_MAX_CONCURRENCY: int = int(os.getenv("COMPARE_MAX_CONCURRENCY", "0"))  # 0 = uncapped

    # Auth
    JWT_SUPER_SECRET: str = os.getenv("JWT_SUPER_SECRET", "dev-secret")
    JWT_REFRESH_SECRET: str = os.getenv("JWT_REFRESH_SECRET", "dev-refresh-secret")

    # Postgres
    POSTGRES_HOST: str = os.getenv("POSTGRES_HOST", "")
    POSTGRES_PORT: int = int(os.getenv("POSTGRES_PORT", "5432"))
    POSTGRES_USER: str = os.getenv("POSTGRES_USER", "")
    POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "")
    POSTGRES_DB: str = os.getenv("POSTGRES_DB", "multi_ai_chat")

    # Debug
    DEBUG: bool = os.getenv("DEBUG", "True").lower() in ("1", "true")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="allow")


settings = Settings()
