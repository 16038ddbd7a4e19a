from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings."""

    # Database
    database_url: str = Field(..., env="DATABASE_URL")
    sql_echo: bool = Field(default=False, env="SQL_ECHO")

    # Text generation gateway (OpenAI-compatible chat completions)
    llm_api_url: str = Field(
        default="https://ai.gateway.lovable.dev/v1/chat/completions",
        env="LLM_API_URL",
    )
    llm_api_key: str = Field(default="", env="LLM_API_KEY")
    llm_model: str = Field(default="google/gemini-2.5-flash", env="LLM_MODEL")
    llm_timeout_seconds: float = Field(default=30.0, env="LLM_TIMEOUT_SECONDS")

    # Demo sessions
    demo_session_ttl_hours: int = Field(default=48, env="DEMO_SESSION_TTL_HOURS")
    max_runs_per_session: int = Field(default=5, env="MAX_RUNS_PER_SESSION")
    max_replays_per_run: int = Field(default=1, env="MAX_REPLAYS_PER_RUN")

    # Reported when the gateway gives no usage figure
    default_token_usage: int = Field(default=150, env="DEFAULT_TOKEN_USAGE")

    log_level: str = Field(default="INFO", env="LOG_LEVEL")

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
