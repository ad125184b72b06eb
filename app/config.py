from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "postgresql+asyncpg://localhost:5432/reading_tracker"
    default_tz: str = "UTC"  # "current year" is taken in this timezone
    log_level: str = "INFO"

    # Text generation (OpenAI-compatible endpoint)
    openai_api_key: str = ""
    llm_model: str = "gpt-4o-mini"
    llm_base_url: str | None = None  # e.g. Gemini's OpenAI-compatible endpoint
    llm_timeout_seconds: float = 30.0
    llm_temperature: float = 0.1  # near-deterministic SQL
    llm_max_output_tokens: int = 500
    llm_selection_max_tokens: int = 10  # main-challenge pick is a single number

    # Compiled progress queries
    query_timeout_ms: int = 5000

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
