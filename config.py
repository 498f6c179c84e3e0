"""Application configuration loaded from .env"""

from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # API Keys
    openai_api_key: str

    # Supabase (optional website-analysis cache)
    supabase_url: Optional[str] = Field(default=None, validation_alias="SUPABASE_URL")
    supabase_key: Optional[str] = Field(default=None, validation_alias="SUPABASE_ANON_KEY")

    # Timeouts (seconds)
    http_timeout: int = 30
    document_timeout: int = 45
    llm_timeout: int = 30
    generation_timeout: int = 45

    # Document limits
    max_pdf_bytes: int = 5_000_000
    max_document_chars: int = 50_000
    min_document_chars: int = 50
    website_text_limit: int = 4000

    # Objection-improvement retry (extra attempts, fixed delay)
    objection_retry_attempts: int = 2
    objection_retry_delay: float = 1.0

    # Models
    website_model: str = "gpt-4.1-2025-04-14"
    document_model: str = "gpt-4o-mini"
    feedback_model: str = "gpt-4o"
    pitch_model: str = "gpt-4o"
    objection_model: str = "gpt-4o-mini"
    cadence_model: str = "gpt-4o"
    prompt_model: str = "gpt-4o"

    analysis_temperature: float = 0.3
    generation_temperature: float = 0.7

    # Ask the provider for JSON-shaped output and skip the locator cascade
    use_json_mode: bool = False

    # Web server
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: list[str] = ["*"]
    log_file: Optional[str] = "pipeline.log"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
