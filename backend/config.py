from datetime import UTC, datetime
from pathlib import Path

from pydantic_settings import BaseSettings

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime.

    Replaces the deprecated ``datetime.utcnow()`` while keeping datetimes
    naive so they stay compatible with SQLite (which doesn't store tz info).
    """
    return datetime.now(UTC).replace(tzinfo=None)


class Settings(BaseSettings):
    app_name: str = "EchoLearn"
    database_url: str = f"sqlite+aiosqlite:///{DATA_DIR / 'echolearn.db'}"
    session_id: str = "current"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_max_retries: int = 3
    anthropic_rate_limit_rpm: int = 50
    llm_input_price_per_million: float = 3.0
    llm_output_price_per_million: float = 15.0
    max_flashcards: int = 8
    voice_enabled: bool = True
    speech_rate: float = 1.0
    auto_advance: bool = False
    auto_advance_delay_seconds: float = 1.5
    question_delay_seconds: float = 0.5
    debug: bool = False

    model_config = {"env_prefix": "ECHOLEARN_", "env_file": ".env"}


settings = Settings()
