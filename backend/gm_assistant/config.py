"""Application configuration loaded from environment variables."""

from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings

# Allowance for database I/O within one turn, on top of the generation calls
TURN_IO_MARGIN_SECONDS = 30.0


class Settings(BaseSettings):
    # Database (one local file by default, any async SQLAlchemy URL works)
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/gm_assistant.db"

    # Redis (only used when TURN_LOCK_BACKEND == "redis")
    REDIS_URL: str = "redis://localhost:6379/0"

    # LLM
    DASHSCOPE_API_KEY: str = ""
    LLM_MODEL: str = "qwen-max"
    LLM_TIMEOUT_SECONDS: float = 60.0

    # App
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "console"

    # NPC conversation memory
    MAX_RECENT_MESSAGES: int = 20  # messages kept verbatim after compaction
    SUMMARIZE_THRESHOLD: int = 30  # buffer length that triggers compaction

    # Per-NPC turn serialization
    TURN_LOCK_BACKEND: Literal["local", "redis"] = "local"
    TURN_LOCK_TIMEOUT: float = 180.0  # seconds before a redis lock lease expires
    TURN_LOCK_WAIT: float = 30.0  # seconds to wait for a busy NPC

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @model_validator(mode="after")
    def _check_bounds(self) -> "Settings":
        if self.MAX_RECENT_MESSAGES < 1:
            raise ValueError("MAX_RECENT_MESSAGES must be at least 1")
        if self.SUMMARIZE_THRESHOLD <= self.MAX_RECENT_MESSAGES:
            raise ValueError("SUMMARIZE_THRESHOLD must be greater than MAX_RECENT_MESSAGES")
        # A compacting turn makes two generation calls while holding the lock
        worst_case_turn = 2 * self.LLM_TIMEOUT_SECONDS + TURN_IO_MARGIN_SECONDS
        if self.TURN_LOCK_TIMEOUT < worst_case_turn:
            raise ValueError(
                f"TURN_LOCK_TIMEOUT must be at least {worst_case_turn:g}s "
                "(two LLM_TIMEOUT_SECONDS plus database time)"
            )
        return self


settings = Settings()
