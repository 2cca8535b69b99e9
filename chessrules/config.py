"""Runtime settings, loaded from ``CHESSRULES_*`` environment variables."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Runtime settings for the adapters and the automated opponent.

    Every field can be set with an environment variable named after it, e.g.
    ``CHESSRULES_SEARCH_DEPTH=2``. Empty variables fall back to the default.
    Out-of-range values raise ``pydantic.ValidationError`` (a ``ValueError``).
    """

    model_config = SettingsConfigDict(env_prefix="CHESSRULES_", env_ignore_empty=True, frozen=True)

    log_level: LogLevel = Field("INFO", description="Level passed to logging.basicConfig.")
    ai_level: int = Field(2, ge=1, le=3, description="Default tier: 1 random, 2 greedy, 3 minimax.")
    search_depth: int = Field(3, ge=1, le=8, description="Minimax depth in plies.")
    root_cap: int = Field(20, ge=1, le=256, description="Moves explored at the root of the search.")
    node_cap: int = Field(10, ge=1, le=256, description="Moves explored at every inner node.")
    engine_path: Optional[str] = Field(None, description="External UCI engine executable.")
    engine_movetime_ms: int = Field(500, ge=1, le=600_000, description="Think time for the external engine.")
    host: str = "0.0.0.0"
    port: int = Field(8000, ge=1, le=65535)

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.strip().upper() if isinstance(value, str) else value
