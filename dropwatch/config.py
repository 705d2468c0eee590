"""Central configuration — loads .env and exposes typed settings."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class QuoteProvider(str, Enum):
    CHART = "chart"        # Yahoo v8 chart JSON over httpx
    YFINANCE = "yfinance"  # yfinance library, blocking calls in a thread pool


PROJECT_ROOT = Path(__file__).resolve().parent.parent
ENV_PATH = PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    # --- Report inputs ---
    symbols: list[str] = Field(default=["FSF.NZ", "FNZ.NZ", "CEN.NZ"])
    chart_range: str = "6mo"
    interval: str = "1d"

    # --- Quote source ---
    quote_provider: str = "chart"  # chart | yfinance
    request_timeout: float = 30.0  # seconds, per HTTP request

    # --- Coordination ---
    run_deadline: float | None = None  # seconds for the whole run; unset = wait forever
    max_concurrency: int | None = None  # unset = one in-flight request per symbol

    # --- Metrics ---
    warning_ratio: float = 0.9

    # --- Logging ---
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _validate(self) -> "Settings":
        QuoteProvider(self.quote_provider)  # raises ValueError on unknown provider
        if not 0 < self.warning_ratio <= 1:
            raise ValueError(f"warning_ratio must be in (0, 1], got {self.warning_ratio}")
        if self.max_concurrency is not None and self.max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {self.max_concurrency}")
        if not self.symbols:
            logger.warning("No symbols configured, the report will be empty")
        return self

    model_config = {
        "env_prefix": "DROPWATCH_",
        "env_file": str(ENV_PATH),
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Singleton
_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
