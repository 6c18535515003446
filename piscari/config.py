"""
Engine configuration from environment variables.

    PISCARI_TIMEOUT_MS       Wall-clock budget of one evaluation (1000)
    PISCARI_SLOW_MOVE_MS     Evaluations slower than this are logged (100)
    PISCARI_CACHE_SIZE       Entries per cache map (1000)
    PISCARI_CACHE_ENABLED    "true" / "false" (true)
    PISCARI_VALUE_TABLE      Path to a state value document (bundled if unset)
    PISCARI_LOG_LEVEL        Logging level name (WARNING)
    PISCARI_ALLOWED_ORIGINS  Comma separated CORS origins for the API (*)
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass
class EngineSettings:
    """Tunable parameters of the wizard engine and its adapters."""
    timeout_ms: int = 1000
    slow_move_ms: int = 100
    cache_size: int = 1000
    cache_enabled: bool = True
    value_table_path: str | None = None
    log_level: str = "WARNING"
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> EngineSettings:
        return cls(
            timeout_ms=_env_int("PISCARI_TIMEOUT_MS", 1000),
            slow_move_ms=_env_int("PISCARI_SLOW_MOVE_MS", 100),
            cache_size=_env_int("PISCARI_CACHE_SIZE", 1000),
            cache_enabled=_env_bool("PISCARI_CACHE_ENABLED", True),
            value_table_path=os.getenv("PISCARI_VALUE_TABLE") or None,
            log_level=os.getenv("PISCARI_LOG_LEVEL", "WARNING").upper(),
            allowed_origins=os.getenv("PISCARI_ALLOWED_ORIGINS", "*").split(","),
        )


def configure_logging(level: str | int = "WARNING") -> None:
    """Install a root handler. Only entry points (CLI, API app) call this."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
