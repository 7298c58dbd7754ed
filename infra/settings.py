"""
Runtime settings read from the environment (and an optional .env file).

Recognised variables:
    TACTICS_LOG_LEVEL    logging level name (default INFO)
    TACTICS_LOG_JSON     "1"/"true" for JSON log lines
    TACTICS_LOG_FILE     log file path, "" or "none" to disable file output
    TACTICS_SEED         default seed for scenarios that do not set one
    TACTICS_SIGHT_RANGE  visibility radius used by the turn runner
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .paths import LOG_DIR

_TRUE = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    log_json: bool = False
    log_file: Optional[Path] = LOG_DIR / "tactics.log"
    seed: Optional[int] = None
    sight_range: Optional[float] = None


def _optional(name: str, cast):
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        return cast(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a {cast.__name__}, got {raw!r}") from exc


def load_settings(dotenv: bool = True) -> Settings:
    """
    Build Settings from the process environment.

    Raises:
        ValueError: If a numeric variable cannot be parsed
    """
    if dotenv:
        load_dotenv()

    log_file_raw = os.getenv("TACTICS_LOG_FILE")
    if log_file_raw is None:
        log_file: Optional[Path] = Settings.log_file
    elif log_file_raw.strip().lower() in ("", "none"):
        log_file = None
    else:
        log_file = Path(log_file_raw)

    return Settings(
        log_level=os.getenv("TACTICS_LOG_LEVEL", "INFO").upper(),
        log_json=os.getenv("TACTICS_LOG_JSON", "").strip().lower() in _TRUE,
        log_file=log_file,
        seed=_optional("TACTICS_SEED", int),
        sight_range=_optional("TACTICS_SIGHT_RANGE", float),
    )
