from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Union

from infra.paths import LOG_DIR

if TYPE_CHECKING:
    from infra.settings import Settings

# Centralized logging for the engine, runner and HTTP adapter.
DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s:%(lineno)d] %(message)s"
JSON_FORMAT = (
    '{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","line":%(lineno)d,"msg":"%(message)s"}'
)


def configure_logging(
    level: Union[str, int] = "INFO",
    *,
    json: bool = False,
    logfile: str | Path | None = LOG_DIR / "tactics.log",
) -> None:
    """
    Configure the root logger with a stdout handler and an optional file handler.

    Args:
        level: Logging level name or int (e.g., "DEBUG", logging.INFO).
        json: Emit JSON lines when True; otherwise a human-friendly format.
        logfile: File path to append logs; None disables file output.
    """
    formatter = logging.Formatter(JSON_FORMAT if json else DEFAULT_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if logfile is not None:
        log_path = Path(logfile)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    logging.captureWarnings(True)


def configure_from_settings(settings: "Settings") -> None:
    """Apply the TACTICS_LOG_* settings."""
    configure_logging(settings.log_level, json=settings.log_json, logfile=settings.log_file)


def get_logger(name: str) -> logging.Logger:
    """Return a namespaced logger; configure_logging() should be called once on startup."""
    return logging.getLogger(name)
