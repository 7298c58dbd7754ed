from .paths import LOG_DIR, PROJECT_ROOT, SCENARIO_STORAGE_DIR, STORAGE_DIR
from .logger import configure_logging, configure_from_settings, get_logger
from .settings import Settings, load_settings

__all__ = [
    "PROJECT_ROOT",
    "STORAGE_DIR",
    "SCENARIO_STORAGE_DIR",
    "LOG_DIR",
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "Settings",
    "load_settings",
]
