"""Configuration management"""
import logging
import os
from dotenv import load_dotenv

from nuvoria.exceptions import ConfigurationError

load_dotenv()

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Stats aggregator
STATS_REFRESH_DEBOUNCE_SECONDS: float = float(os.getenv("STATS_REFRESH_DEBOUNCE_SECONDS", "1.0"))
STORE_FETCH_TIMEOUT_SECONDS: float = float(os.getenv("STORE_FETCH_TIMEOUT_SECONDS", "10.0"))

# Celebrations
CELEBRATION_SETTLE_DELAY_SECONDS: float = float(os.getenv("CELEBRATION_SETTLE_DELAY_SECONDS", "0.1"))
LEVEL_WATCHER_GRACE_SECONDS: float = float(os.getenv("LEVEL_WATCHER_GRACE_SECONDS", "0.5"))

# Quest toasts
TOAST_DISPLAY_SECONDS: float = float(os.getenv("TOAST_DISPLAY_SECONDS", "5.0"))
TOAST_HIDE_ANIMATION_SECONDS: float = float(os.getenv("TOAST_HIDE_ANIMATION_SECONDS", "0.3"))
TOAST_DELAY_BEFORE_NEXT_SECONDS: float = float(os.getenv("TOAST_DELAY_BEFORE_NEXT_SECONDS", "0.15"))


# Validation
def validate_config() -> None:
    """Validate configuration"""
    if not isinstance(logging.getLevelName(LOG_LEVEL.upper()), int):
        raise ConfigurationError(f"Unknown LOG_LEVEL: {LOG_LEVEL}", config_key="LOG_LEVEL")

    durations = {
        "STATS_REFRESH_DEBOUNCE_SECONDS": STATS_REFRESH_DEBOUNCE_SECONDS,
        "CELEBRATION_SETTLE_DELAY_SECONDS": CELEBRATION_SETTLE_DELAY_SECONDS,
        "LEVEL_WATCHER_GRACE_SECONDS": LEVEL_WATCHER_GRACE_SECONDS,
        "TOAST_DISPLAY_SECONDS": TOAST_DISPLAY_SECONDS,
        "TOAST_HIDE_ANIMATION_SECONDS": TOAST_HIDE_ANIMATION_SECONDS,
        "TOAST_DELAY_BEFORE_NEXT_SECONDS": TOAST_DELAY_BEFORE_NEXT_SECONDS,
    }
    for key, value in durations.items():
        if value < 0:
            raise ConfigurationError(f"{key} must be non-negative", config_key=key)

    if STORE_FETCH_TIMEOUT_SECONDS <= 0:
        raise ConfigurationError(
            "STORE_FETCH_TIMEOUT_SECONDS must be positive",
            config_key="STORE_FETCH_TIMEOUT_SECONDS"
        )
