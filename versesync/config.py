"""
Configuration management for versesync.

Reads configuration from an optional .env file and environment variables
with sensible defaults.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Default .env file location (relative to the working directory)
DEFAULT_ENV_FILE = Path(".env")

logger = logging.getLogger(__name__)


def _load_env_file() -> None:
    """Load environment variables from .env file if it exists."""
    env_path = Path(os.getenv("VERSESYNC_ENV_FILE", str(DEFAULT_ENV_FILE)))
    if env_path.exists():
        load_dotenv(env_path, override=False)  # Don't override existing env vars


def _float_env(name: str, default: str, minimum: float = 0.0) -> float:
    raw = os.getenv(name, default)
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"Invalid {name}: {raw} (must be a number)")
    if value < minimum:
        raise ValueError(f"Invalid {name}: {raw} (must be >= {minimum})")
    return value


def _int_env(name: str, default: str, minimum: int = 1) -> int:
    raw = os.getenv(name, default)
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"Invalid {name}: {raw} (must be an integer)")
    if value < minimum:
        raise ValueError(f"Invalid {name}: {raw} (must be >= {minimum})")
    return value


@dataclass
class PlayerConfig:
    """Player configuration loaded from .env file and environment variables."""

    # Position poll
    poll_interval_sec: float = 0.1
    end_epsilon_sec: float = 0.1  # Tolerance for backend rounding at segment end

    # Wait-for-load after loading a playlist with auto_play
    autoplay_max_attempts: int = 50
    autoplay_retry_sec: float = 0.1

    # Wait-for-load when resuming after a segment switch
    resume_max_attempts: int = 100
    resume_retry_sec: float = 0.05

    # Time the poll stays muted after an in-segment seek
    seek_settle_sec: float = 0.1

    # HeadlessBackend fetch timeout
    http_timeout_sec: float = 10.0

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def load_config(cls) -> "PlayerConfig":
        """
        Load configuration from environment variables.

        Returns:
            PlayerConfig instance with loaded values

        Raises:
            ValueError: If configuration is invalid
        """
        # Load .env file first (if it exists)
        _load_env_file()

        poll_interval_sec = _float_env("VERSESYNC_POLL_INTERVAL_SEC", "0.1", minimum=0.001)
        end_epsilon_sec = _float_env("VERSESYNC_END_EPSILON_SEC", "0.1")

        autoplay_max_attempts = _int_env("VERSESYNC_AUTOPLAY_MAX_ATTEMPTS", "50")
        autoplay_retry_sec = _float_env("VERSESYNC_AUTOPLAY_RETRY_SEC", "0.1")

        resume_max_attempts = _int_env("VERSESYNC_RESUME_MAX_ATTEMPTS", "100")
        resume_retry_sec = _float_env("VERSESYNC_RESUME_RETRY_SEC", "0.05")

        seek_settle_sec = _float_env("VERSESYNC_SEEK_SETTLE_SEC", "0.1")
        http_timeout_sec = _float_env("VERSESYNC_HTTP_TIMEOUT_SEC", "10", minimum=0.001)

        log_level = os.getenv("VERSESYNC_LOG_LEVEL", "INFO").upper()
        if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid VERSESYNC_LOG_LEVEL: {log_level}")
        log_file = os.getenv("VERSESYNC_LOG_FILE") or None

        config = cls(
            poll_interval_sec=poll_interval_sec,
            end_epsilon_sec=end_epsilon_sec,
            autoplay_max_attempts=autoplay_max_attempts,
            autoplay_retry_sec=autoplay_retry_sec,
            resume_max_attempts=resume_max_attempts,
            resume_retry_sec=resume_retry_sec,
            seek_settle_sec=seek_settle_sec,
            http_timeout_sec=http_timeout_sec,
            log_level=log_level,
            log_file=log_file,
        )
        logger.debug(f"Loaded config: {config}")
        return config
