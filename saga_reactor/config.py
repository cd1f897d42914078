"""Engine configuration loaded from environment variables."""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv


def _parse_bool(value: Union[str, bool, None]) -> bool:
    """Parse boolean value from various formats."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, str):
        return value.lower() in ("true", "1", "yes", "on", "enabled")
    return bool(value)


def _getenv(key: str, default: str = "") -> str:
    """Get environment variable with default."""
    return os.getenv(key, default)


@dataclass
class Config:
    """Workflow engine configuration loaded from environment variables."""

    # ========== Logging ==========
    log_level: str = field(default_factory=lambda: _getenv("SAGA_LOG_LEVEL", "INFO").upper())
    log_format: str = field(
        default_factory=lambda: _getenv(
            "SAGA_LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    )
    log_file: Optional[str] = field(default_factory=lambda: _getenv("SAGA_LOG_FILE") or None)

    # ========== Execution ==========
    enable_metrics: bool = field(
        default_factory=lambda: _parse_bool(_getenv("SAGA_ENABLE_METRICS", "true"))
    )
    capture_step_exceptions: bool = field(
        default_factory=lambda: _parse_bool(_getenv("SAGA_CAPTURE_STEP_EXCEPTIONS", "true"))
    )
    validate_definitions: bool = field(
        default_factory=lambda: _parse_bool(_getenv("SAGA_VALIDATE_DEFINITIONS", "true"))
    )

    def __post_init__(self):
        """Validate the configured log level."""
        if self.log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(
                f"Invalid log level '{self.log_level}'. "
                "Expected one of DEBUG, INFO, WARNING, ERROR, CRITICAL"
            )

    @classmethod
    def from_env(cls, dotenv_path: Optional[Path] = None) -> "Config":
        """Build a config after loading a ``.env`` file into the environment.

        Variables already present in the environment win over the file.

        Args:
            dotenv_path: Explicit path to a .env file (searched for when None)

        Returns:
            Config instance
        """
        load_dotenv(dotenv_path=dotenv_path, override=False)
        return cls()


# Singleton instance with thread-safe initialization
_config_instance: Optional[Config] = None
_config_lock = threading.Lock()


def get_config() -> Config:
    """Get global config instance (singleton pattern, thread-safe)."""
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = Config()
    return _config_instance


def reset_config() -> None:
    """Drop the cached config so the next ``get_config()`` re-reads the environment."""
    global _config_instance
    with _config_lock:
        _config_instance = None


__all__ = ["Config", "get_config", "reset_config"]
