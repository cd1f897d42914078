"""Shared utilities."""

from .logger import configure_from_config, configure_logger, get_logger

__all__ = ["configure_from_config", "configure_logger", "get_logger"]
