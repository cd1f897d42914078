"""Logging setup for applications embedding the workflow engine.

Engine modules log through ``logging.getLogger(__name__)`` and never touch
handlers themselves; the embedding application calls
:func:`configure_logger` (or :func:`configure_from_config`) once.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..config import Config, get_config

ENGINE_LOGGER = "saga_reactor"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger under the engine namespace.

    Args:
        name: Dotted suffix appended to ``saga_reactor`` (the engine root
            logger when None). Names already in the namespace are kept.

    Returns:
        Logger instance
    """
    if not name:
        return logging.getLogger(ENGINE_LOGGER)
    if name == ENGINE_LOGGER or name.startswith(f"{ENGINE_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ENGINE_LOGGER}.{name}")


def configure_logger(
    level: str = "INFO",
    format_string: Optional[str] = None,
    add_file_handler: bool = False,
    file_path: Optional[str] = None,
) -> None:
    """Configure the root logger with standard settings.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string
        add_file_handler: Whether to add file handler
        file_path: Path to log file if add_file_handler is True
    """
    format_string = format_string or DEFAULT_FORMAT

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=format_string,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger(ENGINE_LOGGER).setLevel(getattr(logging, level.upper()))

    if add_file_handler and file_path:
        file_handler = logging.FileHandler(file_path)
        file_handler.setFormatter(logging.Formatter(format_string))
        logging.getLogger().addHandler(file_handler)


def configure_from_config(config: Optional[Config] = None) -> None:
    """Configure logging from a :class:`Config` (the global one by default)."""
    config = config or get_config()
    configure_logger(
        level=config.log_level,
        format_string=config.log_format,
        add_file_handler=config.log_file is not None,
        file_path=config.log_file,
    )
