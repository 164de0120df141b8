"""Logging configuration for scenario search."""

import logging
import sys
from typing import Any, Dict, Iterable, Optional, TextIO

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
NO_TIMESTAMP_FORMAT = "%(name)s - %(levelname)s - %(message)s"

# Third-party loggers that drown out search logs at INFO
NOISY_LOGGERS = ("sklearn", "numpy", "sentence_transformers", "urllib3", "filelock")


def resolve_level(level: str) -> int:
    """Map a level name like "info" to its logging constant."""
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        from ..core.exceptions import ConfigurationError
        raise ConfigurationError(f"Unknown log level: {level}")
    return value


def setup_logging(
    level: str = "INFO",
    format_string: Optional[str] = None,
    include_timestamp: bool = True,
    stream: Optional[TextIO] = None,
    quiet: Iterable[str] = NOISY_LOGGERS
) -> None:
    """
    Set up logging for the scenario search library.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string
        include_timestamp: Whether to include timestamps
        stream: Output stream, stdout by default
        quiet: Logger names capped at WARNING

    Raises:
        ConfigurationError: If the level name is unknown
    """
    numeric_level = resolve_level(level)
    if format_string is None:
        format_string = DEFAULT_FORMAT if include_timestamp else NO_TIMESTAMP_FORMAT

    logging.basicConfig(
        level=numeric_level,
        format=format_string,
        stream=stream or sys.stdout,
        force=True
    )
    logging.getLogger("scenario_search").setLevel(numeric_level)

    for name in quiet:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    logging.getLogger(__name__).debug(f"Logging configured with level: {level}")


def _format_value(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.2f}"
    text = str(value)
    if not text or " " in text:
        return f'"{text}"'
    return text


class StructuredLogger:
    """
    Logger wrapper that appends key=value context to every message.

    Values containing spaces (query text, mostly) are quoted so that
    the context stays parseable.
    """

    def __init__(self, name: str, context: Optional[Dict[str, Any]] = None):
        self.logger = logging.getLogger(name)
        self.context = dict(context or {})

    def with_context(self, **kwargs) -> 'StructuredLogger':
        """Return a logger carrying additional context."""
        return StructuredLogger(self.logger.name, {**self.context, **kwargs})

    def _format_message(self, message: str) -> str:
        if not self.context:
            return message
        pairs = " ".join(f"{k}={_format_value(v)}" for k, v in self.context.items())
        return f"{message} [{pairs}]"

    def debug(self, message: str) -> None:
        self.logger.debug(self._format_message(message))

    def info(self, message: str) -> None:
        self.logger.info(self._format_message(message))

    def warning(self, message: str) -> None:
        self.logger.warning(self._format_message(message))

    def error(self, message: str) -> None:
        self.logger.error(self._format_message(message))
