"""Utility modules for scenario search."""

from .text_processing import TextProcessor
from .validators import validate_query, validate_scenario, validate_scenarios_batch
from .logging_config import setup_logging, StructuredLogger

__all__ = [
    "TextProcessor",
    "validate_query",
    "validate_scenario",
    "validate_scenarios_batch",
    "setup_logging",
    "StructuredLogger",
]
