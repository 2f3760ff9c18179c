"""Utility modules for configuration, logging, and validation."""

from .config import ScanConfig
from .logging import setup_logger, get_logger, log_banner
from .validation import (
    ValidationError,
    ConfigurationError,
    GeometryError,
    SequencingError,
    validate_config
)

__all__ = [
    'ScanConfig',
    'setup_logger',
    'get_logger',
    'log_banner',
    'ValidationError',
    'ConfigurationError',
    'GeometryError',
    'SequencingError',
    'validate_config'
]
