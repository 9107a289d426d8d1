"""
Utilities Module

Provides shared utilities across the application:
- Logging configuration
- Custom exceptions
- Rate limiting
- Input sanitization
"""

from .logging import get_logger, setup_logging, log_api_call, log_form_action
from .exceptions import (
    FormFillError,
    DocumentParsingError,
    SessionNotFoundError,
    RegionNotFoundError,
    RegionFrozenError,
    InvalidRegionEventError,
    RecognitionBusyError,
    AIServiceError,
)
from .rate_limit import (
    limiter,
    rate_limit_exceeded_handler,
    RATE_LIMITS,
)
from .sanitize import (
    sanitize_filename,
    validate_form_filename,
    export_filename,
)

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    "log_api_call",
    "log_form_action",
    # Exceptions
    "FormFillError",
    "DocumentParsingError",
    "SessionNotFoundError",
    "RegionNotFoundError",
    "RegionFrozenError",
    "InvalidRegionEventError",
    "RecognitionBusyError",
    "AIServiceError",
    # Rate Limiting
    "limiter",
    "rate_limit_exceeded_handler",
    "RATE_LIMITS",
    # Sanitization
    "sanitize_filename",
    "validate_form_filename",
    "export_filename",
]
