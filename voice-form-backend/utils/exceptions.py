"""
Custom Exceptions Module

Defines application-specific exceptions for clearer error handling.
All exceptions inherit from a base FormFillError for easy catching.

Usage:
    from utils.exceptions import DocumentParsingError, SessionNotFoundError

    try:
        soup = parse_form_document(content, file_name)
    except DocumentParsingError as e:
        logger.error(f"Upload rejected: {e}")
"""

from typing import Optional, Dict, Any


class FormFillError(Exception):
    """
    Base exception for all form filling application errors.

    Attributes:
        message: Human-readable error message
        details: Additional error details (optional)
        status_code: HTTP status code to return (optional)
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


# =============================================================================
# Document Exceptions
# =============================================================================

class DocumentParsingError(FormFillError):
    """
    Raised when an uploaded form cannot be accepted.

    Common causes:
        - Extension other than .html/.xhtml/.htm
        - Empty upload
    """

    def __init__(
        self,
        message: str = "Failed to parse form document",
        file_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            details={"file_name": file_name, **(details or {})},
            status_code=400
        )


class SessionNotFoundError(FormFillError):
    """Raised when a form session id is unknown (sessions are memory-only)."""

    def __init__(
        self,
        session_id: Optional[str] = None,
        message: str = "Form session not found. Please re-upload."
    ):
        super().__init__(
            message=message,
            details={"session_id": session_id},
            status_code=404
        )


# =============================================================================
# Region Exceptions
# =============================================================================

class RegionNotFoundError(FormFillError):
    """Raised when a region id does not exist in the session's document."""

    def __init__(
        self,
        region_id: Optional[str] = None,
        message: str = "Editable region not found"
    ):
        super().__init__(
            message=message,
            details={"region_id": region_id},
            status_code=404
        )


class RegionFrozenError(FormFillError):
    """
    Raised when text is typed into a region that holds an inserted image.

    Frozen regions only accept image replacement.
    """

    def __init__(
        self,
        region_id: Optional[str] = None,
        message: str = "Region holds an image and no longer accepts text"
    ):
        super().__init__(
            message=message,
            details={"region_id": region_id},
            status_code=409
        )


class InvalidRegionEventError(FormFillError):
    """Raised when a region event name has no handler."""

    def __init__(
        self,
        event: Optional[str] = None,
        message: str = "Unsupported region event"
    ):
        super().__init__(
            message=message,
            details={"event": event},
            status_code=400
        )


# =============================================================================
# Voice/AI Exceptions
# =============================================================================

class RecognitionBusyError(FormFillError):
    """
    Raised by the recognition engine when a session is already active.

    Only one recognition session may run at a time.
    """

    def __init__(
        self,
        message: str = "Recognition session already active",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            details=details,
            status_code=409
        )


class AIServiceError(FormFillError):
    """
    Raised when the chat-completion upstream fails.

    Common causes:
        - Missing or invalid API key
        - Network error or timeout
        - Empty completion
    """

    def __init__(
        self,
        message: str = "AI service error",
        service: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            details={"service": service, **(details or {})},
            status_code=502
        )
