# telelead_intake/core/exceptions.py
from __future__ import annotations

from typing import Any, Dict, List, Optional


class ConfigurationError(Exception):
    """Process configuration is unusable; the service must not start."""

    def __init__(self, message: str, missing: Optional[List[str]] = None):
        self.message = message
        self.missing = missing or []
        super().__init__(message)


class IntakeError(Exception):
    """Base exception for every failure surfaced to a caller."""

    status_code = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_content(self) -> Dict[str, Any]:
        return {"ok": False, "error": self.message, **self.details}


class ValidationError(IntakeError):
    """Submission rejected before it reaches the upstream."""
    status_code = 400

    def __init__(self, message: str = "Validation error", **kwargs):
        super().__init__(message, **kwargs)


class InvalidBodyError(ValidationError):
    def __init__(self, message: str = "Invalid request body", **kwargs):
        super().__init__(message, **kwargs)


class InvalidPhoneError(ValidationError):
    def __init__(self, received: Optional[str], message: str = "Invalid phone number"):
        self.received = received
        super().__init__(message, details={"received": received})


class MissingFieldsError(ValidationError):
    def __init__(self, missing: List[str], message: str = "Missing required fields"):
        self.missing = list(missing)
        super().__init__(message, details={"missing": self.missing})


class PayloadTooLargeError(IntakeError):
    status_code = 413

    def __init__(self, message: str = "Payload too large", **kwargs):
        super().__init__(message, **kwargs)


class UpstreamError(IntakeError):
    """TeleLead call failed: transport error, timeout or non-2xx."""
    status_code = 502

    def __init__(self, detail: Any = None, message: str = "Upstream request failed"):
        self.detail = detail
        super().__init__(message, details={"detail": detail})


class InternalError(IntakeError):
    status_code = 500

    def __init__(self, message: str = "Internal server error", **kwargs):
        super().__init__(message, **kwargs)
