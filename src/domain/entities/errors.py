"""
Domain Errors

This module defines custom error classes for domain-specific exceptions.
"""

from typing import Any, Dict, List, Optional


class DomainError(Exception):
    """Base class for domain errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ForecastValidationError(DomainError):
    """Raised when a request violates one or more input constraints.

    The individual violations are kept in ``details["errors"]`` and joined
    into the message so that each violated constraint is named.
    """

    def __init__(self, errors: List[str], details: Optional[Dict[str, Any]] = None):
        self.errors = list(errors)
        payload = dict(details or {})
        payload.setdefault("errors", self.errors)
        super().__init__(" ".join(self.errors), payload)


class TextGenerationError(DomainError):
    """Raised when the text-generation collaborator fails."""

    pass
