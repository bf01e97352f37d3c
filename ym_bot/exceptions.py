"""
Defines custom exceptions for the application to allow for more specific error handling.
"""

import copy


class YmBotError(Exception):
    """Base exception for all application-specific errors."""

    def with_context(self, operation: str) -> "YmBotError":
        """
        Returns a copy of this error, of the same class and with the same
        attributes, whose message is prefixed with the failing operation.

        Callers re-raise the copy ``from`` the original so the chain is kept.
        """
        wrapped = copy.copy(self)
        wrapped.args = (f"{operation}: {self}",)
        return wrapped


class ValidationError(YmBotError):
    """Raised on caller misuse such as an empty query, track id or URL."""


class TransportError(YmBotError):
    """Raised when a request fails at the network level or times out."""


class ProtocolError(YmBotError):
    """
    Raised when the remote API answers with an unexpected HTTP status.

    Carries the status code and an excerpt of the response body.
    """

    def __init__(self, message: str, status: int = 0, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


class DecodeError(YmBotError):
    """Raised when a JSON or XML payload cannot be decoded."""


class NotFoundError(YmBotError):
    """Raised when the remote API returns an empty result set."""


class ResolutionError(YmBotError):
    """Raised when no audio URL can be extracted from a download-info response."""


class StorageError(YmBotError):
    """Raised when a temporary directory or destination file cannot be written."""


class ConfigurationError(YmBotError):
    """Raised for issues related to configuration loading or validation."""
