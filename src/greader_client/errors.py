"""Exceptions raised by the Google Reader client and its HTTP transports."""

from __future__ import annotations

from typing import Any


class GReaderError(Exception):
    """Base error for all client failures."""

    def __init__(self, message: str, *, context: Any | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class ConfigurationError(GReaderError):
    """Raised when a transport cannot be built with the requested settings."""


class CommunicationError(GReaderError):
    """Raised when a request cannot be delivered or its response read.

    ``code`` carries the native error number (``errno``, HTTP status) when
    the underlying layer exposes one.
    """

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        context: Any | None = None,
    ) -> None:
        super().__init__(message, context=context)
        self.code = code

    def __str__(self) -> str:
        if self.code is not None:
            return f"{self.message} (code {self.code})"
        return self.message


class AuthenticationError(GReaderError):
    """Raised when login is rejected or no auth token is returned."""


__all__ = [
    "AuthenticationError",
    "CommunicationError",
    "ConfigurationError",
    "GReaderError",
]
