"""Exceptions raised by the WaifuVault client."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ErrorResponse


class VaultError(Exception):
    """Base exception for everything raised by pywaifuvault."""


class VaultConfigError(VaultError):
    """Raised when the client configuration is invalid."""


class VaultAPIError(VaultError):
    """Raised when the vault answers with a non-2xx status.

    Attributes:
        status_code: HTTP status of the failed response
        body: Raw response body text
        error: Decoded error record, or None when the body was not one
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
        error: ErrorResponse | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.error = error


class VaultPasswordError(VaultAPIError):
    """Raised when protected content is requested with a wrong password."""

    def __init__(self, body: str | None = None):
        super().__init__("Password is incorrect", status_code=403, body=body)


class VaultCancelledError(VaultError):
    """Raised when a request was aborted through a CancelSignal."""

    def __init__(self, message: str = "Request was cancelled"):
        super().__init__(message)
