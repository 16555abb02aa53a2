from __future__ import annotations

from typing import Optional


class RelayError(Exception):
    """Base exception for relay-specific errors."""

    status_code: int = 500

    def __init__(self, message: str, *, detail: Optional[str] = None) -> None:
        super().__init__(message)
        self.detail = detail


class MissingDestinationError(RelayError):
    """Raised when a delivery does not say where it should be reposted."""

    status_code = 400


class InvalidDestinationError(RelayError):
    """Raised when the destination webhook URL is malformed or not allowed."""

    status_code = 400


class InvalidPayloadError(RelayError):
    """Raised when the inbound webhook body cannot be decoded."""

    status_code = 400


class ForwardingError(RelayError):
    """Raised when the destination webhook cannot be reached."""

    status_code = 502
