"""
Exception hierarchy for the Bitso API client.

Every failure the client can surface is a subclass of BitsoError, so callers
can catch the whole family or pick out a specific failure mode.
"""

from typing import Optional


class BitsoError(Exception):
    """Base class for all errors raised by this package."""


class ParseError(BitsoError):
    """Raised when a response body is not the JSON the envelope requires."""

    def __init__(self, message: str, body: Optional[str] = None):
        super().__init__(message)
        self.body = body


class APIError(BitsoError):
    """Raised when the exchange answers with an explicit error envelope."""

    def __init__(self, code: Optional[int], message: Optional[str]):
        super().__init__(f"Bitso API error {code}: {message}")
        self.code = code
        self.message = message


class MissingPayloadError(BitsoError):
    """Raised when an envelope carries neither an error nor a payload."""


class InputContractError(BitsoError, ValueError):
    """Raised when call arguments break an endpoint rule, before any request is sent."""


class TransportError(BitsoError):
    """Raised when the HTTP request could not be completed."""

    def __init__(self, message: str, method: Optional[str] = None, url: Optional[str] = None):
        super().__init__(message)
        self.method = method
        self.url = url


class SigningError(BitsoError):
    """Raised when a request cannot be signed."""
