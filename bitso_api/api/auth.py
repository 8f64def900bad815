"""
Request signing for the Bitso API.

Private endpoints are authenticated with an HMAC-SHA256 signature over the
nonce, the HTTP method, the request path and the JSON body. The result is
sent in the Authorization header as ``Bitso <key>:<nonce>:<signature>``.
"""

import hashlib
import hmac
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

from .errors import SigningError


AUTH_SCHEME = "Bitso"


@dataclass(frozen=True)
class Credentials:
    """API key pair. The secret never shows up in repr()."""

    api_key: str
    api_secret: str = field(repr=False)

    def validate(self) -> bool:
        """Check that both halves of the key pair are usable strings."""
        return (isinstance(self.api_key, str) and bool(self.api_key.strip())
                and isinstance(self.api_secret, str) and bool(self.api_secret))


class NonceGenerator:
    """
    Thread-safe source of strictly increasing nonces.

    Nonces are wall-clock milliseconds, bumped by one whenever two calls land
    in the same millisecond or the clock steps backwards.
    """

    def __init__(self, clock=None):
        self._clock = clock or time.time
        self._last = 0
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            nonce = max(int(self._clock() * 1000), self._last + 1)
            self._last = nonce
            return nonce


_shared_generators: Dict[str, NonceGenerator] = {}
_shared_generators_lock = threading.Lock()


def nonce_generator_for(api_key: str) -> NonceGenerator:
    """
    Return the process-wide nonce generator of an API key.

    Every Signer holding the key draws from it, so nonces stay strictly
    increasing per key across clients.
    """
    with _shared_generators_lock:
        generator = _shared_generators.get(api_key)
        if generator is None:
            generator = NonceGenerator()
            _shared_generators[api_key] = generator
        return generator


def compute_signature(secret_key: str, nonce: int, http_method: str,
                      request_path: str, json_body: Optional[str] = None) -> str:
    """
    Compute the hex HMAC-SHA256 signature of a request.

    Args:
        secret_key: API secret used as the HMAC key
        nonce: Nonce for this request
        http_method: HTTP method, upper-cased before signing
        request_path: Path including the leading slash and query string
        json_body: Exact JSON string sent on the wire, if any

    Returns:
        str: Lower-case hex digest, 64 characters
    """
    if not isinstance(secret_key, str) or not secret_key:
        raise SigningError("API secret is missing or not a string")

    message = f"{nonce}{http_method.upper()}{request_path}{json_body or ''}"
    try:
        mac = hmac.new(secret_key.encode("utf-8"), message.encode("utf-8"), hashlib.sha256)
    except (TypeError, ValueError) as e:
        raise SigningError(f"Unable to sign request: {e}") from e
    return mac.hexdigest()


def build_auth_header(secret_key: str, public_key: str, nonce: int, http_method: str,
                      request_path: str, json_body: Optional[str] = None) -> str:
    """Build the Authorization header value for a signed request."""
    if not isinstance(public_key, str) or not public_key.strip():
        raise SigningError("API key is missing or not a string")

    signature = compute_signature(secret_key, nonce, http_method, request_path, json_body)
    return f"{AUTH_SCHEME} {public_key}:{nonce}:{signature}"


class Signer:
    """Signs requests for one set of credentials."""

    def __init__(self, credentials: Credentials, nonce_generator: Optional[NonceGenerator] = None):
        self.credentials = credentials
        self.nonce_generator = nonce_generator or nonce_generator_for(credentials.api_key)

    def sign(self, http_method: str, request_path: str, json_body: Optional[str] = None) -> str:
        """Return the Authorization header value for a request, drawing a fresh nonce."""
        nonce = self.nonce_generator.next()
        return build_auth_header(
            self.credentials.api_secret,
            self.credentials.api_key,
            nonce,
            http_method,
            request_path,
            json_body,
        )
