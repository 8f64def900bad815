"""
Response envelope handling.

Every Bitso response is wrapped as ``{"success": true, "payload": ...}`` or
``{"success": false, "error": {"code": ..., "message": ...}}``.
"""

import json
import logging
from typing import Any, Dict, List

from .errors import APIError, MissingPayloadError, ParseError


logger = logging.getLogger(__name__)


def _error_code(value: Any) -> Any:
    try:
        return int(value)
    except (TypeError, ValueError):
        return value


def parse_envelope(response_text: str) -> Any:
    """
    Validate an envelope and return its payload.

    Args:
        response_text: Raw response body

    Returns:
        The payload, either a dict or a list

    Raises:
        ParseError: Body is not a JSON object
        APIError: Envelope carries an error
        MissingPayloadError: Envelope has no payload
    """
    try:
        envelope = json.loads(response_text)
    except (TypeError, ValueError) as e:
        logger.error(f"Unable to parse server message: {response_text!r}")
        raise ParseError(f"Response is not valid JSON: {e}", body=response_text) from e

    if not isinstance(envelope, dict):
        logger.error(f"Unexpected server message: {response_text!r}")
        raise ParseError("Response is not a JSON object", body=response_text)

    if 'error' in envelope:
        error = envelope['error']
        if isinstance(error, dict):
            code = _error_code(error.get('code'))
            message = error.get('message')
        else:
            code, message = None, str(error)
        logger.error(f"Error response from server: {code} {message}")
        raise APIError(code, message)

    if 'payload' not in envelope:
        logger.error("Server response does not contain payload")
        raise MissingPayloadError("Server response does not contain payload")

    return envelope['payload']


def payload_object(response_text: str) -> Dict[str, Any]:
    """Return the payload of an envelope that must hold a single JSON object."""
    payload = parse_envelope(response_text)
    if not isinstance(payload, dict):
        raise ParseError(f"Expected object payload, got {type(payload).__name__}", body=response_text)
    return payload


def payload_array(response_text: str) -> List[Any]:
    """Return the payload of an envelope that must hold a JSON array."""
    payload = parse_envelope(response_text)
    if not isinstance(payload, list):
        raise ParseError(f"Expected array payload, got {type(payload).__name__}", body=response_text)
    return payload
