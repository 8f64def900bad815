"""
Pytest configuration and fixtures for the Bitso API client test suite.
"""

import json
import os

import pytest

from bitso_api.api.client import BitsoAPIClient
from bitso_api.config.manager import ClientConfig


class RecordingTransport:
    """Transport double that records requests and replays canned bodies."""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []
        self.closed = False
        self.last_response = None

    def queue(self, body):
        if not isinstance(body, str):
            body = json.dumps(body)
        self.responses.append(body)

    def request(self, method, url, headers=None, body=None, timeout=None):
        self.calls.append({
            'method': method,
            'url': url,
            'headers': dict(headers or {}),
            'body': body,
            'timeout': timeout
        })
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        self.last_response = self.responses.pop(0)
        return self.last_response

    def close(self):
        self.closed = True

    @property
    def last_call(self):
        return self.calls[-1]

    def queue_payload(self, payload):
        """Queue a success envelope around payload."""
        self.queue({"success": True, "payload": payload})


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def make_transport():
    """Factory for extra transports when a test needs several clients."""
    return RecordingTransport


@pytest.fixture
def client(transport):
    """Authenticated client against the development origin."""
    config = ClientConfig(api_key="test_api_key", api_secret="test_api_secret", production=False)
    return BitsoAPIClient(config=config, transport=transport)


@pytest.fixture
def public_client(transport):
    """Client without credentials."""
    return BitsoAPIClient(transport=transport)


@pytest.fixture
def sample_ticker():
    return {
        "book": "btc_mxn",
        "volume": "22.31349615",
        "high": "5750.00",
        "last": "5633.98",
        "low": "5450.00",
        "vwap": "5393.45",
        "ask": "5632.24",
        "bid": "5520.01",
        "created_at": "2016-04-08T17:52:31.000+00:00"
    }


@pytest.fixture
def sample_order():
    return {
        "book": "btc_mxn",
        "original_amount": "0.01000000",
        "unfilled_amount": "0.00500000",
        "original_value": "56.0",
        "created_at": "2016-04-08T17:52:31.000+00:00",
        "updated_at": "2016-04-08T17:52:51.000+00:00",
        "price": "5600.00",
        "oid": "543cr2v32a1h68443",
        "side": "buy",
        "status": "partial-fill",
        "type": "limit"
    }


@pytest.fixture
def sample_withdrawal():
    return {
        "wid": "c5b8d7f0768ee91d3b33bee648318688",
        "status": "pending",
        "created_at": "2016-04-08T17:52:31.000+00:00",
        "currency": "btc",
        "method": "Bitcoin",
        "amount": "0.48650929",
        "details": {
            "withdrawal_address": "18MsnATiNiKLqUHDTRKjurwMg7inCrdNEp",
            "tx_hash": "d4f28394693e9fb5fffcaf730c11f32d1922e5837f76ca82189d3bfe30ded433"
        }
    }


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Set up test environment variables."""
    test_env = {
        "BITSO_API_KEY": "env_api_key",
        "BITSO_API_SECRET": "env_api_secret",
        "BITSO_PRODUCTION": "false",
        "BITSO_TIMEOUT": "12.5",
        "BITSO_MIN_REQUEST_INTERVAL": None,
        "BITSO_USER_AGENT": None
    }

    original_env = {}
    for key, value in test_env.items():
        original_env[key] = os.environ.get(key)
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value

    yield

    for key, value in original_env.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value
