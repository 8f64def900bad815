"""Property-based tests for error logging completeness.

Every client call that fails must leave a structured log entry carrying the
operation name, the error type and message, and the stack trace.
"""

import json
import logging
import tempfile
from pathlib import Path

import pytest
from hypothesis import assume, given, settings, strategies as st
from hypothesis.strategies import composite

from bitso_api.api.errors import APIError, InputContractError, ParseError, TransportError
from bitso_api.logging import LoggerManager, log_api_call
from bitso_api.logging.logger import PACKAGE_LOGGER


operations = st.sampled_from([
    'ticker', 'balance', 'place_order', 'cancel_order',
    'ledger', 'spei_withdrawal', 'funding_destination'
])


@composite
def client_errors(draw):
    """Generate the errors the client raises."""
    message = draw(st.text(min_size=5, max_size=80, alphabet=st.characters(min_codepoint=32, max_codepoint=126)))
    assume(message.strip() != "")

    kind = draw(st.sampled_from(['api', 'parse', 'input', 'transport']))
    if kind == 'api':
        return APIError(draw(st.integers(min_value=100, max_value=9999)), message)
    if kind == 'parse':
        return ParseError(message, body="<html>")
    if kind == 'input':
        return InputContractError(message)
    return TransportError(message, method='GET', url='https://api.bitso.com/api/v3/ticker')


def close_package_handlers():
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()


class TestErrorLoggingCompleteness:

    @given(operation=operations, error=client_errors())
    @settings(max_examples=30, deadline=10000)
    def test_failed_calls_are_logged_completely(self, operation, error):
        with tempfile.TemporaryDirectory() as temp_dir:
            log_dir = Path(temp_dir) / "logs"
            manager = LoggerManager(log_dir=str(log_dir), log_level="DEBUG", console_output=False)

            @log_api_call(operation, logger_name="api.client")
            def failing_call():
                raise error

            with pytest.raises(type(error)):
                failing_call()

            for handler in manager.logger.handlers:
                handler.flush()

            with open(log_dir / "bitso_api.log", 'r', encoding='utf-8') as f:
                entries = [json.loads(line) for line in f if line.strip()]
            close_package_handlers()

        failures = [entry for entry in entries if entry['level'] == 'WARNING']
        assert len(failures) == 1
        entry = failures[0]

        assert entry['logger'] == 'bitso_api.api.client'
        assert entry['message'] == f"API call failed: {operation}"

        exception_info = entry['exception']
        assert exception_info['type'] == type(error).__name__
        assert exception_info['message'] == str(error)
        assert any('failing_call' in line for line in exception_info['traceback'])

        extra = entry['extra']
        assert extra['api_name'] == operation
        assert extra['error_type'] == type(error).__name__
        assert extra['error'] == str(error)
        assert extra['success'] is False
