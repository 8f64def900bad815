"""
Unit tests for the HTTP transport and request throttle.
"""

from unittest.mock import Mock, patch

import pytest
import requests

from bitso_api.api.errors import InputContractError, TransportError
from bitso_api.api.transport import HttpTransport, RequestThrottle


def make_session(status_code=200, text='{"success":true,"payload":{}}'):
    session = Mock()
    session.request.return_value = Mock(status_code=status_code, text=text)
    return session


class TestHttpTransport:

    def test_returns_body_text(self):
        session = make_session(text='{"success":true,"payload":[1]}')
        transport = HttpTransport(session=session)

        body = transport.request('GET', 'https://api.bitso.com/api/v3/ticker', headers={'User-Agent': 'ua'})

        assert body == '{"success":true,"payload":[1]}'
        session.request.assert_called_once_with(
            'GET',
            'https://api.bitso.com/api/v3/ticker',
            data=None,
            headers={'User-Agent': 'ua'},
            timeout=30.0,
        )

    def test_error_status_still_returns_body(self):
        session = make_session(status_code=401, text='{"success":false,"error":{"code":"0201","message":"x"}}')
        transport = HttpTransport(session=session)

        body = transport.request('GET', 'https://api.bitso.com/api/v3/balance')

        assert '"error"' in body

    def test_body_is_sent_as_utf8(self):
        session = make_session()
        transport = HttpTransport(session=session)

        transport.request('POST', 'https://api.bitso.com/api/v3/orders', body='{"book":"btc_mxn"}')

        _, kwargs = session.request.call_args
        assert kwargs['data'] == b'{"book":"btc_mxn"}'

    def test_per_call_timeout_overrides_default(self):
        session = make_session()
        transport = HttpTransport(timeout=30.0, session=session)

        transport.request('GET', 'https://api.bitso.com/api/v3/ticker', timeout=2.5)

        _, kwargs = session.request.call_args
        assert kwargs['timeout'] == 2.5

    def test_method_is_upper_cased(self):
        session = make_session()
        transport = HttpTransport(session=session)

        transport.request('delete', 'https://api.bitso.com/api/v3/orders/abc')

        assert session.request.call_args[0][0] == 'DELETE'

    def test_unsupported_method(self):
        session = make_session()
        transport = HttpTransport(session=session)

        with pytest.raises(InputContractError):
            transport.request('PATCH', 'https://api.bitso.com/api/v3/orders')

        session.request.assert_not_called()

    @pytest.mark.parametrize("error", [
        requests.ConnectionError("connection refused"),
        requests.Timeout("read timed out"),
        requests.exceptions.SSLError("bad certificate"),
    ])
    def test_network_failure_raises_transport_error(self, error):
        session = Mock()
        session.request.side_effect = error
        transport = HttpTransport(session=session)

        with pytest.raises(TransportError) as exc_info:
            transport.request('GET', 'https://api.bitso.com/api/v3/ticker')

        assert exc_info.value.method == 'GET'
        assert exc_info.value.url == 'https://api.bitso.com/api/v3/ticker'
        assert exc_info.value.__cause__ is error

    def test_close_closes_session(self):
        session = make_session()
        HttpTransport(session=session).close()
        session.close.assert_called_once()


class TestRequestThrottle:

    def test_disabled_by_default(self):
        throttle = RequestThrottle()
        with patch('bitso_api.api.transport.time.sleep') as sleep:
            throttle.wait_if_needed()
            throttle.wait_if_needed()
        sleep.assert_not_called()

    def test_sleeps_for_remaining_interval(self):
        throttle = RequestThrottle(min_interval=1.0)
        throttle.last_request_time = 100.0

        with patch('bitso_api.api.transport.time.monotonic', side_effect=[100.25, 101.0]), \
                patch('bitso_api.api.transport.time.sleep') as sleep:
            throttle.wait_if_needed()

        sleep.assert_called_once()
        assert sleep.call_args[0][0] == pytest.approx(0.75)
        assert throttle.last_request_time == 101.0

    def test_no_sleep_after_interval_elapsed(self):
        throttle = RequestThrottle(min_interval=1.0)
        throttle.last_request_time = 100.0

        with patch('bitso_api.api.transport.time.monotonic', side_effect=[102.0, 102.0]), \
                patch('bitso_api.api.transport.time.sleep') as sleep:
            throttle.wait_if_needed()

        sleep.assert_not_called()

    def test_negative_interval_rejected(self):
        with pytest.raises(ValueError):
            RequestThrottle(min_interval=-1)

    def test_transport_applies_throttle(self):
        session = make_session()
        transport = HttpTransport(min_request_interval=0.5, session=session)

        with patch.object(transport.throttle, 'wait_if_needed') as wait:
            transport.request('GET', 'https://api.bitso.com/api/v3/ticker')

        wait.assert_called_once()
