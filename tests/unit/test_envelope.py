"""
Unit tests for response envelope parsing.
"""

import pytest

from bitso_api.api.envelope import parse_envelope, payload_array, payload_object
from bitso_api.api.errors import APIError, BitsoError, MissingPayloadError, ParseError


class TestParseEnvelope:
    """Test cases for the three-way envelope classification."""

    def test_object_payload(self):
        assert payload_object('{"success":true,"payload":{"a":1}}') == {"a": 1}

    def test_array_payload(self):
        assert payload_array('{"success":true,"payload":[1,2]}') == [1, 2]

    def test_error_envelope_raises_api_error(self):
        with pytest.raises(APIError) as exc_info:
            parse_envelope('{"error":{"code":201,"message":"x"}}')

        assert exc_info.value.code == 201
        assert exc_info.value.message == "x"

    def test_error_code_string_is_converted(self):
        with pytest.raises(APIError) as exc_info:
            parse_envelope('{"success":false,"error":{"code":"0201","message":"Invalid Nonce"}}')

        assert exc_info.value.code == 201
        assert "Invalid Nonce" in str(exc_info.value)

    def test_error_wins_over_payload(self):
        with pytest.raises(APIError):
            parse_envelope('{"success":false,"error":{"code":101,"message":"m"},"payload":{}}')

    def test_error_that_is_not_an_object(self):
        with pytest.raises(APIError) as exc_info:
            parse_envelope('{"success":false,"error":"boom"}')

        assert exc_info.value.code is None
        assert exc_info.value.message == "boom"

    def test_non_json_raises_parse_error(self):
        with pytest.raises(ParseError) as exc_info:
            parse_envelope("<html>502 Bad Gateway</html>")

        assert exc_info.value.body == "<html>502 Bad Gateway</html>"

    def test_empty_body_raises_parse_error(self):
        with pytest.raises(ParseError):
            parse_envelope("")

    def test_json_that_is_not_an_object_raises_parse_error(self):
        with pytest.raises(ParseError):
            parse_envelope("[1, 2, 3]")

    def test_missing_payload(self):
        with pytest.raises(MissingPayloadError):
            parse_envelope('{"success":true}')

    def test_null_payload_is_returned(self):
        assert parse_envelope('{"success":true,"payload":null}') is None

    def test_object_accessor_rejects_array(self):
        with pytest.raises(ParseError):
            payload_object('{"success":true,"payload":[1,2]}')

    def test_array_accessor_rejects_object(self):
        with pytest.raises(ParseError):
            payload_array('{"success":true,"payload":{"a":1}}')

    def test_all_errors_share_base_class(self):
        for body in ("nope", '{"error":{"code":1,"message":"m"}}', '{"success":true}'):
            with pytest.raises(BitsoError):
                parse_envelope(body)
