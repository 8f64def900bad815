"""
Unit tests for path and query string helpers.
"""

from decimal import Decimal

import pytest

from bitso_api.api.errors import InputContractError
from bitso_api.api.query import append_query, format_amount, join_parameters


class TestJoinParameters:

    def test_skips_empty_entries(self):
        assert join_parameters("&", ["a=1", "", "b=2"]) == "a=1&b=2"

    def test_trailing_empty_entry_leaves_no_separator(self):
        assert join_parameters("&", ["a=1", "b=2", ""]) == "a=1&b=2"

    def test_entries_are_trimmed(self):
        assert join_parameters("-", ["  id1 ", "id2  ", "   "]) == "id1-id2"

    def test_single_entry(self):
        assert join_parameters("&", ["limit=5"]) == "limit=5"

    def test_nothing_to_join(self):
        assert join_parameters("&", []) is None
        assert join_parameters("&", ["", "  "]) is None
        assert join_parameters("&", None) is None


class TestAppendQuery:

    def test_adds_question_mark(self):
        assert append_query("/api/v3/ledger", "limit=5") == "/api/v3/ledger?limit=5"

    def test_extends_existing_query(self):
        assert append_query("/api/v3/trades?book=btc_mxn", "limit=5") == "/api/v3/trades?book=btc_mxn&limit=5"

    def test_empty_query_leaves_path(self):
        assert append_query("/api/v3/ledger", None) == "/api/v3/ledger"
        assert append_query("/api/v3/ledger", "") == "/api/v3/ledger"


class TestFormatAmount:

    def test_decimal(self):
        assert format_amount(Decimal("0.01000000")) == "0.01000000"

    def test_float_has_no_binary_noise(self):
        assert format_amount(0.1) == "0.1"

    def test_int_and_string(self):
        assert format_amount(5) == "5"
        assert format_amount("12.5") == "12.5"

    @pytest.mark.parametrize("value", ["abc", "", None, float("nan"), "Infinity"])
    def test_invalid_amount(self, value):
        with pytest.raises(InputContractError):
            format_amount(value)
