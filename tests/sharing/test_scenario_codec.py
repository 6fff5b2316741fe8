"""Tests for share-token encoding."""

import base64
import json
import re
from decimal import Decimal
from urllib.parse import quote, unquote

import pytest

from src.models.loan import EarlyRepayment, LoanTerms, RepaymentKind, Scenario
from src.sharing.scenario_codec import (
    build_share_url,
    decode_scenarios,
    encode_scenarios,
    scenarios_from_url,
)

DEFAULT = [None, None, None]


def _raw_token(data) -> str:
    """Token the way the browser app built it: btoa(encodeURIComponent(JSON))."""
    text = json.dumps(data, separators=(",", ":"))
    return base64.b64encode(quote(text, safe="-_.!~*'()").encode()).decode()


class TestRoundTrip:
    def test_shared_slots(self, shared_slots):
        assert decode_scenarios(encode_scenarios(shared_slots)) == shared_slots

    def test_empty_slots(self):
        assert decode_scenarios(encode_scenarios([None, None, None])) == DEFAULT

    def test_no_slots(self):
        assert decode_scenarios(encode_scenarios([])) == []

    def test_fractional_values(self):
        slots = [Scenario(
            terms=LoanTerms(principal=Decimal("25500000.5"), annual_rate_percent=Decimal("0.475"), term_years=1),
            early_repayments=(
                EarlyRepayment(month=3, amount=Decimal("12345.67"), kind=RepaymentKind.PAYMENT_REDUCTION),
            ),
        )]
        assert decode_scenarios(encode_scenarios(slots)) == slots


class TestEncode:
    def test_token_is_url_safe(self, shared_slots):
        token = encode_scenarios(shared_slots)
        assert re.fullmatch(r"[A-Za-z0-9_-]+", token)

    def test_short_keys(self, shared_slots):
        token = encode_scenarios(shared_slots)
        padded = token + "=" * (-len(token) % 4)
        data = json.loads(unquote(base64.urlsafe_b64decode(padded).decode()))
        assert data[1] is None
        assert data[0] == {"p": 30000000, "r": 1.5, "y": 35, "e": []}
        assert data[2]["e"][0] == [60, 1000000, "period-reduction"]
        assert data[2]["e"][1][2] == "payment-reduction"

    def test_too_many_slots(self, standard_terms):
        with pytest.raises(ValueError, match="At most 3"):
            encode_scenarios([Scenario(terms=standard_terms)] * 4)

    def test_float_amounts(self):
        slots = [Scenario(
            terms=LoanTerms(principal=30000000.5, annual_rate_percent=1.5, term_years=35),
            early_repayments=(
                EarlyRepayment(month=60, amount=1000000.0, kind=RepaymentKind.TERM_SHORTENING),
            ),
        )]
        decoded = decode_scenarios(encode_scenarios(slots))[0]
        assert decoded.terms.principal == Decimal("30000000.5")
        assert decoded.terms.annual_rate_percent == Decimal("1.5")
        assert decoded.early_repayments[0].amount == Decimal("1000000")


class TestDecode:
    def test_standard_base64_with_padding(self, standard_terms):
        token = _raw_token([{"p": 30000000, "r": 1.5, "y": 35, "e": [[60, 1000000, "payment-reduction"]]}])
        assert decode_scenarios(token) == [Scenario(
            terms=standard_terms,
            early_repayments=(
                EarlyRepayment(month=60, amount=Decimal("1000000"), kind=RepaymentKind.PAYMENT_REDUCTION),
            ),
        )]

    def test_missing_repayment_list(self, standard_terms):
        token = _raw_token([{"p": 30000000, "r": 1.5, "y": 35}])
        assert decode_scenarios(token) == [Scenario(terms=standard_terms)]

    @pytest.mark.parametrize("token", ["", "!!!not base64!!!", "bm90IGpzb24", "e30"])
    def test_garbage_returns_default(self, token):
        assert decode_scenarios(token) == DEFAULT

    @pytest.mark.parametrize("data", [
        {"p": 1, "r": 1, "y": 1},  # not a list
        [{"r": 1.5, "y": 35, "e": []}],  # missing principal
        [{"p": 0, "r": 1.5, "y": 35, "e": []}],  # invalid principal
        [{"p": 30000000, "r": 1.5, "y": 35.5, "e": []}],  # fractional years
        [{"p": 30000000, "r": 1.5, "y": 35, "e": [[60, 100, "sideways"]]}],  # unknown kind
        [{"p": 30000000, "r": 1.5, "y": 35, "e": [[60, 100]]}],  # short entry
        [None, None, None, None],  # too many slots
        ["scenario"],
    ])
    def test_malformed_returns_default(self, data):
        assert decode_scenarios(_raw_token(data)) == DEFAULT

    def test_deeply_nested_json_returns_default(self):
        token = base64.urlsafe_b64encode(b"%5B" * 200000).decode()
        assert decode_scenarios(token) == DEFAULT

    def test_failure_is_logged(self, caplog):
        decode_scenarios("!!!")
        assert "Failed to decode scenarios" in caplog.text


class TestShareUrl:
    def test_round_trip_through_url(self, shared_slots):
        url = build_share_url("https://example.com/loan", shared_slots)
        assert url.startswith("https://example.com/loan?data=")
        assert scenarios_from_url(url) == shared_slots

    def test_existing_query_kept_and_fragment_dropped(self, shared_slots):
        url = build_share_url("https://example.com/loan?lang=ja&data=old#results", shared_slots)
        assert url.startswith("https://example.com/loan?lang=ja&data=")
        assert "#" not in url
        assert "old" not in url

    def test_no_data_parameter(self):
        assert scenarios_from_url("https://example.com/loan?lang=ja") is None
        assert scenarios_from_url("https://example.com/loan?data=") is None

    def test_plus_mangled_to_space(self, standard_terms):
        """Query parsing turns '+' into a space; decoding still succeeds."""
        data = [{"p": 30000000, "r": 1.5, "y": 35, "e": []}]
        token = _raw_token(data)
        assert decode_scenarios(token.replace("+", " ")) == [Scenario(terms=standard_terms)]

    def test_bad_data_parameter(self):
        assert scenarios_from_url("https://example.com/loan?data=%25%25") == DEFAULT
