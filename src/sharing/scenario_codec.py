"""Compact, URL-safe encoding of scenario slots for share links.

Token layout: Base64url(percent-encoded JSON). The JSON is a list with one
entry per slot, either null or

    {"p": principal, "r": annual rate percent, "y": years,
     "e": [[month, amount, "period-reduction" | "payment-reduction"], ...]}

Decoding never raises: a token that cannot be read yields empty slots.
"""

import base64
import json
import logging
from collections.abc import Sequence
from decimal import Decimal
from urllib.parse import parse_qs, parse_qsl, quote, unquote, urlencode, urlsplit, urlunsplit

from src.config import settings
from src.engine.amortization import validate_inputs
from src.models.loan import EarlyRepayment, LoanTerms, RepaymentKind, Scenario

logger = logging.getLogger(__name__)

QUERY_PARAM = "data"

# Characters JavaScript's encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


def default_slots() -> list[Scenario | None]:
    return [None] * settings.max_scenarios


def _json_number(value: Decimal | int | float) -> int | float:
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        value = Decimal(str(value))
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _scenario_to_json(scenario: Scenario) -> dict:
    terms = scenario.terms
    return {
        "p": _json_number(terms.principal),
        "r": _json_number(terms.annual_rate_percent),
        "y": terms.term_years,
        "e": [[er.month, _json_number(er.amount), er.kind.value] for er in scenario.early_repayments],
    }


def encode_scenarios(slots: Sequence[Scenario | None]) -> str:
    """Encode up to max_scenarios slots (None for an empty slot) into a token."""
    if len(slots) > settings.max_scenarios:
        raise ValueError(f"At most {settings.max_scenarios} scenarios can be shared, got {len(slots)}")

    data = [None if s is None else _scenario_to_json(s) for s in slots]
    text = json.dumps(data, separators=(",", ":"))
    escaped = quote(text, safe=_URI_COMPONENT_SAFE)
    return base64.urlsafe_b64encode(escaped.encode("ascii")).decode("ascii").rstrip("=")


def _b64decode(token: str) -> bytes:
    # Accept both alphabets; query parsing turns a standard "+" into a space
    cleaned = token.strip().replace(" ", "+").replace("-", "+").replace("_", "/")
    cleaned += "=" * (-len(cleaned) % 4)
    return base64.b64decode(cleaned, validate=True)


def _decimal(value) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, Decimal)):
        raise ValueError(f"Expected a number, got {value!r}")
    return Decimal(value)


def _integer(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Expected an integer, got {value!r}")
    return value


def _repayment_from_json(entry) -> EarlyRepayment:
    if not isinstance(entry, list) or len(entry) != 3:
        raise ValueError(f"Malformed early repayment entry: {entry!r}")
    month, amount, kind = entry
    return EarlyRepayment(month=_integer(month), amount=_decimal(amount), kind=RepaymentKind(kind))


def _scenario_from_json(entry) -> Scenario:
    if not isinstance(entry, dict):
        raise ValueError(f"Malformed scenario entry: {entry!r}")

    terms = LoanTerms(
        principal=_decimal(entry["p"]),
        annual_rate_percent=_decimal(entry["r"]),
        term_years=_integer(entry["y"]),
    )
    repayments = entry.get("e") or []
    if not isinstance(repayments, list):
        raise ValueError(f"Malformed early repayment list: {repayments!r}")
    early = tuple(_repayment_from_json(er) for er in repayments)

    validate_inputs(terms, early)
    return Scenario(terms=terms, early_repayments=early)


def decode_scenarios(token: str) -> list[Scenario | None]:
    """Decode a share token. Malformed tokens yield default (empty) slots."""
    try:
        text = unquote(_b64decode(token).decode("ascii"), errors="strict")
        data = json.loads(text, parse_float=Decimal)
        if not isinstance(data, list):
            raise ValueError("Expected a list of scenario slots")
        if len(data) > settings.max_scenarios:
            raise ValueError(f"Too many scenario slots: {len(data)}")
        return [None if s is None else _scenario_from_json(s) for s in data]
    except (ValueError, TypeError, KeyError, RecursionError) as e:
        # binascii.Error, JSONDecodeError, UnicodeDecodeError and
        # InvalidLoanTerms are all ValueErrors; RecursionError is deep nesting
        logger.warning("Failed to decode scenarios: %s", e)
        return default_slots()


def build_share_url(base_url: str, slots: Sequence[Scenario | None]) -> str:
    """Return base_url with the encoded slots in its `data` query parameter."""
    parts = urlsplit(base_url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != QUERY_PARAM]
    query.append((QUERY_PARAM, encode_scenarios(slots)))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), ""))


def scenarios_from_url(url: str) -> list[Scenario | None] | None:
    """Slots shared in `url`, or None if it carries no `data` parameter."""
    values = parse_qs(urlsplit(url).query).get(QUERY_PARAM)
    if not values:
        return None
    return decode_scenarios(values[0])
