"""Canonical test fixtures used across engine, sharing and API tests.

Fixture: 30,000,000 loan at 1.5% over 35 years (standard payment ~91,855).
"""

import pytest
from decimal import Decimal

from src.models.loan import EarlyRepayment, LoanTerms, RepaymentKind, Scenario


@pytest.fixture
def standard_terms() -> LoanTerms:
    """30M at 1.5% for 35 years."""
    return LoanTerms(
        principal=Decimal("30000000"),
        annual_rate_percent=Decimal("1.5"),
        term_years=35,
    )


@pytest.fixture
def zero_rate_terms() -> LoanTerms:
    """36M interest-free over 30 years: exactly 100,000 a month."""
    return LoanTerms(
        principal=Decimal("36000000"),
        annual_rate_percent=Decimal("0"),
        term_years=30,
    )


@pytest.fixture
def term_shortening() -> EarlyRepayment:
    return EarlyRepayment(month=60, amount=Decimal("1000000"), kind=RepaymentKind.TERM_SHORTENING)


@pytest.fixture
def payment_reduction() -> EarlyRepayment:
    return EarlyRepayment(month=60, amount=Decimal("1000000"), kind=RepaymentKind.PAYMENT_REDUCTION)


@pytest.fixture
def shared_slots(standard_terms, term_shortening) -> list[Scenario | None]:
    """Three slots as a user would share them: two filled, one empty."""
    return [
        Scenario(terms=standard_terms),
        None,
        Scenario(
            terms=LoanTerms(
                principal=Decimal("45000000"),
                annual_rate_percent=Decimal("0.875"),
                term_years=40,
            ),
            early_repayments=(
                term_shortening,
                EarlyRepayment(month=120, amount=Decimal("2500000"), kind=RepaymentKind.PAYMENT_REDUCTION),
            ),
        ),
    ]
