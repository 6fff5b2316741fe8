"""Amortization schedule with early (lump-sum) repayments.

Pure functions: Decimal in, dataclass out. No I/O.

Each month, in order:
    1. Early repayments scheduled for the month come off the balance.
       Payment-reduction repayments re-amortize the new balance over the
       months left until the originally planned payoff month.
    2. Interest accrues on the balance; the rest of the payment is principal.
    3. The last payment is clamped so the balance never goes negative.
"""

import logging
from collections import Counter
from collections.abc import Iterable
from decimal import Decimal

from src.config import settings
from src.models.loan import (
    EarlyRepayment,
    LoanTerms,
    MonthlyPaymentRecord,
    RepaymentKind,
    Schedule,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class InvalidLoanTerms(ValueError):
    """Input that would leave the schedule undefined (division by zero, NaN, ...)."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field


class DuplicateRepaymentMonth(InvalidLoanTerms):
    def __init__(self, months: list[int]):
        listed = ", ".join(str(m) for m in months)
        super().__init__("early_repayments", f"more than one early repayment in month {listed}")
        self.months = months


def payment_for(balance: Decimal, monthly_rate: Decimal, remaining_months: int) -> Decimal:
    """Level monthly payment that fully repays `balance` over `remaining_months`.

    M = B * [r(1+r)^n] / [(1+r)^n - 1], or B / n when the rate is zero.
    With no months left, the whole balance plus one month of interest is due.
    """
    if remaining_months <= 0:
        return balance * (1 + monthly_rate)
    if monthly_rate == 0:
        return balance / remaining_months

    factor = (1 + monthly_rate) ** remaining_months
    if factor == 1:
        # Rate too small to register at Decimal precision
        return balance / remaining_months
    return balance * (monthly_rate * factor) / (factor - 1)


def _as_decimal(field: str, value) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (Decimal, int, float)):
        raise InvalidLoanTerms(field, f"expected a number, got {type(value).__name__}")
    number = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    if not number.is_finite():
        raise InvalidLoanTerms(field, "must be finite")
    return number


def _as_int(field: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidLoanTerms(field, f"expected an integer, got {type(value).__name__}")
    return value


def _validated_terms(terms: LoanTerms) -> tuple[Decimal, Decimal, int]:
    principal = _as_decimal("principal", terms.principal)
    if principal <= 0:
        raise InvalidLoanTerms("principal", f"must be positive, got {principal}")

    rate = _as_decimal("annual_rate_percent", terms.annual_rate_percent)
    if rate < 0:
        raise InvalidLoanTerms("annual_rate_percent", f"must not be negative, got {rate}")

    years = _as_int("term_years", terms.term_years)
    if not 1 <= years <= settings.max_term_years:
        raise InvalidLoanTerms(
            "term_years", f"must be between 1 and {settings.max_term_years}, got {years}"
        )
    return principal, rate, years


def _validated_repayments(early_repayments: Iterable[EarlyRepayment]) -> list[EarlyRepayment]:
    validated = []
    for er in early_repayments:
        month = _as_int("early_repayments.month", er.month)
        if month < 1:
            raise InvalidLoanTerms("early_repayments.month", f"must be 1 or later, got {month}")
        amount = _as_decimal("early_repayments.amount", er.amount)
        if amount < 0:
            raise InvalidLoanTerms("early_repayments.amount", f"must not be negative, got {amount}")
        if not isinstance(er.kind, RepaymentKind):
            raise InvalidLoanTerms("early_repayments.kind", f"unknown repayment kind {er.kind!r}")
        validated.append(EarlyRepayment(month=month, amount=amount, kind=er.kind))
    return validated


def validate_inputs(terms: LoanTerms, early_repayments: Iterable[EarlyRepayment] = ()) -> None:
    """Raise InvalidLoanTerms if the engine cannot produce a meaningful schedule."""
    _validated_terms(terms)
    _validated_repayments(early_repayments)


def find_duplicate_months(early_repayments: Iterable[EarlyRepayment]) -> list[int]:
    """Months carrying more than one early repayment, ascending."""
    counts = Counter(er.month for er in early_repayments)
    return sorted(month for month, n in counts.items() if n > 1)


def ensure_unique_months(early_repayments: Iterable[EarlyRepayment]) -> None:
    """Reject more than one early repayment per month.

    The engine itself applies same-month repayments in input order, but the
    result for that case is not meaningful; callers taking user input should
    reject it up front.
    """
    duplicates = find_duplicate_months(early_repayments)
    if duplicates:
        raise DuplicateRepaymentMonth(duplicates)


def compute_schedule(
    terms: LoanTerms,
    early_repayments: Iterable[EarlyRepayment] = (),
    max_months: int | None = None,
) -> Schedule:
    """Walk the loan month by month until the balance is repaid.

    Args:
        terms: Principal, annual rate (percent) and term
        early_repayments: Lump-sum repayments; at most one per month expected
        max_months: Hard iteration cap (default: term months * iteration_cap_factor).
            Hitting it returns a schedule flagged as truncated.
    """
    principal, annual_rate_percent, term_years = _validated_terms(terms)
    repayments = _validated_repayments(early_repayments)

    total_months = term_years * 12
    if max_months is None:
        max_months = total_months * settings.iteration_cap_factor
    elif _as_int("max_months", max_months) < 1:
        raise InvalidLoanTerms("max_months", f"must be positive, got {max_months}")

    monthly_rate = annual_rate_percent / 100 / 12
    epsilon = settings.balance_epsilon
    warnings: list[str] = []

    duplicates = find_duplicate_months(repayments)
    if duplicates:
        message = f"Multiple early repayments in month {', '.join(map(str, duplicates))} applied in input order"
        logger.warning(message)
        warnings.append(message)

    # sorted() is stable: same-month repayments keep input order
    pending = sorted(repayments, key=lambda er: er.month)
    next_repayment = 0

    standard_payment = payment_for(principal, monthly_rate, total_months)
    current_payment = standard_payment
    planned_end_month = total_months  # Never moves, even after repayments
    balance = principal
    applied = ZERO
    truncated = False
    payments: list[MonthlyPaymentRecord] = []

    month = 1
    while balance > epsilon:
        if month > max_months:
            truncated = True
            message = f"Schedule truncated after {max_months} months with {balance:.2f} outstanding"
            logger.warning(message)
            warnings.append(message)
            break

        while next_repayment < len(pending) and pending[next_repayment].month <= month:
            repayment = pending[next_repayment]
            next_repayment += 1

            taken = min(repayment.amount, balance)
            balance -= taken
            applied += taken

            if balance > 0 and repayment.kind is RepaymentKind.PAYMENT_REDUCTION:
                remaining_months = planned_end_month - month
                if remaining_months <= 0:
                    truncated = True
                    message = (
                        f"Payment-reduction repayment in month {month} falls on or after the "
                        f"planned payoff month {planned_end_month}; balance repaid in full"
                    )
                    logger.warning(message)
                    warnings.append(message)
                current_payment = payment_for(balance, monthly_rate, remaining_months)

        if balance <= 0:
            break

        interest = balance * monthly_rate
        principal_paid = current_payment - interest
        payment = current_payment

        # Final payment adjustment
        if principal_paid > balance:
            principal_paid = balance
            payment = principal_paid + interest

        balance -= principal_paid

        # Fold sub-epsilon rounding residue into the last payment
        if balance <= epsilon:
            principal_paid += balance
            payment += balance
            balance = ZERO

        payments.append(MonthlyPaymentRecord(
            month=month,
            payment=payment,
            principal=principal_paid,
            interest=interest,
            remaining_balance=balance,
        ))
        month += 1

    logger.debug(
        "Computed %d-month schedule: standard payment %s, %d early repayment(s)",
        len(payments), standard_payment, len(repayments),
    )

    return Schedule(
        payments=tuple(payments),
        standard_payment=standard_payment,
        early_repayments_applied=applied,
        truncated=truncated,
        warnings=tuple(warnings),
    )
