"""Loan inputs and amortization outputs."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class RepaymentKind(Enum):
    TERM_SHORTENING = "period-reduction"  # Keep payment, pay off sooner
    PAYMENT_REDUCTION = "payment-reduction"  # Keep payoff date, lower payment


@dataclass(frozen=True)
class LoanTerms:
    principal: Decimal
    annual_rate_percent: Decimal  # 1.5 means 1.5%
    term_years: int


@dataclass(frozen=True)
class EarlyRepayment:
    month: int  # 1-based offset from loan start
    amount: Decimal
    kind: RepaymentKind


@dataclass(frozen=True)
class Scenario:
    """One set of loan inputs, as entered by a user and shared by URL."""
    terms: LoanTerms
    early_repayments: tuple[EarlyRepayment, ...] = ()


@dataclass(frozen=True)
class MonthlyPaymentRecord:
    month: int
    payment: Decimal
    principal: Decimal
    interest: Decimal
    remaining_balance: Decimal


@dataclass(frozen=True)
class Schedule:
    payments: tuple[MonthlyPaymentRecord, ...]
    standard_payment: Decimal  # Initial annuity payment
    early_repayments_applied: Decimal = Decimal("0")
    truncated: bool = False
    warnings: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.payments)

    def payment_for_month(self, month: int) -> MonthlyPaymentRecord | None:
        # Records are contiguous from month 1
        if 1 <= month <= len(self.payments):
            return self.payments[month - 1]
        return None
