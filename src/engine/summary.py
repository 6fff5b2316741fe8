"""Schedule roll-ups: totals, payoff duration, yearly aggregation.

Pure functions. No I/O.
"""

from dataclasses import dataclass
from decimal import Decimal

from src.models.loan import Schedule


@dataclass(frozen=True)
class ScheduleSummary:
    monthly_payment: Decimal  # Standard payment at loan start
    final_payment: Decimal
    total_payment: Decimal  # Monthly payments + early repayments
    total_interest: Decimal
    total_principal: Decimal
    early_repayments: Decimal
    term_months: int

    @property
    def term_years_months(self) -> tuple[int, int]:
        return split_months(self.term_months)


@dataclass(frozen=True)
class YearlySummary:
    year: int
    principal: Decimal
    interest: Decimal
    payment: Decimal
    ending_balance: Decimal


def split_months(months: int) -> tuple[int, int]:
    """420 -> (35, 0); 418 -> (34, 10)."""
    return divmod(months, 12)


def summarize(schedule: Schedule, principal: Decimal) -> ScheduleSummary:
    """Totals for a computed schedule.

    Early repayments count only for the amount actually taken off the balance,
    so a repayment scheduled after payoff adds nothing.
    """
    monthly_total = sum((p.payment for p in schedule.payments), Decimal("0"))
    total_interest = sum((p.interest for p in schedule.payments), Decimal("0"))
    final_payment = schedule.payments[-1].payment if schedule.payments else Decimal("0")

    return ScheduleSummary(
        monthly_payment=schedule.standard_payment,
        final_payment=final_payment,
        total_payment=monthly_total + schedule.early_repayments_applied,
        total_interest=total_interest,
        total_principal=principal,
        early_repayments=schedule.early_repayments_applied,
        term_months=len(schedule.payments),
    )


def yearly_summary(schedule: Schedule) -> list[YearlySummary]:
    """Aggregate a schedule by loan year (months 1-12 are year 1)."""
    yearly: list[YearlySummary] = []
    year_principal = Decimal("0")
    year_interest = Decimal("0")
    year_payment = Decimal("0")

    for p in schedule.payments:
        year_principal += p.principal
        year_interest += p.interest
        year_payment += p.payment

        if p.month % 12 == 0 or p.month == len(schedule.payments):
            yearly.append(YearlySummary(
                year=(p.month - 1) // 12 + 1,
                principal=year_principal,
                interest=year_interest,
                payment=year_payment,
                ending_balance=p.remaining_balance,
            ))
            year_principal = Decimal("0")
            year_interest = Decimal("0")
            year_payment = Decimal("0")

    return yearly
