"""CLI for computing a repayment schedule in the terminal.

Usage:
    python -m src.cli 30000000 1.5 35
    python -m src.cli 3000 1.5 35 --unit 10000 --early 60:100:term --early 120:200:payment
    python -m src.cli 30000000 1.5 35 --yearly --share
"""

import argparse
import logging
import sys
from decimal import Decimal, InvalidOperation

from src.config import settings
from src.engine.amortization import InvalidLoanTerms, ensure_unique_months
from src.engine.comparison import evaluate_scenario
from src.engine.summary import yearly_summary
from src.models.loan import EarlyRepayment, LoanTerms, RepaymentKind, Scenario
from src.sharing.scenario_codec import build_share_url

KIND_ALIASES = {
    "term": RepaymentKind.TERM_SHORTENING,
    "period-reduction": RepaymentKind.TERM_SHORTENING,
    "payment": RepaymentKind.PAYMENT_REDUCTION,
    "payment-reduction": RepaymentKind.PAYMENT_REDUCTION,
}


def _decimal(text: str) -> Decimal:
    try:
        return Decimal(text.replace(",", ""))
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a number: {text!r}")


def _early_repayment(text: str) -> tuple[int, Decimal, RepaymentKind]:
    """Parse MONTH:AMOUNT[:KIND]; KIND defaults to term-shortening."""
    parts = text.split(":")
    if len(parts) not in (2, 3):
        raise argparse.ArgumentTypeError(f"expected MONTH:AMOUNT[:KIND], got {text!r}")
    try:
        month = int(parts[0])
    except ValueError:
        raise argparse.ArgumentTypeError(f"month must be an integer, got {parts[0]!r}")
    kind_name = parts[2].lower() if len(parts) == 3 else "term"
    if kind_name not in KIND_ALIASES:
        raise argparse.ArgumentTypeError(
            f"kind must be one of {', '.join(sorted(KIND_ALIASES))}, got {parts[2]!r}"
        )
    return month, _decimal(parts[1]), KIND_ALIASES[kind_name]


def _amount(v) -> str:
    return f"{float(v):,.0f}"


def _header(title: str) -> None:
    print(f"\n{'=' * 64}")
    print(f"  {title}")
    print(f"{'=' * 64}")


def print_summary(result) -> None:
    s = result.summary
    years, months = s.term_years_months
    _header("Repayment Summary")
    print(f"  Monthly payment:   {_amount(s.monthly_payment)}")
    print(f"  Final payment:     {_amount(s.final_payment)}")
    print(f"  Total payment:     {_amount(s.total_payment)}")
    print(f"  Total interest:    {_amount(s.total_interest)}")
    print(f"  Principal:         {_amount(s.total_principal)}")
    print(f"  Early repayments:  {_amount(s.early_repayments)}")
    print(f"  Term:              {years}y {months}m ({s.term_months} payments)")
    for warning in result.schedule.warnings:
        print(f"  WARNING: {warning}")
    print()


def print_yearly(result) -> None:
    _header("By Year")
    print(f"  {'Year':>4}  {'Payment':>14}  {'Principal':>14}  {'Interest':>12}  {'Balance':>14}")
    for y in yearly_summary(result.schedule):
        print(
            f"  {y.year:>4}  {_amount(y.payment):>14}  {_amount(y.principal):>14}"
            f"  {_amount(y.interest):>12}  {_amount(y.ending_balance):>14}"
        )
    print()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Mortgage repayment schedule")
    parser.add_argument("principal", type=_decimal, help="Loan amount (in --unit units)")
    parser.add_argument("rate", type=_decimal, help="Annual interest rate in percent (1.5 = 1.5%%)")
    parser.add_argument("years", type=int, help="Loan term in years")
    parser.add_argument(
        "--early", action="append", type=_early_repayment, default=[], metavar="MONTH:AMOUNT[:KIND]",
        help="Early repayment; KIND is term (default) or payment. Repeatable.",
    )
    parser.add_argument(
        "--unit", type=_decimal, default=Decimal("1"),
        help="Multiplier applied to principal and early repayment amounts (e.g. 10000 for man-yen)",
    )
    parser.add_argument("--yearly", action="store_true", help="Print a per-year breakdown")
    parser.add_argument("--share", action="store_true", help="Print a share URL for the scenario")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=settings.log_level)

    scenario = Scenario(
        terms=LoanTerms(
            principal=args.principal * args.unit,
            annual_rate_percent=args.rate,
            term_years=args.years,
        ),
        early_repayments=tuple(
            EarlyRepayment(month=month, amount=amount * args.unit, kind=kind)
            for month, amount, kind in args.early
        ),
    )

    try:
        ensure_unique_months(scenario.early_repayments)
        result = evaluate_scenario(scenario)
    except InvalidLoanTerms as e:
        parser.error(str(e))

    print_summary(result)
    if args.yearly:
        print_yearly(result)
    if args.share:
        print(f"  Share URL: {build_share_url(settings.share_base_url, [scenario])}\n")

    if result.schedule.truncated:
        sys.exit(1)


if __name__ == "__main__":
    main()
