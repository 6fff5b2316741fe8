"""Schedule routes: the primary API entry point."""

from fastapi import APIRouter, HTTPException

from src.api.schemas import (
    CompareRequest,
    CompareResponse,
    MonthlyPaymentResponse,
    ScenarioRequest,
    ScenarioResultResponse,
    ScheduleResponse,
    SummaryResponse,
    YearlySummaryResponse,
)
from src.engine.amortization import InvalidLoanTerms, ensure_unique_months
from src.engine.comparison import compare_scenarios, evaluate_scenario
from src.engine.summary import ScheduleSummary, yearly_summary
from src.models.loan import Scenario, Schedule

router = APIRouter(prefix="/api/v1", tags=["schedule"])


def to_scenario(req: ScenarioRequest) -> Scenario:
    """Convert a request to the domain model, rejecting same-month repayments."""
    scenario = req.to_model()
    try:
        ensure_unique_months(scenario.early_repayments)
    except InvalidLoanTerms as e:
        raise HTTPException(status_code=400, detail=str(e))
    return scenario


def _schedule_to_response(schedule: Schedule, summary: ScheduleSummary) -> ScheduleResponse:
    """Convert engine output to API response."""
    years, months = summary.term_years_months
    return ScheduleResponse(
        summary=SummaryResponse(
            monthly_payment=summary.monthly_payment,
            final_payment=summary.final_payment,
            total_payment=summary.total_payment,
            total_interest=summary.total_interest,
            total_principal=summary.total_principal,
            early_repayments=summary.early_repayments,
            term_months=summary.term_months,
            term_years=years,
            term_remainder_months=months,
        ),
        payments=[
            MonthlyPaymentResponse(
                month=p.month,
                payment=p.payment,
                principal=p.principal,
                interest=p.interest,
                remaining_balance=p.remaining_balance,
            )
            for p in schedule.payments
        ],
        yearly=[
            YearlySummaryResponse(
                year=y.year,
                principal=y.principal,
                interest=y.interest,
                payment=y.payment,
                ending_balance=y.ending_balance,
            )
            for y in yearly_summary(schedule)
        ],
        truncated=schedule.truncated,
        warnings=list(schedule.warnings),
    )


@router.post("/schedule", response_model=ScheduleResponse)
async def schedule(req: ScenarioRequest):
    """Loan terms + early repayments → month-by-month schedule and totals."""
    scenario = to_scenario(req)
    try:
        result = evaluate_scenario(scenario)
    except InvalidLoanTerms as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _schedule_to_response(result.schedule, result.summary)


@router.post("/compare", response_model=CompareResponse)
async def compare(req: CompareRequest):
    """Compute up to three scenario slots side by side. Empty slots are skipped."""
    slots = [None if s is None else to_scenario(s) for s in req.scenarios]
    try:
        results = compare_scenarios(slots)
    except InvalidLoanTerms as e:
        raise HTTPException(status_code=400, detail=str(e))

    return CompareResponse(results=[
        ScenarioResultResponse(
            slot=r.slot,
            title=r.title,
            schedule=_schedule_to_response(r.schedule, r.summary),
        )
        for r in results
    ])
