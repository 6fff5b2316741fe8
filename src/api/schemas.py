"""Pydantic schemas for API request/response models."""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.config import settings
from src.models.loan import EarlyRepayment, LoanTerms, RepaymentKind, Scenario


# ---- Request schemas ----

class EarlyRepaymentRequest(BaseModel):
    month: int = Field(..., ge=1, description="1-based month from loan start")
    amount: Decimal = Field(..., ge=0, description="Lump sum in base monetary units")
    kind: RepaymentKind = RepaymentKind.TERM_SHORTENING

    def to_model(self) -> EarlyRepayment:
        return EarlyRepayment(month=self.month, amount=self.amount, kind=self.kind)


class ScenarioRequest(BaseModel):
    principal: Decimal = Field(..., gt=0, description="Loan amount in base monetary units")
    annual_rate_percent: Decimal = Field(..., ge=0, description="1.5 means 1.5%")
    term_years: int = Field(..., ge=1, le=settings.max_term_years)
    early_repayments: list[EarlyRepaymentRequest] = Field(default_factory=list)

    def to_model(self) -> Scenario:
        return Scenario(
            terms=LoanTerms(
                principal=self.principal,
                annual_rate_percent=self.annual_rate_percent,
                term_years=self.term_years,
            ),
            early_repayments=tuple(er.to_model() for er in self.early_repayments),
        )

    @classmethod
    def from_model(cls, scenario: Scenario) -> "ScenarioRequest":
        return cls(
            principal=scenario.terms.principal,
            annual_rate_percent=scenario.terms.annual_rate_percent,
            term_years=scenario.terms.term_years,
            early_repayments=[
                EarlyRepaymentRequest(month=er.month, amount=er.amount, kind=er.kind)
                for er in scenario.early_repayments
            ],
        )


class CompareRequest(BaseModel):
    scenarios: list[ScenarioRequest | None] = Field(..., max_length=settings.max_scenarios)


class ShareRequest(BaseModel):
    scenarios: list[ScenarioRequest | None] = Field(..., max_length=settings.max_scenarios)
    base_url: str | None = Field(None, description="Defaults to the configured share URL")


# ---- Response schemas ----

class MonthlyPaymentResponse(BaseModel):
    month: int
    payment: Decimal
    principal: Decimal
    interest: Decimal
    remaining_balance: Decimal


class YearlySummaryResponse(BaseModel):
    year: int
    principal: Decimal
    interest: Decimal
    payment: Decimal
    ending_balance: Decimal


class SummaryResponse(BaseModel):
    monthly_payment: Decimal
    final_payment: Decimal
    total_payment: Decimal
    total_interest: Decimal
    total_principal: Decimal
    early_repayments: Decimal
    term_months: int
    term_years: int
    term_remainder_months: int


class ScheduleResponse(BaseModel):
    summary: SummaryResponse
    payments: list[MonthlyPaymentResponse]
    yearly: list[YearlySummaryResponse]
    truncated: bool = False
    warnings: list[str] = []


class ScenarioResultResponse(BaseModel):
    slot: int
    title: str
    schedule: ScheduleResponse


class CompareResponse(BaseModel):
    results: list[ScenarioResultResponse]


class ShareResponse(BaseModel):
    token: str
    url: str


class SharedScenariosResponse(BaseModel):
    scenarios: list[ScenarioRequest | None]
