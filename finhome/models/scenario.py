"""
Pydantic models for what-if scenarios.

A scenario is described relative to an immutable baseline. Loan fields are
overrides that replace the baseline value, household and investment fields are
deltas added to it, and dynamic events patch the projected cash flows at
specific months.
"""

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .cash_flow import CashFlowProjection
from .financial_metrics import FinancialMetrics
from .loan import InvestmentParameters, LoanParameters, PersonalFinances

ScenarioType = Literal["baseline", "optimistic", "pessimistic", "alternative", "stress_test"]


class LoanOverrides(BaseModel):
    """Loan terms that replace the baseline when set."""

    model_config = ConfigDict(frozen=True)

    loan_amount: Optional[float] = Field(default=None, ge=0, description="Principal")
    interest_rate: Optional[float] = Field(
        default=None, ge=0, description="Regular annual rate (%)"
    )
    loan_term_years: Optional[int] = Field(
        default=None, ge=1, le=50, description="Term in years"
    )


class FinanceDeltas(BaseModel):
    """Amounts added to the baseline household and investment figures."""

    model_config = ConfigDict(frozen=True)

    monthly_income_change: float = Field(default=0, description="VND per month")
    monthly_expense_change: float = Field(default=0, description="VND per month")
    rental_income_change: float = Field(default=0, description="VND per month")
    property_expense_change: float = Field(default=0, description="VND per month")
    appreciation_rate_change: float = Field(
        default=0, description="Percentage points per year"
    )


class PrepaymentEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    month: int = Field(..., ge=1)
    amount: float = Field(..., ge=0)


class RateChangeEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    month: int = Field(..., ge=1)
    new_rate: float = Field(..., ge=0, description="New annual rate (%)")


class IncomeChangeEvent(BaseModel):
    """A change in household income/expenses from a month onward."""

    model_config = ConfigDict(frozen=True)

    month: int = Field(..., ge=1)
    monthly_income_change: float = Field(default=0)
    monthly_expense_change: float = Field(default=0)


class ScenarioEvents(BaseModel):
    """Discrete events applied on top of the projected cash flows."""

    model_config = ConfigDict(frozen=True)

    prepayments: List[PrepaymentEvent] = Field(default_factory=list)
    interest_rate_changes: List[RateChangeEvent] = Field(default_factory=list)
    income_changes: List[IncomeChangeEvent] = Field(default_factory=list)


class ScenarioParameters(BaseModel):
    """Everything a scenario changes relative to the baseline."""

    model_config = ConfigDict(frozen=True)

    overrides: LoanOverrides = Field(default_factory=LoanOverrides)
    deltas: FinanceDeltas = Field(default_factory=FinanceDeltas)
    events: ScenarioEvents = Field(default_factory=ScenarioEvents)


class ScenarioAssumptions(BaseModel):
    """Macro annotations. Advisory only; they do not alter the calculations."""

    model_config = ConfigDict(frozen=True)

    economic_growth: Optional[float] = Field(default=None, description="Annual %")
    inflation_rate: Optional[float] = Field(default=None, description="Annual %")
    property_market_trend: Optional[Literal["bull", "bear", "stable"]] = None
    personal_career_growth: Optional[float] = Field(
        default=None, description="Annual income growth %"
    )
    emergency_fund_months: Optional[float] = None
    additional_investments: Optional[bool] = None


class ScenarioDefinition(BaseModel):
    """A named what-if scenario."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    type: ScenarioType
    description: str = ""
    parameters: ScenarioParameters = Field(default_factory=ScenarioParameters)
    assumptions: ScenarioAssumptions = Field(default_factory=ScenarioAssumptions)


class ScenarioComparison(BaseModel):
    """Scenario versus baseline. Positive savings favour the scenario."""

    monthly_savings: float = Field(..., description="Baseline minus scenario payment")
    total_interest_difference: float = Field(
        ..., description="Baseline minus scenario interest"
    )
    payoff_time_difference: float = Field(
        ..., description="Months earlier the scenario is paid off (30-day months)"
    )
    net_worth_difference: float = Field(
        ..., description="Scenario minus baseline terminal equity"
    )
    affordability_score_difference: int = Field(
        ..., description="Scenario minus baseline score"
    )


class ScenarioResults(BaseModel):
    """Computed outcome of a scenario."""

    scenario: ScenarioDefinition
    metrics: FinancialMetrics
    cash_flow_projections: List[CashFlowProjection]
    key_insights: List[str] = Field(default_factory=list)
    risk_factors: List[str] = Field(default_factory=list)
    opportunities: List[str] = Field(default_factory=list)
    comparison_to_baseline: Optional[ScenarioComparison] = None


class BaselineContext(BaseModel):
    """
    The immutable baseline every scenario is derived from.

    ``reference_date`` fixes the plan start so that all results computed from
    one context are reproducible.
    """

    model_config = ConfigDict(frozen=True)

    loan: LoanParameters
    personal_finances: PersonalFinances
    investment: Optional[InvestmentParameters] = None
    reference_date: date = Field(default_factory=date.today)
