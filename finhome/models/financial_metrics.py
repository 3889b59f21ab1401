"""
Summary metrics for a financing plan.

This module aggregates a loan and a household's finances into the headline
numbers used for decisions: monthly payment, lifetime interest, debt-to-income
ratio, a banded affordability score and, for investment properties, ROI and
payback period. It also provides a broader affordability analysis, simple
household financial-health indicators and a multi-year property return that
includes appreciation.
"""

import logging
from datetime import date
from typing import List, Literal, Optional

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict, Field

from .amortization import AmortizationCalculator
from .loan import InvestmentParameters, LoanParameters, PersonalFinances, round_currency

logger = logging.getLogger(__name__)

# (payment ratio strictly above, score), checked in order
AFFORDABILITY_BANDS = [
    (0.8, 1),
    (0.6, 3),
    (0.4, 5),
    (0.3, 7),
    (0.2, 8),
]
MAX_AFFORDABILITY_SCORE = 10

# Reference loan used to estimate the maximum affordable price
REFERENCE_RATE = 8.5
REFERENCE_TERM_MONTHS = 240
SAFE_DTI_RATIO = 0.30


class FinancialMetrics(BaseModel):
    """Headline metrics for a loan plan."""

    model_config = ConfigDict(frozen=True)

    monthly_payment: float = Field(..., ge=0, description="Regular monthly payment")
    total_interest: float = Field(..., ge=0, description="Lifetime interest")
    total_payments: float = Field(..., ge=0, description="Principal plus interest")
    payoff_date: date = Field(..., description="Date of the final payment")
    debt_to_income_ratio: float = Field(
        ..., ge=0, description="Monthly payment as % of monthly income"
    )
    affordability_score: int = Field(..., ge=1, le=10, description="Score (1-10)")
    roi: Optional[float] = Field(default=None, description="Annual ROI (%)")
    payback_period: Optional[int] = Field(
        default=None, ge=0, description="Months to recover the investment"
    )


def score_payment_ratio(payment_ratio: float) -> int:
    """Map a payment-to-net-income ratio onto the 1-10 affordability bands."""
    for threshold, score in AFFORDABILITY_BANDS:
        if payment_ratio > threshold:
            return score
    return MAX_AFFORDABILITY_SCORE


def calculate_affordability_score(monthly_payment: float, net_income: float) -> int:
    """Affordability score for a payment against income left after expenses."""
    if net_income <= 0:
        return AFFORDABILITY_BANDS[0][1]
    return score_payment_ratio(monthly_payment / net_income)


class MetricsEngine:
    """Computes summary metrics for a loan plan."""

    @staticmethod
    def calculate_financial_metrics(
        loan_params: LoanParameters,
        personal_finances: PersonalFinances,
        investment_params: Optional[InvestmentParameters] = None,
        reference_date: Optional[date] = None,
    ) -> FinancialMetrics:
        """
        Calculate the headline metrics for a loan plan.

        Args:
            loan_params: Loan parameters
            personal_finances: Household income and expenses
            investment_params: Investment-property parameters (optional)
            reference_date: Date the plan starts; payoff is term_months later

        Returns:
            FinancialMetrics for the plan
        """
        if reference_date is None:
            reference_date = date.today()

        payments = AmortizationCalculator.calculate_vietnamese_loan_payment(loan_params)
        monthly_payment = payments.regular_payment
        total_interest = payments.total_interest

        debt_to_income_ratio = monthly_payment / personal_finances.monthly_income * 100
        affordability_score = calculate_affordability_score(
            monthly_payment, personal_finances.net_income
        )

        roi = None
        payback_period = None
        if investment_params is not None:
            roi, payback_period = MetricsEngine._calculate_investment_return(
                loan_params, investment_params, monthly_payment
            )

        metrics = FinancialMetrics(
            monthly_payment=monthly_payment,
            total_interest=total_interest,
            total_payments=loan_params.principal + total_interest,
            payoff_date=reference_date + relativedelta(months=loan_params.term_months),
            debt_to_income_ratio=round(debt_to_income_ratio, 2),
            affordability_score=affordability_score,
            roi=roi,
            payback_period=payback_period,
        )

        logger.debug(
            "Metrics: payment %.0f, DTI %.2f%%, score %d",
            metrics.monthly_payment,
            metrics.debt_to_income_ratio,
            metrics.affordability_score,
        )
        return metrics

    @staticmethod
    def _calculate_investment_return(
        loan_params: LoanParameters,
        investment_params: InvestmentParameters,
        monthly_payment: float,
    ):
        """Annual ROI (%) and payback period (months) on the invested capital."""
        annual_rental_income = investment_params.expected_rental_income * 12
        annual_property_expenses = investment_params.property_expenses * 12
        annual_debt_service = monthly_payment * 12
        net_annual_income = (
            annual_rental_income - annual_property_expenses - annual_debt_service
        )

        total_investment = investment_params.total_investment(loan_params.principal)
        if total_investment <= 0:
            return None, None

        roi = round(net_annual_income / total_investment * 100, 2)

        payback_period = None
        if net_annual_income > 0:
            payback_period = round(total_investment / (net_annual_income / 12))

        return roi, payback_period


class AffordabilityAnalysis(BaseModel):
    """Debt-to-income assessment of a purchase."""

    score: Literal["excellent", "good", "acceptable", "risky", "unaffordable"]
    debt_to_income_ratio: float = Field(..., description="Total debt / income (0-1)")
    monthly_leftover: float = Field(..., description="Income left after all outflows")
    max_affordable_price: float = Field(..., ge=0, description="Price ceiling (VND)")
    recommendations: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


def analyze_affordability(
    monthly_income: float,
    monthly_expenses: float,
    monthly_payment: float,
    current_savings: float,
    other_debts: float = 0,
) -> AffordabilityAnalysis:
    """
    Assess whether a monthly payment fits the household budget.

    The price ceiling is the loan a payment of 30% of income (less other debt
    service) supports over 20 years at 8.5%, plus 80% of savings.
    """
    if monthly_income <= 0:
        raise ValueError("Monthly income must be positive")

    total_monthly_debt = monthly_payment + other_debts
    debt_to_income_ratio = total_monthly_debt / monthly_income
    monthly_leftover = monthly_income - monthly_expenses - total_monthly_debt

    max_monthly_payment = monthly_income * SAFE_DTI_RATIO - other_debts
    max_loan_amount = AmortizationCalculator.calculate_loan_amount(
        max_monthly_payment, REFERENCE_RATE, REFERENCE_TERM_MONTHS
    )
    max_affordable_price = max_loan_amount + current_savings * 0.8

    recommendations = []
    warnings = []

    if debt_to_income_ratio <= 0.28:
        score = "excellent"
        recommendations.append("Strong position for this purchase")
        recommendations.append("Consider investing surplus income")
    elif debt_to_income_ratio <= 0.33:
        score = "good"
        recommendations.append("Payments are manageable")
        recommendations.append("Keep an emergency fund of 3-6 months of expenses")
    elif debt_to_income_ratio <= 0.40:
        score = "acceptable"
        recommendations.append("Budget is tight; monitor expenses closely")
        warnings.append("Consider increasing income or reducing other debts")
    elif debt_to_income_ratio <= 0.50:
        score = "risky"
        warnings.append("High debt-to-income ratio; consider a lower price")
        warnings.append("Banks may require more documentation or a larger down payment")
    else:
        score = "unaffordable"
        warnings.append("This purchase exceeds safe borrowing limits")
        warnings.append(f"Maximum recommended price: {max_affordable_price:,.0f} VND")

    if monthly_leftover < monthly_expenses * 0.1:
        warnings.append("Very little buffer for unexpected expenses")

    if current_savings < monthly_expenses * 3:
        recommendations.append("Build an emergency fund before purchasing")

    return AffordabilityAnalysis(
        score=score,
        debt_to_income_ratio=debt_to_income_ratio,
        monthly_leftover=monthly_leftover,
        max_affordable_price=max_affordable_price,
        recommendations=recommendations,
        warnings=warnings,
    )


class FinancialHealthIndicators(BaseModel):
    """Household financial-health ratios."""

    emergency_fund_months: float
    savings_rate: float
    debt_to_asset_ratio: float
    liquidity_ratio: float
    investment_capacity: float


def calculate_financial_health(
    monthly_income: float,
    monthly_expenses: float,
    current_savings: float,
    other_debts: float,
    assets: float = 0,
) -> FinancialHealthIndicators:
    """Calculate household financial-health indicators."""
    monthly_savings = max(0.0, monthly_income - monthly_expenses)
    savings_rate = monthly_savings / monthly_income if monthly_income > 0 else 0.0
    expense_base = max(monthly_expenses, 1)
    liquid_assets = current_savings + assets

    return FinancialHealthIndicators(
        emergency_fund_months=current_savings / expense_base,
        savings_rate=savings_rate,
        debt_to_asset_ratio=other_debts / liquid_assets if liquid_assets > 0 else 1.0,
        liquidity_ratio=current_savings / expense_base,
        # keep 10% of expenses as buffer
        investment_capacity=max(0.0, monthly_savings - monthly_expenses * 0.1),
    )


class PropertyReturn(BaseModel):
    """Multi-year return on a rental property."""

    model_config = ConfigDict(frozen=True)

    total_cash_flow: float = Field(..., description="Net rent over the holding period")
    capital_gains: float = Field(..., description="Appreciation over the holding period")
    total_return: float = Field(..., description="Cash flow plus capital gains")
    annualized_roi: float = Field(
        ..., description="Compound annual return on the down payment (%)"
    )


def calculate_appreciation(
    initial_value: float, annual_rate: float, years: float
) -> float:
    """Property value after compounding ``annual_rate`` (%) once a year."""
    if years < 0:
        raise ValueError("Years cannot be negative")
    return initial_value * (1 + annual_rate / 100) ** years


def calculate_property_roi(
    purchase_price: float,
    down_payment: float,
    monthly_rent: float,
    monthly_expenses: float,
    appreciation_rate: float,
    years: float,
) -> PropertyReturn:
    """
    Total and annualized return on a rental property held for ``years``.

    Cash flow is net rent (before debt service) over the holding period;
    capital gains use annual compounding of ``appreciation_rate``. The
    annualized ROI is the compound growth rate of the down payment, floored
    at -100% when the losses exceed it.

    Args:
        purchase_price: Price paid (VND)
        down_payment: Cash invested (VND)
        monthly_rent: Monthly rental income (VND)
        monthly_expenses: Monthly property expenses (VND)
        appreciation_rate: Annual appreciation (%)
        years: Holding period in years

    Returns:
        PropertyReturn
    """
    if years <= 0:
        raise ValueError("Holding period must be positive")
    if down_payment <= 0:
        raise ValueError("Down payment must be positive")

    total_cash_flow = (monthly_rent - monthly_expenses) * 12 * years
    future_value = calculate_appreciation(purchase_price, appreciation_rate, years)
    capital_gains = future_value - purchase_price
    total_return = total_cash_flow + capital_gains

    growth = 1 + total_return / down_payment
    if growth <= 0:
        annualized_roi = -100.0
    else:
        annualized_roi = (growth ** (1 / years) - 1) * 100

    return PropertyReturn(
        total_cash_flow=round_currency(total_cash_flow),
        capital_gains=round_currency(capital_gains),
        total_return=round_currency(total_return),
        annualized_roi=round(annualized_roi, 2),
    )
