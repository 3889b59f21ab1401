"""
Comparison of competing bank loan offers.

Ranks bank offers for a purchase by affordability and total cost, and provides
helpers for choosing among published bank rates.
"""

import logging
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .amortization import AmortizationCalculator
from .financial_metrics import MetricsEngine
from .loan import LoanParameters, PersonalFinances, round_currency

logger = logging.getLogger(__name__)

LoanType = Literal["home_purchase", "investment", "upgrade", "refinance"]

# Regular and promotional annual rates (%) by loan type
DEFAULT_RATES: Dict[str, Dict[str, float]] = {
    "home_purchase": {"regular": 8.5, "promotional": 7.2},
    "investment": {"regular": 9.0, "promotional": 7.8},
    "upgrade": {"regular": 8.2, "promotional": 6.9},
    "refinance": {"regular": 8.0, "promotional": 6.5},
}
DEFAULT_TERM_MONTHS = 240
DEFAULT_PROMOTIONAL_MONTHS = 12
# Promotional phase assumed for every bank offer
OFFER_PROMOTIONAL_MONTHS = 24
LOW_PROCESSING_FEE = 1_000_000


class BankOffer(BaseModel):
    """A bank's mortgage offer."""

    model_config = ConfigDict(frozen=True)

    bank: str = Field(..., min_length=1, description="Bank name")
    promotional_rate: float = Field(..., ge=0, description="Promotional rate (%)")
    regular_rate: float = Field(..., ge=0, description="Regular rate (%)")
    term_years: int = Field(..., ge=1, le=50, description="Loan term in years")
    min_down_payment_percent: float = Field(
        ..., ge=0, le=100, description="Minimum down payment (% of price)"
    )
    processing_fee: float = Field(default=0, ge=0, description="Up-front fee (VND)")


class LoanRecommendation(BaseModel):
    """An evaluated bank offer."""

    bank: str
    recommendation: Literal[
        "highly_suitable", "suitable", "needs_consideration", "not_recommended"
    ]
    loan_amount: float
    down_payment: float
    monthly_payment: float
    total_cost: float
    affordability_score: int
    debt_to_income_ratio: float
    pros: List[str] = Field(default_factory=list)
    cons: List[str] = Field(default_factory=list)


class LoanStructureOptimizer:
    """Evaluates and ranks bank offers for a purchase."""

    @staticmethod
    def optimize_loan_structure(
        property_price: float,
        available_down_payment: float,
        monthly_income: float,
        monthly_expenses: float,
        bank_offers: List[BankOffer],
        promotional_period_months: int = OFFER_PROMOTIONAL_MONTHS,
    ) -> List[LoanRecommendation]:
        """
        Rank bank offers for a purchase.

        Each offer uses the larger of the bank's minimum down payment and the
        buyer's available cash, and is assumed to carry a promotional phase
        of ``promotional_period_months`` (24 by default), dropped when it is not
        shorter than the offer's term. Offers that need no loan are skipped.

        Returns:
            Recommendations sorted by affordability score (descending), then
            total cost (ascending)
        """
        if promotional_period_months < 0:
            raise ValueError("Promotional period cannot be negative")

        personal_finances = PersonalFinances(
            monthly_income=monthly_income, monthly_expenses=monthly_expenses
        )

        recommendations = []
        for offer in bank_offers:
            min_down_payment = property_price * offer.min_down_payment_percent / 100
            down_payment = max(min_down_payment, available_down_payment)
            loan_amount = property_price - down_payment

            if loan_amount <= 0:
                logger.warning("Skipping %s: no loan needed", offer.bank)
                continue

            term_months = offer.term_years * 12
            promotional_months = promotional_period_months
            if promotional_months >= term_months:
                promotional_months = 0

            loan_params = LoanParameters(
                principal=loan_amount,
                annual_rate=offer.regular_rate,
                term_months=term_months,
                promotional_rate=offer.promotional_rate,
                promotional_period_months=promotional_months,
            )
            metrics = MetricsEngine.calculate_financial_metrics(
                loan_params, personal_finances
            )

            pros, cons = _assess_offer(
                offer, metrics.debt_to_income_ratio, metrics.affordability_score
            )
            recommendations.append(
                LoanRecommendation(
                    bank=offer.bank,
                    recommendation=_recommendation_label(
                        metrics.affordability_score, metrics.debt_to_income_ratio
                    ),
                    loan_amount=loan_amount,
                    down_payment=down_payment,
                    monthly_payment=metrics.monthly_payment,
                    total_cost=loan_amount + metrics.total_interest + offer.processing_fee,
                    affordability_score=metrics.affordability_score,
                    debt_to_income_ratio=metrics.debt_to_income_ratio,
                    pros=pros,
                    cons=cons,
                )
            )

        recommendations.sort(key=lambda r: (-r.affordability_score, r.total_cost))
        return recommendations


def _assess_offer(offer: BankOffer, debt_to_income_ratio: float, score: int):
    pros = []
    cons = []

    if offer.promotional_rate < 8:
        pros.append(f"Low promotional rate of {offer.promotional_rate}%")

    if debt_to_income_ratio < 30:
        pros.append("Safe debt-to-income ratio")
    elif debt_to_income_ratio > 40:
        cons.append("High debt-to-income ratio")

    if score >= 7:
        pros.append("Good affordability")
    elif score < 5:
        cons.append("Limited affordability")

    if offer.term_years <= 20:
        pros.append("Short term saves interest")
    else:
        cons.append("Long loan term")

    return pros, cons


def _recommendation_label(score: int, debt_to_income_ratio: float) -> str:
    if score >= 8 and debt_to_income_ratio < 30:
        return "highly_suitable"
    if score < 5 or debt_to_income_ratio > 50:
        return "not_recommended"
    if score < 7 or debt_to_income_ratio > 40:
        return "needs_consideration"
    return "suitable"


class BankRateOption(BaseModel):
    """A published bank rate."""

    model_config = ConfigDict(frozen=True)

    bank_id: str
    bank_name: str
    bank_code: str = ""
    interest_rate: float = Field(..., ge=0, description="Regular annual rate (%)")
    promotional_rate: Optional[float] = Field(default=None, ge=0)
    promotional_period_months: Optional[int] = Field(default=None, ge=0)
    max_ltv_ratio: Optional[float] = None
    processing_fee: Optional[float] = Field(default=None, ge=0)


class RateRecommendation(BaseModel):
    rate: BankRateOption
    reason: str
    savings: Optional[float] = None


class OptimalRateResult(BaseModel):
    """Best available rate with alternatives and recommendations."""

    best_rate: BankRateOption
    alternative_rates: List[BankRateOption]
    market_average: float
    recommendations: List[RateRecommendation]


def rank_bank_rates(
    options: List[BankRateOption], loan_amount: float, term_months: int
) -> Optional[OptimalRateResult]:
    """
    Pick the best of a set of published rates.

    Returns None when there are no options.
    """
    if not options:
        return None

    ranked = sorted(options, key=lambda option: option.interest_rate)
    best_rate = ranked[0]
    market_average = sum(option.interest_rate for option in ranked) / len(ranked)

    return OptimalRateResult(
        best_rate=best_rate,
        alternative_rates=ranked[1:4],
        market_average=market_average,
        recommendations=_rate_recommendations(ranked, loan_amount, term_months),
    )


def _rate_recommendations(
    ranked: List[BankRateOption], loan_amount: float, term_months: int
) -> List[RateRecommendation]:
    best_rate = ranked[0]
    worst_rate = ranked[-1]

    recommendations = [
        RateRecommendation(
            rate=best_rate,
            reason=f"Lowest interest rate at {best_rate.interest_rate}%",
            savings=_lifetime_savings(
                best_rate.interest_rate, worst_rate.interest_rate, loan_amount, term_months
            ),
        )
    ]

    best_promotional = next(
        (
            option
            for option in ranked
            if option.promotional_rate is not None and option.promotional_period_months
        ),
        None,
    )
    if best_promotional is not None:
        recommendations.append(
            RateRecommendation(
                rate=best_promotional,
                reason=(
                    f"Best promotional rate: {best_promotional.promotional_rate}% "
                    f"for {best_promotional.promotional_period_months} months"
                ),
                savings=_promotional_savings(best_promotional, loan_amount, term_months),
            )
        )

    low_fee = next(
        (option for option in ranked if (option.processing_fee or 0) < LOW_PROCESSING_FEE),
        None,
    )
    if low_fee is not None:
        recommendations.append(
            RateRecommendation(
                rate=low_fee,
                reason=f"Low processing fee: {low_fee.processing_fee or 0:,.0f} VND",
            )
        )

    return recommendations[:3]


def _lifetime_savings(
    lower_rate: float, higher_rate: float, principal: float, term_months: int
) -> float:
    payment_lower = AmortizationCalculator.calculate_monthly_payment(
        principal, lower_rate, term_months
    )
    payment_higher = AmortizationCalculator.calculate_monthly_payment(
        principal, higher_rate, term_months
    )
    return round_currency((payment_higher - payment_lower) * term_months)


def _promotional_savings(
    option: BankRateOption, principal: float, term_months: int
) -> float:
    regular_payment = AmortizationCalculator.calculate_monthly_payment(
        principal, option.interest_rate, term_months
    )
    promotional_payment = AmortizationCalculator.calculate_monthly_payment(
        principal, option.promotional_rate, term_months
    )
    return round_currency(
        (regular_payment - promotional_payment) * option.promotional_period_months
    )


def default_loan_parameters(loan_type: str, principal: float) -> LoanParameters:
    """Typical market terms for a loan type (home_purchase when unknown)."""
    rates = DEFAULT_RATES.get(loan_type, DEFAULT_RATES["home_purchase"])
    return LoanParameters(
        principal=principal,
        annual_rate=rates["regular"],
        term_months=DEFAULT_TERM_MONTHS,
        promotional_rate=rates["promotional"],
        promotional_period_months=DEFAULT_PROMOTIONAL_MONTHS,
    )


def bank_rate_to_loan_parameters(
    option: BankRateOption, principal: float, term_months: int = DEFAULT_TERM_MONTHS
) -> LoanParameters:
    """Loan parameters for borrowing ``principal`` at a published rate."""
    promotional_months = option.promotional_period_months or 0
    if promotional_months >= term_months:
        promotional_months = 0
    return LoanParameters(
        principal=principal,
        annual_rate=option.interest_rate,
        term_months=term_months,
        promotional_rate=option.promotional_rate if promotional_months else None,
        promotional_period_months=promotional_months,
    )
