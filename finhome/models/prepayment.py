"""
Prepayment simulation.

Recomputes a loan schedule after a one-time extra principal payment and reports
the interest and time saved. Two strategies are supported:

- ``reduce_term``: keep paying roughly the same monthly amount, so the loan is
  retired early.
- ``reduce_payment``: keep the remaining term, so the monthly payment drops.
"""

import logging
import math
from datetime import date
from typing import List, Literal, Optional

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, Field

from .amortization import ScheduleGenerator
from .loan import LoanParameters, PaymentScheduleItem, round_currency

logger = logging.getLogger(__name__)

PrepaymentStrategy = Literal["reduce_term", "reduce_payment"]
PREPAYMENT_STRATEGIES = ("reduce_term", "reduce_payment")
DEFAULT_PREPAYMENT_STRATEGY = "reduce_term"


class PrepaymentResult(BaseModel):
    """Outcome of a one-time prepayment."""

    strategy: PrepaymentStrategy = Field(..., description="How the saving is taken")
    new_schedule: List[PaymentScheduleItem] = Field(
        ..., description="Schedule including the prepayment"
    )
    original_total_interest: float = Field(..., ge=0)
    new_total_interest: float = Field(..., ge=0)
    interest_saved: float = Field(..., description="Original minus new interest")
    months_saved: int = Field(..., description="Original minus new schedule length")
    new_payoff_date: date = Field(..., description="Date of the final payment")


def months_to_repay(principal: float, annual_rate: float, monthly_payment: float) -> int:
    """
    Number of level payments needed to retire a balance.

    Returns 0 when the payment cannot cover the monthly interest.
    """
    if principal <= 0:
        return 0
    if monthly_payment <= 0:
        return 0

    monthly_rate = annual_rate / 100 / 12
    if monthly_rate == 0:
        return math.ceil(principal / monthly_payment)

    coverage = 1 - monthly_rate * principal / monthly_payment
    if coverage <= 0:
        return 0
    return math.ceil(-math.log(coverage) / math.log(1 + monthly_rate))


class PrepaymentSimulator:
    """Simulates one-time extra principal payments."""

    @staticmethod
    def calculate_prepayment_impact(
        loan_params: LoanParameters,
        prepayment_amount: float,
        prepayment_month: int,
        strategy: PrepaymentStrategy = DEFAULT_PREPAYMENT_STRATEGY,
        reference_date: Optional[date] = None,
    ) -> PrepaymentResult:
        """
        Calculate the effect of an extra payment made at the end of a month.

        Months ``1..prepayment_month`` of the original schedule are kept; the
        prepayment reduces the balance left after that month's payment and the
        rest of the loan is re-amortized from there at the same rates.

        Args:
            loan_params: Loan parameters
            prepayment_amount: Extra principal paid (VND)
            prepayment_month: Month (1-based) whose payment the extra follows
            strategy: ``reduce_term`` (default) or ``reduce_payment``
            reference_date: Plan start date used for the payoff date

        Returns:
            PrepaymentResult with the combined schedule and savings
        """
        if prepayment_amount < 0:
            raise ValueError("Prepayment amount cannot be negative")
        if not 1 <= prepayment_month <= loan_params.term_months:
            raise ValueError(
                f"Prepayment month must be between 1 and {loan_params.term_months}"
            )
        if strategy not in PREPAYMENT_STRATEGIES:
            raise ValueError(f"Prepayment strategy must be one of {PREPAYMENT_STRATEGIES}")

        if reference_date is None:
            reference_date = date.today()

        original_schedule = ScheduleGenerator.generate_payment_schedule(loan_params)
        original_interest = ScheduleGenerator.calculate_total_interest(original_schedule)

        head = original_schedule[:prepayment_month]
        balance_after = head[-1].balance if head else 0.0
        new_principal = max(0.0, balance_after - prepayment_amount)

        continuation_params = PrepaymentSimulator._continuation_parameters(
            loan_params,
            original_schedule,
            prepayment_month,
            new_principal,
            strategy,
        )

        new_schedule = list(head)
        if continuation_params is not None:
            carried_interest = head[-1].cumulative_interest
            for item in ScheduleGenerator.generate_payment_schedule(continuation_params):
                new_schedule.append(
                    item.model_copy(
                        update={
                            "month": prepayment_month + item.month,
                            "cumulative_interest": carried_interest
                            + item.cumulative_interest,
                        }
                    )
                )

        new_interest = ScheduleGenerator.calculate_total_interest(new_schedule)
        result = PrepaymentResult(
            strategy=strategy,
            new_schedule=new_schedule,
            original_total_interest=original_interest,
            new_total_interest=new_interest,
            interest_saved=round_currency(original_interest - new_interest),
            months_saved=len(original_schedule) - len(new_schedule),
            new_payoff_date=reference_date + relativedelta(months=len(new_schedule)),
        )

        logger.debug(
            "Prepayment of %.0f at month %d (%s): saved %.0f interest, %d months",
            prepayment_amount,
            prepayment_month,
            strategy,
            result.interest_saved,
            result.months_saved,
        )
        return result

    @staticmethod
    def _continuation_parameters(
        loan_params: LoanParameters,
        original_schedule: List[PaymentScheduleItem],
        prepayment_month: int,
        new_principal: float,
        strategy: str,
    ) -> Optional[LoanParameters]:
        """Loan terms for the part of the loan after the prepayment, if any."""
        remaining_months = loan_params.term_months - prepayment_month
        if remaining_months <= 0 or new_principal <= 0:
            return None

        term_months = remaining_months
        if strategy == "reduce_term" and prepayment_month < len(original_schedule):
            next_payment = original_schedule[prepayment_month].payment
            next_rate = loan_params.rate_for_month(prepayment_month + 1)
            needed = months_to_repay(new_principal, next_rate, next_payment)
            if needed > 0:
                term_months = min(remaining_months, needed)

        promotional_months = 0
        if loan_params.has_promotional_phase:
            promotional_months = max(
                0, loan_params.promotional_period_months - prepayment_month
            )

        if promotional_months >= term_months:
            # the whole continuation falls inside the promotion
            return LoanParameters(
                principal=new_principal,
                annual_rate=loan_params.promotional_rate,
                term_months=term_months,
            )

        return LoanParameters(
            principal=new_principal,
            annual_rate=loan_params.annual_rate,
            term_months=term_months,
            promotional_rate=loan_params.promotional_rate if promotional_months else None,
            promotional_period_months=promotional_months,
        )
