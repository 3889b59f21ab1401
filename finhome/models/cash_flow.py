"""
Monthly cash-flow projections for a financed property.

Combines the loan payment schedule with the household's income and expenses and,
for investment properties, rental income, property expenses and appreciation.
"""

import datetime
import logging
from datetime import date
from typing import List, Optional

import numpy as np
from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict, Field

from .amortization import ScheduleGenerator
from .loan import (
    InvestmentParameters,
    LoanParameters,
    PersonalFinances,
    round_currency,
)

logger = logging.getLogger(__name__)


class CashFlowProjection(BaseModel):
    """Projected cash position for one month of the loan."""

    model_config = ConfigDict(frozen=True)

    month: int = Field(..., ge=1, description="Month number (1-based)")
    date: datetime.date = Field(..., description="Calendar month of the projection")
    principal_payment: float = Field(..., description="Principal paid")
    interest_payment: float = Field(..., description="Interest paid")
    total_payment: float = Field(..., description="Loan payment")
    remaining_balance: float = Field(..., ge=0, description="Loan balance after payment")
    rental_income: float = Field(default=0, description="Rental income")
    property_expenses: float = Field(default=0, description="Property expenses")
    net_cash_flow: float = Field(..., description="Net household cash flow")
    cumulative_cash_flow: float = Field(..., description="Running net cash flow")
    property_value: float = Field(default=0, description="Estimated property value")
    equity_position: float = Field(
        ..., description="Property value minus remaining balance"
    )


class CashFlowProjector:
    """Projects monthly cash flows over the life of a loan."""

    @staticmethod
    def calculate_cash_flow_projections(
        loan_params: LoanParameters,
        personal_finances: PersonalFinances,
        investment_params: Optional[InvestmentParameters] = None,
        reference_date: Optional[date] = None,
    ) -> List[CashFlowProjection]:
        """
        Calculate month-by-month cash-flow projections.

        Args:
            loan_params: Loan parameters
            personal_finances: Household income and expenses
            investment_params: Rental and appreciation assumptions (optional)
            reference_date: Start of the projection; month N is dated N months later

        Returns:
            One projection per schedule month
        """
        if reference_date is None:
            reference_date = date.today()

        schedule = ScheduleGenerator.generate_payment_schedule(loan_params)
        if not schedule:
            return []

        months = np.arange(1, len(schedule) + 1)
        payments = np.array([item.payment for item in schedule], dtype=np.float64)

        rental_income = 0.0
        property_expenses = 0.0
        property_values = np.zeros(len(schedule), dtype=np.float64)
        if investment_params is not None:
            rental_income = investment_params.expected_rental_income
            property_expenses = investment_params.property_expenses
            monthly_appreciation = investment_params.appreciation_rate / 100 / 12
            property_values = investment_params.initial_property_value * (
                (1 + monthly_appreciation) ** months
            )

        net_cash_flows = (
            personal_finances.monthly_income
            - personal_finances.monthly_expenses
            - payments
            + rental_income
            - property_expenses
        )
        cumulative_cash_flows = np.cumsum(net_cash_flows)

        projections = []
        for index, item in enumerate(schedule):
            property_value = float(property_values[index])
            projections.append(
                CashFlowProjection(
                    month=item.month,
                    date=reference_date + relativedelta(months=item.month),
                    principal_payment=item.principal,
                    interest_payment=item.interest,
                    total_payment=item.payment,
                    remaining_balance=item.balance,
                    rental_income=rental_income,
                    property_expenses=property_expenses,
                    net_cash_flow=round_currency(float(net_cash_flows[index])),
                    cumulative_cash_flow=round_currency(
                        float(cumulative_cash_flows[index])
                    ),
                    property_value=round_currency(property_value),
                    equity_position=round_currency(property_value - item.balance),
                )
            )

        logger.debug(
            "Projected %d months, final cumulative cash flow %.0f",
            len(projections),
            projections[-1].cumulative_cash_flow,
        )
        return projections


def summarize_cash_flows(projections: List[CashFlowProjection]) -> dict:
    """
    Summary statistics over a projection.

    Returns the number of negative months, the lowest and average monthly net
    cash flow, the average of the positive months (0 when there are none) and
    the terminal equity position.
    """
    if not projections:
        return {
            "negative_months": 0,
            "min_net_cash_flow": 0.0,
            "mean_net_cash_flow": 0.0,
            "mean_positive_cash_flow": 0.0,
            "terminal_equity": 0.0,
        }

    net = np.array([p.net_cash_flow for p in projections], dtype=np.float64)
    positive = net[net > 0]

    return {
        "negative_months": int(np.count_nonzero(net < 0)),
        "min_net_cash_flow": float(net.min()),
        "mean_net_cash_flow": float(net.mean()),
        "mean_positive_cash_flow": float(positive.mean()) if positive.size else 0.0,
        "terminal_equity": projections[-1].equity_position,
    }
