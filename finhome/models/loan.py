"""
Loan and household input models for the financial planning engine.

This module defines the immutable value types that every calculation receives:
loan terms (including an optional promotional-rate phase), the household's
monthly finances, and optional investment-property parameters. All monetary
amounts are in VND, which has no subunit in practice.
"""

import math
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


def round_currency(amount: float) -> float:
    """Round an amount to the nearest whole VND, halves rounding up."""
    return float(math.floor(amount + 0.5))


class LoanParameters(BaseModel):
    """Loan terms. Rates are annual percentages (e.g. 10.5 for 10.5%)."""

    model_config = ConfigDict(frozen=True)

    principal: float = Field(..., ge=0, description="Loan principal amount (VND)")
    annual_rate: float = Field(..., ge=0, description="Regular annual rate (%)")
    term_months: int = Field(..., gt=0, description="Loan term in months")
    grace_period_months: int = Field(
        default=0, ge=0, description="Grace period in months (informational)"
    )
    promotional_rate: Optional[float] = Field(
        default=None, ge=0, description="Promotional annual rate (%)"
    )
    promotional_period_months: int = Field(
        default=0, ge=0, description="Length of the promotional phase in months"
    )

    @model_validator(mode="after")
    def validate_promotional_period(self):
        if self.promotional_period_months >= self.term_months:
            raise ValueError("Promotional period must be shorter than the loan term")
        return self

    @property
    def has_promotional_phase(self) -> bool:
        """Whether the loan starts with a promotional-rate phase."""
        return self.promotional_rate is not None and self.promotional_period_months > 0

    def rate_for_month(self, month: int) -> float:
        """Annual rate in effect for a 1-based payment month."""
        if self.has_promotional_phase and month <= self.promotional_period_months:
            return self.promotional_rate
        return self.annual_rate


class PersonalFinances(BaseModel):
    """Household monthly income and living expenses."""

    model_config = ConfigDict(frozen=True)

    monthly_income: float = Field(..., gt=0, description="Monthly income (VND)")
    monthly_expenses: float = Field(
        default=0, ge=0, description="Monthly living expenses (VND)"
    )

    @property
    def net_income(self) -> float:
        return self.monthly_income - self.monthly_expenses


class InvestmentParameters(BaseModel):
    """
    Investment-property parameters.

    The capital invested is ``down_payment + closing_costs``. When
    ``down_payment`` is omitted it is taken as the equity the buyer contributes,
    ``initial_property_value - principal`` (floored at zero).
    """

    model_config = ConfigDict(frozen=True)

    expected_rental_income: float = Field(
        default=0, description="Monthly rental income (VND)"
    )
    property_expenses: float = Field(
        default=0, description="Monthly property expenses (VND)"
    )
    appreciation_rate: float = Field(
        default=0, description="Annual property appreciation (%)"
    )
    initial_property_value: float = Field(
        ..., ge=0, description="Property value at purchase (VND)"
    )
    down_payment: Optional[float] = Field(
        default=None, ge=0, description="Cash down payment (VND)"
    )
    closing_costs: float = Field(
        default=0, ge=0, description="Fees and taxes paid at purchase (VND)"
    )

    def total_investment(self, principal: float) -> float:
        """Capital the buyer puts into the property."""
        if self.down_payment is not None:
            down_payment = self.down_payment
        else:
            down_payment = max(0.0, self.initial_property_value - principal)
        return down_payment + self.closing_costs


class PaymentScheduleItem(BaseModel):
    """A single month of a loan payment schedule."""

    model_config = ConfigDict(frozen=True)

    month: int = Field(..., ge=1, description="Payment month (1-based)")
    payment: float = Field(..., ge=0, description="Total payment")
    principal: float = Field(..., ge=0, description="Principal portion")
    interest: float = Field(..., ge=0, description="Interest portion")
    balance: float = Field(..., ge=0, description="Balance after the payment")
    cumulative_interest: float = Field(
        ..., ge=0, description="Interest paid through this month"
    )
    rate: float = Field(..., ge=0, description="Annual rate applied this month (%)")


class TwoPhasePayment(BaseModel):
    """Payments for a loan with an optional promotional phase."""

    model_config = ConfigDict(frozen=True)

    promotional_payment: float = Field(
        ..., ge=0, description="Monthly payment during promotion (0 if none)"
    )
    regular_payment: float = Field(
        ..., ge=0, description="Monthly payment at the regular rate"
    )
    total_interest: float = Field(
        ..., ge=0, description="Interest over the life of the loan"
    )
