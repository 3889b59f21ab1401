"""
Loan amortization calculations for Vietnamese mortgage planning.

This module provides the single-payment annuity formulas (including two-phase
promotional loans and the remaining-balance formula) and the month-by-month
payment schedule built on top of them.
"""

import logging
from typing import List

from .loan import LoanParameters, PaymentScheduleItem, TwoPhasePayment, round_currency

logger = logging.getLogger(__name__)


class AmortizationCalculator:
    """Calculator for annuity payments and loan balances."""

    @staticmethod
    def calculate_monthly_payment(
        principal: float, annual_rate: float, term_months: int
    ) -> float:
        """
        Calculate the monthly payment using the standard annuity formula.

        Args:
            principal: Loan principal amount (VND)
            annual_rate: Annual interest rate as a percentage (e.g. 10.5)
            term_months: Number of monthly payments

        Returns:
            Monthly payment rounded to the nearest whole VND
        """
        if term_months <= 0:
            raise ValueError("Term must be at least one month")
        if principal < 0:
            raise ValueError("Principal cannot be negative")
        if annual_rate < 0:
            raise ValueError("Interest rate cannot be negative")

        if annual_rate == 0:
            return round_currency(principal / term_months)

        monthly_rate = annual_rate / 100 / 12
        growth = (1 + monthly_rate) ** term_months
        payment = principal * monthly_rate * growth / (growth - 1)

        return round_currency(payment)

    @staticmethod
    def calculate_remaining_balance(
        principal: float,
        monthly_rate: float,
        months_paid: int,
        monthly_payment: float,
    ) -> float:
        """
        Calculate the balance left after a number of level payments.

        Args:
            principal: Starting balance
            monthly_rate: Monthly rate as a decimal (annual % / 100 / 12)
            months_paid: Number of payments made
            monthly_payment: Level payment amount

        Returns:
            Remaining balance, never below zero
        """
        if months_paid < 0:
            raise ValueError("Months paid cannot be negative")

        if monthly_rate == 0:
            return max(0.0, round_currency(principal - monthly_payment * months_paid))

        growth = (1 + monthly_rate) ** months_paid
        balance = principal * growth - monthly_payment * (growth - 1) / monthly_rate

        return max(0.0, round_currency(balance))

    @staticmethod
    def calculate_loan_amount(
        monthly_payment: float, annual_rate: float, term_months: int
    ) -> float:
        """
        Calculate the largest principal a monthly payment can amortize.

        This is the inverse of ``calculate_monthly_payment``.
        """
        if term_months <= 0:
            raise ValueError("Term must be at least one month")
        if annual_rate < 0:
            raise ValueError("Interest rate cannot be negative")
        if monthly_payment <= 0:
            return 0.0

        if annual_rate == 0:
            return round_currency(monthly_payment * term_months)

        monthly_rate = annual_rate / 100 / 12
        growth = (1 + monthly_rate) ** term_months
        return round_currency(monthly_payment * (growth - 1) / (monthly_rate * growth))

    @staticmethod
    def calculate_vietnamese_loan_payment(params: LoanParameters) -> TwoPhasePayment:
        """
        Calculate payments for a loan with an optional promotional phase.

        The promotional payment amortizes the full principal over the full term
        at the promotional rate. The regular payment amortizes whatever is left
        after the promotional months over the remaining months at the regular
        rate. Total interest is summed from the generated schedule so it always
        agrees with ``ScheduleGenerator.generate_payment_schedule``.

        Args:
            params: Loan parameters

        Returns:
            TwoPhasePayment (promotional_payment is 0 without a promotion)
        """
        promotional_payment = 0.0

        if params.has_promotional_phase:
            promotional_payment = AmortizationCalculator.calculate_monthly_payment(
                params.principal, params.promotional_rate, params.term_months
            )
            remaining_balance = AmortizationCalculator.calculate_remaining_balance(
                params.principal,
                params.promotional_rate / 100 / 12,
                params.promotional_period_months,
                promotional_payment,
            )
            regular_payment = AmortizationCalculator.calculate_monthly_payment(
                remaining_balance,
                params.annual_rate,
                params.term_months - params.promotional_period_months,
            )
        else:
            regular_payment = AmortizationCalculator.calculate_monthly_payment(
                params.principal, params.annual_rate, params.term_months
            )

        schedule = ScheduleGenerator.generate_payment_schedule(params)
        total_interest = schedule[-1].cumulative_interest if schedule else 0.0

        return TwoPhasePayment(
            promotional_payment=promotional_payment,
            regular_payment=regular_payment,
            total_interest=total_interest,
        )


class ScheduleGenerator:
    """Builds month-by-month payment schedules."""

    @staticmethod
    def generate_payment_schedule(params: LoanParameters) -> List[PaymentScheduleItem]:
        """
        Generate the complete payment schedule for a loan.

        The annuity payment is re-derived every month from the current balance
        and the remaining term, so a rate change between phases flows straight
        into the following payments. The final month retires whatever balance
        is left.

        Args:
            params: Loan parameters

        Returns:
            List of schedule items, one per month until the balance is paid
        """
        schedule: List[PaymentScheduleItem] = []
        balance = params.principal
        cumulative_interest = 0.0

        for month in range(1, params.term_months + 1):
            current_rate = params.rate_for_month(month)
            monthly_rate = current_rate / 100 / 12
            remaining_months = params.term_months - month + 1

            payment = AmortizationCalculator.calculate_monthly_payment(
                balance, current_rate, remaining_months
            )
            interest = round_currency(balance * monthly_rate)

            if month == params.term_months:
                principal_payment = balance
            else:
                principal_payment = min(balance, round_currency(payment - interest))

            balance -= principal_payment
            cumulative_interest += interest

            schedule.append(
                PaymentScheduleItem(
                    month=month,
                    payment=principal_payment + interest,
                    principal=principal_payment,
                    interest=interest,
                    balance=max(0.0, balance),
                    cumulative_interest=cumulative_interest,
                    rate=current_rate,
                )
            )

            if balance <= 0:
                break

        logger.debug(
            "Generated %d-month schedule for principal %.0f (interest %.0f)",
            len(schedule),
            params.principal,
            cumulative_interest,
        )
        return schedule

    @staticmethod
    def calculate_total_interest(schedule: List[PaymentScheduleItem]) -> float:
        """Total interest paid over a schedule."""
        return sum(item.interest for item in schedule)
