"""
Pytest configuration and shared fixtures for the financial engine tests.
"""

from datetime import date

import pytest

from finhome.config import reset_global_settings
from finhome.models.loan import InvestmentParameters, LoanParameters, PersonalFinances
from finhome.models.scenario import BaselineContext


@pytest.fixture(autouse=True)
def clean_global_settings():
    """Ensure no test sees settings cached by another."""
    reset_global_settings()
    yield
    reset_global_settings()


@pytest.fixture
def reference_date():
    return date(2025, 1, 15)


@pytest.fixture
def standard_loan():
    """2.4 billion VND over 20 years at 10.5%."""
    return LoanParameters(principal=2_400_000_000, annual_rate=10.5, term_months=240)


@pytest.fixture
def promotional_loan():
    """1 billion VND, 7% for 24 months then 11%, over 20 years."""
    return LoanParameters(
        principal=1_000_000_000,
        annual_rate=11,
        term_months=240,
        promotional_rate=7,
        promotional_period_months=24,
    )


@pytest.fixture
def household():
    return PersonalFinances(monthly_income=80_000_000, monthly_expenses=25_000_000)


@pytest.fixture
def rental_property():
    return InvestmentParameters(
        expected_rental_income=15_000_000,
        property_expenses=2_000_000,
        appreciation_rate=6,
        initial_property_value=3_200_000_000,
    )


@pytest.fixture
def baseline_context(standard_loan, household, rental_property, reference_date):
    return BaselineContext(
        loan=standard_loan,
        personal_finances=household,
        investment=rental_property,
        reference_date=reference_date,
    )
