"""
Tests for loan amortization calculations.

This module tests the annuity payment formulas, two-phase promotional loans,
the remaining-balance formula and month-by-month schedule generation.
"""

import pytest
from pydantic import ValidationError

from finhome.models.amortization import AmortizationCalculator, ScheduleGenerator
from finhome.models.loan import LoanParameters, round_currency

SAMPLE_LOANS = [
    LoanParameters(principal=2_400_000_000, annual_rate=10.5, term_months=240),
    LoanParameters(principal=120_000_000, annual_rate=0, term_months=12),
    LoanParameters(principal=750_000_000, annual_rate=8.2, term_months=180),
    LoanParameters(principal=333_333_333, annual_rate=13.9, term_months=37),
    LoanParameters(
        principal=1_000_000_000,
        annual_rate=11,
        term_months=240,
        promotional_rate=7,
        promotional_period_months=24,
    ),
    LoanParameters(
        principal=5_000_000_000,
        annual_rate=9.5,
        term_months=360,
        promotional_rate=0,
        promotional_period_months=6,
    ),
]


class TestRoundCurrency:
    """Test cases for whole-VND rounding."""

    def test_rounds_half_up(self):
        assert round_currency(2.5) == 3
        assert round_currency(3.5) == 4
        assert round_currency(2.4999) == 2

    def test_negative_values(self):
        assert round_currency(-2.5) == -2
        assert round_currency(-2.6) == -3


class TestAmortizationCalculator:
    """Test cases for AmortizationCalculator."""

    def test_zero_rate_payment_is_linear(self):
        """120M over 12 months at 0% is exactly 10M per month."""
        payment = AmortizationCalculator.calculate_monthly_payment(120_000_000, 0, 12)
        assert payment == 10_000_000

    def test_standard_payment(self):
        """2.4B at 10.5% over 20 years is about 23.96M per month."""
        payment = AmortizationCalculator.calculate_monthly_payment(
            2_400_000_000, 10.5, 240
        )
        assert abs(payment - 23_960_000) / 23_960_000 < 0.005

    def test_payment_is_whole_vnd(self):
        payment = AmortizationCalculator.calculate_monthly_payment(333_333_333, 13.9, 37)
        assert payment == int(payment)

    def test_zero_principal(self):
        assert AmortizationCalculator.calculate_monthly_payment(0, 10, 120) == 0

    @pytest.mark.parametrize(
        "principal, rate, term",
        [(1_000_000, 10, 0), (1_000_000, 10, -12), (-1, 10, 12), (1_000_000, -0.5, 12)],
    )
    def test_invalid_inputs_raise(self, principal, rate, term):
        with pytest.raises(ValueError):
            AmortizationCalculator.calculate_monthly_payment(principal, rate, term)

    def test_remaining_balance_after_full_term_is_zero(self):
        """Paying the rounded annuity for the full term leaves (almost) nothing."""
        for principal, rate, term in [
            (2_400_000_000, 10.5, 240),
            (750_000_000, 8.2, 180),
            (120_000_000, 0, 12),
        ]:
            payment = AmortizationCalculator.calculate_monthly_payment(
                principal, rate, term
            )
            balance = AmortizationCalculator.calculate_remaining_balance(
                principal, rate / 100 / 12, term, payment
            )
            assert 0 <= balance <= 1_000

    def test_remaining_balance_zero_rate(self):
        balance = AmortizationCalculator.calculate_remaining_balance(
            120_000_000, 0, 6, 10_000_000
        )
        assert balance == 60_000_000

    def test_remaining_balance_never_negative(self):
        balance = AmortizationCalculator.calculate_remaining_balance(
            100_000_000, 0.01, 24, 50_000_000
        )
        assert balance == 0

    def test_remaining_balance_matches_schedule(self):
        """The closed form agrees with a schedule of level payments."""
        principal = 500_000_000
        monthly_rate = 9 / 100 / 12
        payment = AmortizationCalculator.calculate_monthly_payment(principal, 9, 120)

        balance = principal
        for _ in range(36):
            balance = balance * (1 + monthly_rate) - payment

        closed_form = AmortizationCalculator.calculate_remaining_balance(
            principal, monthly_rate, 36, payment
        )
        assert abs(closed_form - balance) <= 1

    def test_loan_amount_inverts_payment(self):
        payment = AmortizationCalculator.calculate_monthly_payment(
            2_400_000_000, 10.5, 240
        )
        principal = AmortizationCalculator.calculate_loan_amount(payment, 10.5, 240)
        assert abs(principal - 2_400_000_000) / 2_400_000_000 < 1e-4

    def test_loan_amount_zero_rate_and_zero_payment(self):
        assert AmortizationCalculator.calculate_loan_amount(10_000_000, 0, 12) == 120_000_000
        assert AmortizationCalculator.calculate_loan_amount(0, 8.5, 240) == 0
        assert AmortizationCalculator.calculate_loan_amount(-5, 8.5, 240) == 0

    def test_promotional_payment_below_regular(self):
        """7% promotion for 24 months then 11%: the promotional payment is lower."""
        params = LoanParameters(
            principal=1_000_000_000,
            annual_rate=11,
            term_months=240,
            promotional_rate=7,
            promotional_period_months=24,
        )
        result = AmortizationCalculator.calculate_vietnamese_loan_payment(params)

        assert result.promotional_payment > 0
        assert result.promotional_payment < result.regular_payment

    def test_two_phase_total_interest_matches_schedule(self, promotional_loan):
        result = AmortizationCalculator.calculate_vietnamese_loan_payment(promotional_loan)
        schedule = ScheduleGenerator.generate_payment_schedule(promotional_loan)

        assert result.total_interest == sum(item.interest for item in schedule)

    def test_without_promotion(self, standard_loan):
        result = AmortizationCalculator.calculate_vietnamese_loan_payment(standard_loan)

        assert result.promotional_payment == 0
        assert result.regular_payment == AmortizationCalculator.calculate_monthly_payment(
            2_400_000_000, 10.5, 240
        )
        assert result.total_interest > 0

    def test_zero_rate_loan_has_no_interest(self):
        params = LoanParameters(principal=120_000_000, annual_rate=0, term_months=12)
        result = AmortizationCalculator.calculate_vietnamese_loan_payment(params)

        assert result.regular_payment == 10_000_000
        assert result.total_interest == 0


class TestLoanParameters:
    """Test cases for loan parameter validation."""

    def test_promotional_period_must_be_shorter_than_term(self):
        with pytest.raises(ValidationError):
            LoanParameters(
                principal=1_000_000_000,
                annual_rate=10,
                term_months=24,
                promotional_rate=7,
                promotional_period_months=24,
            )

    @pytest.mark.parametrize(
        "fields",
        [
            {"principal": -1, "annual_rate": 10, "term_months": 12},
            {"principal": 1_000, "annual_rate": -1, "term_months": 12},
            {"principal": 1_000, "annual_rate": 10, "term_months": 0},
            {"principal": 1_000, "annual_rate": 10, "term_months": 12, "promotional_rate": -2},
        ],
    )
    def test_invalid_parameters(self, fields):
        with pytest.raises(ValidationError):
            LoanParameters(**fields)

    def test_parameters_are_immutable(self, standard_loan):
        with pytest.raises(ValidationError):
            standard_loan.principal = 1

    def test_rate_for_month(self, promotional_loan):
        assert promotional_loan.rate_for_month(1) == 7
        assert promotional_loan.rate_for_month(24) == 7
        assert promotional_loan.rate_for_month(25) == 11

    def test_zero_promotional_rate_is_a_promotion(self):
        params = LoanParameters(
            principal=1_000_000,
            annual_rate=10,
            term_months=12,
            promotional_rate=0,
            promotional_period_months=3,
        )
        assert params.has_promotional_phase
        assert params.rate_for_month(3) == 0


class TestScheduleGenerator:
    """Test cases for payment schedule generation."""

    @pytest.mark.parametrize("params", SAMPLE_LOANS)
    def test_balance_non_increasing_and_paid_off(self, params):
        schedule = ScheduleGenerator.generate_payment_schedule(params)

        balances = [item.balance for item in schedule]
        assert all(later <= earlier for earlier, later in zip(balances, balances[1:]))
        assert balances[0] <= params.principal
        assert abs(schedule[-1].balance) <= params.term_months

    @pytest.mark.parametrize("params", SAMPLE_LOANS)
    def test_principal_sums_to_loan_amount(self, params):
        schedule = ScheduleGenerator.generate_payment_schedule(params)

        total_principal = sum(item.principal for item in schedule)
        assert abs(total_principal - params.principal) <= params.term_months

    @pytest.mark.parametrize("params", SAMPLE_LOANS)
    def test_payment_split(self, params):
        schedule = ScheduleGenerator.generate_payment_schedule(params)

        for item in schedule:
            assert item.principal + item.interest == item.payment
            assert item.payment == int(item.payment)
            assert item.interest == int(item.interest)

    @pytest.mark.parametrize("params", SAMPLE_LOANS)
    def test_months_are_sequential(self, params):
        schedule = ScheduleGenerator.generate_payment_schedule(params)

        assert [item.month for item in schedule] == list(range(1, len(schedule) + 1))
        assert len(schedule) == params.term_months

    @pytest.mark.parametrize("params", SAMPLE_LOANS)
    def test_cumulative_interest(self, params):
        schedule = ScheduleGenerator.generate_payment_schedule(params)

        running = 0
        for item in schedule:
            running += item.interest
            assert item.cumulative_interest == running
        assert ScheduleGenerator.calculate_total_interest(schedule) == running

    def test_phase_rates(self, promotional_loan):
        schedule = ScheduleGenerator.generate_payment_schedule(promotional_loan)

        assert all(item.rate == 7 for item in schedule[:24])
        assert all(item.rate == 11 for item in schedule[24:])
        # payment steps up when the promotion ends
        assert schedule[24].payment > schedule[23].payment

    def test_first_month_interest(self, standard_loan):
        schedule = ScheduleGenerator.generate_payment_schedule(standard_loan)

        assert schedule[0].interest == 21_000_000  # 2.4B * 10.5% / 12
        assert schedule[0].payment == AmortizationCalculator.calculate_monthly_payment(
            2_400_000_000, 10.5, 240
        )

    def test_zero_rate_schedule(self):
        params = LoanParameters(principal=120_000_000, annual_rate=0, term_months=12)
        schedule = ScheduleGenerator.generate_payment_schedule(params)

        assert all(item.payment == 10_000_000 for item in schedule)
        assert all(item.interest == 0 for item in schedule)
        assert schedule[-1].balance == 0

    def test_zero_principal_terminates_immediately(self):
        params = LoanParameters(principal=0, annual_rate=10, term_months=120)
        schedule = ScheduleGenerator.generate_payment_schedule(params)

        assert len(schedule) == 1
        assert schedule[0].payment == 0
        assert schedule[0].balance == 0

    def test_deterministic(self, promotional_loan):
        first = ScheduleGenerator.generate_payment_schedule(promotional_loan)
        second = ScheduleGenerator.generate_payment_schedule(promotional_loan)
        assert first == second
