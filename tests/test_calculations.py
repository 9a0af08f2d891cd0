"""
Tests for the mortgage calculation engine.
"""

import pytest
from dataclasses import replace
from datetime import date

from app.calculations.amortization import (
    calculate_payment,
    calculate_total_interest,
    initial_payment,
    monthly_rate,
    required_income,
    simulate_amortization,
    summarize_loan,
)
from app.calculations.exceptions import InvalidParameterError
from app.calculations.models import LoanParameters, PaymentType, VariableRate
from app.calculations.periods import add_months, age_at, months_between, resolve_periods
from app.calculations.summary import remaining_to_pay, summarize_yearly, yearly_totals


def variable_loan(fixed_rate=3.0, variable_rate=6.0, extra=0.0):
    """25-year loan fixed for 60 months, then variable."""
    return LoanParameters.from_years(
        25,
        principal=250000,
        annual_rate=fixed_rate,
        start_date=date(2025, 1, 15),
        extra_monthly_payment=extra,
        variable_rate=VariableRate(
            enabled=True,
            annual_rate=variable_rate,
            fixed_period_end_date=date(2030, 1, 1),
        ),
    )


class TestPeriods:
    """Test rate period resolution and calendar stepping."""

    def test_months_between_ignores_day(self):
        assert months_between(date(2025, 1, 31), date(2030, 1, 1)) == 60
        assert months_between(date(2025, 3, 1), date(2026, 2, 28)) == 11

    def test_disabled_variable_rate_is_all_fixed(self):
        assert resolve_periods(date(2025, 1, 1), date(2027, 1, 1), 300, False) == (300, 0)

    def test_fixed_then_variable(self):
        assert resolve_periods(date(2025, 1, 15), date(2030, 1, 1), 300, True) == (60, 240)

    def test_fixed_end_beyond_term(self):
        """A fixed window longer than the term leaves no variable months."""
        assert resolve_periods(date(2025, 1, 1), date(2060, 1, 1), 120, True) == (120, 0)

    def test_fixed_end_before_start(self):
        assert resolve_periods(date(2025, 6, 1), date(2024, 1, 1), 120, True) == (0, 120)

    def test_add_months_rolls_year(self):
        assert add_months(date(2025, 11, 15), 3) == date(2026, 2, 15)

    def test_add_months_clips_month_end(self):
        assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)

    def test_age_at(self):
        assert age_at(date(1990, 6, 15), date(2025, 6, 14)) == 34
        assert age_at(date(1990, 6, 15), date(2025, 6, 15)) == 35


class TestPayment:
    """Test the level payment formula."""

    def test_calculate_payment(self):
        """$1M loan at 5% for 30 years."""
        payment = calculate_payment(1000000, monthly_rate(5.0), 360)
        assert payment == pytest.approx(5368.22, abs=0.01)

    def test_zero_rate_is_linear(self):
        assert calculate_payment(12000, 0.0, 12) == 1000.0

    def test_interest_only(self):
        payment = calculate_payment(200000, monthly_rate(6.0), 300, PaymentType.INTEREST_ONLY)
        assert payment == pytest.approx(1000.0)

    def test_no_remaining_periods_raises(self):
        with pytest.raises(InvalidParameterError):
            calculate_payment(1000, 0.01, 0)

    def test_monthly_rate(self):
        assert monthly_rate(6.0) == pytest.approx(0.005)


class TestAmortization:
    """Test the amortization simulator."""

    def test_scenario_a_standard_loan(self):
        """579,289 at 2.79% over 35 years."""
        params = LoanParameters.from_years(
            35,
            principal=579289,
            annual_rate=2.79,
            start_date=date(2024, 3, 1),
        )
        schedule = simulate_amortization(params)

        r = 0.0279 / 12
        expected = 579289 * r / (1 - (1 + r) ** -420)

        assert schedule[0].payment == pytest.approx(expected, abs=0.005)
        assert len(schedule) == 420
        assert schedule[-1].balance == 0

    def test_scenario_b_extra_payment_shortens(self, repayment_loan):
        baseline = simulate_amortization(repayment_loan)
        with_extra = simulate_amortization(replace(repayment_loan, extra_monthly_payment=500))

        assert len(baseline) == 300
        assert len(with_extra) < 300
        assert calculate_total_interest(with_extra) < calculate_total_interest(baseline)
        assert with_extra[-1].balance == 0

    def test_month_end_start_date(self, repayment_loan):
        schedule = simulate_amortization(replace(repayment_loan, start_date=date(2025, 1, 31)))

        assert schedule[0].date == date(2025, 1, 31)
        assert schedule[1].date == date(2025, 2, 28)
        assert schedule[2].date == date(2025, 3, 31)
        assert schedule[13].date == date(2026, 2, 28)
        assert schedule[-1].date == date(2049, 12, 31)

    def test_scenario_d_variable_rate_recomputes_payment(self):
        schedule = simulate_amortization(variable_loan())

        assert schedule[59].annual_rate == 3.0
        assert schedule[60].annual_rate == 6.0
        assert schedule[60].payment > schedule[59].payment
        assert len(schedule) == 300
        assert schedule[-1].balance == 0

    def test_variable_rate_costs_more_than_fixed(self):
        variable = simulate_amortization(variable_loan())
        fixed = simulate_amortization(replace(variable_loan(), variable_rate=None))

        assert calculate_total_interest(variable) > calculate_total_interest(fixed)

    def test_variable_payment_reamortizes_remaining_balance(self):
        schedule = simulate_amortization(variable_loan())
        balance_after_fixed = schedule[59].balance

        expected = calculate_payment(balance_after_fixed, monthly_rate(6.0), 240)
        assert schedule[60].scheduled_payment == pytest.approx(expected)
        # Payment stays level for the rest of the variable period
        assert schedule[150].scheduled_payment == schedule[60].scheduled_payment

    def test_balance_monotonic(self, repayment_loan):
        for extra in (0, 250, 2000):
            schedule = simulate_amortization(replace(repayment_loan, extra_monthly_payment=extra))
            balances = [row.balance for row in schedule]
            assert all(b2 <= b1 for b1, b2 in zip(balances, balances[1:]))
            assert balances[-1] == 0
            assert min(balances) >= 0

    def test_payment_conservation(self):
        schedule = simulate_amortization(variable_loan(extra=300))
        for row in schedule:
            assert row.principal + row.interest == pytest.approx(row.payment)

    def test_extra_payment_added_to_scheduled_payment(self, repayment_loan):
        schedule = simulate_amortization(replace(repayment_loan, extra_monthly_payment=500))
        for row in schedule[:-1]:
            assert row.payment == pytest.approx(row.scheduled_payment + 500)
        # Final payment only clears what is left
        assert schedule[-1].payment <= schedule[-1].scheduled_payment + 500

    def test_dates_advance_monthly(self, repayment_loan):
        schedule = simulate_amortization(repayment_loan)
        assert schedule[0].date == date(2025, 1, 1)
        assert schedule[1].date == date(2025, 2, 1)
        assert schedule[12].date == date(2026, 1, 1)
        assert schedule[-1].date == date(2049, 12, 1)

    def test_zero_rate_loan(self):
        params = LoanParameters(
            principal=12000,
            annual_rate=0.0,
            term_months=12,
            start_date=date(2025, 1, 1),
        )
        schedule = simulate_amortization(params)

        assert len(schedule) == 12
        assert all(row.interest == 0 for row in schedule)
        assert all(row.payment == pytest.approx(1000.0) for row in schedule)
        assert schedule[-1].balance == 0

    def test_interest_only(self):
        params = LoanParameters.from_years(
            10,
            principal=100000,
            annual_rate=5.0,
            start_date=date(2025, 1, 1),
            payment_type=PaymentType.INTEREST_ONLY,
            extra_monthly_payment=1000,
        )
        schedule = simulate_amortization(params)

        assert len(schedule) == 120
        assert all(row.principal == 0 for row in schedule)
        assert all(row.balance == 100000 for row in schedule)
        assert schedule[0].payment == pytest.approx(100000 * 0.05 / 12)

    def test_interest_only_with_extra_payment_policy(self):
        params = LoanParameters.from_years(
            10,
            principal=100000,
            annual_rate=5.0,
            start_date=date(2025, 1, 1),
            payment_type=PaymentType.INTEREST_ONLY,
            extra_monthly_payment=1000,
        )
        schedule = simulate_amortization(params, extra_payment_in_interest_only=True)

        assert len(schedule) == 100
        assert schedule[0].principal == 1000
        assert schedule[-1].balance == 0

    def test_interest_only_variable_rate(self):
        params = replace(variable_loan(), payment_type=PaymentType.INTEREST_ONLY)
        schedule = simulate_amortization(params)

        assert schedule[0].payment == pytest.approx(250000 * 0.03 / 12)
        assert schedule[60].payment == pytest.approx(250000 * 0.06 / 12)

    def test_invalid_principal_raises(self, repayment_loan):
        with pytest.raises(InvalidParameterError):
            simulate_amortization(replace(repayment_loan, principal=0))

    def test_invalid_term_raises(self, repayment_loan):
        with pytest.raises(InvalidParameterError):
            simulate_amortization(replace(repayment_loan, term_months=0))

    def test_property_value_below_principal_raises(self, repayment_loan):
        with pytest.raises(InvalidParameterError):
            simulate_amortization(replace(repayment_loan, property_value=100000))


class TestLoanMetrics:
    """Test loan-level metrics."""

    def test_loan_to_value_and_deposit(self, repayment_loan):
        params = replace(repayment_loan, property_value=400000)
        assert params.loan_to_value == pytest.approx(75.0)
        assert params.deposit == 100000

    def test_property_value_defaults_to_principal(self, repayment_loan):
        assert repayment_loan.loan_to_value == pytest.approx(100.0)
        assert repayment_loan.deposit == 0

    def test_summarize_loan(self, repayment_loan):
        schedule = simulate_amortization(repayment_loan)
        loan_summary = summarize_loan(repayment_loan, schedule)

        assert loan_summary.months == 300
        assert loan_summary.initial_payment == pytest.approx(initial_payment(repayment_loan))
        assert loan_summary.total_paid == pytest.approx(300000 + loan_summary.total_interest)
        assert loan_summary.payoff_date == date(2049, 12, 1)

    def test_required_income(self):
        assert required_income(1000, 0.25) == 4000
        assert required_income(1000.5, 0.25) == 4002

    def test_required_income_invalid_ratio(self):
        with pytest.raises(InvalidParameterError):
            required_income(1000, 0)


class TestYearlySummary:
    """Test yearly aggregation."""

    def test_yearly_reconciles_with_schedule(self, repayment_loan):
        schedule = simulate_amortization(replace(repayment_loan, extra_monthly_payment=300))
        yearly = summarize_yearly(schedule)

        total_principal, total_interest = yearly_totals(yearly)
        assert total_principal == pytest.approx(300000, abs=0.01)
        assert total_interest == pytest.approx(calculate_total_interest(schedule), abs=1e-6)

    def test_yearly_bucket_count(self, repayment_loan):
        schedule = simulate_amortization(repayment_loan)
        assert len(summarize_yearly(schedule)) == 25

    def test_short_final_bucket(self):
        params = LoanParameters(
            principal=18000,
            annual_rate=0.0,
            term_months=18,
            start_date=date(2025, 7, 1),
        )
        yearly = summarize_yearly(simulate_amortization(params))

        assert len(yearly) == 2
        assert yearly[0].principal == pytest.approx(12000)
        assert yearly[1].principal == pytest.approx(6000)
        assert yearly[1].balance == 0

    def test_calendar_year_from_first_payment(self):
        """A loan starting mid-year labels each bucket by its first payment date."""
        params = LoanParameters(
            principal=18000,
            annual_rate=0.0,
            term_months=18,
            start_date=date(2025, 7, 1),
        )
        yearly = summarize_yearly(simulate_amortization(params))

        assert [y.year for y in yearly] == [1, 2]
        assert [y.calendar_year for y in yearly] == [2025, 2026]

    def test_year_end_balance(self, repayment_loan):
        schedule = simulate_amortization(repayment_loan)
        yearly = summarize_yearly(schedule)
        assert yearly[0].balance == schedule[11].balance
        assert yearly[-1].balance == 0

    def test_empty_schedule(self):
        assert summarize_yearly([]) == []

    def test_remaining_to_pay(self, repayment_loan):
        schedule = simulate_amortization(repayment_loan)
        yearly = summarize_yearly(schedule)
        remaining = remaining_to_pay(yearly, repayment_loan.principal)
        total_interest = calculate_total_interest(schedule)

        assert remaining[0].principal == 300000
        assert remaining[0].interest == pytest.approx(total_interest)
        assert remaining[0].total == pytest.approx(300000 + total_interest)

        # Decrements add back up to the lifetime totals
        principal_paid = sum(
            a.principal - b.principal for a, b in zip(remaining, remaining[1:])
        ) + remaining[-1].principal
        interest_paid = sum(
            a.interest - b.interest for a, b in zip(remaining, remaining[1:])
        ) + remaining[-1].interest
        assert principal_paid == pytest.approx(300000, abs=0.01)
        assert interest_paid == pytest.approx(total_interest, abs=0.01)

    def test_remaining_to_pay_final_year(self, repayment_loan):
        yearly = summarize_yearly(simulate_amortization(repayment_loan))
        remaining = remaining_to_pay(yearly, repayment_loan.principal)

        assert remaining[-1].principal == pytest.approx(yearly[-1].principal, abs=0.01)
        assert remaining[-1].interest == pytest.approx(yearly[-1].interest, abs=0.01)
