"""
Loan Amortization Calculations

Implements the level-payment formula and the month-by-month mortgage
simulator, including the fixed-to-variable rate transition, extra monthly
payments and interest-only loans.
"""

import logging
import math
from typing import List

from app.calculations.exceptions import InvalidParameterError
from app.calculations.models import (
    AmortizationEntry,
    LoanParameters,
    LoanSummary,
    PaymentType,
)
from app.calculations.periods import add_months, resolve_periods

logger = logging.getLogger(__name__)

# Balances below half a cent are treated as paid off
BALANCE_TOLERANCE = 0.005


def monthly_rate(annual_rate: float) -> float:
    """Convert an annual percentage rate (e.g., 5.0) to a monthly decimal rate."""
    return annual_rate / 12 / 100


def calculate_payment(
    balance: float,
    periodic_rate: float,
    remaining_periods: int,
    payment_type: PaymentType = PaymentType.REPAYMENT,
) -> float:
    """
    Calculate the level payment for a balance.

    Args:
        balance: Outstanding balance
        periodic_rate: Interest rate per period as decimal
        remaining_periods: Number of payments left
        payment_type: Repayment (annuity) or interest-only

    Returns:
        Payment per period

    Raises:
        InvalidParameterError: If remaining_periods is not positive
    """
    if remaining_periods <= 0:
        raise InvalidParameterError(
            f"remaining_periods must be positive, got {remaining_periods}"
        )

    if payment_type == PaymentType.INTEREST_ONLY:
        return balance * periodic_rate

    if periodic_rate == 0:
        return balance / remaining_periods

    growth = (1 + periodic_rate) ** remaining_periods
    return balance * periodic_rate * growth / (growth - 1)


def validate_loan(params: LoanParameters) -> None:
    """Reject loan parameters the simulator cannot honour."""
    if params.principal <= 0:
        raise InvalidParameterError(f"principal must be positive, got {params.principal}")
    if params.term_months <= 0:
        raise InvalidParameterError(f"term_months must be positive, got {params.term_months}")
    if params.annual_rate < 0:
        raise InvalidParameterError(f"annual_rate cannot be negative, got {params.annual_rate}")
    if params.extra_monthly_payment < 0:
        raise InvalidParameterError(
            f"extra_monthly_payment cannot be negative, got {params.extra_monthly_payment}"
        )
    if params.property_value is not None and params.property_value < params.principal:
        raise InvalidParameterError("property_value must be at least the principal")
    if params.variable_enabled and params.variable_rate.annual_rate < 0:
        raise InvalidParameterError("variable annual_rate cannot be negative")


def simulate_amortization(
    params: LoanParameters,
    extra_payment_in_interest_only: bool = False,
) -> List[AmortizationEntry]:
    """
    Generate the month-by-month amortization schedule for a loan.

    The level payment is computed once for the fixed-rate period and then
    recomputed from the remaining balance and remaining months when the
    variable rate starts. The schedule stops as soon as the balance is paid
    off, so extra payments shorten it.

    Args:
        params: Loan parameters
        extra_payment_in_interest_only: Apply the extra monthly payment to
            principal on interest-only loans (ignored by default)

    Returns:
        List of schedule entries, one per month paid
    """
    validate_loan(params)

    fixed_months, variable_months = resolve_periods(
        params.start_date,
        params.variable_rate.fixed_period_end_date if params.variable_rate else params.start_date,
        params.term_months,
        params.variable_enabled,
    )

    fixed_annual = params.annual_rate
    variable_annual = params.variable_rate.annual_rate if variable_months else fixed_annual

    interest_only = params.payment_type == PaymentType.INTEREST_ONLY
    extra = params.extra_monthly_payment
    if interest_only and not extra_payment_in_interest_only:
        extra = 0.0

    schedule = []
    balance = params.principal
    in_fixed_regime = None
    scheduled_payment = 0.0

    for month in range(1, params.term_months + 1):
        is_fixed = month <= fixed_months
        annual_rate = fixed_annual if is_fixed else variable_annual
        rate = monthly_rate(annual_rate)
        remaining_periods = params.term_months - month + 1
        # Offset from the start date, so month-end clipping applies per month
        current_date = add_months(params.start_date, month - 1)

        if interest_only:
            scheduled_payment = calculate_payment(
                balance, rate, remaining_periods, PaymentType.INTEREST_ONLY
            )
        elif is_fixed != in_fixed_regime:
            # Re-amortize what is left whenever the rate regime changes
            scheduled_payment = calculate_payment(balance, rate, remaining_periods)
            if in_fixed_regime is not None:
                logger.debug(
                    "Rate change at month %d: %.2f%% -> %.2f%%, payment %.2f",
                    month,
                    fixed_annual,
                    annual_rate,
                    scheduled_payment,
                )
            in_fixed_regime = is_fixed

        interest = balance * rate
        if interest_only:
            principal = min(extra, balance)
        else:
            principal = min(scheduled_payment + extra - interest, balance)

        if balance - principal < BALANCE_TOLERANCE:
            principal = balance

        balance = max(0.0, balance - principal)

        schedule.append(
            AmortizationEntry(
                month=month,
                scheduled_payment=scheduled_payment,
                payment=principal + interest,
                principal=principal,
                interest=interest,
                balance=balance,
                annual_rate=annual_rate,
                date=current_date,
            )
        )

        # Stop if balance is paid off
        if balance == 0:
            break

    logger.debug(
        "Simulated %d of %d months (fixed=%d, variable=%d)",
        len(schedule),
        params.term_months,
        fixed_months,
        variable_months,
    )

    return schedule


def initial_payment(params: LoanParameters) -> float:
    """Level payment at the fixed rate over the full term, for display."""
    return calculate_payment(
        params.principal,
        monthly_rate(params.annual_rate),
        params.term_months,
        params.payment_type,
    )


def calculate_total_interest(schedule: List[AmortizationEntry]) -> float:
    """Calculate total interest paid over loan term."""
    return sum(row.interest for row in schedule)


def summarize_loan(
    params: LoanParameters, schedule: List[AmortizationEntry]
) -> LoanSummary:
    """
    Lifetime totals for a schedule.

    Total paid is the principal plus all interest, so an interest-only loan
    includes repaying the outstanding balance at the end of the term.
    """
    total_interest = calculate_total_interest(schedule)
    return LoanSummary(
        initial_payment=schedule[0].scheduled_payment if schedule else 0.0,
        total_interest=total_interest,
        total_paid=params.principal + total_interest,
        months=len(schedule),
        payoff_date=schedule[-1].date if schedule else None,
    )


def required_income(payment: float, debt_to_income_ratio: float) -> int:
    """
    Monthly income needed to keep a payment within a debt-to-income ratio.

    Args:
        payment: Monthly housing payment
        debt_to_income_ratio: Ratio as decimal (e.g., 0.28 for 28%)

    Returns:
        Required monthly income, rounded up to whole currency units
    """
    if debt_to_income_ratio <= 0:
        raise InvalidParameterError("debt_to_income_ratio must be positive")
    return math.ceil(payment / debt_to_income_ratio)
