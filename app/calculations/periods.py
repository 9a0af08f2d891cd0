"""
Rate Period Resolution

Splits a loan term into its fixed-rate and variable-rate months, and
provides the calendar-month stepping used by the schedules.
"""

from typing import Tuple
from datetime import date
from dateutil.relativedelta import relativedelta


def months_between(start: date, end: date) -> int:
    """
    Whole calendar months from start to end.

    The day of month is ignored: a loan switches rate at the start of the
    month containing the end date.
    """
    return (end.year - start.year) * 12 + (end.month - start.month)


def add_months(start: date, months: int) -> date:
    """Step a date forward by calendar months (day clipped to month end)."""
    return start + relativedelta(months=months)


def age_at(birth_date: date, on: date) -> int:
    """Age in completed years on a given date."""
    return relativedelta(on, birth_date).years


def resolve_periods(
    start_date: date,
    fixed_rate_end_date: date,
    term_months: int,
    variable_enabled: bool,
) -> Tuple[int, int]:
    """
    Resolve how many months of the term are fixed-rate and variable-rate.

    Args:
        start_date: Date of the first payment
        fixed_rate_end_date: Date the fixed-rate window ends
        term_months: Total loan term in months
        variable_enabled: Whether a variable rate follows the fixed window

    Returns:
        (fixed_months, variable_months), which always sum to term_months
    """
    if not variable_enabled:
        return term_months, 0

    fixed_months = months_between(start_date, fixed_rate_end_date)
    fixed_months = min(max(0, fixed_months), term_months)
    variable_months = max(0, term_months - fixed_months)

    return fixed_months, variable_months
