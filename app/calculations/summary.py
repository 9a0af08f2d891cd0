"""
Schedule Aggregation

Rolls a monthly amortization schedule into yearly totals and the
"remaining to pay" series shown alongside them.
"""

from typing import List, Tuple

from app.calculations.models import (
    AmortizationEntry,
    RemainingToPay,
    YearlyAmortizationSummary,
)

MONTHS_PER_YEAR = 12


def summarize_yearly(schedule: List[AmortizationEntry]) -> List[YearlyAmortizationSummary]:
    """
    Convert a monthly schedule to yearly totals.

    Entries are grouped in consecutive 12-month chunks counted from the first
    payment; the last chunk is short when the loan pays off early. Each year
    is labelled with the calendar year of its first payment, so a loan that
    starts mid-year keeps its real dates.

    Args:
        schedule: Monthly amortization entries

    Returns:
        One summary per 12-month chunk
    """
    if not schedule:
        return []

    yearly = []
    for index, start in enumerate(range(0, len(schedule), MONTHS_PER_YEAR)):
        chunk = schedule[start:start + MONTHS_PER_YEAR]
        yearly.append(
            YearlyAmortizationSummary(
                year=index + 1,
                calendar_year=chunk[0].date.year,
                principal=sum(row.principal for row in chunk),
                interest=sum(row.interest for row in chunk),
                balance=chunk[-1].balance,
            )
        )

    return yearly


def yearly_totals(yearly: List[YearlyAmortizationSummary]) -> Tuple[float, float]:
    """Total (principal, interest) across a yearly summary."""
    return (
        sum(year.principal for year in yearly),
        sum(year.interest for year in yearly),
    )


def remaining_to_pay(
    yearly: List[YearlyAmortizationSummary], principal: float
) -> List[RemainingToPay]:
    """
    Principal and interest still owed at the start of each schedule year.

    Computed as a running subtraction from the lifetime totals, so the
    decrements across the series add back up to the principal and to the
    total interest of the schedule.
    """
    _, total_interest = yearly_totals(yearly)

    remaining_principal = principal
    remaining_interest = total_interest

    series = []
    for year in yearly:
        series.append(
            RemainingToPay(
                year=year.year,
                calendar_year=year.calendar_year,
                principal=max(0.0, remaining_principal),
                interest=max(0.0, remaining_interest),
            )
        )
        remaining_principal -= year.principal
        remaining_interest -= year.interest

    return series
