"""
Compound Growth Calculations

Projects an investment account with a lump sum and periodic contributions,
compounding monthly. Contributions are deposited at the start of the month,
before that month's interest is applied.
"""

import logging
from typing import List, Tuple

from app.calculations.exceptions import InvalidParameterError
from app.calculations.models import (
    AttributionModel,
    ContributionFrequency,
    Counterfactual,
    GrowthResult,
    InvestmentParameters,
    YearlyInvestmentSummary,
)

logger = logging.getLogger(__name__)

# Months of each 12-month cycle that receive a contribution
CONTRIBUTION_MONTHS = {
    ContributionFrequency.MONTHLY: frozenset(range(1, 13)),
    ContributionFrequency.QUARTERLY: frozenset({1, 4, 7, 10}),
    ContributionFrequency.ANNUALLY: frozenset({1}),
}


def validate_investment(params: InvestmentParameters) -> None:
    """Reject investment parameters the simulator cannot honour."""
    if params.initial_amount < 0:
        raise InvalidParameterError(
            f"initial_amount cannot be negative, got {params.initial_amount}"
        )
    if params.contribution < 0:
        raise InvalidParameterError(
            f"contribution cannot be negative, got {params.contribution}"
        )
    if params.term_years <= 0:
        raise InvalidParameterError(f"term_years must be positive, got {params.term_years}")


def is_contribution_month(month: int, frequency: ContributionFrequency) -> bool:
    """Whether month (1-12 within a year) receives a contribution."""
    return month in CONTRIBUTION_MONTHS[frequency]


def calculate_counterfactual(initial_amount: float, annual_rate: float, years: int) -> Counterfactual:
    """
    Value of the lump sum alone, compounded annually at the nominal rate.

    This is a comparison figure only and intentionally does not follow the
    monthly compounding of the main projection.
    """
    final_value = initial_amount * (1 + annual_rate / 100) ** years
    return Counterfactual(
        final_value=final_value,
        total_interest=final_value - initial_amount,
    )


def _year_summary(
    year: int,
    initial_amount: float,
    original_value: float,
    contributions: float,
    contribution_value: float,
) -> YearlyInvestmentSummary:
    invested = initial_amount + contributions
    value = original_value + contribution_value
    return YearlyInvestmentSummary(
        year=year,
        invested=invested,
        value=value,
        interest=value - invested,
        original_amount=original_value,
        original_interest=original_value - initial_amount,
        contributions=contributions,
        contribution_interest=contribution_value - contributions,
    )


def _simulate_segregated(params: InvestmentParameters) -> List[YearlyInvestmentSummary]:
    rate = params.annual_rate / 12 / 100
    original_value = params.initial_amount
    contributions = 0.0
    contribution_value = 0.0

    yearly = [_year_summary(0, params.initial_amount, original_value, 0.0, 0.0)]
    for year in range(1, params.term_years + 1):
        for month in range(1, 13):
            if is_contribution_month(month, params.frequency):
                contributions += params.contribution
                contribution_value += params.contribution

            original_value *= 1 + rate
            contribution_value *= 1 + rate

        yearly.append(
            _year_summary(
                year, params.initial_amount, original_value, contributions, contribution_value
            )
        )

    return yearly


def _simulate_proportional(params: InvestmentParameters) -> List[YearlyInvestmentSummary]:
    rate = params.annual_rate / 12 / 100
    balance = params.initial_amount
    original_value = params.initial_amount
    contributions = 0.0
    contribution_value = 0.0

    yearly = [_year_summary(0, params.initial_amount, original_value, 0.0, 0.0)]
    for year in range(1, params.term_years + 1):
        for month in range(1, 13):
            if is_contribution_month(month, params.frequency):
                balance += params.contribution
                contributions += params.contribution
                contribution_value += params.contribution

            interest = balance * rate
            if balance > 0:
                original_share = interest * (original_value / balance)
                original_value += original_share
                contribution_value += interest - original_share
            balance += interest

        yearly.append(
            _year_summary(
                year, params.initial_amount, original_value, contributions, contribution_value
            )
        )

    return yearly


def simulate_growth(
    params: InvestmentParameters,
    model: AttributionModel = AttributionModel.SEGREGATED,
) -> GrowthResult:
    """
    Project an investment year by year.

    Both attribution models compound the same combined balance; they differ
    only in how interest is split between the lump sum and the contributions.

    Args:
        params: Investment parameters
        model: Interest attribution model, applied to the whole result

    Returns:
        GrowthResult with a year-0 opening row followed by one row per year
    """
    validate_investment(params)

    if model == AttributionModel.PROPORTIONAL:
        yearly = _simulate_proportional(params)
    else:
        yearly = _simulate_segregated(params)

    final = yearly[-1]
    logger.debug(
        "Growth projection (%s): %d years, final value %.2f",
        model.value,
        params.term_years,
        final.value,
    )

    return GrowthResult(
        model=model,
        yearly=yearly,
        total_invested=final.invested,
        final_value=final.value,
        total_interest=final.interest,
        counterfactual=calculate_counterfactual(
            params.initial_amount, params.annual_rate, params.term_years
        ),
    )


def interest_breakdown(result: GrowthResult) -> Tuple[float, float]:
    """Total (lump sum interest, contribution interest) of a projection."""
    final = result.yearly[-1]
    return final.original_interest, final.contribution_interest
