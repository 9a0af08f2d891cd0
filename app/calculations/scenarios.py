"""
Scenario Calculations

Runs the amortization and growth engines across parameter sweeps: rate and
term comparisons, extra-payment tiers, named rate assumptions and
rate/term sensitivity grids.

Every scenario is evaluated independently from its own parameters, so a
sweep can be spread across worker threads without changing its results.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

from app.calculations.amortization import calculate_total_interest, simulate_amortization
from app.calculations.growth import simulate_growth
from app.calculations.models import (
    AttributionModel,
    ExtraPaymentImpact,
    GrowthScenario,
    InvestmentParameters,
    LoanParameters,
    PaymentType,
    ScenarioOverride,
    ScenarioResult,
    SensitivityCell,
)
from app.calculations.periods import age_at

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

# Extra monthly payment tiers
DEFAULT_EXTRA_PAYMENT_TIERS = {
    "conservative": 100.0,
    "moderate": 500.0,
    "aggressive": 1000.0,
}

# Annual return assumptions per risk level (percent)
DEFAULT_RISK_LEVEL_RATES = {
    "conservative": 4.0,
    "moderate": 7.0,
    "aggressive": 10.0,
}

DEFAULT_RATE_DELTAS = (-1.0, -0.5, 0.0, 0.5, 1.0)
DEFAULT_TERM_DELTAS_YEARS = (-5, 0, 5)


def _evaluate(func: Callable[[T], R], items: Iterable[T], max_workers: int = 1) -> List[R]:
    """Apply func to every item, on a thread pool when max_workers > 1. Order is kept."""
    items = list(items)
    if max_workers > 1 and len(items) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(func, items))
    return [func(item) for item in items]


def apply_override(base: LoanParameters, override: ScenarioOverride) -> LoanParameters:
    """Return a copy of base with the override's fields replaced."""
    changes = {}
    if override.annual_rate is not None:
        changes["annual_rate"] = override.annual_rate
    if override.term_months is not None:
        changes["term_months"] = override.term_months
    if override.extra_monthly_payment is not None:
        changes["extra_monthly_payment"] = override.extra_monthly_payment
    return replace(base, **changes)


def run_scenario(
    base: LoanParameters,
    override: ScenarioOverride,
    extra_payment_in_interest_only: bool = False,
) -> ScenarioResult:
    """Simulate a single override of the base loan."""
    params = apply_override(base, override)
    schedule = simulate_amortization(params, extra_payment_in_interest_only)
    total_interest = calculate_total_interest(schedule)

    return ScenarioResult(
        label=override.label,
        annual_rate=params.annual_rate,
        term_months=params.term_months,
        extra_monthly_payment=params.extra_monthly_payment,
        monthly_payment=schedule[0].scheduled_payment,
        total_interest=total_interest,
        total_paid=params.principal + total_interest,
        months=len(schedule),
    )


def compare_scenarios(
    base: LoanParameters,
    overrides: Sequence[ScenarioOverride],
    max_workers: int = 1,
    extra_payment_in_interest_only: bool = False,
) -> List[ScenarioResult]:
    """
    Simulate the base loan once per override.

    Args:
        base: Loan the overrides are applied to
        overrides: One entry per scenario
        max_workers: Thread pool size (1 evaluates sequentially)
        extra_payment_in_interest_only: Passed through to the simulator

    Returns:
        One ScenarioResult per override, in the order given
    """
    logger.debug("Comparing %d scenarios", len(overrides))
    return _evaluate(
        lambda override: run_scenario(base, override, extra_payment_in_interest_only),
        overrides,
        max_workers,
    )


def standard_overrides(
    base: LoanParameters,
    rate_delta: float = 0.5,
    term_delta_years: int = 5,
    min_rate: float = 0.1,
    min_term_years: int = 15,
    max_term_years: int = 40,
) -> List[ScenarioOverride]:
    """
    The usual comparison set: current, lower/higher rate, shorter/longer term.

    Rates are floored at min_rate; terms are kept between min_term_years and
    max_term_years.
    """
    term_delta = term_delta_years * 12
    return [
        ScenarioOverride(label="Current"),
        ScenarioOverride(
            label="Lower Rate",
            annual_rate=max(min_rate, base.annual_rate - rate_delta),
        ),
        ScenarioOverride(
            label="Higher Rate",
            annual_rate=base.annual_rate + rate_delta,
        ),
        ScenarioOverride(
            label="Shorter Term",
            term_months=max(min_term_years * 12, base.term_months - term_delta),
        ),
        ScenarioOverride(
            label="Longer Term",
            term_months=min(max_term_years * 12, base.term_months + term_delta),
        ),
    ]


def extra_payment_tiers(
    base: LoanParameters,
    tiers: Optional[Dict[str, float]] = None,
    date_of_birth: Optional[date] = None,
    max_workers: int = 1,
) -> List[ExtraPaymentImpact]:
    """
    Compare the loan with no extra payment against each extra-payment tier.

    Savings are measured against the "Current" row (no extra payment).
    Interest-only loans never amortize, so only the "Current" row is returned.

    Args:
        base: Loan to evaluate; its own extra payment is replaced per tier
        tiers: Mapping of tier name to extra monthly payment
        date_of_birth: Borrower's birth date, used to report age at payoff
        max_workers: Thread pool size (1 evaluates sequentially)
    """
    if tiers is None:
        tiers = DEFAULT_EXTRA_PAYMENT_TIERS

    rows = [("Current", 0.0)]
    if base.payment_type == PaymentType.REPAYMENT:
        rows.extend(tiers.items())

    schedules = _evaluate(
        lambda row: simulate_amortization(replace(base, extra_monthly_payment=row[1])),
        rows,
        max_workers,
    )

    baseline_interest = calculate_total_interest(schedules[0])
    baseline_months = len(schedules[0])

    impacts = []
    for (label, extra), schedule in zip(rows, schedules):
        total_interest = calculate_total_interest(schedule)
        payoff_date = schedule[-1].date
        impacts.append(
            ExtraPaymentImpact(
                label=label,
                extra_monthly_payment=extra,
                total_interest=total_interest,
                total_paid=base.principal + total_interest,
                months=len(schedule),
                interest_saved=baseline_interest - total_interest,
                months_saved=baseline_months - len(schedule),
                payoff_date=payoff_date,
                age_at_payoff=age_at(date_of_birth, payoff_date) if date_of_birth else None,
            )
        )

    return impacts


def growth_rate_tiers(
    base: InvestmentParameters,
    tiers: Optional[Dict[str, float]] = None,
    model: AttributionModel = AttributionModel.SEGREGATED,
    max_workers: int = 1,
) -> List[GrowthScenario]:
    """Project the investment under each named annual return assumption."""
    if tiers is None:
        tiers = DEFAULT_RISK_LEVEL_RATES

    def project(tier):
        label, rate = tier
        return GrowthScenario(
            label=label,
            annual_rate=rate,
            result=simulate_growth(replace(base, annual_rate=rate), model),
        )

    return _evaluate(project, tiers.items(), max_workers)


def sensitivity_grid(
    base: LoanParameters,
    rate_deltas: Sequence[float] = DEFAULT_RATE_DELTAS,
    term_deltas_years: Sequence[int] = DEFAULT_TERM_DELTAS_YEARS,
    max_workers: int = 1,
    extra_payment_in_interest_only: bool = False,
) -> List[List[SensitivityCell]]:
    """
    Payment and interest across a grid of rate and term adjustments.

    Rows follow rate_deltas and columns follow term_deltas_years. Adjusted
    rates are floored at 0% and adjusted terms at one year. Each cell is
    simulated under the same extra-payment policy as compare_scenarios.

    Returns:
        A row of cells per rate delta
    """
    rates = [max(0.0, base.annual_rate + delta) for delta in rate_deltas]
    terms = [max(12, base.term_months + delta * 12) for delta in term_deltas_years]
    combinations = [(rate, term) for rate in rates for term in terms]

    def evaluate(combination):
        rate, term = combination
        result = run_scenario(
            base,
            ScenarioOverride(label="", annual_rate=rate, term_months=term),
            extra_payment_in_interest_only,
        )
        return SensitivityCell(
            annual_rate=rate,
            term_months=term,
            monthly_payment=result.monthly_payment,
            total_interest=result.total_interest,
            total_paid=result.total_paid,
        )

    cells = _evaluate(evaluate, combinations, max_workers)
    width = len(terms)
    return [cells[i:i + width] for i in range(0, len(cells), width)]
