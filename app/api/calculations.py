"""
Financial calculation API endpoints.

These endpoints accept calculator inputs and return calculated results.
Inputs are validated here and converted to frozen parameter objects before
they reach the calculation engine; nothing derived is stored.
"""

import logging
from dataclasses import asdict
from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from app.calculations import amortization, growth, scenarios, summary
from app.calculations.exceptions import InvalidParameterError
from app.calculations.models import (
    AttributionModel,
    ContributionFrequency,
    InvestmentParameters,
    LoanParameters,
    PaymentType,
    ScenarioOverride,
    VariableRate,
)
from app.config import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


class VariableRateInput(BaseModel):
    """Rate that follows the fixed-rate window."""

    enabled: bool = False
    annual_rate: float = Field(8.0, ge=0)
    fixed_period_end_date: date


class MortgageInput(BaseModel):
    """Input for mortgage calculations."""

    property_value: Optional[float] = Field(None, gt=0)
    mortgage_amount: float = Field(..., gt=0)
    interest_rate: float = Field(..., ge=0)
    term_years: int = Field(..., ge=1, le=50)
    payment_type: PaymentType = PaymentType.REPAYMENT
    extra_payment: float = Field(0.0, ge=0)
    start_date: date
    variable_rate: Optional[VariableRateInput] = None

    def to_parameters(self) -> LoanParameters:
        variable_rate = None
        if self.variable_rate is not None:
            variable_rate = VariableRate(
                enabled=self.variable_rate.enabled,
                annual_rate=self.variable_rate.annual_rate,
                fixed_period_end_date=self.variable_rate.fixed_period_end_date,
            )
        return LoanParameters.from_years(
            self.term_years,
            principal=self.mortgage_amount,
            annual_rate=self.interest_rate,
            start_date=self.start_date,
            payment_type=self.payment_type,
            extra_monthly_payment=self.extra_payment,
            property_value=self.property_value,
            variable_rate=variable_rate,
        )


class ScenarioOverrideInput(BaseModel):
    """A single comparison scenario."""

    label: str
    interest_rate: Optional[float] = Field(None, ge=0)
    term_years: Optional[int] = Field(None, ge=1, le=50)
    extra_payment: Optional[float] = Field(None, ge=0)

    def to_override(self) -> ScenarioOverride:
        return ScenarioOverride(
            label=self.label,
            annual_rate=self.interest_rate,
            term_months=self.term_years * 12 if self.term_years is not None else None,
            extra_monthly_payment=self.extra_payment,
        )


class ScenarioInput(BaseModel):
    """Input for scenario comparison. Omit overrides for the standard set."""

    loan: MortgageInput
    overrides: Optional[List[ScenarioOverrideInput]] = None


class ExtraPaymentInput(BaseModel):
    """Input for extra-payment tier comparison."""

    loan: MortgageInput
    tiers: Optional[Dict[str, float]] = None
    date_of_birth: Optional[date] = None


class SensitivityInput(BaseModel):
    """Input for the rate/term sensitivity grid."""

    loan: MortgageInput
    rate_deltas: Optional[List[float]] = None
    term_deltas_years: Optional[List[int]] = None


class InvestmentInput(BaseModel):
    """Input for investment growth calculation."""

    initial_amount: float = Field(..., ge=0)
    contribution: float = Field(0.0, ge=0)
    annual_return_rate: float
    investment_years: int = Field(..., ge=1, le=100)
    contribution_frequency: ContributionFrequency = ContributionFrequency.MONTHLY
    model: Optional[AttributionModel] = None

    def to_parameters(self) -> InvestmentParameters:
        return InvestmentParameters(
            initial_amount=self.initial_amount,
            contribution=self.contribution,
            annual_rate=self.annual_return_rate,
            term_years=self.investment_years,
            frequency=self.contribution_frequency,
        )


class RiskLevelInput(BaseModel):
    """Input for growth under named return assumptions."""

    investment: InvestmentInput
    tiers: Optional[Dict[str, float]] = None


def _bad_request(exc: InvalidParameterError) -> HTTPException:
    logger.warning("Rejected calculation input: %s", exc)
    return HTTPException(status_code=400, detail=str(exc))


def _growth_payload(result) -> dict:
    payload = asdict(result)
    payload["model"] = result.model.value
    return payload


@router.post("/mortgage")
async def calculate_mortgage(inputs: MortgageInput):
    """Generate the mortgage schedule with yearly and lifetime summaries."""
    settings = get_settings()

    try:
        params = inputs.to_parameters()
        schedule = amortization.simulate_amortization(
            params, settings.extra_payment_in_interest_only
        )
    except InvalidParameterError as e:
        raise _bad_request(e)

    yearly = summary.summarize_yearly(schedule)
    remaining = summary.remaining_to_pay(yearly, params.principal)
    loan_summary = amortization.summarize_loan(params, schedule)

    return {
        "schedule": [asdict(row) for row in schedule],
        "yearly": [asdict(year) for year in yearly],
        "remaining": [dict(asdict(row), total=row.total) for row in remaining],
        "summary": asdict(loan_summary),
        "loan_to_value": params.loan_to_value,
        "deposit": params.deposit,
        "required_income": {
            "front_end": amortization.required_income(
                loan_summary.initial_payment, settings.front_end_dti_ratio
            ),
            "back_end": amortization.required_income(
                loan_summary.initial_payment, settings.back_end_dti_ratio
            ),
        },
    }


@router.post("/mortgage/scenarios")
async def calculate_scenarios(inputs: ScenarioInput):
    """Compare the loan across rate and term scenarios."""
    settings = get_settings()

    try:
        base = inputs.loan.to_parameters()
        if inputs.overrides is None:
            overrides = scenarios.standard_overrides(
                base,
                rate_delta=settings.comparison_rate_delta,
                term_delta_years=settings.comparison_term_delta_years,
                min_rate=settings.comparison_min_rate,
                min_term_years=settings.comparison_min_term_years,
                max_term_years=settings.comparison_max_term_years,
            )
        else:
            overrides = [override.to_override() for override in inputs.overrides]

        results = scenarios.compare_scenarios(
            base,
            overrides,
            max_workers=settings.scenario_workers,
            extra_payment_in_interest_only=settings.extra_payment_in_interest_only,
        )
    except InvalidParameterError as e:
        raise _bad_request(e)

    return {"scenarios": [asdict(result) for result in results]}


@router.post("/mortgage/extra-payments")
async def calculate_extra_payments(inputs: ExtraPaymentInput):
    """Compare paying nothing extra against each extra-payment tier."""
    settings = get_settings()

    try:
        impacts = scenarios.extra_payment_tiers(
            inputs.loan.to_parameters(),
            tiers=inputs.tiers if inputs.tiers is not None else settings.extra_payment_tiers,
            date_of_birth=inputs.date_of_birth,
            max_workers=settings.scenario_workers,
        )
    except InvalidParameterError as e:
        raise _bad_request(e)

    return {"tiers": [asdict(impact) for impact in impacts]}


@router.post("/mortgage/sensitivity")
async def calculate_sensitivity(inputs: SensitivityInput):
    """Payment and interest across rate and term adjustments."""
    settings = get_settings()

    try:
        grid = scenarios.sensitivity_grid(
            inputs.loan.to_parameters(),
            rate_deltas=(
                inputs.rate_deltas
                if inputs.rate_deltas is not None
                else scenarios.DEFAULT_RATE_DELTAS
            ),
            term_deltas_years=(
                inputs.term_deltas_years
                if inputs.term_deltas_years is not None
                else scenarios.DEFAULT_TERM_DELTAS_YEARS
            ),
            max_workers=settings.scenario_workers,
            extra_payment_in_interest_only=settings.extra_payment_in_interest_only,
        )
    except InvalidParameterError as e:
        raise _bad_request(e)

    return {"grid": [[asdict(cell) for cell in row] for row in grid]}


@router.post("/investment")
async def calculate_investment(inputs: InvestmentInput):
    """Project investment growth with monthly compounding."""
    settings = get_settings()
    model = inputs.model or settings.default_attribution_model

    try:
        result = growth.simulate_growth(inputs.to_parameters(), model)
    except InvalidParameterError as e:
        raise _bad_request(e)

    return _growth_payload(result)


@router.post("/investment/risk-levels")
async def calculate_risk_levels(inputs: RiskLevelInput):
    """Project the investment under each named return assumption."""
    settings = get_settings()
    model = inputs.investment.model or settings.default_attribution_model

    try:
        results = scenarios.growth_rate_tiers(
            inputs.investment.to_parameters(),
            tiers=inputs.tiers if inputs.tiers is not None else settings.risk_level_rates,
            model=model,
            max_workers=settings.scenario_workers,
        )
    except InvalidParameterError as e:
        raise _bad_request(e)

    return {
        "scenarios": [
            {
                "label": scenario.label,
                "annual_rate": scenario.annual_rate,
                "result": _growth_payload(scenario.result),
            }
            for scenario in results
        ]
    }
