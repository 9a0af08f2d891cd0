"""
Calculation Value Objects

Frozen parameter and result types shared by the calculation modules.
Every object here is created fresh by a calculation call and never mutated.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import List, Optional


class PaymentType(str, Enum):
    """How the regular mortgage payment is structured."""

    REPAYMENT = "repayment"
    INTEREST_ONLY = "interest-only"


class ContributionFrequency(str, Enum):
    """How often a periodic investment contribution is deposited."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"


class AttributionModel(str, Enum):
    """
    How investment interest is split between the lump sum and contributions.

    SEGREGATED compounds the two as independent balances.
    PROPORTIONAL compounds one combined balance and splits each month's
    interest by the share each bucket held before that interest was applied.
    """

    SEGREGATED = "segregated"
    PROPORTIONAL = "proportional"


@dataclass(frozen=True)
class VariableRate:
    """Rate that applies once the fixed-rate window ends."""

    enabled: bool
    annual_rate: float  # Annual rate in percent (e.g., 8.0 for 8%)
    fixed_period_end_date: date


@dataclass(frozen=True)
class LoanParameters:
    """Inputs for a single mortgage calculation."""

    principal: float
    annual_rate: float  # Annual fixed rate in percent (e.g., 2.79 for 2.79%)
    term_months: int
    start_date: date
    payment_type: PaymentType = PaymentType.REPAYMENT
    extra_monthly_payment: float = 0.0
    property_value: Optional[float] = None
    variable_rate: Optional[VariableRate] = None

    @classmethod
    def from_years(cls, term_years: int, **kwargs) -> "LoanParameters":
        """Build parameters from a term expressed in whole years."""
        return cls(term_months=term_years * 12, **kwargs)

    @property
    def variable_enabled(self) -> bool:
        return self.variable_rate is not None and self.variable_rate.enabled

    @property
    def effective_property_value(self) -> float:
        if self.property_value is None:
            return self.principal
        return self.property_value

    @property
    def loan_to_value(self) -> float:
        """Loan-to-value ratio in percent."""
        return self.principal / self.effective_property_value * 100

    @property
    def deposit(self) -> float:
        return self.effective_property_value - self.principal


@dataclass(frozen=True)
class AmortizationEntry:
    """One month of an amortization schedule."""

    month: int
    scheduled_payment: float  # Level payment for the rate regime, excluding extra
    payment: float  # Payment actually applied (principal + interest)
    principal: float
    interest: float
    balance: float  # Ending balance
    annual_rate: float  # Effective annual rate in percent
    date: date


@dataclass(frozen=True)
class YearlyAmortizationSummary:
    """Twelve-month rollup of an amortization schedule."""

    year: int
    calendar_year: int
    principal: float
    interest: float
    balance: float


@dataclass(frozen=True)
class RemainingToPay:
    """Principal and interest still owed at the start of a schedule year."""

    year: int
    calendar_year: int
    principal: float
    interest: float

    @property
    def total(self) -> float:
        return self.principal + self.interest


@dataclass(frozen=True)
class LoanSummary:
    """Lifetime totals for a produced schedule."""

    initial_payment: float
    total_interest: float
    total_paid: float
    months: int
    payoff_date: Optional[date]


@dataclass(frozen=True)
class InvestmentParameters:
    """Inputs for a compound-growth projection."""

    initial_amount: float
    contribution: float
    annual_rate: float  # Annual return in percent (e.g., 7.0 for 7%)
    term_years: int
    frequency: ContributionFrequency = ContributionFrequency.MONTHLY


@dataclass(frozen=True)
class YearlyInvestmentSummary:
    """Account position at a year boundary (year 0 is the opening position)."""

    year: int
    invested: float
    value: float
    interest: float
    original_amount: float  # Lump sum plus the interest attributed to it
    original_interest: float
    contributions: float  # Contributions deposited so far
    contribution_interest: float


@dataclass(frozen=True)
class Counterfactual:
    """Lump sum compounded annually with no periodic contributions."""

    final_value: float
    total_interest: float


@dataclass(frozen=True)
class GrowthResult:
    """Outcome of a compound-growth projection."""

    model: AttributionModel
    yearly: List[YearlyInvestmentSummary]
    total_invested: float
    final_value: float
    total_interest: float
    counterfactual: Counterfactual


@dataclass(frozen=True)
class ScenarioOverride:
    """Fields replaced on a base loan for one comparison scenario."""

    label: str
    annual_rate: Optional[float] = None
    term_months: Optional[int] = None
    extra_monthly_payment: Optional[float] = None


@dataclass(frozen=True)
class ScenarioResult:
    """Projection of a loan under one set of overrides."""

    label: str
    annual_rate: float
    term_months: int
    extra_monthly_payment: float
    monthly_payment: float
    total_interest: float
    total_paid: float
    months: int


@dataclass(frozen=True)
class ExtraPaymentImpact:
    """Effect of paying a fixed extra amount every month."""

    label: str
    extra_monthly_payment: float
    total_interest: float
    total_paid: float
    months: int
    interest_saved: float
    months_saved: int
    payoff_date: Optional[date]
    age_at_payoff: Optional[int] = None


@dataclass(frozen=True)
class GrowthScenario:
    """Growth projection under one named rate assumption."""

    label: str
    annual_rate: float
    result: GrowthResult


@dataclass(frozen=True)
class SensitivityCell:
    """One point of a rate/term sensitivity grid."""

    annual_rate: float
    term_months: int
    monthly_payment: float
    total_interest: float
    total_paid: float
