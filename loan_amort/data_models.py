"""Data models for the amortization calculator.

This module defines the repayment policies the engine understands and the
dataclasses it consumes and produces: the loan parameters, one entry per
payment period and the overall loan summary. All monetary values are plain
floats so that consumers can format them however they like.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List


class RepaymentPolicy(str, Enum):
    """The repayment policies supported by the engine.

    The value of each member is the spelling used on the command line, in
    web forms and in exported files.
    """

    FIXED_PRINCIPAL = "fixedPrincipal"
    EVEN_DISTRIBUTION = "evenDistribution"
    FIXED_INTEREST = "fixedInterest"

    @property
    def label(self) -> str:
        return _POLICY_LABELS[self]

    @property
    def description(self) -> str:
        return _POLICY_DESCRIPTIONS[self]


_POLICY_LABELS = {
    RepaymentPolicy.FIXED_PRINCIPAL: "Fixed principal",
    RepaymentPolicy.EVEN_DISTRIBUTION: "Even distribution",
    RepaymentPolicy.FIXED_INTEREST: "Fixed interest",
}

_POLICY_DESCRIPTIONS = {
    RepaymentPolicy.FIXED_PRINCIPAL: (
        "The principal portion is the same every month; interest is charged on "
        "the remaining balance, so payments decline over time."
    ),
    RepaymentPolicy.EVEN_DISTRIBUTION: (
        "Every monthly payment is the same amount; early payments are mostly "
        "interest and later payments mostly principal."
    ),
    RepaymentPolicy.FIXED_INTEREST: (
        "Interest is calculated once on the original amount and spread evenly, "
        "so both the principal and the interest portions stay constant."
    ),
}

# Values the calculator starts from (and returns to on reset).
DEFAULT_PRINCIPAL = 300_000_000.0
DEFAULT_RATE = 5.5
DEFAULT_TERM_MONTHS = 360
DEFAULT_POLICY = RepaymentPolicy.EVEN_DISTRIBUTION


@dataclass(frozen=True)
class LoanParameters:
    """User inputs for a single calculation.

    Attributes
    ----------
    principal: float
        The amount borrowed.
    annual_rate_percent: float
        Nominal annual interest rate in percent (``5.5`` means 5.5 %).
    term_months: int
        Number of monthly payment periods.
    policy: RepaymentPolicy
        How each payment is split between principal and interest.
    """

    principal: float
    annual_rate_percent: float
    term_months: int
    policy: RepaymentPolicy = DEFAULT_POLICY

    @property
    def monthly_rate(self) -> float:
        # nominal annual rate divided evenly, no compounding adjustment
        return self.annual_rate_percent / 100 / 12


@dataclass
class PaymentDetail:
    """One period of the amortization schedule.

    ``remaining_balance`` is the outstanding principal after this period's
    principal portion has been applied.
    """

    period: int
    payment: float
    principal: float
    interest: float
    remaining_balance: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class LoanSummary:
    """Result of a calculation: aggregate totals plus the full schedule.

    ``monthly_payment`` is the first period's payment. For the fixed
    principal policy payments decline, so this is the largest one.
    """

    total_payment: float
    total_interest: float
    monthly_payment: float
    payment_schedule: List[PaymentDetail] = field(default_factory=list)

    def totals(self) -> Dict[str, float]:
        return {
            "total_payment": self.total_payment,
            "total_interest": self.total_interest,
            "monthly_payment": self.monthly_payment,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.totals(),
            "schedule": [entry.to_dict() for entry in self.payment_schedule],
        }
