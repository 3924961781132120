"""Core calculation engine for the amortization calculator.

This module builds amortization schedules for three repayment policies:

* fixed principal: the principal portion is constant and interest is charged
  on the remaining balance, so payments decline over time;
* even distribution: the classic annuity loan with a constant payment;
* fixed interest: interest is computed once on the original principal and
  spread evenly, giving a constant payment with constant portions.

Results are returned as a ``LoanSummary`` holding the totals and one
``PaymentDetail`` per month. The engine is a pure function of its inputs and
keeps no state between calls.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Dict, List, Union

from .data_models import LoanParameters, LoanSummary, PaymentDetail, RepaymentPolicy

logger = logging.getLogger(__name__)

# Relative size of the rounding residue tolerated on the final balance.
BALANCE_TOLERANCE = 1e-9


class InvalidLoanParameters(ValueError):
    """Raised when loan inputs fall outside what the engine accepts."""


def validate_loan_parameters(principal: float, annual_rate_percent: float, term_months: int) -> None:
    """Reject inputs the schedule cannot be built from.

    Raises
    ------
    InvalidLoanParameters
        With a message suitable for showing to the user.
    """
    if not (principal > 0 and math.isfinite(principal)):
        raise InvalidLoanParameters("Loan amount must be positive")
    if not (annual_rate_percent >= 0 and math.isfinite(annual_rate_percent)):
        raise InvalidLoanParameters("Interest rate must not be negative")
    if not (term_months > 0 and math.isfinite(term_months)) or int(term_months) != term_months:
        raise InvalidLoanParameters("Loan term must be positive")


def _coerce_policy(policy: Union[RepaymentPolicy, str]) -> RepaymentPolicy:
    try:
        return RepaymentPolicy(policy)
    except ValueError as exc:
        raise InvalidLoanParameters(f"Unknown repayment policy: {policy}") from exc


def _calculate_annuity_payment(principal: float, rate_per_month: float, term: int) -> float:
    """Return the annuity (equal installment) monthly payment for a loan.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``.

    It is evaluated as ``P * i / (1 - (1 + i)^-n)`` through ``log1p`` and
    ``expm1``, which stays finite for rates too small to change ``1 + i``
    and for rates whose ``(1 + i)^n`` would overflow.
    """
    if rate_per_month == 0:
        return principal / term
    discount = -math.expm1(-term * math.log1p(rate_per_month))
    return principal * rate_per_month / discount


def _settle_final_balance(remaining_balance: float, principal: float) -> float:
    """Return the last period's balance with subtraction drift removed.

    Policies that repay ``principal / term`` every month end at zero up to
    rounding. Only a residue within that rounding is cleared; anything larger
    is returned untouched.
    """
    if abs(remaining_balance) <= BALANCE_TOLERANCE * max(principal, 1.0):
        return 0.0
    return remaining_balance


def _fixed_principal_schedule(principal: float, rate_per_month: float, term: int) -> LoanSummary:
    fixed_principal = principal / term
    remaining_balance = principal
    total_payment = 0.0
    total_interest = 0.0
    schedule: List[PaymentDetail] = []

    for month in range(1, term + 1):
        interest_payment = remaining_balance * rate_per_month
        payment = fixed_principal + interest_payment

        total_payment += payment
        total_interest += interest_payment

        remaining_balance -= fixed_principal
        if month == term:
            remaining_balance = _settle_final_balance(remaining_balance, principal)

        schedule.append(
            PaymentDetail(
                period=month,
                payment=payment,
                principal=fixed_principal,
                interest=interest_payment,
                remaining_balance=remaining_balance,
            )
        )

    return LoanSummary(
        total_payment=total_payment,
        total_interest=total_interest,
        monthly_payment=schedule[0].payment,
        payment_schedule=schedule,
    )


def _even_distribution_schedule(principal: float, rate_per_month: float, term: int) -> LoanSummary:
    monthly_payment = _calculate_annuity_payment(principal, rate_per_month, term)
    remaining_balance = principal
    total_payment = 0.0
    total_interest = 0.0
    schedule: List[PaymentDetail] = []

    for month in range(1, term + 1):
        interest_payment = remaining_balance * rate_per_month
        principal_payment = monthly_payment - interest_payment

        total_payment += monthly_payment
        total_interest += interest_payment

        remaining_balance -= principal_payment
        # Clear the floating point residue left after the last payment.
        if month == term:
            remaining_balance = 0.0

        schedule.append(
            PaymentDetail(
                period=month,
                payment=monthly_payment,
                principal=principal_payment,
                interest=interest_payment,
                remaining_balance=remaining_balance,
            )
        )

    return LoanSummary(
        total_payment=total_payment,
        total_interest=total_interest,
        monthly_payment=monthly_payment,
        payment_schedule=schedule,
    )


def _fixed_interest_schedule(principal: float, rate_per_month: float, term: int) -> LoanSummary:
    total_interest_amount = principal * rate_per_month * term
    fixed_interest_payment = total_interest_amount / term
    principal_payment = principal / term
    payment = principal_payment + fixed_interest_payment

    remaining_balance = principal
    total_payment = 0.0
    total_interest = 0.0
    schedule: List[PaymentDetail] = []

    for month in range(1, term + 1):
        total_payment += payment
        total_interest += fixed_interest_payment

        remaining_balance -= principal_payment
        if month == term:
            remaining_balance = _settle_final_balance(remaining_balance, principal)

        schedule.append(
            PaymentDetail(
                period=month,
                payment=payment,
                principal=principal_payment,
                interest=fixed_interest_payment,
                remaining_balance=remaining_balance,
            )
        )

    return LoanSummary(
        total_payment=total_payment,
        total_interest=total_interest,
        monthly_payment=payment,
        payment_schedule=schedule,
    )


_SCHEDULE_BUILDERS: Dict[RepaymentPolicy, Callable[[float, float, int], LoanSummary]] = {
    RepaymentPolicy.FIXED_PRINCIPAL: _fixed_principal_schedule,
    RepaymentPolicy.EVEN_DISTRIBUTION: _even_distribution_schedule,
    RepaymentPolicy.FIXED_INTEREST: _fixed_interest_schedule,
}


def calculate_loan(
    principal: float,
    annual_rate_percent: float,
    term_months: int,
    policy: Union[RepaymentPolicy, str],
) -> LoanSummary:
    """Compute the amortization schedule and totals for a loan.

    Parameters
    ----------
    principal: float
        The amount borrowed. Must be positive.
    annual_rate_percent: float
        Nominal annual interest rate in percent. Must not be negative. It is
        converted to a monthly rate by dividing by 100 and by 12.
    term_months: int
        Number of monthly payments. Must be positive.
    policy: RepaymentPolicy or str
        The repayment policy, either a member or its string value.

    Returns
    -------
    LoanSummary
        Totals accumulated period by period and a schedule with exactly
        ``term_months`` entries numbered from 1.

    Raises
    ------
    InvalidLoanParameters
        If any input is out of range or the policy is unknown.
    """
    validate_loan_parameters(principal, annual_rate_percent, term_months)
    policy = _coerce_policy(policy)
    term = int(term_months)

    rate_per_month = annual_rate_percent / 100 / 12
    logger.debug(
        "Calculating %s schedule: principal=%s rate=%s%% term=%s",
        policy.value,
        principal,
        annual_rate_percent,
        term,
    )
    return _SCHEDULE_BUILDERS[policy](float(principal), rate_per_month, term)


def calculate(params: LoanParameters) -> LoanSummary:
    """Compute the summary for a ``LoanParameters`` instance."""
    return calculate_loan(
        params.principal,
        params.annual_rate_percent,
        params.term_months,
        params.policy,
    )
