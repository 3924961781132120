"""Shared fixtures for the amortization tests.

Fixture loan: 12,000 at 12 % over 12 months, so the monthly rate is 1 % and
the straight-line principal portion is 1,000.
"""

import pytest

from loan_amort.data_models import LoanParameters, RepaymentPolicy
from loan_amort.engine import calculate_loan


ALL_POLICIES = list(RepaymentPolicy)


@pytest.fixture
def small_loan() -> LoanParameters:
    return LoanParameters(
        principal=12000.0,
        annual_rate_percent=12.0,
        term_months=12,
        policy=RepaymentPolicy.FIXED_PRINCIPAL,
    )


@pytest.fixture(params=ALL_POLICIES, ids=lambda p: p.value)
def policy(request) -> RepaymentPolicy:
    return request.param


@pytest.fixture
def mortgage():
    """300K at 5.5 % for 30 years, even distribution."""
    return calculate_loan(300000.0, 5.5, 360, RepaymentPolicy.EVEN_DISTRIBUTION)
