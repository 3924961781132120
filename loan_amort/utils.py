"""Utility functions for the amortization calculator.

This module provides helpers for turning user input into the values the
engine expects: loan amounts written with separators or ``k``/``m``
suffixes, terms given in years or months, and repayment policy names in
several spellings.
"""

from __future__ import annotations

from .data_models import RepaymentPolicy

TERM_UNITS = ("months", "years")


def parse_amount(value: str) -> float:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("500000"), numbers with thousands separators
    ("300,000,000") and shorthand with ``k``/``m`` suffixes (e.g. "500k"
    meaning 500_000).

    Raises
    ------
    ValueError
        If the string is not a number.
    """
    cleaned = str(value).strip().lower().replace(",", "").replace("_", "")
    factor = 1.0
    if cleaned.endswith("k"):
        factor = 1_000.0
        cleaned = cleaned[:-1]
    elif cleaned.endswith("m"):
        factor = 1_000_000.0
        cleaned = cleaned[:-1]
    try:
        return float(cleaned) * factor
    except ValueError as exc:
        raise ValueError(f"Invalid amount: {value}") from exc


def term_to_months(value: float, unit: str = "months") -> float:
    """Convert a loan term in ``unit`` into a number of months.

    The value is not rounded; whether it is a whole number of months is left
    to the engine's validation.
    """
    unit = unit.lower()
    if unit not in TERM_UNITS:
        raise ValueError(f"Term unit must be 'months' or 'years'; got {unit}")
    if unit == "years":
        return value * 12
    return value


def parse_policy(value: str) -> RepaymentPolicy:
    """Parse a repayment policy name.

    The canonical value (``evenDistribution``), the member name
    (``EVEN_DISTRIBUTION``) and kebab or snake case spellings
    (``even-distribution``) are all accepted, case-insensitively.
    """
    key = str(value).strip().replace("-", "").replace("_", "").lower()
    for policy in RepaymentPolicy:
        if key == policy.value.lower() or key == policy.name.replace("_", "").lower():
            return policy
    raise ValueError(f"Unknown repayment policy: {value}")
