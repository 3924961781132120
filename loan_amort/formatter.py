"""Output helpers for the amortization calculator.

This module renders monetary values for display, prepares the schedule for
charts and tables, and prints summaries and schedules in a tabular text
format for the command line. None of these helpers modify the engine's
results; sampling and filtering always build new lists.
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, List, Optional, Sequence

from .data_models import LoanSummary, PaymentDetail, RepaymentPolicy

# Schedules longer than this are sampled before charting.
CHART_SAMPLE_THRESHOLD = 24

# (scale, suffix, decimals), largest first.
COMPACT_UNITS = (
    (1_000_000_000, "B", 2),
    (1_000_000, "M", 2),
    (1_000, "K", 1),
)


def _trim_decimals(text: str) -> str:
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_currency(value: float, compact: bool = False, prefix: str = "$", suffix: str = "") -> str:
    """Format a monetary value for display.

    The full form uses thousands separators and two decimals
    (``$1,234.56``). With ``compact`` set, values of at least a thousand are
    abbreviated (``$12.5K``, ``$1.25M``, ``$2.5B``). A value that rounds up
    to a thousand of one unit moves to the next one, so ``999,960`` reads
    ``$1M`` rather than ``$1000K``. Smaller values keep the full form.
    """
    sign = "-" if value < 0 else ""
    magnitude = abs(value)
    body = f"{magnitude:,.2f}"
    if compact:
        for index, (scale, unit, digits) in enumerate(COMPACT_UNITS):
            if magnitude < scale:
                continue
            scaled = round(magnitude / scale, digits)
            if scaled >= 1000 and index > 0:
                scale, unit, digits = COMPACT_UNITS[index - 1]
                scaled = round(magnitude / scale, digits)
            body = _trim_decimals(f"{scaled:.{digits}f}") + unit
            break
    return f"{sign}{prefix}{body}{suffix}"


def sample_schedule(schedule: Sequence[PaymentDetail]) -> List[PaymentDetail]:
    """Pick the periods worth plotting from a schedule.

    Short schedules are returned whole. Longer ones keep every month of the
    first year and then one period per year.
    """
    if len(schedule) <= CHART_SAMPLE_THRESHOLD:
        return list(schedule)
    return [entry for index, entry in enumerate(schedule) if index < 12 or index % 12 == 0]


def chart_points(schedule: Sequence[PaymentDetail]) -> List[Dict[str, object]]:
    """Return sampled chart points with month/year labels."""
    points = []
    for entry in sample_schedule(schedule):
        if entry.period <= 12:
            label = f"Month {entry.period}"
        else:
            label = f"Year {math.ceil(entry.period / 12)}"
        points.append(
            {
                "period": label,
                "principal": round(entry.principal, 2),
                "interest": round(entry.interest, 2),
            }
        )
    return points


def search_schedule(schedule: Sequence[PaymentDetail], term: Optional[str]) -> List[PaymentDetail]:
    """Return the entries whose period number contains ``term``.

    A blank term matches every entry.
    """
    needle = (term or "").strip()
    if not needle:
        return list(schedule)
    return [entry for entry in schedule if needle in str(entry.period)]


def print_summary(
    summary: LoanSummary,
    policy: Optional[RepaymentPolicy] = None,
    compact: bool = False,
) -> None:
    """Print the loan totals in a human-readable format."""
    print("Summary")
    print("-" * 72)
    if policy is not None:
        print(f"Repayment policy   : {policy.label}")
    print(f"Monthly payment    : {format_currency(summary.monthly_payment, compact)}")
    print(f"Total payment      : {format_currency(summary.total_payment, compact)}")
    print(f"Total interest     : {format_currency(summary.total_interest, compact)}")
    print(f"Payments           : {len(summary.payment_schedule)}")
    print("-" * 72)


def print_schedule(schedule: Iterable[PaymentDetail], compact: bool = False) -> None:
    """Print the amortization schedule as a simple table."""
    headers = ["Period", "Payment", "Principal", "Interest", "Balance"]
    print("\t".join(headers))
    for entry in schedule:
        row = [
            str(entry.period),
            format_currency(entry.payment, compact),
            format_currency(entry.principal, compact),
            format_currency(entry.interest, compact),
            format_currency(entry.remaining_balance, compact),
        ]
        print("\t".join(row))


def print_comparison(results: Dict[RepaymentPolicy, LoanSummary]) -> None:
    """Print loan totals for several policies side by side.

    The difference column is measured against the first policy; a negative
    value means that policy is cheaper.
    """
    policies = list(results)
    baseline = results[policies[0]]
    print("Comparison")
    print("=" * 72)
    print(f"{'Policy':20s} {'Monthly':>15s} {'Total':>15s} {'Interest':>15s} {'Difference':>15s}")
    for policy in policies:
        result = results[policy]
        diff = result.total_payment - baseline.total_payment
        print(
            f"{policy.label:20s} {result.monthly_payment:15.2f} {result.total_payment:15.2f} "
            f"{result.total_interest:15.2f} {diff:15.2f}"
        )
    print("=" * 72)
