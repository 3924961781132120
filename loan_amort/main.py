"""Command-line interface for the amortization calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute full amortization schedules, view summaries or
compare repayment policies for the same loan. Results can be printed to the
terminal or exported to JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

import click

from .data_models import (
    DEFAULT_POLICY,
    DEFAULT_PRINCIPAL,
    DEFAULT_RATE,
    DEFAULT_TERM_MONTHS,
    LoanParameters,
    LoanSummary,
    RepaymentPolicy,
)
from .engine import calculate, validate_loan_parameters
from .formatter import print_comparison, print_schedule, print_summary, search_schedule
from .utils import TERM_UNITS, parse_amount, parse_policy, term_to_months

logger = logging.getLogger(__name__)

POLICY_CHOICES = [policy.value for policy in RepaymentPolicy]
MAX_PRINTED_ROWS = 120


def build_params_from_options(
    principal: str,
    rate: float,
    term: int,
    term_unit: str = "months",
    policy: str = DEFAULT_POLICY.value,
) -> LoanParameters:
    """Turn raw option values into validated ``LoanParameters``.

    Raises ``click.BadParameter`` for anything the user has to fix.
    """
    try:
        principal_value = parse_amount(principal)
        term_months = term_to_months(term, term_unit)
        policy_value = parse_policy(policy)
        validate_loan_parameters(principal_value, rate, term_months)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc
    return LoanParameters(
        principal=principal_value,
        annual_rate_percent=rate,
        term_months=term_months,
        policy=policy_value,
    )


def export_to_json(path: Path, result: LoanSummary, params: Optional[LoanParameters] = None) -> None:
    """Export summary and schedule to a JSON file."""
    data = result.to_dict()
    if params is not None:
        data["loan"] = {
            "principal": params.principal,
            "annual_rate_percent": params.annual_rate_percent,
            "term_months": params.term_months,
            "policy": params.policy.value,
        }
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, result: LoanSummary) -> None:
    """Export schedule to a CSV file."""
    header = ["Period", "Payment", "Principal", "Interest", "Remaining_Balance"]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for e in result.payment_schedule:
            writer.writerow([e.period, e.payment, e.principal, e.interest, e.remaining_balance])


def loan_options(func):
    """Attach the options shared by every loan command."""
    options = [
        click.option(
            "--principal", "-p", "principal", default=str(int(DEFAULT_PRINCIPAL)), show_default=True,
            help="Loan amount (accepts 300k, 1.5m, 300,000)",
        ),
        click.option(
            "--rate", "-r", "rate", type=float, default=DEFAULT_RATE, show_default=True,
            help="Annual interest rate (percent)",
        ),
        click.option(
            "--term", "-t", "term", type=int, default=DEFAULT_TERM_MONTHS, show_default=True,
            help="Loan term, in --term-unit",
        ),
        click.option(
            "--term-unit", "term_unit", type=click.Choice(TERM_UNITS), default="months", show_default=True,
            help="Unit of --term",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """A command-line loan amortization calculator."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@loan_options
@click.option("--policy", "policy", type=click.Choice(POLICY_CHOICES), default=DEFAULT_POLICY.value, show_default=True, help="Repayment policy")
@click.option("--compact", is_flag=True, help="Abbreviate large amounts (K/M)")
@click.option("--search", "search", help="Only show periods whose number contains this text")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def schedule(
    principal: str,
    rate: float,
    term: int,
    term_unit: str,
    policy: str,
    compact: bool,
    search: Optional[str],
    output: Optional[str],
) -> None:
    """Compute and print the full amortization schedule."""
    params = build_params_from_options(principal, rate, term, term_unit, policy)
    result = calculate(params)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, result, params)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, result)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        logger.info("Exported %s periods to %s", len(result.payment_schedule), path)
        click.echo(f"Schedule exported to {path}")
        return

    print_summary(result, params.policy, compact)
    rows = search_schedule(result.payment_schedule, search)
    if not rows:
        click.echo(f"No periods match '{search}'.")
        return
    # Limit schedule length printed to avoid flooding the terminal
    if len(rows) > MAX_PRINTED_ROWS:
        click.echo(f"Schedule has {len(rows)} rows; showing first {MAX_PRINTED_ROWS} rows.")
        rows = rows[:MAX_PRINTED_ROWS]
    print_schedule(rows, compact)


@cli.command()
@loan_options
@click.option("--policy", "policy", type=click.Choice(POLICY_CHOICES), default=DEFAULT_POLICY.value, show_default=True, help="Repayment policy")
@click.option("--compact", is_flag=True, help="Abbreviate large amounts (K/M)")
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(
    principal: str,
    rate: float,
    term: int,
    term_unit: str,
    policy: str,
    compact: bool,
    output: Optional[str],
) -> None:
    """Compute and print only the summary totals for a loan."""
    params = build_params_from_options(principal, rate, term, term_unit, policy)
    result = calculate(params)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"summary": result.totals()}, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(result, params.policy, compact)


@cli.command()
@loan_options
@click.option(
    "--policy", "policies", type=click.Choice(POLICY_CHOICES), multiple=True,
    help="Policy to include; repeat for several (default: all three)",
)
def compare(principal: str, rate: float, term: int, term_unit: str, policies: Tuple[str, ...]) -> None:
    """Compare repayment policies for the same loan.

    Example:

        loan-amort compare -p 500k -r 6 -t 30 --term-unit years
    """
    selected = policies or tuple(POLICY_CHOICES)
    results: Dict[RepaymentPolicy, LoanSummary] = {}
    for policy in selected:
        params = build_params_from_options(principal, rate, term, term_unit, policy)
        results[params.policy] = calculate(params)
    print_comparison(results)


if __name__ == "__main__":
    cli()
