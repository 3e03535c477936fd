"""Command-line interface for the EMI calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute full amortization schedules, view summaries
(optionally against an extra annual payment plan) or compare two loan
scenarios. Results can be printed to the terminal or exported to JSON/CSV
files.
"""

from __future__ import annotations

import json
import logging
import shlex
from pathlib import Path
from typing import Any, Dict, List, Optional

import click

from .comparison import ExtraPaymentScenario, build_comparison_rows, run_extra_payment_comparison
from .data_models import LoanSummary, LoanTerms, PeriodEntry
from .formatter import (
    comparison_to_dict,
    print_comparison,
    print_savings,
    print_schedule,
    print_summary,
    serialize_schedule,
    summary_to_dict,
    write_comparison_csv,
)
from .utils import (
    DEFAULT_ANNUAL_RATE,
    DEFAULT_CURRENCY,
    DEFAULT_TENURE_YEARS,
    MIN_PRINCIPAL,
    build_loan_terms,
    parse_amount,
    validate_extra_payment,
    validate_loan_terms,
)

logger = logging.getLogger(__name__)

MAX_PRINTED_ROWS = 120


def build_terms_from_options(
    principal: str,
    rate: float,
    years: Optional[float],
    term: Optional[int],
    min_principal: str = str(MIN_PRINCIPAL),
) -> LoanTerms:
    """Parse and validate loan options, reporting problems as ``click.BadParameter``."""
    try:
        terms = build_loan_terms(principal, rate, tenure_years=years, term_months=term)
        return validate_loan_terms(terms, min_principal=parse_amount(min_principal))
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def parse_extra(extra_per_year: Optional[str]):
    if not extra_per_year:
        return validate_extra_payment(0)
    try:
        return validate_extra_payment(parse_amount(extra_per_year))
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def export_to_json(path: Path, scenario: ExtraPaymentScenario) -> None:
    """Export summaries, comparison and both schedules to a JSON file."""
    data = {
        "comparison": comparison_to_dict(scenario.comparison),
        "regular_schedule": serialize_schedule(scenario.regular_schedule),
        "extra_payment_schedule": serialize_schedule(scenario.extra_schedule),
    }
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, regular: List[PeriodEntry], extra: List[PeriodEntry]) -> None:
    """Export the merged month-by-month comparison to a CSV file."""
    with path.open("w", newline="", encoding="utf-8") as f:
        write_comparison_csv(f, build_comparison_rows(regular, extra))


def loan_options(func):
    """Options shared by the ``schedule`` and ``summary`` commands."""
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Loan amount (accepts k, m, l, cr suffixes)"),
        click.option("--rate", "-r", "rate", type=float, default=float(DEFAULT_ANNUAL_RATE), show_default=True, help="Annual interest rate (percent)"),
        click.option("--years", "-y", "years", type=float, default=None, help=f"Loan tenure in years [default: {DEFAULT_TENURE_YEARS}]"),
        click.option("--term", "-t", "term", type=int, default=None, help="Loan tenure in months (overrides --years)"),
        click.option("--extra-per-year", "-e", "extra_per_year", default=None, help="Extra amount paid per year, spread evenly over each month"),
        click.option("--currency", "currency", default=DEFAULT_CURRENCY, envvar="EMI_CALC_DEFAULT_CURRENCY", show_default=True, help="Currency code used for display"),
        click.option("--min-principal", "min_principal", default=str(MIN_PRINCIPAL), envvar="EMI_CALC_MIN_PRINCIPAL", show_default=True, help="Smallest accepted loan amount"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _run(principal, rate, years, term, extra_per_year, min_principal) -> ExtraPaymentScenario:
    terms = build_terms_from_options(principal, rate, years, term, min_principal)
    extra = parse_extra(extra_per_year)
    logger.debug("Running calculation for %s with extra %s per year", terms, extra)
    return run_extra_payment_comparison(terms, extra)


def _print_scenario_summaries(scenario: ExtraPaymentScenario, currency: str) -> None:
    print_summary("Regular EMI", scenario.regular_summary, currency)
    if scenario.extra_per_year > 0:
        print_summary("With extra payment", scenario.extra_summary, currency)
        print_savings(scenario.comparison, currency)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """A command-line EMI calculator with extra payment comparison."""
    # Without --verbose, warnings still reach stderr through logging's last-resort handler.
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def schedule(
    principal: str,
    rate: float,
    years: Optional[float],
    term: Optional[int],
    extra_per_year: Optional[str],
    currency: str,
    min_principal: str,
    output: Optional[str],
) -> None:
    """Compute and print the full amortization schedule."""
    scenario = _run(principal, rate, years, term, extra_per_year, min_principal)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, scenario)
            click.echo(f"Schedule exported to {path}")
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, scenario.regular_schedule, scenario.extra_schedule)
            click.echo(f"Schedule exported to {path}")
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        return

    _print_scenario_summaries(scenario, currency)
    entries = scenario.extra_schedule if scenario.extra_schedule else scenario.regular_schedule
    # Limit schedule length printed to avoid flooding the terminal
    if len(entries) > MAX_PRINTED_ROWS:
        click.echo(f"Schedule has {len(entries)} rows; showing first {MAX_PRINTED_ROWS} rows.")
        print_schedule(entries[:MAX_PRINTED_ROWS])
    else:
        print_schedule(entries)


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(
    principal: str,
    rate: float,
    years: Optional[float],
    term: Optional[int],
    extra_per_year: Optional[str],
    currency: str,
    min_principal: str,
    output: Optional[str],
) -> None:
    """Compute and print only the summary metrics for a loan."""
    scenario = _run(principal, rate, years, term, extra_per_year, min_principal)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"comparison": comparison_to_dict(scenario.comparison)}, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        _print_scenario_summaries(scenario, currency)


def parse_scenario_opts(opts: str) -> Dict[str, Any]:
    """Turn a quoted option string such as ``"-p 50l -r 8.5 -y 20"`` into keyword arguments."""
    tokens = shlex.split(opts)
    params: Dict[str, Any] = {
        "principal": None,
        "rate": float(DEFAULT_ANNUAL_RATE),
        "years": None,
        "term": None,
        "extra_per_year": None,
    }
    flags = {
        "-p": ("principal", str),
        "--principal": ("principal", str),
        "-r": ("rate", float),
        "--rate": ("rate", float),
        "-y": ("years", float),
        "--years": ("years", float),
        "-t": ("term", int),
        "--term": ("term", int),
        "-e": ("extra_per_year", str),
        "--extra-per-year": ("extra_per_year", str),
    }
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token not in flags:
            raise click.BadParameter(f"Unknown option in scenario: {token}")
        if i + 1 >= len(tokens):
            raise click.BadParameter(f"Missing value for {token}")
        name, convert = flags[token]
        try:
            params[name] = convert(tokens[i + 1])
        except ValueError:
            raise click.BadParameter(f"Invalid value for {token}: {tokens[i + 1]}")
        i += 2
    if params["principal"] is None:
        raise click.BadParameter("Scenario missing required option principal")
    return params


def _effective_summary(scenario: ExtraPaymentScenario) -> LoanSummary:
    summary_ = scenario.extra_summary if scenario.extra_per_year > 0 else scenario.regular_summary
    if summary_ is None:
        raise click.BadParameter("Scenario does not produce a repayment schedule")
    return summary_


@cli.command()
@click.option("--scenario1", "scenario1", required=True, help="First scenario options quoted string")
@click.option("--scenario2", "scenario2", required=True, help="Second scenario options quoted string")
@click.option("--min-principal", "min_principal", default=str(MIN_PRINCIPAL), envvar="EMI_CALC_MIN_PRINCIPAL")
def compare(scenario1: str, scenario2: str, min_principal: str) -> None:
    """Compare two loan scenarios.

    Scenarios are provided as quoted option strings, for example:

        emi-calc compare --scenario1 "-p 50l -r 8.5 -y 20" --scenario2 "-p 50l -r 8.5 -y 20 -e 12k"
    """
    first = _run(min_principal=min_principal, **parse_scenario_opts(scenario1))
    second = _run(min_principal=min_principal, **parse_scenario_opts(scenario2))
    print_comparison(_effective_summary(first), _effective_summary(second))


if __name__ == "__main__":
    cli()
