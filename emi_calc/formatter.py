"""Output helpers for the EMI calculator.

This module renders schedules, summaries and comparisons as plain text
tables, formats money and durations for display and converts results into
JSON and CSV friendly structures. Everything here is presentation only; no
figures are computed beyond simple subtraction for side-by-side views.
"""

from __future__ import annotations

import csv
from decimal import Decimal
from typing import Any, Dict, IO, Iterable, List, Optional

from .data_models import ComparisonResult, ComparisonRow, LoanSummary, PeriodEntry

CURRENCY_OPTIONS = {
    'INR': {'label': 'Indian rupee', 'prefix': '₹', 'suffix': ''},
    'USD': {'label': 'US dollar', 'prefix': '$', 'suffix': ''},
    'EUR': {'label': 'Euro', 'prefix': '€', 'suffix': ''},
    'GBP': {'label': 'British pound', 'prefix': '£', 'suffix': ''},
    'JPY': {'label': 'Japanese yen', 'prefix': '¥', 'suffix': ''},
}

CSV_HEADERS = [
    "Month",
    "Regular Remaining Balance",
    "Regular Cumulative Interest",
    "Regular Cumulative Principal",
    "Regular EMI",
    "Extra Payment Remaining Balance",
    "Extra Payment Cumulative Interest",
    "Extra Payment Cumulative Principal",
    "Extra Payment EMI",
    "Cumulative Interest Saved",
]


def normalized_currency(code: Optional[str], default: str = "INR") -> str:
    code = str(code or default).upper()
    return code if code in CURRENCY_OPTIONS else default


def format_currency(value, currency_code: str = "INR") -> str:
    """Format an amount as whole currency units, e.g. ``₹43,391``."""
    meta = CURRENCY_OPTIONS[normalized_currency(currency_code)]
    amount = Decimal(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}{meta['prefix']}{abs(amount):,.0f}{meta['suffix']}"


def format_months(months: int) -> str:
    """Render a month count as ``"N years and M months"``.

    Negative counts are shown as ``N/A``.
    """
    if months < 0:
        return "N/A"
    if months == 0:
        return "0 months"
    years, remaining = divmod(months, 12)
    parts = []
    if years:
        parts.append(f"{years} year{'s' if years > 1 else ''}")
    if remaining:
        parts.append(f"{remaining} month{'s' if remaining > 1 else ''}")
    return " and ".join(parts)


def summary_to_dict(summary: Optional[LoanSummary]) -> Optional[Dict[str, Any]]:
    if summary is None:
        return None
    return {
        "initial_payment": float(summary.initial_payment),
        "total_interest": float(summary.total_interest),
        "total_payment": float(summary.total_payment),
        "actual_term_months": summary.actual_term_months,
    }


def comparison_to_dict(comparison: ComparisonResult) -> Dict[str, Any]:
    return {
        "baseline": summary_to_dict(comparison.baseline),
        "alternative": summary_to_dict(comparison.alternative),
        "interest_saved": float(comparison.interest_saved),
        "term_reduced_months": comparison.term_reduced_months,
    }


def serialize_schedule(schedule: Iterable[PeriodEntry]) -> List[Dict[str, Any]]:
    """Convert schedule entries into JSON-serialisable dictionaries."""
    serialized = []
    for entry in schedule:
        serialized.append(
            {
                "month": entry.month,
                "starting_balance": float(entry.starting_balance),
                "payment": float(entry.payment),
                "interest": float(entry.interest),
                "principal": float(entry.principal),
                "ending_balance": float(entry.ending_balance),
                "cumulative_interest": float(entry.cumulative_interest),
                "cumulative_principal": float(entry.cumulative_principal),
            }
        )
    return serialized


def write_comparison_csv(stream: IO[str], rows: Iterable[ComparisonRow]) -> None:
    """Write merged comparison rows as CSV, numbers with two decimals."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for row in rows:
        values = [
            row.regular_balance,
            row.regular_cumulative_interest,
            row.regular_cumulative_principal,
            row.regular_payment,
            row.extra_balance,
            row.extra_cumulative_interest,
            row.extra_cumulative_principal,
            row.extra_payment,
            row.cumulative_interest_saved,
        ]
        writer.writerow([row.month] + [f"{v:.2f}" for v in values])


def print_summary(title: str, summary: Optional[LoanSummary], currency_code: str = "INR") -> None:
    """Print a summary of loan metrics in a human-readable format."""
    print(title)
    print("-" * 72)
    if summary is None:
        print("No schedule could be computed for these inputs.")
        print("-" * 72)
        return
    print(f"Initial EMI        : {format_currency(summary.initial_payment, currency_code)}")
    print(f"Total interest     : {format_currency(summary.total_interest, currency_code)}")
    print(f"Total payment      : {format_currency(summary.total_payment, currency_code)}")
    print(f"Actual tenure      : {format_months(summary.actual_term_months)}")
    print("-" * 72)


def print_savings(comparison: ComparisonResult, currency_code: str = "INR") -> None:
    if comparison.alternative is None:
        return
    print(f"Interest saved     : {format_currency(comparison.interest_saved, currency_code)}")
    print(f"Tenure reduced by  : {format_months(comparison.term_reduced_months)}")
    print("-" * 72)


def print_schedule(schedule: Iterable[PeriodEntry]) -> None:
    """Print the amortization schedule as a simple table."""
    headers = [
        "Month",
        "StartBal",
        "Payment",
        "Principal",
        "Interest",
        "EndBal",
        "CumInterest",
    ]
    print("\t".join(headers))
    for entry in schedule:
        row = [
            str(entry.month),
            f"{entry.starting_balance:.2f}",
            f"{entry.payment:.2f}",
            f"{entry.principal:.2f}",
            f"{entry.interest:.2f}",
            f"{entry.ending_balance:.2f}",
            f"{entry.cumulative_interest:.2f}",
        ]
        print("\t".join(row))


def print_comparison(s1: LoanSummary, s2: LoanSummary) -> None:
    """Print a comparison of two loan summaries side by side.

    The difference column is scenario2 - scenario1. A negative difference
    means the second scenario is cheaper or shorter.
    """
    print("Comparison")
    print("=" * 72)
    print(f"{'Metric':20s} {'Scenario1':>15s} {'Scenario2':>15s} {'Difference':>15s}")
    for key in ("initial_payment", "total_interest", "total_payment", "actual_term_months"):
        v1 = getattr(s1, key)
        v2 = getattr(s2, key)
        diff = v2 - v1
        print(f"{key:20s} {v1:15.2f} {v2:15.2f} {diff:15.2f}")
    print("=" * 72)
