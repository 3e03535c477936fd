"""Baseline vs. extra payment comparison.

The extra payment plan spreads a fixed annual amount evenly over the year
and adds it to every installment, so it is simulated as an ordinary schedule
with a larger override payment. The savings are then read off the two
summaries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from .data_models import ComparisonResult, ComparisonRow, LoanSummary, LoanTerms, PeriodEntry
from .engine import compute_emi, compute_schedule, monthly_rate
from .utils import to_decimal

ZERO = Decimal("0")


@dataclass
class ExtraPaymentScenario:
    """Everything the host layer shows for one set of inputs."""

    terms: LoanTerms
    extra_per_year: Decimal
    regular_schedule: List[PeriodEntry]
    extra_schedule: List[PeriodEntry] = field(default_factory=list)
    comparison: Optional[ComparisonResult] = None

    @property
    def regular_summary(self) -> Optional[LoanSummary]:
        return self.comparison.baseline if self.comparison else None

    @property
    def extra_summary(self) -> Optional[LoanSummary]:
        return self.comparison.alternative if self.comparison else None


def compare_summaries(baseline: Optional[LoanSummary], alternative: Optional[LoanSummary]) -> ComparisonResult:
    """Derive interest saved and tenure reduced, both floored at zero.

    If either summary is missing the savings are zero and the alternative is
    reported as missing too.
    """
    if baseline is None or alternative is None:
        return ComparisonResult(
            baseline=baseline,
            alternative=None,
            interest_saved=ZERO,
            term_reduced_months=0,
        )
    interest_saved = baseline.total_interest - alternative.total_interest
    term_reduced = baseline.actual_term_months - alternative.actual_term_months
    return ComparisonResult(
        baseline=baseline,
        alternative=alternative,
        interest_saved=interest_saved if interest_saved > 0 else ZERO,
        term_reduced_months=max(0, term_reduced),
    )


def extra_payment_override(terms: LoanTerms, extra_per_year) -> Decimal:
    """Monthly payment for the extra payment plan: EMI plus one twelfth of the annual extra."""
    emi = compute_emi(terms.principal, monthly_rate(terms.annual_rate), terms.term_months)
    return emi + to_decimal(extra_per_year) / Decimal(12)


def _summary_or_none(schedule: List[PeriodEntry], summary: LoanSummary) -> Optional[LoanSummary]:
    return summary if schedule else None


def run_extra_payment_comparison(terms: LoanTerms, extra_per_year=ZERO) -> ExtraPaymentScenario:
    """Simulate the regular plan and, when ``extra_per_year`` is positive, the extra payment plan.

    The terms are expected to be validated by the caller. A degenerate
    baseline (empty schedule) skips the extra payment plan entirely.
    """
    extra = to_decimal(extra_per_year)
    regular_schedule, regular_summary = compute_schedule(terms)
    baseline = _summary_or_none(regular_schedule, regular_summary)

    extra_schedule: List[PeriodEntry] = []
    alternative = None
    if baseline is not None and extra > 0:
        extra_schedule, extra_summary = compute_schedule(terms, extra_payment_override(terms, extra))
        alternative = _summary_or_none(extra_schedule, extra_summary)

    return ExtraPaymentScenario(
        terms=terms,
        extra_per_year=extra,
        regular_schedule=regular_schedule,
        extra_schedule=extra_schedule,
        comparison=compare_summaries(baseline, alternative),
    )


def _entry_for_month(schedule: List[PeriodEntry], month: int) -> Optional[PeriodEntry]:
    # Entries are dense and 1-based, so months past the end fall back to the last one.
    if not schedule:
        return None
    if month <= len(schedule):
        return schedule[month - 1]
    return schedule[-1]


def build_comparison_rows(regular: List[PeriodEntry], extra: List[PeriodEntry]) -> List[ComparisonRow]:
    """Merge two schedules into one row per month for charts and CSV export.

    The timeline runs to the later of the two final months. A schedule that
    has already finished keeps reporting its last entry, and an empty
    schedule reports zeros.
    """
    last_month = max(
        regular[-1].month if regular else 0,
        extra[-1].month if extra else 0,
    )
    rows: List[ComparisonRow] = []
    for month in range(1, last_month + 1):
        reg = _entry_for_month(regular, month)
        ext = _entry_for_month(extra, month)
        reg_interest = reg.cumulative_interest if reg else ZERO
        ext_interest = ext.cumulative_interest if ext else ZERO
        saved = reg_interest - ext_interest if extra else ZERO
        rows.append(
            ComparisonRow(
                month=month,
                regular_balance=max(ZERO, reg.ending_balance) if reg else ZERO,
                regular_cumulative_interest=reg_interest,
                regular_cumulative_principal=reg.cumulative_principal if reg else ZERO,
                regular_payment=reg.payment if reg else ZERO,
                extra_balance=max(ZERO, ext.ending_balance) if ext else ZERO,
                extra_cumulative_interest=ext_interest,
                extra_cumulative_principal=ext.cumulative_principal if ext else ZERO,
                extra_payment=ext.payment if ext else ZERO,
                cumulative_interest_saved=max(ZERO, saved),
            )
        )
    return rows
