"""Data models for the EMI calculator.

This module defines dataclasses representing the entities passed between the
engine and its callers: the loan terms, individual schedule entries, the
summary derived from a completed schedule and the comparison between a
baseline plan and one with an extra payment. Monetary values are ``Decimal``
throughout so that the engine never mixes float rounding into its results.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class LoanTerms:
    """Inputs of a single calculation.

    Attributes
    ----------
    principal: Decimal
        The financed amount.
    annual_rate: Decimal
        Nominal annual interest rate in percent (``8.5`` means 8.5 %).
    term_months: int
        The planned tenure in months.
    """

    principal: Decimal
    annual_rate: Decimal
    term_months: int


@dataclass(frozen=True)
class PeriodEntry:
    """One simulated month of the amortization schedule.

    ``payment`` is the nominal installment except for the final month, where it
    is reduced to exactly clear the remaining balance.
    """

    month: int
    starting_balance: Decimal
    payment: Decimal
    interest: Decimal
    principal: Decimal
    ending_balance: Decimal
    cumulative_interest: Decimal
    cumulative_principal: Decimal


@dataclass(frozen=True)
class LoanSummary:
    """Aggregate metrics of a completed schedule."""

    initial_payment: Decimal
    total_interest: Decimal
    total_payment: Decimal
    actual_term_months: int

    @classmethod
    def empty(cls) -> "LoanSummary":
        """Zero-valued summary returned for degenerate inputs."""
        return cls(
            initial_payment=Decimal("0"),
            total_interest=Decimal("0"),
            total_payment=Decimal("0"),
            actual_term_months=0,
        )


@dataclass
class ComparisonResult:
    """Baseline vs. extra payment plan.

    ``alternative`` is ``None`` whenever either side could not be computed, in
    which case both savings figures are zero.
    """

    baseline: Optional[LoanSummary]
    alternative: Optional[LoanSummary]
    interest_saved: Decimal
    term_reduced_months: int


@dataclass
class ComparisonRow:
    """A single month of the merged regular/extra payment timeline.

    These rows back the chart data and the CSV export. Months past the end of
    one schedule repeat that schedule's last entry.
    """

    month: int
    regular_balance: Decimal
    regular_cumulative_interest: Decimal
    regular_cumulative_principal: Decimal
    regular_payment: Decimal
    extra_balance: Decimal
    extra_cumulative_interest: Decimal
    extra_cumulative_principal: Decimal
    extra_payment: Decimal
    cumulative_interest_saved: Decimal


class InvalidLoanInput(ValueError):
    """Raised for loan inputs that cannot describe an amortizing loan.

    The EMI formula raises it for a non-positive principal or term, and the
    boundary validation in :mod:`emi_calc.utils` raises it for out-of-range
    user input.
    """
