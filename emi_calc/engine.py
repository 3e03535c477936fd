"""Core calculation engine for the EMI calculator.

This module implements the financial logic for fixed-rate installment loans:
the equated monthly installment (EMI) formula and a month-by-month simulation
that turns a payment amount into an amortization schedule and summary. The
simulation accepts an override payment so callers can model paying more than
the EMI every month. Results are returned as a list of ``PeriodEntry``
objects along with a ``LoanSummary``.

The engine keeps no state between calls. Degenerate inputs (a zero principal,
a payment that is not a positive finite number) produce an empty schedule
instead of an exception.
"""

from __future__ import annotations

import logging
from decimal import Decimal, Overflow, getcontext, localcontext
from typing import List, Tuple

from .data_models import InvalidLoanInput, LoanSummary, LoanTerms, PeriodEntry
from .utils import to_decimal

getcontext().prec = 28  # increase precision for financial calculations

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

# Hard cap on simulated months (100 years).
MAX_HORIZON_MONTHS = 1200
# Consecutive months a payment may fail to cover interest before the loan is
# judged non-amortizing.
MAX_INSUFFICIENT_MONTHS = 12
# Rounding residue left after a payment is settled in the current period.
RESIDUAL_BALANCE = Decimal("1e-12")


def monthly_rate(annual_rate) -> Decimal:
    """Convert an annual percentage (e.g. ``8.5``) to a monthly decimal rate."""
    return to_decimal(annual_rate) / Decimal(12) / Decimal(100)


def compute_emi(principal, periodic_rate, term_months: int) -> Decimal:
    """Return the equated monthly installment for a loan.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the periodic (monthly) interest
    rate and ``n`` is the number of payments. When the interest rate is zero,
    the payment simplifies to ``P / n``. When ``(1 + i)^n`` overflows, the
    result is a non-finite ``Decimal`` that callers screen with
    ``is_finite()``.

    Raises
    ------
    InvalidLoanInput
        If ``principal`` or ``term_months`` is not positive.
    """
    principal = to_decimal(principal)
    rate = to_decimal(periodic_rate)
    if term_months <= 0:
        raise InvalidLoanInput("Term must be positive")
    if not principal.is_finite() or principal <= 0:
        raise InvalidLoanInput("Principal must be positive")
    if rate == 0:
        return principal / Decimal(term_months)
    with localcontext() as ctx:
        # Extreme rates or terms give an infinite payment instead of raising.
        ctx.traps[Overflow] = False
        factor = (1 + rate) ** term_months
    if not factor.is_finite():
        return factor
    if factor == 1:
        # rate too small to register at this precision
        return principal / Decimal(term_months)
    return principal * (rate * factor) / (factor - 1)


def _resolve_payment(principal: Decimal, rate_per_month: Decimal, term_months: int, override_payment) -> Decimal:
    """Pick the override when it is a usable amount, the EMI otherwise."""
    if override_payment is not None:
        override = to_decimal(override_payment)
        if override.is_finite() and override > 0:
            return override
    return compute_emi(principal, rate_per_month, term_months)


def _floor(value: Decimal) -> Decimal:
    return value if value > 0 else ZERO


def generate_schedule(
    principal,
    annual_rate,
    term_months: int,
    override_payment=None,
) -> Tuple[List[PeriodEntry], LoanSummary]:
    """Simulate the loan month by month.

    Parameters
    ----------
    principal:
        The financed amount.
    annual_rate:
        Annual nominal interest rate in percent.
    term_months: int
        Planned tenure. The simulation runs for at most twice this many
        months, capped at ``MAX_HORIZON_MONTHS``.
    override_payment:
        Fixed monthly payment to use instead of the EMI, typically the EMI
        plus a monthly share of an extra annual payment. Values that are not
        positive finite numbers are ignored.

    Returns
    -------
    schedule: List[PeriodEntry]
        One entry per simulated month. The last entry's payment is reduced
        to exactly clear the balance when the loan is paid off.
    summary: LoanSummary
        Totals for the schedule. ``initial_payment`` is the nominal payment,
        not the adjusted final installment. Empty schedules get
        ``LoanSummary.empty()``.
    """
    principal = to_decimal(principal)
    rate_per_month = monthly_rate(annual_rate)
    term_months = int(term_months)

    if not (principal.is_finite() and rate_per_month.is_finite()):
        return [], LoanSummary.empty()
    if principal <= 0 or term_months <= 0:
        return [], LoanSummary.empty()

    payment = _resolve_payment(principal, rate_per_month, term_months, override_payment)
    if not payment.is_finite() or payment <= 0:
        return [], LoanSummary.empty()

    schedule: List[PeriodEntry] = []
    balance = principal
    cumulative_interest = ZERO
    cumulative_principal = ZERO
    insufficient_months = 0
    horizon = min(term_months * 2, MAX_HORIZON_MONTHS)
    month = 0

    while balance > 0 and month < horizon:
        month += 1
        starting_balance = balance
        interest = starting_balance * rate_per_month
        principal_payment = payment - interest

        if principal_payment < 0:
            # Payment does not cover interest; the balance is held, not grown.
            principal_payment = ZERO
            insufficient_months += 1
            if insufficient_months >= MAX_INSUFFICIENT_MONTHS:
                logger.warning(
                    "Payment %.2f is insufficient to repay loan in month %d. Balance: %.2f. "
                    "Stopping after %d consecutive months of insufficient payment.",
                    payment,
                    month,
                    starting_balance,
                    MAX_INSUFFICIENT_MONTHS,
                )
                break
        else:
            insufficient_months = 0

        installment = payment
        if balance - principal_payment < RESIDUAL_BALANCE:
            # Final period: pay exactly what is left.
            principal_payment = balance
            installment = balance + interest
            balance = ZERO
        else:
            balance -= principal_payment

        cumulative_interest += interest
        cumulative_principal += principal_payment

        schedule.append(
            PeriodEntry(
                month=month,
                starting_balance=_floor(starting_balance),
                payment=_floor(installment),
                interest=_floor(interest),
                principal=_floor(principal_payment),
                ending_balance=_floor(balance),
                cumulative_interest=_floor(cumulative_interest),
                cumulative_principal=_floor(cumulative_principal),
            )
        )

    if not schedule:
        return [], LoanSummary.empty()

    summary = LoanSummary(
        initial_payment=payment,
        total_interest=cumulative_interest,
        total_payment=principal + cumulative_interest,
        actual_term_months=schedule[-1].month,
    )
    logger.debug(
        "Simulated %d of %d months, payment %.2f, total interest %.2f",
        summary.actual_term_months,
        term_months,
        payment,
        cumulative_interest,
    )
    return schedule, summary


def compute_schedule(terms: LoanTerms, override_payment=None) -> Tuple[List[PeriodEntry], LoanSummary]:
    """Compute the schedule and summary for a ``LoanTerms`` instance."""
    return generate_schedule(terms.principal, terms.annual_rate, terms.term_months, override_payment)
