"""Utility functions for the EMI calculator.

This module provides helpers for turning user input into ``Decimal`` values,
the application defaults and the boundary validation applied before the
engine is called. The engine itself never validates beyond refusing to
produce a schedule for degenerate inputs; rejecting out-of-range input with a
readable message is the job of the callers (CLI and web app) via
:func:`validate_loan_terms`.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Optional

from .data_models import InvalidLoanInput, LoanTerms

DEFAULT_PRINCIPAL = Decimal("5000000")
DEFAULT_ANNUAL_RATE = Decimal("8.5")
DEFAULT_TENURE_YEARS = 20
DEFAULT_EXTRA_PER_YEAR = Decimal("12000")
DEFAULT_CURRENCY = "INR"

MIN_PRINCIPAL = Decimal("100000")
MAX_ANNUAL_RATE = Decimal("100")
MAX_TERM_MONTHS = 1200

_AMOUNT_SUFFIXES = (
    ("cr", Decimal("10000000")),
    ("k", Decimal("1000")),
    ("m", Decimal("1000000")),
    ("l", Decimal("100000")),
)


def to_decimal(value) -> Decimal:
    """Coerce ``value`` into a ``Decimal``.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.1")`` rather than
    its binary expansion. ``nan`` and ``inf`` survive as non-finite decimals.
    Values that are not numbers at all (``None``, lists) raise ``ValueError``.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, str)):
        return decimal_from_str(str(value))
    try:
        number = float(value)
    except TypeError as exc:
        raise ValueError(f"Invalid numeric value: {value!r}") from exc
    return decimal_from_str(repr(number))


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and surrounding whitespace. It raises
    ``ValueError`` if conversion fails.
    """
    try:
        cleaned = value.replace(",", "").strip()
        return Decimal(cleaned)
    except (InvalidOperation, AttributeError) as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc


def parse_amount(value: str) -> Decimal:
    """Parse an amount with an optional magnitude suffix.

    Accepts plain numbers (``"500000"``), thousands separators and the
    shorthands ``k`` (thousand), ``m`` (million), ``l`` (lakh) and ``cr``
    (crore), e.g. ``"50l"`` meaning 5,000,000.
    """
    text = value.strip().lower().replace(",", "")
    factor = Decimal("1")
    for suffix, multiplier in _AMOUNT_SUFFIXES:
        if text.endswith(suffix):
            factor = multiplier
            text = text[: -len(suffix)].strip()
            break
    amount = decimal_from_str(text)
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value}")
    return amount * factor


def _whole_months(value) -> int:
    months = to_decimal(value)
    if not months.is_finite():
        raise ValueError(f"Invalid tenure: {value}")
    return int(months)


def years_to_months(years) -> int:
    return _whole_months(to_decimal(years) * 12)


def build_loan_terms(
    principal,
    annual_rate,
    tenure_years=None,
    term_months: Optional[int] = None,
) -> LoanTerms:
    """Assemble ``LoanTerms`` from loosely typed input.

    ``term_months`` wins when both it and ``tenure_years`` are given. When
    neither is given the default tenure is used.
    """
    if term_months is None:
        years = DEFAULT_TENURE_YEARS if tenure_years is None else tenure_years
        term_months = years_to_months(years)
    principal_value = parse_amount(principal) if isinstance(principal, str) else to_decimal(principal)
    return LoanTerms(
        principal=principal_value,
        annual_rate=to_decimal(annual_rate),
        term_months=_whole_months(term_months),
    )


def validate_loan_terms(terms: LoanTerms, min_principal: Decimal = MIN_PRINCIPAL) -> LoanTerms:
    """Reject terms the calculator does not accept as user input.

    Returns the terms unchanged so the call can be chained.

    Raises
    ------
    InvalidLoanInput
        With a message suitable for showing to the user.
    """
    if not terms.principal.is_finite() or terms.principal <= 0:
        raise InvalidLoanInput(f"Loan amount cannot be 0. Minimum is {min_principal:,.0f}")
    if terms.principal < min_principal:
        raise InvalidLoanInput(f"Loan amount cannot be less than {min_principal:,.0f}")
    if not terms.annual_rate.is_finite() or not (0 <= terms.annual_rate <= MAX_ANNUAL_RATE):
        raise InvalidLoanInput(f"Interest rate must be between 0 and {MAX_ANNUAL_RATE}%")
    if not 1 <= terms.term_months <= MAX_TERM_MONTHS:
        raise InvalidLoanInput(f"Tenure must be between 1 and {MAX_TERM_MONTHS} months")
    return terms


def validate_extra_payment(extra_per_year) -> Decimal:
    extra = to_decimal(extra_per_year)
    if not extra.is_finite() or extra < 0:
        raise InvalidLoanInput("Extra payment per year cannot be negative")
    return extra
