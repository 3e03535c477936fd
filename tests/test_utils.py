from decimal import Decimal

import pytest

from emi_calc.data_models import InvalidLoanInput, LoanTerms
from emi_calc.utils import (
    build_loan_terms,
    decimal_from_str,
    parse_amount,
    to_decimal,
    validate_extra_payment,
    validate_loan_terms,
    years_to_months,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("500000", Decimal("500000")),
        ("1,00,000", Decimal("100000")),
        ("500k", Decimal("500000")),
        ("2m", Decimal("2000000")),
        ("50l", Decimal("5000000")),
        ("1.5cr", Decimal("15000000")),
        (" 12K ", Decimal("12000")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "abc", "12x", "inf"])
def test_parse_amount_rejects_garbage(text):
    with pytest.raises(ValueError):
        parse_amount(text)


def test_decimal_from_str_strips_commas():
    assert decimal_from_str("1,234.50") == Decimal("1234.50")


def test_to_decimal_uses_shortest_float_repr():
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal(8.5) == Decimal("8.5")
    assert to_decimal(12) == Decimal("12")
    assert not to_decimal(float("nan")).is_finite()


def test_years_to_months():
    assert years_to_months(20) == 240
    assert years_to_months("1.5") == 18


class TestBuildLoanTerms:
    def test_from_years(self):
        terms = build_loan_terms("50l", 8.5, tenure_years=20)
        assert terms == LoanTerms(principal=Decimal("5000000"), annual_rate=Decimal("8.5"), term_months=240)

    def test_months_win_over_years(self):
        assert build_loan_terms(100000, "7", tenure_years=20, term_months=36).term_months == 36

    def test_default_tenure(self):
        assert build_loan_terms(100000, 7).term_months == 240


class TestValidateLoanTerms:
    def _terms(self, principal="500000", rate="8.5", months=240):
        return LoanTerms(principal=Decimal(principal), annual_rate=Decimal(rate), term_months=months)

    def test_valid_terms_pass_through(self):
        terms = self._terms()
        assert validate_loan_terms(terms) is terms

    def test_zero_principal(self):
        with pytest.raises(InvalidLoanInput, match="cannot be 0"):
            validate_loan_terms(self._terms(principal="0"))

    def test_principal_below_minimum(self):
        with pytest.raises(InvalidLoanInput, match="less than 100,000"):
            validate_loan_terms(self._terms(principal="99999"))

    def test_custom_minimum(self):
        terms = self._terms(principal="5000")
        assert validate_loan_terms(terms, min_principal=Decimal("1000")) is terms

    @pytest.mark.parametrize("rate", ["-1", "101"])
    def test_rate_out_of_range(self, rate):
        with pytest.raises(InvalidLoanInput, match="Interest rate"):
            validate_loan_terms(self._terms(rate=rate))

    @pytest.mark.parametrize("months", [0, 1201])
    def test_tenure_out_of_range(self, months):
        with pytest.raises(InvalidLoanInput, match="Tenure"):
            validate_loan_terms(self._terms(months=months))


def test_validate_extra_payment():
    assert validate_extra_payment("12000") == Decimal("12000")
    assert validate_extra_payment(0) == Decimal("0")
    with pytest.raises(InvalidLoanInput):
        validate_extra_payment(-1)


@pytest.mark.parametrize("value", [None, [8.5], {"rate": 8.5}])
def test_to_decimal_rejects_non_numbers(value):
    with pytest.raises(ValueError, match="Invalid numeric value"):
        to_decimal(value)


@pytest.mark.parametrize("months", ["inf", "nan", float("inf")])
def test_build_loan_terms_rejects_unusable_month_counts(months):
    with pytest.raises(ValueError):
        build_loan_terms(100000, 7, term_months=months)
