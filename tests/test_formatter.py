import io
from decimal import Decimal

import pytest

from emi_calc.comparison import build_comparison_rows
from emi_calc.data_models import LoanSummary
from emi_calc.engine import generate_schedule
from emi_calc.formatter import (
    CSV_HEADERS,
    format_currency,
    format_months,
    normalized_currency,
    print_summary,
    serialize_schedule,
    summary_to_dict,
    write_comparison_csv,
)


@pytest.mark.parametrize(
    "months, expected",
    [
        (0, "0 months"),
        (1, "1 month"),
        (12, "1 year"),
        (26, "2 years and 2 months"),
        (13, "1 year and 1 month"),
        (-3, "N/A"),
    ],
)
def test_format_months(months, expected):
    assert format_months(months) == expected


def test_format_currency():
    assert format_currency(Decimal("43391.16"), "INR") == "₹43,391"
    assert format_currency(1234567.8, "USD") == "$1,234,568"
    assert format_currency(Decimal("-50"), "GBP") == "-£50"


def test_unknown_currency_falls_back_to_default():
    assert normalized_currency("xyz") == "INR"
    assert normalized_currency(None, "EUR") == "EUR"
    assert normalized_currency("usd") == "USD"


def test_summary_to_dict():
    assert summary_to_dict(None) is None
    data = summary_to_dict(LoanSummary.empty())
    assert data == {"initial_payment": 0.0, "total_interest": 0.0, "total_payment": 0.0, "actual_term_months": 0}


def test_serialize_schedule():
    schedule, _ = generate_schedule(100, 0, 2)
    rows = serialize_schedule(schedule)
    assert rows[0]["month"] == 1
    assert rows[0]["payment"] == 50.0
    assert rows[1]["ending_balance"] == 0.0


def test_write_comparison_csv():
    regular, _ = generate_schedule(100, 0, 4)
    extra, _ = generate_schedule(100, 0, 4, override_payment=50)
    buffer = io.StringIO()

    write_comparison_csv(buffer, build_comparison_rows(regular, extra))

    lines = buffer.getvalue().splitlines()
    assert lines[0] == ",".join(CSV_HEADERS)
    assert lines[1] == "1,75.00,0.00,25.00,25.00,50.00,0.00,50.00,50.00,0.00"
    assert lines[4] == "4,0.00,0.00,100.00,25.00,0.00,0.00,100.00,50.00,0.00"
    assert len(lines) == 5


def test_print_summary(capsys):
    _, summary = generate_schedule(120000, 0, 12)
    print_summary("Regular EMI", summary, "USD")
    out = capsys.readouterr().out
    assert "Regular EMI" in out
    assert "$10,000" in out
    assert "1 year" in out


def test_print_summary_without_result(capsys):
    print_summary("With extra payment", None)
    assert "No schedule" in capsys.readouterr().out
