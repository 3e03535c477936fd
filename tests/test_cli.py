import json

import pytest
from click.testing import CliRunner

from emi_calc.formatter import CSV_HEADERS
from emi_calc.main import cli, parse_scenario_opts


@pytest.fixture
def runner():
    return CliRunner()


def test_summary_prints_regular_emi(runner):
    result = runner.invoke(cli, ["summary", "-p", "50l", "-r", "8.5", "-y", "20"])

    assert result.exit_code == 0, result.output
    assert "Regular EMI" in result.output
    assert "₹43,391" in result.output
    assert "20 years" in result.output
    assert "Interest saved" not in result.output


def test_summary_with_extra_payment(runner):
    result = runner.invoke(cli, ["summary", "-p", "5000000", "-r", "8.5", "-t", "240", "-e", "12k"])

    assert result.exit_code == 0, result.output
    assert "With extra payment" in result.output
    assert "Interest saved" in result.output
    assert "Tenure reduced by" in result.output


def test_principal_below_minimum_is_rejected(runner):
    result = runner.invoke(cli, ["summary", "-p", "50k"])

    assert result.exit_code == 2
    assert "cannot be less than 100,000" in result.output


def test_minimum_principal_from_environment(runner):
    result = runner.invoke(cli, ["summary", "-p", "50k", "-y", "1"], env={"EMI_CALC_MIN_PRINCIPAL": "1000"})

    assert result.exit_code == 0, result.output
    assert "1 year" in result.output


def test_schedule_prints_table(runner):
    result = runner.invoke(cli, ["schedule", "-p", "120000", "-r", "0", "-t", "12", "--currency", "USD"])

    assert result.exit_code == 0, result.output
    assert "$10,000" in result.output
    assert "Month\tStartBal" in result.output
    assert "12\t10000.00\t10000.00" in result.output


def test_long_schedule_is_truncated(runner):
    result = runner.invoke(cli, ["schedule", "-p", "50l", "-y", "20"])

    assert result.exit_code == 0, result.output
    assert "Schedule has 240 rows; showing first 120 rows." in result.output


def test_schedule_csv_export(runner, tmp_path):
    path = tmp_path / "loan.csv"
    result = runner.invoke(cli, ["schedule", "-p", "5l", "-r", "9", "-y", "5", "-e", "20k", "--output", str(path)])

    assert result.exit_code == 0, result.output
    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == ",".join(CSV_HEADERS)
    assert len(lines) == 61


def test_schedule_json_export(runner, tmp_path):
    path = tmp_path / "loan.json"
    result = runner.invoke(cli, ["schedule", "-p", "5l", "-r", "9", "-y", "5", "--output", str(path)])

    assert result.exit_code == 0, result.output
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["comparison"]["baseline"]["actual_term_months"] == 60
    assert data["comparison"]["alternative"] is None
    assert len(data["regular_schedule"]) == 60
    assert data["extra_payment_schedule"] == []


def test_schedule_rejects_unknown_export_format(runner, tmp_path):
    result = runner.invoke(cli, ["schedule", "-p", "5l", "--output", str(tmp_path / "loan.txt")])
    assert result.exit_code == 2


def test_compare(runner):
    result = runner.invoke(
        cli,
        ["compare", "--scenario1", "-p 50l -r 8.5 -y 20", "--scenario2", "-p 50l -r 8.5 -y 20 -e 12k"],
    )

    assert result.exit_code == 0, result.output
    assert "Comparison" in result.output
    assert "total_interest" in result.output


def test_parse_scenario_opts():
    params = parse_scenario_opts("-p 50l --rate 9 -t 120 -e 1k")
    assert params == {"principal": "50l", "rate": 9.0, "years": None, "term": 120, "extra_per_year": "1k"}


def test_parse_scenario_opts_rejects_unknown_flag():
    with pytest.raises(Exception, match="Unknown option"):
        parse_scenario_opts("-p 50l --holiday 2024-01")
