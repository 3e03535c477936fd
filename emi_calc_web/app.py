import io
import logging
import os

from flask import Flask, Response, current_app, jsonify, request

from emi_calc.comparison import build_comparison_rows, run_extra_payment_comparison
from emi_calc.formatter import (
    comparison_to_dict,
    format_currency,
    format_months,
    normalized_currency,
    serialize_schedule,
    write_comparison_csv,
)
from emi_calc.utils import (
    DEFAULT_ANNUAL_RATE,
    DEFAULT_CURRENCY,
    DEFAULT_EXTRA_PER_YEAR,
    MIN_PRINCIPAL,
    build_loan_terms,
    parse_amount,
    validate_extra_payment,
    validate_loan_terms,
)

logger = logging.getLogger(__name__)


def _request_data():
    if request.is_json:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}
    return request.form


def _run_analysis(data):
    """Validate the submitted fields and run the regular/extra payment calculation.

    The extra payment plan is only simulated when ``extra_enabled`` is truthy.
    """
    principal = str(data.get("principal", "")).strip()
    rate = data.get("rate", DEFAULT_ANNUAL_RATE)
    tenure_years = data.get("tenure_years") or None
    term_months = data.get("term_months") or None
    extra_enabled = str(data.get("extra_enabled", "0")).strip().lower() not in ("0", "false", "off", "none", "")
    extra_raw = str(data.get("extra_per_year", DEFAULT_EXTRA_PER_YEAR)).strip() or "0"

    terms = build_loan_terms(
        principal,
        rate,
        tenure_years=tenure_years,
        term_months=term_months,
    )
    validate_loan_terms(terms, min_principal=current_app.config["MIN_PRINCIPAL"])
    extra = validate_extra_payment(parse_amount(extra_raw)) if extra_enabled else 0
    return run_extra_payment_comparison(terms, extra)


def _display_strings(scenario, currency_code: str) -> dict:
    comparison = scenario.comparison
    display = {}
    for key, summary in (("regular", comparison.baseline), ("extra_payment", comparison.alternative)):
        if summary is None:
            display[key] = None
            continue
        display[key] = {
            "initial_payment": format_currency(summary.initial_payment, currency_code),
            "total_interest": format_currency(summary.total_interest, currency_code),
            "total_payment": format_currency(summary.total_payment, currency_code),
            "actual_tenure": format_months(summary.actual_term_months),
        }
    display["interest_saved"] = format_currency(comparison.interest_saved, currency_code)
    display["tenure_reduced"] = format_months(comparison.term_reduced_months)
    return display


def create_app() -> Flask:
    flask_app = Flask(__name__)
    flask_app.secret_key = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
    flask_app.config["MIN_PRINCIPAL"] = parse_amount(os.environ.get("EMI_CALC_MIN_PRINCIPAL", str(MIN_PRINCIPAL)))
    flask_app.config["DEFAULT_CURRENCY"] = normalized_currency(os.environ.get("EMI_CALC_DEFAULT_CURRENCY", DEFAULT_CURRENCY))
    return flask_app


app = create_app()


@app.post("/api/calculate")
def calculate():
    data = _request_data()
    currency_code = normalized_currency(data.get("currency"), app.config["DEFAULT_CURRENCY"])
    try:
        scenario = _run_analysis(data)
    except ValueError as exc:
        logger.info("Rejected calculation input: %s", exc)
        return jsonify({"error": str(exc)}), 400

    return jsonify(
        {
            "currency": currency_code,
            "comparison": comparison_to_dict(scenario.comparison),
            "display": _display_strings(scenario, currency_code),
            "regular_schedule": serialize_schedule(scenario.regular_schedule),
            "extra_payment_schedule": serialize_schedule(scenario.extra_schedule),
        }
    )


@app.post("/api/export.csv")
def export_csv():
    try:
        scenario = _run_analysis(_request_data())
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    rows = build_comparison_rows(scenario.regular_schedule, scenario.extra_schedule)
    if not rows:
        return jsonify({"error": "No data to export. Please enter loan details."}), 400
    buffer = io.StringIO()
    write_comparison_csv(buffer, rows)
    return Response(
        buffer.getvalue(),
        mimetype="text/csv",
        headers={"Content-Disposition": "attachment; filename=loan_amortization_data.csv"},
    )


if __name__ == "__main__":
    print("Starting EMI Calculator web app...")
    app.run(host="0.0.0.0", port=8710, debug=True)
