import json
import logging
import os

from flask import Flask, jsonify, redirect, render_template, request, url_for

from loan_amort.data_models import (
    DEFAULT_POLICY,
    DEFAULT_PRINCIPAL,
    DEFAULT_RATE,
    DEFAULT_TERM_MONTHS,
    LoanParameters,
    RepaymentPolicy,
)
from loan_amort.engine import InvalidLoanParameters, calculate, validate_loan_parameters
from loan_amort.formatter import chart_points, format_currency, search_schedule
from loan_amort.utils import parse_amount, parse_policy, term_to_months

logging.basicConfig(
    level=os.environ.get("LOAN_AMORT_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["ASSET_VERSION"] = os.environ.get("ASSET_VERSION", "1")
app.config["PREVIEW_ROWS"] = int(os.environ.get("LOAN_AMORT_PREVIEW_ROWS", "120"))
app.secret_key = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")

# Display only: amounts are never converted between currencies.
CURRENCY_OPTIONS = {
    'USD': {'label': 'US dollar', 'prefix': '$', 'suffix': ''},
    'EUR': {'label': 'Euro', 'prefix': '€', 'suffix': ''},
    'GBP': {'label': 'British pound', 'prefix': '£', 'suffix': ''},
    'VND': {'label': 'Vietnamese dong', 'prefix': '', 'suffix': ' ₫'},
}


def _normalized_currency(form) -> str:
    code = form.get("currency", "USD").upper()
    return code if code in CURRENCY_OPTIONS else "USD"


def _number(value, message: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidLoanParameters(message) from exc


def _form_to_params(form) -> LoanParameters:
    """Build validated parameters from a submitted form or JSON body.

    Any malformed or out of range field raises ``InvalidLoanParameters``.
    Fractional terms are passed on as-is so the validator rejects them.
    """
    rate = _number(form.get("rate", 0.0), "Interest rate must be a number")
    term = _number(form.get("term", 0), "Loan term must be a whole number")
    try:
        principal = parse_amount(form.get("principal", ""))
        term = term_to_months(term, form.get("term_unit") or "months")
        policy = parse_policy(form.get("policy", DEFAULT_POLICY.value))
    except (TypeError, ValueError) as exc:
        raise InvalidLoanParameters(str(exc)) from exc
    validate_loan_parameters(principal, rate, term)
    return LoanParameters(principal=principal, annual_rate_percent=rate, term_months=int(term), policy=policy)


def _schedule_for_view(schedule: list, search: str, show_full_schedule: bool):
    rows = search_schedule(schedule, search)
    if show_full_schedule:
        return rows, 0
    preview_rows = app.config["PREVIEW_ROWS"]
    preview = rows[:preview_rows]
    return preview, len(rows) - len(preview)


def _default_form() -> dict:
    return {
        "principal": f"{DEFAULT_PRINCIPAL:,.0f}",
        "rate": DEFAULT_RATE,
        "term": DEFAULT_TERM_MONTHS,
        "term_unit": "months",
        "policy": DEFAULT_POLICY.value,
        "currency": "USD",
        "search": "",
    }


@app.route("/", methods=["GET", "POST"])
def index():
    form = _default_form()
    result = None
    schedule = None
    truncated = 0
    error = None
    show_full_schedule = False
    compact = False
    chart_payload = "null"

    if request.method == "POST":
        form.update(request.form.to_dict())
        form["currency"] = _normalized_currency(request.form)
        show_full_schedule = request.form.get("show_full_schedule") == "1"
        compact = request.form.get("compact") == "1"
        try:
            params = _form_to_params(request.form)
            result = calculate(params)
            logger.info(
                "Calculated %s schedule for %s over %s months",
                params.policy.value,
                params.principal,
                params.term_months,
            )
            schedule, truncated = _schedule_for_view(
                result.payment_schedule, form.get("search", ""), show_full_schedule
            )
            chart_payload = json.dumps(chart_points(result.payment_schedule))
        except InvalidLoanParameters as exc:
            error = str(exc)
        except Exception:
            logger.exception("Calculation error")
            error = "An error occurred while calculating your loan."

    currency_meta = CURRENCY_OPTIONS[form["currency"]]

    def money(value: float) -> str:
        return format_currency(value, compact, currency_meta["prefix"], currency_meta["suffix"])

    return render_template(
        "index.html",
        form=form,
        result=result,
        schedule=schedule,
        truncated=truncated,
        show_full_schedule=show_full_schedule,
        compact=compact,
        error=error,
        money=money,
        policies=list(RepaymentPolicy),
        currency_options=CURRENCY_OPTIONS,
        asset_version=app.config["ASSET_VERSION"],
        chart_payload=chart_payload,
    )


@app.post("/reset")
def reset():
    return redirect(url_for("index"))


@app.post("/api/calculate")
def api_calculate():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400
    try:
        params = _form_to_params(payload)
    except InvalidLoanParameters as exc:
        return jsonify({"error": str(exc)}), 400
    try:
        result = calculate(params)
        data = result.to_dict()
        data["chart"] = chart_points(result.payment_schedule)
    except Exception:
        logger.exception("Calculation error")
        return jsonify({"error": "An error occurred while calculating your loan."}), 500
    return jsonify(data)


if __name__ == "__main__":
    print("Starting Loan Amortization web app...")
    app.run(host="0.0.0.0", port=8710, debug=True)
