"""
Callscope Dashboard API
Flask app serving the call-chain valuation payload consumed by the chart UI.
Every request recomputes from the provider; nothing is cached between requests.
"""

# ============ IMPORTS ============
import logging
import os

from dotenv import load_dotenv
from flask import Flask, jsonify, request

from callscope.config import load_settings
from callscope.errors import CallscopeError
from callscope.options.pipeline import build_chain
from callscope.utils.logging import DiagnosticLog

# Load .env file explicitly (required for gunicorn)
env_path = os.path.join(os.path.dirname(__file__), "..", ".env")
load_dotenv(env_path)

logger = logging.getLogger(__name__)


# ============ APP FACTORY ============
def create_app(*, session=None) -> Flask:
    """
    Build the Flask app.

    `session` is an optional requests.Session passed through to the provider
    client (tests inject a fake one).
    """
    app = Flask(__name__)

    @app.errorhandler(CallscopeError)
    def handle_callscope_error(e: CallscopeError):
        if e.status_code >= 500:
            app.logger.warning("options request failed: %s (%s)", e.message, type(e).__name__)
        return jsonify(e.to_payload()), e.status_code

    # ============ ROUTES ============
    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.route("/options")
    @app.route("/api/options")
    def api_options():
        raw_ticker = request.args.get("ticker")
        diag = DiagnosticLog(ticker=(raw_ticker or "").strip().upper() or None)
        # Credential is read from the environment at request time.
        settings = load_settings()
        result = build_chain(raw_ticker, settings=settings, session=session, diag=diag)
        app.logger.info(
            "options %s: %d expirations, %d options, %d page(s), %d diagnostic event(s)",
            result.ticker,
            len(result.expirations),
            len(result.options),
            result.pages_fetched,
            len(diag),
        )
        response = jsonify(result.to_dict())
        response.headers["Cache-Control"] = "no-store"
        return response

    return app


app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)), debug=False)
