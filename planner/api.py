"""Flask HTTP surface: plan analysis, chatbot, CORS preflight."""
from __future__ import annotations

from flask import Flask, jsonify, request
from flask_cors import CORS

from planner.config import get_env
from planner.errors import RequestValidationError
from planner.log import get_logger
from planner.service import PlannerService

log = get_logger(__name__)


def _text(value) -> str:
    return value if isinstance(value, str) else ("" if value is None else str(value))


def _json_object() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def create_app(service: PlannerService | None = None) -> Flask:
    app = Flask(__name__)
    origins = [o.strip() for o in get_env("CORS_ORIGINS", "*").split(",") if o.strip()] or "*"
    CORS(app, resources={r"/*": {"origins": origins}})

    svc = service or PlannerService.from_env()
    app.config["PLANNER_SERVICE"] = svc

    def validation_response(exc: RequestValidationError):
        body = {"error": exc.error}
        if exc.detail:
            body["message"] = exc.detail
        return jsonify(body), 400

    @app.route("/api/analyze-company", methods=["POST"])
    def analyze_company():
        payload = _json_object()
        company_name = _text(payload.get("companyName")).strip()
        job_description = _text(payload.get("jobDescription"))
        log.info("Analyze request: company=%r, job description %d chars", company_name, len(job_description))
        try:
            return jsonify(svc.analyze_company(company_name, job_description)), 200
        except RequestValidationError as exc:
            return validation_response(exc)
        except Exception as exc:
            log.exception("Error analyzing company")
            svc.log_plan_error(company_name, job_description, str(exc))
            return jsonify({"error": "Failed to analyze company", "message": str(exc)}), 500

    @app.route("/api/chatbot", methods=["POST"])
    def chatbot():
        payload = _json_object()
        message = _text(payload.get("message"))
        history = payload.get("conversationHistory") or []
        try:
            return jsonify(svc.chat(message, history)), 200
        except RequestValidationError as exc:
            return validation_response(exc)
        except Exception as exc:
            log.exception("Error in chatbot")
            svc.log_chat_error(message or "unknown", history if isinstance(history, list) else [], str(exc))
            return jsonify({"error": "Failed to process chat message", "message": str(exc)}), 500

    @app.route("/api/health", methods=["GET"])
    def health():
        provider = svc.provider.name if svc.provider else None
        return jsonify({"status": "ok", "provider": provider}), 200

    @app.route("/", defaults={"path": ""}, methods=["OPTIONS"])
    @app.route("/<path:path>", methods=["OPTIONS"])
    def preflight(path: str):
        return "", 200

    @app.errorhandler(405)
    def method_not_allowed(_exc):
        return jsonify({"error": "Method not allowed"}), 405

    return app
