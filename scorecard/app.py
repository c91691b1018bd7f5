"""
Flask JSON API for the scoring core.

Endpoints:
- GET  /health                                  liveness check
- GET  /assessments?state=<state>                list records with per-state counts
- GET  /assessments/<assignment_id>             load a record
- POST /assessments                             save a draft, or submit it when "submitted" is true
- POST /assessments/<assignment_id>/reopen      reopen a submitted record
- POST /assessments/preview                     score a draft without storing it

Errors come back as {"error": message} with 400 (bad input), 404 (no record),
409 (lifecycle violation) or 503 (storage failure).
"""

import logging
from typing import Optional

from flask import Flask, jsonify, request

from . import config
from .errors import LifecycleViolation, PersistenceError, ValidationError
from .lifecycle import AssessmentLifecycle, count_by_state
from .models import LifecycleState, draft_from_dict, record_to_dict
from .readiness import ReadinessReport
from .store import get_store


logger = logging.getLogger(__name__)


def readiness_to_dict(report: ReadinessReport) -> dict:
    return {
        "is_ready": report.is_ready,
        "completion_score": report.completion_score,
        "checks": [
            {
                "id": check.id,
                "type": check.type,
                "title": check.title,
                "description": check.description,
                "passed": check.passed,
            }
            for check in report.checks
        ],
    }


def create_app(lifecycle: Optional[AssessmentLifecycle] = None) -> Flask:
    """Create the Flask application.

    Args:
        lifecycle: Lifecycle to serve. Defaults to one backed by get_store()
                   (SQLite, or Postgres when DATABASE_URL is set)

    Returns:
        Configured Flask app
    """
    app = Flask(__name__)
    app.secret_key = config.get_secret_key()

    if lifecycle is None:
        lifecycle = AssessmentLifecycle(get_store())
    app.config["LIFECYCLE"] = lifecycle

    def _json_body() -> dict:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return data

    def _draft(data: dict):
        try:
            return draft_from_dict(data)
        except (KeyError, ValueError) as e:
            raise ValidationError(str(e))

    @app.errorhandler(ValidationError)
    def handle_validation_error(error):
        return jsonify({"error": str(error)}), 400

    @app.errorhandler(LifecycleViolation)
    def handle_lifecycle_violation(error):
        return jsonify({
            "error": str(error),
            "action": error.action,
            "state": getattr(error.state, "value", error.state),
        }), 409

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(error):
        logger.error("Storage failure: %s", error)
        return jsonify({"error": str(error)}), 503

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.route("/assessments", methods=["GET"])
    def list_assessments():
        """List stored assessments, optionally only those in one state.

        counts always covers every stored assessment.
        """
        state = None
        if request.args.get("state"):
            try:
                state = LifecycleState(request.args["state"])
            except ValueError:
                raise ValidationError(f"Unknown lifecycle state '{request.args['state']}'")
        all_records = lifecycle.list_records()
        records = lifecycle.list_records(state) if state else all_records
        return jsonify({
            "assessments": [record_to_dict(record) for record in records],
            "counts": count_by_state(all_records),
        })

    @app.route("/assessments/<assignment_id>")
    def get_assessment(assignment_id: str):
        record = lifecycle.load(assignment_id)
        if record is None:
            return jsonify({"error": "Assessment not found"}), 404
        return jsonify({"assessment": record_to_dict(record)})

    @app.route("/assessments", methods=["POST"])
    def save_assessment():
        """Save or submit an assessment.

        The body carries assignment_id, subject, scores, notes and
        general_notes; "submitted": true submits instead of saving.
        """
        data = _json_body()
        draft = _draft(data)
        if data.get("submitted"):
            record = lifecycle.submit(draft)
        else:
            record = lifecycle.save(draft)
        return jsonify({"assessment": record_to_dict(record)})

    @app.route("/assessments/<assignment_id>/reopen", methods=["POST"])
    def reopen_assessment(assignment_id: str):
        record = lifecycle.reopen(assignment_id)
        return jsonify({"assessment": record_to_dict(record)})

    @app.route("/assessments/preview", methods=["POST"])
    def preview_assessment():
        record, readiness = lifecycle.preview(_draft(_json_body()))
        return jsonify({
            "assessment": record_to_dict(record),
            "readiness": readiness_to_dict(readiness),
        })

    return app


if __name__ == "__main__":
    # Run development server
    logging.basicConfig(level=logging.INFO)
    create_app().run(debug=True, host="0.0.0.0", port=5000)
