"""Route handlers — maps API URLs to the summary builder and aggregator."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from deckwatch.aggregator import aggregate_attention, attention_sessions
from deckwatch.pane import PaneProbe
from deckwatch.sessions import SessionFileError, parse_session_records
from deckwatch.summary import build_session_summary

bp = Blueprint("api", __name__, url_prefix="/api")


def _bad_request(message: str):
    return jsonify({"error": message}), 400


def _records_from_body():
    data = request.get_json(silent=True)
    if data is None:
        raise SessionFileError("request body must be a JSON list of session records")
    return parse_session_records(data)


@bp.route("/sessions/summary")
def session_summary():
    """Summary and attention status for one session."""
    config = current_app.config["DECKWATCH"]
    store = current_app.config["TRANSCRIPT_STORE"]

    project_path = request.args.get("project_path")
    status = request.args.get("status")
    if not project_path or not status:
        return _bad_request("project_path and status are required")

    pane_id = request.args.get("pane")
    pane = PaneProbe.from_config(pane_id, config) if pane_id else None

    result = build_session_summary(
        store,
        project_path,
        request.args.get("conversation_id"),
        status,
        pane,
        config=config,
    )
    return jsonify(result.to_dict())


@bp.route("/attention/counts", methods=["POST"])
def attention_counts():
    """Badge counts for the posted session records."""
    try:
        records = _records_from_body()
    except SessionFileError as e:
        return _bad_request(str(e))
    result = aggregate_attention(
        records,
        current_app.config["TRANSCRIPT_STORE"],
        config=current_app.config["DECKWATCH"],
    )
    return jsonify(result.to_dict())


@bp.route("/attention/sessions", methods=["POST"])
def attention_list():
    """The posted session records that still need attention."""
    try:
        records = _records_from_body()
    except SessionFileError as e:
        return _bad_request(str(e))
    flagged = attention_sessions(
        records,
        current_app.config["TRANSCRIPT_STORE"],
        config=current_app.config["DECKWATCH"],
    )
    return jsonify([record.to_dict() for record in flagged])
