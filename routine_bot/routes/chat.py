# routine_bot/routes/chat.py
"""
Routine generation and follow-up chat endpoints.

POST /api/routine         start a new session from the selection and fetch the routine
POST /api/chat/turn       append a follow-up question (204 when blank)
POST /api/chat/complete   ask for the assistant reply to the transcript so far
GET  /api/chat/transcript current transcript
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, jsonify, request

from ..enums import FailureKind
from ..errors import EmptySelectionError, RequestInFlightError
from ..models import CompletionResult
from ..render import (
    BUSY_MESSAGE,
    CONNECTION_ERROR_MESSAGE,
    EMPTY_SELECTION_ERROR,
    FOLLOW_UP_FAILED_MESSAGE,
    NO_SESSION_MESSAGE,
    ROUTINE_FAILED_MESSAGE,
    render_notice,
    render_transcript,
)
from . import get_state

log = logging.getLogger(__name__)
bp = Blueprint("chat", __name__, url_prefix="/api")


def _failure_message(result: CompletionResult, *, malformed_message: str) -> str:
    if result.failure == FailureKind.BUSY:
        return BUSY_MESSAGE
    if result.failure == FailureKind.NO_SESSION:
        return NO_SESSION_MESSAGE
    if result.failure == FailureKind.MALFORMED:
        return malformed_message
    return CONNECTION_ERROR_MESSAGE


def _failure_status(result: CompletionResult) -> int:
    if result.failure == FailureKind.BUSY:
        return 409
    if result.failure == FailureKind.NO_SESSION:
        return 400
    return 502


@bp.post("/routine")
def generate_routine() -> tuple[Response, int]:
    state = get_state()
    try:
        state.begin_routine_session()
    except EmptySelectionError:
        return jsonify({"error": EMPTY_SELECTION_ERROR, "html": render_notice(EMPTY_SELECTION_ERROR)}), 400
    except RequestInFlightError:
        return jsonify({"error": BUSY_MESSAGE, "html": render_notice(BUSY_MESSAGE)}), 409

    result = state.request_completion()
    if not result.ok:
        message = _failure_message(result, malformed_message=ROUTINE_FAILED_MESSAGE)
        log.warning(f"ROUTINE_FAILED | kind={result.failure.value} | error={result.error}")
        # The whole chat window is replaced by the message.
        return jsonify({"error": message, "html": render_notice(message), **result.to_dict()}), _failure_status(result)

    return jsonify({"html": render_transcript(state.transcript), **result.to_dict()}), 200


@bp.post("/chat/turn")
def append_turn():
    data = request.get_json(silent=True)
    message = str((data or {}).get("message") or "") if isinstance(data, dict) else ""

    state = get_state()
    try:
        transcript = state.append_user_turn(message)
    except RequestInFlightError:
        return jsonify({"error": BUSY_MESSAGE, "html": render_transcript(state.transcript, notice=BUSY_MESSAGE)}), 409
    if transcript is None:
        return Response(status=204)

    return jsonify({
        "turns": len(transcript),
        "html": render_transcript(transcript, typing=True),
    }), 200


@bp.post("/chat/complete")
def complete() -> tuple[Response, int]:
    state = get_state()
    result = state.request_completion()
    if not result.ok:
        message = _failure_message(result, malformed_message=FOLLOW_UP_FAILED_MESSAGE)
        log.warning(f"FOLLOW_UP_FAILED | kind={result.failure.value} | error={result.error}")
        html = render_transcript(state.transcript, notice=message)
        return jsonify({"error": message, "html": html, **result.to_dict()}), _failure_status(result)

    return jsonify({"html": render_transcript(state.transcript), **result.to_dict()}), 200


@bp.get("/chat/transcript")
def get_transcript() -> tuple[Response, int]:
    transcript = get_state().transcript
    return jsonify({
        "turns": [t.to_dict() for t in transcript],
        "html": render_transcript(transcript),
    }), 200
