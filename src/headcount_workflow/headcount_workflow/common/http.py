from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from functools import wraps
from typing import Any

from flask import jsonify, request, session

from ..core.exceptions import (
    AuthorizationError,
    DependencyError,
    DomainError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from ..core.logging_config import get_logger
from .datetime_utils import to_iso_timestamp

logger = get_logger("http")

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (InvalidStateError, 409),
    (DependencyError, 503),
)


def to_json(value: Any) -> Any:
    """Dataclasses/enums/datetimes -> JSON-friendly values."""
    if is_dataclass(value) and not isinstance(value, type):
        return {k: to_json(v) for k, v in asdict(value).items()}
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return to_iso_timestamp(value)
    if isinstance(value, date):
        return value.isoformat()
    return value


def error_response(exc: DomainError):
    status = next((code for cls, code in _STATUS_BY_ERROR if isinstance(exc, cls)), 400)
    return jsonify({"success": False, "message": str(exc)}), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def current_user_id() -> str:
    return str(session["user_id"])


def api_view(view):
    """Session check + typed error mapping for JSON endpoints."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Please sign in to continue"}), 401
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            return error_response(e)
        except Exception as e:
            logger.exception("Unhandled error in %s", request.path)
            return jsonify({"success": False, "message": f"System error: {e}"}), 500

    return wrapper
