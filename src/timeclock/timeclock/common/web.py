"""Flask helpers shared by the controllers (session guard, error mapping)."""

from __future__ import annotations

from functools import wraps

from flask import Flask, jsonify, session

from ..core.exceptions import (
    CapabilityDenied,
    CapabilityUnavailable,
    DomainError,
    PersistenceError,
    StaleStateError,
    StateTransitionError,
    ValidationError,
)
from ..core.logging import get_logger
from ..users.model import AuthSession

logger = get_logger(__name__)

ERROR_STATUS = {
    ValidationError: 400,
    StateTransitionError: 409,
    StaleStateError: 409,
    CapabilityDenied: 403,
    CapabilityUnavailable: 503,
    PersistenceError: 503,
}


def current_auth_session() -> AuthSession:
    return AuthSession.from_mapping(session)


def login_required(view):
    @wraps(view)
    async def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Please sign in to continue"}), 401
        return await view(*args, **kwargs)

    return wrapper


def register_error_handlers(app: Flask) -> None:
    def make_handler(status: int):
        def handle(e: DomainError):
            if status >= 500:
                logger.warning("%s: %s", type(e).__name__, e)
            return jsonify({"success": False, "error": type(e).__name__, "message": str(e)}), status

        return handle

    for exc_type, status in ERROR_STATUS.items():
        app.register_error_handler(exc_type, make_handler(status))
