# caltrail/services/auth.py
"""Bearer tokens and the Flask-Login loaders that turn them into the current user."""
from __future__ import annotations

from typing import Optional

from flask import current_app, jsonify
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from caltrail import db
from caltrail.models.user import User

TOKEN_SALT = "caltrail-auth-token"


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=TOKEN_SALT)


def issue_token(user: User) -> str:
    return _serializer().dumps({"uid": user.id})


def user_id_from_token(token: str) -> Optional[int]:
    """User id carried by a valid, unexpired token; None otherwise."""
    try:
        payload = _serializer().loads(token, max_age=current_app.config["TOKEN_MAX_AGE"])
    except SignatureExpired:
        current_app.logger.info("[auth] expired token")
        return None
    except BadSignature:
        return None
    uid = payload.get("uid") if isinstance(payload, dict) else None
    return int(uid) if uid is not None else None


def _bearer(header: str) -> Optional[str]:
    if header and header.lower().startswith("bearer "):
        return header.split(" ", 1)[1].strip() or None
    return None


def register_auth(login_manager) -> None:
    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.request_loader
    def load_user_from_request(request):
        token = _bearer(request.headers.get("Authorization", ""))
        if not token:
            return None
        uid = user_id_from_token(token)
        return db.session.get(User, uid) if uid is not None else None

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify(error="Unauthorized", message="Access denied. No valid token provided."), 401
