# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

- POST /api/register  create a client or carrier account and open a session
- POST /api/login     open a session AND return a bearer token
- POST /api/logout    revoke the session (bearer tokens stay valid until expiry)
- GET  /api/user      the caller, via session or bearer token
"""

from flask import Blueprint, Response, current_app, g, jsonify, request, session

from ..decorators import SESSION_COOKIE_KEY, require_auth
from ..services import auth_service, session_service, token_service
from ..services.auth_service import (
    DuplicateUsernameError,
    InvalidCredentialsError,
    InvalidRoleError,
)
from ..validation import ValidationError, json_object


auth_bp = Blueprint("auth", __name__, url_prefix="/api")


def _open_session(user_id: int) -> None:
    previous = session.get(SESSION_COOKIE_KEY)
    if previous:
        session_service.revoke_session(previous, reason="Replaced by new login")
    _, token = session_service.create_session(
        user_id=user_id,
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )
    session.clear()
    session.permanent = True
    session[SESSION_COOKIE_KEY] = token


@auth_bp.post("/register")
def register_route():
    """
    Request body:
    {
        "username": "alice@x.com",  // required, unique
        "password": "secret1",      // required
        "name": "Alice",            // optional, "nome" also accepted
        "role": "client"            // client | carrier (default client)
    }
    """
    try:
        data = json_object(request.get_json(silent=True))
    except ValidationError as e:
        return jsonify({"message": str(e)}), 400
    username = str(data.get("username") or "").strip()
    password = str(data.get("password") or "")
    display_name = data.get("name") or data.get("nome")
    if display_name is not None:
        display_name = str(display_name)

    if not username:
        return jsonify({"message": "username is required"}), 400
    if not password:
        return jsonify({"message": "password is required"}), 400

    try:
        user = auth_service.register(username, password, display_name, data.get("role"))
    except (DuplicateUsernameError, InvalidRoleError) as e:
        return jsonify({"message": str(e)}), 400

    _open_session(user.id)
    return jsonify(user.to_dict()), 201


@auth_bp.post("/login")
def login_route():
    """
    Authenticate and return {"user", "token"}. A session cookie is set too.
    """
    try:
        data = json_object(request.get_json(silent=True))
    except ValidationError as e:
        return jsonify({"message": str(e)}), 400
    username = str(data.get("username") or "").strip()
    password = str(data.get("password") or "")

    if not username or not password:
        return jsonify({"message": "username and password are required"}), 400

    try:
        user = auth_service.authenticate(username, password)
    except InvalidCredentialsError:
        current_app.logger.info("Failed login for %s", username)
        return jsonify({"message": "Invalid credentials"}), 401

    _open_session(user.id)
    token = token_service.issue_token(user)

    return jsonify({"user": user.to_dict(), "token": token}), 200


@auth_bp.post("/logout")
def logout_route():
    sid = session.pop(SESSION_COOKIE_KEY, None)
    if sid:
        session_service.revoke_session(sid, reason="User logout")
    session.clear()
    return Response(status=200)


@auth_bp.get("/user")
@require_auth
def current_user_route():
    return jsonify(g.current_user.to_dict())
