# Overview: Request authentication and role decorators for API routes.

from functools import wraps
from flask import Response, g, request, session

from .services import auth_service, session_service, token_service
from .services.session_service import AuthContext


SESSION_COOKIE_KEY = "sid"


def unauthorized() -> Response:
    """Bare 401. Wrong-role failures look identical to missing credentials."""
    return Response(status=401)


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def resolve_auth_context() -> AuthContext | None:
    """
    Identify the caller: server-side session first, then bearer token.

    Returns None when neither proves an identity.
    """
    sid = session.get(SESSION_COOKIE_KEY)
    if sid:
        record = session_service.validate_session(sid)
        if record:
            return AuthContext(user=record.user, method="session", session=record)
        session.pop(SESSION_COOKIE_KEY, None)

    token = _bearer_token()
    if token:
        claims = token_service.decode_token(token)
        if claims:
            try:
                user = auth_service.get_user(int(claims["sub"]))
            except (TypeError, ValueError):
                user = None
            if user:
                return AuthContext(user=user, method="bearer", claims=claims)

    return None


def require_auth(f):
    """
    Require an authenticated caller.

    Sets:
    - g.current_user: the authenticated User
    - g.auth_context: the AuthContext (method, session or claims)
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        context = resolve_auth_context()
        if not context:
            return unauthorized()

        g.current_user = context.user
        g.auth_context = context

        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: str):
    """
    Require the authenticated user to hold one of roles.

    Use below @require_auth.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            context = getattr(g, "auth_context", None)
            if context is None or context.role not in roles:
                return unauthorized()
            return f(*args, **kwargs)

        return decorated_function
    return decorator
