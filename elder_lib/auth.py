# --- elder_lib/auth.py ---
"""
Admin and token authentication for the JSON API.

Two schemes are accepted on admin endpoints: HTTP Basic with the configured
admin credentials, or an HS256 JWT signed with JWT_SECRET. A few endpoints
accept the JWT only.
"""
import base64
import binascii
import functools
import logging

import jwt
from flask import current_app, jsonify, request

log = logging.getLogger("elder.auth")


class AuthError(Exception):
    """Raised when a request carries no usable credentials."""


class AuthConfigError(RuntimeError):
    """Raised when token verification is impossible because of missing settings."""


def extract_bearer_token(header: str | None):
    if not header:
        return None
    parts = header.split(" ")
    if parts[0].lower() != "bearer" or len(parts) < 2 or not parts[1]:
        return None
    return parts[1]


def extract_basic_credentials(header: str | None):
    """Returns (username, password) from a Basic header, or None when malformed."""
    if not header:
        return None
    parts = header.split(" ")
    if parts[0].lower() != "basic" or len(parts) < 2 or not parts[1]:
        return None
    try:
        decoded = base64.b64decode(parts[1]).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    if ":" not in decoded:
        return None
    username, password = decoded.split(":", 1)
    return username, password


def verify_jwt_token(token: str) -> dict:
    secret = current_app.config.get("JWT_SECRET")
    if not secret:
        raise AuthConfigError("JWT_SECRET is not configured")
    return jwt.decode(token, secret, algorithms=["HS256"])


def is_valid_admin_login(username: str, password: str) -> bool:
    expected_user = (current_app.config.get("ADMIN_USERNAME") or "").strip().lower()
    expected_password = current_app.config.get("ADMIN_PASSWORD") or ""
    # An unset password never matches.
    if not expected_user or not expected_password:
        return False
    return (username or "").strip().lower() == expected_user and password == expected_password


def build_admin_basic_header(username: str, password: str) -> str:
    raw = f"{username}:{password}".encode("utf-8")
    return f"Basic {base64.b64encode(raw).decode('ascii')}"


def is_admin_basic_auth(header: str | None) -> bool:
    credentials = extract_basic_credentials(header)
    if not credentials:
        return False
    return is_valid_admin_login(*credentials)


def assert_admin_or_jwt(header: str | None):
    if is_admin_basic_auth(header):
        return
    token = extract_bearer_token(header)
    if not token:
        raise AuthError("Missing authorization")
    verify_jwt_token(token)


def require_bearer(header: str | None):
    token = extract_bearer_token(header)
    if not token:
        raise AuthError("Missing Bearer token")
    verify_jwt_token(token)


def _guard(check):
    def decorator(view):
        @functools.wraps(view)
        def wrapped(*args, **kwargs):
            try:
                check(request.headers.get("Authorization"))
            except AuthError as e:
                return jsonify({"error": str(e)}), 401
            except jwt.InvalidTokenError as e:
                log.info("Rejected token on %s: %s", request.path, e)
                return jsonify({"error": "Invalid token"}), 401
            except AuthConfigError as e:
                log.error("%s", e)
                return jsonify({"error": str(e)}), 500
            return view(*args, **kwargs)

        return wrapped

    return decorator


admin_or_jwt_required = _guard(assert_admin_or_jwt)
bearer_required = _guard(require_bearer)
