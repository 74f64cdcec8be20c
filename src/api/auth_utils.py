"""Bearer-token verification for the external auth provider's JWTs.

# ─── HOW REQUEST AUTH WORKS ─────────────────────────────────────────
#
# Users sign in with an external auth provider, which issues HS256-signed
# JWTs.  This service only *verifies* them, using the shared secret in
# AUTH_JWT_SECRET:
#
#   token = base64url(header) . base64url(payload) . base64url(signature)
#   signature = HMAC-SHA256(secret, "header.payload")
#
# Validation checks:
#   1. Three dot-separated segments that decode as JSON
#   2. Header alg is HS256 (no "none", no algorithm switching)
#   3. Signature is valid (constant-time comparison)
#   4. exp, if present, is in the future
#   5. sub is a non-empty string; it becomes the user id
#
# When AUTH_JWT_SECRET is empty (local development) the X-User-Id header
# is trusted instead.
#
# Uses only Python stdlib (hmac, hashlib, base64, json, time).
# ─────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import time
from typing import Annotated, Any

from fastapi import Depends, Request

from src.utils.errors import UnauthenticatedError

_DEV_USER_HEADER = "X-User-Id"


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_decode(segment: str) -> bytes:
    padding = "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(segment + padding)


def _sign(secret: str, signing_input: str) -> bytes:
    return hmac.new(
        secret.encode("utf-8"),
        signing_input.encode("ascii"),
        hashlib.sha256,
    ).digest()


def create_token(subject: str, secret: str, ttl_seconds: int = 3600) -> str:
    """Create an HS256 token for *subject*, as the auth provider would.

    Used by tests and local tooling; production tokens come from the
    auth provider.
    """
    header = {"alg": "HS256", "typ": "JWT"}
    payload = {"sub": subject, "exp": int(time.time()) + ttl_seconds}
    signing_input = ".".join(
        _b64url_encode(json.dumps(part, separators=(",", ":")).encode("utf-8"))
        for part in (header, payload)
    )
    return f"{signing_input}.{_b64url_encode(_sign(secret, signing_input))}"


def verify_token(token: str, secret: str, now: float | None = None) -> str:
    """Verify an HS256 token and return its ``sub`` claim.

    Raises
    ------
    UnauthenticatedError
        If the token is malformed, wrongly signed, expired, or has no
        subject.
    """
    parts = token.split(".")
    if len(parts) != 3:
        raise UnauthenticatedError("Malformed token")
    header_b64, payload_b64, signature_b64 = parts

    try:
        header: Any = json.loads(_b64url_decode(header_b64))
        payload: Any = json.loads(_b64url_decode(payload_b64))
        signature = _b64url_decode(signature_b64)
    except ValueError as exc:
        raise UnauthenticatedError("Malformed token") from exc

    if not isinstance(header, dict) or not isinstance(payload, dict):
        raise UnauthenticatedError("Malformed token")
    if header.get("alg") != "HS256":
        raise UnauthenticatedError("Unsupported token algorithm")

    expected = _sign(secret, f"{header_b64}.{payload_b64}")
    if not hmac.compare_digest(expected, signature):
        raise UnauthenticatedError("Invalid token signature")

    exp = payload.get("exp")
    if exp is not None:
        if not isinstance(exp, (int, float)) or isinstance(exp, bool):
            raise UnauthenticatedError("Malformed token")
        current = time.time() if now is None else now
        if exp <= current:
            raise UnauthenticatedError("Token expired")

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise UnauthenticatedError("Token has no subject")
    return subject


def resolve_user_id(
    authorization: str | None,
    dev_user_id: str | None,
    secret: str,
) -> str:
    """Return the caller's user id from request credentials.

    With a *secret*, only a valid ``Bearer`` token is accepted.  Without
    one, the development header is trusted.
    """
    if secret:
        if not authorization:
            raise UnauthenticatedError()
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise UnauthenticatedError("Expected a Bearer token")
        return verify_token(token.strip(), secret)

    if dev_user_id and dev_user_id.strip():
        return dev_user_id.strip()
    raise UnauthenticatedError()


def get_current_user_id(request: Request) -> str:
    """FastAPI dependency: resolve the authenticated user or raise 401."""
    settings = request.app.state.settings
    return resolve_user_id(
        request.headers.get("Authorization"),
        request.headers.get(_DEV_USER_HEADER),
        settings.auth_jwt_secret,
    )


CurrentUserDep = Annotated[str, Depends(get_current_user_id)]
