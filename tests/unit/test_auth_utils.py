"""Unit tests for bearer-token verification and user resolution."""

from __future__ import annotations

import time

import pytest

from src.api.auth_utils import (
    _b64url_encode,
    create_token,
    resolve_user_id,
    verify_token,
)
from src.utils.errors import UnauthenticatedError

_SECRET = "test-secret"


class TestVerifyToken:
    def test_valid_token_returns_subject(self) -> None:
        token = create_token("user-42", _SECRET)
        assert verify_token(token, _SECRET) == "user-42"

    def test_wrong_secret_is_rejected(self) -> None:
        token = create_token("user-42", _SECRET)
        with pytest.raises(UnauthenticatedError):
            verify_token(token, "other-secret")

    def test_tampered_payload_is_rejected(self) -> None:
        header, _, signature = create_token("user-42", _SECRET).split(".")
        forged = _b64url_encode(b'{"sub":"admin","exp":9999999999}')
        with pytest.raises(UnauthenticatedError):
            verify_token(f"{header}.{forged}.{signature}", _SECRET)

    def test_expired_token_is_rejected(self) -> None:
        token = create_token("user-42", _SECRET, ttl_seconds=60)
        with pytest.raises(UnauthenticatedError, match="expired"):
            verify_token(token, _SECRET, now=time.time() + 120)

    def test_none_algorithm_is_rejected(self) -> None:
        header = _b64url_encode(b'{"alg":"none","typ":"JWT"}')
        payload = _b64url_encode(b'{"sub":"user-42"}')
        with pytest.raises(UnauthenticatedError):
            verify_token(f"{header}.{payload}.", _SECRET)

    @pytest.mark.parametrize("token", ["", "abc", "a.b", "a.b.c.d", "!!.@@.##"])
    def test_malformed_tokens_are_rejected(self, token: str) -> None:
        with pytest.raises(UnauthenticatedError):
            verify_token(token, _SECRET)


class TestResolveUserId:
    def test_bearer_token_with_secret(self) -> None:
        token = create_token("user-42", _SECRET)
        assert resolve_user_id(f"Bearer {token}", None, _SECRET) == "user-42"

    def test_secret_ignores_dev_header(self) -> None:
        with pytest.raises(UnauthenticatedError):
            resolve_user_id(None, "user-42", _SECRET)

    def test_wrong_scheme_is_rejected(self) -> None:
        with pytest.raises(UnauthenticatedError):
            resolve_user_id("Basic dXNlcjpwYXNz", None, _SECRET)

    def test_dev_header_without_secret(self) -> None:
        assert resolve_user_id(None, " user-42 ", "") == "user-42"

    def test_no_credentials_without_secret(self) -> None:
        with pytest.raises(UnauthenticatedError):
            resolve_user_id(None, "   ", "")
