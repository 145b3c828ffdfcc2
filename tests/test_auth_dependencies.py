"""
Tests for the session dependency (Bearer header or session cookie).

JWKS lookups and JWT decoding are mocked; no network calls are made.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from fastapi import HTTPException
from jwt.exceptions import ExpiredSignatureError, InvalidSignatureError

from invoice_dashboard.auth.dependencies import (
    extract_token,
    get_authenticated_user,
    verify_access_token,
)


@pytest.fixture
def mock_jwks():
    jwks_client = MagicMock()
    jwks_client.get_signing_key_from_jwt.return_value = SimpleNamespace(key="public-key")
    with patch("invoice_dashboard.auth.dependencies.get_jwks_client", return_value=jwks_client):
        yield jwks_client


class TestExtractToken:

    def test_bearer_header(self):
        assert extract_token("Bearer abc.def.ghi", None) == "abc.def.ghi"

    def test_header_wins_over_cookie(self):
        assert extract_token("Bearer from-header", "from-cookie") == "from-header"

    def test_cookie_when_no_header(self):
        assert extract_token(None, "from-cookie") == "from-cookie"

    @pytest.mark.parametrize("header", ["abc", "Basic abc", "Bearer a b"])
    def test_malformed_header_is_401(self, header):
        with pytest.raises(HTTPException) as exc_info:
            extract_token(header, None)

        assert exc_info.value.status_code == 401

    def test_nothing_is_401(self):
        with pytest.raises(HTTPException) as exc_info:
            extract_token(None, None)

        assert exc_info.value.detail == {"error": "unauthorized", "details": "Missing Authorization header"}


class TestVerifyAccessToken:

    def test_valid_token_returns_subject(self, mock_jwks):
        with patch("invoice_dashboard.auth.dependencies.decode", return_value={"sub": "user-123"}) as decode:
            assert verify_access_token("token") == "user-123"

        kwargs = decode.call_args.kwargs
        assert kwargs["algorithms"] == ["ES256"]
        assert kwargs["audience"] == "authenticated"
        assert kwargs["issuer"] == "http://localhost:54321/auth/v1"

    @pytest.mark.parametrize(
        ("error", "code"),
        [
            (ExpiredSignatureError("expired"), "token_expired"),
            (InvalidSignatureError("bad signature"), "invalid_token"),
        ],
    )
    def test_invalid_tokens_are_401(self, mock_jwks, error, code):
        with patch("invoice_dashboard.auth.dependencies.decode", side_effect=error):
            with pytest.raises(HTTPException) as exc_info:
                verify_access_token("token")

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail["error"] == code

    def test_missing_subject_is_401(self, mock_jwks):
        with patch("invoice_dashboard.auth.dependencies.decode", return_value={}):
            with pytest.raises(HTTPException) as exc_info:
                verify_access_token("token")

        assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_get_authenticated_user_from_cookie(mock_jwks):
    with patch("invoice_dashboard.auth.dependencies.decode", return_value={"sub": "user-123"}):
        user = await get_authenticated_user(authorization=None, session="cookie-token")

    assert user.user_id == "user-123"
    assert user.access_token == "cookie-token"
