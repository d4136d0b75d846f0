"""
Tests for bearer token verification.
"""
import pytest
from unittest.mock import patch, MagicMock

from gateway.auth import firebase
from gateway.auth.dependencies import get_current_user
from gateway.exceptions import AuthError
from fastapi.security import HTTPAuthorizationCredentials


def _bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestVerifyFirebaseToken:
    """Tests for verify_firebase_token."""

    def test_not_initialized(self, monkeypatch):
        monkeypatch.setattr(firebase, "_firebase_app", None)

        with pytest.raises(RuntimeError):
            firebase.verify_firebase_token("token")

    def test_valid_token(self, monkeypatch):
        app = MagicMock()
        monkeypatch.setattr(firebase, "_firebase_app", app)

        with patch.object(firebase.auth, "verify_id_token", return_value={"uid": "u1"}) as verify:
            claims = firebase.verify_firebase_token("token")

        assert claims == {"uid": "u1"}
        verify.assert_called_once_with("token", app=app)

    def test_sdk_errors_become_value_error(self, monkeypatch):
        monkeypatch.setattr(firebase, "_firebase_app", MagicMock())

        with patch.object(firebase.auth, "verify_id_token", side_effect=Exception("revoked")):
            with pytest.raises(ValueError, match="revoked"):
                firebase.verify_firebase_token("token")

    def test_credentials_must_be_path_or_json(self):
        with pytest.raises(ValueError):
            firebase._load_credentials("not-a-file-and-not-json")


class TestGetCurrentUser:
    """Tests for the get_current_user dependency."""

    @pytest.mark.asyncio
    async def test_missing_credentials(self):
        with pytest.raises(AuthError) as exc_info:
            await get_current_user(None)
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_returns_uid(self):
        with patch("gateway.auth.dependencies.verify_firebase_token", return_value={"uid": "u1"}):
            assert await get_current_user(_bearer("token")) == "u1"

    @pytest.mark.asyncio
    async def test_uninitialized_sdk_is_unauthorized(self):
        with patch(
            "gateway.auth.dependencies.verify_firebase_token",
            side_effect=RuntimeError("not initialized")
        ):
            with pytest.raises(AuthError):
                await get_current_user(_bearer("token"))

    @pytest.mark.asyncio
    async def test_token_without_uid(self):
        with patch("gateway.auth.dependencies.verify_firebase_token", return_value={"email": "a@b.c"}):
            with pytest.raises(AuthError):
                await get_current_user(_bearer("token"))
