from __future__ import annotations

from unittest.mock import patch

import pytest
import requests

from luxelens.config import SupabaseSettings
from luxelens.errors import AuthenticationError
from luxelens.session import Session, SupabaseAuth


class _FakeResponse:
    def __init__(self, status_code: int = 200, body: object = None):
        self.status_code = status_code
        self._body = body

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(response=self)

    def json(self) -> object:
        if self._body is None:
            raise ValueError("no body")
        return self._body


def _auth() -> SupabaseAuth:
    return SupabaseAuth(SupabaseSettings(url="https://project.supabase.co", anon_key="anon-key"))


def test_sign_in_returns_session() -> None:
    body = {"access_token": "jwt", "user": {"id": "user-123", "email": "ana@example.com"}}

    with patch("requests.post", return_value=_FakeResponse(200, body)) as mock_post:
        session = _auth().sign_in("ana@example.com", "secret")

    assert session == Session(user_id="user-123", email="ana@example.com", access_token="jwt")
    assert mock_post.call_args.args[0] == "https://project.supabase.co/auth/v1/token"
    assert mock_post.call_args.kwargs["params"] == {"grant_type": "password"}
    assert mock_post.call_args.kwargs["json"] == {"email": "ana@example.com", "password": "secret"}
    assert mock_post.call_args.kwargs["headers"]["apikey"] == "anon-key"


def test_sign_in_rejects_bad_credentials() -> None:
    with patch("requests.post", return_value=_FakeResponse(400, {"error": "invalid_grant"})):
        with pytest.raises(AuthenticationError, match="invalid"):
            _auth().sign_in("ana@example.com", "wrong")


def test_sign_in_wraps_network_errors() -> None:
    with patch("requests.post", side_effect=requests.Timeout):
        with pytest.raises(AuthenticationError):
            _auth().sign_in("ana@example.com", "secret")


def test_sign_in_requires_user_and_token() -> None:
    with patch("requests.post", return_value=_FakeResponse(200, {"access_token": "jwt"})):
        with pytest.raises(AuthenticationError):
            _auth().sign_in("ana@example.com", "secret")


def test_sign_out_revokes_token() -> None:
    session = Session(user_id="user-123", access_token="jwt")

    with patch("requests.post", return_value=_FakeResponse(204)) as mock_post:
        _auth().sign_out(session)

    assert mock_post.call_args.args[0] == "https://project.supabase.co/auth/v1/logout"
    assert mock_post.call_args.kwargs["headers"]["Authorization"] == "Bearer jwt"


def test_sign_out_without_token_is_a_no_op() -> None:
    with patch("requests.post") as mock_post:
        _auth().sign_out(Session(user_id="local"))

    mock_post.assert_not_called()
