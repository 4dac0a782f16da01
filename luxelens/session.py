"""Password sign-in against the hosted auth service (Supabase GoTrue).

Only the two calls the workflow needs are wrapped: exchanging e-mail and
password for an access token, and revoking that token again.
"""

from __future__ import annotations

from dataclasses import dataclass

import requests

from .config import SupabaseSettings
from .errors import AuthenticationError

__all__ = ["Session", "SupabaseAuth"]


@dataclass(frozen=True)
class Session:
    user_id: str
    email: str | None = None
    access_token: str | None = None


@dataclass
class SupabaseAuth:
    settings: SupabaseSettings

    def _headers(self, access_token: str | None = None) -> dict[str, str]:
        headers = {"apikey": self.settings.anon_key, "Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    def sign_in(self, email: str, password: str) -> Session:
        try:
            response = requests.post(
                f"{self.settings.url}/auth/v1/token",
                params={"grant_type": "password"},
                json={"email": email, "password": password},
                headers=self._headers(),
                timeout=self.settings.timeout,
            )
        except requests.RequestException as exc:
            raise AuthenticationError("failed to reach the auth service") from exc

        if response.status_code in (400, 401, 403):
            raise AuthenticationError("invalid e-mail or password")
        try:
            response.raise_for_status()
            data = response.json()
        except requests.HTTPError as exc:
            raise AuthenticationError(f"auth service error: HTTP {response.status_code}") from exc
        except ValueError as exc:
            raise AuthenticationError("invalid JSON payload from the auth service") from exc

        user = data.get("user") if isinstance(data, dict) else None
        token = data.get("access_token") if isinstance(data, dict) else None
        if not isinstance(user, dict) or not user.get("id") or not token:
            raise AuthenticationError("auth service response lacks a user or token")
        return Session(user_id=str(user["id"]), email=user.get("email") or email, access_token=token)

    def sign_out(self, session: Session) -> None:
        if not session.access_token:
            return
        try:
            response = requests.post(
                f"{self.settings.url}/auth/v1/logout",
                headers=self._headers(session.access_token),
                timeout=self.settings.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise AuthenticationError("failed to revoke the session") from exc
