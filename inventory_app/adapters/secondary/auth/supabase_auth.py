"""
Hosted authentication over its HTTP API.

Only the transport lives here; validation and message mapping belong to
``AuthService``.
"""
import logging
from typing import Any, Dict, Optional

import requests

from inventory_app.core.exceptions import AuthenticationError
from inventory_app.core.ports.external import AuthPort, Payload

logger = logging.getLogger(__name__)


class SupabaseAuth(AuthPort):
    def __init__(self, base_url: str, api_key: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self, access_token: Optional[str] = None) -> Dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {access_token or self.api_key}",
            "Content-Type": "application/json",
        }

    def _request(
        self,
        method: str,
        path: str,
        access_token: Optional[str] = None,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Payload:
        response = self.session.request(
            method,
            f"{self.base_url}/auth/v1{path}",
            json=json,
            params=params,
            headers=self._headers(access_token),
            timeout=self.timeout,
        )
        logger.debug(f"Auth {method} {path} - Status: {response.status_code}")

        try:
            body = response.json() if response.content else {}
        except ValueError:
            body = {"message": response.text}

        if not 200 <= response.status_code < 300:
            message = (
                body.get("msg")
                or body.get("error_description")
                or body.get("message")
                or body.get("error")
                or f"Auth request failed with status {response.status_code}"
            )
            raise AuthenticationError(message)
        return body

    def sign_up(self, email: str, password: str, metadata: Optional[Payload] = None) -> Payload:
        return self._request(
            "POST", "/signup",
            json={"email": email, "password": password, "data": metadata or {}},
        )

    def sign_in_with_password(self, email: str, password: str) -> Payload:
        return self._request(
            "POST", "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )

    def sign_out(self, access_token: str) -> None:
        self._request("POST", "/logout", access_token=access_token)

    def reset_password_for_email(self, email: str, redirect_to: Optional[str] = None) -> None:
        params = {"redirect_to": redirect_to} if redirect_to else None
        self._request("POST", "/recover", json={"email": email}, params=params)

    def update_user(self, access_token: str, attributes: Payload) -> Payload:
        return self._request("PUT", "/user", access_token=access_token, json=attributes)

    def get_user(self, access_token: str) -> Payload:
        return self._request("GET", "/user", access_token=access_token)
