from typing import Any, Dict

import requests
from requests import RequestException

from artisan_market.domain.errors import AuthError
from artisan_market.utils.logging import get_logger
from artisan_market.utils.retry import http_retry
from artisan_market.utils.settings import (
    GOOGLE_CLIENT_ID,
    GOOGLE_CLIENT_SECRET,
    GOOGLE_REDIRECT_URI,
)

logger = get_logger(__name__)

TOKEN_URL = "https://oauth2.googleapis.com/token"
TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"


class GoogleOAuthClient:
    """Authorization-code exchange plus ID token verification."""

    def __init__(self, client_id: str | None = None, client_secret: str | None = None, timeout: int = 10):
        self.client_id = client_id or GOOGLE_CLIENT_ID
        self.client_secret = client_secret or GOOGLE_CLIENT_SECRET
        self.timeout = timeout

    @http_retry()
    def _exchange(self, code: str) -> requests.Response:
        return requests.post(
            TOKEN_URL,
            data={
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": GOOGLE_REDIRECT_URI,
                "grant_type": "authorization_code",
            },
            timeout=self.timeout,
        )

    @http_retry()
    def _tokeninfo(self, id_token: str) -> requests.Response:
        return requests.get(TOKENINFO_URL, params={"id_token": id_token}, timeout=self.timeout)

    @staticmethod
    def _json(resp: requests.Response) -> Dict[str, Any]:
        try:
            data = resp.json()
        except ValueError as e:
            raise AuthError("Google sign-in returned an invalid response") from e
        if not isinstance(data, dict):
            raise AuthError("Google sign-in returned an invalid response")
        return data

    def fetch_profile(self, code: str) -> Dict[str, Any]:
        """Returns {sub, email, name, picture} for a valid authorization code."""
        try:
            token_resp = self._exchange(code)
        except RequestException as e:
            raise AuthError(f"Google sign-in unavailable: {e}") from e
        if token_resp.status_code != 200:
            logger.warning(f"Google code exchange failed {token_resp.status_code}")
            raise AuthError("Invalid Google authorization code")

        id_token = self._json(token_resp).get("id_token")
        if not id_token:
            raise AuthError("Google did not return an ID token")

        try:
            info_resp = self._tokeninfo(id_token)
        except RequestException as e:
            raise AuthError(f"Google sign-in unavailable: {e}") from e
        if info_resp.status_code != 200:
            raise AuthError("Invalid Google ID token")

        claims = self._json(info_resp)
        if claims.get("aud") != self.client_id:
            raise AuthError("Google token was issued for another client")
        if not claims.get("email"):
            raise AuthError("Google account has no email")

        return {
            "sub": claims.get("sub"),
            "email": claims["email"].lower(),
            "name": claims.get("name"),
            "picture": claims.get("picture"),
        }
