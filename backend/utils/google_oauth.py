import json
from urllib import request, error, parse

from models.user import GoogleProfile
from utils.errors import Unauthorized

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
GOOGLE_SCOPES = "openid profile email"


class GoogleOAuthClient:
    """Authorization-code flow against Google's OAuth 2.0 endpoints."""

    def __init__(self, client_id: str | None, client_secret: str | None, redirect_uri: str):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri

    def _require_config(self) -> tuple[str, str]:
        if not self.client_id or not self.client_secret:
            raise RuntimeError("Google OAuth client is not configured")
        return self.client_id, self.client_secret

    def authorization_url(self, state: str) -> str:
        client_id, _ = self._require_config()
        query = parse.urlencode({
            "client_id": client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": GOOGLE_SCOPES,
            "state": state,
        })
        return f"{GOOGLE_AUTH_URL}?{query}"

    def _exchange_code(self, code: str) -> str:
        client_id, client_secret = self._require_config()

        req = request.Request(
            url=GOOGLE_TOKEN_URL,
            data=parse.urlencode({
                "code": code,
                "client_id": client_id,
                "client_secret": client_secret,
                "redirect_uri": self.redirect_uri,
                "grant_type": "authorization_code",
            }).encode("utf-8"),
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            method="POST",
        )

        try:
            with request.urlopen(req, timeout=15) as resp:
                body = json.loads(resp.read().decode("utf-8"))
        except error.HTTPError as e:
            # Google answers 400 for reused or forged codes
            raise Unauthorized("Google sign-in failed") from e

        access_token = body.get("access_token")
        if not access_token:
            raise Unauthorized("Google sign-in failed")
        return access_token

    def _get_userinfo(self, access_token: str) -> dict:
        req = request.Request(
            url=GOOGLE_USERINFO_URL,
            headers={"Authorization": f"Bearer {access_token}"},
            method="GET",
        )
        try:
            with request.urlopen(req, timeout=15) as resp:
                return json.loads(resp.read().decode("utf-8"))
        except error.HTTPError as e:
            raise Unauthorized("Google sign-in failed") from e

    def fetch_profile(self, code: str) -> GoogleProfile:
        """Exchange ``code`` for the signed-in account. Blocking; call from a threadpool."""
        info = self._get_userinfo(self._exchange_code(code))
        if not info.get("sub"):
            raise Unauthorized("Google sign-in failed")

        return GoogleProfile(
            sub=info["sub"],
            name=info.get("name"),
            email=info.get("email"),
            picture=info.get("picture"),
        )
