"""
Google OAuth2 credential store.

Holds the OAuth client configuration and the current token pair for the
Drive account the backend uploads into. The pair is persisted to a local
JSON file ({"access_token", "refresh_token", "expiry"}) after every code
exchange and every refresh. Persisting goes through one lock so a refresh
and a concurrent exchange can't interleave their writes.
"""

import json
import os
import threading
from datetime import datetime
from typing import Optional

import requests
import structlog
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from oauthlib.oauth2.rfc6749.errors import OAuth2Error

from manp_api.core.config import settings
from manp_api.core.exceptions import CredentialError
from manp_api.core.time_utils import UTC

logger = structlog.get_logger()

SCOPES = ["https://www.googleapis.com/auth/drive.file"]
AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
TOKEN_URI = "https://oauth2.googleapis.com/token"


def _parse_expiry(value: Optional[str]) -> Optional[datetime]:
    # google-auth compares expiry against a naive UTC clock
    if not value:
        return None
    expiry = datetime.fromisoformat(value)
    if expiry.tzinfo is not None:
        expiry = expiry.astimezone(UTC).replace(tzinfo=None)
    return expiry


class CredentialStore:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        token_path: str,
        scopes=None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.token_path = token_path
        self.scopes = list(scopes or SCOPES)
        self._token = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls) -> "CredentialStore":
        return cls(
            client_id=settings.CLIENT_ID,
            client_secret=settings.CLIENT_SECRET,
            redirect_uri=settings.REDIRECT_URI,
            token_path=settings.TOKEN_PATH,
        )

    @property
    def has_token(self) -> bool:
        token = self._token or {}
        return bool(token.get("access_token") or token.get("refresh_token"))

    @property
    def token(self) -> Optional[dict]:
        return dict(self._token) if self._token else None

    def _client_config(self) -> dict:
        return {
            "web": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": AUTH_URI,
                "token_uri": TOKEN_URI,
                "redirect_uris": [self.redirect_uri],
            }
        }

    def _flow(self) -> Flow:
        # No PKCE verifier: the URL and the code exchange happen in different requests
        return Flow.from_client_config(
            self._client_config(),
            scopes=self.scopes,
            redirect_uri=self.redirect_uri,
            autogenerate_code_verifier=False,
        )

    def authorization_url(self) -> str:
        """Consent URL asking for offline (refresh token) access."""
        url, _state = self._flow().authorization_url(access_type="offline", prompt="consent")
        return url

    def exchange_code(self, code: str) -> dict:
        """Trade an authorization code for a token pair and persist it."""
        if not code:
            raise CredentialError("Missing authorization code.")

        flow = self._flow()
        with self._lock:
            try:
                flow.fetch_token(code=code)
            except (OAuth2Error, GoogleAuthError, requests.RequestException) as e:
                logger.error("oauth_code_exchange_failed", error=str(e))
                raise CredentialError("Failed to exchange authorization code.") from e
            self._persist(flow.credentials)

        logger.info("oauth_code_exchanged", token_path=self.token_path)
        return self.token

    def load(self) -> bool:
        """Read a previously persisted token pair. Returns False if none is usable."""
        if not os.path.isfile(self.token_path):
            logger.info("oauth_token_missing", token_path=self.token_path)
            return False
        try:
            with open(self.token_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("oauth_token_unreadable", token_path=self.token_path, error=str(e))
            return False

        with self._lock:
            self._token = {
                "access_token": data.get("access_token"),
                "refresh_token": data.get("refresh_token"),
                "expiry": data.get("expiry"),
            }
        logger.info("oauth_token_loaded", token_path=self.token_path)
        return self.has_token

    def credentials(self) -> Credentials:
        """
        Authorized credentials for the Google API client.
        Refreshes an expired access token first and persists the new pair.
        """
        with self._lock:
            if not self.has_token:
                raise CredentialError("Google Drive is not authorized. Visit /auth first.")

            creds = Credentials(
                token=self._token.get("access_token"),
                refresh_token=self._token.get("refresh_token"),
                token_uri=TOKEN_URI,
                client_id=self.client_id,
                client_secret=self.client_secret,
                scopes=self.scopes,
                expiry=_parse_expiry(self._token.get("expiry")),
            )
            if creds.valid:
                return creds

            if not creds.refresh_token:
                raise CredentialError("Access token expired and no refresh token is stored.")
            try:
                creds.refresh(Request())
            except GoogleAuthError as e:
                logger.error("oauth_refresh_failed", error=str(e))
                raise CredentialError("Failed to refresh Google access token.") from e
            self._persist(creds)
            logger.info("oauth_token_refreshed")
            return creds

    def record_refresh(self, creds: Credentials) -> None:
        """
        Hook for API wrappers: call after a request made with `creds`.
        Persists the pair if the client rotated the access token on its own.
        """
        with self._lock:
            if self._token and creds.token == self._token.get("access_token"):
                return
            self._persist(creds)
        logger.info("oauth_token_rotated")

    def _persist(self, creds: Credentials) -> None:
        # Caller holds self._lock
        previous = self._token or {}
        token = {
            "access_token": creds.token,
            # Refresh responses usually omit the refresh token
            "refresh_token": creds.refresh_token or previous.get("refresh_token"),
            "expiry": creds.expiry.isoformat() if creds.expiry else None,
        }
        directory = os.path.dirname(os.path.abspath(self.token_path))
        os.makedirs(directory, exist_ok=True)
        tmp_path = f"{self.token_path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(token, f)
        os.replace(tmp_path, self.token_path)
        self._token = token
