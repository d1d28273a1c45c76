"""
Service Account Token Provider - Vertex AI bearer tokens from a service account key.

Flow:
    1. Load the service account JSON key
    2. Sign a JWT assertion (RS256) for the requested scopes
    3. Exchange it at the key's token_uri for an OAuth2 access token
    4. Reuse the token until shortly before it expires

Setup:
    1. Create a key: IAM -> Service Accounts -> Keys -> Add key (JSON)
    2. pip install "generative-ai[service-account]"
    3. export GCP_SERVICE_ACCOUNT_FILE=/path/to/key.json

Example:
    >>> endpoint = VertexEndpoint(
    ...     project_id="my-project",
    ...     region="us-central1",
    ...     token_provider=ServiceAccountCredentials("service-account.json"),
    ... )
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import httpx
import jwt

from generative_ai.config.errors import (
    AuthenticationError,
    ConfigurationError,
    TransportError,
)

logger = logging.getLogger(__name__)

__all__ = ["GCP_AUTH_SCOPE", "GOOGLE_TOKEN_URI", "ServiceAccountCredentials"]

GCP_AUTH_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"

ASSERTION_LIFETIME_SECONDS = 3600
# Cached tokens are renewed this long before they expire
EXPIRY_MARGIN_SECONDS = 300

_REQUIRED_KEY_FIELDS = ("client_email", "private_key")


class ServiceAccountCredentials:
    """
    Async token provider for VertexEndpoint.token_provider.

    One token is cached per instance; concurrent callers share a single
    exchange through a lock.
    """

    def __init__(
        self,
        key: str | Path | dict[str, Any],
        scopes: Sequence[str] = (GCP_AUTH_SCOPE,),
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            key: Path to the JSON key file, or its parsed contents
            scopes: OAuth scopes to request
            timeout: Token exchange timeout in seconds
            http_client: Pre-built client for the exchange (tests). Not closed.

        Raises:
            ConfigurationError: Key file missing, unreadable or incomplete
        """
        self.key = dict(key) if isinstance(key, dict) else self._load_key(Path(key))
        missing = [name for name in _REQUIRED_KEY_FIELDS if not self.key.get(name)]
        if missing:
            raise ConfigurationError(
                f"Service account key is missing {', '.join(missing)}",
                {"missing": missing},
            )

        self.scopes = list(scopes)
        self.timeout = timeout
        self._client = http_client
        self._token: str | None = None
        self._expires_at = 0.0
        self._lock = asyncio.Lock()

    def __repr__(self) -> str:
        return f"ServiceAccountCredentials({self.client_email})"

    @staticmethod
    def _load_key(path: Path) -> dict[str, Any]:
        if not path.is_file():
            raise ConfigurationError(f"Service account key file not found: {path}")
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Invalid service account key file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid service account key file {path}")
        return data

    @property
    def client_email(self) -> str:
        return str(self.key["client_email"])

    @property
    def token_uri(self) -> str:
        return str(self.key.get("token_uri") or GOOGLE_TOKEN_URI)

    async def __call__(self) -> str:
        async with self._lock:
            token = self._token
            if token is None or time.time() >= self._expires_at - EXPIRY_MARGIN_SECONDS:
                token = await self._refresh()
            return token

    def create_assertion(self, now: int | None = None) -> str:
        """
        Signed JWT assertion for the token exchange.

        Raises:
            ConfigurationError: Private key cannot sign
        """
        issued_at = int(time.time()) if now is None else now
        payload = {
            "iss": self.client_email,
            "scope": " ".join(self.scopes),
            "aud": self.token_uri,
            "iat": issued_at,
            "exp": issued_at + ASSERTION_LIFETIME_SECONDS,
        }
        headers = {"kid": self.key["private_key_id"]} if self.key.get("private_key_id") else None

        try:
            return jwt.encode(payload, self.key["private_key"], algorithm="RS256", headers=headers)
        except (ValueError, TypeError, jwt.PyJWTError) as e:
            raise ConfigurationError(
                f"Service account private key cannot sign assertions: {e}"
            ) from e

    async def _refresh(self) -> str:
        """Exchange a fresh assertion for an access token."""
        data = {"grant_type": JWT_BEARER_GRANT, "assertion": self.create_assertion()}

        try:
            if self._client is not None:
                response = await self._client.post(self.token_uri, data=data, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.token_uri, data=data)
        except httpx.RequestError as e:
            logger.warning("Token exchange for %s failed: %s", self.client_email, e)
            raise TransportError(
                f"Token exchange failed: {e}", {"token_uri": self.token_uri}
            ) from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if not response.is_success:
            reason = body.get("error_description") or body.get("error") or response.reason_phrase
            raise AuthenticationError(
                f"Token exchange rejected: {response.status_code}: {reason}",
                response.status_code,
                {"error": body.get("error")} if body.get("error") else None,
            )

        token = body.get("access_token")
        if not token:
            raise AuthenticationError("Token exchange response has no access_token")

        expires_in = int(body.get("expires_in", ASSERTION_LIFETIME_SECONDS))
        self._token = str(token)
        self._expires_at = time.time() + expires_in
        logger.info(
            "Access token obtained for %s (expires in %ds)", self.client_email, expires_in
        )
        return self._token
