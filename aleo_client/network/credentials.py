"""
Session token management.

Long-lived consumer credentials are exchanged for a short-lived bearer token
that is cached and renewed shortly before it expires.
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable, Dict, Optional

import structlog

from aleo_client.network.errors import (
    AuthFetchFailedError,
    BadResponseError,
    CredentialsRequiredError,
)
from aleo_client.network.metrics import ClientMetrics
from aleo_client.network.models import SessionToken
from aleo_client.network.transport import RetryingTransport

logger = structlog.get_logger()

BEARER_PREFIX = "Bearer "


class Credentials:
    """
    Consumer credentials plus the cached session token.

    The token is only ever replaced as a whole, and refreshes are serialized
    by a lock so concurrent callers holding an expired token share one fetch.
    """

    def __init__(
        self,
        transport: RetryingTransport,
        consumer_id: Optional[str] = None,
        api_key: Optional[str] = None,
        auth_url: str = "https://api.provable.com",
        api_key_header: str = "X-Provable-API-Key",
        safety_margin: float = 300.0,
        clock: Callable[[], float] = time.time,
        metrics: Optional[ClientMetrics] = None,
    ):
        self.consumer_id = consumer_id
        self.api_key = api_key
        self.auth_url = auth_url.rstrip("/")
        self.api_key_header = api_key_header
        self.safety_margin = safety_margin
        self._transport = transport
        self._clock = clock
        self._metrics = metrics or transport.metrics
        self._token: Optional[SessionToken] = None
        self._lock = asyncio.Lock()

    @property
    def configured(self) -> bool:
        return bool(self.consumer_id) and bool(self.api_key)

    @property
    def token(self) -> Optional[SessionToken]:
        return self._token

    def _cached(self) -> Optional[str]:
        token = self._token
        if token is not None and token.is_valid(self._clock(), self.safety_margin):
            return token.token
        return None

    async def get_valid_token(self) -> str:
        """
        Return a bearer token valid for at least the safety margin.

        Raises:
            CredentialsRequiredError: If no consumer credentials are configured
            AuthFetchFailedError: If the authentication endpoint refuses
            BadResponseError: If the token or its expiry cannot be read
        """
        cached = self._cached()
        if cached is not None:
            return cached

        async with self._lock:
            cached = self._cached()
            if cached is not None:
                return cached

            new_token = await self.fetch_token()
            self._token = new_token
            return new_token.token

    async def fetch_token(self) -> SessionToken:
        """Request a fresh token from the authentication endpoint."""
        if not self.configured:
            raise CredentialsRequiredError()

        url = f"{self.auth_url}/jwts/{self.consumer_id}"
        response = await self._transport.post(
            url, headers={self.api_key_header: self.api_key}
        )
        self._metrics.record_token_fetch()

        if not response.is_success:
            logger.error(
                "token.fetch_failed",
                consumer_id=self.consumer_id,
                status=response.status_code,
            )
            raise AuthFetchFailedError(
                response.status_code, response.text or "Failed to fetch session token"
            )

        auth_header = response.headers.get("Authorization")
        if auth_header is None:
            raise BadResponseError("Missing Authorization header")
        if not auth_header.startswith(BEARER_PREFIX):
            raise BadResponseError("Invalid Authorization header format")
        token = auth_header[len(BEARER_PREFIX):]

        try:
            body = response.json()
        except ValueError as e:
            raise BadResponseError(f"Failed to parse token response body: {e}") from e

        expires_at = body.get("exp") if isinstance(body, dict) else None
        if not isinstance(expires_at, int) or isinstance(expires_at, bool) or expires_at < 0:
            raise BadResponseError("Missing or invalid 'exp' field in token response")

        logger.info(
            "token.refreshed",
            consumer_id=self.consumer_id,
            expires_at=expires_at,
        )
        return SessionToken(token=token, expires_at=expires_at)

    async def auth_headers(self) -> Dict[str, str]:
        token = await self.get_valid_token()
        return {"Authorization": f"{BEARER_PREFIX}{token}"}

    def invalidate(self) -> None:
        """Drop the cached token so the next call fetches a new one."""
        self._token = None
