"""
Base network API client.

Holds the plumbing every endpoint group shares: configuration, the retrying
transport, the session credentials and status-code classification.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from aleo_client.network.config import ClientConfig
from aleo_client.network.credentials import Credentials
from aleo_client.network.errors import BadResponseError, classify_response
from aleo_client.network.transport import RetryingTransport


class BaseNetworkClient:
    """
    Base class for endpoint groups.

    Subclasses issue requests through _send() and decide per endpoint which
    statuses are values (e.g. 404 as "absent") before calling
    _raise_for_status().
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: RetryingTransport,
        credentials: Credentials,
    ):
        self.config = config
        self.transport = transport
        self.credentials = credentials

    def api_url(self, *segments: object) -> str:
        return self.config.api_url(*segments)

    async def _send(
        self,
        method: str,
        url: str,
        *,
        authenticated: bool = False,
        headers: Optional[Dict[str, str]] = None,
        json_body: Any = None,
        content: Optional[str] = None,
    ) -> httpx.Response:
        request_headers: Dict[str, str] = dict(headers or {})
        if authenticated:
            request_headers.update(await self.credentials.auth_headers())
        response = await self.transport.request(
            method,
            url,
            headers=request_headers,
            json_body=json_body,
            content=content,
        )
        if authenticated and response.status_code == 401:
            # Rejected token; the next authenticated call fetches a new one
            self.credentials.invalidate()
        return response

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if not response.is_success:
            raise classify_response(response)

    @staticmethod
    def _json(response: httpx.Response, what: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise BadResponseError(f"Invalid JSON in {what} response: {e}") from e
