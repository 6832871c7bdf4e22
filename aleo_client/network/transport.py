"""
HTTP transport with bounded retries.

All outbound requests of the client go through RetryingTransport. Connection
failures and responses that is_transient() accepts (5xx) are retried with
exponential backoff; other non-2xx responses are handed back on the first
attempt so the caller can react.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
import structlog

from aleo_client.network.config import RetryConfig
from aleo_client.network.errors import (
    ApiError,
    TransportError,
    classify_response,
    is_transient,
)
from aleo_client.network.metrics import ClientMetrics
from aleo_client.network.retry import retry_with_backoff

logger = structlog.get_logger()

USER_AGENT = "aleo-tx-client/0.1.0"


class _ErrorResponse(Exception):
    """Carries a non-2xx response and its classification through the retry loop."""

    def __init__(self, response: httpx.Response, error: ApiError):
        super().__init__(str(error))
        self.response = response
        self.error = error


def _is_retryable(error: BaseException) -> bool:
    if isinstance(error, _ErrorResponse):
        return is_transient(error.error)
    return isinstance(error, httpx.TransportError)


class RetryingTransport:
    """Thin wrapper over httpx.AsyncClient adding transient-failure retries."""

    def __init__(
        self,
        retry: Optional[RetryConfig] = None,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
        metrics: Optional[ClientMetrics] = None,
    ):
        """
        Initialize the transport.

        Args:
            retry: Retry policy (defaults to RetryConfig())
            timeout: Request timeout in seconds, used when no client is given
            client: Pre-built httpx client (tests inject a MockTransport here)
            metrics: Metrics sink shared with the owning client
        """
        self.retry = retry or RetryConfig()
        self.metrics = metrics or ClientMetrics()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        )

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        json_body: Any = None,
        content: Optional[str] = None,
    ) -> httpx.Response:
        """
        Send a request, retrying transient failures.

        Returns:
            The response. Non-2xx responses are returned, not raised; a 5xx
            response is returned once the retry budget is spent.

        Raises:
            TransportError: If the request could not be delivered at all
        """
        operation = f"{method} {url}"

        async def send() -> httpx.Response:
            self.metrics.record_request()
            response = await self._client.request(
                method, url, headers=headers, json=json_body, content=content
            )
            if not response.is_success:
                raise _ErrorResponse(response, classify_response(response))
            return response

        try:
            return await retry_with_backoff(
                send,
                self.retry,
                operation_name=operation,
                retry_on=_is_retryable,
                on_retry=lambda e: self.metrics.record_retry(str(e)),
            )
        except _ErrorResponse as e:
            # Non-transient statuses arrive here on the first attempt
            return e.response
        except httpx.TransportError as e:
            self.metrics.record_transport_failure(str(e))
            logger.error("transport.failed", operation=operation, error=str(e))
            raise TransportError(f"{operation} failed: {e}") from e

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "RetryingTransport":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
