"""
Error taxonomy for the network client.

Every failure surfaced by the client derives from ClientError. Non-2xx HTTP
responses are mapped to exceptions in exactly one place, classify(), so
that all endpoints agree on what is retryable and what is not.
"""

from __future__ import annotations

from typing import Optional

import httpx


class ClientError(Exception):
    """Base exception for network client errors."""

    pass


class ConfigError(ClientError):
    """Raised when the client configuration is invalid."""

    pass


class TransportError(ClientError):
    """Raised when a request could not be delivered after all retries."""

    pass


class ApiError(ClientError):
    """Raised for a non-2xx response that has no more specific meaning."""

    def __init__(self, status: int, message: str):
        super().__init__(f"API error {status}: {message}")
        self.status = status
        self.message = message


class BadRequestError(ApiError):
    """Raised on 400 (malformed request, insufficient balance, ...)."""

    def __init__(self, message: str):
        super().__init__(400, message)


class AuthFailedError(ApiError):
    """Raised on 401: the session token was rejected."""

    def __init__(self, message: str):
        super().__init__(401, message)


class NotFoundError(ApiError):
    """Raised on 404."""

    def __init__(self, message: str):
        super().__init__(404, message)


class RateLimitedError(ApiError):
    """Raised on 429."""

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(429, message)
        self.retry_after = retry_after


class CredentialsRequiredError(ClientError):
    """Raised when an authenticated call is made without consumer credentials."""

    def __init__(self) -> None:
        super().__init__("consumer_id and api_key are required for this call")


class AuthFetchFailedError(ClientError):
    """Raised when the authentication endpoint refuses to issue a token."""

    def __init__(self, status: int, message: str):
        super().__init__(f"Failed to fetch session token: {status} - {message}")
        self.status = status
        self.message = message


class BadResponseError(ClientError):
    """Raised when the server answers 2xx with a payload we cannot use."""

    pass


class TransactionRejectedError(ClientError):
    """Raised when the network reports a transaction as rejected."""

    def __init__(self, tx_id: str, reason: str):
        super().__init__(f"Transaction {tx_id} was rejected: {reason}")
        self.tx_id = tx_id
        self.reason = reason


class PollTimeoutError(ClientError):
    """Raised when a polled condition did not hold within its budget."""

    def __init__(self, operation: str, timeout: float):
        super().__init__(f"{operation} did not complete within {timeout:g}s")
        self.operation = operation
        self.timeout = timeout


class TransactionTimeoutError(PollTimeoutError):
    """Raised when a transaction is not confirmed within the budget."""

    def __init__(self, tx_id: str, timeout: float):
        super().__init__(f"confirmation of transaction {tx_id}", timeout)
        self.tx_id = tx_id


class ProgramTimeoutError(PollTimeoutError):
    """Raised when a program does not become available within the budget."""

    def __init__(self, program_id: str, timeout: float):
        super().__init__(f"availability of program {program_id}", timeout)
        self.program_id = program_id


def classify(
    status: int, body: str, retry_after: Optional[float] = None
) -> ApiError:
    """Map a non-2xx status code and raw body to the matching error."""
    message = body or f"HTTP {status}"
    if status == 400:
        return BadRequestError(message)
    if status == 401:
        return AuthFailedError(message)
    if status == 404:
        return NotFoundError(message)
    if status == 429:
        return RateLimitedError(message, retry_after=retry_after)
    return ApiError(status, message)


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Parse a Retry-After header given in seconds; dates are ignored."""
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


def classify_response(response: httpx.Response) -> ApiError:
    """classify() applied to an httpx response."""
    return classify(
        response.status_code,
        response.text,
        retry_after=parse_retry_after(response.headers.get("Retry-After")),
    )


def is_transient(error: BaseException) -> bool:
    """Whether an error is worth retrying (transport failures and 5xx)."""
    if isinstance(error, TransportError):
        return True
    return isinstance(error, ApiError) and error.status >= 500
