"""Shared test doubles: a scripted fake network and a fake local prover."""

from collections import deque
from typing import Any, Deque, Dict, List, Tuple

import httpx

from aleo_client.network.config import ClientConfig, PollConfig, RetryConfig
from aleo_client.network.models import Authorization, Transaction

ENDPOINT = "https://api.test.network"
AUTH_URL = "https://auth.test.network"
PROVER_URL = "https://prover.test.network"

FAST_RETRY = RetryConfig(max_retries=3, min_delay=0.001, max_delay=0.01, jitter=False)
FAST_POLL = PollConfig(initial_delay=0.001, max_delay=0.01)

TX_ID = "at1qyqszqgpqyqszqgpqyqszqgpqyqszqgpqyqszqgpqyqszqgpqyqsxyz"


class FakeNetwork:
    """
    Scripted HTTP backend for httpx.MockTransport.

    Responses are queued per (method, path); the last queued response keeps
    answering once the queue is drained. Unscripted routes answer 404.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Deque[Any]] = {}
        self.calls: List[httpx.Request] = []

    def add(self, method: str, path: str, *responses: Any) -> "FakeNetwork":
        self.routes.setdefault((method, path), deque()).extend(responses)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, text="not found")

        item = queue.popleft() if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise type(item)(str(item), request=request)
        if isinstance(item, int):
            return httpx.Response(item)
        status, kwargs = item
        return httpx.Response(status, **kwargs)

    def count(self, method: str, path: str) -> int:
        return sum(
            1
            for request in self.calls
            if request.method == method and request.url.path == path
        )

    def requests_to(self, method: str, path: str) -> List[httpx.Request]:
        return [
            request
            for request in self.calls
            if request.method == method and request.url.path == path
        ]

    def mock_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def add_token(self, token: str = "session-token", exp: int = 4_102_444_800):
        """Script the authentication endpoint for consumer 'consumer'."""
        return self.add(
            "POST",
            "/jwts/consumer",
            (200, {"json": {"exp": exp}, "headers": {"Authorization": f"Bearer {token}"}}),
        )


def json_response(body: Any, status: int = 200) -> Tuple[int, Dict[str, Any]]:
    return status, {"json": body}


def text_response(body: str, status: int = 200) -> Tuple[int, Dict[str, Any]]:
    return status, {"text": body}


def make_config(**overrides: Any) -> ClientConfig:
    values: Dict[str, Any] = dict(
        endpoint=ENDPOINT,
        network="testnet",
        auth_url=AUTH_URL,
        prover_url=PROVER_URL,
        retry=FAST_RETRY,
        poll=FAST_POLL,
        confirmation_timeout=2.0,
        program_timeout=2.0,
    )
    values.update(overrides)
    return ClientConfig(**values)


class FakeProver:
    """LocalProver double returning a canned transaction."""

    def __init__(self, tx_id: str = "at1local"):
        self.tx_id = tx_id
        self.calls: List[Authorization] = []

    async def execute(self, authorization: Authorization) -> Transaction:
        self.calls.append(authorization)
        return Transaction.from_json({"type": "execute", "id": self.tx_id})


