import sys
from pathlib import Path
from typing import Any, List, Optional

import httpx
import pytest
import pytest_asyncio

# Ensure project root is on sys.path so `import aleo_client` works when running pytest from root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from aleo_client.network.client import AleoClient  # noqa: E402
from aleo_client.network.models import Authorization, Transaction  # noqa: E402
from tests.helpers import TX_ID, FakeNetwork, make_config  # noqa: E402


@pytest.fixture
def network() -> FakeNetwork:
    return FakeNetwork()


@pytest.fixture
def authorization() -> Authorization:
    return Authorization.from_json(
        {"requests": [{"program_id": "hello.aleo", "function_name": "main"}], "transitions": []}
    )


@pytest.fixture
def transaction() -> Transaction:
    return Transaction.from_json(
        {"type": "execute", "id": TX_ID, "execution": {"transitions": []}}
    )


@pytest_asyncio.fixture
async def make_client(network):
    """Factory for AleoClient instances wired to the fake network."""
    clients: List[AleoClient] = []
    http_clients: List[httpx.AsyncClient] = []

    def factory(credentials: bool = False, **overrides: Any) -> AleoClient:
        if credentials:
            overrides.setdefault("consumer_id", "consumer")
            overrides.setdefault("api_key", "secret-key")
        http_client = network.mock_client()
        http_clients.append(http_client)
        client = AleoClient(make_config(**overrides), http_client=http_client)
        clients.append(client)
        return client

    yield factory

    for client in clients:
        await client.aclose()
    for http_client in http_clients:
        await http_client.aclose()


@pytest.fixture
def api_path():
    """Build a /v2/{network}/... path as seen by the fake network."""

    def build(*segments: Any, network_name: Optional[str] = "testnet") -> str:
        return f"/v2/{network_name}/" + "/".join(str(s) for s in segments)

    return build
