"""
Network client facade.

AleoClient owns the configuration, transport, credentials and metrics for
its whole lifetime and exposes the query, proving and lifecycle operations
in one place.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
import structlog

from aleo_client.core.config import Settings, get_settings
from aleo_client.network.clients.prover import ProvingServiceClient
from aleo_client.network.clients.query import QueryClient
from aleo_client.network.config import ClientConfig, ClientConfigBuilder, ProvingStrategy
from aleo_client.network.credentials import Credentials
from aleo_client.network.lifecycle import LocalProver, TransactionLifecycle
from aleo_client.network.metrics import ClientMetrics
from aleo_client.network.models import Authorization, Transaction, TransactionStatus
from aleo_client.network.transport import RetryingTransport

logger = structlog.get_logger()


class AleoClient:
    """Resilient client for querying the network and submitting transactions."""

    def __init__(
        self,
        config: ClientConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the client.

        Args:
            config: Validated client configuration
            http_client: Optional pre-built httpx client (e.g. with a mock
                transport); closing it stays with the caller
        """
        self.config = config
        self.metrics = ClientMetrics()
        self.transport = RetryingTransport(
            retry=config.retry,
            timeout=config.timeout,
            client=http_client,
            metrics=self.metrics,
        )
        self.credentials = Credentials(
            self.transport,
            consumer_id=config.consumer_id,
            api_key=config.api_key,
            auth_url=config.auth_url,
            api_key_header=config.api_key_header,
            safety_margin=config.token_safety_margin,
            metrics=self.metrics,
        )
        self.query = QueryClient(config, self.transport, self.credentials)
        self.prover = ProvingServiceClient(config, self.transport, self.credentials)
        self.lifecycle = TransactionLifecycle(self.query, self.prover, self.metrics)

        logger.info(
            "client.initialized",
            endpoint=config.endpoint,
            network=config.network,
            authenticated=config.has_credentials,
        )

    @staticmethod
    def builder() -> ClientConfigBuilder:
        return ClientConfigBuilder()

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "AleoClient":
        """Build a client from environment settings."""
        config = ClientConfigBuilder.from_settings(settings or get_settings()).build()
        return cls(config, http_client=http_client)

    # Queries

    async def height(self) -> int:
        return await self.query.height()

    async def block(self, height: int) -> Any:
        return await self.query.block(height)

    async def program(self, program_id: str) -> str:
        return await self.query.program(program_id)

    async def program_exists(self, program_id: str) -> bool:
        return await self.query.program_exists(program_id)

    async def wait_for_program(
        self, program_id: str, timeout: Optional[float] = None
    ) -> None:
        await self.query.wait_for_program(program_id, timeout)

    async def mapping(self, program_id: str, mapping_name: str, key: Any) -> Any:
        return await self.query.mapping(program_id, mapping_name, key)

    async def public_balance(self, address: str) -> int:
        return await self.query.public_balance(address)

    # Proving and transactions

    async def prove(
        self,
        authorization: Authorization,
        fee_authorization: Optional[Authorization] = None,
    ) -> Transaction:
        return await self.prover.prove(authorization, fee_authorization)

    async def broadcast(self, transaction: Transaction) -> None:
        await self.lifecycle.broadcast(transaction)

    async def transaction_status(self, tx_id: str) -> TransactionStatus:
        return await self.lifecycle.transaction_status(tx_id)

    async def wait_for_transaction(
        self, tx_id: str, timeout: Optional[float] = None
    ) -> TransactionStatus:
        return await self.lifecycle.wait_for_transaction(tx_id, timeout)

    async def broadcast_wait(self, transaction: Transaction) -> str:
        return await self.lifecycle.broadcast_wait(transaction)

    async def deploy(self, transaction: Transaction, program_id: str) -> str:
        return await self.lifecycle.deploy(transaction, program_id)

    async def execute(
        self,
        authorization: Authorization,
        strategy: Optional[ProvingStrategy] = None,
        local_prover: Optional[LocalProver] = None,
        program_id: Optional[str] = None,
        wait: bool = True,
    ) -> Transaction:
        return await self.lifecycle.execute(
            authorization,
            strategy=strategy,
            local_prover=local_prover,
            program_id=program_id,
            wait=wait,
        )

    def get_metrics(self) -> Dict[str, Any]:
        return self.metrics.to_dict()

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> "AleoClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
