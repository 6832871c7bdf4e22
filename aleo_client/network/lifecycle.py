"""
Transaction lifecycle controller.

Drives a transaction from proving through broadcast to a terminal
confirmation state:

    Created -> Broadcast -> Pending* -> Accepted | Rejected | TimedOut
"""

from __future__ import annotations

import json
from typing import Optional, Protocol, runtime_checkable

import structlog

from aleo_client.core.logging import log_context
from aleo_client.network.clients.base import BaseNetworkClient
from aleo_client.network.clients.prover import ProvingServiceClient
from aleo_client.network.clients.query import QueryClient
from aleo_client.network.config import ProvingMode, ProvingStrategy
from aleo_client.network.errors import (
    BadResponseError,
    ClientError,
    ConfigError,
    PollTimeoutError,
    TransactionRejectedError,
    TransactionTimeoutError,
)
from aleo_client.network.metrics import ClientMetrics
from aleo_client.network.models import (
    Authorization,
    Transaction,
    TransactionState,
    TransactionStatus,
)
from aleo_client.network.polling import poll_until

logger = structlog.get_logger()


@runtime_checkable
class LocalProver(Protocol):
    """A VM able to execute and prove an authorization in-process."""

    async def execute(self, authorization: Authorization) -> Transaction:
        ...


class TransactionLifecycle(BaseNetworkClient):
    """Broadcasts transactions and tracks them until a terminal state."""

    def __init__(
        self,
        query: QueryClient,
        prover: ProvingServiceClient,
        metrics: Optional[ClientMetrics] = None,
    ):
        super().__init__(query.config, query.transport, query.credentials)
        self.query = query
        self.prover = prover
        self.metrics = metrics or query.transport.metrics

    async def broadcast(self, transaction: Transaction) -> None:
        """Submit ``transaction`` to the network without waiting."""
        response = await self._send(
            "POST",
            self.api_url("transaction", "broadcast"),
            authenticated=True,
            headers={"Content-Type": "application/json"},
            content=transaction.to_json(),
        )
        self._raise_for_status(response)
        self.metrics.record_broadcast()
        logger.info("transaction.broadcast", tx_id=transaction.id)

    async def transaction_status(self, tx_id: str) -> TransactionStatus:
        """
        Current confirmation status of ``tx_id``.

        404 and 500 mean the indexer has not seen the transaction yet and
        are reported as pending.
        """
        response = await self._send("GET", self.api_url("transaction", "confirmed", tx_id))
        if response.status_code in (404, 500):
            return TransactionStatus.pending()
        self._raise_for_status(response)

        body = self._json(response, "confirmation")
        status = body.get("status") if isinstance(body, dict) else None
        if not isinstance(status, str):
            raise BadResponseError("Missing status field")

        if status == TransactionState.ACCEPTED.value:
            return TransactionStatus.accepted()
        if status == TransactionState.REJECTED.value:
            return TransactionStatus.rejected(json.dumps(body))
        return TransactionStatus.pending()

    async def wait_for_transaction(
        self, tx_id: str, timeout: Optional[float] = None
    ) -> TransactionStatus:
        """
        Poll until ``tx_id`` is accepted.

        Raises:
            TransactionRejectedError: As soon as the network reports rejection
            TransactionTimeoutError: If still pending when the budget is spent
        """
        budget = self.config.confirmation_timeout if timeout is None else timeout

        async def check() -> Optional[TransactionStatus]:
            self.metrics.record_poll()
            status = await self.transaction_status(tx_id)
            if status.state == TransactionState.REJECTED:
                self.metrics.record_outcome("rejected")
                logger.error("transaction.rejected", tx_id=tx_id, reason=status.reason)
                raise TransactionRejectedError(tx_id, status.reason or "")
            return status if status.is_terminal else None

        with log_context(tx_id=tx_id):
            try:
                status = await poll_until(
                    check,
                    timeout=budget,
                    initial_delay=self.config.poll.initial_delay,
                    max_delay=self.config.poll.max_delay,
                    operation=f"wait_for_transaction {tx_id}",
                )
            except PollTimeoutError:
                self.metrics.record_outcome("timeout")
                raise TransactionTimeoutError(tx_id, budget) from None

            self.metrics.record_outcome("accepted")
            logger.info("transaction.accepted", tx_id=tx_id)
            return status

    async def broadcast_wait(self, transaction: Transaction) -> str:
        """Broadcast, then wait for confirmation; returns the transaction id."""
        await self.broadcast(transaction)
        await self.wait_for_transaction(transaction.id)
        return transaction.id

    async def deploy(self, transaction: Transaction, program_id: str) -> str:
        """Broadcast a deployment and wait until the program is queryable."""
        with log_context(program_id=program_id):
            tx_id = await self.broadcast_wait(transaction)
            await self.query.wait_for_program(program_id)
        return tx_id

    async def prove(
        self,
        authorization: Authorization,
        strategy: ProvingStrategy,
        local_prover: Optional[LocalProver] = None,
    ) -> Transaction:
        """Turn ``authorization`` into a transaction following ``strategy``."""
        if not strategy.uses_delegation:
            return await self._prove_locally(authorization, local_prover)

        prover_url = strategy.delegation.prover_url if strategy.delegation else None
        try:
            transaction = await self.prover.prove(authorization, prover_url=prover_url)
        except ClientError as e:
            if strategy.mode == ProvingMode.DELEGATED_ONLY or local_prover is None:
                raise
            logger.warning(
                "prove.delegation_failed",
                error=str(e),
                error_type=type(e).__name__,
                falling_back="local",
            )
            return await self._prove_locally(authorization, local_prover, fallback=True)

        self.metrics.record_proof(delegated=True)
        return transaction

    async def _prove_locally(
        self,
        authorization: Authorization,
        local_prover: Optional[LocalProver],
        fallback: bool = False,
    ) -> Transaction:
        if local_prover is None:
            raise ConfigError("local proving requires a LocalProver")
        transaction = await local_prover.execute(authorization)
        self.metrics.record_proof(delegated=False, fallback=fallback)
        logger.info("prove.local_completed", tx_id=transaction.id, fallback=fallback)
        return transaction

    async def execute(
        self,
        authorization: Authorization,
        strategy: Optional[ProvingStrategy] = None,
        local_prover: Optional[LocalProver] = None,
        program_id: Optional[str] = None,
        wait: bool = True,
    ) -> Transaction:
        """
        Prove, broadcast and (by default) confirm one function call.

        Args:
            authorization: Signed authorization for the call
            strategy: Proving strategy (defaults to local only)
            local_prover: VM used for local proving or as fallback
            program_id: If given, wait for the program to be available first
            wait: Wait for confirmation after broadcasting

        Returns:
            The broadcast transaction
        """
        strategy = strategy or ProvingStrategy.local_only()

        if program_id is not None:
            await self.query.wait_for_program(program_id)

        transaction = await self.prove(authorization, strategy, local_prover)
        with log_context(tx_id=transaction.id):
            if wait:
                await self.broadcast_wait(transaction)
            else:
                await self.broadcast(transaction)
        return transaction
