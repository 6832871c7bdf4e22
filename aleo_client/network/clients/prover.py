"""
Delegated proving service client.

Sends a signed authorization to a remote prover and receives back the
fully proved transaction, ready to broadcast.
"""

from __future__ import annotations

from typing import Optional

import structlog
from pydantic import ValidationError

from aleo_client.network.clients.base import BaseNetworkClient
from aleo_client.network.errors import BadResponseError
from aleo_client.network.models import (
    Authorization,
    ProvingRequest,
    ProvingResponse,
    Transaction,
)

logger = structlog.get_logger()

METHOD_HEADER = "X-ALEO-METHOD"
SUBMIT_PROVING_REQUEST = "submitProvingRequest"


class ProvingServiceClient(BaseNetworkClient):
    """Client for the remote proving service."""

    def prove_url(self, prover_url: Optional[str] = None) -> str:
        base = (prover_url or self.config.prover_url).rstrip("/")
        return f"{base}/prove/{self.config.network}/prove"

    async def prove(
        self,
        authorization: Authorization,
        fee_authorization: Optional[Authorization] = None,
        prover_url: Optional[str] = None,
    ) -> Transaction:
        """
        Have the proving service turn ``authorization`` into a transaction.

        The service is asked not to broadcast; broadcasting stays with the
        caller so confirmation can be tracked.

        Raises:
            AuthFailedError: 401 from the prover
            BadRequestError: 400 from the prover
            RateLimitedError: 429 from the prover
            ApiError: Any other non-2xx status
            BadResponseError: If the response carries no usable transaction
        """
        request = ProvingRequest(
            authorization=authorization.root,
            fee_authorization=fee_authorization.root if fee_authorization else None,
            broadcast=False,
        )
        url = self.prove_url(prover_url)

        logger.info("prove.submitting", url=url, with_fee=fee_authorization is not None)
        response = await self._send(
            "POST",
            url,
            authenticated=True,
            headers={METHOD_HEADER: SUBMIT_PROVING_REQUEST},
            json_body=request.to_payload(),
        )
        self._raise_for_status(response)

        try:
            proving_response = ProvingResponse.model_validate(
                self._json(response, "proving")
            )
            transaction = Transaction.from_json(proving_response.transaction)
        except ValidationError as e:
            raise BadResponseError(f"Failed to parse proving response: {e}") from e

        logger.info("prove.completed", tx_id=transaction.id)
        return transaction
