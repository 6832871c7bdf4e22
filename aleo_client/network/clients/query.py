"""Read-only query endpoints: blocks, programs and mappings."""

from __future__ import annotations

import re
from typing import Any, Optional

import structlog

from aleo_client.network.clients.base import BaseNetworkClient
from aleo_client.network.errors import (
    BadResponseError,
    NotFoundError,
    PollTimeoutError,
    ProgramTimeoutError,
)
from aleo_client.network.polling import poll_until

logger = structlog.get_logger()

CREDITS_PROGRAM = "credits.aleo"
ACCOUNT_MAPPING = "account"

_U64_LITERAL = re.compile(r"^(\d+)u64$")


class QueryClient(BaseNetworkClient):
    """Queries against the /v2/{network} API."""

    async def height(self) -> int:
        """Latest block height."""
        response = await self._send("GET", self.api_url("block", "height", "latest"))
        self._raise_for_status(response)
        try:
            return int(response.text.strip())
        except ValueError:
            raise BadResponseError(f"Invalid block height format: {response.text!r}")

    async def block(self, height: int) -> Any:
        """Block payload at ``height``; NotFoundError if it does not exist."""
        response = await self._send("GET", self.api_url("block", height))
        if response.status_code == 404:
            raise NotFoundError(f"Block {height} not found")
        self._raise_for_status(response)
        return self._json(response, "block")

    async def program(self, program_id: str) -> str:
        """Bytecode of a deployed program."""
        response = await self._send("GET", self.api_url("program", program_id))
        if response.status_code == 404:
            raise NotFoundError(f"Program {program_id} not found")
        self._raise_for_status(response)

        bytecode = self._json(response, "program")
        if not isinstance(bytecode, str):
            raise BadResponseError("Expected program bytecode as a JSON string")
        return bytecode

    async def program_exists(self, program_id: str) -> bool:
        """Whether the program is indexed; only a 404 counts as absent."""
        try:
            await self.program(program_id)
        except NotFoundError:
            return False
        return True

    async def wait_for_program(
        self, program_id: str, timeout: Optional[float] = None
    ) -> None:
        """
        Block until the program is fetchable from the query API.

        Raises:
            ProgramTimeoutError: If it is not available within the budget
        """
        budget = self.config.program_timeout if timeout is None else timeout

        async def check() -> Optional[bool]:
            return True if await self.program_exists(program_id) else None

        try:
            await poll_until(
                check,
                timeout=budget,
                initial_delay=self.config.poll.initial_delay,
                max_delay=self.config.poll.max_delay,
                operation=f"wait_for_program {program_id}",
            )
        except PollTimeoutError:
            raise ProgramTimeoutError(program_id, budget) from None
        logger.info("program.available", program_id=program_id)

    async def mapping(self, program_id: str, mapping_name: str, key: Any) -> Any:
        """
        Value stored under ``key`` in a program mapping.

        Returns:
            The parsed JSON value, or None when the key is absent (404 or null)
        """
        key_str = str(key).replace('"', "")
        url = self.api_url("program", program_id, "mapping", mapping_name, key_str)

        response = await self._send("GET", url)
        if response.status_code == 404:
            return None
        self._raise_for_status(response)
        return self._json(response, "mapping")

    async def public_balance(self, address: str) -> int:
        """Public credits balance of ``address`` in microcredits (0 if unset)."""
        value = await self.mapping(CREDITS_PROGRAM, ACCOUNT_MAPPING, address)
        if value is None:
            return 0

        match = _U64_LITERAL.match(str(value).strip())
        if match is None:
            raise BadResponseError(f"Failed to parse balance for {address}: {value!r}")
        return int(match.group(1))
