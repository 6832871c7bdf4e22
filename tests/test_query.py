"""Tests for the read-only query endpoints."""

import pytest

from aleo_client.network.errors import (
    ApiError,
    BadRequestError,
    BadResponseError,
    NotFoundError,
    ProgramTimeoutError,
)
from tests.helpers import json_response, text_response

BYTECODE = "program hello.aleo;\n\nfunction main:\n    input r0 as u32.public;\n"


@pytest.mark.asyncio
class TestHeightAndBlocks:
    async def test_height(self, network, make_client, api_path):
        network.add("GET", api_path("block", "height", "latest"), text_response("12345\n"))

        assert await make_client().height() == 12345

    async def test_height_not_a_number(self, network, make_client, api_path):
        network.add("GET", api_path("block", "height", "latest"), text_response("soon"))

        with pytest.raises(BadResponseError, match="height"):
            await make_client().height()

    async def test_height_on_other_network(self, network, make_client, api_path):
        network.add(
            "GET",
            api_path("block", "height", "latest", network_name="mainnet"),
            text_response("7"),
        )

        assert await make_client(network="mainnet").height() == 7

    async def test_block(self, network, make_client, api_path):
        block = {"block_hash": "ab1xyz", "header": {"metadata": {"height": 10}}}
        network.add("GET", api_path("block", 10), json_response(block))

        assert await make_client().block(10) == block

    async def test_missing_block(self, network, make_client):
        with pytest.raises(NotFoundError, match="Block 99"):
            await make_client().block(99)


@pytest.mark.asyncio
class TestPrograms:
    async def test_program(self, network, make_client, api_path):
        network.add("GET", api_path("program", "hello.aleo"), json_response(BYTECODE))

        assert await make_client().program("hello.aleo") == BYTECODE

    async def test_program_not_a_string(self, network, make_client, api_path):
        network.add("GET", api_path("program", "hello.aleo"), json_response({"x": 1}))

        with pytest.raises(BadResponseError):
            await make_client().program("hello.aleo")

    async def test_program_exists(self, network, make_client, api_path):
        network.add("GET", api_path("program", "hello.aleo"), json_response(BYTECODE))
        client = make_client()

        assert await client.program_exists("hello.aleo") is True
        assert await client.program_exists("missing.aleo") is False

    async def test_program_exists_propagates_server_errors(
        self, network, make_client, api_path
    ):
        """Only 404 means absent; a persistent 500 is an error."""
        network.add("GET", api_path("program", "hello.aleo"), 500)

        with pytest.raises(ApiError) as exc_info:
            await make_client().program_exists("hello.aleo")

        assert exc_info.value.status == 500

    async def test_wait_for_program(self, network, make_client, api_path):
        """The program appears after two misses."""
        path = api_path("program", "hello.aleo")
        network.add("GET", path, 404, 404, json_response(BYTECODE))

        await make_client().wait_for_program("hello.aleo")

        assert network.count("GET", path) == 3

    async def test_wait_for_program_times_out(self, network, make_client):
        with pytest.raises(ProgramTimeoutError) as exc_info:
            await make_client().wait_for_program("missing.aleo", timeout=0.05)

        assert exc_info.value.program_id == "missing.aleo"
        assert exc_info.value.timeout == 0.05
        assert exc_info.value.__suppress_context__

    async def test_wait_for_program_uses_configured_budget(self, network, make_client):
        with pytest.raises(ProgramTimeoutError) as exc_info:
            await make_client(program_timeout=0.05).wait_for_program("missing.aleo")

        assert exc_info.value.timeout == 0.05

    async def test_wait_for_program_propagates_other_errors(
        self, network, make_client, api_path
    ):
        path = api_path("program", "bad.aleo")
        network.add("GET", path, (400, {"text": "invalid program id"}))

        with pytest.raises(BadRequestError):
            await make_client().wait_for_program("bad.aleo")

        assert network.count("GET", path) == 1


@pytest.mark.asyncio
class TestMappings:
    async def test_mapping_value(self, network, make_client, api_path):
        network.add(
            "GET",
            api_path("program", "token.aleo", "mapping", "supply", "0field"),
            json_response("1000u128"),
        )

        assert await make_client().mapping("token.aleo", "supply", "0field") == "1000u128"

    async def test_missing_key(self, network, make_client):
        assert await make_client().mapping("token.aleo", "supply", "1field") is None

    async def test_null_value(self, network, make_client, api_path):
        network.add(
            "GET",
            api_path("program", "token.aleo", "mapping", "supply", "0field"),
            text_response("null"),
        )

        assert await make_client().mapping("token.aleo", "supply", "0field") is None

    async def test_key_quotes_are_stripped(self, network, make_client, api_path):
        path = api_path("program", "token.aleo", "mapping", "names", "aleo1abc")
        network.add("GET", path, json_response("1u8"))

        assert await make_client().mapping("token.aleo", "names", '"aleo1abc"') == "1u8"
        assert network.count("GET", path) == 1

    async def test_server_error(self, network, make_client, api_path):
        network.add(
            "GET", api_path("program", "token.aleo", "mapping", "supply", "0field"), 500
        )

        with pytest.raises(ApiError):
            await make_client().mapping("token.aleo", "supply", "0field")


@pytest.mark.asyncio
class TestPublicBalance:
    ADDRESS = "aleo1qnr4dkkvkgfqph0vzc3y6z2eu975wnpz2925ntjccd5cfqxtyu8s7pyjh9"

    async def test_balance(self, network, make_client, api_path):
        network.add(
            "GET",
            api_path("program", "credits.aleo", "mapping", "account", self.ADDRESS),
            json_response("1500000u64"),
        )

        assert await make_client().public_balance(self.ADDRESS) == 1_500_000

    async def test_unfunded_account(self, network, make_client):
        assert await make_client().public_balance(self.ADDRESS) == 0

    async def test_unparseable_balance(self, network, make_client, api_path):
        network.add(
            "GET",
            api_path("program", "credits.aleo", "mapping", "account", self.ADDRESS),
            json_response("lots"),
        )

        with pytest.raises(BadResponseError, match="balance"):
            await make_client().public_balance(self.ADDRESS)
