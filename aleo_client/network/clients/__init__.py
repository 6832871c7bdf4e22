"""Endpoint groups of the network API."""

from aleo_client.network.clients.base import BaseNetworkClient
from aleo_client.network.clients.prover import ProvingServiceClient
from aleo_client.network.clients.query import QueryClient

__all__ = ["BaseNetworkClient", "ProvingServiceClient", "QueryClient"]
