"""
Network access module.

This module handles authenticated, retrying access to the network API:
queries, delegated proving, broadcasting and confirmation tracking.
"""

from aleo_client.network.client import AleoClient
from aleo_client.network.config import (
    ClientConfig,
    ClientConfigBuilder,
    DelegatedProvingConfig,
    PollConfig,
    ProvingMode,
    ProvingStrategy,
    RetryConfig,
)
from aleo_client.network.lifecycle import LocalProver, TransactionLifecycle
from aleo_client.network.models import (
    Authorization,
    Transaction,
    TransactionState,
    TransactionStatus,
)
from aleo_client.network.polling import poll_until

__all__ = [
    "AleoClient",
    "Authorization",
    "ClientConfig",
    "ClientConfigBuilder",
    "DelegatedProvingConfig",
    "LocalProver",
    "PollConfig",
    "ProvingMode",
    "ProvingStrategy",
    "RetryConfig",
    "Transaction",
    "TransactionLifecycle",
    "TransactionState",
    "TransactionStatus",
    "poll_until",
]
