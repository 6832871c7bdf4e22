"""Client for submitting and tracking transactions on an Aleo network."""

from aleo_client.network import (
    AleoClient,
    Authorization,
    ClientConfig,
    ClientConfigBuilder,
    DelegatedProvingConfig,
    LocalProver,
    ProvingMode,
    ProvingStrategy,
    Transaction,
    TransactionState,
    TransactionStatus,
)
from aleo_client.network.errors import (
    ApiError,
    AuthFailedError,
    AuthFetchFailedError,
    BadRequestError,
    BadResponseError,
    ClientError,
    ConfigError,
    CredentialsRequiredError,
    NotFoundError,
    ProgramTimeoutError,
    RateLimitedError,
    TransactionRejectedError,
    TransactionTimeoutError,
    TransportError,
)

__version__ = "0.1.0"

__all__ = [
    "AleoClient",
    "ApiError",
    "AuthFailedError",
    "AuthFetchFailedError",
    "Authorization",
    "BadRequestError",
    "BadResponseError",
    "ClientConfig",
    "ClientConfigBuilder",
    "ClientError",
    "ConfigError",
    "CredentialsRequiredError",
    "DelegatedProvingConfig",
    "LocalProver",
    "NotFoundError",
    "ProgramTimeoutError",
    "ProvingMode",
    "ProvingStrategy",
    "RateLimitedError",
    "Transaction",
    "TransactionRejectedError",
    "TransactionState",
    "TransactionStatus",
    "TransactionTimeoutError",
    "TransportError",
]
