"""
Network client configuration.

Defines retry and polling policies, the immutable client configuration
with its builder, and the proving strategy chosen per call.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from aleo_client.network.errors import ConfigError

if TYPE_CHECKING:
    from aleo_client.core.config import Settings

DEFAULT_PROVABLE_URL = "https://api.provable.com"


class RetryConfig(BaseModel):
    """Configuration for transport retries with exponential backoff."""

    model_config = ConfigDict(frozen=True)

    max_retries: int = Field(default=3, ge=0, description="Retries after the first attempt")
    min_delay: float = Field(default=0.5, ge=0, description="Delay before the first retry")
    max_delay: float = Field(default=10.0, gt=0, description="Upper bound for any delay")
    exponential_base: float = Field(default=2.0, gt=1, description="Backoff multiplier")
    jitter: bool = Field(
        default=True, description="Add random jitter to prevent thundering herd"
    )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1


class PollConfig(BaseModel):
    """Configuration for wait-for-X polling loops."""

    model_config = ConfigDict(frozen=True)

    initial_delay: float = Field(default=1.0, gt=0, description="First sleep in seconds")
    max_delay: float = Field(default=5.0, gt=0, description="Cap for the doubling delay")


class ClientConfig(BaseModel):
    """Immutable configuration of a network client."""

    model_config = ConfigDict(frozen=True)

    endpoint: str = Field(description="Query/broadcast API base URL")
    network: str = Field(default="testnet", description="Network path segment")
    consumer_id: Optional[str] = None
    api_key: Optional[str] = None

    timeout: float = Field(default=30.0, gt=0, description="Per-request timeout")
    confirmation_timeout: float = Field(default=120.0, gt=0)
    program_timeout: float = Field(default=60.0, gt=0)

    auth_url: str = DEFAULT_PROVABLE_URL
    prover_url: str = DEFAULT_PROVABLE_URL
    api_key_header: str = "X-Provable-API-Key"
    token_safety_margin: float = Field(default=300.0, ge=0)

    retry: RetryConfig = Field(default_factory=RetryConfig)
    poll: PollConfig = Field(default_factory=PollConfig)

    @model_validator(mode="after")
    def _check_invariants(self) -> "ClientConfig":
        if not self.endpoint:
            raise ConfigError("endpoint is required")
        if self.consumer_id == "" or self.api_key == "":
            raise ConfigError("consumer_id and api_key must not be empty")
        if (self.consumer_id is None) != (self.api_key is None):
            raise ConfigError("consumer_id and api_key must be set together")
        return self

    @property
    def has_credentials(self) -> bool:
        return self.consumer_id is not None and self.api_key is not None

    def api_url(self, *segments: object) -> str:
        """URL of a /v2/{network}/... resource on the query API."""
        path = "/".join(str(segment) for segment in segments)
        return f"{self.endpoint.rstrip('/')}/v2/{self.network}/{path}"


class ClientConfigBuilder:
    """Chained builder for ClientConfig; build() validates before returning."""

    def __init__(self) -> None:
        self._values: dict = {}

    def endpoint(self, endpoint: str) -> "ClientConfigBuilder":
        self._values["endpoint"] = endpoint
        return self

    def network(self, network: str) -> "ClientConfigBuilder":
        self._values["network"] = network
        return self

    def consumer_id(self, consumer_id: str) -> "ClientConfigBuilder":
        self._values["consumer_id"] = consumer_id
        return self

    def api_key(self, api_key: str) -> "ClientConfigBuilder":
        self._values["api_key"] = api_key
        return self

    def timeout(self, seconds: float) -> "ClientConfigBuilder":
        self._values["timeout"] = seconds
        return self

    def confirmation_timeout(self, seconds: float) -> "ClientConfigBuilder":
        self._values["confirmation_timeout"] = seconds
        return self

    def program_timeout(self, seconds: float) -> "ClientConfigBuilder":
        self._values["program_timeout"] = seconds
        return self

    def auth_url(self, url: str) -> "ClientConfigBuilder":
        self._values["auth_url"] = url
        return self

    def prover_url(self, url: str) -> "ClientConfigBuilder":
        self._values["prover_url"] = url
        return self

    def retry(self, retry: RetryConfig) -> "ClientConfigBuilder":
        self._values["retry"] = retry
        return self

    def poll(self, poll: PollConfig) -> "ClientConfigBuilder":
        self._values["poll"] = poll
        return self

    def validate(self) -> None:
        if not self._values.get("endpoint"):
            raise ConfigError("endpoint is required")
        if ("consumer_id" in self._values) != ("api_key" in self._values):
            raise ConfigError("consumer_id and api_key must be set together")

    def build(self) -> ClientConfig:
        self.validate()
        return ClientConfig(**self._values)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ClientConfigBuilder":
        """Seed a builder from environment settings."""
        builder = (
            cls()
            .endpoint(settings.ALEO_ENDPOINT)
            .network(settings.ALEO_NETWORK)
            .timeout(settings.REQUEST_TIMEOUT)
            .confirmation_timeout(settings.CONFIRMATION_TIMEOUT)
            .program_timeout(settings.PROGRAM_TIMEOUT)
            .auth_url(settings.PROVABLE_AUTH_URL)
            .prover_url(settings.PROVABLE_PROVER_URL)
        )
        if settings.PROVABLE_CONSUMER_ID is not None:
            builder.consumer_id(settings.PROVABLE_CONSUMER_ID)
        if settings.PROVABLE_API_KEY is not None:
            builder.api_key(settings.PROVABLE_API_KEY)
        return builder


class ProvingMode(str, Enum):
    """Where an authorization gets proved."""

    LOCAL_ONLY = "local_only"
    DELEGATED_WITH_FALLBACK = "delegated_with_fallback"
    DELEGATED_ONLY = "delegated_only"


class DelegatedProvingConfig(BaseModel):
    """Settings for the remote proving service."""

    model_config = ConfigDict(frozen=True)

    prover_url: Optional[str] = Field(
        default=None, description="Overrides ClientConfig.prover_url"
    )


class ProvingStrategy(BaseModel):
    """Proving path for one execution, passed at call time."""

    model_config = ConfigDict(frozen=True)

    mode: ProvingMode = ProvingMode.LOCAL_ONLY
    delegation: Optional[DelegatedProvingConfig] = None

    @model_validator(mode="after")
    def _check_delegation(self) -> "ProvingStrategy":
        if self.mode != ProvingMode.LOCAL_ONLY and self.delegation is None:
            raise ConfigError(f"{self.mode.value} requires a delegation config")
        return self

    @classmethod
    def local_only(cls) -> "ProvingStrategy":
        return cls(mode=ProvingMode.LOCAL_ONLY)

    @classmethod
    def delegated_with_fallback(
        cls, config: Optional[DelegatedProvingConfig] = None
    ) -> "ProvingStrategy":
        return cls(
            mode=ProvingMode.DELEGATED_WITH_FALLBACK,
            delegation=config or DelegatedProvingConfig(),
        )

    @classmethod
    def delegated_only(
        cls, config: Optional[DelegatedProvingConfig] = None
    ) -> "ProvingStrategy":
        return cls(
            mode=ProvingMode.DELEGATED_ONLY,
            delegation=config or DelegatedProvingConfig(),
        )

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ProvingStrategy":
        delegation = DelegatedProvingConfig(prover_url=settings.PROVABLE_PROVER_URL)
        if settings.DELEGATED_PROVING == "fallback":
            return cls.delegated_with_fallback(delegation)
        if settings.DELEGATED_PROVING == "only":
            return cls.delegated_only(delegation)
        return cls.local_only()

    @property
    def uses_delegation(self) -> bool:
        return self.mode != ProvingMode.LOCAL_ONLY
