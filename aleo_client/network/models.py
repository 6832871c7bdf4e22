"""Data models exchanged with the network."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, RootModel, field_validator


class Transaction(RootModel[Dict[str, Any]]):
    """A network transaction, kept as the opaque JSON object the network emits.

    Only the identifier is interpreted; proofs and transitions are carried
    through untouched.
    """

    model_config = ConfigDict(frozen=True)

    @field_validator("root")
    @classmethod
    def _require_id(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(value.get("id"), str) or not value["id"]:
            raise ValueError("transaction is missing a string 'id'")
        return value

    @property
    def id(self) -> str:
        return self.root["id"]

    def to_json(self) -> str:
        return json.dumps(self.root, separators=(",", ":"))

    @classmethod
    def from_json(cls, data: Union[str, bytes, Dict[str, Any]]) -> "Transaction":
        if isinstance(data, dict):
            return cls.model_validate(data)
        return cls.model_validate_json(data)


class Authorization(RootModel[Dict[str, Any]]):
    """A signed permission to invoke one program function, produced upstream."""

    model_config = ConfigDict(frozen=True)

    def to_json(self) -> str:
        return json.dumps(self.root, separators=(",", ":"))

    @classmethod
    def from_json(cls, data: Union[str, bytes, Dict[str, Any]]) -> "Authorization":
        if isinstance(data, dict):
            return cls.model_validate(data)
        return cls.model_validate_json(data)


class SessionToken(BaseModel):
    """Short-lived bearer token; replaced wholesale on refresh."""

    model_config = ConfigDict(frozen=True)

    token: str
    expires_at: int

    def is_valid(self, now: float, safety_margin: float) -> bool:
        return self.expires_at - now > safety_margin


class TransactionState(str, Enum):
    """Confirmation state reported by the network."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class TransactionStatus(BaseModel):
    """Confirmation status of a transaction; reason is set only when rejected."""

    model_config = ConfigDict(frozen=True)

    state: TransactionState
    reason: Optional[str] = None

    @classmethod
    def pending(cls) -> "TransactionStatus":
        return cls(state=TransactionState.PENDING)

    @classmethod
    def accepted(cls) -> "TransactionStatus":
        return cls(state=TransactionState.ACCEPTED)

    @classmethod
    def rejected(cls, reason: str) -> "TransactionStatus":
        return cls(state=TransactionState.REJECTED, reason=reason)

    @property
    def is_terminal(self) -> bool:
        return self.state != TransactionState.PENDING


class ProvingRequest(BaseModel):
    """Body of a delegated proving request."""

    authorization: Dict[str, Any]
    fee_authorization: Optional[Dict[str, Any]] = None
    broadcast: bool = False

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ProvingResponse(BaseModel):
    """Body returned by the proving service."""

    model_config = ConfigDict(extra="ignore")

    transaction: Dict[str, Any]
    broadcast: Optional[bool] = None
