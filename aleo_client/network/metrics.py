"""
Client metrics.

In-memory counters giving observability into retries, polling and the
outcome of submitted transactions.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


@dataclass
class ClientMetrics:
    """Counters for one client instance."""

    requests: int = 0
    retries: int = 0
    transport_failures: int = 0
    token_fetches: int = 0

    polls: int = 0
    broadcasts: int = 0
    accepted: int = 0
    rejected: int = 0
    timeouts: int = 0

    delegated_proofs: int = 0
    local_proofs: int = 0
    delegation_fallbacks: int = 0

    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_error: Optional[str] = None

    def record_request(self):
        self.requests += 1

    def record_retry(self, error: str):
        self.retries += 1
        self.last_error = error

    def record_transport_failure(self, error: str):
        self.transport_failures += 1
        self.last_error = error

    def record_token_fetch(self):
        self.token_fetches += 1

    def record_poll(self):
        self.polls += 1

    def record_broadcast(self):
        self.broadcasts += 1

    def record_outcome(self, outcome: str):
        """Record a terminal transaction outcome: accepted, rejected or timeout."""
        if outcome == "accepted":
            self.accepted += 1
        elif outcome == "rejected":
            self.rejected += 1
        elif outcome == "timeout":
            self.timeouts += 1
        else:
            raise ValueError(f"unknown outcome: {outcome}")

    def record_proof(self, delegated: bool, fallback: bool = False):
        if delegated:
            self.delegated_proofs += 1
        else:
            self.local_proofs += 1
        if fallback:
            self.delegation_fallbacks += 1

    def get_acceptance_rate(self) -> float:
        """Share of terminal outcomes that were accepted."""
        total = self.accepted + self.rejected + self.timeouts
        if total == 0:
            return 0.0
        return self.accepted / total

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data["started_at"] = self.started_at.isoformat()
        data["acceptance_rate"] = self.get_acceptance_rate()
        return data
