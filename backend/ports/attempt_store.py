"""AttemptStorePort — abstract interface for per-identity failure counters."""

from abc import ABC, abstractmethod
from typing import Optional

from domain.models import AttemptRecord


class AttemptStorePort(ABC):
    """Owns every AttemptRecord. Implementations raise StoreUnavailable on backend faults."""

    @abstractmethod
    def get_record(self, identity: str) -> Optional[AttemptRecord]:
        """Return a snapshot of the live record, or None if absent or expired."""

    @abstractmethod
    def record_failure(self, identity: str) -> int:
        """Atomically add one failure, opening a new window if needed. Returns the new count."""

    @abstractmethod
    def clear_identity(self, identity: str) -> None:
        """Atomically drop the record for identity."""

    @abstractmethod
    def sweep_expired(self) -> int:
        """Release expired records. Returns how many were removed."""

    @abstractmethod
    def now(self) -> float:
        """Clock used for window arithmetic, in seconds."""

    def get_failure_count(self, identity: str) -> int:
        record = self.get_record(identity)
        return record.failure_count if record else 0
