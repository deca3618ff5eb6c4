"""EventReporterPort — abstract interface for reporting guard events to observability."""

from abc import ABC, abstractmethod
from typing import Optional


class EventReporterPort(ABC):
    @abstractmethod
    def report(
        self,
        event: str,
        identity: str,
        detail: Optional[str] = None,
    ) -> None:
        """Report an event. event: rejected, store_unavailable, indeterminate, locked."""
