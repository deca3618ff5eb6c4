"""InMemoryAttemptStore — process-local failure counters behind a single lock."""

import logging
import threading
import time
from dataclasses import replace
from typing import Callable, Optional

from domain.models import AttemptRecord
from ports.attempt_store import AttemptStorePort

logger = logging.getLogger(__name__)


class InMemoryAttemptStore(AttemptStorePort):
    """Fixed-window counters in a dict.

    All reads and writes go through one lock, so concurrent record_failure
    calls for the same identity never lose an increment.
    """

    def __init__(self, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self._window = window_seconds
        self._clock = clock
        self._records: dict[str, AttemptRecord] = {}
        self._lock = threading.Lock()

    @property
    def window_seconds(self) -> float:
        return self._window

    def now(self) -> float:
        return self._clock()

    def _live(self, identity: str, now: float) -> Optional[AttemptRecord]:
        # Caller holds the lock.
        record = self._records.get(identity)
        if record is not None and record.is_expired(now, self._window):
            del self._records[identity]
            return None
        return record

    def get_record(self, identity: str) -> Optional[AttemptRecord]:
        with self._lock:
            record = self._live(identity, self._clock())
            return replace(record) if record else None

    def record_failure(self, identity: str) -> int:
        with self._lock:
            now = self._clock()
            record = self._live(identity, now)
            if record is None:
                record = AttemptRecord(identity=identity, failure_count=0, window_start=now)
                self._records[identity] = record
            record.failure_count += 1
            return record.failure_count

    def clear_identity(self, identity: str) -> None:
        with self._lock:
            self._records.pop(identity, None)

    def sweep_expired(self) -> int:
        with self._lock:
            now = self._clock()
            expired = [k for k, r in self._records.items() if r.is_expired(now, self._window)]
            for key in expired:
                del self._records[key]
        if expired:
            logger.debug(f"Swept {len(expired)} expired attempt records")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
