"""
Shared fixtures: a manual clock, an in-memory store on that clock, a scripted
authenticator, and a reporter that remembers what it was told.
"""
import asyncio
from typing import Optional

import pytest

from adapters.local.memory_store import InMemoryAttemptStore
from domain.errors import InvalidCredentials, StoreUnavailable
from domain.models import Credentials, RateLimitPolicy, Session
from ports.attempt_store import AttemptStorePort
from ports.authenticator import AuthenticatorPort
from ports.events import EventReporterPort

WINDOW = 15 * 60


class ManualClock:
    def __init__(self, start: float = 1000.0):
        self.t = start

    def __call__(self) -> float:
        return self.t

    def advance(self, seconds: float) -> None:
        self.t += seconds


class FakeAuthenticator(AuthenticatorPort):
    """Accepts username 'alice' with password 'secret'. Can be told to break or stall."""

    def __init__(self):
        self.calls = 0
        self.fault: Optional[BaseException] = None
        self.delay = 0.0
        self.closed = False

    async def login(self, credentials: Credentials) -> Session:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fault is not None:
            raise self.fault
        if credentials.username == "alice" and credentials.password == "secret":
            return Session(object_id="aliceId", session_token="r:token")
        raise InvalidCredentials()

    def name(self) -> str:
        return "fake"

    async def close(self) -> None:
        self.closed = True


class RecordingReporter(EventReporterPort):
    def __init__(self):
        self.events: list[tuple[str, str, Optional[str]]] = []

    def report(self, event: str, identity: str, detail: Optional[str] = None) -> None:
        self.events.append((event, identity, detail))

    def names(self) -> list[str]:
        return [e[0] for e in self.events]


class BrokenStore(AttemptStorePort):
    def get_record(self, identity):
        raise StoreUnavailable("backend down")

    def record_failure(self, identity):
        raise StoreUnavailable("backend down")

    def clear_identity(self, identity):
        raise StoreUnavailable("backend down")

    def sweep_expired(self):
        raise StoreUnavailable("backend down")

    def now(self):
        return 0.0


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def store(clock) -> InMemoryAttemptStore:
    return InMemoryAttemptStore(window_seconds=WINDOW, clock=clock)


@pytest.fixture
def policy() -> RateLimitPolicy:
    return RateLimitPolicy(max_failures=5, window_seconds=WINDOW)


@pytest.fixture
def authenticator() -> FakeAuthenticator:
    return FakeAuthenticator()


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def broken_store() -> BrokenStore:
    return BrokenStore()
