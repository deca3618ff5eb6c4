"""Framework-agnostic domain models for the login guard.

The fixed-window arithmetic lives on AttemptRecord so every store adapter
shares one definition of "expired" and "time left".
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional


@dataclass
class RequestMeta:
    """The slice of a login request the gate is allowed to see."""
    client_ip: str
    username: str = ""


IdentityExtractor = Callable[[RequestMeta], str]


@dataclass
class AttemptRecord:
    """Failure history for one identity within the current window."""
    identity: str
    failure_count: int = 0
    window_start: float = 0.0

    def is_expired(self, now: float, window_seconds: float) -> bool:
        return now - self.window_start >= window_seconds

    def remaining(self, now: float, window_seconds: float) -> float:
        """Seconds until this window resets. Never negative."""
        return max(0.0, self.window_start + window_seconds - now)


@dataclass(frozen=True)
class RateLimitPolicy:
    max_failures: int = 5
    window_seconds: float = 900.0
    identity_extractor: Optional[IdentityExtractor] = None

    def __post_init__(self):
        if self.max_failures < 1:
            raise ValueError(f"max_failures must be >= 1, got {self.max_failures}")
        if self.window_seconds <= 0:
            raise ValueError(f"window_seconds must be > 0, got {self.window_seconds}")

    def identity_for(self, meta: RequestMeta) -> str:
        extractor = self.identity_extractor or ip_identity
        return extractor(meta)


def ip_identity(meta: RequestMeta) -> str:
    return meta.client_ip


def ip_username_identity(meta: RequestMeta) -> str:
    return f"{meta.client_ip}|{meta.username.strip().lower()}"


IDENTITY_STRATEGIES: dict[str, IdentityExtractor] = {
    "ip": ip_identity,
    "ip_username": ip_username_identity,
}


@dataclass(frozen=True)
class Decision:
    """Gate verdict. retry_after is only meaningful when allowed is False."""
    allowed: bool
    identity: str
    retry_after: float = 0.0

    @classmethod
    def allow(cls, identity: str) -> "Decision":
        return cls(allowed=True, identity=identity)

    @classmethod
    def reject(cls, identity: str, retry_after: float) -> "Decision":
        return cls(allowed=False, identity=identity, retry_after=retry_after)


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    INDETERMINATE = "indeterminate"


@dataclass(frozen=True)
class Outcome:
    kind: OutcomeKind
    reason: Optional[str] = None

    @classmethod
    def success(cls) -> "Outcome":
        return cls(OutcomeKind.SUCCESS)

    @classmethod
    def failure(cls, reason: str) -> "Outcome":
        return cls(OutcomeKind.FAILURE, reason)

    @classmethod
    def indeterminate(cls, reason: str) -> "Outcome":
        return cls(OutcomeKind.INDETERMINATE, reason)


@dataclass
class Credentials:
    username: str
    password: str = field(repr=False)


@dataclass
class Session:
    """A successful login as returned by the authentication backend."""
    object_id: str
    session_token: str = field(repr=False)
