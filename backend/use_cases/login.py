"""LoginUseCase — guards the authentication backend against credential guessing.

Two decoupled hooks sit around the backend call:

* AttemptGate reads the failure count and decides allow/reject up front.
* OutcomeRecorder inspects the finished attempt and updates the store.

Only credential failures are counted. Successes clear the counter, and
backend outages or timeouts leave it untouched.
"""

import asyncio
import logging
from typing import Optional

from domain.errors import (
    HandlerIndeterminate, InvalidCredentials, RateLimitExceeded, StoreUnavailable,
)
from domain.models import (
    Credentials, Decision, Outcome, OutcomeKind, RateLimitPolicy, RequestMeta, Session,
)
from ports.attempt_store import AttemptStorePort
from ports.authenticator import AuthenticatorPort
from ports.events import EventReporterPort

logger = logging.getLogger(__name__)

FAIL_OPEN = "open"
FAIL_CLOSED = "closed"


class AttemptGate:
    def __init__(
        self,
        store: AttemptStorePort,
        policy: RateLimitPolicy,
        reporter: EventReporterPort,
        store_failure_policy: str = FAIL_OPEN,
    ):
        if store_failure_policy not in (FAIL_OPEN, FAIL_CLOSED):
            raise ValueError(f"Unknown store failure policy: {store_failure_policy!r}")
        self._store = store
        self._policy = policy
        self._reporter = reporter
        self._fail_closed = store_failure_policy == FAIL_CLOSED

    def check(self, meta: RequestMeta) -> Decision:
        identity = self._policy.identity_for(meta)
        try:
            record = self._store.get_record(identity)
            now = self._store.now()
        except StoreUnavailable as e:
            self._reporter.report("store_unavailable", identity, f"gate read failed: {e}")
            if self._fail_closed:
                return Decision.reject(identity, self._policy.window_seconds)
            return Decision.allow(identity)

        if record is None or record.failure_count < self._policy.max_failures:
            return Decision.allow(identity)

        retry_after = record.remaining(now, self._policy.window_seconds)
        if retry_after <= 0:
            return Decision.allow(identity)
        self._reporter.report("rejected", identity, f"retry in {retry_after:.0f}s")
        return Decision.reject(identity, retry_after)


class OutcomeRecorder:
    def __init__(
        self,
        store: AttemptStorePort,
        policy: RateLimitPolicy,
        reporter: EventReporterPort,
    ):
        self._store = store
        self._policy = policy
        self._reporter = reporter

    def observe(self, identity: str, outcome: Outcome) -> None:
        if outcome.kind is OutcomeKind.INDETERMINATE:
            self._reporter.report("indeterminate", identity, outcome.reason)
            return
        try:
            if outcome.kind is OutcomeKind.SUCCESS:
                self._store.clear_identity(identity)
                return
            count = self._store.record_failure(identity)
        except StoreUnavailable as e:
            self._reporter.report("store_unavailable", identity, f"recorder write failed: {e}")
            return

        logger.debug(f"[{identity}] failure {count}/{self._policy.max_failures}")
        if count == self._policy.max_failures:
            self._reporter.report("locked", identity, f"{count} failures")


def classify(exc: Optional[BaseException]) -> Outcome:
    """Map how the backend call finished to an Outcome. None means it returned a session."""
    if exc is None:
        return Outcome.success()
    if isinstance(exc, InvalidCredentials):
        return Outcome.failure(exc.reason)
    if isinstance(exc, asyncio.TimeoutError):
        return Outcome.indeterminate("authentication backend timed out")
    if isinstance(exc, HandlerIndeterminate):
        return Outcome.indeterminate(exc.reason)
    return Outcome.indeterminate(f"{type(exc).__name__}: {exc}")


class LoginUseCase:
    def __init__(
        self,
        gate: AttemptGate,
        recorder: OutcomeRecorder,
        authenticator: AuthenticatorPort,
        timeout: float = 10.0,
    ):
        self._gate = gate
        self._recorder = recorder
        self._authenticator = authenticator
        self._timeout = timeout

    async def execute(self, meta: RequestMeta, credentials: Credentials) -> Session:
        """Run one login attempt.

        Raises RateLimitExceeded, InvalidCredentials, or HandlerIndeterminate.
        """
        decision = self._gate.check(meta)
        if not decision.allowed:
            raise RateLimitExceeded(decision.retry_after)

        try:
            session = await asyncio.wait_for(
                self._authenticator.login(credentials), timeout=self._timeout
            )
        except InvalidCredentials as e:
            self._recorder.observe(decision.identity, classify(e))
            raise
        except HandlerIndeterminate as e:
            self._recorder.observe(decision.identity, classify(e))
            raise
        except asyncio.TimeoutError as e:
            outcome = classify(e)
            self._recorder.observe(decision.identity, outcome)
            raise HandlerIndeterminate(outcome.reason, timed_out=True) from e
        except Exception as e:
            outcome = classify(e)
            self._recorder.observe(decision.identity, outcome)
            raise HandlerIndeterminate(outcome.reason) from e

        self._recorder.observe(decision.identity, classify(None))
        return session
