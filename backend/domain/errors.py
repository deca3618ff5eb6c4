"""Error taxonomy for the login guard."""

from typing import Any, Optional


class LoginGuardError(Exception):
    pass


class RateLimitExceeded(LoginGuardError):
    """The gate refused the attempt. A guarded response, not a fault."""

    def __init__(self, retry_after: float):
        super().__init__("Too many login attempts. Try again later.")
        self.retry_after = retry_after


class StoreUnavailable(LoginGuardError):
    """The attempt store could not be read or written."""


class HandlerIndeterminate(LoginGuardError):
    """The authentication backend failed for reasons unrelated to credentials."""

    def __init__(self, reason: str, timed_out: bool = False):
        super().__init__(reason)
        self.reason = reason
        self.timed_out = timed_out


class InvalidCredentials(LoginGuardError):
    """The authentication backend rejected the credentials.

    status_code and payload are what the backend answered with, so the HTTP
    layer can hand them back to the client untouched.
    """

    def __init__(
        self,
        reason: str = "Invalid username/password.",
        status_code: int = 404,
        payload: Optional[dict[str, Any]] = None,
    ):
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code
        self.payload = payload if payload is not None else {"code": 101, "error": reason}
