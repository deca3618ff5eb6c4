"""AuthenticatorPort — abstract interface for the credential-checking backend."""

from abc import ABC, abstractmethod

from domain.models import Credentials, Session


class AuthenticatorPort(ABC):
    @abstractmethod
    async def login(self, credentials: Credentials) -> Session:
        """Return a Session, or raise InvalidCredentials.

        Any other exception means the backend failed for an unrelated reason.
        """

    @abstractmethod
    def name(self) -> str:
        """Human-readable backend name for health output."""

    async def close(self) -> None:
        """Release backend resources. No-op by default."""
