"""Parse Server adapter for credential checks and session issuance."""

from .authenticator import ParseAuthenticator

__all__ = ["ParseAuthenticator"]
