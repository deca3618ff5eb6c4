"""JsonFileAuthenticator — checks credentials against a local users JSON file.

File shape::

    {"users": [{"objectId": "u1", "username": "admin",
                "password_sha256": "<hex>", "active": true}]}

An unreadable file is a backend fault, not a credential failure, so it is
left to propagate.
"""

import asyncio
import hashlib
import hmac
import json
import logging
import secrets

from domain.errors import InvalidCredentials
from domain.models import Credentials, Session
from ports.authenticator import AuthenticatorPort

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


class JsonFileAuthenticator(AuthenticatorPort):
    def __init__(self, users_file: str = "/data/users.json"):
        self._users_file = users_file

    def _load(self) -> dict:
        with open(self._users_file) as f:
            data = json.load(f)
        return {u["username"]: u for u in data.get("users", []) if u.get("active", True)}

    async def login(self, credentials: Credentials) -> Session:
        users = await asyncio.to_thread(self._load)
        entry = users.get(credentials.username)
        # Hash even for unknown users so both paths cost the same.
        candidate = hash_password(credentials.password)
        expected = entry.get("password_sha256", "") if entry else ""
        if not entry or not hmac.compare_digest(candidate, expected):
            raise InvalidCredentials()
        token = f"r:{secrets.token_hex(16)}"
        logger.debug(f"Issued local session for {entry.get('objectId')}")
        return Session(object_id=entry.get("objectId", credentials.username), session_token=token)

    def name(self) -> str:
        return "local"
