"""ParseAuthenticator — logs users in through a Parse Server REST API."""

import logging
from typing import Optional

import httpx

from domain.errors import HandlerIndeterminate, InvalidCredentials
from domain.models import Credentials, Session
from ports.authenticator import AuthenticatorPort

logger = logging.getLogger(__name__)

# Parse.Error codes that mean "these credentials are wrong or incomplete".
OBJECT_NOT_FOUND = 101
USERNAME_MISSING = 200
PASSWORD_MISSING = 201
CREDENTIAL_ERROR_CODES = {OBJECT_NOT_FOUND, USERNAME_MISSING, PASSWORD_MISSING}


class ParseAuthenticator(AuthenticatorPort):
    def __init__(
        self,
        server_url: str,
        app_id: str,
        rest_api_key: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {
            "X-Parse-Application-Id": app_id,
            "X-Parse-Revocable-Session": "1",
            "Content-Type": "application/json",
        }
        if rest_api_key:
            headers["X-Parse-REST-API-Key"] = rest_api_key
        self._client = httpx.AsyncClient(
            base_url=server_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def login(self, credentials: Credentials) -> Session:
        try:
            resp = await self._client.post(
                "/login",
                json={"username": credentials.username, "password": credentials.password},
            )
        except httpx.TimeoutException as e:
            raise HandlerIndeterminate(f"Parse login timed out: {e}", timed_out=True) from e
        try:
            data = resp.json()
        except ValueError:
            raise HandlerIndeterminate(f"Parse returned non-JSON response ({resp.status_code})")

        if resp.status_code == 200:
            if not data.get("sessionToken"):
                raise HandlerIndeterminate("Parse login response has no sessionToken")
            return Session(object_id=data.get("objectId", ""), session_token=data["sessionToken"])

        code = data.get("code") if isinstance(data, dict) else None
        if code in CREDENTIAL_ERROR_CODES:
            raise InvalidCredentials(
                reason=data.get("error", "Invalid username/password."),
                status_code=resp.status_code,
                payload=data,
            )

        logger.warning(f"Parse login failed with status {resp.status_code}, code {code}")
        raise HandlerIndeterminate(f"Parse error {code} (HTTP {resp.status_code})")

    def name(self) -> str:
        return "parse"

    async def close(self) -> None:
        await self._client.aclose()
