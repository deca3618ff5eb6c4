"""
Tests for the Parse Server authenticator against a mocked transport.
"""
from __future__ import annotations

import httpx
import pytest

from adapters.parse import ParseAuthenticator
from domain.errors import HandlerIndeterminate, InvalidCredentials
from domain.models import Credentials


def _auth(handler) -> ParseAuthenticator:
    return ParseAuthenticator(
        server_url="https://parse.example.com/parse/",
        app_id="app",
        rest_api_key="rest",
        transport=httpx.MockTransport(handler),
    )


async def test_login_success_sends_parse_headers():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        return httpx.Response(200, json={"objectId": "u1", "sessionToken": "r:abc", "username": "alice"})

    auth = _auth(handler)
    session = await auth.login(Credentials("alice", "secret"))
    await auth.close()

    assert session.object_id == "u1"
    assert session.session_token == "r:abc"
    assert seen["url"] == "https://parse.example.com/parse/login"
    assert seen["headers"]["x-parse-application-id"] == "app"
    assert seen["headers"]["x-parse-rest-api-key"] == "rest"
    assert seen["headers"]["x-parse-revocable-session"] == "1"


@pytest.mark.parametrize(
    "status, code",
    [(404, 101), (400, 200), (400, 201)],
)
async def test_credential_errors_raise_invalid_credentials(status, code):
    payload = {"code": code, "error": "nope"}
    auth = _auth(lambda request: httpx.Response(status, json=payload))
    with pytest.raises(InvalidCredentials) as info:
        await auth.login(Credentials("alice", "wrong"))
    assert info.value.status_code == status
    assert info.value.payload == payload


async def test_server_error_is_indeterminate():
    auth = _auth(lambda request: httpx.Response(500, json={"code": 1, "error": "Internal server error."}))
    with pytest.raises(HandlerIndeterminate):
        await auth.login(Credentials("alice", "secret"))


async def test_non_json_response_is_indeterminate():
    auth = _auth(lambda request: httpx.Response(502, text="<html>Bad Gateway</html>"))
    with pytest.raises(HandlerIndeterminate):
        await auth.login(Credentials("alice", "secret"))


async def test_missing_session_token_is_indeterminate():
    auth = _auth(lambda request: httpx.Response(200, json={"objectId": "u1"}))
    with pytest.raises(HandlerIndeterminate):
        await auth.login(Credentials("alice", "secret"))


async def test_transport_error_propagates():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    auth = _auth(handler)
    with pytest.raises(httpx.ConnectError):
        await auth.login(Credentials("alice", "secret"))


async def test_http_timeout_is_flagged_as_timeout():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    auth = _auth(handler)
    with pytest.raises(HandlerIndeterminate) as info:
        await auth.login(Credentials("alice", "secret"))
    assert info.value.timed_out
