import asyncio

import httpx
import pytest

from todo_service.app.core.exceptions import UpstreamUnavailableError
from todo_service.app.core.users_client import UserServiceClient


def client_for(handler):
    return UserServiceClient(base_url="http://users.test", transport=httpx.MockTransport(handler))


def test_user_exists_forwards_id_and_token():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"id": "u1", "username": "alice"})

    assert asyncio.run(client_for(handler).user_exists("u1", token="abc")) is True

    request = seen[0]
    assert request.url.path == "/admin/user/id"
    assert request.content == b"u1"
    assert request.headers["Authorization"] == "Bearer abc"


def test_unknown_user():
    def handler(request):
        return httpx.Response(404, text="User not found")

    assert asyncio.run(client_for(handler).user_exists("nobody")) is False


def test_unreachable_users_service():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamUnavailableError) as exc_info:
        asyncio.run(client_for(handler).user_exists("u1"))

    assert exc_info.value.message == "users service is unavailable, try again later"
