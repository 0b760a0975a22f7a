import httpx
import pytest
from fastapi.testclient import TestClient

from users_service.app.core.exceptions import IdentityProviderError
from users_service.app.core.keycloak import KeycloakAdminClient, get_keycloak_client
from users_service.app.core.rabbitmq import get_publisher
from users_service.app.main import app

ADMIN = ["user", "admin"]


class FakeKeycloak:
    """Records calls instead of talking to Keycloak"""

    def __init__(self, create_status=201):
        self.create_status = create_status
        self.calls = []

    async def create_user(self, user):
        self.calls.append(("create_user", user))
        headers = {"Location": "http://keycloak.test/admin/realms/planner/users/new-id"}
        return httpx.Response(self.create_status, headers=headers)

    def get_created_id(self, response):
        return KeycloakAdminClient.get_created_id(response)

    async def add_roles(self, user_id, roles):
        self.calls.append(("add_roles", user_id, roles))

    async def update_user(self, user):
        self.calls.append(("update_user", user))

    async def delete_user(self, user_id):
        self.calls.append(("delete_user", user_id))

    async def find_user_by_id(self, user_id):
        self.calls.append(("find_user_by_id", user_id))
        if user_id == "missing":
            raise IdentityProviderError(404, '{"error":"User not found"}')
        return {"id": user_id, "username": "alice"}

    async def search_users_by_email(self, email):
        self.calls.append(("search_users_by_email", email))
        return [{"id": "u1", "email": email}]


class FakePublisher:
    def __init__(self):
        self.events = []

    def publish_event(self, event_type, data):
        self.events.append((event_type, data))
        return True


@pytest.fixture
def keycloak():
    return FakeKeycloak()


@pytest.fixture
def publisher():
    return FakePublisher()


@pytest.fixture
def client(keycloak, publisher):
    app.dependency_overrides[get_keycloak_client] = lambda: keycloak
    app.dependency_overrides[get_publisher] = lambda: publisher
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(headers_for):
    return headers_for("admin-1", roles=ADMIN)


NEW_USER = {"email": "alice@example.com", "username": "alice", "password": "secret"}


@pytest.mark.parametrize("field", ["email", "password", "username"])
@pytest.mark.parametrize("value", [None, "", "  "])
def test_add_rejects_blank_required_field(client, keycloak, admin_headers, field, value):
    payload = dict(NEW_USER, **{field: value})

    response = client.post("/admin/user/add", json=payload, headers=admin_headers)

    assert response.status_code == 406
    assert response.text == f"missed param: {field}"
    assert keycloak.calls == []


def test_add_creates_user_with_default_roles(client, keycloak, publisher, admin_headers):
    response = client.post("/admin/user/add", json=NEW_USER, headers=admin_headers)

    assert response.status_code == 201
    assert keycloak.calls[0][0] == "create_user"
    assert keycloak.calls[1] == ("add_roles", "new-id", ["user"])
    assert publisher.events == [
        ("user_created", {"user_id": "new-id", "username": "alice", "email": "alice@example.com"})
    ]


def test_add_reports_conflict(client, keycloak, publisher, admin_headers):
    keycloak.create_status = 409

    response = client.post("/admin/user/add", json=NEW_USER, headers=admin_headers)

    assert response.status_code == 409
    assert response.text == "user or email already exists alice@example.com"
    assert [call[0] for call in keycloak.calls] == ["create_user"]
    assert publisher.events == []


def test_add_surfaces_unexpected_create_status(client, keycloak, admin_headers):
    keycloak.create_status = 400

    response = client.post("/admin/user/add", json=NEW_USER, headers=admin_headers)

    assert response.status_code == 400


def test_update_requires_id(client, keycloak, admin_headers):
    for payload in ({"username": "bob"}, {"id": " ", "username": "bob"}):
        response = client.put("/admin/user/update", json=payload, headers=admin_headers)

        assert response.status_code == 406
        assert response.text == "missed param: id"
    assert keycloak.calls == []


def test_update_passes_user_through(client, keycloak, admin_headers):
    response = client.put("/admin/user/update", json={"id": "u1", "email": "new@example.com"}, headers=admin_headers)

    assert response.status_code == 200
    assert keycloak.calls[0][0] == "update_user"
    assert keycloak.calls[0][1].email == "new@example.com"


def test_delete_accepts_raw_text_body(client, keycloak, admin_headers):
    response = client.post("/admin/user/deletebyid", content="u1", headers=admin_headers)

    assert response.status_code == 200
    assert keycloak.calls == [("delete_user", "u1")]


def test_delete_accepts_json_string_body(client, keycloak, admin_headers):
    response = client.post("/admin/user/deletebyid", json="u1", headers=admin_headers)

    assert response.status_code == 200
    assert keycloak.calls == [("delete_user", "u1")]


def test_find_by_id_returns_representation(client, admin_headers):
    response = client.post("/admin/user/id", content="u1", headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {"id": "u1", "username": "alice"}


def test_find_by_id_surfaces_provider_status(client, admin_headers):
    response = client.post("/admin/user/id", content="missing", headers=admin_headers)

    assert response.status_code == 404


def test_search_by_email(client, keycloak, admin_headers):
    response = client.post("/admin/user/search", content="alice@example.com", headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == [{"id": "u1", "email": "alice@example.com"}]
    assert keycloak.calls == [("search_users_by_email", "alice@example.com")]


def test_admin_role_required(client, keycloak, headers_for):
    response = client.post("/admin/user/add", json=NEW_USER, headers=headers_for("u1", roles=["user"]))

    assert response.status_code == 403
    assert keycloak.calls == []


def test_token_required(client):
    response = client.post("/admin/user/id", content="u1")

    assert response.status_code == 401


@pytest.mark.parametrize("body", ["", "   ", '""', '"  "'])
@pytest.mark.parametrize("path, param", [
    ("/admin/user/id", "id"),
    ("/admin/user/deletebyid", "id"),
    ("/admin/user/search", "email"),
])
def test_blank_text_body_is_rejected_before_keycloak(client, keycloak, admin_headers, path, param, body):
    response = client.post(path, content=body, headers=admin_headers)

    assert response.status_code == 406
    assert response.text == f"missed param: {param}"
    assert keycloak.calls == []


def test_lookup_with_empty_body_never_reaches_users_collection(admin_headers, publisher):
    requests = []

    def handler(request):
        requests.append(request)
        if request.url.path.endswith("/token"):
            return httpx.Response(200, json={"access_token": "admin-token", "expires_in": 300})
        return httpx.Response(200, json=[{"id": "a"}, {"id": "b"}])

    keycloak = KeycloakAdminClient(server_url="http://keycloak.test", realm="planner",
                                   transport=httpx.MockTransport(handler))
    app.dependency_overrides[get_keycloak_client] = lambda: keycloak
    app.dependency_overrides[get_publisher] = lambda: publisher
    try:
        response = TestClient(app).post("/admin/user/id", content="", headers=admin_headers)
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 406
    assert requests == []


def test_responses_carry_process_time(client, admin_headers):
    response = client.post("/admin/user/id", content="u1", headers=admin_headers)

    assert float(response.headers["X-Process-Time"]) >= 0
