"""Shared fixtures for the todo and users service tests.

Both services read their settings from the environment at import time, so the
environment is prepared here before any service module is imported.
"""
import os
import time

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["CHECK_USER_EXISTS"] = "false"
os.environ["RABBITMQ_ENABLED"] = "false"
os.environ["KEYCLOAK_SERVER_URL"] = "http://keycloak.test"
os.environ["KEYCLOAK_REALM"] = "planner"
os.environ["KEYCLOAK_DEFAULT_ROLES"] = "user"
os.environ["USERS_SERVICE_URL"] = "http://users.test"

import pytest
from jose import jwt

TEST_SECRET = "test-secret"


def make_token(sub="u1", roles=None, expires_in=300, secret=TEST_SECRET, **claims):
    """Sign an access token shaped like the ones Keycloak issues."""
    payload = {
        "sub": sub,
        "preferred_username": claims.pop("username", sub),
        "realm_access": {"roles": roles or ["user"]},
        "exp": int(time.time()) + expires_in,
    }
    payload.update(claims)
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_header(sub="u1", roles=None):
    return {"Authorization": f"Bearer {make_token(sub=sub, roles=roles)}"}


@pytest.fixture
def token_factory():
    return make_token


@pytest.fixture
def headers_for():
    return auth_header
