"""
Keycloak Admin REST API client.
"""
import logging
import time
from typing import Any, Dict, List, Optional
from urllib.parse import quote
import httpx

from .config import get_settings
from .exceptions import IdentityProviderError, UpstreamUnavailableError
from ..schemas.user import UserDTO

logger = logging.getLogger(__name__)
settings = get_settings()

# Refresh the admin token this many seconds before it expires
TOKEN_EXPIRY_MARGIN = 30


class KeycloakAdminClient:
    """Service client for the Keycloak admin API of one realm."""

    def __init__(self, server_url: str = None, realm: str = None, client_id: str = None,
                 client_secret: str = None, timeout: float = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.server_url = (server_url or settings.keycloak_server_url).rstrip("/")
        self.realm = realm or settings.keycloak_realm
        self.client_id = client_id or settings.keycloak_client_id
        self.client_secret = client_secret if client_secret is not None else settings.keycloak_client_secret
        self.client = httpx.AsyncClient(
            base_url=self.server_url,
            timeout=timeout or settings.keycloak_timeout,
            transport=transport
        )
        self._access_token: Optional[str] = None
        self._token_expires_at: float = 0.0

    @property
    def admin_path(self) -> str:
        return f"/admin/realms/{self.realm}"

    async def _get_admin_token(self) -> str:
        """Service account token obtained with the client credentials grant."""
        if self._access_token and time.monotonic() < self._token_expires_at:
            return self._access_token

        try:
            response = await self.client.post(
                f"/realms/{self.realm}/protocol/openid-connect/token",
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                }
            )
        except httpx.TransportError as e:
            logger.error(f"Keycloak token endpoint unreachable: {e}")
            raise UpstreamUnavailableError("identity provider is unavailable")

        if response.status_code != 200:
            logger.error(f"Keycloak refused service credentials: {response.status_code} {response.text}")
            raise IdentityProviderError(502, "identity provider rejected service credentials")

        payload = response.json()
        self._access_token = payload["access_token"]
        expires_in = int(payload.get("expires_in", 60))
        self._token_expires_at = time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0)
        return self._access_token

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        token = await self._get_admin_token()
        headers = {"Authorization": f"Bearer {token}"}
        try:
            response = await self.client.request(method, f"{self.admin_path}{path}", headers=headers, **kwargs)
        except httpx.TransportError as e:
            logger.error(f"Keycloak request {method} {path} failed: {e}")
            raise UpstreamUnavailableError("identity provider is unavailable")

        logger.debug(f"Keycloak {method} {path} -> {response.status_code}")
        return response

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.status_code >= 400:
            message = response.text or response.reason_phrase
            raise IdentityProviderError(response.status_code, message)

    @staticmethod
    def _user_representation(user: UserDTO) -> Dict[str, Any]:
        representation: Dict[str, Any] = {}
        if user.username:
            representation["username"] = user.username
        if user.email:
            representation["email"] = user.email
        if user.password:
            representation["credentials"] = [{
                "type": "password",
                "value": user.password,
                "temporary": False,
            }]
        return representation

    async def create_user(self, user: UserDTO) -> httpx.Response:
        """
        Create the user in the realm.

        The response is returned for any status so callers can tell a
        conflict (409) from a creation (201).
        """
        representation = self._user_representation(user)
        representation["enabled"] = True
        representation["emailVerified"] = False
        return await self._request("POST", "/users", json=representation)

    @staticmethod
    def get_created_id(response: httpx.Response) -> str:
        """Id of a user created by create_user, read from the Location header."""
        if response.status_code != 201:
            raise IdentityProviderError(
                response.status_code,
                f"Create method returned status {response.reason_phrase} (Code: {response.status_code})"
            )
        location = response.headers.get("Location")
        if not location:
            raise IdentityProviderError(502, "Create method returned no location")
        return location.rstrip("/").rsplit("/", 1)[-1]

    async def add_roles(self, user_id: str, roles: List[str]) -> None:
        """Grant realm roles to the user."""
        role_representations = []
        for role in roles:
            response = await self._request("GET", f"/roles/{quote(role, safe='')}")
            self._raise_for_status(response)
            role_representations.append(response.json())

        response = await self._request(
            "POST",
            f"/users/{quote(user_id, safe='')}/role-mappings/realm",
            json=role_representations
        )
        self._raise_for_status(response)
        logger.info(f"Granted roles {roles} to user {user_id}")

    async def update_user(self, user: UserDTO) -> None:
        response = await self._request(
            "PUT",
            f"/users/{quote(user.id, safe='')}",
            json=self._user_representation(user)
        )
        self._raise_for_status(response)

    async def delete_user(self, user_id: str) -> None:
        response = await self._request("DELETE", f"/users/{quote(user_id, safe='')}")
        self._raise_for_status(response)

    async def find_user_by_id(self, user_id: str) -> Dict[str, Any]:
        response = await self._request("GET", f"/users/{quote(user_id, safe='')}")
        self._raise_for_status(response)
        return response.json()

    async def search_users_by_email(self, email: str) -> List[Dict[str, Any]]:
        """Users whose email matches exactly"""
        response = await self._request("GET", "/users", params={"email": email, "exact": "true"})
        self._raise_for_status(response)
        return response.json()

    async def health_check(self) -> bool:
        try:
            response = await self.client.get(f"/realms/{self.realm}", timeout=5)
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.error(f"Keycloak health check failed: {e}")
            return False

    async def close(self):
        await self.client.aclose()


# Global Keycloak client instance
keycloak_client = KeycloakAdminClient()


def get_keycloak_client() -> KeycloakAdminClient:
    """Dependency returning the shared Keycloak client."""
    return keycloak_client
