"""
HTTP client for the Users Service.
Used to confirm that a token subject is a known user before storing data for it.
"""
import logging
from typing import Optional
import httpx

from .config import get_settings
from .exceptions import UpstreamUnavailableError

logger = logging.getLogger(__name__)
settings = get_settings()


class UserServiceClient:
    """Service client for Users Service integration."""

    def __init__(self, base_url: str = None, timeout: float = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = (base_url or settings.users_service_url).rstrip("/")
        self.client = httpx.AsyncClient(
            timeout=timeout or settings.users_service_timeout,
            transport=transport
        )

    async def user_exists(self, user_id: str, token: Optional[str] = None) -> bool:
        """
        Look the user up through the Users Service.

        Args:
            user_id: Identity provider user id
            token: Caller's bearer token, forwarded as is

        Returns:
            bool: True if the user is known

        Raises:
            UpstreamUnavailableError: If the Users Service cannot be reached
        """
        headers = {"Content-Type": "text/plain"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self.client.post(
                f"{self.base_url}/admin/user/id",
                content=user_id,
                headers=headers
            )
        except (httpx.TimeoutException, httpx.ConnectError) as e:
            logger.warning(f"Users Service unreachable: {e}")
            raise UpstreamUnavailableError("users service is unavailable, try again later")

        if response.status_code == 200 and response.content:
            return True

        logger.info(f"Users Service returned {response.status_code} for user {user_id}")
        return False

    async def health_check(self) -> bool:
        """Check if Users Service is healthy."""
        try:
            response = await self.client.get(f"{self.base_url}/health", timeout=5)
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.error(f"Users Service health check failed: {e}")
            return False

    async def close(self):
        await self.client.aclose()


# Global users service client instance
users_client = UserServiceClient()


def get_users_client() -> UserServiceClient:
    """Dependency returning the shared Users Service client."""
    return users_client
