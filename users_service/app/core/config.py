"""
Configuration settings for Users Service.
"""
import os
from typing import List, Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Settings:
    """Application settings"""

    # Service information
    service_name: str = os.getenv("SERVICE_NAME", "users_service")
    service_version: str = os.getenv("SERVICE_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "False").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Bearer token verification (Keycloak signs with RS256)
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "RS256")
    jwt_public_key: Optional[str] = os.getenv("JWT_PUBLIC_KEY")
    jwt_secret_key: Optional[str] = os.getenv("JWT_SECRET_KEY")
    jwt_audience: Optional[str] = os.getenv("JWT_AUDIENCE") or None
    admin_role: str = os.getenv("ADMIN_ROLE", "admin")

    # Keycloak admin API
    keycloak_server_url: str = os.getenv("KEYCLOAK_SERVER_URL", "http://keycloak:8080")
    keycloak_realm: str = os.getenv("KEYCLOAK_REALM", "planner")
    keycloak_client_id: str = os.getenv("KEYCLOAK_CLIENT_ID", "planner-users")
    keycloak_client_secret: str = os.getenv("KEYCLOAK_CLIENT_SECRET", "")
    keycloak_timeout: int = int(os.getenv("KEYCLOAK_TIMEOUT", "30"))
    # Realm roles granted to every created user, they must exist in the realm
    keycloak_default_roles: List[str] = [
        role.strip() for role in os.getenv("KEYCLOAK_DEFAULT_ROLES", "user").split(",") if role.strip()
    ]

    # RabbitMQ configuration
    rabbitmq_enabled: bool = os.getenv("RABBITMQ_ENABLED", "True").lower() == "true"
    rabbitmq_host: str = os.getenv("RABBITMQ_HOST", "rabbitmq")
    rabbitmq_port: int = int(os.getenv("RABBITMQ_PORT", "5672"))
    rabbitmq_user: str = os.getenv("RABBITMQ_USER", "admin")
    rabbitmq_password: str = os.getenv("RABBITMQ_PASSWORD", "admin123")

    # CORS configuration
    allowed_origins: List[str] = os.getenv("ALLOWED_ORIGINS", "*").split(",")

    @property
    def jwt_verification_key(self) -> Optional[str]:
        """Key used to verify bearer tokens for the configured algorithm."""
        if self.jwt_algorithm.startswith("HS"):
            return self.jwt_secret_key
        return self.jwt_public_key


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get settings instance."""
    return settings
