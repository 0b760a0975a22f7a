import json
import logging
from fastapi import APIRouter, Depends, Request, Response, status

from ..core.auth import require_admin
from ..core.config import get_settings
from ..core.exceptions import ConflictError, MissingParamError
from ..core.keycloak import KeycloakAdminClient, get_keycloak_client
from ..core.rabbitmq import RabbitMQPublisher, get_publisher
from ..schemas.user import UserDTO

logger = logging.getLogger(__name__)

# Keycloak answers this when the username or email is taken
CONFLICT = 409

router = APIRouter(dependencies=[Depends(require_admin)])


def is_blank(value) -> bool:
    return value is None or value.strip() == ""


async def text_body(request: Request) -> str:
    """Request body as a string, accepting raw text or a JSON string"""
    body = (await request.body()).decode("utf-8").strip()
    if body.startswith('"'):
        try:
            return json.loads(body)
        except ValueError:
            pass
    return body


async def user_id_body(body: str = Depends(text_body)) -> str:
    if is_blank(body):
        raise MissingParamError("id")
    return body.strip()


async def email_body(body: str = Depends(text_body)) -> str:
    if is_blank(body):
        raise MissingParamError("email")
    return body.strip()


@router.post("/add")
async def add(
    user: UserDTO,
    keycloak: KeycloakAdminClient = Depends(get_keycloak_client),
    publisher: RabbitMQPublisher = Depends(get_publisher)
):
    """Create a user in Keycloak and grant the default roles"""
    if is_blank(user.email):
        raise MissingParamError("email")

    if is_blank(user.password):
        raise MissingParamError("password")

    if is_blank(user.username):
        raise MissingParamError("username")

    created_response = await keycloak.create_user(user)

    if created_response.status_code == CONFLICT:
        raise ConflictError(f"user or email already exists {user.email}")

    user_id = keycloak.get_created_id(created_response)
    logger.info(f"User created with userId: {user_id}")

    await keycloak.add_roles(user_id, get_settings().keycloak_default_roles)

    publisher.publish_event("user_created", {
        "user_id": user_id,
        "username": user.username,
        "email": user.email,
    })

    return Response(status_code=created_response.status_code)


@router.put("/update")
async def update(
    user: UserDTO,
    keycloak: KeycloakAdminClient = Depends(get_keycloak_client)
):
    """Update a Keycloak user by id"""
    if is_blank(user.id):
        raise MissingParamError("id")

    await keycloak.update_user(user)
    return Response(status_code=status.HTTP_200_OK)


@router.post("/deletebyid")
async def delete_by_user_id(
    user_id: str = Depends(user_id_body),
    keycloak: KeycloakAdminClient = Depends(get_keycloak_client)
):
    """Delete a Keycloak user; the id is sent in the body"""
    await keycloak.delete_user(user_id)
    return Response(status_code=status.HTTP_200_OK)


@router.post("/id")
async def find_by_id(
    user_id: str = Depends(user_id_body),
    keycloak: KeycloakAdminClient = Depends(get_keycloak_client)
):
    return await keycloak.find_user_by_id(user_id)


@router.post("/search")
async def search(
    email: str = Depends(email_body),
    keycloak: KeycloakAdminClient = Depends(get_keycloak_client)
):
    """Users with exactly this email"""
    return await keycloak.search_users_by_email(email)
