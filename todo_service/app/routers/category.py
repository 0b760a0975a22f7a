import logging
from typing import List
from fastapi import APIRouter, Body, Depends, Response, status
from sqlalchemy.orm import Session

from ..core.auth import get_current_user, CurrentUser
from ..core.config import get_settings
from ..core.database import get_db
from ..core.exceptions import InvalidParamError, MissingParamError, NotFoundError, RedundantParamError
from ..core.users_client import UserServiceClient, get_users_client
from ..models.category import Category
from ..schemas.category import CategoryIn, CategoryResponse, CategorySearchValues
from ..services.category_service import CategoryService

logger = logging.getLogger(__name__)

router = APIRouter()

# width of the category.title column
TITLE_MAX_LENGTH = 255


def to_response(category: Category) -> CategoryResponse:
    return CategoryResponse(
        id=category.id,
        title=category.title,
        user_id=category.user_id
    )


def is_blank(value) -> bool:
    return value is None or str(value).strip() == ""


def check_title_length(title: str) -> None:
    if len(title) > TITLE_MAX_LENGTH:
        raise InvalidParamError("title", f"is longer than {TITLE_MAX_LENGTH} characters")


def get_category_service(db: Session = Depends(get_db)) -> CategoryService:
    return CategoryService(db)


@router.post("/all", response_model=List[CategoryResponse])
async def find_all(
    user_id: str = Body(..., description="Owner user id"),
    current_user: CurrentUser = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service)
):
    """All categories of the given user, ordered by title"""
    return [to_response(category) for category in service.find_all(user_id)]


@router.post("/add", response_model=CategoryResponse)
async def add(
    category: CategoryIn,
    current_user: CurrentUser = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
    users_client: UserServiceClient = Depends(get_users_client)
):
    """Create a category owned by the authenticated user"""
    category.user_id = current_user.user_id

    # id is generated by the database
    if category.id is not None and category.id != 0:
        raise RedundantParamError("category id MUST be null")

    if is_blank(category.title):
        raise MissingParamError("title MUST be not null")
    check_title_length(category.title)

    if is_blank(category.user_id):
        raise NotFoundError(f"user id={category.user_id} not found")

    if get_settings().check_user_exists:
        if not await users_client.user_exists(category.user_id, current_user.token):
            raise NotFoundError(f"user id={category.user_id} not found")

    db_category = service.add(Category(title=category.title, user_id=category.user_id))
    logger.info(f"Category {db_category.id} created for user {db_category.user_id}")
    return to_response(db_category)


@router.put("/update")
async def update(
    category: CategoryIn,
    current_user: CurrentUser = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service)
):
    """Save a category by id, refusing ids owned by another user"""
    if category.id is None or category.id == 0:
        raise MissingParamError("id")

    if is_blank(category.title):
        raise MissingParamError("title")
    check_title_length(category.title)

    service.update(Category(id=category.id, title=category.title, user_id=current_user.user_id))
    return Response(status_code=status.HTTP_200_OK)


@router.delete("/delete/{category_id}")
async def delete(
    category_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service)
):
    """Delete a category by id"""
    service.delete_by_id(category_id)
    return Response(status_code=status.HTTP_200_OK)


@router.post("/search", response_model=List[CategoryResponse])
async def search(
    search_values: CategorySearchValues,
    current_user: CurrentUser = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service)
):
    """Search the authenticated user's categories by title"""
    search_values.user_id = current_user.user_id

    if is_blank(search_values.user_id):
        raise MissingParamError("user id")

    categories = service.find_by_title(search_values.title, search_values.user_id)
    return [to_response(category) for category in categories]


@router.post("/id", response_model=CategoryResponse)
async def find_by_id(
    category_id: int = Body(..., description="Category ID"),
    current_user: CurrentUser = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service)
):
    """Get a category by id"""
    return to_response(service.find_by_id(category_id))
