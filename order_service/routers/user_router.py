"""
User API router.

CRUD endpoints over user accounts. Domain errors are mapped to HTTP
responses by the application's exception handlers.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ..config import settings
from ..dependencies import get_user_service
from ..domain.entities import PageRequest
from ..services.user_service import UserService
from ..validators import (USER_SORT_ORDERS, ErrorResponse, UserCreate,
                          UserResponse, UserUpdate, parse_sort_order)

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "",
    response_model=List[UserResponse],
    summary="List users",
)
async def list_users(
    offset: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    order: Optional[str] = Query("newest", description="newest or oldest"),
    service: UserService = Depends(get_user_service),
):
    page = PageRequest(offset=offset, limit=limit, order=parse_sort_order(order, USER_SORT_ORDERS))
    users = await service.list_users(page)
    return [UserResponse.from_entity(user) for user in users]


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Get user",
)
async def get_user(user_id: str, service: UserService = Depends(get_user_service)):
    return UserResponse.from_entity(await service.get_user(user_id))


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid payload or email taken", "model": ErrorResponse}},
    summary="Create user",
)
async def create_user(payload: UserCreate, service: UserService = Depends(get_user_service)):
    user = await service.create_user(payload.model_dump(mode="json"))
    return UserResponse.from_entity(user)


@router.patch(
    "/{user_id}",
    response_model=UserResponse,
    responses={
        400: {"description": "Invalid payload or email taken", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Update user",
)
async def update_user(
    user_id: str,
    payload: UserUpdate,
    service: UserService = Depends(get_user_service),
):
    user = await service.update_user(user_id, payload.changes())
    return UserResponse.from_entity(user)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        400: {"description": "User still has orders", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Delete user",
)
async def delete_user(user_id: str, service: UserService = Depends(get_user_service)):
    await service.delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
