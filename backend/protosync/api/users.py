"""
Users API Routes.

WHAT: REST endpoints for user management.

WHY: Routes only translate HTTP into service calls and wrap results in the
response envelope. Errors raised below propagate to the exception handlers.

HOW: Uses FastAPI with dependency injection for the database session.
Mutating routes commit explicitly before the response is built.
"""

from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from protosync.db.session import get_db
from protosync.schemas.common import ApiResponse, PaginatedResponse, PaginationInfo, ResponseMeta
from protosync.schemas.user import UserCreateRequest, UserResponse, UserUpdateRequest
from protosync.services.user_service import UserService


router = APIRouter(prefix="/users", tags=["users"])


def _envelope(request: Request, data) -> ApiResponse:
    return ApiResponse(data=data, meta=ResponseMeta.from_request(request))


@router.post(
    "",
    response_model=ApiResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_user(
    payload: UserCreateRequest,
    request: Request,
    session: AsyncSession = Depends(get_db),
):
    """Create a user. Fails with 409 when the email is already registered."""
    service = UserService(session)
    user = await service.create_user(payload.model_dump())
    await session.commit()
    return _envelope(request, UserResponse.model_validate(user))


@router.get(
    "",
    response_model=Union[PaginatedResponse[UserResponse], ApiResponse[List[UserResponse]]],
)
async def get_users(
    request: Request,
    page: Optional[int] = Query(None, ge=1, description="1-based page number"),
    limit: Optional[int] = Query(None, ge=1, le=100, description="Page size"),
    session: AsyncSession = Depends(get_db),
):
    """
    List active users.

    WHY: When either ``page`` or ``limit`` is present the paginated envelope
    is returned; otherwise every active user (up to the service cap).
    """
    service = UserService(session)

    if page is not None or limit is not None:
        result = await service.get_users_paginated(page=page or 1, limit=limit or 10)
        return PaginatedResponse[UserResponse](
            data=[UserResponse.model_validate(u) for u in result["data"]],
            pagination=PaginationInfo(
                page=result["page"],
                limit=result["limit"],
                total=result["total"],
                total_pages=result["total_pages"],
            ),
            meta=ResponseMeta.from_request(request),
        )

    users = await service.get_all_users()
    return _envelope(request, [UserResponse.model_validate(u) for u in users])


@router.get("/email/{email}", response_model=ApiResponse[Optional[UserResponse]])
async def get_user_by_email(
    email: str,
    request: Request,
    session: AsyncSession = Depends(get_db),
):
    """Look up an active user by email. Returns ``data: null`` when absent."""
    service = UserService(session)
    user = await service.get_user_by_email(email)
    return _envelope(request, UserResponse.model_validate(user) if user else None)


@router.get("/{user_id}", response_model=ApiResponse[UserResponse])
async def get_user(
    user_id: str,
    request: Request,
    session: AsyncSession = Depends(get_db),
):
    service = UserService(session)
    user = await service.get_user_by_id(user_id)
    return _envelope(request, UserResponse.model_validate(user))


async def _update_user(
    user_id: str,
    payload: UserUpdateRequest,
    request: Request,
    session: AsyncSession,
) -> ApiResponse:
    service = UserService(session)
    user = await service.update_user(
        user_id, payload.model_dump(exclude_unset=True, exclude_none=True)
    )
    await session.commit()
    return _envelope(request, UserResponse.model_validate(user))


@router.put("/{user_id}", response_model=ApiResponse[UserResponse])
async def update_user(
    user_id: str,
    payload: UserUpdateRequest,
    request: Request,
    session: AsyncSession = Depends(get_db),
):
    """Update a user. Only the supplied fields change."""
    return await _update_user(user_id, payload, request, session)


@router.patch("/{user_id}", response_model=ApiResponse[UserResponse])
async def patch_user(
    user_id: str,
    payload: UserUpdateRequest,
    request: Request,
    session: AsyncSession = Depends(get_db),
):
    return await _update_user(user_id, payload, request, session)


@router.post("/{user_id}/deactivate", response_model=ApiResponse[UserResponse])
async def deactivate_user(
    user_id: str,
    request: Request,
    session: AsyncSession = Depends(get_db),
):
    """
    Soft-delete a user.

    WHY: The record is kept with ``isActive: false`` and disappears from
    listings and email lookups.
    """
    service = UserService(session)
    user = await service.soft_delete_user(user_id)
    await session.commit()
    return _envelope(request, UserResponse.model_validate(user))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    session: AsyncSession = Depends(get_db),
):
    """Permanently delete a user."""
    service = UserService(session)
    await service.delete_user(user_id)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
