"""
TechNotes Backend - Users Route Handlers
=========================================

What:  GET/POST/PATCH/DELETE on /users.
How:   Thin handlers: unpack the body, call UserService, return its result.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import ErrorResponse, MessageResponse
from app.schemas.user import UserCreate, UserDelete, UserResponse, UserUpdate
from app.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "",
    response_model=List[UserResponse],
    responses={
        400: {"description": "No users found", "model": ErrorResponse},
    },
    summary="List all users",
    description="Returns every user. Password hashes are never included.",
)
async def list_users(db: AsyncSession = Depends(get_db_session)) -> List[UserResponse]:
    return await user_service.list_users(db=db)


@router.post(
    "",
    status_code=201,
    response_model=MessageResponse,
    responses={
        400: {"description": "Missing username, password or roles", "model": ErrorResponse},
        409: {"description": "Duplicate username", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a user",
)
async def create_user(
    payload: Optional[UserCreate] = None,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    """
    Example request body:
        {"username": "alice", "password": "secret1", "roles": ["Employee"]}
    """
    payload = payload or UserCreate()
    return await user_service.create_user(
        db=db,
        username=payload.username,
        password=payload.password,
        roles=payload.roles,
    )


@router.patch(
    "",
    response_model=MessageResponse,
    responses={
        400: {"description": "Invalid fields or unknown user", "model": ErrorResponse},
        409: {"description": "Duplicate username", "model": ErrorResponse},
    },
    summary="Update a user",
    description="Omit `password` to keep the current one.",
)
async def update_user(
    payload: Optional[UserUpdate] = None,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    payload = payload or UserUpdate()
    return await user_service.update_user(
        db=db,
        user_id=payload.id,
        username=payload.username,
        roles=payload.roles,
        active=payload.active,
        password=payload.password,
    )


@router.delete(
    "",
    response_model=MessageResponse,
    responses={
        400: {"description": "Missing id, unknown user, or user has notes", "model": ErrorResponse},
    },
    summary="Delete a user",
)
async def delete_user(
    payload: Optional[UserDelete] = None,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    payload = payload or UserDelete()
    return await user_service.delete_user(db=db, user_id=payload.id)
