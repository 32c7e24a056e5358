from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.exc import IntegrityError

from vapecave.api.deps import (
    get_current_session,
    get_current_user,
    get_session_manager,
    get_storage,
    require_admin,
)
from vapecave.core.exceptions import AuthenticationError, ConflictError
from vapecave.models.common import MessageResponse
from vapecave.models.users import AuthStatus, LoginRequest, LoginResponse, User, UserCreate, UserPublic
from vapecave.services.sessions import SessionManager, SessionState
from vapecave.services.storage import Storage

logger = logging.getLogger("vapecave.auth")

router = APIRouter(prefix="/api/auth", tags=["auth"])
admin_router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def _public(user: User) -> UserPublic:
    return UserPublic.model_validate(user.model_dump())


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    response: Response,
    storage: Storage = Depends(get_storage),
    manager: SessionManager = Depends(get_session_manager),
    current: SessionState | None = Depends(get_current_session),
) -> LoginResponse:
    user = storage.validate_user(payload.username, payload.password)
    if user is None:
        logger.info("auth.login_failed")
        raise AuthenticationError("Invalid credentials")
    manager.create(response, {"user_id": user.id}, previous=current)
    logger.info("auth.login", extra={"user_id": user.id})
    return LoginResponse(user=_public(user))


@router.post("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    manager: SessionManager = Depends(get_session_manager),
    current: SessionState | None = Depends(get_current_session),
) -> MessageResponse:
    manager.destroy(response, current)
    return MessageResponse(message="Logged out successfully")


@router.get("/status", response_model=AuthStatus, response_model_exclude_none=True)
def auth_status(user: User | None = Depends(get_current_user)) -> AuthStatus:
    if user is None:
        return AuthStatus(authenticated=False)
    return AuthStatus(authenticated=True, user=_public(user))


@admin_router.post("/users", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, storage: Storage = Depends(get_storage)) -> UserPublic:
    if storage.get_user_by_username(payload.username) is not None:
        raise ConflictError("Username already exists")
    try:
        user = storage.create_user(payload.model_dump())
    except IntegrityError as exc:
        raise ConflictError("Username already exists") from exc
    return _public(user)
