from __future__ import annotations

from fastapi import Depends, Request

from vapecave.core.config import AppSettings
from vapecave.core.exceptions import AuthenticationError, PermissionDeniedError
from vapecave.models.users import User
from vapecave.services.mail import Mailer
from vapecave.services.sessions import SessionManager, SessionState
from vapecave.services.storage import Storage


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_app_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.sessions


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


def get_current_session(
    request: Request,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionState | None:
    return manager.load(request)


def get_current_user(
    session: SessionState | None = Depends(get_current_session),
    storage: Storage = Depends(get_storage),
) -> User | None:
    if session is None or session.user_id is None:
        return None
    return storage.get_user(session.user_id)


def require_authenticated(session: SessionState | None = Depends(get_current_session)) -> SessionState:
    if session is None or session.user_id is None:
        raise AuthenticationError("Unauthorized")
    return session


def require_admin(
    session: SessionState = Depends(require_authenticated),
    storage: Storage = Depends(get_storage),
) -> User:
    # Role is read from the user row on every request, never cached in the session.
    user = storage.get_user(session.user_id)
    if user is None or not user.is_admin:
        raise PermissionDeniedError("Forbidden: Admin access required")
    return user
