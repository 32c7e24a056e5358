from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from fastapi import Request, Response
from itsdangerous import BadSignature, TimestampSigner

from vapecave.core.config import AppSettings
from vapecave.core.exceptions import ConfigurationError
from vapecave.db.models import utcnow
from vapecave.services.storage import Storage

logger = logging.getLogger("vapecave.sessions")


@dataclass
class SessionState:
    sid: str
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def user_id(self) -> int | None:
        value = self.data.get("user_id")
        return value if isinstance(value, int) else None


class SessionManager:
    """
    Server-side sessions. The cookie only carries the session id, signed with
    the configured secret; the data lives in storage.
    """

    def __init__(
        self,
        storage: Storage,
        *,
        secret: str,
        cookie_name: str = "vapecave.sid",
        max_age_seconds: int = 30 * 24 * 60 * 60,
        secure: bool = False,
    ) -> None:
        if not secret:
            raise ConfigurationError("SESSION_SECRET must be configured.")
        self.storage = storage
        self.cookie_name = cookie_name
        self.max_age_seconds = max_age_seconds
        self.secure = secure
        self._signer = TimestampSigner(secret, salt="vapecave.session")

    @classmethod
    def from_settings(cls, storage: Storage, settings: AppSettings) -> "SessionManager":
        return cls(
            storage,
            secret=settings.session_secret or "",
            cookie_name=settings.session_cookie_name,
            max_age_seconds=settings.session_max_age_seconds,
            secure=settings.is_production,
        )

    def _sid_from_cookie(self, cookie_value: str | None) -> str | None:
        if not cookie_value:
            return None
        try:
            return self._signer.unsign(cookie_value, max_age=self.max_age_seconds).decode("utf-8")
        except BadSignature:
            logger.info("session.bad_signature")
            return None

    def load(self, request: Request) -> SessionState | None:
        sid = self._sid_from_cookie(request.cookies.get(self.cookie_name))
        if sid is None:
            return None
        data = self.storage.get_session(sid)
        if data is None:
            return None
        return SessionState(sid=sid, data=data)

    def create(self, response: Response, data: dict[str, Any], *, previous: SessionState | None = None) -> SessionState:
        """Start a fresh session, discarding any previous one so the id changes on login."""
        if previous is not None:
            self.storage.destroy_session(previous.sid)
        self.storage.prune_expired_sessions()
        sid = secrets.token_urlsafe(32)
        expires_at = utcnow() + timedelta(seconds=self.max_age_seconds)
        self.storage.save_session(sid, data, expires_at)
        response.set_cookie(
            self.cookie_name,
            self._signer.sign(sid).decode("utf-8"),
            max_age=self.max_age_seconds,
            httponly=True,
            samesite="lax",
            secure=self.secure,
            path="/",
        )
        return SessionState(sid=sid, data=data)

    def destroy(self, response: Response, state: SessionState | None) -> None:
        if state is not None:
            self.storage.destroy_session(state.sid)
        response.delete_cookie(
            self.cookie_name,
            httponly=True,
            samesite="lax",
            secure=self.secure,
            path="/",
        )
