from __future__ import annotations

import re
import uuid
from contextvars import ContextVar, Token
from typing import Optional

_request_id_ctx_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Incoming ids are echoed into logs and response headers.
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def set_request_id(request_id: Optional[str] = None) -> Token:
    value = request_id if request_id and _SAFE_REQUEST_ID.match(request_id) else str(uuid.uuid4())
    return _request_id_ctx_var.set(value)


def get_request_id() -> Optional[str]:
    return _request_id_ctx_var.get()


def reset_request_id(token: Token) -> None:
    _request_id_ctx_var.reset(token)
