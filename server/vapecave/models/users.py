from __future__ import annotations

from pydantic import BaseModel, Field

from vapecave.models.common import CamelModel


class User(CamelModel):
    id: int
    username: str
    password: str = Field(..., exclude=True, description="bcrypt hash")
    is_admin: bool = False


class UserPublic(CamelModel):
    id: int
    username: str
    is_admin: bool = False


class UserCreate(CamelModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=72)
    is_admin: bool = False


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    user: UserPublic


class AuthStatus(BaseModel):
    authenticated: bool
    user: UserPublic | None = None
