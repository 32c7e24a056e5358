from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from vapecave.models.common import SnakeModel


class NewsletterSubscription(SnakeModel):
    id: int
    email: str
    source: str | None = None
    ip_address: str | None = None
    is_active: bool = True
    subscribed_at: datetime
    updated_at: datetime


class NewsletterSubscriptionCreate(SnakeModel):
    email: EmailStr
    source: str | None = None
    ip_address: str | None = None


class NewsletterSubscribeRequest(BaseModel):
    email: EmailStr


class SubscriptionStatusUpdate(BaseModel):
    is_active: bool = Field(..., strict=True)


class ContactRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    subject: str | None = Field(None, max_length=200)
    message: str = Field(..., min_length=1, max_length=5000)
