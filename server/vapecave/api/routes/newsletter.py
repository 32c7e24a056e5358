from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, Request

from vapecave.api.deps import get_mailer, get_storage, require_admin
from vapecave.core.exceptions import NotFoundError
from vapecave.models.common import MessageResponse
from vapecave.models.newsletter import (
    ContactRequest,
    NewsletterSubscribeRequest,
    NewsletterSubscription,
    SubscriptionStatusUpdate,
)
from vapecave.services.mail import Mailer, MailDeliveryError
from vapecave.services.storage import Storage

logger = logging.getLogger("vapecave.newsletter")

router = APIRouter(prefix="/api", tags=["newsletter"])
admin_router = APIRouter(
    prefix="/api/admin/newsletter-subscriptions",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


@router.post("/contact", response_model=MessageResponse)
def submit_contact_form(payload: ContactRequest, mailer: Mailer = Depends(get_mailer)) -> MessageResponse:
    mailer.send_contact_message(payload)
    return MessageResponse(message="Contact form submitted successfully")


@router.post("/newsletter/subscribe", response_model=MessageResponse)
def subscribe(
    payload: NewsletterSubscribeRequest,
    request: Request,
    storage: Storage = Depends(get_storage),
    mailer: Mailer = Depends(get_mailer),
) -> MessageResponse:
    email = str(payload.email).strip().lower()
    existing = storage.get_newsletter_subscription_by_email(email)
    if existing is not None:
        if not existing.is_active:
            storage.set_newsletter_subscription_status(existing.id, True)
        return MessageResponse(message="Newsletter subscription successful")

    storage.create_newsletter_subscription(
        {
            "email": email,
            "ip_address": request.client.host if request.client else None,
            "source": "website" if request.headers.get("referer") else "unknown",
        }
    )
    try:
        mailer.send_newsletter_notification(email)
    except MailDeliveryError:
        logger.warning("newsletter.notification_failed")
    return MessageResponse(message="Newsletter subscription successful")


@admin_router.get("", response_model=List[NewsletterSubscription])
def list_subscriptions(storage: Storage = Depends(get_storage)) -> List[NewsletterSubscription]:
    return storage.get_all_newsletter_subscriptions()


@admin_router.put("/{subscription_id}/toggle", response_model=NewsletterSubscription)
def toggle_subscription(
    subscription_id: int,
    payload: SubscriptionStatusUpdate,
    storage: Storage = Depends(get_storage),
) -> NewsletterSubscription:
    subscription = storage.set_newsletter_subscription_status(subscription_id, payload.is_active)
    if subscription is None:
        raise NotFoundError("Subscription not found")
    return subscription


@admin_router.delete("/{subscription_id}", response_model=MessageResponse)
def delete_subscription(subscription_id: int, storage: Storage = Depends(get_storage)) -> MessageResponse:
    if not storage.delete_newsletter_subscription(subscription_id):
        raise NotFoundError("Subscription not found")
    return MessageResponse(message="Subscription deleted successfully")
