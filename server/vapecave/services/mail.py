from __future__ import annotations

import html
import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Callable

from vapecave.core.config import AppSettings
from vapecave.core.exceptions import AppError
from vapecave.models.newsletter import ContactRequest

logger = logging.getLogger("vapecave.mail")


class MailDeliveryError(AppError):
    status_code = 500
    error_type = "MAIL_DELIVERY_ERROR"


class Mailer:
    """Store notifications over SMTP. Without SMTP settings messages are only logged."""

    def __init__(self, settings: AppSettings, smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP) -> None:
        self.settings = settings
        self._smtp_factory = smtp_factory

    @property
    def configured(self) -> bool:
        return bool(self.settings.smtp_host and self.settings.mail_from and self.settings.mail_notify_to)

    def _send(self, message: EmailMessage) -> None:
        if not self.configured:
            logger.info("mail.skipped", extra={"subject": message["Subject"], "reason": "SMTP not configured"})
            return

        message["From"] = self.settings.mail_from
        message["To"] = self.settings.mail_notify_to
        try:
            with self._smtp_factory(self.settings.smtp_host, self.settings.smtp_port, timeout=15) as server:
                if self.settings.smtp_use_tls:
                    server.starttls(context=ssl.create_default_context())
                if self.settings.smtp_username and self.settings.smtp_password:
                    server.login(self.settings.smtp_username, self.settings.smtp_password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("mail.failed", extra={"subject": message["Subject"], "error": str(exc)})
            raise MailDeliveryError("Failed to send email.") from exc
        logger.info("mail.sent", extra={"subject": message["Subject"]})

    def send_contact_message(self, contact: ContactRequest) -> None:
        subject = f"Contact Form Submission: {contact.subject or 'General inquiry'}"
        message = EmailMessage()
        message["Subject"] = subject
        message["Reply-To"] = str(contact.email)
        message.set_content(
            f"Name: {contact.name}\n"
            f"Email: {contact.email}\n"
            f"Subject: {contact.subject or ''}\n\n"
            f"Message:\n{contact.message}\n"
        )
        body = html.escape(contact.message).replace("\n", "<br>")
        message.add_alternative(
            "<div style=\"font-family: Arial, sans-serif;\">"
            "<h2>New Contact Form Submission</h2>"
            f"<p><strong>Name:</strong> {html.escape(contact.name)}</p>"
            f"<p><strong>Email:</strong> {html.escape(str(contact.email))}</p>"
            f"<p><strong>Subject:</strong> {html.escape(contact.subject or '')}</p>"
            f"<div>{body}</div>"
            "</div>",
            subtype="html",
        )
        self._send(message)

    def send_newsletter_notification(self, email: str) -> None:
        message = EmailMessage()
        message["Subject"] = "New Newsletter Subscription"
        message.set_content(
            f"New Newsletter Subscription\nEmail: {email}\n\n"
            "This user has subscribed to receive updates from Vape Cave.\n"
        )
        self._send(message)
