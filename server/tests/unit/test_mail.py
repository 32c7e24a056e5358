from __future__ import annotations

import smtplib
from types import SimpleNamespace

import pytest

from vapecave.models.newsletter import ContactRequest
from vapecave.services.mail import MailDeliveryError, Mailer


class FakeSMTP:
    instances: list["FakeSMTP"] = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.started_tls = False
        self.logged_in = None
        self.sent = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def starttls(self, context=None):
        self.started_tls = True

    def login(self, username, password):
        self.logged_in = (username, password)

    def send_message(self, message):
        self.sent.append(message)


class BrokenSMTP(FakeSMTP):
    def send_message(self, message):
        raise smtplib.SMTPException("relay refused")


def make_settings(**overrides) -> SimpleNamespace:
    base = {
        "smtp_host": "smtp.example.com",
        "smtp_port": 587,
        "smtp_username": "mailer",
        "smtp_password": "from-env",
        "smtp_use_tls": True,
        "mail_from": "noreply@example.com",
        "mail_notify_to": "owner@example.com",
    }
    base.update(overrides)
    return SimpleNamespace(**base)


@pytest.fixture(autouse=True)
def _reset_instances():
    FakeSMTP.instances.clear()
    yield
    FakeSMTP.instances.clear()


def contact() -> ContactRequest:
    return ContactRequest(name="Jo", email="jo@example.com", subject="Hours", message="Open <late>?\nThanks")


def test_unconfigured_mailer_only_logs() -> None:
    mailer = Mailer(make_settings(smtp_host=None), smtp_factory=FakeSMTP)

    mailer.send_contact_message(contact())

    assert FakeSMTP.instances == []


def test_contact_message_is_sent_with_reply_to() -> None:
    mailer = Mailer(make_settings(), smtp_factory=FakeSMTP)

    mailer.send_contact_message(contact())

    server = FakeSMTP.instances[0]
    message = server.sent[0]
    assert server.started_tls is True
    assert server.logged_in == ("mailer", "from-env")
    assert message["To"] == "owner@example.com"
    assert message["Reply-To"] == "jo@example.com"
    assert message["Subject"] == "Contact Form Submission: Hours"
    html_part = message.get_body(preferencelist=("html",)).get_content()
    assert "&lt;late&gt;" in html_part


def test_newsletter_notification() -> None:
    mailer = Mailer(make_settings(smtp_use_tls=False, smtp_username=None), smtp_factory=FakeSMTP)

    mailer.send_newsletter_notification("fan@example.com")

    server = FakeSMTP.instances[0]
    assert server.started_tls is False
    assert server.logged_in is None
    assert "fan@example.com" in server.sent[0].get_content()


def test_delivery_failure_raises() -> None:
    mailer = Mailer(make_settings(), smtp_factory=BrokenSMTP)

    with pytest.raises(MailDeliveryError):
        mailer.send_newsletter_notification("fan@example.com")
