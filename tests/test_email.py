import smtplib

import pytest

from campus_portal.utils import email
from conftest import run


@pytest.fixture
def mail_credentials(monkeypatch):
    monkeypatch.setenv("MAIL_USERNAME", "placements@gmail.com")
    monkeypatch.setenv("MAIL_PASSWORD", "app-password")
    monkeypatch.setenv("MAIL_PROVIDER", "auto")


class FakeSMTP:
    sent = []
    closed = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        FakeSMTP.closed.append(self.host)
        return False

    def starttls(self):
        pass

    def login(self, user, password):
        pass

    def send_message(self, message):
        FakeSMTP.sent.append((self.host, message["To"], message["Subject"]))


def test_missing_credentials_skip_send(monkeypatch):
    monkeypatch.delenv("MAIL_USERNAME", raising=False)
    monkeypatch.delenv("MAIL_PASSWORD", raising=False)
    assert email.send_email_sync("a@college.example", "Hi", "body") is False


def test_smtp_failure_is_swallowed(monkeypatch, mail_credentials):
    def refuse(*args, **kwargs):
        raise ConnectionRefusedError("connection refused")

    monkeypatch.setattr(email.smtplib, "SMTP", refuse)
    assert run(email.send_email("a@college.example", "Hi", "body")) is False


def test_auth_failure_is_swallowed_and_connection_closed(monkeypatch, mail_credentials):
    FakeSMTP.closed = []

    class RejectingSMTP(FakeSMTP):
        def login(self, user, password):
            raise smtplib.SMTPAuthenticationError(535, b"bad credentials")

    monkeypatch.setattr(email.smtplib, "SMTP", RejectingSMTP)
    assert email.send_email_sync("a@college.example", "Hi", "body") is False
    assert FakeSMTP.closed == ["smtp.gmail.com"]


def test_successful_send_uses_detected_provider(monkeypatch, mail_credentials):
    FakeSMTP.sent = []
    monkeypatch.setattr(email.smtplib, "SMTP", FakeSMTP)

    assert run(email.send_email("a@college.example", "Interview", "See you")) is True
    assert FakeSMTP.sent == [("smtp.gmail.com", "a@college.example", "Interview")]


def test_application_confirmation_without_address():
    student = {"_id": "s1", "name": "No Mail"}
    assert run(email.send_application_confirmation(student, {"job_title": "SDE"})) is False


def test_detect_email_provider():
    assert email.detect_email_provider("x@gmail.com") == "gmail"
    assert email.detect_email_provider("x@hotmail.com") == "outlook"
    assert email.detect_email_provider("x@yahoo.com") == "yahoo"
    assert email.detect_email_provider("x@college.example") == "custom"


def test_custom_provider_reads_smtp_host(monkeypatch, mail_credentials):
    monkeypatch.setenv("MAIL_USERNAME", "placements@college.example")
    monkeypatch.setenv("SMTP_HOST", "mail.college.example")
    monkeypatch.setenv("SMTP_PORT", "2525")
    assert email.get_smtp_server() == ("mail.college.example", 2525)


def test_explicit_provider_overrides_detection(monkeypatch, mail_credentials):
    monkeypatch.setenv("MAIL_PROVIDER", "office365")
    assert email.get_smtp_server() == ("smtp.office365.com", 587)
