import os
import smtplib

import pytest

os.environ.setdefault("CORS_ORIGINS", "http://localhost")
os.environ.setdefault("CONTACT_DEBUG_LOG", "contact_debug.test.log")

from portfolio.core import diagnostics
from portfolio.core.mailer import SmtpMailer
from portfolio.core.settings import Settings, settings


def make_settings(**overrides) -> Settings:
    values = dict(
        smtp_host="smtp.test",
        smtp_port=587,
        smtp_username="site@example.com",
        smtp_password="app-password",
        smtp_security="starttls",
        mail_from_address="site@example.com",
        mail_from_name="Portfolio Contact Form",
        mail_to_address="owner@example.com",
        mail_to_name="Site Owner",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


class FakeSMTP:
    """Stands in for smtplib.SMTP; records the session instead of talking to a server."""

    sessions = []

    def __init__(self, host, port, timeout=None, context=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.context = context
        self.calls = []
        self.sent = []
        FakeSMTP.sessions.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.calls.append("quit")
        return False

    def starttls(self, context=None):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append(("login", user))

    def send_message(self, msg, from_addr=None, to_addrs=None):
        self.calls.append("send")
        self.sent.append((msg, from_addr, to_addrs))
        return {}


class AuthRefusingSMTP(FakeSMTP):
    def login(self, user, password):
        raise smtplib.SMTPAuthenticationError(535, b"5.7.8 Username and Password not accepted")


class UnreachableSMTP(FakeSMTP):
    def __init__(self, host, port, timeout=None, context=None):
        raise ConnectionRefusedError(111, "Connection refused")


class RecipientRefusingSMTP(FakeSMTP):
    def send_message(self, msg, from_addr=None, to_addrs=None):
        raise smtplib.SMTPRecipientsRefused({to_addrs[0]: (550, b"5.1.1 No such user")})


@pytest.fixture(autouse=True)
def debug_log_path(tmp_path, monkeypatch):
    path = tmp_path / "contact_debug.log"
    monkeypatch.setattr(settings, "contact_debug_log", str(path))
    diagnostics.reset_debug_logger()
    yield path
    diagnostics.reset_debug_logger()


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.sessions = []
    monkeypatch.setattr(SmtpMailer, "smtp_class", FakeSMTP)
    monkeypatch.setattr(SmtpMailer, "smtp_ssl_class", FakeSMTP)
    return FakeSMTP
