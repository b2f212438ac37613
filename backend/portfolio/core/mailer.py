# portfolio/core/mailer.py
import enum
import logging
import smtplib
import ssl
from typing import Optional

from portfolio.core.settings import Settings, settings
from portfolio.lib.composer import OutboundEmail, to_mime

log = logging.getLogger("uvicorn.error")


class DeliveryFailure(str, enum.Enum):
    CONNECTIVITY = "connectivity"
    AUTHENTICATION = "authentication"
    REJECTED = "rejected"
    UNKNOWN = "unknown"
    NOT_CONFIGURED = "not_configured"


class MailDeliveryError(Exception):
    """A single delivery attempt failed; `category` is decided here, `detail` is the raw cause."""

    def __init__(self, category: DeliveryFailure, detail: str):
        super().__init__(detail)
        self.category = category
        self.detail = detail


def _describe(exc: BaseException) -> str:
    text = str(exc).strip()
    return f"{type(exc).__name__}: {text}" if text else type(exc).__name__


def classify_smtp_error(exc: BaseException, phase: str = "send") -> DeliveryFailure:
    """
    Map an exception raised during an SMTP session onto a failure category.
    Order matters: every smtplib exception is also an OSError.
    """
    if isinstance(exc, smtplib.SMTPAuthenticationError):
        return DeliveryFailure.AUTHENTICATION
    if isinstance(exc, smtplib.SMTPNotSupportedError):
        return DeliveryFailure.AUTHENTICATION if phase == "login" else DeliveryFailure.CONNECTIVITY
    if isinstance(exc, (smtplib.SMTPConnectError, smtplib.SMTPServerDisconnected, smtplib.SMTPHeloError)):
        return DeliveryFailure.CONNECTIVITY
    if isinstance(exc, (smtplib.SMTPRecipientsRefused, smtplib.SMTPSenderRefused, smtplib.SMTPDataError)):
        return DeliveryFailure.REJECTED
    if isinstance(exc, smtplib.SMTPException):
        return DeliveryFailure.UNKNOWN
    if isinstance(exc, OSError):
        # refused/unreachable sockets, DNS failures, timeouts, TLS handshakes
        return DeliveryFailure.CONNECTIVITY
    return DeliveryFailure.UNKNOWN


class SmtpMailer:
    smtp_class = smtplib.SMTP
    smtp_ssl_class = smtplib.SMTP_SSL

    def __init__(self, cfg: Optional[Settings] = None):
        self.cfg = cfg or settings

    @property
    def configured(self) -> bool:
        return self.cfg.mail_configured

    def _tls_context(self) -> ssl.SSLContext:
        ctx = ssl.create_default_context()
        if not self.cfg.smtp_verify_tls:
            ctx.check_hostname = False
            ctx.verify_mode = ssl.CERT_NONE
        return ctx

    def _open(self) -> smtplib.SMTP:
        host, port, timeout = self.cfg.smtp_host, self.cfg.smtp_port, self.cfg.smtp_timeout
        if self.cfg.smtp_security == "ssl":
            return self.smtp_ssl_class(host, port, timeout=timeout, context=self._tls_context())
        return self.smtp_class(host, port, timeout=timeout)

    def send(self, outbound: OutboundEmail) -> None:
        """Deliver one message in one SMTP session. No retries."""
        if not self.configured:
            raise MailDeliveryError(
                DeliveryFailure.NOT_CONFIGURED,
                "SMTP_HOST, MAIL_FROM_ADDRESS and MAIL_TO_ADDRESS must be set",
            )

        phase = "compose"
        try:
            msg = to_mime(outbound)
            phase = "connect"
            with self._open() as smtp:
                if self.cfg.smtp_security == "starttls":
                    phase = "starttls"
                    smtp.starttls(context=self._tls_context())
                if self.cfg.smtp_username:
                    phase = "login"
                    smtp.login(self.cfg.smtp_username, self.cfg.smtp_password or "")
                phase = "send"
                refused = smtp.send_message(msg, from_addr=outbound.from_address, to_addrs=[outbound.to_address])
        except Exception as exc:
            category = classify_smtp_error(exc, phase)
            log.warning(f"[mailer] delivery failed during {phase} ({category.value}): {exc}")
            raise MailDeliveryError(category, _describe(exc)) from exc

        if refused:
            raise MailDeliveryError(DeliveryFailure.REJECTED, f"recipients refused: {refused}")
        log.info(f"[mailer] delivered to {outbound.to_address} via {self.cfg.smtp_host}:{self.cfg.smtp_port}")


def get_mailer() -> SmtpMailer:
    return SmtpMailer(settings)
