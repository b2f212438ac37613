# portfolio/lib/composer.py
import html
import re
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr, formatdate, make_msgid
from typing import Optional

from portfolio.lib.validation import ContactSubmission

SUBJECT_TEMPLATE = "New Contact Form Message from {name}"

_NEWLINE = re.compile(r"(\r\n|\n|\r)")


@dataclass(frozen=True)
class OutboundEmail:
    from_address: str
    from_name: str
    to_address: str
    to_name: Optional[str]
    reply_to_address: str
    reply_to_name: str
    subject: str
    html_body: str
    text_body: str


def _single_line(value: str) -> str:
    # header values cannot carry line breaks
    return " ".join(value.split())


def _nl2br(escaped: str) -> str:
    return _NEWLINE.sub(r"<br />\1", escaped)


def render_html_body(submission: ContactSubmission) -> str:
    name = html.escape(submission.name)
    email = html.escape(submission.email)
    message = _nl2br(html.escape(submission.message))
    return (
        "<h2>New Contact Form Submission</h2>"
        f"<p><strong>Name:</strong> {name}</p>"
        f"<p><strong>Email:</strong> {email}</p>"
        "<p><strong>Message:</strong></p>"
        f"<p>{message}</p>"
    )


def render_text_body(submission: ContactSubmission) -> str:
    return f"Name: {submission.name}\nEmail: {submission.email}\nMessage:\n{submission.message}"


def build_outbound_email(
    submission: ContactSubmission,
    from_address: str,
    from_name: str,
    to_address: str,
    to_name: Optional[str] = None,
) -> OutboundEmail:
    """Compose the owner notification; replies go straight back to the submitter."""
    return OutboundEmail(
        from_address=from_address,
        from_name=from_name,
        to_address=to_address,
        to_name=to_name,
        reply_to_address=submission.reply_address or submission.email,
        reply_to_name=_single_line(submission.name),
        subject=SUBJECT_TEMPLATE.format(name=_single_line(submission.name)),
        html_body=render_html_body(submission),
        text_body=render_text_body(submission),
    )


def to_mime(outbound: OutboundEmail) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = formataddr((outbound.from_name, outbound.from_address))
    msg["To"] = formataddr((outbound.to_name or "", outbound.to_address))
    msg["Reply-To"] = formataddr((outbound.reply_to_name, outbound.reply_to_address))
    msg["Subject"] = outbound.subject
    msg["Date"] = formatdate(localtime=True)
    msg["Message-ID"] = make_msgid()
    msg.set_content(outbound.text_body)
    msg.add_alternative(outbound.html_body, subtype="html")
    return msg
