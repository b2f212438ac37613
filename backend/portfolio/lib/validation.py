from typing import Any, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict

MSG_REQUIRED = "All fields are required."
MSG_INVALID_EMAIL = "Invalid email address."


class ContactSubmission(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    message: str
    # ASCII form used in headers (punycode domain); the typed address is kept in `email`
    reply_address: Optional[str] = None


class SubmissionRejected(ValueError):
    """Raised when a submission fails server-side checks; `message` is user-facing."""

    def __init__(self, message: str, reason: str):
        super().__init__(message)
        self.message = message
        self.reason = reason


def clean_field(raw: Optional[Any]) -> str:
    if raw is None:
        return ""
    return str(raw).strip()


def ascii_address(address: str) -> Optional[str]:
    """
    Return the header-safe form of `address`, or None when it is not a valid address.
    Internationalised domains are converted to punycode; non-ASCII local parts
    need SMTPUTF8 and are refused.
    """
    if not address:
        return None
    try:
        result = validate_email(address, check_deliverability=False, allow_smtputf8=False)
    except EmailNotValidError:
        return None
    return result.ascii_email


def is_valid_email(address: str) -> bool:
    return ascii_address(address) is not None


def validate_submission(name: Any, email: Any, message: Any) -> ContactSubmission:
    """
    Authoritative checks for an incoming contact form.
    The client validates too, but nothing it sends is trusted here.
    """
    name, email, message = clean_field(name), clean_field(email), clean_field(message)

    missing = [k for k, v in (("name", name), ("email", email), ("message", message)) if not v]
    if missing:
        raise SubmissionRejected(MSG_REQUIRED, reason=f"missing fields: {', '.join(missing)}")

    reply_address = ascii_address(email)
    if reply_address is None:
        raise SubmissionRejected(MSG_INVALID_EMAIL, reason=f"invalid email: {email}")

    return ContactSubmission(name=name, email=email, message=message, reply_address=reply_address)
