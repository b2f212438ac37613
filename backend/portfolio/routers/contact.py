import logging
from typing import Any, Mapping, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from portfolio.core.diagnostics import debug_log
from portfolio.core.mailer import DeliveryFailure, MailDeliveryError, SmtpMailer, get_mailer
from portfolio.lib.composer import build_outbound_email
from portfolio.lib.validation import SubmissionRejected, validate_submission

router = APIRouter(prefix="/api", tags=["contact"])
log = logging.getLogger("uvicorn.error")

MSG_SENT = "Message sent successfully! I will get back to you soon."
MSG_BAD_METHOD = "Invalid request method."

FAILURE_MESSAGES = {
    DeliveryFailure.CONNECTIVITY: "Failed to connect to email server. Please try again.",
    DeliveryFailure.AUTHENTICATION: "Email authentication failed. Please contact administrator.",
    DeliveryFailure.NOT_CONFIGURED: "Server error: Email service not configured.",
}
MSG_SEND_FAILED = "Failed to send message. Please try again later."


class SubmissionResult(BaseModel):
    success: bool
    message: str
    debug: Optional[str] = None


def failure_message(category: DeliveryFailure) -> str:
    return FAILURE_MESSAGES.get(category, MSG_SEND_FAILED)


async def handle_submission(raw_fields: Mapping[str, Any], mailer: SmtpMailer) -> SubmissionResult:
    """
    Validate one contact submission and relay it to the site owner.
    Every outcome, including delivery failures, comes back as a SubmissionResult.
    """
    name, email, message = raw_fields.get("name"), raw_fields.get("email"), raw_fields.get("message")
    debug_log(
        f"Form data - Name: {name or ''}, Email: {email or ''}, "
        f"Message length: {len(str(message or '').strip())}"
    )

    try:
        submission = validate_submission(name, email, message)
    except SubmissionRejected as rej:
        debug_log(f"Rejected: {rej.reason}")
        return SubmissionResult(success=False, message=rej.message)

    cfg = mailer.cfg
    outbound = build_outbound_email(
        submission,
        from_address=cfg.mail_from_address or "",
        from_name=cfg.mail_from_name,
        to_address=cfg.mail_to_address or "",
        to_name=cfg.mail_to_name,
    )
    debug_log(f"Composed email: subject={outbound.subject!r} reply_to={outbound.reply_to_address}")

    try:
        debug_log(f"Attempting to send email via {cfg.smtp_host}:{cfg.smtp_port} ({cfg.smtp_security})")
        await run_in_threadpool(mailer.send, outbound)
    except MailDeliveryError as err:
        debug_log(f"Email send failed [{err.category.value}]: {err.detail}")
        log.error(f"[contact] delivery failed ({err.category.value}) for {submission.email}")
        return SubmissionResult(success=False, message=failure_message(err.category), debug=err.detail)
    except Exception as exc:
        # anything the transport did not classify
        detail = f"{type(exc).__name__}: {exc}"
        debug_log(f"Unexpected send error: {detail}")
        log.exception("[contact] unexpected delivery error")
        return SubmissionResult(success=False, message=MSG_SEND_FAILED, debug=detail)

    debug_log("Email sent successfully")
    log.info(f"[contact] message from {submission.email} relayed")
    return SubmissionResult(success=True, message=MSG_SENT)


async def _read_fields(request: Request) -> Mapping[str, Any]:
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith("application/json"):
            body = await request.json()
            return body if isinstance(body, dict) else {}
        return await request.form()
    except Exception as exc:
        debug_log(f"Unreadable request body ({content_type}): {exc}")
        return {}


@router.post("/contact", response_model=SubmissionResult, response_model_exclude_none=True)
async def contact(request: Request, mailer: SmtpMailer = Depends(get_mailer)):
    debug_log("=== NEW REQUEST ===")
    debug_log("Request method: POST")
    fields = await _read_fields(request)
    return await handle_submission(fields, mailer)


@router.api_route("/contact", methods=["GET", "HEAD", "OPTIONS", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def contact_wrong_method(request: Request):
    debug_log("=== NEW REQUEST ===")
    debug_log(f"Invalid request method: {request.method}")
    return JSONResponse(
        status_code=405,
        content={"success": False, "message": MSG_BAD_METHOD},
        headers={"Allow": "POST"},
    )
