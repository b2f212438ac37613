# portfolio/client/submission.py
import enum
import logging
from typing import Mapping, Optional

import httpx
from pydantic import BaseModel, StrictBool, StrictStr, ValidationError

from portfolio.client.form import ContactForm, FieldSpec, FieldValidation
from portfolio.client.notifications import NotificationBanner
from portfolio.client.state import AppState

# developer-facing diagnostics; never rendered in the banner
log = logging.getLogger("portfolio.client")

MSG_FIX_ERRORS = "Please fix the errors in the form"
MSG_BAD_RESPONSE = "Server error. Please check console for details."

DEFAULT_TIMEOUT = 35.0  # a little over the relay's SMTP timeout


class SubmissionOutcome(str, enum.Enum):
    SENT = "sent"
    REJECTED = "rejected"
    INVALID = "invalid"
    TRANSPORT_ERROR = "transport_error"
    BAD_RESPONSE = "bad_response"
    SKIPPED = "skipped"


class RelayReply(BaseModel):
    success: StrictBool
    message: StrictStr
    debug: Optional[str] = None


def _transport_reason(exc: httpx.HTTPError) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        return f"HTTP error {exc.response.status_code}"
    text = str(exc).strip()
    return text or type(exc).__name__


class ContactFormClient:
    """Drives one contact form: validate, post to the relay, report through the banner."""

    def __init__(
        self,
        endpoint: str,
        http: Optional[httpx.AsyncClient] = None,
        form: Optional[ContactForm] = None,
        banner: Optional[NotificationBanner] = None,
        state: Optional[AppState] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.endpoint = endpoint
        self._http = http
        self.form = form or ContactForm()
        self.banner = banner or NotificationBanner()
        self.state = state or AppState()
        self.timeout = timeout

    def validate_field(self, spec: FieldSpec) -> FieldValidation:
        return self.form.validate(spec)

    async def submit(self, values: Optional[Mapping[str, str]] = None) -> SubmissionOutcome:
        if self.state.busy:
            log.info("[client] submission already in flight; ignoring")
            return SubmissionOutcome.SKIPPED

        if values is not None:
            self.form.fill(values)

        self.state.begin_validation()
        if not self.form.validate_all():
            self.state.finish(False)
            self.banner.show(MSG_FIX_ERRORS, "error")
            self.state.reset_form_phase()
            return SubmissionOutcome.INVALID

        self.state.begin_submit()
        outcome = SubmissionOutcome.TRANSPORT_ERROR
        try:
            outcome = await self._send(self.form.values())
        finally:
            self.state.finish(outcome is SubmissionOutcome.SENT)
            self.state.reset_form_phase()
        return outcome

    async def _post(self, data: Mapping[str, str]) -> str:
        if self._http is not None:
            resp = await self._http.post(self.endpoint, data=data, timeout=self.timeout)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(self.endpoint, data=data)
        log.debug(f"[client] response status: {resp.status_code}")
        resp.raise_for_status()
        return resp.text

    async def _send(self, data: Mapping[str, str]) -> SubmissionOutcome:
        try:
            text = await self._post(data)
        except httpx.HTTPError as exc:
            log.error(f"[client] request failed: {exc!r}")
            self.banner.show(f"Connection error: {_transport_reason(exc)}", "error")
            return SubmissionOutcome.TRANSPORT_ERROR

        try:
            reply = RelayReply.model_validate_json(text)
        except ValidationError as exc:
            log.error(f"[client] unparseable relay reply: {exc}")
            log.error(f"[client] response was: {text}")
            self.banner.show(MSG_BAD_RESPONSE, "error")
            return SubmissionOutcome.BAD_RESPONSE

        if reply.success:
            self.banner.show(reply.message, "success")
            self.form.reset()
            return SubmissionOutcome.SENT

        if reply.debug:
            log.error(f"[client] server error: {reply.debug}")
        self.banner.show(reply.message, "error")
        return SubmissionOutcome.REJECTED
