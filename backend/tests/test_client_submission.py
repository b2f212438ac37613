import asyncio
import logging
from urllib.parse import parse_qs

import httpx
import pytest

from portfolio.client.form import FieldVisual
from portfolio.client.state import FormPhase
from portfolio.client.submission import MSG_BAD_RESPONSE, MSG_FIX_ERRORS, ContactFormClient, SubmissionOutcome

ENDPOINT = "http://relay.test/api/contact"
VALID = {"name": "Ada", "email": "ada@example.com", "message": "Hello"}
SENT = {"success": True, "message": "Message sent successfully! I will get back to you soon."}


def make_client(handler) -> ContactFormClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ContactFormClient(ENDPOINT, http=http)


@pytest.mark.asyncio
async def test_success_posts_form_and_resets():
    seen = []

    def handler(request: httpx.Request):
        seen.append(request)
        return httpx.Response(200, json=SENT)

    client = make_client(handler)
    outcome = await client.submit(VALID)

    assert outcome is SubmissionOutcome.SENT
    assert len(seen) == 1
    req = seen[0]
    assert req.method == "POST"
    assert req.headers["content-type"] == "application/x-www-form-urlencoded"
    assert parse_qs(req.content.decode()) == {k: [v] for k, v in VALID.items()}

    assert client.banner.current.kind == "success"
    assert client.banner.current.message == SENT["message"]
    assert client.form.values() == {"name": "", "email": "", "message": ""}
    assert client.state.form_phase is FormPhase.IDLE


@pytest.mark.asyncio
async def test_invalid_form_makes_no_request():
    calls = []
    client = make_client(lambda r: calls.append(r) or httpx.Response(200, json=SENT))

    outcome = await client.submit({"name": "", "email": "nope", "message": "Hi"})

    assert outcome is SubmissionOutcome.INVALID
    assert calls == []
    assert client.banner.current.message == MSG_FIX_ERRORS
    assert client.banner.current.kind == "error"
    assert client.form["email"].indicator.visual is FieldVisual.ERROR
    # values are kept so the user can fix them
    assert client.form["message"].value == "Hi"


@pytest.mark.asyncio
async def test_server_rejection_keeps_debug_out_of_banner(caplog):
    reply = {"success": False, "message": "Email authentication failed. Please contact administrator.",
             "debug": "SMTPAuthenticationError: (535, b'bad creds')"}
    client = make_client(lambda r: httpx.Response(200, json=reply))

    with caplog.at_level(logging.ERROR, logger="portfolio.client"):
        outcome = await client.submit(VALID)

    assert outcome is SubmissionOutcome.REJECTED
    assert client.banner.current.message == reply["message"]
    assert "535" not in client.banner.current.message
    assert "bad creds" in caplog.text
    # form is not cleared on failure
    assert client.form.values() == VALID


@pytest.mark.asyncio
async def test_transport_error_shows_reason():
    def handler(request):
        raise httpx.ConnectError("Name or service not known", request=request)

    client = make_client(handler)
    outcome = await client.submit(VALID)

    assert outcome is SubmissionOutcome.TRANSPORT_ERROR
    assert client.banner.current.message == "Connection error: Name or service not known"
    assert client.state.form_phase is FormPhase.IDLE


@pytest.mark.asyncio
async def test_non_2xx_status_is_transport_error():
    client = make_client(lambda r: httpx.Response(502, text="Bad Gateway"))
    outcome = await client.submit(VALID)
    assert outcome is SubmissionOutcome.TRANSPORT_ERROR
    assert client.banner.current.message == "Connection error: HTTP error 502"


@pytest.mark.parametrize(
    "body",
    ["<br /><b>Fatal error</b>", '{"success": "yes", "message": "ok"}', '{"message": "no flag"}', "[]"],
)
@pytest.mark.asyncio
async def test_unparseable_reply(body, caplog):
    client = make_client(lambda r: httpx.Response(200, text=body))
    with caplog.at_level(logging.ERROR, logger="portfolio.client"):
        outcome = await client.submit(VALID)
    assert outcome is SubmissionOutcome.BAD_RESPONSE
    assert client.banner.current.message == MSG_BAD_RESPONSE
    assert body in caplog.text


@pytest.mark.asyncio
async def test_duplicate_submit_is_ignored_while_in_flight():
    started = asyncio.Event()
    release = asyncio.Event()
    calls = []

    async def handler(request):
        calls.append(request)
        started.set()
        await release.wait()
        return httpx.Response(200, json=SENT)

    client = make_client(handler)
    first = asyncio.create_task(client.submit(VALID))
    await started.wait()
    assert client.state.submitting

    assert await client.submit(VALID) is SubmissionOutcome.SKIPPED

    release.set()
    assert await first is SubmissionOutcome.SENT
    assert len(calls) == 1

    # once idle again, a new submission goes through
    assert await client.submit(VALID) is SubmissionOutcome.SENT
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_notification_disappears_on_its_own():
    client = make_client(lambda r: httpx.Response(200, json=SENT))
    client.banner.display_seconds = 0.01
    client.banner.exit_seconds = 0.01

    await client.submit(VALID)
    assert client.banner.current is not None
    await client.banner.wait_closed()
    assert client.banner.current is None
