import asyncio
import os
import sys

from portfolio.client.submission import ContactFormClient, SubmissionOutcome
from portfolio.core.settings import settings


async def send(name: str, email: str, message: str) -> SubmissionOutcome:
    endpoint = os.environ.get("CONTACT_ENDPOINT", settings.contact_endpoint)
    client = ContactFormClient(endpoint)
    outcome = await client.submit({"name": name, "email": email, "message": message})

    for f in client.form.fields:
        if f.indicator.error:
            print(f"  {f.name}: {f.indicator.error}")
    shown = client.banner.history[-1] if client.banner.history else None
    if shown:
        print(f"[{shown.kind}] {shown.message}")
    return outcome


if __name__ == "__main__":
    if len(sys.argv) != 4:
        print("usage: python -m portfolio.scripts.send_contact NAME EMAIL MESSAGE")
        sys.exit(2)
    result = asyncio.run(send(*sys.argv[1:4]))
    sys.exit(0 if result is SubmissionOutcome.SENT else 1)
