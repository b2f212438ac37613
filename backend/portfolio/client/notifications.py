import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Literal, Optional

log = logging.getLogger("portfolio.client")

DISPLAY_SECONDS = 4.0
EXIT_SECONDS = 0.3

Kind = Literal["success", "error"]


@dataclass
class Notification:
    message: str
    kind: Kind = "success"
    leaving: bool = False
    _task: Optional[asyncio.Task] = field(default=None, repr=False)


class NotificationBanner:
    """
    A single transient banner.
    Showing a new notification removes whatever is on screen first; each one
    auto-dismisses after `display_seconds` followed by an exit transition.
    """

    def __init__(self, display_seconds: float = DISPLAY_SECONDS, exit_seconds: float = EXIT_SECONDS):
        self.display_seconds = display_seconds
        self.exit_seconds = exit_seconds
        self.current: Optional[Notification] = None
        self.history: List[Notification] = []

    def show(self, message: str, kind: Kind = "success") -> Notification:
        self.remove()
        note = Notification(message=message, kind=kind)
        self.current = note
        self.history.append(note)
        log.debug(f"[banner] {kind}: {message}")
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return note
        note._task = loop.create_task(self._auto_dismiss(note))
        return note

    def remove(self) -> None:
        note = self.current
        if note is None:
            return
        if note._task is not None and not note._task.done():
            note._task.cancel()
        self.current = None

    async def wait_closed(self) -> None:
        note = self.current
        if note is None or note._task is None:
            return
        try:
            await note._task
        except asyncio.CancelledError:
            pass

    async def _auto_dismiss(self, note: Notification) -> None:
        await asyncio.sleep(self.display_seconds)
        note.leaving = True
        await asyncio.sleep(self.exit_seconds)
        if self.current is note:
            self.current = None
