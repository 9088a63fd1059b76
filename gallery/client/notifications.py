import asyncio
import logging
from typing import Dict, List

from .models import NotificationEvent, NotificationKind, generate_id

logger = logging.getLogger(__name__)


class NotificationCenter:
    """Transient success/error banners.

    Auto-dismissing events expire through their own timer; an explicit
    :meth:`dismiss` removes the event at once and cancels that timer.
    Must be used from inside a running event loop.
    """

    def __init__(self, dismiss_after: float = 5.0):
        self.dismiss_after = dismiss_after
        self._events: Dict[str, NotificationEvent] = {}
        self._timers: Dict[str, asyncio.TimerHandle] = {}

    @property
    def events(self) -> List[NotificationEvent]:
        return list(self._events.values())

    def emit(self, kind: NotificationKind, title: str, message: str,
             auto_dismiss: bool = True) -> NotificationEvent:
        event = NotificationEvent(
            id=generate_id(),
            kind=NotificationKind(kind),
            title=title,
            message=message,
            auto_dismiss=auto_dismiss,
        )
        self._events[event.id] = event
        if auto_dismiss:
            loop = asyncio.get_running_loop()
            self._timers[event.id] = loop.call_later(self.dismiss_after, self._expire, event.id)
        log = logger.info if event.kind is NotificationKind.SUCCESS else logger.warning
        log(f"{event.title}: {event.message}")
        return event

    def success(self, title: str, message: str) -> NotificationEvent:
        return self.emit(NotificationKind.SUCCESS, title, message)

    def error(self, title: str, message: str) -> NotificationEvent:
        return self.emit(NotificationKind.ERROR, title, message)

    def dismiss(self, event_id: str) -> bool:
        timer = self._timers.pop(event_id, None)
        if timer is not None:
            timer.cancel()
        return self._events.pop(event_id, None) is not None

    def _expire(self, event_id: str) -> None:
        self._timers.pop(event_id, None)
        self._events.pop(event_id, None)

    def close(self) -> None:
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
