import itertools
from collections import deque
from datetime import datetime, timezone

from studytimer.schemas.feed import FeedEvent, FeedKind


class UIFeed:
    """Bounded stream of UI events that clients poll.

    Toasts and audio cues go through here because the engine runs
    server-side and the browser owns the screen and the speakers.
    """

    def __init__(self, max_events: int = 200):
        self._events: deque[FeedEvent] = deque(maxlen=max_events)
        self._ids = itertools.count(1)

    def publish(self, kind: FeedKind, **payload) -> FeedEvent:
        event = FeedEvent(
            id=next(self._ids),
            kind=kind,
            created_at=datetime.now(timezone.utc),
            **payload,
        )
        self._events.append(event)
        return event

    def show(self, message: str, kind: str = "info") -> FeedEvent:
        """Toast surface: show a short message of the given kind."""
        return self.publish("toast", message=message, level=kind)

    def events(self, after: int = 0) -> list[FeedEvent]:
        return [event for event in self._events if event.id > after]

    def toasts(self) -> list[FeedEvent]:
        return [event for event in self._events if event.kind == "toast"]
