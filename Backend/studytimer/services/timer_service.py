"""1 Hz countdown driver and the per-session state machine.

Each tick moves an active session through exactly one transition:

    m:ss  -> m:(ss-1)                      seconds left
    m:00  -> (m-1):59   credit 1 minute    minutes left
    0:00  -> stop       credit 1 minute    plain countdown finished
    0:00  -> break 5:00 credit 25 minutes  Pomodoro focus phase finished
    0:00  -> focus 25:00                   Pomodoro break finished
"""

import asyncio
import contextlib
import logging
from dataclasses import dataclass

import sentry_sdk

from studytimer.schemas.session import StudySession
from studytimer.services.completion_service import CompletionNotifier
from studytimer.services.session_service import SessionRegistry
from studytimer.services.stats_service import StatsEngine
from studytimer.services.ui_feed import UIFeed

logger = logging.getLogger(__name__)

SESSION_ENDED = "session"
FOCUS_ENDED = "focus"
BREAK_ENDED = "break"


@dataclass(frozen=True)
class TickOutcome:
    session: StudySession
    credited_minutes: int = 0
    completed: str | None = None


def advance(
    session: StudySession, focus_minutes: int = 25, break_minutes: int = 5
) -> TickOutcome:
    """Advance one active session by a single second."""
    if session.seconds > 0:
        return TickOutcome(session.model_copy(update={"seconds": session.seconds - 1}))

    if session.minutes > 0:
        return TickOutcome(
            session.model_copy(update={"minutes": session.minutes - 1, "seconds": 59}),
            credited_minutes=1,
        )

    if not session.auto_cycle:
        return TickOutcome(
            session.model_copy(update={"is_active": False, "minutes": 0, "seconds": 0}),
            credited_minutes=1,
            completed=SESSION_ENDED,
        )

    if session.mode == "focus":
        return TickOutcome(
            session.model_copy(
                update={
                    "mode": "break",
                    "minutes": break_minutes,
                    "seconds": 0,
                    "initial_minutes": break_minutes,
                    "is_active": True,
                }
            ),
            credited_minutes=focus_minutes,
            completed=FOCUS_ENDED,
        )

    return TickOutcome(
        session.model_copy(
            update={
                "mode": "focus",
                "minutes": focus_minutes,
                "seconds": 0,
                "initial_minutes": focus_minutes,
                "is_active": True,
            }
        ),
        completed=BREAK_ENDED,
    )


class TickScheduler:
    """The single periodic driver shared by every session."""

    def __init__(
        self,
        registry: SessionRegistry,
        stats: StatsEngine,
        notifier: CompletionNotifier,
        toasts: UIFeed,
        interval: float = 1.0,
        focus_minutes: int = 25,
        break_minutes: int = 5,
    ):
        self._registry = registry
        self._stats = stats
        self._notifier = notifier
        self._toasts = toasts
        self._interval = interval
        self._focus_minutes = focus_minutes
        self._break_minutes = break_minutes
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def tick(self) -> int:
        """Advance every active session by one second.

        Returns the number of sessions advanced. Sessions are looked up again
        one by one, so a session removed or paused by a side effect earlier in
        the same pass is skipped.
        """
        active_ids = [s.id for s in self._registry.sessions if s.is_active]
        if not active_ids:
            return 0

        advanced = 0
        for session_id in active_ids:
            session = self._registry.get(session_id)
            if session is None or not session.is_active:
                continue

            outcome = advance(session, self._focus_minutes, self._break_minutes)
            self._registry.replace(outcome.session, persist=False)
            advanced += 1

            if outcome.credited_minutes:
                self._stats.credit_minutes(outcome.credited_minutes)
            if outcome.completed is not None:
                self._announce(session, outcome.completed)

        if advanced:
            self._registry.persist()
        return advanced

    def _announce(self, finished: StudySession, completed: str) -> None:
        if completed == FOCUS_ENDED:
            self._toasts.show(
                f"Focus period over! Your {self._break_minutes} minute break starts now.",
                "info",
            )
            self._notifier.notify_completion(finished, label="Focus Ended")
        elif completed == BREAK_ENDED:
            self._toasts.show(
                f"Break over! Back to focus for {self._focus_minutes} minutes.", "info"
            )
            self._notifier.notify_completion(finished, label="Break Ended")
        else:
            logger.info("Session %s (%r) finished", finished.id, finished.title)
            self._notifier.notify_completion(finished)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="study-tick")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_at = loop.time()
        while True:
            next_at += self._interval
            await asyncio.sleep(max(0.0, next_at - loop.time()))
            try:
                self.tick()
            except Exception as exc:
                logger.exception("Study timer tick failed")
                sentry_sdk.capture_exception(exc)
