import logging
from collections.abc import Callable
from datetime import date

from studytimer.schemas.session import StudySession
from studytimer.schemas.stats import StudyStats
from studytimer.services.audio_service import (
    COMPLETION_SOUNDS,
    AmbientSoundPlayer,
    FeedSoundPlayer,
)
from studytimer.services.background import BackgroundRunner
from studytimer.services.completion_service import CompletionNotifier
from studytimer.services.course_service import CourseClient
from studytimer.services.errors import CollaboratorError
from studytimer.services.notification_service import NotificationClient, Severity
from studytimer.services.session_service import SessionRegistry
from studytimer.services.stats_service import StatsEngine
from studytimer.services.store_service import PersistentStore
from studytimer.services.timer_service import TickScheduler
from studytimer.services.ui_feed import UIFeed

logger = logging.getLogger(__name__)


class StudySessionEngine:
    """Study timers, their daily statistics and the side effects around them.

    Build one per process, call start() from inside the running event loop
    and stop() on shutdown. Readers get immutable snapshots; every change
    goes through one of the operations below.
    """

    def __init__(
        self,
        store: PersistentStore,
        notifications: NotificationClient,
        courses: CourseClient,
        feed: UIFeed,
        *,
        player: FeedSoundPlayer | None = None,
        ambient: AmbientSoundPlayer | None = None,
        default_minutes: int = 25,
        focus_minutes: int = 25,
        break_minutes: int = 5,
        default_goal_hours: float = 4,
        default_sound: str = COMPLETION_SOUNDS["bell"],
        default_title: str = "Focus Session",
        tick_interval: float = 1.0,
        clock: Callable[[], date] = date.today,
    ):
        self.feed = feed
        self.runner = BackgroundRunner()
        self.stats_engine = StatsEngine(store, notifications, self.runner, default_goal_hours)
        self.registry = SessionRegistry(
            store, notifications, self.runner, default_minutes, default_sound
        )
        self.notifier = CompletionNotifier(
            notifications, player or FeedSoundPlayer(feed), feed, self.runner
        )
        self.scheduler = TickScheduler(
            self.registry,
            self.stats_engine,
            self.notifier,
            feed,
            interval=tick_interval,
            focus_minutes=focus_minutes,
            break_minutes=break_minutes,
        )
        self.ambient = ambient or AmbientSoundPlayer(feed)
        self._notifications = notifications
        self._courses = courses
        self._default_title = default_title
        self._clock = clock
        self._finishing: set[str] = set()

    # ── lifecycle ─────────────────────────────────────────────────────

    def start(self) -> None:
        self.stats_engine.run_rollover(self._clock())
        self.scheduler.start()
        logger.info("Study session engine started with %d sessions", len(self.sessions))

    async def stop(self) -> None:
        await self.scheduler.stop()
        self.ambient.stop()
        # Let in-flight notifications finish before the HTTP client closes.
        await self.runner.drain()
        logger.info("Study session engine stopped")

    # ── reads ─────────────────────────────────────────────────────────

    @property
    def sessions(self) -> list[StudySession]:
        return self.registry.sessions

    @property
    def stats(self) -> StudyStats:
        return self.stats_engine.stats

    @property
    def active_session_count(self) -> int:
        return self.registry.active_count

    def get_session(self, session_id: str) -> StudySession | None:
        return self.registry.get(session_id)

    # ── session operations ────────────────────────────────────────────

    def add_session(self, title: str, course_id: int | None = None) -> StudySession:
        return self.registry.add(title, course_id)

    def remove_session(self, session_id: str) -> None:
        self.registry.remove(session_id)

    def toggle_session(self, session_id: str) -> StudySession | None:
        return self.registry.toggle(session_id)

    def reset_session(self, session_id: str) -> StudySession | None:
        return self.registry.reset(session_id)

    def update_session(self, session_id: str, changes: dict) -> StudySession | None:
        return self.registry.update(session_id, changes)

    def apply_preset(self, session_id: str, minutes: int) -> StudySession | None:
        return self.registry.apply_preset(session_id, minutes)

    def start_course_session(self, course_id: int, title: str) -> StudySession:
        """Open a session for a course, reusing the one already linked to it."""
        existing = self.registry.find_by_course(course_id)
        if existing is not None:
            return existing
        return self.registry.add(title, course_id)

    def ensure_default_session(self) -> StudySession | None:
        if self.registry.sessions:
            return None
        return self.registry.add(self._default_title)

    async def finish_session(self, session_id: str) -> bool:
        """Credit the time spent in a course-linked session to its course.

        Returns True when progress was saved and the session reset. A course
        API failure is reported with a toast and leaves the session as it was.
        """
        session = self.registry.get(session_id)
        if session is None or session.course_id is None:
            return False
        if session_id in self._finishing:
            return False

        elapsed = session.elapsed_seconds
        if elapsed <= 0:
            self.feed.show("No progress to save", "info")
            return False

        self._finishing.add(session_id)
        try:
            try:
                course = await self._courses.get_course(session.course_id)
                await self._courses.update_course(
                    session.course_id, course.completed_hours + elapsed / 3600
                )
            except CollaboratorError as exc:
                logger.error("Saving progress for session %s failed: %s", session_id, exc)
                self.feed.show("Error saving progress", "error")
                return False

            # The course already holds this time; reset before anything else can await.
            self.registry.reset(session_id)
        finally:
            self._finishing.discard(session_id)

        self.runner.spawn(
            self._notifications.create(
                "Progress updated",
                f'Added {max(1, round(elapsed / 60))} minutes to your progress in "{course.title}".',
                Severity.SUCCESS,
            ),
            name="notify:progress",
        )
        self.feed.show(f"Saved {round(elapsed / 60)} minutes to the course", "success")
        return True

    # ── stats & ambient ───────────────────────────────────────────────

    def update_daily_goal(self, hours: float) -> None:
        self.stats_engine.update_daily_goal(hours)

    def set_ambient_sound(self, url: str | None) -> None:
        self.ambient.set_ambient_sound(url)
