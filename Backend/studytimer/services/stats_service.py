import logging
from datetime import date, timedelta

from pydantic import ValidationError

from studytimer.schemas.stats import StudyStats
from studytimer.services.background import BackgroundRunner
from studytimer.services.notification_service import NotificationClient, Severity
from studytimer.services.store_service import (
    LAST_RESET_DATE_KEY,
    STATS_KEY,
    PersistentStore,
)

logger = logging.getLogger(__name__)


def rollover(
    stats: StudyStats, last_date: str | None, today: date
) -> tuple[StudyStats, str]:
    """Apply the once-a-day statistics reset.

    Returns the new stats and the date string to remember. When last_date
    already is today, the stats come back unchanged.
    """
    today_str = today.isoformat()
    if last_date == today_str:
        return stats, today_str

    if last_date == (today - timedelta(days=1)).isoformat():
        streak = stats.streak + 1
    elif stats.completed_today > 0:
        streak = 1
    else:
        streak = stats.streak

    new_stats = stats.model_copy(
        update={
            "yesterday": stats.completed_today,
            "completed_today": 0,
            "streak": streak,
        }
    )
    return new_stats, today_str


class StatsEngine:
    """Owns the daily study statistics and the goal-reached notification."""

    def __init__(
        self,
        store: PersistentStore,
        notifications: NotificationClient,
        runner: BackgroundRunner,
        default_goal_hours: float = 4,
    ):
        self._store = store
        self._notifications = notifications
        self._runner = runner
        self._stats = self._load(default_goal_hours)
        # Goal value the last "goal reached" notification was sent for. Kept in
        # memory only, so a restart on a day the goal is already met notifies again.
        self._notified_goal: float | None = None

    def _load(self, default_goal_hours: float) -> StudyStats:
        raw = self._store.load(STATS_KEY)
        if raw is None:
            return StudyStats(daily_goal=default_goal_hours)
        try:
            return StudyStats.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Stored stats are unreadable, starting fresh: %s", exc)
            return StudyStats(daily_goal=default_goal_hours)

    @property
    def stats(self) -> StudyStats:
        return self._stats

    @property
    def last_rollover_date(self) -> str | None:
        value = self._store.load(LAST_RESET_DATE_KEY)
        return value if isinstance(value, str) else None

    def credit_minutes(self, minutes: int) -> None:
        if minutes <= 0:
            return
        self._set(
            self._stats.model_copy(
                update={"completed_today": self._stats.completed_today + minutes}
            )
        )

    def update_daily_goal(self, hours: float) -> None:
        self._set(self._stats.model_copy(update={"daily_goal": hours}))

    def run_rollover(self, today: date) -> bool:
        """Reset the daily counters if the calendar day changed. Returns True if it did."""
        last_date = self.last_rollover_date
        new_stats, new_date = rollover(self._stats, last_date, today)
        if new_date == last_date:
            return False

        logger.info(
            "Daily rollover %s -> %s: yesterday=%d min, streak=%d",
            last_date,
            new_date,
            new_stats.yesterday,
            new_stats.streak,
        )
        self._stats = new_stats
        self._store.save(STATS_KEY, new_stats.model_dump())
        self._store.save(LAST_RESET_DATE_KEY, new_date)
        return True

    def _set(self, stats: StudyStats) -> None:
        self._stats = stats
        self._store.save(STATS_KEY, stats.model_dump())
        self._check_goal()

    def _check_goal(self) -> None:
        stats = self._stats
        if stats.goal_minutes <= 0 or stats.progress_percent < 100:
            return
        if self._notified_goal == stats.daily_goal:
            return

        self._notified_goal = stats.daily_goal
        logger.info("Daily goal of %s hours reached", stats.daily_goal)
        self._runner.spawn(
            self._notifications.create(
                "Congratulations! You reached your daily goal",
                f"You completed {stats.daily_goal:g} hours of study today. Keep it up!",
                Severity.SUCCESS,
            ),
            name="notify:daily-goal",
        )
