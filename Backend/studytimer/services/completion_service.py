import logging

from studytimer.schemas.session import StudySession
from studytimer.services.audio_service import FeedSoundPlayer
from studytimer.services.background import BackgroundRunner
from studytimer.services.notification_service import NotificationClient, Severity
from studytimer.services.ui_feed import UIFeed

logger = logging.getLogger(__name__)


class CompletionNotifier:
    """Announces that a session, or one Pomodoro phase of it, has ended."""

    def __init__(
        self,
        notifications: NotificationClient,
        player: FeedSoundPlayer,
        toasts: UIFeed,
        runner: BackgroundRunner,
    ):
        self._notifications = notifications
        self._player = player
        self._toasts = toasts
        self._runner = runner

    def notify_completion(self, session: StudySession, label: str | None = None) -> None:
        """Play the session's sound, record a remote notification and show a toast.

        The three steps are independent of each other. The first two run in
        the background and are never awaited by the caller.
        """
        title = label or session.title

        self._runner.spawn(self._play(session.selected_sound), name=f"sound:{session.id}")
        self._runner.spawn(
            self._notifications.create(
                "Session finished!",
                f'Session "{title}" finished successfully after {session.initial_minutes} minutes.',
                Severity.SUCCESS,
            ),
            name=f"notify:{session.id}",
        )

        try:
            self._toasts.show(f'Session "{title}" finished!', "success")
        except Exception:
            logger.exception("Completion toast for session %s failed", session.id)

    async def _play(self, url: str) -> None:
        try:
            await self._player.play(url)
        except Exception as exc:
            logger.warning("Completion sound %s could not be played: %s", url, exc)
