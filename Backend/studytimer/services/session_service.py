import logging
import uuid

from pydantic import ValidationError

from studytimer.schemas.session import EDITABLE_FIELDS, StudySession
from studytimer.services.audio_service import COMPLETION_SOUNDS
from studytimer.services.background import BackgroundRunner
from studytimer.services.notification_service import NotificationClient, Severity
from studytimer.services.store_service import SESSIONS_KEY, PersistentStore

logger = logging.getLogger(__name__)

DURATION_PRESETS = (15, 25, 45, 60)


class SessionRegistry:
    """Owns the set of concurrent study sessions.

    Every mutation is written through to the store. Operations on an
    unknown id do nothing, so a removal racing an in-flight tick is safe.
    """

    def __init__(
        self,
        store: PersistentStore,
        notifications: NotificationClient,
        runner: BackgroundRunner,
        default_minutes: int = 25,
        default_sound: str = COMPLETION_SOUNDS["bell"],
    ):
        self._store = store
        self._notifications = notifications
        self._runner = runner
        self._default_minutes = default_minutes
        self._default_sound = default_sound
        self._sessions: dict[str, StudySession] = self._load()

    def _load(self) -> dict[str, StudySession]:
        raw = self._store.load(SESSIONS_KEY)
        if raw is None:
            return {}
        if not isinstance(raw, list):
            logger.warning("Stored session list is not a list, ignoring it")
            return {}

        sessions: dict[str, StudySession] = {}
        for record in raw:
            try:
                # A restart pauses every timer
                session = StudySession.model_validate({**record, "is_active": False})
            except (TypeError, ValidationError) as exc:
                logger.warning("Skipping unreadable stored session: %s", exc)
                continue
            sessions[session.id] = session
        return sessions

    # ── reads ─────────────────────────────────────────────────────────

    @property
    def sessions(self) -> list[StudySession]:
        return list(self._sessions.values())

    @property
    def active_count(self) -> int:
        return sum(1 for s in self._sessions.values() if s.is_active)

    def get(self, session_id: str) -> StudySession | None:
        return self._sessions.get(session_id)

    def find_by_course(self, course_id: int) -> StudySession | None:
        for session in self._sessions.values():
            if session.course_id == course_id:
                return session
        return None

    # ── writes ────────────────────────────────────────────────────────

    def add(self, title: str, course_id: int | None = None) -> StudySession:
        session = StudySession(
            id=str(uuid.uuid4()),
            title=title or "New Session",
            course_id=course_id,
            minutes=self._default_minutes,
            seconds=0,
            initial_minutes=self._default_minutes,
            is_active=False,
            selected_sound=self._default_sound,
            mode="focus",
            auto_cycle=False,
        )
        self._sessions[session.id] = session
        self.persist()
        logger.info("Session %s (%r) created", session.id, session.title)

        self._runner.spawn(
            self._notifications.create(
                "New session",
                f'A new study session was created: "{session.title}"',
                Severity.INFO,
            ),
            name=f"notify:add:{session.id}",
        )
        return session

    def remove(self, session_id: str) -> bool:
        if self._sessions.pop(session_id, None) is None:
            return False
        self.persist()
        return True

    def toggle(self, session_id: str) -> StudySession | None:
        session = self._sessions.get(session_id)
        if session is None:
            return None

        session = self._put(session.model_copy(update={"is_active": not session.is_active}))
        if session.is_active:
            self._runner.spawn(
                self._notifications.create(
                    "Session started",
                    f'Session "{session.title}" is now running',
                    Severity.INFO,
                ),
                name=f"notify:start:{session.id}",
            )
        return session

    def reset(self, session_id: str) -> StudySession | None:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        return self._put(
            session.model_copy(
                update={"is_active": False, "minutes": session.initial_minutes, "seconds": 0}
            )
        )

    def update(self, session_id: str, changes: dict) -> StudySession | None:
        """Shallow-merge changes into a session.

        Changing initial_minutes also resets the remaining time unless the
        caller sets minutes or seconds itself. Raises ValueError for fields
        that are not editable or values that break the session invariants.
        """
        session = self._sessions.get(session_id)
        if session is None:
            return None

        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update session fields: {', '.join(sorted(unknown))}")

        changes = dict(changes)
        if (
            "initial_minutes" in changes
            and "minutes" not in changes
            and "seconds" not in changes
        ):
            changes["minutes"] = changes["initial_minutes"]
            changes["seconds"] = 0

        updated = StudySession.model_validate({**session.model_dump(), **changes})
        return self._put(updated)

    def apply_preset(self, session_id: str, minutes: int) -> StudySession | None:
        if minutes not in DURATION_PRESETS:
            raise ValueError(
                f"Unknown preset {minutes}, expected one of {', '.join(map(str, DURATION_PRESETS))}"
            )
        return self.update(
            session_id,
            {"initial_minutes": minutes, "minutes": minutes, "seconds": 0, "is_active": False},
        )

    def replace(self, session: StudySession, persist: bool = True) -> bool:
        """Store a new snapshot of an existing session. Unknown ids are ignored."""
        if session.id not in self._sessions:
            return False
        self._sessions[session.id] = session
        if persist:
            self.persist()
        return True

    def persist(self) -> None:
        self._store.save(
            SESSIONS_KEY, [s.model_dump(mode="json") for s in self._sessions.values()]
        )

    def _put(self, session: StudySession) -> StudySession:
        self._sessions[session.id] = session
        self.persist()
        return session
