import pytest

from studytimer.services.audio_service import COMPLETION_SOUNDS
from studytimer.services.background import BackgroundRunner
from studytimer.services.session_service import SessionRegistry
from studytimer.services.store_service import SESSIONS_KEY
from tests.conftest import FakeStore, notification_titles


@pytest.fixture
def runner() -> BackgroundRunner:
    return BackgroundRunner()


@pytest.fixture
def registry(store, notifications, runner) -> SessionRegistry:
    return SessionRegistry(store, notifications, runner)


def _stored_session(**overrides) -> dict:
    record = {
        "id": "s1",
        "title": "Stored",
        "course_id": None,
        "minutes": 12,
        "seconds": 30,
        "initial_minutes": 25,
        "is_active": True,
        "selected_sound": COMPLETION_SOUNDS["digital"],
        "mode": "focus",
        "auto_cycle": False,
    }
    record.update(overrides)
    return record


# ── add / remove ─────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_add_session_defaults(registry, store, notifications, runner):
    session = registry.add("Linear Algebra")
    await runner.drain()

    assert session.title == "Linear Algebra"
    assert (session.minutes, session.seconds, session.initial_minutes) == (25, 0, 25)
    assert session.is_active is False
    assert session.mode == "focus"
    assert session.auto_cycle is False
    assert session.course_id is None
    assert session.selected_sound == COMPLETION_SOUNDS["bell"]
    assert store.load(SESSIONS_KEY)[0]["id"] == session.id
    assert notification_titles(notifications) == ["New session"]


@pytest.mark.asyncio
async def test_add_session_without_title(registry):
    assert registry.add("").title == "New Session"


@pytest.mark.asyncio
async def test_add_session_ids_are_unique(registry):
    ids = {registry.add("x").id for _ in range(20)}
    assert len(ids) == 20


@pytest.mark.asyncio
async def test_add_session_survives_notification_failure(registry, notifications, runner):
    notifications.create.side_effect = RuntimeError("API down")
    session = registry.add("Physics")
    await runner.drain()
    assert registry.get(session.id) == session


@pytest.mark.asyncio
async def test_remove_session_is_idempotent(registry, store):
    session = registry.add("History")
    assert registry.remove(session.id) is True
    assert registry.remove(session.id) is False
    assert registry.remove("does-not-exist") is False
    assert registry.sessions == []
    assert store.load(SESSIONS_KEY) == []


# ── toggle / reset ───────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_toggle_notifies_only_on_start(registry, notifications, runner):
    session = registry.add("Chemistry")
    started = registry.toggle(session.id)
    paused = registry.toggle(session.id)
    await runner.drain()

    assert started.is_active is True
    assert paused.is_active is False
    assert notification_titles(notifications) == ["New session", "Session started"]
    assert registry.active_count == 0


@pytest.mark.asyncio
async def test_toggle_unknown_session(registry):
    assert registry.toggle("missing") is None


@pytest.mark.asyncio
async def test_reset_restores_initial_duration(registry):
    session = registry.add("Biology")
    registry.update(session.id, {"minutes": 3, "seconds": 17, "mode": "break", "auto_cycle": True})
    registry.toggle(session.id)

    reset = registry.reset(session.id)
    assert (reset.minutes, reset.seconds) == (25, 0)
    assert reset.is_active is False
    assert reset.mode == "break"
    assert reset.auto_cycle is True


def test_reset_unknown_session(registry):
    assert registry.reset("missing") is None


# ── update ───────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_update_merges_fields(registry, store):
    session = registry.add("Draft")
    updated = registry.update(
        session.id,
        {"title": "Final", "selected_sound": COMPLETION_SOUNDS["nature"], "auto_cycle": True},
    )
    assert updated.title == "Final"
    assert updated.selected_sound == COMPLETION_SOUNDS["nature"]
    assert updated.auto_cycle is True
    assert (updated.minutes, updated.seconds) == (25, 0)
    assert store.load(SESSIONS_KEY)[0]["title"] == "Final"


@pytest.mark.asyncio
async def test_update_initial_minutes_resets_remaining(registry):
    session = registry.add("Essay")
    registry.update(session.id, {"minutes": 10, "seconds": 5})
    updated = registry.update(session.id, {"initial_minutes": 50})
    assert (updated.initial_minutes, updated.minutes, updated.seconds) == (50, 50, 0)


@pytest.mark.asyncio
async def test_update_initial_minutes_with_explicit_remaining(registry):
    session = registry.add("Essay")
    updated = registry.update(session.id, {"initial_minutes": 50, "minutes": 7, "seconds": 30})
    assert (updated.initial_minutes, updated.minutes, updated.seconds) == (50, 7, 30)


@pytest.mark.asyncio
async def test_update_rejects_unknown_fields(registry):
    session = registry.add("Essay")
    with pytest.raises(ValueError, match="id"):
        registry.update(session.id, {"id": "other"})
    with pytest.raises(ValueError, match="colour"):
        registry.update(session.id, {"colour": "red"})


@pytest.mark.asyncio
async def test_update_rejects_invalid_values(registry):
    session = registry.add("Essay")
    with pytest.raises(ValueError):
        registry.update(session.id, {"seconds": 60})
    with pytest.raises(ValueError):
        registry.update(session.id, {"minutes": -1})
    assert registry.get(session.id) == session


def test_update_unknown_session(registry):
    assert registry.update("missing", {"title": "x"}) is None


@pytest.mark.asyncio
async def test_apply_preset(registry):
    session = registry.add("Essay")
    registry.toggle(session.id)
    updated = registry.apply_preset(session.id, 45)
    assert (updated.initial_minutes, updated.minutes, updated.seconds) == (45, 45, 0)
    assert updated.is_active is False


@pytest.mark.asyncio
async def test_apply_unknown_preset(registry):
    session = registry.add("Essay")
    with pytest.raises(ValueError, match="preset"):
        registry.apply_preset(session.id, 30)


@pytest.mark.asyncio
async def test_find_by_course(registry):
    registry.add("Plain")
    linked = registry.add("Compilers", course_id=12)
    assert registry.find_by_course(12) == linked
    assert registry.find_by_course(99) is None


# ── restore ──────────────────────────────────────────────────────────


def test_restored_sessions_are_paused(notifications, runner):
    store = FakeStore({SESSIONS_KEY: [_stored_session(), _stored_session(id="s2", title="Other")]})
    registry = SessionRegistry(store, notifications, runner)

    assert [s.id for s in registry.sessions] == ["s1", "s2"]
    restored = registry.get("s1")
    assert restored.is_active is False
    assert (restored.minutes, restored.seconds) == (12, 30)
    assert restored.selected_sound == COMPLETION_SOUNDS["digital"]


def test_restore_skips_malformed_records(notifications, runner):
    store = FakeStore(
        {SESSIONS_KEY: [_stored_session(), _stored_session(id="bad", seconds=99), "garbage"]}
    )
    registry = SessionRegistry(store, notifications, runner)
    assert [s.id for s in registry.sessions] == ["s1"]


def test_restore_ignores_non_list(notifications, runner):
    store = FakeStore({SESSIONS_KEY: {"not": "a list"}})
    assert SessionRegistry(store, notifications, runner).sessions == []
