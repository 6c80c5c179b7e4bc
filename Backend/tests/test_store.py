import pytest

from studytimer.database import create_store_engine
from studytimer.services.store_service import KeyValueStore


@pytest.fixture
def kv_store():
    engine = create_store_engine("sqlite://")
    yield KeyValueStore(engine)
    engine.dispose()


def test_load_missing_key(kv_store):
    assert kv_store.load("study_sessions_state") is None


def test_save_and_load(kv_store):
    kv_store.save("study_stats_state", {"completed_today": 12, "daily_goal": 4, "streak": 2, "yesterday": 30})
    assert kv_store.load("study_stats_state") == {
        "completed_today": 12,
        "daily_goal": 4,
        "streak": 2,
        "yesterday": 30,
    }


def test_save_overwrites(kv_store):
    kv_store.save("last_study_reset_date", "2026-03-09")
    kv_store.save("last_study_reset_date", "2026-03-10")
    assert kv_store.load("last_study_reset_date") == "2026-03-10"


def test_values_survive_restart(tmp_path):
    url = f"sqlite:///{tmp_path / 'state.db'}"

    engine = create_store_engine(url)
    KeyValueStore(engine).save("study_sessions_state", [{"id": "a", "title": "Maths"}])
    engine.dispose()

    engine = create_store_engine(url)
    try:
        assert KeyValueStore(engine).load("study_sessions_state") == [
            {"id": "a", "title": "Maths"}
        ]
    finally:
        engine.dispose()
