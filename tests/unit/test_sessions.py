import threading

from agents.types import Stage
from services.sessions import InMemorySessionStore


def test_first_contact_seeds_introduction_session():
    store = InMemorySessionStore()
    assert store.get("alice") is None

    session = store.get_or_create("alice")

    assert session.stage is Stage.INTRODUCTION
    assert session.profile.user_id == "alice"
    assert session.profile.experience == "Débutant"
    assert session.profile.language_level == "Intermédiaire"
    assert session.profile.digital_skill_level == "Faible"
    assert session.profile.current_state == "menu"
    assert session.profile.evaluation_step == 0
    assert session.history == []


def test_one_session_per_user():
    store = InMemorySessionStore()
    first = store.get_or_create("bob")
    second = store.get_or_create("bob")
    assert first is second
    assert store.get("bob") is first
    assert store.get("bobby") is None


def test_update_applies_and_touches():
    store = InMemorySessionStore()
    session = store.get_or_create("carol")
    before = session.updated_at

    updated = store.update("carol", lambda s: s.add_user_message("bonjour"))

    assert updated is session
    assert [m.content for m in session.history] == ["bonjour"]
    assert session.updated_at >= before


def test_concurrent_creation_yields_single_session():
    store = InMemorySessionStore()
    seen = []

    def worker():
        seen.append(store.get_or_create("dave"))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(seen) == 8
    assert all(s is seen[0] for s in seen)
    assert store.get("dave") is seen[0]


def test_session_id_is_stable_and_history_window():
    store = InMemorySessionStore()
    session = store.get_or_create("erin")
    for i in range(6):
        session.add_user_message(f"m{i}")
    assert [m.content for m in session.recent_history(3)] == ["m3", "m4", "m5"]
    assert session.recent_history(0) == []
    assert len(session.history) == 6


def test_stage_cycle():
    assert Stage.INTRODUCTION.next() is Stage.PREPARATION
    assert Stage.PREPARATION.next() is Stage.SIMULATION
    assert Stage.SIMULATION.next() is Stage.FEEDBACK
    assert Stage.FEEDBACK.next() is Stage.PREPARATION


def test_empty_store_is_truthy():
    store = InMemorySessionStore()
    assert store
    assert (store or InMemorySessionStore()) is store
