"""Tests for SessionStateManager: history, persistence and avatar state."""

import json

import pytest

from core.persona import prompts
from runtime.models.session_models import ErrorKind, Speaker, Turn
from runtime.store.kv_store import FileKeyValueStore, InMemoryKeyValueStore
from runtime.store.session_store import HISTORY_STORAGE_KEY, SessionStateManager


def _is_greeting(turn):
    return turn.speaker == Speaker.COMPANION and turn.text == prompts.GREETING and not turn.is_error


class TestLoadOrInit:

    def test_fresh_store_yields_greeting(self, store, persona):
        manager = SessionStateManager(store=store, persona=persona)
        history = manager.load_or_init()
        assert len(history) == 1
        assert _is_greeting(history[0])

    def test_greeting_not_persisted_until_mutation(self, store, persona):
        SessionStateManager(store=store, persona=persona).load_or_init()
        assert store.get(HISTORY_STORAGE_KEY) is None

    def test_rehydrates_persisted_history(self, store, persona):
        first = SessionStateManager(store=store, persona=persona)
        first.load_or_init()
        first.append(Turn.from_user("hi"))
        first.append(Turn.from_error("oops", ErrorKind.QUOTA))

        second = SessionStateManager(store=store, persona=persona)
        history = second.load_or_init()
        assert [t.text for t in history] == [prompts.GREETING, "hi", "oops"]
        assert history[2].is_error and history[2].error_kind == ErrorKind.QUOTA
        assert history[1].created_at == first.history[1].created_at

    @pytest.mark.parametrize(
        "raw",
        [
            "{not json",
            "null",
            "42",
            json.dumps({"turns": []}),
            json.dumps([{"role": "user", "content": "v1 shape"}]),
            json.dumps([{"speaker": "user", "text": "x", "is_error": True}]),
            "[]",
        ],
    )
    def test_corrupt_storage_falls_back_silently(self, persona, raw):
        store = InMemoryKeyValueStore({HISTORY_STORAGE_KEY: raw})
        manager = SessionStateManager(store=store, persona=persona)
        history = manager.load_or_init()
        assert len(history) == 1
        assert _is_greeting(history[0])

    def test_undecodable_file_falls_back_silently(self, tmp_path, persona):
        (tmp_path / f"{HISTORY_STORAGE_KEY}.json").write_bytes(b"\xff\xfe[garbage")
        manager = SessionStateManager(store=FileKeyValueStore(str(tmp_path)), persona=persona)
        history = manager.load_or_init()
        assert len(history) == 1
        assert _is_greeting(history[0])

    def test_other_schema_key_is_ignored(self, persona):
        store = InMemoryKeyValueStore({"thansin.chat.history.v1": "[]"})
        history = SessionStateManager(store=store, persona=persona).load_or_init()
        assert len(history) == 1


class TestAppendAndClear:

    def test_append_persists_full_history(self, state, store):
        state.append(Turn.from_user("hello"))
        stored = json.loads(store.get(HISTORY_STORAGE_KEY))
        assert [t["text"] for t in stored] == [prompts.GREETING, "hello"]
        assert stored[1]["speaker"] == "user"

    def test_history_is_a_snapshot(self, state):
        snapshot = state.history
        state.append(Turn.from_user("later"))
        assert len(snapshot) == 1
        assert len(state.history) == 2

    def test_clear_then_reload(self, state, store, persona):
        state.append(Turn.from_user("one"))
        state.append(Turn.from_companion("two"))
        state.clear()

        assert len(state.history) == 1 and _is_greeting(state.history[0])
        assert store.get(HISTORY_STORAGE_KEY) is None

        reloaded = SessionStateManager(store=store, persona=persona)
        history = reloaded.load_or_init()
        assert len(history) == 1 and _is_greeting(history[0])
        assert HISTORY_STORAGE_KEY not in store
        assert len(store) == 0

    def test_persist_failure_keeps_turn(self, persona):
        class BrokenStore(InMemoryKeyValueStore):
            def set(self, key, value):
                raise OSError("disk full")

        manager = SessionStateManager(store=BrokenStore(), persona=persona)
        manager.load_or_init()
        manager.append(Turn.from_user("still here"))
        assert manager.history[-1].text == "still here"

    def test_delete_failure_keeps_cleared_history(self, persona):
        class ReadOnlyStore(InMemoryKeyValueStore):
            def delete(self, key):
                raise OSError("read-only fs")

        manager = SessionStateManager(store=ReadOnlyStore(), persona=persona)
        manager.load_or_init()
        manager.append(Turn.from_user("one"))
        events = []
        manager.add_listener(lambda event, _: events.append(event))

        manager.clear()

        assert len(manager.history) == 1 and _is_greeting(manager.history[0])
        assert events == ["clear"]


class TestListeners:

    def test_events(self, state):
        events = []
        state.add_listener(lambda event, manager: events.append(event))
        state.append(Turn.from_user("x"))
        state.set_avatar_regenerating(True)
        state.set_avatar("https://img/x.png", mood="shy")
        state.clear()
        assert events == ["append", "avatar", "avatar", "clear"]

    def test_failing_listener_does_not_break_append(self, state):
        def boom(event, manager):
            raise RuntimeError("render failed")

        state.add_listener(boom)
        state.append(Turn.from_user("x"))
        assert state.history[-1].text == "x"


class TestAvatar:

    def test_avatar_defaults(self, state):
        avatar = state.avatar
        assert avatar.reference is None
        assert not avatar.regenerating

    def test_set_avatar(self, state, store):
        state.set_avatar_regenerating(True)
        state.set_avatar("data:image/png;base64,AAAA", mood="happy")
        avatar = state.avatar
        assert avatar.reference == "data:image/png;base64,AAAA"
        assert avatar.mood == "happy"
        assert avatar.regenerating
        # Avatar state is never written to storage.
        assert store.get(HISTORY_STORAGE_KEY) is None


class TestTurnModel:

    def test_turns_are_immutable(self):
        turn = Turn.from_user("x")
        with pytest.raises(Exception):
            turn.text = "y"

    def test_error_kind_requires_error(self):
        with pytest.raises(ValueError):
            Turn(speaker=Speaker.COMPANION, text="x", error_kind=ErrorKind.AUTH)
        with pytest.raises(ValueError):
            Turn(speaker=Speaker.COMPANION, text="x", is_error=True)
