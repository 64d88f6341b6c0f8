"""Shared fixtures: in-memory storage and a scriptable generation backend."""

import asyncio
from typing import List, Optional

import pytest

from core.persona.models import PersonaConfig
from runtime.agents.turn_dispatcher import TurnDispatcher
from runtime.store.kv_store import InMemoryKeyValueStore
from runtime.store.session_store import SessionStateManager


class FakeBackend:
    """GenerationBackend double.

    - replies: queue of str / None / Exception returned (or raised) in order
    - gate: when set, generate_reply waits on it before answering
    - avatar: str / None / Exception for generate_avatar
    """

    def __init__(self, replies=None, avatar="https://img.example/avatar.png"):
        self.replies: List = list(replies or [])
        self.avatar = avatar
        self.gate: Optional[asyncio.Event] = None
        self.reply_calls: List = []
        self.avatar_calls: List = []

    async def generate_reply(self, turns, persona):
        self.reply_calls.append(list(turns))
        if self.gate is not None:
            await self.gate.wait()
        result = self.replies.pop(0) if self.replies else "ok [MOOD: happy]"
        if isinstance(result, BaseException):
            raise result
        return result

    async def generate_avatar(self, prompt, aspect_ratio="1:1"):
        self.avatar_calls.append((prompt, aspect_ratio))
        if isinstance(self.avatar, BaseException):
            raise self.avatar
        return self.avatar


@pytest.fixture
def persona():
    return PersonaConfig()


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def state(store, persona):
    manager = SessionStateManager(store=store, persona=persona)
    manager.load_or_init()
    return manager


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def dispatcher(state, backend, persona):
    return TurnDispatcher(state=state, backend=backend, persona=persona, mood_avatars=False)
