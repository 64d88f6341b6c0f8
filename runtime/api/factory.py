"""
Construction helpers shared by the HTTP server and the CLI.

build_runtime() wires settings, storage, the client handle and the
dispatcher into one ChatRuntime; create_app() mounts the chat routes
on a FastAPI application for that runtime.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import FastAPI

from configs.settings import Settings
from core.api.openai_client import ClientHandle, GenerationBackend, OpenAIGenerationBackend
from core.persona.models import build_persona
from ..agents.turn_dispatcher import TurnDispatcher
from ..store.kv_store import FileKeyValueStore, KeyValueStore
from ..store.session_store import SessionStateManager
from . import session_routes


@dataclass
class ChatRuntime:
    """The objects making up one running companion session."""

    state: SessionStateManager
    dispatcher: TurnDispatcher
    handle: Optional[ClientHandle] = None


def build_runtime(
    config: Settings,
    store: Optional[KeyValueStore] = None,
    backend: Optional[GenerationBackend] = None,
    log_store=None,
) -> ChatRuntime:
    """Build and rehydrate a ChatRuntime.

    Parameters
    ----------
    config:
        Settings instance (usually configs.settings.settings).
    store:
        Key-value store for the history. Defaults to a FileKeyValueStore
        under `config.storage_dir`.
    backend:
        Generation backend. Defaults to an OpenAIGenerationBackend on a
        lazily created client; pass a fake in tests.
    log_store:
        Optional event sink.
    """
    persona = build_persona(config)
    if store is None:
        store = FileKeyValueStore(str(config.storage_dir))

    handle = None
    if backend is None:
        handle = ClientHandle(api_key=config.openai_api_key, base_url=config.openai_base_url)
        backend = OpenAIGenerationBackend(handle, image_model=persona.image_model)

    state = SessionStateManager(store=store, persona=persona)
    state.load_or_init()

    dispatcher = TurnDispatcher(
        state=state,
        backend=backend,
        persona=persona,
        history_window=config.history_window,
        mood_avatars=config.mood_avatars_enabled,
        log_store=log_store,
    )
    return ChatRuntime(state=state, dispatcher=dispatcher, handle=handle)


def create_app(runtime: ChatRuntime) -> FastAPI:
    application = FastAPI(title="Thansin Chat Runtime")

    # Initialize the router module with our shared objects, then include it.
    session_routes.init_routes(
        session_state=runtime.state,
        dispatcher=runtime.dispatcher,
    )
    application.include_router(session_routes.router, prefix="/chat")
    return application
