"""
FastAPI application entry point for the Thansin Chat runtime.

Responsibilities:
- configure logging from settings
- construct the shared ChatRuntime (history rehydrated from disk)
- include the chat routes under /chat

Run with:

    uvicorn runtime.api.server:app --reload
"""

import logging

from configs.settings import settings
from runtime.store.log_store import LogStore
from .factory import build_runtime, create_app


logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


# ---------------------------------------------------------------------------
# Shared singletons
# ---------------------------------------------------------------------------

runtime = build_runtime(settings, log_store=LogStore(str(settings.log_dir)))

app = create_app(runtime)
