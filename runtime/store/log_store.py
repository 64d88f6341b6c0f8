"""
LogStore: append-only logging for Thansin Chat runtime events.

Events are written as JSON lines to:

    runtime/data/logs/events_YYYY-MM-DD.jsonl

ConsoleLogStore sends the same events to the standard logging tree instead,
which is what the CLI uses.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path


logger = logging.getLogger(__name__)


class LogStore:
    """Date-partitioned JSONL event log."""

    def __init__(self, log_dir: str = "runtime/data/logs"):
        self.log_dir = Path(log_dir)

    def path_for(self, when: datetime) -> Path:
        return self.log_dir / f"events_{when.strftime('%Y-%m-%d')}.jsonl"

    def log_event(self, event_type: str, payload: dict) -> None:
        now = datetime.now(timezone.utc)
        record = {"ts": now.isoformat(), "event": event_type, "payload": payload}
        self.log_dir.mkdir(parents=True, exist_ok=True)
        with self.path_for(now).open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")


class ConsoleLogStore:
    """Log sink used during local development and from the terminal chat."""

    def log_event(self, event_type: str, payload: dict) -> None:
        logger.info("[EVENT] %s: %s", event_type, payload)
