"""TurnDispatcher implementation.

Responsible for one full send cycle:
- appending the user's message as a Turn straight away
- building the outbound request from the non-error history
- calling the generation backend with the persona configuration
- parsing the reply (mood marker stripped) into a companion Turn, or
  classifying the failure into an error Turn
- kicking off a background avatar regeneration for the reply's mood

At most one send is in flight per dispatcher. Avatar regenerations run
independently; each one is numbered and only the latest may update the
avatar.
"""

import asyncio
import logging
from typing import Optional, Sequence, Set, Tuple
from urllib.parse import quote

from core.api.openai_client import GenerationBackend
from core.classifier.failure_classifier import classify_failure
from core.parsing.mood_parser import DEFAULT_MOOD, parse_reply
from core.persona.models import PersonaConfig
from exceptions.exceptions import DispatcherNotReadyException
from ..models.session_models import Turn
from ..store.session_store import SessionStateManager


logger = logging.getLogger(__name__)

DEFAULT_HISTORY_WINDOW = 10

AVATAR_ASPECT_RATIO = "1:1"
PLACEHOLDER_AVATAR_URL = "https://picsum.photos/seed/thansin-{seed}/512/512"


def build_request_history(history: Sequence[Turn], window: int = DEFAULT_HISTORY_WINDOW) -> Tuple[Turn, ...]:
    """Turns to send upstream: error turns dropped, then the last `window` kept.

    A window of 0 or less keeps the whole non-error history.
    """
    turns = [turn for turn in history if not turn.is_error]
    if window > 0:
        turns = turns[-window:]
    return tuple(turns)


def placeholder_avatar(mood: str) -> str:
    """Deterministic stand-in image for a mood."""
    return PLACEHOLDER_AVATAR_URL.format(seed=quote((mood or DEFAULT_MOOD).lower(), safe=""))


class TurnDispatcher:
    """Send cycle + avatar regeneration for one session.

    Parameters
    ----------
    state:
        SessionStateManager owning the history; the dispatcher only reads
        snapshots and appends through it.
    backend:
        GenerationBackend used for replies and avatars. May be None, in which
        case every send yields a `general` error turn.
    persona:
        Fixed persona configuration sent with every request.
    history_window:
        Maximum number of turns sent upstream.
    mood_avatars:
        Whether replies trigger an avatar regeneration.
    log_store:
        Optional event sink exposing log_event(event_type, payload).
    """

    def __init__(
        self,
        state: SessionStateManager,
        backend: Optional[GenerationBackend],
        persona: Optional[PersonaConfig] = None,
        history_window: int = DEFAULT_HISTORY_WINDOW,
        mood_avatars: bool = True,
        log_store=None,
    ) -> None:
        self.state = state
        self.backend = backend
        self.persona = persona or PersonaConfig()
        self.history_window = history_window
        self.mood_avatars = mood_avatars
        self.log_store = log_store

        self._in_flight = False
        self._avatar_seq = 0
        self._avatar_tasks: Set[asyncio.Task] = set()

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def avatar_sequence(self) -> int:
        return self._avatar_seq

    async def send(self, user_text: str) -> Optional[Turn]:
        """Run one dispatch and return the companion/error Turn appended.

        Returns None without touching the history when the text is blank
        or another dispatch is still in flight.
        """
        text = (user_text or "").strip()
        if not text:
            return None
        if self._in_flight:
            logger.info("[DISPATCH] send ignored, a reply is still pending")
            return None

        self._in_flight = True
        try:
            # (1) Optimistic user turn.
            self.state.append(Turn.from_user(text))

            # (2) Outbound history from the snapshot that now includes it.
            request_turns = build_request_history(self.state.history, self.history_window)

            # (3) Call the backend.
            mood = None
            try:
                raw = await self._require_backend().generate_reply(request_turns, self.persona)
            except Exception as exc:
                # (5) Failure -> error turn.
                reply = self._error_turn(exc)
            else:
                # (4) Success -> companion turn.
                parsed = parse_reply(raw)
                reply = Turn.from_companion(parsed.text or self.persona.empty_response_fallback)
                mood = parsed.mood
                self._log("reply_received", {"mood": mood, "has_marker": parsed.has_marker})

            self.state.append(reply)

            if mood is not None and self.mood_avatars:
                self.schedule_avatar(mood)

            return reply
        finally:
            # (6) Released whatever happened above.
            self._in_flight = False

    # ------------------------------------------------------------------
    # Avatar regeneration
    # ------------------------------------------------------------------

    def schedule_avatar(self, mood: str) -> asyncio.Task:
        """Start a background avatar request for `mood`, superseding older ones."""
        self._avatar_seq += 1
        seq = self._avatar_seq

        for task in list(self._avatar_tasks):
            task.cancel()

        self.state.set_avatar_regenerating(True)
        task = asyncio.create_task(self._regenerate_avatar(seq, mood))
        self._avatar_tasks.add(task)
        task.add_done_callback(self._avatar_tasks.discard)
        return task

    async def wait_for_avatar(self) -> None:
        """Wait until no avatar request is outstanding."""
        while self._avatar_tasks:
            await asyncio.gather(*list(self._avatar_tasks), return_exceptions=True)

    async def _regenerate_avatar(self, seq: int, mood: str) -> None:
        reference = None
        try:
            if self.backend is not None:
                reference = await self.backend.generate_avatar(
                    self.persona.avatar_prompt(mood),
                    aspect_ratio=AVATAR_ASPECT_RATIO,
                )
        except Exception as exc:
            logger.warning("[AVATAR] generation failed for mood=%s: %s", mood, exc)
        if not reference:
            reference = placeholder_avatar(mood)

        if seq != self._avatar_seq:
            logger.debug("[AVATAR] dropping superseded result #%d (latest #%d)", seq, self._avatar_seq)
            return

        self.state.set_avatar(reference, mood=mood)
        self.state.set_avatar_regenerating(False)
        self._log("avatar_updated", {"mood": mood, "seq": seq})

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_backend(self) -> GenerationBackend:
        if self.backend is None:
            raise DispatcherNotReadyException()
        return self.backend

    def _error_turn(self, exc: Exception) -> Turn:
        failure = classify_failure(exc, self.persona)
        logger.warning(
            "[DISPATCH] generation failed (%s): %s",
            failure.error_kind.value,
            exc,
        )
        self._log(
            "dispatch_failed",
            {"error_kind": failure.error_kind.value, "error": str(exc)},
        )
        return Turn.from_error(failure.display_text, failure.error_kind)

    def _log(self, event_type: str, payload: dict) -> None:
        if self.log_store is None:
            return
        try:
            self.log_store.log_event(event_type=event_type, payload=payload)
        except Exception:
            # Logging failures should not affect main flow.
            logger.debug("[DISPATCH] log sink failed", exc_info=True)
