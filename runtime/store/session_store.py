"""Session state for Thansin Chat.

The SessionStateManager is the single owner of:
- the ordered, append-only list of Turns
- the (ephemeral) AvatarState

The turn list is written to a KeyValueStore after every mutation so that it
can be reloaded on restart. The storage key carries a schema version;
histories written under another version are simply never looked up.
"""

import json
import logging
from typing import Callable, List, Optional, Tuple

from pydantic import TypeAdapter, ValidationError

from core.persona.models import PersonaConfig
from ..models.session_models import AvatarState, Turn
from .kv_store import KeyValueStore


logger = logging.getLogger(__name__)

HISTORY_STORAGE_KEY = "thansin.chat.history.v2"

_TURN_LIST = TypeAdapter(List[Turn])

# listener(event, manager), event is "load", "append", "clear" or "avatar"
Listener = Callable[[str, "SessionStateManager"], None]


class SessionStateManager:
    """Owns the turn history and avatar state of the single running session.

    Parameters
    ----------
    store:
        Key-value store used to persist the history.
    persona:
        Persona configuration; its greeting line seeds empty sessions.
    storage_key:
        Versioned key the history is stored under.
    """

    def __init__(
        self,
        store: KeyValueStore,
        persona: Optional[PersonaConfig] = None,
        storage_key: str = HISTORY_STORAGE_KEY,
    ) -> None:
        self._store = store
        self._persona = persona or PersonaConfig()
        self._storage_key = storage_key
        self._turns: List[Turn] = [self._greeting()]
        self._avatar = AvatarState()
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def history(self) -> Tuple[Turn, ...]:
        """Read-only snapshot of the turn history."""
        return tuple(self._turns)

    @property
    def avatar(self) -> AvatarState:
        return self._avatar.model_copy()

    @property
    def storage_key(self) -> str:
        return self._storage_key

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load_or_init(self) -> Tuple[Turn, ...]:
        """Rehydrate history from storage, or fall back to the greeting.

        Never raises on bad stored data: a missing entry, unparseable JSON,
        or turns that no longer validate all mean "no prior state".
        The greeting is not written back until the next mutation.
        """
        turns = self._read_persisted()
        self._turns = turns if turns else [self._greeting()]
        self._notify("load")
        return self.history

    def append(self, turn: Turn) -> None:
        self._turns.append(turn)
        self._persist()
        self._notify("append")

    def clear(self) -> None:
        self._turns = [self._greeting()]
        try:
            self._store.delete(self._storage_key)
        except OSError:
            # The in-memory reset stands; a stale entry is overwritten on the next append.
            logger.warning("[SESSION] could not erase stored history", exc_info=True)
        logger.info("[SESSION] history cleared")
        self._notify("clear")

    def set_avatar(self, reference: Optional[str], mood: Optional[str] = None) -> None:
        self._avatar = self._avatar.model_copy(update={"reference": reference, "mood": mood})
        self._notify("avatar")

    def set_avatar_regenerating(self, regenerating: bool) -> None:
        self._avatar = self._avatar.model_copy(update={"regenerating": regenerating})
        self._notify("avatar")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _greeting(self) -> Turn:
        return Turn.from_companion(self._persona.greeting)

    def _read_persisted(self) -> Optional[List[Turn]]:
        try:
            raw = self._store.get(self._storage_key)
        except (OSError, ValueError):
            # UnicodeDecodeError (undecodable bytes on disk) is a ValueError.
            logger.warning("[SESSION] could not read stored history", exc_info=True)
            return None
        if not raw:
            return None
        try:
            return _TURN_LIST.validate_python(json.loads(raw))
        except (ValueError, ValidationError) as exc:
            # json.JSONDecodeError is a ValueError.
            logger.warning("[SESSION] stored history is unreadable, starting fresh: %s", exc)
            return None

    def _persist(self) -> None:
        payload = json.dumps(
            [turn.model_dump(mode="json") for turn in self._turns],
            ensure_ascii=False,
        )
        try:
            self._store.set(self._storage_key, payload)
        except OSError:
            # The in-memory history stays authoritative for this run.
            logger.warning("[SESSION] could not persist history", exc_info=True)

    def _notify(self, event: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, self)
            except Exception:
                logger.exception("[SESSION] listener failed on %r", event)
