from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


load_dotenv()


# Values that ship in sample .env files and are never a real credential.
PLACEHOLDER_API_KEYS = frozenset(
    {
        "placeholder_api_key",
        "your-api-key",
        "your_api_key",
        "your-api-key-here",
        "changeme",
        "change-me",
        "sk-xxx",
        "none",
        "null",
    }
)


def is_placeholder_api_key(value: Optional[str]) -> bool:
    """Return True when `value` is missing or an obvious template value."""
    if value is None:
        return True
    candidate = value.strip()
    if not candidate:
        return True
    if candidate.startswith("<") and candidate.endswith(">"):
        return True
    return candidate.lower() in PLACEHOLDER_API_KEYS


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    """
    Central configuration for Thansin Chat.

    Values are loaded once from environment variables (with sensible defaults)
    and then exposed via typed properties.
    """

    def __init__(self) -> None:
        # Generation capability
        self._openai_api_key = os.getenv("OPENAI_API_KEY")
        self._openai_base_url = os.getenv("OPENAI_BASE_URL") or None
        self._chat_model = os.getenv("THANSIN_CHAT_MODEL", "gpt-4.1-mini")
        self._image_model = os.getenv("THANSIN_IMAGE_MODEL", "gpt-image-1")

        # Persona sampling parameters
        self._temperature = float(os.getenv("THANSIN_TEMPERATURE", "0.9"))
        self._top_p = float(os.getenv("THANSIN_TOP_P", "0.95"))

        # Dispatch behaviour
        self._history_window = int(os.getenv("THANSIN_HISTORY_WINDOW", "10"))
        self._mood_avatars = _env_bool("THANSIN_MOOD_AVATARS", True)

        # Runtime data + logging
        self._runtime_data_dir = Path(
            os.getenv("THANSIN_RUNTIME_DATA_DIR", "runtime/data")
        )
        self._log_level = os.getenv("THANSIN_LOG_LEVEL", "INFO").upper()

    # ------------------------------------------------------------------
    # Generation capability
    # ------------------------------------------------------------------

    @property
    def openai_api_key(self) -> Optional[str]:
        # Not validated here: a missing key must surface as an `auth`
        # error turn at dispatch time, not as a startup crash.
        return self._openai_api_key

    @property
    def openai_base_url(self) -> Optional[str]:
        return self._openai_base_url

    @property
    def chat_model(self) -> str:
        return self._chat_model

    @property
    def image_model(self) -> str:
        return self._image_model

    # ------------------------------------------------------------------
    # Persona / dispatch
    # ------------------------------------------------------------------

    @property
    def temperature(self) -> float:
        return self._temperature

    @property
    def top_p(self) -> float:
        return self._top_p

    @property
    def history_window(self) -> int:
        return self._history_window

    @property
    def mood_avatars_enabled(self) -> bool:
        return self._mood_avatars

    # ------------------------------------------------------------------
    # Paths / logging
    # ------------------------------------------------------------------

    @property
    def runtime_data_dir(self) -> Path:
        return self._runtime_data_dir

    @property
    def storage_dir(self) -> Path:
        return self._runtime_data_dir / "storage"

    @property
    def log_dir(self) -> Path:
        return self._runtime_data_dir / "logs"

    @property
    def log_level(self) -> str:
        return self._log_level


settings = Settings()
