"""
Session-related models for the Thansin Chat runtime.

These describe:
- Turn entries (user / companion), immutable once created
- Speaker and ErrorKind enums
- AvatarState, the ephemeral companion portrait shown next to the chat
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Speaker(str, Enum):
    USER = "user"
    COMPANION = "companion"


class ErrorKind(str, Enum):
    AUTH = "auth"
    QUOTA = "quota"
    GENERAL = "general"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Turn(BaseModel):
    model_config = ConfigDict(frozen=True)

    speaker: Speaker
    text: str                    # display text, mood markers already stripped
    created_at: datetime = Field(default_factory=_utcnow)
    is_error: bool = False
    error_kind: Optional[ErrorKind] = None

    @model_validator(mode="after")
    def _error_kind_only_on_errors(self) -> "Turn":
        if self.is_error and self.error_kind is None:
            raise ValueError("error turns must carry an error_kind")
        if not self.is_error and self.error_kind is not None:
            raise ValueError("error_kind is only allowed on error turns")
        return self

    @classmethod
    def from_user(cls, text: str) -> "Turn":
        return cls(speaker=Speaker.USER, text=text)

    @classmethod
    def from_companion(cls, text: str) -> "Turn":
        return cls(speaker=Speaker.COMPANION, text=text)

    @classmethod
    def from_error(cls, text: str, kind: ErrorKind) -> "Turn":
        # Error turns are shown on the companion side of the chat.
        return cls(speaker=Speaker.COMPANION, text=text, is_error=True, error_kind=kind)


class AvatarState(BaseModel):
    """Current companion portrait. Never persisted."""

    reference: Optional[str] = None   # remote URL or data: URI
    mood: Optional[str] = None
    regenerating: bool = False
