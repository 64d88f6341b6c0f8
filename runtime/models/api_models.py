"""
HTTP request/response models for the Thansin Chat runtime API.
"""

from pydantic import BaseModel
from typing import List, Optional

from .session_models import AvatarState, Turn


class SendRequest(BaseModel):
    message: str


class HistoryResponse(BaseModel):
    turns: List[Turn]
    in_flight: bool = False


class SendResponse(BaseModel):
    """
    Result of POST /chat/send:

    - accepted=False: blank message, or a reply is still pending (no-op)
    - accepted=True:  reply holds the companion or error turn appended
    """
    accepted: bool
    reply: Optional[Turn] = None
    turns: List[Turn]


class AvatarResponse(BaseModel):
    avatar: AvatarState
