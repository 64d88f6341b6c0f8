"""
core.api.openai_client

Thin wrapper around the OpenAI Chat Completions and Images APIs for
Thansin Chat.

Used by:
  - runtime/agents/turn_dispatcher.py (through the GenerationBackend protocol)
  - runtime/api/server.py and cli/main.py (construction only)
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Protocol, Sequence

from openai import AsyncOpenAI

from configs.settings import is_placeholder_api_key
from core.persona.models import PersonaConfig
from exceptions.exceptions import EmptyCompletionException, MissingCredentialException
from runtime.models.session_models import Speaker, Turn


logger = logging.getLogger(__name__)


# Aspect-ratio hint -> size accepted by the images endpoint.
IMAGE_SIZES: Dict[str, str] = {
    "1:1": "1024x1024",
    "3:4": "1024x1536",
    "2:3": "1024x1536",
    "9:16": "1024x1536",
    "4:3": "1536x1024",
    "3:2": "1536x1024",
    "16:9": "1536x1024",
}

_ROLE_BY_SPEAKER = {
    Speaker.USER: "user",
    Speaker.COMPANION: "assistant",
}


# -------------------------------------------------------------------
# Capability interface
# -------------------------------------------------------------------


class GenerationBackend(Protocol):
    """
    What the turn dispatcher needs from a generation service.

    Implementations raise on failure; the dispatcher classifies whatever
    they raise.
    """

    async def generate_reply(self, turns: Sequence[Turn], persona: PersonaConfig) -> Optional[str]:
        ...

    async def generate_avatar(self, prompt: str, aspect_ratio: str = "1:1") -> Optional[str]:
        ...


# -------------------------------------------------------------------
# Client handle
# -------------------------------------------------------------------


class ClientHandle:
    """
    Explicitly owned, lazily created AsyncOpenAI client.

    The client is built on first use, so a missing key does not break
    startup. `reset()` drops the client so the next call rebuilds it, e.g.
    after the key was rotated.
    """

    def __init__(self, api_key: Optional[str], base_url: Optional[str] = None) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._client: Optional[AsyncOpenAI] = None

    @property
    def is_configured(self) -> bool:
        return not is_placeholder_api_key(self._api_key)

    def get(self) -> AsyncOpenAI:
        if not self.is_configured:
            raise MissingCredentialException()
        if self._client is None:
            logger.debug("[CLIENT] creating AsyncOpenAI client (base_url=%s)", self._base_url)
            self._client = AsyncOpenAI(api_key=self._api_key, base_url=self._base_url)
        return self._client

    def reset(self, api_key: Optional[str] = None, base_url: Optional[str] = None) -> None:
        if api_key is not None:
            self._api_key = api_key
        if base_url is not None:
            self._base_url = base_url
        self._client = None


# -------------------------------------------------------------------
# Internal helpers
# -------------------------------------------------------------------


def build_messages(turns: Sequence[Turn], persona: PersonaConfig) -> List[Dict[str, str]]:
    """Convert turns into chat-completions messages, system prompt first."""
    messages = [{"role": "system", "content": persona.system_instruction}]
    for turn in turns:
        messages.append({"role": _ROLE_BY_SPEAKER[turn.speaker], "content": turn.text})
    return messages


def image_size_for(aspect_ratio: str) -> str:
    return IMAGE_SIZES.get(aspect_ratio, IMAGE_SIZES["1:1"])


# -------------------------------------------------------------------
# OpenAI backend
# -------------------------------------------------------------------


class OpenAIGenerationBackend:
    """GenerationBackend implementation on top of a ClientHandle."""

    def __init__(self, handle: ClientHandle, image_model: str = "gpt-image-1") -> None:
        self.handle = handle
        self.image_model = image_model

    async def generate_reply(self, turns: Sequence[Turn], persona: PersonaConfig) -> Optional[str]:
        """
        Send the turn list and persona configuration, return the reply text.

        Returns None (or "") when the model produced an empty message; the
        caller substitutes the persona fallback line.

        Raises
        ------
        MissingCredentialException
            If no usable API key is configured (no request is sent).
        EmptyCompletionException
            If the response carries no choices at all.
        openai.OpenAIError
            If the API call fails.
        """
        client = self.handle.get()
        completion = await client.chat.completions.create(
            model=persona.model,
            messages=build_messages(turns, persona),
            temperature=persona.temperature,
            top_p=persona.top_p,
        )
        if not completion.choices:
            raise EmptyCompletionException(persona.model)
        return completion.choices[0].message.content

    async def generate_avatar(self, prompt: str, aspect_ratio: str = "1:1") -> Optional[str]:
        """Return a remote URL or a base64 data URI, or None if nothing came back."""
        client = self.handle.get()
        result = await client.images.generate(
            model=self.image_model,
            prompt=prompt,
            size=image_size_for(aspect_ratio),
            n=1,
        )
        if not result.data:
            return None
        image = result.data[0]
        if getattr(image, "b64_json", None):
            return f"data:image/png;base64,{image.b64_json}"
        return getattr(image, "url", None)
