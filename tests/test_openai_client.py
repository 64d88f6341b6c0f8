"""Tests for the OpenAI-backed generation capability (no network)."""

import asyncio
from types import SimpleNamespace

import pytest

from core.api.openai_client import (
    ClientHandle,
    OpenAIGenerationBackend,
    build_messages,
    image_size_for,
)
from exceptions.exceptions import EmptyCompletionException, MissingCredentialException
from runtime.models.session_models import Turn


class FakeCompletions:
    def __init__(self, choices):
        self.choices = choices
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        return SimpleNamespace(choices=self.choices)


class FakeImages:
    def __init__(self, data):
        self.data = data
        self.kwargs = None

    async def generate(self, **kwargs):
        self.kwargs = kwargs
        return SimpleNamespace(data=self.data)


class FakeHandle:
    def __init__(self, choices=(), images=()):
        self.completions = FakeCompletions(list(choices))
        self.images = FakeImages(list(images))
        self.client = SimpleNamespace(
            chat=SimpleNamespace(completions=self.completions),
            images=self.images,
        )

    def get(self):
        return self.client


def _choice(content):
    return SimpleNamespace(message=SimpleNamespace(content=content))


class TestClientHandle:

    @pytest.mark.parametrize("key", [None, "", "  ", "PLACEHOLDER_API_KEY", "<your key>", "changeme"])
    def test_placeholder_keys_raise_before_any_call(self, key):
        handle = ClientHandle(api_key=key)
        assert not handle.is_configured
        with pytest.raises(MissingCredentialException):
            handle.get()

    def test_client_is_created_once(self):
        handle = ClientHandle(api_key="sk-test-123")
        assert handle.get() is handle.get()

    def test_reset_rebuilds(self):
        handle = ClientHandle(api_key=None)
        with pytest.raises(MissingCredentialException):
            handle.get()
        handle.reset(api_key="sk-test-456")
        assert handle.is_configured
        first = handle.get()
        handle.reset()
        assert handle.get() is not first


class TestBuildMessages:

    def test_roles_and_system_prompt(self, persona):
        turns = [Turn.from_companion("greet"), Turn.from_user("hi")]
        messages = build_messages(turns, persona)
        assert messages[0] == {"role": "system", "content": persona.system_instruction}
        assert [m["role"] for m in messages[1:]] == ["assistant", "user"]
        assert [m["content"] for m in messages[1:]] == ["greet", "hi"]

    def test_image_sizes(self):
        assert image_size_for("1:1") == "1024x1024"
        assert image_size_for("9:16") == "1024x1536"
        assert image_size_for("16:9") == "1536x1024"
        assert image_size_for("weird") == "1024x1024"


class TestBackend:

    def test_generate_reply_sends_persona_config(self, persona):
        handle = FakeHandle(choices=[_choice("hello [MOOD: happy]")])
        backend = OpenAIGenerationBackend(handle)
        text = asyncio.run(backend.generate_reply([Turn.from_user("hi")], persona))

        assert text == "hello [MOOD: happy]"
        kwargs = handle.completions.kwargs
        assert kwargs["model"] == persona.model
        assert kwargs["temperature"] == persona.temperature
        assert kwargs["top_p"] == persona.top_p
        assert kwargs["messages"][-1] == {"role": "user", "content": "hi"}

    def test_empty_choices_raise(self, persona):
        backend = OpenAIGenerationBackend(FakeHandle(choices=[]))
        with pytest.raises(EmptyCompletionException):
            asyncio.run(backend.generate_reply([Turn.from_user("hi")], persona))

    def test_empty_content_is_returned_as_is(self, persona):
        backend = OpenAIGenerationBackend(FakeHandle(choices=[_choice(None)]))
        assert asyncio.run(backend.generate_reply([Turn.from_user("hi")], persona)) is None

    def test_avatar_b64_becomes_data_uri(self):
        handle = FakeHandle(images=[SimpleNamespace(b64_json="AAAA", url=None)])
        backend = OpenAIGenerationBackend(handle, image_model="gpt-image-1")
        ref = asyncio.run(backend.generate_avatar("portrait", aspect_ratio="3:4"))
        assert ref == "data:image/png;base64,AAAA"
        assert handle.images.kwargs["size"] == "1024x1536"
        assert handle.images.kwargs["model"] == "gpt-image-1"

    def test_avatar_url(self):
        handle = FakeHandle(images=[SimpleNamespace(b64_json=None, url="https://img/x.png")])
        ref = asyncio.run(OpenAIGenerationBackend(handle).generate_avatar("portrait"))
        assert ref == "https://img/x.png"

    def test_avatar_no_data(self):
        assert asyncio.run(OpenAIGenerationBackend(FakeHandle()).generate_avatar("p")) is None

    def test_missing_key_raises_from_backend(self, persona):
        backend = OpenAIGenerationBackend(ClientHandle(api_key="PLACEHOLDER_API_KEY"))
        with pytest.raises(MissingCredentialException):
            asyncio.run(backend.generate_reply([Turn.from_user("hi")], persona))
