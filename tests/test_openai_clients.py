"""Tests for OpenAI adapters."""

import asyncio

import pytest
from openai import DefaultAsyncHttpxClient, OpenAIError

from story_studio.adapters.openai_generation_client import (
    OpenAIImageClient,
    OpenAITextClient,
    create_openai_client,
)
from story_studio.domain.errors import ProviderError


class _Namespace:
    def __init__(self, **kwargs) -> None:  # type: ignore[no-untyped-def]
        self.__dict__.update(kwargs)


class _FakeCompletions:
    def __init__(self, content: str | None, error: Exception | None = None) -> None:
        self.content = content
        self.error = error
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        if self.error is not None:
            raise self.error
        message = _Namespace(content=self.content)
        return _Namespace(choices=[_Namespace(message=message)])


class _FakeImages:
    def __init__(self, url: str | None, error: Exception | None = None) -> None:
        self.url = url
        self.error = error
        self.last_payload: dict[str, object] | None = None

    async def generate(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        if self.error is not None:
            raise self.error
        data = [_Namespace(url=self.url)] if self.url else []
        return _Namespace(data=data)


class _FakeOpenAI:
    def __init__(
        self,
        content: str | None = None,
        url: str | None = None,
        error: Exception | None = None,
    ) -> None:
        self.chat = _Namespace(completions=_FakeCompletions(content, error))
        self.images = _FakeImages(url, error)


def test_text_client_requests_json_mode() -> None:
    fake = _FakeOpenAI(content='{"story": []}')
    client = OpenAITextClient(client=fake)

    result = asyncio.run(
        client.complete(
            model="gpt-4o", system="rules", prompt="write", json_output=True
        )
    )

    payload = fake.chat.completions.last_payload
    assert result == '{"story": []}'
    assert payload["response_format"] == {"type": "json_object"}
    assert payload["messages"][0] == {"role": "system", "content": "rules"}
    assert payload["messages"][1] == {"role": "user", "content": "write"}
    assert "max_tokens" not in payload


def test_text_client_sends_image_as_multimodal_content() -> None:
    fake = _FakeOpenAI(content="new prompt")
    client = OpenAITextClient(client=fake)

    asyncio.run(
        client.complete(
            model="gpt-4o",
            system="rules",
            prompt="describe",
            image_url="https://images.example.com/a.png",
            max_tokens=400,
        )
    )

    payload = fake.chat.completions.last_payload
    content = payload["messages"][1]["content"]
    assert content[0] == {"type": "text", "text": "describe"}
    assert content[1]["image_url"] == {"url": "https://images.example.com/a.png"}
    assert payload["max_tokens"] == 400
    assert "response_format" not in payload


def test_text_client_wraps_sdk_errors() -> None:
    client = OpenAITextClient(client=_FakeOpenAI(error=OpenAIError("bad key")))

    with pytest.raises(ProviderError):
        asyncio.run(client.complete(model="gpt-4o", system="s", prompt="p"))


def test_image_client_returns_first_url() -> None:
    fake = _FakeOpenAI(url="https://images.example.com/out.png")
    client = OpenAIImageClient(client=fake)

    url = asyncio.run(
        client.generate_image(
            model="dall-e-3", prompt="robot", size="1024x1024", quality="standard"
        )
    )

    assert url == "https://images.example.com/out.png"
    assert fake.images.last_payload["n"] == 1
    assert fake.images.last_payload["quality"] == "standard"


def test_image_client_returns_none_without_data() -> None:
    client = OpenAIImageClient(client=_FakeOpenAI(url=None))

    url = asyncio.run(
        client.generate_image(
            model="dall-e-3", prompt="robot", size="1024x1024", quality="standard"
        )
    )

    assert url is None


def test_image_client_wraps_sdk_errors() -> None:
    client = OpenAIImageClient(client=_FakeOpenAI(error=OpenAIError("bad key")))

    with pytest.raises(ProviderError) as excinfo:
        asyncio.run(
            client.generate_image(
                model="dall-e-3", prompt="robot", size="1024x1024", quality="standard"
            )
        )

    assert isinstance(excinfo.value.__cause__, OpenAIError)


def test_create_openai_client_uses_sdk_http_defaults() -> None:
    client = create_openai_client("openai-key")

    assert isinstance(client._client, DefaultAsyncHttpxClient)
    asyncio.run(client.close())
    assert client.is_closed()
