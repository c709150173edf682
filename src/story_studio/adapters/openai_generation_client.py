"""OpenAI SDK clients for text and image generation."""

from dataclasses import dataclass

from openai import AsyncOpenAI, DefaultAsyncHttpxClient, OpenAIError

from story_studio.domain.errors import ProviderError
from story_studio.services.generation import ImageClient, TextClient


def create_openai_client(api_key: str) -> AsyncOpenAI:
    """Create an OpenAI client on an httpx session with the SDK's defaults."""
    return AsyncOpenAI(api_key=api_key, http_client=DefaultAsyncHttpxClient())


@dataclass
class OpenAITextClient(TextClient):
    """Text client backed by the OpenAI Chat Completions API."""

    client: AsyncOpenAI

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        system: str,
        prompt: str,
        image_url: str | None = None,
        json_output: bool = False,
        max_tokens: int | None = None,
    ) -> str | None:
        """Call Chat Completions and return the first choice's content."""
        user_content: str | list[dict[str, object]] = prompt
        if image_url:
            user_content = [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": image_url}},
            ]
        request_payload: dict[str, object] = {
            "model": model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user_content},
            ],
        }
        if json_output:
            request_payload["response_format"] = {"type": "json_object"}
        if max_tokens is not None:
            request_payload["max_tokens"] = max_tokens

        try:
            completion = await self.client.chat.completions.create(**request_payload)
        except OpenAIError as exc:
            raise ProviderError(f"Text generation request failed: {exc}") from exc
        if not completion.choices:
            return None
        return completion.choices[0].message.content


@dataclass
class OpenAIImageClient(ImageClient):
    """Image client backed by the OpenAI Images API."""

    client: AsyncOpenAI

    async def generate_image(
        self, *, model: str, prompt: str, size: str, quality: str
    ) -> str | None:
        """Generate one image and return its URL."""
        try:
            response = await self.client.images.generate(
                model=model,
                prompt=prompt,
                n=1,
                size=size,
                quality=quality,
            )
        except OpenAIError as exc:
            raise ProviderError(f"Image generation request failed: {exc}") from exc
        if not response.data:
            return None
        return response.data[0].url
