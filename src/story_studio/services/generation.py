"""Interfaces to the text and image generation provider."""

import asyncio
import json
from collections.abc import Coroutine, Iterable
from typing import Any, Protocol, TypeVar

T = TypeVar("T")


class TextClient(Protocol):
    """Interface for chat-style text generation."""

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
        """Return the generated message text, if any."""


class ImageClient(Protocol):
    """Interface for single-image generation."""

    async def generate_image(
        self, *, model: str, prompt: str, size: str, quality: str
    ) -> str | None:
        """Return the URL of the generated image, if any."""


def parse_json_object(content: str) -> dict[str, object]:
    """Parse a JSON object from model output, rejecting other JSON values."""
    parsed = json.loads(content)
    if not isinstance(parsed, dict):
        raise ValueError("Expected a JSON object")
    return parsed


async def run_all(calls: Iterable[Coroutine[Any, Any, T]]) -> list[T]:
    """Run calls concurrently and return their results in call order.

    The first failure cancels the calls still running and is raised as is.
    """
    try:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(call) for call in calls]
    except ExceptionGroup as errors:
        first = errors.exceptions[0]
        raise first from first.__cause__
    return [task.result() for task in tasks]
