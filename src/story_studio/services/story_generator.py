"""Story generation and refinement stages."""

import json
import logging
from dataclasses import dataclass

from story_studio.config import ModelSettings
from story_studio.domain.errors import GenerationError, ProviderError, RefinementError
from story_studio.domain.stories import (
    SCENE_LIST,
    Scene,
    SceneCountPolicy,
    dump_scenes,
)
from story_studio.services.generation import TextClient, parse_json_object

_logger = logging.getLogger(__name__)

_SCENE_KEYS = (
    '"id", "narrator", "character", "characterImagePrompt", "dialogue", '
    '"backgroundPrompt"'
)

GENERATION_SYSTEM_MESSAGE = f"""You are an expert creative writer and a strict data architect for a web-based story game. Your task is to generate a linear story.

RULES:
1. Your ENTIRE response MUST be a single, valid JSON object.
2. The JSON object must have a single root key named "story".
3. The value of "story" must be a JSON array of scene objects.
4. Do NOT include any text, explanations, or markdown before or after the JSON object.
5. Each scene object in the array must contain these exact keys: {_SCENE_KEYS}.
6. "id" is the integer position of the scene, starting at 1.
"""  # noqa: E501

REFINEMENT_SYSTEM_MESSAGE = f"""You are a helpful story editor. Your task is to revise and rewrite a story based on user feedback.

RULES:
1. You will be given the [CURRENT_STORY] as a JSON array and a [REFINEMENT_PROMPT] with instructions.
2. Rewrite the story according to the instructions.
3. You MUST return the ENTIRE, new version of the story.
4. Your response MUST be a single, valid JSON object with a single root key named "story".
5. The value of "story" must be a JSON array of scene objects.
6. Maintain the original number of scenes unless specifically asked to change it.
7. Every scene object in the new array must have these keys: {_SCENE_KEYS}.
"""  # noqa: E501


class _StoryShapeError(ValueError):
    """Raised when a model response does not hold a story array."""


@dataclass
class StoryGeneratorService:
    """Generates stories from briefings and rewrites them on request."""

    client: TextClient
    models: ModelSettings

    async def generate_linear_story(
        self, briefing: str, scene_count: int
    ) -> list[Scene]:
        """Generate a story with exactly ``scene_count`` scenes."""
        prompt = build_generation_prompt(briefing, scene_count)
        try:
            content = await self.client.complete(
                model=self.models.text_model,
                system=GENERATION_SYSTEM_MESSAGE,
                prompt=prompt,
                json_output=True,
            )
        except ProviderError as exc:
            _logger.exception("Story generation request failed")
            raise GenerationError("Failed to generate story from AI service.") from exc
        if not content:
            raise GenerationError("AI service returned an empty story.")
        try:
            scenes = _parse_story(content)
        except ValueError as exc:
            _logger.warning("Story generation returned an invalid story: %s", exc)
            raise GenerationError(
                "AI did not return the expected story structure."
            ) from exc
        _check_scene_count(
            scenes, scene_count, SceneCountPolicy.STRICT, error=GenerationError
        )
        return scenes

    async def refine_story(
        self, existing_story: list[Scene], refinement_prompt: str
    ) -> list[Scene]:
        """Rewrite a story, accepting a different scene count with a warning."""
        prompt = build_refinement_prompt(existing_story, refinement_prompt)
        try:
            content = await self.client.complete(
                model=self.models.text_model,
                system=REFINEMENT_SYSTEM_MESSAGE,
                prompt=prompt,
                json_output=True,
            )
        except ProviderError as exc:
            _logger.exception("Story refinement request failed")
            raise RefinementError("Failed to refine story from AI service.") from exc
        if not content:
            raise RefinementError(
                "AI service returned an empty story during refinement."
            )
        try:
            scenes = _parse_story(content)
        except ValueError as exc:
            _logger.warning("Story refinement returned an invalid story: %s", exc)
            raise RefinementError(
                "AI did not return the expected story structure."
            ) from exc
        _check_scene_count(
            scenes,
            len(existing_story),
            SceneCountPolicy.TOLERANT,
            error=RefinementError,
        )
        return scenes


def build_generation_prompt(briefing: str, scene_count: int) -> str:
    """Build the user prompt for a new story."""
    return (
        "Generate a story based on the following details. "
        f"The story array must contain exactly {scene_count} scenes.\n\n"
        f'STORY BRIEFING: "{briefing}"'
    )


def build_refinement_prompt(existing_story: list[Scene], refinement_prompt: str) -> str:
    """Build the user prompt embedding the current story and the requested change."""
    story_json = json.dumps(dump_scenes(existing_story), indent=2)
    return (
        f"[CURRENT_STORY]:\n{story_json}\n\n"
        f'[REFINEMENT_PROMPT]:\n"{refinement_prompt}"\n\n'
        "Please revise the story according to the refinement prompt "
        "and return the complete, updated story."
    )


def _parse_story(content: str) -> list[Scene]:
    payload = parse_json_object(content)
    story = payload.get("story")
    if not isinstance(story, list) or not story:
        raise _StoryShapeError('Response has no non-empty "story" array')
    return SCENE_LIST.validate_python(story)


def _check_scene_count(
    scenes: list[Scene],
    expected: int,
    policy: SceneCountPolicy,
    *,
    error: type[GenerationError] | type[RefinementError],
) -> None:
    """Apply a stage's scene count policy."""
    if len(scenes) == expected:
        return
    if policy is SceneCountPolicy.STRICT:
        raise error(
            f"AI returned {len(scenes)} scenes but {expected} were requested."
        )
    _logger.warning(
        "AI returned a story with a different number of scenes: expected=%s got=%s",
        expected,
        len(scenes),
    )
