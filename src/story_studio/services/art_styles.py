"""Art style suggestion and refinement stages."""

import logging
from dataclasses import dataclass

from story_studio.config import ModelSettings
from story_studio.domain.errors import (
    ImageGenerationError,
    PromptRefinementError,
    ProviderError,
    StyleGenerationError,
)
from story_studio.domain.stories import ArtStylePrompt, ArtStyleSuggestion, Scene
from story_studio.services.generation import (
    ImageClient,
    TextClient,
    parse_json_object,
    run_all,
)

_logger = logging.getLogger(__name__)

STYLE_COUNT = 3
REFINED_PROMPT_MAX_TOKENS = 500

ART_DIRECTOR_SYSTEM_MESSAGE = """You are a professional Art Director for a video game studio, specializing in visual storytelling. Your task is to propose three distinct and compelling art styles for a new story.

RULES:
1. You will be given a description of the first scene.
2. Your response MUST be a single, valid JSON object.
3. The JSON object must have a single root key named "artStyles".
4. The value of "artStyles" must be a JSON array containing EXACTLY THREE style suggestion objects.
5. Each style suggestion object must have these keys: "name" (a catchy name for the style), "description" (a brief explanation of the style's look and feel), and "imagePrompt" (a detailed, reusable prompt suffix for an AI image generator that encapsulates the style).
"""  # noqa: E501

PROMPT_ENGINEER_SYSTEM_MESSAGE = (
    "You are an expert image prompt engineer. You will be shown an image, the "
    "prompt that created it, and a user's request for a change. Create a new, "
    "single, cohesive image prompt that keeps the original image's style and "
    "composition but incorporates the user's change. Output ONLY the new prompt "
    "text, nothing else."
)


@dataclass
class ArtStyleService:
    """Proposes art styles with previews and refines individual previews."""

    text_client: TextClient
    image_client: ImageClient
    models: ModelSettings

    async def suggest_styles(self, first_scene: Scene) -> list[ArtStyleSuggestion]:
        """Return three style proposals, each with a rendered preview image."""
        styles = await self._generate_style_prompts(first_scene)
        image_urls = await run_all(
            self._render_preview(first_scene, style) for style in styles
        )
        return [
            ArtStyleSuggestion(
                name=style.name,
                description=style.description,
                image_prompt=style.image_prompt,
                image_url=image_url,
            )
            for style, image_url in zip(styles, image_urls, strict=True)
        ]

    async def refine_style(
        self,
        original_image_url: str,
        original_image_prompt: str,
        refinement_prompt: str,
    ) -> str:
        """Rewrite an image prompt from a change request and render it."""
        new_prompt = await self._refine_image_prompt(
            original_image_url, original_image_prompt, refinement_prompt
        )
        _logger.debug("Refined image prompt: %s", new_prompt)
        try:
            new_image_url = await self.image_client.generate_image(
                model=self.models.image_model,
                prompt=new_prompt,
                size=self.models.image_size,
                quality=self.models.image_quality,
            )
        except ProviderError as exc:
            _logger.exception("Refined image generation failed")
            raise ImageGenerationError(
                "Image service failed to generate the refined image."
            ) from exc
        if not new_image_url:
            raise ImageGenerationError(
                "Image service failed to generate the refined image."
            )
        return new_image_url

    async def _generate_style_prompts(self, first_scene: Scene) -> list[ArtStylePrompt]:
        try:
            content = await self.text_client.complete(
                model=self.models.text_model,
                system=ART_DIRECTOR_SYSTEM_MESSAGE,
                prompt=build_style_prompt(first_scene),
                json_output=True,
            )
        except ProviderError as exc:
            _logger.exception("Art style request failed")
            raise StyleGenerationError(
                "Failed to generate art styles from AI service."
            ) from exc
        if not content:
            raise StyleGenerationError(
                "AI service returned an empty response for art styles."
            )
        try:
            styles = parse_json_object(content).get("artStyles")
            if not isinstance(styles, list):
                raise ValueError('Response has no "artStyles" array')
            parsed = [ArtStylePrompt.model_validate(style) for style in styles]
        except ValueError as exc:
            _logger.warning("Art style response was invalid: %s", exc)
            raise StyleGenerationError(
                "AI did not return valid art style suggestions."
            ) from exc
        if len(parsed) != STYLE_COUNT:
            raise StyleGenerationError(
                "AI did not return exactly three art style suggestions."
            )
        return parsed

    async def _render_preview(self, scene: Scene, style: ArtStylePrompt) -> str:
        prompt = style.image_prompt
        if scene.character_description:
            prompt = f"{scene.character_description}, {style.image_prompt}"
        try:
            image_url = await self.image_client.generate_image(
                model=self.models.image_model,
                prompt=prompt,
                size=self.models.image_size,
                quality=self.models.image_quality,
            )
        except ProviderError as exc:
            _logger.exception("Preview generation failed for style %s", style.name)
            raise ImageGenerationError(
                f"Image service failed to generate a preview for style: {style.name}",
                style=style.name,
            ) from exc
        if not image_url:
            raise ImageGenerationError(
                f"Image service did not return an image URL for style: {style.name}",
                style=style.name,
            )
        return image_url

    async def _refine_image_prompt(
        self, image_url: str, original_prompt: str, refinement_request: str
    ) -> str:
        prompt = (
            f'This is the original prompt: "{original_prompt}". '
            f'This is my change request: "{refinement_request}". '
            "Please give me the new, complete image prompt."
        )
        try:
            content = await self.text_client.complete(
                model=self.models.text_model,
                system=PROMPT_ENGINEER_SYSTEM_MESSAGE,
                prompt=prompt,
                image_url=image_url,
                max_tokens=REFINED_PROMPT_MAX_TOKENS,
            )
        except ProviderError as exc:
            _logger.exception("Prompt refinement request failed")
            raise PromptRefinementError(
                "Failed to generate a refined prompt from AI service."
            ) from exc
        new_prompt = (content or "").strip()
        if not new_prompt:
            raise PromptRefinementError(
                "AI service failed to generate a refined prompt."
            )
        return new_prompt


def build_style_prompt(first_scene: Scene) -> str:
    """Describe the reference scene for the art director.

    Character details are left out once the scene holds an illustration URL.
    """
    lines = [
        f"- Setting: {first_scene.narrator}",
        f"- Character in Scene: {first_scene.character}",
    ]
    if first_scene.character_description:
        lines.append(f"- Character Details: {first_scene.character_description}")
    if first_scene.background_prompt:
        lines.append(f"- Background Details: {first_scene.background_prompt}")
    return (
        "Based on the following scene context, please generate three distinct "
        "art style proposals.\n\n"
        "[SCENE CONTEXT]:\n" + "\n".join(lines) + "\n"
    )
