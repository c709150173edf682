"""Final illustration stage."""

import logging
from dataclasses import dataclass

from story_studio.config import ModelSettings
from story_studio.domain.errors import (
    ConsistencyPromptError,
    ProviderError,
    SceneImageError,
)
from story_studio.domain.stories import Scene
from story_studio.services.generation import ImageClient, TextClient, run_all

_logger = logging.getLogger(__name__)

CONSISTENCY_PROMPT_MAX_TOKENS = 400

CHARACTER_DESIGNER_SYSTEM_MESSAGE = (
    "You are an expert character designer and image prompt engineer. Analyze the "
    "provided image and create a detailed, reusable prompt that describes the main "
    "character's specific physical appearance (hair style and color, eye color, "
    "facial structure, specific clothing, etc.) and the overall art style (e.g., "
    "'digital painting', 'anime style', 'cyberpunk noir'). This description will be "
    "used to generate new images of the same character in different scenes. Output "
    "ONLY the descriptive prompt text."
)


@dataclass
class FinalStoryService:
    """Illustrates every scene of a story in one consistent style."""

    text_client: TextClient
    image_client: ImageClient
    models: ModelSettings

    async def generate_final_images(
        self, scenes: list[Scene], reference_image_url: str
    ) -> list[Scene]:
        """Return the scenes with their illustration URLs.

        Scene order and ids are preserved. The character text of each scene is
        replaced by its image URL and the background text is cleared, so the
        original descriptions are gone from the returned scenes.
        """
        consistency_prompt = await self.create_consistency_prompt(reference_image_url)
        _logger.info("Generated consistency prompt: %s", consistency_prompt)
        image_urls = await run_all(
            self._illustrate(scene, consistency_prompt) for scene in scenes
        )
        return [
            scene.illustrated(image_url)
            for scene, image_url in zip(scenes, image_urls, strict=True)
        ]

    async def create_consistency_prompt(self, image_url: str) -> str:
        """Describe the reference image's character and art style."""
        try:
            content = await self.text_client.complete(
                model=self.models.text_model,
                system=CHARACTER_DESIGNER_SYSTEM_MESSAGE,
                prompt=(
                    "Please generate the detailed character and style description "
                    "for this image."
                ),
                image_url=image_url,
                max_tokens=CONSISTENCY_PROMPT_MAX_TOKENS,
            )
        except ProviderError as exc:
            _logger.exception("Consistency prompt request failed")
            raise ConsistencyPromptError(
                "Failed to generate a consistency prompt from AI service."
            ) from exc
        prompt = (content or "").strip()
        if not prompt:
            raise ConsistencyPromptError(
                "AI service failed to generate a consistency prompt from the image."
            )
        return prompt

    async def _illustrate(self, scene: Scene, consistency_prompt: str) -> str:
        try:
            image_url = await self.image_client.generate_image(
                model=self.models.image_model,
                prompt=build_scene_prompt(scene, consistency_prompt),
                size=self.models.image_size,
                quality=self.models.image_quality,
            )
        except ProviderError as exc:
            _logger.exception("Illustration failed for scene %s", scene.id)
            raise SceneImageError(
                f"Image service failed to generate image for scene {scene.id}",
                scene_id=scene.id,
            ) from exc
        if not image_url:
            raise SceneImageError(
                f"Image service failed to generate image for scene {scene.id}",
                scene_id=scene.id,
            )
        return image_url


def build_scene_prompt(scene: Scene, consistency_prompt: str) -> str:
    """Combine the consistency prompt with one scene's text."""
    return (
        f'{consistency_prompt}. The scene is: "{scene.narrator}". '
        f"The character is {scene.character} and they are saying "
        f'"{scene.dialogue}".'
    )
