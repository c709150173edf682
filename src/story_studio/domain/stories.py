"""Domain models for stories, scenes and art styles."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

_URL_PREFIXES = ("http://", "https://")


class Scene(BaseModel):
    """Single narrative unit of a story.

    ``character_image_prompt`` holds a text description of the character until
    the story is illustrated, and the generated image URL afterwards. Use
    ``character_description`` and ``image_url`` to read the two meanings apart.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    narrator: str
    character: str
    character_image_prompt: str = Field(alias="characterImagePrompt")
    dialogue: str
    background_prompt: str = Field(alias="backgroundPrompt")

    @property
    def image_url(self) -> str | None:
        """Return the illustration URL once the scene has been illustrated."""
        if self.character_image_prompt.startswith(_URL_PREFIXES):
            return self.character_image_prompt
        return None

    @property
    def character_description(self) -> str | None:
        """Return the character appearance text before illustration."""
        if self.image_url is None:
            return self.character_image_prompt
        return None

    def illustrated(self, image_url: str) -> "Scene":
        """Return a copy pointing at its illustration, without background text."""
        return self.model_copy(
            update={"character_image_prompt": image_url, "background_prompt": ""}
        )


SCENE_LIST = TypeAdapter(list[Scene])


def dump_scenes(scenes: list[Scene]) -> list[dict[str, object]]:
    """Serialize scenes to their JSON (camelCase) representation."""
    return [scene.model_dump(by_alias=True) for scene in scenes]


def load_scenes(raw: object) -> list[Scene] | None:
    """Validate a stored JSON scene list, keeping null as null."""
    if raw is None:
        return None
    return SCENE_LIST.validate_python(raw)


class SceneCountPolicy(Enum):
    """How a stage treats a scene count that differs from the expected one."""

    STRICT = "strict"
    TOLERANT = "tolerant"


class ArtStylePrompt(BaseModel):
    """Style proposal returned by the text model."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str
    image_prompt: str = Field(alias="imagePrompt")


class ArtStyleSuggestion(ArtStylePrompt):
    """Style proposal with its rendered preview image."""

    image_url: str = Field(alias="imageUrl")


@dataclass(frozen=True)
class StorySession:
    """Represents a persisted story-creation session."""

    id: int
    uuid: UUID
    initial_briefing: str
    scene_count: int
    current_story_state: list[Scene] | None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def scenes(self) -> list[Scene]:
        """Return the current scenes, treating a missing story as empty."""
        return list(self.current_story_state or [])
