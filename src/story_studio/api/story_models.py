"""Pydantic models for story API payloads."""

from pydantic import BaseModel, ConfigDict, Field, HttpUrl


class CreateStoryRequest(BaseModel):
    """Request to generate a new story."""

    model_config = ConfigDict(populate_by_name=True)

    briefing: str = Field(min_length=10)
    scene_count: int = Field(alias="sceneCount", ge=2, le=10)


class RefineStoryRequest(BaseModel):
    """Request to rewrite an existing story."""

    prompt: str = Field(min_length=5)


class RefineArtStyleRequest(BaseModel):
    """Request to change one art style preview."""

    model_config = ConfigDict(populate_by_name=True)

    original_image_url: HttpUrl = Field(alias="originalImageUrl")
    original_image_prompt: str = Field(alias="originalImagePrompt", min_length=10)
    refinement_prompt: str = Field(alias="refinementPrompt", min_length=5)


class FinalizeStoryRequest(BaseModel):
    """Request to illustrate a story in the style of a reference image."""

    model_config = ConfigDict(populate_by_name=True)

    reference_image_url: HttpUrl = Field(alias="referenceImageUrl")
