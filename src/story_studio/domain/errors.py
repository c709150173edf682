"""Domain errors raised by the story pipeline."""

from uuid import UUID


class StoryStudioError(Exception):
    """Base class for application errors."""


class NotFoundError(StoryStudioError):
    """Raised when a story session does not exist."""

    def __init__(self, session_id: UUID) -> None:
        super().__init__(f"Story session {session_id} not found")
        self.session_id = session_id


class EmptyStoryError(StoryStudioError):
    """Raised when an operation needs scenes but the story has none."""

    def __init__(self) -> None:
        super().__init__("Story has no scenes to analyze.")


class StageError(StoryStudioError):
    """Raised when a generation stage cannot produce a valid result."""

    stage = "stage"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, object]:
        """Return the client-facing error body."""
        return {"message": self.message, "stage": self.stage}


class GenerationError(StageError):
    stage = "story_generation"


class RefinementError(StageError):
    stage = "story_refinement"


class StyleGenerationError(StageError):
    stage = "art_style_suggestion"


class PromptRefinementError(StageError):
    stage = "art_style_refinement"


class ConsistencyPromptError(StageError):
    stage = "final_illustration"


class ImageGenerationError(StageError):
    """Raised when an art style preview image could not be produced."""

    stage = "image_generation"

    def __init__(self, message: str, style: str | None = None) -> None:
        super().__init__(message)
        self.style = style

    def to_payload(self) -> dict[str, object]:
        payload = super().to_payload()
        if self.style is not None:
            payload["style"] = self.style
        return payload


class SceneImageError(StageError):
    """Raised when a scene illustration could not be produced."""

    stage = "final_illustration"

    def __init__(self, message: str, scene_id: int) -> None:
        super().__init__(message)
        self.scene_id = scene_id

    def to_payload(self) -> dict[str, object]:
        payload = super().to_payload()
        payload["sceneId"] = self.scene_id
        return payload


class ProviderError(StoryStudioError):
    """Raised when the generative AI provider rejects or fails a request."""
