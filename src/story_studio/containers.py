"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from story_studio.adapters.openai_generation_client import (
    OpenAIImageClient,
    OpenAITextClient,
    create_openai_client,
)
from story_studio.adapters.supabase_story_session_repository import (
    SupabaseStorySessionRepository,
)
from story_studio.config import ModelSettings, Settings
from story_studio.services.art_styles import ArtStyleService
from story_studio.services.final_story import FinalStoryService
from story_studio.services.story_generator import StoryGeneratorService
from story_studio.services.story_sessions import StorySessionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    story_session_service: StorySessionService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    session_repository = SupabaseStorySessionRepository(supabase_client)
    models = ModelSettings.from_settings(resolved_settings)
    openai_client = create_openai_client(resolved_settings.openai_api_key)
    text_client = OpenAITextClient(openai_client)
    image_client = OpenAIImageClient(openai_client)
    story_session_service = StorySessionService(
        repository=session_repository,
        story_service=StoryGeneratorService(client=text_client, models=models),
        art_style_service=ArtStyleService(
            text_client=text_client, image_client=image_client, models=models
        ),
        final_story_service=FinalStoryService(
            text_client=text_client, image_client=image_client, models=models
        ),
    )

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        story_session_service=story_session_service,
        close_resources=close_resources,
    )
