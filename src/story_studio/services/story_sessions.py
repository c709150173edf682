"""Story session orchestration across the generation stages."""

import asyncio
import logging
import weakref
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID, uuid4

from story_studio.domain.errors import EmptyStoryError, NotFoundError
from story_studio.domain.stories import ArtStyleSuggestion, Scene, StorySession
from story_studio.services.art_styles import ArtStyleService
from story_studio.services.final_story import FinalStoryService
from story_studio.services.story_generator import StoryGeneratorService

_logger = logging.getLogger(__name__)


class StorySessionRepository(Protocol):
    """Persistence interface for story sessions."""

    def create_session(
        self,
        session_uuid: UUID,
        initial_briefing: str,
        scene_count: int,
        story: list[Scene],
    ) -> StorySession:
        """Create a session row and return it."""

    def get_session(self, session_uuid: UUID) -> StorySession | None:
        """Return a session by its public id, if present."""

    def update_story(self, session_uuid: UUID, story: list[Scene]) -> StorySession:
        """Replace the session's story and return the updated session."""


@dataclass
class SessionLocks:
    """Per-session locks so one session is never read and written concurrently.

    Locks live in this process only; separate worker processes do not share them.
    A lock is dropped once no request holds or awaits it.
    """

    _locks: weakref.WeakValueDictionary[UUID, asyncio.Lock] = field(
        default_factory=weakref.WeakValueDictionary
    )

    def for_session(self, session_uuid: UUID) -> asyncio.Lock:
        """Return the lock guarding a session, creating it on first use."""
        lock = self._locks.get(session_uuid)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_uuid] = lock
        return lock


@dataclass
class StorySessionService:
    """Runs one stage per request and persists the resulting story."""

    repository: StorySessionRepository
    story_service: StoryGeneratorService
    art_style_service: ArtStyleService
    final_story_service: FinalStoryService
    locks: SessionLocks = field(default_factory=SessionLocks)

    async def create_story(self, briefing: str, scene_count: int) -> StorySession:
        """Generate a new story and persist it in a fresh session."""
        story = await self.story_service.generate_linear_story(briefing, scene_count)
        session = self.repository.create_session(
            session_uuid=uuid4(),
            initial_briefing=briefing,
            scene_count=scene_count,
            story=story,
        )
        _logger.info(
            "Created story session %s with %s scenes", session.uuid, len(story)
        )
        return session

    def get_story(self, session_uuid: UUID) -> StorySession:
        """Return a session or raise ``NotFoundError``."""
        session = self.repository.get_session(session_uuid)
        if session is None:
            raise NotFoundError(session_uuid)
        return session

    async def refine_story(self, session_uuid: UUID, prompt: str) -> StorySession:
        """Rewrite a session's story from a refinement instruction."""
        async with self.locks.for_session(session_uuid):
            session = self.get_story(session_uuid)
            if not session.scenes:
                raise EmptyStoryError
            story = await self.story_service.refine_story(session.scenes, prompt)
            updated = self.repository.update_story(session_uuid, story)
        _logger.info("Refined story session %s", session_uuid)
        return updated

    async def suggest_art_styles(self, session_uuid: UUID) -> list[ArtStyleSuggestion]:
        """Propose art styles based on the first scene of a session's story."""
        session = self.get_story(session_uuid)
        scenes = session.scenes
        if not scenes:
            raise EmptyStoryError
        return await self.art_style_service.suggest_styles(scenes[0])

    async def refine_art_style(
        self,
        original_image_url: str,
        original_image_prompt: str,
        refinement_prompt: str,
    ) -> str:
        """Render a changed version of one art style preview."""
        return await self.art_style_service.refine_style(
            original_image_url, original_image_prompt, refinement_prompt
        )

    async def finalize_story(
        self, session_uuid: UUID, reference_image_url: str
    ) -> StorySession:
        """Illustrate every scene in the reference style and persist the result."""
        async with self.locks.for_session(session_uuid):
            session = self.get_story(session_uuid)
            scenes = session.scenes
            if not scenes:
                raise EmptyStoryError
            story = await self.final_story_service.generate_final_images(
                scenes, reference_image_url
            )
            updated = self.repository.update_story(session_uuid, story)
        _logger.info("Finalized story session %s", session_uuid)
        return updated
