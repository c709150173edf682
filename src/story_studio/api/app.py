"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse

from story_studio.api.story_models import (
    CreateStoryRequest,
    FinalizeStoryRequest,
    RefineArtStyleRequest,
    RefineStoryRequest,
)
from story_studio.app_logging import configure_logging
from story_studio.containers import AppContainer
from story_studio.domain.errors import EmptyStoryError, NotFoundError, StageError
from story_studio.domain.stories import StorySession, dump_scenes


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if not request.url.path.startswith("/static"):
            logger.info(
                "%s %s %s", request.method, request.url.path, request.url.query
            )
        return await call_next(request)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"message": str(exc)}
        )

    @app.exception_handler(EmptyStoryError)
    async def empty_story_handler(
        _request: Request, exc: EmptyStoryError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"message": str(exc)}
        )

    @app.exception_handler(StageError)
    async def stage_error_handler(_request: Request, exc: StageError) -> JSONResponse:
        logger.error("Stage %s failed: %s", exc.stage, exc.message)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=exc.to_payload(),
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/stories", status_code=status.HTTP_201_CREATED)
    async def create_story(
        payload: CreateStoryRequest, request: Request
    ) -> dict[str, object]:
        """Generate a story and open a session for it."""
        state_container: AppContainer = request.app.state.container
        session = await state_container.story_session_service.create_story(
            payload.briefing, payload.scene_count
        )
        return _story_response(session)

    @app.get("/stories/{session_id}")
    async def show_story(session_id: UUID, request: Request) -> dict[str, object]:
        """Return the full session record."""
        state_container: AppContainer = request.app.state.container
        session = state_container.story_session_service.get_story(session_id)
        return _serialize_session(session)

    @app.put("/stories/{session_id}")
    async def refine_story(
        session_id: UUID, payload: RefineStoryRequest, request: Request
    ) -> dict[str, object]:
        """Rewrite a session's story from a refinement prompt."""
        state_container: AppContainer = request.app.state.container
        session = await state_container.story_session_service.refine_story(
            session_id, payload.prompt
        )
        return _story_response(session)

    @app.get("/art-styles/{session_id}")
    async def suggest_art_styles(
        session_id: UUID, request: Request
    ) -> list[dict[str, object]]:
        """Propose three art styles with preview images."""
        state_container: AppContainer = request.app.state.container
        suggestions = await state_container.story_session_service.suggest_art_styles(
            session_id
        )
        return [suggestion.model_dump(by_alias=True) for suggestion in suggestions]

    @app.post("/art-styles/refine", status_code=status.HTTP_201_CREATED)
    async def refine_art_style(
        payload: RefineArtStyleRequest, request: Request
    ) -> dict[str, str]:
        """Render a changed version of an art style preview."""
        state_container: AppContainer = request.app.state.container
        new_image_url = await state_container.story_session_service.refine_art_style(
            str(payload.original_image_url),
            payload.original_image_prompt,
            payload.refinement_prompt,
        )
        return {"newImageUrl": new_image_url}

    @app.post("/final-story/{session_id}")
    async def finalize_story(
        session_id: UUID, payload: FinalizeStoryRequest, request: Request
    ) -> dict[str, object]:
        """Illustrate every scene and return the full session record."""
        state_container: AppContainer = request.app.state.container
        session = await state_container.story_session_service.finalize_story(
            session_id, str(payload.reference_image_url)
        )
        return _serialize_session(session)

    return app


def _story_response(session: StorySession) -> dict[str, object]:
    return {
        "sessionId": str(session.uuid),
        "story": dump_scenes(session.scenes),
    }


def _serialize_session(session: StorySession) -> dict[str, object]:
    return {
        "sessionId": str(session.uuid),
        "initialBriefing": session.initial_briefing,
        "sceneCount": session.scene_count,
        "currentStoryState": (
            dump_scenes(session.current_story_state)
            if session.current_story_state is not None
            else None
        ),
        "createdAt": session.created_at.isoformat() if session.created_at else None,
        "updatedAt": session.updated_at.isoformat() if session.updated_at else None,
    }
