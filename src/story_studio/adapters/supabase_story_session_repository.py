"""Supabase-backed story session repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from story_studio.domain.stories import Scene, StorySession, dump_scenes, load_scenes
from story_studio.services.story_sessions import StorySessionRepository

_TABLE = "story_sessions"
_COLUMNS = (
    "id, uuid, initial_briefing, scene_count, current_story_state, "
    "created_at, updated_at"
)


@dataclass
class SupabaseStorySessionRepository(StorySessionRepository):
    """Supabase implementation for story sessions."""

    client: Client

    def create_session(
        self,
        session_uuid: UUID,
        initial_briefing: str,
        scene_count: int,
        story: list[Scene],
    ) -> StorySession:
        """Insert a session row and return it."""
        now = datetime.now(tz=UTC).isoformat()
        response = (
            self.client.table(_TABLE)
            .insert(
                {
                    "uuid": str(session_uuid),
                    "initial_briefing": initial_briefing,
                    "scene_count": scene_count,
                    "current_story_state": dump_scenes(story),
                    "created_at": now,
                    "updated_at": now,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create story session")
        return _to_session(response.data[0])

    def get_session(self, session_uuid: UUID) -> StorySession | None:
        """Return a session by its public id, if present."""
        response = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("uuid", str(session_uuid))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_session(response.data[0])

    def update_story(self, session_uuid: UUID, story: list[Scene]) -> StorySession:
        """Overwrite the story state and return the updated row."""
        response = (
            self.client.table(_TABLE)
            .update(
                {
                    "current_story_state": dump_scenes(story),
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .eq("uuid", str(session_uuid))
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to update story session {session_uuid}")
        return _to_session(response.data[0])


def _to_session(row: dict[str, object]) -> StorySession:
    return StorySession(
        id=int(row["id"]),
        uuid=UUID(str(row["uuid"])),
        initial_briefing=str(row["initial_briefing"]),
        scene_count=int(row["scene_count"]),
        current_story_state=load_scenes(row.get("current_story_state")),
        created_at=_parse_timestamp(row.get("created_at")),
        updated_at=_parse_timestamp(row.get("updated_at")),
    )


def _parse_timestamp(value: object) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(str(value))
