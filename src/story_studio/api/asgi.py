"""ASGI entrypoint for the story studio API."""

from story_studio.api.app import create_app
from story_studio.containers import build_container

app = create_app(build_container())
