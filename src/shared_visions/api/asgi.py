"""ASGI entrypoint for the SharedVisions API."""

from shared_visions.api.app import create_app
from shared_visions.containers import build_container

app = create_app(build_container())
