"""ASGI entrypoint for the photobooth reels API."""

from photobooth_reels.api.app import create_app
from photobooth_reels.containers import build_container

app = create_app(build_container())
