"""ASGI entrypoint for the photo browser API."""

from photo_browser.api.app import create_app
from photo_browser.containers import build_container

app = create_app(build_container())
