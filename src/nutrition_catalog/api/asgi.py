"""ASGI entrypoint for the nutrition catalog API."""

from nutrition_catalog.api.app import create_app
from nutrition_catalog.containers import build_container

app = create_app(build_container())
