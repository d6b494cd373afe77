"""ASGI entrypoint for the FitPro API."""

from fitpro.api.app import create_app
from fitpro.containers import build_container

app = create_app(build_container())
