"""ASGI entrypoint for the ordering API."""

from cravin_orders.api.app import create_app
from cravin_orders.containers import build_container

app = create_app(build_container())
