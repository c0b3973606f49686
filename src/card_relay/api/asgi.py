"""ASGI entrypoint for the card relay API."""

from card_relay.api.app import create_app
from card_relay.containers import build_container

app = create_app(build_container())
