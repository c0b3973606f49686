"""Logging configuration helpers."""

import logging

DEAD_LETTER_LOGGER = "card_relay.dead_letter"


def configure_logging() -> None:
    """Configure application logging with a single stream handler."""
    logger = logging.getLogger("card_relay")
    logger.setLevel(logging.INFO)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s: %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
