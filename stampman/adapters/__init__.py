"""Stampman adapters - CardStore implementations."""

from django.utils.module_loading import import_string

from stampman.conf import stampman_settings
from stampman.protocols.store import CardStore


def get_card_store() -> CardStore:
    """Instantiate the configured CardStore."""
    backend_class = import_string(stampman_settings.CARD_STORE)
    return backend_class()
