"""
Stampman configuration.

Usage in settings.py:
    STAMPMAN = {
        "CARD_STORE": "stampman.adapters.django_store.DjangoCardStore",
        "MAX_TOTAL_SLOTS": 20,
        "WRITE_TIMEOUT_SECONDS": 10.0,
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class StampmanSettings:
    """Stampman configuration settings."""

    # Dotted path to the CardStore implementation
    CARD_STORE: str = "stampman.adapters.django_store.DjangoCardStore"

    # Card template limits
    MAX_TOTAL_SLOTS: int = 20
    DEFAULT_TOTAL_SLOTS: int = 10

    # 3-digit card code generation
    CARD_CODE_ATTEMPTS: int = 1000

    # Time box for commit/claim round trips
    WRITE_TIMEOUT_SECONDS: float = 10.0

    # Re-reads after losing a claim race
    CLAIM_RETRIES: int = 3


def get_stampman_settings() -> StampmanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "STAMPMAN", {})
    return StampmanSettings(**user_settings)


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_stampman_settings(), name)


stampman_settings = _LazySettings()
