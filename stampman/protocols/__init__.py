"""Stampman protocols."""

from stampman.protocols.store import CardStore

__all__ = [
    "CardStore",
]
