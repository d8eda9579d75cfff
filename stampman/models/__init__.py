"""Stampman models."""

from stampman.models.program import LoyaltyProgram
from stampman.models.card import CustomerCard
from stampman.models.activity import StampActivity

__all__ = [
    "LoyaltyProgram",
    "CustomerCard",
    # Append-only grant/redeem ledger
    "StampActivity",
]
