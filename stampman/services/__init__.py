"""Stampman services (ORM side).

Stamp counters are owned by the core:
- stampman.commit.CommitCoordinator: stamp grants
- stampman.redemption.RedemptionGate: reward claims
"""

from stampman.services import program
from stampman.services import card

__all__ = ["program", "card"]
