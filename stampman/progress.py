"""
CardProgress - a customer's standing on one stamp card.

Value object shared by the batch controller, the commit coordinator,
the redemption gate and every CardStore. Instances are immutable; each
transition returns a new instance with ``version + 1``.
"""

from dataclasses import dataclass, replace
from enum import Enum

from stampman.exceptions import InvariantViolation


class RedemptionState(str, Enum):
    """Lifecycle of a card's reward, derived from its progress."""

    IN_PROGRESS = "in_progress"
    READY_TO_REDEEM = "ready_to_redeem"
    REDEEMED = "redeemed"


@dataclass(frozen=True)
class CardProgress:
    """
    Authoritative stamp count of one card.

    Invariants:
        total_slots > 0
        0 <= current_stamps <= total_slots
        is_reward_claimed implies current_stamps == total_slots
        version >= 0

    Raises:
        InvariantViolation: On construction in an invalid state
    """

    card_id: str
    total_slots: int
    current_stamps: int = 0
    is_reward_claimed: bool = False
    last_commit_id: str | None = None
    version: int = 0

    def __post_init__(self):
        if self.total_slots <= 0:
            raise InvariantViolation(
                "total_slots must be positive",
                card_id=self.card_id,
                total_slots=self.total_slots,
            )
        if not 0 <= self.current_stamps <= self.total_slots:
            raise InvariantViolation(
                "current_stamps out of range",
                card_id=self.card_id,
                current_stamps=self.current_stamps,
                total_slots=self.total_slots,
            )
        if self.is_reward_claimed and self.current_stamps < self.total_slots:
            raise InvariantViolation(
                "reward claimed on an incomplete card",
                card_id=self.card_id,
                current_stamps=self.current_stamps,
                total_slots=self.total_slots,
            )
        if self.version < 0:
            raise InvariantViolation("version must not be negative", card_id=self.card_id)

    @property
    def state(self) -> RedemptionState:
        if self.is_reward_claimed:
            return RedemptionState.REDEEMED
        if self.current_stamps == self.total_slots:
            return RedemptionState.READY_TO_REDEEM
        return RedemptionState.IN_PROGRESS

    @property
    def is_complete(self) -> bool:
        return self.current_stamps == self.total_slots

    @property
    def stamps_remaining(self) -> int:
        """Stamps remaining to complete the card."""
        return self.total_slots - self.current_stamps

    @property
    def progress_percent(self) -> int:
        """Card completion percentage (0-100)."""
        return int(self.current_stamps / self.total_slots * 100)

    def with_stamps(self, new_stamps: int, commit_id: str | None) -> "CardProgress":
        """Next version with ``new_stamps`` recorded under ``commit_id``."""
        if new_stamps < self.current_stamps:
            raise InvariantViolation(
                "stamp count cannot decrease",
                card_id=self.card_id,
                current_stamps=self.current_stamps,
                new_stamps=new_stamps,
            )
        return replace(
            self,
            current_stamps=new_stamps,
            last_commit_id=commit_id,
            version=self.version + 1,
        )

    def claimed(self) -> "CardProgress":
        """Next version with the reward claimed."""
        if self.is_reward_claimed:
            raise InvariantViolation("reward already claimed", card_id=self.card_id)
        return replace(self, is_reward_claimed=True, version=self.version + 1)
