"""
Stampman Gates - Validation rules.

G1: SlotCapacity - A commit cannot push stamps past total_slots
G2: CommitFreshness - A batch commit must target the version it was built on
G3: CommitReplay - A commit_id is applied at most once per card
G4: RedemptionReadiness - Claim only a complete, unclaimed, unchanged card
G5: ProgramSlots - Card templates have 1..MAX_TOTAL_SLOTS slots
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from stampman.exceptions import ClaimError, CommitError, StampmanError
from stampman.progress import CardProgress

if TYPE_CHECKING:
    from stampman.protocols.store import CardStore
    from stampman.redemption import RedemptionAttempt


@dataclass
class GateResult:
    """Result of a gate check."""

    passed: bool
    gate_name: str
    message: str = ""


# =============================================================================
# Gates
# =============================================================================


class Gates:
    """Stampman validation gates."""

    # =========================================================================
    # G1: Slot Capacity
    # =========================================================================

    @classmethod
    def slot_capacity(cls, progress: CardProgress, delta: int) -> GateResult:
        """
        G1: current_stamps + delta cannot exceed total_slots.

        Args:
            progress: Freshly read card progress
            delta: Stamps to add

        Raises:
            CommitError: INVALID_DELTA if delta <= 0, OVER_CAPACITY if too many
        """
        if delta <= 0:
            raise CommitError(CommitError.INVALID_DELTA, delta=delta)

        if progress.current_stamps + delta > progress.total_slots:
            raise CommitError(
                CommitError.OVER_CAPACITY,
                card_id=progress.card_id,
                current_stamps=progress.current_stamps,
                total_slots=progress.total_slots,
                delta=delta,
            )

        return GateResult(True, "G1_SlotCapacity")

    @classmethod
    def check_slot_capacity(cls, *args, **kwargs) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.slot_capacity(*args, **kwargs)
            return True
        except CommitError:
            return False

    # =========================================================================
    # G2: Commit Freshness
    # =========================================================================

    @classmethod
    def commit_freshness(cls, progress: CardProgress, expected_version: int | None) -> GateResult:
        """
        G2: A delta computed against version N only applies to version N.

        Direct grants (expected_version None) always pass.

        Raises:
            CommitError: CONCURRENT_MODIFICATION if the card moved on
        """
        if expected_version is not None and expected_version != progress.version:
            raise CommitError(
                CommitError.CONCURRENT_MODIFICATION,
                card_id=progress.card_id,
                expected_version=expected_version,
                actual_version=progress.version,
            )

        return GateResult(True, "G2_CommitFreshness")

    @classmethod
    def check_commit_freshness(cls, *args, **kwargs) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.commit_freshness(*args, **kwargs)
            return True
        except CommitError:
            return False

    # =========================================================================
    # G3: Commit Replay
    # =========================================================================

    @classmethod
    def commit_replay(
        cls,
        progress: CardProgress,
        commit_id: str,
        store: CardStore | None = None,
    ) -> GateResult:
        """
        G3: Detect a commit that was already applied.

        A replay is not an error: the caller returns the stored state.
        The last commit is checked on the progress itself; older ones
        through the store's ledger when a store is given.

        Returns:
            GateResult(passed=False) for a replay, passed=True otherwise
        """
        if progress.last_commit_id == commit_id:
            return GateResult(False, "G3_CommitReplay", "Last applied commit")

        if store is not None and store.has_commit(progress.card_id, commit_id):
            return GateResult(False, "G3_CommitReplay", "Commit found in ledger")

        return GateResult(True, "G3_CommitReplay")

    @classmethod
    def is_replay(cls, *args, **kwargs) -> bool:
        return not cls.commit_replay(*args, **kwargs).passed

    # =========================================================================
    # G4: Redemption Readiness
    # =========================================================================

    @classmethod
    def redemption_readiness(
        cls,
        progress: CardProgress,
        attempt: RedemptionAttempt,
    ) -> GateResult:
        """
        G4: Only a complete, unclaimed card shown at its current count
        can be redeemed.

        Checked in order: already redeemed, not ready, stale attempt.

        Raises:
            ClaimError: ALREADY_REDEEMED, NOT_READY or STALE_ATTEMPT
        """
        if progress.is_reward_claimed:
            raise ClaimError(ClaimError.ALREADY_REDEEMED, card_id=progress.card_id)

        if progress.current_stamps < progress.total_slots:
            raise ClaimError(
                ClaimError.NOT_READY,
                card_id=progress.card_id,
                current_stamps=progress.current_stamps,
                total_slots=progress.total_slots,
            )

        if attempt.expected_stamps_at_claim != progress.current_stamps:
            raise ClaimError(
                ClaimError.STALE_ATTEMPT,
                card_id=progress.card_id,
                expected_stamps=attempt.expected_stamps_at_claim,
                current_stamps=progress.current_stamps,
            )

        return GateResult(True, "G4_RedemptionReadiness")

    @classmethod
    def check_redemption_readiness(cls, *args, **kwargs) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.redemption_readiness(*args, **kwargs)
            return True
        except ClaimError:
            return False

    # =========================================================================
    # G5: Program Slots
    # =========================================================================

    @classmethod
    def program_slots(cls, total_slots: int) -> GateResult:
        """
        G5: A card template has between 1 and MAX_TOTAL_SLOTS slots.

        Raises:
            StampmanError: INVALID_TOTAL_SLOTS
        """
        from stampman.conf import stampman_settings

        maximum = stampman_settings.MAX_TOTAL_SLOTS
        if not 1 <= total_slots <= maximum:
            raise StampmanError(
                "INVALID_TOTAL_SLOTS",
                message=f"Slots must be between 1 and {maximum}",
                total_slots=total_slots,
            )

        return GateResult(True, "G5_ProgramSlots")

    @classmethod
    def check_program_slots(cls, total_slots: int) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.program_slots(total_slots)
            return True
        except StampmanError:
            return False
