"""
Stamp batch controller - interactive, undoable stamp selection.

An operator opens a batch on a card and taps slots on the card grid.
Only the frontier is editable: tapping the next empty slot adds a
pending stamp, tapping the last pending slot removes it. Everything
else is ignored. Nothing is persisted until ``commit()`` hands a
CommitRequest to the CommitCoordinator.

Usage:
    batch = StampBatchController.open(progress)
    batch = StampBatchController.tap_slot(batch, 7)
    batch = StampBatchController.tap_slot(batch, 8)
    request = StampBatchController.commit(batch)
    CommitCoordinator().apply(request)
"""

import logging
import uuid
from dataclasses import dataclass, replace

from stampman.progress import CardProgress
from stampman.signals import stamp_added, stamp_undone, stamps_confirmed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingBatch:
    """Client-local stamps selected on top of the confirmed count."""

    card_id: str
    total_slots: int
    base_stamps: int
    base_version: int
    pending_delta: int = 0

    @property
    def frontier(self) -> int:
        """Index of the next slot eligible to be filled."""
        return self.base_stamps + self.pending_delta

    @property
    def effective_stamps(self) -> int:
        return self.base_stamps + self.pending_delta

    @property
    def is_complete(self) -> bool:
        return self.effective_stamps >= self.total_slots

    @property
    def max_delta(self) -> int:
        return self.total_slots - self.base_stamps

    def slot_state(self, index: int) -> str:
        """Render state of a slot: stamped, pending, next or empty."""
        if index < self.base_stamps:
            return "stamped"
        if index < self.effective_stamps:
            return "pending"
        if index == self.frontier and not self.is_complete:
            return "next"
        return "empty"


@dataclass(frozen=True)
class CommitRequest:
    """
    A finalized stamp delta for one card.

    ``expected_version`` is the card version the delta was computed
    against; None for direct grants that are not tied to a read.
    """

    card_id: str
    delta: int
    commit_id: str
    expected_version: int | None = None


class StampBatchController:
    """
    Pure operations on PendingBatch.

    Uses @classmethod for extensibility (consistent with other services).
    Taps never raise: invalid taps are ignored so a fast gesture stream
    is never interrupted.
    """

    @classmethod
    def open(cls, card: CardProgress) -> PendingBatch:
        """Open a batch on the card's confirmed state."""
        return PendingBatch(
            card_id=card.card_id,
            total_slots=card.total_slots,
            base_stamps=card.current_stamps,
            base_version=card.version,
        )

    @classmethod
    def tap_slot(cls, batch: PendingBatch, index: int) -> PendingBatch:
        """
        Apply one tap on slot ``index``.

        Returns:
            New batch with the stamp added or undone, or the same batch
            when the tap is not on the frontier.
        """
        if index < batch.base_stamps:
            return batch

        if batch.pending_delta > 0 and index == batch.frontier - 1:
            undone = replace(batch, pending_delta=batch.pending_delta - 1)
            logger.debug("Undo slot %s on card %s", index, batch.card_id)
            stamp_undone.send(sender=cls, batch=undone, index=index)
            return undone

        if index == batch.frontier and batch.frontier < batch.total_slots:
            added = replace(batch, pending_delta=batch.pending_delta + 1)
            logger.debug("Add slot %s on card %s", index, batch.card_id)
            stamp_added.send(sender=cls, batch=added, index=index)
            return added

        return batch

    @classmethod
    def add(cls, batch: PendingBatch, count: int) -> PendingBatch:
        """Tap the frontier up to ``count`` times (stops at a full card)."""
        for _ in range(max(0, count)):
            if batch.is_complete:
                break
            batch = cls.tap_slot(batch, batch.frontier)
        return batch

    @classmethod
    def cancel(cls, batch: PendingBatch) -> None:
        """Discard the batch. Nothing was persisted, nothing to undo."""
        logger.debug(
            "Discarded %s pending stamp(s) on card %s", batch.pending_delta, batch.card_id
        )

    @classmethod
    def commit(cls, batch: PendingBatch, commit_id: str | None = None) -> CommitRequest | None:
        """
        Finalize the batch into a CommitRequest.

        Args:
            batch: Batch to finalize
            commit_id: Idempotency token (generated when omitted). Reuse the
                same request when retrying so the grant is applied once.

        Returns:
            CommitRequest, or None when nothing is pending
        """
        if batch.pending_delta <= 0:
            return None

        request = CommitRequest(
            card_id=batch.card_id,
            delta=batch.pending_delta,
            commit_id=commit_id or uuid.uuid4().hex,
            expected_version=batch.base_version,
        )
        stamps_confirmed.send(sender=cls, request=request)
        return request
