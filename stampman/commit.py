"""
Commit coordinator - the single write path for stamp grants.

Applies a CommitRequest to stored CardProgress exactly once:

    1. read the card
    2. return it unchanged if the commit_id was already applied (G3)
    3. reject batches built on an older version (G2)
    4. reject deltas that overflow the card (G1)
    5. conditional write keyed on the version read in step 1

A lost write race is re-read once: if the winner was a duplicate of the
same commit_id its result is returned, otherwise the race is reported as
CONCURRENT_MODIFICATION and never retried here. The delta was computed
against state that no longer exists, so only the caller can decide what
to grant next.
"""

import logging
import time
import uuid

from stampman.adapters import get_card_store
from stampman.batch import CommitRequest
from stampman.conf import stampman_settings
from stampman.exceptions import CardNotFound, CommitError
from stampman.gates import Gates
from stampman.progress import CardProgress
from stampman.protocols.store import CardStore
from stampman.signals import card_completed

logger = logging.getLogger(__name__)


class CommitCoordinator:
    """
    Apply stamp deltas against a CardStore.

    Usage:
        coordinator = CommitCoordinator()
        progress = coordinator.apply(request)
        progress = coordinator.grant(card_id, 2)
    """

    def __init__(self, store: CardStore | None = None, timeout: float | None = None):
        self.store = store if store is not None else get_card_store()
        if timeout is None:
            timeout = stampman_settings.WRITE_TIMEOUT_SECONDS
        self.timeout = timeout

    def grant(
        self,
        card_id: str,
        count: int,
        commit_id: str | None = None,
        **context,
    ) -> CardProgress:
        """Apply a direct grant of ``count`` stamps (not tied to a batch)."""
        request = CommitRequest(
            card_id=card_id,
            delta=count,
            commit_id=commit_id or uuid.uuid4().hex,
        )
        return self.apply(request, **context)

    def apply(self, request: CommitRequest, note: str = "", created_by: str = "") -> CardProgress:
        """
        Apply ``request`` once.

        Args:
            request: Delta to apply
            note: Ledger note
            created_by: Operator reference for the ledger

        Returns:
            CardProgress after the commit (or the current one on replay)

        Raises:
            CommitError: INVALID_DELTA, CARD_NOT_FOUND, OVER_CAPACITY,
                CONCURRENT_MODIFICATION or TIMEOUT
        """
        if request.delta <= 0:
            raise CommitError(CommitError.INVALID_DELTA, delta=request.delta)

        deadline = time.monotonic() + self.timeout

        try:
            progress = self.store.read_card(request.card_id)

            if Gates.is_replay(progress, request.commit_id, self.store):
                logger.warning(
                    "Replayed commit %s on card %s ignored",
                    request.commit_id,
                    request.card_id,
                )
                return progress

            Gates.commit_freshness(progress, request.expected_version)
            Gates.slot_capacity(progress, request.delta)

            new_stamps = min(progress.total_slots, progress.current_stamps + request.delta)
            new_state = progress.with_stamps(new_stamps, request.commit_id)

            if time.monotonic() > deadline:
                raise TimeoutError(f"read of card {request.card_id} exceeded {self.timeout}s")

            written = self.store.conditional_write(
                request.card_id,
                progress.version,
                new_state,
                kind="stamp",
                count=request.delta,
                note=note,
                created_by=created_by,
            )

            if not written:
                # A duplicate of this request may have won the race
                current = self.store.read_card(request.card_id)
                if Gates.is_replay(current, request.commit_id, self.store):
                    logger.warning(
                        "Commit %s landed concurrently on card %s",
                        request.commit_id,
                        request.card_id,
                    )
                    return current
        except CardNotFound:
            raise CommitError(CommitError.CARD_NOT_FOUND, card_id=request.card_id)
        except TimeoutError as e:
            logger.warning("Commit %s on card %s timed out", request.commit_id, request.card_id)
            raise CommitError(
                CommitError.TIMEOUT,
                card_id=request.card_id,
                commit_id=request.commit_id,
            ) from e

        if not written:
            logger.warning(
                "Commit %s lost version race on card %s (read version %s)",
                request.commit_id,
                request.card_id,
                progress.version,
            )
            raise CommitError(
                CommitError.CONCURRENT_MODIFICATION,
                card_id=request.card_id,
                expected_version=progress.version,
            )

        logger.info(
            "Applied %s stamp(s) to card %s: %s/%s",
            request.delta,
            request.card_id,
            new_state.current_stamps,
            new_state.total_slots,
        )

        if new_state.is_complete:
            card_completed.send(sender=self.__class__, progress=new_state)

        return new_state
