"""
Redemption gate - the READY_TO_REDEEM -> REDEEMED transition.

State is derived from CardProgress, never stored separately:

    IN_PROGRESS      current_stamps < total_slots
    READY_TO_REDEEM  current_stamps == total_slots, not claimed
    REDEEMED         is_reward_claimed

A claim re-reads the card, checks G4 and writes ``claimed()`` keyed on
the version it read. When the write loses a race the card is read again
and re-checked, so of N concurrent claims exactly one succeeds and the
rest see ALREADY_REDEEMED.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field

from stampman.adapters import get_card_store
from stampman.conf import stampman_settings
from stampman.exceptions import CardNotFound, ClaimError
from stampman.gates import Gates
from stampman.progress import CardProgress, RedemptionState
from stampman.protocols.store import CardStore
from stampman.signals import reward_redeemed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RedemptionAttempt:
    """A claim as prepared by the UI, with the stamp count it was shown."""

    card_id: str
    expected_stamps_at_claim: int
    attempt_id: str = field(default_factory=lambda: uuid.uuid4().hex)


class RedemptionGate:
    """
    Guard reward claims against a CardStore.

    Usage:
        gate = RedemptionGate()
        if gate.state(card_id) == RedemptionState.READY_TO_REDEEM:
            progress = gate.claim(gate.attempt_for(progress))
    """

    def __init__(
        self,
        store: CardStore | None = None,
        timeout: float | None = None,
        retries: int | None = None,
    ):
        self.store = store if store is not None else get_card_store()
        self.timeout = timeout if timeout is not None else stampman_settings.WRITE_TIMEOUT_SECONDS
        self.retries = retries if retries is not None else stampman_settings.CLAIM_RETRIES

    def state(self, card_id: str) -> RedemptionState:
        """Current redemption state of a card."""
        try:
            return self.store.read_card(card_id).state
        except CardNotFound:
            raise ClaimError(ClaimError.CARD_NOT_FOUND, card_id=card_id)

    @staticmethod
    def attempt_for(progress: CardProgress) -> RedemptionAttempt:
        """Prepare a claim for the progress currently displayed."""
        return RedemptionAttempt(
            card_id=progress.card_id,
            expected_stamps_at_claim=progress.current_stamps,
        )

    def claim(
        self,
        attempt: RedemptionAttempt,
        note: str = "",
        created_by: str = "",
    ) -> CardProgress:
        """
        Redeem the reward of a complete card.

        Returns:
            CardProgress in the REDEEMED state

        Raises:
            ClaimError: ALREADY_REDEEMED, NOT_READY, STALE_ATTEMPT,
                CARD_NOT_FOUND or TIMEOUT
        """
        deadline = time.monotonic() + self.timeout

        try:
            for _ in range(self.retries + 1):
                progress = self.store.read_card(attempt.card_id)
                Gates.redemption_readiness(progress, attempt)

                if time.monotonic() > deadline:
                    raise TimeoutError(f"claim on card {attempt.card_id} exceeded {self.timeout}s")

                new_state = progress.claimed()
                written = self.store.conditional_write(
                    attempt.card_id,
                    progress.version,
                    new_state,
                    kind="redeem",
                    count=0,
                    note=note,
                    created_by=created_by,
                )
                if written:
                    break

                logger.warning(
                    "Claim %s lost version race on card %s, re-reading",
                    attempt.attempt_id,
                    attempt.card_id,
                )
            else:
                raise ClaimError(
                    ClaimError.TIMEOUT,
                    message="Card kept changing while claiming",
                    card_id=attempt.card_id,
                )
        except CardNotFound:
            raise ClaimError(ClaimError.CARD_NOT_FOUND, card_id=attempt.card_id)
        except TimeoutError as e:
            logger.warning("Claim %s on card %s timed out", attempt.attempt_id, attempt.card_id)
            raise ClaimError(ClaimError.TIMEOUT, card_id=attempt.card_id) from e

        logger.info("Reward redeemed on card %s (attempt %s)", attempt.card_id, attempt.attempt_id)
        reward_redeemed.send(sender=self.__class__, progress=new_state, attempt=attempt)
        return new_state
