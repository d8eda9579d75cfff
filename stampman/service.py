"""
Stampman public API.

CORE (essential):
    StampCardService.open_batch(card_id)       - Start an interactive stamp batch
    StampCardService.commit_batch(batch)       - Apply a finished batch
    StampCardService.grant_stamps(card_id, n)  - Direct grant of n stamps
    StampCardService.claim_reward(card_id)     - Redeem a complete card

CONVENIENCE (helpers):
    StampCardService.create_program(...)       - Create card template
    StampCardService.update_program(code, ...) - Edit card template
    StampCardService.deactivate_program(code)  - Stop enrollments
    StampCardService.enroll(program, customer) - Join a program
    StampCardService.find_card(code, business) - Counter lookup
    StampCardService.history(card_id)          - Grant/redeem ledger
"""

from dataclasses import replace

from stampman.adapters import get_card_store
from stampman.batch import PendingBatch, StampBatchController
from stampman.commit import CommitCoordinator
from stampman.exceptions import CardNotFound, ClaimError
from stampman.models import CustomerCard, LoyaltyProgram, StampActivity
from stampman.progress import CardProgress, RedemptionState
from stampman.redemption import RedemptionAttempt, RedemptionGate
from stampman.services import card as card_service
from stampman.services import program as program_service


class StampCardService:
    """
    Stampman public API.

    Uses @classmethod for extensibility. The store is resolved from
    settings on every call so tests can swap STAMPMAN["CARD_STORE"].

    CORE (essential):
        progress(card_id)     - Current CardProgress
        open_batch(card_id)   - PendingBatch on current progress
        commit_batch(batch)   - Commit + apply
        grant_stamps(...)     - Direct grant
        claim_reward(...)     - Redeem
        redemption_state(id)  - IN_PROGRESS / READY_TO_REDEEM / REDEEMED

    CONVENIENCE (helpers):
        create_program(...)   - Create template
        update_program(...)   - Edit template
        deactivate_program()  - Stop enrollments
        programs(business)    - Active templates of a business
        enroll(...)           - Join program
        get_card(card_id)     - Card row
        find_card(...)        - Counter lookup by 3-digit code
        program_cards(...)    - Customer management listing
        redemption_count(...) - Claimed cycles
        history(card_id)      - Ledger
    """

    # ======================================================================
    # CORE API
    # ======================================================================

    @classmethod
    def progress(cls, card_id: str) -> CardProgress:
        """
        Read current progress.

        Raises:
            CardNotFound: If the card does not exist
        """
        return get_card_store().read_card(card_id)

    @classmethod
    def open_batch(cls, card_id: str) -> PendingBatch:
        """Open an interactive batch on the card's confirmed state."""
        return StampBatchController.open(cls.progress(card_id))

    @classmethod
    def commit_batch(
        cls,
        batch: PendingBatch,
        commit_id: str | None = None,
        note: str = "",
        created_by: str = "",
    ) -> CardProgress | None:
        """
        Commit a batch and apply it.

        Returns:
            CardProgress after the commit, or None if nothing was pending

        Raises:
            CommitError: See CommitCoordinator.apply
        """
        request = StampBatchController.commit(batch, commit_id=commit_id)
        if request is None:
            return None
        return cls._coordinator().apply(request, note=note, created_by=created_by)

    @classmethod
    def grant_stamps(
        cls,
        card_id: str,
        count: int = 1,
        commit_id: str | None = None,
        note: str = "",
        created_by: str = "",
    ) -> CardProgress:
        """
        Grant ``count`` stamps without a batch.

        Pass a stable ``commit_id`` when the call may be retried.

        Raises:
            CommitError: See CommitCoordinator.apply
        """
        return cls._coordinator().grant(
            card_id,
            count,
            commit_id=commit_id,
            note=note,
            created_by=created_by,
        )

    @classmethod
    def claim_reward(
        cls,
        card_id: str,
        expected_stamps: int | None = None,
        attempt_id: str | None = None,
        note: str = "",
        created_by: str = "",
    ) -> CardProgress:
        """
        Redeem the reward of a complete card.

        Args:
            card_id: Card ID
            expected_stamps: Stamp count the operator saw. When omitted the
                current count is used (claim at the counter).
            attempt_id: Attempt reference for logs

        Raises:
            ClaimError: See RedemptionGate.claim
        """
        gate = cls._gate()
        if expected_stamps is None:
            try:
                expected_stamps = gate.store.read_card(card_id).current_stamps
            except CardNotFound:
                raise ClaimError(ClaimError.CARD_NOT_FOUND, card_id=card_id)

        attempt = RedemptionAttempt(card_id=card_id, expected_stamps_at_claim=expected_stamps)
        if attempt_id:
            attempt = replace(attempt, attempt_id=attempt_id)
        return gate.claim(attempt, note=note, created_by=created_by)

    @classmethod
    def redemption_state(cls, card_id: str) -> RedemptionState:
        return cls._gate().state(card_id)

    # ======================================================================
    # CONVENIENCE API
    # ======================================================================

    @classmethod
    def create_program(
        cls,
        code: str,
        business_ref: str,
        name: str,
        total_slots: int | None = None,
        reward_description: str = "",
    ) -> LoyaltyProgram:
        return program_service.create(
            code=code,
            business_ref=business_ref,
            name=name,
            total_slots=total_slots,
            reward_description=reward_description,
        )

    @classmethod
    def update_program(cls, code: str, **fields) -> LoyaltyProgram | None:
        return program_service.update(code, **fields)

    @classmethod
    def deactivate_program(cls, code: str) -> bool:
        return program_service.deactivate(code)

    @classmethod
    def programs(cls, business_ref: str) -> list[LoyaltyProgram]:
        return program_service.for_business(business_ref)

    @classmethod
    def enroll(cls, program_code: str, customer_ref: str, customer_name: str = "") -> CustomerCard:
        return card_service.enroll(program_code, customer_ref, customer_name)

    @classmethod
    def get_card(cls, card_id: str) -> CustomerCard | None:
        return card_service.get(card_id)

    @classmethod
    def find_card(cls, card_code: str, business_ref: str) -> CustomerCard | None:
        return card_service.find_by_code(card_code, business_ref)

    @classmethod
    def program_cards(cls, program_code: str, only_open: bool = False) -> list[CustomerCard]:
        """Cards issued on a program; only_open keeps the unclaimed ones."""
        return card_service.for_program(program_code, only_open=only_open)

    @classmethod
    def redemption_count(cls, program_code: str, customer_ref: str) -> int:
        return card_service.redemption_count(program_code, customer_ref)

    @classmethod
    def history(cls, card_id: str, limit: int = 50) -> list[StampActivity]:
        return card_service.history(card_id, limit=limit)

    # ======================================================================
    # Internals
    # ======================================================================

    @classmethod
    def _coordinator(cls) -> CommitCoordinator:
        """Internal: build the coordinator. Override to inject a store."""
        return CommitCoordinator(get_card_store())

    @classmethod
    def _gate(cls) -> RedemptionGate:
        """Internal: build the redemption gate. Override to inject a store."""
        return RedemptionGate(get_card_store())
