"""CardStore backed by the Django ORM (CustomerCard + StampActivity)."""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from stampman.exceptions import CardNotFound, InvariantViolation
from stampman.models import CustomerCard, StampActivity
from stampman.progress import CardProgress

logger = logging.getLogger(__name__)


class DjangoCardStore:
    """
    Adapter: CustomerCard rows implement the CardStore protocol.

    The conditional write is a single ``UPDATE ... WHERE id = %s AND
    version = %s``; the ledger row is inserted in the same transaction,
    so a rejected ledger insert (duplicate commit_id) undoes the update.
    """

    def read_card(self, card_id: str) -> CardProgress:
        try:
            card = CustomerCard.objects.get(pk=card_id)
        except (CustomerCard.DoesNotExist, ValidationError, ValueError):
            raise CardNotFound(card_id)

        try:
            return card.as_progress()
        except InvariantViolation:
            logger.error("Stored card %s violates progress invariants", card_id)
            raise

    def conditional_write(
        self,
        card_id: str,
        expected_version: int,
        new_state: CardProgress,
        kind: str = StampActivity.Kind.STAMP,
        count: int = 0,
        note: str = "",
        created_by: str = "",
    ) -> bool:
        now = timezone.now()
        fields = {
            "current_stamps": new_state.current_stamps,
            "is_reward_claimed": new_state.is_reward_claimed,
            "last_commit_id": new_state.last_commit_id,
            "version": new_state.version,
        }
        if kind == StampActivity.Kind.REDEEM:
            fields["reward_claimed_at"] = now
        else:
            fields["last_stamp_at"] = now

        try:
            with transaction.atomic():
                updated = CustomerCard.objects.filter(
                    pk=card_id,
                    version=expected_version,
                ).update(**fields)
                if not updated:
                    return False

                StampActivity.objects.create(
                    card_id=card_id,
                    kind=kind,
                    count=count,
                    stamps_after=new_state.current_stamps,
                    commit_id=new_state.last_commit_id if kind == StampActivity.Kind.STAMP else None,
                    note=note,
                    created_by=created_by,
                )
        except IntegrityError:
            # Same commit_id already in the ledger: the update was rolled back
            if self.has_commit(card_id, new_state.last_commit_id):
                logger.warning(
                    "Commit %s already recorded for card %s",
                    new_state.last_commit_id,
                    card_id,
                )
                return False
            raise

        return True

    def has_commit(self, card_id: str, commit_id: str) -> bool:
        if not commit_id:
            return False
        return StampActivity.objects.filter(card_id=card_id, commit_id=commit_id).exists()
