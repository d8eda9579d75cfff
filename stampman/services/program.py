"""Program service - stamp card templates."""

import logging

from django.db import transaction

from stampman.conf import stampman_settings
from stampman.gates import Gates
from stampman.models import LoyaltyProgram
from stampman.signals import program_updated

logger = logging.getLogger(__name__)


def get(code: str) -> LoyaltyProgram | None:
    """Get active program by unique code."""
    try:
        return LoyaltyProgram.objects.get(code=code, is_active=True)
    except LoyaltyProgram.DoesNotExist:
        return None


def for_business(business_ref: str) -> list[LoyaltyProgram]:
    """List active programs of a business."""
    return list(LoyaltyProgram.objects.filter(business_ref=business_ref, is_active=True))


def create(
    code: str,
    business_ref: str,
    name: str,
    total_slots: int | None = None,
    reward_description: str = "",
) -> LoyaltyProgram:
    """
    Create a stamp card template.

    Raises:
        StampmanError: INVALID_TOTAL_SLOTS (G5)
    """
    if total_slots is None:
        total_slots = stampman_settings.DEFAULT_TOTAL_SLOTS
    Gates.program_slots(total_slots)

    with transaction.atomic():
        program = LoyaltyProgram.objects.create(
            code=code,
            business_ref=business_ref,
            name=name,
            total_slots=total_slots,
            reward_description=reward_description,
        )

    logger.info("Created program %s (%s slots) for %s", code, total_slots, business_ref)
    return program


UPDATABLE_FIELDS = {"name", "total_slots", "reward_description"}


def update(code: str, **fields) -> LoyaltyProgram | None:
    """
    Update program fields (only whitelisted fields are accepted).

    A new total_slots applies to cards enrolled afterwards; issued cards
    keep the slot count they were created with.

    Raises:
        StampmanError: INVALID_TOTAL_SLOTS (G5)
    """
    program = get(code)
    if not program:
        return None

    if "total_slots" in fields:
        Gates.program_slots(fields["total_slots"])

    changes = {}
    for key, value in fields.items():
        if key not in UPDATABLE_FIELDS:
            continue
        old_value = getattr(program, key)
        if old_value != value:
            changes[key] = {"old": old_value, "new": value}
        setattr(program, key, value)

    program.save()
    if changes:
        logger.info("Updated program %s: %s", code, ", ".join(sorted(changes)))
        program_updated.send(sender=LoyaltyProgram, program=program, changes=changes)
    return program


def deactivate(code: str) -> bool:
    """
    Stop new enrollments on a program.

    Issued cards are left untouched: they can still be stamped and
    redeemed.
    """
    updated = LoyaltyProgram.objects.filter(code=code, is_active=True).update(is_active=False)
    if updated:
        logger.info("Deactivated program %s", code)
    return bool(updated)
