"""Card service - enrollment, lookup and history.

Stamp counters are never written here: grants and claims go through
CommitCoordinator and RedemptionGate.
"""

import logging
import random

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from stampman.conf import stampman_settings
from stampman.exceptions import StampmanError
from stampman.models import CustomerCard, StampActivity
from stampman.services import program as program_service
from stampman.signals import card_enrolled

logger = logging.getLogger(__name__)


def get(card_id: str) -> CustomerCard | None:
    """Get card by ID (None for unknown or malformed IDs)."""
    try:
        return CustomerCard.objects.select_related("program").get(pk=card_id)
    except (CustomerCard.DoesNotExist, ValidationError, ValueError):
        return None


def find_by_code(card_code: str, business_ref: str) -> CustomerCard | None:
    """Get the unclaimed card presented at a business counter."""
    return (
        CustomerCard.objects.select_related("program")
        .filter(
            card_code=card_code.strip(),
            business_ref=business_ref,
            is_reward_claimed=False,
        )
        .first()
    )


def open_card(program_code: str, customer_ref: str) -> CustomerCard | None:
    """Get the customer's unclaimed card on a program."""
    return CustomerCard.objects.filter(
        program__code=program_code,
        customer_ref=customer_ref,
        is_reward_claimed=False,
    ).first()


def for_customer(customer_ref: str, only_open: bool = False) -> list[CustomerCard]:
    """List a customer's cards, newest first."""
    qs = CustomerCard.objects.select_related("program").filter(customer_ref=customer_ref)
    if only_open:
        qs = qs.filter(is_reward_claimed=False)
    return list(qs)


def generate_card_code(business_ref: str) -> str:
    """
    Pick a 3-digit code not used by another unclaimed card of the business.

    Raises:
        StampmanError: CARD_CODE_EXHAUSTED after CARD_CODE_ATTEMPTS tries
    """
    for _ in range(stampman_settings.CARD_CODE_ATTEMPTS):
        code = str(random.randint(100, 999))
        taken = CustomerCard.objects.filter(
            business_ref=business_ref,
            card_code=code,
            is_reward_claimed=False,
        ).exists()
        if not taken:
            return code

    raise StampmanError("CARD_CODE_EXHAUSTED", business_ref=business_ref)


def enroll(program_code: str, customer_ref: str, customer_name: str = "") -> CustomerCard:
    """
    Join a loyalty program: new card with zero stamps.

    A customer holds at most one unclaimed card per program; enrolling
    after a redemption starts the next cycle.

    Raises:
        StampmanError: PROGRAM_NOT_FOUND, ALREADY_ENROLLED, CARD_CODE_EXHAUSTED
    """
    program = program_service.get(program_code)
    if not program:
        raise StampmanError("PROGRAM_NOT_FOUND", program_code=program_code)

    if open_card(program_code, customer_ref):
        raise StampmanError(
            "ALREADY_ENROLLED",
            program_code=program_code,
            customer_ref=customer_ref,
        )

    try:
        with transaction.atomic():
            card = CustomerCard.objects.create(
                program=program,
                business_ref=program.business_ref,
                customer_ref=customer_ref,
                customer_name=customer_name,
                card_code=generate_card_code(program.business_ref),
                total_slots=program.total_slots,
            )
    except IntegrityError:
        if open_card(program_code, customer_ref):
            raise StampmanError(
                "ALREADY_ENROLLED",
                program_code=program_code,
                customer_ref=customer_ref,
            )
        raise

    logger.info("Enrolled %s in %s (card %s)", customer_ref, program_code, card.card_code)
    card_enrolled.send(sender=CustomerCard, card=card)
    return card


def redemption_count(program_code: str, customer_ref: str) -> int:
    """Number of cards the customer has redeemed on a program."""
    return CustomerCard.objects.filter(
        program__code=program_code,
        customer_ref=customer_ref,
        is_reward_claimed=True,
    ).count()


def history(card_id: str, limit: int = 50) -> list[StampActivity]:
    """Grant/redeem ledger of a card, newest first."""
    return list(StampActivity.objects.filter(card_id=card_id)[:limit])


def for_program(program_code: str, only_open: bool = False) -> list[CustomerCard]:
    """List the cards issued on a program, newest first (customer management)."""
    qs = CustomerCard.objects.select_related("program").filter(program__code=program_code)
    if only_open:
        qs = qs.filter(is_reward_claimed=False)
    return list(qs)
