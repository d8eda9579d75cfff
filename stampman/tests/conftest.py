"""Pytest fixtures for Stampman tests."""

import pytest

from stampman.adapters.memory import InMemoryCardStore
from stampman.models import CustomerCard, LoyaltyProgram
from stampman.progress import CardProgress


@pytest.fixture
def program(db):
    """Create a 10-slot coffee program."""
    return LoyaltyProgram.objects.create(
        code="CAFE-10",
        business_ref="biz-001",
        name="Café da Esquina",
        total_slots=10,
        reward_description="Um café grátis",
    )


@pytest.fixture
def small_program(db):
    """Create a 5-slot program on the same business."""
    return LoyaltyProgram.objects.create(
        code="PAO-5",
        business_ref="biz-001",
        name="Padaria",
        total_slots=5,
        reward_description="Um pão de queijo",
    )


@pytest.fixture
def card(db, program):
    """Create an empty card on the coffee program."""
    return CustomerCard.objects.create(
        program=program,
        business_ref=program.business_ref,
        customer_ref="cust-001",
        customer_name="Ana",
        card_code="123",
        total_slots=program.total_slots,
    )


@pytest.fixture
def memory_store():
    """Empty in-memory card store."""
    return InMemoryCardStore()


@pytest.fixture
def make_progress(memory_store):
    """Factory: add a CardProgress to the memory store."""

    def _make(card_id="card-1", total_slots=10, current_stamps=0, **kwargs):
        return memory_store.add(
            CardProgress(
                card_id=card_id,
                total_slots=total_slots,
                current_stamps=current_stamps,
                **kwargs,
            )
        )

    return _make
