"""Tests for the Django ORM CardStore."""

import uuid

import pytest

from stampman.adapters import get_card_store
from stampman.adapters.django_store import DjangoCardStore
from stampman.exceptions import CardNotFound
from stampman.models import CustomerCard, StampActivity
from stampman.protocols import CardStore


pytestmark = pytest.mark.django_db


@pytest.fixture
def store():
    return DjangoCardStore()


class TestConfiguredStore:
    def test_default_store_from_settings(self):
        assert isinstance(get_card_store(), DjangoCardStore)

    def test_store_override(self, settings):
        settings.STAMPMAN = {"CARD_STORE": "stampman.adapters.memory.InMemoryCardStore"}
        from stampman.adapters.memory import InMemoryCardStore

        assert isinstance(get_card_store(), InMemoryCardStore)

    def test_implements_protocol(self, store):
        assert isinstance(store, CardStore)


class TestReadCard:
    def test_read(self, store, card):
        progress = store.read_card(str(card.pk))
        assert progress.card_id == str(card.pk)
        assert progress.current_stamps == 0

    def test_unknown_card(self, store):
        with pytest.raises(CardNotFound):
            store.read_card(str(uuid.uuid4()))

    def test_malformed_id(self, store):
        with pytest.raises(CardNotFound):
            store.read_card("not-a-uuid")


class TestConditionalWrite:
    def test_write_updates_card_and_ledger(self, store, card):
        progress = store.read_card(str(card.pk))
        new_state = progress.with_stamps(3, "c1")

        assert store.conditional_write(
            str(card.pk), progress.version, new_state, count=3, created_by="staff-1"
        )

        card.refresh_from_db()
        assert card.current_stamps == 3
        assert card.version == 1
        assert card.last_commit_id == "c1"
        assert card.last_stamp_at is not None

        activity = card.activities.get()
        assert activity.kind == StampActivity.Kind.STAMP
        assert activity.count == 3
        assert activity.commit_id == "c1"
        assert activity.created_by == "staff-1"

    def test_stale_version_rejected(self, store, card):
        progress = store.read_card(str(card.pk))
        assert store.conditional_write(str(card.pk), progress.version, progress.with_stamps(1, "c1"))

        assert not store.conditional_write(
            str(card.pk), progress.version, progress.with_stamps(2, "c2")
        )
        card.refresh_from_db()
        assert card.current_stamps == 1
        assert card.activities.count() == 1

    def test_duplicate_commit_rolls_back(self, store, card):
        progress = store.read_card(str(card.pk))
        store.conditional_write(str(card.pk), progress.version, progress.with_stamps(1, "c1"))

        fresh = store.read_card(str(card.pk))
        assert not store.conditional_write(
            str(card.pk), fresh.version, fresh.with_stamps(2, "c1"), count=1
        )

        card.refresh_from_db()
        assert card.current_stamps == 1
        assert card.version == 1

    def test_redeem_write(self, store, card):
        CustomerCard.objects.filter(pk=card.pk).update(current_stamps=10)
        progress = store.read_card(str(card.pk))

        assert store.conditional_write(
            str(card.pk), progress.version, progress.claimed(), kind=StampActivity.Kind.REDEEM
        )

        card.refresh_from_db()
        assert card.is_reward_claimed
        assert card.reward_claimed_at is not None
        assert card.activities.get().commit_id is None

    def test_same_commit_id_on_two_cards(self, store, card, small_program):
        other = CustomerCard.objects.create(
            program=small_program,
            business_ref=small_program.business_ref,
            customer_ref="cust-002",
            card_code="456",
            total_slots=small_program.total_slots,
        )
        for target in (card, other):
            progress = store.read_card(str(target.pk))
            assert store.conditional_write(
                str(target.pk), progress.version, progress.with_stamps(1, "shared")
            )

        assert store.has_commit(str(card.pk), "shared")
        assert store.has_commit(str(other.pk), "shared")

    def test_has_commit(self, store, card):
        progress = store.read_card(str(card.pk))
        store.conditional_write(str(card.pk), progress.version, progress.with_stamps(1, "c1"))

        assert store.has_commit(str(card.pk), "c1")
        assert not store.has_commit(str(card.pk), "c2")
        assert not store.has_commit(str(card.pk), "")
