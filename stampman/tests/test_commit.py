"""Tests for CommitCoordinator against the in-memory store."""

import pytest

from stampman.adapters.memory import InMemoryCardStore
from stampman.batch import CommitRequest, StampBatchController
from stampman.commit import CommitCoordinator
from stampman.exceptions import CommitError
from stampman.progress import CardProgress, RedemptionState
from stampman.signals import card_completed


@pytest.fixture
def coordinator(memory_store):
    return CommitCoordinator(memory_store, timeout=5)


class RacingStore(InMemoryCardStore):
    """Store where another writer lands a stamp right after each read."""

    def read_card(self, card_id):
        progress = super().read_card(card_id)
        competitor = progress.with_stamps(progress.current_stamps + 1, "competitor")
        super().conditional_write(card_id, progress.version, competitor)
        return progress


class DuplicateInFlightStore(InMemoryCardStore):
    """Store where a duplicate of the same grant lands just before the first write."""

    raced = False

    def conditional_write(self, card_id, expected_version, new_state, **context):
        if not self.raced:
            self.raced = True
            super().conditional_write(card_id, expected_version, new_state, **context)
        return super().conditional_write(card_id, expected_version, new_state, **context)


class SlowStore(InMemoryCardStore):
    """Store whose writes never answer in time."""

    def conditional_write(self, *args, **kwargs):
        raise TimeoutError("backend did not answer")


class TestApply:
    """CommitCoordinator.apply() happy path and rejections."""

    def test_apply_adds_delta(self, coordinator, make_progress):
        make_progress(current_stamps=3)
        progress = coordinator.apply(CommitRequest("card-1", delta=2, commit_id="c1"))

        assert progress.current_stamps == 5
        assert progress.last_commit_id == "c1"
        assert progress.version == 1
        assert coordinator.store.read_card("card-1") == progress

    def test_apply_writes_ledger(self, coordinator, memory_store, make_progress):
        make_progress(current_stamps=3)
        coordinator.apply(CommitRequest("card-1", delta=2, commit_id="c1"), note="balcão")

        [activity] = memory_store.activities
        assert activity.kind == "stamp"
        assert activity.count == 2
        assert activity.stamps_after == 5
        assert activity.commit_id == "c1"
        assert activity.note == "balcão"

    def test_over_capacity(self, coordinator, make_progress):
        make_progress(total_slots=10, current_stamps=9)
        with pytest.raises(CommitError) as exc:
            coordinator.apply(CommitRequest("card-1", delta=2, commit_id="c1"))

        assert exc.value.code == CommitError.OVER_CAPACITY
        assert coordinator.store.read_card("card-1").current_stamps == 9

    @pytest.mark.parametrize("delta", [0, -1])
    def test_invalid_delta(self, coordinator, make_progress, delta):
        make_progress()
        with pytest.raises(CommitError) as exc:
            coordinator.apply(CommitRequest("card-1", delta=delta, commit_id="c1"))
        assert exc.value.code == CommitError.INVALID_DELTA

    def test_unknown_card(self, coordinator):
        with pytest.raises(CommitError) as exc:
            coordinator.apply(CommitRequest("missing", delta=1, commit_id="c1"))
        assert exc.value.code == CommitError.CARD_NOT_FOUND

    def test_reaching_total_is_ready_not_claimed(self, coordinator, make_progress):
        make_progress(total_slots=5, current_stamps=4)
        progress = coordinator.apply(CommitRequest("card-1", delta=1, commit_id="c1"))

        assert progress.state == RedemptionState.READY_TO_REDEEM
        assert not progress.is_reward_claimed

    def test_completion_signal(self, coordinator, make_progress):
        completed = []

        def receiver(sender, progress, **kwargs):
            completed.append(progress.card_id)

        card_completed.connect(receiver)
        try:
            make_progress(total_slots=5, current_stamps=3)
            coordinator.apply(CommitRequest("card-1", delta=1, commit_id="c1"))
            assert completed == []
            coordinator.apply(CommitRequest("card-1", delta=1, commit_id="c2"))
            assert completed == ["card-1"]
        finally:
            card_completed.disconnect(receiver)

    def test_grant_generates_commit_id(self, coordinator, make_progress):
        make_progress()
        progress = coordinator.grant("card-1", 2)
        assert progress.current_stamps == 2
        assert progress.last_commit_id


class TestIdempotency:
    """The same commit_id is applied at most once."""

    def test_replay_returns_same_state(self, coordinator, memory_store, make_progress):
        make_progress(current_stamps=3)
        request = CommitRequest("card-1", delta=2, commit_id="c1")

        first = coordinator.apply(request)
        second = coordinator.apply(request)

        assert first == second
        assert second.current_stamps == 5
        assert len(memory_store.activities) == 1

    def test_replay_of_filling_commit_is_not_over_capacity(self, coordinator, make_progress):
        make_progress(total_slots=5, current_stamps=3)
        request = CommitRequest("card-1", delta=2, commit_id="c1")

        coordinator.apply(request)
        assert coordinator.apply(request).current_stamps == 5

    def test_replay_of_older_commit(self, coordinator, make_progress):
        make_progress(current_stamps=0)
        first = CommitRequest("card-1", delta=1, commit_id="c1")

        coordinator.apply(first)
        coordinator.apply(CommitRequest("card-1", delta=1, commit_id="c2"))
        progress = coordinator.apply(first)

        assert progress.current_stamps == 2
        assert progress.last_commit_id == "c2"

    def test_replay_of_stale_batch_commit(self, coordinator, make_progress):
        """A batch request retried after it landed is a replay, not a conflict."""
        progress = make_progress(current_stamps=3)
        batch = StampBatchController.add(StampBatchController.open(progress), 2)
        request = StampBatchController.commit(batch)

        coordinator.apply(request)
        assert coordinator.apply(request).current_stamps == 5


class TestConcurrency:
    """Stale deltas are rejected, never merged."""

    def test_scenario_d_stale_batches(self, coordinator, make_progress):
        """Two batches opened at 3/5 both add 2: the second must not land."""
        progress = make_progress(total_slots=5, current_stamps=3)
        first = StampBatchController.add(StampBatchController.open(progress), 2)
        second = StampBatchController.add(StampBatchController.open(progress), 2)

        assert coordinator.apply(StampBatchController.commit(first)).current_stamps == 5

        with pytest.raises(CommitError) as exc:
            coordinator.apply(StampBatchController.commit(second))

        assert exc.value.code == CommitError.CONCURRENT_MODIFICATION
        assert coordinator.store.read_card("card-1").current_stamps == 5

    def test_lost_write_race(self):
        store = RacingStore()
        store.add(CardProgress(card_id="card-1", total_slots=10, current_stamps=2))
        coordinator = CommitCoordinator(store, timeout=5)

        with pytest.raises(CommitError) as exc:
            coordinator.grant("card-1", 1, commit_id="mine")

        assert exc.value.code == CommitError.CONCURRENT_MODIFICATION
        progress = store.read_card("card-1")
        assert progress.last_commit_id == "competitor"
        assert not store.has_commit("card-1", "mine")

    def test_duplicate_in_flight_returns_landed_state(self):
        """A retry that loses the race to its own first attempt is a replay."""
        store = DuplicateInFlightStore(
            [CardProgress(card_id="card-1", total_slots=10, current_stamps=2)]
        )
        coordinator = CommitCoordinator(store, timeout=5)

        progress = coordinator.grant("card-1", 2, commit_id="c1")

        assert progress.current_stamps == 4
        assert progress.last_commit_id == "c1"
        assert len(store.activities) == 1

    def test_same_commit_id_on_two_cards(self, coordinator, make_progress):
        make_progress(card_id="card-1")
        make_progress(card_id="card-2")

        coordinator.grant("card-1", 1, commit_id="retry-1")
        progress = coordinator.grant("card-2", 1, commit_id="retry-1")

        assert progress.current_stamps == 1
        assert coordinator.store.read_card("card-1").current_stamps == 1


class TestTimeout:
    def test_store_read_timeout(self):
        class SlowReadStore(InMemoryCardStore):
            def read_card(self, card_id):
                raise TimeoutError("read did not answer")

        coordinator = CommitCoordinator(SlowReadStore(), timeout=5)

        with pytest.raises(CommitError) as exc:
            coordinator.grant("card-1", 1)
        assert exc.value.code == CommitError.TIMEOUT

    def test_store_timeout(self):
        store = SlowStore([CardProgress(card_id="card-1", total_slots=10)])
        coordinator = CommitCoordinator(store, timeout=5)

        with pytest.raises(CommitError) as exc:
            coordinator.grant("card-1", 1)
        assert exc.value.code == CommitError.TIMEOUT

    def test_deadline_elapsed_before_write(self, memory_store, make_progress):
        make_progress(current_stamps=1)
        coordinator = CommitCoordinator(memory_store, timeout=-1)

        with pytest.raises(CommitError) as exc:
            coordinator.grant("card-1", 1)

        assert exc.value.code == CommitError.TIMEOUT
        assert memory_store.read_card("card-1").current_stamps == 1
