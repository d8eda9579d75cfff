"""In-memory CardStore for client-side previews and tests."""

import threading
from dataclasses import dataclass

from stampman.exceptions import CardNotFound
from stampman.progress import CardProgress


@dataclass
class MemoryActivity:
    """Ledger entry kept by InMemoryCardStore."""

    card_id: str
    kind: str
    count: int
    stamps_after: int
    commit_id: str | None = None
    note: str = ""
    created_by: str = ""


class InMemoryCardStore:
    """
    Dict-backed CardStore.

    A lock makes each conditional write atomic, standing in for the
    version check a real backend performs.
    """

    def __init__(self, cards=None):
        self._lock = threading.Lock()
        self._cards: dict[str, CardProgress] = {}
        self._commits: dict[str, set[str]] = {}
        self.activities: list[MemoryActivity] = []
        for card in cards or []:
            self.add(card)

    def add(self, card: CardProgress) -> CardProgress:
        with self._lock:
            self._cards[card.card_id] = card
            self._commits.setdefault(card.card_id, set())
        return card

    def read_card(self, card_id: str) -> CardProgress:
        with self._lock:
            try:
                return self._cards[card_id]
            except KeyError:
                raise CardNotFound(card_id)

    def conditional_write(
        self,
        card_id: str,
        expected_version: int,
        new_state: CardProgress,
        kind: str = "stamp",
        count: int = 0,
        note: str = "",
        created_by: str = "",
    ) -> bool:
        with self._lock:
            current = self._cards.get(card_id)
            if current is None:
                raise CardNotFound(card_id)
            if current.version != expected_version:
                return False

            commit_id = new_state.last_commit_id if kind == "stamp" else None
            if commit_id and commit_id in self._commits[card_id]:
                return False

            self._cards[card_id] = new_state
            if commit_id:
                self._commits[card_id].add(commit_id)
            self.activities.append(
                MemoryActivity(
                    card_id=card_id,
                    kind=kind,
                    count=count,
                    stamps_after=new_state.current_stamps,
                    commit_id=commit_id,
                    note=note,
                    created_by=created_by,
                )
            )
            return True

    def has_commit(self, card_id: str, commit_id: str) -> bool:
        with self._lock:
            return commit_id in self._commits.get(card_id, set())
