"""Card store protocol - the persistence contract of the stamp core."""

from typing import Protocol, runtime_checkable

from stampman.progress import CardProgress


@runtime_checkable
class CardStore(Protocol):
    """
    Protocol for reading and conditionally writing card progress.

    Any document/row store with optimistic concurrency qualifies.
    Implemented by adapters/django_store.py and adapters/memory.py.

    Configuration in settings.py:
        STAMPMAN = {
            "CARD_STORE": "stampman.adapters.django_store.DjangoCardStore",
        }

    Callers only check their deadline between calls, so a call that
    hangs is not interrupted. Implementations must bound every call with
    their own client timeout and raise the builtin TimeoutError when the
    backend does not answer in time (e.g. a statement timeout on the
    database connection).
    """

    def read_card(self, card_id: str) -> CardProgress:
        """
        Return the current progress of a card.

        Raises:
            CardNotFound: If the card does not exist
            TimeoutError: If the backend does not answer in time
        """
        ...

    def conditional_write(
        self,
        card_id: str,
        expected_version: int,
        new_state: CardProgress,
        **context,
    ) -> bool:
        """
        Store ``new_state`` only if the stored version is ``expected_version``.

        Args:
            card_id: Card ID
            expected_version: Version read before computing new_state
            new_state: Progress to store
            **context: Ledger details (kind, count, note, created_by)

        Returns:
            True if written, False on version conflict or when the
            commit_id is already recorded for the card

        Raises:
            TimeoutError: If the backend does not answer in time
        """
        ...

    def has_commit(self, card_id: str, commit_id: str) -> bool:
        """Return True if ``commit_id`` was already applied to the card."""
        ...
