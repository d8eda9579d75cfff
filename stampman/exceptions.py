"""Stampman exceptions."""


class StampmanError(Exception):
    """
    Structured exception for stamp card operations.

    Carries a machine-readable ``code``, a human message (defaulted from
    ``_default_messages``) and arbitrary context in ``data``.

    Usage:
        try:
            StampCardService.enroll("CAFE-10", "cust-1")
        except StampmanError as e:
            if e.code == "ALREADY_ENROLLED":
                handle_duplicate()
    """

    _default_messages = {
        "PROGRAM_NOT_FOUND": "Loyalty program not found",
        "ALREADY_ENROLLED": "Customer already has an open card on this program",
        "CARD_CODE_EXHAUSTED": "Unable to generate a unique card code",
        "INVALID_TOTAL_SLOTS": "Invalid number of card slots",
        "CARD_NOT_FOUND": "Customer card not found",
    }

    def __init__(self, code: str, message: str | None = None, **data):
        self.code = code
        self.message = message or self._lookup_message(code)
        self.data = data
        super().__init__(f"[{code}] {self.message}")

    @classmethod
    def _lookup_message(cls, code: str) -> str:
        for klass in cls.__mro__:
            messages = getattr(klass, "_default_messages", None)
            if messages and code in messages:
                return messages[code]
        return code

    def as_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "data": self.data}


class InvariantViolation(StampmanError):
    """A CardProgress was built in an invalid state. Always a programming error."""

    _default_messages = {
        "INVARIANT_VIOLATION": "Card progress invariant violated",
    }

    def __init__(self, message: str | None = None, **data):
        super().__init__("INVARIANT_VIOLATION", message, **data)


class CardNotFound(StampmanError):
    """Raised by card stores when the card does not exist."""

    def __init__(self, card_id: str):
        super().__init__("CARD_NOT_FOUND", card_id=card_id)


class CommitError(StampmanError):
    """A stamp commit could not be applied."""

    OVER_CAPACITY = "OVER_CAPACITY"
    CONCURRENT_MODIFICATION = "CONCURRENT_MODIFICATION"
    TIMEOUT = "TIMEOUT"
    CARD_NOT_FOUND = "CARD_NOT_FOUND"
    INVALID_DELTA = "INVALID_DELTA"

    _default_messages = {
        "OVER_CAPACITY": "Stamps would exceed the card's slots",
        "CONCURRENT_MODIFICATION": "Card changed since it was read; reload and retry",
        "TIMEOUT": "Timed out applying stamps",
        "INVALID_DELTA": "Stamp count must be positive",
    }


class ClaimError(StampmanError):
    """A reward claim was rejected."""

    ALREADY_REDEEMED = "ALREADY_REDEEMED"
    NOT_READY = "NOT_READY"
    STALE_ATTEMPT = "STALE_ATTEMPT"
    TIMEOUT = "TIMEOUT"
    CARD_NOT_FOUND = "CARD_NOT_FOUND"

    _default_messages = {
        "ALREADY_REDEEMED": "Reward already redeemed",
        "NOT_READY": "Card is not complete yet",
        "STALE_ATTEMPT": "Card changed since the claim was prepared",
        "TIMEOUT": "Timed out claiming reward",
    }
