"""
Typed errors for the revision scheduler.

Callers can tell a precondition problem (item not memorized, bad outcome)
apart from a storage failure and decide what to show or whether to retry.
"""


class RevisionError(Exception):
    """Base class for all scheduler errors."""


class ItemNotMemorized(RevisionError):
    """A review was submitted for an item that is not under scheduling."""

    def __init__(self, item_id: int) -> None:
        self.item_id = item_id
        super().__init__(f"Item {item_id} is not memorized; mark it memorized first")


class AlreadyMemorized(RevisionError):
    """Strict mark-memorized on an item that is already scheduled."""

    def __init__(self, item_id: int) -> None:
        self.item_id = item_id
        super().__init__(f"Item {item_id} is already memorized")


class InvalidOutcome(RevisionError, ValueError):
    """Outcome outside {easy, medium, hard}."""

    def __init__(self, value) -> None:
        self.value = value
        super().__init__(f"Invalid review outcome: {value!r}")


class InvalidReviewDate(RevisionError, ValueError):
    """Backdated review dated in the future."""

    def __init__(self, value) -> None:
        self.value = value
        super().__init__(f"Review date {value} is in the future")


class NotFound(RevisionError, LookupError):
    """No record exists for the given item id."""

    def __init__(self, item_id: int) -> None:
        self.item_id = item_id
        super().__init__(f"Item {item_id} not found")


class PersistenceFailure(RevisionError):
    """The backing store failed to read or write."""
