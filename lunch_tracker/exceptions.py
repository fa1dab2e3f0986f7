"""
Domain exceptions for the lunch tracker.

Creation helpers raise these on bad input. The balance engine and the
settlement allocator never raise; storage errors are caught and logged at the
storage boundary.
"""


class LunchTrackerError(Exception):
    """Base exception for lunch tracker errors."""
    pass


class ValidationError(LunchTrackerError, ValueError):
    """Raised when a person, order or settlement fails input validation."""
    pass


class PersonNotFoundError(LunchTrackerError, KeyError):
    """Raised when an operation names a person that is not in the snapshot."""

    def __init__(self, person_id: str):
        self.person_id = person_id
        super().__init__(f"Person {person_id} not found")

    def __str__(self) -> str:
        return f"Person {self.person_id} not found"


class StorageError(LunchTrackerError):
    """Raised by a key-value store when reading or writing fails."""
    pass
