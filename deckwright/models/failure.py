"""
Operation Result Envelope: Unified Outcome Classification.

Every deck mutation reports its outcome through `OperationResult`. Expected
validation failures (copy limits, section eligibility, missing anchors) are
returned, never raised, so the UI layer can give synchronous feedback.

INVARIANT: A failed OperationResult means the deck state was not touched.

Exceptions are reserved for programming errors: a broken internal invariant
or a value that cannot name a deck section.
"""

from enum import Enum

from pydantic import BaseModel, Field


class ErrorKind(str, Enum):
    """Classification of expected operation failures."""

    # Constraint violations
    MAX_COPIES_REACHED = "max_copies_reached"
    INVALID_SECTION = "invalid_section"

    # Resource failures
    CARD_NOT_FOUND = "card_not_found"

    # Persistence boundary
    STORAGE_SAVE_FAILED = "storage_save_failed"


STANDARD_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.MAX_COPIES_REACHED: "No more copies of this card may be added to the deck.",
    ErrorKind.INVALID_SECTION: "This card cannot be placed in that section.",
    ErrorKind.CARD_NOT_FOUND: "The card could not be found in that section.",
    ErrorKind.STORAGE_SAVE_FAILED: "The deck could not be saved. Please retry.",
}


class OperationResult(BaseModel):
    """
    Outcome of a single deck operation.

    `changed` distinguishes a successful mutation from a successful no-op
    (for example removing a card that is not in the section).
    """

    success: bool = Field(..., description="Whether the operation was accepted")
    error: ErrorKind | None = Field(default=None, description="Failure classification")
    detail: str | None = Field(default=None, description="Technical detail (optional)")
    changed: bool = Field(default=False, description="Whether deck state was modified")
    uuid: str | None = Field(default=None, description="Placement affected by the operation")
    dno: int | None = Field(default=None, description="Deck number (persistence results)")

    @classmethod
    def ok(cls, uuid: str | None = None, changed: bool = True) -> "OperationResult":
        """Create a success result."""
        return cls(success=True, changed=changed, uuid=uuid)

    @classmethod
    def noop(cls) -> "OperationResult":
        """Create a success result that did not modify anything."""
        return cls(success=True, changed=False)

    @classmethod
    def failure(cls, error: ErrorKind, detail: str | None = None) -> "OperationResult":
        """Create a failure result. State is guaranteed untouched."""
        return cls(success=False, error=error, detail=detail, changed=False)

    @property
    def message(self) -> str | None:
        """User-appropriate explanation for a failure."""
        if self.error is None:
            return None
        return STANDARD_MESSAGES[self.error]


# Exception types for programming errors


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(self, message: str, detail: str | None = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class InvariantViolationError(KnownError):
    """
    Raised when the display order and the aggregate disagree.

    This never happens for validated input; it indicates a defect in a
    mutation path and must not be swallowed.
    """

    def __init__(self, invariant: str, detail: str | None = None):
        self.invariant = invariant
        super().__init__(f"Deck state invariant violated: {invariant}", detail)


class UnknownSectionError(KnownError, ValueError):
    """Raised when a value does not name a deck section."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Unknown deck section: {value!r}")
