from dataclasses import dataclass
from enum import Enum

from deckwright.models.failure import UnknownSectionError


class Section(str, Enum):
    MAIN = "main"
    EXTRA = "extra"
    SIDE = "side"
    TRASH = "trash"

    @classmethod
    def parse(cls, value: "Section | str") -> "Section":
        """Coerce a section name, raising UnknownSectionError for anything else."""
        try:
            return cls(value)
        except ValueError:
            raise UnknownSectionError(value) from None

    @property
    def is_capped(self) -> bool:
        """Whether copies in this section count toward the per-card copy limit."""
        return self is not Section.TRASH


SECTIONS: tuple[Section, ...] = (Section.MAIN, Section.EXTRA, Section.SIDE, Section.TRASH)

CAPPED_SECTIONS: tuple[Section, ...] = (Section.MAIN, Section.EXTRA, Section.SIDE)


@dataclass(frozen=True, slots=True)
class Placement:
    """
    One physical copy of a card in the deck.

    Attributes:
        uuid: Opaque handle, unique for the editing session and never reused
        cid: Card identifier
        ciid: Normalized image variant id
        section: Section currently holding this copy
    """

    uuid: str
    cid: str
    ciid: int
    section: Section

    @property
    def key(self) -> tuple[str, int]:
        """Aggregate key shared by every copy of the same card artwork."""
        return (self.cid, self.ciid)


class UuidAllocator:
    """
    Hands out placement handles of the form ``cid-ciid-n``.

    The counter per (cid, ciid) only grows, so a handle is never reused even
    after its placement is removed and the same card is added again.
    """

    def __init__(self) -> None:
        self._next: dict[tuple[str, int], int] = {}

    def allocate(self, cid: str, ciid: int) -> str:
        key = (cid, ciid)
        index = self._next.get(key, 0)
        self._next[key] = index + 1
        return f"{cid}-{ciid}-{index}"
