from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from pydantic import BaseModel, Field, field_validator

from deckwright.config import MAX_COPIES
from deckwright.models.card import normalize_ciid
from deckwright.models.placement import CAPPED_SECTIONS, SECTIONS, Placement, Section


@dataclass(frozen=True, slots=True)
class DeckAggregateEntry:
    """Quantity of one (cid, ciid) pair within one section."""

    cid: str
    ciid: int
    quantity: int


@dataclass
class DeckAggregate:
    """
    Per-section quantity table.

    Keys are (cid, ciid) pairs; a key is present only while its quantity is
    positive. Insertion order has no meaning here, export order comes from
    the display order.
    """

    quantities: dict[Section, dict[tuple[str, int], int]] = field(
        default_factory=lambda: {section: {} for section in SECTIONS}
    )

    @classmethod
    def from_placements(cls, placements: Iterable[Placement]) -> "DeckAggregate":
        aggregate = cls()
        for placement in placements:
            aggregate.increment(placement.section, placement.key)
        return aggregate

    def increment(self, section: Section, key: tuple[str, int]) -> int:
        table = self.quantities[section]
        table[key] = table.get(key, 0) + 1
        return table[key]

    def decrement(self, section: Section, key: tuple[str, int]) -> int:
        """Decrease by one, deleting the entry at zero. Returns the new quantity."""
        table = self.quantities[section]
        current = table.get(key, 0)
        if current <= 1:
            table.pop(key, None)
            return 0
        table[key] = current - 1
        return current - 1

    def quantity(self, section: Section, cid: str, ciid: int | None = None) -> int:
        """Copies of a card in a section, across all artworks unless ciid is given."""
        table = self.quantities[section]
        if ciid is not None:
            return table.get((cid, ciid), 0)
        return sum(qty for (entry_cid, _), qty in table.items() if entry_cid == cid)

    def capped_total(self, cid: str) -> int:
        """Copies of a card across main + extra + side."""
        return sum(self.quantity(section, cid) for section in CAPPED_SECTIONS)

    def capped_cids(self) -> set[str]:
        """Cids with at least one copy in main, extra or side."""
        return {cid for section in CAPPED_SECTIONS for cid, _ in self.quantities[section]}

    def section_total(self, section: Section) -> int:
        return sum(self.quantities[section].values())

    def entries(self, section: Section) -> Iterator[DeckAggregateEntry]:
        for (cid, ciid), qty in self.quantities[section].items():
            yield DeckAggregateEntry(cid=cid, ciid=ciid, quantity=qty)

    def copy(self) -> "DeckAggregate":
        return DeckAggregate(
            quantities={section: dict(table) for section, table in self.quantities.items()}
        )


class DeckCardRecord(BaseModel):
    """Storage-shaped record: one (cid, ciid) pair and its quantity in a section."""

    cid: str
    ciid: int = 0
    quantity: int = Field(default=1, ge=1, le=MAX_COPIES)

    @field_validator("ciid", mode="before")
    @classmethod
    def _normalize_ciid(cls, value: object) -> int:
        return normalize_ciid(value)


class DeckInfo(BaseModel):
    """
    A persisted deck in the flattened form the storage layer understands.

    The three lists keep the first-appearance order of each (cid, ciid) pair
    in the display order, so a reload reproduces the same grouping.
    """

    dno: int = 0
    name: str = ""
    original_name: str = ""
    comment: str = ""
    category: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    main_deck: list[DeckCardRecord] = Field(default_factory=list)
    extra_deck: list[DeckCardRecord] = Field(default_factory=list)
    side_deck: list[DeckCardRecord] = Field(default_factory=list)

    def records(self, section: Section) -> list[DeckCardRecord]:
        """Records of a persisted section. Trash is never persisted."""
        match section:
            case Section.MAIN:
                return self.main_deck
            case Section.EXTRA:
                return self.extra_deck
            case Section.SIDE:
                return self.side_deck
            case Section.TRASH:
                return []

    def all_cids(self) -> list[str]:
        return [record.cid for section in CAPPED_SECTIONS for record in self.records(section)]

    def display_name(self) -> str:
        """Name to save under: the edited name, else the name the deck was loaded with."""
        return self.name or self.original_name
