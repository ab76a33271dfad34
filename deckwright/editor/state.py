"""
Deck editing state.

Two synchronized representations of the same deck:

- the display order: per section, the ordered list of placement uuids, over
  an arena mapping each uuid to its Placement;
- the aggregate: per section, the quantity of each (cid, ciid) pair.

Only the Synchronizer writes to a DeckState. Everything else reads.
"""

from dataclasses import dataclass, field

from deckwright.models.deck import DeckAggregate
from deckwright.models.placement import SECTIONS, Placement, Section

SectionSnapshot = tuple[Placement, ...]


@dataclass
class DeckState:
    placements: dict[str, Placement] = field(default_factory=dict)
    order: dict[Section, list[str]] = field(
        default_factory=lambda: {section: [] for section in SECTIONS}
    )
    aggregate: DeckAggregate = field(default_factory=DeckAggregate)

    def section(self, section: Section) -> list[Placement]:
        """Placements of a section in display order."""
        return [self.placements[uuid] for uuid in self.order[section]]

    def get(self, uuid: str) -> Placement | None:
        return self.placements.get(uuid)

    def index_of(self, section: Section, uuid: str) -> int:
        """Position of a uuid in a section, or -1."""
        try:
            return self.order[section].index(uuid)
        except ValueError:
            return -1

    def contains(self, section: Section, uuid: str) -> bool:
        placement = self.placements.get(uuid)
        return placement is not None and placement.section is section

    def first_match(self, section: Section, cid: str, ciid: int | None = None) -> Placement | None:
        for uuid in self.order[section]:
            placement = self.placements[uuid]
            if placement.cid == cid and (ciid is None or placement.ciid == ciid):
                return placement
        return None

    def last_match(self, section: Section, cid: str, ciid: int | None = None) -> Placement | None:
        for uuid in reversed(self.order[section]):
            placement = self.placements[uuid]
            if placement.cid == cid and (ciid is None or placement.ciid == ciid):
                return placement
        return None

    def length(self, section: Section) -> int:
        return len(self.order[section])

    def snapshot_section(self, section: Section) -> SectionSnapshot:
        return tuple(self.section(section))

    def snapshot_sections(self, sections: tuple[Section, ...]) -> dict[Section, SectionSnapshot]:
        return {section: self.snapshot_section(section) for section in sections}

    def display_keys(self, section: Section) -> list[tuple[str, int]]:
        """(cid, ciid) sequence of a section, without uuids."""
        return [self.placements[uuid].key for uuid in self.order[section]]
