"""
Unsaved-changes detection.

A snapshot is the JSON dump of everything a save would persist: deck
metadata, the (cid, ciid) display sequence of each persisted section and its
aggregate. Placement uuids are left out, so undoing back to the saved state
compares equal even though no uuid ever gets reused.

Trash is an editing-session area and is not part of a snapshot.
"""

from pydantic import BaseModel, Field

from deckwright.editor.state import DeckState
from deckwright.models.deck import DeckCardRecord, DeckInfo
from deckwright.models.placement import CAPPED_SECTIONS, Section


class SectionContents(BaseModel):
    """One section as seen by a snapshot."""

    display: list[tuple[str, int]] | None = Field(
        default=None, description="(cid, ciid) in display order; None when order is ignored"
    )
    aggregate: list[DeckCardRecord] = Field(default_factory=list)


class DeckSnapshot(BaseModel):
    dno: int = 0
    name: str = ""
    comment: str = ""
    category: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    sections: dict[Section, SectionContents] = Field(default_factory=dict)

    def without_order(self) -> "DeckSnapshot":
        sections = {
            section: SectionContents(aggregate=contents.aggregate)
            for section, contents in self.sections.items()
        }
        return self.model_copy(update={"sections": sections})


def _sorted_aggregate(state: DeckState, section: Section) -> list[DeckCardRecord]:
    # Dict order in the aggregate shifts with undo/redo; sort so equal decks dump equally
    return [
        DeckCardRecord(cid=entry.cid, ciid=entry.ciid, quantity=entry.quantity)
        for entry in sorted(state.aggregate.entries(section), key=lambda e: (e.cid, e.ciid))
    ]


def build_snapshot(state: DeckState, metadata: DeckInfo, with_order: bool = True) -> DeckSnapshot:
    sections = {
        section: SectionContents(
            display=state.display_keys(section) if with_order else None,
            aggregate=_sorted_aggregate(state, section),
        )
        for section in CAPPED_SECTIONS
    }
    return DeckSnapshot(
        dno=metadata.dno,
        name=metadata.name,
        comment=metadata.comment,
        category=list(metadata.category),
        tags=list(metadata.tags),
        sections=sections,
    )


def capture_snapshot(state: DeckState, metadata: DeckInfo) -> str:
    """Serialize the current deck for later comparison."""
    return build_snapshot(state, metadata).model_dump_json()


def capture_snapshot_without_order(state: DeckState, metadata: DeckInfo) -> str:
    """Like capture_snapshot, but blind to display order."""
    return build_snapshot(state, metadata, with_order=False).model_dump_json()


def strip_order(snapshot: str) -> str:
    """Order-blind form of a snapshot captured with capture_snapshot."""
    return DeckSnapshot.model_validate_json(snapshot).without_order().model_dump_json()


def has_unsaved_changes(state: DeckState, metadata: DeckInfo, saved_snapshot: str | None) -> bool:
    """False when there is nothing to compare against."""
    if saved_snapshot is None:
        return False
    return capture_snapshot(state, metadata) != saved_snapshot


def has_only_sort_order_changes(
    state: DeckState, metadata: DeckInfo, saved_snapshot: str | None
) -> bool:
    """
    True when the deck differs from the saved one in display order only.

    Same cards, same quantities, same metadata; some section was reordered,
    shuffled or sorted.
    """
    if saved_snapshot is None or capture_snapshot(state, metadata) == saved_snapshot:
        return False
    return capture_snapshot_without_order(state, metadata) == strip_order(saved_snapshot)


def with_dno(snapshot: str, dno: int) -> str:
    """A snapshot as it would read had the deck already carried `dno`."""
    return DeckSnapshot.model_validate_json(snapshot).model_copy(update={"dno": dno}).model_dump_json()
