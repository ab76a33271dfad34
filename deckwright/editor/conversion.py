"""
Conversion between editor state and the storage-shaped DeckInfo.

Export walks the display order and emits one record per (cid, ciid) pair in
order of first appearance, with the aggregate quantity. Import expands each
record back into that many placements with fresh uuids, so a reloaded deck
shows copies of the same artwork grouped together.
"""

from collections.abc import Iterator

from deckwright.editor.state import DeckState
from deckwright.models.deck import DeckCardRecord, DeckInfo
from deckwright.models.placement import CAPPED_SECTIONS, Placement, Section, UuidAllocator


def section_records(state: DeckState, section: Section) -> list[DeckCardRecord]:
    seen: set[tuple[str, int]] = set()
    records: list[DeckCardRecord] = []
    for key in state.display_keys(section):
        if key in seen:
            continue
        seen.add(key)
        cid, ciid = key
        records.append(
            DeckCardRecord(
                cid=cid, ciid=ciid, quantity=state.aggregate.quantity(section, cid, ciid)
            )
        )
    return records


def deck_info_from_state(state: DeckState, metadata: DeckInfo) -> DeckInfo:
    """Flatten the deck for saving. Trash is dropped."""
    return metadata.model_copy(
        update={
            "main_deck": section_records(state, Section.MAIN),
            "extra_deck": section_records(state, Section.EXTRA),
            "side_deck": section_records(state, Section.SIDE),
        },
        deep=True,
    )


def placements_from_deck_info(info: DeckInfo, allocator: UuidAllocator) -> Iterator[Placement]:
    for section in CAPPED_SECTIONS:
        for record in info.records(section):
            for _ in range(record.quantity):
                yield Placement(
                    uuid=allocator.allocate(record.cid, record.ciid),
                    cid=record.cid,
                    ciid=record.ciid,
                    section=section,
                )


def metadata_only(info: DeckInfo) -> DeckInfo:
    """DeckInfo with its card lists emptied; the editor keeps cards in DeckState."""
    return info.model_copy(update={"main_deck": [], "extra_deck": [], "side_deck": []}, deep=True)
