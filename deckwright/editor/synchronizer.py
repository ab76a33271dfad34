"""
The single writer of DeckState.

Every primitive here updates the display order and the aggregate together
before returning, so no caller can observe one without the other.

INVARIANT: sum(aggregate[section]) == len(order[section]) for every section.
INVARIANT: every uuid sits in exactly one section's order, and the arena
holds exactly the uuids that appear in some order.
"""

import dataclasses
import logging
from collections.abc import Callable, Iterable, Mapping

from deckwright.editor.state import DeckState, SectionSnapshot
from deckwright.editor.validation import cids_over_limit
from deckwright.models.deck import DeckAggregate
from deckwright.models.failure import InvariantViolationError
from deckwright.models.placement import SECTIONS, Placement, Section

logger = logging.getLogger(__name__)


class Synchronizer:
    def __init__(self, state: DeckState) -> None:
        self.state = state

    # --- Aggregate maintenance ---

    @staticmethod
    def derive_aggregate(order: Mapping[Section, Iterable[Placement]]) -> DeckAggregate:
        """Recompute the aggregate from scratch for a display order."""
        aggregate = DeckAggregate()
        for section, placements in order.items():
            for placement in placements:
                aggregate.increment(section, placement.key)
        return aggregate

    def apply_delta(
        self,
        section: Section,
        placements_added: Iterable[Placement] = (),
        placements_removed: Iterable[Placement] = (),
    ) -> None:
        """Incrementally adjust one section's aggregate."""
        aggregate = self.state.aggregate
        for placement in placements_added:
            aggregate.increment(section, placement.key)
        for placement in placements_removed:
            aggregate.decrement(section, placement.key)

    # --- Placement primitives ---

    def insert(self, placement: Placement, index: int | None = None) -> int:
        """
        Put a placement into its section at `index` (end when None).

        Returns the index it landed on.
        """
        if placement.uuid in self.state.placements:
            raise InvariantViolationError("uuid uniqueness", f"{placement.uuid} already placed")

        order = self.state.order[placement.section]
        if index is None or index >= len(order):
            index = len(order)
            order.append(placement.uuid)
        else:
            index = max(index, 0)
            order.insert(index, placement.uuid)

        self.state.placements[placement.uuid] = placement
        self.apply_delta(placement.section, placements_added=(placement,))
        return index

    def detach(self, uuid: str) -> tuple[Placement, int]:
        """Take a placement out of the deck. Returns it with its former index."""
        placement = self.state.placements.get(uuid)
        if placement is None:
            raise InvariantViolationError("uuid present", f"{uuid} is not placed")

        order = self.state.order[placement.section]
        index = order.index(uuid)
        del order[index]
        del self.state.placements[uuid]
        self.apply_delta(placement.section, placements_removed=(placement,))
        return placement, index

    def relocate(self, uuid: str, to: Section, index: int | None = None) -> tuple[Placement, int]:
        """
        Move a placement to another section keeping its uuid.

        Returns the relocated placement and its index in the source section.
        """
        placement, from_index = self.detach(uuid)
        moved = dataclasses.replace(placement, section=to)
        self.insert(moved, index)
        return moved, from_index

    def reposition(self, uuid: str, index: int | None) -> int:
        """Move a placement within its own section. Aggregate is untouched."""
        placement = self.state.placements[uuid]
        order = self.state.order[placement.section]
        order.remove(uuid)
        if index is None or index >= len(order):
            order.append(uuid)
            return len(order) - 1
        order.insert(max(index, 0), uuid)
        return max(index, 0)

    def replace_section_order(self, section: Section, uuids: list[str]) -> None:
        """Install a permutation of a section's current order."""
        current = self.state.order[section]
        if sorted(current) != sorted(uuids):
            raise InvariantViolationError(
                "permutation", f"new order for {section.value} is not a permutation"
            )
        self.state.order[section] = list(uuids)

    def restore(self, snapshots: Mapping[Section, SectionSnapshot]) -> None:
        """
        Replace whole sections with previously captured contents.

        All sections a placement may have travelled between must be restored
        together, otherwise a uuid could end up in two places.
        """
        for section in snapshots:
            for uuid in self.state.order[section]:
                del self.state.placements[uuid]
            self.state.order[section] = []

        for section, placements in snapshots.items():
            for placement in placements:
                if placement.uuid in self.state.placements:
                    raise InvariantViolationError(
                        "uuid uniqueness", f"{placement.uuid} restored twice"
                    )
                self.state.placements[placement.uuid] = placement
                self.state.order[section].append(placement.uuid)

        restored = self.derive_aggregate(
            {section: self.state.section(section) for section in snapshots}
        )
        for section in snapshots:
            self.state.aggregate.quantities[section] = restored.quantities[section]

    def reset(self, placements: Iterable[Placement]) -> None:
        """Replace the whole deck (bulk load) and re-derive the aggregate."""
        self.state.placements.clear()
        for section in SECTIONS:
            self.state.order[section] = []
        for placement in placements:
            if placement.uuid in self.state.placements:
                raise InvariantViolationError("uuid uniqueness", f"{placement.uuid} loaded twice")
            self.state.placements[placement.uuid] = placement
            self.state.order[placement.section].append(placement.uuid)
        self.state.aggregate = self.derive_aggregate(
            {section: self.state.section(section) for section in SECTIONS}
        )

    # --- Checks ---

    def verify(self, limit_for: Callable[[str], int] | None = None) -> None:
        """
        Check the invariants against a full recomputation.

        Args:
            limit_for: Copy limit per cid; when given, copies across main,
                extra and side are checked against it as well

        Raises:
            InvariantViolationError: If the representations disagree or a
                card is over its limit
        """
        seen: set[str] = set()
        for section in SECTIONS:
            for uuid in self.state.order[section]:
                if uuid in seen:
                    raise InvariantViolationError("uuid uniqueness", f"{uuid} appears twice")
                seen.add(uuid)
                placement = self.state.placements.get(uuid)
                if placement is None or placement.section is not section:
                    raise InvariantViolationError(
                        "uuid placement", f"{uuid} is not recorded in {section.value}"
                    )
        if seen != set(self.state.placements):
            raise InvariantViolationError("no orphans", "arena holds unplaced uuids")

        expected = self.derive_aggregate(
            {section: self.state.section(section) for section in SECTIONS}
        )
        if expected != self.state.aggregate:
            logger.error(
                "aggregate_out_of_sync",
                extra={
                    f"{section.value}_total": self.state.aggregate.section_total(section)
                    for section in SECTIONS
                },
            )
            raise InvariantViolationError("aggregate matches display order")

        if limit_for is not None:
            over = cids_over_limit(self.state.aggregate, limit_for)
            if over:
                raise InvariantViolationError("copy limit", f"over the limit: {', '.join(over)}")
