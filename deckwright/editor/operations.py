"""
Deck mutation operations.

Each operation validates first and only then touches state, so a failed
operation leaves the deck exactly as it was. Expected failures come back as
an OperationResult; they are never raised.

An accepted operation also returns the Command that can undo and redo it.
The controller decides whether to record it.
"""

import functools
import logging
import random
from typing import NamedTuple

from deckwright.editor.commands import (
    AddCardCommand,
    Command,
    MoveCardCommand,
    RemoveCardCommand,
    ReorderCommand,
    SnapshotCommand,
)
from deckwright.editor.sorting import (
    Comparator,
    SortOptions,
    create_deck_card_comparator,
    official_order,
)
from deckwright.editor.state import DeckState
from deckwright.editor.synchronizer import Synchronizer
from deckwright.editor.validation import check_placement
from deckwright.models.card import CardInfo, normalize_ciid
from deckwright.models.failure import ErrorKind, OperationResult
from deckwright.models.placement import CAPPED_SECTIONS, Placement, Section, UuidAllocator
from deckwright.services.card_limits import CardLimitPolicy
from deckwright.services.card_metadata import CardMetadataResolver, InMemoryCardResolver

logger = logging.getLogger(__name__)


class Outcome(NamedTuple):
    result: OperationResult
    command: Command | None = None


def _rejected(error: ErrorKind, detail: str, **context: object) -> Outcome:
    logger.debug("operation_rejected", extra={"error": error.value, "detail": detail, **context})
    return Outcome(OperationResult.failure(error, detail))


def fisher_yates_shuffle(items: list[str], rng: random.Random) -> list[str]:
    """
    Uniform in-place-style shuffle on a copy.

    For i from len-1 down to 1, swap element i with a uniformly chosen
    element at index 0..i.
    """
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


class MutationOperations:
    def __init__(
        self,
        state: DeckState,
        resolver: CardMetadataResolver,
        policy: CardLimitPolicy,
        allocator: UuidAllocator,
        rng: random.Random | None = None,
    ) -> None:
        self.state = state
        self.sync = Synchronizer(state)
        self.resolver = resolver
        self.policy = policy
        self.allocator = allocator
        self.rng = rng or random.Random()

    # --- Add / remove ---

    def add_card(self, card: CardInfo, section: Section) -> Outcome:
        """Append a new copy of `card` to the end of `section` and remember its metadata."""
        ciid = normalize_ciid(card.ciid)
        error = check_placement(self.state, card, section, self.policy)
        if error is not None:
            return _rejected(error, f"cannot add {card.cid} to {section.value}", cid=card.cid)

        placement = Placement(
            uuid=self.allocator.allocate(card.cid, ciid),
            cid=card.cid,
            ciid=ciid,
            section=section,
        )
        index = self.sync.insert(placement)
        if isinstance(self.resolver, InMemoryCardResolver):
            self.resolver.register(card)
        command = AddCardCommand(
            name="add_card",
            args={"cid": card.cid, "ciid": ciid, "section": section},
            placement=placement,
            index=index,
        )
        return Outcome(OperationResult.ok(uuid=placement.uuid), command)

    def remove_card(
        self,
        cid: str,
        section: Section,
        ciid: int | str | None = None,
        uuid: str | None = None,
    ) -> Outcome:
        """
        Remove one copy of `cid` from `section`.

        With `uuid` that exact copy is removed; otherwise the last copy in
        display order matching `cid` (and `ciid` when given). Nothing
        matching is a successful no-op.
        """
        if uuid is not None:
            target = self.state.get(uuid)
            if target is None or target.section is not section or target.cid != cid:
                return Outcome(OperationResult.noop())
        else:
            wanted_ciid = normalize_ciid(ciid) if ciid is not None else None
            target = self.state.last_match(section, cid, wanted_ciid)
            if target is None:
                return Outcome(OperationResult.noop())

        placement, index = self.sync.detach(target.uuid)
        command = RemoveCardCommand(
            name="remove_card",
            args={"cid": cid, "section": section, "ciid": ciid, "uuid": uuid},
            placement=placement,
            index=index,
        )
        return Outcome(OperationResult.ok(uuid=placement.uuid), command)

    # --- Moves ---

    def _check_move(self, placement: Placement, from_section: Section, to: Section) -> Outcome | None:
        card = self.resolver.get(placement.cid)
        if card is None:
            return _rejected(
                ErrorKind.CARD_NOT_FOUND, f"no metadata for {placement.cid}", cid=placement.cid
            )
        error = check_placement(self.state, card, to, self.policy, from_section=from_section)
        if error is not None:
            return _rejected(
                error,
                f"cannot move {placement.cid} from {from_section.value} to {to.value}",
                cid=placement.cid,
            )
        return None

    def move_card(
        self, cid: str, from_section: Section, to: Section, uuid: str | None = None
    ) -> Outcome:
        """
        Move one copy of `cid` to the end of `to`, keeping its uuid.

        Without `uuid` the first matching copy in `from_section` moves.
        """
        if uuid is not None:
            placement = self.state.get(uuid)
            if placement is None or placement.section is not from_section or placement.cid != cid:
                placement = None
        else:
            placement = self.state.first_match(from_section, cid)
        if placement is None:
            return _rejected(
                ErrorKind.CARD_NOT_FOUND, f"{cid} not in {from_section.value}", cid=cid
            )

        rejected = self._check_move(placement, from_section, to)
        if rejected is not None:
            return rejected

        moved, from_index = self.sync.relocate(placement.uuid, to)
        command = MoveCardCommand(
            name="move_card",
            args={"cid": cid, "from": from_section, "to": to, "uuid": uuid},
            uuid=moved.uuid,
            from_section=from_section,
            to_section=to,
            from_index=from_index,
            to_index=self.state.index_of(to, moved.uuid),
        )
        return Outcome(OperationResult.ok(uuid=moved.uuid), command)

    def move_card_with_position(
        self,
        cid: str,
        from_section: Section,
        to: Section,
        source_uuid: str,
        before_uuid: str | None,
    ) -> Outcome:
        """
        Drag-and-drop move: insert before `before_uuid` in `to`, or at its end.

        Both anchors must exist; otherwise nothing moves.
        """
        placement = self.state.get(source_uuid)
        if placement is None or placement.section is not from_section or placement.cid != cid:
            return _rejected(
                ErrorKind.CARD_NOT_FOUND, f"{source_uuid} not in {from_section.value}", cid=cid
            )
        if before_uuid is not None and not self.state.contains(to, before_uuid):
            return _rejected(ErrorKind.CARD_NOT_FOUND, f"{before_uuid} not in {to.value}", cid=cid)

        if from_section is to:
            return self.reorder_within_section(to, source_uuid, before_uuid, name="move_card_with_position")

        rejected = self._check_move(placement, from_section, to)
        if rejected is not None:
            return rejected

        touched = (from_section, to)
        before = self.state.snapshot_sections(touched)
        index = None if before_uuid is None else self.state.index_of(to, before_uuid)
        self.sync.relocate(source_uuid, to, index)
        command = SnapshotCommand(
            name="move_card_with_position",
            args={
                "cid": cid,
                "from": from_section,
                "to": to,
                "source_uuid": source_uuid,
                "before_uuid": before_uuid,
            },
            before=before,
            after=self.state.snapshot_sections(touched),
        )
        return Outcome(OperationResult.ok(uuid=source_uuid), command)

    # --- Permutations ---

    def reorder_within_section(
        self,
        section: Section,
        uuid: str,
        before_uuid: str | None,
        name: str = "reorder_within_section",
    ) -> Outcome:
        """Move a copy to just before `before_uuid` (end when None). Aggregate untouched."""
        if not self.state.contains(section, uuid):
            return _rejected(ErrorKind.CARD_NOT_FOUND, f"{uuid} not in {section.value}")
        if before_uuid is not None and not self.state.contains(section, before_uuid):
            return _rejected(ErrorKind.CARD_NOT_FOUND, f"{before_uuid} not in {section.value}")
        if before_uuid == uuid:
            return Outcome(OperationResult.noop())

        from_index = self.state.index_of(section, uuid)
        if before_uuid is None:
            target = None
        else:
            target = self.state.index_of(section, before_uuid)
            # The anchor shifts left once the moving copy is taken out ahead of it
            if from_index < target:
                target -= 1
        to_index = self.sync.reposition(uuid, target)
        if to_index == from_index:
            return Outcome(OperationResult.ok(uuid=uuid, changed=False))

        command = ReorderCommand(
            name=name,
            args={"section": section, "uuid": uuid, "before_uuid": before_uuid},
            uuid=uuid,
            from_index=from_index,
            to_index=to_index,
        )
        return Outcome(OperationResult.ok(uuid=uuid), command)

    def _permute(self, name: str, new_orders: dict[Section, list[str]], **args: object) -> Outcome:
        """Install new orders for several sections as one snapshot command."""
        touched = tuple(new_orders)
        before = self.state.snapshot_sections(touched)
        for section, uuids in new_orders.items():
            self.sync.replace_section_order(section, uuids)
        after = self.state.snapshot_sections(touched)
        if after == before:
            return Outcome(OperationResult.ok(changed=False))
        command = SnapshotCommand(name=name, args=dict(args), before=before, after=after)
        return Outcome(OperationResult.ok(), command)

    def shuffle_section(self, section: Section) -> Outcome:
        """Uniformly random permutation of a section."""
        order = self.state.order[section]
        if len(order) < 2:
            return Outcome(OperationResult.noop())
        shuffled = fisher_yates_shuffle(order, self.rng)
        return self._permute("shuffle_section", {section: shuffled}, section=section)

    def _sorted_uuids(
        self,
        section: Section,
        comparator: Comparator | None,
        options: SortOptions | None,
    ) -> list[str]:
        placements = self.state.section(section)
        if comparator is None:
            comparator = create_deck_card_comparator(self.resolver, placements, options)
        ordered = sorted(placements, key=functools.cmp_to_key(comparator))
        return [placement.uuid for placement in ordered]

    def sort_section(
        self,
        section: Section,
        comparator: Comparator | None = None,
        options: SortOptions | None = None,
    ) -> Outcome:
        """Stable sort of a section with the deck order (or a custom comparator)."""
        if self.state.length(section) < 2:
            return Outcome(OperationResult.noop())
        new_order = self._sorted_uuids(section, comparator, options)
        return self._permute("sort_section", {section: new_order}, section=section)

    def sort_all_sections(self, options: SortOptions | None = None) -> Outcome:
        """Sort main, extra and side as a single undoable step."""
        new_orders = {
            section: self._sorted_uuids(section, None, options) for section in CAPPED_SECTIONS
        }
        return self._permute("sort_all_sections", new_orders)

    def sort_for_official(self) -> Outcome:
        """Reorder main, extra and side into the card site's storage order."""
        new_orders = {
            section: [p.uuid for p in official_order(self.resolver, self.state.section(section))]
            for section in CAPPED_SECTIONS
        }
        return self._permute("sort_for_official", new_orders)
