"""
Deck editor controller.

One controller owns one deck's editing session: the DeckState, the
operations that mutate it, the undo/redo history and the last saved
snapshot. Callers construct it and keep it; there is no global store.

Every public mutation returns an OperationResult. Accepted mutations are
recorded on the CommandStack; rejected ones and no-ops are not.
"""

import logging
import random

from deckwright.config import settings
from deckwright.editor import snapshot as snapshots
from deckwright.editor.commands import CommandStack
from deckwright.editor.conversion import (
    deck_info_from_state,
    metadata_only,
    placements_from_deck_info,
)
from deckwright.editor.operations import MutationOperations, Outcome
from deckwright.editor.sorting import Comparator, SortOptions
from deckwright.editor.state import DeckState
from deckwright.editor.validation import SEARCH, can_move_card, cids_over_limit, main_or_extra
from deckwright.models.card import CardInfo
from deckwright.models.deck import DeckAggregate, DeckInfo
from deckwright.models.failure import ErrorKind, OperationResult
from deckwright.models.placement import CAPPED_SECTIONS, Placement, Section, UuidAllocator
from deckwright.services.card_limits import CardLimitPolicy
from deckwright.services.card_metadata import CardMetadataResolver, InMemoryCardResolver
from deckwright.services.persistence import PersistenceGateway

logger = logging.getLogger(__name__)

SectionLike = Section | str


class DeckEditorController:
    """
    Editing session for a single deck.

    Args:
        resolver: Card metadata lookup; an empty in-memory resolver by default
        policy: Copy-limit policy; built from settings by default
        rng: Random source for shuffles (seed it for reproducible tests)
        max_history: Undo depth; settings.max_command_history by default
        gateway: Storage used by save/load when none is passed explicitly
    """

    def __init__(
        self,
        resolver: CardMetadataResolver | None = None,
        policy: CardLimitPolicy | None = None,
        rng: random.Random | None = None,
        max_history: int | None = None,
        gateway: PersistenceGateway | None = None,
    ) -> None:
        self.resolver = resolver if resolver is not None else InMemoryCardResolver()
        self.policy = policy or CardLimitPolicy(
            mode=settings.card_limit_mode, max_copies=settings.max_copies
        )
        self.state = DeckState()
        # Kept across loads so a uuid is never handed out twice in a session
        self.allocator = UuidAllocator()
        self.operations = MutationOperations(
            self.state, self.resolver, self.policy, self.allocator, rng
        )
        self.history = CommandStack(self.operations.sync, max_history)
        self.gateway = gateway
        self.metadata = DeckInfo()
        self.saved_snapshot: str | None = None

    def _commit(self, outcome: Outcome) -> OperationResult:
        if outcome.command is not None:
            command = self.history.record(outcome.command)
            logger.debug(
                "command_recorded",
                extra={"command": command.name, "sequence": command.sequence},
            )
        return outcome.result

    # --- Queries ---

    def section(self, section: SectionLike) -> list[Placement]:
        """Placements of a section in display order."""
        return self.state.section(Section.parse(section))

    def uuids(self, section: SectionLike) -> list[str]:
        return list(self.state.order[Section.parse(section)])

    @property
    def aggregate(self) -> DeckAggregate:
        """Read-only view; mutate only through the controller."""
        return self.state.aggregate.copy()

    def quantity(self, section: SectionLike, cid: str, ciid: int | None = None) -> int:
        return self.state.aggregate.quantity(Section.parse(section), cid, ciid)

    def total_copies(self, cid: str) -> int:
        """Copies of a card across main, extra and side."""
        return self.state.aggregate.capped_total(cid)

    def can_move_card(self, from_section: SectionLike, to_section: SectionLike, card: CardInfo) -> bool:
        """Drop-target check. `from_section` may be "search"."""
        source = from_section if from_section == SEARCH else Section.parse(from_section)
        return can_move_card(source, to_section, card)

    def limit_for(self, cid: str) -> int:
        """Copies of a card the policy allows across main, extra and side."""
        return self.policy.limit_for(cid, self.resolver.get(cid))

    def verify(self) -> None:
        """Recheck state consistency; raises InvariantViolationError on a defect."""
        self.operations.sync.verify(self.limit_for)

    # --- Mutations ---

    def add_card(self, card: CardInfo, section: SectionLike) -> OperationResult:
        return self._commit(self.operations.add_card(card, Section.parse(section)))

    def remove_card(
        self,
        cid: str,
        section: SectionLike,
        ciid: int | str | None = None,
        uuid: str | None = None,
    ) -> OperationResult:
        return self._commit(self.operations.remove_card(cid, Section.parse(section), ciid, uuid))

    def move_card(
        self,
        cid: str,
        from_section: SectionLike,
        to_section: SectionLike,
        uuid: str | None = None,
    ) -> OperationResult:
        return self._commit(
            self.operations.move_card(
                cid, Section.parse(from_section), Section.parse(to_section), uuid
            )
        )

    def move_card_with_position(
        self,
        cid: str,
        from_section: SectionLike,
        to_section: SectionLike,
        source_uuid: str,
        before_uuid: str | None = None,
    ) -> OperationResult:
        return self._commit(
            self.operations.move_card_with_position(
                cid,
                Section.parse(from_section),
                Section.parse(to_section),
                source_uuid,
                before_uuid,
            )
        )

    def reorder_within_section(
        self, section: SectionLike, uuid: str, before_uuid: str | None = None
    ) -> OperationResult:
        return self._commit(
            self.operations.reorder_within_section(Section.parse(section), uuid, before_uuid)
        )

    def shuffle_section(self, section: SectionLike) -> OperationResult:
        return self._commit(self.operations.shuffle_section(Section.parse(section)))

    def sort_section(
        self,
        section: SectionLike,
        comparator: Comparator | None = None,
        options: SortOptions | None = None,
    ) -> OperationResult:
        return self._commit(
            self.operations.sort_section(Section.parse(section), comparator, options)
        )

    def sort_all_sections(self, options: SortOptions | None = None) -> OperationResult:
        return self._commit(self.operations.sort_all_sections(options))

    def sort_for_official(self) -> OperationResult:
        return self._commit(self.operations.sort_for_official())

    # Shortcuts for context-menu and double-click actions

    def move_to_trash(
        self, cid: str, from_section: SectionLike, uuid: str | None = None
    ) -> OperationResult:
        return self.move_card(cid, from_section, Section.TRASH, uuid)

    def move_to_side(
        self, cid: str, from_section: SectionLike, uuid: str | None = None
    ) -> OperationResult:
        return self.move_card(cid, from_section, Section.SIDE, uuid)

    def move_to_main_or_extra(
        self, cid: str, from_section: SectionLike, uuid: str | None = None
    ) -> OperationResult:
        """Send a copy back to whichever of main or extra the card belongs in."""
        card = self.resolver.get(cid)
        if card is None:
            return OperationResult.failure(ErrorKind.CARD_NOT_FOUND, f"no metadata for {cid}")
        return self.move_card(cid, from_section, main_or_extra(card), uuid)

    def add_copy_to_main_or_extra(self, card: CardInfo) -> OperationResult:
        return self.add_card(card, main_or_extra(card))

    # --- History ---

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def undo(self) -> bool:
        command = self.history.undo()
        if command is None:
            return False
        logger.debug("command_undone", extra={"command": command.name, "sequence": command.sequence})
        return True

    def redo(self) -> bool:
        command = self.history.redo()
        if command is None:
            return False
        logger.debug("command_redone", extra={"command": command.name, "sequence": command.sequence})
        return True

    # --- Metadata ---

    @property
    def name(self) -> str:
        return self.metadata.name

    @name.setter
    def name(self, value: str) -> None:
        self.update_metadata(name=value)

    def update_metadata(
        self,
        name: str | None = None,
        comment: str | None = None,
        category: list[str] | None = None,
        tags: list[str] | None = None,
    ) -> None:
        """Change deck metadata. Not recorded in the undo history."""
        changes = {
            key: value
            for key, value in (
                ("name", name),
                ("comment", comment),
                ("category", category),
                ("tags", tags),
            )
            if value is not None
        }
        self.metadata = self.metadata.model_copy(update=changes)

    # --- Snapshots ---

    def capture_snapshot(self) -> str:
        return snapshots.capture_snapshot(self.state, self.metadata)

    def capture_snapshot_without_order(self) -> str:
        return snapshots.capture_snapshot_without_order(self.state, self.metadata)

    def mark_saved(self) -> None:
        """Treat the current deck as the saved baseline."""
        self.saved_snapshot = self.capture_snapshot()

    def has_unsaved_changes(self, saved_snapshot: str | None = None) -> bool:
        baseline = saved_snapshot if saved_snapshot is not None else self.saved_snapshot
        return snapshots.has_unsaved_changes(self.state, self.metadata, baseline)

    def has_only_sort_order_changes(self, saved_snapshot: str | None = None) -> bool:
        baseline = saved_snapshot if saved_snapshot is not None else self.saved_snapshot
        return snapshots.has_only_sort_order_changes(self.state, self.metadata, baseline)

    # --- Import / export ---

    def to_deck_info(self) -> DeckInfo:
        return deck_info_from_state(self.state, self.metadata)

    def load_deck_info(self, info: DeckInfo) -> OperationResult:
        """
        Replace the whole deck, clear the history and take a fresh baseline.

        Trash starts empty; it is never persisted. A deck holding more copies
        of a card than its limit is rejected with max_copies_reached and the
        current deck is kept.
        """
        placements = list(placements_from_deck_info(info, self.allocator))
        over = cids_over_limit(DeckAggregate.from_placements(placements), self.limit_for)
        if over:
            logger.warning("deck_load_rejected", extra={"dno": info.dno, "cids": over})
            return OperationResult.failure(
                ErrorKind.MAX_COPIES_REACHED, f"over the copy limit: {', '.join(over)}"
            )

        self.operations.sync.reset(placements)
        self.metadata = metadata_only(info)
        self.history.clear()
        self.mark_saved()
        logger.info(
            "deck_loaded",
            extra={
                "dno": info.dno,
                **{
                    f"{section.value}_count": self.state.length(section)
                    for section in CAPPED_SECTIONS
                },
            },
        )
        return OperationResult.ok()

    def _gateway(self, gateway: PersistenceGateway | None) -> PersistenceGateway:
        resolved = gateway or self.gateway
        if resolved is None:
            raise ValueError("No persistence gateway configured")
        return resolved

    async def save(self, gateway: PersistenceGateway | None = None) -> OperationResult:
        """
        Persist the deck.

        The DeckInfo and the snapshot are taken before the first await, so
        edits made while the save is in flight are neither written nor
        marked as saved. A failed save changes nothing locally.
        """
        store = self._gateway(gateway)
        info = self.to_deck_info()
        snapshot = self.capture_snapshot()

        result = await store.save(info)
        if not result.success:
            logger.warning("deck_save_rejected", extra={"dno": info.dno, "error": result.error})
            return result

        if result.dno is not None and result.dno != info.dno:
            # Newly created deck; the number belongs to the saved baseline too
            snapshot = snapshots.with_dno(snapshot, result.dno)
            self.metadata = self.metadata.model_copy(update={"dno": result.dno})
        self.saved_snapshot = snapshot
        return result

    async def load(self, dno: int, gateway: PersistenceGateway | None = None) -> bool:
        """
        Load a saved deck into this session.

        False when it does not exist or breaks the copy limit; the current
        deck is kept in both cases.
        """
        info = await self._gateway(gateway).load(dno)
        if info is None:
            return False
        return self.load_deck_info(info).success
