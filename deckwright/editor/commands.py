"""
Undo/redo history.

Every accepted mutation is recorded as a Command. Cheap, exactly invertible
mutations (add, remove, move, reorder) keep the placement and index they
touched and replay through Synchronizer primitives, so redo re-creates the
same uuid at the same position. Mutations whose inverse is not cheap
(positional move, shuffle, sort) keep before/after snapshots of every section
they touched.

History is linear: recording a command while redo entries exist discards
them.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from deckwright.config import settings
from deckwright.editor.state import SectionSnapshot
from deckwright.editor.synchronizer import Synchronizer
from deckwright.models.placement import Placement, Section

logger = logging.getLogger(__name__)


@dataclass
class Command(ABC):
    """
    A recorded mutation.

    Attributes:
        name: Operation that produced it (e.g., "add_card")
        args: Arguments the operation was called with, for inspection
        sequence: Position in the session's history, assigned on record
    """

    name: str
    args: dict[str, Any] = field(default_factory=dict)
    sequence: int = field(default=-1, init=False)

    @abstractmethod
    def execute(self, sync: Synchronizer) -> None:
        """Re-apply the forward effect."""

    @abstractmethod
    def undo(self, sync: Synchronizer) -> None:
        """Apply the inverse effect."""


@dataclass
class AddCardCommand(Command):
    placement: Placement = field(kw_only=True)
    index: int = field(kw_only=True)

    def execute(self, sync: Synchronizer) -> None:
        sync.insert(self.placement, self.index)

    def undo(self, sync: Synchronizer) -> None:
        sync.detach(self.placement.uuid)


@dataclass
class RemoveCardCommand(Command):
    placement: Placement = field(kw_only=True)
    index: int = field(kw_only=True)

    def execute(self, sync: Synchronizer) -> None:
        sync.detach(self.placement.uuid)

    def undo(self, sync: Synchronizer) -> None:
        sync.insert(self.placement, self.index)


@dataclass
class MoveCardCommand(Command):
    uuid: str = field(kw_only=True)
    from_section: Section = field(kw_only=True)
    to_section: Section = field(kw_only=True)
    from_index: int = field(kw_only=True)
    to_index: int = field(kw_only=True)

    def execute(self, sync: Synchronizer) -> None:
        sync.relocate(self.uuid, self.to_section, self.to_index)

    def undo(self, sync: Synchronizer) -> None:
        sync.relocate(self.uuid, self.from_section, self.from_index)


@dataclass
class ReorderCommand(Command):
    uuid: str = field(kw_only=True)
    from_index: int = field(kw_only=True)
    to_index: int = field(kw_only=True)

    def execute(self, sync: Synchronizer) -> None:
        sync.reposition(self.uuid, self.to_index)

    def undo(self, sync: Synchronizer) -> None:
        sync.reposition(self.uuid, self.from_index)


@dataclass
class SnapshotCommand(Command):
    """Swaps whole sections between their before and after contents."""

    before: dict[Section, SectionSnapshot] = field(kw_only=True)
    after: dict[Section, SectionSnapshot] = field(kw_only=True)

    def execute(self, sync: Synchronizer) -> None:
        sync.restore(self.after)

    def undo(self, sync: Synchronizer) -> None:
        sync.restore(self.before)


class CommandStack:
    """
    Bounded linear history.

    Commands are held in an arena keyed by sequence number; `_cursor` is the
    sequence of the most recently applied command, and everything above it is
    redoable.
    """

    def __init__(self, sync: Synchronizer, max_history: int | None = None) -> None:
        self._sync = sync
        self._max_history = max_history or settings.max_command_history
        self._commands: dict[int, Command] = {}
        self._first = 0
        self._cursor = -1
        self._next_sequence = 0

    @property
    def can_undo(self) -> bool:
        return self._cursor >= self._first

    @property
    def can_redo(self) -> bool:
        return self._cursor + 1 in self._commands

    def __len__(self) -> int:
        return len(self._commands)

    def record(self, command: Command) -> Command:
        """Append an already-applied command, discarding any redo entries."""
        for sequence in range(self._cursor + 1, self._next_sequence):
            self._commands.pop(sequence, None)

        command.sequence = self._cursor + 1
        self._commands[command.sequence] = command
        self._cursor = command.sequence
        self._next_sequence = command.sequence + 1

        overflow = len(self._commands) - self._max_history
        if overflow > 0:
            for sequence in range(self._first, self._first + overflow):
                del self._commands[sequence]
            self._first += overflow
            logger.debug(
                "command_history_trimmed",
                extra={"trimmed": overflow, "history_size": len(self._commands)},
            )
        return command

    def undo(self) -> Command | None:
        if not self.can_undo:
            logger.warning("undo_unavailable")
            return None
        command = self._commands[self._cursor]
        command.undo(self._sync)
        self._cursor -= 1
        return command

    def redo(self) -> Command | None:
        if not self.can_redo:
            logger.warning("redo_unavailable")
            return None
        command = self._commands[self._cursor + 1]
        command.execute(self._sync)
        self._cursor += 1
        return command

    def clear(self) -> None:
        self._commands.clear()
        self._first = 0
        self._cursor = -1
        self._next_sequence = 0

    def history(self) -> list[Command]:
        """Recorded commands, oldest first (applied and redoable)."""
        return [self._commands[sequence] for sequence in sorted(self._commands)]
