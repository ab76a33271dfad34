from deckwright.editor.commands import Command, CommandStack, SnapshotCommand
from deckwright.editor.controller import DeckEditorController
from deckwright.editor.operations import MutationOperations, Outcome
from deckwright.editor.sorting import SortMode, SortOptions, create_deck_card_comparator
from deckwright.editor.state import DeckState
from deckwright.editor.synchronizer import Synchronizer

__all__ = [
    "Command",
    "CommandStack",
    "DeckEditorController",
    "DeckState",
    "MutationOperations",
    "Outcome",
    "SnapshotCommand",
    "SortMode",
    "SortOptions",
    "Synchronizer",
    "create_deck_card_comparator",
]
