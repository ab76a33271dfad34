from deckwright.models.card import (
    EXTRA_DECK_TYPES,
    CardInfo,
    CardType,
    LimitRegulation,
    MonsterCard,
    MonsterType,
    SpellCard,
    TrapCard,
    card_from_dict,
    normalize_ciid,
)
from deckwright.models.deck import DeckAggregate, DeckAggregateEntry, DeckCardRecord, DeckInfo
from deckwright.models.failure import (
    STANDARD_MESSAGES,
    ErrorKind,
    InvariantViolationError,
    KnownError,
    OperationResult,
    UnknownSectionError,
)
from deckwright.models.placement import (
    CAPPED_SECTIONS,
    SECTIONS,
    Placement,
    Section,
    UuidAllocator,
)

__all__ = [
    "CAPPED_SECTIONS",
    "EXTRA_DECK_TYPES",
    "SECTIONS",
    "STANDARD_MESSAGES",
    "CardInfo",
    "CardType",
    "DeckAggregate",
    "DeckAggregateEntry",
    "DeckCardRecord",
    "DeckInfo",
    "ErrorKind",
    "InvariantViolationError",
    "KnownError",
    "LimitRegulation",
    "MonsterCard",
    "MonsterType",
    "OperationResult",
    "Placement",
    "Section",
    "SpellCard",
    "TrapCard",
    "UnknownSectionError",
    "UuidAllocator",
    "card_from_dict",
    "normalize_ciid",
]
