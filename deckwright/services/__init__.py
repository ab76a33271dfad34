"""
Deckwright services.

Card metadata lookup, copy-limit policy and deck persistence.
"""

from deckwright.services.card_limits import CardLimitPolicy, RegulationList
from deckwright.services.card_metadata import (
    CardMetadataResolver,
    InMemoryCardResolver,
    load_card_database,
    load_card_resolver,
)
from deckwright.services.persistence import PersistenceGateway, SqlPersistenceGateway

__all__ = [
    "CardLimitPolicy",
    "CardMetadataResolver",
    "InMemoryCardResolver",
    "PersistenceGateway",
    "RegulationList",
    "SqlPersistenceGateway",
    "load_card_database",
    "load_card_resolver",
]
