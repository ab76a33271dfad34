from deckwright.db.database import init_db, make_engine, make_session_factory, session_scope
from deckwright.db.operations import (
    create_deck,
    deck_to_info,
    delete_deck,
    get_deck,
    list_decks,
    save_deck_info,
)

__all__ = [
    "create_deck",
    "deck_to_info",
    "delete_deck",
    "get_deck",
    "init_db",
    "list_decks",
    "make_engine",
    "make_session_factory",
    "save_deck_info",
    "session_scope",
]
