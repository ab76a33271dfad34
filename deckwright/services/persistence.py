"""
Persistence gateway.

The editor talks to storage only through `PersistenceGateway`. Database
errors stop here: they are logged and turned into a STORAGE_SAVE_FAILED
result so the caller can keep editing and retry.
"""

import logging
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError

from deckwright.db.database import SessionFactory, async_session_factory, session_scope
from deckwright.db.operations import (
    create_deck,
    deck_to_info,
    delete_deck,
    get_deck,
    save_deck_info,
)
from deckwright.models.deck import DeckInfo
from deckwright.models.failure import ErrorKind, OperationResult

logger = logging.getLogger(__name__)


class PersistenceGateway(Protocol):
    async def save(self, deck_info: DeckInfo) -> OperationResult: ...

    async def load(self, dno: int) -> DeckInfo | None: ...

    async def create(self) -> int: ...

    async def delete(self, dno: int) -> bool: ...


class SqlPersistenceGateway:
    """PersistenceGateway over SQLAlchemy async sessions."""

    def __init__(self, session_factory: SessionFactory | None = None) -> None:
        self._session_factory = session_factory or async_session_factory

    async def save(self, deck_info: DeckInfo) -> OperationResult:
        try:
            async with session_scope(self._session_factory) as session:
                deck = await save_deck_info(session, deck_info)
                dno = deck.dno
        except SQLAlchemyError as e:
            logger.error(
                "deck_save_failed",
                extra={"dno": deck_info.dno, "error_type": type(e).__name__},
                exc_info=True,
            )
            return OperationResult.failure(ErrorKind.STORAGE_SAVE_FAILED, str(e))

        logger.info(
            "deck_saved",
            extra={
                "dno": dno,
                "main_count": sum(r.quantity for r in deck_info.main_deck),
                "extra_count": sum(r.quantity for r in deck_info.extra_deck),
                "side_count": sum(r.quantity for r in deck_info.side_deck),
            },
        )
        return OperationResult(success=True, changed=True, dno=dno)

    async def load(self, dno: int) -> DeckInfo | None:
        async with session_scope(self._session_factory) as session:
            deck = await get_deck(session, dno)
            if deck is None:
                logger.info("deck_not_found", extra={"dno": dno})
                return None
            return deck_to_info(deck)

    async def create(self) -> int:
        async with session_scope(self._session_factory) as session:
            deck = await create_deck(session)
            dno = deck.dno
        logger.info("deck_created", extra={"dno": dno})
        return dno

    async def delete(self, dno: int) -> bool:
        async with session_scope(self._session_factory) as session:
            deleted = await delete_deck(session, dno)
        if deleted:
            logger.info("deck_deleted", extra={"dno": dno})
        return deleted
