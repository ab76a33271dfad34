"""
Database CRUD operations.

Provides async functions for creating, reading, saving and deleting decks,
and the conversions between DeckDB rows and DeckInfo.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from deckwright.models.db import DeckCardDB, DeckDB
from deckwright.models.deck import DeckCardRecord, DeckInfo
from deckwright.models.placement import CAPPED_SECTIONS, Section


async def get_deck(session: AsyncSession, dno: int) -> DeckDB | None:
    """
    Get a deck and its cards by deck number.

    Returns None if no deck has this number.
    """
    result = await session.execute(
        select(DeckDB).where(DeckDB.dno == dno).options(selectinload(DeckDB.cards))
    )
    return result.scalar_one_or_none()


async def list_decks(session: AsyncSession, limit: int = 100) -> list[DeckDB]:
    """Saved decks, most recently updated first. Cards are not loaded."""
    result = await session.execute(
        select(DeckDB).order_by(DeckDB.updated_at.desc(), DeckDB.dno.desc()).limit(limit)
    )
    return list(result.scalars().all())


async def create_deck(session: AsyncSession, name: str = "") -> DeckDB:
    """Create an empty deck and return it with its assigned deck number."""
    deck = DeckDB(name=name, comment="", category=[], tags=[], cards=[])
    session.add(deck)
    await session.flush()
    return deck


async def save_deck_info(session: AsyncSession, info: DeckInfo) -> DeckDB:
    """
    Write a deck's metadata and card lists, replacing what was stored.

    A deck number that is not stored yet (or 0) creates a new deck.
    """
    deck = await get_deck(session, info.dno) if info.dno else None
    if deck is None:
        # An initialized collection never triggers an async lazy load
        deck = DeckDB(dno=info.dno or None, cards=[])
        session.add(deck)

    deck.name = info.display_name()
    deck.comment = info.comment
    deck.category = list(info.category)
    deck.tags = list(info.tags)

    # Orphans are deleted on flush; flush before inserting so positions stay unique
    deck.cards.clear()
    await session.flush()

    for section in CAPPED_SECTIONS:
        for position, record in enumerate(info.records(section)):
            deck.cards.append(
                DeckCardDB(
                    section=section.value,
                    position=position,
                    cid=record.cid,
                    ciid=record.ciid,
                    quantity=record.quantity,
                )
            )

    await session.flush()
    return deck


def deck_to_info(deck: DeckDB) -> DeckInfo:
    """Convert a database deck to DeckInfo."""
    lists: dict[Section, list[DeckCardRecord]] = {section: [] for section in CAPPED_SECTIONS}
    for card in sorted(deck.cards, key=lambda c: (c.section, c.position)):
        lists[Section(card.section)].append(
            DeckCardRecord(cid=card.cid, ciid=card.ciid, quantity=card.quantity)
        )
    return DeckInfo(
        dno=deck.dno,
        name=deck.name,
        original_name=deck.name,
        comment=deck.comment,
        category=list(deck.category or []),
        tags=list(deck.tags or []),
        main_deck=lists[Section.MAIN],
        extra_deck=lists[Section.EXTRA],
        side_deck=lists[Section.SIDE],
    )


async def delete_deck(session: AsyncSession, dno: int) -> bool:
    """
    Delete a deck and its cards.

    Returns True if deleted, False if not found.
    """
    deck = await get_deck(session, dno)
    if not deck:
        return False

    await session.delete(deck)
    return True
