"""
SQLAlchemy ORM models for persistent storage.

Models mirror DeckInfo but add database persistence. Trash is never stored.
"""

from datetime import datetime

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class DeckDB(Base):
    """
    A saved deck.

    `dno` is the deck number the editor loads and saves by.
    """

    __tablename__ = "decks"

    dno: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), default="")
    comment: Mapped[str] = mapped_column(Text, default="")

    # Free-form labels stored as JSON lists
    category: Mapped[list[str]] = mapped_column(JSON, default=list)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    cards: Mapped[list["DeckCardDB"]] = relationship(
        back_populates="deck",
        cascade="all, delete-orphan",
        order_by="DeckCardDB.position",
    )

    def __repr__(self) -> str:
        return f"<DeckDB(dno={self.dno}, name={self.name})>"


class DeckCardDB(Base):
    """
    One (cid, ciid) record of a deck section.

    `position` keeps the first-appearance order the editor exported.
    """

    __tablename__ = "deck_cards"
    __table_args__ = (
        UniqueConstraint("deck_dno", "section", "position", name="uq_deck_section_position"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    deck_dno: Mapped[int] = mapped_column(
        Integer, ForeignKey("decks.dno", ondelete="CASCADE"), index=True
    )
    section: Mapped[str] = mapped_column(String(16))
    position: Mapped[int] = mapped_column(Integer)
    cid: Mapped[str] = mapped_column(String(64), index=True)
    ciid: Mapped[int] = mapped_column(Integer, default=0)
    quantity: Mapped[int] = mapped_column(Integer, default=1)

    deck: Mapped["DeckDB"] = relationship(back_populates="cards")

    def __repr__(self) -> str:
        return f"<DeckCardDB(cid={self.cid}, section={self.section}, qty={self.quantity})>"
