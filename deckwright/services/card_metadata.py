"""
Card metadata service.

Read-only lookup of a card's kind, race, attribute, level and extra-deck
eligibility, keyed by cid. The editor consults it for section eligibility
checks and sort keys; fetching the data from the card site is out of scope,
so the resolver is fed from a JSON card file or by registering cards as the
user adds them.
"""

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Protocol

from deckwright.models.card import CardInfo, card_from_dict

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent.parent / "data"


class CardMetadataResolver(Protocol):
    """Anything that can answer `get(cid)` with card metadata or None."""

    def get(self, cid: str) -> CardInfo | None: ...


class InMemoryCardResolver:
    """
    Dict-backed resolver.

    `register` is how the editor remembers cards the user adds from search
    results, so later moves and sorts can see their metadata.
    """

    def __init__(self, cards: Iterable[CardInfo] = ()) -> None:
        self._cards: dict[str, CardInfo] = {}
        for card in cards:
            self.register(card)

    def get(self, cid: str) -> CardInfo | None:
        return self._cards.get(cid)

    def register(self, card: CardInfo) -> None:
        self._cards[card.cid] = card

    def __contains__(self, cid: object) -> bool:
        return cid in self._cards

    def __len__(self) -> int:
        return len(self._cards)


def load_card_database(path: Path | None = None) -> dict[str, CardInfo]:
    """
    Load card metadata from a JSON file.

    The file holds a list of card records (`cid`, `name`, `cardType`, ...).
    Records that cannot be parsed are skipped and logged.

    Args:
        path: Path to JSON file. Defaults to data/cards.json

    Returns:
        Dict mapping cid to card metadata (first record wins).

    Raises:
        FileNotFoundError: If the card file doesn't exist
    """
    if path is None:
        path = DATA_DIR / "cards.json"

    if not path.exists():
        raise FileNotFoundError(f"Card database not found at {path}.")

    with open(path, encoding="utf-8") as f:
        records: list[dict[str, Any]] = json.load(f)

    db: dict[str, CardInfo] = {}
    skipped = 0
    for record in records:
        try:
            card = card_from_dict(record)
        except (KeyError, ValueError):
            skipped += 1
            continue
        if card.cid not in db:
            db[card.cid] = card

    if skipped:
        logger.warning(
            "card_records_skipped",
            extra={"path": str(path), "skipped_count": skipped, "loaded_count": len(db)},
        )

    return db


def load_card_resolver(path: Path | None = None) -> InMemoryCardResolver:
    """Build a resolver preloaded from a JSON card file."""
    return InMemoryCardResolver(load_card_database(path).values())
