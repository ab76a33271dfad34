"""
Per-card copy limits.

The deck-wide rule is at most MAX_COPIES copies of a cid across main, extra
and side. In "regulation" mode the forbidden/limited list lowers that cap for
individual cards; it can never raise it.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Literal

from deckwright.config import MAX_COPIES
from deckwright.models.card import CardInfo, LimitRegulation

REGULATION_LIMITS: dict[LimitRegulation, int] = {
    LimitRegulation.FORBIDDEN: 0,
    LimitRegulation.LIMITED: 1,
    LimitRegulation.SEMI_LIMITED: 2,
}

LimitMode = Literal["all_3", "regulation"]


@dataclass(frozen=True)
class RegulationList:
    """
    A forbidden/limited list in effect from a given date.

    Attributes:
        regulations: cid -> regulation for every listed card
        effective_date: ISO date the list applies from (informational)
    """

    regulations: Mapping[str, LimitRegulation] = field(default_factory=dict)
    effective_date: str = ""

    def regulation_for(self, cid: str) -> LimitRegulation | None:
        return self.regulations.get(cid)


@dataclass(frozen=True)
class CardLimitPolicy:
    """Decides how many copies of a card a deck may hold."""

    mode: LimitMode = "all_3"
    regulation_list: RegulationList = field(default_factory=RegulationList)
    max_copies: int = MAX_COPIES

    def limit_for(self, cid: str, card: CardInfo | None = None) -> int:
        if self.mode == "all_3":
            return self.max_copies

        regulation = self.regulation_list.regulation_for(cid)
        if regulation is None and card is not None:
            regulation = card.limit
        if regulation is None:
            return self.max_copies
        return min(self.max_copies, REGULATION_LIMITS[regulation])
