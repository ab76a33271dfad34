from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from deckwright.config import DEFAULT_CIID


class CardType(str, Enum):
    MONSTER = "monster"
    SPELL = "spell"
    TRAP = "trap"


class MonsterType(str, Enum):
    """Monster sub-types. Only the first four decide extra-deck eligibility."""

    FUSION = "fusion"
    SYNCHRO = "synchro"
    XYZ = "xyz"
    LINK = "link"
    RITUAL = "ritual"
    PENDULUM = "pendulum"
    EFFECT = "effect"
    NORMAL = "normal"
    TUNER = "tuner"


EXTRA_DECK_TYPES: tuple[MonsterType, ...] = (
    MonsterType.FUSION,
    MonsterType.SYNCHRO,
    MonsterType.XYZ,
    MonsterType.LINK,
)


class LimitRegulation(str, Enum):
    FORBIDDEN = "forbidden"
    LIMITED = "limited"
    SEMI_LIMITED = "semi_limited"


def normalize_ciid(value: Any) -> int:
    """
    Normalize an image variant id.

    Missing, empty, non-numeric and negative values map to DEFAULT_CIID.
    """
    if value is None or isinstance(value, bool):
        return DEFAULT_CIID
    if not isinstance(value, int):
        try:
            value = int(str(value).strip())
        except ValueError:
            return DEFAULT_CIID
    return value if value >= 0 else DEFAULT_CIID


@dataclass(frozen=True, slots=True)
class MonsterCard:
    """
    A monster card.

    Attributes:
        cid: Card identifier
        name: Card name as displayed
        ciid: Image variant id
        attribute: Monster attribute (e.g., "dark")
        race: Monster race (e.g., "dragon")
        level: Level, rank or link rating
        types: Monster sub-types; extra-deck eligibility is derived from them
        limit: Forbidden/limited regulation, if any
    """

    cid: str
    name: str
    ciid: int = DEFAULT_CIID
    attribute: str = ""
    race: str = ""
    level: int = 0
    types: tuple[MonsterType, ...] = field(default_factory=tuple)
    limit: LimitRegulation | None = None
    card_type: CardType = field(default=CardType.MONSTER, init=False)

    @property
    def is_extra_deck(self) -> bool:
        return any(t in EXTRA_DECK_TYPES for t in self.types)

    @property
    def extra_deck_type(self) -> MonsterType | None:
        """First extra-deck sub-type, in the order the types are listed."""
        for monster_type in self.types:
            if monster_type in EXTRA_DECK_TYPES:
                return monster_type
        return None


@dataclass(frozen=True, slots=True)
class SpellCard:
    cid: str
    name: str
    ciid: int = DEFAULT_CIID
    effect_type: str = ""
    limit: LimitRegulation | None = None
    card_type: CardType = field(default=CardType.SPELL, init=False)

    @property
    def is_extra_deck(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class TrapCard:
    cid: str
    name: str
    ciid: int = DEFAULT_CIID
    effect_type: str = ""
    limit: LimitRegulation | None = None
    card_type: CardType = field(default=CardType.TRAP, init=False)

    @property
    def is_extra_deck(self) -> bool:
        return False


CardInfo = MonsterCard | SpellCard | TrapCard


def card_from_dict(data: dict[str, Any]) -> CardInfo:
    """
    Build a card from a plain mapping (card database JSON record).

    Raises:
        ValueError: If cardType is missing or unknown
        KeyError: If cid or name is missing
    """
    card_type = CardType(data.get("cardType") or data.get("card_type"))
    cid = str(data["cid"])
    name = str(data["name"])
    ciid = normalize_ciid(data.get("ciid"))
    raw_limit = data.get("limit")
    limit = LimitRegulation(raw_limit.replace("-", "_")) if raw_limit else None

    match card_type:
        case CardType.MONSTER:
            return MonsterCard(
                cid=cid,
                name=name,
                ciid=ciid,
                attribute=data.get("attribute", ""),
                race=data.get("race", ""),
                level=int(data.get("level") or 0),
                types=tuple(MonsterType(t) for t in data.get("types", [])),
                limit=limit,
            )
        case CardType.SPELL:
            return SpellCard(
                cid=cid,
                name=name,
                ciid=ciid,
                effect_type=data.get("effectType", ""),
                limit=limit,
            )
        case CardType.TRAP:
            return TrapCard(
                cid=cid,
                name=name,
                ciid=ciid,
                effect_type=data.get("effectType", ""),
                limit=limit,
            )
