"""
Deck card ordering.

`create_deck_card_comparator` builds the cmp-style comparator used by
`sort_section`. Python's sort is stable, so placements that compare equal on
every key keep their relative order.

Default priority:
1. Card kind: monster < spell < trap (cards without metadata last)
2. Head placement list order (optional)
3. Priority cards before the rest, then by copies held (optional)
4. Tail placement cards after the rest (optional)
5. Monsters: fusion < synchro < xyz < link < other, then level/rank/link descending
6. Spells and traps: effect subtype, locale-aware
7. Card name, locale-aware, then cid ascending
"""

import locale
from collections import Counter
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from deckwright.models.card import (
    CardInfo,
    CardType,
    MonsterCard,
    MonsterType,
    SpellCard,
    TrapCard,
)
from deckwright.models.placement import Placement
from deckwright.services.card_metadata import CardMetadataResolver

Comparator = Callable[[Placement, Placement], int]

KIND_ORDER: dict[CardType, int] = {
    CardType.MONSTER: 0,
    CardType.SPELL: 1,
    CardType.TRAP: 2,
}
UNKNOWN_KIND = 999

MONSTER_TYPE_ORDER: dict[MonsterType, int] = {
    MonsterType.FUSION: 0,
    MonsterType.SYNCHRO: 1,
    MonsterType.XYZ: 2,
    MonsterType.LINK: 3,
}
OTHER_MONSTER_TYPE = 999


class SortMode(str, Enum):
    DEFAULT = "default"
    BY_RACE = "by_race"
    BY_ATTRIBUTE = "by_attribute"


@dataclass(frozen=True)
class SortOptions:
    """
    User preferences layered over the default order.

    Attributes:
        mode: Which ordering to apply
        head_cids: Cards pinned to the front of their kind, in this order
        priority_cids: Cards grouped ahead of the rest of their kind
        tail_cids: Cards pushed to the back of their kind
        sort_by_quantity: Within priority cards, more copies first
    """

    mode: SortMode = SortMode.DEFAULT
    head_cids: tuple[str, ...] = field(default_factory=tuple)
    priority_cids: frozenset[str] = field(default_factory=frozenset)
    tail_cids: frozenset[str] = field(default_factory=frozenset)
    sort_by_quantity: bool = False


def _cmp(a: object, b: object) -> int:
    return (a > b) - (a < b)  # type: ignore[operator]


def compare_text(a: str, b: str) -> int:
    """Locale-aware string comparison (collation of the process locale)."""
    if a == b:
        return 0
    return _cmp(locale.strxfrm(a), locale.strxfrm(b))


def compare_cid(a: str, b: str) -> int:
    """Numeric comparison when both cids are numeric, textual otherwise."""
    if a.isdigit() and b.isdigit():
        return _cmp(int(a), int(b))
    return _cmp(a, b)


def kind_rank(card: CardInfo | None) -> int:
    if card is None:
        return UNKNOWN_KIND
    return KIND_ORDER.get(card.card_type, UNKNOWN_KIND)


def monster_type_rank(card: MonsterCard) -> int:
    extra_type = card.extra_deck_type
    if extra_type is None:
        return OTHER_MONSTER_TYPE
    return MONSTER_TYPE_ORDER[extra_type]


def compare_cards(card_a: CardInfo, card_b: CardInfo) -> int:
    """Kind, monster type, level, effect subtype, then name."""
    diff = _cmp(kind_rank(card_a), kind_rank(card_b))
    if diff:
        return diff

    match card_a, card_b:
        case MonsterCard(), MonsterCard():
            diff = _cmp(monster_type_rank(card_a), monster_type_rank(card_b))
            if diff:
                return diff
            # Higher level/rank/link first
            diff = _cmp(card_b.level, card_a.level)
            if diff:
                return diff
        case (SpellCard(), SpellCard()) | (TrapCard(), TrapCard()):
            diff = compare_text(card_a.effect_type, card_b.effect_type)
            if diff:
                return diff

    diff = compare_text(card_a.name, card_b.name)
    if diff:
        return diff
    return compare_cid(card_a.cid, card_b.cid)


def create_deck_card_comparator(
    resolver: CardMetadataResolver,
    section: Sequence[Placement],
    options: SortOptions | None = None,
) -> Comparator:
    """
    Build the comparator for one section.

    Args:
        resolver: Card metadata lookup
        section: Placements being sorted (used for copy counts)
        options: Sort mode and placement preferences

    Returns:
        A cmp-style function for functools.cmp_to_key
    """
    options = options or SortOptions()
    copies = Counter(placement.cid for placement in section)

    def compare_unknown(a: Placement, b: Placement) -> int:
        # Cards without metadata sink below everything else, ordered by cid
        known_a = resolver.get(a.cid) is not None
        known_b = resolver.get(b.cid) is not None
        if known_a != known_b:
            return -1 if known_a else 1
        return compare_cid(a.cid, b.cid)

    def compare_grouped(a: Placement, b: Placement, attr: str) -> int:
        card_a = resolver.get(a.cid)
        card_b = resolver.get(b.cid)
        if card_a is None or card_b is None:
            return compare_unknown(a, b)

        if isinstance(card_a, MonsterCard) and isinstance(card_b, MonsterCard):
            diff = compare_text(getattr(card_a, attr), getattr(card_b, attr))
            if diff:
                return diff

        diff = _cmp(kind_rank(card_a), kind_rank(card_b))
        if diff:
            return diff
        return compare_cid(a.cid, b.cid)

    def compare_default(a: Placement, b: Placement) -> int:
        card_a = resolver.get(a.cid)
        card_b = resolver.get(b.cid)
        if card_a is None or card_b is None:
            return compare_unknown(a, b)

        diff = _cmp(kind_rank(card_a), kind_rank(card_b))
        if diff:
            return diff

        if options.head_cids:
            in_head_a = a.cid in options.head_cids
            in_head_b = b.cid in options.head_cids
            if in_head_a and in_head_b:
                diff = _cmp(options.head_cids.index(a.cid), options.head_cids.index(b.cid))
                if diff:
                    return diff
            elif in_head_a != in_head_b:
                return -1 if in_head_a else 1

        if options.priority_cids:
            priority_a = a.cid in options.priority_cids
            priority_b = b.cid in options.priority_cids
            if priority_a != priority_b:
                return -1 if priority_a else 1
            if priority_a and options.sort_by_quantity:
                # More copies first
                diff = _cmp(copies[b.cid], copies[a.cid])
                if diff:
                    return diff

        if options.tail_cids:
            tail_a = a.cid in options.tail_cids
            tail_b = b.cid in options.tail_cids
            if tail_a != tail_b:
                return 1 if tail_a else -1

        return compare_cards(card_a, card_b)

    match options.mode:
        case SortMode.BY_RACE:
            return lambda a, b: compare_grouped(a, b, "race")
        case SortMode.BY_ATTRIBUTE:
            return lambda a, b: compare_grouped(a, b, "attribute")
        case _:
            return compare_default


def official_order(resolver: CardMetadataResolver, section: Sequence[Placement]) -> list[Placement]:
    """
    Order a section the way the card site stores decks.

    Card kind first (monster, spell, trap; unknown cards count as monsters),
    then the position where each cid first appears, so copies of a card end
    up grouped. Image variants are never changed.
    """
    first_seen: dict[str, int] = {}
    for index, placement in enumerate(section):
        first_seen.setdefault(placement.cid, index)

    def key(placement: Placement) -> tuple[int, int]:
        card = resolver.get(placement.cid)
        rank = KIND_ORDER[card.card_type] if card is not None else 0
        return (rank, first_seen[placement.cid])

    return sorted(section, key=key)
