"""
Section eligibility and copy-limit rules.

Pure functions over card metadata and the aggregate; nothing here mutates
deck state.
"""

from collections.abc import Callable

from deckwright.editor.state import DeckState
from deckwright.models.card import CardInfo
from deckwright.models.deck import DeckAggregate
from deckwright.models.failure import ErrorKind
from deckwright.models.placement import Section
from deckwright.services.card_limits import CardLimitPolicy

# Pseudo-section used by drag sources outside the deck (search results)
SEARCH = "search"


def section_accepts(section: Section, card: CardInfo) -> bool:
    """
    Whether a card may sit in a section.

    Extra-deck monsters (fusion, synchro, xyz, link) go to extra, never main;
    everything else goes to main, never extra. Side and trash take anything.
    """
    match section:
        case Section.MAIN:
            return not card.is_extra_deck
        case Section.EXTRA:
            return card.is_extra_deck
        case Section.SIDE | Section.TRASH:
            return True


def can_move_card(from_section: Section | str, to_section: Section | str, card: CardInfo) -> bool:
    """
    Drop-target check for drag-and-drop feedback.

    `from_section` may be "search" for cards dragged in from search results.
    Nothing is ever dropped onto the trash, and anything dragged out of the
    trash is accepted wherever it lands; `move_to_trash` is the way in.
    """
    to = Section.parse(to_section)
    if from_section == SEARCH:
        return to is not Section.TRASH and section_accepts(to, card)
    if to is Section.TRASH:
        return False
    if Section.parse(from_section) is Section.TRASH:
        return True
    return section_accepts(to, card)


def main_or_extra(card: CardInfo) -> Section:
    """The deck section a card belongs to when it is not in side or trash."""
    return Section.EXTRA if card.is_extra_deck else Section.MAIN


def copies_after(
    state: DeckState, cid: str, to_section: Section, from_section: Section | None = None
) -> int:
    """
    Capped-section copies of `cid` once one copy lands in `to_section`.

    With `from_section` the copy is moved rather than created, so it stops
    counting toward its source.
    """
    total = state.aggregate.capped_total(cid)
    if from_section is not None and from_section.is_capped:
        total -= 1
    if to_section.is_capped:
        total += 1
    return total


def check_placement(
    state: DeckState,
    card: CardInfo,
    to_section: Section,
    policy: CardLimitPolicy,
    from_section: Section | None = None,
) -> ErrorKind | None:
    """
    Validate one copy of `card` arriving in `to_section`.

    Returns the failure kind, or None when the placement is allowed.
    Eligibility is checked before the copy limit.
    """
    if not section_accepts(to_section, card):
        return ErrorKind.INVALID_SECTION

    if to_section.is_capped:
        limit = policy.limit_for(card.cid, card)
        if copies_after(state, card.cid, to_section, from_section) > limit:
            return ErrorKind.MAX_COPIES_REACHED

    return None


def cids_over_limit(aggregate: DeckAggregate, limit_for: Callable[[str], int]) -> list[str]:
    """Cids holding more copies across main, extra and side than their limit."""
    return sorted(
        cid for cid in aggregate.capped_cids() if aggregate.capped_total(cid) > limit_for(cid)
    )
