import random

import pytest

from deckwright.editor.controller import DeckEditorController
from deckwright.models.card import LimitRegulation, MonsterCard, MonsterType, SpellCard, TrapCard
from deckwright.services.card_limits import CardLimitPolicy
from deckwright.services.card_metadata import InMemoryCardResolver


@pytest.fixture
def dragon() -> MonsterCard:
    """A main-deck effect monster."""
    return MonsterCard(
        cid="4007",
        name="Blue-Eyes White Dragon",
        attribute="light",
        race="dragon",
        level=8,
        types=(MonsterType.NORMAL,),
    )


@pytest.fixture
def magician() -> MonsterCard:
    return MonsterCard(
        cid="4041",
        name="Dark Magician",
        attribute="dark",
        race="spellcaster",
        level=7,
        types=(MonsterType.NORMAL,),
    )


@pytest.fixture
def synchro() -> MonsterCard:
    """An extra-deck-only monster."""
    return MonsterCard(
        cid="9041",
        name="Stardust Dragon",
        attribute="wind",
        race="dragon",
        level=8,
        types=(MonsterType.SYNCHRO, MonsterType.EFFECT),
    )


@pytest.fixture
def link() -> MonsterCard:
    return MonsterCard(
        cid="13300",
        name="Accesscode Talker",
        attribute="dark",
        race="cyberse",
        level=4,
        types=(MonsterType.LINK, MonsterType.EFFECT),
    )


@pytest.fixture
def raigeki() -> SpellCard:
    return SpellCard(cid="4344", name="Raigeki", effect_type="normal")


@pytest.fixture
def pot() -> SpellCard:
    return SpellCard(
        cid="4844", name="Pot of Greed", effect_type="normal", limit=LimitRegulation.FORBIDDEN
    )


@pytest.fixture
def mirror_force() -> TrapCard:
    return TrapCard(cid="4861", name="Mirror Force", effect_type="normal")


@pytest.fixture
def resolver(
    dragon: MonsterCard,
    magician: MonsterCard,
    synchro: MonsterCard,
    link: MonsterCard,
    raigeki: SpellCard,
    pot: SpellCard,
    mirror_force: TrapCard,
) -> InMemoryCardResolver:
    return InMemoryCardResolver([dragon, magician, synchro, link, raigeki, pot, mirror_force])


@pytest.fixture
def editor(resolver: InMemoryCardResolver) -> DeckEditorController:
    """Editor with every sample card known and a seeded shuffle."""
    return DeckEditorController(
        resolver=resolver,
        policy=CardLimitPolicy(),
        rng=random.Random(1234),
        max_history=100,
    )
