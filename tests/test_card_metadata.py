import json
import logging
from pathlib import Path

import pytest

from deckwright.models.card import MonsterCard, SpellCard
from deckwright.services.card_metadata import (
    InMemoryCardResolver,
    load_card_database,
    load_card_resolver,
)


@pytest.fixture
def sample_cards() -> list[dict]:
    """Sample card database records."""
    return [
        {
            "cardType": "monster",
            "cid": "4007",
            "name": "Blue-Eyes White Dragon",
            "attribute": "light",
            "race": "dragon",
            "level": 8,
            "types": ["normal"],
        },
        {
            "cardType": "monster",
            "cid": "9041",
            "name": "Stardust Dragon",
            "level": 8,
            "types": ["synchro", "effect"],
        },
        {"cardType": "spell", "cid": "4344", "name": "Raigeki", "effectType": "normal"},
        {"cardType": "trap", "cid": "4861", "name": "Mirror Force", "ciid": "2"},
    ]


@pytest.fixture
def card_file(tmp_path: Path, sample_cards: list[dict]) -> Path:
    path = tmp_path / "cards.json"
    path.write_text(json.dumps(sample_cards), encoding="utf-8")
    return path


class TestLoadCardDatabase:
    def test_loads_by_cid(self, card_file: Path) -> None:
        db = load_card_database(card_file)
        assert set(db) == {"4007", "9041", "4344", "4861"}
        assert isinstance(db["4344"], SpellCard)
        assert db["9041"].is_extra_deck is True
        assert db["4861"].ciid == 2

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_card_database(tmp_path / "nope.json")

    def test_bad_records_skipped(
        self, tmp_path: Path, sample_cards: list[dict], caplog: pytest.LogCaptureFixture
    ) -> None:
        path = tmp_path / "cards.json"
        records = [*sample_cards, {"cardType": "token", "cid": "1", "name": "T"}, {"name": "x"}]
        path.write_text(json.dumps(records), encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            db = load_card_database(path)

        assert len(db) == 4
        assert "card_records_skipped" in caplog.text

    def test_first_record_wins(self, tmp_path: Path) -> None:
        path = tmp_path / "cards.json"
        records = [
            {"cardType": "spell", "cid": "1", "name": "First"},
            {"cardType": "spell", "cid": "1", "name": "Second"},
        ]
        path.write_text(json.dumps(records), encoding="utf-8")
        assert load_card_database(path)["1"].name == "First"


class TestInMemoryCardResolver:
    def test_get_and_register(self) -> None:
        resolver = InMemoryCardResolver()
        assert resolver.get("1") is None
        card = MonsterCard(cid="1", name="M")
        resolver.register(card)
        assert resolver.get("1") is card
        assert "1" in resolver
        assert len(resolver) == 1

    def test_load_card_resolver(self, card_file: Path) -> None:
        resolver = load_card_resolver(card_file)
        assert len(resolver) == 4
        assert resolver.get("4007").name == "Blue-Eyes White Dragon"
