"""Tests for saving and loading decks through the persistence gateway."""

import asyncio
import logging

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from deckwright.db.database import init_db, make_session_factory
from deckwright.editor.controller import DeckEditorController
from deckwright.models.card import MonsterCard, SpellCard
from deckwright.models.deck import DeckCardRecord, DeckInfo
from deckwright.models.failure import ErrorKind, OperationResult
from deckwright.services.card_metadata import InMemoryCardResolver
from deckwright.services.persistence import SqlPersistenceGateway


@pytest.fixture
async def async_engine():
    """In-memory SQLite engine with the deck tables created, shared across sessions."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def gateway(async_engine: AsyncEngine) -> SqlPersistenceGateway:
    return SqlPersistenceGateway(make_session_factory(async_engine))


class BlockingGateway:
    """Holds every save until released, recording what it was asked to write."""

    def __init__(self) -> None:
        self.release = asyncio.Event()
        self.saved: list[DeckInfo] = []

    async def save(self, deck_info: DeckInfo) -> OperationResult:
        await self.release.wait()
        self.saved.append(deck_info)
        return OperationResult(success=True, changed=True, dno=deck_info.dno or 1)

    async def load(self, dno: int) -> DeckInfo | None:
        return None

    async def create(self) -> int:
        return 1

    async def delete(self, dno: int) -> bool:
        return False


class TestSqlPersistenceGateway:
    async def test_create_and_delete(self, gateway: SqlPersistenceGateway) -> None:
        dno = await gateway.create()
        assert dno > 0
        assert await gateway.load(dno) is not None
        assert await gateway.delete(dno) is True
        assert await gateway.load(dno) is None
        assert await gateway.delete(dno) is False

    async def test_load_missing(self, gateway: SqlPersistenceGateway) -> None:
        assert await gateway.load(404) is None

    async def test_save_failure_is_reported(self, caplog: pytest.LogCaptureFixture) -> None:
        # No tables: every statement fails
        engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
        broken = SqlPersistenceGateway(make_session_factory(engine))

        with caplog.at_level(logging.ERROR, logger="deckwright.services.persistence"):
            result = await broken.save(DeckInfo(name="Doomed"))

        assert result.success is False
        assert result.error is ErrorKind.STORAGE_SAVE_FAILED
        assert "deck_save_failed" in caplog.text
        await engine.dispose()


class TestControllerPersistence:
    async def test_save_and_reload(
        self,
        editor: DeckEditorController,
        gateway: SqlPersistenceGateway,
        resolver: InMemoryCardResolver,
        dragon: MonsterCard,
        synchro: MonsterCard,
        raigeki: SpellCard,
    ) -> None:
        editor.name = "Round Trip"
        for card in (raigeki, dragon, raigeki):
            editor.add_card(card, "main")
        editor.add_card(synchro, "extra")
        editor.add_card(dragon, "side")
        editor.add_card(dragon, "trash")

        result = await editor.save(gateway)

        assert result.success
        assert result.dno is not None
        assert editor.metadata.dno == result.dno
        assert editor.has_unsaved_changes() is False

        other = DeckEditorController(resolver=resolver)
        assert await other.load(result.dno, gateway) is True
        assert other.name == "Round Trip"
        assert [p.cid for p in other.section("main")] == [raigeki.cid, raigeki.cid, dragon.cid]
        assert other.quantity("extra", synchro.cid) == 1
        assert other.quantity("side", dragon.cid) == 1
        assert other.section("trash") == []
        assert other.to_deck_info().main_deck == editor.to_deck_info().main_deck

    async def test_save_overwrites(
        self, editor: DeckEditorController, gateway: SqlPersistenceGateway, dragon: MonsterCard
    ) -> None:
        editor.add_card(dragon, "main")
        first = await editor.save(gateway)
        editor.remove_card(dragon.cid, "main")
        second = await editor.save(gateway)

        assert second.dno == first.dno
        loaded = await gateway.load(first.dno)
        assert loaded is not None
        assert loaded.main_deck == []

    async def test_load_missing_deck(
        self, editor: DeckEditorController, gateway: SqlPersistenceGateway, dragon: MonsterCard
    ) -> None:
        editor.add_card(dragon, "main")
        assert await editor.load(999, gateway) is False
        assert editor.quantity("main", dragon.cid) == 1

    async def test_load_over_limit_deck(
        self, editor: DeckEditorController, gateway: SqlPersistenceGateway
    ) -> None:
        stored = await gateway.save(
            DeckInfo(
                name="Overfull",
                main_deck=[DeckCardRecord(cid="4007", quantity=3)],
                side_deck=[DeckCardRecord(cid="4007", quantity=1)],
            )
        )

        assert await editor.load(stored.dno, gateway) is False
        assert editor.section("main") == []
        assert editor.name == ""

    async def test_failed_save_keeps_state(
        self, editor: DeckEditorController, dragon: MonsterCard
    ) -> None:
        engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
        broken = SqlPersistenceGateway(make_session_factory(engine))
        editor.mark_saved()
        editor.add_card(dragon, "main")

        result = await editor.save(broken)

        assert result.error is ErrorKind.STORAGE_SAVE_FAILED
        assert editor.quantity("main", dragon.cid) == 1
        assert editor.has_unsaved_changes() is True
        assert editor.can_undo is True
        await engine.dispose()

    async def test_edits_during_save_stay_unsaved(
        self, editor: DeckEditorController, dragon: MonsterCard, raigeki: SpellCard
    ) -> None:
        blocking = BlockingGateway()
        editor.add_card(dragon, "main")

        pending = asyncio.create_task(editor.save(blocking))
        await asyncio.sleep(0)
        editor.add_card(raigeki, "main")
        blocking.release.set()
        result = await pending

        assert result.success
        written = blocking.saved[0]
        assert [r.cid for r in written.main_deck] == [dragon.cid]
        assert editor.has_unsaved_changes() is True

    async def test_default_gateway(self, dragon: MonsterCard) -> None:
        blocking = BlockingGateway()
        blocking.release.set()
        editor = DeckEditorController(resolver=InMemoryCardResolver(), gateway=blocking)
        editor.add_card(dragon, "main")

        assert (await editor.save()).success
        assert editor.has_unsaved_changes() is False

    async def test_no_gateway_raises(self, editor: DeckEditorController) -> None:
        with pytest.raises(ValueError):
            await editor.save()
