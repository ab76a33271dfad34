"""Tests for the single writer of deck state."""

import pytest

from deckwright.editor.state import DeckState
from deckwright.editor.synchronizer import Synchronizer
from deckwright.models.failure import InvariantViolationError
from deckwright.models.placement import Placement, Section


def _placement(uuid: str, cid: str = "1", section: Section = Section.MAIN, ciid: int = 0) -> Placement:
    return Placement(uuid=uuid, cid=cid, ciid=ciid, section=section)


@pytest.fixture
def sync() -> Synchronizer:
    return Synchronizer(DeckState())


class TestInsertDetach:
    def test_insert_appends_by_default(self, sync: Synchronizer) -> None:
        assert sync.insert(_placement("a")) == 0
        assert sync.insert(_placement("b")) == 1
        assert sync.state.order[Section.MAIN] == ["a", "b"]
        assert sync.state.aggregate.quantity(Section.MAIN, "1", 0) == 2
        sync.verify()

    def test_insert_at_index(self, sync: Synchronizer) -> None:
        sync.insert(_placement("a"))
        sync.insert(_placement("b"))
        assert sync.insert(_placement("c"), 1) == 1
        assert sync.state.order[Section.MAIN] == ["a", "c", "b"]

    def test_insert_past_end_clamps(self, sync: Synchronizer) -> None:
        sync.insert(_placement("a"))
        assert sync.insert(_placement("b"), 10) == 1

    def test_insert_duplicate_uuid_raises(self, sync: Synchronizer) -> None:
        sync.insert(_placement("a"))
        with pytest.raises(InvariantViolationError):
            sync.insert(_placement("a", section=Section.SIDE))

    def test_detach_returns_index(self, sync: Synchronizer) -> None:
        sync.insert(_placement("a"))
        sync.insert(_placement("b"))
        placement, index = sync.detach("b")
        assert placement.uuid == "b"
        assert index == 1
        assert sync.state.aggregate.quantity(Section.MAIN, "1", 0) == 1
        sync.verify()

    def test_detach_unknown_raises(self, sync: Synchronizer) -> None:
        with pytest.raises(InvariantViolationError):
            sync.detach("missing")


class TestRelocateReposition:
    def test_relocate_keeps_uuid(self, sync: Synchronizer) -> None:
        sync.insert(_placement("a"))
        moved, from_index = sync.relocate("a", Section.SIDE)
        assert moved.uuid == "a"
        assert moved.section is Section.SIDE
        assert from_index == 0
        assert sync.state.order[Section.MAIN] == []
        assert sync.state.order[Section.SIDE] == ["a"]
        assert sync.state.aggregate.quantity(Section.SIDE, "1") == 1
        sync.verify()

    def test_reposition_does_not_touch_aggregate(self, sync: Synchronizer) -> None:
        for uuid in "abc":
            sync.insert(_placement(uuid))
        before = sync.state.aggregate.copy()
        assert sync.reposition("c", 0) == 0
        assert sync.state.order[Section.MAIN] == ["c", "a", "b"]
        assert sync.state.aggregate == before

    def test_reposition_to_end(self, sync: Synchronizer) -> None:
        for uuid in "abc":
            sync.insert(_placement(uuid))
        assert sync.reposition("a", None) == 2
        assert sync.state.order[Section.MAIN] == ["b", "c", "a"]


class TestBulk:
    def test_replace_section_order_requires_permutation(self, sync: Synchronizer) -> None:
        sync.insert(_placement("a"))
        sync.insert(_placement("b"))
        sync.replace_section_order(Section.MAIN, ["b", "a"])
        assert sync.state.order[Section.MAIN] == ["b", "a"]
        with pytest.raises(InvariantViolationError):
            sync.replace_section_order(Section.MAIN, ["b", "x"])

    def test_restore_rederives_aggregate(self, sync: Synchronizer) -> None:
        sync.insert(_placement("a", cid="1"))
        sync.insert(_placement("b", cid="2", section=Section.SIDE))
        snapshot = sync.state.snapshot_sections((Section.MAIN, Section.SIDE))

        sync.relocate("b", Section.MAIN, 0)
        sync.restore(snapshot)

        assert sync.state.order[Section.MAIN] == ["a"]
        assert sync.state.order[Section.SIDE] == ["b"]
        assert sync.state.get("b").section is Section.SIDE
        assert sync.state.aggregate.quantity(Section.MAIN, "2") == 0
        sync.verify()

    def test_reset_replaces_everything(self, sync: Synchronizer) -> None:
        sync.insert(_placement("old"))
        sync.reset([_placement("x", cid="7"), _placement("y", cid="8", section=Section.EXTRA)])
        assert sync.state.get("old") is None
        assert sync.state.order[Section.MAIN] == ["x"]
        assert sync.state.aggregate.quantity(Section.EXTRA, "8") == 1
        sync.verify()

    def test_derive_aggregate(self) -> None:
        aggregate = Synchronizer.derive_aggregate(
            {Section.MAIN: [_placement("a"), _placement("b"), _placement("c", cid="2")]}
        )
        assert aggregate.quantity(Section.MAIN, "1") == 2
        assert aggregate.section_total(Section.MAIN) == 3


class TestVerify:
    def test_detects_copy_limit_breach(self, sync: Synchronizer) -> None:
        for uuid in "abcd":
            sync.insert(_placement(uuid))
        sync.verify()
        with pytest.raises(InvariantViolationError):
            sync.verify(limit_for=lambda cid: 3)

    def test_copy_limit_ignores_trash(self, sync: Synchronizer) -> None:
        for uuid in "abcd":
            sync.insert(_placement(uuid, section=Section.TRASH))
        sync.verify(limit_for=lambda cid: 3)

    def test_detects_aggregate_drift(self, sync: Synchronizer) -> None:
        sync.insert(_placement("a"))
        sync.state.aggregate.increment(Section.MAIN, ("1", 0))
        with pytest.raises(InvariantViolationError):
            sync.verify()

    def test_detects_orphan(self, sync: Synchronizer) -> None:
        sync.insert(_placement("a"))
        sync.state.order[Section.MAIN].clear()
        with pytest.raises(InvariantViolationError):
            sync.verify()
