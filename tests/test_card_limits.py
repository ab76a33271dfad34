from deckwright.models.card import LimitRegulation, MonsterCard, SpellCard
from deckwright.services.card_limits import CardLimitPolicy, RegulationList


class TestCardLimitPolicy:
    def test_all_three_ignores_regulations(self) -> None:
        policy = CardLimitPolicy(
            regulation_list=RegulationList({"1": LimitRegulation.FORBIDDEN}),
        )
        assert policy.limit_for("1") == 3

    def test_regulation_list_lowers_limit(self) -> None:
        policy = CardLimitPolicy(
            mode="regulation",
            regulation_list=RegulationList(
                {
                    "1": LimitRegulation.FORBIDDEN,
                    "2": LimitRegulation.LIMITED,
                    "3": LimitRegulation.SEMI_LIMITED,
                },
                effective_date="2026-10-01",
            ),
        )
        assert policy.limit_for("1") == 0
        assert policy.limit_for("2") == 1
        assert policy.limit_for("3") == 2
        assert policy.limit_for("4") == 3

    def test_card_metadata_used_when_unlisted(self) -> None:
        policy = CardLimitPolicy(mode="regulation")
        card = SpellCard(cid="9", name="Limited Spell", limit=LimitRegulation.LIMITED)
        assert policy.limit_for(card.cid, card) == 1

    def test_list_overrides_card_metadata(self) -> None:
        policy = CardLimitPolicy(
            mode="regulation",
            regulation_list=RegulationList({"9": LimitRegulation.SEMI_LIMITED}),
        )
        card = MonsterCard(cid="9", name="M", limit=LimitRegulation.FORBIDDEN)
        assert policy.limit_for(card.cid, card) == 2

    def test_never_exceeds_max_copies(self) -> None:
        policy = CardLimitPolicy(
            mode="regulation",
            regulation_list=RegulationList({"1": LimitRegulation.SEMI_LIMITED}),
            max_copies=1,
        )
        assert policy.limit_for("1") == 1
