import pytest

from colony.core.errors import BodySpecError
from colony.core.model.model import BodyPart
from colony.core.production.body import StaticBody, DynamicBody, body_cost
from colony.core.production.role_config import RoleConfig


class TestStaticBody:

    def test_builds_parts_in_order(self):
        body = StaticBody(("work", "carry", "move"))

        assert body.build(0) == [BodyPart.WORK, BodyPart.CARRY, BodyPart.MOVE]

    def test_cost_is_sum_of_parts(self):
        assert body_cost([BodyPart.WORK, BodyPart.WORK, BodyPart.CARRY, BodyPart.MOVE]) == 300
        assert body_cost([BodyPart.CLAIM, BodyPart.MOVE]) == 650

    def test_unknown_part_is_rejected(self):
        with pytest.raises(BodySpecError):
            StaticBody(("work", "laser")).build(1000)

    def test_empty_body_is_rejected(self):
        with pytest.raises(BodySpecError):
            StaticBody(()).build(1000)


class TestDynamicBody:

    def test_full_loadout_when_budget_allows(self):
        body = DynamicBody(reference=(("claim", 2), ("move", 2)), required=("claim", "move"))

        parts = body.build(1400)

        assert parts.count(BodyPart.CLAIM) == 2
        assert parts.count(BodyPart.MOVE) == 2

    def test_scales_down_proportionally(self):
        # Given: reference of 4 work and 4 move costs 600
        body = DynamicBody(reference=(("work", 4), ("move", 4)), required=("work", "move"))

        # When: half the budget
        parts = body.build(300)

        # Then: half of each part
        assert parts.count(BodyPart.WORK) == 2
        assert parts.count(BodyPart.MOVE) == 2
        assert body_cost(parts) <= 300

    def test_required_parts_keep_one_unit(self):
        body = DynamicBody(reference=(("claim", 2), ("move", 2)), required=("claim", "move"))

        parts = body.build(650)

        assert parts == [BodyPart.CLAIM, BodyPart.MOVE]

    def test_never_below_one_required_unit_even_over_budget(self):
        body = DynamicBody(reference=(("claim", 2), ("move", 2)), required=("claim", "move"))

        parts = body.build(100)

        assert parts == [BodyPart.CLAIM, BodyPart.MOVE]

    def test_trims_until_it_fits(self):
        body = DynamicBody(reference=(("work", 3), ("carry", 3), ("move", 3)), required=("move",))

        parts = body.build(250)

        assert body_cost(parts) <= 250
        assert BodyPart.MOVE in parts

    def test_empty_reference_is_rejected(self):
        with pytest.raises(BodySpecError):
            DynamicBody(reference=()).build(1000)

    def test_required_part_not_in_reference_is_never_silently_dropped(self):
        body = DynamicBody(reference=(("work", 2), ("carry", 1)), required=("move",))

        with pytest.raises(BodySpecError):
            body.build(1000)


class TestRoleConfigValidation:

    def test_unknown_role(self):
        config = RoleConfig(role="wizard", body=StaticBody(("work",)), population_cap=1, priority=1)

        with pytest.raises(BodySpecError):
            config.validate()

    def test_body_below_minimum_size(self):
        config = RoleConfig(role="gatherer", body=StaticBody(("work", "move")), population_cap=1, priority=1,
                            min_body_size=3)

        with pytest.raises(BodySpecError):
            config.validate()

    def test_dynamic_reference_counts_toward_minimum_size(self):
        config = RoleConfig(role="expander", body=DynamicBody(reference=(("claim", 1), ("move", 1))),
                            population_cap=1, priority=1, min_body_size=2)

        config.validate()
        assert body_cost(config.body.build(650)) == 650

    def test_required_part_missing_from_reference_is_a_configuration_error(self):
        # Given: move is required but the reference loadout has none
        config = RoleConfig(role="gatherer",
                            body=DynamicBody(reference=(("work", 2), ("carry", 1)), required=("move",)),
                            population_cap=1, priority=1)

        # When / Then
        with pytest.raises(BodySpecError, match="move"):
            config.validate()
