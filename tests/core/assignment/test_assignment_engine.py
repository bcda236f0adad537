import pytest

from colony.core.assignment.assignment_engine import (
    assign_optimal, expected_workers, resolve_binding, candidates_for, Assigned, Unassigned
)
from colony.core.assignment.population import PopulationSnapshot
from colony.core.model.model import (
    Position, ResourceNode, StorageStructure, StorageKind, RelayStructure, SupplyKind, SupplyPoint
)
from colony.domain.config import ExpectationConstants
from tests.fakes import make_worker, make_zone

HUB = Position(25, 25)
GATHERING = ExpectationConstants(base=2, distance_factor=1.5, minimum=1, maximum=6)


def node_point(point_id: str, x: int, y: int) -> SupplyPoint:
    return SupplyPoint(id=point_id, kind=SupplyKind.RESOURCE_NODE, position=Position(x, y), stock=3000)


def snapshot_of(*workers) -> PopulationSnapshot:
    return PopulationSnapshot.of("Z1", list(workers))


class TestExpectedWorkers:

    @pytest.mark.parametrize("distance,expected", [
        (0, 2),
        (5, 3),    # 2 + 0.75 = 2.75 -> 3
        (10, 4),   # 2 + 1.5 = 3.5 rounds half up -> 4
        (25, 6),   # 2 + 3.75 = 5.75 -> 6
        (60, 6),   # clamped to max
    ])
    def test_gathering_arithmetic(self, distance, expected):
        assert expected_workers(distance, GATHERING) == expected

    def test_clamped_to_minimum(self):
        constants = ExpectationConstants(base=0, distance_factor=0.0, minimum=1, maximum=3)

        assert expected_workers(0, constants) == 1


class TestAssignOptimal:

    def test_cold_start_picks_far_node_with_larger_deficit(self):
        # Given: empty population, nodes at distance 5 (expects 3) and 25 (expects 6)
        near = node_point("near", 28, 27)
        far = node_point("far", 40, 35)

        # When
        result = assign_optimal([near, far], snapshot_of(), "gatherer", HUB)

        # Then: the far node has deficit 6 against 3
        assert result == Assigned(point_id="far")

    def test_deficit_shrinks_as_workers_bind(self):
        # Given: far node already has 4 of its 6 (deficit 2), near node has 0 of 3 (deficit 3)
        near = node_point("near", 28, 27)
        far = node_point("far", 40, 35)
        workers = [make_worker(id=f"g{i}", bound_point_id="far") for i in range(4)]

        result = assign_optimal([near, far], snapshot_of(*workers), "gatherer", HUB)

        assert result == Assigned(point_id="near")

    def test_equal_deficit_prefers_closer_point(self):
        # both expect 3 (distances 5 and 6), neither has workers
        a = node_point("a", 31, 25)
        b = node_point("b", 28, 27)

        result = assign_optimal([a, b], snapshot_of(), "gatherer", HUB)

        assert result == Assigned(point_id="b")

    def test_only_same_role_counts(self):
        near = node_point("near", 28, 27)
        far = node_point("far", 40, 35)
        builders = [make_worker(id=f"b{i}", role="builder", bound_point_id="far") for i in range(6)]

        result = assign_optimal([near, far], snapshot_of(*builders), "gatherer", HUB)

        assert result == Assigned(point_id="far")

    def test_other_zone_workers_are_not_counted(self):
        near = node_point("near", 28, 27)
        far = node_point("far", 40, 35)
        foreign = [make_worker(id=f"x{i}", zone_id="Z2", bound_point_id="far") for i in range(6)]

        result = assign_optimal([near, far], snapshot_of(*foreign), "gatherer", HUB)

        assert result == Assigned(point_id="far")

    def test_no_candidates(self):
        result = assign_optimal([], snapshot_of(), "gatherer", HUB)

        assert isinstance(result, Unassigned)

    def test_adding_a_worker_never_makes_a_point_more_attractive(self):
        near = node_point("near", 28, 27)
        far = node_point("far", 40, 35)
        snapshot = snapshot_of()

        for i in range(9):
            result = assign_optimal([near, far], snapshot, "gatherer", HUB)
            before = snapshot.count_bound(result.point_id, "gatherer")
            snapshot = snapshot.with_binding(f"g{i}", "gatherer", result.point_id)
            assert snapshot.count_bound(result.point_id, "gatherer") == before + 1

        # 9 workers spread to fill both points exactly: 6 far, 3 near
        assert snapshot.count_bound("far", "gatherer") == 6
        assert snapshot.count_bound("near", "gatherer") == 3


class TestResolveBinding:

    def test_binding_is_sticky(self):
        # Given: worker bound to the near node, far node heavily under-served
        zone = make_zone(resource_nodes=[
            ResourceNode(id="near", position=Position(28, 27)),
            ResourceNode(id="far", position=Position(40, 35)),
        ])
        worker = make_worker(id="g1", bound_point_id="near")

        # When
        result = resolve_binding(worker, zone, snapshot_of(worker))

        # Then: stays on near
        assert result == Assigned(point_id="near")

    def test_binding_kept_when_point_is_exhausted(self):
        zone = make_zone(resource_nodes=[ResourceNode(id="near", position=Position(28, 27), energy=0)])
        worker = make_worker(id="g1", bound_point_id="near")

        assert resolve_binding(worker, zone, snapshot_of(worker)) == Assigned(point_id="near")

    def test_binding_survives_a_change_in_candidate_kind(self):
        # Given: builder bound to a node while the zone had no reservoir
        zone = make_zone(resource_nodes=[ResourceNode(id="n", position=Position(28, 27))])
        worker = make_worker(id="b1", role="builder", bound_point_id="n")

        # When: a reservoir is built, so new builders would go there instead
        zone.storages.append(StorageStructure(id="res", kind=StorageKind.RESERVOIR, position=Position(26, 25)))
        result = resolve_binding(worker, zone, snapshot_of(worker))

        # Then: the node still exists, so the builder stays on it
        assert result == Assigned(point_id="n")

    def test_stale_binding_is_repaired(self):
        zone = make_zone(resource_nodes=[ResourceNode(id="far", position=Position(40, 35))])
        worker = make_worker(id="g1", bound_point_id="destroyed")

        result = resolve_binding(worker, zone, snapshot_of(worker))

        assert result == Assigned(point_id="far", reassigned=True)

    def test_unbound_worker_without_candidates_is_unassigned(self):
        zone = make_zone()
        worker = make_worker(id="g1")

        assert isinstance(resolve_binding(worker, zone, snapshot_of(worker)), Unassigned)

    def test_expander_never_binds(self):
        zone = make_zone(resource_nodes=[ResourceNode(id="n", position=Position(28, 27))])
        worker = make_worker(id="e1", role="expander")

        assert isinstance(resolve_binding(worker, zone, snapshot_of(worker)), Unassigned)


class TestCandidatesFor:

    def test_builders_draw_from_reservoir_when_present(self):
        zone = make_zone(
            resource_nodes=[ResourceNode(id="n", position=Position(28, 27))],
            storages=[StorageStructure(id="res", kind=StorageKind.RESERVOIR, position=Position(26, 25))],
        )

        assert [p.id for p in candidates_for("builder", zone)] == ["res"]

    def test_builders_fall_back_to_nodes(self):
        zone = make_zone(resource_nodes=[ResourceNode(id="n", position=Position(28, 27))])

        assert [p.id for p in candidates_for("builder", zone)] == ["n"]

    def test_relay_haulers_only_see_sink_side_relays(self):
        zone = make_zone(
            resource_nodes=[ResourceNode(id="n", position=Position(10, 10))],
            relays=[
                RelayStructure(id="src", position=Position(11, 11)),
                RelayStructure(id="sink", position=Position(24, 25)),
            ],
        )

        assert [p.id for p in candidates_for("relay_hauler", zone)] == ["sink"]

    def test_field_haulers_see_field_storages(self):
        zone = make_zone(storages=[
            StorageStructure(id="f1", kind=StorageKind.FIELD, position=Position(30, 30)),
            StorageStructure(id="res", kind=StorageKind.RESERVOIR, position=Position(26, 25)),
        ])

        assert [p.id for p in candidates_for("field_hauler", zone)] == ["f1"]

    def test_unknown_role_has_no_candidates(self):
        assert candidates_for("wizard", make_zone()) == []
