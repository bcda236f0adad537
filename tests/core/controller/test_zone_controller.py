import logging

from colony.core.classifier.emergency import EmergencyKind
from colony.core.controller.zone_controller import ZoneController
from colony.core.errors import ProductionFailure, FailureKind
from colony.core.model.model import (
    Position, ResourceNode, StorageStructure, StorageKind, WorkerActivity, ZoneState
)
from colony.core.model.records import ZoneRecord, WorkerRecord
from colony.core.production.scheduler import ProductionSuccess
from colony.core.protocols.movement_protocol import MoveResult
from colony.domain.config import Config, ClassifierConfig
from tests.fakes import FakeMetrics, FakeMovement, make_metrics, make_worker, make_zone


def two_node_zone(**overrides):
    defaults = dict(resource_nodes=[
        ResourceNode(id="near", position=Position(28, 27)),
        ResourceNode(id="far", position=Position(40, 35)),
    ])
    defaults.update(overrides)
    return make_zone(**defaults)


def make_controller(population, facilities, metrics=None, movement=None, config=Config()):
    return ZoneController(
        "Z1",
        metrics=FakeMetrics(metrics or make_metrics()),
        population=population,
        facilities=facilities,
        movement=movement or FakeMovement(),
        config=config,
    )


class TestZoneControllerStep:

    def test_classifies_then_produces(self, population_factory, facility_factory):
        # Given: a quiet zone with no workers
        population = population_factory()
        controller = make_controller(population, facility_factory())

        # When
        report = controller.step(two_node_zone(), step=0)

        # Then: the most urgent ungated role is produced (relay haulers and expanders are gated out)
        assert report.state == ZoneState.NORMAL
        assert isinstance(report.production, ProductionSuccess)
        assert report.production.role == "reservoir_hauler"
        assert controller.get_zone_state() == ZoneState.NORMAL

    def test_current_role_table_excludes_gated_roles(self, population_factory, facility_factory):
        controller = make_controller(population_factory(), facility_factory())
        assert controller.get_current_role_table() == []

        controller.step(two_node_zone(), step=0)

        roles = [c.role for c in controller.get_current_role_table()]
        assert "relay_hauler" not in roles
        assert roles[0] == "reservoir_hauler"

    def test_emergency_zone_only_produces_gatherers(self, population_factory, facility_factory):
        population = population_factory()
        controller = make_controller(population, facility_factory(),
                                     metrics=make_metrics(energy_stored=50, open_construction_sites=3))

        report = controller.step(two_node_zone(), step=0)

        assert report.state == ZoneState.EMERGENCY
        assert report.production.role == "gatherer"
        assert [c.role for c in controller.get_current_role_table()] == ["gatherer"]

    def test_emergency_is_reported_on_reclassification(self, population_factory, facility_factory, caplog):
        controller = make_controller(population_factory(), facility_factory(),
                                     metrics=make_metrics(energy_stored=30))

        with caplog.at_level(logging.WARNING):
            report = controller.step(two_node_zone(), step=0)

        assert report.emergency.is_emergency
        assert "emergency" in caplog.text

    def test_damaged_structure_threshold_comes_from_config(self, population_factory, facility_factory):
        config = Config(classifier_config=ClassifierConfig(damaged_structures_threshold=2))
        controller = make_controller(population_factory([make_worker()]), facility_factory(),
                                     metrics=make_metrics(damaged_structure_count=2), config=config)

        report = controller.step(two_node_zone(), step=0)

        assert report.emergency.kind == EmergencyKind.STRUCTURE
        assert report.state == ZoneState.NORMAL

    def test_busy_facility_is_a_quiet_failure(self, population_factory, facility_factory):
        controller = make_controller(population_factory(), facility_factory(busy=True))

        report = controller.step(two_node_zone(), step=0)

        assert report.production.reason == ProductionFailure.FACILITY_BUSY

    def test_zone_total_cap_grows_in_late_development(self, population_factory, facility_factory):
        workers = [make_worker(id=f"u{i}", role="upgrader") for i in range(20)]
        controller = make_controller(population_factory(workers), facility_factory())

        early = controller.step(two_node_zone(development_level=5), step=0)
        late = controller.step(two_node_zone(development_level=6), step=1)

        assert early.production.reason == ProductionFailure.CAPACITY_REACHED
        assert isinstance(late.production, ProductionSuccess)


class TestWorkerAssignment:

    def test_new_workers_are_spread_by_deficit(self, population_factory, facility_factory):
        # Given: two fresh gatherers
        workers = [make_worker(id="g1"), make_worker(id="g2")]
        population = population_factory(workers)
        controller = make_controller(population, facility_factory())

        # When
        controller.step(two_node_zone(), step=0)

        # Then: both go to the far node (deficits 6 then 5, against 3)
        assert [w.bound_point_id for w in workers] == ["far", "far"]

    def test_bindings_are_sticky_across_steps(self, population_factory, facility_factory):
        worker = make_worker(id="g1", bound_point_id="near")
        population = population_factory([worker])
        controller = make_controller(population, facility_factory())

        controller.step(two_node_zone(), step=0)
        controller.step(two_node_zone(), step=1)

        assert worker.bound_point_id == "near"
        assert population.bind_calls == []

    def test_stale_binding_is_repaired_within_the_step(self, population_factory, facility_factory):
        worker = make_worker(id="g1", bound_point_id="gone")
        population = population_factory([worker])
        controller = make_controller(population, facility_factory())

        report = controller.step(two_node_zone(), step=0)

        assert worker.bound_point_id == "far"
        assert report.worker_conditions["g1"] == FailureKind.BINDING_STALE

    def test_exhausted_point_puts_worker_in_wait_state(self, population_factory, facility_factory):
        worker = make_worker(id="g1", bound_point_id="near")
        population = population_factory([worker])
        movement = FakeMovement()
        controller = make_controller(population, facility_factory(), movement=movement)
        zone = make_zone(resource_nodes=[ResourceNode(id="near", position=Position(28, 27), energy=0)])

        report = controller.step(zone, step=0)

        assert report.activities["g1"] == WorkerActivity.WAITING
        assert report.worker_conditions["g1"] == FailureKind.RESOURCE_EXHAUSTED
        assert worker.bound_point_id == "near"
        assert movement.calls == []

    def test_carrying_worker_keeps_moving_past_empty_point(self, population_factory, facility_factory):
        worker = make_worker(id="g1", bound_point_id="near", load=20)
        controller = make_controller(population_factory([worker]), facility_factory())
        zone = make_zone(resource_nodes=[ResourceNode(id="near", position=Position(28, 27), energy=0)])

        report = controller.step(zone, step=0)

        assert report.activities["g1"] == WorkerActivity.MOVING

    def test_movement_outcomes_map_to_activities(self, population_factory, facility_factory):
        worker = make_worker(id="g1", bound_point_id="near")
        arrived = make_controller(population_factory([worker]), facility_factory(),
                                  movement=FakeMovement(MoveResult.ARRIVED))
        blocked = make_controller(population_factory([worker]), facility_factory(),
                                  movement=FakeMovement(MoveResult.UNREACHABLE))

        assert arrived.step(two_node_zone(), step=0).activities["g1"] == WorkerActivity.WORKING
        assert blocked.step(two_node_zone(), step=0).activities["g1"] == WorkerActivity.BLOCKED

    def test_worker_without_candidates_is_idle(self, population_factory, facility_factory):
        worker = make_worker(id="f1", role="field_hauler")
        controller = make_controller(population_factory([worker]), facility_factory())

        report = controller.step(two_node_zone(), step=0)

        assert report.activities["f1"] == WorkerActivity.IDLE
        assert worker.bound_point_id is None

    def test_builder_keeps_node_after_reservoir_is_built(self, population_factory, facility_factory):
        worker = make_worker(id="b1", role="builder", bound_point_id="near")
        population = population_factory([worker])
        controller = make_controller(population, facility_factory())
        zone = two_node_zone(storages=[
            StorageStructure(id="res", kind=StorageKind.RESERVOIR, position=Position(26, 25), energy=5000)
        ])

        report = controller.step(zone, step=0)

        assert worker.bound_point_id == "near"
        assert population.bind_calls == []
        assert "b1" not in report.worker_conditions

    def test_builders_bind_to_reservoir(self, population_factory, facility_factory):
        worker = make_worker(id="b1", role="builder")
        controller = make_controller(population_factory([worker]), facility_factory())
        zone = two_node_zone(storages=[
            StorageStructure(id="res", kind=StorageKind.RESERVOIR, position=Position(26, 25), energy=5000)
        ])

        controller.step(zone, step=0)

        assert worker.bound_point_id == "res"


class TestRecords:

    def test_record_reflects_last_classification(self, population_factory, facility_factory):
        controller = make_controller(population_factory(), facility_factory(),
                                     metrics=make_metrics(open_construction_sites=2))
        assert controller.to_record() is None

        controller.step(two_node_zone(), step=4)

        assert controller.to_record() == ZoneRecord(
            state=ZoneState.DEVELOPING, last_classified_step=4, role_table_id="developing"
        )

    def test_restored_state_is_used_until_next_check(self, population_factory, facility_factory):
        config = Config(classifier_config=ClassifierConfig(state_check_interval=10))
        controller = make_controller(population_factory(), facility_factory(), config=config)
        controller.restore(ZoneRecord(ZoneState.LOW_RESOURCE, 95, "low_resource"), step=100)

        report = controller.step(two_node_zone(), step=100)

        assert report.state == ZoneState.LOW_RESOURCE
        assert report.table_id == "low_resource"

    def test_worker_records_carry_current_bindings(self, population_factory, facility_factory):
        worker = make_worker(id="g1", bound_point_id="near")
        controller = make_controller(population_factory([worker]), facility_factory())

        controller.step(two_node_zone(), step=0)

        assert controller.worker_records() == {
            "g1": WorkerRecord(role="gatherer", bound_point_id="near", zone_id="Z1")
        }
