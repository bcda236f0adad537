"""Relay routing: push surplus energy from relays near resource nodes to the sink side.

A relay within `source_radius` of any resource node is source-side, every
other relay is sink-side. Each routing cycle picks one sink (lowest fill,
then closest to the hub) and lets every eligible source push into it.
"""
import logging
import math
from dataclasses import dataclass

from colony.core.model.model import RelayStructure, RelayRole
from colony.core.model.zone import Zone
from colony.domain.config import RelayConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RelayTransfer:
    source_id: str
    sink_id: str
    amount: int
    delivered: int


@dataclass(frozen=True)
class RelayStatistics:
    source_count: int
    sink_count: int
    source_energy: int
    sink_energy: int
    source_capacity: int
    sink_capacity: int


def classify_relay(relay: RelayStructure, zone: Zone, source_radius: int) -> RelayRole:
    near_node = any(relay.position.distance_to(n.position) <= source_radius for n in zone.resource_nodes)
    return RelayRole.SOURCE_SIDE if near_node else RelayRole.SINK_SIDE


def classify_relays(zone: Zone, source_radius: int) -> dict[str, RelayRole]:
    return {relay.id: classify_relay(relay, zone, source_radius) for relay in zone.relays}


def sink_side_relays(zone: Zone, source_radius: int) -> list[RelayStructure]:
    roles = classify_relays(zone, source_radius)
    return [r for r in zone.relays if roles[r.id] == RelayRole.SINK_SIDE]


def source_side_relays(zone: Zone, source_radius: int) -> list[RelayStructure]:
    roles = classify_relays(zone, source_radius)
    return [r for r in zone.relays if roles[r.id] == RelayRole.SOURCE_SIDE]


def select_sink(zone: Zone, source_radius: int) -> RelayStructure | None:
    """Lowest fill ratio wins; ties go to the relay closest to the hub."""
    sinks = sink_side_relays(zone, source_radius)
    if not sinks:
        return None
    hub = zone.hub
    return min(sinks, key=lambda r: (r.fill_ratio, r.position.distance_to(hub)))


def relay_statistics(zone: Zone, source_radius: int) -> RelayStatistics:
    sources = source_side_relays(zone, source_radius)
    sinks = sink_side_relays(zone, source_radius)
    return RelayStatistics(
        source_count=len(sources),
        sink_count=len(sinks),
        source_energy=sum(r.energy for r in sources),
        sink_energy=sum(r.energy for r in sinks),
        source_capacity=sum(r.capacity for r in sources),
        sink_capacity=sum(r.capacity for r in sinks),
    )


def relays_needing_haul(zone: Zone, config: RelayConfig) -> list[RelayStructure]:
    """Sink-side relays holding enough energy to be worth emptying."""
    return [r for r in sink_side_relays(zone, config.source_radius) if r.energy > config.min_energy_to_transfer]


class RelayNetwork:
    """Routing state of one zone's relays."""

    def __init__(self, zone_id: str, config: RelayConfig = RelayConfig()) -> None:
        self.zone_id = zone_id
        self.config = config
        self.last_routed_step: int | None = None
        self._layout: dict[str, RelayRole] = {}
        self._stalled_since: dict[str, int] = {}
        self._stall_reported: set[str] = set()

    def is_due(self, step: int) -> bool:
        if self.last_routed_step is None:
            return True
        return step - self.last_routed_step >= self.config.transfer_interval

    def _refresh_layout(self, zone: Zone) -> dict[str, RelayRole]:
        layout = classify_relays(zone, self.config.source_radius)
        if layout != self._layout:
            sources = sum(1 for role in layout.values() if role == RelayRole.SOURCE_SIDE)
            logger.info(
                f"Zone {self.zone_id} relay network rebuilt: {sources} source-side, {len(layout) - sources} sink-side"
            )
            self._layout = layout
        return layout

    def route_energy(self, zone: Zone, step: int) -> list[RelayTransfer]:
        """Run one routing cycle if the cadence allows it. Calling again within the interval is a no-op."""
        if not self.config.enabled or not self.is_due(step):
            return []
        self.last_routed_step = step

        layout = self._refresh_layout(zone)
        sink = select_sink(zone, self.config.source_radius)
        transfers = []
        for relay in zone.relays:
            if layout.get(relay.id) != RelayRole.SOURCE_SIDE:
                continue
            if not self._is_eligible_source(relay):
                self._clear_stall(relay.id)
                continue
            transfer = self._try_transfer(relay, sink)
            if transfer is None:
                self._note_stall(relay.id, step)
            else:
                self._clear_stall(relay.id)
                transfers.append(transfer)
        return transfers

    def _is_eligible_source(self, relay: RelayStructure) -> bool:
        return (
            relay.fill_ratio > self.config.source_transfer_threshold
            and relay.energy > self.config.min_energy_to_transfer
        )

    def _try_transfer(self, source: RelayStructure, sink: RelayStructure | None) -> RelayTransfer | None:
        if sink is None or source.cooldown > 0 or sink.cooldown > 0:
            return None
        # sink fill is re-read live so earlier transfers this cycle count
        if sink.fill_ratio >= self.config.sink_transfer_threshold:
            return None

        amount = min(source.energy, sink.free_capacity)
        if amount < self.config.min_energy_to_transfer:
            return None

        delivered = amount - math.ceil(amount * self.config.transfer_loss)
        source.energy -= amount
        sink.energy += delivered
        source.cooldown = self.config.cooldown
        logger.debug(f"Relay {source.id} -> {sink.id}: sent {amount}, delivered {delivered}")
        return RelayTransfer(source_id=source.id, sink_id=sink.id, amount=amount, delivered=delivered)

    def _note_stall(self, relay_id: str, step: int) -> None:
        since = self._stalled_since.setdefault(relay_id, step)
        stall_cycle = max(self.config.cooldown, self.config.transfer_interval)
        if step - since > stall_cycle and relay_id not in self._stall_reported:
            logger.warning(f"Zone {self.zone_id} relay {relay_id} has been unable to transfer since step {since}")
            self._stall_reported.add(relay_id)

    def _clear_stall(self, relay_id: str) -> None:
        self._stalled_since.pop(relay_id, None)
        self._stall_reported.discard(relay_id)
