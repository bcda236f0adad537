from pathlib import Path
from typing import Any

import yaml

from colony.core.model.model import (
    Position, ResourceNode, StorageStructure, StorageKind, RelayStructure, WorkerUnit
)
from colony.core.model.zone import Zone
from colony.sim_adapter.world import SimWorld, SimZone, SimFacility


def load_scenario(path: str | Path) -> SimWorld:
    data = yaml.safe_load(Path(path).read_text())
    if not isinstance(data, dict):
        raise ValueError(f"Scenario file {path} does not contain a mapping")
    return build_world(data)


def _position(raw: Any) -> Position:
    x, y = raw
    return Position(int(x), int(y))


def build_world(data: dict) -> SimWorld:
    world = SimWorld()
    for raw_zone in data.get('zones', []):
        zone_id = str(raw_zone['id'])
        facility_data = raw_zone.get('facility')
        facility = None
        if facility_data:
            facility = SimFacility(
                zone_id=zone_id,
                position=_position(facility_data['position']),
                energy=int(facility_data.get('energy', 300)),
                capacity=int(facility_data.get('capacity', 300)),
            )

        zone = Zone(
            id=zone_id,
            development_level=int(raw_zone.get('development-level', 1)),
            resource_nodes=[
                ResourceNode(
                    id=str(n['id']),
                    position=_position(n['position']),
                    energy=int(n.get('energy', 3000)),
                    capacity=int(n.get('capacity', 3000)),
                    regeneration=int(n.get('regeneration', 10)),
                )
                for n in raw_zone.get('resource-nodes', [])
            ],
            storages=[
                StorageStructure(
                    id=str(s['id']),
                    kind=StorageKind(s.get('kind', 'field')),
                    position=_position(s['position']),
                    energy=int(s.get('energy', 0)),
                    capacity=int(s.get('capacity', 2000)),
                )
                for s in raw_zone.get('storages', [])
            ],
            relays=[
                RelayStructure(
                    id=str(r['id']),
                    position=_position(r['position']),
                    energy=int(r.get('energy', 0)),
                    capacity=int(r.get('capacity', 800)),
                )
                for r in raw_zone.get('relays', [])
            ],
            facility_position=facility.position if facility else None,
        )

        world.zones[zone_id] = SimZone(
            zone=zone,
            facility=facility,
            hostile_power=int(raw_zone.get('hostile-power', 0)),
            construction_sites=int(raw_zone.get('construction-sites', 0)),
            damaged_structures=int(raw_zone.get('damaged-structures', 0)),
            defense_integrity=float(raw_zone.get('defense-integrity', 1.0)),
            operational_defenses=int(raw_zone.get('operational-defenses', 0)),
        )

        for w in raw_zone.get('workers', []):
            world.add_worker(WorkerUnit(
                id=str(w['id']),
                role=str(w['role']),
                zone_id=zone_id,
                position=_position(w.get('position', facility_data['position'] if facility_data else (25, 25))),
                ticks_to_live=int(w.get('ticks-to-live', 1500)),
                bound_point_id=w.get('bound-point'),
            ))
    return world
