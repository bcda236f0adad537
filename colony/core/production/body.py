import logging
import math
from dataclasses import dataclass

from colony.core.errors import BodySpecError
from colony.core.model.model import BodyPart

logger = logging.getLogger(__name__)


def parse_parts(names: tuple[str, ...]) -> list[BodyPart]:
    parts = []
    for name in names:
        part = BodyPart.parse(name)
        if part is None:
            raise BodySpecError(f"Unknown body part: {name!r}")
        parts.append(part)
    return parts


def body_cost(parts: list[BodyPart]) -> int:
    return sum(part.cost for part in parts)


@dataclass(frozen=True)
class StaticBody:
    """Fixed list of parts, produced as-is."""
    parts: tuple[str, ...]

    def reference_size(self) -> int:
        return len(self.parts)

    def build(self, budget: int) -> list[BodyPart]:
        if not self.parts:
            raise BodySpecError("Static body has no parts")
        return parse_parts(self.parts)


@dataclass(frozen=True)
class DynamicBody:
    """Reference loadout scaled down to whatever the energy budget allows.

    `reference` maps part names to counts of the full loadout. Parts listed in
    `required` never drop below one unit, even when that exceeds the budget;
    the facility rejects such a body and the caller sees build-rejected.
    """
    reference: tuple[tuple[str, int], ...]
    required: tuple[str, ...] = ()

    def reference_size(self) -> int:
        return sum(count for _, count in self.reference)

    def reference_parts(self) -> list[tuple[BodyPart, int]]:
        if not self.reference:
            raise BodySpecError("Dynamic body has an empty reference loadout")
        resolved = []
        for name, count in self.reference:
            part = BodyPart.parse(name)
            if part is None:
                raise BodySpecError(f"Unknown body part: {name!r}")
            if count < 0:
                raise BodySpecError(f"Negative count for body part {name!r}: {count}")
            resolved.append((part, count))
        return resolved

    def required_parts(self) -> set[BodyPart]:
        required = set(parse_parts(self.required))
        missing = required - {part for part, count in self.reference_parts() if count > 0}
        if missing:
            names = sorted(part.value for part in missing)
            raise BodySpecError(f"Required parts {names} are missing from the reference loadout")
        return required

    def build(self, budget: int) -> list[BodyPart]:
        reference = self.reference_parts()
        required = self.required_parts()
        full_cost = sum(part.cost * count for part, count in reference)
        if full_cost <= 0:
            raise BodySpecError("Dynamic body reference loadout costs nothing")

        scale = min(1.0, budget / full_cost)
        counts: dict[BodyPart, int] = {}
        for part, count in reference:
            scaled = math.floor(count * scale)
            if part in required:
                scaled = max(scaled, 1)
            counts[part] = scaled

        # Trim largest counts first until the body fits, never below the required minimum.
        while sum(p.cost * c for p, c in counts.items()) > budget:
            trimmable = [p for p, c in counts.items() if c > (1 if p in required else 0)]
            if not trimmable:
                break
            largest = max(trimmable, key=lambda p: counts[p])
            counts[largest] -= 1

        parts = [part for part, _ in reference for _ in range(counts[part])]
        if not parts:
            raise BodySpecError(f"Budget {budget} affords no part of the reference loadout")
        logger.debug(f"Scaled dynamic body to {len(parts)} parts for budget {budget} (full cost {full_cost})")
        return parts


BodySpec = StaticBody | DynamicBody
