from dataclasses import dataclass, replace

from colony.core.errors import BodySpecError
from colony.core.model.model import Role
from colony.core.production.body import BodySpec, parse_parts, StaticBody


@dataclass(frozen=True)
class RoleConfig:
    """Declarative production entry: what to build, how many, and how urgently.

    `role` is kept as a raw tag so that a table naming an unknown role can be
    loaded and only fails when the scheduler reaches it.
    """
    role: str
    body: BodySpec
    population_cap: int
    priority: int
    min_body_size: int = 1

    def resolve_role(self) -> Role:
        role = Role.parse(self.role)
        if role is None:
            raise BodySpecError(f"Unknown role tag: {self.role!r}")
        return role

    def validate(self) -> None:
        """Raise BodySpecError when the role or body can't be produced at all."""
        self.resolve_role()
        if self.body.reference_size() < self.min_body_size:
            raise BodySpecError(
                f"Body for {self.role} has {self.body.reference_size()} parts, "
                f"fewer than the minimum {self.min_body_size}"
            )
        if isinstance(self.body, StaticBody):
            parse_parts(self.body.parts)
        else:
            self.body.required_parts()

    def with_cap(self, population_cap: int) -> "RoleConfig":
        return replace(self, population_cap=max(population_cap, 0))
