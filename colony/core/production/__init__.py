"""Worker production: role tables, body model and the single-issue scheduler."""

from colony.core.production.body import StaticBody, DynamicBody
from colony.core.production.role_config import RoleConfig
from colony.core.production.role_tables import RoleTable, BASE_ROLE_CONFIGS, build_role_table
from colony.core.production.scheduler import ProductionScheduler, ProductionSuccess, ProductionFailed

__all__ = [
    "StaticBody",
    "DynamicBody",
    "RoleConfig",
    "RoleTable",
    "BASE_ROLE_CONFIGS",
    "build_role_table",
    "ProductionScheduler",
    "ProductionSuccess",
    "ProductionFailed",
]
