"""Domain models for the planning engine."""

from .technology import (
    TechnologyType,
    TechnologyClass,
    SiteKind,
    DEFAULT_ELCC,
    DEFAULT_AVAILABILITY,
    RPS_ELIGIBLE,
    technology_class,
    is_storage,
    is_variable,
    is_rps_eligible,
)
from .material import CriticalMaterial, MaterialType
from .component import Component
from .product import Product
from .zone import ExistingUnit, Zone, TransmissionLine, SEASONS, HOURS_PER_DAY
from .system_parameters import SystemParameters, RepresentativeDay
from .scenario import ScenarioType, ScenarioModifiers, DEFAULT_SCENARIO_MODIFIERS
from .configuration import Configuration

__all__ = [
    "TechnologyType",
    "TechnologyClass",
    "SiteKind",
    "DEFAULT_ELCC",
    "DEFAULT_AVAILABILITY",
    "RPS_ELIGIBLE",
    "technology_class",
    "is_storage",
    "is_variable",
    "is_rps_eligible",
    "CriticalMaterial",
    "MaterialType",
    "Component",
    "Product",
    "ExistingUnit",
    "Zone",
    "TransmissionLine",
    "SEASONS",
    "HOURS_PER_DAY",
    "SystemParameters",
    "RepresentativeDay",
    "ScenarioType",
    "ScenarioModifiers",
    "DEFAULT_SCENARIO_MODIFIERS",
    "Configuration",
]
