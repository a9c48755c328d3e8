"""Named planning scenarios and the input adjustments each one implies."""

from enum import Enum
from typing import Dict

from pydantic import Field

from .base import DomainModel
from .material import MaterialType


class ScenarioType(str, Enum):
    """Demand/supply scenario tag."""
    BASELINE = "baseline"
    LOW_DEMAND = "low_demand"
    HIGH_DEMAND = "high_demand"
    WITHOUT_SUPPLY_CHAIN = "w/o_SC"
    LIMITED_SUPPLY_CHAIN = "lim_SC"


class ScenarioModifiers(DomainModel):
    """
    Adjustments applied to a configuration before it is solved.

    Attributes:
        demand_multiplier: Multiplier on every zone's baseline peak load
        cagr_offset: Added to every zone's demand CAGR (percentage points)
        supply_multiplier_by_type: Multiplier on primary supply per material type
        remove_lead_times: Treat every product as deployable without lead time
        land_multiplier: Multiplier on land and offshore availability
        unlimited_materials: Ignore material supply limits entirely
    """
    demand_multiplier: float = Field(default=1.0, ge=0)
    cagr_offset: float = Field(default=0.0)
    supply_multiplier_by_type: Dict[MaterialType, float] = Field(default_factory=dict)
    remove_lead_times: bool = False
    land_multiplier: float = Field(default=1.0, ge=0)
    unlimited_materials: bool = False

    def is_identity(self) -> bool:
        return self == ScenarioModifiers()


DEFAULT_SCENARIO_MODIFIERS: Dict[ScenarioType, ScenarioModifiers] = {
    ScenarioType.BASELINE: ScenarioModifiers(),
    ScenarioType.LOW_DEMAND: ScenarioModifiers(demand_multiplier=0.95, cagr_offset=-0.5),
    ScenarioType.HIGH_DEMAND: ScenarioModifiers(demand_multiplier=1.10, cagr_offset=0.5),
    ScenarioType.WITHOUT_SUPPLY_CHAIN: ScenarioModifiers(
        remove_lead_times=True,
        land_multiplier=3.0,
        unlimited_materials=True,
    ),
    ScenarioType.LIMITED_SUPPLY_CHAIN: ScenarioModifiers(
        supply_multiplier_by_type={
            MaterialType.RARE_EARTH: 0.5,
            MaterialType.CRITICAL: 0.7,
        },
    ),
}
