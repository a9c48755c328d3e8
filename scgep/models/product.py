"""Deployable technology (product) data model."""

from typing import Dict, Optional

from pydantic import Field, field_validator

from .base import DomainModel
from .technology import TechnologyType


class Product(DomainModel):
    """
    A technology option that can be built in a zone.

    Attributes:
        id: Unique product identifier
        name: Display name
        technology_type: Technology category
        component_demand: Units of each component per MW of capacity
        capital_cost: Investment cost ($/MW)
        fixed_om_cost: Fixed O&M cost ($/MW-year)
        variable_om_cost: Variable O&M cost ($/MWh)
        lead_time: Years between investment decision and operation
        lifetime: Operating lifetime in years, counted from the investment decision
        elcc_factor: Share of nameplate credited toward the reserve margin
        capacity_density: MW per km² of site area (None = no area use)
        availability_factor: Annual capacity factor for variable renewables
        storage_duration_hours: Energy-to-power ratio for storage products
        max_unit_capacity_mw: Largest single deployment (MW)
        max_zone_capacity_mw: Cap on operational capacity per zone (None = uncapped)
    """
    id: str = Field(..., min_length=1, description="Unique product identifier")
    name: str = Field(default="", description="Product name")
    technology_type: TechnologyType = Field(..., description="Technology category")
    component_demand: Dict[str, float] = Field(
        default_factory=dict,
        description="component_id -> units per MW",
    )
    capital_cost: float = Field(..., ge=0, description="Capital cost ($/MW)")
    fixed_om_cost: float = Field(default=0.0, ge=0, description="Fixed O&M ($/MW-year)")
    variable_om_cost: float = Field(default=0.0, ge=0, description="Variable O&M ($/MWh)")
    lead_time: int = Field(default=0, ge=0, description="Lead time (years)")
    lifetime: int = Field(..., ge=1, description="Lifetime (years)")
    elcc_factor: float = Field(..., ge=0, le=1, description="ELCC factor")
    capacity_density: Optional[float] = Field(None, gt=0, description="MW per km²")
    availability_factor: Optional[float] = Field(None, ge=0, le=1, description="Capacity factor")
    storage_duration_hours: float = Field(default=4.0, gt=0, description="Storage duration (hours)")
    max_unit_capacity_mw: float = Field(default=500.0, gt=0, description="Per-unit cap (MW)")
    max_zone_capacity_mw: Optional[float] = Field(None, ge=0, description="Per-zone cap (MW)")

    @field_validator("component_demand")
    @classmethod
    def demand_must_be_non_negative(cls, v: Dict[str, float]) -> Dict[str, float]:
        negative = {k: q for k, q in v.items() if q < 0}
        if negative:
            raise ValueError(f"negative component demand: {negative}")
        return v

    @property
    def priority_score(self) -> float:
        """Reliability credit per year of lead time per $M/MW of capital cost."""
        cost_millions = self.capital_cost / 1_000_000
        if cost_millions <= 0:
            return float("inf")
        return self.elcc_factor / (self.lead_time + 1) / cost_millions
