"""Manufactured component data model."""

from typing import Dict, Optional

from pydantic import Field, field_validator

from .base import DomainModel


class Component(DomainModel):
    """
    Intermediate product manufactured from raw materials (e.g. a battery cell).

    Attributes:
        id: Unique component identifier
        name: Display name
        material_demand: Tonnes of each material per unit of component
        production_capacity: Maximum units manufactured per year (None = unlimited)
        lead_time: Manufacturing lead time in years
    """
    id: str = Field(..., min_length=1, description="Unique component identifier")
    name: str = Field(default="", description="Component name")
    material_demand: Dict[str, float] = Field(
        default_factory=dict,
        description="material_id -> tonnes per unit",
    )
    production_capacity: Optional[float] = Field(None, ge=0, description="Units per year")
    lead_time: int = Field(default=0, ge=0, description="Manufacturing lead time (years)")

    @field_validator("material_demand")
    @classmethod
    def demand_must_be_non_negative(cls, v: Dict[str, float]) -> Dict[str, float]:
        negative = {k: q for k, q in v.items() if q < 0}
        if negative:
            raise ValueError(f"negative material demand: {negative}")
        return v
