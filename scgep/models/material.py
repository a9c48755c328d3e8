"""Raw material data model."""

import math
from enum import Enum
from typing import Optional

from pydantic import Field

from .base import DomainModel


class MaterialType(str, Enum):
    """Supply-risk category of a material."""
    CRITICAL = "critical"
    STANDARD = "standard"
    RARE_EARTH = "rare_earth"


class CriticalMaterial(DomainModel):
    """
    Raw material consumed by component manufacturing.

    Attributes:
        id: Unique material identifier (e.g. 'cobalt')
        name: Display name
        type: Supply-risk category
        usgs_code: Optional USGS commodity code
        primary_supply: Annual primary supply (tonnes/year)
        energy_sector_share: Fraction of primary supply available to the energy sector
        initial_stock: Stock on hand at the start of the horizon (tonnes)
        recovery_rate: Fraction of material content recovered from retired units
        cost_per_tonne: Market price ($/tonne)
    """
    id: str = Field(..., min_length=1, description="Unique material identifier")
    name: str = Field(..., description="Material name")
    type: MaterialType = Field(default=MaterialType.CRITICAL, description="Supply-risk category")
    usgs_code: Optional[str] = Field(None, description="USGS commodity code")
    primary_supply: float = Field(..., ge=0, description="Primary supply (tonnes/year)")
    energy_sector_share: float = Field(default=1.0, ge=0, le=1, description="Energy sector share of supply")
    initial_stock: float = Field(default=0.0, ge=0, description="Initial stock (tonnes)")
    recovery_rate: float = Field(default=0.0, ge=0, le=1, description="Recovery rate at retirement")
    cost_per_tonne: float = Field(default=0.0, ge=0, description="Market price ($/tonne)")

    @property
    def sector_supply(self) -> float:
        """Annual supply allocated to the energy sector (tonnes/year)."""
        if math.isinf(self.primary_supply):
            # Unconstrained supply stays unconstrained whatever the share
            return math.inf
        return self.primary_supply * self.energy_sector_share
