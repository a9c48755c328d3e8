"""Planning zone, existing unit and transmission line data models."""

import math
from typing import Dict, List, Optional

from pydantic import Field, field_validator

from .base import DomainModel
from .technology import SiteKind, TechnologyType

SEASONS = 4
HOURS_PER_DAY = 24


def _check_profile(profile: List[List[float]], label: str) -> List[List[float]]:
    if len(profile) != SEASONS or any(len(day) != HOURS_PER_DAY for day in profile):
        raise ValueError(f"{label} must be {SEASONS} seasons x {HOURS_PER_DAY} hours")
    if any(value < 0 for day in profile for value in day):
        raise ValueError(f"{label} contains negative values")
    return profile


class ExistingUnit(DomainModel):
    """
    Generation unit already in service at the start of the horizon.

    Attributes:
        id: Unit identifier
        name: Display name
        technology: Technology type
        capacity: Nameplate capacity (MW)
        retirement_year: Calendar year the unit leaves service (None = never)
        commission_year: Calendar year the unit entered service
    """
    id: str = Field(..., min_length=1, description="Unit identifier")
    name: str = Field(default="", description="Unit name")
    technology: TechnologyType = Field(..., description="Technology type")
    capacity: float = Field(..., ge=0, description="Capacity (MW)")
    retirement_year: Optional[int] = Field(None, description="Retirement calendar year")
    commission_year: Optional[int] = Field(None, description="Commission calendar year")

    def in_service(self, year_index: int, base_year: int) -> bool:
        """Check whether the unit is available in a planning year (0-based)."""
        if self.retirement_year is None:
            return True
        return year_index < self.retirement_year - base_year


class Zone(DomainModel):
    """
    Planning region with its own load, existing fleet and siting limits.

    Attributes:
        id: Zone identifier
        name: Display name
        baseline_peak_load: Peak load in the first planning year (MW)
        demand_cagr: Compound annual growth rate of peak load (percent)
        existing_units: Units in service at the start of the horizon
        available_land: Land available for new projects (km², None = unlimited)
        available_offshore: Offshore area available (km², None = none)
        load_profiles: Normalized load shape, 4 seasons x 24 hours
        renewable_profiles: Availability shape per variable technology, 4 x 24
    """
    id: str = Field(..., min_length=1, description="Zone identifier")
    name: str = Field(default="", description="Zone name")
    baseline_peak_load: float = Field(..., ge=0, description="Baseline peak load (MW)")
    demand_cagr: float = Field(default=0.0, gt=-100, description="Demand CAGR (%)")
    existing_units: List[ExistingUnit] = Field(default_factory=list)
    available_land: Optional[float] = Field(None, ge=0, description="Available land (km²)")
    available_offshore: Optional[float] = Field(None, ge=0, description="Available offshore area (km²)")
    load_profiles: Optional[List[List[float]]] = Field(None, description="[season][hour] load shape")
    renewable_profiles: Dict[TechnologyType, List[List[float]]] = Field(default_factory=dict)

    @field_validator("load_profiles")
    @classmethod
    def load_profile_shape(cls, v: Optional[List[List[float]]]) -> Optional[List[List[float]]]:
        if v is None:
            return v
        return _check_profile(v, "load_profiles")

    @field_validator("renewable_profiles")
    @classmethod
    def renewable_profile_shape(cls, v: Dict[TechnologyType, List[List[float]]]):
        for technology, profile in v.items():
            _check_profile(profile, f"renewable_profiles[{technology.value}]")
        return v

    def peak_load(self, year_index: int) -> float:
        """Peak load (MW) in a planning year."""
        return self.baseline_peak_load * (1 + self.demand_cagr / 100) ** year_index

    def site_area(self, site: SiteKind) -> float:
        """Area budget (km²) for a site kind. Unset land is unlimited, unset offshore is none."""
        if site is SiteKind.LAND:
            return math.inf if self.available_land is None else self.available_land
        return 0.0 if self.available_offshore is None else self.available_offshore

    def existing_capacity(self, year_index: int, base_year: int) -> float:
        """Nameplate capacity (MW) of existing units still in service."""
        return sum(
            unit.capacity for unit in self.existing_units
            if unit.in_service(year_index, base_year)
        )


class TransmissionLine(DomainModel):
    """Transfer corridor between two zones (bidirectional)."""
    id: str = Field(..., min_length=1, description="Line identifier")
    from_zone: str = Field(..., description="Zone id at one end")
    to_zone: str = Field(..., description="Zone id at the other end")
    capacity: float = Field(..., ge=0, description="Transfer capacity (MW)")
