"""System-wide planning parameters."""

from typing import Dict, List

from pydantic import Field, field_validator

from .base import DomainModel
from .technology import TechnologyType


class RepresentativeDay(DomainModel):
    """A representative day standing for ``occurrences`` days of a season."""
    season: str = Field(..., description="Season name")
    occurrences: int = Field(..., ge=0, description="Days per year represented")


def default_representative_days() -> List[RepresentativeDay]:
    return [
        RepresentativeDay(season="spring", occurrences=92),
        RepresentativeDay(season="summer", occurrences=92),
        RepresentativeDay(season="fall", occurrences=91),
        RepresentativeDay(season="winter", occurrences=90),
    ]


class SystemParameters(DomainModel):
    """
    Horizon, reliability and policy parameters.

    Attributes:
        planning_horizon: Number of planning years
        base_year: Calendar year of planning year 0
        reserve_margin: Required reserve margin above peak load (percent)
        rps_targets: Required share of demand energy per technology (percent)
        voll: Value of lost load ($/MWh)
        reserve_margin_penalty: Penalty per MW of reserve shortfall ($/MW-year)
        rps_penalty: Penalty per MWh of RPS shortfall ($/MWh)
        discount_rate: Discount rate for present-value reporting
        representative_days: Season weights for the representative-day dispatch
    """
    planning_horizon: int = Field(..., ge=1, description="Planning horizon (years)")
    base_year: int = Field(default=2024, description="First calendar year")
    reserve_margin: float = Field(default=15.0, ge=0, description="Reserve margin (%)")
    rps_targets: Dict[TechnologyType, float] = Field(default_factory=dict)
    voll: float = Field(default=10000.0, ge=0, description="Value of lost load ($/MWh)")
    reserve_margin_penalty: float = Field(default=0.0, ge=0, description="$/MW-year")
    rps_penalty: float = Field(default=0.0, ge=0, description="$/MWh")
    discount_rate: float = Field(default=0.0, ge=0, description="Discount rate")
    representative_days: List[RepresentativeDay] = Field(
        default_factory=default_representative_days,
        min_length=4,
        max_length=4,
    )

    @field_validator("rps_targets")
    @classmethod
    def targets_are_percentages(cls, v: Dict[TechnologyType, float]) -> Dict[TechnologyType, float]:
        bad = {k.value: t for k, t in v.items() if t < 0 or t > 100}
        if bad:
            raise ValueError(f"RPS targets must be within 0-100%: {bad}")
        return v

    def calendar_year(self, year_index: int) -> int:
        return self.base_year + year_index
