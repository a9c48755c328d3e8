"""Tunable engine settings."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from . import constants


class SolverConfig(BaseModel):
    """
    Engine settings for the heuristic solver and the post-solve analysis.

    Attributes:
        max_iterations: Cap on rescale-and-recheck passes
        gap_fraction: Share of the remaining capacity gap proposed per product
        unit_cap_mw: Largest single deployment (MW)
        tolerance: Relative tolerance on material/land/component limits
        constrained_utilization: Material utilization (%) counted as constrained
        severity_critical: Peak utilization (%) above which a material is critical
        severity_high: Peak utilization (%) above which a material is high
        severity_medium: Peak utilization (%) above which a material is medium
        spatial_constrained_utilization: Land utilization (%) counted as constrained
        hours_per_year: Hours used to annualize variable O&M
        storage_efficiency: Round-trip efficiency of storage dispatch
    """
    model_config = ConfigDict(frozen=True)

    max_iterations: int = Field(default=constants.MAX_ITERATIONS, ge=1)
    gap_fraction: float = Field(default=constants.GAP_FRACTION, gt=0, le=1)
    unit_cap_mw: float = Field(default=constants.UNIT_CAP_MW, gt=0)
    tolerance: float = Field(default=constants.FEASIBILITY_TOLERANCE, ge=0)
    constrained_utilization: float = Field(default=constants.CONSTRAINED_UTILIZATION, ge=0)
    severity_critical: float = Field(default=constants.SEVERITY_CRITICAL, ge=0)
    severity_high: float = Field(default=constants.SEVERITY_HIGH, ge=0)
    severity_medium: float = Field(default=constants.SEVERITY_MEDIUM, ge=0)
    spatial_constrained_utilization: float = Field(
        default=constants.SPATIAL_CONSTRAINED_UTILIZATION, ge=0
    )
    hours_per_year: int = Field(default=constants.HOURS_PER_YEAR, gt=0)
    storage_efficiency: float = Field(default=constants.STORAGE_ROUND_TRIP_EFFICIENCY, gt=0, le=1)

    @model_validator(mode="after")
    def severity_thresholds_ordered(self) -> "SolverConfig":
        if not self.severity_critical >= self.severity_high >= self.severity_medium:
            raise ValueError("severity thresholds must satisfy critical >= high >= medium")
        return self
