"""Solver result types and their serializable summary."""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator

from scgep.costs import CostBreakdown
from scgep.models import Configuration, TechnologyType
from .metrics import SolutionMetrics
from .variables import VariableState


class ConvergenceStatus(str, Enum):
    """How the solve ended."""
    OPTIMAL = "optimal"
    FEASIBLE = "feasible"
    INFEASIBLE = "infeasible"
    UNBOUNDED = "unbounded"


@dataclass(frozen=True)
class Solution:
    """
    Result of one solve.

    Attributes:
        objective_value: Total cost of the plan ($)
        feasibility: True if every material, spatial and lead-time limit holds
        convergence: How the rescale loop ended
        solve_time: Wall-clock seconds
        iterations: Feasibility checks performed
        gap: Optimality gap estimate
        variables: Final, read-only VariableState
        costs: Cost breakdown by year
        metrics: Derived time series
        configuration: Configuration actually solved (scenario adjustments applied)
    """
    objective_value: float
    feasibility: bool
    convergence: ConvergenceStatus
    solve_time: float
    iterations: int
    gap: float
    variables: VariableState
    costs: CostBreakdown
    metrics: SolutionMetrics
    configuration: Configuration

    @property
    def scenario(self) -> str:
        return self.configuration.scenario.value

    def __str__(self) -> str:
        return (
            f"Solution [{self.scenario}] {self.convergence.value}: "
            f"objective ${self.objective_value:,.0f}, "
            f"{len(self.variables.deployments)} deployment(s), "
            f"{self.iterations} iteration(s), {self.solve_time:.2f}s"
        )

    def to_summary_dict(self) -> Dict[str, Any]:
        """Plain-Python summary; non-finite rates become None so the result is valid JSON."""
        return SolutionSummary.from_solution(self).model_dump(mode="json")


def _series(values) -> List[Optional[float]]:
    """List of floats with NaN and infinities replaced by None."""
    return [float(v) if v is not None and math.isfinite(v) else None for v in values]


def _json_safe(value):
    if isinstance(value, dict):
        return {key: _json_safe(item) for key, item in value.items()}
    if isinstance(value, np.ndarray):
        value = value.tolist()
    if isinstance(value, (list, tuple)):
        return _series(value)
    return value


class CostSummary(BaseModel):
    """Yearly and total plan costs ($)."""

    investment: List[float] = Field(..., description="Investment per year")
    operational: List[float] = Field(..., description="O&M per year")
    penalty: List[float] = Field(..., description="Penalties per year")
    total: float = Field(..., ge=0, description="Undiscounted total")
    net_present_value: float = Field(..., description="Discounted total")

    model_config = ConfigDict(extra="allow")


class DeploymentSummary(BaseModel):
    """One deployment with calendar years."""

    unit_id: str = Field(..., description="Deployment identifier")
    product_id: str = Field(..., description="Product built")
    zone_id: str = Field(..., description="Zone built in")
    technology: TechnologyType = Field(..., description="Technology of the product")
    decision_year: int = Field(..., description="Investment year")
    online_year: int = Field(..., description="First year in service")
    retirement_year: int = Field(..., description="First year out of service")
    capacity_mw: float = Field(..., ge=0, description="Nameplate capacity (MW)")

    model_config = ConfigDict(extra="allow")


class MetricsSummary(BaseModel):
    """
    Derived time series of a plan.

    Rates can be infinite (use of a zero supply or zero area); those entries
    are None.
    """

    capacity_by_technology: Dict[str, List[Optional[float]]] = Field(default_factory=dict)
    material_utilization_rate: Dict[str, List[Optional[float]]] = Field(default_factory=dict)
    land_utilization_rate: Dict[str, Dict[str, List[Optional[float]]]] = Field(default_factory=dict)
    reserve_margin_satisfaction: List[Optional[float]] = Field(default_factory=list)
    rps_compliance: Dict[str, List[Optional[float]]] = Field(default_factory=dict)
    load_shedding: List[Optional[float]] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow")

    @field_validator("*", mode="before")
    @classmethod
    def non_finite_to_none(cls, v):
        """Map NaN and infinite entries to None."""
        return _json_safe(v)


class SolutionSummary(BaseModel):
    """Serializable summary of a Solution."""

    scenario: str = Field(..., description="Scenario solved")
    objective_value: float = Field(..., ge=0, description="Total cost ($)")
    feasibility: bool = Field(..., description="All limits hold")
    convergence: ConvergenceStatus = Field(..., description="How the solve ended")
    solve_time: float = Field(..., ge=0, description="Wall-clock seconds")
    iterations: int = Field(..., ge=0, description="Feasibility checks performed")
    gap: float = Field(..., ge=0, description="Optimality gap estimate")
    years: List[int] = Field(..., description="Calendar year of each planning year")
    costs: CostSummary
    metrics: MetricsSummary
    deployments: List[DeploymentSummary] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow")

    @classmethod
    def from_solution(cls, solution: Solution) -> "SolutionSummary":
        base_year = solution.configuration.system_parameters.base_year
        costs = solution.costs
        metrics = solution.metrics
        return cls(
            scenario=solution.scenario,
            objective_value=solution.objective_value,
            feasibility=solution.feasibility,
            convergence=solution.convergence,
            solve_time=solution.solve_time,
            iterations=solution.iterations,
            gap=solution.gap,
            years=[base_year + y for y in range(solution.variables.horizon)],
            costs=CostSummary(
                investment=costs.investment.tolist(),
                operational=costs.operational.tolist(),
                penalty=costs.penalty.tolist(),
                total=costs.total,
                net_present_value=costs.net_present_value,
            ),
            metrics=MetricsSummary(
                capacity_by_technology={t.value: s for t, s in metrics.capacity_by_technology.items()},
                material_utilization_rate=metrics.material_utilization_rate,
                land_utilization_rate={
                    zone_id: {t.value: s for t, s in by_technology.items()}
                    for zone_id, by_technology in metrics.land_utilization_rate.items()
                },
                reserve_margin_satisfaction=metrics.reserve_margin_satisfaction,
                rps_compliance={t.value: s for t, s in metrics.rps_compliance.items()},
                load_shedding=metrics.load_shedding,
            ),
            deployments=[
                DeploymentSummary(
                    unit_id=d.unit_id,
                    product_id=d.product_id,
                    zone_id=d.zone_id,
                    technology=d.technology,
                    decision_year=base_year + d.decision_year,
                    online_year=base_year + d.online_year,
                    retirement_year=base_year + d.retirement_year,
                    capacity_mw=d.capacity_mw,
                )
                for d in solution.variables.deployments
            ],
        )
