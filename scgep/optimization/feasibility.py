"""
Whole-plan feasibility check and targeted rescaling.

Only deployments that actually cause a violation are shrunk: a material
oversubscribed in a year shrinks the deployments consuming that material at
that decision year, an oversubscribed zone shrinks that zone's area-using
deployments. Products that do not touch the scarce resource are left alone.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List

from scgep.models import Configuration
from scgep.models.technology import SITE_KIND, SiteKind
from .solver_config import SolverConfig
from .supply_chain import SupplyChainIndex, material_limit
from .variables import VariableState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MaterialViolation:
    material_id: str
    year: int
    utilization: float
    limit: float

    @property
    def scale_factor(self) -> float:
        return self.limit / self.utilization if self.utilization > 0 else 1.0


@dataclass(frozen=True)
class ComponentViolation:
    component_id: str
    year: int
    production: float
    capacity: float

    @property
    def scale_factor(self) -> float:
        return self.capacity / self.production if self.production > 0 else 1.0


@dataclass(frozen=True)
class SpatialViolation:
    zone_id: str
    year: int
    site: SiteKind
    used_km2: float
    available_km2: float

    @property
    def scale_factor(self) -> float:
        return self.available_km2 / self.used_km2 if self.used_km2 > 0 else 1.0


@dataclass(frozen=True)
class LeadTimeViolation:
    unit_id: str
    product_id: str
    required_years: int
    actual_years: int


@dataclass
class FeasibilityReport:
    """Constraint violations found in one check of the plan."""
    material: List[MaterialViolation] = field(default_factory=list)
    component: List[ComponentViolation] = field(default_factory=list)
    spatial: List[SpatialViolation] = field(default_factory=list)
    lead_time: List[LeadTimeViolation] = field(default_factory=list)

    @property
    def feasible(self) -> bool:
        return not (self.material or self.component or self.spatial or self.lead_time)

    def __str__(self) -> str:
        if self.feasible:
            return "Feasible"
        return (
            f"Infeasible: {len(self.material)} material, {len(self.component)} component, "
            f"{len(self.spatial)} spatial, {len(self.lead_time)} lead-time violation(s)"
        )


class FeasibilityChecker:
    """
    Checks a plan against material, component, spatial and lead-time limits.

    Example:
        checker = FeasibilityChecker(config, index, SolverConfig())
        report = checker.check(state)
        if not report.feasible:
            checker.rescale(state, report)
    """

    def __init__(self, configuration: Configuration, index: SupplyChainIndex, solver_config: SolverConfig):
        self.configuration = configuration
        self.index = index
        self.tolerance = solver_config.tolerance
        self.zones = configuration.zone_map()
        self.products = configuration.product_map()

    def _exceeds(self, used: float, limit: float) -> bool:
        if math.isinf(limit):
            return False
        return used > limit + self.tolerance * max(1.0, abs(limit))

    def check(self, state: VariableState) -> FeasibilityReport:
        report = FeasibilityReport()

        for material_id, material in self.index.materials.items():
            utilization = state.material_utilization[material_id]
            opening = state.material_opening_stock[material_id]
            for year in range(state.horizon):
                limit = material_limit(material, opening, year)
                if self._exceeds(float(utilization[year]), limit):
                    report.material.append(
                        MaterialViolation(material_id, year, float(utilization[year]), limit)
                    )

        for component_id, component in self.index.components.items():
            if component.production_capacity is None:
                continue
            production = state.component_production[component_id]
            for year in range(state.horizon):
                if self._exceeds(float(production[year]), component.production_capacity):
                    report.component.append(
                        ComponentViolation(component_id, year, float(production[year]), component.production_capacity)
                    )

        for zone_id, zone in self.zones.items():
            for site, used_series in (
                (SiteKind.LAND, state.land_use[zone_id]),
                (SiteKind.OFFSHORE, state.offshore_use[zone_id]),
            ):
                available = zone.site_area(site)
                for year in range(state.horizon):
                    if self._exceeds(float(used_series[year]), available):
                        report.spatial.append(
                            SpatialViolation(zone_id, year, site, float(used_series[year]), available)
                        )

        for deployment in state.deployments:
            required = self.products[deployment.product_id].lead_time
            actual = deployment.online_year - deployment.decision_year
            if actual < required:
                report.lead_time.append(
                    LeadTimeViolation(deployment.unit_id, deployment.product_id, required, actual)
                )

        return report

    def scale_factors(self, state: VariableState, report: FeasibilityReport) -> Dict[str, float]:
        """
        Per-deployment shrink factors that resolve the report's violations.

        Each deployment gets the smallest factor among the violations it
        contributes to. Deployments not involved get no entry (factor 1).
        """
        factors: Dict[str, float] = {}

        def shrink(unit_id: str, factor: float) -> None:
            factor = max(0.0, min(1.0, factor))
            if factor < factors.get(unit_id, 1.0):
                factors[unit_id] = factor

        for violation in report.material:
            for deployment in state.deployments:
                if deployment.decision_year != violation.year:
                    continue
                if self.index.material_intensity(deployment.product_id).get(violation.material_id, 0.0) > 0:
                    shrink(deployment.unit_id, violation.scale_factor)

        for violation in report.component:
            for deployment in state.deployments:
                if deployment.decision_year != violation.year:
                    continue
                if self.index.component_intensity(deployment.product_id).get(violation.component_id, 0.0) > 0:
                    shrink(deployment.unit_id, violation.scale_factor)

        for violation in report.spatial:
            for deployment in state.zone_deployments(violation.zone_id):
                if not deployment.is_operational(violation.year):
                    continue
                if SITE_KIND[deployment.technology] is not violation.site:
                    continue
                if self.products[deployment.product_id].capacity_density:
                    shrink(deployment.unit_id, violation.scale_factor)

        return factors

    def rescale(self, state: VariableState, report: FeasibilityReport) -> Dict[str, float]:
        """Apply ``scale_factors`` to the state. Returns the factors used."""
        factors = self.scale_factors(state, report)
        if factors:
            changed = state.rescale(factors)
            logger.debug("Rescaled %d deployment(s): %s", changed, report)
        return factors

    def check_and_rescale(self, state: VariableState) -> Dict[str, float]:
        """One check-and-rescale pass. A feasible state comes back untouched with no factors."""
        return self.rescale(state, self.check(state))
