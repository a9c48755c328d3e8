"""
Post-solve bottleneck analysis.

Scans a solved plan for materials running close to their supply, zones
running out of area, products held back by lead time and years with
unserved load or reserve shortfall.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

import pandas as pd

from scgep.models import TechnologyType
from scgep.optimization.result_schema import Solution
from scgep.optimization.solver_config import SolverConfig
from scgep.optimization.supply_chain import SupplyChainIndex
from scgep.validation.errors import AnalysisPreconditionError

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class MaterialBottleneck:
    """
    A material whose utilization exceeded the constrained threshold.

    Attributes:
        material_id: Material identifier
        material_name: Display name
        severity: Severity from peak utilization
        peak_utilization: Highest utilization rate across the horizon (%)
        constrained_years: Calendar years above the threshold
        affected_technologies: Technologies whose products need this material
        impact: One-line description
    """
    material_id: str
    material_name: str
    severity: Severity
    peak_utilization: float
    constrained_years: List[int]
    affected_technologies: List[TechnologyType]
    impact: str


@dataclass(frozen=True)
class SpatialBottleneck:
    """A zone/technology using most of the zone's land or offshore area."""
    zone_id: str
    technology: TechnologyType
    peak_utilization: float
    constrained_years: List[int]


@dataclass(frozen=True)
class LeadTimeDelay:
    """A product that could not serve gaps in the listed years because of its lead time."""
    product_id: str
    technology: TechnologyType
    zone_id: str
    lead_time: int
    years: List[int]
    shortfall_mw: float


@dataclass(frozen=True)
class ReliabilityIssue:
    """A year with unserved energy or reserve-margin shortfall."""
    year: int
    load_shedding_mwh: float
    reserve_margin_deficit_mw: float
    affected_zones: List[str]


@dataclass
class BottleneckReport:
    """Findings for one solution, most severe materials first."""
    scenario: str
    materials: List[MaterialBottleneck] = field(default_factory=list)
    spatial: List[SpatialBottleneck] = field(default_factory=list)
    lead_time_delays: List[LeadTimeDelay] = field(default_factory=list)
    reliability: List[ReliabilityIssue] = field(default_factory=list)

    @property
    def has_bottlenecks(self) -> bool:
        return bool(self.materials or self.spatial or self.lead_time_delays or self.reliability)

    def critical_materials(self) -> List[MaterialBottleneck]:
        return [b for b in self.materials if b.severity is Severity.CRITICAL]

    def materials_dataframe(self) -> pd.DataFrame:
        """One row per material bottleneck."""
        return pd.DataFrame([
            {
                "material": b.material_name,
                "severity": b.severity.value,
                "peak_utilization": b.peak_utilization,
                "constrained_years": len(b.constrained_years),
                "first_constrained_year": b.constrained_years[0],
                "affected_technologies": ", ".join(t.value for t in b.affected_technologies),
            }
            for b in self.materials
        ], columns=[
            "material", "severity", "peak_utilization", "constrained_years",
            "first_constrained_year", "affected_technologies",
        ])

    def __str__(self) -> str:
        lines = [f"Bottlenecks [{self.scenario}]"]
        for b in self.materials:
            lines.append(f"  {b.severity.value.upper():8s} {b.material_name}: {b.impact}")
        if self.spatial:
            lines.append(f"  {len(self.spatial)} spatial bottleneck(s)")
        if self.lead_time_delays:
            lines.append(f"  {len(self.lead_time_delays)} lead-time delay(s)")
        if self.reliability:
            lines.append(f"  {len(self.reliability)} year(s) with reliability issues")
        if len(lines) == 1:
            lines.append("  None")
        return "\n".join(lines)


_SEVERITY_ORDER = {Severity.CRITICAL: 0, Severity.HIGH: 1, Severity.MEDIUM: 2, Severity.LOW: 3}


class BottleneckAnalyzer:
    """
    Builds a BottleneckReport from a Solution.

    Example:
        report = BottleneckAnalyzer().analyze(solution)
        for bottleneck in report.critical_materials():
            print(bottleneck.impact)
    """

    def __init__(self, solver_config: Optional[SolverConfig] = None):
        self.config = solver_config or SolverConfig()

    def severity(self, peak_utilization: float) -> Severity:
        if peak_utilization > self.config.severity_critical:
            return Severity.CRITICAL
        if peak_utilization > self.config.severity_high:
            return Severity.HIGH
        if peak_utilization > self.config.severity_medium:
            return Severity.MEDIUM
        return Severity.LOW

    def analyze(self, solution: Optional[Solution]) -> BottleneckReport:
        """
        Analyze a completed solve.

        Raises:
            AnalysisPreconditionError: ``solution`` is not a completed Solution
        """
        if not isinstance(solution, Solution) or not solution.variables.frozen:
            raise AnalysisPreconditionError(
                "Bottleneck analysis requires a completed solve",
                {"received": type(solution).__name__},
            )

        report = BottleneckReport(scenario=solution.scenario)
        report.materials = self._materials(solution)
        report.spatial = self._spatial(solution)
        report.lead_time_delays = self._lead_time_delays(solution)
        report.reliability = self._reliability(solution)
        logger.info(
            "Bottleneck analysis [%s]: %d material, %d spatial, %d lead-time, %d reliability",
            report.scenario, len(report.materials), len(report.spatial),
            len(report.lead_time_delays), len(report.reliability),
        )
        return report

    def _materials(self, solution: Solution) -> List[MaterialBottleneck]:
        configuration = solution.configuration
        base_year = configuration.system_parameters.base_year
        index = SupplyChainIndex(configuration)
        threshold = self.config.constrained_utilization

        findings = []
        for material in configuration.materials:
            rates = solution.metrics.material_utilization_rate[material.id]
            constrained = [base_year + y for y, rate in enumerate(rates) if rate > threshold]
            if not constrained:
                continue
            peak = float(rates.max())
            technologies = index.technologies_using(material.id)
            tech_list = ", ".join(t.value for t in technologies) or "no products"
            findings.append(MaterialBottleneck(
                material_id=material.id,
                material_name=material.name,
                severity=self.severity(peak),
                peak_utilization=peak,
                constrained_years=constrained,
                affected_technologies=technologies,
                impact=(
                    f"Material constraint active in {len(constrained)} year(s) "
                    f"from {constrained[0]}, limiting {tech_list}"
                ),
            ))
        findings.sort(key=lambda b: (_SEVERITY_ORDER[b.severity], -b.peak_utilization))
        return findings

    def _spatial(self, solution: Solution) -> List[SpatialBottleneck]:
        base_year = solution.configuration.system_parameters.base_year
        threshold = self.config.spatial_constrained_utilization
        findings = []
        for zone_id, by_technology in solution.metrics.land_utilization_rate.items():
            for technology, rates in by_technology.items():
                constrained = [base_year + y for y, rate in enumerate(rates) if rate > threshold]
                if constrained:
                    findings.append(SpatialBottleneck(
                        zone_id=zone_id,
                        technology=technology,
                        peak_utilization=float(rates.max()),
                        constrained_years=constrained,
                    ))
        return findings

    def _lead_time_delays(self, solution: Solution) -> List[LeadTimeDelay]:
        base_year = solution.configuration.system_parameters.base_year
        grouped: Dict[tuple, dict] = {}
        for deferral in solution.variables.deferrals:
            key = (deferral.product_id, deferral.zone_id)
            entry = grouped.setdefault(key, {
                "technology": deferral.technology,
                "lead_time": deferral.lead_time,
                "years": [],
                "shortfall": 0.0,
            })
            entry["years"].append(base_year + deferral.year)
            entry["shortfall"] += deferral.shortfall_mw
        return [
            LeadTimeDelay(
                product_id=product_id,
                technology=entry["technology"],
                zone_id=zone_id,
                lead_time=entry["lead_time"],
                years=entry["years"],
                shortfall_mw=entry["shortfall"],
            )
            for (product_id, zone_id), entry in grouped.items()
        ]

    def _reliability(self, solution: Solution) -> List[ReliabilityIssue]:
        variables = solution.variables
        base_year = solution.configuration.system_parameters.base_year
        issues = []
        for year in range(variables.horizon):
            shedding = float(solution.metrics.load_shedding[year])
            deficit = float(variables.reserve_margin_violation[year])
            if shedding <= 0 and deficit <= 0:
                continue
            zones = [
                zone_id for zone_id in variables.zone_ids
                if variables.load_shedding_energy[zone_id][year] > 0
                or variables.reserve_margin_violation_by_zone[zone_id][year] > 0
            ]
            issues.append(ReliabilityIssue(
                year=base_year + year,
                load_shedding_mwh=shedding,
                reserve_margin_deficit_mw=deficit,
                affected_zones=zones,
            ))
        return issues


def analyze(solution: Solution, solver_config: Optional[SolverConfig] = None) -> BottleneckReport:
    """Bottleneck report for a completed solve."""
    return BottleneckAnalyzer(solver_config).analyze(solution)
