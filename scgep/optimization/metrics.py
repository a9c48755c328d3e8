"""Derived metrics of a solved plan."""

import math
from dataclasses import dataclass, field
from typing import Dict, List

import numpy as np

from scgep.models import Configuration, TechnologyType, is_rps_eligible
from scgep.models.technology import SITE_KIND, SiteKind
from .supply_chain import SupplyChainIndex
from .variables import VariableState


@dataclass
class SolutionMetrics:
    """
    Time series derived from the final VariableState.

    Attributes:
        capacity_by_technology: MW in service per year, existing units included
        material_utilization_rate: Utilization / sector supply × 100 per year
        land_utilization_rate: zone -> technology -> % of the zone's area budget
        reserve_margin_satisfaction: ELCC-credited share of required capacity (%)
        rps_compliance: technology -> delivered share of its RPS target (%)
        load_shedding: Unserved energy per year across all zones (MWh)
    """
    capacity_by_technology: Dict[TechnologyType, np.ndarray] = field(default_factory=dict)
    material_utilization_rate: Dict[str, np.ndarray] = field(default_factory=dict)
    land_utilization_rate: Dict[str, Dict[TechnologyType, np.ndarray]] = field(default_factory=dict)
    reserve_margin_satisfaction: np.ndarray = field(default_factory=lambda: np.zeros(0))
    rps_compliance: Dict[TechnologyType, np.ndarray] = field(default_factory=dict)
    load_shedding: np.ndarray = field(default_factory=lambda: np.zeros(0))

    @property
    def total_capacity(self) -> np.ndarray:
        if not self.capacity_by_technology:
            return np.zeros(len(self.load_shedding))
        return np.sum(list(self.capacity_by_technology.values()), axis=0)

    def final_year_mix(self) -> Dict[str, float]:
        """MW by technology in the last planning year."""
        return {t.value: float(series[-1]) for t, series in self.capacity_by_technology.items()}


def utilization_rate(utilization: np.ndarray, sector_supply: float) -> np.ndarray:
    """Utilization as a percentage of sector supply; any use of a zero supply is infinite."""
    if math.isinf(sector_supply):
        return np.zeros_like(utilization)
    if sector_supply <= 0:
        return np.where(utilization > 0, math.inf, 0.0)
    return utilization / sector_supply * 100


def compute_metrics(configuration: Configuration, index: SupplyChainIndex, state: VariableState) -> SolutionMetrics:
    horizon = state.horizon
    params = configuration.system_parameters
    metrics = SolutionMetrics()

    # Capacity by technology
    technologies: List[TechnologyType] = []
    for zone in configuration.zones:
        for unit in zone.existing_units:
            if unit.technology not in technologies:
                technologies.append(unit.technology)
    for product in configuration.products:
        if product.technology_type not in technologies:
            technologies.append(product.technology_type)

    capacity = {t: np.zeros(horizon) for t in technologies}
    for zone in configuration.zones:
        for unit in zone.existing_units:
            for year in range(horizon):
                if unit.in_service(year, params.base_year):
                    capacity[unit.technology][year] += unit.capacity
    for deployment in state.deployments:
        capacity[deployment.technology] += state.operational_capacity[deployment.unit_id]
    metrics.capacity_by_technology = capacity

    # Materials
    metrics.material_utilization_rate = {
        material_id: utilization_rate(state.material_utilization[material_id], material.sector_supply)
        for material_id, material in index.materials.items()
    }

    # Land, per zone and technology
    products = configuration.product_map()
    for zone in configuration.zones:
        by_technology: Dict[TechnologyType, np.ndarray] = {}
        for deployment in state.zone_deployments(zone.id):
            density = products[deployment.product_id].capacity_density
            if not density:
                continue
            if SITE_KIND[deployment.technology] is SiteKind.OFFSHORE:
                budget = zone.available_offshore
            else:
                budget = zone.available_land
            area = state.operational_capacity[deployment.unit_id] / density
            if budget is None:
                rate = np.zeros(horizon)
            elif budget <= 0:
                rate = np.where(area > 0, math.inf, 0.0)
            else:
                rate = area / budget * 100
            by_technology[deployment.technology] = by_technology.get(deployment.technology, np.zeros(horizon)) + rate
        metrics.land_utilization_rate[zone.id] = by_technology

    # Reserve margin satisfaction
    margin = 1 + params.reserve_margin / 100
    required = np.array([
        sum(zone.peak_load(year) for zone in configuration.zones) * margin
        for year in range(horizon)
    ])
    violation = state.reserve_margin_violation if state.reserve_margin_violation is not None else np.zeros(horizon)
    with np.errstate(divide="ignore", invalid="ignore"):
        satisfaction = np.where(required > 0, (required - violation) / required * 100, 100.0)
    metrics.reserve_margin_satisfaction = satisfaction

    # RPS compliance
    demand = state.demand_energy if state.demand_energy is not None else np.zeros(horizon)
    for technology in technologies:
        if not is_rps_eligible(technology):
            metrics.rps_compliance[technology] = np.zeros(horizon)
            continue
        target = params.rps_targets.get(technology, 0.0)
        if target <= 0:
            metrics.rps_compliance[technology] = np.full(horizon, 100.0)
            continue
        produced = state.technology_energy.get(technology, np.zeros(horizon))
        required_energy = demand * target / 100
        with np.errstate(divide="ignore", invalid="ignore"):
            compliance = np.where(required_energy > 0, produced / required_energy * 100, 100.0)
        metrics.rps_compliance[technology] = np.minimum(100.0, compliance)

    metrics.load_shedding = state.total_load_shedding()
    return metrics
