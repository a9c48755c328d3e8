"""
Mutable solution state built up by the solver.

Every capacity decision is recorded as a ``Deployment`` in a ledger. The
year-indexed series (capacity, material utilization and stock, production,
land use) are derived from that ledger, so rescaling a deployment and
rebuilding always leaves the series consistent with each other.
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from scgep.models import (
    Configuration,
    Product,
    SEASONS,
    HOURS_PER_DAY,
    TechnologyType,
)
from scgep.models.technology import SITE_KIND, SiteKind
from .supply_chain import SupplyChainIndex, roll_stock

logger = logging.getLogger(__name__)

# Deployments shrunk below this size are dropped from the ledger (MW)
MIN_DEPLOYMENT_MW = 1e-9


@dataclass(frozen=True)
class Deployment:
    """
    One committed capacity addition.

    Attributes:
        unit_id: Unique identifier of the deployed unit
        product_id: Product deployed
        zone_id: Zone it is built in
        technology: Technology type of the product
        decision_year: Planning year of the investment decision
        online_year: First planning year the unit is operational
        lifetime: Product lifetime in years, counted from the decision year
        capacity_mw: Nameplate capacity (MW)
        sequence: Commit order, used for deterministic tie-breaks
    """
    unit_id: str
    product_id: str
    zone_id: str
    technology: TechnologyType
    decision_year: int
    online_year: int
    lifetime: int
    capacity_mw: float
    sequence: int

    @property
    def retirement_year(self) -> int:
        return self.decision_year + self.lifetime

    def operational_years(self, horizon: int) -> range:
        return range(self.online_year, min(self.retirement_year, horizon))

    def is_operational(self, year: int) -> bool:
        return self.online_year <= year < self.retirement_year


@dataclass(frozen=True)
class LeadTimeDeferral:
    """A product that could not serve a zone/year gap because its lead time is too long."""
    product_id: str
    zone_id: str
    technology: TechnologyType
    year: int
    lead_time: int
    shortfall_mw: float


def _dispatch_array(horizon: int) -> np.ndarray:
    return np.zeros((horizon, SEASONS, HOURS_PER_DAY))


@dataclass
class VariableState:
    """
    Solution under construction.

    Year-indexed arrays have length ``horizon``; dispatch arrays have shape
    ``(horizon, seasons, hours)``. The solver owns the state while solving and
    calls ``freeze()`` before handing it out in a Solution.
    """
    horizon: int
    zone_ids: List[str]
    deployments: List[Deployment] = field(default_factory=list)
    deferrals: List[LeadTimeDeferral] = field(default_factory=list)

    # Supply chain
    material_utilization: Dict[str, np.ndarray] = field(default_factory=dict)
    material_stock: Dict[str, np.ndarray] = field(default_factory=dict)
    material_opening_stock: Dict[str, np.ndarray] = field(default_factory=dict)
    material_recovered: Dict[str, np.ndarray] = field(default_factory=dict)
    component_production: Dict[str, np.ndarray] = field(default_factory=dict)
    product_production: Dict[str, np.ndarray] = field(default_factory=dict)

    # Capacity per deployed unit
    planned_capacity: Dict[str, np.ndarray] = field(default_factory=dict)
    built_status: Dict[str, np.ndarray] = field(default_factory=dict)
    operational_capacity: Dict[str, np.ndarray] = field(default_factory=dict)
    retirement_status: Dict[str, np.ndarray] = field(default_factory=dict)

    # Siting, km² in use per zone
    land_use: Dict[str, np.ndarray] = field(default_factory=dict)
    offshore_use: Dict[str, np.ndarray] = field(default_factory=dict)

    # Dispatch, zone -> technology -> (year, season, hour) MW
    generation: Dict[str, Dict[TechnologyType, np.ndarray]] = field(default_factory=dict)
    transfer: Dict[str, np.ndarray] = field(default_factory=dict)
    storage_charge: Dict[str, np.ndarray] = field(default_factory=dict)
    storage_discharge: Dict[str, np.ndarray] = field(default_factory=dict)
    state_of_charge: Dict[str, np.ndarray] = field(default_factory=dict)
    load_shedding: Dict[str, np.ndarray] = field(default_factory=dict)
    load_shedding_energy: Dict[str, np.ndarray] = field(default_factory=dict)

    # Reliability and policy
    demand_energy: Optional[np.ndarray] = None
    technology_energy: Dict[TechnologyType, np.ndarray] = field(default_factory=dict)
    reserve_margin_violation: Optional[np.ndarray] = None
    reserve_margin_violation_by_zone: Dict[str, np.ndarray] = field(default_factory=dict)
    rps_violation: Dict[TechnologyType, np.ndarray] = field(default_factory=dict)

    frozen: bool = False

    _index: Optional[SupplyChainIndex] = field(default=None, repr=False)
    _land_density: Dict[str, Optional[float]] = field(default_factory=dict, repr=False)

    @classmethod
    def initialize(cls, configuration: Configuration, index: SupplyChainIndex) -> "VariableState":
        """Fresh, empty state sized to the configuration's horizon."""
        horizon = configuration.horizon
        state = cls(
            horizon=horizon,
            zone_ids=[z.id for z in configuration.zones],
            _index=index,
            _land_density={p.id: p.capacity_density for p in configuration.products},
        )
        state.rebuild()

        for zone in configuration.zones:
            state.generation[zone.id] = {}
            state.storage_charge[zone.id] = _dispatch_array(horizon)
            state.storage_discharge[zone.id] = _dispatch_array(horizon)
            state.state_of_charge[zone.id] = _dispatch_array(horizon)
            state.load_shedding[zone.id] = _dispatch_array(horizon)
            state.load_shedding_energy[zone.id] = np.zeros(horizon)
            state.reserve_margin_violation_by_zone[zone.id] = np.zeros(horizon)
        for line in configuration.transmission_lines:
            state.transfer[line.id] = _dispatch_array(horizon)
        state.demand_energy = np.zeros(horizon)
        state.reserve_margin_violation = np.zeros(horizon)
        return state

    # ------------------------------------------------------------------
    # Ledger
    # ------------------------------------------------------------------

    def add_deployment(
        self,
        product: Product,
        zone_id: str,
        decision_year: int,
        online_year: int,
        capacity_mw: float,
    ) -> Deployment:
        """Commit a deployment and update the derived series."""
        self._check_writable()
        unit_id = f"{product.id}_{zone_id}_y{online_year}"
        if unit_id in self.planned_capacity:
            suffix = 2
            while f"{unit_id}_{suffix}" in self.planned_capacity:
                suffix += 1
            unit_id = f"{unit_id}_{suffix}"

        deployment = Deployment(
            unit_id=unit_id,
            product_id=product.id,
            zone_id=zone_id,
            technology=product.technology_type,
            decision_year=decision_year,
            online_year=online_year,
            lifetime=product.lifetime,
            capacity_mw=capacity_mw,
            sequence=len(self.deployments),
        )
        self.deployments.append(deployment)
        self._accumulate(deployment)
        self._roll_stocks(self._index.material_intensity(product.id))
        logger.debug(
            "Deployed %.1f MW of %s in %s (decision year %d, online %d)",
            capacity_mw, product.id, zone_id, decision_year, online_year,
        )
        return deployment

    def record_deferral(self, deferral: LeadTimeDeferral) -> None:
        self._check_writable()
        self.deferrals.append(deferral)

    def rescale(self, factors: Dict[str, float]) -> int:
        """
        Shrink deployments by unit_id -> factor (0-1) and rebuild the series.

        Deployments shrunk to nothing are removed from the ledger.

        Returns:
            Number of deployments changed
        """
        self._check_writable()
        changed = 0
        kept: List[Deployment] = []
        for deployment in self.deployments:
            factor = factors.get(deployment.unit_id, 1.0)
            if factor < 1.0:
                changed += 1
                deployment = dataclasses.replace(deployment, capacity_mw=deployment.capacity_mw * factor)
            if deployment.capacity_mw > MIN_DEPLOYMENT_MW:
                kept.append(deployment)
        self.deployments = kept
        if changed:
            self.rebuild()
        return changed

    def rebuild(self) -> None:
        """Recompute every derived series from the deployment ledger."""
        horizon = self.horizon
        index = self._index
        self.material_utilization = {m: np.zeros(horizon) for m in index.materials}
        self.material_recovered = {m: np.zeros(horizon) for m in index.materials}
        self.component_production = {c: np.zeros(horizon) for c in index.components}
        self.product_production = {p: np.zeros(horizon) for p in index.products}
        self.planned_capacity = {}
        self.built_status = {}
        self.operational_capacity = {}
        self.retirement_status = {}
        self.land_use = {z: np.zeros(horizon) for z in self.zone_ids}
        self.offshore_use = {z: np.zeros(horizon) for z in self.zone_ids}

        for deployment in self.deployments:
            self._accumulate(deployment)
        self._roll_stocks(index.materials)

    def _accumulate(self, deployment: Deployment) -> None:
        horizon = self.horizon
        d = deployment
        mw = d.capacity_mw

        planned = np.zeros(horizon)
        built = np.zeros(horizon)
        operational = np.zeros(horizon)
        retired = np.zeros(horizon)
        planned[d.decision_year] = mw
        built[d.decision_year] = 1.0
        years = d.operational_years(horizon)
        operational[years.start:years.stop] = mw
        if d.retirement_year < horizon:
            retired[d.retirement_year] = 1.0

        self.planned_capacity[d.unit_id] = planned
        self.built_status[d.unit_id] = built
        self.operational_capacity[d.unit_id] = operational
        self.retirement_status[d.unit_id] = retired

        self.product_production[d.product_id][d.decision_year] += mw / 1000.0
        for component_id, units in self._index.component_intensity(d.product_id).items():
            self.component_production[component_id][d.decision_year] += units * mw
        for material_id, tonnes in self._index.material_intensity(d.product_id).items():
            content = tonnes * mw
            self.material_utilization[material_id][d.decision_year] += content
            if d.retirement_year < horizon:
                recovery = self._index.materials[material_id].recovery_rate
                self.material_recovered[material_id][d.retirement_year] += recovery * content

        density = self._land_density.get(d.product_id)
        if density:
            area = self.land_use if SITE_KIND[d.technology] is SiteKind.LAND else self.offshore_use
            area[d.zone_id][years.start:years.stop] += mw / density

    def _roll_stocks(self, material_ids) -> None:
        for material_id in material_ids:
            opening, closing = roll_stock(
                self._index.materials[material_id],
                self.material_utilization[material_id],
                self.material_recovered[material_id],
            )
            self.material_opening_stock[material_id] = opening
            self.material_stock[material_id] = closing

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def zone_deployments(self, zone_id: str) -> List[Deployment]:
        return [d for d in self.deployments if d.zone_id == zone_id]

    def zone_operational_capacity(self, zone_id: str, year: int) -> float:
        """MW of deployed units operational in a zone and year."""
        return sum(
            d.capacity_mw for d in self.deployments
            if d.zone_id == zone_id and d.is_operational(year)
        )

    def product_operational_capacity(self, product_id: str, zone_id: str, year: int) -> float:
        return sum(
            d.capacity_mw for d in self.deployments
            if d.zone_id == zone_id and d.product_id == product_id and d.is_operational(year)
        )

    def planned_capacity_by_zone(self) -> Dict[str, float]:
        """Total MW committed per zone over the horizon."""
        totals = {z: 0.0 for z in self.zone_ids}
        for d in self.deployments:
            totals[d.zone_id] += d.capacity_mw
        return totals

    def planned_capacity_by_product(self) -> Dict[str, float]:
        """Total MW committed per product over the horizon."""
        totals: Dict[str, float] = {}
        for d in self.deployments:
            totals[d.product_id] = totals.get(d.product_id, 0.0) + d.capacity_mw
        return totals

    def total_load_shedding(self, zone_id: Optional[str] = None) -> np.ndarray:
        """Unserved energy per year (MWh), for one zone or the whole system."""
        zones = [zone_id] if zone_id else self.zone_ids
        total = np.zeros(self.horizon)
        for z in zones:
            total = total + self.load_shedding_energy.get(z, 0.0)
        return total

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def freeze(self) -> None:
        """Make the state read-only, including every numpy array it holds."""
        for value in vars(self).values():
            for array in _arrays(value):
                array.setflags(write=False)
        self.frozen = True

    def _check_writable(self) -> None:
        if self.frozen:
            raise RuntimeError("VariableState is read-only once the solve has finished")


def _arrays(value):
    if isinstance(value, np.ndarray):
        yield value
    elif isinstance(value, dict):
        for item in value.values():
            yield from _arrays(item)
