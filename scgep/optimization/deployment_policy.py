"""
Deployment policies: how a zone/year capacity gap is turned into deployments.

The solver owns the year/zone loop, feasibility checking and rescaling. A
policy only decides which products to build and how much, through the
``DeploymentContext`` it is handed. Swapping the greedy heuristic for an exact
formulation does not touch the data model or the analysis layer.
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from scgep.models import Configuration, Product, Zone, TechnologyType, is_storage
from scgep.models.technology import SITE_KIND, SiteKind
from .solver_config import SolverConfig
from .supply_chain import SupplyChainIndex, material_headroom
from .variables import Deployment, LeadTimeDeferral, VariableState

logger = logging.getLogger(__name__)


class DeploymentContext:
    """
    View of the solve that a policy works through for one zone and year.

    Attributes:
        configuration: Effective configuration being solved
        zone: Zone with the capacity gap
        year: Planning year the capacity is needed in (online year)
        state: Solution state, updated by ``commit``
        solver_config: Engine settings
        record_deferrals: False when refilling gaps after a repair pass
    """

    def __init__(
        self,
        configuration: Configuration,
        index: SupplyChainIndex,
        state: VariableState,
        solver_config: SolverConfig,
        zone: Zone,
        year: int,
        record_deferrals: bool = True,
    ):
        self.configuration = configuration
        self.index = index
        self.state = state
        self.solver_config = solver_config
        self.zone = zone
        self.year = year
        self.record_deferrals = record_deferrals

    @property
    def products(self) -> List[Product]:
        return list(self.configuration.products)

    @property
    def horizon(self) -> int:
        return self.configuration.horizon

    def decision_year(self, product: Product) -> Optional[int]:
        """Year the investment must be made to be online this year, or None if before year 0."""
        decision = self.year - product.lead_time
        if decision < 0 or decision >= self.horizon:
            return None
        return decision

    def remaining_zone_cap(self, product: Product, decision_year: int) -> float:
        """MW that can still be added in this zone without breaching the product's zone cap."""
        if product.max_zone_capacity_mw is None:
            return math.inf
        window = range(self.year, min(decision_year + product.lifetime, self.horizon))
        used = max(
            (self.state.product_operational_capacity(product.id, self.zone.id, t) for t in window),
            default=0.0,
        )
        return max(0.0, product.max_zone_capacity_mw - used)

    def remaining_site_area(self, product: Product, decision_year: int) -> float:
        """Unused area (km²) of the product's site kind over its operating window."""
        site = SITE_KIND[product.technology_type]
        series = self.state.land_use if site is SiteKind.LAND else self.state.offshore_use
        window = range(self.year, min(decision_year + product.lifetime, self.horizon))
        used = max((float(series[self.zone.id][t]) for t in window), default=0.0)
        return max(0.0, self.zone.site_area(site) - used)

    def max_deployable_mw(self, product: Product, decision_year: int) -> float:
        """Largest deployment the material, component and site headroom allows at the decision year."""
        limit = math.inf
        if product.capacity_density:
            limit = self.remaining_site_area(product, decision_year) * product.capacity_density
        for material_id, tonnes_per_mw in self.index.material_intensity(product.id).items():
            if tonnes_per_mw <= 0:
                continue
            headroom = material_headroom(
                self.index.materials[material_id],
                self.state.material_utilization[material_id],
                self.state.material_opening_stock[material_id],
                decision_year,
            )
            limit = min(limit, headroom / tonnes_per_mw)
        for component_id, units_per_mw in self.index.component_intensity(product.id).items():
            capacity = self.index.components[component_id].production_capacity
            if capacity is None or units_per_mw <= 0:
                continue
            produced = self.state.component_production[component_id][decision_year]
            limit = min(limit, max(0.0, capacity - produced) / units_per_mw)
        return limit

    def can_deploy(self, product: Product, capacity_mw: float, decision_year: int) -> bool:
        """True if the full amount fits the material, component and site headroom."""
        limit = self.max_deployable_mw(product, decision_year)
        return capacity_mw <= limit * (1 + self.solver_config.tolerance)

    def commit(self, product: Product, capacity_mw: float, decision_year: int) -> Deployment:
        return self.state.add_deployment(product, self.zone.id, decision_year, self.year, capacity_mw)

    def record_deferral(self, product: Product, shortfall_mw: float) -> None:
        if not self.record_deferrals:
            return
        self.state.record_deferral(LeadTimeDeferral(
            product_id=product.id,
            zone_id=self.zone.id,
            technology=product.technology_type,
            year=self.year,
            lead_time=product.lead_time,
            shortfall_mw=shortfall_mw,
        ))


class DeploymentPolicy(ABC):
    """Decides which products fill a zone/year capacity gap."""

    @abstractmethod
    def rank(self, products: Sequence[Product]) -> List[Product]:
        """Products in the order they are considered."""

    @abstractmethod
    def fill_gap(self, context: DeploymentContext, gap_mw: float) -> float:
        """
        Commit deployments toward a capacity gap.

        Args:
            context: Zone/year view of the solve
            gap_mw: Capacity still missing (MW, > 0)

        Returns:
            Gap left unfilled (MW)
        """


def _rank_group(technology: TechnologyType) -> int:
    if is_storage(technology):
        return 0
    if technology is TechnologyType.SOLAR_PV:
        return 1
    return 2


class GreedyDeploymentPolicy(DeploymentPolicy):
    """
    Priority-ordered greedy fill.

    Storage first, then solar, then everything else by descending
    ``Product.priority_score``; ties keep input order. Each product is offered
    a share of the remaining gap (capped per unit); the last candidate is
    offered all of it, or the regular share when all of it does not fit. A
    product short of any material, component or site area is skipped.
    """

    def __init__(self, gap_fraction: Optional[float] = None, unit_cap_mw: Optional[float] = None):
        self.gap_fraction = gap_fraction
        self.unit_cap_mw = unit_cap_mw

    def rank(self, products: Sequence[Product]) -> List[Product]:
        order = sorted(
            enumerate(products),
            key=lambda item: (_rank_group(item[1].technology_type), -item[1].priority_score, item[0]),
        )
        return [product for _, product in order]

    def fill_gap(self, context: DeploymentContext, gap_mw: float) -> float:
        gap_fraction = self.gap_fraction or context.solver_config.gap_fraction
        unit_cap = self.unit_cap_mw or context.solver_config.unit_cap_mw
        tolerance = context.solver_config.tolerance

        remaining = gap_mw
        ranked = self.rank(context.products)
        for position, product in enumerate(ranked):
            if remaining <= tolerance:
                break

            decision_year = context.decision_year(product)
            if decision_year is None:
                context.record_deferral(product, remaining)
                continue

            last = position == len(ranked) - 1
            cap = min(unit_cap, product.max_unit_capacity_mw, context.remaining_zone_cap(product, decision_year))
            proposal = min(remaining if last else remaining * gap_fraction, cap)
            if proposal <= tolerance:
                continue

            if not context.can_deploy(product, proposal, decision_year) and last:
                # The whole gap did not fit; fall back to the regular share
                proposal = min(remaining * gap_fraction, cap)
                if proposal <= tolerance:
                    continue

            if not context.can_deploy(product, proposal, decision_year):
                logger.debug(
                    "Skipping %s in %s year %d: insufficient headroom for %.1f MW",
                    product.id, context.zone.id, context.year, proposal,
                )
                continue

            context.commit(product, proposal, decision_year)
            remaining -= proposal

        return max(0.0, remaining)
