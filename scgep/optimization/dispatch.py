"""
Representative-day reliability dispatch.

For each planning year the fleet of every zone (existing units in service plus
operational deployments) is dispatched over four representative days:

1. Variable renewables serve load first, following their availability shape.
2. Firm units cover what is left, up to nameplate.
3. Storage discharges into any remaining deficit, otherwise charges from
   spare renewable and firm capacity.
4. Transmission lines, in input order, move surplus toward deficit zones.
5. Whatever is still unserved is load shedding.

Reserve-margin and RPS violations are computed from the same fleet.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict

import numpy as np

from scgep.cases.profiles import default_load_profile
from scgep.models import (
    Configuration,
    DEFAULT_AVAILABILITY,
    DEFAULT_ELCC,
    HOURS_PER_DAY,
    SEASONS,
    TechnologyClass,
    TechnologyType,
    Zone,
    technology_class,
)
from .solver_config import SolverConfig
from .variables import VariableState

logger = logging.getLogger(__name__)

# Existing storage units carry no duration of their own (hours)
DEFAULT_STORAGE_DURATION = 4.0

# Storage state of charge at the start of each representative day (fraction)
INITIAL_STATE_OF_CHARGE = 0.5


@dataclass
class ZoneFleet:
    """Capacity available to one zone in one planning year."""
    variable: Dict[TechnologyType, np.ndarray] = field(default_factory=dict)  # (season, hour) MW
    firm: Dict[TechnologyType, float] = field(default_factory=dict)
    storage_power: float = 0.0
    storage_energy: float = 0.0
    elcc_credit: float = 0.0


@dataclass
class _HourPosition:
    demand: float
    renewable_used: float = 0.0
    firm_used: float = 0.0
    renewable_spare: float = 0.0
    firm_spare: float = 0.0
    deficit: float = 0.0

    @property
    def surplus(self) -> float:
        return self.renewable_spare + self.firm_spare

    def draw_surplus(self, amount: float) -> None:
        from_renewables = min(amount, self.renewable_spare)
        self.renewable_spare -= from_renewables
        self.renewable_used += from_renewables
        from_firm = amount - from_renewables
        self.firm_spare -= from_firm
        self.firm_used += from_firm


class ReliabilityDispatcher:
    """
    Fills the dispatch, load-shedding and violation series of a VariableState.

    Example:
        ReliabilityDispatcher(config, SolverConfig()).run(state)
        shed = state.total_load_shedding()
    """

    def __init__(self, configuration: Configuration, solver_config: SolverConfig):
        self.configuration = configuration
        self.solver_config = solver_config
        self.params = configuration.system_parameters
        self.products = configuration.product_map()
        self.weights = [day.occurrences for day in self.params.representative_days]
        eta = math.sqrt(solver_config.storage_efficiency)
        self.eta_charge = eta
        self.eta_discharge = eta
        default_load = np.array(default_load_profile())
        self.load_shapes = {
            z.id: np.array(z.load_profiles) if z.load_profiles is not None else default_load
            for z in configuration.zones
        }

    def run(self, state: VariableState) -> None:
        horizon = self.configuration.horizon
        zones = self.configuration.zones

        state.demand_energy = np.zeros(horizon)
        state.reserve_margin_violation = np.zeros(horizon)
        state.technology_energy = {}
        state.generation = {z.id: {} for z in zones}
        for zone in zones:
            state.load_shedding_energy[zone.id] = np.zeros(horizon)
            state.reserve_margin_violation_by_zone[zone.id] = np.zeros(horizon)
            for series in (state.storage_charge, state.storage_discharge,
                           state.state_of_charge, state.load_shedding):
                series[zone.id] = np.zeros((horizon, SEASONS, HOURS_PER_DAY))
        for line in self.configuration.transmission_lines:
            state.transfer[line.id] = np.zeros((horizon, SEASONS, HOURS_PER_DAY))

        for year in range(horizon):
            fleets = {z.id: self.build_fleet(z, state, year) for z in zones}
            for season in range(SEASONS):
                self._dispatch_day(state, fleets, year, season)
            self._reserve_margin(state, fleets, year)

        self._rps(state)
        logger.debug(
            "Dispatch complete: %.0f MWh shed, %.1f MW reserve shortfall",
            float(state.total_load_shedding().sum()),
            float(state.reserve_margin_violation.sum()),
        )

    # ------------------------------------------------------------------
    # Fleet
    # ------------------------------------------------------------------

    def build_fleet(self, zone: Zone, state: VariableState, year: int) -> ZoneFleet:
        """Capacity of a zone in a year, grouped by how it dispatches."""
        fleet = ZoneFleet()
        base_year = self.params.base_year

        for unit in zone.existing_units:
            if unit.in_service(year, base_year):
                self._add(fleet, zone, unit.technology, unit.capacity,
                          DEFAULT_ELCC[unit.technology], None, DEFAULT_STORAGE_DURATION)

        for deployment in state.zone_deployments(zone.id):
            if deployment.is_operational(year):
                product = self.products[deployment.product_id]
                self._add(fleet, zone, deployment.technology, deployment.capacity_mw,
                          product.elcc_factor, product.availability_factor,
                          product.storage_duration_hours)
        return fleet

    def _add(self, fleet, zone, technology, capacity, elcc, availability, duration) -> None:
        fleet.elcc_credit += capacity * elcc
        kind = technology_class(technology)
        if kind is TechnologyClass.VARIABLE:
            if technology in zone.renewable_profiles:
                shape = np.array(zone.renewable_profiles[technology])
            else:
                factor = availability if availability is not None else DEFAULT_AVAILABILITY[technology]
                shape = np.full((SEASONS, HOURS_PER_DAY), factor)
            current = fleet.variable.get(technology, np.zeros((SEASONS, HOURS_PER_DAY)))
            fleet.variable[technology] = current + capacity * shape
        elif kind is TechnologyClass.FIRM:
            fleet.firm[technology] = fleet.firm.get(technology, 0.0) + capacity
        elif kind is TechnologyClass.STORAGE:
            fleet.storage_power += capacity
            fleet.storage_energy += capacity * duration
        else:
            raise ValueError(f"Unhandled technology class {kind}")

    # ------------------------------------------------------------------
    # Hourly balance
    # ------------------------------------------------------------------

    def _dispatch_day(self, state: VariableState, fleets: Dict[str, ZoneFleet], year: int, season: int) -> None:
        zones = self.configuration.zones
        weight = self.weights[season]
        soc = {z.id: INITIAL_STATE_OF_CHARGE * fleets[z.id].storage_energy for z in zones}

        for hour in range(HOURS_PER_DAY):
            positions: Dict[str, _HourPosition] = {}
            for zone in zones:
                fleet = fleets[zone.id]
                demand = zone.peak_load(year) * float(self.load_shapes[zone.id][season, hour])
                position = self._balance(fleet, demand, season, hour)
                soc[zone.id] = self._run_storage(state, fleet, position, soc[zone.id], zone.id, year, season, hour)
                positions[zone.id] = position

            self._exchange(state, positions, year, season, hour)

            for zone in zones:
                position = positions[zone.id]
                fleet = fleets[zone.id]
                state.load_shedding[zone.id][year, season, hour] = position.deficit
                state.load_shedding_energy[zone.id][year] += position.deficit * weight
                state.demand_energy[year] += position.demand * weight
                self._record_generation(state, zone.id, fleet, position, year, season, hour, weight)

    def _balance(self, fleet: ZoneFleet, demand: float, season: int, hour: int) -> _HourPosition:
        position = _HourPosition(demand=demand)
        renewable = sum(float(shape[season, hour]) for shape in fleet.variable.values())
        firm = sum(fleet.firm.values())

        position.renewable_used = min(renewable, demand)
        position.renewable_spare = renewable - position.renewable_used
        residual = demand - position.renewable_used

        position.firm_used = min(firm, residual)
        position.firm_spare = firm - position.firm_used
        position.deficit = residual - position.firm_used
        return position

    def _run_storage(self, state, fleet, position, soc, zone_id, year, season, hour) -> float:
        if fleet.storage_power <= 0:
            return soc

        if position.deficit > 0:
            available = soc * self.eta_discharge
            discharge = min(position.deficit, fleet.storage_power, available)
            soc -= discharge / self.eta_discharge
            position.deficit -= discharge
            state.storage_discharge[zone_id][year, season, hour] = discharge
        else:
            headroom = (fleet.storage_energy - soc) / self.eta_charge
            charge = min(position.surplus, fleet.storage_power, max(0.0, headroom))
            if charge > 0:
                position.draw_surplus(charge)
                soc += charge * self.eta_charge
            state.storage_charge[zone_id][year, season, hour] = charge

        state.state_of_charge[zone_id][year, season, hour] = soc
        return soc

    def _exchange(self, state, positions: Dict[str, _HourPosition], year, season, hour) -> None:
        for line in self.configuration.transmission_lines:
            a = positions[line.from_zone]
            b = positions[line.to_zone]
            flow = 0.0
            if b.deficit > 0 and a.surplus > 0:
                flow = min(line.capacity, a.surplus, b.deficit)
                a.draw_surplus(flow)
                b.deficit -= flow
            elif a.deficit > 0 and b.surplus > 0:
                amount = min(line.capacity, b.surplus, a.deficit)
                b.draw_surplus(amount)
                a.deficit -= amount
                flow = -amount
            state.transfer[line.id][year, season, hour] = flow

    def _record_generation(self, state, zone_id, fleet, position, year, season, hour, weight) -> None:
        generation = state.generation[zone_id]
        horizon = self.configuration.horizon

        renewable = sum(float(shape[season, hour]) for shape in fleet.variable.values())
        for technology, shape in fleet.variable.items():
            share = float(shape[season, hour]) / renewable if renewable > 0 else 0.0
            self._store(state, generation, technology, horizon, year, season, hour,
                        position.renewable_used * share, weight)

        firm = sum(fleet.firm.values())
        for technology, capacity in fleet.firm.items():
            share = capacity / firm if firm > 0 else 0.0
            self._store(state, generation, technology, horizon, year, season, hour,
                        position.firm_used * share, weight)

    @staticmethod
    def _store(state, generation, technology, horizon, year, season, hour, mw, weight) -> None:
        if technology not in generation:
            generation[technology] = np.zeros((horizon, SEASONS, HOURS_PER_DAY))
        generation[technology][year, season, hour] = mw
        if technology not in state.technology_energy:
            state.technology_energy[technology] = np.zeros(horizon)
        state.technology_energy[technology][year] += mw * weight

    # ------------------------------------------------------------------
    # Reserve margin and RPS
    # ------------------------------------------------------------------

    def _reserve_margin(self, state: VariableState, fleets: Dict[str, ZoneFleet], year: int) -> None:
        margin = 1 + self.params.reserve_margin / 100
        for zone in self.configuration.zones:
            required = zone.peak_load(year) * margin
            shortfall = max(0.0, required - fleets[zone.id].elcc_credit)
            state.reserve_margin_violation_by_zone[zone.id][year] = shortfall
            state.reserve_margin_violation[year] += shortfall

    def _rps(self, state: VariableState) -> None:
        horizon = self.configuration.horizon
        state.rps_violation = {}
        for technology, target in self.params.rps_targets.items():
            produced = state.technology_energy.get(technology, np.zeros(horizon))
            required = state.demand_energy * target / 100
            state.rps_violation[technology] = np.maximum(0.0, required - produced)

