"""Cost calculator for a solved capacity plan.

Combines:
- Investment: capital cost at the decision year
- Operational: fixed O&M plus variable O&M at full-year hours
- Penalties: unserved energy, reserve-margin and RPS shortfalls
"""

import logging
from typing import TYPE_CHECKING

import numpy as np

from scgep.models import Configuration
from .cost_breakdown import CostBreakdown, PenaltyCostBreakdown

if TYPE_CHECKING:
    from scgep.optimization.variables import VariableState

HOURS_PER_YEAR = 8760

logger = logging.getLogger(__name__)


class CostCalculator:
    """
    Prices a VariableState.

    Example:
        calculator = CostCalculator(config)
        costs = calculator.calculate(state)
        print(costs)  # Shows full breakdown
    """

    def __init__(self, configuration: Configuration, hours_per_year: int = HOURS_PER_YEAR):
        self.configuration = configuration
        self.hours_per_year = hours_per_year
        self.params = configuration.system_parameters
        self.products = configuration.product_map()

    def calculate(self, state: "VariableState") -> CostBreakdown:
        horizon = state.horizon
        investment = np.zeros(horizon)
        operational = np.zeros(horizon)
        by_product = {p: 0.0 for p in self.products}
        hours = self.hours_per_year

        for deployment in state.deployments:
            product = self.products[deployment.product_id]
            capital = deployment.capacity_mw * product.capital_cost
            investment[deployment.decision_year] += capital
            by_product[product.id] += capital

            annual_om = deployment.capacity_mw * (product.fixed_om_cost + product.variable_om_cost * hours)
            years = deployment.operational_years(horizon)
            operational[years.start:years.stop] += annual_om

        penalties = self.calculate_penalties(state)
        costs = CostBreakdown(
            investment=investment,
            operational=operational,
            penalties=penalties,
            investment_by_product=by_product,
        )
        costs.net_present_value = self.net_present_value(costs.by_year)
        logger.debug("Costs: %s", costs)
        return costs

    def calculate_penalties(self, state: "VariableState") -> PenaltyCostBreakdown:
        horizon = state.horizon
        shedding = state.total_load_shedding() * self.params.voll

        if state.reserve_margin_violation is None:
            reserve = np.zeros(horizon)
        else:
            reserve = state.reserve_margin_violation * self.params.reserve_margin_penalty

        rps = np.zeros(horizon)
        rps_by_technology = {}
        for technology, shortfall in state.rps_violation.items():
            cost = shortfall * self.params.rps_penalty
            rps += cost
            rps_by_technology[technology.value] = float(cost.sum())

        return PenaltyCostBreakdown(
            load_shedding=shedding,
            reserve_margin=reserve,
            rps=rps,
            rps_by_technology=rps_by_technology,
        )

    def net_present_value(self, by_year: np.ndarray) -> float:
        rate = self.params.discount_rate
        discount = (1 + rate) ** -np.arange(len(by_year), dtype=float)
        return float((by_year * discount).sum())
