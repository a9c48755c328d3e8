"""
Linear-programming deployment policy.

Solves, for each zone/year gap, a small LP choosing the least-cost mix of
deployable products subject to material, component, unit and zone caps. An
unmet-gap slack carries a penalty so the model is always feasible. Uses Pyomo
with the APPSI HiGHS interface.
"""

import logging
import math
from typing import Dict, List, Sequence

from pyomo.environ import (
    ConcreteModel,
    Constraint,
    NonNegativeReals,
    Objective,
    Set,
    Var,
    minimize,
    value,
)

from scgep.models import Product
from .deployment_policy import DeploymentContext, DeploymentPolicy, GreedyDeploymentPolicy
from .supply_chain import material_headroom

logger = logging.getLogger(__name__)

# Penalty per MW of gap left unfilled ($/MW)
DEFAULT_SHORTFALL_PENALTY = 1e9


def highs_available() -> bool:
    """True if the HiGHS solver can be loaded through Pyomo."""
    try:
        from pyomo.contrib.appsi.solvers import Highs

        return bool(Highs().available())
    except (ImportError, RuntimeError):
        return False


class LPDeploymentPolicy(DeploymentPolicy):
    """
    Least-cost LP fill of each capacity gap.

    The objective is capital cost of the chosen mix plus a shortfall penalty.
    Material constraints are grouped by (material, decision year); after the
    solve, each product is committed up to its remaining headroom so the
    shared-stock interaction between decision years stays feasible.

    Example:
        solution = solve(config, policy=LPDeploymentPolicy())
    """

    def __init__(self, shortfall_penalty: float = DEFAULT_SHORTFALL_PENALTY, time_limit_seconds: float = 30.0):
        self.shortfall_penalty = shortfall_penalty
        self.time_limit_seconds = time_limit_seconds
        self._ranker = GreedyDeploymentPolicy()

    def rank(self, products: Sequence[Product]) -> List[Product]:
        return self._ranker.rank(products)

    def fill_gap(self, context: DeploymentContext, gap_mw: float) -> float:
        unit_cap = context.solver_config.unit_cap_mw
        tolerance = context.solver_config.tolerance

        candidates: Dict[str, Product] = {}
        decision_years: Dict[str, int] = {}
        upper: Dict[str, float] = {}
        for product in self.rank(context.products):
            decision_year = context.decision_year(product)
            if decision_year is None:
                context.record_deferral(product, gap_mw)
                continue
            bound = min(unit_cap, product.max_unit_capacity_mw, context.remaining_zone_cap(product, decision_year))
            if bound <= tolerance:
                continue
            candidates[product.id] = product
            decision_years[product.id] = decision_year
            upper[product.id] = bound

        if not candidates:
            return gap_mw

        model = self._build_model(context, gap_mw, candidates, decision_years, upper)
        chosen = self._solve(model, candidates)

        remaining = gap_mw
        for product_id, product in candidates.items():
            amount = chosen.get(product_id, 0.0)
            if amount <= tolerance:
                continue
            amount = min(amount, remaining, context.max_deployable_mw(product, decision_years[product_id]))
            if amount <= tolerance:
                continue
            context.commit(product, amount, decision_years[product_id])
            remaining -= amount
        return max(0.0, remaining)

    def _build_model(self, context, gap_mw, candidates, decision_years, upper) -> ConcreteModel:
        index = context.index
        model = ConcreteModel(name=f"fill_{context.zone.id}_y{context.year}")
        model.P = Set(initialize=list(candidates), ordered=True)
        model.build = Var(model.P, domain=NonNegativeReals, bounds=lambda m, p: (0, upper[p]))
        model.shortfall = Var(domain=NonNegativeReals)

        model.cover_gap = Constraint(expr=sum(model.build[p] for p in model.P) + model.shortfall >= gap_mw)

        # Material headroom per (material, decision year)
        material_rows = {}
        for product_id in model.P:
            for material_id, tonnes in index.material_intensity(product_id).items():
                if tonnes > 0:
                    material_rows.setdefault((material_id, decision_years[product_id]), []).append(
                        (product_id, tonnes)
                    )
        material_keys = []
        material_limits = {}
        for (material_id, year), terms in material_rows.items():
            headroom = material_headroom(
                index.materials[material_id],
                context.state.material_utilization[material_id],
                context.state.material_opening_stock[material_id],
                year,
            )
            if math.isinf(headroom):
                continue
            material_keys.append((material_id, year))
            material_limits[(material_id, year)] = headroom
        model.M = Set(initialize=material_keys, dimen=2)
        model.material_limit = Constraint(
            model.M,
            rule=lambda m, mat, yr: sum(
                m.build[p] * t for p, t in material_rows[(mat, yr)]
            ) <= material_limits[(mat, yr)],
        )

        # Component production capacity per (component, decision year)
        component_rows = {}
        for product_id in model.P:
            for component_id, units in index.component_intensity(product_id).items():
                capacity = index.components[component_id].production_capacity
                if capacity is not None and units > 0:
                    component_rows.setdefault((component_id, decision_years[product_id]), []).append(
                        (product_id, units)
                    )
        model.C = Set(initialize=list(component_rows), dimen=2)
        model.component_limit = Constraint(
            model.C,
            rule=lambda m, comp, yr: sum(m.build[p] * u for p, u in component_rows[(comp, yr)]) <= max(
                0.0,
                index.components[comp].production_capacity - context.state.component_production[comp][yr],
            ),
        )

        model.obj = Objective(
            expr=sum(candidates[p].capital_cost * model.build[p] for p in model.P)
            + self.shortfall_penalty * model.shortfall,
            sense=minimize,
        )
        return model

    def _solve(self, model: ConcreteModel, candidates: Dict[str, Product]) -> Dict[str, float]:
        from pyomo.contrib.appsi.solvers import Highs
        from pyomo.contrib.appsi.base import TerminationCondition as AppsiTC

        solver = Highs()
        solver.config.load_solution = False
        solver.config.time_limit = self.time_limit_seconds
        solver.highs_options['presolve'] = 'on'

        results = solver.solve(model)
        if results.termination_condition != AppsiTC.optimal:
            logger.warning(
                "LP deployment for %s ended with %s; nothing deployed",
                model.name, results.termination_condition,
            )
            return {}

        results.solution_loader.load_vars()
        chosen = {p: value(model.build[p]) for p in candidates}
        logger.debug(
            "LP deployment %s: %s, shortfall %.1f MW",
            model.name,
            {p: round(v, 1) for p, v in chosen.items() if v > 0},
            value(model.shortfall),
        )
        return chosen
