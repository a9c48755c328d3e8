"""End-to-end tests for SCGEPSolver."""

import json
import math
import threading
import warnings

import numpy as np
import pytest

from scgep.cases import create_maryland_config
from scgep.optimization import (
    ConvergenceStatus,
    DeploymentPolicy,
    GreedyDeploymentPolicy,
    SCGEPSolver,
    Solution,
    solve,
)
from scgep.validation.errors import (
    AnalysisPreconditionError,
    InfeasibleSolutionWarning,
    SolveCancelledError,
)


class LeadTimeIgnoringPolicy(DeploymentPolicy):
    """Commits the whole gap online immediately, ignoring product lead times."""

    def rank(self, products):
        return list(products)

    def fill_gap(self, context, gap_mw):
        product = context.products[0]
        context.state.add_deployment(product, context.zone.id, context.year, context.year, gap_mw)
        return 0.0


class OversitingPolicy(GreedyDeploymentPolicy):
    """Builds every gap as solar in the first pass, ignoring land; refills greedily."""

    def fill_gap(self, context, gap_mw):
        if not context.record_deferrals:
            return super().fill_gap(context, gap_mw)
        solar = context.configuration.product_map()["spv_si"]
        context.commit(solar, gap_mw, context.year)
        return 0.0


class TestBatteryExample:
    """Single zone, 1,000 MW peak, 900 MW gas, one battery product."""

    def test_one_battery_deployment(self, battery_config):
        solution = solve(battery_config)

        deployments = solution.variables.deployments
        assert len(deployments) == 1
        assert deployments[0].product_id == "bse_basic"
        assert deployments[0].decision_year == 0
        assert deployments[0].capacity_mw == pytest.approx(250.0)

    def test_feasible(self, battery_config):
        solution = solve(battery_config)
        assert solution.feasibility is True
        assert solution.convergence is ConvergenceStatus.OPTIMAL
        assert solution.iterations == 1
        assert solution.gap == pytest.approx(0.01)

    def test_year_zero_investment(self, battery_config):
        solution = solve(battery_config)
        assert solution.costs.investment[0] == pytest.approx(87_500_000.0)
        assert solution.costs.investment[1:].sum() == pytest.approx(0.0)
        assert solution.objective_value == pytest.approx(solution.costs.total)

    def test_solution_is_read_only(self, battery_config):
        solution = solve(battery_config)
        assert solution.variables.frozen
        with pytest.raises(ValueError):
            next(iter(solution.variables.operational_capacity.values()))[0] = 1.0
        with pytest.raises(RuntimeError):
            solution.variables.rescale({})

    def test_summary_dict(self, battery_config):
        summary = solve(battery_config).to_summary_dict()
        assert summary["years"] == [2024, 2025, 2026, 2027, 2028]
        assert summary["feasibility"] is True
        assert summary["convergence"] == "optimal"
        assert summary["costs"]["investment"][0] == pytest.approx(87_500_000.0)

        deployment = summary["deployments"][0]
        assert deployment["online_year"] == 2024
        assert deployment["retirement_year"] == 2039
        assert deployment["technology"] == "bse"
        assert summary["metrics"]["capacity_by_technology"]["bse"] == pytest.approx([250.0] * 5)


class TestSolverInvariants:
    """Properties that hold for any solve."""

    def test_deterministic(self, two_zone_config):
        first = solve(two_zone_config)
        second = solve(two_zone_config)

        assert first.objective_value == second.objective_value
        assert first.variables.deployments == second.variables.deployments

    def test_operational_window(self, two_zone_config):
        solution = solve(two_zone_config)
        horizon = solution.variables.horizon
        assert solution.variables.deployments
        for deployment in solution.variables.deployments:
            series = solution.variables.operational_capacity[deployment.unit_id]
            for year in range(horizon):
                if year < deployment.decision_year or year >= deployment.decision_year + deployment.lifetime:
                    assert series[year] == 0.0

    def test_short_lifetime_retires(self, battery_config, battery_product):
        short = battery_config.model_copy(update={
            "products": [battery_product.model_copy(update={"lifetime": 2})],
        })
        solution = solve(short)
        first = solution.variables.deployments[0]
        series = solution.variables.operational_capacity[first.unit_id]
        np.testing.assert_allclose(series, [250.0, 250.0, 0.0, 0.0, 0.0])
        # The gap reopens when the first unit retires
        assert any(d.decision_year == 2 for d in solution.variables.deployments)

    def test_material_bound(self, two_zone_config):
        solution = solve(two_zone_config)
        assert solution.feasibility
        variables = solution.variables
        for material in solution.configuration.materials:
            utilization = variables.material_utilization[material.id]
            opening = variables.material_opening_stock[material.id]
            limit = material.sector_supply + np.maximum(0.0, opening)
            assert np.all(utilization <= limit * (1 + 1e-6))

    def test_monotonic_in_peak_load(self, supply_chain_config):
        def planned(peak):
            zone = supply_chain_config.zones[0].model_copy(update={"baseline_peak_load": peak})
            config = supply_chain_config.model_copy(update={"zones": [zone]})
            return solve(config).variables.planned_capacity_by_zone()["z1"]

        assert planned(1000.0) <= planned(1100.0) <= planned(1300.0)

    def test_monotonic_in_peak_load_maryland(self):
        base = create_maryland_config(planning_horizon=10)

        def planned(scale):
            zones = [
                zone.model_copy(update={"baseline_peak_load": zone.baseline_peak_load * scale})
                if zone.id == "bge" else zone
                for zone in base.zones
            ]
            solution = solve(base.model_copy(update={"zones": zones}))
            return solution.variables.planned_capacity_by_zone().get("bge", 0.0)

        totals = [planned(scale) for scale in (1.0, 1.05, 1.1, 1.2, 1.3)]
        for smaller, larger in zip(totals, totals[1:]):
            assert smaller <= larger * (1 + 1e-9)

    def test_lead_time_respected(self, battery_config, battery_product):
        slow = battery_config.model_copy(update={
            "products": [battery_product.model_copy(update={"lead_time": 2})],
        })
        solution = solve(slow)
        for deployment in solution.variables.deployments:
            assert deployment.online_year - deployment.decision_year >= 2
        assert solution.variables.deferrals


class TestRepair:
    """Shrinking reopens gaps, which are filled again within the remaining headroom."""

    def test_shrunk_capacity_is_refilled(self, supply_chain_config):
        zone = supply_chain_config.zones[0].model_copy(update={"available_land": 1.0})
        small = supply_chain_config.model_copy(update={"zones": [zone]})
        solution = solve(small, policy=OversitingPolicy())

        built = solution.variables.planned_capacity_by_product()
        # 250 MW of solar shrinks to the 36 MW that fit in 1 km²
        assert built["spv_si"] == pytest.approx(36.0)
        assert built["bse_li"] > 0
        assert solution.feasibility
        assert solution.iterations == 2
        assert solution.variables.deferrals == []


class TestMaterialEdgeCases:
    """Stock-only and unconstrained materials."""

    def test_last_candidate_builds_from_stock(self, stocked_battery_config):
        solution = solve(stocked_battery_config)

        deployments = solution.variables.deployments
        assert len(deployments) == 1
        assert deployments[0].decision_year == 0
        assert deployments[0].capacity_mw == pytest.approx(75.0)
        assert solution.feasibility

    def test_infinite_rate_is_null_in_summary(self, stocked_battery_config):
        solution = solve(stocked_battery_config)
        assert math.isinf(solution.metrics.material_utilization_rate["lithium"][0])

        summary = solution.to_summary_dict()
        assert summary["metrics"]["material_utilization_rate"]["lithium"][0] is None
        assert summary["metrics"]["material_utilization_rate"]["lithium"][1] == 0.0
        text = json.dumps(summary, allow_nan=False)
        assert json.loads(text)["deployments"][0]["capacity_mw"] == pytest.approx(75.0)

    def test_zero_sector_share_without_supply_chain_limits(self, supply_chain_config, materials):
        lithium = materials[0].model_copy(update={"energy_sector_share": 0.0})
        config = supply_chain_config.model_copy(update={"materials": [lithium, materials[1]]})
        solution = solve(config.with_scenario("w/o_SC"))

        built = solution.variables.planned_capacity_by_product()
        assert built["bse_li"] == pytest.approx(75.0)
        assert built["spv_si"] == pytest.approx(175.0)
        assert solution.feasibility
        for rates in solution.metrics.material_utilization_rate.values():
            assert np.all(np.isfinite(rates))


class TestInfeasible:
    """Plans that cannot be repaired are returned, flagged and warned about."""

    def test_lead_time_violation_is_infeasible(self, battery_config, battery_product):
        slow = battery_config.model_copy(update={
            "products": [battery_product.model_copy(update={"lead_time": 2})],
        })
        with pytest.warns(InfeasibleSolutionWarning):
            solution = SCGEPSolver(slow, policy=LeadTimeIgnoringPolicy()).solve()

        assert solution.feasibility is False
        assert solution.convergence is ConvergenceStatus.INFEASIBLE
        assert solution.variables.deployments

    def test_feasible_solve_does_not_warn(self, battery_config):
        with warnings.catch_warnings():
            warnings.simplefilter("error", InfeasibleSolutionWarning)
            solve(battery_config)


class TestSolverLifecycle:
    """Tests for solver state, cancellation and analysis preconditions."""

    def test_get_solution(self, battery_config):
        solver = SCGEPSolver(battery_config)
        assert solver.get_solution() is None
        solution = solver.solve()
        assert isinstance(solution, Solution)
        assert solver.get_solution() is solution

    def test_analyze_before_solve(self, battery_config):
        with pytest.raises(AnalysisPreconditionError):
            SCGEPSolver(battery_config).analyze_bottlenecks()

    def test_analyze_after_solve(self, battery_config):
        solver = SCGEPSolver(battery_config)
        solver.solve()
        report = solver.analyze_bottlenecks()
        assert report.scenario == "baseline"

    def test_cancellation(self, battery_config):
        event = threading.Event()
        event.set()
        solver = SCGEPSolver(battery_config)
        with pytest.raises(SolveCancelledError):
            solver.solve(cancel_event=event)
        assert solver.get_solution() is None

    def test_configuration_not_mutated(self, battery_config):
        before = battery_config.model_dump()
        solve(battery_config.with_scenario("high_demand"))
        assert battery_config.model_dump() == before

    def test_solution_carries_effective_configuration(self, battery_config):
        solution = solve(battery_config.with_scenario("high_demand"))
        assert solution.scenario == "high_demand"
        assert solution.configuration.zones[0].baseline_peak_load == pytest.approx(1100.0)
