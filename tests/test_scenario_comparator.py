"""Tests for multi-scenario comparison."""

import threading

import pytest

from scgep.optimization import solve
from scgep.scenario import ScenarioComparator, ScenarioComparison, compare
from scgep.validation.errors import (
    AnalysisPreconditionError,
    ConfigurationError,
    SolveCancelledError,
)


SCENARIOS = ["baseline", "high_demand", "lim_SC"]


@pytest.fixture
def comparison(supply_chain_config):
    return compare(SCENARIOS, supply_chain_config, max_workers=3)


class TestCompare:
    """Tests for compare()."""

    def test_results_keyed_by_scenario(self, comparison):
        assert comparison.scenarios == SCENARIOS
        assert set(comparison.results) == set(SCENARIOS)
        assert comparison["high_demand"].scenario == "high_demand"

    def test_matches_independent_solve(self, supply_chain_config, comparison):
        for scenario in SCENARIOS:
            alone = solve(supply_chain_config.with_scenario(scenario))
            assert comparison[scenario].objective_value == pytest.approx(alone.objective_value)
            assert comparison[scenario].variables.deployments == alone.variables.deployments

    def test_high_demand_costs_more(self, comparison):
        results = comparison.results
        assert results["high_demand"].total_investment > results["baseline"].total_investment

    def test_base_configuration_untouched(self, supply_chain_config):
        before = supply_chain_config.model_dump()
        compare(SCENARIOS, supply_chain_config)
        assert supply_chain_config.model_dump() == before

    def test_duplicates_collapsed(self, supply_chain_config):
        result = compare(["baseline", "baseline"], supply_chain_config)
        assert result.scenarios == ["baseline"]

    def test_unknown_scenario(self, supply_chain_config):
        with pytest.raises(ConfigurationError):
            compare(["baseline", "apocalypse"], supply_chain_config)

    def test_empty_list(self, supply_chain_config):
        with pytest.raises(ConfigurationError):
            compare([], supply_chain_config)

    def test_cancellation(self, supply_chain_config):
        event = threading.Event()
        event.set()
        with pytest.raises(SolveCancelledError):
            ScenarioComparator(supply_chain_config).compare(SCENARIOS, cancel_event=event)


class TestScenarioComparison:
    """Tests for the aggregated comparison."""

    def test_dataframe(self, comparison):
        df = comparison.to_dataframe()
        assert list(df.index) == SCENARIOS
        assert {"objective_value", "total_investment", "average_deployment_delay"} <= set(df.columns)
        assert "mix_bse" in df.columns

    def test_insights(self, comparison):
        assert len(comparison.insights) >= 3
        assert comparison.insights[0].startswith("Compared 3 scenario(s)")

    def test_average_delay_without_lead_times(self, comparison):
        assert comparison.results["baseline"].average_deployment_delay == pytest.approx(0.0)

    def test_requires_completed_solutions(self):
        with pytest.raises(AnalysisPreconditionError):
            ScenarioComparison.from_solutions({"baseline": None}, horizon=5, constrained_utilization=85.0)

    def test_requires_any_solution(self):
        with pytest.raises(AnalysisPreconditionError):
            ScenarioComparison.from_solutions({}, horizon=5, constrained_utilization=85.0)
