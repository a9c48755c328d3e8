"""
Multi-scenario comparison.

Each scenario is solved independently on its own copy of the base
configuration; solves share no mutable state and run in a thread pool.
Results are keyed by scenario, so completion order does not matter.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

import pandas as pd

from scgep.models import Configuration, ScenarioType
from scgep.optimization import DeploymentPolicy, SCGEPSolver, Solution, SolverConfig
from scgep.validation.errors import AnalysisPreconditionError, ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScenarioResult:
    """
    Aggregates of one scenario's solution.

    Attributes:
        scenario: Scenario tag
        objective_value: Total cost ($)
        feasibility: Whether the plan satisfied every constraint
        total_investment: Sum of capital costs ($)
        total_operational: Sum of O&M costs ($)
        total_penalty: Sum of penalty costs ($)
        total_load_shedding: Unserved energy over the horizon (MWh)
        technology_mix: MW by technology in the final year
        material_constraint_years: Material-years above the constrained threshold
        average_deployment_delay: Capacity-weighted mean years from decision to operation
    """
    scenario: str
    objective_value: float
    feasibility: bool
    total_investment: float
    total_operational: float
    total_penalty: float
    total_load_shedding: float
    technology_mix: Dict[str, float]
    material_constraint_years: int
    average_deployment_delay: float

    @classmethod
    def from_solution(cls, solution: Solution, constrained_utilization: float) -> "ScenarioResult":
        deployments = solution.variables.deployments
        total_mw = sum(d.capacity_mw for d in deployments)
        delay = (
            sum((d.online_year - d.decision_year) * d.capacity_mw for d in deployments) / total_mw
            if total_mw > 0 else 0.0
        )
        constrained = sum(
            int((rates > constrained_utilization).sum())
            for rates in solution.metrics.material_utilization_rate.values()
        )
        return cls(
            scenario=solution.scenario,
            objective_value=solution.objective_value,
            feasibility=solution.feasibility,
            total_investment=solution.costs.total_investment,
            total_operational=solution.costs.total_operational,
            total_penalty=solution.costs.total_penalty,
            total_load_shedding=float(solution.metrics.load_shedding.sum()),
            technology_mix=solution.metrics.final_year_mix(),
            material_constraint_years=constrained,
            average_deployment_delay=delay,
        )


@dataclass
class ScenarioComparison:
    """
    Side-by-side results for several scenarios.

    Indexing by scenario name returns that scenario's Solution:

        comparison = compare(["baseline", "high_demand"], config)
        comparison["baseline"].objective_value
    """
    scenarios: List[str]
    horizon: int
    solutions: Dict[str, Solution] = field(default_factory=dict)
    results: Dict[str, ScenarioResult] = field(default_factory=dict)
    insights: List[str] = field(default_factory=list)

    @classmethod
    def from_solutions(
        cls,
        solutions: Dict[str, Optional[Solution]],
        horizon: int,
        constrained_utilization: float,
    ) -> "ScenarioComparison":
        """
        Aggregate already-solved scenarios.

        Raises:
            AnalysisPreconditionError: A scenario has no completed solution
        """
        missing = [
            tag for tag, solution in solutions.items()
            if not isinstance(solution, Solution) or not solution.variables.frozen
        ]
        if missing or not solutions:
            raise AnalysisPreconditionError(
                "Scenario comparison requires a completed solve for every scenario",
                {"missing": missing},
            )
        comparison = cls(scenarios=list(solutions), horizon=horizon, solutions=dict(solutions))
        comparison.results = {
            tag: ScenarioResult.from_solution(solution, constrained_utilization)
            for tag, solution in solutions.items()
        }
        comparison.insights = _insights(comparison)
        return comparison

    def __getitem__(self, scenario: Union[str, ScenarioType]) -> Solution:
        key = ScenarioType(scenario).value
        return self.solutions[key]

    def to_dataframe(self) -> pd.DataFrame:
        """One row per scenario with the aggregate columns, technology mix flattened."""
        rows = []
        for scenario in self.scenarios:
            result = self.results[scenario]
            row = {
                "scenario": scenario,
                "feasibility": result.feasibility,
                "objective_value": result.objective_value,
                "total_investment": result.total_investment,
                "total_operational": result.total_operational,
                "total_penalty": result.total_penalty,
                "total_load_shedding": result.total_load_shedding,
                "material_constraint_years": result.material_constraint_years,
                "average_deployment_delay": result.average_deployment_delay,
            }
            for technology, mw in result.technology_mix.items():
                row[f"mix_{technology}"] = mw
            rows.append(row)
        return pd.DataFrame(rows).set_index("scenario")


class ScenarioComparator:
    """
    Solves a base configuration under several scenarios.

    Example:
        comparator = ScenarioComparator(config, max_workers=4)
        comparison = comparator.compare(["baseline", "high_demand", "lim_SC"])
        print(comparison.to_dataframe())
    """

    def __init__(
        self,
        base_configuration: Configuration,
        policy: Optional[DeploymentPolicy] = None,
        solver_config: Optional[SolverConfig] = None,
        max_workers: Optional[int] = None,
    ):
        """
        Initialize comparator.

        Args:
            base_configuration: Configuration cloned for every scenario
            policy: Deployment policy shared by all solves (must be stateless)
            solver_config: Engine settings
            max_workers: Thread pool size (defaults to the executor's choice)
        """
        self.base_configuration = base_configuration
        self.policy = policy
        self.solver_config = solver_config or SolverConfig()
        self.max_workers = max_workers

    def compare(
        self,
        scenarios: Sequence[Union[str, ScenarioType]],
        cancel_event: Optional[threading.Event] = None,
    ) -> ScenarioComparison:
        """
        Solve every scenario and aggregate the results.

        Raises:
            ConfigurationError: Empty or unknown scenario list
            SolveCancelledError: ``cancel_event`` was set before all solves finished
        """
        tags = self._normalize(scenarios)
        configurations = {tag: self.base_configuration.with_scenario(tag) for tag in tags}
        logger.info("Comparing %d scenario(s): %s", len(tags), ", ".join(tags))

        solutions: Dict[str, Solution] = {}
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_scenario = {
                executor.submit(self._solve, configuration, cancel_event): tag
                for tag, configuration in configurations.items()
            }
            try:
                for future in as_completed(future_to_scenario):
                    tag = future_to_scenario[future]
                    solutions[tag] = future.result()
                    logger.debug("Scenario %s finished", tag)
            except BaseException:
                for future in future_to_scenario:
                    future.cancel()
                raise

        return ScenarioComparison.from_solutions(
            {tag: solutions[tag] for tag in tags},
            self.base_configuration.horizon,
            self.solver_config.constrained_utilization,
        )

    def _solve(self, configuration: Configuration, cancel_event: Optional[threading.Event]) -> Solution:
        return SCGEPSolver(configuration, self.policy, self.solver_config).solve(cancel_event)

    @staticmethod
    def _normalize(scenarios: Sequence[Union[str, ScenarioType]]) -> List[str]:
        if not scenarios:
            raise ConfigurationError("No scenarios to compare")
        tags: List[str] = []
        for scenario in scenarios:
            try:
                tag = ScenarioType(scenario).value
            except ValueError as exc:
                raise ConfigurationError(
                    f"Unknown scenario '{scenario}'",
                    {"known_scenarios": [s.value for s in ScenarioType]},
                ) from exc
            if tag not in tags:
                tags.append(tag)
        return tags


def _insights(comparison: ScenarioComparison) -> List[str]:
    results = comparison.results
    investments = [r.total_investment for r in results.values()]
    worst = max(comparison.scenarios, key=lambda s: results[s].material_constraint_years)
    insights = [
        f"Compared {len(comparison.scenarios)} scenario(s) over a "
        f"{comparison.horizon}-year planning horizon",
        f"Total investment ranges from ${min(investments) / 1e9:.2f}B "
        f"to ${max(investments) / 1e9:.2f}B",
    ]
    if results[worst].material_constraint_years > 0:
        insights.append(
            f"Material constraints are most severe in the {worst} scenario "
            f"({results[worst].material_constraint_years} constrained material-year(s))"
        )
    else:
        insights.append("No scenario has material utilization above the constrained threshold")
    infeasible = [s for s in comparison.scenarios if not results[s].feasibility]
    if infeasible:
        insights.append(f"No feasible plan found for: {', '.join(infeasible)}")
    return insights


def compare(
    scenarios: Sequence[Union[str, ScenarioType]],
    base_configuration: Configuration,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
    policy: Optional[DeploymentPolicy] = None,
    solver_config: Optional[SolverConfig] = None,
) -> ScenarioComparison:
    """Solve ``base_configuration`` under each scenario and compare the results."""
    comparator = ScenarioComparator(base_configuration, policy, solver_config, max_workers)
    return comparator.compare(scenarios, cancel_event)

