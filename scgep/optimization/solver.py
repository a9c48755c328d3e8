"""
Heuristic supply-chain-constrained generation expansion solver.

The solve runs in three phases:

1. Build: year by year, zone by zone, the capacity gap (peak load plus
   reserve margin, minus capacity in service) is handed to a deployment
   policy, which commits deployments subject to material headroom.
2. Repair: the whole plan is checked against material, component, spatial
   and lead-time limits; violating deployments are shrunk, the gaps the
   shrinking reopened are filled again within the remaining headroom and the
   check is repeated until the plan is feasible or the iteration cap is
   reached.
3. Evaluate: dispatch the final fleet, then price it and derive metrics.

The solve is deterministic: identical input gives an identical Solution.
"""

import logging
import threading
import time
import warnings
from typing import Optional

from scgep.costs import CostCalculator
from scgep.models import Configuration
from scgep.validation.errors import (
    AnalysisPreconditionError,
    InfeasibleSolutionWarning,
    SolveCancelledError,
)
from .deployment_policy import DeploymentContext, DeploymentPolicy, GreedyDeploymentPolicy
from .dispatch import ReliabilityDispatcher
from .feasibility import FeasibilityChecker, FeasibilityReport
from .metrics import compute_metrics
from .result_schema import ConvergenceStatus, Solution
from .solver_config import SolverConfig
from . import constants
from .supply_chain import SupplyChainIndex
from .variables import VariableState

logger = logging.getLogger(__name__)


class SCGEPSolver:
    """
    Solves one configuration.

    Example:
        solver = SCGEPSolver(config)
        solution = solver.solve()
        report = solver.analyze_bottlenecks()
    """

    def __init__(
        self,
        configuration: Configuration,
        policy: Optional[DeploymentPolicy] = None,
        solver_config: Optional[SolverConfig] = None,
    ):
        """
        Initialize solver.

        Args:
            configuration: Planning problem; never mutated
            policy: Deployment policy (default: GreedyDeploymentPolicy)
            solver_config: Engine settings (default: SolverConfig())
        """
        self.configuration = configuration
        self.policy = policy or GreedyDeploymentPolicy()
        self.solver_config = solver_config or SolverConfig()
        self.solution: Optional[Solution] = None

    def solve(self, cancel_event: Optional[threading.Event] = None) -> Solution:
        """
        Build, repair and evaluate a capacity plan.

        Args:
            cancel_event: Checked once per planning year and per repair pass

        Returns:
            Solution. Infeasible plans are returned with ``feasibility=False``
            and an InfeasibleSolutionWarning, not raised.

        Raises:
            SolveCancelledError: The cancel event was set during the solve
        """
        start = time.time()
        cfg = self.solver_config
        effective = self.configuration.apply_scenario()
        index = SupplyChainIndex(effective)
        state = VariableState.initialize(effective, index)

        logger.info(
            "Solving scenario %s: %d zone(s), %d product(s), %d material(s), %d-year horizon",
            effective.scenario.value, len(effective.zones), len(effective.products),
            len(effective.materials), effective.horizon,
        )

        self._build_plan(effective, index, state, cancel_event)

        checker = FeasibilityChecker(effective, index, cfg)
        feasible, iterations, report = self._repair_plan(checker, state, cancel_event)

        ReliabilityDispatcher(effective, cfg).run(state)
        costs = CostCalculator(effective, cfg.hours_per_year).calculate(state)
        metrics = compute_metrics(effective, index, state)
        state.freeze()

        if feasible:
            convergence = ConvergenceStatus.OPTIMAL if iterations < cfg.max_iterations else ConvergenceStatus.FEASIBLE
        else:
            convergence = ConvergenceStatus.INFEASIBLE
        gap = constants.GAP_CONVERGED if iterations < cfg.max_iterations else constants.GAP_AT_ITERATION_CAP

        solution = Solution(
            objective_value=costs.total,
            feasibility=feasible,
            convergence=convergence,
            solve_time=time.time() - start,
            iterations=iterations,
            gap=gap,
            variables=state,
            costs=costs,
            metrics=metrics,
            configuration=effective,
        )
        self.solution = solution

        if feasible:
            logger.info("%s", solution)
        else:
            logger.warning("No feasible plan after %d iteration(s): %s", iterations, report)
            warnings.warn(
                f"Scenario {effective.scenario.value}: constraints still violated after "
                f"{iterations} iteration(s) ({report})",
                InfeasibleSolutionWarning,
                stacklevel=2,
            )
        return solution

    def get_solution(self) -> Optional[Solution]:
        """Most recent solution, or None before the first solve."""
        return self.solution

    def analyze_bottlenecks(self):
        """
        Bottleneck report for the most recent solution.

        Raises:
            AnalysisPreconditionError: No solve has completed yet
        """
        if self.solution is None:
            raise AnalysisPreconditionError(
                "analyze_bottlenecks() called before solve()",
                {"scenario": self.configuration.scenario.value},
            )
        from scgep.analysis import BottleneckAnalyzer

        return BottleneckAnalyzer(self.solver_config).analyze(self.solution)

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def _build_plan(self, configuration, index, state, cancel_event, refill: bool = False) -> None:
        params = configuration.system_parameters
        margin = 1 + params.reserve_margin / 100
        tolerance = self.solver_config.tolerance

        for year in range(configuration.horizon):
            _check_cancelled(cancel_event, configuration, f"year {year}")
            for zone in configuration.zones:
                required = zone.peak_load(year) * margin
                available = (
                    zone.existing_capacity(year, params.base_year)
                    + state.zone_operational_capacity(zone.id, year)
                )
                gap = required - available
                if gap <= tolerance:
                    continue

                context = DeploymentContext(
                    configuration, index, state, self.solver_config, zone, year,
                    record_deferrals=not refill,
                )
                remaining = self.policy.fill_gap(context, gap)
                logger.debug(
                    "Year %d zone %s: gap %.1f MW, %.1f MW unfilled",
                    year, zone.id, gap, remaining,
                )

    def _repair_plan(self, checker: FeasibilityChecker, state: VariableState, cancel_event):
        max_iterations = self.solver_config.max_iterations
        report = FeasibilityReport()
        for iteration in range(1, max_iterations + 1):
            _check_cancelled(cancel_event, checker.configuration, f"repair pass {iteration}")
            report = checker.check(state)
            if report.feasible:
                return True, iteration, report
            if iteration == max_iterations:
                break
            factors = checker.rescale(state, report)
            if not factors:
                # Only violations that shrinking cannot fix remain
                return False, iteration, report
            self._build_plan(checker.configuration, checker.index, state, cancel_event, refill=True)
        return False, max_iterations, report


def _check_cancelled(cancel_event: Optional[threading.Event], configuration: Configuration, where: str) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise SolveCancelledError(
            "Solve cancelled",
            {"scenario": configuration.scenario.value, "at": where},
        )


def solve(
    configuration: Configuration,
    policy: Optional[DeploymentPolicy] = None,
    solver_config: Optional[SolverConfig] = None,
    cancel_event: Optional[threading.Event] = None,
) -> Solution:
    """Solve a configuration with the given (default: greedy) deployment policy."""
    return SCGEPSolver(configuration, policy, solver_config).solve(cancel_event)
