"""Capacity-expansion solver, deployment policies and solution types."""

from .solver_config import SolverConfig
from .supply_chain import SupplyChainIndex
from .variables import Deployment, LeadTimeDeferral, VariableState
from .deployment_policy import DeploymentContext, DeploymentPolicy, GreedyDeploymentPolicy
from .lp_policy import LPDeploymentPolicy, highs_available
from .feasibility import FeasibilityChecker, FeasibilityReport
from .dispatch import ReliabilityDispatcher
from .metrics import SolutionMetrics, compute_metrics
from .result_schema import ConvergenceStatus, Solution, SolutionSummary
from .solver import SCGEPSolver, solve

__all__ = [
    "SolverConfig",
    "SupplyChainIndex",
    "Deployment",
    "LeadTimeDeferral",
    "VariableState",
    "DeploymentContext",
    "DeploymentPolicy",
    "GreedyDeploymentPolicy",
    "LPDeploymentPolicy",
    "highs_available",
    "FeasibilityChecker",
    "FeasibilityReport",
    "ReliabilityDispatcher",
    "SolutionMetrics",
    "compute_metrics",
    "ConvergenceStatus",
    "Solution",
    "SolutionSummary",
    "SCGEPSolver",
    "solve",
]
