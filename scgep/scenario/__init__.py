"""Scenario comparison."""

from .comparator import ScenarioComparator, ScenarioComparison, ScenarioResult, compare

__all__ = [
    "ScenarioComparator",
    "ScenarioComparison",
    "ScenarioResult",
    "compare",
]
