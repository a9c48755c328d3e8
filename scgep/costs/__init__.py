"""Cost calculation for capacity plans."""

from .cost_breakdown import CostBreakdown, PenaltyCostBreakdown
from .cost_calculator import CostCalculator

__all__ = [
    "CostBreakdown",
    "PenaltyCostBreakdown",
    "CostCalculator",
]
