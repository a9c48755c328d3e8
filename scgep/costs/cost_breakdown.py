"""Cost breakdown data models.

Year-indexed cost series for a solved plan, with totals for reporting.
"""

from dataclasses import dataclass, field
from typing import Dict

import numpy as np


def _zeros() -> np.ndarray:
    return np.zeros(0)


@dataclass
class PenaltyCostBreakdown:
    """
    Penalty costs by violation type.

    Attributes:
        load_shedding: Unserved energy × VOLL per year ($)
        reserve_margin: Reserve shortfall × penalty rate per year ($)
        rps: RPS shortfall × penalty rate per year ($)
        rps_by_technology: RPS penalty total per technology ($)
    """
    load_shedding: np.ndarray = field(default_factory=_zeros)
    reserve_margin: np.ndarray = field(default_factory=_zeros)
    rps: np.ndarray = field(default_factory=_zeros)
    rps_by_technology: Dict[str, float] = field(default_factory=dict)

    @property
    def by_year(self) -> np.ndarray:
        return self.load_shedding + self.reserve_margin + self.rps

    @property
    def total_cost(self) -> float:
        return float(self.by_year.sum())

    def __str__(self) -> str:
        return (
            f"Penalty Cost: ${self.total_cost:,.2f} "
            f"(shedding ${self.load_shedding.sum():,.0f}, reserve ${self.reserve_margin.sum():,.0f}, "
            f"RPS ${self.rps.sum():,.0f})"
        )


@dataclass
class CostBreakdown:
    """
    Cost of a capacity plan, indexed by planning year.

    Attributes:
        investment: Capital cost of capacity decided in each year ($)
        operational: Fixed and variable O&M of operational capacity ($)
        penalty: Penalty costs per year ($)
        penalties: Penalty costs split by violation type
        investment_by_product: Total capital cost per product ($)
        net_present_value: Discounted total at the configured discount rate ($)
    """
    investment: np.ndarray = field(default_factory=_zeros)
    operational: np.ndarray = field(default_factory=_zeros)
    penalties: PenaltyCostBreakdown = field(default_factory=PenaltyCostBreakdown)
    investment_by_product: Dict[str, float] = field(default_factory=dict)
    net_present_value: float = 0.0

    @property
    def penalty(self) -> np.ndarray:
        return self.penalties.by_year

    @property
    def by_year(self) -> np.ndarray:
        return self.investment + self.operational + self.penalty

    @property
    def total_investment(self) -> float:
        return float(self.investment.sum())

    @property
    def total_operational(self) -> float:
        return float(self.operational.sum())

    @property
    def total_penalty(self) -> float:
        return float(self.penalty.sum())

    @property
    def total(self) -> float:
        return self.total_investment + self.total_operational + self.total_penalty

    def __str__(self) -> str:
        """String representation."""
        return (
            f"Total Cost: ${self.total:,.2f}\n"
            f"  Investment: ${self.total_investment:,.2f}\n"
            f"  Operational: ${self.total_operational:,.2f}\n"
            f"  {self.penalties}\n"
            f"  NPV: ${self.net_present_value:,.2f}"
        )

    def get_cost_proportions(self) -> Dict[str, float]:
        """
        Get proportion of each cost component.

        Returns:
            Dictionary mapping component name to proportion (0.0 to 1.0)
        """
        if self.total == 0:
            return {"investment": 0.0, "operational": 0.0, "penalty": 0.0}

        return {
            "investment": self.total_investment / self.total,
            "operational": self.total_operational / self.total,
            "penalty": self.total_penalty / self.total,
        }
