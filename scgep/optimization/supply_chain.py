"""
Bill-of-materials propagation and material stock accounting.

Products need components per MW; components need materials per unit. The
index flattens that chain once per solve so the solver, the feasibility
checker and the bottleneck analyzer all read the same intensities.
"""

import math
from typing import Dict, List, Tuple

import numpy as np

from scgep.models import Configuration, CriticalMaterial, Product, TechnologyType


class SupplyChainIndex:
    """
    Flattened Product → Component → Material lookups for one configuration.

    Attributes:
        materials: material_id -> CriticalMaterial (input order)
        components: component_id -> Component (input order)
        products: product_id -> Product (input order)
    """

    def __init__(self, configuration: Configuration):
        self.materials = configuration.material_map()
        self.components = configuration.component_map()
        self.products = configuration.product_map()

        self._material_intensity: Dict[str, Dict[str, float]] = {}
        for product in configuration.products:
            intensity: Dict[str, float] = {}
            for component_id, units_per_mw in product.component_demand.items():
                component = self.components[component_id]
                for material_id, tonnes_per_unit in component.material_demand.items():
                    intensity[material_id] = intensity.get(material_id, 0.0) + units_per_mw * tonnes_per_unit
            self._material_intensity[product.id] = intensity

    def material_intensity(self, product_id: str) -> Dict[str, float]:
        """Tonnes of each material per MW of the product."""
        return self._material_intensity[product_id]

    def component_intensity(self, product_id: str) -> Dict[str, float]:
        """Units of each component per MW of the product."""
        return self.products[product_id].component_demand

    def products_using(self, material_id: str) -> List[Product]:
        """Products whose bill of materials includes the material, in input order."""
        return [
            p for p in self.products.values()
            if self._material_intensity[p.id].get(material_id, 0.0) > 0
        ]

    def technologies_using(self, material_id: str) -> List[TechnologyType]:
        seen: List[TechnologyType] = []
        for product in self.products_using(material_id):
            if product.technology_type not in seen:
                seen.append(product.technology_type)
        return seen

    def sector_supply(self, material_id: str) -> float:
        return self.materials[material_id].sector_supply


def roll_stock(
    material: CriticalMaterial,
    utilization: np.ndarray,
    recovered: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Carry material stock through the horizon.

    Annual sector supply covers utilization first; any excess draws the stock
    down. Recovered tonnes from retiring units are added at the end of the year.

    Returns:
        (opening, closing) stock arrays in tonnes
    """
    horizon = len(utilization)
    opening = np.zeros(horizon)
    closing = np.zeros(horizon)
    supply = material.sector_supply
    stock = material.initial_stock
    for year in range(horizon):
        opening[year] = stock
        draw = 0.0 if math.isinf(supply) else max(0.0, utilization[year] - supply)
        stock = stock - draw + recovered[year]
        closing[year] = stock
    return opening, closing


def material_slack(material: CriticalMaterial, utilization: np.ndarray, opening: np.ndarray) -> np.ndarray:
    """Tonnes still available per year: sector supply + opening stock − utilization."""
    if math.isinf(material.sector_supply):
        return np.full(len(utilization), math.inf)
    return material.sector_supply + opening - utilization


def material_headroom(
    material: CriticalMaterial,
    utilization: np.ndarray,
    opening: np.ndarray,
    year: int,
) -> float:
    """
    Largest extra utilization at ``year`` that keeps every year feasible.

    Utilization beyond the year's spare supply comes out of stock, which
    lowers the opening stock of every later year by the same amount.
    """
    if math.isinf(material.sector_supply):
        return math.inf
    slack = material_slack(material, utilization, opening)
    spare = max(0.0, material.sector_supply - utilization[year])
    later = slack[year + 1:]
    limit = float(slack[year])
    if later.size:
        limit = min(limit, spare + float(later.min()))
    return max(0.0, limit)


def material_limit(material: CriticalMaterial, opening: np.ndarray, year: int) -> float:
    """Utilization allowed in a year given its opening stock (tonnes)."""
    return material.sector_supply + max(0.0, float(opening[year]))
