"""
Referential-integrity checks for a planning configuration.

The validator works on any object exposing ``materials``, ``components``,
``products``, ``zones``, ``transmission_lines`` and ``system_parameters``, so
it can run inside the Configuration model validator without importing the
model package.
"""

import logging
from collections import Counter
from typing import Any, Dict, List

import networkx as nx

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class ConfigurationValidator:
    """
    Validates cross references between materials, components, products,
    zones and transmission lines.

    Errors make the configuration unusable. Warnings flag inputs that solve
    fine but are probably not what the modeller intended (isolated zones,
    products that can never come online within the horizon).

    Example:
        validator = ConfigurationValidator(config)
        results = validator.validate_all()
        if not results["valid"]:
            print(results["errors"])
    """

    def __init__(self, configuration: Any):
        self.configuration = configuration
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def validate_all(self) -> Dict[str, Any]:
        """
        Run every check.

        Returns:
            Dict with 'valid', 'errors' and 'warnings' keys
        """
        self.errors = []
        self.warnings = []

        self._check_unique_ids()
        self._check_component_materials()
        self._check_product_components()
        self._check_transmission_lines()
        self._check_rps_targets()
        self._check_lead_times()
        self._check_network_connectivity()

        return {
            "valid": not self.errors,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }

    def raise_for_errors(self) -> Dict[str, Any]:
        """Run every check and raise ConfigurationError if any failed."""
        results = self.validate_all()
        for warning in results["warnings"]:
            logger.warning("Configuration warning: %s", warning)
        if not results["valid"]:
            raise ConfigurationError(
                f"Configuration has {len(results['errors'])} invalid reference(s)",
                {"errors": results["errors"]},
            )
        return results

    # ------------------------------------------------------------------
    # Individual checks
    # ------------------------------------------------------------------

    def _check_unique_ids(self) -> None:
        collections = {
            "material": self.configuration.materials,
            "component": self.configuration.components,
            "product": self.configuration.products,
            "zone": self.configuration.zones,
            "transmission line": self.configuration.transmission_lines,
        }
        for label, items in collections.items():
            counts = Counter(item.id for item in items)
            for item_id, count in counts.items():
                if count > 1:
                    self.errors.append(f"Duplicate {label} id '{item_id}' ({count} occurrences)")

        unit_ids = Counter(
            unit.id for zone in self.configuration.zones for unit in zone.existing_units
        )
        for unit_id, count in unit_ids.items():
            if count > 1:
                self.errors.append(f"Duplicate existing unit id '{unit_id}' ({count} occurrences)")

    def _check_component_materials(self) -> None:
        material_ids = {m.id for m in self.configuration.materials}
        for component in self.configuration.components:
            for material_id in component.material_demand:
                if material_id not in material_ids:
                    self.errors.append(
                        f"Component '{component.id}' references unknown material '{material_id}'"
                    )

    def _check_product_components(self) -> None:
        component_ids = {c.id for c in self.configuration.components}
        for product in self.configuration.products:
            for component_id in product.component_demand:
                if component_id not in component_ids:
                    self.errors.append(
                        f"Product '{product.id}' references unknown component '{component_id}'"
                    )

    def _check_transmission_lines(self) -> None:
        zone_ids = {z.id for z in self.configuration.zones}
        for line in self.configuration.transmission_lines:
            for end in (line.from_zone, line.to_zone):
                if end not in zone_ids:
                    self.errors.append(
                        f"Transmission line '{line.id}' references unknown zone '{end}'"
                    )
            if line.from_zone == line.to_zone:
                self.errors.append(f"Transmission line '{line.id}' connects zone '{line.from_zone}' to itself")

    def _check_rps_targets(self) -> None:
        offered = {p.technology_type for p in self.configuration.products}
        existing = {
            unit.technology for zone in self.configuration.zones for unit in zone.existing_units
        }
        for technology, target in self.configuration.system_parameters.rps_targets.items():
            if target > 0 and technology not in offered | existing:
                self.warnings.append(
                    f"RPS target for '{technology.value}' but no product or existing unit of that type"
                )

    def _check_lead_times(self) -> None:
        horizon = self.configuration.system_parameters.planning_horizon
        for product in self.configuration.products:
            if product.lead_time >= horizon:
                self.warnings.append(
                    f"Product '{product.id}' lead time ({product.lead_time}y) exceeds the "
                    f"{horizon}-year horizon and can never be deployed"
                )

    def _check_network_connectivity(self) -> None:
        zones = self.configuration.zones
        lines = self.configuration.transmission_lines
        if len(zones) < 2 or not lines:
            return

        graph = nx.Graph()
        graph.add_nodes_from(z.id for z in zones)
        graph.add_edges_from(
            (line.from_zone, line.to_zone) for line in lines
            if line.from_zone in graph and line.to_zone in graph
        )

        isolated = sorted(nx.isolates(graph))
        for zone_id in isolated:
            self.warnings.append(f"Zone '{zone_id}' has no transmission connection")

        islands = [c for c in nx.connected_components(graph) if len(c) > 1]
        if len(islands) > 1:
            self.warnings.append(
                f"Transmission network splits into {len(islands)} islands: "
                + "; ".join(", ".join(sorted(c)) for c in islands)
            )
