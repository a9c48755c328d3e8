"""Complete planning problem configuration."""

import math
from typing import Dict, List, Optional, Union

from pydantic import Field, model_validator

from scgep.validation.configuration_validator import ConfigurationValidator
from scgep.validation.errors import ConfigurationError
from .base import DomainModel
from .component import Component
from .material import CriticalMaterial
from .product import Product
from .scenario import DEFAULT_SCENARIO_MODIFIERS, ScenarioModifiers, ScenarioType
from .system_parameters import SystemParameters
from .zone import TransmissionLine, Zone


class Configuration(DomainModel):
    """
    Read-only input to the solver.

    Construction validates every cross reference (component -> material,
    product -> component, line -> zone) and raises ConfigurationError on the
    first malformed input, before any solve is attempted.

    Example:
        config = Configuration(
            materials=[...],
            components=[...],
            products=[...],
            zones=[...],
            system_parameters=SystemParameters(planning_horizon=10),
        )
        high = config.with_scenario("high_demand")
    """
    materials: List[CriticalMaterial] = Field(default_factory=list)
    components: List[Component] = Field(default_factory=list)
    products: List[Product] = Field(default_factory=list)
    zones: List[Zone] = Field(..., min_length=1)
    transmission_lines: List[TransmissionLine] = Field(default_factory=list)
    system_parameters: SystemParameters
    scenario: ScenarioType = ScenarioType.BASELINE
    scenario_modifiers: Optional[ScenarioModifiers] = Field(
        None,
        description="Overrides the default adjustments of the scenario tag",
    )

    @model_validator(mode="after")
    def _check_references(self) -> "Configuration":
        ConfigurationValidator(self).raise_for_errors()
        return self

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def material_map(self) -> Dict[str, CriticalMaterial]:
        return {m.id: m for m in self.materials}

    def component_map(self) -> Dict[str, Component]:
        return {c.id: c for c in self.components}

    def product_map(self) -> Dict[str, Product]:
        return {p.id: p for p in self.products}

    def zone_map(self) -> Dict[str, Zone]:
        return {z.id: z for z in self.zones}

    @property
    def horizon(self) -> int:
        return self.system_parameters.planning_horizon

    # ------------------------------------------------------------------
    # Derived configurations
    # ------------------------------------------------------------------

    def with_scenario(self, scenario: Union[ScenarioType, str]) -> "Configuration":
        """Copy of this configuration tagged with another scenario."""
        try:
            tag = ScenarioType(scenario)
        except ValueError as exc:
            raise ConfigurationError(
                f"Unknown scenario '{scenario}'",
                {"known_scenarios": [s.value for s in ScenarioType]},
            ) from exc
        return self.model_copy(update={"scenario": tag})

    def with_market_overrides(
        self,
        supply: Optional[Dict[str, float]] = None,
        prices: Optional[Dict[str, float]] = None,
    ) -> "Configuration":
        """
        Copy with material supply and price figures replaced.

        This is the boundary with market-data services: they resolve current
        or forecast numbers and hand them over as plain floats.

        Args:
            supply: material_id -> primary supply (tonnes/year)
            prices: material_id -> cost per tonne ($)

        Raises:
            ConfigurationError: Unknown material id or negative value
        """
        supply = supply or {}
        prices = prices or {}
        known = self.material_map()
        unknown = sorted((set(supply) | set(prices)) - set(known))
        if unknown:
            raise ConfigurationError(
                f"Market overrides reference {len(unknown)} unknown material(s)",
                {"unknown": unknown, "known": sorted(known)},
            )
        negative = sorted(
            mid for mid, value in list(supply.items()) + list(prices.items())
            if value < 0 or math.isnan(value)
        )
        if negative:
            raise ConfigurationError(
                "Market overrides must be non-negative numbers",
                {"materials": negative},
            )

        materials = []
        for material in self.materials:
            update = {}
            if material.id in supply:
                update["primary_supply"] = float(supply[material.id])
            if material.id in prices:
                update["cost_per_tonne"] = float(prices[material.id])
            materials.append(material.model_copy(update=update) if update else material)
        return self.model_copy(update={"materials": materials})

    def effective_modifiers(self) -> ScenarioModifiers:
        if self.scenario_modifiers is not None:
            return self.scenario_modifiers
        return DEFAULT_SCENARIO_MODIFIERS[self.scenario]

    def apply_scenario(self) -> "Configuration":
        """
        Configuration with the scenario adjustments folded into the data.

        The result carries identity modifiers, so applying it again is a no-op.
        """
        modifiers = self.effective_modifiers()
        if modifiers.is_identity():
            return self

        zones = []
        for zone in self.zones:
            land = zone.available_land
            offshore = zone.available_offshore
            zones.append(zone.model_copy(update={
                "baseline_peak_load": zone.baseline_peak_load * modifiers.demand_multiplier,
                "demand_cagr": max(-99.0, zone.demand_cagr + modifiers.cagr_offset),
                "available_land": None if land is None else land * modifiers.land_multiplier,
                "available_offshore": None if offshore is None else offshore * modifiers.land_multiplier,
            }))

        materials = []
        for material in self.materials:
            if modifiers.unlimited_materials:
                supply = math.inf
            else:
                supply = material.primary_supply * modifiers.supply_multiplier_by_type.get(material.type, 1.0)
            materials.append(material.model_copy(update={"primary_supply": supply}))

        products = self.products
        if modifiers.remove_lead_times:
            products = [p.model_copy(update={"lead_time": 0}) for p in self.products]

        return self.model_copy(update={
            "zones": zones,
            "materials": materials,
            "products": products,
            "scenario_modifiers": ScenarioModifiers(),
        })
