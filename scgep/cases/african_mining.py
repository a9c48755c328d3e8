"""
Two-zone African mining case (South Africa, DRC).

Reuses the Maryland material, component and product catalogue with African
load centres. Neither zone has offshore area, so the offshore wind RPS
target is dropped and the zones are not interconnected.
"""

from typing import Union

from scgep.models import Configuration, ScenarioType, TechnologyType, Zone
from .maryland import (
    PLANNING_HORIZON,
    maryland_components,
    maryland_materials,
    maryland_products,
    maryland_system_parameters,
)
from .profiles import default_load_profile, solar_profile, wind_profile


def african_mining_zones():
    return [
        Zone(
            id="south_africa",
            name="South Africa",
            baseline_peak_load=35000,
            demand_cagr=2.5,
            available_land=10000,
            load_profiles=default_load_profile(),
            renewable_profiles={
                TechnologyType.SOLAR_PV: solar_profile(),
                TechnologyType.LAND_WIND: wind_profile(),
            },
        ),
        Zone(
            id="drc",
            name="Democratic Republic of Congo",
            baseline_peak_load=2500,
            demand_cagr=4.0,
            available_land=50000,
            load_profiles=default_load_profile(),
            renewable_profiles={TechnologyType.SOLAR_PV: solar_profile()},
        ),
    ]


def create_african_mining_config(
    scenario: Union[ScenarioType, str] = ScenarioType.BASELINE,
    planning_horizon: int = PLANNING_HORIZON,
) -> Configuration:
    """Build the African mining case tagged with ``scenario``."""
    parameters = maryland_system_parameters(planning_horizon)
    targets = {
        technology: target
        for technology, target in parameters.rps_targets.items()
        if technology is not TechnologyType.OFFSHORE_WIND
    }
    config = Configuration(
        materials=maryland_materials(),
        components=maryland_components(),
        products=maryland_products(),
        zones=african_mining_zones(),
        system_parameters=parameters.model_copy(update={"rps_targets": targets}),
    )
    return config.with_scenario(scenario)
