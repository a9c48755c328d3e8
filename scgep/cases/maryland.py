"""
Maryland four-zone case (BGE, APS, DPL, PEPCO).

Material supplies are Maryland's share (about 1.6%) of US primary supply.
Peak loads and growth rates are the baseline forecasts; demand scenarios are
applied by the solver through the scenario modifiers.
"""

from typing import Union

from scgep.models import (
    Component,
    Configuration,
    CriticalMaterial,
    ExistingUnit,
    MaterialType,
    Product,
    ScenarioType,
    SystemParameters,
    TechnologyType,
    TransmissionLine,
    Zone,
)
from .profiles import default_load_profile, offshore_wind_profile, solar_profile, wind_profile

BASE_YEAR = 2024
PLANNING_HORIZON = 30

# id, name, type, usgs code, primary supply (t/yr), energy sector share, $/t
_MATERIALS = [
    ("aluminum", "Aluminum", MaterialType.STANDARD, None, 45000, 0.1, 2500),
    ("cobalt", "Cobalt", MaterialType.CRITICAL, "Co", 2880, 0.3, 55000),
    ("dysprosium", "Dysprosium", MaterialType.RARE_EARTH, "Dy", 16, 0.3, 350000),
    ("gallium", "Gallium", MaterialType.CRITICAL, "Ga", 6.4, 0.1, 300000),
    ("graphite", "Graphite", MaterialType.CRITICAL, "C", 16000, 0.3, 1500),
    ("lithium", "Lithium", MaterialType.CRITICAL, "Li", 1376, 0.3, 15000),
    ("manganese", "Manganese", MaterialType.STANDARD, None, 80000, 0.1, 2000),
    ("neodymium", "Neodymium", MaterialType.RARE_EARTH, "Nd", 480, 0.3, 80000),
    ("nickel", "Nickel", MaterialType.CRITICAL, "Ni", 51200, 0.3, 18000),
    ("praseodymium", "Praseodymium", MaterialType.RARE_EARTH, "Pr", 160, 0.3, 75000),
    ("silicon", "Silicon", MaterialType.CRITICAL, "Si", 128000, 0.3, 2000),
    ("terbium", "Terbium", MaterialType.RARE_EARTH, "Tb", 4.8, 0.3, 1200000),
    ("tin", "Tin", MaterialType.STANDARD, None, 4800, 0.1, 25000),
    ("titanium", "Titanium", MaterialType.STANDARD, None, 32000, 0.1, 8000),
]

# id, name, tonnes per unit, units per year, lead time (years)
_COMPONENTS = [
    ("c_si_solar_cells", "Crystalline Silicon Solar Cells",
     {"silicon": 5.5, "aluminum": 2.0, "tin": 0.02}, 50000, 1),
    ("cdte_solar_cells", "CdTe Thin Film Solar Cells",
     {"aluminum": 1.8, "tin": 0.015}, 30000, 1),
    ("nmc_111_cells", "NMC-111 Battery Cells",
     {"lithium": 0.4, "nickel": 0.6, "cobalt": 0.6, "graphite": 1.2, "manganese": 0.6}, 20000, 1),
    ("nmc_811_cells", "NMC-811 Battery Cells",
     {"lithium": 0.4, "nickel": 1.6, "cobalt": 0.2, "graphite": 1.2, "manganese": 0.2}, 25000, 1),
    ("lbw_gearbox_components", "Land Wind Gearbox Components",
     {"nickel": 8.0, "neodymium": 0.15, "dysprosium": 0.01}, 5000, 2),
    ("lbw_direct_drive_components", "Land Wind Direct Drive Components",
     {"nickel": 6.0, "neodymium": 0.6, "praseodymium": 0.08, "dysprosium": 0.04}, 4000, 2),
    ("osw_gearbox_components", "Offshore Wind Gearbox Components",
     {"nickel": 12.0, "neodymium": 0.2, "dysprosium": 0.015}, 2000, 3),
    ("osw_direct_drive_components", "Offshore Wind Direct Drive Components",
     {"nickel": 8.0, "neodymium": 0.9, "praseodymium": 0.12, "dysprosium": 0.06}, 1500, 3),
]


def _product(id, name, technology, component, units_per_mw, density, lead_time,
             lifetime, capital, fixed_om, variable_om, elcc, availability=None):
    return Product(
        id=id,
        name=name,
        technology_type=technology,
        component_demand={component: units_per_mw},
        capital_cost=capital,
        fixed_om_cost=fixed_om,
        variable_om_cost=variable_om,
        lead_time=lead_time,
        lifetime=lifetime,
        elcc_factor=elcc,
        capacity_density=density,
        availability_factor=availability,
    )


def maryland_materials():
    return [
        CriticalMaterial(
            id=mid,
            name=name,
            type=kind,
            usgs_code=code,
            primary_supply=supply,
            energy_sector_share=share,
            recovery_rate=0.1,
            initial_stock=0.0,
            cost_per_tonne=price,
        )
        for mid, name, kind, code, supply, share, price in _MATERIALS
    ]


def maryland_components():
    return [
        Component(
            id=cid,
            name=name,
            material_demand=demand,
            production_capacity=capacity,
            lead_time=lead_time,
        )
        for cid, name, demand, capacity, lead_time in _COMPONENTS
    ]


def maryland_products():
    spv, bse = TechnologyType.SOLAR_PV, TechnologyType.BATTERY_STORAGE
    lbw, osw = TechnologyType.LAND_WIND, TechnologyType.OFFSHORE_WIND
    return [
        _product("spv_c_si", "Solar PV (c-Si)", spv, "c_si_solar_cells", 1.0,
                 36, 2, 30, 1_200_000, 15000, 0, 0.7, 0.25),
        _product("spv_cdte", "Solar PV (CdTe)", spv, "cdte_solar_cells", 1.0,
                 36, 2, 30, 1_150_000, 14000, 0, 0.7, 0.25),
        _product("bse_nmc_111", "Battery Storage (NMC-111)", bse, "nmc_111_cells", 2.0,
                 900, 1, 15, 350_000, 7000, 5, 0.95),
        _product("bse_nmc_811", "Battery Storage (NMC-811)", bse, "nmc_811_cells", 2.0,
                 900, 1, 15, 340_000, 6800, 5, 0.95),
        _product("lbw_gearbox", "Land Wind (Gearbox)", lbw, "lbw_gearbox_components", 0.1,
                 3.09, 3, 30, 1_500_000, 45000, 0, 0.85, 0.35),
        _product("lbw_direct_drive", "Land Wind (Direct Drive)", lbw, "lbw_direct_drive_components", 0.1,
                 3.09, 3, 30, 1_520_000, 46000, 0, 0.85, 0.35),
        _product("osw_gearbox", "Offshore Wind (Gearbox)", osw, "osw_gearbox_components", 0.1,
                 5.2, 4, 30, 4_000_000, 120000, 0, 0.9, 0.45),
        _product("osw_direct_drive", "Offshore Wind (Direct Drive)", osw, "osw_direct_drive_components", 0.1,
                 5.2, 4, 30, 4_050_000, 122000, 0, 0.9, 0.45),
    ]


def _unit(id, name, technology, capacity, retirement_year):
    return ExistingUnit(
        id=id, name=name, technology=technology, capacity=capacity, retirement_year=retirement_year,
    )


def maryland_zones():
    coal, nuc, ngcc = TechnologyType.COAL, TechnologyType.NUCLEAR, TechnologyType.GAS_COMBINED_CYCLE
    onshore = {
        TechnologyType.SOLAR_PV: solar_profile(),
        TechnologyType.LAND_WIND: wind_profile(),
    }
    coastal = {**onshore, TechnologyType.OFFSHORE_WIND: offshore_wind_profile()}
    return [
        Zone(
            id="bge",
            name="Baltimore Gas & Electric",
            baseline_peak_load=6428,
            demand_cagr=-0.65,
            available_land=500,
            available_offshore=2000,
            existing_units=[
                _unit("brandon_shores", "Brandon Shores", coal, 1350, 2025),
                _unit("wagner", "Wagner", coal, 1070, 2025),
                _unit("calvert_cliffs_1", "Calvert Cliffs Unit 1", nuc, 873, 2035),
                _unit("calvert_cliffs_2", "Calvert Cliffs Unit 2", nuc, 862, 2037),
            ],
            load_profiles=default_load_profile(),
            renewable_profiles=coastal,
        ),
        Zone(
            id="aps",
            name="Allegheny Power",
            baseline_peak_load=1554,
            demand_cagr=0.21,
            available_land=800,
            load_profiles=default_load_profile(),
            renewable_profiles=onshore,
        ),
        Zone(
            id="dpl",
            name="Delmarva Power",
            baseline_peak_load=961,
            demand_cagr=-0.45,
            available_land=300,
            available_offshore=1500,
            existing_units=[_unit("rock_springs", "Rock Springs", ngcc, 775, 2033)],
            load_profiles=default_load_profile(),
            renewable_profiles=coastal,
        ),
        Zone(
            id="pepco",
            name="Potomac Electric Power",
            baseline_peak_load=2958,
            demand_cagr=0.20,
            available_land=400,
            existing_units=[_unit("morgantown", "Morgantown", coal, 1178, 2025)],
            load_profiles=default_load_profile(),
            renewable_profiles=onshore,
        ),
    ]


def maryland_transmission_lines():
    return [
        TransmissionLine(id=f"{a}_{b}", from_zone=a, to_zone=b, capacity=capacity)
        for a, b, capacity in (
            ("bge", "aps", 2000),
            ("bge", "dpl", 1500),
            ("bge", "pepco", 2500),
            ("dpl", "pepco", 1000),
            ("aps", "pepco", 800),
        )
    ]


def maryland_system_parameters(planning_horizon: int = PLANNING_HORIZON) -> SystemParameters:
    return SystemParameters(
        planning_horizon=planning_horizon,
        base_year=BASE_YEAR,
        reserve_margin=15.0,
        rps_targets={
            TechnologyType.SOLAR_PV: 40.0,
            TechnologyType.LAND_WIND: 20.0,
            TechnologyType.OFFSHORE_WIND: 20.0,
        },
        voll=10000.0,
        reserve_margin_penalty=263000.0,
        rps_penalty=60.0,
        discount_rate=0.05,
    )


def create_maryland_config(
    scenario: Union[ScenarioType, str] = ScenarioType.BASELINE,
    planning_horizon: int = PLANNING_HORIZON,
) -> Configuration:
    """
    Build the Maryland case tagged with ``scenario``.

    Args:
        scenario: Scenario tag; its modifiers are applied when solving
        planning_horizon: Number of planning years from 2024

    Returns:
        Validated Configuration
    """
    config = Configuration(
        materials=maryland_materials(),
        components=maryland_components(),
        products=maryland_products(),
        zones=maryland_zones(),
        transmission_lines=maryland_transmission_lines(),
        system_parameters=maryland_system_parameters(planning_horizon),
    )
    return config.with_scenario(scenario)
