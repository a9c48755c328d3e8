"""Pytest configuration and shared fixtures."""

import pytest

from scgep.cases import flat_profile
from scgep.models import (
    Component,
    Configuration,
    CriticalMaterial,
    ExistingUnit,
    Product,
    SystemParameters,
    TechnologyType,
    TransmissionLine,
    Zone,
)
from scgep.optimization import SolverConfig, SupplyChainIndex, VariableState


@pytest.fixture
def gas_unit():
    """Existing 900 MW gas unit that never retires."""
    return ExistingUnit(
        id="gas_1",
        name="Gas Unit 1",
        technology=TechnologyType.GAS_COMBINED_CYCLE,
        capacity=900.0,
    )


@pytest.fixture
def battery_product():
    """Battery storage product with no bill of materials."""
    return Product(
        id="bse_basic",
        name="Battery Storage",
        technology_type=TechnologyType.BATTERY_STORAGE,
        capital_cost=350_000.0,
        lead_time=0,
        lifetime=15,
        elcc_factor=0.9,
    )


@pytest.fixture
def single_zone(gas_unit):
    """1,000 MW peak, no growth, flat load shape."""
    return Zone(
        id="z1",
        name="Zone 1",
        baseline_peak_load=1000.0,
        demand_cagr=0.0,
        existing_units=[gas_unit],
        load_profiles=flat_profile(1.0),
    )


@pytest.fixture
def battery_config(single_zone, battery_product):
    """Single zone, single battery product, unlimited materials, 15% reserve margin."""
    return Configuration(
        zones=[single_zone],
        products=[battery_product],
        system_parameters=SystemParameters(planning_horizon=5, reserve_margin=15.0),
    )


@pytest.fixture
def materials():
    """Lithium (scarce) and silicon (plentiful)."""
    return [
        CriticalMaterial(id="lithium", name="Lithium", primary_supply=100.0, cost_per_tonne=15000.0),
        CriticalMaterial(id="silicon", name="Silicon", primary_supply=10000.0, cost_per_tonne=2000.0),
    ]


@pytest.fixture
def components():
    """Battery cell (0.5 t lithium/unit) and solar wafer (1 t silicon/unit)."""
    return [
        Component(id="cell", name="Battery Cell", material_demand={"lithium": 0.5}),
        Component(id="wafer", name="Solar Wafer", material_demand={"silicon": 1.0}),
    ]


@pytest.fixture
def supply_chain_products():
    """Lithium battery (1 t Li/MW) and silicon solar (1 t Si/MW, 36 MW/km²)."""
    return [
        Product(
            id="bse_li",
            name="Lithium Battery",
            technology_type=TechnologyType.BATTERY_STORAGE,
            component_demand={"cell": 2.0},
            capital_cost=350_000.0,
            lead_time=0,
            lifetime=15,
            elcc_factor=0.95,
        ),
        Product(
            id="spv_si",
            name="Silicon Solar",
            technology_type=TechnologyType.SOLAR_PV,
            component_demand={"wafer": 1.0},
            capital_cost=1_000_000.0,
            lead_time=0,
            lifetime=30,
            elcc_factor=0.7,
            capacity_density=36.0,
            availability_factor=0.25,
        ),
    ]


@pytest.fixture
def supply_chain_config(gas_unit, materials, components, supply_chain_products):
    """One zone with a 250 MW gap in year 0 and a scarce lithium supply."""
    zone = Zone(
        id="z1",
        name="Zone 1",
        baseline_peak_load=1000.0,
        existing_units=[gas_unit],
        available_land=100.0,
        load_profiles=flat_profile(1.0),
    )
    return Configuration(
        materials=materials,
        components=components,
        products=supply_chain_products,
        zones=[zone],
        system_parameters=SystemParameters(planning_horizon=3, reserve_margin=15.0),
    )


@pytest.fixture
def stocked_battery_config(supply_chain_config, materials, supply_chain_products):
    """Lithium battery only; no lithium supply, 100 t lithium in stock (1 t/MW)."""
    lithium = materials[0].model_copy(update={"primary_supply": 0.0, "initial_stock": 100.0})
    return supply_chain_config.model_copy(update={
        "materials": [lithium, materials[1]],
        "products": [supply_chain_products[0]],
    })


@pytest.fixture
def two_zone_config(materials, components, supply_chain_products):
    """Two connected zones with growing demand and a retiring coal unit."""
    north = Zone(
        id="north",
        name="North",
        baseline_peak_load=800.0,
        demand_cagr=2.0,
        existing_units=[
            ExistingUnit(id="coal_1", technology=TechnologyType.COAL, capacity=600.0, retirement_year=2026),
            ExistingUnit(id="nuc_1", technology=TechnologyType.NUCLEAR, capacity=400.0),
        ],
        available_land=200.0,
    )
    south = Zone(
        id="south",
        name="South",
        baseline_peak_load=400.0,
        demand_cagr=1.0,
        existing_units=[ExistingUnit(id="gas_s", technology=TechnologyType.GAS_COMBINED_CYCLE, capacity=300.0)],
        available_land=50.0,
    )
    return Configuration(
        materials=materials,
        components=components,
        products=supply_chain_products,
        zones=[north, south],
        transmission_lines=[TransmissionLine(id="north_south", from_zone="north", to_zone="south", capacity=200.0)],
        system_parameters=SystemParameters(
            planning_horizon=6,
            base_year=2024,
            reserve_margin=15.0,
            rps_targets={TechnologyType.SOLAR_PV: 10.0},
            voll=10000.0,
            reserve_margin_penalty=263000.0,
            rps_penalty=60.0,
            discount_rate=0.05,
        ),
    )


@pytest.fixture
def solver_config():
    return SolverConfig()


@pytest.fixture
def empty_state():
    """Factory for a fresh VariableState of a configuration."""
    def _make(configuration):
        index = SupplyChainIndex(configuration)
        return VariableState.initialize(configuration, index), index
    return _make
