"""Tests for the greedy deployment policy and its context."""

import pytest

from scgep.models import Configuration, Product, SystemParameters, TechnologyType, Zone
from scgep.optimization import DeploymentContext, GreedyDeploymentPolicy, SolverConfig


def _context(configuration, empty_state, year=0, zone_index=0):
    state, index = empty_state(configuration)
    return DeploymentContext(configuration, index, state, SolverConfig(), configuration.zones[zone_index], year)


def _product(id, technology, capital_cost=1_000_000.0, elcc=0.8, lead_time=0, **kwargs):
    return Product(
        id=id,
        technology_type=technology,
        capital_cost=capital_cost,
        elcc_factor=elcc,
        lead_time=lead_time,
        lifetime=kwargs.pop("lifetime", 20),
        **kwargs,
    )


class TestRanking:
    """Storage first, then solar, then the rest by priority score."""

    def test_rank_order(self):
        products = [
            _product("lbw", TechnologyType.LAND_WIND, elcc=0.85),
            _product("spv", TechnologyType.SOLAR_PV),
            _product("osw", TechnologyType.OFFSHORE_WIND, elcc=0.9, lead_time=4),
            _product("bse", TechnologyType.BATTERY_STORAGE),
        ]
        ranked = GreedyDeploymentPolicy().rank(products)
        assert [p.id for p in ranked] == ["bse", "spv", "lbw", "osw"]

    def test_ties_keep_input_order(self):
        products = [
            _product("bse_b", TechnologyType.BATTERY_STORAGE),
            _product("bse_a", TechnologyType.BATTERY_STORAGE),
        ]
        ranked = GreedyDeploymentPolicy().rank(products)
        assert [p.id for p in ranked] == ["bse_b", "bse_a"]

    def test_higher_score_first_within_group(self):
        products = [
            _product("expensive", TechnologyType.BATTERY_STORAGE, capital_cost=400_000.0),
            _product("cheap", TechnologyType.BATTERY_STORAGE, capital_cost=300_000.0),
        ]
        ranked = GreedyDeploymentPolicy().rank(products)
        assert ranked[0].id == "cheap"


class TestGreedyFill:
    """Tests for GreedyDeploymentPolicy.fill_gap()."""

    def test_share_then_remainder(self, supply_chain_config, empty_state):
        context = _context(supply_chain_config, empty_state)
        remaining = GreedyDeploymentPolicy().fill_gap(context, 250.0)

        assert remaining == pytest.approx(0.0)
        deployments = {d.product_id: d.capacity_mw for d in context.state.deployments}
        # Battery is offered 30% of the gap, solar (last) takes the rest
        assert deployments["bse_li"] == pytest.approx(75.0)
        assert deployments["spv_si"] == pytest.approx(175.0)

    def test_single_candidate_takes_whole_gap(self, battery_config, empty_state):
        context = _context(battery_config, empty_state)
        remaining = GreedyDeploymentPolicy().fill_gap(context, 250.0)

        assert remaining == pytest.approx(0.0)
        assert len(context.state.deployments) == 1
        assert context.state.deployments[0].capacity_mw == pytest.approx(250.0)

    def test_unit_cap(self, battery_config, empty_state):
        context = _context(battery_config, empty_state)
        remaining = GreedyDeploymentPolicy().fill_gap(context, 2000.0)

        assert context.state.deployments[0].capacity_mw == pytest.approx(500.0)
        assert remaining == pytest.approx(1500.0)

    def test_custom_unit_cap(self, battery_config, empty_state):
        context = _context(battery_config, empty_state)
        GreedyDeploymentPolicy(unit_cap_mw=100.0).fill_gap(context, 250.0)
        assert context.state.deployments[0].capacity_mw == pytest.approx(100.0)

    def test_zone_cap(self, battery_config, battery_product, empty_state):
        capped = battery_config.model_copy(update={
            "products": [battery_product.model_copy(update={"max_zone_capacity_mw": 80.0})],
        })
        context = _context(capped, empty_state)
        remaining = GreedyDeploymentPolicy().fill_gap(context, 250.0)

        assert context.state.deployments[0].capacity_mw == pytest.approx(80.0)
        assert remaining == pytest.approx(170.0)

    def test_material_short_product_is_skipped(self, supply_chain_config, empty_state):
        scarce = supply_chain_config.with_market_overrides(supply={"lithium": 50.0})
        context = _context(scarce, empty_state)
        remaining = GreedyDeploymentPolicy().fill_gap(context, 250.0)

        # 75 MW of battery needs 75 t lithium; only 50 t available
        assert [d.product_id for d in context.state.deployments] == ["spv_si"]
        assert context.state.deployments[0].capacity_mw == pytest.approx(250.0)
        assert remaining == pytest.approx(0.0)

    def test_last_candidate_falls_back_to_share(self, stocked_battery_config, empty_state):
        context = _context(stocked_battery_config, empty_state)
        remaining = GreedyDeploymentPolicy().fill_gap(context, 250.0)

        # 250 MW needs 250 t of the 100 t in stock; 30% of the gap fits
        assert len(context.state.deployments) == 1
        assert context.state.deployments[0].capacity_mw == pytest.approx(75.0)
        assert remaining == pytest.approx(175.0)

    def test_last_candidate_skipped_when_share_does_not_fit(self, stocked_battery_config, empty_state):
        context = _context(stocked_battery_config, empty_state)
        battery = stocked_battery_config.product_map()["bse_li"]
        context.commit(battery, 50.0, 0)

        remaining = GreedyDeploymentPolicy().fill_gap(context, 250.0)

        # 50 t left is short of both 250 MW and the 75 MW share
        assert len(context.state.deployments) == 1
        assert remaining == pytest.approx(250.0)

    def test_land_limits_solar(self, supply_chain_config, empty_state):
        zone = supply_chain_config.zones[0].model_copy(update={"available_land": 2.0})
        small = supply_chain_config.model_copy(update={"zones": [zone]})
        context = _context(small, empty_state)
        remaining = GreedyDeploymentPolicy().fill_gap(context, 250.0)

        deployments = {d.product_id: d.capacity_mw for d in context.state.deployments}
        # 175 MW of solar needs 4.9 km²; 30% of it (52.5 MW) fits in 2 km²
        assert deployments["bse_li"] == pytest.approx(75.0)
        assert deployments["spv_si"] == pytest.approx(52.5)
        assert remaining == pytest.approx(122.5)

    def test_lead_time_deferral(self, battery_config, battery_product, empty_state):
        slow = battery_config.model_copy(update={
            "products": [battery_product.model_copy(update={"lead_time": 2})],
        })
        context = _context(slow, empty_state, year=1)
        remaining = GreedyDeploymentPolicy().fill_gap(context, 250.0)

        assert remaining == pytest.approx(250.0)
        assert context.state.deployments == []
        deferral = context.state.deferrals[0]
        assert deferral.product_id == "bse_basic"
        assert deferral.lead_time == 2
        assert deferral.shortfall_mw == pytest.approx(250.0)

    def test_decision_year_precedes_online_year(self, battery_config, battery_product, empty_state):
        slow = battery_config.model_copy(update={
            "products": [battery_product.model_copy(update={"lead_time": 2})],
        })
        context = _context(slow, empty_state, year=3)
        GreedyDeploymentPolicy().fill_gap(context, 100.0)

        deployment = context.state.deployments[0]
        assert deployment.decision_year == 1
        assert deployment.online_year == 3


class TestDeploymentContext:
    """Tests for DeploymentContext headroom queries."""

    def test_max_deployable_follows_material(self, supply_chain_config, empty_state):
        context = _context(supply_chain_config, empty_state)
        battery = supply_chain_config.product_map()["bse_li"]
        assert context.max_deployable_mw(battery, 0) == pytest.approx(100.0)

        context.commit(battery, 40.0, 0)
        assert context.max_deployable_mw(battery, 0) == pytest.approx(60.0)

    def test_max_deployable_follows_land(self, supply_chain_config, empty_state):
        zone = supply_chain_config.zones[0].model_copy(update={"available_land": 2.0})
        small = supply_chain_config.model_copy(update={"zones": [zone]})
        context = _context(small, empty_state)
        solar = small.product_map()["spv_si"]
        # 2 km² at 36 MW/km²
        assert context.max_deployable_mw(solar, 0) == pytest.approx(72.0)
        assert context.remaining_site_area(solar, 0) == pytest.approx(2.0)

        context.commit(solar, 36.0, 0)
        assert context.max_deployable_mw(solar, 0) == pytest.approx(36.0)

    def test_unset_offshore_area_blocks_offshore_wind(self, battery_config, empty_state):
        offshore = _product("osw", TechnologyType.OFFSHORE_WIND, capacity_density=5.2)
        config = battery_config.model_copy(update={"products": [offshore]})
        context = _context(config, empty_state)
        assert context.max_deployable_mw(offshore, 0) == pytest.approx(0.0)
        assert GreedyDeploymentPolicy().fill_gap(context, 100.0) == pytest.approx(100.0)
        assert context.state.deployments == []

    def test_refill_context_records_no_deferrals(self, battery_config, battery_product, empty_state):
        slow = battery_config.model_copy(update={
            "products": [battery_product.model_copy(update={"lead_time": 2})],
        })
        state, index = empty_state(slow)
        context = DeploymentContext(slow, index, state, SolverConfig(), slow.zones[0], 0, record_deferrals=False)
        GreedyDeploymentPolicy().fill_gap(context, 100.0)
        assert state.deferrals == []

    def test_component_capacity_limits_deployment(self, supply_chain_config, components, empty_state):
        limited = supply_chain_config.model_copy(update={
            "components": [components[0].model_copy(update={"production_capacity": 50.0}), components[1]],
        })
        context = _context(limited, empty_state)
        battery = limited.product_map()["bse_li"]
        # 2 cells per MW
        assert context.max_deployable_mw(battery, 0) == pytest.approx(25.0)
        assert not context.can_deploy(battery, 30.0, 0)
        assert context.can_deploy(battery, 25.0, 0)

    def test_decision_year_outside_horizon(self, battery_config, battery_product, empty_state):
        context = _context(battery_config, empty_state, year=0)
        assert context.decision_year(battery_product) == 0
        assert context.decision_year(battery_product.model_copy(update={"lead_time": 1})) is None


def test_empty_product_list_leaves_gap(empty_state):
    config = Configuration(
        zones=[Zone(id="z", baseline_peak_load=100)],
        system_parameters=SystemParameters(planning_horizon=2),
    )
    context = _context(config, empty_state)
    assert GreedyDeploymentPolicy().fill_gap(context, 50.0) == pytest.approx(50.0)
