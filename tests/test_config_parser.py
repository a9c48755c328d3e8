"""Tests for workbook and dict configuration readers."""

import pandas as pd
import pytest

from scgep.models import Configuration, ScenarioType, TechnologyType
from scgep.parsers import ConfigurationParser, configuration_from_dict, system_parameters_from_dict
from scgep.validation.errors import ConfigurationError


SHEETS = {
    "Materials": pd.DataFrame([
        {"id": "lithium", "name": "Lithium", "primary_supply": 100.0, "energy_sector_share": 0.5},
        {"id": "silicon", "name": "Silicon", "primary_supply": 10000.0, "energy_sector_share": None},
    ]),
    "Components": pd.DataFrame([
        {"id": "cell", "name": "Battery Cell", "production_capacity": 400.0},
        {"id": "wafer", "name": "Solar Wafer", "production_capacity": None},
    ]),
    "ComponentMaterials": pd.DataFrame([
        {"component_id": "cell", "material_id": "lithium", "tonnes_per_unit": 0.5},
        {"component_id": "wafer", "material_id": "silicon", "tonnes_per_unit": 1.0},
    ]),
    "Products": pd.DataFrame([
        {"id": "bse_li", "technology_type": "bse", "capital_cost": 350000.0, "lifetime": 15,
         "elcc_factor": 0.95, "lead_time": 1, "capacity_density": None},
        {"id": "spv_si", "technology_type": "spv", "capital_cost": 1000000.0, "lifetime": 30,
         "elcc_factor": 0.7, "lead_time": 0, "capacity_density": 36.0},
    ]),
    "ProductComponents": pd.DataFrame([
        {"product_id": "bse_li", "component_id": "cell", "units_per_mw": 2.0},
        {"product_id": "spv_si", "component_id": "wafer", "units_per_mw": 1.0},
    ]),
    "Zones": pd.DataFrame([
        {"id": "north", "name": "North", "baseline_peak_load": 800.0, "demand_cagr": 2.0, "available_land": 200.0},
        {"id": "south", "name": "South", "baseline_peak_load": 400.0, "demand_cagr": 1.0, "available_land": None},
    ]),
    "ExistingUnits": pd.DataFrame([
        {"id": "coal_1", "zone_id": "north", "technology": "coal", "capacity": 600.0, "retirement_year": 2026},
        {"id": "gas_s", "zone_id": "south", "technology": "ngcc", "capacity": 300.0, "retirement_year": None},
    ]),
    "TransmissionLines": pd.DataFrame([
        {"id": "north_south", "from_zone": "north", "to_zone": "south", "capacity": 200.0},
    ]),
    "Parameters": pd.DataFrame([
        {"parameter": "planning_horizon", "value": 6},
        {"parameter": "base_year", "value": 2024},
        {"parameter": "reserve_margin", "value": 15},
        {"parameter": "rps_target_spv", "value": 10},
        {"parameter": "discount_rate", "value": 0.05},
    ]),
}


def _write_workbook(path, sheets):
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for name, df in sheets.items():
            df.to_excel(writer, sheet_name=name, index=False)
    return path


@pytest.fixture
def workbook(tmp_path):
    return _write_workbook(tmp_path / "plan.xlsx", SHEETS)


class TestConfigurationParser:
    """Tests for ConfigurationParser."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigurationParser(tmp_path / "missing.xlsx")

    def test_wrong_extension(self, tmp_path):
        path = tmp_path / "plan.csv"
        path.write_text("id,name\n")
        with pytest.raises(ValueError):
            ConfigurationParser(path)

    def test_parse_configuration(self, workbook):
        config = ConfigurationParser(workbook).parse_configuration()

        assert isinstance(config, Configuration)
        assert [m.id for m in config.materials] == ["lithium", "silicon"]
        assert config.material_map()["lithium"].sector_supply == pytest.approx(50.0)
        assert config.component_map()["cell"].material_demand == {"lithium": 0.5}
        assert config.component_map()["wafer"].production_capacity is None
        assert config.product_map()["bse_li"].component_demand == {"cell": 2.0}
        assert config.product_map()["bse_li"].technology_type is TechnologyType.BATTERY_STORAGE
        assert config.product_map()["spv_si"].capacity_density == pytest.approx(36.0)
        assert config.scenario is ScenarioType.BASELINE

    def test_zones_and_units(self, workbook):
        config = ConfigurationParser(workbook).parse_configuration()
        zones = config.zone_map()

        assert zones["north"].existing_units[0].retirement_year == 2026
        assert zones["south"].existing_units[0].retirement_year is None
        assert zones["south"].available_land is None
        assert config.transmission_lines[0].capacity == pytest.approx(200.0)

    def test_parameters(self, workbook):
        params = ConfigurationParser(workbook).parse_system_parameters()
        assert params.planning_horizon == 6
        assert params.reserve_margin == pytest.approx(15.0)
        assert params.rps_targets == {TechnologyType.SOLAR_PV: pytest.approx(10.0)}

    def test_optional_sheets(self, tmp_path):
        sheets = {k: v for k, v in SHEETS.items() if k not in ("ExistingUnits", "TransmissionLines")}
        config = ConfigurationParser(_write_workbook(tmp_path / "bare.xlsx", sheets)).parse_configuration()
        assert config.transmission_lines == []
        assert all(not zone.existing_units for zone in config.zones)

    def test_missing_sheet(self, tmp_path):
        sheets = {k: v for k, v in SHEETS.items() if k != "Products"}
        parser = ConfigurationParser(_write_workbook(tmp_path / "partial.xlsx", sheets))
        with pytest.raises(ConfigurationError, match="Products"):
            parser.parse_configuration()

    def test_missing_columns(self, tmp_path):
        sheets = dict(SHEETS, Materials=SHEETS["Materials"].drop(columns=["primary_supply"]))
        parser = ConfigurationParser(_write_workbook(tmp_path / "columns.xlsx", sheets))
        with pytest.raises(ConfigurationError, match="Missing required columns"):
            parser.parse_materials()

    def test_orphan_unit(self, tmp_path):
        units = pd.DataFrame([{"id": "u", "zone_id": "east", "technology": "coal", "capacity": 1.0}])
        sheets = dict(SHEETS, ExistingUnits=units)
        parser = ConfigurationParser(_write_workbook(tmp_path / "orphan.xlsx", sheets))
        with pytest.raises(ConfigurationError):
            parser.parse_zones()


class TestDictReaders:
    """Tests for configuration_from_dict and system_parameters_from_dict."""

    def test_flat_rps_keys(self):
        params = system_parameters_from_dict({"planning_horizon": 5, "rps_target_lbw": 20})
        assert params.rps_targets == {TechnologyType.LAND_WIND: pytest.approx(20.0)}

    def test_unknown_parameter(self):
        with pytest.raises(ConfigurationError):
            system_parameters_from_dict({"planning_horizon": 5, "horizon_years": 5})

    def test_unknown_rps_technology(self):
        with pytest.raises(ConfigurationError):
            system_parameters_from_dict({"planning_horizon": 5, "rps_target_fusion": 5})

    def test_requires_horizon(self):
        with pytest.raises(ConfigurationError):
            system_parameters_from_dict({"reserve_margin": 15})

    def test_tables_replace_base(self, supply_chain_config, battery_product):
        config = configuration_from_dict(
            {"products": [battery_product.model_dump()], "components": []},
            base=supply_chain_config,
        )
        assert [p.id for p in config.products] == ["bse_basic"]
        assert config.materials == supply_chain_config.materials
        assert config.zones == supply_chain_config.zones

    def test_standalone(self):
        config = configuration_from_dict({
            "zones": [{"id": "z1", "baseline_peak_load": 100.0}],
            "system_parameters": {"planning_horizon": 2},
            "scenario": "high_demand",
        })
        assert config.horizon == 2
        assert config.scenario is ScenarioType.HIGH_DEMAND

    def test_unknown_key(self, battery_config):
        with pytest.raises(ConfigurationError, match="Unknown"):
            configuration_from_dict({"plants": []}, base=battery_config)

    def test_incomplete(self):
        with pytest.raises(ConfigurationError, match="incomplete"):
            configuration_from_dict({"zones": [{"id": "z1", "baseline_peak_load": 100.0}]})

    def test_invalid_entry(self):
        with pytest.raises(ConfigurationError):
            configuration_from_dict({
                "zones": [{"id": "z1", "baseline_peak_load": -5.0}],
                "system_parameters": {"planning_horizon": 2},
            })
