"""Tests for post-solve bottleneck analysis."""

import pytest

from scgep.analysis import BottleneckAnalyzer, Severity, analyze
from scgep.models import SystemParameters, TechnologyType
from scgep.optimization import solve
from scgep.validation.errors import AnalysisPreconditionError


@pytest.fixture
def tight_lithium_config(supply_chain_config):
    """330 MW gap in year 0: the battery is offered 99 MW against 100 t of lithium."""
    zone = supply_chain_config.zones[0].model_copy(update={"baseline_peak_load": 1230.0})
    params = SystemParameters(planning_horizon=3, base_year=2030, reserve_margin=0.0)
    return supply_chain_config.model_copy(update={"zones": [zone], "system_parameters": params})


class TestMaterialBottlenecks:
    """Materials above the constrained threshold."""

    def test_critical_material(self, tight_lithium_config):
        report = analyze(solve(tight_lithium_config))

        assert [b.material_id for b in report.materials] == ["lithium"]
        lithium = report.materials[0]
        assert lithium.severity is Severity.CRITICAL
        assert lithium.peak_utilization == pytest.approx(99.0)
        assert lithium.constrained_years == [2030]
        assert lithium.affected_technologies == [TechnologyType.BATTERY_STORAGE]
        assert lithium.impact.startswith("Material constraint active in 1 year(s) from 2030")
        assert report.critical_materials() == [lithium]

    def test_materials_dataframe(self, tight_lithium_config):
        df = analyze(solve(tight_lithium_config)).materials_dataframe()
        assert list(df["material"]) == ["Lithium"]
        assert df.loc[0, "severity"] == "critical"
        assert df.loc[0, "first_constrained_year"] == 2030

    def test_no_bottlenecks_below_threshold(self, supply_chain_config):
        report = analyze(solve(supply_chain_config))
        # 75 MW of battery uses 75% of the lithium supply
        assert report.materials == []


class TestOtherBottlenecks:
    """Lead-time, spatial and reliability findings."""

    def test_lead_time_delay(self, battery_config, battery_product):
        slow = battery_config.model_copy(update={
            "products": [battery_product.model_copy(update={"lead_time": 1})],
        })
        report = analyze(solve(slow))

        delay = report.lead_time_delays[0]
        assert delay.product_id == "bse_basic"
        assert delay.zone_id == "z1"
        assert delay.years == [2024]
        assert delay.shortfall_mw == pytest.approx(250.0)

    def test_reliability_issue(self, battery_config, battery_product):
        slow = battery_config.model_copy(update={
            "products": [battery_product.model_copy(update={"lead_time": 1})],
        })
        report = analyze(solve(slow))

        first = report.reliability[0]
        assert first.year == 2024
        assert first.load_shedding_mwh > 0
        assert first.reserve_margin_deficit_mw > 0
        assert first.affected_zones == ["z1"]

    def test_spatial(self, supply_chain_config):
        zone = supply_chain_config.zones[0].model_copy(update={"available_land": 5.0})
        config = supply_chain_config.model_copy(update={"zones": [zone]})
        report = analyze(solve(config))

        # 175 MW of solar needs 4.9 km² of the 5 km² available
        assert report.spatial
        assert report.spatial[0].technology is TechnologyType.SOLAR_PV
        assert report.spatial[0].peak_utilization > 85.0

    def test_str(self, tight_lithium_config):
        text = str(analyze(solve(tight_lithium_config)))
        assert "CRITICAL" in text
        assert "Lithium" in text


class TestAnalyzer:
    """Tests for BottleneckAnalyzer itself."""

    def test_requires_solution(self):
        with pytest.raises(AnalysisPreconditionError):
            BottleneckAnalyzer().analyze(None)

    def test_severity_thresholds(self):
        analyzer = BottleneckAnalyzer()
        assert analyzer.severity(96.0) is Severity.CRITICAL
        assert analyzer.severity(90.0) is Severity.HIGH
        assert analyzer.severity(75.0) is Severity.MEDIUM
        assert analyzer.severity(50.0) is Severity.LOW

    def test_severity_boundaries_are_exclusive(self):
        analyzer = BottleneckAnalyzer()
        assert analyzer.severity(95.0) is Severity.HIGH
        assert analyzer.severity(85.0) is Severity.MEDIUM
        assert analyzer.severity(70.0) is Severity.LOW
