"""Readers that turn Excel workbooks or plain dicts into a Configuration."""

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import pandas as pd
from openpyxl import load_workbook

from scgep.models import (
    Component,
    Configuration,
    CriticalMaterial,
    ExistingUnit,
    Product,
    ScenarioType,
    SystemParameters,
    TechnologyType,
    TransmissionLine,
    Zone,
)
from scgep.validation.errors import ConfigurationError

RPS_TARGET_PREFIX = "rps_target_"


def _optional(row: pd.Series, column: str, cast: Callable, default: Any = None) -> Any:
    if column in row and pd.notna(row[column]):
        return cast(row[column])
    return default


def _require_columns(df: pd.DataFrame, required: set, sheet_name: str) -> None:
    if not required.issubset(df.columns):
        missing = sorted(required - set(df.columns))
        raise ConfigurationError(
            f"Missing required columns in {sheet_name} sheet",
            {"missing": missing, "found": list(df.columns)},
        )


class ConfigurationParser:
    """
    Parser for planning workbooks.

    Expected file format:
    - Sheet 'Materials': [id, name, primary_supply, type?, usgs_code?, energy_sector_share?,
      initial_stock?, recovery_rate?, cost_per_tonne?]
    - Sheet 'Components': [id, name?, production_capacity?, lead_time?]
    - Sheet 'ComponentMaterials': [component_id, material_id, tonnes_per_unit]
    - Sheet 'Products': [id, technology_type, capital_cost, lifetime, elcc_factor, name?,
      fixed_om_cost?, variable_om_cost?, lead_time?, capacity_density?, availability_factor?,
      storage_duration_hours?, max_unit_capacity_mw?, max_zone_capacity_mw?]
    - Sheet 'ProductComponents': [product_id, component_id, units_per_mw]
    - Sheet 'Zones': [id, baseline_peak_load, name?, demand_cagr?, available_land?, available_offshore?]
    - Sheet 'ExistingUnits' (optional): [id, zone_id, technology, capacity, name?,
      retirement_year?, commission_year?]
    - Sheet 'TransmissionLines' (optional): [id, from_zone, to_zone, capacity]
    - Sheet 'Parameters': [parameter, value]; RPS targets as rows 'rps_target_<technology>'

    Example:
        parser = ConfigurationParser("maryland.xlsx")
        config = parser.parse_configuration(scenario="high_demand")
    """

    def __init__(self, file_path: Union[Path, str]):
        """
        Initialize parser with Excel file path.

        Raises:
            FileNotFoundError: If file does not exist
            ValueError: If file is not .xlsx or .xlsm
        """
        self.file_path = Path(file_path)
        if not self.file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        if self.file_path.suffix.lower() not in [".xlsx", ".xlsm"]:
            raise ValueError(f"File must be .xlsx or .xlsm: {file_path}")
        self._sheet_names: Optional[List[str]] = None

    @property
    def sheet_names(self) -> List[str]:
        if self._sheet_names is None:
            workbook = load_workbook(self.file_path, read_only=True)
            try:
                self._sheet_names = list(workbook.sheetnames)
            finally:
                workbook.close()
        return self._sheet_names

    def _read(self, sheet_name: str, required: set, optional_sheet: bool = False) -> Optional[pd.DataFrame]:
        if sheet_name not in self.sheet_names:
            if optional_sheet:
                return None
            raise ConfigurationError(
                f"Workbook has no '{sheet_name}' sheet",
                {"file": str(self.file_path), "sheets": self.sheet_names},
            )
        df = pd.read_excel(self.file_path, sheet_name=sheet_name, engine="openpyxl")
        _require_columns(df, required, sheet_name)
        return df

    def parse_materials(self, sheet_name: str = "Materials") -> List[CriticalMaterial]:
        df = self._read(sheet_name, {"id", "name", "primary_supply"})
        return [
            CriticalMaterial(
                id=str(row["id"]),
                name=str(row["name"]),
                type=_optional(row, "type", str, "critical"),
                usgs_code=_optional(row, "usgs_code", str),
                primary_supply=float(row["primary_supply"]),
                energy_sector_share=_optional(row, "energy_sector_share", float, 1.0),
                initial_stock=_optional(row, "initial_stock", float, 0.0),
                recovery_rate=_optional(row, "recovery_rate", float, 0.0),
                cost_per_tonne=_optional(row, "cost_per_tonne", float, 0.0),
            )
            for _, row in df.iterrows()
        ]

    def parse_components(
        self,
        sheet_name: str = "Components",
        demand_sheet: str = "ComponentMaterials",
    ) -> List[Component]:
        df = self._read(sheet_name, {"id"})
        demand = self._read(demand_sheet, {"component_id", "material_id", "tonnes_per_unit"})
        by_component: Dict[str, Dict[str, float]] = {}
        for _, row in demand.iterrows():
            materials = by_component.setdefault(str(row["component_id"]), {})
            materials[str(row["material_id"])] = float(row["tonnes_per_unit"])

        unknown = sorted(set(by_component) - {str(i) for i in df["id"]})
        if unknown:
            raise ConfigurationError(
                f"{demand_sheet} references components missing from {sheet_name}",
                {"unknown": unknown},
            )

        return [
            Component(
                id=str(row["id"]),
                name=_optional(row, "name", str, ""),
                material_demand=by_component.get(str(row["id"]), {}),
                production_capacity=_optional(row, "production_capacity", float),
                lead_time=_optional(row, "lead_time", int, 0),
            )
            for _, row in df.iterrows()
        ]

    def parse_products(
        self,
        sheet_name: str = "Products",
        demand_sheet: str = "ProductComponents",
    ) -> List[Product]:
        df = self._read(sheet_name, {"id", "technology_type", "capital_cost", "lifetime", "elcc_factor"})
        demand = self._read(demand_sheet, {"product_id", "component_id", "units_per_mw"})
        by_product: Dict[str, Dict[str, float]] = {}
        for _, row in demand.iterrows():
            components = by_product.setdefault(str(row["product_id"]), {})
            components[str(row["component_id"])] = float(row["units_per_mw"])

        unknown = sorted(set(by_product) - {str(i) for i in df["id"]})
        if unknown:
            raise ConfigurationError(
                f"{demand_sheet} references products missing from {sheet_name}",
                {"unknown": unknown},
            )

        products = []
        for _, row in df.iterrows():
            products.append(Product(
                id=str(row["id"]),
                name=_optional(row, "name", str, ""),
                technology_type=str(row["technology_type"]).strip(),
                component_demand=by_product.get(str(row["id"]), {}),
                capital_cost=float(row["capital_cost"]),
                fixed_om_cost=_optional(row, "fixed_om_cost", float, 0.0),
                variable_om_cost=_optional(row, "variable_om_cost", float, 0.0),
                lead_time=_optional(row, "lead_time", int, 0),
                lifetime=int(row["lifetime"]),
                elcc_factor=float(row["elcc_factor"]),
                capacity_density=_optional(row, "capacity_density", float),
                availability_factor=_optional(row, "availability_factor", float),
                storage_duration_hours=_optional(row, "storage_duration_hours", float, 4.0),
                max_unit_capacity_mw=_optional(row, "max_unit_capacity_mw", float, 500.0),
                max_zone_capacity_mw=_optional(row, "max_zone_capacity_mw", float),
            ))
        return products

    def parse_zones(self, sheet_name: str = "Zones", units_sheet: str = "ExistingUnits") -> List[Zone]:
        df = self._read(sheet_name, {"id", "baseline_peak_load"})
        units_df = self._read(units_sheet, {"id", "zone_id", "technology", "capacity"}, optional_sheet=True)

        units: Dict[str, List[ExistingUnit]] = {}
        if units_df is not None:
            for _, row in units_df.iterrows():
                units.setdefault(str(row["zone_id"]), []).append(ExistingUnit(
                    id=str(row["id"]),
                    name=_optional(row, "name", str, ""),
                    technology=str(row["technology"]).strip(),
                    capacity=float(row["capacity"]),
                    retirement_year=_optional(row, "retirement_year", int),
                    commission_year=_optional(row, "commission_year", int),
                ))

        zone_ids = {str(i) for i in df["id"]}
        orphans = sorted(set(units) - zone_ids)
        if orphans:
            raise ConfigurationError(
                f"{units_sheet} references zones missing from {sheet_name}",
                {"unknown": orphans},
            )

        return [
            Zone(
                id=str(row["id"]),
                name=_optional(row, "name", str, ""),
                baseline_peak_load=float(row["baseline_peak_load"]),
                demand_cagr=_optional(row, "demand_cagr", float, 0.0),
                existing_units=units.get(str(row["id"]), []),
                available_land=_optional(row, "available_land", float),
                available_offshore=_optional(row, "available_offshore", float),
            )
            for _, row in df.iterrows()
        ]

    def parse_transmission_lines(self, sheet_name: str = "TransmissionLines") -> List[TransmissionLine]:
        df = self._read(sheet_name, {"id", "from_zone", "to_zone", "capacity"}, optional_sheet=True)
        if df is None:
            return []
        return [
            TransmissionLine(
                id=str(row["id"]),
                from_zone=str(row["from_zone"]),
                to_zone=str(row["to_zone"]),
                capacity=float(row["capacity"]),
            )
            for _, row in df.iterrows()
        ]

    def parse_system_parameters(self, sheet_name: str = "Parameters") -> SystemParameters:
        df = self._read(sheet_name, {"parameter", "value"})
        values = {str(row["parameter"]).strip(): row["value"] for _, row in df.iterrows()}
        return system_parameters_from_dict(values)

    def parse_configuration(self, scenario: Union[ScenarioType, str] = ScenarioType.BASELINE) -> Configuration:
        """Parse every sheet into a validated Configuration."""
        return Configuration(
            materials=self.parse_materials(),
            components=self.parse_components(),
            products=self.parse_products(),
            zones=self.parse_zones(),
            transmission_lines=self.parse_transmission_lines(),
            system_parameters=self.parse_system_parameters(),
            scenario=scenario,
        )


def system_parameters_from_dict(values: Dict[str, Any]) -> SystemParameters:
    """
    Build SystemParameters from flat key/value pairs.

    RPS targets may be given as a nested ``rps_targets`` mapping or as flat
    ``rps_target_<technology>`` keys.
    """
    if "planning_horizon" not in values:
        raise ConfigurationError("Parameters must include planning_horizon", {"found": sorted(values)})

    data: Dict[str, Any] = {}
    rps_targets: Dict[str, float] = dict(values.get("rps_targets") or {})
    int_fields = {"planning_horizon", "base_year"}
    float_fields = {"reserve_margin", "voll", "reserve_margin_penalty", "rps_penalty", "discount_rate"}
    for key, value in values.items():
        if key in int_fields:
            data[key] = int(value)
        elif key in float_fields:
            data[key] = float(value)
        elif key.startswith(RPS_TARGET_PREFIX):
            rps_targets[key[len(RPS_TARGET_PREFIX):]] = float(value)
        elif key in ("rps_targets", "representative_days"):
            continue
        else:
            raise ConfigurationError(f"Unknown parameter '{key}'")

    try:
        data["rps_targets"] = {TechnologyType(t): v for t, v in rps_targets.items()}
    except ValueError as exc:
        raise ConfigurationError(
            "RPS target for unknown technology",
            {"targets": sorted(rps_targets), "known": [t.value for t in TechnologyType]},
        ) from exc
    if values.get("representative_days"):
        data["representative_days"] = values["representative_days"]
    return SystemParameters(**data)


def configuration_from_dict(data: Dict[str, Any], base: Optional[Configuration] = None) -> Configuration:
    """
    Build a Configuration from plain Python data, e.g. a decoded request body.

    Tables present in ``data`` replace the corresponding tables of ``base``;
    tables absent from ``data`` are taken from ``base``.

    Raises:
        ConfigurationError: Malformed or incomplete data
    """
    fields = {
        "materials": CriticalMaterial,
        "components": Component,
        "products": Product,
        "zones": Zone,
        "transmission_lines": TransmissionLine,
    }
    unknown = sorted(set(data) - set(fields) - {"system_parameters", "scenario", "scenario_modifiers"})
    if unknown:
        raise ConfigurationError("Unknown configuration keys", {"unknown": unknown})

    kwargs: Dict[str, Any] = {}
    for key, model in fields.items():
        if key in data:
            kwargs[key] = [model.model_validate(item) for item in data[key]]
        elif base is not None:
            kwargs[key] = getattr(base, key)

    if "system_parameters" in data:
        parameters = data["system_parameters"]
        kwargs["system_parameters"] = (
            parameters if isinstance(parameters, SystemParameters)
            else system_parameters_from_dict(dict(parameters))
        )
    elif base is not None:
        kwargs["system_parameters"] = base.system_parameters

    if "scenario" in data:
        kwargs["scenario"] = data["scenario"]
    elif base is not None:
        kwargs["scenario"] = base.scenario
    if "scenario_modifiers" in data:
        kwargs["scenario_modifiers"] = data["scenario_modifiers"]

    missing = [k for k in ("zones", "system_parameters") if k not in kwargs]
    if missing:
        raise ConfigurationError("Configuration data is incomplete", {"missing": missing})
    return Configuration(**kwargs)
