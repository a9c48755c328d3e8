"""Technology types for generation and storage units.

The set of technologies is closed. Every per-technology attribute below is a
complete mapping over ``TechnologyType``; a missing member fails at import.
"""

from enum import Enum
from typing import Dict


class TechnologyType(str, Enum):
    """Generation or storage technology."""
    SOLAR_PV = "spv"
    LAND_WIND = "lbw"
    OFFSHORE_WIND = "osw"
    BATTERY_STORAGE = "bse"
    GAS_COMBINED_CYCLE = "ngcc"
    GAS_COMBUSTION_TURBINE = "ngct"
    NUCLEAR = "nuc"
    HYDRO = "hyd"
    COAL = "coal"
    BIOMASS = "bio"
    OIL = "oil"


class TechnologyClass(str, Enum):
    """How a technology behaves in dispatch."""
    VARIABLE = "variable"  # Output follows an availability profile
    FIRM = "firm"          # Dispatchable up to nameplate
    STORAGE = "storage"    # Charges and discharges


class SiteKind(str, Enum):
    """Which area budget of a zone a technology occupies."""
    LAND = "land"
    OFFSHORE = "offshore"


_T = TechnologyType

TECHNOLOGY_CLASS: Dict[TechnologyType, TechnologyClass] = {
    _T.SOLAR_PV: TechnologyClass.VARIABLE,
    _T.LAND_WIND: TechnologyClass.VARIABLE,
    _T.OFFSHORE_WIND: TechnologyClass.VARIABLE,
    _T.BATTERY_STORAGE: TechnologyClass.STORAGE,
    _T.GAS_COMBINED_CYCLE: TechnologyClass.FIRM,
    _T.GAS_COMBUSTION_TURBINE: TechnologyClass.FIRM,
    _T.NUCLEAR: TechnologyClass.FIRM,
    _T.HYDRO: TechnologyClass.FIRM,
    _T.COAL: TechnologyClass.FIRM,
    _T.BIOMASS: TechnologyClass.FIRM,
    _T.OIL: TechnologyClass.FIRM,
}

# Counts toward renewable portfolio standard targets
RPS_ELIGIBLE: Dict[TechnologyType, bool] = {
    _T.SOLAR_PV: True,
    _T.LAND_WIND: True,
    _T.OFFSHORE_WIND: True,
    _T.BATTERY_STORAGE: False,
    _T.GAS_COMBINED_CYCLE: False,
    _T.GAS_COMBUSTION_TURBINE: False,
    _T.NUCLEAR: False,
    _T.HYDRO: True,
    _T.COAL: False,
    _T.BIOMASS: True,
    _T.OIL: False,
}

# ELCC credited to existing units, which carry no factor of their own
DEFAULT_ELCC: Dict[TechnologyType, float] = {
    _T.SOLAR_PV: 0.7,
    _T.LAND_WIND: 0.85,
    _T.OFFSHORE_WIND: 0.9,
    _T.BATTERY_STORAGE: 0.95,
    _T.GAS_COMBINED_CYCLE: 0.9,
    _T.GAS_COMBUSTION_TURBINE: 0.9,
    _T.NUCLEAR: 0.95,
    _T.HYDRO: 0.8,
    _T.COAL: 0.85,
    _T.BIOMASS: 0.85,
    _T.OIL: 0.8,
}

# Flat availability used when a zone has no profile for a variable technology
DEFAULT_AVAILABILITY: Dict[TechnologyType, float] = {
    _T.SOLAR_PV: 0.25,
    _T.LAND_WIND: 0.35,
    _T.OFFSHORE_WIND: 0.45,
    _T.BATTERY_STORAGE: 0.0,
    _T.GAS_COMBINED_CYCLE: 1.0,
    _T.GAS_COMBUSTION_TURBINE: 1.0,
    _T.NUCLEAR: 1.0,
    _T.HYDRO: 1.0,
    _T.COAL: 1.0,
    _T.BIOMASS: 1.0,
    _T.OIL: 1.0,
}

SITE_KIND: Dict[TechnologyType, SiteKind] = {
    _T.SOLAR_PV: SiteKind.LAND,
    _T.LAND_WIND: SiteKind.LAND,
    _T.OFFSHORE_WIND: SiteKind.OFFSHORE,
    _T.BATTERY_STORAGE: SiteKind.LAND,
    _T.GAS_COMBINED_CYCLE: SiteKind.LAND,
    _T.GAS_COMBUSTION_TURBINE: SiteKind.LAND,
    _T.NUCLEAR: SiteKind.LAND,
    _T.HYDRO: SiteKind.LAND,
    _T.COAL: SiteKind.LAND,
    _T.BIOMASS: SiteKind.LAND,
    _T.OIL: SiteKind.LAND,
}

for _table_name, _table in (
    ("TECHNOLOGY_CLASS", TECHNOLOGY_CLASS),
    ("RPS_ELIGIBLE", RPS_ELIGIBLE),
    ("DEFAULT_ELCC", DEFAULT_ELCC),
    ("DEFAULT_AVAILABILITY", DEFAULT_AVAILABILITY),
    ("SITE_KIND", SITE_KIND),
):
    _missing = set(TechnologyType) - set(_table)
    if _missing:
        raise RuntimeError(f"{_table_name} is missing technologies: {sorted(m.value for m in _missing)}")


def technology_class(technology: TechnologyType) -> TechnologyClass:
    return TECHNOLOGY_CLASS[technology]


def is_storage(technology: TechnologyType) -> bool:
    return TECHNOLOGY_CLASS[technology] is TechnologyClass.STORAGE


def is_variable(technology: TechnologyType) -> bool:
    return TECHNOLOGY_CLASS[technology] is TechnologyClass.VARIABLE


def is_rps_eligible(technology: TechnologyType) -> bool:
    return RPS_ELIGIBLE[technology]
