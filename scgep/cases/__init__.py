"""Built-in planning cases and representative-day profiles."""

from .profiles import (
    default_load_profile,
    flat_profile,
    offshore_wind_profile,
    solar_profile,
    wind_profile,
)
from .maryland import create_maryland_config
from .african_mining import create_african_mining_config

__all__ = [
    "default_load_profile",
    "flat_profile",
    "offshore_wind_profile",
    "solar_profile",
    "wind_profile",
    "create_maryland_config",
    "create_african_mining_config",
]
