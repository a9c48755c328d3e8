"""Input parsers."""

from .config_parser import ConfigurationParser, configuration_from_dict, system_parameters_from_dict

__all__ = [
    "ConfigurationParser",
    "configuration_from_dict",
    "system_parameters_from_dict",
]
