"""Configuration validation and error types."""

from .errors import (
    SCGEPError,
    ConfigurationError,
    AnalysisPreconditionError,
    SolveCancelledError,
    InfeasibleSolutionWarning,
)
from .configuration_validator import ConfigurationValidator

__all__ = [
    "SCGEPError",
    "ConfigurationError",
    "AnalysisPreconditionError",
    "SolveCancelledError",
    "InfeasibleSolutionWarning",
    "ConfigurationValidator",
]
