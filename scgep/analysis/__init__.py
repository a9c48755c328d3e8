"""Post-solve analysis."""

from .bottleneck_analyzer import (
    BottleneckAnalyzer,
    BottleneckReport,
    LeadTimeDelay,
    MaterialBottleneck,
    ReliabilityIssue,
    Severity,
    SpatialBottleneck,
    analyze,
)

__all__ = [
    "BottleneckAnalyzer",
    "BottleneckReport",
    "LeadTimeDelay",
    "MaterialBottleneck",
    "ReliabilityIssue",
    "Severity",
    "SpatialBottleneck",
    "analyze",
]
