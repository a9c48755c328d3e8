"""Exception and warning types for the planning engine.

Errors carry a message plus a context dictionary so that callers (API layer,
notebooks, tests) can see exactly which reference or value was rejected.
"""

from typing import Any, Dict, Optional


class SCGEPError(Exception):
    """Base exception with context."""

    label = "SC-GEP Error"

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with context."""
        msg = f"{self.label}: {self.message}"
        if self.context:
            msg += "\n\nContext:"
            for key, value in self.context.items():
                msg += f"\n  {key}: {value}"
        return msg


class ConfigurationError(SCGEPError):
    """Malformed configuration: dangling references or negative magnitudes.

    Raised at construction time. No solve is attempted.
    """

    label = "Configuration Error"


class AnalysisPreconditionError(SCGEPError, RuntimeError):
    """Post-solve analysis requested without a completed solve."""

    label = "Analysis Precondition Error"


class SolveCancelledError(SCGEPError):
    """Solve aborted through its cancellation event."""

    label = "Solve Cancelled"


class InfeasibleSolutionWarning(UserWarning):
    """The solver could not satisfy every constraint within its iteration cap.

    Emitted with ``warnings.warn``; the Solution is still returned with
    ``feasibility=False``.
    """
