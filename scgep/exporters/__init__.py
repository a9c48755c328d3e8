"""Excel exporters for expansion plan results."""

from .solution_exporter import export_solution_to_excel, solution_frames

__all__ = [
    'export_solution_to_excel',
    'solution_frames',
]
