"""
Excel export of a solved expansion plan.

Creates one workbook with:
1. Summary - Scenario, convergence and cost totals
2. Costs - Investment, O&M and penalty cost by year
3. Capacity - MW in service by technology and year
4. Material Utilization - % of energy-sector supply by material and year
5. Deployments - Every built unit with its decision and online year
"""

import math
from typing import Any, Dict, List

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.utils.dataframe import dataframe_to_rows

from scgep.optimization.constants import CONSTRAINED_UTILIZATION

HEADER_COLOR = "1E88E5"
ALT_ROW_COLOR = "F5F5F5"
CONSTRAINED_COLOR = "FFCDD2"  # Red


def _header_style() -> Dict[str, Any]:
    thin = Side(style='thin')
    return {
        'font': Font(name='Calibri', size=11, bold=True, color='FFFFFF'),
        'fill': PatternFill(start_color=HEADER_COLOR, end_color=HEADER_COLOR, fill_type='solid'),
        'alignment': Alignment(horizontal='center', vertical='center', wrap_text=True),
        'border': Border(left=thin, right=thin, top=thin, bottom=thin),
    }


def _cell_value(value):
    # Excel has no representation for inf/nan
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _write_frame(workbook: Workbook, title: str, df: pd.DataFrame, number_format: str = '#,##0') -> None:
    ws = workbook.create_sheet(title)
    style = _header_style()

    for row_idx, row in enumerate(dataframe_to_rows(df, index=False, header=True), 1):
        for col_idx, value in enumerate(row, 1):
            cell = ws.cell(row=row_idx, column=col_idx)
            cell.value = _cell_value(value)
            if row_idx == 1:
                cell.font = style['font']
                cell.fill = style['fill']
                cell.alignment = style['alignment']
                cell.border = style['border']
            elif isinstance(value, float):
                cell.number_format = number_format
            if row_idx > 1 and row_idx % 2 == 1:
                cell.fill = PatternFill(start_color=ALT_ROW_COLOR, end_color=ALT_ROW_COLOR, fill_type='solid')

    ws.freeze_panes = 'A2'
    for col_idx, column in enumerate(df.columns, 1):
        width = max([len(str(column))] + [len(str(v)) for v in df[column].tolist()])
        ws.column_dimensions[get_column_letter(col_idx)].width = min(width + 2, 40)


def solution_frames(solution) -> Dict[str, pd.DataFrame]:
    """
    Tabular views of a solution, keyed by sheet title.

    Args:
        solution: Solution returned by SCGEPSolver.solve()

    Returns:
        Ordered dict of sheet title -> DataFrame
    """
    base_year = solution.configuration.system_parameters.base_year
    years = [base_year + y for y in range(solution.variables.horizon)]
    costs = solution.costs
    metrics = solution.metrics

    summary = pd.DataFrame([
        {'Item': 'Scenario', 'Value': solution.scenario},
        {'Item': 'Convergence', 'Value': solution.convergence.value},
        {'Item': 'Feasible', 'Value': 'Yes' if solution.feasibility else 'No'},
        {'Item': 'Iterations', 'Value': solution.iterations},
        {'Item': 'Solve Time (s)', 'Value': round(solution.solve_time, 3)},
        {'Item': 'Total Investment ($)', 'Value': costs.total_investment},
        {'Item': 'Total O&M ($)', 'Value': costs.total_operational},
        {'Item': 'Total Penalty ($)', 'Value': costs.total_penalty},
        {'Item': 'Total Cost ($)', 'Value': costs.total},
        {'Item': 'Net Present Value ($)', 'Value': costs.net_present_value},
    ])

    cost_df = pd.DataFrame({
        'Year': years,
        'Investment ($)': costs.investment,
        'O&M ($)': costs.operational,
        'Penalty ($)': costs.penalty,
        'Total ($)': costs.by_year,
    })

    capacity_df = pd.DataFrame({'Year': years})
    for technology, series in metrics.capacity_by_technology.items():
        capacity_df[f'{technology.value} (MW)'] = series

    material_df = pd.DataFrame({'Year': years})
    for material_id, series in metrics.material_utilization_rate.items():
        material_df[f'{material_id} (%)'] = series

    rows: List[Dict[str, Any]] = [
        {
            'Unit': d.unit_id,
            'Product': d.product_id,
            'Zone': d.zone_id,
            'Technology': d.technology.value,
            'Decision Year': base_year + d.decision_year,
            'Online Year': base_year + d.online_year,
            'Retirement Year': base_year + d.retirement_year,
            'Capacity (MW)': d.capacity_mw,
        }
        for d in solution.variables.deployments
    ]
    deployment_df = pd.DataFrame(rows, columns=[
        'Unit', 'Product', 'Zone', 'Technology', 'Decision Year',
        'Online Year', 'Retirement Year', 'Capacity (MW)',
    ])

    return {
        'Summary': summary,
        'Costs': cost_df,
        'Capacity': capacity_df,
        'Material Utilization': material_df,
        'Deployments': deployment_df,
    }


def export_solution_to_excel(solution, output_path: str) -> str:
    """
    Export a solution to a formatted Excel workbook.

    Args:
        solution: Solution returned by SCGEPSolver.solve()
        output_path: Path to save Excel file

    Returns:
        Path to created file
    """
    wb = Workbook()
    wb.remove(wb.active)

    for title, df in solution_frames(solution).items():
        number_format = '0.0' if title == 'Material Utilization' else '#,##0'
        _write_frame(wb, title, df, number_format)

    # Highlight constrained material-years
    ws = wb['Material Utilization']
    for row in ws.iter_rows(min_row=2, min_col=2):
        for cell in row:
            if cell.value is None or (isinstance(cell.value, (int, float)) and cell.value > CONSTRAINED_UTILIZATION):
                cell.fill = PatternFill(start_color=CONSTRAINED_COLOR, end_color=CONSTRAINED_COLOR, fill_type='solid')

    wb.save(output_path)
    return str(output_path)
