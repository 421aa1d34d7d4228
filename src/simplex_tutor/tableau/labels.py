"""
Human-readable names for tableau rows and columns, and a plain-text
tableau printout.

Columns are named x1..xn (decision), s1.. (slack/surplus), a1..
(artificial), then "(-w)" in Phase 1 and "b" for the right-hand side.
"""

from typing import List, Sequence

import numpy as np

from ..config import format_number
from .layout import TableauLayout


def variable_name(index: int, layout: TableauLayout) -> str:
    """
    Name of a column index. Negative indexes (a redundant row with no
    basic variable) are named "-".

    >>> variable_name(2, TableauLayout(2, 3, 0, 3))
    's1'
    """
    if index < 0:
        return "-"
    if index < layout.num_variables:
        return f"x{index + 1}"
    if index < layout.num_real:
        return f"s{index - layout.num_variables + 1}"
    if layout.is_phase1 and index < layout.w_column:
        return f"a{index - layout.num_real + 1}"
    if layout.is_phase1 and index == layout.w_column:
        return "(-w)"
    if index == layout.rhs_column:
        return "b"
    raise IndexError(f"Column {index} is outside a tableau with {layout.num_columns} columns")


def column_headers(layout: TableauLayout) -> List[str]:
    """Header for every column of a tableau with this layout."""
    return [variable_name(j, layout) for j in range(layout.num_columns)]


def row_labels(basic_variables: Sequence[int], layout: TableauLayout) -> List[str]:
    """Basic-variable name of each constraint row plus the objective row names."""
    labels = [variable_name(b, layout) for b in basic_variables]
    if layout.is_phase1:
        labels.extend(["(-f)", "(-w)"])
    else:
        labels.append("Z")
    return labels


def row_name(row: int, layout: TableauLayout) -> str:
    """Name used in feedback: "Row 2", "(-f) row", "(-w) row" or "Z row"."""
    if row < layout.num_constraints:
        return f"Row {row + 1}"
    if layout.is_phase1:
        return "(-f) row" if row == layout.f_row else "(-w) row"
    return "Z row"


def objective_row_name(layout: TableauLayout) -> str:
    return "(-w) row" if layout.is_phase1 else "Z row"


def format_tableau(
    tableau: np.ndarray,
    basic_variables: Sequence[int],
    layout: TableauLayout,
) -> str:
    """
    Render a tableau as an aligned text table.

    Example output::

        Basic       x1       x2       s1        b
        s1       1.000        0    1.000    4.000
        Z       -3.000   -5.000        0        0
    """
    headers = ["Basic"] + column_headers(layout)
    labels = row_labels(basic_variables, layout)
    body = [
        [labels[i]] + [format_number(v) for v in tableau[i]]
        for i in range(tableau.shape[0])
    ]
    widths = [
        max(len(str(row[k])) for row in [headers] + body)
        for k in range(len(headers))
    ]
    lines = []
    for row in [headers] + body:
        cells = [str(row[0]).ljust(widths[0])]
        cells += [str(v).rjust(widths[k]) for k, v in enumerate(row) if k > 0]
        lines.append("  ".join(cells))
    return "\n".join(lines)
