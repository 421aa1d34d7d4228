"""
Stateless pivot operations over a tableau.

- Entering column: most negative objective-row entry below -tol among
  the structural columns of the current phase (first such column wins
  ties). None below -tol means the phase is optimal.
- Leaving row: minimum ratio RHS / a_ij over constraint rows with
  a_ij > tol, ties broken by lowest row index. No eligible row means the
  objective is unbounded in the entering direction.
- Pivot: divide the leaving row by the pivot element, then subtract the
  right multiple of it from every other row, objective rows included.

None of the functions here modify their inputs.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..config import PIVOT_TOLERANCE
from .layout import TableauLayout


@dataclass(frozen=True)
class PivotChoice:
    """Entering column and leaving row selected for one iteration."""
    entering: int
    leaving_row: int
    pivot_element: float
    min_ratio: float


def select_entering(
    tableau: np.ndarray,
    layout: TableauLayout,
    tol: float = PIVOT_TOLERANCE,
) -> int:
    """
    Choose the entering column.

    Scans the last row over the structural columns (decision, slack and,
    in Phase 1, artificial columns; never the (-w) or RHS column).

    Returns
    -------
    int
        Column index, or -1 if no entry is below -tol (optimal).
    """
    objective = tableau[layout.objective_row]
    entering = -1
    most_negative = -tol
    for j in range(layout.num_structural):
        if objective[j] < most_negative:
            most_negative = objective[j]
            entering = j
    return entering


def negative_columns(
    tableau: np.ndarray,
    layout: TableauLayout,
    tol: float = PIVOT_TOLERANCE,
) -> List[int]:
    """Structural columns whose objective-row entry is below -tol."""
    objective = tableau[layout.objective_row, :layout.num_structural]
    return [int(j) for j in np.where(objective < -tol)[0]]


def is_optimal(
    tableau: np.ndarray,
    layout: TableauLayout,
    tol: float = PIVOT_TOLERANCE,
) -> bool:
    """True if no structural column can improve the current objective row."""
    return select_entering(tableau, layout, tol) == -1


def compute_ratios(
    tableau: np.ndarray,
    entering: int,
    layout: TableauLayout,
    tol: float = PIVOT_TOLERANCE,
) -> np.ndarray:
    """
    Ratio-test values for every constraint row.

    Returns
    -------
    np.ndarray, shape (m,)
        RHS / a_ij where a_ij > tol, and +inf for ineligible rows.
    """
    m = layout.num_constraints
    column = tableau[:m, entering]
    rhs = tableau[:m, layout.rhs_column]
    ratios = np.full(m, np.inf)
    eligible = column > tol
    ratios[eligible] = rhs[eligible] / column[eligible]
    return ratios


def eligible_rows(
    tableau: np.ndarray,
    entering: int,
    layout: TableauLayout,
    tol: float = PIVOT_TOLERANCE,
) -> List[int]:
    """Constraint rows with a strictly positive entry in the entering column."""
    column = tableau[:layout.num_constraints, entering]
    return [int(i) for i in np.where(column > tol)[0]]


def select_leaving(
    tableau: np.ndarray,
    entering: int,
    layout: TableauLayout,
    tol: float = PIVOT_TOLERANCE,
) -> Tuple[int, float]:
    """
    Minimum-ratio test.

    Returns
    -------
    leaving_row : int
        Row index, or -1 if no row is eligible (unbounded).
    min_ratio : float
        The winning ratio (+inf when unbounded).
    """
    ratios = compute_ratios(tableau, entering, layout, tol)
    leaving_row = -1
    min_ratio = np.inf
    for i, ratio in enumerate(ratios):
        if ratio < min_ratio:
            min_ratio = ratio
            leaving_row = i
    return leaving_row, float(min_ratio)


def choose_pivot(
    tableau: np.ndarray,
    layout: TableauLayout,
    tol: float = PIVOT_TOLERANCE,
) -> Optional[PivotChoice]:
    """
    Run both selection rules.

    Returns None when the tableau is optimal. When the objective is
    unbounded the returned choice has `leaving_row == -1`.
    """
    entering = select_entering(tableau, layout, tol)
    if entering == -1:
        return None
    leaving_row, min_ratio = select_leaving(tableau, entering, layout, tol)
    pivot_element = tableau[leaving_row, entering] if leaving_row >= 0 else 0.0
    return PivotChoice(
        entering=entering,
        leaving_row=leaving_row,
        pivot_element=float(pivot_element),
        min_ratio=min_ratio,
    )


def normalize_pivot_row(tableau: np.ndarray, row: int, column: int) -> np.ndarray:
    """Return a copy with `row` divided by the pivot element at (row, column)."""
    T = np.array(tableau, dtype=np.float64)
    T[row, :] = T[row, :] / T[row, column]
    return T


def row_multipliers(tableau: np.ndarray, row: int, column: int) -> np.ndarray:
    """
    Elimination multiplier of every row: its entry in the pivot column.

    The pivot row's own entry is reported as 0.
    """
    multipliers = np.array(tableau[:, column], dtype=np.float64)
    multipliers[row] = 0.0
    return multipliers


def eliminate_column(tableau: np.ndarray, row: int, column: int) -> np.ndarray:
    """
    Return a copy where every row except `row` has its `column` entry
    cleared by subtracting a multiple of `row`.

    Expects `row` to be already normalized (pivot entry equal to 1).
    """
    T = np.array(tableau, dtype=np.float64)
    multipliers = row_multipliers(T, row, column)
    T -= np.outer(multipliers, T[row, :])
    T[:, column] = 0.0
    T[row, column] = 1.0
    return T


def pivot(tableau: np.ndarray, row: int, column: int) -> np.ndarray:
    """Full pivot on (row, column): normalize, then eliminate."""
    return eliminate_column(normalize_pivot_row(tableau, row, column), row, column)


def update_basis(basic_variables: Sequence[int], row: int, column: int) -> List[int]:
    """Return a new basis with `column` replacing the basic variable of `row`."""
    basis = list(basic_variables)
    basis[row] = column
    return basis
