"""
Phase controller for the two-phase Simplex method.

Phase 1 prices the (-w) row (sum of artificial variables) until no
column improves it. If |w| is then above the feasibility tolerance the
problem is infeasible. Otherwise any artificial variable still basic at
value zero is swapped out, the artificial and (-w) columns are stripped,
and a fresh objective row is written and reduced to canonical form for
Phase 2.
"""

import warnings
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np

from ..config import PIVOT_TOLERANCE, FEASIBILITY_TOLERANCE, MAX_ITERATIONS
from ..problem.model import Problem
from ..tableau.layout import TableauLayout
from ..tableau.builder import build_objective_row
from ..tableau.canonical import CanonicalFormInfo, reduce_to_canonical
from ..tableau.pivot import choose_pivot, pivot, update_basis
from ..tableau.labels import variable_name
from .result import (
    IterationStep,
    STATUS_OPTIMAL,
    STATUS_UNBOUNDED,
    phase1_objective,
)


# =============================================================================
# Pivot loop
# =============================================================================

@dataclass
class PhaseRun:
    """
    History of one run of the pivot loop.

    `tableaus[0]` and `basic_variables[0]` are the starting state; one entry
    is appended per pivot.
    """
    tableaus: List[np.ndarray]
    basic_variables: List[List[int]]
    layout: TableauLayout
    steps: List[IterationStep] = field(default_factory=list)
    status: str = STATUS_OPTIMAL
    max_iterations_reached: bool = False

    @property
    def iterations(self) -> int:
        return len(self.steps)

    @property
    def final_tableau(self) -> np.ndarray:
        return self.tableaus[-1]

    @property
    def final_basis(self) -> List[int]:
        return self.basic_variables[-1]


def describe_pivot(row: int, column: int, min_ratio: float,
                   entering: str, leaving: str) -> str:
    """Explanation text for one pivot, with 1-based row/column numbers."""
    return (
        f"Pivot on element ({row + 1}, {column + 1}) with ratio {min_ratio:.2f}: "
        f"{entering} enters, {leaving} leaves"
    )


def run_phase(
    tableau: np.ndarray,
    basic_variables: Sequence[int],
    layout: TableauLayout,
    max_iterations: int = MAX_ITERATIONS,
    tol: float = PIVOT_TOLERANCE,
    verbose: bool = False,
) -> PhaseRun:
    """
    Pivot until optimal, unbounded, or the iteration cap.

    Parameters
    ----------
    tableau : np.ndarray
        Starting tableau in canonical form. Not modified.
    basic_variables : sequence of int
        Starting basis.
    layout : TableauLayout
        Shape of `tableau`; decides which row is priced.
    max_iterations : int
        Pivot cap. Reaching it stops the loop with status "optimal" and
        `max_iterations_reached` set.
    tol : float
        Sign/zero threshold for the selection rules.
    verbose : bool
        If True, print one line per pivot.

    Returns
    -------
    PhaseRun
    """
    T = np.array(tableau, dtype=np.float64)
    basis = list(basic_variables)
    run = PhaseRun(tableaus=[T.copy()], basic_variables=[list(basis)], layout=layout)
    label = "Phase 1" if layout.is_phase1 else "Phase 2"

    for iteration in range(1, max_iterations + 1):
        choice = choose_pivot(T, layout, tol)
        if choice is None:
            if verbose:
                print(f"  {label} optimal after {iteration - 1} pivots")
            return run
        if choice.leaving_row < 0:
            run.status = STATUS_UNBOUNDED
            if verbose:
                print(f"  {label} unbounded: column "
                      f"{variable_name(choice.entering, layout)} has no positive entry")
            return run

        row, column = choice.leaving_row, choice.entering
        entering_name = variable_name(column, layout)
        leaving_name = variable_name(basis[row], layout)
        leaving_var = basis[row]

        T = pivot(T, row, column)
        basis = update_basis(basis, row, column)

        run.steps.append(IterationStep(
            iteration=iteration,
            entering_var=column,
            leaving_var=leaving_var,
            pivot_element=choice.pivot_element,
            min_ratio=choice.min_ratio,
            explanation=describe_pivot(row, column, choice.min_ratio,
                                       entering_name, leaving_name),
        ))
        run.tableaus.append(T.copy())
        run.basic_variables.append(list(basis))

        if verbose:
            print(f"  {label} iter {iteration}: {entering_name} enters, "
                  f"{leaving_name} leaves, objective = "
                  f"{T[layout.objective_row, layout.rhs_column]:.6g}")

    if choose_pivot(T, layout, tol) is not None:
        run.max_iterations_reached = True
        if verbose:
            print(f"  {label} stopped at max iterations ({max_iterations})")
    return run


# =============================================================================
# Phase transition
# =============================================================================

def phase1_feasible(
    tableau: np.ndarray,
    layout: TableauLayout,
    tol: float = FEASIBILITY_TOLERANCE,
) -> bool:
    """True if the Phase 1 optimum has |w| within tolerance."""
    return abs(phase1_objective(tableau, layout)) <= tol


def _is_unit_column(column: np.ndarray, row: int, atol: float) -> bool:
    expected = np.zeros(column.shape[0])
    expected[row] = 1.0
    return bool(np.max(np.abs(column - expected)) <= atol)


def resolve_degenerate_basis(
    tableau: np.ndarray,
    basic_variables: Sequence[int],
    layout: TableauLayout,
    tol: float = PIVOT_TOLERANCE,
) -> Tuple[np.ndarray, List[int]]:
    """
    Drive artificial variables out of a feasible Phase 1 basis.

    For every row whose basic variable is artificial (necessarily at value
    zero once Phase 1 is feasible):

    1. If a non-artificial column outside the basis is already a unit
       column for that row, relabel the row to it.
    2. Otherwise pivot on the first non-artificial, non-basic column with
       a nonzero entry in the row. The RHS is zero, so the pivot keeps
       every RHS unchanged.
    3. Otherwise the row is redundant: every real entry is zero. Its basis
       entry becomes -1, its real entries and RHS are cleared and a
       warning is issued. No ratio test can select the row afterwards.

    Parameters
    ----------
    tableau : np.ndarray
        Final Phase 1 tableau. Not modified.
    basic_variables : sequence of int
        Final Phase 1 basis.
    layout : TableauLayout
        Phase 1 layout.

    Returns
    -------
    tableau : np.ndarray
    basic_variables : list of int
    """
    T = np.array(tableau, dtype=np.float64)
    basis = list(basic_variables)
    m = layout.num_constraints

    for i in range(m):
        if not layout.is_artificial(basis[i]):
            continue
        free = [j for j in range(layout.num_real) if j not in basis]

        unit = [j for j in free if _is_unit_column(T[:m, j], i, 1e-8)]
        if unit:
            basis[i] = unit[0]
            continue

        nonzero = [j for j in free if abs(T[i, j]) > tol]
        if nonzero:
            T = pivot(T, i, nonzero[0])
            basis = update_basis(basis, i, nonzero[0])
            continue

        warnings.warn(
            f"Row {i + 1} is redundant; it has no basic variable in Phase 2",
            RuntimeWarning,
        )
        T[i, :layout.num_real] = 0.0
        T[i, layout.rhs_column] = 0.0
        basis[i] = -1

    return T, basis


def strip_artificial(tableau: np.ndarray, layout: TableauLayout) -> np.ndarray:
    """
    Constraint rows of a Phase 1 tableau without artificial and (-w) columns.

    Returns
    -------
    np.ndarray, shape (m, n + s + 1)
    """
    T = np.asarray(tableau, dtype=np.float64)
    rows = T[:layout.num_constraints]
    return np.hstack([rows[:, :layout.num_real], rows[:, layout.rhs_column:layout.rhs_column + 1]])


def build_phase2_tableau(
    tableau: np.ndarray,
    basic_variables: Sequence[int],
    layout: TableauLayout,
    problem: Problem,
    tol: float = PIVOT_TOLERANCE,
) -> Tuple[np.ndarray, List[int], TableauLayout, CanonicalFormInfo]:
    """
    Build the Phase 2 starting tableau from a feasible Phase 1 tableau.

    Runs `resolve_degenerate_basis`, strips the artificial and (-w)
    columns, appends the raw objective row and reduces it to canonical form.

    Returns
    -------
    tableau : np.ndarray, shape (m + 1, n + s + 1)
    basic_variables : list of int
    layout : TableauLayout
        Phase 2 layout.
    canonical_form_info : CanonicalFormInfo
    """
    T, basis = resolve_degenerate_basis(tableau, basic_variables, layout, tol)
    rows = strip_artificial(T, layout)
    layout2 = layout.to_phase2()

    objective = build_objective_row(problem, layout2.num_columns)
    info = reduce_to_canonical(objective, rows, basis, tol)
    T2 = np.vstack([rows, info.final_z_row])
    return T2, basis, layout2, info
