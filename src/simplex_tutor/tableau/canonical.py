"""
Canonical form reduction of an objective row.

An objective row is in canonical form when every currently basic column
has a zero coefficient in it. A freshly written objective row usually is
not: for each constraint row i with basic variable b and objective
coefficient c = row[b] != 0 we apply

    row  <-  row - c * (constraint row i)

The applied eliminations are recorded so the reduction can be replayed
step by step for a learner.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

import numpy as np

from ..config import PIVOT_TOLERANCE


@dataclass(frozen=True)
class EliminatedVariable:
    """One elimination row <- row - coefficient * constraint_rows[row_index]."""
    var_index: int
    coefficient: float
    row_index: int


@dataclass
class CanonicalFormInfo:
    """
    Record of an objective-row reduction.

    Attributes
    ----------
    initial_z_row : np.ndarray
        Objective row before any elimination.
    final_z_row : np.ndarray
        Objective row after all eliminations.
    eliminated_vars : list of EliminatedVariable
        Eliminations in the order they were applied.
    """
    initial_z_row: np.ndarray
    final_z_row: np.ndarray
    eliminated_vars: List[EliminatedVariable] = field(default_factory=list)

    @property
    def needs_reduction(self) -> bool:
        return len(self.eliminated_vars) > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "initial_z_row": self.initial_z_row.tolist(),
            "final_z_row": self.final_z_row.tolist(),
            "eliminated_vars": [
                {"var_index": e.var_index, "coefficient": e.coefficient,
                 "row_index": e.row_index}
                for e in self.eliminated_vars
            ],
        }


def reduce_to_canonical(
    objective_row: np.ndarray,
    constraint_rows: np.ndarray,
    basic_variables: Sequence[int],
    tol: float = PIVOT_TOLERANCE,
) -> CanonicalFormInfo:
    """
    Eliminate basic columns from an objective row.

    Parameters
    ----------
    objective_row : np.ndarray, shape (n_cols,)
        Row to reduce. Not modified.
    constraint_rows : np.ndarray, shape (m, n_cols)
        Constraint rows of the tableau, each with a unit entry in its basic
        column.
    basic_variables : sequence of int
        Basic column of each constraint row.
    tol : float
        Coefficients with |c| <= tol are treated as already zero.

    Returns
    -------
    CanonicalFormInfo
        With `final_z_row` the reduced row. Re-reducing a row that is
        already canonical yields no eliminations.
    """
    initial = np.array(objective_row, dtype=np.float64)
    row = initial.copy()
    rows = np.asarray(constraint_rows, dtype=np.float64)
    eliminated = []

    for i, basic in enumerate(basic_variables):
        if basic < 0 or basic >= row.shape[0] - 1:
            continue
        coefficient = row[basic]
        if abs(coefficient) > tol:
            eliminated.append(EliminatedVariable(
                var_index=int(basic),
                coefficient=float(coefficient),
                row_index=i,
            ))
            row = row - coefficient * rows[i]

    return CanonicalFormInfo(
        initial_z_row=initial,
        final_z_row=row,
        eliminated_vars=eliminated,
    )


def is_canonical(
    tableau: np.ndarray,
    basic_variables: Sequence[int],
    num_constraints: int,
    atol: float = 1e-8,
) -> bool:
    """
    Check the canonical-form invariant on a full tableau.

    Every basic column must be a unit vector: 1 in its own row and 0 in
    every other row, objective rows included. A negative entry marks a
    redundant row with no basic variable and is skipped.
    """
    T = np.asarray(tableau, dtype=np.float64)
    assigned = [b for b in basic_variables if b >= 0]
    if len(set(assigned)) != len(assigned):
        return False
    for i, basic in enumerate(basic_variables[:num_constraints]):
        if basic < 0:
            continue
        column = T[:, basic]
        expected = np.zeros(T.shape[0])
        expected[i] = 1.0
        if np.max(np.abs(column - expected)) > atol:
            return False
    return True
