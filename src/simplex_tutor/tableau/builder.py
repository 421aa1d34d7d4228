"""
Initial tableau construction.

Two shapes are built:

- Single-phase (all constraints <=): slack columns form the initial basis
  and the objective row holds -c.
- Two-phase: artificial columns are appended for >= and = rows, plus a
  (-w) accumulator column. Below the constraint rows sit the (-f) row
  (true objective) and the (-w) row (sum of artificials), both reduced to
  canonical form against the starting basis.

Sign conventions: the engine always maximizes internally. Minimization
objectives are negated first, and the objective row stores the negated
coefficients, so an entry < 0 marks an improving column. A constraint with
b < 0 has its whole row negated and its RHS stored as |b|; its slack (for
<=) becomes -1 and its surplus (for >=) becomes +1.
"""

from typing import List, Tuple

import numpy as np

from ..problem.model import Operator, Problem
from ..problem.accounting import (
    VariableCounts,
    count_variables,
    slack_column_offsets,
    artificial_column_offsets,
)
from .layout import TableauLayout
from .canonical import reduce_to_canonical


def internal_objective(problem: Problem) -> np.ndarray:
    """Objective coefficients in maximization form (negated when minimizing)."""
    c = np.array(problem.objective_coefficients, dtype=np.float64)
    return c if problem.is_maximization else -c


def build_constraint_rows(
    problem: Problem,
    counts: VariableCounts,
    include_artificial: bool = True,
) -> Tuple[np.ndarray, List[int]]:
    """
    Build the constraint rows and the starting basis.

    Parameters
    ----------
    problem : Problem
        The linear program.
    counts : VariableCounts
        Result of `count_variables(problem.constraints)`.
    include_artificial : bool
        If False, artificial columns are omitted (the rows a learner writes
        before deciding whether Phase 1 is needed).

    Returns
    -------
    rows : np.ndarray, shape (m, n + s [+ a] + 1)
        Constraint rows; the last column is the RHS. No (-w) column.
    basic_variables : list of int
        Slack column for <= rows, artificial column for >= and = rows (or
        -1 for those rows when `include_artificial` is False).
    """
    n = problem.num_variables
    n_art = counts.num_artificial if include_artificial else 0
    width = n + counts.num_slack + n_art + 1
    slack_offsets = slack_column_offsets(problem.constraints)
    art_offsets = artificial_column_offsets(problem.constraints)

    rows = np.zeros((problem.num_constraints, width), dtype=np.float64)
    basic_variables = []

    for i, con in enumerate(problem.constraints):
        flipped = con.rhs < 0
        sign = -1.0 if flipped else 1.0
        rows[i, :n] = sign * np.array(con.coefficients, dtype=np.float64)
        rows[i, -1] = abs(con.rhs)

        if con.operator is Operator.LE:
            col = n + slack_offsets[i]
            rows[i, col] = sign
            basic_variables.append(col)
        elif con.operator is Operator.GE:
            rows[i, n + slack_offsets[i]] = -sign
            if include_artificial:
                col = n + counts.num_slack + art_offsets[i]
                rows[i, col] = 1.0
                basic_variables.append(col)
            else:
                basic_variables.append(-1)
        else:
            if include_artificial:
                col = n + counts.num_slack + art_offsets[i]
                rows[i, col] = 1.0
                basic_variables.append(col)
            else:
                basic_variables.append(-1)

    return rows, basic_variables


def build_objective_row(problem: Problem, width: int) -> np.ndarray:
    """
    Raw objective row: -c on the decision columns, zero elsewhere, RHS 0.

    Parameters
    ----------
    problem : Problem
    width : int
        Total row length including the RHS column.
    """
    row = np.zeros(width, dtype=np.float64)
    row[:problem.num_variables] = -internal_objective(problem)
    return row


def build_phase1_objective_row(num_variables: int, counts: VariableCounts) -> np.ndarray:
    """
    Raw Phase 1 objective row: 1 on every artificial column, 0 elsewhere.

    The row has no (-w) column; its length is n + s + a + 1.
    """
    width = num_variables + counts.num_slack + counts.num_artificial + 1
    row = np.zeros(width, dtype=np.float64)
    start = num_variables + counts.num_slack
    row[start:start + counts.num_artificial] = 1.0
    return row


def build_standard_tableau(problem: Problem) -> Tuple[np.ndarray, List[int], TableauLayout]:
    """
    Build the single-phase tableau for an all-<= problem.

    Returns
    -------
    tableau : np.ndarray, shape (m + 1, n + s + 1)
    basic_variables : list of int
        The slack column of each row.
    layout : TableauLayout

    Raises
    ------
    ValueError
        If any constraint needs an artificial variable.
    """
    counts = count_variables(problem.constraints)
    if counts.needs_phase1:
        raise ValueError(
            "Single-phase tableau requires all constraints to be <=; "
            f"found {counts.num_artificial} needing artificial variables"
        )
    layout = TableauLayout.phase2(problem.num_variables, counts, problem.num_constraints)

    rows, basic_variables = build_constraint_rows(problem, counts)
    objective = build_objective_row(problem, layout.num_columns)
    tableau = np.vstack([rows, objective])
    return tableau, basic_variables, layout


def insert_w_column(rows: np.ndarray, value: float = 0.0) -> np.ndarray:
    """Insert the (-w) column, filled with `value`, just before the RHS."""
    rows = np.atleast_2d(np.asarray(rows, dtype=np.float64))
    w = np.full((rows.shape[0], 1), value)
    return np.hstack([rows[:, :-1], w, rows[:, -1:]])


def build_phase1_tableau(problem: Problem) -> Tuple[np.ndarray, List[int], TableauLayout]:
    """
    Build the two-phase starting tableau.

    Layout (see `TableauLayout`): constraint rows, then (-f), then (-w).
    The (-f) row holds -c with 0 in the (-w) column; the (-w) row holds 1
    on every artificial column and in its own column. Both rows are then
    reduced so that every starting basic column has coefficient zero.

    Returns
    -------
    tableau : np.ndarray, shape (m + 2, n + s + a + 2)
    basic_variables : list of int
    layout : TableauLayout
    """
    counts = count_variables(problem.constraints)
    layout = TableauLayout.phase1(problem.num_variables, counts, problem.num_constraints)

    rows, basic_variables = build_constraint_rows(problem, counts)
    rows = insert_w_column(rows, 0.0)

    f_row = insert_w_column(build_objective_row(problem, layout.num_columns - 1), 0.0)[0]
    w_row = insert_w_column(build_phase1_objective_row(problem.num_variables, counts), 1.0)[0]

    f_row = reduce_to_canonical(f_row, rows, basic_variables).final_z_row
    w_row = reduce_to_canonical(w_row, rows, basic_variables).final_z_row

    tableau = np.vstack([rows, f_row, w_row])
    return tableau, basic_variables, layout


def build_initial_tableau(problem: Problem) -> Tuple[np.ndarray, List[int], TableauLayout]:
    """Dispatch to the single-phase or two-phase builder."""
    if count_variables(problem.constraints).needs_phase1:
        return build_phase1_tableau(problem)
    return build_standard_tableau(problem)
