"""
Tests for tableau layout and initial tableau construction.

Reference problems:
- textbook: maximize 3x1 + 5x2, x1 <= 4, 2x2 <= 12, 3x1 + 2x2 <= 18
- covering: minimize x1 + x2, x1 + x2 >= 1
"""

import pytest
import numpy as np

from simplex_tutor.problem.model import Constraint, Operator, Problem, default_problem
from simplex_tutor.problem.accounting import count_variables
from simplex_tutor.tableau.layout import TableauLayout
from simplex_tutor.tableau.builder import (
    internal_objective,
    build_constraint_rows,
    build_objective_row,
    build_phase1_objective_row,
    build_standard_tableau,
    build_phase1_tableau,
    build_initial_tableau,
    insert_w_column,
)
from simplex_tutor.tableau.canonical import is_canonical


def covering_problem():
    return Problem((1.0, 1.0), (Constraint((1.0, 1.0), Operator.GE, 1.0),),
                   is_maximization=False)


# ============================================================================
# Layout
# ============================================================================

class TestLayout:
    """Test index bookkeeping for both tableau shapes."""

    def test_phase2_shape(self):
        layout = TableauLayout(2, 3, 0, 3)
        assert layout.num_structural == 5
        assert layout.rhs_column == 5
        assert layout.num_columns == 6
        assert layout.num_rows == 4
        assert layout.objective_row == 3
        assert layout.f_row == 3

    def test_phase1_shape(self):
        layout = TableauLayout(2, 1, 1, 1, phase=1)
        assert layout.num_structural == 4
        assert layout.w_column == 4
        assert layout.rhs_column == 5
        assert layout.num_rows == 3
        assert layout.f_row == 1
        assert layout.objective_row == 2

    def test_w_column_only_in_phase1(self):
        with pytest.raises(ValueError):
            TableauLayout(2, 1, 1, 1, phase=2).w_column

    def test_column_kinds(self):
        layout = TableauLayout(2, 1, 1, 1, phase=1)
        assert layout.is_slack(2) and not layout.is_slack(1)
        assert layout.is_artificial(3) and not layout.is_artificial(4)
        assert not layout.to_phase2().is_artificial(3)

    def test_to_phase2(self):
        layout = TableauLayout(2, 1, 1, 1, phase=1).to_phase2()
        assert layout.phase == 2
        assert layout.num_columns == 4


# ============================================================================
# Rows
# ============================================================================

class TestRows:
    """Test constraint and objective row construction."""

    def test_internal_objective_negates_minimization(self):
        np.testing.assert_array_equal(internal_objective(covering_problem()), [-1.0, -1.0])
        np.testing.assert_array_equal(internal_objective(default_problem()), [3.0, 5.0])

    def test_objective_row(self):
        """Objective row stores -c (maximization form)."""
        np.testing.assert_array_equal(
            build_objective_row(default_problem(), 6), [-3, -5, 0, 0, 0, 0]
        )

    def test_objective_row_minimization(self):
        np.testing.assert_array_equal(
            build_objective_row(covering_problem(), 4), [1, 1, 0, 0]
        )

    def test_phase1_objective_row(self):
        counts = count_variables(covering_problem().constraints)
        np.testing.assert_array_equal(build_phase1_objective_row(2, counts), [0, 0, 0, 1, 0])

    def test_constraint_rows_mixed(self):
        problem = Problem((1.0, 1.0), (
            Constraint((1.0, 0.0), Operator.LE, 4.0),
            Constraint((1.0, 1.0), Operator.GE, 1.0),
            Constraint((1.0, -1.0), Operator.EQ, 0.0),
        ))
        counts = count_variables(problem.constraints)
        rows, basis = build_constraint_rows(problem, counts)
        # columns: x1 x2 s1 s2 a1 a2 b
        np.testing.assert_array_equal(rows, [
            [1, 0, 1, 0, 0, 0, 4],
            [1, 1, 0, -1, 1, 0, 1],
            [1, -1, 0, 0, 0, 1, 0],
        ])
        assert basis == [2, 4, 5]

    def test_constraint_rows_without_artificial(self):
        """Rows a learner writes before artificial variables are introduced."""
        problem = covering_problem()
        rows, basis = build_constraint_rows(problem, count_variables(problem.constraints),
                                            include_artificial=False)
        np.testing.assert_array_equal(rows, [[1, 1, -1, 1]])
        assert basis == [-1]

    def test_negative_rhs_le_flips_row(self):
        """Unnormalized b < 0 on a <= row: row negated, slack -1, RHS |b|."""
        problem = Problem((1.0, 1.0), (Constraint((1.0, 1.0), Operator.LE, -2.0),))
        rows, basis = build_constraint_rows(problem, count_variables(problem.constraints))
        np.testing.assert_array_equal(rows, [[-1, -1, -1, 2]])
        assert basis == [2]

    def test_negative_rhs_ge_flips_surplus(self):
        problem = Problem((1.0,), (Constraint((1.0,), Operator.GE, -2.0),))
        rows, _ = build_constraint_rows(problem, count_variables(problem.constraints))
        # x1 s1 a1 b
        np.testing.assert_array_equal(rows, [[-1, 1, 1, 2]])

    def test_insert_w_column(self):
        rows = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
        np.testing.assert_array_equal(
            insert_w_column(rows, 1.0), [[1, 2, 1, 3], [4, 5, 1, 6]]
        )


# ============================================================================
# Tableaus
# ============================================================================

class TestStandardTableau:
    """Test the single-phase tableau."""

    def test_textbook(self):
        T, basis, layout = build_standard_tableau(default_problem())
        np.testing.assert_array_equal(T, [
            [1, 0, 1, 0, 0, 4],
            [0, 2, 0, 1, 0, 12],
            [3, 2, 0, 0, 1, 18],
            [-3, -5, 0, 0, 0, 0],
        ])
        assert basis == [2, 3, 4]
        assert layout == TableauLayout(2, 3, 0, 3)
        assert is_canonical(T, basis, 3)

    def test_rejects_artificial(self):
        with pytest.raises(ValueError, match="requires all constraints to be <="):
            build_standard_tableau(covering_problem())


class TestPhase1Tableau:
    """Test the two-phase starting tableau."""

    def test_covering(self):
        T, basis, layout = build_phase1_tableau(covering_problem())
        # columns: x1 x2 s1 a1 (-w) b ; rows: constraint, (-f), (-w)
        np.testing.assert_array_equal(T, [
            [1, 1, -1, 1, 0, 1],
            [1, 1, 0, 0, 0, 0],
            [-1, -1, 1, 0, 1, -1],
        ])
        assert basis == [3]
        assert layout.is_phase1

    def test_canonical_form(self):
        """Both objective rows are zero under every starting basic column."""
        problem = Problem((2.0, 1.0), (
            Constraint((1.0, 1.0), Operator.LE, 4.0),
            Constraint((1.0, 2.0), Operator.GE, 2.0),
            Constraint((1.0, -1.0), Operator.EQ, 1.0),
        ))
        T, basis, layout = build_phase1_tableau(problem)
        assert T.shape == (layout.num_rows, layout.num_columns)
        assert is_canonical(T, basis, layout.num_constraints)
        # (-w) RHS is minus the sum of artificial-row right-hand sides
        assert T[layout.objective_row, layout.rhs_column] == pytest.approx(-3.0)
        # (-w) column is a unit column on the (-w) row
        np.testing.assert_array_equal(T[:, layout.w_column], [0, 0, 0, 0, 1])

    def test_dispatch(self):
        assert not build_initial_tableau(default_problem())[2].is_phase1
        assert build_initial_tableau(covering_problem())[2].is_phase1
