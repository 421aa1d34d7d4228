"""
Tests for the pivot engine: entering/leaving selection and row reduction.
"""

import pytest
import numpy as np

from simplex_tutor.problem.model import default_problem
from simplex_tutor.tableau.layout import TableauLayout
from simplex_tutor.tableau.builder import build_standard_tableau
from simplex_tutor.tableau.canonical import is_canonical
from simplex_tutor.tableau.pivot import (
    PivotChoice,
    select_entering,
    negative_columns,
    is_optimal,
    compute_ratios,
    eligible_rows,
    select_leaving,
    choose_pivot,
    normalize_pivot_row,
    row_multipliers,
    eliminate_column,
    pivot,
    update_basis,
)


@pytest.fixture
def textbook():
    """Initial tableau of the textbook example."""
    return build_standard_tableau(default_problem())


# ============================================================================
# Selection rules
# ============================================================================

class TestEntering:
    """Test the most-negative entering rule."""

    def test_most_negative(self, textbook):
        T, _, layout = textbook
        assert select_entering(T, layout) == 1
        assert negative_columns(T, layout) == [0, 1]

    def test_tie_takes_first(self):
        layout = TableauLayout(2, 1, 0, 1)
        T = np.array([[1.0, 1.0, 1.0, 2.0], [-4.0, -4.0, 0.0, 0.0]])
        assert select_entering(T, layout) == 0

    def test_tolerance(self):
        """Entries above -tol do not count as negative."""
        layout = TableauLayout(2, 1, 0, 1)
        T = np.array([[1.0, 1.0, 1.0, 2.0], [-1e-12, 0.0, 0.0, 0.0]])
        assert select_entering(T, layout) == -1
        assert is_optimal(T, layout)

    def test_phase1_skips_w_and_rhs(self):
        """In Phase 1 the (-w) and RHS columns never enter."""
        layout = TableauLayout(1, 0, 1, 1, phase=1)
        # x1 a1 (-w) b
        T = np.array([
            [1.0, 1.0, 0.0, 1.0],
            [0.0, 0.0, 0.0, 0.0],
            [0.0, 0.0, -5.0, -7.0],
        ])
        assert select_entering(T, layout) == -1

    def test_phase1_prices_last_row(self):
        layout = TableauLayout(1, 0, 1, 1, phase=1)
        T = np.array([
            [1.0, 1.0, 0.0, 1.0],
            [-9.0, 0.0, 0.0, 0.0],
            [-1.0, 0.0, 1.0, -1.0],
        ])
        assert select_entering(T, layout) == 0


class TestLeaving:
    """Test the minimum-ratio rule."""

    def test_ratios(self, textbook):
        T, _, layout = textbook
        ratios = compute_ratios(T, 1, layout)
        assert ratios[0] == np.inf
        np.testing.assert_allclose(ratios[1:], [6.0, 9.0])
        assert eligible_rows(T, 1, layout) == [1, 2]

    def test_min_ratio(self, textbook):
        T, _, layout = textbook
        assert select_leaving(T, 1, layout) == (1, 6.0)

    def test_tie_takes_lowest_row(self):
        layout = TableauLayout(1, 2, 0, 2)
        T = np.array([
            [1.0, 1.0, 0.0, 2.0],
            [2.0, 0.0, 1.0, 4.0],
            [-1.0, 0.0, 0.0, 0.0],
        ])
        assert select_leaving(T, 0, layout) == (0, 2.0)

    def test_unbounded(self):
        layout = TableauLayout(2, 1, 0, 1)
        T = np.array([[1.0, -1.0, 1.0, 1.0], [0.0, -1.0, 1.0, 1.0]])
        assert select_leaving(T, 1, layout) == (-1, np.inf)
        choice = choose_pivot(T, layout)
        assert choice.leaving_row == -1

    def test_zero_rhs_degenerate(self):
        """A zero RHS gives ratio 0, which wins."""
        layout = TableauLayout(1, 2, 0, 2)
        T = np.array([
            [1.0, 1.0, 0.0, 3.0],
            [1.0, 0.0, 1.0, 0.0],
            [-1.0, 0.0, 0.0, 0.0],
        ])
        assert select_leaving(T, 0, layout) == (1, 0.0)

    def test_choose_pivot(self, textbook):
        T, _, layout = textbook
        assert choose_pivot(T, layout) == PivotChoice(1, 1, 2.0, 6.0)

    def test_choose_pivot_optimal(self):
        layout = TableauLayout(1, 1, 0, 1)
        T = np.array([[1.0, 1.0, 1.0], [0.0, 1.0, 1.0]])
        assert choose_pivot(T, layout) is None

    def test_ratio_property_random(self):
        """The chosen row has the minimum ratio among eligible rows."""
        rng = np.random.default_rng(3)
        layout = TableauLayout(3, 4, 0, 4)
        for _ in range(200):
            T = rng.integers(-3, 5, size=(5, 8)).astype(float)
            T[:4, -1] = np.abs(T[:4, -1])
            entering = int(rng.integers(0, 7))
            row, ratio = select_leaving(T, entering, layout)
            eligible = [i for i in range(4) if T[i, entering] > 1e-10]
            if not eligible:
                assert row == -1
                continue
            ratios = [T[i, -1] / T[i, entering] for i in eligible]
            assert ratio == pytest.approx(min(ratios))
            assert row == eligible[int(np.argmin(ratios))]


# ============================================================================
# Row operations
# ============================================================================

class TestPivot:
    """Test the row-reduction pivot."""

    def test_normalize(self, textbook):
        T, _, _ = textbook
        N = normalize_pivot_row(T, 1, 1)
        np.testing.assert_array_equal(N[1], [0, 1, 0, 0.5, 0, 6])
        assert T[1, 1] == 2.0  # input untouched

    def test_multipliers(self, textbook):
        T, _, _ = textbook
        N = normalize_pivot_row(T, 1, 1)
        np.testing.assert_array_equal(row_multipliers(N, 1, 1), [0, 0, 2, -5])

    def test_first_pivot(self, textbook):
        T, basis, layout = textbook
        P = pivot(T, 1, 1)
        np.testing.assert_allclose(P, [
            [1, 0, 1, 0, 0, 4],
            [0, 1, 0, 0.5, 0, 6],
            [3, 0, 0, -1, 1, 6],
            [-3, 0, 0, 2.5, 0, 30],
        ])
        basis = update_basis(basis, 1, 1)
        assert basis == [2, 1, 4]
        assert is_canonical(P, basis, layout.num_constraints)

    def test_second_pivot_reaches_optimum(self, textbook):
        T, basis, layout = textbook
        P = pivot(pivot(T, 1, 1), 2, 0)
        np.testing.assert_allclose(P[-1], [0, 0, 0, 1.5, 1, 36])
        np.testing.assert_allclose(P[:, -1], [2, 6, 2, 36])
        assert is_optimal(P, layout)

    def test_pivot_column_is_exact_unit(self):
        T = np.array([[3.0, 1.0, 1.0], [7.0, 2.0, 5.0], [-1.0, 0.5, 0.0]])
        P = eliminate_column(normalize_pivot_row(T, 0, 0), 0, 0)
        assert list(P[:, 0]) == [1.0, 0.0, 0.0]

    def test_update_basis_copies(self):
        basis = [2, 3]
        assert update_basis(basis, 0, 1) == [1, 3]
        assert basis == [2, 3]
