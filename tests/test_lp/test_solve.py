"""
Tests for the Simplex solve entry points.

Reference results:
- textbook (max 3x1 + 5x2): x = (2, 6), value 36, two pivots
- covering (min x1 + x2, x1 + x2 >= 1): x = (1, 0), value 1
- max x1 s.t. x1 - x2 <= 1: unbounded
- max x1 s.t. x1 >= 5, x1 <= 1: infeasible
"""

import json
import warnings

import pytest
import numpy as np

from simplex_tutor.config import SolveOptions
from simplex_tutor.problem.model import Constraint, Operator, Problem, default_problem
from simplex_tutor.tableau.canonical import is_canonical
from simplex_tutor.lp import (
    solve,
    solve_standard,
    solve_two_phase,
    solve_reference,
    STATUS_OPTIMAL,
    STATUS_UNBOUNDED,
    STATUS_INFEASIBLE,
)


def covering_problem():
    return Problem((1.0, 1.0), (Constraint((1.0, 1.0), Operator.GE, 1.0),),
                   is_maximization=False)


def unbounded_problem():
    return Problem((1.0, 0.0), (Constraint((1.0, -1.0), Operator.LE, 1.0),))


def infeasible_problem():
    return Problem((1.0,), (
        Constraint((1.0,), Operator.GE, 5.0),
        Constraint((1.0,), Operator.LE, 1.0),
    ))


# ============================================================================
# Single phase
# ============================================================================

class TestSinglePhase:
    """Test problems with only <= constraints."""

    def test_textbook(self):
        result = solve(default_problem())
        assert result.status == STATUS_OPTIMAL
        assert result.is_optimal
        np.testing.assert_allclose(result.optimal_solution, [2, 6])
        assert result.optimal_value == pytest.approx(36.0)
        assert result.iterations == 2
        assert len(result.tableaus) == 3
        assert not result.needs_phase1
        assert result.num_slack == 3
        assert result.num_artificial == 0
        assert result.phase1_tableaus is None
        assert result.canonical_form_info is None

    def test_history_lengths_match(self):
        result = solve(default_problem())
        assert len(result.tableaus) == len(result.basic_variables) == result.iterations + 1
        assert len(result.steps) == result.iterations

    def test_unbounded(self):
        result = solve(unbounded_problem())
        assert result.status == STATUS_UNBOUNDED
        assert result.iterations == 1
        assert len(result.tableaus) == 2
        assert result.optimal_solution.size == 0

    def test_solve_standard_rejects_ge(self):
        with pytest.raises(ValueError):
            solve_standard(covering_problem())

    def test_minimization_single_phase(self):
        """min -x1 - x2 over x1 + x2 <= 3 has value -3."""
        problem = Problem((-1.0, -1.0), (Constraint((1.0, 1.0), Operator.LE, 3.0),),
                          is_maximization=False)
        result = solve(problem)
        assert result.optimal_value == pytest.approx(-3.0)
        assert problem.is_feasible(result.optimal_solution)

    def test_verbose_override(self, capsys):
        solve(default_problem(), verbose=True)
        out = capsys.readouterr().out
        assert "Single-phase solve" in out
        assert "Result: optimal" in out


# ============================================================================
# Two phase
# ============================================================================

class TestTwoPhase:
    """Test problems that need artificial variables."""

    def test_covering(self):
        result = solve(covering_problem())
        assert result.status == STATUS_OPTIMAL
        assert result.needs_phase1
        np.testing.assert_allclose(result.optimal_solution, [1, 0])
        assert result.optimal_value == pytest.approx(1.0)
        assert result.phase1_iterations == 1
        assert len(result.phase1_tableaus) == 2
        assert result.iterations == 0
        assert result.total_iterations == 1

    def test_covering_canonical_info(self):
        info = solve(covering_problem()).canonical_form_info
        np.testing.assert_allclose(info.initial_z_row, [1, 1, 0, 0])
        np.testing.assert_allclose(info.final_z_row, [0, 0, 1, -1])
        assert len(info.eliminated_vars) == 1

    def test_infeasible(self):
        result = solve(infeasible_problem())
        assert result.status == STATUS_INFEASIBLE
        assert result.tableaus == []
        assert result.iterations == 0
        assert result.phase1_iterations == 1
        assert result.optimal_solution.size == 0

    def test_equality_form_matches_single_phase(self):
        """Textbook problem written with explicit slack columns and equalities."""
        problem = Problem((3.0, 5.0, 0.0, 0.0, 0.0), (
            Constraint((1.0, 0.0, 1.0, 0.0, 0.0), Operator.EQ, 4.0),
            Constraint((0.0, 2.0, 0.0, 1.0, 0.0), Operator.EQ, 12.0),
            Constraint((3.0, 2.0, 0.0, 0.0, 1.0), Operator.EQ, 18.0),
        ))
        result = solve(problem)
        assert result.needs_phase1
        assert result.optimal_value == pytest.approx(36.0)
        np.testing.assert_allclose(result.optimal_solution[:2], [2, 6], atol=1e-9)

    def test_redundant_equality(self):
        problem = Problem((1.0, 0.0), (
            Constraint((1.0, 1.0), Operator.EQ, 2.0),
            Constraint((2.0, 2.0), Operator.EQ, 4.0),
        ))
        with pytest.warns(RuntimeWarning, match="redundant"):
            result = solve(problem)
        assert result.status == STATUS_OPTIMAL
        np.testing.assert_allclose(result.optimal_solution, [2, 0])
        assert result.optimal_value == pytest.approx(2.0)
        assert result.basic_variables[0] == [0, -1]

    def test_redundant_equality_other_column_enters(self):
        """max x2 with the same redundant pair: x2 must enter through row 1."""
        problem = Problem((0.0, 1.0), (
            Constraint((1.0, 1.0), Operator.EQ, 2.0),
            Constraint((2.0, 2.0), Operator.EQ, 4.0),
        ))
        with pytest.warns(RuntimeWarning, match="redundant"):
            result = solve(problem)
        assert result.status == STATUS_OPTIMAL
        assert is_canonical(result.tableaus[0], result.basic_variables[0], 2)
        final = [b for b in result.basic_variables[-1] if b >= 0]
        assert len(final) == len(set(final))
        assert result.basic_variables[-1] == [1, -1]
        np.testing.assert_allclose(result.optimal_solution, [0, 2], atol=1e-9)
        assert result.optimal_value == pytest.approx(2.0)

    def test_redundant_equality_single_variable(self):
        """max x1, x1 = 1, 2x1 = 2: no column is left to cover row 2."""
        problem = Problem((1.0,), (
            Constraint((1.0,), Operator.EQ, 1.0),
            Constraint((2.0,), Operator.EQ, 2.0),
        ))
        with pytest.warns(RuntimeWarning, match="redundant"):
            result = solve(problem)
        assert result.status == STATUS_OPTIMAL
        assert result.iterations == 0
        np.testing.assert_allclose(result.optimal_solution, [1.0])
        assert result.optimal_value == pytest.approx(1.0)

    def test_mixed_constraints(self):
        """max 2x1 + x2, x1 + x2 <= 4, x1 + 2x2 >= 2, x1 - x2 = 1 -> x = (2.5, 1.5)."""
        problem = Problem((2.0, 1.0), (
            Constraint((1.0, 1.0), Operator.LE, 4.0),
            Constraint((1.0, 2.0), Operator.GE, 2.0),
            Constraint((1.0, -1.0), Operator.EQ, 1.0),
        ))
        result = solve(problem)
        np.testing.assert_allclose(result.optimal_solution, [2.5, 1.5])
        assert result.optimal_value == pytest.approx(6.5)

    def test_solve_two_phase_on_le_problem(self):
        """Two-phase entry point skips straight through when no artificials exist."""
        result = solve_two_phase(default_problem())
        assert result.optimal_value == pytest.approx(36.0)
        assert result.phase1_iterations == 0


# ============================================================================
# Normalization and options
# ============================================================================

class TestOptions:
    """Test RHS normalization and the iteration cap."""

    def test_negative_rhs_ge_becomes_single_phase(self):
        problem = Problem((1.0,), (Constraint((-1.0,), Operator.GE, -4.0),))
        result = solve(problem)
        assert not result.needs_phase1
        assert result.optimal_value == pytest.approx(4.0)

    def test_without_normalization(self):
        problem = Problem((1.0,), (Constraint((-1.0,), Operator.GE, -4.0),))
        result = solve(problem, SolveOptions(normalize=False))
        assert result.needs_phase1
        assert result.optimal_value == pytest.approx(4.0)

    def test_negative_rhs_le_infeasible(self):
        problem = Problem((1.0, 1.0), (Constraint((1.0, 1.0), Operator.LE, -1.0),))
        assert solve(problem).status == STATUS_INFEASIBLE

    def test_iteration_cap_warns(self):
        with pytest.warns(RuntimeWarning, match="iteration cap"):
            result = solve(default_problem(), SolveOptions(max_iterations=1))
        assert result.status == STATUS_OPTIMAL
        assert result.max_iterations_reached
        assert result.iterations == 1
        assert result.optimal_value == pytest.approx(30.0)

    def test_problem_not_modified(self):
        problem = Problem((1.0, 1.0), (Constraint((1.0, 1.0), Operator.LE, -1.0),))
        solve(problem)
        assert problem.constraints[0].rhs == -1.0


# ============================================================================
# Serialization
# ============================================================================

class TestToDict:
    """Test the JSON view of a result."""

    def test_single_phase_json(self):
        data = json.loads(json.dumps(solve(default_problem()).to_dict()))
        assert data["status"] == "optimal"
        assert data["optimal_solution"] == pytest.approx([2, 6])
        assert len(data["tableaus"]) == 3
        assert data["steps"][0]["entering_var"] == 1
        assert "phase1_tableaus" not in data

    def test_two_phase_json(self):
        data = json.loads(json.dumps(solve(covering_problem()).to_dict()))
        assert data["needs_phase1"]
        assert data["phase1_iterations"] == 1
        assert data["canonical_form_info"]["final_z_row"] == pytest.approx([0, 0, 1, -1])


# ============================================================================
# Cross-check
# ============================================================================

def _random_problem(rng, mixed):
    n = int(rng.integers(2, 5))
    m = int(rng.integers(1, 5))
    constraints = []
    for _ in range(m):
        coeffs = tuple(float(v) for v in rng.integers(0, 6, size=n))
        rhs = float(rng.integers(1, 20))
        op = Operator.LE
        if mixed:
            op = [Operator.LE, Operator.GE, Operator.EQ][int(rng.integers(0, 3))]
        constraints.append(Constraint(coeffs, op, rhs))
    objective = tuple(float(v) for v in rng.integers(-3, 6, size=n))
    return Problem(objective, tuple(constraints), is_maximization=bool(rng.integers(0, 2)))


@pytest.mark.slow
class TestAgainstReference:
    """Compare with scipy.optimize.linprog on random problems."""

    @pytest.mark.parametrize("mixed", [False, True])
    def test_random_problems(self, mixed):
        rng = np.random.default_rng(20240601 + int(mixed))
        checked = 0
        for _ in range(150):
            problem = _random_problem(rng, mixed)
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", RuntimeWarning)
                result = solve(problem)
            reference = solve_reference(problem)
            if result.max_iterations_reached or reference.status == "error":
                continue
            assert result.status == reference.status, problem
            if result.is_optimal:
                assert result.optimal_value == pytest.approx(reference.value, abs=1e-6)
                assert problem.is_feasible(result.optimal_solution)
            checked += 1
        assert checked > 75
