"""
Tabular Simplex solver.

Solves

    maximize / minimize   c^T x
    subject to            A x (<=, >=, =) b,   x >= 0

with the single-phase method when every constraint is <=, and with the
two-phase method otherwise. The outcome is always a `SimplexResult`:
unbounded and infeasible problems are statuses, not exceptions.
"""

import warnings
from typing import Optional

import numpy as np

from ..config import SolveOptions
from ..problem.model import Problem
from ..problem.accounting import count_variables, normalize_rhs
from ..tableau.builder import build_standard_tableau, build_phase1_tableau
from .phases import PhaseRun, run_phase, phase1_feasible, build_phase2_tableau
from .result import (
    SimplexResult,
    STATUS_OPTIMAL,
    STATUS_UNBOUNDED,
    STATUS_INFEASIBLE,
    extract_solution,
    objective_value,
    phase1_objective,
)


def _warn_iteration_cap(phase: str, max_iterations: int) -> None:
    warnings.warn(
        f"{phase} reached the iteration cap ({max_iterations}) before an "
        f"optimality condition held; the reported solution may not be optimal",
        RuntimeWarning,
    )


def _finish(
    problem: Problem,
    run: PhaseRun,
    num_slack: int,
    num_artificial: int,
) -> SimplexResult:
    """Package a Phase 2 (or single-phase) run into a result."""
    if run.status == STATUS_OPTIMAL:
        solution = extract_solution(run.final_tableau, run.final_basis, run.layout)
        value = objective_value(run.final_tableau, run.layout, problem.is_maximization)
    else:
        solution = np.array([])
        value = 0.0
    return SimplexResult(
        tableaus=run.tableaus,
        basic_variables=run.basic_variables,
        optimal_solution=solution,
        optimal_value=value,
        iterations=run.iterations,
        status=run.status,
        num_slack=num_slack,
        num_artificial=num_artificial,
        steps=run.steps,
        max_iterations_reached=run.max_iterations_reached,
    )


def solve_standard(problem: Problem, options: Optional[SolveOptions] = None) -> SimplexResult:
    """
    Single-phase Simplex for problems whose constraints are all <=.

    Raises
    ------
    ValueError
        If the problem needs artificial variables.
    """
    opts = options or SolveOptions()
    T, basis, layout = build_standard_tableau(problem)
    if opts.verbose:
        print(f"Single-phase solve: {problem.num_variables} variables, "
              f"{problem.num_constraints} constraints")

    run = run_phase(T, basis, layout, opts.max_iterations, opts.tol, opts.verbose)
    if run.max_iterations_reached:
        _warn_iteration_cap("Simplex", opts.max_iterations)

    result = _finish(problem, run, layout.num_slack, 0)
    if opts.verbose:
        print(f"Result: {result.status}, value = {result.optimal_value:.6g}")
    return result


def solve_two_phase(problem: Problem, options: Optional[SolveOptions] = None) -> SimplexResult:
    """
    Two-phase Simplex.

    Phase 1 minimizes the sum of artificial variables. A nonzero optimum
    means the problem is infeasible and Phase 2 is not attempted.
    """
    opts = options or SolveOptions()
    counts = count_variables(problem.constraints)
    T, basis, layout = build_phase1_tableau(problem)
    if opts.verbose:
        print(f"Two-phase solve: {problem.num_variables} variables, "
              f"{counts.num_slack} slack, {counts.num_artificial} artificial")

    phase1 = run_phase(T, basis, layout, opts.max_iterations, opts.tol, opts.verbose)
    if phase1.max_iterations_reached:
        _warn_iteration_cap("Phase 1", opts.max_iterations)

    phase1_fields = dict(
        needs_phase1=True,
        phase1_tableaus=phase1.tableaus,
        phase1_basic_variables=phase1.basic_variables,
        phase1_iterations=phase1.iterations,
        phase1_steps=phase1.steps,
    )

    if phase1.status != STATUS_OPTIMAL or not phase1_feasible(
            phase1.final_tableau, layout, opts.feasibility_tol):
        status = phase1.status if phase1.status != STATUS_OPTIMAL else STATUS_INFEASIBLE
        if opts.verbose:
            print(f"Phase 1 ended with w = "
                  f"{phase1_objective(phase1.final_tableau, layout):.6g}: {status}")
        return SimplexResult(
            tableaus=[],
            basic_variables=[],
            optimal_solution=np.array([]),
            optimal_value=0.0,
            iterations=0,
            status=status,
            num_slack=counts.num_slack,
            num_artificial=counts.num_artificial,
            max_iterations_reached=phase1.max_iterations_reached,
            **phase1_fields,
        )

    T2, basis2, layout2, info = build_phase2_tableau(
        phase1.final_tableau, phase1.final_basis, layout, problem, opts.tol,
    )
    if opts.verbose:
        print(f"Phase 2 objective row: {len(info.eliminated_vars)} eliminations "
              f"to reach canonical form")

    phase2 = run_phase(T2, basis2, layout2, opts.max_iterations, opts.tol, opts.verbose)
    if phase2.max_iterations_reached:
        _warn_iteration_cap("Phase 2", opts.max_iterations)

    result = _finish(problem, phase2, counts.num_slack, counts.num_artificial)
    result.needs_phase1 = True
    result.phase1_tableaus = phase1.tableaus
    result.phase1_basic_variables = phase1.basic_variables
    result.phase1_iterations = phase1.iterations
    result.phase1_steps = phase1.steps
    result.canonical_form_info = info
    result.max_iterations_reached = (
        phase1.max_iterations_reached or phase2.max_iterations_reached
    )
    if opts.verbose:
        print(f"Result: {result.status}, value = {result.optimal_value:.6g}")
    return result


def solve(
    problem: Problem,
    options: Optional[SolveOptions] = None,
    verbose: Optional[bool] = None,
) -> SimplexResult:
    """
    Solve a linear program with the tabular Simplex method.

    Parameters
    ----------
    problem : Problem
        The linear program. Not modified.
    options : SolveOptions, optional
        Tolerances, iteration cap and normalization switch.
    verbose : bool, optional
        Overrides `options.verbose` when given.

    Returns
    -------
    SimplexResult
        With status "optimal", "unbounded" or "infeasible".

    Examples
    --------
    >>> from simplex_tutor.problem import default_problem
    >>> result = solve(default_problem())
    >>> result.status, round(result.optimal_value, 6)
    ('optimal', 36.0)
    """
    opts = options or SolveOptions()
    if verbose is not None:
        opts = SolveOptions(
            tol=opts.tol,
            feasibility_tol=opts.feasibility_tol,
            max_iterations=opts.max_iterations,
            normalize=opts.normalize,
            verbose=verbose,
        )
    if opts.normalize:
        problem = normalize_rhs(problem)

    if count_variables(problem.constraints).needs_phase1:
        return solve_two_phase(problem, opts)
    return solve_standard(problem, opts)
