"""
Command-line front end for the Simplex solver.

Usage:
    python -m simplex_tutor.cli
    python -m simplex_tutor.cli --objective "3 5" \\
        --constraint "1 0 <= 4" --constraint "0 2 <= 12" --constraint "3 2 <= 18"
    python -m simplex_tutor.cli --objective "1 1" --constraint "1 1 >= 1" --minimize --check
    python -m simplex_tutor.cli --json

Without --objective the textbook example (maximize 3x1 + 5x2) is solved.
"""

import argparse
import json
import sys
from typing import List, Optional

from .config import MAX_ITERATIONS, SolveOptions, format_number
from .problem.model import Problem, default_problem, parse_problem
from .problem.accounting import count_variables, normalize_rhs
from .tableau.layout import TableauLayout
from .tableau.labels import format_tableau
from .lp.result import SimplexResult
from .lp.solver import solve
from .lp.reference import solve_reference


def describe_problem(problem: Problem) -> str:
    """Problem statement as text."""
    sense = "Maximize" if problem.is_maximization else "Minimize"
    terms = " + ".join(
        f"{format_number(c)}x{i + 1}" for i, c in enumerate(problem.objective_coefficients)
    )
    lines = [f"{sense} Z = {terms}", "Subject to:"]
    for con in problem.constraints:
        lhs = " + ".join(f"{format_number(a)}x{j + 1}" for j, a in enumerate(con.coefficients))
        lines.append(f"  {lhs} {con.operator.value} {format_number(con.rhs)}")
    lines.append("  x >= 0")
    return "\n".join(lines)


def describe_result(problem: Problem, result: SimplexResult) -> str:
    """Tableau sequence and outcome as text."""
    counts = count_variables(problem.constraints)
    m, n = problem.num_constraints, problem.num_variables
    lines = []

    if result.needs_phase1:
        layout1 = TableauLayout.phase1(n, counts, m)
        lines.append(f"Phase 1 ({result.phase1_iterations} iterations)")
        for k, (T, basis) in enumerate(zip(result.phase1_tableaus, result.phase1_basic_variables)):
            lines.append(f"\nTableau {k}:")
            if k > 0:
                lines.append(result.phase1_steps[k - 1].explanation)
            lines.append(format_tableau(T, basis, layout1))
        lines.append("")

    layout2 = TableauLayout.phase2(n, counts, m)
    if result.tableaus:
        lines.append(f"{'Phase 2' if result.needs_phase1 else 'Simplex'} "
                     f"({result.iterations} iterations)")
        for k, (T, basis) in enumerate(zip(result.tableaus, result.basic_variables)):
            lines.append(f"\nTableau {k}:")
            if k > 0:
                lines.append(result.steps[k - 1].explanation)
            lines.append(format_tableau(T, basis, layout2))
        lines.append("")

    lines.append(f"Status: {result.status}")
    if result.is_optimal:
        values = ", ".join(
            f"x{i + 1} = {format_number(v)}" for i, v in enumerate(result.optimal_solution)
        )
        lines.append(f"Solution: {values}")
        lines.append(f"Optimal value: {format_number(result.optimal_value)}")
    if result.max_iterations_reached:
        lines.append("Warning: iteration cap reached; the solution may not be optimal")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(
        description="Solve a linear program with the tabular Simplex method"
    )
    parser.add_argument(
        "--objective", type=str, default=None,
        help='Objective coefficients, e.g. "3 5" (default: textbook example)'
    )
    parser.add_argument(
        "--constraint", type=str, action="append", default=[],
        help='Constraint "a1 a2 ... (<=|>=|=) b"; repeat for each constraint'
    )
    parser.add_argument(
        "--minimize", action="store_true",
        help="Minimize instead of maximize"
    )
    parser.add_argument(
        "--max-iterations", type=int, default=MAX_ITERATIONS,
        help=f"Pivot cap per phase (default: {MAX_ITERATIONS})"
    )
    parser.add_argument(
        "--verbose", action="store_true",
        help="Print progress"
    )
    parser.add_argument(
        "--check", action="store_true",
        help="Cross-check against scipy.optimize.linprog"
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Print the result as JSON"
    )

    args = parser.parse_args(argv)

    if args.objective is None:
        if args.constraint:
            parser.error("--constraint requires --objective")
        problem = default_problem()
    else:
        if not args.constraint:
            parser.error("at least one --constraint is required")
        try:
            problem = parse_problem(args.objective, args.constraint,
                                    maximize=not args.minimize)
        except ValueError as exc:
            parser.error(str(exc))

    options = SolveOptions(max_iterations=args.max_iterations, verbose=args.verbose)
    result = solve(problem, options)

    if args.json:
        data = {"problem": problem.to_dict(), "result": result.to_dict()}
    else:
        print(describe_problem(problem))
        print()
        print(describe_result(normalize_rhs(problem), result))

    exit_code = 0
    if args.check:
        reference = solve_reference(problem)
        agree = reference.status == result.status
        if agree and result.is_optimal:
            agree = abs(reference.value - result.optimal_value) <= 1e-6
        if args.json:
            data["reference"] = {
                "status": reference.status,
                "value": reference.value,
                "agrees": agree,
            }
        else:
            value = "" if reference.value is None else f", value {format_number(reference.value)}"
            print(f"\nscipy linprog: {reference.status}{value} "
                  f"({'agrees' if agree else 'DISAGREES'})")
        if not agree:
            exit_code = 1

    if args.json:
        print(json.dumps(data, indent=2))
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
