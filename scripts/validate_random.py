#!/usr/bin/env python3
"""
Randomized validation of the Simplex engine against scipy linprog.

Usage:
    python scripts/validate_random.py
    python scripts/validate_random.py --count 500 --seed 7
    python scripts/validate_random.py --mixed --json report.json

Features:
- Random problems with integer coefficients, all-<= or mixed operators
- Status and objective value compared with scipy.optimize.linprog (HiGHS)
- Optimal solutions checked against every constraint
- Summary table, optional JSON report, exit code 1 on any mismatch
"""

import argparse
import json
import sys
import warnings
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import List, Optional, Tuple

# Add project to path for package import
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import numpy as np
from simplex_tutor.problem.model import Constraint, Operator, Problem
from simplex_tutor.lp.solver import solve
from simplex_tutor.lp.reference import solve_reference


@dataclass
class Mismatch:
    """One problem on which the engine and linprog disagree."""
    index: int
    problem: dict
    status: str
    reference_status: str
    value: Optional[float]
    reference_value: Optional[float]
    reason: str


def random_problem(rng: np.random.Generator, mixed: bool) -> Problem:
    """Draw a small LP with integer data."""
    n = int(rng.integers(2, 5))
    m = int(rng.integers(2, 5))
    operators = [Operator.LE, Operator.GE, Operator.EQ] if mixed else [Operator.LE]
    constraints = []
    for _ in range(m):
        op = operators[int(rng.integers(len(operators)))]
        coeffs = rng.integers(-2, 6, size=n).astype(float)
        rhs = float(rng.integers(0, 20))
        constraints.append(Constraint(tuple(coeffs), op, rhs))
    return Problem(
        objective_coefficients=tuple(rng.integers(-3, 8, size=n).astype(float)),
        constraints=tuple(constraints),
        is_maximization=bool(rng.integers(2)),
    )


def check_problem(index: int, problem: Problem, tol: float) -> Tuple[str, Optional[Mismatch]]:
    """Solve both ways; return the linprog status and the mismatch, if any."""
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", RuntimeWarning)
        result = solve(problem)
    reference = solve_reference(problem)

    reason = None
    if reference.status == "error":
        return reference.status, None
    if result.status != reference.status:
        reason = "status"
    elif result.is_optimal:
        if abs(result.optimal_value - reference.value) > tol * max(1.0, abs(reference.value)):
            reason = "value"
        elif not problem.is_feasible(result.optimal_solution, tol):
            reason = "infeasible solution"

    if reason is None:
        return reference.status, None
    return reference.status, Mismatch(
        index=index,
        problem=problem.to_dict(),
        status=result.status,
        reference_status=reference.status,
        value=result.optimal_value if result.is_optimal else None,
        reference_value=reference.value,
        reason=reason,
    )


def main():
    parser = argparse.ArgumentParser(description="Validate the Simplex engine against linprog")
    parser.add_argument("--count", type=int, default=200, help="Number of problems (default: 200)")
    parser.add_argument("--seed", type=int, default=0, help="Random seed (default: 0)")
    parser.add_argument("--mixed", action="store_true", help="Mix <=, >= and = constraints")
    parser.add_argument("--tol", type=float, default=1e-6, help="Value tolerance (default: 1e-6)")
    parser.add_argument("--json", type=str, default=None, help="Write a JSON report to this path")
    args = parser.parse_args()

    rng = np.random.default_rng(args.seed)
    mismatches: List[Mismatch] = []
    statuses = {}

    for i in range(args.count):
        problem = random_problem(rng, args.mixed)
        status, mismatch = check_problem(i, problem, args.tol)
        statuses[status] = statuses.get(status, 0) + 1
        if mismatch is not None:
            mismatches.append(mismatch)

    print(f"Checked {args.count} problems ({'mixed' if args.mixed else 'all <='} operators)")
    for status, count in sorted(statuses.items()):
        print(f"  {status:<12s} {count:5d}")
    print(f"Mismatches: {len(mismatches)}")
    for mm in mismatches[:10]:
        print(f"  #{mm.index}: {mm.reason} (engine {mm.status}, linprog {mm.reference_status})")

    if args.json:
        report = {
            "count": args.count,
            "seed": args.seed,
            "mixed": args.mixed,
            "statuses": statuses,
            "mismatches": [asdict(mm) for mm in mismatches],
        }
        Path(args.json).write_text(json.dumps(report, indent=2))
        print(f"Report written to {args.json}")

    sys.exit(1 if mismatches else 0)


if __name__ == "__main__":
    main()
