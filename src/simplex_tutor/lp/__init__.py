"""
Simplex solve orchestration.

Implements:
- The pivot loop with per-phase histories
- Phase 1 feasibility, degenerate-basis repair and the Phase 2 rebuild
- Result assembly (solution, objective value, status)
- A scipy.optimize.linprog reference solve for cross-checking
"""

from .result import (
    IterationStep,
    SimplexResult,
    STATUS_OPTIMAL,
    STATUS_UNBOUNDED,
    STATUS_INFEASIBLE,
    extract_solution,
    objective_value,
    phase1_objective,
)

from .phases import (
    PhaseRun,
    describe_pivot,
    run_phase,
    phase1_feasible,
    resolve_degenerate_basis,
    strip_artificial,
    build_phase2_tableau,
)

from .solver import (
    solve,
    solve_standard,
    solve_two_phase,
)

from .reference import (
    ReferenceResult,
    solve_reference,
)

__all__ = [
    # Result
    "IterationStep",
    "SimplexResult",
    "STATUS_OPTIMAL",
    "STATUS_UNBOUNDED",
    "STATUS_INFEASIBLE",
    "extract_solution",
    "objective_value",
    "phase1_objective",
    # Phases
    "PhaseRun",
    "describe_pivot",
    "run_phase",
    "phase1_feasible",
    "resolve_degenerate_basis",
    "strip_artificial",
    "build_phase2_tableau",
    # Solver
    "solve",
    "solve_standard",
    "solve_two_phase",
    # Reference
    "ReferenceResult",
    "solve_reference",
]
