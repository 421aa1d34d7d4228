"""
Result records and solution extraction.

A solve produces one `SimplexResult`, created once and never mutated
after return. Histories hold one tableau and one basis per accepted pivot,
with the starting state at index 0.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from ..tableau.canonical import CanonicalFormInfo
from ..tableau.layout import TableauLayout


STATUS_OPTIMAL = "optimal"
STATUS_UNBOUNDED = "unbounded"
STATUS_INFEASIBLE = "infeasible"


@dataclass(frozen=True)
class IterationStep:
    """
    Record of one pivot.

    Attributes
    ----------
    iteration : int
        1-based pivot number within its phase.
    entering_var : int
        Column that entered the basis.
    leaving_var : int
        Column that left the basis.
    pivot_element : float
        Tableau entry pivoted on, before normalization.
    min_ratio : float
        Winning ratio of the minimum-ratio test.
    explanation : str
        One-line description for display.
    """
    iteration: int
    entering_var: int
    leaving_var: int
    pivot_element: float
    min_ratio: float
    explanation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "iteration": self.iteration,
            "entering_var": self.entering_var,
            "leaving_var": self.leaving_var,
            "pivot_element": self.pivot_element,
            "min_ratio": self.min_ratio,
            "explanation": self.explanation,
        }


@dataclass
class SimplexResult:
    """
    Outcome of a solve.

    Attributes
    ----------
    tableaus : list of np.ndarray
        Phase 2 (or single-phase) tableau history.
    basic_variables : list of list of int
        Basis history matching `tableaus`.
    optimal_solution : np.ndarray
        Decision variable values (empty unless status is optimal).
    optimal_value : float
        Objective value in the problem's own sense (0 unless optimal).
    iterations : int
        Pivots performed in Phase 2 (or the single phase).
    status : str
        "optimal", "unbounded" or "infeasible".
    num_slack, num_artificial : int
        Auxiliary variable counts.
    needs_phase1 : bool
        True if the two-phase method was used.
    steps : list of IterationStep
        Phase 2 pivot records.
    max_iterations_reached : bool
        True if a phase stopped at the iteration cap. The status then
        still reads "optimal" but the tableau may not be.
    phase1_tableaus, phase1_basic_variables, phase1_iterations, phase1_steps
        Phase 1 history, present only for two-phase solves.
    canonical_form_info : CanonicalFormInfo or None
        Phase 2 objective-row reduction, present only when Phase 2 ran
        after Phase 1.
    """
    tableaus: List[np.ndarray]
    basic_variables: List[List[int]]
    optimal_solution: np.ndarray
    optimal_value: float
    iterations: int
    status: str
    num_slack: int
    num_artificial: int
    needs_phase1: bool = False
    steps: List[IterationStep] = field(default_factory=list)
    max_iterations_reached: bool = False
    phase1_tableaus: Optional[List[np.ndarray]] = None
    phase1_basic_variables: Optional[List[List[int]]] = None
    phase1_iterations: Optional[int] = None
    phase1_steps: Optional[List[IterationStep]] = None
    canonical_form_info: Optional[CanonicalFormInfo] = None

    @property
    def is_optimal(self) -> bool:
        return self.status == STATUS_OPTIMAL

    @property
    def total_iterations(self) -> int:
        return self.iterations + (self.phase1_iterations or 0)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-compatible view of the result."""
        data = {
            "status": self.status,
            "optimal_solution": np.asarray(self.optimal_solution).tolist(),
            "optimal_value": self.optimal_value,
            "iterations": self.iterations,
            "num_slack": self.num_slack,
            "num_artificial": self.num_artificial,
            "needs_phase1": self.needs_phase1,
            "max_iterations_reached": self.max_iterations_reached,
            "tableaus": [t.tolist() for t in self.tableaus],
            "basic_variables": [list(b) for b in self.basic_variables],
            "steps": [s.to_dict() for s in self.steps],
        }
        if self.needs_phase1:
            data["phase1_tableaus"] = [t.tolist() for t in self.phase1_tableaus or []]
            data["phase1_basic_variables"] = [list(b) for b in self.phase1_basic_variables or []]
            data["phase1_iterations"] = self.phase1_iterations
            data["phase1_steps"] = [s.to_dict() for s in self.phase1_steps or []]
        if self.canonical_form_info is not None:
            data["canonical_form_info"] = self.canonical_form_info.to_dict()
        return data


def extract_solution(
    tableau: np.ndarray,
    basic_variables: Sequence[int],
    layout: TableauLayout,
) -> np.ndarray:
    """
    Read decision-variable values off a tableau.

    Basic decision variables take their row's RHS; all others are zero.
    """
    solution = np.zeros(layout.num_variables)
    for row, var in enumerate(basic_variables):
        if 0 <= var < layout.num_variables:
            solution[var] = tableau[row, layout.rhs_column]
    return solution


def objective_value(
    tableau: np.ndarray,
    layout: TableauLayout,
    is_maximization: bool,
) -> float:
    """
    Objective value in the problem's own sense.

    The objective row's RHS holds the value of the internal maximization;
    a minimization reports its negation.
    """
    value = float(tableau[layout.f_row, layout.rhs_column])
    return value if is_maximization else -value


def phase1_objective(tableau: np.ndarray, layout: TableauLayout) -> float:
    """RHS of the (-w) row; zero (within tolerance) iff Phase 1 found a feasible point."""
    return float(tableau[layout.objective_row, layout.rhs_column])
