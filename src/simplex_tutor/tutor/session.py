"""
Interactive solving session state.

A `SolverSession` holds everything the tutor knows about one problem: the
current step, the live tableau and basis, the learner's scratch inputs and
the history of accepted tableaus. Step transitions (see `steps.py`) take a
session and return a new one; a session is never changed in place behind
the caller's back.

Snapshots are flat JSON-compatible dicts::

    {"version": "1.0", "problem": {...}, "state": {...}}
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from ..config import MAX_ITERATIONS, SNAPSHOT_VERSION
from ..problem.model import Problem
from ..problem.accounting import VariableCounts, count_variables, normalize_rhs
from ..tableau.layout import TableauLayout
from ..tableau.canonical import CanonicalFormInfo, EliminatedVariable
from ..lp.result import (
    IterationStep,
    STATUS_OPTIMAL,
    extract_solution,
    objective_value,
)
from .inputs import CellInput, encode_cell, decode_cell


class Step(str, Enum):
    """Position of a session in the tutoring sequence."""
    SETUP_SLACK = "setup-slack"
    SETUP_ARTIFICIAL = "setup-artificial"
    SETUP_CONSTRAINTS = "setup-constraints"
    SETUP_PHASE1_OBJECTIVE = "setup-phase1-objective"
    SETUP_PHASE2_OBJECTIVE = "setup-phase2-objective"
    CONVERT_TO_CANONICAL = "convert-to-canonical"
    SELECT_ENTERING = "select-entering"
    CALCULATE_RATIOS = "calculate-ratios"
    SELECT_LEAVING = "select-leaving"
    CALCULATE_PIVOT_ROW = "calculate-pivot-row"
    CALCULATE_OTHER_ROWS = "calculate-other-rows"
    CHECK_OPTIMALITY = "check-optimality"
    COMPLETE = "complete"


# Scratch buffer names
CONSTRAINT_ROW = "constraint_row"
OBJECTIVE_ROW = "objective_row"
CANONICAL_ROW = "canonical_row"
B_VALUES = "b_values"
ENTERING_VALUES = "entering_values"
PIVOT_DIVISOR = "pivot_divisor"
MULTIPLIERS = "multipliers"

BUFFER_NAMES = (
    CONSTRAINT_ROW, OBJECTIVE_ROW, CANONICAL_ROW,
    B_VALUES, ENTERING_VALUES, PIVOT_DIVISOR, MULTIPLIERS,
)


@dataclass(frozen=True)
class TableauSnapshot:
    """One accepted tableau, kept for replay and export."""
    tableau: np.ndarray
    basic_variables: Tuple[int, ...]
    iteration: int
    phase: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tableau": self.tableau.tolist(),
            "basic_variables": list(self.basic_variables),
            "iteration": self.iteration,
            "phase": self.phase,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TableauSnapshot":
        return cls(
            tableau=np.array(data["tableau"], dtype=np.float64),
            basic_variables=tuple(int(b) for b in data["basic_variables"]),
            iteration=int(data["iteration"]),
            phase=int(data["phase"]),
        )


@dataclass
class SolverSession:
    """
    Live state of one tutoring session.

    Attributes
    ----------
    problem : Problem
        The problem being solved, with negative right-hand sides already
        flipped.
    step : Step
        Current step.
    phase : int
        1 while working on the Phase 1 tableau, 2 otherwise (single-phase
        problems are always in phase 2).
    tableau : np.ndarray or None
        Live tableau. None until the constraint rows are accepted; during
        Phase 2 setup it holds the constraint rows (plus the unreduced
        objective row while converting to canonical form).
    basic_variables : list of int
        Basic column of each constraint row.
    iteration : int
        Pivots accepted in the current phase.
    buffers : dict of str to list of CellInput
        Learner scratch inputs, one list per buffer name.
    history : list of TableauSnapshot
        Accepted tableaus, in order, across both phases.
    steps, phase1_steps : list of IterationStep
        Accepted pivots of Phase 2 (or the single phase) and of Phase 1.
    status : str or None
        Set when the session reaches `Step.COMPLETE`.
    """
    problem: Problem
    step: Step = Step.SETUP_SLACK
    phase: int = 2
    asked_phase1_question: bool = False
    tableau: Optional[np.ndarray] = None
    basic_variables: List[int] = field(default_factory=list)
    iteration: int = 0
    phase1_iterations: int = 0
    current_constraint: int = 0
    constraint_rows: List[List[float]] = field(default_factory=list)
    selected_entering: Optional[int] = None
    selected_leaving: Optional[int] = None
    buffers: Dict[str, List[CellInput]] = field(default_factory=dict)
    initial_z_row: Optional[np.ndarray] = None
    canonical_form_info: Optional[CanonicalFormInfo] = None
    history: List[TableauSnapshot] = field(default_factory=list)
    steps: List[IterationStep] = field(default_factory=list)
    phase1_steps: List[IterationStep] = field(default_factory=list)
    status: Optional[str] = None
    feedback: str = ""
    max_iterations: int = MAX_ITERATIONS
    max_iterations_reached: bool = False

    @property
    def counts(self) -> VariableCounts:
        return count_variables(self.problem.constraints)

    @property
    def needs_phase1(self) -> bool:
        return self.counts.needs_phase1

    @property
    def layout(self) -> TableauLayout:
        """Layout of the live tableau for the current phase."""
        counts = self.counts
        if self.phase == 1:
            return TableauLayout.phase1(self.problem.num_variables, counts,
                                        self.problem.num_constraints)
        return TableauLayout.phase2(self.problem.num_variables, counts,
                                    self.problem.num_constraints)

    @property
    def is_complete(self) -> bool:
        return self.step == Step.COMPLETE

    def record(self) -> None:
        """Append the live tableau to the history."""
        self.history.append(TableauSnapshot(
            tableau=np.array(self.tableau, dtype=np.float64),
            basic_variables=tuple(self.basic_variables),
            iteration=self.iteration,
            phase=self.phase,
        ))


def new_session(problem: Problem, max_iterations: int = MAX_ITERATIONS) -> SolverSession:
    """
    Start a session at the first setup step.

    Negative right-hand sides are flipped first so the variable counts the
    learner is asked for match the tableau that gets built.
    """
    problem = normalize_rhs(problem)
    session = SolverSession(
        problem=problem,
        phase=1 if count_variables(problem.constraints).needs_phase1 else 2,
        max_iterations=max_iterations,
    )
    session.feedback = (
        "First, determine how many slack/surplus variables are needed. "
        "Count the inequality constraints (<= and >=)."
    )
    return session


def restart(session: SolverSession) -> SolverSession:
    """Discard all progress and start the same problem over."""
    return new_session(session.problem, session.max_iterations)


def session_solution(session: SolverSession) -> Optional[Tuple[np.ndarray, float]]:
    """
    Solution vector and objective value of a finished session.

    Returns None unless the session completed with an optimal status.
    """
    if not session.is_complete or session.status != STATUS_OPTIMAL:
        return None
    layout = session.layout
    solution = extract_solution(session.tableau, session.basic_variables, layout)
    value = objective_value(session.tableau, layout, session.problem.is_maximization)
    return solution, value


# =============================================================================
# Snapshot / restore
# =============================================================================

def _array_or_none(value) -> Optional[list]:
    return None if value is None else np.asarray(value).tolist()


def _step_from_dict(data: Dict[str, Any]) -> IterationStep:
    return IterationStep(
        iteration=int(data["iteration"]),
        entering_var=int(data["entering_var"]),
        leaving_var=int(data["leaving_var"]),
        pivot_element=float(data["pivot_element"]),
        min_ratio=float(data["min_ratio"]),
        explanation=str(data["explanation"]),
    )


def _canonical_from_dict(data: Dict[str, Any]) -> CanonicalFormInfo:
    return CanonicalFormInfo(
        initial_z_row=np.array(data["initial_z_row"], dtype=np.float64),
        final_z_row=np.array(data["final_z_row"], dtype=np.float64),
        eliminated_vars=[
            EliminatedVariable(int(e["var_index"]), float(e["coefficient"]),
                               int(e["row_index"]))
            for e in data["eliminated_vars"]
        ],
    )


def to_snapshot(session: SolverSession) -> Dict[str, Any]:
    """Serialize a session into a JSON-compatible dict."""
    state = {
        "step": session.step.value,
        "phase": session.phase,
        "asked_phase1_question": session.asked_phase1_question,
        "tableau": _array_or_none(session.tableau),
        "basic_variables": list(session.basic_variables),
        "iteration": session.iteration,
        "phase1_iterations": session.phase1_iterations,
        "current_constraint": session.current_constraint,
        "constraint_rows": [list(r) for r in session.constraint_rows],
        "selected_entering": session.selected_entering,
        "selected_leaving": session.selected_leaving,
        "buffers": {
            name: [encode_cell(c) for c in cells]
            for name, cells in session.buffers.items()
        },
        "initial_z_row": _array_or_none(session.initial_z_row),
        "canonical_form_info": (
            session.canonical_form_info.to_dict()
            if session.canonical_form_info is not None else None
        ),
        "history": [snap.to_dict() for snap in session.history],
        "steps": [s.to_dict() for s in session.steps],
        "phase1_steps": [s.to_dict() for s in session.phase1_steps],
        "status": session.status,
        "feedback": session.feedback,
        "max_iterations": session.max_iterations,
        "max_iterations_reached": session.max_iterations_reached,
    }
    return {
        "version": SNAPSHOT_VERSION,
        "problem": session.problem.to_dict(),
        "state": state,
    }


def from_snapshot(data: Dict[str, Any]) -> SolverSession:
    """
    Restore a session written by `to_snapshot`.

    Raises
    ------
    ValueError
        If the version does not match, the problem is malformed, or a
        required field is missing.
    """
    version = data.get("version")
    if version != SNAPSHOT_VERSION:
        raise ValueError(
            f"Unsupported snapshot version {version!r} (expected {SNAPSHOT_VERSION!r})"
        )
    try:
        problem = Problem.from_dict(data["problem"])
        state = data["state"]
        problem.validate()

        tableau = state.get("tableau")
        initial_z_row = state.get("initial_z_row")
        canonical = state.get("canonical_form_info")

        return SolverSession(
            problem=problem,
            step=Step(state["step"]),
            phase=int(state["phase"]),
            asked_phase1_question=bool(state.get("asked_phase1_question", False)),
            tableau=None if tableau is None else np.array(tableau, dtype=np.float64),
            basic_variables=[int(b) for b in state.get("basic_variables", [])],
            iteration=int(state.get("iteration", 0)),
            phase1_iterations=int(state.get("phase1_iterations", 0)),
            current_constraint=int(state.get("current_constraint", 0)),
            constraint_rows=[
                [float(v) for v in row] for row in state.get("constraint_rows", [])
            ],
            selected_entering=state.get("selected_entering"),
            selected_leaving=state.get("selected_leaving"),
            buffers={
                name: [decode_cell(c) for c in cells]
                for name, cells in state.get("buffers", {}).items()
            },
            initial_z_row=(
                None if initial_z_row is None
                else np.array(initial_z_row, dtype=np.float64)
            ),
            canonical_form_info=(
                None if canonical is None else _canonical_from_dict(canonical)
            ),
            history=[TableauSnapshot.from_dict(s) for s in state.get("history", [])],
            steps=[_step_from_dict(s) for s in state.get("steps", [])],
            phase1_steps=[_step_from_dict(s) for s in state.get("phase1_steps", [])],
            status=state.get("status"),
            feedback=state.get("feedback", ""),
            max_iterations=int(state.get("max_iterations", MAX_ITERATIONS)),
            max_iterations_reached=bool(state.get("max_iterations_reached", False)),
        )
    except KeyError as exc:
        raise ValueError(f"Snapshot is missing field {exc}") from exc
