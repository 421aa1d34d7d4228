"""
Step transitions of the interactive tutor.

Each step asks the learner for one quantity. `submit` compares the answer
with the value the tableau engine computes for the same state: a match
advances the session (updating the tableau exactly as `solve` would), a
mismatch leaves the step unchanged and explains what to check.

Sequence::

    setup-slack -> setup-artificial -> setup-constraints (one per row)
      -> setup-phase1-objective (two-phase only)
      -> [Phase 1 pivot loop] -> setup-phase2-objective
      -> convert-to-canonical (only if eliminations are needed)
      -> select-entering -> calculate-ratios -> select-leaving
      -> calculate-pivot-row -> calculate-other-rows -> check-optimality
      -> (loop) -> complete

Learner input never raises. Bad answers come back as
`StepOutcome(accepted=False, feedback=...)`.
"""

import copy
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

import numpy as np

from ..config import (
    ANSWER_TOLERANCE,
    FEASIBILITY_TOLERANCE,
    PIVOT_TOLERANCE,
    format_number,
)
from ..problem.model import Operator
from ..tableau.builder import (
    build_constraint_rows,
    build_objective_row,
    build_phase1_objective_row,
    build_phase1_tableau,
)
from ..tableau.canonical import reduce_to_canonical
from ..tableau.labels import column_headers, objective_row_name, row_name, variable_name
from ..tableau.pivot import (
    eligible_rows,
    eliminate_column,
    is_optimal,
    negative_columns,
    normalize_pivot_row,
    row_multipliers,
    select_entering,
    select_leaving,
    update_basis,
)
from ..lp.phases import describe_pivot, resolve_degenerate_basis, strip_artificial
from ..lp.result import (
    IterationStep,
    STATUS_INFEASIBLE,
    STATUS_OPTIMAL,
    STATUS_UNBOUNDED,
    phase1_objective,
)
from .inputs import (
    CellInput,
    blank_row,
    coerce_cell,
    is_blank,
    parse_cell,
    to_number,
    to_numbers,
    to_optional_number,
)
from .session import (
    Step,
    SolverSession,
    BUFFER_NAMES,
    CONSTRAINT_ROW,
    OBJECTIVE_ROW,
    CANONICAL_ROW,
    B_VALUES,
    ENTERING_VALUES,
    PIVOT_DIVISOR,
    MULTIPLIERS,
)


@dataclass
class StepOutcome:
    """Result of one submission."""
    session: SolverSession
    accepted: bool
    feedback: str


def _reject(session: SolverSession, message: str) -> StepOutcome:
    session.feedback = message
    return StepOutcome(session=session, accepted=False, feedback=message)


def _accept(session: SolverSession, message: str) -> StepOutcome:
    session.feedback = message
    return StepOutcome(session=session, accepted=True, feedback=message)


# =============================================================================
# Answer coercion
# =============================================================================

def _as_int(answer: Any) -> Optional[int]:
    if isinstance(answer, bool) or answer is None:
        return None
    if isinstance(answer, (int, np.integer)):
        return int(answer)
    if isinstance(answer, (float, np.floating)):
        return int(answer) if float(answer).is_integer() else None
    if isinstance(answer, str):
        text = answer.strip()
        if text.lstrip("+-").isdigit():
            return int(text)
    return None


_YES = {"yes", "y", "true", "t", "1"}
_NO = {"no", "n", "false", "f", "0"}


def _as_bool(answer: Any) -> Optional[bool]:
    if isinstance(answer, (bool, np.bool_)):
        return bool(answer)
    if isinstance(answer, str):
        text = answer.strip().lower()
        if text in _YES:
            return True
        if text in _NO:
            return False
    return None


def _as_column(answer: Any, session: SolverSession) -> Optional[int]:
    """Column index from an int or a variable name such as "x2"."""
    if isinstance(answer, str):
        headers = column_headers(session.layout)
        name = answer.strip()
        if name in headers:
            return headers.index(name)
    return _as_int(answer)


def _as_number(answer: Any) -> Optional[float]:
    try:
        return to_optional_number(coerce_cell(answer))
    except (TypeError, ValueError):
        return None


def _row_answer(session: SolverSession, buffer: str, answer: Any,
                length: int) -> Optional[List[CellInput]]:
    """
    Cells for a row-valued step: the submitted sequence if given (also
    written into the buffer), else the buffer contents.
    """
    if answer is not None:
        try:
            cells = [coerce_cell(v) for v in answer]
        except (TypeError, ValueError):
            return None
        if len(cells) == length:
            session.buffers[buffer] = list(cells)
    else:
        cells = list(session.buffers.get(buffer, blank_row(length)))
    if len(cells) != length:
        return None
    return cells


def _matches(cells: Sequence[CellInput], expected: np.ndarray) -> bool:
    values = np.array(to_numbers(cells), dtype=np.float64)
    return bool(np.all(np.abs(values - np.asarray(expected)) <= ANSWER_TOLERANCE))


# =============================================================================
# Shared transitions
# =============================================================================

def _begin_iterations(session: SolverSession, message: str) -> StepOutcome:
    """Enter the pivot loop on the live tableau."""
    session.iteration = 0
    if is_optimal(session.tableau, session.layout):
        session.step = Step.CHECK_OPTIMALITY
        return _accept(session, message + " Now decide whether the tableau is already optimal.")
    session.step = Step.SELECT_ENTERING
    return _accept(session, message + " Now select the entering variable.")


def _enter_phase2_setup(session: SolverSession, message: str) -> StepOutcome:
    """Strip the artificial columns and ask for the Phase 2 objective row."""
    layout = session.layout
    tableau, basis = resolve_degenerate_basis(session.tableau, session.basic_variables, layout)
    session.tableau = strip_artificial(tableau, layout)
    session.basic_variables = basis
    session.phase1_iterations = session.iteration
    session.phase1_steps = session.steps
    session.steps = []
    session.phase = 2
    session.iteration = 0
    session.selected_entering = None
    session.selected_leaving = None
    session.step = Step.SETUP_PHASE2_OBJECTIVE
    session.buffers[OBJECTIVE_ROW] = blank_row(session.layout.num_columns)
    return _accept(session, message + " Now write the objective row for Phase 2.")


def _complete(session: SolverSession, status: str, message: str) -> StepOutcome:
    session.status = status
    session.step = Step.COMPLETE
    return _accept(session, message)


def _end_phase1(session: SolverSession) -> StepOutcome:
    """Phase 1 has stopped: decide feasibility."""
    w = phase1_objective(session.tableau, session.layout)
    if abs(w) > FEASIBILITY_TOLERANCE:
        return _complete(
            session, STATUS_INFEASIBLE,
            f"Phase 1 complete with w = {format_number(-w)} > 0. "
            f"No feasible solution exists: the problem is INFEASIBLE.",
        )
    return _enter_phase2_setup(
        session,
        "Phase 1 complete! A feasible solution with w = 0 was found and the "
        "artificial variables are eliminated.",
    )


# =============================================================================
# Setup steps
# =============================================================================

def _submit_slack(session: SolverSession, answer: Any) -> StepOutcome:
    count = _as_int(answer)
    expected = session.counts.num_slack
    if count is None:
        return _reject(session, "Enter the number of slack/surplus variables as a whole number.")
    if count != expected:
        inequalities = sum(1 for c in session.problem.constraints if c.operator is not Operator.EQ)
        return _reject(
            session,
            f"Not quite. There are {inequalities} inequality constraint(s). "
            f"Each needs one slack or surplus variable.",
        )
    session.step = Step.SETUP_ARTIFICIAL
    return _accept(
        session,
        f"Correct! We need {expected} slack/surplus variable(s). "
        f"Is the initial basic solution infeasible, so that Phase 1 is needed?",
    )


def _start_constraints(session: SolverSession, message: str) -> StepOutcome:
    session.step = Step.SETUP_CONSTRAINTS
    session.current_constraint = 0
    session.constraint_rows = []
    session.buffers[CONSTRAINT_ROW] = blank_row(_constraint_width(session))
    return _accept(session, message + " Now write constraint row 1.")


def _constraint_width(session: SolverSession) -> int:
    counts = session.counts
    n_art = counts.num_artificial if session.needs_phase1 else 0
    return session.problem.num_variables + counts.num_slack + n_art + 1


def _submit_artificial(session: SolverSession, answer: Any) -> StepOutcome:
    counts = session.counts
    if not session.asked_phase1_question:
        says_yes = _as_bool(answer)
        if says_yes is None:
            return _reject(session, "Answer yes or no: is Phase 1 needed?")
        if says_yes != counts.needs_phase1:
            if counts.needs_phase1:
                return _reject(
                    session,
                    "Not quite. For >= constraints the surplus variable would be "
                    "negative in the initial basic solution, and = constraints have "
                    "no slack at all. The initial basic solution is NOT feasible.",
                )
            return _reject(
                session,
                "Not quite. All constraints are <=, so the slack variables form a "
                "feasible starting basis. Phase 1 is not needed.",
            )
        if counts.needs_phase1:
            session.asked_phase1_question = True
            return _accept(
                session,
                "Correct! The initial basic solution is NOT feasible and Phase 1 "
                "is needed. How many artificial variables are required?",
            )
        return _start_constraints(
            session,
            "Correct! The initial basic solution is feasible, so we can use the "
            "Simplex method directly.",
        )

    count = _as_int(answer)
    if count is None:
        return _reject(session, "Enter the number of artificial variables as a whole number.")
    if count != counts.num_artificial:
        return _reject(
            session,
            "Not quite. Count the constraints with >= (surplus plus artificial) "
            "and with = (artificial only).",
        )
    return _start_constraints(
        session, f"Correct! We need {counts.num_artificial} artificial variable(s)."
    )


def _submit_constraint_row(session: SolverSession, answer: Any) -> StepOutcome:
    width = _constraint_width(session)
    cells = _row_answer(session, CONSTRAINT_ROW, answer, width)
    if cells is None:
        return _reject(session, f"Enter exactly {width} values for this row.")

    rows, _ = build_constraint_rows(
        session.problem, session.counts, include_artificial=session.needs_phase1
    )
    i = session.current_constraint
    if not _matches(cells, rows[i]):
        return _reject(
            session,
            "This row is not quite right. Check the slack/surplus"
            + (" and artificial" if session.needs_phase1 else "")
            + " variable placement and the b value.",
        )

    session.constraint_rows.append(rows[i].tolist())
    m = session.problem.num_constraints
    if i + 1 < m:
        session.current_constraint = i + 1
        session.buffers[CONSTRAINT_ROW] = blank_row(width)
        return _accept(session, f"Correct! Now write constraint row {i + 2} of {m}.")

    session.buffers.pop(CONSTRAINT_ROW, None)
    if session.needs_phase1:
        session.step = Step.SETUP_PHASE1_OBJECTIVE
        session.buffers[OBJECTIVE_ROW] = blank_row(width)
        return _accept(
            session,
            "All constraint rows are correct! Now write the Phase 1 objective row "
            "(minimize w = sum of the artificial variables).",
        )

    session.tableau = np.array(session.constraint_rows, dtype=np.float64)
    session.basic_variables = [
        session.problem.num_variables + k for k in range(session.counts.num_slack)
    ]
    session.step = Step.SETUP_PHASE2_OBJECTIVE
    session.buffers[OBJECTIVE_ROW] = blank_row(width)
    return _accept(session, "All constraint rows are correct! Now write the objective row.")


def _submit_phase1_objective(session: SolverSession, answer: Any) -> StepOutcome:
    expected = build_phase1_objective_row(session.problem.num_variables, session.counts)
    cells = _row_answer(session, OBJECTIVE_ROW, answer, expected.shape[0])
    if cells is None:
        return _reject(session, f"Enter exactly {expected.shape[0]} values for this row.")
    if not _matches(cells, expected):
        return _reject(
            session,
            "Not correct. Put 1 under each artificial variable and 0 everywhere else.",
        )

    tableau, basis, _ = build_phase1_tableau(session.problem)
    session.tableau = tableau
    session.basic_variables = basis
    session.phase = 1
    session.iteration = 0
    session.buffers.pop(OBJECTIVE_ROW, None)
    session.record()

    w = phase1_objective(tableau, session.layout)
    if abs(w) <= PIVOT_TOLERANCE:
        return _enter_phase2_setup(
            session,
            "The Phase 1 tableau is complete, and w = 0 already: every artificial "
            "variable is zero in the initial basic solution, so Phase 1 pivoting "
            "is not needed.",
        )
    return _begin_iterations(
        session,
        f"Phase 1 tableau ready with (-f) and (-w) rows in canonical form. "
        f"The initial solution has w = {format_number(-w)} > 0, so we minimize w.",
    )


def _submit_phase2_objective(session: SolverSession, answer: Any) -> StepOutcome:
    layout = session.layout
    expected = build_objective_row(session.problem, layout.num_columns)
    cells = _row_answer(session, OBJECTIVE_ROW, answer, expected.shape[0])
    if cells is None:
        return _reject(session, f"Enter exactly {expected.shape[0]} values for this row.")
    if not _matches(cells, expected):
        return _reject(
            session,
            "Not correct. Write the negated objective coefficients (after turning a "
            "minimization into a maximization), 0 for every slack variable, and b = 0.",
        )

    session.buffers.pop(OBJECTIVE_ROW, None)
    rows = session.tableau[:layout.num_constraints]
    info = reduce_to_canonical(expected, rows, session.basic_variables)
    session.tableau = np.vstack([rows, expected])

    if info.needs_reduction:
        session.initial_z_row = expected
        session.step = Step.CONVERT_TO_CANONICAL
        session.buffers[CANONICAL_ROW] = blank_row(expected.shape[0])
        return _accept(
            session,
            "Correct! Some basic variables have nonzero coefficients in the Z row. "
            "Eliminate them to put the row in canonical form.",
        )

    session.canonical_form_info = info if session.needs_phase1 else None
    session.record()
    return _begin_iterations(session, "Correct! The initial tableau is set up.")


def _submit_canonical(session: SolverSession, answer: Any) -> StepOutcome:
    layout = session.layout
    rows = session.tableau[:layout.num_constraints]
    info = reduce_to_canonical(session.initial_z_row, rows, session.basic_variables)
    cells = _row_answer(session, CANONICAL_ROW, answer, info.final_z_row.shape[0])
    if cells is None:
        return _reject(session, f"Enter exactly {info.final_z_row.shape[0]} values for this row.")
    if not _matches(cells, info.final_z_row):
        return _reject(
            session,
            "Not quite right. For each basic variable with a nonzero coefficient in "
            "the Z row apply Z_new = Z_old - (coefficient) x (its constraint row).",
        )

    session.buffers.pop(CANONICAL_ROW, None)
    session.tableau = np.vstack([rows, info.final_z_row])
    session.canonical_form_info = info
    session.record()
    return _begin_iterations(
        session,
        "Excellent! The Z row is in canonical form: every basic variable has a 0 coefficient.",
    )


# =============================================================================
# Pivot loop steps
# =============================================================================

def _submit_entering(session: SolverSession, answer: Any) -> StepOutcome:
    layout = session.layout
    T = session.tableau
    column = _as_column(answer, session)
    if column is None or not 0 <= column < layout.num_structural:
        return _reject(session, "Select one of the variable columns.")

    row_label = objective_row_name(layout)
    if T[layout.objective_row, column] >= -PIVOT_TOLERANCE:
        return _reject(
            session,
            f"This column does not have a negative value in the {row_label}. "
            f"Look for the most negative value.",
        )
    if column != select_entering(T, layout):
        return _reject(
            session,
            "Not quite! This value is negative but not the most negative one.",
        )

    session.selected_entering = column
    if not eligible_rows(T, column, layout):
        return _complete(
            session, STATUS_UNBOUNDED,
            f"{variable_name(column, layout)} can increase without limit: no row "
            f"has a positive entry in its column. The problem is UNBOUNDED.",
        )

    m = layout.num_constraints
    session.step = Step.CALCULATE_RATIOS
    session.buffers[B_VALUES] = blank_row(m)
    session.buffers[ENTERING_VALUES] = blank_row(m)
    return _accept(
        session,
        f"Correct! {variable_name(column, layout)} enters the basis (most negative "
        f"in the {row_label}). Now enter b and the entering-column value for each "
        f"row with a positive entry; leave the other rows blank.",
    )


def _submit_ratios(session: SolverSession, answer: Any) -> StepOutcome:
    layout = session.layout
    T = session.tableau
    m = layout.num_constraints
    entering = session.selected_entering

    if answer is not None:
        try:
            b_answer, entering_answer = answer
        except (TypeError, ValueError):
            return _reject(session, "Submit the b values and the entering-column values.")
    else:
        b_answer = entering_answer = None
    b_cells = _row_answer(session, B_VALUES, b_answer, m)
    e_cells = _row_answer(session, ENTERING_VALUES, entering_answer, m)
    if b_cells is None or e_cells is None:
        return _reject(session, f"Enter one b value and one entering value for each of the {m} rows.")

    eligible = set(eligible_rows(T, entering, layout))
    wrong = []
    for i in range(m):
        if i in eligible:
            b = to_optional_number(b_cells[i])
            a = to_optional_number(e_cells[i])
            if (b is None or a is None
                    or abs(b - T[i, layout.rhs_column]) > ANSWER_TOLERANCE
                    or abs(a - T[i, entering]) > ANSWER_TOLERANCE):
                wrong.append(i)
        elif not (is_blank(b_cells[i]) and is_blank(e_cells[i])):
            wrong.append(i)

    if wrong:
        rows = ", ".join(str(i + 1) for i in wrong)
        return _reject(
            session,
            f"The values in row(s) {rows} are not correct. Enter b and the "
            f"entering-column value for rows with a positive entry, and leave "
            f"rows with a non-positive entry blank.",
        )

    session.step = Step.SELECT_LEAVING
    return _accept(
        session,
        "Correct! Now select the row with the minimum ratio b / (entering value).",
    )


def _submit_leaving(session: SolverSession, answer: Any) -> StepOutcome:
    layout = session.layout
    T = session.tableau
    entering = session.selected_entering
    row = _as_int(answer)
    if row is None or not 0 <= row < layout.num_constraints:
        return _reject(session, "Select one of the constraint rows.")
    if T[row, entering] <= PIVOT_TOLERANCE:
        return _reject(
            session,
            "This row has a non-positive value in the entering column. The ratio "
            "test only uses rows with a positive value.",
        )

    leaving, min_ratio = select_leaving(T, entering, layout)
    if row != leaving:
        ratio = T[row, layout.rhs_column] / T[row, entering]
        return _reject(
            session,
            f"The ratio for this row is {ratio:.3f}, but the minimum ratio is "
            f"{min_ratio:.3f}. Try again!",
        )

    session.selected_leaving = row
    session.step = Step.CALCULATE_PIVOT_ROW
    session.buffers[PIVOT_DIVISOR] = blank_row(1)
    return _accept(
        session,
        f"Perfect! {variable_name(session.basic_variables[row], layout)} leaves the "
        f"basis. Now give the number the pivot row is divided by.",
    )


def _submit_pivot_row(session: SolverSession, answer: Any) -> StepOutcome:
    row, column = session.selected_leaving, session.selected_entering
    pivot_element = session.tableau[row, column]
    if answer is not None:
        divisor = _as_number(answer)
        if divisor is not None:
            session.buffers[PIVOT_DIVISOR] = [coerce_cell(answer)]
    else:
        divisor = to_number(session.buffers.get(PIVOT_DIVISOR, blank_row(1))[0])
    if divisor is None or abs(divisor - pivot_element) > ANSWER_TOLERANCE:
        return _reject(
            session,
            f"Not quite right. Divide by the pivot element at Row {row + 1}, "
            f"Column {column + 1}, which is {format_number(pivot_element)}.",
        )

    session.tableau = normalize_pivot_row(session.tableau, row, column)
    session.buffers.pop(PIVOT_DIVISOR, None)
    session.step = Step.CALCULATE_OTHER_ROWS
    session.buffers[MULTIPLIERS] = blank_row(session.tableau.shape[0])
    return _accept(
        session,
        "Correct! The pivot row now has a 1 in the pivot column. Now give the "
        "multiplier for every other row.",
    )


def _submit_other_rows(session: SolverSession, answer: Any) -> StepOutcome:
    layout = session.layout
    T = session.tableau
    row, column = session.selected_leaving, session.selected_entering
    cells = _row_answer(session, MULTIPLIERS, answer, T.shape[0])
    if cells is None:
        return _reject(session, f"Enter one multiplier for each of the {T.shape[0]} rows.")

    expected = row_multipliers(T, row, column)
    for i in range(T.shape[0]):
        if i == row:
            continue
        given = to_number(cells[i])
        if abs(given - expected[i]) > ANSWER_TOLERANCE:
            return _reject(
                session,
                f"Not quite right. The multiplier is the row's value in the entering "
                f"column. {row_name(i, layout)}: expected "
                f"{format_number(expected[i])}, got {format_number(given)}.",
            )

    # history[-1] is the tableau before this pivot; the normalized pivot row
    # now holds the winning ratio in its RHS
    pivot_element = float(session.history[-1].tableau[row, column])
    leaving_var = session.basic_variables[row]
    min_ratio = float(T[row, layout.rhs_column])

    session.tableau = eliminate_column(T, row, column)
    session.basic_variables = update_basis(session.basic_variables, row, column)
    session.iteration += 1
    session.steps.append(IterationStep(
        iteration=session.iteration,
        entering_var=column,
        leaving_var=leaving_var,
        pivot_element=pivot_element,
        min_ratio=min_ratio,
        explanation=describe_pivot(row, column, min_ratio,
                                   variable_name(column, layout),
                                   variable_name(leaving_var, layout)),
    ))
    session.selected_entering = None
    session.selected_leaving = None
    session.buffers.pop(MULTIPLIERS, None)
    session.buffers.pop(B_VALUES, None)
    session.buffers.pop(ENTERING_VALUES, None)
    session.record()

    session.step = Step.CHECK_OPTIMALITY
    return _accept(
        session,
        f"Perfect! The new tableau is calculated. Now examine the "
        f"{objective_row_name(layout)} and decide whether the solution is optimal.",
    )


def _submit_optimality(session: SolverSession, answer: Any) -> StepOutcome:
    layout = session.layout
    T = session.tableau
    optimal = is_optimal(T, layout)
    row_label = objective_row_name(layout)

    # Phase 1 ending is structural, not a judgment to quiz
    if layout.is_phase1 and optimal:
        return _end_phase1(session)

    thinks_optimal = _as_bool(answer)
    if thinks_optimal is None:
        return _reject(session, "Answer yes or no: is the current solution optimal?")

    if thinks_optimal != optimal:
        if thinks_optimal:
            names = ", ".join(variable_name(j, layout) for j in negative_columns(T, layout))
            return _reject(
                session,
                f"Not quite. The {row_label} still has negative values in column(s) "
                f"{names}. The solution is optimal only when all of them are non-negative.",
            )
        return _reject(
            session,
            f"Actually, this solution IS optimal. Every value in the {row_label} is "
            f"non-negative, so the objective cannot improve further.",
        )

    if optimal:
        return _complete(
            session, STATUS_OPTIMAL,
            f"Correct! The solution is optimal: all values in the {row_label} are non-negative.",
        )

    if session.iteration >= session.max_iterations:
        session.max_iterations_reached = True
        if layout.is_phase1:
            return _end_phase1(session)
        return _complete(
            session, STATUS_OPTIMAL,
            f"The iteration limit ({session.max_iterations}) is reached. Stopping "
            f"here; this tableau may not be optimal.",
        )

    session.step = Step.SELECT_ENTERING
    return _accept(
        session,
        f"Correct! There are still negative values in the {row_label}. "
        f"Select the next entering variable.",
    )


_HANDLERS = {
    Step.SETUP_SLACK: _submit_slack,
    Step.SETUP_ARTIFICIAL: _submit_artificial,
    Step.SETUP_CONSTRAINTS: _submit_constraint_row,
    Step.SETUP_PHASE1_OBJECTIVE: _submit_phase1_objective,
    Step.SETUP_PHASE2_OBJECTIVE: _submit_phase2_objective,
    Step.CONVERT_TO_CANONICAL: _submit_canonical,
    Step.SELECT_ENTERING: _submit_entering,
    Step.CALCULATE_RATIOS: _submit_ratios,
    Step.SELECT_LEAVING: _submit_leaving,
    Step.CALCULATE_PIVOT_ROW: _submit_pivot_row,
    Step.CALCULATE_OTHER_ROWS: _submit_other_rows,
    Step.CHECK_OPTIMALITY: _submit_optimality,
}


# =============================================================================
# Public API
# =============================================================================

def submit(session: SolverSession, answer: Any = None) -> StepOutcome:
    """
    Submit an answer for the current step.

    Parameters
    ----------
    session : SolverSession
        Current state. Not modified.
    answer : optional
        Depends on the step:

        - setup-slack, setup-artificial count: an int
        - setup-artificial question, check-optimality: a bool (or "yes"/"no")
        - row steps (constraints, objectives, canonical form, multipliers):
          a sequence of cell values
        - calculate-ratios: a pair (b_values, entering_values)
        - select-entering: a column index or name ("x2")
        - select-leaving: a row index (0-based)
        - calculate-pivot-row: a number

        Row-valued steps read the matching scratch buffer when `answer`
        is None.

    Returns
    -------
    StepOutcome
        With the new session; `accepted` is False if the answer was wrong
        (the step is unchanged and `feedback` explains what to check).
    """
    session = copy.deepcopy(session)
    if session.step == Step.COMPLETE:
        return _reject(session, "The problem is already solved. Restart to try again.")
    return _HANDLERS[session.step](session, answer)


def enter_cell(session: SolverSession, buffer: str, index: int, text: str) -> SolverSession:
    """
    Record a keystroke in a scratch buffer.

    Partial numbers ("-", ".", "-.", "3.") are kept as typed; text that
    cannot start a number leaves the cell unchanged.

    Raises
    ------
    KeyError
        If `buffer` is not a scratch buffer of the current step.
    IndexError
        If `index` is out of range.
    """
    if buffer not in BUFFER_NAMES or buffer not in session.buffers:
        raise KeyError(f"No scratch buffer {buffer!r} in step {session.step.value!r}")
    session = copy.deepcopy(session)
    cells = list(session.buffers[buffer])
    cells[index] = parse_cell(text, cells[index])
    session.buffers[buffer] = cells
    return session


def hint(session: SolverSession) -> str:
    """Guidance text for the current step."""
    problem = session.problem
    step = session.step
    layout = session.layout

    if step == Step.SETUP_SLACK:
        return ("Each <= constraint gets a slack variable and each >= constraint a "
                "surplus variable. = constraints get neither.")
    if step == Step.SETUP_ARTIFICIAL:
        ge = sum(1 for c in problem.constraints if c.operator is Operator.GE)
        eq = sum(1 for c in problem.constraints if c.operator is Operator.EQ)
        if not session.asked_phase1_question:
            return (f"Consider the initial basic solution. Slack variables of <= rows "
                    f"are non-negative, but {ge + eq} constraint(s) with >= or = have "
                    f"no slack that can start in the basis. If any exist, Phase 1 is needed.")
        return (f"{ge} constraint(s) with >= need an artificial variable, and "
                f"{eq} constraint(s) with = need one too. Total: {ge + eq}.")
    if step == Step.SETUP_CONSTRAINTS:
        return ("Copy the coefficients, put +1 under this row's slack (or -1 under "
                "its surplus), 1 under its artificial variable if it has one, 0 "
                "elsewhere, and b in the last column.")
    if step == Step.SETUP_PHASE1_OBJECTIVE:
        return "Minimize w = sum of artificial variables: 1 under each artificial, 0 elsewhere."
    if step == Step.SETUP_PHASE2_OBJECTIVE:
        c = problem.objective_coefficients if problem.is_maximization else [
            -v for v in problem.objective_coefficients]
        entries = ", ".join(f"x{i + 1}: {format_number(-v)}" for i, v in enumerate(c))
        return (f"Write the negated objective coefficients: {entries}. Every slack "
                f"variable and b get 0.")
    if step == Step.CONVERT_TO_CANONICAL:
        z = session.initial_z_row
        todo = [
            f"{variable_name(b, layout)} (coefficient {format_number(z[b])} in Row {i + 1})"
            for i, b in enumerate(session.basic_variables)
            if 0 <= b < z.shape[0] - 1 and abs(z[b]) > PIVOT_TOLERANCE
        ]
        return ("Basic variables with nonzero Z-row coefficients: " + ", ".join(todo)
                + ". For each one apply Z_new = Z_old - (coefficient) x (constraint row).")
    if step == Step.SELECT_ENTERING:
        return (f"Look for the most negative value in the {objective_row_name(layout)}; "
                f"that variable joins the basis.")
    if step == Step.CALCULATE_RATIOS:
        return ("For each row with a positive value in the entering column, enter b "
                "and that value. Leave rows with zero or negative values blank.")
    if step == Step.SELECT_LEAVING:
        _, min_ratio = select_leaving(session.tableau, session.selected_entering, layout)
        return (f"Compute b / (entering column value) for each eligible row. "
                f"The minimum ratio is {min_ratio:.3f}.")
    if step == Step.CALCULATE_PIVOT_ROW:
        row, column = session.selected_leaving, session.selected_entering
        return (f"The pivot element is in Row {row + 1}, Column {column + 1} and "
                f"equals {format_number(session.tableau[row, column])}. Divide the "
                f"pivot row by it.")
    if step == Step.CALCULATE_OTHER_ROWS:
        example = 1 if session.selected_leaving == 0 else 0
        factor = session.tableau[example, session.selected_entering]
        return (f"Each row's multiplier is its value in the entering column; "
                f"{row_name(example, layout)} has {format_number(factor)}. "
                f"New row = old row - multiplier x new pivot row.")
    if step == Step.CHECK_OPTIMALITY:
        count = len(negative_columns(session.tableau, layout))
        text = (f"The solution is optimal when every value of the "
                f"{objective_row_name(layout)} (excluding b) is non-negative. "
                f"There are currently {count} negative value(s).")
        if layout.is_phase1:
            text += " In Phase 1 we are driving every artificial variable to 0 (w = 0)."
        return text
    return "The problem is solved."
