"""
Interactive step-by-step Simplex tutor.

Implements:
- Learner cell values (blank / partial / numeric)
- The `SolverSession` state record with snapshot and restore
- Step transitions that check each answer against the tableau engine
"""

from .inputs import (
    CellInput,
    Empty,
    Partial,
    Value,
    EMPTY,
    parse_cell,
    coerce_cell,
    to_number,
    to_optional_number,
    is_blank,
    blank_row,
    encode_cell,
    decode_cell,
)

from .session import (
    Step,
    TableauSnapshot,
    SolverSession,
    BUFFER_NAMES,
    CONSTRAINT_ROW,
    OBJECTIVE_ROW,
    CANONICAL_ROW,
    B_VALUES,
    ENTERING_VALUES,
    PIVOT_DIVISOR,
    MULTIPLIERS,
    new_session,
    restart,
    session_solution,
    to_snapshot,
    from_snapshot,
)

from .steps import (
    StepOutcome,
    submit,
    enter_cell,
    hint,
)

__all__ = [
    # Inputs
    "CellInput",
    "Empty",
    "Partial",
    "Value",
    "EMPTY",
    "parse_cell",
    "coerce_cell",
    "to_number",
    "to_optional_number",
    "is_blank",
    "blank_row",
    "encode_cell",
    "decode_cell",
    # Session
    "Step",
    "TableauSnapshot",
    "SolverSession",
    "BUFFER_NAMES",
    "CONSTRAINT_ROW",
    "OBJECTIVE_ROW",
    "CANONICAL_ROW",
    "B_VALUES",
    "ENTERING_VALUES",
    "PIVOT_DIVISOR",
    "MULTIPLIERS",
    "new_session",
    "restart",
    "session_solution",
    "to_snapshot",
    "from_snapshot",
    # Steps
    "StepOutcome",
    "submit",
    "enter_cell",
    "hint",
]
