"""
Simplex tableau engine.

Implements:
- Tableau layout bookkeeping (Phase 1 vs Phase 2 shapes)
- Initial tableau construction (single-phase and two-phase)
- Entering/leaving selection, ratio test and pivoting
- Canonical form reduction of objective rows
- Row/column naming and text rendering
"""

from .layout import TableauLayout

from .builder import (
    internal_objective,
    build_constraint_rows,
    build_objective_row,
    build_phase1_objective_row,
    build_standard_tableau,
    build_phase1_tableau,
    build_initial_tableau,
    insert_w_column,
)

from .pivot import (
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

from .canonical import (
    EliminatedVariable,
    CanonicalFormInfo,
    reduce_to_canonical,
    is_canonical,
)

from .labels import (
    variable_name,
    column_headers,
    row_labels,
    row_name,
    objective_row_name,
    format_tableau,
)

__all__ = [
    "TableauLayout",
    # Builder
    "internal_objective",
    "build_constraint_rows",
    "build_objective_row",
    "build_phase1_objective_row",
    "build_standard_tableau",
    "build_phase1_tableau",
    "build_initial_tableau",
    "insert_w_column",
    # Pivot
    "PivotChoice",
    "select_entering",
    "negative_columns",
    "is_optimal",
    "compute_ratios",
    "eligible_rows",
    "select_leaving",
    "choose_pivot",
    "normalize_pivot_row",
    "row_multipliers",
    "eliminate_column",
    "pivot",
    "update_basis",
    # Canonical form
    "EliminatedVariable",
    "CanonicalFormInfo",
    "reduce_to_canonical",
    "is_canonical",
    # Labels
    "variable_name",
    "column_headers",
    "row_labels",
    "row_name",
    "objective_row_name",
    "format_tableau",
]
