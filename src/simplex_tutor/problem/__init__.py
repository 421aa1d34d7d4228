"""
Problem model and variable accounting.

Implements:
- Immutable `Problem` / `Constraint` records and text parsing
- Slack/surplus/artificial variable counting
- Right-hand-side normalization
"""

from .model import (
    Operator,
    Constraint,
    Problem,
    parse_coefficients,
    parse_constraint,
    parse_problem,
    default_problem,
)

from .accounting import (
    VariableCounts,
    count_variables,
    needs_phase1,
    slack_column_offsets,
    artificial_column_offsets,
    normalize_rhs,
)

__all__ = [
    # Model
    "Operator",
    "Constraint",
    "Problem",
    "parse_coefficients",
    "parse_constraint",
    "parse_problem",
    "default_problem",
    # Accounting
    "VariableCounts",
    "count_variables",
    "needs_phase1",
    "slack_column_offsets",
    "artificial_column_offsets",
    "normalize_rhs",
]
