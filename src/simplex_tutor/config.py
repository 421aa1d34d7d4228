"""
Global configuration and numerical constants for the Simplex engine.

Every tolerance used by the tableau engine and by the interactive tutor
lives here so that both consumers agree on what counts as "zero",
"negative" and "equal".
"""

from dataclasses import dataclass


# =============================================================================
# Numerical Tolerances
# =============================================================================

PIVOT_TOLERANCE = 1e-10
"""Threshold for sign and zero tests (entering column, ratio test, eliminations)."""

FEASIBILITY_TOLERANCE = 1e-6
"""Phase 1 optimum |w| above this value means the problem is infeasible."""

ANSWER_TOLERANCE = 1e-6
"""Maximum difference between a learner's answer and the computed value."""


# =============================================================================
# Iteration Limits
# =============================================================================

MAX_ITERATIONS = 100
"""Maximum number of pivots per phase before the loop is cut off."""


# =============================================================================
# Tutor Session
# =============================================================================

SNAPSHOT_VERSION = "1.0"
"""Version tag written into (and required from) session snapshots."""

DISPLAY_DECIMALS = 3
"""Decimal places used when numbers are printed in feedback and tableaus."""


# =============================================================================
# Solver Options
# =============================================================================

@dataclass
class SolveOptions:
    """Settings that travel together through a solve call."""
    tol: float = PIVOT_TOLERANCE
    feasibility_tol: float = FEASIBILITY_TOLERANCE
    max_iterations: int = MAX_ITERATIONS
    normalize: bool = True    # flip negative-RHS rows before accounting
    verbose: bool = False


# =============================================================================
# Example Problem
# =============================================================================

DEFAULT_OBJECTIVE = (3.0, 5.0)
"""Objective of the textbook example: maximize 3x1 + 5x2."""

DEFAULT_CONSTRAINTS = (
    ((1.0, 0.0), "<=", 4.0),
    ((0.0, 2.0), "<=", 12.0),
    ((3.0, 2.0), "<=", 18.0),
)
"""Constraints of the textbook example as (coefficients, operator, rhs)."""


def format_number(value: float, decimals: int = DISPLAY_DECIMALS) -> str:
    """
    Format a tableau entry for display, printing near-zero values as "0".

    >>> format_number(1e-12)
    '0'
    >>> format_number(2.5)
    '2.500'
    """
    if abs(value) < PIVOT_TOLERANCE:
        return "0"
    return f"{value:.{decimals}f}"
