"""
simplex_tutor: tabular Simplex solver and step-by-step tutor

Solves linear programs with the single-phase or two-phase tableau method,
and drives an interactive session that checks a learner's manual tableau
work against the same engine.
"""

from . import config
from .problem import Problem, Constraint, Operator, parse_problem, default_problem
from .lp import SimplexResult, solve, solve_reference

__version__ = "0.1.0"
__all__ = [
    "config",
    "Problem",
    "Constraint",
    "Operator",
    "parse_problem",
    "default_problem",
    "SimplexResult",
    "solve",
    "solve_reference",
]
