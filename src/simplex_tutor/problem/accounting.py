"""
Slack, surplus and artificial variable accounting.

Each constraint contributes auxiliary columns according to its operator:

    <=  ->  one slack
    >=  ->  one surplus (counted with the slacks) and one artificial
    =   ->  one artificial

A two-phase solve is required exactly when at least one artificial variable
is present.
"""

from dataclasses import dataclass
from typing import List, Sequence

from .model import Constraint, Operator, Problem


@dataclass(frozen=True)
class VariableCounts:
    """Auxiliary variable counts derived from the constraint operators."""
    num_slack: int
    num_artificial: int

    @property
    def needs_phase1(self) -> bool:
        return self.num_artificial > 0


def count_variables(constraints: Sequence[Constraint]) -> VariableCounts:
    """
    Count slack/surplus and artificial variables.

    Parameters
    ----------
    constraints : sequence of Constraint
        The constraint set (only the operators are read).

    Returns
    -------
    VariableCounts

    Examples
    --------
    >>> from simplex_tutor.problem.model import parse_constraint
    >>> count_variables([parse_constraint("1 1 >= 1"), parse_constraint("1 0 = 2")])
    VariableCounts(num_slack=1, num_artificial=2)
    """
    num_slack = 0
    num_artificial = 0
    for con in constraints:
        if con.operator is Operator.LE:
            num_slack += 1
        elif con.operator is Operator.GE:
            num_slack += 1
            num_artificial += 1
        else:
            num_artificial += 1
    return VariableCounts(num_slack=num_slack, num_artificial=num_artificial)


def needs_phase1(constraints: Sequence[Constraint]) -> bool:
    """True if the constraint set requires the two-phase method."""
    return count_variables(constraints).needs_phase1


def slack_column_offsets(constraints: Sequence[Constraint]) -> List[int]:
    """
    Offset of each constraint's slack/surplus column among the slack block.

    Entries are -1 for equality constraints, which carry no slack.
    """
    offsets = []
    k = 0
    for con in constraints:
        if con.operator is Operator.EQ:
            offsets.append(-1)
        else:
            offsets.append(k)
            k += 1
    return offsets


def artificial_column_offsets(constraints: Sequence[Constraint]) -> List[int]:
    """
    Offset of each constraint's artificial column among the artificial block.

    Entries are -1 for <= constraints, which carry no artificial variable.
    """
    offsets = []
    k = 0
    for con in constraints:
        if con.operator is Operator.LE:
            offsets.append(-1)
        else:
            offsets.append(k)
            k += 1
    return offsets


def normalize_rhs(problem: Problem) -> Problem:
    """
    Make every right-hand side non-negative.

    Constraints with b < 0 are multiplied by -1, which also flips their
    operator (<= becomes >= and vice versa). The result describes the same
    feasible region, and its accounting is the one the tableau needs: a
    negated <= row gains an artificial variable instead of a slack with a
    -1 coefficient.

    Returns the same object when nothing needs flipping.
    """
    if all(con.rhs >= 0 for con in problem.constraints):
        return problem
    constraints = tuple(
        con.negated() if con.rhs < 0 else con for con in problem.constraints
    )
    return Problem(
        objective_coefficients=problem.objective_coefficients,
        constraints=constraints,
        is_maximization=problem.is_maximization,
    )
