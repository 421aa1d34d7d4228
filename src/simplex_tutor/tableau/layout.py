"""
Row and column layout of a Simplex tableau.

Phase 2 / single-phase tableau (m constraints, n decision variables,
s slack/surplus columns):

    columns:  x_1 .. x_n | s_1 .. s_s | b
    rows:     m constraint rows, then the objective row

Phase 1 tableau (a artificial columns):

    columns:  x_1 .. x_n | s_1 .. s_s | a_1 .. a_a | (-w) | b
    rows:     m constraint rows, then the (-f) row, then the (-w) row

The objective row in scope for pricing is always the last row.
"""

from dataclasses import dataclass

from ..problem.accounting import VariableCounts


@dataclass(frozen=True)
class TableauLayout:
    """
    Index bookkeeping for one tableau shape.

    Attributes
    ----------
    num_variables : int
        Decision variables n.
    num_slack : int
        Slack/surplus columns.
    num_artificial : int
        Artificial columns (only present in Phase 1).
    num_constraints : int
        Constraint rows m.
    phase : int
        1 for the two-row Phase 1 tableau, 2 for the single-objective
        tableau (also used for single-phase problems).
    """
    num_variables: int
    num_slack: int
    num_artificial: int
    num_constraints: int
    phase: int = 2

    @classmethod
    def phase1(cls, num_variables: int, counts: VariableCounts,
               num_constraints: int) -> "TableauLayout":
        return cls(num_variables, counts.num_slack, counts.num_artificial,
                   num_constraints, phase=1)

    @classmethod
    def phase2(cls, num_variables: int, counts: VariableCounts,
               num_constraints: int) -> "TableauLayout":
        return cls(num_variables, counts.num_slack, counts.num_artificial,
                   num_constraints, phase=2)

    @property
    def is_phase1(self) -> bool:
        return self.phase == 1

    @property
    def num_real(self) -> int:
        """Decision plus slack/surplus columns."""
        return self.num_variables + self.num_slack

    @property
    def num_structural(self) -> int:
        """Columns eligible to enter the basis in this phase."""
        if self.is_phase1:
            return self.num_real + self.num_artificial
        return self.num_real

    @property
    def artificial_start(self) -> int:
        return self.num_real

    @property
    def w_column(self) -> int:
        """Index of the (-w) accumulator column (Phase 1 only)."""
        if not self.is_phase1:
            raise ValueError("Only Phase 1 tableaus have a (-w) column")
        return self.num_structural

    @property
    def rhs_column(self) -> int:
        if self.is_phase1:
            return self.num_structural + 1
        return self.num_structural

    @property
    def num_columns(self) -> int:
        return self.rhs_column + 1

    @property
    def num_objective_rows(self) -> int:
        return 2 if self.is_phase1 else 1

    @property
    def num_rows(self) -> int:
        return self.num_constraints + self.num_objective_rows

    @property
    def objective_row(self) -> int:
        """Row priced for entering-variable selection (the last row)."""
        return self.num_rows - 1

    @property
    def f_row(self) -> int:
        """Row holding the true objective: (-f) in Phase 1, Z in Phase 2."""
        return self.num_constraints

    def is_artificial(self, column: int) -> bool:
        return self.is_phase1 and self.num_real <= column < self.num_real + self.num_artificial

    def is_slack(self, column: int) -> bool:
        return self.num_variables <= column < self.num_real

    def to_phase2(self) -> "TableauLayout":
        return TableauLayout(self.num_variables, self.num_slack,
                             self.num_artificial, self.num_constraints, phase=2)
