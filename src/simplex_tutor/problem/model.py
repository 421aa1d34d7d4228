"""
Linear program data model.

A problem is

    maximize / minimize   c^T x
    subject to            a_i^T x  (<=, >=, =)  b_i     for each constraint i
                          x >= 0

Non-negativity of every decision variable is a fixed assumption and is not
stored per variable. Problems are immutable once built; the engine only
reads them.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Sequence, Tuple

from ..config import DEFAULT_OBJECTIVE, DEFAULT_CONSTRAINTS


class Operator(Enum):
    """Relational operator of a constraint."""
    LE = "<="
    GE = ">="
    EQ = "="

    @classmethod
    def parse(cls, text: str) -> "Operator":
        """
        Parse an operator symbol.

        Accepts the ASCII forms ("<=", ">=", "=", "==") and the unicode
        forms ("≤", "≥").

        Raises
        ------
        ValueError
            If the symbol is not recognised.
        """
        symbol = text.strip()
        aliases = {
            "<=": cls.LE, "≤": cls.LE,
            ">=": cls.GE, "≥": cls.GE,
            "=": cls.EQ, "==": cls.EQ,
        }
        if symbol not in aliases:
            raise ValueError(f"Unknown constraint operator: {text!r}")
        return aliases[symbol]

    def flipped(self) -> "Operator":
        """Operator obtained when both sides are multiplied by -1."""
        if self is Operator.LE:
            return Operator.GE
        if self is Operator.GE:
            return Operator.LE
        return Operator.EQ


@dataclass(frozen=True)
class Constraint:
    """
    A single linear constraint a^T x (op) b.

    Attributes
    ----------
    coefficients : tuple of float
        One coefficient per decision variable.
    operator : Operator
        Relational operator.
    rhs : float
        Right-hand side b.
    """
    coefficients: Tuple[float, ...]
    operator: Operator
    rhs: float

    def __post_init__(self):
        object.__setattr__(self, "coefficients", tuple(float(c) for c in self.coefficients))
        if not isinstance(self.operator, Operator):
            object.__setattr__(self, "operator", Operator.parse(self.operator))
        object.__setattr__(self, "rhs", float(self.rhs))

    def negated(self) -> "Constraint":
        """Return the equivalent constraint with both sides multiplied by -1."""
        return Constraint(
            coefficients=tuple(-c for c in self.coefficients),
            operator=self.operator.flipped(),
            rhs=-self.rhs,
        )

    def lhs(self, x: Sequence[float]) -> float:
        """Evaluate a^T x."""
        return sum(a * xi for a, xi in zip(self.coefficients, x))

    def is_satisfied(self, x: Sequence[float], tol: float = 1e-6) -> bool:
        """Check whether the point x satisfies this constraint within tol."""
        value = self.lhs(x)
        if self.operator is Operator.LE:
            return value <= self.rhs + tol
        if self.operator is Operator.GE:
            return value >= self.rhs - tol
        return abs(value - self.rhs) <= tol

    def to_dict(self) -> Dict[str, Any]:
        return {
            "coefficients": list(self.coefficients),
            "operator": self.operator.value,
            "rhs": self.rhs,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Constraint":
        return cls(
            coefficients=tuple(data["coefficients"]),
            operator=Operator.parse(data["operator"]),
            rhs=data["rhs"],
        )


@dataclass(frozen=True)
class Problem:
    """
    A linear program over non-negative decision variables.

    Attributes
    ----------
    objective_coefficients : tuple of float
        Objective coefficients c (length num_variables).
    constraints : tuple of Constraint
        The constraint set.
    is_maximization : bool
        True to maximize c^T x, False to minimize it.
    """
    objective_coefficients: Tuple[float, ...]
    constraints: Tuple[Constraint, ...]
    is_maximization: bool = True

    def __post_init__(self):
        object.__setattr__(
            self, "objective_coefficients",
            tuple(float(c) for c in self.objective_coefficients),
        )
        object.__setattr__(self, "constraints", tuple(self.constraints))

    @property
    def num_variables(self) -> int:
        return len(self.objective_coefficients)

    @property
    def num_constraints(self) -> int:
        return len(self.constraints)

    def objective_value(self, x: Sequence[float]) -> float:
        """Evaluate c^T x."""
        return sum(c * xi for c, xi in zip(self.objective_coefficients, x))

    def is_feasible(self, x: Sequence[float], tol: float = 1e-6) -> bool:
        """Check x >= 0 and every constraint within tol."""
        if any(xi < -tol for xi in x):
            return False
        return all(con.is_satisfied(x, tol) for con in self.constraints)

    def validate(self) -> None:
        """
        Check that the problem is well formed.

        The engine itself never calls this; it is for callers assembling
        problems from user input.

        Raises
        ------
        ValueError
            If there are no variables, no constraints, or a constraint has
            the wrong number of coefficients.
        """
        if self.num_variables == 0:
            raise ValueError("Problem must have at least one decision variable")
        if self.num_constraints == 0:
            raise ValueError("Problem must have at least one constraint")
        for i, con in enumerate(self.constraints):
            if len(con.coefficients) != self.num_variables:
                raise ValueError(
                    f"Constraint {i + 1} has {len(con.coefficients)} coefficients, "
                    f"expected {self.num_variables}"
                )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "objective_coefficients": list(self.objective_coefficients),
            "constraints": [con.to_dict() for con in self.constraints],
            "is_maximization": self.is_maximization,
            "num_variables": self.num_variables,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Problem":
        return cls(
            objective_coefficients=tuple(data["objective_coefficients"]),
            constraints=tuple(Constraint.from_dict(c) for c in data["constraints"]),
            is_maximization=bool(data.get("is_maximization", True)),
        )


# =============================================================================
# Text parsing
# =============================================================================

_OPERATOR_PATTERN = re.compile(r"(<=|>=|==|≤|≥|=)")


def parse_coefficients(text: str) -> List[float]:
    """
    Parse a whitespace- or comma-separated list of numbers.

    >>> parse_coefficients("3, 5")
    [3.0, 5.0]
    """
    tokens = [tok for tok in re.split(r"[\s,]+", text.strip()) if tok]
    try:
        return [float(tok) for tok in tokens]
    except ValueError as exc:
        raise ValueError(f"Could not parse coefficients from {text!r}") from exc


def parse_constraint(text: str) -> Constraint:
    """
    Parse a constraint written as "a1 a2 ... (op) b".

    >>> parse_constraint("3 2 <= 18").operator
    <Operator.LE: '<='>

    Raises
    ------
    ValueError
        If no operator is present or the numbers cannot be parsed.
    """
    parts = _OPERATOR_PATTERN.split(text, maxsplit=1)
    if len(parts) != 3:
        raise ValueError(f"Constraint must contain <=, >= or =: {text!r}")
    lhs, op, rhs = parts
    rhs_values = parse_coefficients(rhs)
    if len(rhs_values) != 1:
        raise ValueError(f"Constraint must have a single right-hand side: {text!r}")
    return Constraint(
        coefficients=tuple(parse_coefficients(lhs)),
        operator=Operator.parse(op),
        rhs=rhs_values[0],
    )


def parse_problem(
    objective: str,
    constraints: Sequence[str],
    maximize: bool = True,
) -> Problem:
    """
    Build and validate a Problem from text.

    Parameters
    ----------
    objective : str
        Objective coefficients, e.g. "3 5".
    constraints : list of str
        Constraints, e.g. ["1 0 <= 4", "0 2 <= 12"].
    maximize : bool
        Optimization sense.

    Returns
    -------
    Problem
    """
    problem = Problem(
        objective_coefficients=tuple(parse_coefficients(objective)),
        constraints=tuple(parse_constraint(c) for c in constraints),
        is_maximization=maximize,
    )
    problem.validate()
    return problem


def default_problem() -> Problem:
    """The textbook example used as the form default."""
    return Problem(
        objective_coefficients=DEFAULT_OBJECTIVE,
        constraints=tuple(
            Constraint(coeffs, Operator.parse(op), rhs)
            for coeffs, op, rhs in DEFAULT_CONSTRAINTS
        ),
        is_maximization=True,
    )
