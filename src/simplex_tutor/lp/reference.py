"""
Reference solve with scipy.optimize.linprog (HiGHS backend).

Used to cross-check the tableau engine: both must agree on the status and,
for optimal problems, on the objective value.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np
from scipy.optimize import linprog

from ..problem.model import Operator, Problem
from .result import STATUS_OPTIMAL, STATUS_UNBOUNDED, STATUS_INFEASIBLE


@dataclass
class ReferenceResult:
    """
    Outcome of a linprog solve, mapped onto the engine's statuses.

    Attributes
    ----------
    status : str
        "optimal", "unbounded", "infeasible", or "error" for any other
        linprog outcome (iteration limit, numerical trouble).
    lp_status : int
        Raw status code from scipy.optimize.linprog.
    solution : np.ndarray or None
        Optimal x, if found.
    value : float or None
        Objective value in the problem's own sense, if optimal.
    message : str
        linprog's message.
    """
    status: str
    lp_status: int
    solution: Optional[np.ndarray] = None
    value: Optional[float] = None
    message: str = ""


_LINPROG_STATUS = {
    0: STATUS_OPTIMAL,
    2: STATUS_INFEASIBLE,
    3: STATUS_UNBOUNDED,
}


def solve_reference(problem: Problem, method: str = "highs") -> ReferenceResult:
    """
    Solve `problem` with linprog.

    linprog minimizes, so a maximization objective is negated going in and
    the value negated coming out. >= rows are negated into <= form.
    """
    c = np.array(problem.objective_coefficients, dtype=np.float64)
    if problem.is_maximization:
        c = -c

    A_ub, b_ub, A_eq, b_eq = [], [], [], []
    for con in problem.constraints:
        row = np.array(con.coefficients, dtype=np.float64)
        if con.operator is Operator.LE:
            A_ub.append(row)
            b_ub.append(con.rhs)
        elif con.operator is Operator.GE:
            A_ub.append(-row)
            b_ub.append(-con.rhs)
        else:
            A_eq.append(row)
            b_eq.append(con.rhs)

    res = linprog(
        c,
        A_ub=np.array(A_ub) if A_ub else None,
        b_ub=np.array(b_ub) if b_ub else None,
        A_eq=np.array(A_eq) if A_eq else None,
        b_eq=np.array(b_eq) if b_eq else None,
        bounds=[(0, None)] * problem.num_variables,
        method=method,
    )

    status = _LINPROG_STATUS.get(res.status, "error")
    if status != STATUS_OPTIMAL:
        return ReferenceResult(status=status, lp_status=res.status, message=res.message)

    value = float(res.fun)
    return ReferenceResult(
        status=status,
        lp_status=res.status,
        solution=np.asarray(res.x),
        value=-value if problem.is_maximization else value,
        message=res.message,
    )
