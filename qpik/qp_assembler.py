"""Assembly of the quadratic program from the registered tasks."""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional, Sequence, Tuple

import numpy as np
import qpsolvers

from .exceptions import AssemblyFailure, QPIKError
from .task_registry import HARD_PRIORITY, SOFT_PRIORITY, TaskEntry
from .tasks import TaskType


class QPProblem(NamedTuple):
    r"""Quadratic program of the form

    .. math::

        \begin{align*}
            \min_{x} & \frac{1}{2} x^T H x + g^T x \\
            \text{s.t.} \quad & A_{eq} x = b_{eq} \\
            & lb \leq A_{ineq} x \leq ub
        \end{align*}

    The arrays are views on the assembler buffers, they are overwritten by the
    next assembly.
    """

    H: np.ndarray
    g: np.ndarray
    A_eq: np.ndarray
    b_eq: np.ndarray
    A_ineq: np.ndarray
    lb: np.ndarray
    ub: np.ndarray

    def inequalities_as_one_sided(
        self,
    ) -> Tuple[Optional[np.ndarray], Optional[np.ndarray]]:
        """Expand the two-sided inequalities into :math:`G x \\leq h`.

        Rows whose bound is infinite are dropped.

        Returns:
            Tuple (G, h), or (None, None) if there is no finite bound.
        """
        upper = np.isfinite(self.ub)
        lower = np.isfinite(self.lb)
        if not upper.any() and not lower.any():
            return None, None
        G = np.vstack([self.A_ineq[upper], -self.A_ineq[lower]])
        h = np.hstack([self.ub[upper], -self.lb[lower]])
        return G, h

    def to_qpsolvers(self) -> qpsolvers.Problem:
        """Convert the problem to the format of the backend QP solvers."""
        G, h = self.inequalities_as_one_sided()
        A, b = (self.A_eq, self.b_eq) if self.A_eq.shape[0] > 0 else (None, None)
        return qpsolvers.Problem(P=self.H, q=self.g, G=G, h=h, A=A, b=b)


class QPProblemAssembler:
    r"""Fold a fixed set of tasks into a quadratic program.

    Hard tasks (priority 0) become constraints, stacked in registration order.
    Soft tasks (priority 1) are accumulated in the cost:

    .. math::

        H = \lambda I + \sum_j A_j^T W_j A_j, \qquad
        g = -\sum_j A_j^T W_j b_j,

    where :math:`W_j` is the diagonal matrix of the weight sampled at this
    cycle and :math:`\lambda` a small damping keeping :math:`H` positive
    definite. Accumulating instead of stacking keeps memory proportional to the
    number of variables.

    The buffers are allocated once, since the task set and the variables
    layout are fixed after finalization.
    """

    def __init__(
        self,
        entries: Sequence[TaskEntry],
        number_of_variables: int,
        damping: float = 1e-12,
    ):
        self.number_of_variables = number_of_variables
        self.damping = damping

        hard = [entry for entry in entries if entry.priority == HARD_PRIORITY]
        self._equalities = [e for e in hard if e.type is TaskType.EQUALITY]
        self._inequalities = [e for e in hard if e.type is TaskType.INEQUALITY]
        self._soft = [entry for entry in entries if entry.priority == SOFT_PRIORITY]

        n = number_of_variables
        n_eq = sum(entry.size for entry in self._equalities)
        n_ineq = sum(entry.size for entry in self._inequalities)
        self._H = np.zeros((n, n))
        self._g = np.zeros(n)
        self._A_eq = np.zeros((n_eq, n))
        self._b_eq = np.zeros(n_eq)
        self._A_ineq = np.zeros((n_ineq, n))
        self._lb = np.zeros(n_ineq)
        self._ub = np.zeros(n_ineq)

    @property
    def number_of_equality_constraints(self) -> int:
        return self._A_eq.shape[0]

    @property
    def number_of_inequality_constraints(self) -> int:
        return self._A_ineq.shape[0]

    def _evaluate(self, entry: TaskEntry) -> Tuple[np.ndarray, np.ndarray]:
        task = entry.task
        if task is None:
            raise AssemblyFailure(f"Task '{entry.name}' has been destroyed.")
        try:
            task.update()
        except QPIKError as error:
            raise AssemblyFailure(
                f"Unable to update task '{entry.name}'. {error}"
            ) from error
        if not task.is_valid():
            raise AssemblyFailure(f"Task '{entry.name}' is not valid.")

        A = np.asarray(task.get_a())
        b = np.asarray(task.get_b())
        if A.shape != (entry.size, self.number_of_variables):
            raise AssemblyFailure(
                f"Task '{entry.name}' A has shape {A.shape}, expected "
                f"({entry.size}, {self.number_of_variables})."
            )
        if b.shape != (entry.size,):
            raise AssemblyFailure(
                f"Task '{entry.name}' b has shape {b.shape}, expected ({entry.size},)."
            )
        if not np.all(np.isfinite(A)):
            raise AssemblyFailure(f"Task '{entry.name}' A is not finite.")
        return A, b

    def _assemble_equalities(self) -> None:
        row = 0
        for entry in self._equalities:
            A, b = self._evaluate(entry)
            if not np.all(np.isfinite(b)):
                raise AssemblyFailure(f"Task '{entry.name}' b is not finite.")
            self._A_eq[row : row + entry.size] = A
            self._b_eq[row : row + entry.size] = b
            row += entry.size

    def _assemble_inequalities(self) -> None:
        row = 0
        for entry in self._inequalities:
            A, ub = self._evaluate(entry)
            task = entry.task
            assert task is not None  # mypy.
            lb = task.get_lower_bound()
            if lb is None:
                lb = np.full(entry.size, -np.inf)
            lb = np.asarray(lb)
            if lb.shape != (entry.size,):
                raise AssemblyFailure(
                    f"Task '{entry.name}' lower bound has shape {lb.shape}, "
                    f"expected ({entry.size},)."
                )
            if np.any(np.isnan(lb)) or np.any(np.isnan(ub)):
                raise AssemblyFailure(f"Task '{entry.name}' bounds contain NaN.")
            if np.any(ub == -np.inf) or np.any(lb == np.inf):
                raise AssemblyFailure(
                    f"Task '{entry.name}' has an upper bound at -inf or a lower bound "
                    "at +inf, the constraint cannot be satisfied."
                )
            if np.any(lb > ub):
                raise AssemblyFailure(
                    f"Task '{entry.name}' lower bound is greater than its upper bound."
                )
            self._A_ineq[row : row + entry.size] = A
            self._lb[row : row + entry.size] = lb
            self._ub[row : row + entry.size] = ub
            row += entry.size

    def _assemble_cost(self) -> None:
        self._H.fill(0.0)
        self._g.fill(0.0)
        self._H[np.diag_indices(self.number_of_variables)] = self.damping
        for entry in self._soft:
            A, b = self._evaluate(entry)
            if not np.all(np.isfinite(b)):
                raise AssemblyFailure(f"Task '{entry.name}' b is not finite.")
            weight = entry.sample_weight()
            weighted_A = weight[:, np.newaxis] * A
            self._H += A.T @ weighted_A
            self._g -= weighted_A.T @ b

    def assemble(self) -> QPProblem:
        """Evaluate every task and fill the QP matrices.

        Raises:
            AssemblyFailure: If a task or a weight cannot be evaluated, or has
                inconsistent dimensions.
        """
        self._assemble_equalities()
        self._assemble_inequalities()
        self._assemble_cost()
        logging.debug(
            "Assembled QP with %d variables, %d equalities and %d inequalities",
            self.number_of_variables,
            self.number_of_equality_constraints,
            self.number_of_inequality_constraints,
        )
        return QPProblem(
            H=self._H,
            g=self._g,
            A_eq=self._A_eq,
            b_eq=self._b_eq,
            A_ineq=self._A_ineq,
            lb=self._lb,
            ub=self._ub,
        )
