"""Build and solve the prioritized inverse kinematics problem."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import numpy as np
import qpsolvers
from qpsolvers.exceptions import QPError

from .exceptions import (
    AlreadyFinalized,
    MissingRequiredVariable,
    NotReady,
    ParameterError,
    QPIKError,
    SolverFailure,
    VariableDefinitionError,
)
from .linear_task_solver import IntegrationBasedIK, IntegrationBasedIKState
from .parameters_handler import ParametersHandler
from .qp_assembler import QPProblem, QPProblemAssembler
from .task_registry import TaskRegistry, Weight
from .tasks import LinearTask
from .variables_handler import VariableDescription, VariablesHandler
from .weight_provider import WeightProvider

DEFAULT_QP_SOLVER = "daqp"
DEFAULT_DAMPING = 1e-12


class QPInverseKinematics(IntegrationBasedIK):
    r"""Inverse kinematics formulated as a quadratic program.

    Each task has a priority. Tasks with priority 0 are hard: equality tasks
    become equality constraints and inequality tasks become two-sided
    inequality constraints. Tasks with priority 1 are soft: they are embedded
    in the cost function as a weighted least-squares term. Inequality tasks
    cannot have priority 1.

    The solver follows a strict lifecycle: :meth:`initialize`, then any
    number of :meth:`add_task`, then :meth:`finalize` and finally one
    :meth:`advance` per control cycle. The output is the generalized robot
    velocity; integrate it to use the solver as an inverse kinematics.

    Public methods return False on failure and store the reason in
    :attr:`last_error`.

    Example:

    .. code-block:: python

        ik = QPInverseKinematics()
        ik.initialize(
            StdParametersHandler({"robot_velocity_variable_name": "robot_velocity"})
        )
        ik.add_task(se3_task, "end_effector", priority=0)
        ik.add_task(posture_task, "posture", priority=1, weight=np.full(n, 0.1))
        ik.finalize(variables_handler)

        while running:
            kin_dyn.update(q)
            if ik.advance():
                kin_dyn.integrate_inplace(ik.get_output().robot_velocity, dt)
    """

    def __init__(self):
        self._registry = TaskRegistry()
        self._initialized = False
        self._finalized = False

        self._robot_velocity_variable_name = ""
        self._verbosity = False
        self._floating_base = False
        self._qp_solver = DEFAULT_QP_SOLVER
        self._damping = DEFAULT_DAMPING
        self.solver_options: Dict[str, Any] = {}
        """Keyword arguments forwarded to the backend QP solver."""

        self._assembler: Optional[QPProblemAssembler] = None
        self._robot_velocity: Optional[VariableDescription] = None
        self._solution = np.zeros(0)
        self._state = IntegrationBasedIKState()
        self._is_output_valid = False
        self.last_error: Optional[QPIKError] = None

    def _failure(self, method: str, error: QPIKError) -> bool:
        self.last_error = error
        logging.error(f"[QPInverseKinematics::{method}] {error}")
        return False

    def initialize(self, param_handler: ParametersHandler) -> bool:
        """Initialize the inverse kinematics.

        Recognized parameters:

        * ``robot_velocity_variable_name`` (str, mandatory): name of the
          variable holding the generalized robot velocity.
        * ``verbosity`` (bool, default False): log every cycle.
        * ``floating_base`` (bool, default False): the first six entries of the
          robot velocity are the base velocity.
        * ``qp_solver`` (str, default "daqp"): backend QP solver.
        * ``damping`` (float, default 1e-12): regularization added to the
          Hessian.

        Returns:
            True in case of success, False otherwise.
        """
        try:
            if self._finalized:
                raise AlreadyFinalized("initialize")
            name = param_handler.get_parameter("robot_velocity_variable_name", str)
            if not name:
                raise ParameterError(
                    "Parameter 'robot_velocity_variable_name' must be non-empty."
                )
            verbosity = param_handler.get_parameter("verbosity", bool, False)
            floating_base = param_handler.get_parameter("floating_base", bool, False)
            qp_solver = param_handler.get_parameter(
                "qp_solver", str, DEFAULT_QP_SOLVER
            )
            if qp_solver not in qpsolvers.available_solvers:
                raise ParameterError(
                    f"Parameter 'qp_solver' is '{qp_solver}', which is not an "
                    "available QP solver. Available solvers: "
                    f"{qpsolvers.available_solvers}."
                )
            damping = param_handler.get_parameter("damping", float, DEFAULT_DAMPING)
            if not np.isfinite(damping) or damping < 0.0:
                raise ParameterError(
                    f"Parameter 'damping' must be >= 0. Got {damping}."
                )
        except QPIKError as error:
            return self._failure("initialize", error)

        self._robot_velocity_variable_name = name
        self._verbosity = verbosity
        self._floating_base = floating_base
        self._qp_solver = qp_solver
        self._damping = damping
        self._initialized = True
        return True

    def add_task(
        self,
        task: LinearTask,
        task_name: str,
        priority: int,
        weight: Optional[Weight] = None,
    ) -> bool:
        """Add a linear task to the solver.

        Args:
            task: Linear task. The solver only keeps a weak reference to it.
            task_name: Unique name associated with the task.
            priority: 0 for a hard task, 1 for a soft task.
            weight: Constant weight vector or weight provider. Required for
                soft tasks, ignored for hard tasks. Providers are weakly
                referenced.

        Returns:
            True if the task has been added.
        """
        try:
            if not self._initialized:
                raise NotReady("Please call `initialize` before adding tasks.")
            if self._finalized:
                raise AlreadyFinalized("add_task")
            self._registry.add(task, task_name, priority, weight)
        except QPIKError as error:
            return self._failure("add_task", error)
        if self._verbosity:
            logging.info(
                f"[QPInverseKinematics::add_task] Task '{task_name}' added with "
                f"priority {priority}."
            )
        return True

    def remove_task(self, task_name: str) -> bool:
        """Remove a task. Only allowed before :meth:`finalize`."""
        try:
            if self._finalized:
                raise AlreadyFinalized("remove_task")
            self._registry.remove(task_name)
        except QPIKError as error:
            return self._failure("remove_task", error)
        return True

    def set_task_weight(self, task_name: str, weight: Weight) -> bool:
        """Replace the weight of a soft task, starting from the next cycle.

        Args:
            task_name: Name of an existing task with priority 1.
            weight: Constant weight vector or weight provider.

        Returns:
            True if the weight has been updated.
        """
        try:
            self._registry.set_weight(task_name, weight)
        except QPIKError as error:
            return self._failure("set_task_weight", error)
        return True

    def get_task_weight_provider(self, task_name: str) -> Optional[WeightProvider]:
        """Return the weight provider of a task.

        None is returned if the task does not exist, has a constant weight, or
        if its provider has been destroyed.
        """
        return self._registry.get_weight_provider(task_name)

    def get_task(self, name: str) -> Optional[LinearTask]:
        """Return a task, or None if it does not exist or has been destroyed."""
        return self._registry.get_task(name)

    def get_task_names(self) -> List[str]:
        """Names of the tasks in insertion order."""
        return self._registry.names()

    def finalize(self, handler: VariablesHandler) -> bool:
        """Lock the set of tasks and allocate the QP.

        Call this method after adding all the tasks. The variables handler is
        frozen.

        Args:
            handler: Layout of the decision vector.

        Returns:
            True in case of success, False otherwise.
        """
        try:
            if self._finalized:
                raise AlreadyFinalized("finalize")
            if not self._initialized:
                raise NotReady("Please call `initialize` before `finalize`.")
            variable = handler.get_variable(self._robot_velocity_variable_name)
            if variable is None:
                raise MissingRequiredVariable(
                    self._robot_velocity_variable_name, handler.names
                )
            if self._floating_base and variable.size < 6:
                raise VariableDefinitionError(
                    f"Variable '{variable.name}' has size {variable.size}. A "
                    "floating base robot velocity holds at least 6 entries."
                )
        except QPIKError as error:
            return self._failure("finalize", error)

        handler.freeze()
        number_of_variables = handler.get_number_of_variables()
        self._assembler = QPProblemAssembler(
            self._registry.entries(), number_of_variables, self._damping
        )
        self._robot_velocity = variable
        self._solution = np.zeros(number_of_variables)
        self._state = self._split_robot_velocity(self._solution)
        self._finalized = True
        if self._verbosity:
            logging.info(
                f"[QPInverseKinematics::finalize] {number_of_variables} variables, "
                f"{self._assembler.number_of_equality_constraints} equality and "
                f"{self._assembler.number_of_inequality_constraints} inequality "
                "constraints."
            )
        return True

    def _split_robot_velocity(self, solution: np.ndarray) -> IntegrationBasedIKState:
        assert self._robot_velocity is not None  # mypy.
        robot_velocity = solution[self._robot_velocity.slice].copy()
        if self._floating_base:
            return IntegrationBasedIKState(robot_velocity[:6], robot_velocity[6:])
        return IntegrationBasedIKState(np.zeros(0), robot_velocity)

    def _solve(self, problem: QPProblem) -> np.ndarray:
        try:
            result = qpsolvers.solve_problem(
                problem.to_qpsolvers(), solver=self._qp_solver, **self.solver_options
            )
        except QPError as error:
            raise SolverFailure(self._qp_solver, str(error)) from error
        if not result.found or result.x is None:
            raise SolverFailure(self._qp_solver)
        if not np.all(np.isfinite(result.x)):
            raise SolverFailure(self._qp_solver, "The solution is not finite.")
        return result.x

    def advance(self) -> bool:
        """Solve the inverse kinematics for the current cycle.

        On failure the previous solution is kept and the output is marked as
        invalid.

        Returns:
            True in case of success, False otherwise.
        """
        try:
            if not self._finalized or self._assembler is None:
                raise NotReady("Please call `finalize` before `advance`.")
            problem = self._assembler.assemble()
            solution = self._solve(problem)
        except QPIKError as error:
            self._is_output_valid = False
            return self._failure("advance", error)

        self._solution[:] = solution
        self._state = self._split_robot_velocity(self._solution)
        self._is_output_valid = True
        if self._verbosity:
            logging.info(
                "[QPInverseKinematics::advance] Solved QP with %d variables, "
                "%d equalities and %d inequalities using %s, |x| = %.6g",
                problem.H.shape[0],
                problem.A_eq.shape[0],
                problem.A_ineq.shape[0],
                self._qp_solver,
                np.linalg.norm(solution),
            )
        return True

    def is_output_valid(self) -> bool:
        """Return True if the output of the last cycle is valid."""
        return self._is_output_valid

    def get_output(self) -> IntegrationBasedIKState:
        """Return the state of the inverse kinematics.

        Raises:
            NotReady: If the solver has not been finalized.
        """
        if not self._finalized:
            raise NotReady("Please call `finalize` before `get_output`.")
        return self._state

    def get_raw_solution(self) -> np.ndarray:
        """Return the whole decision vector of the last successful cycle.

        Raises:
            NotReady: If the solver has not been finalized.
        """
        if not self._finalized:
            raise NotReady("Please call `finalize` before `get_raw_solution`.")
        return self._solution

    def to_string(self) -> str:
        """Return a description of the inverse kinematics problem."""
        lines = [
            "QPInverseKinematics",
            f"Robot velocity variable: '{self._robot_velocity_variable_name}'",
            f"QP solver: {self._qp_solver}",
            f"Finalized: {self._finalized}",
            f"Tasks ({len(self._registry)}):",
        ]
        try:
            description = self._registry.describe()
        except Exception as error:  # Best effort, never raise.
            description = f"<unable to describe the tasks: {error}>"
        if description:
            lines.append(description)
        return "\n".join(lines)
