"""Linear tasks."""

from __future__ import annotations

import abc
import enum
from typing import Optional

import numpy as np

from ..exceptions import MissingRequiredVariable, TaskDefinitionError
from ..kindyn import KinDynComputations
from ..variables_handler import VariableDescription, VariablesHandler


class TaskType(enum.Enum):
    """Declared type of a linear task."""

    EQUALITY = "equality"
    """The task requires :math:`A x = b`."""
    INEQUALITY = "inequality"
    """The task requires :math:`lb \\leq A x \\leq b`."""


class LinearTask(abc.ABC):
    r"""Abstract base class for linear tasks.

    A linear task is a linear map over the decision vector :math:`x`. Equality
    tasks describe :math:`A x = b`, inequality tasks describe the two-sided
    bound :math:`lb \leq A x \leq b` where the lower bound defaults to
    :math:`-\infty`.

    Subclasses fill ``self._A`` and ``self._b`` in :meth:`update`. The number
    of rows is the task :attr:`size`, the number of columns is the size of the
    decision vector described by the variables handler.
    """

    type: TaskType = TaskType.EQUALITY

    def __init__(self):
        self._A = np.zeros((0, 0))
        self._b = np.zeros(0)
        self._number_of_variables: Optional[int] = None

    @property
    @abc.abstractmethod
    def size(self) -> int:
        """Number of rows of the task."""
        raise NotImplementedError

    def set_variables_handler(self, handler: VariablesHandler) -> None:
        """Allocate :math:`A` and :math:`b` for the decision vector of `handler`."""
        self._number_of_variables = handler.get_number_of_variables()
        self._A = np.zeros((self.size, self._number_of_variables))
        self._b = np.zeros(self.size)

    def update(self) -> None:
        """Refresh :math:`A` and :math:`b` at the current state.

        Tasks whose matrices do not depend on the state keep the default.
        """

    def is_valid(self) -> bool:
        """Return True if :math:`A` and :math:`b` are ready to be used."""
        return self._number_of_variables is not None

    def get_a(self) -> np.ndarray:
        return self._A

    def get_b(self) -> np.ndarray:
        return self._b

    def get_lower_bound(self) -> Optional[np.ndarray]:
        """Lower bound of an inequality task. None means unbounded below."""
        return None

    def get_description(self) -> str:
        return self.__class__.__name__

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type={self.type.value}, size={self.size})"


class RobotVelocityTask(LinearTask):
    """Linear task acting on the generalized robot velocity variable.

    The task keeps the slice of the decision vector associated with the robot
    velocity so that subclasses can write their Jacobians in place.
    """

    def __init__(self, robot_velocity_variable_name: str = "robot_velocity"):
        super().__init__()
        self.robot_velocity_variable_name = robot_velocity_variable_name
        self._robot_velocity: Optional[VariableDescription] = None

    def set_variables_handler(self, handler: VariablesHandler) -> None:
        variable = handler.get_variable(self.robot_velocity_variable_name)
        if variable is None:
            raise MissingRequiredVariable(
                self.robot_velocity_variable_name, handler.names
            )
        self._check_robot_velocity(variable)
        self._robot_velocity = variable
        super().set_variables_handler(handler)

    def _check_robot_velocity(self, variable: VariableDescription) -> None:
        """Hook for subclasses to validate the size of the robot velocity."""
        del variable

    @property
    def robot_velocity(self) -> VariableDescription:
        if self._robot_velocity is None:
            raise TaskDefinitionError(
                f"{self.__class__.__name__} has no variables handler set."
            )
        return self._robot_velocity


class KinDynTask(RobotVelocityTask):
    """Robot velocity task whose matrices depend on the robot kinematics."""

    def __init__(self, robot_velocity_variable_name: str = "robot_velocity"):
        super().__init__(robot_velocity_variable_name)
        self._kin_dyn: Optional[KinDynComputations] = None

    def set_kin_dyn(self, kin_dyn: KinDynComputations) -> None:
        self._kin_dyn = kin_dyn

    @property
    def kin_dyn(self) -> KinDynComputations:
        if self._kin_dyn is None:
            raise TaskDefinitionError(
                f"{self.__class__.__name__} has no kinematics set. "
                "Call `set_kin_dyn` first."
            )
        return self._kin_dyn

    def _check_robot_velocity(self, variable: VariableDescription) -> None:
        if variable.size != self.kin_dyn.nv:
            raise TaskDefinitionError(
                f"{self.__class__.__name__} robot velocity variable "
                f"'{variable.name}' has size {variable.size} but the model has "
                f"{self.kin_dyn.nv} degrees of freedom."
            )

    @property
    def joint_columns(self) -> slice:
        """Columns of the decision vector associated with the joint velocities."""
        offset = self.robot_velocity.offset
        if self.kin_dyn.is_floating_base:
            offset += 6
        return slice(offset, offset + self.kin_dyn.number_of_joints)

    def is_valid(self) -> bool:
        return super().is_valid() and self._kin_dyn is not None
