"""Damping task implementation."""

import numpy as np

from ..exceptions import TaskDefinitionError
from ..variables_handler import VariableDescription, VariablesHandler
from .task import RobotVelocityTask


class DampingTask(RobotVelocityTask):
    r"""L2-regularization on joint velocities (a.k.a. *velocity damping*).

    This task, used with priority 1, adds the term

    .. math::
        \dot{s}^\top W \dot{s}

    to the cost, where :math:`\dot{s}` are the joint velocities and :math:`W`
    the task weight. It favors **minimum-norm joint velocities** in redundant
    or near-singular situations. Unlike the ``damping`` parameter of the
    solver, which is uniformly applied to the whole decision vector, this task
    does not affect the floating-base velocity.

    .. note::

        This task does not favor a particular posture, only small instantaneous
        motion. If you need a posture bias, use :class:`~.JointTrackingTask`.
    """

    def __init__(
        self,
        floating_base: bool = False,
        robot_velocity_variable_name: str = "robot_velocity",
    ):
        super().__init__(robot_velocity_variable_name)
        self.floating_base = floating_base
        self._size = 0

    @property
    def size(self) -> int:
        return self._size

    def _check_robot_velocity(self, variable: VariableDescription) -> None:
        base = 6 if self.floating_base else 0
        if variable.size <= base:
            raise TaskDefinitionError(
                f"{self.__class__.__name__} robot velocity variable "
                f"'{variable.name}' has no joint velocities."
            )
        self._size = variable.size - base

    def set_variables_handler(self, handler: VariablesHandler) -> None:
        super().set_variables_handler(handler)
        offset = self.robot_velocity.offset + (6 if self.floating_base else 0)
        self._A[:, offset : offset + self._size] = np.eye(self._size)
