"""Joint tracking task implementation."""

from __future__ import annotations

from typing import Optional

import numpy as np
import numpy.typing as npt

from ..exceptions import InvalidTarget, TargetNotSet, TaskDefinitionError
from .task import KinDynTask


class JointTrackingTask(KinDynTask):
    r"""Track a desired joint trajectory.

    The task requires the joint velocities :math:`\dot{s}` to follow

    .. math::

        \dot{s} = \dot{s}^* + K_p (s^* - s),

    where :math:`s^*` and :math:`\dot{s}^*` are the desired joint positions and
    velocities, and :math:`K_p` is a diagonal gain matrix. The floating base
    velocity, if any, is left free.

    Example:

    .. code-block:: python

        task = JointTrackingTask(kp=5.0)
        task.set_kin_dyn(kin_dyn)
        task.set_variables_handler(variables_handler)
        task.set_set_point(kin_dyn.get_joint_positions())
    """

    def __init__(
        self,
        kp: npt.ArrayLike = 1.0,
        robot_velocity_variable_name: str = "robot_velocity",
    ):
        super().__init__(robot_velocity_variable_name)
        self._kp = np.atleast_1d(np.asarray(kp, dtype=np.float64))
        if self._kp.ndim != 1:
            raise TaskDefinitionError(
                f"{self.__class__.__name__} kp must be a scalar or a vector."
            )
        if not np.all(self._kp >= 0.0):
            raise TaskDefinitionError(f"{self.__class__.__name__} kp must be >= 0")
        self._desired_position: Optional[np.ndarray] = None
        self._desired_velocity: Optional[np.ndarray] = None

    @property
    def size(self) -> int:
        return self.kin_dyn.number_of_joints

    def set_kin_dyn(self, kin_dyn) -> None:
        super().set_kin_dyn(kin_dyn)
        if self._kp.shape[0] not in (1, kin_dyn.number_of_joints):
            raise TaskDefinitionError(
                f"{self.__class__.__name__} kp must be a vector of shape (1,) "
                f"or ({kin_dyn.number_of_joints},). Got {self._kp.shape}."
            )

    def set_set_point(
        self,
        joint_position: npt.ArrayLike,
        joint_velocity: Optional[npt.ArrayLike] = None,
    ) -> None:
        """Set the desired joint position and, optionally, the joint velocity.

        Args:
            joint_position: Desired joint positions.
            joint_velocity: Desired joint velocities. Defaults to zero.
        """
        joint_position = np.atleast_1d(np.asarray(joint_position, dtype=np.float64))
        if joint_position.shape != (self.size,):
            raise InvalidTarget(
                f"Expected joint position to have shape ({self.size},) but got "
                f"{joint_position.shape}"
            )
        if joint_velocity is None:
            joint_velocity = np.zeros(self.size)
        joint_velocity = np.atleast_1d(np.asarray(joint_velocity, dtype=np.float64))
        if joint_velocity.shape != (self.size,):
            raise InvalidTarget(
                f"Expected joint velocity to have shape ({self.size},) but got "
                f"{joint_velocity.shape}"
            )
        self._desired_position = joint_position.copy()
        self._desired_velocity = joint_velocity.copy()

    def set_variables_handler(self, handler) -> None:
        super().set_variables_handler(handler)
        self._A[:, self.joint_columns] = np.eye(self.size)

    def update(self) -> None:
        if self._desired_position is None or self._desired_velocity is None:
            raise TargetNotSet(self.__class__.__name__)
        error = self._desired_position - self.kin_dyn.get_joint_positions()
        self._b[:] = self._desired_velocity + self._kp * error

    def is_valid(self) -> bool:
        return super().is_valid() and self._desired_position is not None
