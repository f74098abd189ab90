"""Frame position task implementation."""

from __future__ import annotations

from typing import Optional

import numpy as np
import numpy.typing as npt

from ..exceptions import InvalidTarget, TargetNotSet, TaskDefinitionError
from .task import KinDynTask


class R3Task(KinDynTask):
    r"""Regulate the position of a frame of interest on the robot.

    The task requires the linear velocity of the frame origin to be

    .. math::

        J_p(q) \nu = \dot{p}^* + K_p (p^* - p(q)),

    where :math:`J_p` is the linear part of the frame Jacobian, :math:`\nu` the
    generalized robot velocity and :math:`p^*`, :math:`\dot{p}^*` the desired
    position and linear velocity in the world frame.

    Example:

    .. code-block:: python

        task = R3Task("tool", "site", kp_linear=10.0)
        task.set_kin_dyn(kin_dyn)
        task.set_variables_handler(variables_handler)
        task.set_set_point(np.array([0.5, 0.0, 0.3]))
    """

    k: int = 3

    def __init__(
        self,
        frame_name: str,
        frame_type: str,
        kp_linear: npt.ArrayLike = 1.0,
        robot_velocity_variable_name: str = "robot_velocity",
    ):
        super().__init__(robot_velocity_variable_name)
        self.frame_name = frame_name
        self.frame_type = frame_type
        self._kp_linear = _as_gain(kp_linear, self.__class__.__name__, "kp_linear")
        self._desired_position: Optional[np.ndarray] = None
        self._desired_velocity = np.zeros(3)

    @property
    def size(self) -> int:
        return self.k

    def set_set_point(
        self,
        position: npt.ArrayLike,
        linear_velocity: Optional[npt.ArrayLike] = None,
    ) -> None:
        """Set the desired position and linear velocity of the frame.

        Args:
            position: Desired position in the world frame.
            linear_velocity: Desired linear velocity. Defaults to zero.
        """
        self._desired_position = _as_vector3(position, "position")
        self._desired_velocity = (
            np.zeros(3)
            if linear_velocity is None
            else _as_vector3(linear_velocity, "linear velocity")
        )

    def set_set_point_from_kin_dyn(self) -> None:
        """Set the desired position to the current position of the frame."""
        position, _ = self.kin_dyn.get_frame_transform(self.frame_name, self.frame_type)
        self.set_set_point(position)

    def compute_error(self) -> np.ndarray:
        """Return the position error :math:`p^* - p(q)`."""
        if self._desired_position is None:
            raise TargetNotSet(self.__class__.__name__)
        position, _ = self.kin_dyn.get_frame_transform(self.frame_name, self.frame_type)
        return self._desired_position - position

    def update(self) -> None:
        error = self.compute_error()
        jacobian = self.kin_dyn.get_frame_jacobian(self.frame_name, self.frame_type)
        self._A[:, self.robot_velocity.slice] = jacobian[:3]
        self._b[:] = self._desired_velocity + self._kp_linear * error

    def is_valid(self) -> bool:
        return super().is_valid() and self._desired_position is not None


def _as_gain(gain: npt.ArrayLike, cls_name: str, label: str) -> np.ndarray:
    gain = np.atleast_1d(np.asarray(gain, dtype=np.float64))
    if gain.ndim != 1 or gain.shape[0] not in (1, 3):
        raise TaskDefinitionError(
            f"{cls_name} {label} should be a vector of shape 1 (identical gain for "
            f"all coordinates) or (3,) but got {gain.shape}"
        )
    if not np.all(gain >= 0.0):
        raise TaskDefinitionError(f"{cls_name} {label} should be >= 0")
    return gain


def _as_vector3(value: npt.ArrayLike, label: str) -> np.ndarray:
    vector = np.atleast_1d(np.asarray(value, dtype=np.float64))
    if vector.shape != (3,):
        raise InvalidTarget(
            f"Expected {label} to have shape (3,) but got {vector.shape}"
        )
    return vector.copy()
