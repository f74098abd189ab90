"""Frame pose task implementation."""

from __future__ import annotations

from typing import Optional

import mujoco
import numpy as np
import numpy.typing as npt

from ..exceptions import InvalidTarget, TargetNotSet
from .r3_task import _as_gain, _as_vector3
from .task import KinDynTask


def rotation_error(rotation: np.ndarray, desired_rotation: np.ndarray) -> np.ndarray:
    r"""Return :math:`\log(R^* R^\top)^\vee`, the rotation error in the world frame."""
    error = desired_rotation @ rotation.T
    quat = np.empty(4)
    mujoco.mju_mat2Quat(quat, error.ravel())
    tangent = np.empty(3)
    mujoco.mju_quat2Vel(tangent, quat, 1.0)
    return tangent


class SE3Task(KinDynTask):
    r"""Regulate the position and orientation of a frame of interest.

    The task requires the mixed velocity of the frame to be

    .. math::

        J(q) \nu = \begin{bmatrix}
            \dot{p}^* + K_p (p^* - p(q)) \\
            \omega^* + K_\omega \log(R^* R(q)^\top)^\vee
        \end{bmatrix},

    where :math:`J` is the frame Jacobian in mixed representation, :math:`\nu`
    the generalized robot velocity, :math:`(p^*, R^*)` the desired pose and
    :math:`(\dot{p}^*, \omega^*)` the desired mixed velocity.

    Example:

    .. code-block:: python

        task = SE3Task("tool", "site", kp_linear=10.0, kp_angular=10.0)
        task.set_kin_dyn(kin_dyn)
        task.set_variables_handler(variables_handler)
        task.set_set_point(I_H_F, mixed_velocity=np.zeros(6))
    """

    k: int = 6

    def __init__(
        self,
        frame_name: str,
        frame_type: str,
        kp_linear: npt.ArrayLike = 1.0,
        kp_angular: npt.ArrayLike = 1.0,
        robot_velocity_variable_name: str = "robot_velocity",
    ):
        super().__init__(robot_velocity_variable_name)
        self.frame_name = frame_name
        self.frame_type = frame_type
        name = self.__class__.__name__
        self._kp_linear = _as_gain(kp_linear, name, "kp_linear")
        self._kp_angular = _as_gain(kp_angular, name, "kp_angular")
        self._desired_position: Optional[np.ndarray] = None
        self._desired_rotation: Optional[np.ndarray] = None
        self._desired_velocity = np.zeros(6)

    @property
    def size(self) -> int:
        return self.k

    def set_set_point(
        self,
        I_H_F: npt.ArrayLike,
        mixed_velocity: Optional[npt.ArrayLike] = None,
    ) -> None:
        """Set the desired pose and mixed velocity of the frame.

        Args:
            I_H_F: Desired pose as a (4, 4) homogeneous transform from the frame
                to the world frame.
            mixed_velocity: Desired linear and angular velocity in the world
                frame. Defaults to zero.
        """
        I_H_F = np.asarray(I_H_F, dtype=np.float64)
        if I_H_F.shape != (4, 4):
            raise InvalidTarget(
                f"Expected a homogeneous transform of shape (4, 4) but got "
                f"{I_H_F.shape}"
            )
        rotation = I_H_F[:3, :3]
        if not np.allclose(rotation @ rotation.T, np.eye(3), atol=1e-6):
            raise InvalidTarget("The rotation part of the transform is not orthogonal.")
        if mixed_velocity is None:
            velocity = np.zeros(6)
        else:
            velocity = np.atleast_1d(np.asarray(mixed_velocity, dtype=np.float64))
            if velocity.shape != (6,):
                raise InvalidTarget(
                    f"Expected mixed velocity to have shape (6,) but got "
                    f"{velocity.shape}"
                )
        self._desired_position = _as_vector3(I_H_F[:3, 3], "position")
        self._desired_rotation = rotation.copy()
        self._desired_velocity = velocity.copy()

    def set_set_point_from_kin_dyn(self) -> None:
        """Set the desired pose to the current pose of the frame."""
        self.set_set_point(
            self.kin_dyn.get_frame_homogeneous_transform(
                self.frame_name, self.frame_type
            )
        )

    def compute_error(self) -> np.ndarray:
        """Return the position and rotation errors stacked in a vector of size 6."""
        if self._desired_position is None or self._desired_rotation is None:
            raise TargetNotSet(self.__class__.__name__)
        position, rotation = self.kin_dyn.get_frame_transform(
            self.frame_name, self.frame_type
        )
        return np.concatenate(
            [
                self._desired_position - position,
                rotation_error(rotation, self._desired_rotation),
            ]
        )

    def update(self) -> None:
        error = self.compute_error()
        jacobian = self.kin_dyn.get_frame_jacobian(self.frame_name, self.frame_type)
        self._A[:, self.robot_velocity.slice] = jacobian
        self._b[:3] = self._desired_velocity[:3] + self._kp_linear * error[:3]
        self._b[3:] = self._desired_velocity[3:] + self._kp_angular * error[3:]

    def is_valid(self) -> bool:
        return super().is_valid() and self._desired_position is not None
