"""Joint limits task implementation."""

from __future__ import annotations

from typing import Optional

import numpy as np
import numpy.typing as npt

from ..exceptions import TaskDefinitionError
from .task import KinDynTask, TaskType


class JointLimitsTask(KinDynTask):
    r"""Keep the joints within their position limits.

    The task is the two-sided inequality

    .. math::

        k \frac{s_{\min} - s}{\Delta t} \leq \dot{s} \leq
        k \frac{s_{\max} - s}{\Delta t},

    where :math:`k \in (0, 1]` limits how fast a joint may approach its bound
    within one control cycle of duration :math:`\Delta t`. Joints without limits
    are unbounded; their rows are dropped by the solver.

    The task can only be used with priority 0.
    """

    type = TaskType.INEQUALITY

    def __init__(
        self,
        dt: float,
        gain: float = 1.0,
        lower_limits: Optional[npt.ArrayLike] = None,
        upper_limits: Optional[npt.ArrayLike] = None,
        robot_velocity_variable_name: str = "robot_velocity",
    ):
        """Constructor.

        Args:
            dt: Duration of the control cycle in [s].
            gain: Fraction of the remaining distance to the limit that can be
                covered in one cycle, in (0, 1].
            lower_limits: Joint lower limits. Defaults to the model limits.
            upper_limits: Joint upper limits. Defaults to the model limits.
            robot_velocity_variable_name: Name of the robot velocity variable.
        """
        super().__init__(robot_velocity_variable_name)
        if dt <= 0.0:
            raise TaskDefinitionError(f"{self.__class__.__name__} dt must be > 0")
        if not 0.0 < gain <= 1.0:
            raise TaskDefinitionError(
                f"{self.__class__.__name__} gain must be in the range (0, 1]"
            )
        self.dt = dt
        self.gain = gain
        self._custom_lower = lower_limits
        self._custom_upper = upper_limits
        self._lower_limits = np.zeros(0)
        self._upper_limits = np.zeros(0)
        self._lower_bound = np.zeros(0)

    @property
    def size(self) -> int:
        return self.kin_dyn.number_of_joints

    def set_kin_dyn(self, kin_dyn) -> None:
        super().set_kin_dyn(kin_dyn)
        lower, upper = kin_dyn.get_joint_limits()
        if self._custom_lower is not None:
            lower = self._as_limits(self._custom_lower, "lower")
        if self._custom_upper is not None:
            upper = self._as_limits(self._custom_upper, "upper")
        if np.any(lower > upper):
            raise TaskDefinitionError(
                f"{self.__class__.__name__} lower limits must be <= upper limits."
            )
        self._lower_limits = lower
        self._upper_limits = upper
        self._lower_bound = np.full(self.size, -np.inf)

    def _as_limits(self, limits: npt.ArrayLike, label: str) -> np.ndarray:
        limits = np.atleast_1d(np.asarray(limits, dtype=np.float64))
        if limits.shape != (self.size,):
            raise TaskDefinitionError(
                f"{self.__class__.__name__} {label} limits must be a vector of "
                f"shape ({self.size},). Got {limits.shape}."
            )
        return limits

    def set_variables_handler(self, handler) -> None:
        super().set_variables_handler(handler)
        self._A[:, self.joint_columns] = np.eye(self.size)
        self._lower_bound = np.full(self.size, -np.inf)

    def update(self) -> None:
        q = self.kin_dyn.get_joint_positions()
        scale = self.gain / self.dt
        # Infinite limits stay infinite.
        with np.errstate(invalid="ignore"):
            self._b[:] = scale * (self._upper_limits - q)
            self._lower_bound[:] = scale * (self._lower_limits - q)

    def get_lower_bound(self) -> Optional[np.ndarray]:
        return self._lower_bound
