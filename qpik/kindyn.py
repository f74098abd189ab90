"""Kinematic quantities of a MuJoCo robot model.

The :class:`KinDynComputations` class is the bridge between a MuJoCo model and
the tasks of the solver. It exposes frame poses and frame Jacobians expressed
in *mixed* representation: the linear part is the velocity of the frame origin
and the angular part is the angular velocity, both in the world frame.

The generalized robot velocity follows the same convention. For a floating
base robot, its first six entries are the linear and angular velocity of the
base expressed in the world frame, followed by the joint velocities. MuJoCo
stores the angular velocity of a free joint in the local body frame, the
conversion happens here.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import mujoco
import numpy as np
import numpy.typing as npt

from .exceptions import InvalidFrame, UnsupportedFrame, UnsupportedJoint

SUPPORTED_FRAMES = ("body", "geom", "site")

FRAME_TO_ENUM = {
    "body": mujoco.mjtObj.mjOBJ_BODY,
    "geom": mujoco.mjtObj.mjOBJ_GEOM,
    "site": mujoco.mjtObj.mjOBJ_SITE,
}
FRAME_TO_JAC_FUNC = {
    "body": mujoco.mj_jacBody,
    "geom": mujoco.mj_jacGeom,
    "site": mujoco.mj_jacSite,
}
FRAME_TO_POS_ATTR = {
    "body": "xpos",
    "geom": "geom_xpos",
    "site": "site_xpos",
}
FRAME_TO_XMAT_ATTR = {
    "body": "xmat",
    "geom": "geom_xmat",
    "site": "site_xmat",
}

_SCALAR_JOINTS = (mujoco.mjtJoint.mjJNT_HINGE.value, mujoco.mjtJoint.mjJNT_SLIDE.value)


class KinDynComputations:
    """Encapsulates a MuJoCo model and data for convenient access to kinematics.

    Supported models are made of hinge and slide joints, optionally preceded by
    a single free joint describing the floating base.

    Example:

    .. code-block:: python

        kin_dyn = KinDynComputations(model)
        kin_dyn.update(q)
        J = kin_dyn.get_frame_jacobian("tool", "site")
        position, rotation = kin_dyn.get_frame_transform("tool", "site")
    """

    def __init__(self, model: mujoco.MjModel, q: Optional[np.ndarray] = None):
        """Constructor.

        Args:
            model: Mujoco model.
            q: Configuration to initialize from. If None, the configuration
                is initialized to the default configuration `qpos0`.

        Raises:
            UnsupportedJoint: If the model holds ball joints, or a free joint
                that is not the first joint of the model.
        """
        self.model = model
        self.data = mujoco.MjData(model)

        self.is_floating_base = (
            model.njnt > 0
            and int(model.jnt_type[0]) == mujoco.mjtJoint.mjJNT_FREE.value
        )
        first = 1 if self.is_floating_base else 0
        for jnt in range(first, model.njnt):
            if int(model.jnt_type[jnt]) not in _SCALAR_JOINTS:
                raise UnsupportedJoint(
                    f"Joint '{model.joint(jnt).name}' has unsupported type "
                    f"{mujoco.mjtJoint(int(model.jnt_type[jnt])).name}. Only hinge and "
                    "slide joints are supported after the floating base."
                )
        self._scalar_joints = np.arange(first, model.njnt)
        self._base_body = int(model.jnt_bodyid[0]) if self.is_floating_base else 0

        self.update(q=q)

    def update(self, q: Optional[np.ndarray] = None) -> None:
        """Run forward kinematics.

        Args:
            q: Optional configuration vector to override internal `data.qpos` with.
        """
        if q is not None:
            self.data.qpos = q
        # The minimal function call required to get updated frame transforms is
        # mj_kinematics. An extra call to mj_comPos is required for updated
        # Jacobians.
        mujoco.mj_kinematics(self.model, self.data)
        mujoco.mj_comPos(self.model, self.data)

    @property
    def q(self) -> np.ndarray:
        """The current configuration vector."""
        return self.data.qpos.copy()

    @property
    def nv(self) -> int:
        """Size of the generalized robot velocity."""
        return self.model.nv

    @property
    def number_of_joints(self) -> int:
        return self._scalar_joints.shape[0]

    @property
    def joint_names(self) -> list[str]:
        return [self.model.joint(jnt).name for jnt in self._scalar_joints]

    def get_joint_positions(self) -> np.ndarray:
        qposadr = self.model.jnt_qposadr[self._scalar_joints]
        return self.data.qpos[qposadr].copy()

    def get_joint_limits(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return the position limits of the joints.

        Joints without limits are bounded by infinity.
        """
        lower = np.full(self.number_of_joints, -np.inf)
        upper = np.full(self.number_of_joints, np.inf)
        for i, jnt in enumerate(self._scalar_joints):
            if self.model.jnt_limited[jnt]:
                lower[i], upper[i] = self.model.jnt_range[jnt]
        return lower, upper

    def _frame_id(self, frame_name: str, frame_type: str) -> int:
        if frame_type not in SUPPORTED_FRAMES:
            raise UnsupportedFrame(frame_type, SUPPORTED_FRAMES)
        frame_id = mujoco.mj_name2id(self.model, FRAME_TO_ENUM[frame_type], frame_name)
        if frame_id == -1:
            count = {
                "body": self.model.nbody,
                "geom": self.model.ngeom,
                "site": self.model.nsite,
            }[frame_type]
            available = [
                mujoco.mj_id2name(self.model, FRAME_TO_ENUM[frame_type], i)
                for i in range(count)
            ]
            raise InvalidFrame(frame_name, frame_type, available)
        return frame_id

    def get_frame_jacobian(self, frame_name: str, frame_type: str) -> np.ndarray:
        """Compute the Jacobian of a frame in mixed representation.

        Args:
            frame_name: Name of the frame in the MJCF.
            frame_type: Type of frame. Can be a geom, a body or a site.

        Returns:
            Jacobian of shape (6, nv) mapping the generalized robot velocity to
            the linear and angular velocity of the frame in the world frame.
        """
        frame_id = self._frame_id(frame_name, frame_type)
        jac = np.empty((6, self.model.nv))
        FRAME_TO_JAC_FUNC[frame_type](
            self.model, self.data, jac[:3], jac[3:], frame_id
        )
        if self.is_floating_base:
            R_base = self.data.xmat[self._base_body].reshape(3, 3)
            jac[:, 3:6] = jac[:, 3:6] @ R_base.T
        return jac

    def get_frame_transform(
        self, frame_name: str, frame_type: str
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Get the pose of a frame in the world frame.

        Returns:
            Position of shape (3,) and rotation matrix of shape (3, 3).
        """
        frame_id = self._frame_id(frame_name, frame_type)
        position = getattr(self.data, FRAME_TO_POS_ATTR[frame_type])[frame_id].copy()
        xmat = getattr(self.data, FRAME_TO_XMAT_ATTR[frame_type])[frame_id]
        return position, xmat.reshape(3, 3).copy()

    def get_frame_homogeneous_transform(
        self, frame_name: str, frame_type: str
    ) -> np.ndarray:
        """Get the pose of a frame as a (4, 4) homogeneous matrix."""
        position, rotation = self.get_frame_transform(frame_name, frame_type)
        transform = np.eye(4)
        transform[:3, :3] = rotation
        transform[:3, 3] = position
        return transform

    def integrate(self, robot_velocity: npt.ArrayLike, dt: float) -> np.ndarray:
        """Integrate a generalized robot velocity starting from the current state.

        Args:
            robot_velocity: Generalized robot velocity in mixed representation.
            dt: Integration timestep in [s].

        Returns:
            The new configuration after integration.
        """
        qvel = np.array(robot_velocity, dtype=np.float64)
        if qvel.shape != (self.model.nv,):
            raise ValueError(
                f"Expected a velocity of shape ({self.model.nv},). Got {qvel.shape}."
            )
        if self.is_floating_base:
            R_base = self.data.xmat[self._base_body].reshape(3, 3)
            qvel[3:6] = R_base.T @ qvel[3:6]
        q = self.data.qpos.copy()
        mujoco.mj_integratePos(self.model, q, qvel, dt)
        return q

    def integrate_inplace(self, robot_velocity: npt.ArrayLike, dt: float) -> None:
        """Integrate a generalized robot velocity and update the state in place."""
        self.update(self.integrate(robot_velocity, dt))

    def check_limits(self, tol: float = 1e-6) -> bool:
        """Return True if the joint positions are within the model limits.

        A warning is logged for every joint outside of its limits.
        """
        q = self.get_joint_positions()
        lower, upper = self.get_joint_limits()
        within = True
        for name, value, low, high in zip(self.joint_names, q, lower, upper):
            if value < low - tol or value > high + tol:
                logging.warning(
                    f"Joint '{name}' value {value:.4f} is outside of its limits: "
                    f"[{low:.4f}, {high:.4f}]"
                )
                within = False
        return within
