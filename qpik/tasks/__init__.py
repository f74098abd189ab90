"""Linear tasks."""

from .affine_task import AffineTask
from .damping_task import DampingTask
from .joint_limits_task import JointLimitsTask
from .joint_tracking_task import JointTrackingTask
from .r3_task import R3Task
from .se3_task import SE3Task
from .task import KinDynTask, LinearTask, RobotVelocityTask, TaskType

__all__ = (
    "AffineTask",
    "DampingTask",
    "JointLimitsTask",
    "JointTrackingTask",
    "KinDynTask",
    "LinearTask",
    "R3Task",
    "RobotVelocityTask",
    "SE3Task",
    "TaskType",
)
