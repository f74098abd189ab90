"""qpik: prioritized quadratic-programming inverse kinematics."""

from .exceptions import (
    AlreadyFinalized,
    AssemblyFailure,
    DuplicateTaskName,
    InvalidFrame,
    InvalidParameterType,
    InvalidPriority,
    InvalidTarget,
    InvalidTaskName,
    InvalidWeight,
    MissingRequiredVariable,
    MissingWeightSource,
    NotReady,
    ParameterError,
    ParameterNotFound,
    PriorityTypeMismatch,
    QPIKError,
    SolverFailure,
    TargetNotSet,
    TaskDefinitionError,
    UnknownTask,
    UnsupportedFrame,
    UnsupportedJoint,
    VariableDefinitionError,
    WeightProviderError,
)
from .kindyn import SUPPORTED_FRAMES, KinDynComputations
from .linear_task_solver import (
    IntegrationBasedIK,
    IntegrationBasedIKState,
    LinearTaskSolver,
)
from .parameters_handler import ParametersHandler, StdParametersHandler
from .qp_assembler import QPProblem, QPProblemAssembler
from .qp_inverse_kinematics import QPInverseKinematics
from .task_registry import TaskRegistry
from .tasks import (
    AffineTask,
    DampingTask,
    JointLimitsTask,
    JointTrackingTask,
    KinDynTask,
    LinearTask,
    R3Task,
    RobotVelocityTask,
    SE3Task,
    TaskType,
)
from .variables_handler import VariableDescription, VariablesHandler
from .weight_provider import (
    ConstantWeightProvider,
    TimeVaryingWeightProvider,
    WeightProvider,
)

__version__ = "0.1.0"

__all__ = (
    "AffineTask",
    "ConstantWeightProvider",
    "DampingTask",
    "IntegrationBasedIK",
    "IntegrationBasedIKState",
    "JointLimitsTask",
    "JointTrackingTask",
    "KinDynComputations",
    "KinDynTask",
    "LinearTask",
    "LinearTaskSolver",
    "ParametersHandler",
    "QPInverseKinematics",
    "QPProblem",
    "QPProblemAssembler",
    "R3Task",
    "RobotVelocityTask",
    "SE3Task",
    "StdParametersHandler",
    "SUPPORTED_FRAMES",
    "TaskRegistry",
    "TaskType",
    "TimeVaryingWeightProvider",
    "VariableDescription",
    "VariablesHandler",
    "WeightProvider",
    "AlreadyFinalized",
    "AssemblyFailure",
    "DuplicateTaskName",
    "InvalidFrame",
    "InvalidParameterType",
    "InvalidPriority",
    "InvalidTarget",
    "InvalidTaskName",
    "InvalidWeight",
    "MissingRequiredVariable",
    "MissingWeightSource",
    "NotReady",
    "ParameterError",
    "ParameterNotFound",
    "PriorityTypeMismatch",
    "QPIKError",
    "SolverFailure",
    "TargetNotSet",
    "TaskDefinitionError",
    "UnknownTask",
    "UnsupportedFrame",
    "UnsupportedJoint",
    "VariableDefinitionError",
    "WeightProviderError",
)
