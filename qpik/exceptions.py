"""Exceptions specific to qpik."""

from typing import Optional, Sequence


class QPIKError(Exception):
    """Base class for qpik exceptions."""


# Task registry.


class DuplicateTaskName(QPIKError):
    """Exception raised when a task name is already registered."""

    def __init__(self, name: str):
        super().__init__(f"A task named '{name}' already exists.")


class InvalidTaskName(QPIKError):
    """Exception raised when a task name is empty."""


class InvalidPriority(QPIKError):
    """Exception raised when a priority is not supported."""


class PriorityTypeMismatch(QPIKError):
    """Exception raised when an inequality task is given a soft priority."""

    def __init__(self, name: str, priority: int):
        super().__init__(
            f"Task '{name}' is an inequality task and cannot have priority "
            f"{priority}. Inequality tasks must have priority 0."
        )


class MissingWeightSource(QPIKError):
    """Exception raised when a soft task is registered without a weight."""

    def __init__(self, name: str):
        super().__init__(
            f"Task '{name}' has priority 1 and requires a weight or a weight "
            "provider."
        )


class UnknownTask(QPIKError):
    """Exception raised when a task name is not registered."""

    def __init__(self, name: str, available: Optional[Sequence[str]] = None):
        message = f"Task '{name}' does not exist."
        if available is not None:
            message += f" Available task names: {list(available)}"
        super().__init__(message)


# Solver state machine.


class NotReady(QPIKError):
    """Exception raised when an operation is called in the wrong state."""


class AlreadyFinalized(QPIKError):
    """Exception raised when the solver topology is already locked."""

    def __init__(self, operation: str):
        super().__init__(f"Unable to call `{operation}` after `finalize`.")


class MissingRequiredVariable(QPIKError):
    """Exception raised when the variables handler lacks a required variable."""

    def __init__(self, name: str, available: Sequence[str]):
        super().__init__(
            f"Variable '{name}' does not exist in the variables handler. "
            f"Available variable names: {list(available)}"
        )


# Assembly and solve.


class AssemblyFailure(QPIKError):
    """Exception raised when the QP matrices cannot be assembled."""


class InvalidWeight(AssemblyFailure):
    """Exception raised when a task weight is malformed."""


class WeightProviderError(QPIKError):
    """Exception raised when a weight provider is incorrectly configured."""


class SolverFailure(QPIKError):
    """Exception raised when the QP solver fails to find a solution."""

    def __init__(self, solver_name: str, reason: Optional[str] = None):
        message = f"QP solver {solver_name} failed to find a solution."
        if reason is not None:
            message += f" {reason}"
        super().__init__(message)


# Parameters and variables.


class ParameterError(QPIKError):
    """Base class for parameter lookup errors."""


class ParameterNotFound(ParameterError):
    """Exception raised when a mandatory parameter is missing."""

    def __init__(self, name: str):
        super().__init__(f"Parameter '{name}' not found.")


class InvalidParameterType(ParameterError):
    """Exception raised when a parameter has an unexpected type."""

    def __init__(self, name: str, expected: type, value: object):
        super().__init__(
            f"Parameter '{name}' should be of type {expected.__name__} but got "
            f"{type(value).__name__}."
        )


class VariableDefinitionError(QPIKError):
    """Exception raised when a variable is incorrectly defined."""


# Tasks and kinematics.


class TaskDefinitionError(QPIKError):
    """Exception raised when a task is incorrectly defined."""


class TargetNotSet(QPIKError):
    """Exception raised when attempting to use a task with an unset target."""

    def __init__(self, cls_name: str):
        super().__init__(f"No target set for {cls_name}")


class InvalidTarget(QPIKError):
    """Exception raised when a task target is malformed."""


class InvalidFrame(QPIKError):
    """Exception raised when a frame name is not found in the robot model."""

    def __init__(self, frame_name: str, frame_type: str, available: Sequence[str]):
        super().__init__(
            f"Frame '{frame_name}' does not exist in the model. "
            f"Available {frame_type} names: {list(available)}"
        )


class UnsupportedFrame(QPIKError):
    """Exception raised when a frame type is unsupported."""

    def __init__(self, frame_type: str, supported_types: Sequence[str]):
        super().__init__(
            f"{frame_type} is not supported. "
            f"Supported frame types are: {list(supported_types)}"
        )


class UnsupportedJoint(QPIKError):
    """Exception raised when the model holds a joint type that is unsupported."""
