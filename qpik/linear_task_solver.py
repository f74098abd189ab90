"""Contract shared by the solvers of linear tasks."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

import numpy as np

from .parameters_handler import ParametersHandler
from .tasks import LinearTask
from .variables_handler import VariablesHandler
from .weight_provider import WeightProvider

StateT = TypeVar("StateT")


class LinearTaskSolver(abc.ABC, Generic[StateT]):
    """Solver of a stack of prioritized linear tasks.

    All the mutating operations return a boolean success flag instead of
    raising. Concrete solvers record the reason of the last failure.
    """

    @abc.abstractmethod
    def initialize(self, param_handler: ParametersHandler) -> bool:
        raise NotImplementedError

    @abc.abstractmethod
    def add_task(
        self,
        task: LinearTask,
        task_name: str,
        priority: int,
        weight=None,
    ) -> bool:
        raise NotImplementedError

    @abc.abstractmethod
    def set_task_weight(self, task_name: str, weight) -> bool:
        raise NotImplementedError

    @abc.abstractmethod
    def get_task_weight_provider(self, task_name: str) -> Optional[WeightProvider]:
        raise NotImplementedError

    @abc.abstractmethod
    def get_task_names(self) -> List[str]:
        raise NotImplementedError

    @abc.abstractmethod
    def get_task(self, name: str) -> Optional[LinearTask]:
        raise NotImplementedError

    @abc.abstractmethod
    def finalize(self, handler: VariablesHandler) -> bool:
        raise NotImplementedError

    @abc.abstractmethod
    def advance(self) -> bool:
        raise NotImplementedError

    @abc.abstractmethod
    def is_output_valid(self) -> bool:
        raise NotImplementedError

    @abc.abstractmethod
    def get_output(self) -> StateT:
        raise NotImplementedError

    @abc.abstractmethod
    def get_raw_solution(self) -> np.ndarray:
        raise NotImplementedError

    @abc.abstractmethod
    def to_string(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.to_string()


@dataclass
class IntegrationBasedIKState:
    """Output of an integration based inverse kinematics.

    Attributes:
        base_velocity: Base linear and angular velocity in the world frame.
            Empty for fixed base robots.
        joint_velocity: Joint velocities.
    """

    base_velocity: np.ndarray = field(default_factory=lambda: np.zeros(0))
    joint_velocity: np.ndarray = field(default_factory=lambda: np.zeros(0))

    @property
    def robot_velocity(self) -> np.ndarray:
        """Generalized robot velocity, to be integrated by the caller."""
        return np.concatenate([self.base_velocity, self.joint_velocity])


class IntegrationBasedIK(LinearTaskSolver[IntegrationBasedIKState]):
    """Inverse kinematics whose output is a velocity to be integrated."""
