"""Registry of named tasks with their priority and weight source."""

from __future__ import annotations

import logging
import weakref
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

import numpy as np
import numpy.typing as npt

from .exceptions import (
    AssemblyFailure,
    DuplicateTaskName,
    InvalidPriority,
    InvalidTaskName,
    MissingWeightSource,
    PriorityTypeMismatch,
    TaskDefinitionError,
    UnknownTask,
)
from .tasks import LinearTask, TaskType
from .weight_provider import WeightProvider, check_weight

HARD_PRIORITY = 0
SOFT_PRIORITY = 1
SUPPORTED_PRIORITIES = (HARD_PRIORITY, SOFT_PRIORITY)

Weight = Union[npt.ArrayLike, WeightProvider]


@dataclass
class TaskEntry:
    """Registry entry. Tasks and providers are referenced, never owned."""

    name: str
    task_ref: weakref.ref
    priority: int
    type: TaskType
    size: int
    weight: Optional[np.ndarray] = None
    weight_provider_ref: Optional[weakref.ref] = None

    @property
    def task(self) -> Optional[LinearTask]:
        return self.task_ref()

    @property
    def weight_provider(self) -> Optional[WeightProvider]:
        if self.weight_provider_ref is None:
            return None
        return self.weight_provider_ref()

    def sample_weight(self) -> np.ndarray:
        """Return the weight of the current cycle.

        Raises:
            AssemblyFailure: If the entry has no weight source, the provider was
                destroyed or returned an invalid weight.
        """
        if self.weight is not None:
            return self.weight
        if self.weight_provider_ref is None:
            raise AssemblyFailure(f"Task '{self.name}' has no weight source.")
        provider = self.weight_provider_ref()
        if provider is None:
            raise AssemblyFailure(
                f"The weight provider of task '{self.name}' has been destroyed."
            )
        if not provider.is_output_valid():
            raise AssemblyFailure(
                f"The weight provider of task '{self.name}' has an invalid output."
            )
        return check_weight(provider.get_output(), self.size)

    def weight_description(self) -> str:
        if self.priority == HARD_PRIORITY:
            return "none"
        if self.weight is not None:
            return f"constant {np.array2string(self.weight, precision=4)}"
        provider = self.weight_provider
        if provider is None:
            return "expired provider"
        return f"provider {provider.__class__.__name__}"


class TaskRegistry:
    """Named collection of tasks stratified by priority.

    Priority 0 tasks are hard constraints. Priority 1 tasks are soft and
    require a weight, either a constant vector or a :class:`WeightProvider`.
    Inequality tasks can only be hard. Names are kept in insertion order, which
    is also the order used to stack the QP rows.
    """

    def __init__(self):
        self._entries: Dict[str, TaskEntry] = {}

    def add(
        self,
        task: LinearTask,
        name: str,
        priority: int,
        weight: Optional[Weight] = None,
    ) -> TaskEntry:
        """Register a task.

        The registry is left untouched if any check fails.

        Raises:
            TaskDefinitionError: If `task` is not a LinearTask.
            DuplicateTaskName: If `name` is already registered.
            InvalidTaskName: If `name` is empty.
            InvalidPriority: If `priority` is not 0 or 1.
            PriorityTypeMismatch: If an inequality task has priority 1.
            MissingWeightSource: If a priority 1 task has no weight.
            InvalidWeight: If a constant weight is malformed.
        """
        if not isinstance(task, LinearTask):
            raise TaskDefinitionError(
                f"Task '{name}' must be a LinearTask. Got {type(task).__name__}."
            )
        if not name:
            raise InvalidTaskName("Task name must be non-empty.")
        if name in self._entries:
            raise DuplicateTaskName(name)
        if isinstance(priority, bool) or priority not in SUPPORTED_PRIORITIES:
            raise InvalidPriority(
                f"Task '{name}' has priority {priority}. Supported priorities are "
                f"{list(SUPPORTED_PRIORITIES)}."
            )
        if task.type is TaskType.INEQUALITY and priority != HARD_PRIORITY:
            raise PriorityTypeMismatch(name, priority)

        entry = TaskEntry(
            name=name,
            task_ref=weakref.ref(task),
            priority=priority,
            type=task.type,
            size=task.size,
        )
        if priority == SOFT_PRIORITY:
            if weight is None:
                raise MissingWeightSource(name)
            self._assign_weight(entry, weight)
        elif weight is not None:
            logging.warning(
                f"Task '{name}' has priority {HARD_PRIORITY}, its weight is ignored."
            )

        self._entries[name] = entry
        return entry

    def remove(self, name: str) -> None:
        self._get_entry(name)
        del self._entries[name]

    def set_weight(self, name: str, weight: Weight) -> None:
        """Replace the weight source of a soft task.

        Raises:
            UnknownTask: If `name` is not registered.
            InvalidPriority: If the task is a hard task.
            InvalidWeight: If a constant weight is malformed.
        """
        entry = self._get_entry(name)
        if entry.priority != SOFT_PRIORITY:
            raise InvalidPriority(
                f"Task '{name}' has priority {entry.priority}. Weights only apply "
                f"to tasks with priority {SOFT_PRIORITY}."
            )
        self._assign_weight(entry, weight)

    @staticmethod
    def _assign_weight(entry: TaskEntry, weight: Weight) -> None:
        # Validate before mutating so that a failure leaves the entry unchanged.
        if isinstance(weight, WeightProvider):
            entry.weight_provider_ref = weakref.ref(weight)
            entry.weight = None
        else:
            value = check_weight(weight, entry.size)
            entry.weight = value
            entry.weight_provider_ref = None

    def _get_entry(self, name: str) -> TaskEntry:
        try:
            return self._entries[name]
        except KeyError:
            raise UnknownTask(name, list(self._entries)) from None

    def get(self, name: str) -> Optional[TaskEntry]:
        return self._entries.get(name)

    def get_task(self, name: str) -> Optional[LinearTask]:
        entry = self._entries.get(name)
        return None if entry is None else entry.task

    def get_weight_provider(self, name: str) -> Optional[WeightProvider]:
        entry = self._entries.get(name)
        return None if entry is None else entry.weight_provider

    def names(self) -> List[str]:
        return list(self._entries)

    def entries(self, priority: Optional[int] = None) -> List[TaskEntry]:
        """Entries in insertion order, optionally filtered by priority."""
        return [
            entry
            for entry in self._entries.values()
            if priority is None or entry.priority == priority
        ]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def describe(self) -> str:
        lines = []
        for entry in self._entries.values():
            task = entry.task
            description = "expired" if task is None else task.get_description()
            lines.append(
                f"- {entry.name}: {description}, priority {entry.priority}, "
                f"{entry.type.value}, size {entry.size}, "
                f"weight {entry.weight_description()}"
            )
        return "\n".join(lines)
