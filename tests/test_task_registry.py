"""Tests for task_registry.py."""

import gc

import numpy as np
from absl.testing import absltest

from qpik import (
    AffineTask,
    AssemblyFailure,
    ConstantWeightProvider,
    DuplicateTaskName,
    InvalidPriority,
    InvalidTaskName,
    InvalidWeight,
    MissingWeightSource,
    PriorityTypeMismatch,
    TaskDefinitionError,
    TaskRegistry,
    TaskType,
    UnknownTask,
)


class TestTaskRegistry(absltest.TestCase):
    def setUp(self):
        self.registry = TaskRegistry()
        self.equality = AffineTask(np.eye(3), [1.0, 0.0, 0.0])
        self.inequality = AffineTask(
            np.eye(3), upper_bound=np.ones(3), task_type=TaskType.INEQUALITY
        )

    def test_names_keep_insertion_order(self):
        self.registry.add(self.inequality, "limits", 0)
        self.registry.add(self.equality, "target", 1, weight=np.ones(3))
        self.assertEqual(self.registry.names(), ["limits", "target"])
        self.assertLen(self.registry, 2)
        self.assertIn("limits", self.registry)
        self.assertEqual(
            [entry.name for entry in self.registry.entries(priority=1)], ["target"]
        )

    def test_duplicate_name_throws(self):
        self.registry.add(self.equality, "target", 0)
        with self.assertRaises(DuplicateTaskName) as cm:
            self.registry.add(self.inequality, "target", 0)
        self.assertEqual(str(cm.exception), "A task named 'target' already exists.")
        self.assertIs(self.registry.get_task("target"), self.equality)

    def test_empty_name_throws(self):
        with self.assertRaises(InvalidTaskName):
            self.registry.add(self.equality, "", 0)
        self.assertLen(self.registry, 0)

    def test_non_task_throws(self):
        for task in (None, np.eye(3)):
            with self.assertRaises(TaskDefinitionError):
                self.registry.add(task, "target", 0)
        self.assertLen(self.registry, 0)

    def test_invalid_priority_throws(self):
        for priority in (-1, 2, True):
            with self.assertRaises(InvalidPriority):
                self.registry.add(self.equality, "target", priority)
        self.assertLen(self.registry, 0)

    def test_soft_inequality_throws(self):
        with self.assertRaises(PriorityTypeMismatch):
            self.registry.add(self.inequality, "limits", 1, weight=np.ones(3))
        self.assertEqual(self.registry.names(), [])

    def test_soft_task_without_weight_throws(self):
        with self.assertRaises(MissingWeightSource):
            self.registry.add(self.equality, "target", 1)
        self.assertLen(self.registry, 0)

    def test_malformed_weight_throws(self):
        with self.assertRaises(InvalidWeight):
            self.registry.add(self.equality, "target", 1, weight=np.ones(2))
        with self.assertRaises(InvalidWeight):
            self.registry.add(self.equality, "target", 1, weight=-np.ones(3))
        self.assertLen(self.registry, 0)

    def test_hard_task_weight_is_ignored(self):
        with self.assertLogs(level="WARNING"):
            entry = self.registry.add(self.equality, "target", 0, weight=np.ones(3))
        self.assertIsNone(entry.weight)
        self.assertIsNone(entry.weight_provider)

    def test_set_weight(self):
        self.registry.add(self.equality, "target", 1, weight=np.ones(3))
        provider = ConstantWeightProvider([1.0, 2.0, 3.0])
        self.registry.set_weight("target", provider)
        self.assertIs(self.registry.get_weight_provider("target"), provider)
        entry = self.registry.get("target")
        assert entry is not None
        np.testing.assert_array_equal(entry.sample_weight(), [1.0, 2.0, 3.0])

        self.registry.set_weight("target", [4.0, 5.0, 6.0])
        self.assertIsNone(self.registry.get_weight_provider("target"))
        np.testing.assert_array_equal(entry.sample_weight(), [4.0, 5.0, 6.0])

    def test_set_weight_failures_leave_entry_unchanged(self):
        self.registry.add(self.equality, "target", 1, weight=np.ones(3))
        self.registry.add(self.inequality, "limits", 0)
        with self.assertRaises(UnknownTask):
            self.registry.set_weight("posture", np.ones(3))
        with self.assertRaises(InvalidPriority):
            self.registry.set_weight("limits", np.ones(3))
        with self.assertRaises(InvalidWeight):
            self.registry.set_weight("target", [1.0, np.nan, 1.0])
        entry = self.registry.get("target")
        assert entry is not None
        np.testing.assert_array_equal(entry.sample_weight(), np.ones(3))

    def test_registry_does_not_own_tasks_and_providers(self):
        task = AffineTask(np.eye(2), [0.0, 0.0])
        provider = ConstantWeightProvider(np.ones(2))
        self.registry.add(task, "task", 1, weight=provider)
        del provider
        gc.collect()
        self.assertIsNone(self.registry.get_weight_provider("task"))
        entry = self.registry.get("task")
        assert entry is not None
        with self.assertRaises(AssemblyFailure):
            entry.sample_weight()
        del task
        gc.collect()
        self.assertIsNone(self.registry.get_task("task"))
        self.assertIn("expired", self.registry.describe())

    def test_remove(self):
        self.registry.add(self.equality, "target", 0)
        self.registry.remove("target")
        self.assertLen(self.registry, 0)
        with self.assertRaises(UnknownTask):
            self.registry.remove("target")


if __name__ == "__main__":
    absltest.main()
