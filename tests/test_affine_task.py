"""Tests for affine_task.py."""

import numpy as np
from absl.testing import absltest

from qpik import (
    AffineTask,
    MissingRequiredVariable,
    TaskDefinitionError,
    TaskType,
    VariablesHandler,
)


class TestAffineTask(absltest.TestCase):
    def setUp(self):
        self.handler = VariablesHandler()
        self.handler.add_variable("robot_velocity", 3)
        self.handler.add_variable("slack", 2)

    def test_full_width(self):
        A = np.arange(10, dtype=np.float64).reshape(2, 5)
        task = AffineTask(A, [1.0, 2.0])
        self.assertFalse(task.is_valid())
        task.set_variables_handler(self.handler)
        self.assertTrue(task.is_valid())
        np.testing.assert_array_equal(task.get_a(), A)
        np.testing.assert_array_equal(task.get_b(), [1.0, 2.0])
        self.assertIsNone(task.get_lower_bound())

    def test_variable_columns(self):
        task = AffineTask(
            np.eye(2),
            upper_bound=[1.0, 2.0],
            lower_bound=[0.0, -np.inf],
            task_type=TaskType.INEQUALITY,
            variable_name="slack",
        )
        task.set_variables_handler(self.handler)
        expected = np.zeros((2, 5))
        expected[:, 3:] = np.eye(2)
        np.testing.assert_array_equal(task.get_a(), expected)
        np.testing.assert_array_equal(task.get_b(), [1.0, 2.0])
        np.testing.assert_array_equal(task.get_lower_bound(), [0.0, -np.inf])

    def test_inequality_defaults_to_unbounded(self):
        task = AffineTask(
            np.eye(2), task_type=TaskType.INEQUALITY, variable_name="slack"
        )
        task.set_variables_handler(self.handler)
        np.testing.assert_array_equal(task.get_b(), [np.inf, np.inf])
        self.assertIsNone(task.get_lower_bound())

    def test_invalid_definitions(self):
        with self.assertRaises(TaskDefinitionError):
            AffineTask(np.eye(2))
        with self.assertRaises(TaskDefinitionError):
            AffineTask(np.eye(2), [1.0, 2.0, 3.0])
        with self.assertRaises(TaskDefinitionError):
            AffineTask(np.eye(2), [0.0, 0.0], upper_bound=[1.0, 1.0])
        with self.assertRaises(TaskDefinitionError):
            AffineTask(
                np.eye(2),
                upper_bound=[0.0, 0.0],
                lower_bound=[1.0, 0.0],
                task_type=TaskType.INEQUALITY,
            )

    def test_unsatisfiable_bounds(self):
        with self.assertRaises(TaskDefinitionError):
            AffineTask(
                np.eye(2),
                upper_bound=[-np.inf, 1.0],
                task_type=TaskType.INEQUALITY,
            )
        with self.assertRaises(TaskDefinitionError):
            AffineTask(
                np.eye(2),
                upper_bound=[np.inf, np.inf],
                lower_bound=[np.inf, 0.0],
                task_type=TaskType.INEQUALITY,
            )

    def test_column_mismatch(self):
        task = AffineTask(np.eye(2), [0.0, 0.0])
        with self.assertRaises(TaskDefinitionError):
            task.set_variables_handler(self.handler)
        task = AffineTask(np.eye(2), [0.0, 0.0], variable_name="joint_velocity")
        with self.assertRaises(MissingRequiredVariable):
            task.set_variables_handler(self.handler)


if __name__ == "__main__":
    absltest.main()
