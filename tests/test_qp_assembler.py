"""Tests for qp_assembler.py."""

import numpy as np
from absl.testing import absltest

from qpik import (
    AffineTask,
    AssemblyFailure,
    LinearTask,
    QPProblemAssembler,
    TaskRegistry,
    TaskType,
    VariablesHandler,
)


class NonFiniteTask(LinearTask):
    """Task whose b turns non-finite after the first update."""

    def __init__(self):
        super().__init__()
        self.calls = 0

    @property
    def size(self) -> int:
        return 1

    def update(self) -> None:
        self.calls += 1
        self._A[0, 0] = 1.0
        self._b[0] = 0.0 if self.calls == 1 else np.nan


class BoundTask(LinearTask):
    """Single-row inequality task with raw bounds."""

    type = TaskType.INEQUALITY

    def __init__(self, upper: float, lower: float):
        super().__init__()
        self.upper = upper
        self.lower = lower

    @property
    def size(self) -> int:
        return 1

    def update(self) -> None:
        self._A[0, 0] = 1.0
        self._b[0] = self.upper

    def get_lower_bound(self) -> np.ndarray:
        return np.array([self.lower])


class TestQPProblemAssembler(absltest.TestCase):
    def setUp(self):
        self.rng = np.random.default_rng(12345)
        self.handler = VariablesHandler()
        self.handler.add_variable("x", 4)
        self.registry = TaskRegistry()

    def _add(self, task, name, priority, weight=None):
        task.set_variables_handler(self.handler)
        self.registry.add(task, name, priority, weight)
        return task

    def _assembler(self, damping=1e-12):
        return QPProblemAssembler(
            self.registry.entries(), self.handler.get_number_of_variables(), damping
        )

    def test_cost_matches_weighted_least_squares(self):
        A1, b1 = self.rng.normal(size=(3, 4)), self.rng.normal(size=3)
        A2, b2 = self.rng.normal(size=(2, 4)), self.rng.normal(size=2)
        w1, w2 = np.array([1.0, 2.0, 3.0]), np.array([0.5, 4.0])
        tasks = [
            self._add(AffineTask(A1, b1), "first", 1, weight=w1),
            self._add(AffineTask(A2, b2), "second", 1, weight=w2),
        ]
        problem = self._assembler(damping=1e-3).assemble()

        expected_H = (
            1e-3 * np.eye(4) + A1.T @ np.diag(w1) @ A1 + A2.T @ np.diag(w2) @ A2
        )
        expected_g = -(A1.T @ np.diag(w1) @ b1 + A2.T @ np.diag(w2) @ b2)
        np.testing.assert_allclose(problem.H, expected_H)
        np.testing.assert_allclose(problem.g, expected_g)
        self.assertEqual(problem.A_eq.shape, (0, 4))
        self.assertEqual(problem.A_ineq.shape, (0, 4))
        self.assertLen(tasks, 2)

    def test_zero_weight_task_has_no_effect(self):
        task = self._add(AffineTask(np.eye(4), np.ones(4)), "task", 1, np.zeros(4))
        problem = self._assembler(damping=1e-12).assemble()
        np.testing.assert_allclose(problem.H, 1e-12 * np.eye(4))
        np.testing.assert_allclose(problem.g, np.zeros(4))
        self.assertIsNotNone(task)

    def test_hard_tasks_are_stacked_in_registration_order(self):
        first = self._add(AffineTask(np.eye(4)[:2], [1.0, 2.0]), "first", 0)
        limits = self._add(
            AffineTask(
                np.eye(4)[2:],
                upper_bound=[1.0, np.inf],
                lower_bound=[-1.0, -2.0],
                task_type=TaskType.INEQUALITY,
            ),
            "limits",
            0,
        )
        second = self._add(AffineTask(np.eye(4)[3:], [3.0]), "second", 0)
        problem = self._assembler().assemble()

        np.testing.assert_array_equal(
            problem.A_eq, np.vstack([np.eye(4)[:2], np.eye(4)[3:]])
        )
        np.testing.assert_array_equal(problem.b_eq, [1.0, 2.0, 3.0])
        np.testing.assert_array_equal(problem.A_ineq, np.eye(4)[2:])
        np.testing.assert_array_equal(problem.lb, [-1.0, -2.0])
        np.testing.assert_array_equal(problem.ub, [1.0, np.inf])
        self.assertLen([first, limits, second], 3)

    def test_inequalities_as_one_sided_drops_infinite_rows(self):
        task = self._add(
            AffineTask(
                np.eye(4)[:2],
                upper_bound=[1.0, np.inf],
                lower_bound=[-np.inf, -2.0],
                task_type=TaskType.INEQUALITY,
            ),
            "limits",
            0,
        )
        G, h = self._assembler().assemble().inequalities_as_one_sided()
        assert G is not None and h is not None
        np.testing.assert_array_equal(G, np.vstack([np.eye(4)[:1], -np.eye(4)[1:2]]))
        np.testing.assert_array_equal(h, [1.0, 2.0])
        self.assertIsNotNone(task)

    def test_unbounded_inequality_has_no_rows(self):
        task = self._add(
            AffineTask(np.eye(4), task_type=TaskType.INEQUALITY), "free", 0
        )
        problem = self._assembler().assemble()
        self.assertEqual(problem.inequalities_as_one_sided(), (None, None))
        qp = problem.to_qpsolvers()
        self.assertIsNone(qp.G)
        self.assertIsNone(qp.A)
        self.assertIsNotNone(task)

    def test_non_finite_b_throws(self):
        task = self._add(NonFiniteTask(), "task", 0)
        assembler = self._assembler()
        assembler.assemble()
        with self.assertRaises(AssemblyFailure):
            assembler.assemble()
        self.assertEqual(task.calls, 2)

    def test_unsatisfiable_bounds_throw(self):
        for upper, lower in ((-np.inf, -np.inf), (np.inf, np.inf), (-np.inf, 0.0)):
            with self.subTest(upper=upper, lower=lower):
                self.registry = TaskRegistry()
                task = self._add(BoundTask(upper, lower), "bound", 0)
                with self.assertRaises(AssemblyFailure):
                    self._assembler().assemble()
                self.assertIsNotNone(task)

    def test_destroyed_task_throws(self):
        self._add(AffineTask(np.eye(4), np.zeros(4)), "task", 0)
        with self.assertRaises(AssemblyFailure) as cm:
            self._assembler().assemble()
        self.assertEqual(str(cm.exception), "Task 'task' has been destroyed.")

    def test_invalid_task_throws(self):
        task = AffineTask(np.eye(4), np.zeros(4))
        self.registry.add(task, "task", 0)
        with self.assertRaises(AssemblyFailure) as cm:
            self._assembler().assemble()
        self.assertEqual(str(cm.exception), "Task 'task' is not valid.")


if __name__ == "__main__":
    absltest.main()
