"""Tests for parameters_handler.py."""

from absl.testing import absltest

from qpik import InvalidParameterType, ParameterNotFound, StdParametersHandler


class TestStdParametersHandler(absltest.TestCase):
    def setUp(self):
        self.params = StdParametersHandler(
            {
                "robot_velocity_variable_name": "robot_velocity",
                "verbosity": True,
                "damping": 1,
                "task": {"kp": 2.0},
            }
        )

    def test_typed_lookup(self):
        self.assertEqual(
            self.params.get_parameter("robot_velocity_variable_name", str),
            "robot_velocity",
        )
        self.assertTrue(self.params.get_parameter("verbosity", bool))

    def test_int_is_promoted_to_float(self):
        damping = self.params.get_parameter("damping", float)
        self.assertIsInstance(damping, float)
        self.assertEqual(damping, 1.0)

    def test_missing_parameter_uses_default(self):
        self.assertEqual(self.params.get_parameter("qp_solver", str, "daqp"), "daqp")
        self.assertFalse(self.params.has_parameter("qp_solver"))

    def test_missing_mandatory_parameter_throws(self):
        with self.assertRaises(ParameterNotFound) as cm:
            self.params.get_parameter("qp_solver", str)
        self.assertEqual(str(cm.exception), "Parameter 'qp_solver' not found.")

    def test_wrong_type_throws(self):
        with self.assertRaises(InvalidParameterType) as cm:
            self.params.get_parameter("verbosity", str)
        self.assertEqual(
            str(cm.exception),
            "Parameter 'verbosity' should be of type str but got bool.",
        )
        with self.assertRaises(InvalidParameterType):
            self.params.get_parameter("verbosity", float)

    def test_groups(self):
        group = self.params.get_group("task")
        self.assertEqual(group.get_parameter("kp", float), 2.0)
        group.set_parameter("kd", 0.5)
        self.assertEqual(group.keys(), ["kp", "kd"])

    def test_clear(self):
        self.assertFalse(self.params.is_empty())
        self.params.clear()
        self.assertTrue(self.params.is_empty())


if __name__ == "__main__":
    absltest.main()
