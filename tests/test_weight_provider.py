"""Tests for weight_provider.py."""

import numpy as np
from absl.testing import absltest

from qpik import (
    ConstantWeightProvider,
    InvalidWeight,
    QPIKError,
    TimeVaryingWeightProvider,
    WeightProviderError,
)


class TestConstantWeightProvider(absltest.TestCase):
    def test_output_is_constant(self):
        provider = ConstantWeightProvider([1.0, 2.0])
        self.assertTrue(provider.advance())
        np.testing.assert_array_equal(provider.get_output(), [1.0, 2.0])
        self.assertTrue(provider.is_output_valid())

    def test_negative_weight_throws(self):
        with self.assertRaises(InvalidWeight) as cm:
            ConstantWeightProvider([1.0, -2.0])
        self.assertEqual(str(cm.exception), "Weight must be >= 0.")

    def test_non_finite_weight_throws(self):
        with self.assertRaises(InvalidWeight):
            ConstantWeightProvider([np.nan])
        provider = ConstantWeightProvider([1.0])
        with self.assertRaises(InvalidWeight):
            provider.set_weight([np.inf])
        np.testing.assert_array_equal(provider.get_output(), [1.0])

    def test_set_weight_keeps_size(self):
        provider = ConstantWeightProvider([1.0, 1.0])
        with self.assertRaises(InvalidWeight):
            provider.set_weight([1.0, 1.0, 1.0])
        provider.set_weight([0.0, 3.0])
        np.testing.assert_array_equal(provider.get_output(), [0.0, 3.0])


class TestTimeVaryingWeightProvider(absltest.TestCase):
    def test_linear_transition(self):
        provider = TimeVaryingWeightProvider(np.zeros(2), dt=0.25)
        provider.set_transition([10.0, 20.0], duration=1.0)
        self.assertFalse(provider.is_transition_complete)
        provider.advance()
        np.testing.assert_allclose(provider.get_output(), [2.5, 5.0])
        for _ in range(3):
            provider.advance()
        np.testing.assert_allclose(provider.get_output(), [10.0, 20.0])
        self.assertTrue(provider.is_transition_complete)
        # The output saturates at the target.
        provider.advance()
        np.testing.assert_allclose(provider.get_output(), [10.0, 20.0])

    def test_transition_starts_from_current_output(self):
        provider = TimeVaryingWeightProvider([4.0], dt=0.5)
        provider.set_transition([0.0], duration=1.0)
        provider.advance()
        np.testing.assert_allclose(provider.get_output(), [2.0])
        provider.set_transition([6.0], duration=1.0)
        provider.advance()
        np.testing.assert_allclose(provider.get_output(), [4.0])

    def test_zero_duration_switches_immediately(self):
        provider = TimeVaryingWeightProvider([1.0], dt=0.1)
        provider.set_transition([5.0], duration=0.0)
        np.testing.assert_array_equal(provider.get_output(), [5.0])

    def test_invalid_arguments_throw(self):
        with self.assertRaises(WeightProviderError):
            TimeVaryingWeightProvider([1.0], dt=0.0)
        provider = TimeVaryingWeightProvider([1.0], dt=0.1)
        with self.assertRaises(WeightProviderError):
            provider.set_transition([1.0], duration=-1.0)
        with self.assertRaises(InvalidWeight):
            provider.set_transition([-1.0], duration=1.0)

    def test_configuration_errors_are_qpik_errors(self):
        self.assertTrue(issubclass(WeightProviderError, QPIKError))
        with self.assertRaises(QPIKError):
            TimeVaryingWeightProvider([1.0], dt=-0.5)


if __name__ == "__main__":
    absltest.main()
