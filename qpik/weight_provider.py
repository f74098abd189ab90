"""Weight providers for soft tasks."""

from __future__ import annotations

import abc

import numpy as np
import numpy.typing as npt

from .exceptions import InvalidWeight, WeightProviderError


def check_weight(weight: npt.ArrayLike, size: int) -> np.ndarray:
    """Validate a weight vector and return it as a float array.

    Args:
        weight: Candidate weight.
        size: Expected number of entries.

    Raises:
        InvalidWeight: If the weight has the wrong shape, or holds negative or
            non-finite entries.
    """
    weight = np.asarray(weight, dtype=np.float64)
    if weight.ndim != 1 or weight.shape[0] != size:
        raise InvalidWeight(
            f"Weight must be a vector of shape ({size},). Got {weight.shape}."
        )
    if not np.all(np.isfinite(weight)):
        raise InvalidWeight("Weight must be finite.")
    if not np.all(weight >= 0.0):
        raise InvalidWeight("Weight must be >= 0.")
    return weight


class WeightProvider(abc.ABC):
    """Source of a (possibly time-varying) weight vector.

    The solver samples :meth:`get_output` once per control cycle. Providers
    are owned by the caller, solvers only keep weak references to them.
    """

    @abc.abstractmethod
    def get_output(self) -> np.ndarray:
        """Return the current weight vector."""
        raise NotImplementedError

    def is_output_valid(self) -> bool:
        return True

    def advance(self) -> bool:
        """Move the provider one step forward. Constant providers do nothing."""
        return True


class ConstantWeightProvider(WeightProvider):
    """Weight provider returning the same vector at every cycle."""

    def __init__(self, weight: npt.ArrayLike):
        weight = np.atleast_1d(np.asarray(weight, dtype=np.float64))
        self._weight = check_weight(weight, weight.shape[0])

    def get_output(self) -> np.ndarray:
        return self._weight

    def set_weight(self, weight: npt.ArrayLike) -> None:
        self._weight = check_weight(weight, self._weight.shape[0])


class TimeVaryingWeightProvider(WeightProvider):
    r"""Weight provider that blends linearly between two weight vectors.

    Every call to :meth:`advance` moves the internal clock by ``dt``. The
    output is

    .. math::

        w(t) = w_0 + \min(t / T, 1) (w_1 - w_0),

    where :math:`T` is the transition duration. This is typically used to
    activate or deactivate a soft task smoothly.

    Example:

    .. code-block:: python

        provider = TimeVaryingWeightProvider(np.zeros(6), dt=0.01)
        provider.set_transition(np.full(6, 10.0), duration=0.5)
        ik.add_task(task, "hand", priority=1, weight=provider)
        ...
        provider.advance()
        ik.advance()
    """

    def __init__(self, initial_weight: npt.ArrayLike, dt: float):
        if dt <= 0.0:
            raise WeightProviderError(f"`dt` must be > 0. Got {dt}.")
        initial_weight = np.atleast_1d(np.asarray(initial_weight, dtype=np.float64))
        self._size = initial_weight.shape[0]
        self._start = check_weight(initial_weight, self._size)
        self._end = self._start.copy()
        self._output = self._start.copy()
        self._duration = 0.0
        self._time = 0.0
        self.dt = dt

    def set_transition(self, target_weight: npt.ArrayLike, duration: float) -> None:
        """Start a transition from the current output to `target_weight`.

        Args:
            target_weight: Weight reached at the end of the transition.
            duration: Transition duration in [s]. Zero switches immediately.
        """
        if duration < 0.0:
            raise WeightProviderError(f"`duration` must be >= 0. Got {duration}.")
        self._end = check_weight(target_weight, self._size)
        self._start = self._output.copy()
        self._duration = duration
        self._time = 0.0
        if duration == 0.0:
            self._output = self._end.copy()

    @property
    def is_transition_complete(self) -> bool:
        return self._time >= self._duration

    def advance(self) -> bool:
        self._time += self.dt
        if self._duration == 0.0:
            alpha = 1.0
        else:
            alpha = min(self._time / self._duration, 1.0)
        self._output = self._start + alpha * (self._end - self._start)
        return True

    def get_output(self) -> np.ndarray:
        return self._output
