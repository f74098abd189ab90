"""Affine task implementation."""

from __future__ import annotations

from typing import Optional

import numpy as np
import numpy.typing as npt

from ..exceptions import MissingRequiredVariable, TaskDefinitionError
from ..variables_handler import VariablesHandler
from .task import LinearTask, TaskType


class AffineTask(LinearTask):
    r"""Task with constant matrices :math:`A` and :math:`b`.

    The matrix either spans the whole decision vector or, when
    ``variable_name`` is given, only the columns of that variable. In the
    latter case the remaining columns are zero.

    Example:

    .. code-block:: python

        # Pin the first three entries of the decision vector.
        task = AffineTask(np.eye(3), [1.0, 0.0, 0.0])

        # Two-sided bound on a slack variable.
        task = AffineTask(
            np.eye(2),
            upper_bound=[1.0, 1.0],
            lower_bound=[-1.0, 0.0],
            task_type=TaskType.INEQUALITY,
            variable_name="slack",
        )
    """

    def __init__(
        self,
        A: npt.ArrayLike,
        b: Optional[npt.ArrayLike] = None,
        task_type: TaskType = TaskType.EQUALITY,
        lower_bound: Optional[npt.ArrayLike] = None,
        upper_bound: Optional[npt.ArrayLike] = None,
        variable_name: Optional[str] = None,
    ):
        super().__init__()
        A = np.atleast_2d(np.asarray(A, dtype=np.float64))
        if A.ndim != 2:
            raise TaskDefinitionError(
                f"{self.__class__.__name__} A must be a matrix. Got {A.shape}."
            )
        self.type = task_type
        self.variable_name = variable_name
        self._local_A = A

        if task_type is TaskType.EQUALITY:
            if lower_bound is not None or upper_bound is not None:
                raise TaskDefinitionError(
                    f"{self.__class__.__name__} bounds are only allowed for "
                    "inequality tasks."
                )
            if b is None:
                raise TaskDefinitionError(
                    f"{self.__class__.__name__} equality task requires b."
                )
            self._local_b = self._as_vector(b, "b")
            self._lower_bound = None
        else:
            if b is not None and upper_bound is not None:
                raise TaskDefinitionError(
                    f"{self.__class__.__name__} got both b and upper_bound."
                )
            upper = upper_bound if upper_bound is not None else b
            self._local_b = (
                np.full(self.size, np.inf)
                if upper is None
                else self._as_vector(upper, "upper_bound")
            )
            self._lower_bound = (
                None
                if lower_bound is None
                else self._as_vector(lower_bound, "lower_bound")
            )
            if np.any(self._local_b == -np.inf) or (
                self._lower_bound is not None
                and np.any(self._lower_bound == np.inf)
            ):
                raise TaskDefinitionError(
                    f"{self.__class__.__name__} upper bound cannot be -inf and lower "
                    "bound cannot be +inf."
                )
            if self._lower_bound is not None and np.any(
                self._lower_bound > self._local_b
            ):
                raise TaskDefinitionError(
                    f"{self.__class__.__name__} lower bound must be <= upper bound."
                )

    def _as_vector(self, value: npt.ArrayLike, label: str) -> np.ndarray:
        vector = np.atleast_1d(np.asarray(value, dtype=np.float64))
        if vector.shape != (self.size,):
            raise TaskDefinitionError(
                f"{self.__class__.__name__} {label} must be a vector of shape "
                f"({self.size},). Got {vector.shape}."
            )
        return vector

    @property
    def size(self) -> int:
        return self._local_A.shape[0]

    def set_variables_handler(self, handler: VariablesHandler) -> None:
        super().set_variables_handler(handler)
        if self.variable_name is None:
            columns = slice(0, handler.get_number_of_variables())
        else:
            variable = handler.get_variable(self.variable_name)
            if variable is None:
                raise MissingRequiredVariable(self.variable_name, handler.names)
            columns = variable.slice
        width = columns.stop - columns.start
        if self._local_A.shape[1] != width:
            raise TaskDefinitionError(
                f"{self.__class__.__name__} A has {self._local_A.shape[1]} columns "
                f"but the variable spans {width}."
            )
        self._A[:, columns] = self._local_A
        self._b[:] = self._local_b

    def get_lower_bound(self) -> Optional[np.ndarray]:
        return self._lower_bound
