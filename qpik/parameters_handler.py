"""Key-value parameter sources used to configure solvers and tasks."""

from __future__ import annotations

import abc
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from .exceptions import InvalidParameterType, ParameterNotFound

T = TypeVar("T")

_MISSING = object()


class ParametersHandler(abc.ABC):
    """Abstract key-value parameter source.

    Parameters are looked up by name and checked against the expected Python
    type. Groups are nested parameter sources.
    """

    @abc.abstractmethod
    def _lookup(self, name: str) -> Any:
        """Return the raw value associated to `name` or raise KeyError."""
        raise NotImplementedError

    @abc.abstractmethod
    def set_parameter(self, name: str, value: Any) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def get_group(self, name: str) -> ParametersHandler:
        raise NotImplementedError

    @abc.abstractmethod
    def keys(self) -> list[str]:
        raise NotImplementedError

    def has_parameter(self, name: str) -> bool:
        try:
            self._lookup(name)
        except KeyError:
            return False
        return True

    def get_parameter(self, name: str, kind: Type[T], default: Any = _MISSING) -> T:
        """Get a parameter of a given type.

        Args:
            name: Parameter name.
            kind: Expected Python type. Integers are accepted where a float is
                expected.
            default: Value returned when the parameter is missing. If not given,
                the parameter is mandatory.

        Raises:
            ParameterNotFound: If the parameter is missing and no default is given.
            InvalidParameterType: If the parameter has the wrong type.
        """
        try:
            value = self._lookup(name)
        except KeyError:
            if default is _MISSING:
                raise ParameterNotFound(name) from None
            return default

        # bool is a subclass of int, reject it explicitly for numeric parameters.
        if kind is not bool and isinstance(value, bool):
            raise InvalidParameterType(name, kind, value)
        if kind is float and isinstance(value, int):
            return float(value)  # type: ignore[return-value]
        if not isinstance(value, kind):
            raise InvalidParameterType(name, kind, value)
        return value

    def __str__(self) -> str:
        return "\n".join(f"{key}: {self._lookup(key)!r}" for key in self.keys())


class StdParametersHandler(ParametersHandler):
    """In-memory parameters handler backed by a dictionary.

    Example:

    .. code-block:: python

        params = StdParametersHandler(
            {"robot_velocity_variable_name": "robot_velocity", "verbosity": True}
        )
        params.get_parameter("verbosity", bool)
    """

    def __init__(self, parameters: Optional[Mapping[str, Any]] = None):
        self._parameters: Dict[str, Any] = {}
        for name, value in (parameters or {}).items():
            self.set_parameter(name, value)

    def _lookup(self, name: str) -> Any:
        return self._parameters[name]

    def set_parameter(self, name: str, value: Any) -> None:
        if isinstance(value, Mapping):
            value = StdParametersHandler(value)
        self._parameters[name] = value

    def get_group(self, name: str) -> StdParametersHandler:
        group = self.get_parameter(name, StdParametersHandler)
        return group

    def keys(self) -> list[str]:
        return list(self._parameters)

    def clear(self) -> None:
        self._parameters.clear()

    def is_empty(self) -> bool:
        return not self._parameters
