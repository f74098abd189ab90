"""Layout of the optimization variables inside the decision vector."""

from __future__ import annotations

from typing import Dict, List, NamedTuple, Optional, Sequence

from .exceptions import VariableDefinitionError


class VariableDescription(NamedTuple):
    """Contiguous slice of the decision vector associated to a variable."""

    name: str
    offset: int
    size: int
    elements_names: Optional[tuple[str, ...]] = None

    @property
    def slice(self) -> slice:
        return slice(self.offset, self.offset + self.size)

    def get_index_from_element_name(self, element_name: str) -> int:
        """Return the decision vector index of a named element of the variable."""
        if self.elements_names is None or element_name not in self.elements_names:
            raise VariableDefinitionError(
                f"Element '{element_name}' does not belong to variable '{self.name}'."
            )
        return self.offset + self.elements_names.index(element_name)


class VariablesHandler:
    """Registry mapping named variables to index ranges of the decision vector.

    Variables are appended one after the other in insertion order, so ranges
    never overlap. Once frozen, typically by a solver at finalization, the
    layout cannot change anymore.

    Example:

    .. code-block:: python

        handler = VariablesHandler()
        handler.add_variable("robot_velocity", 6 + 23)
        handler.add_variable("slack", 3)
        handler.get_variable("slack")  # VariableDescription("slack", 29, 3)
    """

    def __init__(self):
        self._variables: Dict[str, VariableDescription] = {}
        self._number_of_variables = 0
        self._frozen = False

    def add_variable(
        self,
        name: str,
        size: int,
        elements_names: Optional[Sequence[str]] = None,
    ) -> VariableDescription:
        """Append a variable to the decision vector.

        Args:
            name: Unique variable name.
            size: Number of scalar entries of the variable.
            elements_names: Optional names of each entry, e.g. joint names.

        Returns:
            Description of the newly added variable.

        Raises:
            VariableDefinitionError: If the handler is frozen, the name is empty
                or already used, or the size is not positive.
        """
        if self._frozen:
            raise VariableDefinitionError(
                f"Unable to add variable '{name}', the handler is frozen."
            )
        if not name:
            raise VariableDefinitionError("Variable name must be non-empty.")
        if name in self._variables:
            raise VariableDefinitionError(f"Variable '{name}' already exists.")
        if size <= 0:
            raise VariableDefinitionError(
                f"Variable '{name}' size must be > 0. Got {size}."
            )
        names = None
        if elements_names is not None:
            names = tuple(elements_names)
            if len(names) != size:
                raise VariableDefinitionError(
                    f"Variable '{name}' has size {size} but {len(names)} element "
                    "names were given."
                )

        variable = VariableDescription(name, self._number_of_variables, size, names)
        self._variables[name] = variable
        self._number_of_variables += size
        return variable

    def get_variable(self, name: str) -> Optional[VariableDescription]:
        """Return the description of a variable, or None if it does not exist."""
        return self._variables.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._variables

    def get_number_of_variables(self) -> int:
        return self._number_of_variables

    @property
    def names(self) -> List[str]:
        return list(self._variables)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Lock the layout. Further calls to add_variable fail."""
        self._frozen = True

    def __str__(self) -> str:
        lines = [
            f"{v.name}: offset {v.offset}, size {v.size}"
            for v in self._variables.values()
        ]
        return "\n".join(lines)
