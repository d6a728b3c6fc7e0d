"""
Parameter binding for mapper methods.

This module turns the arguments of a mapper method call into the single
parameter object handed to the executor. The map types it builds record
how the map was made: a ParamMap comes from binding several arguments,
a StrictMap from binding one list argument. Any other mapping reaching
the crypt interceptor came from user code and is never decomposed.
"""

import inspect
from typing import Any, Callable

from ..models.crypt_field import find_crypt_field
from ..registry.metadata_store import method_type_hints


# Prefix of the positional aliases added to every ParamMap
GENERIC_NAME_PREFIX = "param"

# Keys of a StrictMap wrapping a list argument
COLLECTION_KEY = "collection"
LIST_KEY = "list"


class BindingError(KeyError):
    """Raised when a bound parameter map is asked for a name it does not hold."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class ParamMap(dict):
    """
    Parameter map built from the arguments of a multi-parameter method.

    Keys are parameter names plus ``param1..paramN`` aliases of the same
    values. Looking up a missing name raises BindingError listing the
    available names.
    """

    def __missing__(self, key: str) -> Any:
        raise BindingError(f"Parameter '{key}' not found. Available parameters are {sorted(self)}")


class StrictMap(dict):
    """
    Map wrapping a single list argument under its role keys.

    Both ``collection`` and ``list`` refer to the same list object.
    """

    def __missing__(self, key: str) -> Any:
        raise BindingError(f"Parameter '{key}' not found. Available parameters are {sorted(self)}")


def wrap_collection(value: Any) -> Any:
    """
    Wrap a list argument in a StrictMap; any other value is returned as is.

    Args:
        value: A single bound argument

    Returns:
        A StrictMap for lists, otherwise the value itself
    """
    if isinstance(value, list):
        wrapped = StrictMap()
        wrapped[COLLECTION_KEY] = value
        wrapped[LIST_KEY] = value
        return wrapped
    return value


class ParamNameResolver:
    """
    Resolves the names under which a mapper method's arguments are bound.

    A parameter is known by its CryptField name when one is declared,
    otherwise by its Python name.
    """

    def __init__(self, method: Callable[..., Any]) -> None:
        self.signature = inspect.signature(method)
        hints = method_type_hints(method)

        self.names: dict[str, str] = {}
        for name in self.signature.parameters:
            if name in ("self", "cls"):
                continue
            declaration = find_crypt_field(hints.get(name))
            self.names[name] = declaration.name if declaration is not None and declaration.name else name

        self._has_self = len(self.names) < len(self.signature.parameters)

    def get_named_params(self, args: tuple, kwargs: dict[str, Any]) -> Any:
        """
        Bind call arguments into the executor's parameter object.

        Args:
            args: Positional arguments, without the mapper instance
            kwargs: Keyword arguments

        Returns:
            None for a method without parameters, the (wrapped) argument
            for a single-parameter method, otherwise a ParamMap

        Raises:
            TypeError: If the arguments do not match the method signature
        """
        if self._has_self:
            bound = self.signature.bind(None, *args, **kwargs)
        else:
            bound = self.signature.bind(*args, **kwargs)
        bound.apply_defaults()

        values = [(self.names[name], value) for name, value in bound.arguments.items() if name in self.names]

        if not values:
            return None

        if len(values) == 1:
            return wrap_collection(values[0][1])

        param = ParamMap()
        for index, (name, value) in enumerate(values, start=1):
            param[name] = value
            generic = f"{GENERIC_NAME_PREFIX}{index}"
            # An explicit name never gets overwritten by its alias
            if generic not in param:
                param[generic] = value
        return param
