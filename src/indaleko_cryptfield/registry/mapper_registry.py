"""
Mapper registry for Crypt Field.

This module maps the owner part of a statement identifier to the mapper
class that declares the statement, so its CryptField declarations can
be read.
"""

import importlib
import logging
import sys
from typing import Any, Callable, TypeVar


logger = logging.getLogger(__name__)

M = TypeVar("M", bound=type)

# Separator between owner type and operation name in a statement identifier
STATEMENT_ID_SEPARATOR = "."


def owner_id(mapper: type) -> str:
    """
    Get the identifier of a mapper class.

    Args:
        mapper: The mapper class

    Returns:
        The fully-qualified ``module.QualName`` of the class
    """
    return f"{mapper.__module__}.{mapper.__qualname__}"


def statement_id(mapper: type, method_name: str) -> str:
    """Build the statement identifier of a mapper method."""
    return f"{owner_id(mapper)}{STATEMENT_ID_SEPARATOR}{method_name}"


def split_statement_id(statement_id: str) -> tuple[str, str] | None:
    """
    Split a statement identifier into owner and operation name.

    Args:
        statement_id: Identifier of the form ``<owner>.<operation>``

    Returns:
        Tuple of (owner, operation), or None if there is no separator
    """
    owner, sep, operation = statement_id.rpartition(STATEMENT_ID_SEPARATOR)
    if not sep or not owner or not operation:
        return None
    return owner, operation


class MapperRegistry:
    """
    Process-wide registry of mapper classes.

    Mappers registered explicitly are found by identifier; any other
    owner is looked up by its dotted path among the modules already
    loaded. Setting ``import_modules`` also imports modules that are not
    loaded yet. Registration normally happens at import time through the
    ``@mapper`` decorator.
    """

    _mappers: dict[str, type] = {}

    # Import unloaded owner modules, running their import-time code
    import_modules: bool = False

    @classmethod
    def register(cls, mapper: M) -> M:
        """
        Register a mapper class.

        Args:
            mapper: The mapper class

        Returns:
            The same class, so this can be used as a decorator
        """
        cls._mappers[owner_id(mapper)] = mapper
        logger.debug("Registered mapper %s", owner_id(mapper))
        return mapper

    @classmethod
    def unregister(cls, mapper: type) -> None:
        """Remove a mapper class from the registry."""
        cls._mappers.pop(owner_id(mapper), None)

    @classmethod
    def clear(cls) -> None:
        """Forget every registered mapper."""
        cls._mappers.clear()

    @classmethod
    def find_owner(cls, owner: str) -> type | None:
        """
        Find the mapper class for an owner identifier.

        Args:
            owner: The ``module.QualName`` of the mapper class

        Returns:
            The mapper class, or None if it cannot be found
        """
        registered = cls._mappers.get(owner)
        if registered is not None:
            return registered
        return _import_owner(owner, cls.import_modules)

    @classmethod
    def find_method(cls, statement_id: str) -> Callable[..., Any] | None:
        """
        Find the mapper method backing a statement identifier.

        The first attribute of the owner with the operation's name wins;
        there is no overload disambiguation.

        Args:
            statement_id: Identifier of the form ``<owner>.<operation>``

        Returns:
            The method, or None if the owner or operation cannot be found
        """
        parts = split_statement_id(statement_id)
        if parts is None:
            logger.debug("Statement id %r has no owner part", statement_id)
            return None

        owner_name, operation = parts
        owner = cls.find_owner(owner_name)
        if owner is None:
            logger.debug("No mapper found for %s", owner_name)
            return None

        method = getattr(owner, operation, None)
        if not callable(method):
            logger.debug("Mapper %s has no operation %s", owner_name, operation)
            return None
        return method


def mapper(cls: M) -> M:
    """Class decorator registering a mapper with the MapperRegistry."""
    return MapperRegistry.register(cls)


def _load_module(module_name: str, import_modules: bool) -> object | None:
    if not import_modules:
        return sys.modules.get(module_name)
    try:
        return importlib.import_module(module_name)
    except (ImportError, ValueError):
        # ValueError for malformed names such as "" or "pkg..mod"
        return None


def _import_owner(owner: str, import_modules: bool = False) -> type | None:
    """Find ``package.module.Outer.Inner`` by trying the longest module prefix first."""
    parts = owner.split(".")
    if not all(parts):
        return None

    for index in range(len(parts) - 1, 0, -1):
        target = _load_module(".".join(parts[:index]), import_modules)
        if target is None:
            continue

        try:
            for attr in parts[index:]:
                target = getattr(target, attr)
        except AttributeError:
            return None
        return target if isinstance(target, type) else None

    return None
