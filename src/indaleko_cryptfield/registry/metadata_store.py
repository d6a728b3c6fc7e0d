"""
Metadata store for Crypt Field.

This module resolves a statement identifier to its CryptMetadata by
reading the CryptField declarations of the backing mapper method, and
caches the result for the life of the process.
"""

import inspect
import logging
from typing import Any, Callable, get_type_hints

from ..models.crypt_field import CRYPT_FIELD_ATTR, CryptField, find_crypt_field
from ..models.crypt_metadata import NO_CRYPT, CryptMetadata
from .mapper_registry import MapperRegistry


logger = logging.getLogger(__name__)


def method_type_hints(method: Callable[..., Any]) -> dict[str, object]:
    """Type hints of a method, Annotated metadata included."""
    try:
        return get_type_hints(method, include_extras=True)
    except (NameError, TypeError):
        # Unresolvable forward references: the raw annotations may still carry Annotated objects
        return dict(getattr(method, "__annotations__", {}))


def parameter_declarations(method: Callable[..., Any]) -> dict[str, CryptField]:
    """
    Collect the CryptField declarations of a method's parameters.

    Args:
        method: The mapper method

    Returns:
        Mapping of parameter name to its first CryptField declaration
    """
    hints = method_type_hints(method)
    declarations: dict[str, CryptField] = {}

    for name in inspect.signature(method).parameters:
        if name in ("self", "cls"):
            continue
        found = find_crypt_field(hints.get(name))
        if found is not None:
            declarations[name] = found

    return declarations


def return_declaration(method: Callable[..., Any]) -> CryptField | None:
    """
    Get the CryptField declaration of a method's return value.

    The ``@crypt_field`` decorator takes precedence over an ``Annotated``
    return type.
    """
    declared = getattr(method, CRYPT_FIELD_ATTR, None)
    if isinstance(declared, CryptField):
        return declared
    return find_crypt_field(method_type_hints(method).get("return"))


def build_metadata(method: Callable[..., Any]) -> CryptMetadata:
    """
    Build the CryptMetadata of a mapper method.

    A parameter is encryptable when its declaration has ``encrypt`` set;
    it is known by the declaration's name, or by its own name when the
    declaration leaves the name blank.

    Args:
        method: The mapper method

    Returns:
        The method's metadata
    """
    params = frozenset(
        declaration.name or name
        for name, declaration in parameter_declarations(method).items()
        if declaration.encrypt
    )

    declaration = return_declaration(method)
    decryptable = declaration is not None and declaration.decrypt

    return CryptMetadata(encryptable_params=params, decryptable=decryptable)


class MetadataStore:
    """
    Process-wide cache of CryptMetadata keyed by statement identifier.

    Entries are immutable and never evicted; the key space is bounded by
    the number of mapper methods in the deployed code. Concurrent first
    resolutions of the same identifier may both compute metadata, but
    ``dict.setdefault`` keeps only the first and every caller gets that one.
    """

    def __init__(self, registry: type[MapperRegistry] = MapperRegistry) -> None:
        self.registry = registry
        self._cache: dict[str, CryptMetadata] = {}

    def resolve(self, statement_id: str) -> CryptMetadata:
        """
        Resolve the metadata of a statement.

        Statements whose backing method cannot be found resolve to
        NO_CRYPT; that result is not cached, so a mapper registered later
        is still picked up.

        Args:
            statement_id: Identifier of the form ``<owner>.<operation>``

        Returns:
            The statement's metadata
        """
        cached = self._cache.get(statement_id)
        if cached is not None:
            return cached

        method = self.registry.find_method(statement_id)
        if method is None:
            logger.debug("No backing method for statement %s, crypto disabled", statement_id)
            return NO_CRYPT

        metadata = self._cache.setdefault(statement_id, build_metadata(method))
        logger.debug("Resolved crypt metadata for %s: %s", statement_id, metadata.to_dict())
        return metadata

    def __len__(self) -> int:
        return len(self._cache)

    def clear(self) -> None:
        """Empty the cache."""
        self._cache.clear()


# Default store shared by interceptors that are not given their own
default_store = MetadataStore()
