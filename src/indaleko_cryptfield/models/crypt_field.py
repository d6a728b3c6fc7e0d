"""
Crypt field declarations.

This module provides the declaration surface used to mark sensitive
strings: model fields, mapper method parameters and mapper method
return values.

Fields and parameters are declared with ``typing.Annotated``::

    class User(BaseModel):
        name: str
        ssn: Annotated[str, CryptField()]

    class Contact(BaseModel):
        phone: Annotated[Optional[str], CryptField()] = None
        email: Optional[Annotated[str, CryptField()]] = None

    class UserMapper:
        @crypt_field(decrypt=True)
        def find_email(self, email: Annotated[str, CryptField("email")], id: int) -> str:
            ...
"""

import types
import typing
from dataclasses import dataclass
from typing import Annotated, Any, Callable, TypeVar, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel


F = TypeVar("F", bound=Callable[..., Any])

# Attribute set on methods decorated with crypt_field
CRYPT_FIELD_ATTR = "__crypt_field__"


@dataclass(frozen=True)
class CryptField:
    """
    Declares that a value carries sensitive string content.

    Attributes:
        name: On a parameter, the multi-parameter map key it governs.
            Informational on a model field.
        encrypt: Encrypt the value on its way into storage
        decrypt: Decrypt the value on its way out of storage
    """

    name: str = ""
    encrypt: bool = True
    decrypt: bool = True


@dataclass(frozen=True)
class DeclaredField:
    """A model field carrying a CryptField declaration."""

    # Attribute name on the model
    attr: str

    # The declaration itself
    crypt_field: CryptField

    # Declared type with Annotated and Optional stripped
    declared_type: object

    @property
    def is_string(self) -> bool:
        return self.declared_type is str

    @property
    def is_list(self) -> bool:
        return self.declared_type is list or get_origin(self.declared_type) is list


def crypt_field(name: str = "", *, encrypt: bool = True, decrypt: bool = True) -> Callable[[F], F]:
    """
    Attach a CryptField declaration to a mapper method.

    Only the ``decrypt`` flag of a method-level declaration is consulted:
    it makes the method's return value eligible for decryption.

    Args:
        name: Informational name
        encrypt: Encrypt flag, kept for symmetry with field declarations
        decrypt: Decrypt the return value

    Returns:
        A decorator returning the method unchanged apart from the marker
    """
    declaration = CryptField(name=name, encrypt=encrypt, decrypt=decrypt)

    def decorator(func: F) -> F:
        setattr(func, CRYPT_FIELD_ATTR, declaration)
        return func

    return decorator


def find_crypt_field(hint: object) -> CryptField | None:
    """
    Find the first CryptField in an ``Annotated`` type hint.

    The declaration may also sit inside an ``Optional``, as in
    ``Optional[Annotated[str, CryptField()]]``.

    Args:
        hint: A type hint, possibly Annotated

    Returns:
        The first CryptField in the metadata, or None
    """
    if get_origin(hint) in (Union, types.UnionType):
        members = [arg for arg in get_args(hint) if arg is not type(None)]
        return find_crypt_field(members[0]) if len(members) == 1 else None

    if get_origin(hint) is not Annotated:
        return None
    for extra in get_args(hint)[1:]:
        if isinstance(extra, CryptField):
            return extra
    return None


def strip_type(hint: object) -> object:
    """
    Strip ``Annotated`` and ``Optional`` wrappers from a type hint.

    ``Optional[str]`` becomes ``str``; unions of several real types are
    returned as they are.
    """
    while get_origin(hint) is Annotated:
        hint = get_args(hint)[0]

    if get_origin(hint) in (Union, types.UnionType):
        members = [arg for arg in get_args(hint) if arg is not type(None)]
        if len(members) == 1:
            return strip_type(members[0])

    return hint


def _pydantic_fields(cls: type[BaseModel]) -> list[DeclaredField]:
    declared: list[DeclaredField] = []
    for attr, info in cls.model_fields.items():
        found = next((m for m in info.metadata if isinstance(m, CryptField)), None)
        if found is None:
            # Declarations nested in Optional stay on the annotation
            found = find_crypt_field(info.annotation)
        if found is not None:
            declared.append(DeclaredField(attr, found, strip_type(info.annotation)))
    return declared


def _annotated_fields(cls: type) -> list[DeclaredField]:
    try:
        hints = get_type_hints(cls, include_extras=True)
    except (NameError, TypeError):
        # Unresolvable forward references: fall back to the raw annotations
        hints = {}
        for klass in reversed(cls.__mro__):
            hints.update(getattr(klass, "__annotations__", {}))

    declared: list[DeclaredField] = []
    for attr, hint in hints.items():
        if get_origin(hint) is typing.ClassVar:
            continue
        found = find_crypt_field(hint)
        if found is not None:
            declared.append(DeclaredField(attr, found, strip_type(hint)))
    return declared


# Per-class declaration cache, classes are static once defined
_FIELD_CACHE: dict[type, tuple[DeclaredField, ...]] = {}


def declared_fields(cls: type) -> tuple[DeclaredField, ...]:
    """
    Collect the CryptField declarations of a class.

    Pydantic models are read from ``model_fields``; dataclasses and plain
    annotated classes from their type hints. Inherited fields are included.
    Classes without declarations yield an empty tuple.

    Args:
        cls: The class to inspect

    Returns:
        The declared fields, in definition order
    """
    cached = _FIELD_CACHE.get(cls)
    if cached is not None:
        return cached

    if isinstance(cls, type) and issubclass(cls, BaseModel):
        fields = tuple(_pydantic_fields(cls))
    else:
        fields = tuple(_annotated_fields(cls))

    return _FIELD_CACHE.setdefault(cls, fields)
