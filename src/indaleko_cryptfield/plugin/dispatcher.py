"""
Shape dispatcher for Crypt Field.

This module walks request and response payloads and applies the crypto
hooks to every qualifying string leaf.

Payloads fall into a closed set of shapes, checked in this order:

- scalars that are never touched (None, int, float, bool)
- a bare string
- a StrictMap wrapping a single list argument
- a ParamMap of several named arguments
- any other mapping, which is never decomposed
- a list (inside the above, or as a query result)
- a structured object whose fields may carry CryptField declarations

Lists, maps and structured objects are mutated in place; strings are
returned transformed. Frozen pydantic models and dataclasses are
written through as well.
"""

import dataclasses
from collections.abc import Mapping
from typing import Any, Callable

from pydantic import BaseModel

from ..binding.param_map import COLLECTION_KEY, GENERIC_NAME_PREFIX, LIST_KEY, ParamMap, StrictMap
from ..encryption.hooks import CryptoHooks
from ..models.crypt_field import CryptField, declared_fields
from ..models.crypt_metadata import CryptMetadata


def is_crypto_opaque(value: Any) -> bool:
    """
    Check whether a value is never encrypted or decrypted.

    Args:
        value: Any payload value

    Returns:
        True for None, integers, floats and booleans
    """
    return value is None or isinstance(value, (int, float))


def _stops_list(value: Any) -> bool:
    return is_crypto_opaque(value) or isinstance(value, Mapping)


def _assign(obj: Any, attr: str, value: str) -> None:
    """Set a field value, writing through frozen pydantic models and dataclasses."""
    if isinstance(obj, BaseModel):
        if obj.model_config.get("frozen") or type(obj).model_fields[attr].frozen:
            obj.__dict__[attr] = value
            return
        setattr(obj, attr, value)
        return

    try:
        setattr(obj, attr, value)
    except dataclasses.FrozenInstanceError:
        object.__setattr__(obj, attr, value)


class ShapeDispatcher:
    """
    Applies crypto hooks across a payload according to its shape.

    Encryption of named arguments is scoped by the statement's encryptable
    parameter names. Decryption of a return value is gated by the
    statement's single decryptable flag. Structured objects always follow
    their own field declarations.
    """

    def __init__(self, hooks: CryptoHooks) -> None:
        self.hooks = hooks

    # Encrypt pass

    def encrypt_request(self, payload: Any, metadata: CryptMetadata) -> Any:
        """
        Encrypt the qualifying strings of a request payload.

        Args:
            payload: The statement parameter object
            metadata: The statement's crypt metadata

        Returns:
            The encrypted string for a bare string payload, otherwise the
            payload itself, mutated in place
        """
        if is_crypto_opaque(payload):
            return payload

        if isinstance(payload, str):
            # A lone string has no parameter name to scope eligibility by
            if metadata.has_encryptable_params:
                return self.hooks.encrypt_string(payload)
            return payload

        if isinstance(payload, StrictMap):
            self._encrypt_strict_map(payload, metadata)
            return payload

        if isinstance(payload, ParamMap):
            self._encrypt_param_map(payload, metadata)
            return payload

        if isinstance(payload, Mapping):
            return payload

        self.encrypt_object(payload)
        return payload

    def _encrypt_strict_map(self, payload: StrictMap, metadata: CryptMetadata) -> None:
        # List binding drops the original parameter name, so any
        # encryptable parameter makes every string element eligible
        eligible = metadata.has_encryptable_params
        for key, value in payload.items():
            if COLLECTION_KEY in key:
                continue
            if LIST_KEY in key and isinstance(value, list):
                self.encrypt_list(value, eligible)

    def _encrypt_param_map(self, payload: ParamMap, metadata: CryptMetadata) -> None:
        for key, value in list(payload.items()):
            # paramN aliases duplicate a named entry
            if is_crypto_opaque(value) or isinstance(value, Mapping) or GENERIC_NAME_PREFIX in key:
                continue

            if isinstance(value, str):
                if metadata.is_encryptable(key):
                    payload[key] = self.hooks.encrypt_string(value)
                continue

            if isinstance(value, list):
                self.encrypt_list(value, metadata.is_encryptable(key))
                continue

            self.encrypt_object(value)

    def encrypt_list(self, values: list, eligible: bool) -> list:
        """
        Encrypt the strings of a list in place.

        Traversal stops at the first scalar or mapping element; elements
        after it are left untouched.

        Args:
            values: The list to traverse
            eligible: Whether string elements are encrypted

        Returns:
            The same list
        """
        return self._walk_list(values, eligible, self.hooks.encrypt_string, self.encrypt_object)

    def encrypt_object(self, obj: Any) -> Any:
        """
        Encrypt the declared fields of a structured object in place.

        Args:
            obj: The object to traverse

        Returns:
            The same object
        """
        return self._walk_object(obj, lambda declaration: declaration.encrypt, self.encrypt_list,
                                 self.hooks.encrypt_string)

    # Decrypt pass

    def decrypt_response(self, result: Any, metadata: CryptMetadata) -> Any:
        """
        Decrypt the qualifying strings of a statement result.

        Args:
            result: The value returned by the executor
            metadata: The statement's crypt metadata

        Returns:
            The decrypted string for a string result, otherwise the result
            itself, mutated in place
        """
        if is_crypto_opaque(result):
            return result

        if isinstance(result, str):
            if metadata.decryptable:
                return self.hooks.decrypt_string(result)
            return result

        if isinstance(result, list):
            return self.decrypt_list(result, metadata.decryptable)

        if isinstance(result, Mapping):
            return result

        return self.decrypt_object(result)

    def decrypt_list(self, values: list, eligible: bool) -> list:
        """
        Decrypt the strings of a list in place.

        Same traversal rules as encrypt_list.

        Args:
            values: The list to traverse
            eligible: Whether string elements are decrypted

        Returns:
            The same list
        """
        return self._walk_list(values, eligible, self.hooks.decrypt_string, self.decrypt_object)

    def decrypt_object(self, obj: Any) -> Any:
        """
        Decrypt the declared fields of a structured object in place.

        Args:
            obj: The object to traverse

        Returns:
            The same object
        """
        return self._walk_object(obj, lambda declaration: declaration.decrypt, self.decrypt_list,
                                 self.hooks.decrypt_string)

    # Traversal

    @staticmethod
    def _walk_list(
        values: list,
        eligible: bool,
        on_string: Callable[[str], str],
        on_object: Callable[[Any], Any],
    ) -> list:
        for index, value in enumerate(values):
            if _stops_list(value):
                break
            if isinstance(value, str):
                if eligible:
                    values[index] = on_string(value)
                continue
            on_object(value)
        return values

    @staticmethod
    def _walk_object(
        obj: Any,
        selected: Callable[[CryptField], bool],
        on_list: Callable[[list, bool], list],
        on_string: Callable[[str], str],
    ) -> Any:
        for field in declared_fields(type(obj)):
            if not selected(field.crypt_field):
                continue

            value = getattr(obj, field.attr, None)
            if value is None:
                continue

            if field.is_string and isinstance(value, str):
                _assign(obj, field.attr, on_string(value))
            elif field.is_list and isinstance(value, list):
                on_list(value, True)
        return obj
