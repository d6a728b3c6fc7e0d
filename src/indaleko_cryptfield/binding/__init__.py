"""
Parameter binding for Crypt Field.

This module provides the provenance-tagged parameter maps built from
mapper method arguments.
"""

from .param_map import (
    COLLECTION_KEY,
    GENERIC_NAME_PREFIX,
    LIST_KEY,
    BindingError,
    ParamMap,
    ParamNameResolver,
    StrictMap,
    wrap_collection,
)

__all__ = [
    "COLLECTION_KEY",
    "GENERIC_NAME_PREFIX",
    "LIST_KEY",
    "BindingError",
    "ParamMap",
    "ParamNameResolver",
    "StrictMap",
    "wrap_collection",
]
