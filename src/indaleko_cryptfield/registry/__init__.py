"""
Statement metadata resolution for Crypt Field.

This module provides the mapper registry that locates the method behind
a statement identifier, and the process-wide metadata store.
"""

from .mapper_registry import MapperRegistry, mapper, owner_id, split_statement_id, statement_id
from .metadata_store import MetadataStore, build_metadata, default_store

__all__ = [
    "MapperRegistry",
    "mapper",
    "owner_id",
    "split_statement_id",
    "statement_id",
    "MetadataStore",
    "build_metadata",
    "default_store",
]
