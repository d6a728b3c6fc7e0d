"""
Mapper sessions for Crypt Field.

This module provides the statement decorators for mapper classes and the
session that runs them on an executor.
"""

from .mapper_session import (
    MapperProxy,
    MapperSession,
    StatementDeclaration,
    TooManyResultsError,
    delete,
    insert,
    select,
    update,
)

__all__ = [
    "MapperProxy",
    "MapperSession",
    "StatementDeclaration",
    "TooManyResultsError",
    "delete",
    "insert",
    "select",
    "update",
]
