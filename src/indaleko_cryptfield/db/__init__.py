"""
Database executors for Crypt Field.

This module provides the executor running mapped statements on ArangoDB.
"""

from .arangodb import ArangoExecutor, build_bind_vars, referenced_bind_vars

__all__ = ["ArangoExecutor", "build_bind_vars", "referenced_bind_vars"]
