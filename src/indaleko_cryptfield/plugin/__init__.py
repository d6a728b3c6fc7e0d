"""
Statement interception for Crypt Field.

This module provides the executor interface, the shape dispatcher that
walks payloads, and the interceptor that ties them together.
"""

from .dispatcher import ShapeDispatcher, is_crypto_opaque
from .executor import DEFAULT_ROW_BOUNDS, Executor, MappedStatement, ResultHandler, RowBounds, StatementKind
from .interceptor import CryptInterceptor, InterceptedExecutor, Invocation

__all__ = [
    "ShapeDispatcher",
    "is_crypto_opaque",
    "DEFAULT_ROW_BOUNDS",
    "Executor",
    "MappedStatement",
    "ResultHandler",
    "RowBounds",
    "StatementKind",
    "CryptInterceptor",
    "InterceptedExecutor",
    "Invocation",
]
