"""
Executor boundary types.

This module defines the statement execution interface the crypt
interceptor wraps. An executor runs mapped statements: ``update`` for
writes, ``query`` for reads.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Protocol, runtime_checkable


class StatementKind(str, Enum):
    """Kinds of mapped statement."""

    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"

    @property
    def is_query(self) -> bool:
        return self is StatementKind.SELECT


@dataclass(frozen=True)
class MappedStatement:
    """
    A statement bound to a mapper method.

    The identifier has the form ``<owner-type>.<operation-name>``, the
    owner being the mapper class's ``module.QualName``.
    """

    # Statement identifier
    id: str

    # Statement text understood by the executor
    text: str = ""

    # Kind of statement
    kind: StatementKind = StatementKind.SELECT

    # Optional type rows are converted into
    result_type: type | None = None


@dataclass(frozen=True)
class RowBounds:
    """Offset/limit applied to query results."""

    offset: int = 0
    limit: int | None = None

    def apply(self, rows: list) -> list:
        """Slice a list of rows to these bounds."""
        if self.limit is None:
            return rows[self.offset:]
        return rows[self.offset:self.offset + self.limit]


DEFAULT_ROW_BOUNDS = RowBounds()

# Receives each row of a query result
ResultHandler = Callable[[Any], None]


@runtime_checkable
class Executor(Protocol):
    """Executes mapped statements."""

    def update(self, statement: MappedStatement, parameter: Any) -> int:
        ...

    def query(
        self,
        statement: MappedStatement,
        parameter: Any,
        row_bounds: RowBounds = DEFAULT_ROW_BOUNDS,
        result_handler: ResultHandler | None = None,
    ) -> list:
        ...
