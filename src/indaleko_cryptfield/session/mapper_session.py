"""
Mapper session for Crypt Field.

This module turns calls on mapper classes into executor calls. A mapper
is a plain class whose methods are declared with one of the statement
decorators::

    @mapper
    class UserMapper:
        @crypt_field(decrypt=True)
        @select("FOR u IN users FILTER u.email == @email RETURN u.ssn")
        def find_ssn(self, email: Annotated[str, CryptField("email")], active: bool) -> list[str]:
            ...

    session = MapperSession(interceptor.plugin(ArangoExecutor()))
    session.get_mapper(UserMapper).find_ssn("a@b.com", True)

The method bodies are never run.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from ..binding.param_map import ParamNameResolver
from ..plugin.executor import DEFAULT_ROW_BOUNDS, Executor, MappedStatement, RowBounds, StatementKind
from ..registry.mapper_registry import statement_id


logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])
T = TypeVar("T")

# Attribute set on methods declared with a statement decorator
STATEMENT_ATTR = "__mapped_statement__"


class TooManyResultsError(LookupError):
    """Raised when a single-row select returns more than one row."""


@dataclass(frozen=True)
class StatementDeclaration:
    """Statement declared on a mapper method."""

    kind: StatementKind
    text: str
    result_type: type | None = None
    one: bool = False


def _declare(kind: StatementKind, text: str, result_type: type | None = None, one: bool = False) -> Callable[[F], F]:
    declaration = StatementDeclaration(kind, text, result_type, one)

    def decorator(func: F) -> F:
        setattr(func, STATEMENT_ATTR, declaration)
        return func

    return decorator


def select(text: str, result_type: type | None = None, one: bool = False) -> Callable[[F], F]:
    """
    Declare a query statement.

    Args:
        text: Statement text
        result_type: Optional type each row is converted into
        one: Return a single row (or None) instead of a list
    """
    return _declare(StatementKind.SELECT, text, result_type, one)


def insert(text: str) -> Callable[[F], F]:
    """Declare an insert statement."""
    return _declare(StatementKind.INSERT, text)


def update(text: str) -> Callable[[F], F]:
    """Declare an update statement."""
    return _declare(StatementKind.UPDATE, text)


def delete(text: str) -> Callable[[F], F]:
    """Declare a delete statement."""
    return _declare(StatementKind.DELETE, text)


class MapperSession:
    """
    Runs mapper statements against an executor.

    Pass an executor wrapped by ``CryptInterceptor.plugin`` to get
    transparent encryption and decryption.
    """

    def __init__(self, executor: Executor) -> None:
        """
        Initialize the session.

        Args:
            executor: The executor statements run on
        """
        self.executor = executor
        self._statements: dict[str, tuple[MappedStatement, ParamNameResolver, bool]] = {}

    def _mapped(self, mapper_class: type, name: str) -> tuple[MappedStatement, ParamNameResolver, bool]:
        sid = statement_id(mapper_class, name)
        cached = self._statements.get(sid)
        if cached is not None:
            return cached

        method = getattr(mapper_class, name)
        declaration = getattr(method, STATEMENT_ATTR, None)
        if not isinstance(declaration, StatementDeclaration):
            raise AttributeError(f"{mapper_class.__qualname__}.{name} is not a mapped statement")

        statement = MappedStatement(
            id=sid,
            text=declaration.text,
            kind=declaration.kind,
            result_type=declaration.result_type,
        )
        entry = (statement, ParamNameResolver(method), declaration.one)
        logger.debug("Mapped statement %s (%s)", sid, declaration.kind.value)
        return self._statements.setdefault(sid, entry)

    def select_list(self, statement: MappedStatement, parameter: Any = None,
                    row_bounds: RowBounds = DEFAULT_ROW_BOUNDS) -> list:
        """
        Run a query statement.

        Args:
            statement: The statement to run
            parameter: The parameter object
            row_bounds: Offset/limit for the result

        Returns:
            The result rows
        """
        return self.executor.query(statement, parameter, row_bounds, None)

    def select_one(self, statement: MappedStatement, parameter: Any = None) -> Any:
        """
        Run a query statement expected to return at most one row.

        Returns:
            The row, or None when the query returned nothing

        Raises:
            TooManyResultsError: If more than one row was returned
        """
        rows = self.select_list(statement, parameter)
        if not isinstance(rows, list):
            return rows
        if len(rows) > 1:
            raise TooManyResultsError(f"Expected one result (or None) from {statement.id}, found {len(rows)}")
        return rows[0] if rows else None

    def execute(self, statement: MappedStatement, parameter: Any = None) -> int:
        """
        Run an insert, update or delete statement.

        Returns:
            The number of affected documents
        """
        return self.executor.update(statement, parameter)

    def get_mapper(self, mapper_class: type[T]) -> T:
        """
        Get a proxy running the statements of a mapper class.

        Args:
            mapper_class: The mapper class

        Returns:
            An object exposing the mapper's statement methods
        """
        return MapperProxy(self, mapper_class)  # type: ignore[return-value]


class MapperProxy:
    """Callable view of a mapper class bound to a session."""

    def __init__(self, session: MapperSession, mapper_class: type) -> None:
        self._session = session
        self._mapper_class = mapper_class

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name.startswith("_"):
            raise AttributeError(name)

        statement, resolver, one = self._session._mapped(self._mapper_class, name)

        def invoke(*args: Any, **kwargs: Any) -> Any:
            parameter = resolver.get_named_params(args, kwargs)
            if not statement.kind.is_query:
                return self._session.execute(statement, parameter)
            if one:
                return self._session.select_one(statement, parameter)
            return self._session.select_list(statement, parameter)

        invoke.__name__ = name
        return invoke
