"""
ArangoDB executor for Crypt Field.

This module provides an executor running mapped AQL statements using
the python-arango driver. Wrap it with ``CryptInterceptor.plugin`` to
encrypt parameters and decrypt results transparently.
"""

import dataclasses
import logging
import re
import sys
from collections.abc import Mapping
from typing import Any

from arango import ArangoClient
from arango.database import StandardDatabase
from arango.exceptions import ArangoError
from pydantic import BaseModel

from ..config import CryptFieldConfig
from ..plugin.executor import DEFAULT_ROW_BOUNDS, MappedStatement, ResultHandler, RowBounds


logger = logging.getLogger(__name__)

# Matches @name but not the collection form @@name
_BIND_VAR = re.compile(r"(?<![@\w])@(\w+)")


def referenced_bind_vars(text: str) -> list[str]:
    """
    List the bind variables an AQL statement references.

    Args:
        text: AQL statement text

    Returns:
        Bind variable names in order of first appearance
    """
    return list(dict.fromkeys(_BIND_VAR.findall(text)))


def _serialize(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    return value


def build_bind_vars(text: str, parameter: Any) -> dict[str, Any]:
    """
    Build the bind variables of a statement from its parameter object.

    Only variables the statement references are bound, as ArangoDB
    rejects unused bind variables. Mappings are looked up by key,
    structured objects by attribute; a single scalar or string is bound
    to every referenced variable.

    Args:
        text: AQL statement text
        parameter: The statement parameter object

    Returns:
        The bind variables

    Raises:
        KeyError: If a mapping lacks a referenced variable
        AttributeError: If an object lacks a referenced variable
    """
    names = referenced_bind_vars(text)
    if not names or parameter is None:
        return {}

    if isinstance(parameter, Mapping):
        return {name: _serialize(parameter[name]) for name in names}

    if isinstance(parameter, (str, int, float, list)):
        return {name: parameter for name in names}

    return {name: _serialize(getattr(parameter, name)) for name in names}


class ArangoExecutor:
    """
    Executor running mapped AQL statements on ArangoDB.

    Write statements return the number of documents written; query
    statements return their rows, converted to the statement's result
    type when it has one.
    """

    def __init__(self, db: StandardDatabase | None = None, batch_size: int = 1000) -> None:
        """
        Initialize the ArangoDB executor.

        Args:
            db: Optional database handle; a connection is opened from the
                configuration when omitted
            batch_size: Cursor batch size
        """
        self.batch_size = batch_size
        self.client: ArangoClient | None = None

        if db is not None:
            self.db = db
            return

        db_config = CryptFieldConfig.get_database_credentials()
        db_url = CryptFieldConfig.get_database_url()

        try:
            self.client = ArangoClient(hosts=db_url)
            self.db = self.client.db(
                name=db_config["database"],
                username=db_config["username"],
                password=db_config["password"],
                auth_method="basic",
                verify=True,
            )
        except ArangoError as e:
            print(f"Failed to connect to ArangoDB: {e}", file=sys.stderr)
            sys.exit(1)

        logger.info("Connected to ArangoDB at %s (database: %s)", db_url, db_config["database"])

    def update(self, statement: MappedStatement, parameter: Any) -> int:
        """
        Run a write statement.

        Args:
            statement: The statement to run
            parameter: The statement parameter object

        Returns:
            Number of documents written
        """
        cursor = self.db.aql.execute(
            statement.text,
            bind_vars=build_bind_vars(statement.text, parameter),
        )
        stats = cursor.statistics() or {}
        return int(stats.get("modified", stats.get("writesExecuted", 0)))

    def query(
        self,
        statement: MappedStatement,
        parameter: Any,
        row_bounds: RowBounds = DEFAULT_ROW_BOUNDS,
        result_handler: ResultHandler | None = None,
    ) -> list:
        """
        Run a query statement.

        Args:
            statement: The statement to run
            parameter: The statement parameter object
            row_bounds: Offset/limit applied to the rows
            result_handler: Optional handler receiving each row; when given
                the rows are not returned

        Returns:
            The result rows, or an empty list when a handler consumed them
        """
        cursor = self.db.aql.execute(
            statement.text,
            bind_vars=build_bind_vars(statement.text, parameter),
            batch_size=self.batch_size,
        )
        rows = row_bounds.apply([self._convert(statement, row) for row in cursor])

        if result_handler is not None:
            for row in rows:
                result_handler(row)
            return []

        return rows

    @staticmethod
    def _convert(statement: MappedStatement, row: Any) -> Any:
        result_type = statement.result_type
        if result_type is None:
            return row
        if isinstance(result_type, type) and issubclass(result_type, BaseModel):
            return result_type.model_validate(row)
        return result_type(row)

    def close(self) -> None:
        """Close the database connection."""
        if self.client is not None:
            self.client.close()
