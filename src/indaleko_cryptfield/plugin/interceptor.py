"""
Crypt interceptor.

This module wires the shape dispatcher around an executor: request
parameters are encrypted before a statement runs and its result is
decrypted before it reaches the caller.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable

from ..config import CryptFieldConfig
from ..encryption.field_cipher import CipherProvider, create_cipher
from ..encryption.hooks import CryptoHooks
from ..registry.metadata_store import MetadataStore, default_store
from .dispatcher import ShapeDispatcher
from .executor import DEFAULT_ROW_BOUNDS, Executor, MappedStatement, ResultHandler, RowBounds


logger = logging.getLogger(__name__)

# Executor methods the interceptor wraps
INTERCEPTED_METHODS = ("update", "query")


@dataclass
class Invocation:
    """
    One intercepted executor call.

    ``args[0]`` is the MappedStatement and ``args[1]`` the parameter
    object; any further arguments are passed through untouched.
    """

    target: Any
    method: str
    args: list

    @property
    def statement(self) -> MappedStatement:
        return self.args[0]

    def proceed(self) -> Any:
        """Run the intercepted call with the current arguments."""
        return getattr(self.target, self.method)(*self.args)


class CryptInterceptor:
    """
    Encrypts statement parameters and decrypts statement results.

    Missing metadata never blocks a statement: it runs without crypto.
    Errors from the cipher and from the executor propagate unchanged.
    """

    def __init__(
        self,
        cipher: CipherProvider | None = None,
        store: MetadataStore | None = None,
        separator: str | None = None,
    ) -> None:
        """
        Initialize the interceptor.

        Args:
            cipher: Optional cipher provider, defaults to the configured one
            store: Optional metadata store, defaults to the shared store
            separator: Optional ciphertext marker, defaults to the configured one
        """
        self.cipher = cipher if cipher is not None else create_cipher()
        self.store = store if store is not None else default_store
        self.hooks = CryptoHooks(self.cipher, separator or CryptFieldConfig.get_separator())
        self.dispatcher = ShapeDispatcher(self.hooks)

    def intercept(self, invocation: Invocation) -> Any:
        """
        Run an invocation with parameter encryption and result decryption.

        Args:
            invocation: The intercepted call

        Returns:
            The statement result, decrypted where declared
        """
        statement = invocation.statement
        metadata = self.store.resolve(statement.id)

        parameter = invocation.args[1]
        invocation.args[1] = self.dispatcher.encrypt_request(parameter, metadata)

        result = invocation.proceed()

        return self.dispatcher.decrypt_response(result, metadata)

    def plugin(self, target: Executor) -> "InterceptedExecutor":
        """
        Wrap an executor so its statements pass through this interceptor.

        Args:
            target: The executor to wrap

        Returns:
            The wrapped executor
        """
        logger.debug("Wrapping executor %s with crypt interceptor", type(target).__name__)
        return InterceptedExecutor(target, self)


class InterceptedExecutor:
    """
    Executor proxy routing ``update`` and ``query`` through an interceptor.

    Every other attribute is looked up on the wrapped executor.
    """

    def __init__(self, target: Executor, interceptor: CryptInterceptor) -> None:
        self.target = target
        self.interceptor = interceptor

    def update(self, statement: MappedStatement, parameter: Any) -> int:
        return self.interceptor.intercept(Invocation(self.target, "update", [statement, parameter]))

    def query(
        self,
        statement: MappedStatement,
        parameter: Any,
        row_bounds: RowBounds = DEFAULT_ROW_BOUNDS,
        result_handler: ResultHandler | None = None,
    ) -> list:
        return self.interceptor.intercept(
            Invocation(self.target, "query", [statement, parameter, row_bounds, result_handler])
        )

    def __getattr__(self, name: str) -> Callable[..., Any]:
        return getattr(self.target, name)
