"""The container: a registry of definitions keyed by identifier.

Definitions are registered raw, in any order and without validation, so they
may refer to identifiers that are registered later. Each raw definition is
normalized into a :class:`~armature.definitions.Definition` the first time
its identifier is resolved or validated, and the normalized form replaces
the raw one.

Resolution is recursive: aliases and build functions call back into the
container for the identifiers they depend on. The container records which
identifiers are currently being resolved by the calling thread and raises
:class:`~armature.errors.CircularReferenceError` when one of them is reached
again.

Example:
    >>> container = Container({
    ...     "foo": lambda c: Foo(),
    ...     "bar": {"func": lambda c: Bar(c.get("foo")), "shared": False},
    ...     "fooAlias": "foo",
    ... })
    >>> container.get("fooAlias") is container.get("foo")
    True
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional

from armature.definitions import Definition
from armature.errors import (
    CircularReferenceError,
    InvalidConfigurationError,
    NotFoundError,
)
from armature.factory import make_definition

__all__ = ["Container"]

logger = logging.getLogger(__name__)


class Container:
    """Registry mapping identifiers to definitions, resolving them on demand.

    ``container[identifier]`` is equivalent to :meth:`get`, and
    ``identifier in container`` to :meth:`has`.

    A container may be shared between threads. Registration and normalization
    are serialized by a lock, each shared definition is constructed at most
    once, and circular references are tracked per thread so that two threads
    resolving the same identifier do not mistake each other for a cycle.
    """

    def __init__(self, definitions: Optional[Mapping[str, Any]] = None):
        self._definitions: dict[str, Any] = {}
        self._lock = threading.RLock()
        self._local = threading.local()
        if definitions:
            self.set_definitions(definitions)

    def set_definition(self, identifier: str, definition: Any) -> None:
        """Register or replace the raw definition of an identifier.

        No validation happens here; see :meth:`validate`.

        Args:
            identifier: The identifier to register.
            definition: A raw definition: an identifier string (alias), a
                callable taking the container (build function), a structured
                record, a :class:`Definition`, or any other object (instance).
        """
        with self._lock:
            if isinstance(self._definitions.get(identifier), Definition):
                logger.debug("Replacing resolved definition of '%s'", identifier)
            self._definitions[identifier] = definition

    def set_definitions(self, definitions: Mapping[str, Any]) -> None:
        """Register every entry of ``definitions``, in the mapping's order."""
        for identifier, definition in definitions.items():
            self.set_definition(identifier, definition)

    def get_definition(self, identifier: str) -> Any:
        """Return the stored definition of an identifier as-is, raw or normalized.

        Returns:
            The stored value, or None if the identifier is not registered.
        """
        return self._definitions.get(identifier)

    def resolve_definition(self, identifier: str) -> Optional[Definition]:
        """Return the normalized definition of an identifier.

        The raw definition is normalized on first access and the result
        replaces it, so later calls return the same :class:`Definition`.

        Args:
            identifier: The identifier to look up.

        Returns:
            The definition, or None if the identifier is not registered.

        Raises:
            InvalidConfigurationError: If the raw definition cannot be normalized.
        """
        with self._lock:
            if identifier not in self._definitions:
                return None
            definition = self._definitions[identifier]
            if not isinstance(definition, Definition):
                definition = make_definition(definition)
                self._definitions[identifier] = definition
                logger.debug("Normalized definition of '%s' to %r", identifier, definition)
            return definition

    def has(self, identifier: str) -> bool:
        """Return True if a definition is registered for ``identifier``.

        True does not guarantee that :meth:`get` succeeds, only that it will
        not raise :class:`NotFoundError`.
        """
        return identifier in self._definitions

    def get(self, identifier: str) -> Any:
        """Resolve an identifier to an object.

        Args:
            identifier: The identifier to resolve.

        Returns:
            The object produced by the identifier's definition.

        Raises:
            NotFoundError: If the identifier is not registered.
            CircularReferenceError: If the identifier is already being resolved
                further up the current call chain.
            InvalidConfigurationError: If the definition cannot be normalized.

        Errors raised by build functions propagate unchanged.
        """
        definition = self.resolve_definition(identifier)
        if definition is None:
            raise NotFoundError(identifier)

        with self._resolving(identifier):
            return definition.resolve(self)

    def validate(self, throw_on_error: bool = True) -> bool:
        """Check that every registered definition can be normalized.

        Only normalization is checked: build functions are not called and no
        objects are constructed.

        Args:
            throw_on_error: Raise on the first failure instead of returning False.

        Returns:
            True if every definition is valid, False on the first failure when
            ``throw_on_error`` is False.

        Raises:
            InvalidConfigurationError: On the first failure when ``throw_on_error``
                is True, naming the offending identifier and chained to the cause.
        """
        for identifier in list(self._definitions):
            try:
                self.resolve_definition(identifier)
            except Exception as exc:
                if not throw_on_error:
                    logger.warning(
                        "Validation failed while preparing definition of '%s': %s",
                        identifier,
                        exc,
                    )
                    return False
                raise InvalidConfigurationError(
                    f"Validation failed while preparing definition of '{identifier}': {exc}"
                ) from exc
        return True

    @property
    def _in_flight(self) -> set[str]:
        try:
            return self._local.resolving
        except AttributeError:
            self._local.resolving = set()
            return self._local.resolving

    @contextmanager
    def _resolving(self, identifier: str) -> Iterator[None]:
        """Mark ``identifier`` as being resolved for the duration of the block."""
        in_flight = self._in_flight
        if identifier in in_flight:
            raise CircularReferenceError(identifier)
        in_flight.add(identifier)
        try:
            yield
        finally:
            in_flight.discard(identifier)

    def __getitem__(self, identifier: str) -> Any:
        return self.get(identifier)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._definitions))
