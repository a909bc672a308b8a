"""Definition variants used by the container to produce objects.

A definition is a normalized recipe for one identifier. Three variants exist:

- :class:`AliasDefinition` forwards resolution to another identifier.
- :class:`BuildDefinition` calls a factory function with the container.
- :class:`InstanceDefinition` hands out an object that was built up front.

Every definition carries a sharing policy. A shared definition constructs its
object once and returns that same object on every later resolution; a
non-shared definition constructs a fresh one each time and never caches.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Mapping, Optional

from armature.config import RECOGNIZED_KEYS, DefinitionConfig
from armature.errors import InvalidConfigurationError

if TYPE_CHECKING:
    from armature.container import Container

__all__ = [
    "Definition",
    "AliasDefinition",
    "BuildDefinition",
    "InstanceDefinition",
]

logger = logging.getLogger(__name__)

_UNSET = object()


def _has_item(raw: Any, field_name: str) -> bool:
    return isinstance(raw, Mapping) and any(
        RECOGNIZED_KEYS.get(key) == field_name for key in raw
    )


class Definition(ABC):
    """Base class of all definitions.

    Subclasses implement :meth:`_do_resolve` to construct the object and
    :meth:`from_config` to build themselves from a parsed record. The base
    class owns the sharing policy and the shared-instance slot.

    The slot is guarded by a per-definition lock, so when several threads
    resolve the same shared definition at once the first one constructs the
    object and the others wait and receive that same object.

    Attributes:
        kind: Short tag naming the variant, usable as ``definitionClass``.
        default_shared: Sharing policy used when none is given explicitly.
    """

    kind: ClassVar[str] = ""
    default_shared: ClassVar[bool] = True

    def __init__(self, shared: Optional[bool] = None):
        self._lock = threading.RLock()
        self._instance: Any = _UNSET
        self._shared = self.default_shared
        if shared is not None:
            self.shared = shared

    @property
    def shared(self) -> bool:
        """Whether resolution caches and reuses a single instance."""
        return self._shared

    @shared.setter
    def shared(self, value: bool) -> None:
        with self._lock:
            self._shared = bool(value)
            if not self._shared:
                self._instance = _UNSET

    @classmethod
    def supports(cls, raw: Any) -> bool:
        """Return True if ``raw`` explicitly names this class as its definitionClass."""
        if not isinstance(raw, Mapping):
            return False
        return any(
            RECOGNIZED_KEYS.get(key) == "definition_class" and value in (cls, cls.kind)
            for key, value in raw.items()
        )

    @classmethod
    def create_if_possible(cls, raw: Any) -> Optional["Definition"]:
        """Build an instance of this variant if :meth:`supports` accepts ``raw``.

        Args:
            raw: A raw definition: a shorthand value or a structured record.

        Returns:
            The new definition, or None if this variant does not recognize ``raw``
            or the record names a different ``definitionClass``.

        Raises:
            InvalidConfigurationError: If ``raw`` is recognized but incomplete.
        """
        if not cls.supports(raw):
            return None
        if isinstance(raw, Mapping) and not callable(raw):
            config = DefinitionConfig.from_mapping(raw)
            if config.definition_class not in (None, cls, cls.kind):
                return None
            return cls.from_config(config)
        return cls._from_shorthand(raw)

    @classmethod
    @abstractmethod
    def from_config(cls, config: DefinitionConfig) -> "Definition":
        """Build this variant from a parsed record."""

    @classmethod
    def _from_shorthand(cls, raw: Any) -> "Definition":
        raise InvalidConfigurationError(
            f"{cls.__name__} cannot be created from {type(raw).__name__} values"
        )

    def resolve(self, container: "Container") -> Any:
        """Return the object this definition stands for.

        A shared definition returns its cached instance when one exists and
        otherwise constructs the object and caches it. A non-shared definition
        constructs a new object on every call and never touches the cache.

        Args:
            container: The container resolving this definition, passed on to
                aliases and build functions so they can resolve other identifiers.

        Returns:
            The resolved object.
        """
        if not self._shared:
            return self._do_resolve(container)

        instance = self._instance
        if instance is not _UNSET:
            return instance

        with self._lock:
            if self._instance is _UNSET:
                instance = self._do_resolve(container)
                if self._shared:
                    self._instance = instance
                    logger.debug("Cached shared instance for %r", self)
                return instance
            return self._instance

    @abstractmethod
    def _do_resolve(self, container: "Container") -> Any:
        """Construct the object; called only when no cached instance applies."""

    def configuration(self) -> dict[str, Any]:
        """Express this definition as a structured record.

        Passing the record back through :func:`armature.factory.make_definition`
        yields an equivalent definition (without any cached instance).
        """
        return {"definitionClass": type(self), "shared": self._shared}


class AliasDefinition(Definition):
    """Definition that forwards resolution to another identifier.

    Aliases are not shared by default: sharing is owned by the target. An
    alias explicitly marked shared caches whatever the target returned the
    first time, even if the target itself is not shared.

    Example:
        >>> container.set_definition("db", "postgres")
        >>> container.set_definition("db", {"aliasOf": "postgres", "shared": True})
    """

    kind = "alias"
    default_shared = False

    def __init__(self, alias_of: str, shared: Optional[bool] = None):
        if not alias_of:
            raise InvalidConfigurationError.missing_definition_item("aliasOf", "alias")
        if not isinstance(alias_of, str):
            raise InvalidConfigurationError(
                f"Alias target must be an identifier string, got {alias_of!r}"
            )
        super().__init__(shared)
        self.alias_of = alias_of

    @classmethod
    def supports(cls, raw: Any) -> bool:
        return (
            super().supports(raw)
            or isinstance(raw, str)
            or _has_item(raw, "alias_of")
        )

    @classmethod
    def from_config(cls, config: DefinitionConfig) -> "AliasDefinition":
        return cls(config.alias_of, shared=config.shared)

    @classmethod
    def _from_shorthand(cls, raw: Any) -> "AliasDefinition":
        return cls(raw)

    def _do_resolve(self, container: "Container") -> Any:
        return container.get(self.alias_of)

    def configuration(self) -> dict[str, Any]:
        return {**super().configuration(), "aliasOf": self.alias_of}

    def __repr__(self) -> str:
        return f"AliasDefinition(alias_of={self.alias_of!r}, shared={self._shared})"


class BuildDefinition(Definition):
    """Definition that constructs its object by calling a factory function.

    The function receives the container as its only argument, so it can
    resolve whatever it depends on.

    Example:
        >>> container.set_definition(
        ...     "service", {"func": lambda c: Service(c.get("db")), "shared": False}
        ... )
    """

    kind = "build"

    def __init__(
        self, func: Callable[["Container"], Any], shared: Optional[bool] = None
    ):
        if func is None:
            raise InvalidConfigurationError.missing_definition_item("func", "build")
        if not callable(func):
            raise InvalidConfigurationError(
                f"Build function must be callable, got {func!r}"
            )
        super().__init__(shared)
        self.func = func

    @classmethod
    def supports(cls, raw: Any) -> bool:
        return super().supports(raw) or callable(raw) or _has_item(raw, "func")

    @classmethod
    def from_config(cls, config: DefinitionConfig) -> "BuildDefinition":
        return cls(config.func, shared=config.shared)

    @classmethod
    def _from_shorthand(cls, raw: Any) -> "BuildDefinition":
        return cls(raw)

    def _do_resolve(self, container: "Container") -> Any:
        if self.func is None:
            raise InvalidConfigurationError("No build function set")
        return self.func(container)

    def configuration(self) -> dict[str, Any]:
        return {**super().configuration(), "func": self.func}

    def __repr__(self) -> str:
        name = getattr(self.func, "__qualname__", repr(self.func))
        return f"BuildDefinition(func={name}, shared={self._shared})"


class InstanceDefinition(Definition):
    """Definition wrapping an object that was constructed up front.

    Instance definitions are always shared; trying to make one non-shared
    raises :class:`InvalidConfigurationError`.
    """

    kind = "instance"

    def __init__(self, instance: Any, shared: Optional[bool] = None):
        super().__init__(shared)
        self.instance = instance

    @Definition.shared.setter
    def shared(self, value: bool) -> None:
        if not value:
            raise InvalidConfigurationError(
                "Pre-created instances cannot be defined non-shared"
            )
        self._shared = True

    @classmethod
    def supports(cls, raw: Any) -> bool:
        return super().supports(raw) or _has_item(raw, "instance")

    @classmethod
    def from_config(cls, config: DefinitionConfig) -> "InstanceDefinition":
        if not config.has_instance:
            raise InvalidConfigurationError.missing_definition_item(
                "instance", "instance"
            )
        return cls(config.instance, shared=config.shared)

    def _do_resolve(self, container: "Container") -> Any:
        return self.instance

    def configuration(self) -> dict[str, Any]:
        return {**super().configuration(), "instance": self.instance}

    def __repr__(self) -> str:
        return f"InstanceDefinition(instance={type(self.instance).__name__})"
