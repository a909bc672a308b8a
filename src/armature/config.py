"""Typed configuration records for definitions.

A structured raw definition is a mapping such as
``{"aliasOf": "database"}`` or ``{"func": make_service, "shared": False}``.
Before a definition variant is built from it, the mapping is parsed into a
:class:`DefinitionConfig` so that every recognized key becomes a named,
typed field and any unrecognized key is rejected instead of being silently
ignored.
"""

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from armature.errors import InvalidConfigurationError

__all__ = ["DefinitionConfig", "RECOGNIZED_KEYS"]


RECOGNIZED_KEYS: dict[str, str] = {
    "aliasOf": "alias_of",
    "alias_of": "alias_of",
    "func": "func",
    "instance": "instance",
    "shared": "shared",
    "definitionClass": "definition_class",
    "definition_class": "definition_class",
}
"""Mapping from accepted record keys to :class:`DefinitionConfig` field names.

Both the camelCase and snake_case spellings are accepted for the
multi-word keys, but a record may only use one spelling per field.
"""


@dataclass(frozen=True)
class DefinitionConfig:
    """The parsed form of a structured raw definition.

    Attributes:
        alias_of: Identifier an alias definition forwards to.
        func: Factory function of a build definition, called with the container.
        instance: Pre-built object of an instance definition. Only meaningful
            when ``has_instance`` is True, since ``None`` is a valid instance.
        has_instance: Whether the record carried an ``instance`` key at all.
        shared: Explicit sharing policy, or None to use the variant's default.
        definition_class: Explicit variant override, either a Definition
            subclass or one of the tags ``"alias"``, ``"build"``, ``"instance"``.

    Example:
        >>> config = DefinitionConfig.from_mapping({"aliasOf": "db", "shared": True})
        >>> config.alias_of, config.shared
        ('db', True)
    """

    alias_of: Optional[str] = None
    func: Optional[Callable[..., Any]] = None
    instance: Any = None
    has_instance: bool = False
    shared: Optional[bool] = None
    definition_class: Any = None

    @classmethod
    def from_mapping(cls, record: Mapping[str, Any]) -> "DefinitionConfig":
        """Parse a structured raw definition.

        Args:
            record: The mapping supplied as a raw definition.

        Returns:
            The equivalent :class:`DefinitionConfig`.

        Raises:
            InvalidConfigurationError: If the record contains unrecognized keys,
                uses two spellings of the same key, or gives a non-boolean
                ``shared`` value.
        """
        unknown = [key for key in record if key not in RECOGNIZED_KEYS]
        if unknown:
            raise InvalidConfigurationError(
                f"Unrecognized definition keys {sorted(map(str, unknown))}; "
                f"expected some of {sorted(RECOGNIZED_KEYS)}"
            )

        fields: dict[str, Any] = {}
        for key, value in record.items():
            field_name = RECOGNIZED_KEYS[key]
            if field_name in fields:
                raise InvalidConfigurationError(
                    f"Definition key '{key}' duplicates another spelling of '{field_name}'"
                )
            fields[field_name] = value

        shared = fields.get("shared")
        if shared is not None and not isinstance(shared, bool):
            raise InvalidConfigurationError(
                f"Definition item 'shared' must be a bool, got {shared!r}"
            )

        if "instance" in fields:
            fields["has_instance"] = True

        return cls(**fields)
