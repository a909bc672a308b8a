"""Inference of definition variants from raw definitions.

Definitions may be registered in shorthand: a string is an alias, a callable
is a build function and any other object is a pre-built instance. Structured
records (mappings) either name their variant explicitly through
``definitionClass`` or are matched against each variant's recognizer in a
fixed priority order.
"""

import inspect
from typing import Any, Mapping, Union

from armature.config import DefinitionConfig
from armature.definitions import (
    AliasDefinition,
    BuildDefinition,
    Definition,
    InstanceDefinition,
)
from armature.errors import InvalidConfigurationError

__all__ = ["make_definition", "definition_class_for", "RECOGNITION_ORDER"]

RECOGNITION_ORDER: tuple[type[Definition], ...] = (
    BuildDefinition,
    AliasDefinition,
    InstanceDefinition,
)
"""Order in which variant recognizers are tried for records without a definitionClass."""

DEFINITION_CLASSES_BY_KIND: dict[str, type[Definition]] = {
    definition_class.kind: definition_class for definition_class in RECOGNITION_ORDER
}


def make_definition(raw: Any) -> Definition:
    """Normalize a raw definition into a :class:`Definition`.

    The first matching rule wins:

    1. A :class:`Definition` is returned unchanged.
    2. A string becomes an :class:`AliasDefinition` of that identifier.
    3. A callable (including a class) becomes a :class:`BuildDefinition`.
    4. A mapping is parsed as a structured record, see :func:`_from_record`.
    5. Anything else becomes an :class:`InstanceDefinition` wrapping it.

    Args:
        raw: The value registered for an identifier.

    Returns:
        The normalized definition.

    Raises:
        InvalidConfigurationError: If ``raw`` is a record no variant accepts,
            or the chosen variant is missing a required item.

    Example:
        >>> make_definition("database")
        AliasDefinition(alias_of='database', shared=False)
        >>> make_definition({"func": make_database, "shared": False})
        BuildDefinition(func=make_database, shared=False)
    """
    if isinstance(raw, Definition):
        return raw
    if isinstance(raw, str):
        return AliasDefinition(raw)
    if callable(raw):
        return BuildDefinition(raw)
    if isinstance(raw, Mapping):
        return _from_record(raw)
    return InstanceDefinition(raw)


def definition_class_for(definition_class: Union[str, type]) -> type[Definition]:
    """Look up the variant named by a record's ``definitionClass`` item.

    Args:
        definition_class: A concrete :class:`Definition` subclass, or the
            ``kind`` tag of one of the built-in variants.

    Raises:
        InvalidConfigurationError: If the value names no known variant.
    """
    if (
        isinstance(definition_class, type)
        and issubclass(definition_class, Definition)
        and not inspect.isabstract(definition_class)
    ):
        return definition_class
    if isinstance(definition_class, str) and definition_class in DEFINITION_CLASSES_BY_KIND:
        return DEFINITION_CLASSES_BY_KIND[definition_class]
    raise InvalidConfigurationError(
        f"Unknown definitionClass {definition_class!r}; expected a Definition "
        f"subclass or one of {sorted(DEFINITION_CLASSES_BY_KIND)}"
    )


def _from_record(record: Mapping[str, Any]) -> Definition:
    """Build a definition from a structured record.

    An explicit ``definitionClass`` bypasses inference. Otherwise the
    recognizers in :data:`RECOGNITION_ORDER` are tried and the first variant
    to accept the record is built.
    """
    config = DefinitionConfig.from_mapping(record)

    if config.definition_class is not None:
        return definition_class_for(config.definition_class).from_config(config)

    for definition_class in RECOGNITION_ORDER:
        if definition_class.supports(record):
            return definition_class.from_config(config)

    raise InvalidConfigurationError(
        f"Invalid configuration: cannot infer a definition from {dict(record)!r}"
    )
