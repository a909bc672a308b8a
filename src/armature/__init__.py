"""Armature dependency injection container.

Armature maps string identifiers to explicit construction recipes
("definitions") and resolves them into objects on demand. There is no
autowiring and no reflection: every object is produced by a recipe the
application wrote down.

Key Features:
    - Shorthand registration: strings are aliases, callables are build
      functions, other objects are pre-built instances
    - Structured records for explicit configuration, with unknown keys rejected
    - Shared (cached) or fresh-per-request instances, per definition
    - Lazy normalization, so definitions may be registered in any order
    - Circular reference detection during resolution
    - Safe to share between threads

Basic Usage:
    >>> from armature.container import Container
    >>>
    >>> container = Container({
    ...     "database": lambda c: Database(),
    ...     "service": {"func": lambda c: Service(c.get("database")), "shared": False},
    ...     "db": "database",
    ... })
    >>> container.validate()
    True
    >>> container.get("db") is container.get("database")
    True

The framework consists of several core modules:
    - container: Identifier registry and resolution
    - factory: Inference of definition variants from raw definitions
    - definitions: Alias, build and instance definitions
    - config: Typed parsing of structured definition records
    - errors: Framework-specific exceptions
"""
