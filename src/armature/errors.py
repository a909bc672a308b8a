__all__ = [
    "ContainerError",
    "NotFoundError",
    "CircularReferenceError",
    "InvalidConfigurationError",
]


class ContainerError(Exception):
    """Base class for everything raised by the container itself."""

    pass


class NotFoundError(ContainerError, KeyError):
    """Raised when an identifier has no registered definition."""

    def __init__(self, identifier: str):
        super().__init__(f"Container item '{identifier}' is not defined")
        self.identifier = identifier

    def __str__(self) -> str:
        # KeyError would otherwise render the message with quotes around it.
        return self.args[0]


class CircularReferenceError(ContainerError):
    """Raised when an identifier is reached again while it is being resolved."""

    def __init__(self, identifier: str):
        super().__init__(f"Circular reference detected (referencing '{identifier}')")
        self.identifier = identifier


class InvalidConfigurationError(ContainerError, ValueError):
    """Raised when a definition cannot be normalized or is misconfigured."""

    @classmethod
    def missing_definition_item(
        cls, item: str, definition_kind: str
    ) -> "InvalidConfigurationError":
        return cls(f"Missing required item '{item}' in {definition_kind} definition")
