"""Custom exceptions for flowplan."""


class FlowplanError(Exception):
    """Base exception for all flowplan errors."""

    pass


class ValidationError(FlowplanError):
    """Raised when task input is malformed."""

    pass


class CircularDependencyError(ValidationError):
    """Raised when a circular dependency is found where an acyclic graph is required."""

    pass


class MissingReferenceError(ValidationError):
    """Raised when a dependency references a task ID that does not exist."""

    pass


class ParseError(FlowplanError):
    """Raised when a task or config file cannot be parsed."""

    pass
