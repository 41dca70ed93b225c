"""Exceptions raised by classwork operations."""


class ClassworkError(Exception):
    """Base class for failures reported to callers."""

    pass


class ValidationError(ClassworkError):
    """An input was rejected; `field` names the offending input."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class PermissionDenied(ClassworkError):
    """The caller's role or ownership does not allow the operation."""

    pass


class NotFound(ClassworkError):
    """The referenced record does not exist, or is not visible to the caller."""

    pass


class AuthError(ClassworkError):
    """No authenticated caller, or credentials were rejected."""

    pass


class StorageError(ClassworkError):
    """The record store or the blob store is unavailable."""

    pass
