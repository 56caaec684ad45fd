from __future__ import annotations

from typing import Optional


class ServiceError(RuntimeError):
    """Base class for service-layer errors."""


class InvalidInputError(ServiceError, ValueError):
    """A row or value that cannot become an Item."""


class MissingFieldError(InvalidInputError):
    def __init__(self, field: str):
        super().__init__(f"Missing key '{field}'")
        self.field = field


class InvalidFieldError(InvalidInputError):
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class TypeMismatchError(ServiceError):
    """Item type does not match the collection it is added to."""


class DatasetError(ServiceError):
    """Errors from the bootstrap dataset (I/O, parse)."""


class DatasetIOError(DatasetError):
    """Dataset file missing or unreadable."""


class DatasetParseError(DatasetError):
    """Dataset is not valid JSON or not a list of objects."""
