# Base exception class
from .base import RecordError

# Domain-specific exceptions
from .domain_exceptions import (
    ConnectionError,
    DefinitionError,
    DuplicateAttribute,
    DuplicateKeyRole,
    KeyMissing,
    MissingHashKey,
    NotFound,
    TypeMismatch,
    UnknownAttribute,
)

__all__ = [
    # Base exception
    "RecordError",

    # Domain exceptions (alphabetically ordered)
    "ConnectionError",
    "DefinitionError",
    "DuplicateAttribute",
    "DuplicateKeyRole",
    "KeyMissing",
    "MissingHashKey",
    "NotFound",
    "TypeMismatch",
    "UnknownAttribute",
]
