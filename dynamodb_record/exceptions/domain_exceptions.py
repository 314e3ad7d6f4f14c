"""
Domain-Specific Exceptions for DynamoDB Records

This module collects the exceptions raised by the record mapping layer.
All of them extend RecordError. Errors coming back from DynamoDB itself
(botocore ClientError) are not represented here: they propagate to the
caller unchanged.

Organized by category:
1. Definition Errors (raised while a record class is being declared)
2. Marshaling and Key Errors (raised before any store call)
3. Resource Not Found Errors
4. Infrastructure Errors
"""

from typing import Any, Dict, List, Optional, Sequence

from .base import RecordError


# =============================================================================
# Definition Errors
# =============================================================================

class DefinitionError(RecordError):
    """Raised when a record definition cannot be built.

    Used for:
    - Invalid attribute declarations (unknown type tag, bad options)
    - Declarations made after the definition was finalized
    - Attributes that clash with Record method names
    """

    def __init__(self, message: str, table_name: Optional[str] = None, original_error: Optional[Exception] = None):
        self.table_name = table_name
        context = {}
        if table_name:
            context['table_name'] = table_name
        super().__init__(message, original_error, context)


class DuplicateAttribute(DefinitionError):
    """Raised when an attribute name or storage name is declared twice."""

    def __init__(self, name: str, table_name: Optional[str] = None, storage_name: bool = False):
        self.name = name
        kind = "storage name" if storage_name else "attribute name"
        super().__init__(f"Duplicate {kind} '{name}'", table_name)


class DuplicateKeyRole(DefinitionError):
    """Raised when a second hash key or a second range key is declared."""

    def __init__(self, role: str, existing: str, name: str, table_name: Optional[str] = None):
        self.role = role
        self.existing = existing
        self.name = name
        super().__init__(
            f"Cannot declare '{name}' as {role} key: '{existing}' is already the {role} key",
            table_name,
        )


class MissingHashKey(DefinitionError):
    """Raised when a definition is finalized without a hash key."""

    def __init__(self, table_name: Optional[str] = None):
        super().__init__("A record definition requires exactly one hash key", table_name)


class UnknownAttribute(RecordError):
    """Raised when an operation names an attribute the record does not declare."""

    def __init__(self, name: str, record: Optional[str] = None):
        self.name = name
        self.record = record
        context = {}
        if record:
            context['record'] = record
        super().__init__(f"Unknown attribute '{name}'", None, context)


# =============================================================================
# Marshaling and Key Errors
# =============================================================================

class KeyMissing(RecordError):
    """Raised when key attributes needed by an operation have no value.

    The message lists the missing attributes in declaration order, hash
    key first, e.g. ``Missing required keys: id, date``.
    """

    def __init__(self, names: Sequence[str]):
        self.names: List[str] = list(names)
        super().__init__(f"Missing required keys: {', '.join(self.names)}")


class TypeMismatch(RecordError):
    """Raised when a value is outside the domain of an attribute type.

    Used for:
    - Native values that cannot be marshaled to the wire format
    - Tagged wire values with the wrong tag or an unparsable payload
    - Assignments that cannot be cast to the declared type
    """

    def __init__(self, attribute: Optional[str], expected_type: str, actual_value: Any, original_error: Optional[Exception] = None):
        self.attribute = attribute
        self.expected_type = expected_type
        self.actual_value = actual_value
        target = f"attribute '{attribute}'" if attribute else "value"
        message = f"Type mismatch for {target}: expected {expected_type}, got {actual_value!r}"
        super().__init__(message, original_error)


# =============================================================================
# Resource Not Found Errors
# =============================================================================

class NotFound(RecordError):
    """Raised when an item expected to exist is not found in DynamoDB.

    Used by reload(). A plain find() that matches nothing returns None
    instead of raising.
    """

    def __init__(self, table_name: str, key: Dict[str, Any], original_error: Optional[Exception] = None):
        self.table_name = table_name
        self.key = key
        message = f"Item not found in table '{table_name}' with key: {key}"
        context = {
            'table_name': table_name,
            'key': key
        }
        super().__init__(message, original_error, context)


# =============================================================================
# Infrastructure Errors
# =============================================================================

class ConnectionError(RecordError):
    """Raised when the DynamoDB client cannot be created.

    Used for:
    - Invalid endpoint or region configuration
    - Missing botocore credentials providers
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, original_error, context)
