"""
DynamoDB Record

An object-mapping layer between Python record classes and DynamoDB's typed
attribute values. Record classes declare typed attributes and their key
roles; instances track which attributes changed since they were last loaded
or saved, and refuse to send any request whose primary key is incomplete.
"""

from .config import DynamoDBConfig
from .core import (
    DynamoDBStoreClient,
    ItemCollection,
    StoreClient,
)
from .exceptions import (
    ConnectionError,
    DefinitionError,
    DuplicateAttribute,
    DuplicateKeyRole,
    KeyMissing,
    MissingHashKey,
    NotFound,
    RecordError,
    TypeMismatch,
    UnknownAttribute,
)
from .models import (
    # Attribute declarations
    Attribute,
    AttributeDeclaration,
    BooleanAttribute,
    DateAttribute,
    DateTimeAttribute,
    FloatAttribute,
    IntegerAttribute,
    KeyRole,
    ListAttribute,
    MapAttribute,
    NumberSetAttribute,
    StringAttribute,
    StringSetAttribute,
    # Type registry
    AttributeType,
    AttributeTypeRegistry,
    registry,
    # Definitions and records
    DirtyTracker,
    KeyResolver,
    Record,
    RecordDefinition,
    RecordDefinitionBuilder,
)

__version__ = "1.0.0"
__all__ = [
    # Configuration
    "DynamoDBConfig",

    # Store client
    "DynamoDBStoreClient",
    "ItemCollection",
    "StoreClient",

    # Exceptions
    "ConnectionError",
    "DefinitionError",
    "DuplicateAttribute",
    "DuplicateKeyRole",
    "KeyMissing",
    "MissingHashKey",
    "NotFound",
    "RecordError",
    "TypeMismatch",
    "UnknownAttribute",

    # Attribute declarations
    "Attribute",
    "AttributeDeclaration",
    "BooleanAttribute",
    "DateAttribute",
    "DateTimeAttribute",
    "FloatAttribute",
    "IntegerAttribute",
    "KeyRole",
    "ListAttribute",
    "MapAttribute",
    "NumberSetAttribute",
    "StringAttribute",
    "StringSetAttribute",

    # Type registry
    "AttributeType",
    "AttributeTypeRegistry",
    "registry",

    # Definitions and records
    "DirtyTracker",
    "KeyResolver",
    "Record",
    "RecordDefinition",
    "RecordDefinitionBuilder",
]
