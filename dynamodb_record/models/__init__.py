# Attribute type registry
from .marshalers import (
    AttributeType,
    AttributeTypeRegistry,
    BooleanType,
    DateTimeType,
    DateType,
    FloatType,
    IntegerType,
    ListType,
    MapType,
    NumberSetType,
    StringSetType,
    StringType,
    registry,
)

# Declarations and definitions
from .attributes import (
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
)
from .definition import RecordDefinition, RecordDefinitionBuilder

# Per-instance state and persistence
from .keys import KeyResolver
from .record import Record
from .tracking import DirtyTracker

__all__ = [
    # Type registry
    "AttributeType",
    "AttributeTypeRegistry",
    "BooleanType",
    "DateTimeType",
    "DateType",
    "FloatType",
    "IntegerType",
    "ListType",
    "MapType",
    "NumberSetType",
    "StringSetType",
    "StringType",
    "registry",

    # Declarations
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

    # Definitions
    "RecordDefinition",
    "RecordDefinitionBuilder",

    # Records
    "DirtyTracker",
    "KeyResolver",
    "Record",
]
