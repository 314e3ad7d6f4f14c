"""
Attribute Declarations

An AttributeDeclaration is the immutable description of one attribute of a
record definition: its name, semantic type, storage name, key role and
default value policy.

Record classes do not build declarations by hand. They declare attributes
in the class body with the descriptor classes below, and Record collects
them into a RecordDefinitionBuilder when the class is created:

```python
class Post(Record):
    class Meta:
        table_name = "TestTable"

    id = IntegerAttribute(hash_key=True)
    date = DateAttribute(range_key=True)
    body = StringAttribute()
    flag = BooleanAttribute(storage_name="my_boolean")
```

On an instance, the descriptors read from and write to the record's value
mapping; every write goes through Record.set() so values are cast to the
declared type.
"""

import copy
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..exceptions import DefinitionError
from .marshalers import AttributeType, registry


class KeyRole(str, Enum):
    """Part an attribute plays in the table's primary key."""
    NONE = "none"
    HASH = "hash"
    RANGE = "range"


class AttributeDeclaration(BaseModel):
    """Immutable metadata for a single declared attribute."""

    name: str = Field(..., description="Attribute name on the record")
    semantic_type: str = Field(..., description="Registered attribute type tag (e.g. 'integer')")
    storage_name: str = Field(..., description="Attribute name used in DynamoDB items")
    key_role: KeyRole = Field(KeyRole.NONE, description="Primary key role")
    default: Any = Field(None, description="Default value, or a zero-argument callable producing one")
    database_type_options: Dict[str, Any] = Field(default_factory=dict, description="Extra per-attribute options")

    @model_validator(mode='before')
    @classmethod
    def default_storage_name(cls, data):
        """Use the attribute name as storage name unless one is given."""
        if isinstance(data, dict) and not data.get('storage_name'):
            data = {**data, 'storage_name': data.get('name')}
        return data

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v.isidentifier() or v.startswith('_'):
            raise ValueError(f"Attribute name must be a public Python identifier, got {v!r}")
        return v

    @field_validator('semantic_type')
    @classmethod
    def validate_semantic_type(cls, v):
        if v not in registry:
            raise ValueError(f"Unknown attribute type '{v}'. Registered types: {registry.tags()}")
        return v

    @property
    def attribute_type(self) -> AttributeType:
        return registry.get(self.semantic_type)

    @property
    def is_key(self) -> bool:
        return self.key_role != KeyRole.NONE

    def default_value(self) -> Any:
        """Produce a fresh default value (callables are invoked, values are copied)."""
        if callable(self.default):
            return self.default()
        return copy.deepcopy(self.default)

    model_config = ConfigDict(frozen=True)


# =============================================================================
# Declarative Attribute Descriptors
# =============================================================================

class Attribute:
    """Class-body attribute declaration and instance value accessor.

    Args:
        semantic_type: Registered type tag; subclasses fix this
        hash_key: Declare the attribute as the table's hash key
        range_key: Declare the attribute as the table's range key
        storage_name: Name of the attribute in DynamoDB items
        default: Default value or zero-argument callable
        **database_type_options: Extra options kept on the declaration
    """

    semantic_type: str = ""

    def __init__(
        self,
        semantic_type: Optional[str] = None,
        hash_key: bool = False,
        range_key: bool = False,
        storage_name: Optional[str] = None,
        default: Any = None,
        **database_type_options: Any
    ):
        if hash_key and range_key:
            raise DefinitionError("An attribute cannot be both the hash key and the range key")
        if semantic_type is not None:
            self.semantic_type = semantic_type
        if hash_key:
            self.key_role = KeyRole.HASH
        elif range_key:
            self.key_role = KeyRole.RANGE
        else:
            self.key_role = KeyRole.NONE
        self.storage_name = storage_name
        self.default = default
        self.database_type_options = database_type_options
        self.name: Optional[str] = None

    def __set_name__(self, owner, name):
        self.name = name

    def declare(self, builder, name: str) -> AttributeDeclaration:
        return builder.declare_attribute(
            name,
            self.semantic_type,
            key_role=self.key_role,
            storage_name=self.storage_name,
            default=self.default,
            **self.database_type_options
        )

    def __get__(self, instance, owner):
        if instance is None:
            return self
        return instance.get(self.name)

    def __set__(self, instance, value):
        instance.set(self.name, value)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, key_role={self.key_role.value!r})"


class IntegerAttribute(Attribute):
    semantic_type = "integer"


class FloatAttribute(Attribute):
    semantic_type = "float"


class StringAttribute(Attribute):
    semantic_type = "string"


class BooleanAttribute(Attribute):
    semantic_type = "boolean"


class DateAttribute(Attribute):
    semantic_type = "date"


class DateTimeAttribute(Attribute):
    semantic_type = "datetime"


class ListAttribute(Attribute):
    semantic_type = "list"


class MapAttribute(Attribute):
    semantic_type = "map"


class StringSetAttribute(Attribute):
    semantic_type = "string_set"


class NumberSetAttribute(Attribute):
    semantic_type = "number_set"
