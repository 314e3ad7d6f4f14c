"""
Record Definitions

A RecordDefinition is the schema of one DynamoDB table as seen by a record
class: the table name, the ordered attribute declarations and the names of
the hash and range key attributes. It is built once, when the record class
is created, and never changes afterwards, so it can be shared freely
between instances.

RecordDefinitionBuilder enforces the structural rules while attributes are
declared:

- attribute names and storage names are unique
- at most one hash key and at most one range key
- key attributes are stored as strings or numbers
- a hash key must exist by the time the definition is finalized

The definition also owns item-level marshaling: turning a mapping of native
values into a DynamoDB item keyed by storage name, and back.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import (
    DefinitionError,
    DuplicateAttribute,
    DuplicateKeyRole,
    MissingHashKey,
    UnknownAttribute,
)
from .attributes import AttributeDeclaration, KeyRole

logger = logging.getLogger(__name__)

# DynamoDB key attributes must be S, N or B; no registered type stores binary
KEY_WIRE_TAGS = ('S', 'N')


class RecordDefinition(BaseModel):
    """Immutable schema for one storage table."""

    table_name: str = Field(..., min_length=1, description="DynamoDB table name")
    attributes: Tuple[AttributeDeclaration, ...] = Field(..., description="Declarations in declaration order")
    hash_key_name: str = Field(..., description="Name of the hash key attribute")
    range_key_name: Optional[str] = Field(None, description="Name of the range key attribute, if any")

    _by_name: Dict[str, AttributeDeclaration] = PrivateAttr(default_factory=dict)
    _by_storage_name: Dict[str, AttributeDeclaration] = PrivateAttr(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    def model_post_init(self, __context: Any) -> None:
        self._by_name.update((decl.name, decl) for decl in self.attributes)
        self._by_storage_name.update((decl.storage_name, decl) for decl in self.attributes)

    @property
    def attribute_names(self) -> List[str]:
        return [decl.name for decl in self.attributes]

    @property
    def key_names(self) -> List[str]:
        """Key attribute names, hash key first."""
        return [name for name in (self.hash_key_name, self.range_key_name) if name]

    def has_attribute(self, name: str) -> bool:
        return name in self._by_name

    def attribute(self, name: str) -> AttributeDeclaration:
        """Get the declaration for an attribute.

        Raises:
            UnknownAttribute: If no attribute with that name is declared
        """
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownAttribute(name, self.table_name) from None

    def attribute_for_storage_name(self, storage_name: str) -> Optional[AttributeDeclaration]:
        return self._by_storage_name.get(storage_name)

    def to_wire_item(self, values: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
        """Marshal native attribute values into a DynamoDB item.

        Attributes whose value is None (or marshals to nothing, like an
        empty set) are left out of the item.

        Args:
            values: Mapping of attribute name to native value

        Returns:
            Item keyed by storage name with tagged attribute values

        Raises:
            TypeMismatch: If a value is outside its attribute's type
        """
        item = {}
        for decl in self.attributes:
            tagged = decl.attribute_type.to_wire(values.get(decl.name), decl.name)
            if tagged is not None:
                item[decl.storage_name] = tagged
        return item

    def from_wire_item(self, item: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
        """Unmarshal a DynamoDB item into native values keyed by attribute name.

        Storage names the definition does not declare are ignored.

        Raises:
            TypeMismatch: If a tagged value does not match its attribute's type
        """
        values = {}
        for storage_name, tagged in item.items():
            decl = self.attribute_for_storage_name(storage_name)
            if decl is None:
                logger.debug(f"Ignoring undeclared attribute '{storage_name}' from {self.table_name}")
                continue
            values[decl.name] = decl.attribute_type.from_wire(tagged, decl.name)
        return values


class RecordDefinitionBuilder:
    """Collects attribute declarations and produces a RecordDefinition.

    Example:
        builder = RecordDefinitionBuilder("TestTable")
        builder.declare_attribute("id", "integer", key_role=KeyRole.HASH)
        builder.declare_attribute("date", "date", key_role=KeyRole.RANGE)
        builder.declare_attribute("body", "string")
        definition = builder.finalize()
    """

    def __init__(self, table_name: str):
        if not isinstance(table_name, str) or not table_name:
            raise DefinitionError(f"Table name must be a non-empty string, got {table_name!r}")
        self.table_name = table_name
        self._attributes: List[AttributeDeclaration] = []
        self._hash_key: Optional[str] = None
        self._range_key: Optional[str] = None
        self._definition: Optional[RecordDefinition] = None

    def declare_attribute(
        self,
        name: str,
        semantic_type: str,
        key_role: KeyRole = KeyRole.NONE,
        storage_name: Optional[str] = None,
        default: Any = None,
        **database_type_options: Any
    ) -> AttributeDeclaration:
        """Declare one attribute.

        Args:
            name: Attribute name on the record
            semantic_type: Registered type tag
            key_role: KeyRole.NONE, KeyRole.HASH or KeyRole.RANGE
            storage_name: Name used in DynamoDB items (defaults to name)
            default: Default value or zero-argument callable
            **database_type_options: Extra options kept on the declaration

        Returns:
            The new AttributeDeclaration

        Raises:
            DefinitionError: If the definition is already finalized or the declaration is invalid
            DuplicateAttribute: If the name or storage name is already used
            DuplicateKeyRole: If a second hash or range key is declared

        A key role on a type that is not stored as a string or number
        (boolean, list, map, sets) raises DefinitionError.
        """
        if self._definition is not None:
            raise DefinitionError(f"Cannot declare '{name}': definition is already finalized", self.table_name)

        try:
            declaration = AttributeDeclaration(
                name=name,
                semantic_type=semantic_type,
                storage_name=storage_name,
                key_role=key_role,
                default=default,
                database_type_options=database_type_options,
            )
        except PydanticValidationError as e:
            raise DefinitionError(f"Invalid declaration for attribute {name!r}: {e}", self.table_name, e) from e

        for existing in self._attributes:
            if existing.name == declaration.name:
                raise DuplicateAttribute(declaration.name, self.table_name)
            if existing.storage_name == declaration.storage_name:
                raise DuplicateAttribute(declaration.storage_name, self.table_name, storage_name=True)

        if declaration.is_key and declaration.attribute_type.wire_tag not in KEY_WIRE_TAGS:
            raise DefinitionError(
                f"Attribute '{declaration.name}' of type '{declaration.semantic_type}' cannot be a "
                f"{declaration.key_role.value} key: key attributes must be stored as strings or numbers",
                self.table_name,
            )

        if declaration.key_role == KeyRole.HASH:
            if self._hash_key is not None:
                raise DuplicateKeyRole("hash", self._hash_key, declaration.name, self.table_name)
            self._hash_key = declaration.name
        elif declaration.key_role == KeyRole.RANGE:
            if self._range_key is not None:
                raise DuplicateKeyRole("range", self._range_key, declaration.name, self.table_name)
            self._range_key = declaration.name

        self._attributes.append(declaration)
        return declaration

    def finalize(self) -> RecordDefinition:
        """Build the definition. Repeated calls return the same object.

        Raises:
            MissingHashKey: If no hash key was declared
        """
        if self._definition is None:
            if self._hash_key is None:
                raise MissingHashKey(self.table_name)
            self._definition = RecordDefinition(
                table_name=self.table_name,
                attributes=tuple(self._attributes),
                hash_key_name=self._hash_key,
                range_key_name=self._range_key,
            )
            logger.debug(f"Finalized definition for {self.table_name}: {self._definition.attribute_names}")
        return self._definition
