"""
Records

Record is the base class for mapped DynamoDB items. Subclassing it builds a
RecordDefinition from the attributes declared in the class body; instances
hold native values plus a DirtyTracker.

```python
class Post(Record):
    class Meta:
        table_name = "TestTable"

    id = IntegerAttribute(hash_key=True)
    date = DateAttribute(range_key=True)
    body = StringAttribute()

Post.configure_client(DynamoDBStoreClient(config))

post = Post(id=1, date="2015-12-14", body="Hello!")
post.save()                                  # PutItem, then clean
found = Post.find(id=1, date="2015-12-14")   # GetItem, None if missing
found.body = "Edited"
found.dirty_names()                          # ['body']
found.rollback("body")
found.delete()
```

Persistence operations validate keys and marshal values locally before any
call is made to the store client. Errors from the store itself propagate
unchanged.

Meta options:
- table_name: DynamoDB table name (defaults to the class name)
- abstract: declare shared attributes without a table; no definition is built
"""

import logging
from typing import Any, ClassVar, Dict, List, Optional

from ..config import DynamoDBConfig
from ..core import DynamoDBStoreClient, ItemCollection, StoreClient
from ..exceptions import DefinitionError, NotFound
from .attributes import Attribute
from .definition import RecordDefinition, RecordDefinitionBuilder
from .keys import KeyResolver
from .tracking import DirtyTracker

logger = logging.getLogger(__name__)


class Record:
    """Base class for records mapped to a DynamoDB table."""

    _definition: ClassVar[Optional[RecordDefinition]] = None
    _client: ClassVar[Optional[StoreClient]] = None

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        meta = vars(cls).get('Meta')

        if getattr(meta, 'abstract', False):
            cls._definition = None
            return

        declared: Dict[str, Attribute] = {}
        for klass in reversed(cls.__mro__):
            for name, value in vars(klass).items():
                if isinstance(value, Attribute):
                    declared[name] = value

        builder = RecordDefinitionBuilder(getattr(meta, 'table_name', None) or cls.__name__)
        for name, attribute in declared.items():
            if hasattr(Record, name):
                raise DefinitionError(f"Attribute '{name}' clashes with a Record method", builder.table_name)
            attribute.declare(builder, name)
        cls._definition = builder.finalize()

    def __init__(self, **values: Any):
        self._bind_state()
        for decl in self._definition.attributes:
            if decl.default is not None:
                self._values[decl.name] = decl.attribute_type.coerce(decl.default_value(), decl.name)
        for name, value in values.items():
            self.set(name, value)

    def _bind_state(self) -> None:
        definition = self.record_definition()
        self._values: Dict[str, Any] = {name: None for name in definition.attribute_names}
        self._tracker = DirtyTracker(self._values, type(self).__name__)

    # =========================================================================
    # Class-level metadata and client binding
    # =========================================================================

    @classmethod
    def record_definition(cls) -> RecordDefinition:
        if cls._definition is None:
            raise DefinitionError(f"{cls.__name__} has no record definition (is it abstract?)")
        return cls._definition

    @classmethod
    def table_name(cls) -> str:
        return cls.record_definition().table_name

    @classmethod
    def configure_client(cls, client: Optional[StoreClient] = None, config: Optional[DynamoDBConfig] = None) -> StoreClient:
        """Bind a store client to this record class and its subclasses.

        Args:
            client: Store client to use; a DynamoDBStoreClient is built when omitted
            config: Configuration for the DynamoDBStoreClient built when client is omitted

        Returns:
            The bound store client
        """
        if client is None:
            client = DynamoDBStoreClient(config or DynamoDBConfig.from_env())
        cls._client = client
        return client

    @classmethod
    def dynamodb_client(cls) -> StoreClient:
        """Store client for this class, created from the environment on first use."""
        if cls._client is None:
            cls.configure_client()
        return cls._client

    # =========================================================================
    # Attribute access
    # =========================================================================

    def get(self, name: str) -> Any:
        self.record_definition().attribute(name)
        return self._values[name]

    def set(self, name: str, value: Any) -> None:
        """Assign an attribute, casting the value to the declared type.

        Raises:
            UnknownAttribute: If the attribute is not declared
            TypeMismatch: If the value cannot be cast
        """
        decl = self.record_definition().attribute(name)
        self._values[name] = decl.attribute_type.coerce(value, name)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    def to_dynamodb_item(self) -> Dict[str, Dict[str, Any]]:
        """Marshal the current values into a DynamoDB item."""
        return self.record_definition().to_wire_item(self._values)

    @classmethod
    def from_dynamodb_item(cls, item: Dict[str, Dict[str, Any]]) -> 'Record':
        """Build a clean instance from a DynamoDB item.

        Defaults are not applied: attributes missing from the item are None.
        """
        values = cls.record_definition().from_wire_item(item)
        instance = cls.__new__(cls)
        instance._bind_state()
        instance._values.update(values)
        instance._tracker.mark_clean()
        return instance

    # =========================================================================
    # Dirty tracking
    # =========================================================================

    def is_dirty(self, name: str) -> bool:
        return self._tracker.is_dirty(name)

    def was(self, name: str) -> Any:
        return self._tracker.was(name)

    def dirty_names(self) -> List[str]:
        return self._tracker.dirty_names()

    def is_instance_dirty(self) -> bool:
        return self._tracker.is_instance_dirty()

    def mark_dirty(self, name: str) -> None:
        """Force an attribute dirty, e.g. after mutating its value in place."""
        self._tracker.mark_dirty(name)

    def mark_clean(self) -> None:
        self._tracker.mark_clean()

    def rollback(self, *names: str) -> None:
        """Restore the named attributes (all when none are named) to their clean values."""
        self._tracker.rollback(names)

    # =========================================================================
    # Persistence operations
    # =========================================================================

    def save(self) -> bool:
        """Write every set attribute to DynamoDB and mark the record clean.

        Raises:
            KeyMissing: If a key attribute has no value; nothing is sent
            TypeMismatch: If a value cannot be marshaled; nothing is sent
        """
        definition = self.record_definition()
        KeyResolver(definition).resolve(self._values)
        item = definition.to_wire_item(self._values)

        self.dynamodb_client().put(definition.table_name, item)
        self._tracker.mark_clean()
        logger.debug(f"Saved {type(self).__name__} to {definition.table_name}")
        return True

    @classmethod
    def find(cls, **key_values: Any) -> Optional['Record']:
        """Load one item by primary key.

        Args:
            **key_values: Values for the hash key and (if declared) range key

        Returns:
            A clean instance, or None if no item has that key

        Raises:
            KeyMissing: If a key attribute is not provided; nothing is sent

        Example:
            >>> Post.find(id=5, date='2015-12-15')
        """
        definition = cls.record_definition()
        key = KeyResolver(definition).resolve(key_values)

        item = cls.dynamodb_client().get(definition.table_name, key)
        if item is None:
            logger.debug(f"No {cls.__name__} in {definition.table_name} for key {key}")
            return None
        return cls.from_dynamodb_item(item)

    def delete(self) -> bool:
        """Delete the item with this record's key. Dirty tracking is left untouched.

        Raises:
            KeyMissing: If a key attribute has no value; nothing is sent
        """
        definition = self.record_definition()
        key = KeyResolver(definition).resolve(self._values)

        self.dynamodb_client().delete(definition.table_name, key)
        logger.debug(f"Deleted {type(self).__name__} from {definition.table_name}")
        return True

    def reload(self) -> 'Record':
        """Replace values with the stored item and mark the record clean.

        Raises:
            KeyMissing: If a key attribute has no value
            NotFound: If the item no longer exists
        """
        definition = self.record_definition()
        key_values = {name: self._values[name] for name in definition.key_names}

        found = type(self).find(**key_values)
        if found is None:
            raise NotFound(definition.table_name, key_values)

        self._values.update(found._values)
        self._tracker.mark_clean()
        return self

    @classmethod
    def query(cls, **request: Any) -> ItemCollection:
        """Query the table; request parameters are passed to DynamoDB unchanged.

        Example:
            Post.query(
                KeyConditionExpression='id = :id',
                ExpressionAttributeValues={':id': {'N': '5'}},
            )
        """
        return ItemCollection('query', request, cls, cls.dynamodb_client())

    @classmethod
    def scan(cls, **request: Any) -> ItemCollection:
        return ItemCollection('scan', request, cls, cls.dynamodb_client())

    def __repr__(self) -> str:
        values = ", ".join(f"{name}={value!r}" for name, value in self._values.items())
        return f"{type(self).__name__}({values})"
