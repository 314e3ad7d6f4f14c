"""
Key Resolution

KeyResolver checks that the key attributes an operation needs have values
and marshals them into a DynamoDB key. It runs before save, find, delete
and reload talk to the store, so a request with a missing key is never
sent.
"""

from typing import Any, Dict, Iterable, List, Mapping

from ..exceptions import KeyMissing
from .attributes import KeyRole
from .definition import RecordDefinition

ALL_KEY_ROLES = (KeyRole.HASH, KeyRole.RANGE)


class KeyResolver:
    """Resolves primary keys for one record definition."""

    def __init__(self, definition: RecordDefinition):
        self.definition = definition

    def required_names(self, roles: Iterable[KeyRole] = ALL_KEY_ROLES) -> List[str]:
        """Key attribute names an operation must provide, hash key first.

        The hash key is always required. The range key is required when the
        definition declares one and RANGE is among the requested roles.
        """
        names = [self.definition.hash_key_name]
        if self.definition.range_key_name and KeyRole.RANGE in tuple(roles):
            names.append(self.definition.range_key_name)
        return names

    def missing_names(self, provided: Mapping[str, Any], roles: Iterable[KeyRole] = ALL_KEY_ROLES) -> List[str]:
        return [name for name in self.required_names(roles) if provided.get(name) is None]

    def resolve(self, provided: Mapping[str, Any], roles: Iterable[KeyRole] = ALL_KEY_ROLES) -> Dict[str, Dict[str, Any]]:
        """Build a DynamoDB key from provided attribute values.

        Args:
            provided: Mapping of attribute name to value; extra names are ignored
            roles: Key roles the operation needs

        Returns:
            Key mapping of storage name to tagged value

        Raises:
            KeyMissing: If any required key attribute is None, absent or marshals to nothing
            TypeMismatch: If a key value cannot be cast to its attribute type

        Example:
            >>> resolver.resolve({'id': 5, 'date': '2015-12-15'})
            {'id': {'N': '5'}, 'date': {'S': '2015-12-15'}}
        """
        roles = tuple(roles)
        missing = self.missing_names(provided, roles)
        if missing:
            raise KeyMissing(missing)

        key = {}
        for name in self.required_names(roles):
            decl = self.definition.attribute(name)
            attribute_type = decl.attribute_type
            value = attribute_type.coerce(provided[name], name)
            tagged = attribute_type.to_wire(value, name)
            if tagged is None:
                missing.append(name)
            else:
                key[decl.storage_name] = tagged

        # Values that marshal to nothing cannot identify an item
        if missing:
            raise KeyMissing(missing)
        return key
