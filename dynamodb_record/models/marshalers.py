"""
Attribute Type Registry

This module defines the semantic attribute types a record can declare and
the conversion rules between native Python values and DynamoDB's tagged
attribute values (the shapes the boto3 low-level client sends and
receives, e.g. ``{'N': '1'}``, ``{'S': 'x'}``, ``{'BOOL': True}``).

Each type exposes three operations:

- ``coerce(value)``: type cast applied when a value is assigned to a record
  attribute. Only unambiguous parses are accepted, e.g. ``'2015-12-14'``
  for a date attribute or ``'5'`` for an integer attribute.
- ``to_wire(value)``: strict conversion of a native value to its tagged
  wire form. Returns None when the value must be omitted from the item.
- ``from_wire(tagged)``: strict conversion of a tagged wire value back to
  a native value.

``to_wire`` and ``from_wire`` never coerce: a value outside the type's
domain raises TypeMismatch.

Composite types (list, map) delegate element marshaling to boto3's
TypeSerializer/TypeDeserializer, so their numbers travel as Decimal.
"""

import logging
import re
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer

from ..exceptions import TypeMismatch

logger = logging.getLogger(__name__)

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_INTEGER_PATTERN = re.compile(r"^-?[0-9]+\Z")

TaggedValue = Dict[str, Any]


class AttributeType:
    """Base class for semantic attribute types.

    Subclasses set ``tag`` (the name used in declarations) and ``wire_tag``
    (the DynamoDB type descriptor) and implement the three conversions.
    """

    tag: str = ""
    wire_tag: str = ""

    def coerce(self, value: Any, attribute: Optional[str] = None) -> Any:
        raise NotImplementedError

    def to_wire(self, value: Any, attribute: Optional[str] = None) -> Optional[TaggedValue]:
        raise NotImplementedError

    def from_wire(self, tagged: TaggedValue, attribute: Optional[str] = None) -> Any:
        raise NotImplementedError

    def mismatch(self, value: Any, attribute: Optional[str] = None, original_error: Optional[Exception] = None) -> TypeMismatch:
        return TypeMismatch(attribute, self.tag, value, original_error)

    def _unwrap(self, tagged: Any, attribute: Optional[str]) -> Any:
        """Return the payload of a tagged value, checking its type descriptor."""
        if not isinstance(tagged, dict) or len(tagged) != 1 or self.wire_tag not in tagged:
            raise self.mismatch(tagged, attribute)
        return tagged[self.wire_tag]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(tag={self.tag!r})"


# =============================================================================
# Scalar Types
# =============================================================================

class IntegerType(AttributeType):
    """Whole numbers, stored as DynamoDB numbers (``{'N': '42'}``)."""

    tag = "integer"
    wire_tag = "N"

    def coerce(self, value, attribute=None):
        if value is None:
            return None
        if isinstance(value, bool):
            raise self.mismatch(value, attribute)
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            if value.is_integer():
                return int(value)
            raise self.mismatch(value, attribute)
        if isinstance(value, (Decimal, str)):
            return self._parse(value, attribute)
        raise self.mismatch(value, attribute)

    def to_wire(self, value, attribute=None):
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int):
            raise self.mismatch(value, attribute)
        return {self.wire_tag: str(value)}

    def from_wire(self, tagged, attribute=None):
        payload = self._unwrap(tagged, attribute)
        if not isinstance(payload, str) or not _INTEGER_PATTERN.match(payload):
            raise self.mismatch(tagged, attribute)
        return int(payload)

    def _parse(self, value, attribute):
        try:
            number = Decimal(value.strip()) if isinstance(value, str) else value
        except InvalidOperation as e:
            raise self.mismatch(value, attribute, e) from e
        if not number.is_finite() or number != number.to_integral_value():
            raise self.mismatch(value, attribute)
        return int(number)


class FloatType(AttributeType):
    """Floating point numbers, stored as DynamoDB numbers."""

    tag = "float"
    wire_tag = "N"

    def coerce(self, value, attribute=None):
        if value is None:
            return None
        if isinstance(value, bool):
            raise self.mismatch(value, attribute)
        if isinstance(value, (int, float, Decimal, str)):
            try:
                number = float(value)
            except ValueError as e:
                raise self.mismatch(value, attribute, e) from e
            if number != number or number in (float("inf"), float("-inf")):
                raise self.mismatch(value, attribute)
            return number
        raise self.mismatch(value, attribute)

    def to_wire(self, value, attribute=None):
        if value is None:
            return None
        if not isinstance(value, float) or value != value or value in (float("inf"), float("-inf")):
            raise self.mismatch(value, attribute)
        return {self.wire_tag: repr(value)}

    def from_wire(self, tagged, attribute=None):
        payload = self._unwrap(tagged, attribute)
        try:
            return float(payload)
        except (TypeError, ValueError) as e:
            raise self.mismatch(tagged, attribute, e) from e


class StringType(AttributeType):
    """Text, stored as DynamoDB strings (``{'S': 'Hello!'}``)."""

    tag = "string"
    wire_tag = "S"

    def coerce(self, value, attribute=None):
        if value is None or isinstance(value, str):
            return value
        raise self.mismatch(value, attribute)

    def to_wire(self, value, attribute=None):
        if value is None:
            return None
        if not isinstance(value, str):
            raise self.mismatch(value, attribute)
        return {self.wire_tag: value}

    def from_wire(self, tagged, attribute=None):
        payload = self._unwrap(tagged, attribute)
        if not isinstance(payload, str):
            raise self.mismatch(tagged, attribute)
        return payload


class BooleanType(AttributeType):
    """True/False, stored as DynamoDB booleans (``{'BOOL': True}``)."""

    tag = "boolean"
    wire_tag = "BOOL"

    def coerce(self, value, attribute=None):
        if value is None or isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in ('true', 'false'):
            return value.lower() == 'true'
        raise self.mismatch(value, attribute)

    def to_wire(self, value, attribute=None):
        if value is None:
            return None
        if not isinstance(value, bool):
            raise self.mismatch(value, attribute)
        return {self.wire_tag: value}

    def from_wire(self, tagged, attribute=None):
        payload = self._unwrap(tagged, attribute)
        if not isinstance(payload, bool):
            raise self.mismatch(tagged, attribute)
        return payload


class DateType(AttributeType):
    """Calendar dates, stored as ``YYYY-MM-DD`` strings."""

    tag = "date"
    wire_tag = "S"

    def coerce(self, value, attribute=None):
        if value is None:
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            return self._parse(value, attribute)
        raise self.mismatch(value, attribute)

    def to_wire(self, value, attribute=None):
        if value is None:
            return None
        if isinstance(value, datetime) or not isinstance(value, date):
            raise self.mismatch(value, attribute)
        return {self.wire_tag: value.isoformat()}

    def from_wire(self, tagged, attribute=None):
        payload = self._unwrap(tagged, attribute)
        if not isinstance(payload, str):
            raise self.mismatch(tagged, attribute)
        return self._parse(payload, attribute)

    def _parse(self, value: str, attribute):
        if not _DATE_PATTERN.match(value):
            raise self.mismatch(value, attribute)
        try:
            return date.fromisoformat(value)
        except ValueError as e:
            raise self.mismatch(value, attribute, e) from e


class DateTimeType(AttributeType):
    """Timezone-aware timestamps, stored as ISO-8601 strings.

    Naive datetimes assigned to an attribute are assumed to be UTC.
    """

    tag = "datetime"
    wire_tag = "S"

    def coerce(self, value, attribute=None):
        if value is None:
            return None
        if isinstance(value, str):
            value = self._parse(value, attribute)
        if not isinstance(value, datetime):
            raise self.mismatch(value, attribute)
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def to_wire(self, value, attribute=None):
        if value is None:
            return None
        if not isinstance(value, datetime) or value.tzinfo is None:
            raise self.mismatch(value, attribute)
        return {self.wire_tag: value.isoformat()}

    def from_wire(self, tagged, attribute=None):
        payload = self._unwrap(tagged, attribute)
        if not isinstance(payload, str):
            raise self.mismatch(tagged, attribute)
        parsed = self._parse(payload, attribute)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    def _parse(self, value: str, attribute):
        try:
            # Handle both 'Z' and '+00:00' timezone formats
            return datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError as e:
            raise self.mismatch(value, attribute, e) from e


# =============================================================================
# Composite Types
# =============================================================================

def _floats_to_decimal(obj):
    """Recursively convert floats to Decimal so boto3 can serialize them."""
    if isinstance(obj, dict):
        return {k: _floats_to_decimal(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_floats_to_decimal(item) for item in obj]
    elif isinstance(obj, float):
        return Decimal(str(obj))
    return obj


class _DocumentType(AttributeType):
    """Shared behaviour for list and map attributes."""

    native_types: tuple = ()

    def __init__(self):
        self._serializer = TypeSerializer()
        self._deserializer = TypeDeserializer()

    def coerce(self, value, attribute=None):
        if value is None:
            return None
        if not isinstance(value, self.native_types):
            raise self.mismatch(value, attribute)
        return _floats_to_decimal(value)

    def to_wire(self, value, attribute=None):
        if value is None:
            return None
        if not isinstance(value, self.native_types[0]):
            raise self.mismatch(value, attribute)
        try:
            return self._serializer.serialize(value)
        except TypeError as e:
            raise self.mismatch(value, attribute, e) from e

    def from_wire(self, tagged, attribute=None):
        self._unwrap(tagged, attribute)
        try:
            return self._deserializer.deserialize(tagged)
        except (TypeError, ValueError, InvalidOperation) as e:
            raise self.mismatch(tagged, attribute, e) from e


class ListType(_DocumentType):
    """Ordered lists of any DynamoDB-representable values (``{'L': [...]}``)."""

    tag = "list"
    wire_tag = "L"
    native_types = (list, tuple)


class MapType(_DocumentType):
    """String-keyed documents (``{'M': {...}}``)."""

    tag = "map"
    wire_tag = "M"
    native_types = (dict,)

    def coerce(self, value, attribute=None):
        value = super().coerce(value, attribute)
        if value is not None and not all(isinstance(k, str) for k in value):
            raise self.mismatch(value, attribute)
        return value


class _SetType(AttributeType):
    """Shared behaviour for string and number sets.

    DynamoDB rejects empty sets, so an empty set is omitted from the item
    exactly like None.
    """

    def _accepts(self, element) -> bool:
        raise NotImplementedError

    def _element_to_wire(self, element) -> str:
        raise NotImplementedError

    def _element_from_wire(self, payload, attribute):
        raise NotImplementedError

    def coerce(self, value, attribute=None):
        if value is None:
            return None
        if not isinstance(value, (set, frozenset, list, tuple)):
            raise self.mismatch(value, attribute)
        if not all(self._accepts(element) for element in value):
            raise self.mismatch(value, attribute)
        return set(value)

    def to_wire(self, value, attribute=None):
        if value is None:
            return None
        if not isinstance(value, (set, frozenset)) or not all(self._accepts(e) for e in value):
            raise self.mismatch(value, attribute)
        if not value:
            return None
        return {self.wire_tag: sorted(self._element_to_wire(e) for e in value)}

    def from_wire(self, tagged, attribute=None):
        payload = self._unwrap(tagged, attribute)
        if not isinstance(payload, list):
            raise self.mismatch(tagged, attribute)
        return {self._element_from_wire(element, attribute) for element in payload}


class StringSetType(_SetType):
    """Sets of strings (``{'SS': [...]}``)."""

    tag = "string_set"
    wire_tag = "SS"

    def _accepts(self, element):
        return isinstance(element, str)

    def _element_to_wire(self, element):
        return element

    def _element_from_wire(self, payload, attribute):
        if not isinstance(payload, str):
            raise self.mismatch(payload, attribute)
        return payload


class NumberSetType(_SetType):
    """Sets of numbers (``{'NS': [...]}``). Integral values load as int."""

    tag = "number_set"
    wire_tag = "NS"

    def _accepts(self, element):
        return isinstance(element, (int, float, Decimal)) and not isinstance(element, bool)

    def _element_to_wire(self, element):
        return repr(element) if isinstance(element, float) else str(element)

    def _element_from_wire(self, payload, attribute):
        try:
            number = Decimal(payload)
        except (InvalidOperation, TypeError) as e:
            raise self.mismatch(payload, attribute, e) from e
        if number == number.to_integral_value():
            return int(number)
        return float(number)


# =============================================================================
# Registry
# =============================================================================

class AttributeTypeRegistry:
    """Maps type tags used in attribute declarations to AttributeType objects."""

    def __init__(self):
        self._types: Dict[str, AttributeType] = {}

    def register(self, attribute_type: AttributeType, replace: bool = False) -> AttributeType:
        """Register an attribute type under its tag.

        Args:
            attribute_type: Instance of an AttributeType subclass
            replace: Allow overriding an already registered tag

        Returns:
            The registered attribute type

        Raises:
            ValueError: If the tag is empty or already registered
        """
        if not attribute_type.tag:
            raise ValueError(f"{attribute_type!r} has no tag")
        if attribute_type.tag in self._types and not replace:
            raise ValueError(f"Attribute type '{attribute_type.tag}' is already registered")
        self._types[attribute_type.tag] = attribute_type
        logger.debug(f"Registered attribute type '{attribute_type.tag}'")
        return attribute_type

    def get(self, tag: str) -> AttributeType:
        try:
            return self._types[tag]
        except KeyError:
            raise KeyError(f"Unknown attribute type '{tag}'. Registered types: {self.tags()}") from None

    def tags(self) -> List[str]:
        return list(self._types)

    def __contains__(self, tag: str) -> bool:
        return tag in self._types


registry = AttributeTypeRegistry()
for _attribute_type in (
    IntegerType(),
    FloatType(),
    StringType(),
    BooleanType(),
    DateType(),
    DateTimeType(),
    ListType(),
    MapType(),
    StringSetType(),
    NumberSetType(),
):
    registry.register(_attribute_type)
