"""
Dirty Tracking

DirtyTracker keeps, for one record instance, the last known clean value of
every attribute and the set of attributes explicitly forced dirty.

An attribute is dirty when its current value differs (by value equality)
from its clean snapshot, or when it has been forced dirty with
mark_dirty(). A new instance has an empty snapshot, which compares as None
for every attribute, so only attributes that were given a value are dirty.

Snapshots are deep copies. Mutating a list, map or set value in place is
therefore detected without any help, while mark_dirty() remains available
for callers that want to flag an attribute explicitly. mark_dirty() does
not re-snapshot: was() keeps returning the last clean value.
"""

import copy
import logging
from typing import Any, Dict, Iterable, List, Optional, Set

from ..exceptions import UnknownAttribute

logger = logging.getLogger(__name__)


class DirtyTracker:
    """Snapshot-based change tracking over a record's value mapping.

    The tracker reads the same dict the record stores its values in, so it
    always sees the current values without being notified of assignments.
    """

    def __init__(self, values: Dict[str, Any], record: Optional[str] = None):
        self._values = values
        self._record = record
        self._clean_snapshot: Dict[str, Any] = {}
        self._force_dirty: Set[str] = set()

    def _check(self, name: str) -> None:
        if name not in self._values:
            raise UnknownAttribute(name, self._record)

    def is_dirty(self, name: str) -> bool:
        self._check(name)
        if name in self._force_dirty:
            return True
        return self._values[name] != self._clean_snapshot.get(name)

    def was(self, name: str) -> Any:
        """Copy of the last known clean value of an attribute, or None if never clean."""
        self._check(name)
        return copy.deepcopy(self._clean_snapshot.get(name))

    def dirty_names(self) -> List[str]:
        return [name for name in self._values if self.is_dirty(name)]

    def is_instance_dirty(self) -> bool:
        return any(self.is_dirty(name) for name in self._values)

    def mark_dirty(self, name: str) -> None:
        self._check(name)
        self._force_dirty.add(name)

    def mark_clean(self) -> None:
        self._clean_snapshot = {name: copy.deepcopy(value) for name, value in self._values.items()}
        self._force_dirty.clear()
        logger.debug(f"Marked {self._record or 'record'} clean")

    def rollback(self, names: Optional[Iterable[str]] = None) -> None:
        """Restore attributes to their clean snapshot (all attributes if names is empty).

        An attribute that has never been clean is restored to None.
        """
        names = list(names) if names else list(self._values)
        for name in names:
            self._check(name)
        for name in names:
            self._values[name] = copy.deepcopy(self._clean_snapshot.get(name))
            self._force_dirty.discard(name)
