"""Field search and duplicate detection over a record store."""

from __future__ import annotations

import json
from collections import Counter
from typing import Any, List, Tuple

from clientfinder.index.store import RecordStore
from clientfinder.models import Record, value_text

EMAIL_FIELD = "email"


class Searcher:
    """Read-only queries against one :class:`RecordStore` snapshot.

    Results reference the store's own records and keep store order.
    """

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def search_by_field(self, field_name: str, query: str) -> List[Record]:
        """Case-insensitive substring match on ``field_name``.

        Records without the field never match. An empty query matches every
        record that has the field, including ones where it is null.
        """
        needle = query.lower()
        return [
            record
            for record in self.store
            if field_name in record and needle in value_text(record.get(field_name)).lower()
        ]

    def duplicates_by(self, field_name: str) -> List[Record]:
        """Records whose ``field_name`` value is shared with another record.

        Values are compared exactly, type included, so ``1``, ``1.0`` and
        ``true`` are different keys. Records where the field is missing or
        null are left out. The result keeps store order rather than grouping
        records by value.
        """
        keys = [
            None if record.get(field_name) is None else _duplicate_key(record.get(field_name))
            for record in self.store
        ]
        counts = Counter(key for key in keys if key is not None)
        return [
            record
            for record, key in zip(self.store, keys)
            if key is not None and counts[key] > 1
        ]

    def duplicate_emails(self) -> List[Record]:
        return self.duplicates_by(EMAIL_FIELD)


def _duplicate_key(value: Any) -> Tuple[str, str]:
    # Nested values are not hashable, so compare their canonical JSON instead.
    return type(value).__name__, json.dumps(value, sort_keys=True, default=str)
