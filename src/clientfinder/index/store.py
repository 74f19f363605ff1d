"""In-memory record store and the holder that swaps it on refresh."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Iterable, Iterator, Mapping, Tuple

from clientfinder.models import Record

if TYPE_CHECKING:
    from clientfinder.ingestion.json_loader import LoadOutcome

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RecordStore:
    """All loaded records, in file order, plus every field name seen."""

    records: Tuple[Record, ...] = ()
    field_names: Tuple[str, ...] = ()

    @classmethod
    def empty(cls) -> "RecordStore":
        return cls()

    @classmethod
    def from_objects(cls, objects: Iterable[Mapping[Any, Any]]) -> "RecordStore":
        records = tuple(Record(obj) for obj in objects)
        # dict keeps first-seen order and drops repeats
        names = dict.fromkeys(name for record in records for name in record.field_names())
        return cls(records=records, field_names=tuple(names))

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)


class StoreHolder:
    """Publishes the current :class:`RecordStore` for concurrent readers.

    Readers take ``holder.current`` once and work against that snapshot.
    ``refresh`` builds the replacement before publishing it with a single
    assignment, so a reader sees either the old store or the new one.
    """

    def __init__(
        self,
        path: Path,
        *,
        loader: Callable[[Path], Tuple[RecordStore, LoadOutcome]] | None = None,
    ) -> None:
        if loader is None:
            from clientfinder.ingestion.json_loader import load_records

            loader = load_records
        self.path = Path(path)
        self._loader = loader
        self._refresh_lock = threading.Lock()
        self._store = RecordStore.empty()
        self.outcome: LoadOutcome | None = None
        self.refresh()

    @property
    def current(self) -> RecordStore:
        return self._store

    def refresh(self) -> LoadOutcome:
        """Reload the data file and publish the result. Returns the load outcome."""
        with self._refresh_lock:
            store, outcome = self._loader(self.path)
            self._store = store
            self.outcome = outcome
        LOGGER.info("Loaded %d records from %s (%s)", len(store), self.path, outcome.kind.value)
        return outcome
