"""JSON client file loading.

Loading never raises: a missing or unreadable file yields an empty store and
a :class:`LoadOutcome` describing what went wrong.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Tuple

from clientfinder.errors import MalformedSource, SourceNotFound
from clientfinder.index.store import RecordStore

LOGGER = logging.getLogger(__name__)


class LoadStatus(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    MALFORMED = "malformed"


@dataclass(frozen=True, slots=True)
class LoadOutcome:
    kind: LoadStatus
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.kind is LoadStatus.OK


def read_objects(path: Path) -> List[Dict[str, Any]]:
    """Decode ``path`` into a list of JSON objects.

    Raises :class:`SourceNotFound` or :class:`MalformedSource`.
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise SourceNotFound(path) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise MalformedSource(f"Cannot read {path}: {exc}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise MalformedSource(f"Invalid JSON in {path}: {exc}") from exc

    if not isinstance(data, list):
        raise MalformedSource(f"Expected a JSON array in {path}, got {type(data).__name__}")
    for position, item in enumerate(data):
        if not isinstance(item, dict):
            raise MalformedSource(
                f"Expected an object at index {position} in {path}, got {type(item).__name__}"
            )
    return data


def load_records(path: Path) -> Tuple[RecordStore, LoadOutcome]:
    """Build a :class:`RecordStore` from a JSON file of client objects."""
    try:
        objects = read_objects(path)
    except SourceNotFound as exc:
        LOGGER.warning("%s", exc.message)
        return RecordStore.empty(), LoadOutcome(LoadStatus.NOT_FOUND, exc.message)
    except MalformedSource as exc:
        LOGGER.warning("Failed to load clients: %s", exc.message)
        return RecordStore.empty(), LoadOutcome(LoadStatus.MALFORMED, exc.message)

    store = RecordStore.from_objects(objects)
    LOGGER.debug("Decoded %d records with %d fields", len(store), len(store.field_names))
    return store, LoadOutcome(LoadStatus.OK)
