"""
Identity store

JSON-backed store of identity records, per-prefix increment counters and
the increment issued to each take-over point.
The store is the single owner of its records; callers only receive copies
of ids and flags.

Snapshot layout::

    {
      "records": {"<id>": {...record fields...}},
      "counters": {"<prefix>": <last issued increment>},
      "point_increments": {"<prefix>|<point key>": <issued increment>}
    }

Author: Plant Tag Resolution Team
Version: 1.0.0
"""

import json
import os
import tempfile
import threading
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from ...common.exceptions import IdentityStoreError
from ...common.logger import PipelineLogger


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class IdentityRecord:
    """Persisted identity of one take-over point or element."""

    id: str
    tag: str = ""
    geometry_kind: str = ""
    generated_name: str = ""
    catalog_reference: str = ""
    reference_number: str = ""
    source_file: str = ""
    source_version: str = ""
    owner_model_name: str = ""
    suffix_letter: str = ""
    suffix_increment: str = ""
    description: str = ""
    is_valid: bool = True
    created_at: str = ""
    updated_at: str = ""
    message: List[str] = field(default_factory=list)
    warning: List[str] = field(default_factory=list)
    error: List[str] = field(default_factory=list)

    @property
    def index_key(self) -> Tuple[str, str, str]:
        return make_index_key(self.tag, self.geometry_kind, self.owner_model_name)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IdentityRecord":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


def make_index_key(tag: str, geometry_kind: str, owner_model_name: str) -> Tuple[str, str, str]:
    """Resolution key: tag, geometry kind and owner model, case-insensitive."""
    return (
        (tag or "").strip().upper(),
        (geometry_kind or "").strip().upper(),
        (owner_model_name or "").strip().upper(),
    )


class IdentityStore:
    """
    Thread-safe identity store with atomic whole-file snapshots.

    One re-entrant lock guards record lookups, upserts and counter
    increments so that a resolve can run its read-modify-write under
    ``with store.lock``.
    """

    def __init__(
        self,
        path: Union[str, Path, None],
        logger: PipelineLogger = PipelineLogger("INFO", False),
    ):
        if path is None or not str(path).strip():
            raise ValueError("IdentityStore requires a non-empty path")
        self.path = Path(path)
        self.logger = logger
        self.lock = threading.RLock()
        self._records: Dict[str, IdentityRecord] = {}
        self._index: Dict[Tuple[str, str, str], str] = {}
        self._counters: Dict[str, int] = {}
        self._point_increments: Dict[str, int] = {}
        self._dirty = False

    def load(self) -> "IdentityStore":
        """
        Load the snapshot from disk.

        A missing file yields an empty store.

        Raises:
            IdentityStoreError: If the file cannot be read or is corrupt
        """
        with self.lock:
            self._records.clear()
            self._index.clear()
            self._counters.clear()
            self._point_increments.clear()
            self._dirty = False

            if not self.path.exists():
                self.logger.verbose("INFO", f"Identity store {self.path} not found, starting empty")
                return self

            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except OSError as e:
                raise IdentityStoreError(f"Cannot read identity store {self.path}: {e}") from e
            except json.JSONDecodeError as e:
                raise IdentityStoreError(f"Identity store {self.path} is corrupt: {e}") from e

            if not isinstance(data, dict):
                raise IdentityStoreError(f"Identity store {self.path} is not a JSON object")

            try:
                for record_id, payload in (data.get("records") or {}).items():
                    record = IdentityRecord.from_dict({**payload, "id": record_id})
                    self._records[record.id] = record
                    self._index[record.index_key] = record.id
                self._counters = {
                    str(k): int(v) for k, v in (data.get("counters") or {}).items()
                }
                self._point_increments = {
                    str(k): int(v) for k, v in (data.get("point_increments") or {}).items()
                }
            except (AttributeError, TypeError, ValueError) as e:
                raise IdentityStoreError(f"Identity store {self.path} is corrupt: {e}") from e

            self.logger.info(
                f"Loaded {len(self._records)} identity records from {self.path}"
            )
            return self

    def save(self) -> None:
        """
        Write the whole snapshot atomically (temp file, then replace).

        Raises:
            IdentityStoreError: If the snapshot cannot be written
        """
        with self.lock:
            snapshot = {
                "records": {rid: r.to_dict() for rid, r in self._records.items()},
                "counters": dict(self._counters),
                "point_increments": dict(self._point_increments),
            }
            directory = self.path.parent
            tmp_name = None
            try:
                directory.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    prefix=f".{self.path.name}.", suffix=".tmp", dir=str(directory)
                )
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(snapshot, f, indent=2, ensure_ascii=False)
                os.replace(tmp_name, self.path)
            except OSError as e:
                if tmp_name and os.path.exists(tmp_name):
                    os.remove(tmp_name)
                raise IdentityStoreError(f"Cannot write identity store {self.path}: {e}") from e
            self._dirty = False
            self.logger.debug(f"Saved {len(self._records)} identity records to {self.path}")

    def find(self, tag: str, geometry_kind: str, owner_model_name: str) -> Optional[IdentityRecord]:
        with self.lock:
            record_id = self._index.get(make_index_key(tag, geometry_kind, owner_model_name))
            return self._records.get(record_id) if record_id else None

    def get(self, record_id: str) -> Optional[IdentityRecord]:
        with self.lock:
            return self._records.get(record_id)

    def upsert(self, record: IdentityRecord) -> None:
        with self.lock:
            previous = self._records.get(record.id)
            if previous is not None and previous.index_key != record.index_key:
                self._index.pop(previous.index_key, None)
            self._records[record.id] = record
            self._index[record.index_key] = record.id
            self._dirty = True

    def next_increment(self, prefix: str) -> int:
        """Issue the next increment for ``prefix``, starting at 1."""
        key = (prefix or "").strip().upper()
        with self.lock:
            value = self._counters.get(key, 0) + 1
            self._counters[key] = value
            self._dirty = True
            return value

    def point_increment(self, prefix: str, point_key: str) -> int:
        """
        Increment of the point ``point_key`` under ``prefix``.

        The first call for a point issues ``next_increment(prefix)``; later
        calls, in this or a later run, return the same value.
        """
        key = "|".join(((prefix or "").strip().upper(), (point_key or "").strip().upper()))
        with self.lock:
            issued = self._point_increments.get(key)
            if issued is not None:
                return issued
            value = self.next_increment(prefix)
            self._point_increments[key] = value
            return value

    def counter(self, prefix: str) -> int:
        with self.lock:
            return self._counters.get((prefix or "").strip().upper(), 0)

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    def __len__(self) -> int:
        with self.lock:
            return len(self._records)

    def records(self) -> List[IdentityRecord]:
        with self.lock:
            return list(self._records.values())
