"""File snapshot of the durable tier.

The whole tier is written as one JSON document. Payloads are base64
encoded so the file round-trips audio bytes exactly:

    {
      "format": "tts-cache-snapshot",
      "version": 1,
      "saved_at": 1760000000.0,
      "items": {
        "<key>": {
          "content_type": "audio/mpeg",
          "payload": "<base64>",
          "expires_at": null,
          "stored_at": 1760000000.0
        }
      }
    }

Writes go to a temporary file in the same directory which is then renamed
over the target, so readers see either the previous or the new file.
"""

import base64
import binascii
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any

from tts_cache.config import settings
from tts_cache.entities import CacheEntryEntity, CacheRecord
from tts_cache.exceptions import SnapshotDecodeError

logger = logging.getLogger(__name__)

SNAPSHOT_FORMAT = "tts-cache-snapshot"
SNAPSHOT_VERSION = 1


class SnapshotRepository:
    """Reads and writes the durable tier snapshot file."""

    def __init__(self, path: str | os.PathLike[str] | None = None) -> None:
        """Initialize the snapshot repository.

        Args:
            path: Snapshot file location. Defaults to settings.cache_file.
        """
        self._path = Path(path or settings.cache_file)

    @classmethod
    def create(cls, path: str | os.PathLike[str] | None = None) -> "SnapshotRepository":
        """Factory method to create SnapshotRepository with defaults.

        Args:
            path: Snapshot file location. If None, uses settings.

        Returns:
            Configured SnapshotRepository
        """
        return cls(path=path)

    @property
    def path(self) -> Path:
        """Get the snapshot file path."""
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def write(self, records: dict[str, CacheRecord]) -> None:
        """Write all records, replacing the previous snapshot.

        Args:
            records: Key → record mapping to persist

        Raises:
            OSError: If the file cannot be created, written or renamed.
                The previous snapshot is left untouched.
        """
        document = {
            "format": SNAPSHOT_FORMAT,
            "version": SNAPSHOT_VERSION,
            "saved_at": time.time(),
            "items": {key: _encode_record(record) for key, record in records.items()},
        }

        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.",
            suffix=".tmp",
            dir=directory,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self._path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise

    def read(self) -> dict[str, CacheRecord] | None:
        """Read the snapshot.

        Returns:
            Key → record mapping, or None if there is no snapshot file

        Raises:
            SnapshotDecodeError: If the file exists but is not a valid snapshot
            OSError: If the file exists but cannot be read
        """
        try:
            with open(self._path, encoding="utf-8") as f:
                document = json.load(f)
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SnapshotDecodeError(str(self._path), str(e)) from e

        if not isinstance(document, dict):
            raise SnapshotDecodeError(str(self._path), "top-level value is not an object")
        if document.get("format") != SNAPSHOT_FORMAT:
            raise SnapshotDecodeError(
                str(self._path), f"unknown format {document.get('format')!r}"
            )
        if document.get("version") != SNAPSHOT_VERSION:
            raise SnapshotDecodeError(
                str(self._path), f"unsupported version {document.get('version')!r}"
            )

        items = document.get("items")
        if not isinstance(items, dict):
            raise SnapshotDecodeError(str(self._path), "'items' is not an object")

        records = {}
        for key, raw in items.items():
            try:
                records[key] = _decode_record(raw)
            except (KeyError, TypeError, ValueError, binascii.Error) as e:
                raise SnapshotDecodeError(str(self._path), f"bad item {key!r}: {e}") from e
        return records


def _encode_record(record: CacheRecord) -> dict[str, Any]:
    return {
        "content_type": record.entry.content_type,
        "payload": base64.b64encode(record.entry.payload).decode("ascii"),
        "expires_at": record.expires_at,
        "stored_at": record.stored_at,
    }


def _decode_record(raw: Any) -> CacheRecord:
    content_type = raw["content_type"]
    if not isinstance(content_type, str):
        raise TypeError("content_type must be a string")

    payload = base64.b64decode(raw["payload"], validate=True)
    expires_at = raw.get("expires_at")

    return CacheRecord(
        entry=CacheEntryEntity(payload=payload, content_type=content_type),
        expires_at=float(expires_at) if expires_at is not None else None,
        stored_at=float(raw.get("stored_at", 0.0)),
    )
