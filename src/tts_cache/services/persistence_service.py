"""Durable tier persistence.

Loads the snapshot into the durable store at startup and writes it back
after durable commits. Saves run on a single worker thread behind a
one-slot pending flag: any number of ``schedule_save`` calls made while a
save is running collapse into one follow-up save.
"""

import logging
import threading

from tts_cache.protocols import CacheStore
from tts_cache.repositories.snapshot_repository import SnapshotRepository

logger = logging.getLogger(__name__)


class PersistenceService:
    """Snapshot load/save for the durable tier.

    Example:
        ```python
        persistence = PersistenceService(SnapshotRepository.create(), durable)
        persistence.load()
        persistence.start()
        ...
        persistence.schedule_save()  # returns immediately
        ...
        persistence.stop()  # final save
        ```
    """

    def __init__(self, snapshot: SnapshotRepository, store: CacheStore) -> None:
        """Initialize the persistence service.

        Args:
            snapshot: Snapshot file repository.
            store: The durable tier to load into and save from.
        """
        self._snapshot = snapshot
        self._store = store
        self._pending = threading.Event()
        self._stopping = threading.Event()
        self._write_lock = threading.Lock()
        self._worker: threading.Thread | None = None

    def load(self) -> int:
        """Rehydrate the durable store from the snapshot file.

        Entries are reinserted with the store's default expiration.

        Returns:
            Number of entries loaded (0 if there is no snapshot)

        Raises:
            SnapshotDecodeError: If the snapshot exists but cannot be decoded
        """
        records = self._snapshot.read()
        if records is None:
            logger.info("Cache file %s not found. Starting with empty cache.", self._snapshot.path)
            return 0

        for key, record in records.items():
            self._store.set(key, record.entry)

        logger.info(
            "Cache loaded from %s, items count: %d",
            self._snapshot.path,
            self._store.item_count(),
        )
        return len(records)

    def save(self) -> bool:
        """Write the current durable tier to the snapshot file.

        Failures are logged and reported through the return value; the
        in-memory store is never affected.

        Returns:
            True if the snapshot was written, False otherwise
        """
        with self._write_lock:
            records = self._store.records()
            try:
                self._snapshot.write(records)
            except (OSError, TypeError, ValueError):
                logger.exception("Failed to save cache to %s", self._snapshot.path)
                return False

        logger.info("Cache saved to %s (%d items)", self._snapshot.path, len(records))
        return True

    def schedule_save(self) -> None:
        """Request a background save without waiting for it.

        Falls back to a synchronous save if the worker is not running.
        """
        if self._worker is None:
            self.save()
            return
        self._pending.set()

    def start(self) -> None:
        """Start the background save worker."""
        if self._worker is not None:
            return
        self._stopping.clear()
        self._worker = threading.Thread(target=self._run, name="snapshot-writer", daemon=True)
        self._worker.start()

    def _run(self) -> None:
        while True:
            self._pending.wait()
            if self._stopping.is_set():
                return
            self._pending.clear()
            self.save()

    def stop(self, final_save: bool = True) -> None:
        """Stop the worker, then optionally write a last snapshot.

        Args:
            final_save: Whether to save the durable tier after stopping
        """
        if self._worker is not None:
            self._stopping.set()
            self._pending.set()
            self._worker.join()
            self._worker = None
            self._pending.clear()

        if final_save:
            self.save()
