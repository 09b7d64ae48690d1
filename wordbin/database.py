"""
Paste store: the in-memory collection of pastes and the only way to reach it.
Handles creation, lookup, removal and lazy expiry, and writes a snapshot
after every mutation.
"""
import logging
import secrets
import threading
import time
from typing import Callable, List, Optional, Set

from wordbin.errors import (
    ClockError,
    IdentifierSpaceExhausted,
    PasteNotFound,
    PersistenceWriteFailed,
)
from wordbin.files import FilePayloadStore
from wordbin.models import ExpirationChoice, Paste, classify
from wordbin.persistence import SnapshotStorage

logger = logging.getLogger(__name__)


class PasteStore:
    """
    Shared paste collection guarded by a single lock.

    Every public operation holds the lock for its whole duration, snapshot
    write included. Reads and writes are not distinguished.
    """

    def __init__(
        self,
        storage: SnapshotStorage,
        files: Optional[FilePayloadStore] = None,
        clock: Callable[[], float] = time.time,
        id_bits: int = 16,
        unique_ids: bool = True,
        max_id_attempts: int = 64,
    ):
        if not 1 <= id_bits <= 64:
            raise ValueError(f"id_bits must be between 1 and 64, got {id_bits}")
        self.storage = storage
        self.files = files
        self.clock = clock
        self.id_bits = id_bits
        self.unique_ids = unique_ids
        self.max_id_attempts = max_id_attempts
        self._lock = threading.Lock()
        self._pastes: List[Paste] = []
        self._reserved: Set[int] = set()

    def load(self) -> int:
        """
        Replace the collection with the persisted snapshot.

        Returns:
            Number of pastes loaded

        Raises:
            PersistenceCorrupt: If the snapshot exists but cannot be parsed
        """
        pastes = self.storage.load()
        with self._lock:
            self._pastes = pastes
        logger.info(f"Loaded {len(pastes)} pastes from snapshot")
        return len(pastes)

    def is_healthy(self) -> bool:
        """Check if the snapshot backend is reachable."""
        return self.storage.ping()

    def reserve_id(self) -> int:
        """
        Pick an id for a paste that is about to be created.

        The id is held until ``create`` or ``release_id`` is called with it,
        so a file payload can be stored under it before the paste exists.

        Raises:
            IdentifierSpaceExhausted: If no free id was found
        """
        with self._lock:
            paste_id = self._new_id()
            self._reserved.add(paste_id)
            return paste_id

    def release_id(self, paste_id: int) -> None:
        with self._lock:
            self._reserved.discard(paste_id)

    def create(
        self,
        content: str,
        expiration: ExpirationChoice = ExpirationChoice.NEVER,
        file_name: Optional[str] = None,
        paste_id: Optional[int] = None,
    ) -> int:
        """
        Create a paste and persist the collection.

        Args:
            content: Text content of the paste
            expiration: One of the fixed expiration choices
            file_name: Name of an already stored file payload, if any
            paste_id: Id obtained from ``reserve_id``; a new one is drawn if None

        Returns:
            The new paste's id

        Raises:
            PersistenceWriteFailed: If the snapshot could not be written; the
                paste is not kept in that case
        """
        with self._lock:
            now = self._get_current_time()
            if paste_id is None:
                paste_id = self._new_id()
            self._reserved.discard(paste_id)

            offset = expiration.offset_seconds
            paste = Paste(
                id=paste_id,
                content=content,
                file_name=file_name or None,
                created_at=now,
                kind=classify(content, file_name),
                expires_at=0 if offset is None else now + offset,
            )
            self._pastes.append(paste)
            try:
                self.storage.save(self._pastes)
            except PersistenceWriteFailed:
                self._pastes.pop()
                raise

        logger.info(f"Paste {paste.id_as_animals()} created ({paste.kind.value}, expires {expiration.value})")
        return paste_id

    def find(self, paste_id: int) -> Paste:
        """
        Fetch a paste after dropping expired ones.

        Raises:
            PasteNotFound: If no live paste has this id
        """
        with self._lock:
            self._remove_expired()
            for paste in self._pastes:
                if paste.id == paste_id:
                    return paste
        raise PasteNotFound(paste_id)

    def remove(self, paste_id: int) -> Paste:
        """
        Delete a paste, persist the collection, then delete its file payload.

        Returns:
            The removed paste

        Raises:
            PasteNotFound: If no live paste has this id
            PersistenceWriteFailed: If the snapshot could not be written; the
                paste is kept in that case
        """
        with self._lock:
            self._remove_expired()
            for index, paste in enumerate(self._pastes):
                if paste.id == paste_id:
                    break
            else:
                raise PasteNotFound(paste_id)

            del self._pastes[index]
            try:
                self.storage.save(self._pastes)
            except PersistenceWriteFailed:
                self._pastes.insert(index, paste)
                raise
            self._delete_payloads([paste])

        logger.info(f"Paste {paste.id_as_animals()} removed")
        return paste

    def list(self) -> List[Paste]:
        """All live pastes, oldest first."""
        with self._lock:
            self._remove_expired()
            return list(self._pastes)

    def sweep(self) -> int:
        """Drop expired pastes now. Returns how many were removed."""
        with self._lock:
            return self._remove_expired()

    def _remove_expired(self) -> int:
        # Caller holds the lock.
        now = self._get_current_time()
        expired = [p for p in self._pastes if p.is_expired(now)]
        if not expired:
            return 0

        survivors = [p for p in self._pastes if not p.is_expired(now)]
        self.storage.save(survivors)
        self._pastes = survivors
        self._delete_payloads(expired)
        logger.info(f"Swept {len(expired)} expired pastes")
        return len(expired)

    def _delete_payloads(self, pastes: List[Paste]) -> None:
        if self.files is None:
            return
        for paste in pastes:
            if not paste.has_file:
                continue
            try:
                self.files.delete(paste.id)
            except OSError as e:
                logger.error(f"Could not delete file payload of {paste.id_as_animals()}: {e}")

    def _new_id(self) -> int:
        # Caller holds the lock.
        if not self.unique_ids:
            return secrets.randbits(self.id_bits)

        taken = {p.id for p in self._pastes} | self._reserved
        for _ in range(self.max_id_attempts):
            candidate = secrets.randbits(self.id_bits)
            if candidate not in taken:
                return candidate
        raise IdentifierSpaceExhausted(
            f"No free id after {self.max_id_attempts} attempts ({len(taken)} in use)"
        )

    def _get_current_time(self) -> int:
        """
        Current wall-clock time in whole epoch seconds.

        Raises:
            ClockError: If the clock reads before the Unix epoch
        """
        now = self.clock()
        if now < 0:
            raise ClockError(f"System time {now} is before the Unix epoch")
        return int(now)
