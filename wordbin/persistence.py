"""
Snapshot persistence for the paste collection.
The whole collection is written as one JSON document on every save and read
back once at startup. Backed by a local file or by a single Redis key.
"""
import logging
import os
import tempfile
from typing import List, Protocol, Sequence

from pydantic import TypeAdapter, ValidationError
from redis import Redis
from redis.exceptions import RedisError

from wordbin.config import Settings
from wordbin.errors import PersistenceCorrupt, PersistenceUnavailable, PersistenceWriteFailed
from wordbin.models import Paste

logger = logging.getLogger(__name__)

_SNAPSHOT = TypeAdapter(List[Paste])


def dump_snapshot(pastes: Sequence[Paste]) -> str:
    return _SNAPSHOT.dump_json(list(pastes), indent=2).decode("utf-8")


def parse_snapshot(raw, source: str) -> List[Paste]:
    """
    Parse a snapshot document.

    Raises:
        PersistenceCorrupt: If the document is not a valid list of pastes
    """
    try:
        return _SNAPSHOT.validate_json(raw)
    except ValidationError as e:
        raise PersistenceCorrupt(
            f"Snapshot {source} is corrupt ({e.error_count()} errors): {e}"
        ) from e


class SnapshotStorage(Protocol):
    def save(self, pastes: Sequence[Paste]) -> None:
        ...

    def load(self) -> List[Paste]:
        ...

    def ping(self) -> bool:
        ...


class FileSnapshotStorage:
    """JSON snapshot in a single file, replaced whole on every save."""

    def __init__(self, path: str):
        self.path = path

    def save(self, pastes: Sequence[Paste]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        document = dump_snapshot(pastes)
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".snapshot-", dir=directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(document)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            logger.error(f"Failed to write snapshot {self.path}: {e}")
            raise PersistenceWriteFailed(f"Could not write snapshot {self.path}: {e}") from e

    def load(self) -> List[Paste]:
        try:
            with open(self.path, "rb") as f:
                raw = f.read()
        except FileNotFoundError:
            logger.info(f"No snapshot at {self.path}, starting empty")
            return []
        except OSError as e:
            raise PersistenceUnavailable(f"Could not read snapshot {self.path}: {e}") from e
        return parse_snapshot(raw, self.path)

    def ping(self) -> bool:
        directory = os.path.dirname(os.path.abspath(self.path))
        return os.path.isdir(directory) and os.access(directory, os.W_OK)


class RedisSnapshotStorage:
    """JSON snapshot stored under one Redis key."""

    def __init__(self, client: Redis, key: str):
        self.redis = client
        self.key = key

    def save(self, pastes: Sequence[Paste]) -> None:
        try:
            self.redis.set(self.key, dump_snapshot(pastes))
        except RedisError as e:
            logger.error(f"Failed to write snapshot to Redis key {self.key}: {type(e).__name__}: {e}")
            raise PersistenceWriteFailed(f"Could not write snapshot to Redis: {e}") from e

    def load(self) -> List[Paste]:
        try:
            raw = self.redis.get(self.key)
        except RedisError as e:
            raise PersistenceUnavailable(f"Could not read snapshot from Redis: {e}") from e
        if raw is None:
            logger.info(f"No snapshot under Redis key {self.key}, starting empty")
            return []
        return parse_snapshot(raw, f"redis:{self.key}")

    def ping(self) -> bool:
        try:
            self.redis.ping()
            return True
        except RedisError as e:
            logger.error(f"Health check failed: {e}")
        return False


def build_storage(settings: Settings) -> SnapshotStorage:
    """Pick the snapshot backend from settings."""
    backend = settings.PERSISTENCE_BACKEND.lower()
    if backend == "redis":
        logger.info(f"Using Redis snapshot storage: {settings.REDIS_URL[:30]}...")
        client = Redis.from_url(settings.REDIS_URL, decode_responses=True)
        return RedisSnapshotStorage(client, settings.REDIS_SNAPSHOT_KEY)
    if backend != "file":
        raise ValueError(f"Unknown PERSISTENCE_BACKEND {settings.PERSISTENCE_BACKEND!r}")
    return FileSnapshotStorage(settings.snapshot_path)
