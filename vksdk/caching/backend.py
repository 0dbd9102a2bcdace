"""
Cache storage backends.

A backend stores directory trees under immutable keys and restores them to
the same absolute paths later, the way CI build caches do. Entries only match
a request for the same set of paths.

LocalCacheBackend layout::

    <cache_dir>/
        index.json              # key -> entry metadata, written atomically
        lock/index.lock         # FileLock guarding index updates
        entries/<id>.tar.gz     # one gzip tarball per entry
"""

import fnmatch
import json
import logging
import shutil
import tarfile
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from filelock import FileLock, Timeout

from vksdk.core.exceptions import CacheError
from vksdk.core.filesystem import (
    FilesystemError,
    atomic_write,
    extract_archive,
    remove_paths,
    temporary_directory,
)

logger = logging.getLogger(__name__)

INDEX_VERSION = 1

_GLOB_CHARS = ("*", "?", "[")


def key_matches(pattern: str, key: str) -> bool:
    """
    Match a restore key against a stored key.

    Keys containing glob characters are matched with fnmatch, plain keys
    match as a prefix.
    """
    if any(c in pattern for c in _GLOB_CHARS):
        return fnmatch.fnmatchcase(key, pattern)
    return key.startswith(pattern)


def normalize_paths(paths: Sequence[Union[str, Path]]) -> List[str]:
    return [str(Path(p).expanduser().resolve()) for p in paths]


class CacheBackend(ABC):
    """Storage interface used by the cache bridge."""

    @abstractmethod
    def lookup(
        self,
        paths: Sequence[Union[str, Path]],
        primary_key: str,
        restore_keys: Sequence[str] = (),
    ) -> Optional[str]:
        """Return the key of the best matching entry, or None."""

    @abstractmethod
    def restore(self, paths: Sequence[Union[str, Path]], key: str) -> None:
        """Restore the entry stored under ``key`` into ``paths``."""

    @abstractmethod
    def save(self, paths: Sequence[Union[str, Path]], key: str) -> str:
        """Store ``paths`` under ``key`` and return the entry id."""


class LocalCacheBackend(CacheBackend):
    """
    Filesystem cache backend.

    Example:
        >>> backend = LocalCacheBackend(Path.home() / ".cache" / "vksdk")
        >>> backend.save([install_path], "cache-vulkan-sdk-1.3.250.1-linux-x64")
        >>> backend.lookup([install_path], "cache-vulkan-sdk-1.3.250.1-linux-x64")
        'cache-vulkan-sdk-1.3.250.1-linux-x64'
    """

    def __init__(self, cache_dir: Union[str, Path], lock_timeout: int = 30):
        self.cache_dir = Path(cache_dir)
        self.index_path = self.cache_dir / "index.json"
        self.entries_dir = self.cache_dir / "entries"
        self.lock_path = self.cache_dir / "lock" / "index.lock"
        self.lock_timeout = lock_timeout

        logger.debug(f"Initialized local cache at {self.cache_dir}")

    # ------------------------------------------------------------------
    # Index
    # ------------------------------------------------------------------

    def _load_index(self) -> dict:
        if not self.index_path.exists():
            return {"version": INDEX_VERSION, "entries": {}, "sequence": 0}

        try:
            with open(self.index_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise CacheError(f"Failed to load cache index: {e}") from e

        if "version" not in data or "entries" not in data:
            logger.warning("Invalid cache index format, resetting")
            return {"version": INDEX_VERSION, "entries": {}, "sequence": 0}

        return data

    def _save_index(self, data: dict):
        try:
            atomic_write(self.index_path, json.dumps(data, indent=2, ensure_ascii=False))
        except OSError as e:
            raise CacheError(f"Failed to save cache index: {e}") from e

    @contextmanager
    def _lock(self):
        """
        Hold the index lock.

        Raises:
            CacheError: If the lock cannot be acquired within lock_timeout
        """
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)

        lock = FileLock(self.lock_path, timeout=self.lock_timeout)
        try:
            with lock:
                yield
        except Timeout as e:
            raise CacheError(
                f"Could not acquire cache lock within {self.lock_timeout} seconds"
            ) from e

    def _register(self, key: str, entry_id: str, paths: List[str], archive: Path):
        """Add an archived entry to the index."""
        with self._lock():
            data = self._load_index()
            if key in data["entries"]:
                raise CacheError(
                    f"Unable to reserve cache with key {key}, another entry already exists."
                )

            data["sequence"] = data.get("sequence", 0) + 1
            data["entries"][key] = {
                "id": entry_id,
                "paths": paths,
                "created": datetime.now().isoformat(),
                "size": archive.stat().st_size,
                "sequence": data["sequence"],
            }
            self._save_index(data)

    def _entry_archive(self, entry: dict) -> Path:
        return self.entries_dir / f"{entry['id']}.tar.gz"

    # ------------------------------------------------------------------
    # CacheBackend
    # ------------------------------------------------------------------

    def list_keys(self) -> List[str]:
        """All stored keys, newest first."""
        entries: Dict[str, dict] = self._load_index()["entries"]
        return sorted(entries, key=lambda k: entries[k]["sequence"], reverse=True)

    def get_entry(self, key: str) -> Optional[dict]:
        return self._load_index()["entries"].get(key)

    def lookup(self, paths, primary_key, restore_keys=()):
        """
        Find the entry to restore.

        The primary key must match exactly. Each restore key is then tried in
        order against the entries for the same paths, newest entry first.
        Entries saved from other paths never match, whatever their key.
        """
        requested = normalize_paths(paths)
        entries: Dict[str, dict] = self._load_index()["entries"]

        candidates = [
            key
            for key in sorted(entries, key=lambda k: entries[k]["sequence"], reverse=True)
            if entries[key]["paths"] == requested
        ]

        if primary_key in candidates:
            return primary_key

        for pattern in restore_keys:
            for key in candidates:
                if key_matches(pattern, key):
                    return key

        return None

    def restore(self, paths, key):
        entry = self.get_entry(key)
        if entry is None:
            raise CacheError(f"Cache entry not found: {key}")

        archive = self._entry_archive(entry)
        if not archive.exists():
            raise CacheError(f"Cache archive missing for '{key}': {archive}")

        targets = [Path(p) for p in normalize_paths(paths)]

        try:
            with temporary_directory(prefix=".restore-", parent=self.cache_dir) as staging:
                extract_archive(archive, staging)
                for i, target in enumerate(targets):
                    source = staging / str(i)
                    if not source.exists():
                        raise CacheError(f"Cache entry '{key}' has no content for {target}")
                    remove_paths([target])
                    target.parent.mkdir(parents=True, exist_ok=True)
                    shutil.move(str(source), str(target))
        except (FilesystemError, OSError) as e:
            raise CacheError(f"Failed to restore cache entry '{key}': {e}") from e

        logger.debug(f"Restored cache entry {entry['id']} for key {key}")

    def save(self, paths, key):
        """
        Store ``paths`` under ``key``.

        Raises:
            CacheError: If a path is missing or the key already exists
        """
        normalized = normalize_paths(paths)
        missing = [p for p in normalized if not Path(p).exists()]
        if missing:
            raise CacheError(
                f"Path Validation Error: Path(s) specified in the action for caching "
                f"do not exist: {', '.join(missing)}"
            )

        if self.get_entry(key) is not None:
            raise CacheError(
                f"Unable to reserve cache with key {key}, another entry already exists."
            )

        entry_id = uuid.uuid4().hex
        archive = self.entries_dir / f"{entry_id}.tar.gz"
        partial = archive.with_name(archive.name + ".part")

        try:
            self.entries_dir.mkdir(parents=True, exist_ok=True)
            with tarfile.open(partial, "w:gz") as tar:
                for i, path in enumerate(normalized):
                    tar.add(path, arcname=str(i))
            partial.replace(archive)
        except (OSError, tarfile.TarError) as e:
            partial.unlink(missing_ok=True)
            raise CacheError(f"Failed to write cache archive for '{key}': {e}") from e

        try:
            self._register(key, entry_id, normalized, archive)
        except CacheError:
            archive.unlink(missing_ok=True)
            raise

        logger.debug(f"Saved cache entry {entry_id} for key {key}")
        return entry_id
