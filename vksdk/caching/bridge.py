"""
Cache bridge between the install pipeline and a cache backend.

Cache problems never abort a run: every backend failure is logged as a
warning, a failed restore behaves like a miss and a failed save returns None.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

from filelock import Timeout

from vksdk.caching.backend import CacheBackend
from vksdk.core.exceptions import CacheError

logger = logging.getLogger(__name__)

PathList = Sequence[Union[str, Path]]


class CacheBridge:
    """
    Restore/save wrapper with warn-only error handling.

    Example:
        >>> bridge = CacheBridge(LocalCacheBackend(cache_dir))
        >>> hit = bridge.restore([install_path], primary_key, restore_keys)
        >>> if hit is None:
        ...     install()
        ...     bridge.save([install_path], primary_key)
    """

    def __init__(self, backend: CacheBackend):
        self.backend = backend

    def restore(
        self,
        paths: PathList,
        primary_key: str,
        fallback_keys: Sequence[str] = (),
    ) -> Optional[str]:
        """
        Restore ``paths`` from the cache.

        Returns:
            The matched key, or None on a miss or failure
        """
        try:
            key = self.backend.lookup(paths, primary_key, fallback_keys)
            if key is None:
                logger.info("[Cache] Cache for 'Vulkan SDK' not found.")
                return None

            self.backend.restore(paths, key)
        except (CacheError, OSError, Timeout) as e:
            logger.warning(f"[Cache] Failed to restore cache: {e}")
            return None

        logger.info(f"[Cache] Restored Vulkan SDK from cache key '{key}'.")
        return key

    def save(self, paths: PathList, primary_key: str) -> Optional[str]:
        """
        Save ``paths`` under the primary key. Fallback keys are never saved.

        Returns:
            The entry id, or None on failure
        """
        try:
            entry_id = self.backend.save(paths, primary_key)
        except (CacheError, OSError, Timeout) as e:
            logger.warning(f"[Cache] Failed to save cache: {e}")
            return None

        joined = ", ".join(str(p) for p in paths)
        logger.info(f"[Cache] Saved Vulkan SDK in path: '{joined}'. Cache Save ID: '{entry_id}'.")
        return entry_id
