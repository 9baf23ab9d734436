"""
Content-addressed cache of rendered pages.

Every URL maps to ``<cache_dir>/<sha256(url)>.md``. Entries are write-once
snapshots: nothing here refreshes or deletes them. Removing a file (or the
whole directory) is how a page gets fetched again.
"""

import hashlib
import logging
import os
import tempfile
import threading
import weakref
from pathlib import Path
from typing import Optional, Union

# Configure logging
logger = logging.getLogger(__name__)

CACHE_EXTENSION = ".md"


def cache_key(url: str) -> str:
    """Hex-encoded SHA-256 of the URL."""
    return hashlib.sha256(url.encode("utf-8")).hexdigest()


class ContentCache:
    """Maps URLs to Markdown files under a fixed cache directory."""

    def __init__(self, cache_dir: Union[str, Path]):
        self.cache_dir = Path(cache_dir)
        # Entries disappear once no caller holds or waits on the lock
        self._locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    def path_for(self, url: str) -> Path:
        """Return the cache path for a URL, whether or not it exists yet."""
        return self.cache_dir / f"{cache_key(url)}{CACHE_EXTENSION}"

    def lookup(self, url: str) -> Optional[Path]:
        """Return the cached file for a URL, or None if it has not been stored."""
        path = self.path_for(url)
        if path.is_file():
            logger.debug(f"Cache hit for {url}: {path}")
            return path
        return None

    def store(self, url: str, text: str) -> Path:
        """
        Write the rendered page for a URL.

        The file is written to a temporary name in the cache directory and
        renamed into place, so readers never observe a partial file.

        Returns:
            Path of the cache file
        """
        path = self.path_for(url)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=self.cache_dir, prefix=".", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_path, path)
        except BaseException:
            # Leave no temporary file behind, then let the error propagate
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        logger.info(f"Cached {url} ({len(text)} chars) at {path}")
        return path

    def lock(self, url: str) -> threading.Lock:
        """Lock guarding the fetch-and-store of one cache path."""
        key = cache_key(url)
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock
