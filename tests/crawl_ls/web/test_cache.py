"""
Tests for the content-addressed page cache.
"""

import gc
import hashlib
import os
import shutil
import tempfile
from pathlib import Path

import pytest

from src.crawl_ls.web.cache import ContentCache, cache_key


class TestContentCache:
    """Tests for ContentCache."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        # The cache creates its own directory on first write
        self.cache_dir = Path(self.temp_dir) / "cache"
        self.cache = ContentCache(self.cache_dir)

    def teardown_method(self):
        shutil.rmtree(self.temp_dir)

    def test_cache_key_is_sha256_hex(self):
        url = "https://example.com/test"
        assert cache_key(url) == hashlib.sha256(url.encode("utf-8")).hexdigest()
        assert len(cache_key(url)) == 64

    def test_path_for_is_deterministic(self):
        url = "https://example.com/test"
        path = self.cache.path_for(url)

        assert path == ContentCache(self.cache_dir).path_for(url)
        assert path.parent == self.cache_dir
        assert path.suffix == ".md"
        assert path.stem == cache_key(url)

    def test_distinct_urls_get_distinct_paths(self):
        urls = [
            "https://example.com",
            "https://example.com/",
            "http://example.com",
            "https://example.com/a?b=1",
            "https://example.com/a?b=2",
        ]
        assert len({self.cache.path_for(url) for url in urls}) == len(urls)

    def test_lookup_missing(self):
        assert self.cache.lookup("https://never-cached.example") is None

    def test_store_then_lookup(self):
        url = "https://example.com/test-cache"
        content = "# Test Content\n\nThis is a test."

        path = self.cache.store(url, content)

        assert path == self.cache.path_for(url)
        assert self.cache.lookup(url) == path
        assert path.read_text(encoding="utf-8") == content

    def test_store_leaves_no_temporary_files(self):
        self.cache.store("https://example.com/a", "a")
        self.cache.store("https://example.com/b", "b")

        assert sorted(os.listdir(self.cache_dir)) == sorted(
            [f"{cache_key('https://example.com/a')}.md", f"{cache_key('https://example.com/b')}.md"]
        )

    def test_failed_store_cleans_up(self):
        with pytest.raises(TypeError):
            self.cache.store("https://example.com/bad", None)

        assert os.listdir(self.cache_dir) == []
        assert self.cache.lookup("https://example.com/bad") is None

    def test_lock_is_shared_per_url(self):
        assert self.cache.lock("https://a.example") is self.cache.lock("https://a.example")
        assert self.cache.lock("https://a.example") is not self.cache.lock("https://b.example")

    def test_lock_survives_while_held(self):
        lock = self.cache.lock("https://a.example")
        with lock:
            gc.collect()
            assert self.cache.lock("https://a.example") is lock

    def test_released_locks_are_forgotten(self):
        for index in range(50):
            with self.cache.lock(f"https://example.com/{index}"):
                pass
        gc.collect()

        assert len(self.cache._locks) == 0
