"""
Tests for building the startup context.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from src.crawl_ls.core.constants import CACHE_DIR_ENV, DEFAULT_CACHE_DIR, FETCH_TIMEOUT, MIN_CONTENT_LENGTH
from src.crawl_ls.core.context import LspContext, create_context


def test_defaults():
    context = LspContext()

    assert context.cache_dir == DEFAULT_CACHE_DIR
    assert context.fetch_timeout == FETCH_TIMEOUT
    assert context.min_content_length == MIN_CONTENT_LENGTH


def test_string_cache_dir_becomes_path():
    context = LspContext(cache_dir="~/pages")

    assert isinstance(context.cache_dir, Path)
    assert context.cache_dir == Path.home() / "pages"


def test_context_is_immutable():
    context = LspContext()
    with pytest.raises(AttributeError):
        context.cache_dir = Path("/elsewhere")


@patch.dict(os.environ, {CACHE_DIR_ENV: "/tmp/from-env"})
def test_argument_beats_environment():
    assert create_context("/tmp/from-arg").cache_dir == Path("/tmp/from-arg")


@patch.dict(os.environ, {CACHE_DIR_ENV: "/tmp/from-env"})
def test_environment_beats_default():
    assert create_context().cache_dir == Path("/tmp/from-env")


def test_default_when_nothing_configured():
    with patch.dict(os.environ):
        os.environ.pop(CACHE_DIR_ENV, None)
        assert create_context().cache_dir == DEFAULT_CACHE_DIR
