"""
Tests for LSP position and location models.
"""

import pytest

from src.crawl_ls.core.exceptions import InvalidParamsError
from src.crawl_ls.lsp.models import LspLocation, LspPosition


def test_position_from_dict():
    assert LspPosition.from_dict({"line": 3, "character": 7}) == LspPosition(3, 7)


@pytest.mark.parametrize(
    "data",
    [
        None,
        [],
        {"line": 1},
        {"character": 1},
        {"line": -1, "character": 0},
        {"line": 0, "character": 1.5},
        {"line": True, "character": 0},
    ],
)
def test_position_from_dict_rejects(data):
    with pytest.raises(InvalidParamsError):
        LspPosition.from_dict(data)


def test_location_at_file_start():
    location = LspLocation.file_start("file:///tmp/cache/abc.md")

    assert location.to_dict() == {
        "uri": "file:///tmp/cache/abc.md",
        "range": {
            "start": {"line": 0, "character": 0},
            "end": {"line": 0, "character": 0},
        },
    }
