"""
Link extraction for go-to-definition requests.

Finds the link under the cursor on one line of a document. Three forms are
recognised, tried in this order at every position of the line:

- inline links and images: ``[label](target)`` / ``![alt](target)``
- autolinks: ``<https://example.com>``, ``<user@example.com>``
- bare URLs: ``https://example.com/page``, ``www.example.com``

LSP positions count UTF-16 code units, so cursor offsets are converted to and
from Python string indices at the edges of this module.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote, urlparse

from src.crawl_ls.lsp.models import LspPosition

# Configure logging
logger = logging.getLogger(__name__)

LINK_PATTERN = re.compile(
    # [label](target), target matched non-greedily so prose after the link is never swallowed
    r"\[(?P<label>[^\]]+)\]\((?P<target>[^)]+?)\)"
    r"|<(?P<autolink>[A-Za-z][A-Za-z0-9+.\-]{1,31}:[^\s<>]*)>"
    r"|<(?P<email>[A-Za-z0-9.!#$%&'*+/=?^_`{|}~\-]+@[A-Za-z0-9](?:[A-Za-z0-9\-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9\-]{0,61}[A-Za-z0-9])?)*)>"
    r"|(?P<bare>https?://[^\s<>\"']+|(?<![\w.])www\.[^\s<>\"']+)"
)

# target followed by an optional "title"
TITLED_TARGET = re.compile(r"^(?P<url>\S+)\s+(?:\"[^\"]*\"|'[^']*')$")
ESCAPED_PUNCTUATION = re.compile(r"\\([!-/:-@\[-`{-~])")

# Trailing characters that end the sentence rather than the URL
TRAILING_PUNCTUATION = ".,:;!?*_~'\""


@dataclass(frozen=True)
class LinkSpan:
    """A link on a single line, covering the half-open range [start, end)."""
    url: str
    start: LspPosition
    end: LspPosition

    def contains(self, position: LspPosition) -> bool:
        return (
            position.line == self.start.line
            and self.start.character <= position.character < self.end.character
        )


def _utf16_length(text: str) -> int:
    return len(text.encode("utf-16-le")) // 2


def _index_from_utf16(text: str, offset: int) -> int:
    """Convert a UTF-16 offset to a string index.

    Offsets past the end of the line map past ``len(text)`` so they never
    fall inside a match.
    """
    if text.isascii():
        return offset
    units = 0
    for index, char in enumerate(text):
        width = 2 if ord(char) > 0xFFFF else 1
        if units + width > offset:
            return index
        units += width
    return len(text) + (offset - units)


def _clean_target(target: str) -> str:
    """Resolve the URL part of an inline link target."""
    target = target.strip()
    if target.startswith("<") and ">" in target:
        target = target[1:target.index(">")]
    else:
        titled = TITLED_TARGET.match(target)
        if titled:
            target = titled.group("url")
    return ESCAPED_PUNCTUATION.sub(r"\1", target)


def _trim_bare_url(url: str) -> str:
    """Strip trailing punctuation and unbalanced closing parentheses."""
    while url:
        last = url[-1]
        if last in TRAILING_PUNCTUATION:
            url = url[:-1]
        elif last == ")" and url.count(")") > url.count("("):
            url = url[:-1]
        else:
            break
    return url


def extract_link_at(line_text: str, character: int, line: int = 0) -> Optional[LinkSpan]:
    """
    Find the link covering a cursor position on one line.

    Args:
        line_text: Text of the line, without its line terminator
        character: Cursor offset in UTF-16 code units
        line: Line number recorded in the returned span

    Returns:
        The link whose [start, end) range contains the cursor, or None
    """
    cursor = _index_from_utf16(line_text, character)

    for match in LINK_PATTERN.finditer(line_text):
        start, end = match.start(), match.end()

        if match.group("target") is not None:
            url = _clean_target(match.group("target"))
        elif match.group("autolink") is not None:
            url = match.group("autolink")
        elif match.group("email") is not None:
            url = f"mailto:{match.group('email')}"
        else:
            url = _trim_bare_url(match.group("bare"))
            end = start + len(url)
            if url.startswith("www."):
                url = f"https://{url}"

        if not url or not start <= cursor < end:
            continue

        logger.debug(f"Cursor {character} on line {line} is inside link {url!r}")
        return LinkSpan(
            url=url,
            start=LspPosition(line=line, character=_utf16_length(line_text[:start])),
            end=LspPosition(line=line, character=_utf16_length(line_text[:end])),
        )

    return None


def read_document_line(path: Union[str, Path], line: int) -> Optional[str]:
    """
    Read a single line from a document without loading the whole file.

    Args:
        path: Path of the document
        line: Zero-based line index

    Returns:
        The line without its terminator, or None past the end of the document

    Raises:
        FileNotFoundError: If the document does not exist
    """
    # Universal newlines split on \n, \r\n and \r, the same terminators LSP uses
    with open(path, "r", encoding="utf-8", errors="replace", newline=None) as f:
        for index, text in enumerate(f):
            if index == line:
                return text.rstrip("\n")
    return None


def uri_to_path(uri: str) -> Optional[Path]:
    """Convert a file:// URI to a local path; other schemes return None."""
    parsed = urlparse(uri)
    if parsed.scheme != "file":
        return None
    return Path(unquote(parsed.path))


def find_link(uri: str, position: LspPosition) -> Optional[LinkSpan]:
    """Find the link under the cursor in the document identified by ``uri``."""
    path = uri_to_path(uri)
    if path is None:
        logger.warning(f"Cannot read document {uri}: only file:// URIs are supported")
        return None

    text = read_document_line(path, position.line)
    if text is None:
        logger.debug(f"Line {position.line} is past the end of {path}")
        return None

    return extract_link_at(text, position.character, line=position.line)
