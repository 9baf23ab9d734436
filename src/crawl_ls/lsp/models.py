"""
Data models for LSP positions, ranges and locations.

These dataclasses mirror the LSP wire shapes and convert to and from the
plain dictionaries carried inside JSON-RPC envelopes.
"""

from dataclasses import dataclass
from typing import Any, Dict

from src.crawl_ls.core.exceptions import InvalidParamsError


@dataclass(frozen=True)
class LspPosition:
    """Position in a document expressed as zero-based line and character offset.

    ``character`` counts UTF-16 code units, as LSP clients send it.
    """
    line: int
    character: int

    def to_dict(self) -> Dict[str, int]:
        return {"line": self.line, "character": self.character}

    @classmethod
    def from_dict(cls, data: Any) -> "LspPosition":
        """Parse a ``{line, character}`` object, rejecting negative or non-integer values."""
        if not isinstance(data, dict):
            raise InvalidParamsError("position must be an object")
        line = data.get("line")
        character = data.get("character")
        for name, value in (("line", line), ("character", character)):
            # bool is an int subclass, but never a valid offset
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise InvalidParamsError(f"position.{name} must be a non-negative integer")
        return cls(line=line, character=character)


@dataclass(frozen=True)
class LspRange:
    """Range in a document expressed as start and end positions."""
    start: LspPosition
    end: LspPosition

    def to_dict(self) -> Dict[str, Any]:
        return {"start": self.start.to_dict(), "end": self.end.to_dict()}


@dataclass(frozen=True)
class LspLocation:
    """Location in a document expressed as a URI and a range."""
    uri: str
    range: LspRange

    @classmethod
    def file_start(cls, uri: str) -> "LspLocation":
        """Location pointing at the very beginning of a document."""
        origin = LspPosition(line=0, character=0)
        return cls(uri=uri, range=LspRange(start=origin, end=origin))

    def to_dict(self) -> Dict[str, Any]:
        return {"uri": self.uri, "range": self.range.to_dict()}
