"""Parser error taxonomy

Malformed markup never raises: markers, frontmatter lines and empty captures are
normalized into a best-effort tree. The only hard failure is an unreadable source.
"""

from pathlib import Path


class ParseError(Exception):
    """Base class for errors surfaced by mdtree."""


class SourceUnavailable(ParseError):
    """The source document is missing or cannot be read as UTF-8 text."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Source unavailable: {path} ({reason})")
