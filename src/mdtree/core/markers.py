"""Annotation marker scanning and classification"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional


NAME = r'[A-Za-z0-9_-]+'
MARKER_RE = re.compile(r'<!--[ \t]*(.*?)[ \t]*-->')


class MarkerKind(str, Enum):
    """Restrict comment annotations to the recognized marker grammar"""
    section = "section"
    sub_open = "sub_open"
    sub_close = "sub_close"
    field_open = "field_open"
    field_close = "field_close"
    universal_close = "universal_close"


FIELD_KINDS = frozenset({MarkerKind.field_open, MarkerKind.field_close, MarkerKind.universal_close})
SUBSECTION_KINDS = frozenset({MarkerKind.sub_open, MarkerKind.sub_close})

# Structural forms come first so `section` and `/sub` are never read as field markers.
_PATTERNS: list[tuple[MarkerKind, re.Pattern]] = [
    (MarkerKind.section,         re.compile(rf'^section(?::({NAME}))?$')),
    (MarkerKind.sub_open,        re.compile(rf'^sub:({NAME})$')),
    (MarkerKind.sub_close,       re.compile(rf'^/sub(?::({NAME}))?$')),
    (MarkerKind.field_open,      re.compile(rf'^({NAME})(\.\.\.)?$')),
    (MarkerKind.field_close,     re.compile(rf'^/({NAME})$')),
    (MarkerKind.universal_close, re.compile(r'^/$')),
]


@dataclass(frozen=True)
class Marker:
    """A classified `<!-- ... -->` occurrence in a markdown string."""
    kind:      MarkerKind
    name:      Optional[str]
    start:     int          # offset of '<!--'
    end:       int          # offset just past '-->'
    index:     int          # scan order among all markers in the text
    container: bool = False


def classify_marker(content: str) -> Optional[tuple[MarkerKind, Optional[str], bool]]:
    """Classify trimmed comment content as (kind, name, container), or None if not a marker."""
    content = content.strip()
    for kind, pattern in _PATTERNS:
        m = pattern.match(content)
        if m:
            name = m.group(1) if m.groups() else None
            container = kind == MarkerKind.field_open and bool(m.group(2))
            return kind, name, container
    return None


def scan_markers(markdown: str, kinds: Optional[Iterable[MarkerKind]] = None) -> list[Marker]:
    """Return markers in document order, optionally restricted to the given kinds."""
    wanted = frozenset(kinds) if kinds is not None else None
    markers: list[Marker] = []
    for m in MARKER_RE.finditer(markdown):
        classified = classify_marker(m.group(1))
        if classified is None:
            continue
        kind, name, container = classified
        if wanted is not None and kind not in wanted:
            continue
        markers.append(Marker(
            kind=kind,
            name=name,
            start=m.start(),
            end=m.end(),
            index=len(markers),
            container=container,
        ))
    return markers


def strip_markers(markdown: str) -> str:
    """Remove every recognized marker; other comments and all line breaks are kept."""
    return MARKER_RE.sub(
        lambda m: '' if classify_marker(m.group(1)) is not None else m.group(0),
        markdown,
    )
