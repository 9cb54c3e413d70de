"""Stack-based pairing of opener/closer markers into content ranges"""

import logging
from dataclasses import dataclass
from typing import Iterable

from mdtree.core.markers import FIELD_KINDS, Marker, MarkerKind, SUBSECTION_KINDS, scan_markers


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Range:
    """Resolved [start, end) span of content belonging to one named opener."""
    name:      str
    start:     int          # just past the opener marker
    end:       int          # offset of the closer, next opener, or end of content
    container: bool = False


def _close(opener: Marker, end: int) -> Range:
    return Range(name=opener.name, start=opener.end, end=end, container=opener.container)


def resolve_ranges(
    markers: list[Marker],
    length: int,
    opener: MarkerKind,
    closers: Iterable[MarkerKind],
    ) -> list[Range]:
    """Pair openers with closers using an explicit open stack.

    A named closer removes the nearest open entry with that name, leaving entries
    above it open; a nameless closer closes only the top entry. Entries still open
    at the end run to the next opener after them, or to `length`.
    Returns ranges ordered by start offset.
    """
    closer_kinds = frozenset(closers)
    stack: list[Marker] = []
    ranges: list[Range] = []

    for marker in markers:
        if marker.kind == opener:
            stack.append(marker)
            continue
        if marker.kind not in closer_kinds:
            continue

        if marker.name is None:
            if stack:
                ranges.append(_close(stack.pop(), marker.start))
            else:
                logger.debug("Ignoring closer at offset %d with nothing open", marker.start)
            continue

        for i in range(len(stack) - 1, -1, -1):
            if stack[i].name == marker.name:
                ranges.append(_close(stack.pop(i), marker.start))
                break
        else:
            logger.debug("Ignoring unmatched closer '/%s' at offset %d", marker.name, marker.start)

    openers = [m for m in markers if m.kind == opener]
    for entry in stack:
        end = next((m.start for m in openers if m.index > entry.index), length)
        ranges.append(_close(entry, end))

    return sorted(ranges, key=lambda r: r.start)


def field_ranges(markdown: str) -> list[Range]:
    """Resolve field marker ranges, ignoring structural section/subsection markers."""
    markers = scan_markers(markdown, FIELD_KINDS)
    return resolve_ranges(
        markers, len(markdown), MarkerKind.field_open,
        (MarkerKind.field_close, MarkerKind.universal_close),
    )


def subsection_ranges(markdown: str) -> list[Range]:
    """Resolve `sub:name` ... `/sub` ranges within one section."""
    markers = scan_markers(markdown, SUBSECTION_KINDS)
    return resolve_ranges(markers, len(markdown), MarkerKind.sub_open, (MarkerKind.sub_close,))
