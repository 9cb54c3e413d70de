"""Section and subsection splitting by structural markers"""

import logging
from typing import Optional

from mdtree.core.extract.blocks import build_blocks
from mdtree.core.extract.fields import extract_fields
from mdtree.core.markers import MarkerKind, scan_markers, strip_markers
from mdtree.core.models import Block, Section
from mdtree.core.ranges import subsection_ranges
from mdtree.core.render import DEFAULT_PRESET, html_to_text, render_markdown


logger = logging.getLogger(__name__)


def split_sections(body: str) -> list[tuple[Optional[str], str]]:
    """Split a document body into (name, markdown) pairs in document order.

    Content before the first section marker is an unnamed section; every marker
    starts a section running to the next marker. Blank sections are skipped.
    """
    markers = scan_markers(body, (MarkerKind.section,))
    bounds = [(None, 0, markers[0].start if markers else len(body))]
    for i, marker in enumerate(markers):
        end = markers[i + 1].start if i + 1 < len(markers) else len(body)
        bounds.append((marker.name, marker.end, end))

    sections = []
    for name, start, end in bounds:
        content = body[start:end].strip()
        if not content:
            logger.debug("Skipping blank section %r at offset %d", name, start)
            continue
        sections.append((name, content))
    return sections


def split_subsections(markdown: str) -> list[tuple[str, str]]:
    """(name, markdown) pairs for each non-blank `sub:name` range, ordered by start."""
    subsections = []
    for rng in subsection_ranges(markdown):
        content = markdown[rng.start:rng.end].strip()
        if content:
            subsections.append((rng.name, content))
    return subsections


def _title(blocks: tuple[Block, ...]) -> str:
    for root in blocks:
        for block in root.descendants():
            if block.heading.text:
                return block.heading.text
    return ''


def build_section(
    markdown: str,
    name: Optional[str] = None,
    preset: str = DEFAULT_PRESET,
    nested: bool = True,
    ) -> Section:
    """Build a Section from its markdown; subsections are only resolved one level deep."""
    subsections: dict[str, Section] = {}
    if nested:
        for sub_name, content in split_subsections(markdown):
            if sub_name in subsections:
                logger.debug("Ignoring duplicate subsection '%s'", sub_name)
                continue
            subsections[sub_name] = build_section(content, sub_name, preset, nested=False)

    html = render_markdown(strip_markers(markdown), preset).strip()
    blocks = build_blocks(markdown, preset)
    return Section(
        name=name,
        title=_title(blocks),
        markdown=markdown,
        html=html,
        text=html_to_text(html),
        fields=extract_fields(markdown, preset),
        subsections=subsections,
        blocks=blocks,
    )


def build_sections(body: str, preset: str = DEFAULT_PRESET) -> tuple[Section, ...]:
    return tuple(build_section(content, name, preset) for name, content in split_sections(body))
