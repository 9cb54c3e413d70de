"""Heading block tree: token grouping, placement and bottom-up aggregation"""

import re
from dataclasses import dataclass, field
from typing import Optional

from mdtree.core.extract.content import extract_content
from mdtree.core.extract.fields import extract_fields
from mdtree.core.markers import strip_markers
from mdtree.core.models import Block, ContentElementCollection, Heading
from mdtree.core.render import DEFAULT_PRESET, html_to_text, make_parser, render_tokens
from mdtree.core.utils.tokens import heading_level, is_top_level_heading


_NEWLINE_RE = re.compile(r'\r\n?')


@dataclass
class _Draft:
    """Mutable stand-in for a Block while the tree is still being placed."""
    level:     int
    depth:     int
    markdown:  str
    content:   str
    heading:   Heading = field(default_factory=Heading)
    synthetic: bool = False
    children:  list['_Draft'] = field(default_factory=list)


def group_headings(tokens: list) -> tuple[list, list[list]]:
    """Split tokens into (preamble, groups); each top-level heading starts a group."""
    preamble: list = []
    groups: list[list] = []
    for tok in tokens:
        if is_top_level_heading(tok):
            groups.append([])
        (groups[-1] if groups else preamble).append(tok)
    return preamble, groups


def _source_slice(lines: list[str], start: int, end: Optional[int]) -> str:
    return '\n'.join(lines[start:end]).strip('\n')


def _drafts(markdown: str, preset: str) -> list[_Draft]:
    """Flat drafts in document order, with depths already shifted where needed."""
    tokens = make_parser(preset).parse(strip_markers(markdown))
    lines = markdown.split('\n')
    preamble, groups = group_headings(tokens)

    if not groups:
        return [_Draft(level=0, depth=0, markdown=markdown.strip('\n'), content=render_tokens(preamble, preset))]

    starts = [g[0].map[0] for g in groups]
    first_level = heading_level(groups[0][0])
    pre_markdown = _source_slice(lines, 0, starts[0])
    shift = 1 if first_level > 1 else 0

    drafts: list[_Draft] = []
    if shift:
        drafts.append(_Draft(
            level=1, depth=1, synthetic=True,
            markdown=pre_markdown, content=render_tokens(preamble, preset),
        ))
    elif strip_markers(pre_markdown).strip():
        drafts.append(_Draft(level=0, depth=0, markdown=pre_markdown, content=render_tokens(preamble, preset)))

    for i, group in enumerate(groups):
        level = heading_level(group[0])
        heading_html = render_tokens(group[:3], preset).strip()
        end = starts[i + 1] if i + 1 < len(groups) else None
        drafts.append(_Draft(
            level=level,
            depth=level + shift,
            heading=Heading(text=html_to_text(heading_html), html=heading_html),
            markdown=_source_slice(lines, starts[i], end),
            content=render_tokens(group[3:], preset),
        ))
    return drafts


def _place(drafts: list[_Draft]) -> list[_Draft]:
    """Attach drafts to their nearest shallower open ancestor; return the roots."""
    roots: list[_Draft] = []
    stack: list[_Draft] = []
    for draft in drafts:
        if draft.depth == 0:
            roots.append(draft)
            continue
        while stack and stack[-1].depth >= draft.depth:
            stack.pop()
        (stack[-1].children if stack else roots).append(draft)
        stack.append(draft)
    return roots


def _freeze(draft: _Draft, preset: str) -> Block:
    """Build the immutable Block, children first, aggregating their content."""
    children = tuple(_freeze(child, preset) for child in draft.children)

    content = draft.content.strip()
    own_html = '\n'.join(h for h in (draft.heading.html, content) if h)
    own_text = html_to_text(own_html)
    html, text, markdown = own_html, own_text, draft.markdown

    if children and not draft.synthetic:
        html = '\n'.join(h for h in [own_html, *(c.html for c in children)] if h)
        text = '\n\n'.join(t for t in [own_text, *(c.text for c in children)] if t)
        markdown = '\n\n'.join(m for m in [draft.markdown, *(c.markdown for c in children)] if m)

    found = extract_content(content)
    return Block(
        heading=draft.heading,
        level=draft.level,
        depth=draft.depth,
        synthetic=draft.synthetic,
        content=content,
        own_markdown=draft.markdown,
        own_html=own_html,
        own_text=own_text,
        markdown=markdown,
        html=html,
        text=text,
        fields=extract_fields(draft.markdown, preset),
        images=ContentElementCollection(tuple(found.images)),
        links=ContentElementCollection(tuple(found.links)),
        lists=ContentElementCollection(tuple(found.lists)),
        paragraphs=ContentElementCollection(tuple(found.paragraphs)),
        children=children,
    )


def build_blocks(markdown: str, preset: str = DEFAULT_PRESET) -> tuple[Block, ...]:
    """Build the heading block tree for one (sub)section's markdown.

    Blocks are split on top-level headings of the marker-free rendering, while each
    block's markdown is sliced from the original text so field markers survive.
    Content that starts below H1 is wrapped in a synthetic level-1 block; content
    before a leading H1 becomes an orphan level-0 block.
    """
    markdown = _NEWLINE_RE.sub('\n', markdown)
    if not markdown.strip():
        return ()
    return tuple(_freeze(root, preset) for root in _place(_drafts(markdown, preset)))
