"""markdown-it rendering and HTML-to-text flattening"""

import re
from functools import lru_cache

from bs4 import BeautifulSoup
from bs4.element import Comment, Declaration, Doctype, NavigableString, ProcessingInstruction, Tag
from markdown_it import MarkdownIt


DEFAULT_PRESET = 'gfm-like'

_TAG_GAP_RE = re.compile(r'>[ \t]*\n\s*<')
_BLANK_RUN_RE = re.compile(r'\n{3,}')

BLOCK_TAGS = frozenset({'p', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'ul', 'ol', 'blockquote', 'pre', 'table'})
LINE_TAGS = frozenset({'li', 'tr'})
SKIPPED_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)


@lru_cache(maxsize=8)
def make_parser(preset: str = DEFAULT_PRESET) -> MarkdownIt:
    """Build (and memoize) a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


@lru_cache(maxsize=1024)
def render_markdown(markdown: str, preset: str = DEFAULT_PRESET) -> str:
    """Render markdown to HTML. Pure in (markdown, preset), so results are memoized."""
    if not markdown.strip():
        return ''
    return make_parser(preset).render(markdown)


def render_tokens(tokens: list, preset: str = DEFAULT_PRESET) -> str:
    """Render a slice of block tokens produced by the same preset."""
    if not tokens:
        return ''
    md = make_parser(preset)
    return md.renderer.render(tokens, md.options, {})


def _flatten(node) -> str:
    """Concatenate the text under `node`, emitting separators after block and line elements."""
    if isinstance(node, NavigableString):
        return '' if isinstance(node, SKIPPED_STRINGS) else str(node)
    if not isinstance(node, Tag):
        return ''
    if node.name == 'br':
        return '\n'
    text = ''.join(_flatten(child) for child in node.children)
    if node.name in BLOCK_TAGS:
        return text + '\n\n'
    if node.name in LINE_TAGS:
        return text + '\n'
    return text


def html_to_text(html: str) -> str:
    """Flatten HTML to plain text with blank lines between block elements.

    Separators are produced while walking the tree, so they do not depend on how
    the parser keeps whitespace-only strings between tags.
    """
    if not html:
        return ''
    html = _TAG_GAP_RE.sub('><', html)
    text = _flatten(BeautifulSoup(html, 'html.parser'))
    return _BLANK_RUN_RE.sub('\n\n', text.strip())


def markdown_to_text(markdown: str, preset: str = DEFAULT_PRESET) -> str:
    """Render inline-ish markdown and flatten it, so emphasis degrades to plain text."""
    return html_to_text(render_markdown(markdown, preset))
