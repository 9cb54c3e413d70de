"""Frontmatter splitting, restricted scalar/list/block parsing, and serialization

The dialect is small: top-level `key: value` scalars, `- item` lists
and indented block values. It is not YAML; anything it cannot read either falls
back to a plain string value or, before the first key, to the raw block.
"""

import json
import logging
import math
import re
from typing import Any, Optional

from mdtree.core.models import Frontmatter
from mdtree.core.render import DEFAULT_PRESET, markdown_to_text


logger = logging.getLogger(__name__)

BOM = '\ufeff'
BLOCK_INDICATORS = ('|', '>')
EMPTY_LIST = '[]'

_NEWLINE_RE = re.compile(r'\r\n|\r|\n')
_KEY_RE = re.compile(r'^([A-Za-z0-9_-]+)\s*:\s*(.*)$')
_LIST_ITEM_RE = re.compile(r'^[-*+]\s+(.*)$')
_NUMBER_RE = re.compile(r'^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$')
_WS_ONLY_LINE_RE = re.compile(r'^[ \t]+$', re.MULTILINE)
_BLANK_RUN_RE = re.compile(r'\n{3,}')


def split_frontmatter(text: str) -> tuple[Optional[str], str]:
    """Return (raw_frontmatter or None, body).

    An opening `---` fence without a closing one means no usable frontmatter:
    the whole text is returned as body.
    """
    if text.startswith(BOM):
        text = text[len(BOM):]
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != '---':
        return None, text.lstrip('\r\n')

    for i in range(1, len(lines)):
        if lines[i].strip() == '---':
            raw = ''.join(lines[1:i]).rstrip('\r\n')
            body = ''.join(lines[i + 1:]).lstrip('\r\n')
            return raw, body

    logger.debug("Unclosed frontmatter fence; treating the whole document as body")
    return None, text.lstrip('\r\n')


def parse_scalar(value: str) -> Any:
    """Parse a bool/null/int/float/quoted-string token; anything else stays a trimmed string."""
    value = value.strip()
    lower = value.lower()
    if lower in ('true', 'false'):
        return lower == 'true'
    if lower == 'null':
        return None
    if value == EMPTY_LIST:
        return []
    if _NUMBER_RE.match(value):
        if '.' not in value and 'e' not in lower:
            try:
                return int(value)
            except ValueError:
                # past the interpreter's int digit limit
                return value
        number = float(value)
        if not math.isfinite(number):
            return value
        return number if '.' in value else int(number)
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def _dedent(lines: list[str]) -> list[str]:
    """Drop outer blank lines and the indentation common to all non-blank lines."""
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    lines = lines[start:end]
    if not lines:
        return []
    indent = min(len(line) - len(line.lstrip()) for line in lines if line.strip())
    return [line[indent:] if line.strip() else '' for line in lines]


def _list_items(lines: list[str]) -> Optional[list[Any]]:
    """Return scalar items when every non-blank line is a bullet, else None."""
    items = []
    for line in lines:
        if not line.strip():
            continue
        m = _LIST_ITEM_RE.match(line)
        if not m:
            return None
        items.append(parse_scalar(m.group(1)))
    return items


def _resolve_block(lines: list[str], preset: str) -> Any:
    lines = _dedent(lines)
    if not lines:
        return ''

    items = _list_items(lines)
    if items is not None:
        return items

    if lines[0].strip() in BLOCK_INDICATORS:
        lines = _dedent(lines[1:])
    markdown = '\n'.join(lines)
    return markdown_to_text(markdown, preset) or markdown.strip()


def _finalize(inline: str, lines: list[str], preset: str) -> Any:
    inline = inline.strip()
    if inline and inline not in BLOCK_INDICATORS and not any(line.strip() for line in lines):
        return parse_scalar(inline)
    return _resolve_block(([inline] if inline else []) + lines, preset)


def parse_frontmatter(raw: Optional[str], preset: str = DEFAULT_PRESET) -> Frontmatter:
    """Parse a raw frontmatter block.

    Returns None when there was no frontmatter, a dict when the block follows the
    key/value dialect, or the raw string when a line before the first key is
    neither blank, a comment, nor a key. Once a key has started, comment lines
    belong to its block value like any other line.
    """
    if raw is None:
        return None
    if not raw.strip():
        return {}

    result: dict[str, Any] = {}
    key: Optional[str] = None
    inline = ''
    buffer: list[str] = []

    for line in _NEWLINE_RE.split(raw):
        m = _KEY_RE.match(line)
        if m:
            if key is not None:
                result[key] = _finalize(inline, buffer, preset)
            key, inline, buffer = m.group(1), m.group(2), []
            continue
        if key is None:
            if not line.strip() or line.lstrip().startswith('#'):
                continue
            logger.debug("Unrecognized frontmatter line %r; keeping raw frontmatter", line)
            return raw
        buffer.append(line)

    if key is not None:
        result[key] = _finalize(inline, buffer, preset)
    return result


def stringify_scalar(value: Any) -> str:
    """Render a scalar so that parse_scalar() reads back the same value and type."""
    if value is True:
        return 'true'
    if value is False:
        return 'false'
    if value is None:
        return 'null'
    if isinstance(value, (int, float)):
        return repr(value)
    if not isinstance(value, str):
        return json.dumps(value, ensure_ascii=False, default=str)
    if (
        value == ''
        or value != value.strip()
        or value in BLOCK_INDICATORS
        or parse_scalar(value) != value
    ):
        return f'"{value}"'
    return value


def build_frontmatter_raw(frontmatter: dict[str, Any], sort_keys: bool = False) -> str:
    """Serialize a frontmatter mapping into the key/value dialect (no fences)."""
    keys = sorted(frontmatter, key=str) if sort_keys else list(frontmatter)
    lines: list[str] = []
    for key in keys:
        value = frontmatter[key]
        name = str(key)
        if name == '':
            continue
        if isinstance(value, (list, tuple)) and not value:
            lines.append(f"{name}: {EMPTY_LIST}")
        elif isinstance(value, (list, tuple)):
            lines.append(f"{name}:")
            lines.extend(f"  - {stringify_scalar(item)}" for item in value)
        elif isinstance(value, str) and '\n' in value:
            lines.append(f"{name}: |")
            lines.extend(f"  {line}" if line.strip() else '' for line in value.split('\n'))
        else:
            lines.append(f"{name}: {stringify_scalar(value)}")
    return '\n'.join(lines)


def compose_document(frontmatter: Frontmatter, body: str, sort_keys: bool = False) -> str:
    """Render frontmatter + body into a canonical document string ending in one newline."""
    if isinstance(frontmatter, str):
        raw = frontmatter.strip('\r\n')
    else:
        raw = build_frontmatter_raw(frontmatter or {}, sort_keys)

    document = "---\n" + (f"{raw}\n" if raw else '') + "---\n"
    body = body.strip('\r\n')
    if body:
        document += f"\n{body}"
    return document.rstrip('\r\n') + "\n"


def normalize_body(markdown: str) -> str:
    """Normalize newlines and blank-line runs for comparison."""
    markdown = markdown.replace('\r\n', '\n').replace('\r', '\n')
    markdown = _WS_ONLY_LINE_RE.sub('', markdown)
    markdown = _BLANK_RUN_RE.sub('\n\n', markdown)
    return markdown.strip('\n')


def normalize_document(document: str, sort_keys: bool = True, preset: str = DEFAULT_PRESET) -> str:
    """Return the canonical form of a document, suitable for equality checks and diffs."""
    raw, body = split_frontmatter(document)
    frontmatter = parse_frontmatter(raw, preset) if raw is not None else {}
    return compose_document(frontmatter, normalize_body(body), sort_keys)


def format_document(document: str, sort_keys: bool = False, preset: str = DEFAULT_PRESET) -> str:
    """Canonical on-disk form; unlike normalize_document, fence-less documents stay fence-less."""
    raw, body = split_frontmatter(document)
    body = normalize_body(body)
    if raw is None:
        return f"{body}\n" if body else ''
    return compose_document(parse_frontmatter(raw, preset), body, sort_keys)
