"""Tree transformation passes over rendered HTML"""

import re
from typing import Any, Optional

from mdtree.core.models import (
    Block, ContentElement, ContentElementCollection, ContentTree, FieldData, Heading, ReadOnlyDict, Section,
)


_IMG_SRC_RE = re.compile(r'''(<img\b[^>]*\bsrc\s*=\s*)(['"])([^'"]+)(\2)''', re.IGNORECASE)
_ABSOLUTE_RE = re.compile(r'^(?:[a-z][a-z0-9+.-]*:|//|/)', re.IGNORECASE)


def normalize_url_base(base_url: Optional[str]) -> Optional[str]:
    """Trimmed base URL with exactly one trailing slash, or None when blank."""
    if not isinstance(base_url, str) or not base_url.strip():
        return None
    return base_url.strip().rstrip('/') + '/'


def resolve_image_src(src: str, base: str) -> str:
    """Prefix a bare relative file name with `base`; anything else is returned unchanged."""
    path = src.strip()
    if not path or _ABSOLUTE_RE.match(path) or path.startswith('../') or path.startswith(base):
        return src
    relative = path[2:] if path.startswith('./') else path
    if not relative or '/' in relative:
        return src
    return base + relative


def apply_image_base_url_html(html: str, base_url: Optional[str]) -> str:
    base = normalize_url_base(base_url)
    if base is None:
        return html
    return _IMG_SRC_RE.sub(
        lambda m: f"{m.group(1)}{m.group(2)}{resolve_image_src(m.group(3), base)}{m.group(2)}",
        html,
    )


def strip_image_base_url(html: str, base_url: Optional[str]) -> str:
    """Undo apply_image_base_url on an HTML string, leaving other image sources alone."""
    base = normalize_url_base(base_url)
    if base is None:
        return html
    pattern = re.compile(
        r'''(<img\b[^>]*\bsrc\s*=\s*)(['"])''' + re.escape(base) + r'''([^'"]+)(\2)''',
        re.IGNORECASE,
    )
    return pattern.sub(lambda m: f"{m.group(1)}{m.group(2)}{m.group(3)}{m.group(2)}", html)


def _rewrite_data(data: Any, base: str) -> Any:
    if isinstance(data, list):
        return [_rewrite_data(item, base) for item in data]
    if not isinstance(data, dict):
        return data
    out = {}
    for key, value in data.items():
        if key == 'src' and isinstance(value, str):
            out[key] = resolve_image_src(value, base)
        elif key == 'html' and isinstance(value, str):
            out[key] = apply_image_base_url_html(value, base)
        else:
            out[key] = _rewrite_data(value, base)
    return out


def _element(element: ContentElement, base: str) -> ContentElement:
    return element.model_copy(update={
        'html': apply_image_base_url_html(element.html, base),
        'data': _rewrite_data(element.data, base),
    })


def _collection(elements: ContentElementCollection, base: str) -> ContentElementCollection:
    return ContentElementCollection(tuple(_element(e, base) for e in elements))


def _fields(fields: dict[str, FieldData], base: str) -> ReadOnlyDict:
    return ReadOnlyDict({
        name: field.model_copy(update={
            'html': apply_image_base_url_html(field.html, base),
            'data': _rewrite_data(field.data, base),
        })
        for name, field in fields.items()
    })


def _heading(heading: Heading, base: str) -> Heading:
    return heading.model_copy(update={'html': apply_image_base_url_html(heading.html, base)})


def _block(block: Block, base: str) -> Block:
    return block.model_copy(update={
        'heading': _heading(block.heading, base),
        'content': apply_image_base_url_html(block.content, base),
        'own_html': apply_image_base_url_html(block.own_html, base),
        'html': apply_image_base_url_html(block.html, base),
        'fields': _fields(block.fields, base),
        'images': _collection(block.images, base),
        'links': _collection(block.links, base),
        'lists': _collection(block.lists, base),
        'paragraphs': _collection(block.paragraphs, base),
        'children': tuple(_block(child, base) for child in block.children),
    })


def _section(section: Section, base: str) -> Section:
    return section.model_copy(update={
        'html': apply_image_base_url_html(section.html, base),
        'fields': _fields(section.fields, base),
        'subsections': ReadOnlyDict({name: _section(sub, base) for name, sub in section.subsections.items()}),
        'blocks': tuple(_block(block, base) for block in section.blocks),
    })


def apply_image_base_url(tree: ContentTree, base_url: Optional[str]) -> ContentTree:
    """Return a new tree whose image sources (in HTML and extracted data) use `base_url`.

    Only bare file names (optionally `./`-prefixed) are rewritten; absolute,
    rooted, scheme-bearing, `../`, nested and already-prefixed sources are kept.
    """
    base = normalize_url_base(base_url)
    if base is None:
        return tree
    return tree.model_copy(update={'sections': tuple(_section(s, base) for s in tree.sections)})
