"""Images, links, lists and paragraphs pulled out of rendered block HTML"""

import re
from dataclasses import dataclass, field
from html import escape
from typing import Any

from bs4 import BeautifulSoup, Tag

from mdtree.core.models import ContentElement
from mdtree.core.render import html_to_text
from mdtree.core.utils.hashing import md5


HEADING_TAGS = frozenset({'h1', 'h2', 'h3', 'h4', 'h5', 'h6'})
LIST_TAGS = ['ul', 'ol']

_MD_HEADING_RE = re.compile(r'^#+\s+', re.MULTILINE)


@dataclass
class ExtractedContent:
    images:     list[ContentElement] = field(default_factory=list)
    links:      list[ContentElement] = field(default_factory=list)
    lists:      list[ContentElement] = field(default_factory=list)
    paragraphs: list[ContentElement] = field(default_factory=list)


def _matching(node: Tag, names) -> list[Tag]:
    """The node itself when it is one of `names`, else its matching descendants."""
    names = [names] if isinstance(names, str) else names
    if node.name in names:
        return [node]
    return node.find_all(names)


def image_data(img: Tag) -> dict[str, str]:
    return {'src': img.get('src', ''), 'alt': img.get('alt', '')}


def link_data(a: Tag) -> dict[str, str]:
    return {'text': a.get_text().strip(), 'href': a.get('href', '')}


def extract_content(html: str) -> ExtractedContent:
    """Walk the top-level elements of a block's body HTML, skipping headings.

    Images are kept once per node, links once per (href, text) pair, and lists
    and paragraphs once per distinct serialized HTML.
    """
    found = ExtractedContent()
    if not html.strip():
        return found

    soup = BeautifulSoup(html, 'html.parser')
    seen_images: set[int] = set()
    seen_links: set[tuple[str, str]] = set()
    seen_lists: set[str] = set()
    seen_paragraphs: set[str] = set()

    for node in soup.contents:
        if not isinstance(node, Tag) or node.name in HEADING_TAGS:
            continue

        for img in _matching(node, 'img'):
            if id(img) in seen_images:
                continue
            seen_images.add(id(img))
            data = image_data(img)
            found.images.append(ContentElement(
                text=f"[{data['alt']}]",
                html=f'<img src="{escape(data["src"])}" alt="{escape(data["alt"])}">',
                data=data,
            ))

        for a in _matching(node, 'a'):
            if not a.get('href'):
                continue
            data = link_data(a)
            key = (data['href'], data['text'])
            if key in seen_links:
                continue
            seen_links.add(key)
            found.links.append(ContentElement(text=data['text'], html=str(a), data={'href': data['href']}))

        for list_node in _matching(node, LIST_TAGS):
            list_html = str(list_node)
            key = md5(list_html)
            if key in seen_lists:
                continue
            seen_lists.add(key)
            items = [li.get_text().strip() for li in list_node.find_all('li')]
            found.lists.append(ContentElement(
                text=html_to_text(list_html),
                html=list_html,
                data={'type': list_node.name, 'items': items},
            ))

        for p in _matching(node, 'p'):
            p_html = str(p)
            key = md5(p_html)
            if key in seen_paragraphs:
                continue
            seen_paragraphs.add(key)
            found.paragraphs.append(ContentElement(text=p.get_text().strip(), html=p_html))

    return found


def _list_item(li: Tag) -> dict[str, Any]:
    return {
        'html': str(li),
        'text': li.get_text().strip(),
        'links': [link_data(a) for a in li.find_all('a', href=True)],
        'images': [image_data(img) for img in li.find_all('img')],
    }


def infer_field(markdown: str, html: str) -> tuple[str, Any]:
    """Classify captured field content and build its structured data.

    Checked in order: a markdown heading line, any list, any image, any link;
    anything else is plain text.
    """
    if _MD_HEADING_RE.search(markdown):
        return 'heading', {}

    soup = BeautifulSoup(html, 'html.parser')

    if soup.find(LIST_TAGS) is not None:
        return 'list', [_list_item(li) for li in soup.find_all('li')]

    images = [image_data(img) for img in soup.find_all('img')]
    if len(images) > 1:
        return 'images', images
    if images:
        return 'image', images[0]

    links = [link_data(a) for a in soup.find_all('a', href=True)]
    if len(links) > 1:
        return 'links', links
    if links:
        return 'link', links[0]

    return 'text', {}
