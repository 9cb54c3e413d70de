"""Immutable content-tree data model produced by the parser"""

from html import escape
from typing import Any, Iterator, Optional, Union

from pydantic import BaseModel, ConfigDict, RootModel, field_validator


Frontmatter = Union[dict[str, Any], str, None]


class ReadOnlyDict(dict):
    """A dict that rejects every mutation after construction."""

    def _readonly(self, *args, **kwargs):
        raise TypeError(f"{type(self).__name__} is read-only")

    __setitem__ = __delitem__ = __ior__ = _readonly
    clear = pop = popitem = setdefault = update = _readonly

    def __reduce__(self):
        return type(self), (dict(self),)


class ContentElement(BaseModel):
    """A single extracted image, link, list, paragraph or heading."""
    model_config = ConfigDict(frozen=True)

    text: str
    html: str
    data: dict[str, Any] = {}

    def __str__(self) -> str:
        return self.text


class ContentElementCollection(RootModel[tuple[ContentElement, ...]]):
    """Ordered elements with combined `.html` / `.text` renderings."""
    model_config = ConfigDict(frozen=True)

    root: tuple[ContentElement, ...] = ()

    def __iter__(self) -> Iterator[ContentElement]:
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __getitem__(self, index: int) -> ContentElement:
        return self.root[index]

    def __bool__(self) -> bool:
        return bool(self.root)

    @property
    def html(self) -> str:
        return ''.join(e.html for e in self.root)

    @property
    def text(self) -> str:
        return '\n\n'.join(e.text for e in self.root).strip()

    def __str__(self) -> str:
        return self.text


def _collect(elements) -> ContentElementCollection:
    """Build a collection keeping the first occurrence of each element object."""
    seen: set[int] = set()
    unique = []
    for e in elements:
        if id(e) not in seen:
            seen.add(id(e))
            unique.append(e)
    return ContentElementCollection(tuple(unique))


class Heading(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = ''
    html: str = ''

    def __str__(self) -> str:
        return self.html


class FieldData(BaseModel):
    """Content captured by a `<!-- name -->` or `<!-- name... -->` marker."""
    model_config = ConfigDict(frozen=True)

    name: str
    type: str                       # heading | list | image | images | link | links | text
    markdown: str
    html: str
    text: str
    data: Union[dict[str, Any], list[dict[str, Any]]] = {}

    def items(self) -> list:
        """List items for list fields, ContentElements for images/links fields."""
        if self.type == 'list':
            return list(self.data)
        if self.type == 'images':
            return [
                ContentElement(text=img.get('alt', ''), html=_img_html(img), data=img)
                for img in self.data
            ]
        if self.type == 'links':
            return [
                ContentElement(text=link.get('text', ''), html=_link_html(link), data=link)
                for link in self.data
            ]
        return []

    def __str__(self) -> str:
        return self.text


def _img_html(img: dict) -> str:
    return f'<img src="{escape(img.get("src", ""))}" alt="{escape(img.get("alt", ""))}">'


def _link_html(link: dict) -> str:
    return f'<a href="{escape(link.get("href", ""))}">{escape(link.get("text", ""))}</a>'


class Block(BaseModel):
    """Content rooted at one heading occurrence, or a synthetic/orphan wrapper."""
    model_config = ConfigDict(frozen=True)

    heading:      Heading = Heading()
    level:        int                       # 0 = no heading, 1-6 = heading depth
    depth:        int                       # placement depth; level + 1 under a synthetic root
    synthetic:    bool = False
    content:      str = ''                  # body HTML without the heading
    own_markdown: str = ''
    own_html:     str = ''
    own_text:     str = ''
    markdown:     str = ''                  # aggregated with descendants
    html:         str = ''
    text:         str = ''
    fields:       dict[str, FieldData] = ReadOnlyDict()
    images:       ContentElementCollection = ContentElementCollection()
    links:        ContentElementCollection = ContentElementCollection()
    lists:        ContentElementCollection = ContentElementCollection()
    paragraphs:   ContentElementCollection = ContentElementCollection()
    children:     tuple["Block", ...] = ()

    @field_validator('fields', mode='after')
    @classmethod
    def freeze_fields(cls, value: dict) -> ReadOnlyDict:
        return ReadOnlyDict(value)

    def field(self, name: str) -> Optional[FieldData]:
        return self.fields.get(name)

    def descendants(self) -> Iterator["Block"]:
        """Yield self then every descendant, depth-first in document order."""
        yield self
        for child in self.children:
            yield from child.descendants()

    def all_images(self) -> ContentElementCollection:
        return _collect(e for b in self.descendants() for e in b.images)

    def all_links(self) -> ContentElementCollection:
        return _collect(e for b in self.descendants() for e in b.links)

    def all_lists(self) -> ContentElementCollection:
        return _collect(e for b in self.descendants() for e in b.lists)

    def all_paragraphs(self) -> ContentElementCollection:
        return _collect(e for b in self.descendants() for e in b.paragraphs)

    def all_headings(self) -> list[ContentElement]:
        """Headings of this block and its descendants, each block counted once."""
        return _headings([self])


def _headings(blocks) -> list[ContentElement]:
    seen: set[int] = set()
    headings = []
    for root in blocks:
        for b in root.descendants():
            if not b.heading.text or id(b) in seen:
                continue
            seen.add(id(b))
            headings.append(ContentElement(text=b.heading.text, html=b.heading.html, data={'level': b.level}))
    return headings


class Section(BaseModel):
    """A top-level (or one-level nested) named content region."""
    model_config = ConfigDict(frozen=True)

    name:        Optional[str] = None
    title:       str = ''
    markdown:    str = ''
    html:        str = ''
    text:        str = ''
    fields:      dict[str, FieldData] = ReadOnlyDict()
    subsections: dict[str, "Section"] = ReadOnlyDict()
    blocks:      tuple[Block, ...] = ()

    @field_validator('fields', 'subsections', mode='after')
    @classmethod
    def freeze_mappings(cls, value: dict) -> ReadOnlyDict:
        return ReadOnlyDict(value)

    def field(self, name: str) -> Optional[FieldData]:
        return self.fields.get(name)

    def subsection(self, name: str) -> Optional["Section"]:
        return self.subsections.get(name)

    def real_blocks(self) -> tuple[Block, ...]:
        """Blocks with a leading synthetic wrapper unwrapped into its children."""
        if self.blocks and self.blocks[0].synthetic:
            return self.blocks[0].children + self.blocks[1:]
        return self.blocks

    def headings(self) -> list[ContentElement]:
        return _headings(self.blocks)

    def images(self) -> ContentElementCollection:
        return _collect(e for b in self.blocks for e in b.all_images())

    def links(self) -> ContentElementCollection:
        return _collect(e for b in self.blocks for e in b.all_links())

    def lists(self) -> ContentElementCollection:
        return _collect(e for b in self.blocks for e in b.all_lists())

    def paragraphs(self) -> ContentElementCollection:
        return _collect(e for b in self.blocks for e in b.all_paragraphs())


class ContentTree(BaseModel):
    """Root of a parsed document: frontmatter, raw body and ordered sections.

    Sections are addressable by position and by name. Name lookup returns the
    first section with that name; later duplicates are only reachable by index.
    """
    model_config = ConfigDict(frozen=True)

    frontmatter:     Frontmatter = None
    frontmatter_raw: Optional[str] = None
    markdown:        str = ''              # body without frontmatter
    sections:        tuple[Section, ...] = ()
    hash:            str = ''
    path:            Optional[str] = None
    slug:            Optional[str] = None

    def __iter__(self) -> Iterator[Section]:    # type: ignore[override]
        return iter(self.sections)

    def __len__(self) -> int:
        return len(self.sections)

    def section(self, key: Union[str, int]) -> Optional[Section]:
        if isinstance(key, int):
            if -len(self.sections) <= key < len(self.sections):
                return self.sections[key]
            return None
        return next((s for s in self.sections if s.name == key), None)

    def body(self) -> str:
        return self.markdown

    def raw_document(self) -> str:
        """Re-emit the document from the raw frontmatter block and body."""
        if self.frontmatter_raw is None:
            return self.markdown
        raw = self.frontmatter_raw.rstrip('\r\n')
        block = "---\n---\n" if raw == '' else f"---\n{raw}\n---\n"
        body = self.markdown.lstrip('\r\n')
        return block if body == '' else f"{block}\n{body}"

    def blocks(self) -> list[Block]:
        return [b for s in self.sections for b in s.blocks]

    def headings(self) -> list[ContentElement]:
        return _headings(self.blocks())

    def images(self) -> ContentElementCollection:
        return _collect(e for s in self.sections for e in s.images())

    def links(self) -> ContentElementCollection:
        return _collect(e for s in self.sections for e in s.links())

    def lists(self) -> ContentElementCollection:
        return _collect(e for s in self.sections for e in s.lists())

    def paragraphs(self) -> ContentElementCollection:
        return _collect(e for s in self.sections for e in s.paragraphs())
