"""File discovery and document parsing into immutable content trees"""

import logging
from pathlib import Path
from typing import Union

from mdtree.core.errors import SourceUnavailable
from mdtree.core.extract.sections import build_sections
from mdtree.core.frontmatter import parse_frontmatter, split_frontmatter
from mdtree.core.models import ContentTree
from mdtree.core.render import DEFAULT_PRESET
from mdtree.core.utils.hashing import sha256
from mdtree.core.utils.slug import slugify


logger = logging.getLogger(__name__)

MD_EXTENSIONS = {'.md', '.mdx'}


def discover_files(path: Path) -> list[Path]:
    """Return sorted .md/.mdx files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.suffix in MD_EXTENSIONS)


def parse_string(markdown: str, parser_config: str = DEFAULT_PRESET) -> ContentTree:
    """Parse an annotated markdown document into a ContentTree."""
    raw, body = split_frontmatter(markdown)
    return ContentTree(
        frontmatter=parse_frontmatter(raw, parser_config),
        frontmatter_raw=raw,
        markdown=body,
        sections=build_sections(body, parser_config),
        hash=sha256(markdown),
    )


def parse_file(path: Union[str, Path], parser_config: str = DEFAULT_PRESET) -> ContentTree:
    """Read and parse a UTF-8 markdown file; path and slug are set on the tree.

    The slug comes from a string `slug` frontmatter value, else the file stem.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise SourceUnavailable(path, str(e)) from e

    tree = parse_string(raw, parser_config)
    fm = tree.frontmatter if isinstance(tree.frontmatter, dict) else {}
    slug = fm.get('slug') if isinstance(fm.get('slug'), str) and fm.get('slug') else slugify(path.stem)
    logger.info("Parsed %s (%d section(s))", path, len(tree))
    return tree.model_copy(update={'path': str(path), 'slug': slug})


def parse_dir(path: Path, parser_config: str = DEFAULT_PRESET) -> list[ContentTree]:
    """Parse all .md/.mdx files under path (file or directory)."""
    return [parse_file(p, parser_config) for p in discover_files(Path(path))]
