"""Export: sidecar JSON and plain-text outlines of a content tree"""

import json
from pathlib import Path
from typing import Optional

from mdtree.core.models import Block, ContentTree, FieldData, Section


def _field_entry(field: FieldData) -> dict:
    return {"type": field.type, "text": field.text, "data": field.data}


def _section_entry(position: int, section: Section) -> dict:
    return {
        "position": position,
        "name": section.name,
        "title": section.title,
        "fields": {name: _field_entry(f) for name, f in section.fields.items()},
        "subsections": {
            name: {
                "title": sub.title,
                "fields": {n: _field_entry(f) for n, f in sub.fields.items()},
            }
            for name, sub in section.subsections.items()
        },
        "headings": [{"text": h.text, "level": h.data["level"]} for h in section.headings()],
        "images": [e.data for e in section.images()],
        "links": [{"text": e.text, **e.data} for e in section.links()],
    }


def build_sidecar(tree: ContentTree) -> dict:
    """Build the sidecar JSON dict: slug, path, hash, frontmatter and per-section summaries.

    A frontmatter block that could not be parsed is exported as its raw string.
    """
    return {
        "slug": tree.slug,
        "path": tree.path,
        "hash": tree.hash,
        "frontmatter": tree.frontmatter if tree.frontmatter is not None else {},
        "sections": [_section_entry(i, s) for i, s in enumerate(tree.sections)],
    }


def write_sidecar(tree: ContentTree, output_dir: Path, source_root: Optional[Path] = None) -> Path:
    """Write the sidecar JSON for a parsed file.

    Output path mirrors the source directory structure below `source_root`:
      output_dir / Path(tree.path).parent.relative_to(source_root) / tree.slug.json
    """
    parent = Path(tree.path).parent if tree.path else Path()
    if source_root is not None:
        parent = parent.relative_to(source_root)
    elif parent.is_absolute():
        parent = Path()
    dest_dir = output_dir / parent
    dest_dir.mkdir(parents=True, exist_ok=True)
    json_path = dest_dir / f"{tree.slug or 'doc'}.json"
    json_path.write_text(json.dumps(build_sidecar(tree), indent=2, ensure_ascii=False), encoding='utf-8')
    return json_path


def _outline_blocks(blocks: tuple[Block, ...], indent: int) -> list[str]:
    lines = []
    for block in blocks:
        if block.synthetic:
            label = "(synthetic)"
        elif block.level == 0:
            label = "(preamble)"
        else:
            label = f"{'#' * block.level} {block.heading.text}"
        if block.fields:
            label += f"  [{', '.join(block.fields)}]"
        lines.append("  " * indent + label)
        lines.extend(_outline_blocks(block.children, indent + 1))
    return lines


def render_outline(tree: ContentTree) -> str:
    """Render an indented outline of sections, subsections, blocks and field names."""
    lines = [tree.slug or tree.path or "(document)"]
    for i, section in enumerate(tree.sections):
        name = f"section:{section.name}" if section.name else "section"
        lines.append(f"  [{i}] {name}" + (f" - {section.title}" if section.title else ""))
        if section.fields:
            lines.append(f"    fields: {', '.join(section.fields)}")
        for sub_name, sub in section.subsections.items():
            lines.append(f"    sub:{sub_name}" + (f" - {sub.title}" if sub.title else ""))
        lines.extend(_outline_blocks(section.blocks, 2))
    return "\n".join(lines)
