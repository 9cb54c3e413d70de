"""Field capture from `<!-- name -->` / `<!-- name... -->` annotations"""

import logging
import re

from mdtree.core.extract.content import infer_field
from mdtree.core.markers import strip_markers
from mdtree.core.models import FieldData
from mdtree.core.ranges import field_ranges
from mdtree.core.render import DEFAULT_PRESET, html_to_text, render_markdown


logger = logging.getLogger(__name__)

_BLANK_LINE_RE = re.compile(r'(?:\r\n|\n)\s*(?:\r\n|\n)')


def build_field(name: str, markdown: str, preset: str = DEFAULT_PRESET) -> FieldData:
    html = render_markdown(strip_markers(markdown), preset).strip()
    field_type, data = infer_field(markdown, html)
    return FieldData(
        name=name,
        type=field_type,
        markdown=markdown,
        html=html,
        text=html_to_text(html),
        data=data,
    )


def extract_fields(markdown: str, preset: str = DEFAULT_PRESET) -> dict[str, FieldData]:
    """Capture every named field in `markdown`.

    Regular fields stop at the first blank line; container fields keep their
    whole range. Empty captures are dropped and the first capture of a name wins.
    """
    fields: dict[str, FieldData] = {}
    for rng in field_ranges(markdown):
        if rng.name in fields:
            logger.debug("Ignoring duplicate field '%s' at offset %d", rng.name, rng.start)
            continue
        content = markdown[rng.start:rng.end].strip()
        if not rng.container:
            content = _BLANK_LINE_RE.split(content, maxsplit=1)[0].strip()
        if not content:
            continue
        fields[rng.name] = build_field(rng.name, content, preset)
    return fields
