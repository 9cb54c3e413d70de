"""Shared markdown-it token utilities"""


def heading_level(token) -> int | None:
    """Return the heading level (1-6) for a heading_open token, else None."""
    if token.type == 'heading_open' and token.tag and token.tag[0] == 'h' and token.tag[1:].isdigit():
        return int(token.tag[1:])
    return None


def is_top_level_heading(token) -> bool:
    """True for headings that sit directly in the document, not inside quotes or lists."""
    return token.level == 0 and heading_level(token) is not None
