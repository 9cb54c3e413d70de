"""Content hashing for documents and extracted HTML fragments"""

import hashlib


def sha256(content: str) -> str:
    """Return hex-encoded SHA-256 hash of content (64 chars)."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def md5(content: str) -> str:
    """Return hex-encoded MD5 of content; used only as a dedup key, never for integrity."""
    return hashlib.md5(content.encode("utf-8")).hexdigest()
