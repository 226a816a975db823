from __future__ import annotations

import re
import unicodedata

_NON_WORD_RE = re.compile(r"[^\w\s-]", re.UNICODE)
_SEPARATOR_RE = re.compile(r"[\s_-]+")


def slugify(value: str, *, max_length: int = 120) -> str:
    """URL-safe slug; keeps non-Latin letters so CJK titles stay meaningful."""
    normalized = unicodedata.normalize("NFKC", value or "").strip().lower()
    normalized = _NON_WORD_RE.sub("", normalized)
    normalized = _SEPARATOR_RE.sub("-", normalized).strip("-")
    return normalized[:max_length].rstrip("-")


def strip_or_none(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None
