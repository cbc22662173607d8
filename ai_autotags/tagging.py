"""Tag normalization shared by the parser and the merge engine."""

from __future__ import annotations

import re
from collections.abc import Iterable

_WHITESPACE = re.compile(r"\s+")
# Letters (any script), digits, and the separators tags may legally contain.
_DISALLOWED = re.compile(r"[^\w\-/]", re.UNICODE)
_EDGE_PUNCT = "-_/"


def normalize_tag(raw: str) -> str:
    """Turn a raw model token into a lowercase tag.

    Leading ``#``, surrounding quotes and punctuation are removed and inner
    whitespace becomes ``-``. Returns an empty string when nothing usable is
    left.
    """
    tag = raw.strip().strip("\"'`“”‘’").lstrip("#").strip()
    tag = _WHITESPACE.sub("-", tag.lower())
    tag = _DISALLOWED.sub("", tag)
    tag = re.sub(r"-{2,}", "-", tag)
    return tag.strip(_EDGE_PUNCT)


def tag_identity(tag: str) -> str:
    """Comparison key for case-insensitive tag de-duplication."""
    return tag.strip().lstrip("#").casefold()


def unique_tags(tags: Iterable[str], limit: int | None = None) -> list[str]:
    """Normalize, drop empties and duplicates, keep first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for raw in tags:
        tag = normalize_tag(str(raw))
        if not tag:
            continue
        key = tag_identity(tag)
        if key in seen:
            continue
        seen.add(key)
        result.append(tag)
        if limit is not None and len(result) >= limit:
            break
    return result
