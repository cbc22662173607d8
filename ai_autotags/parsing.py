"""Parsing of free-form model output into tags and properties.

Models are asked for JSON but do not always comply. Parsing therefore runs in
stages:

1. JSON: the whole answer, or the first ``[...]`` / ``{...}`` span in it,
   after stripping Markdown code fences.
2. Delimited list: an optional ``Tags:`` preamble is dropped and the rest is
   split on commas, semicolons, newlines, pipes and CJK list separators.
   Bullets, numbering and quotes are stripped; items longer than four words or
   fifty characters are discarded as prose.
3. Heuristic: ``#hashtag`` tokens, then capitalized words that are not common
   sentence words.

Only when all stages come up empty is a ``ParseError`` raised.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from .errors import ParseError
from .models.prompts import PROPERTY_KEYS
from .models.schemas import GeneratedProperties
from .tagging import unique_tags

logger = logging.getLogger(__name__)

MAX_TAG_WORDS = 4
MAX_TAG_CHARS = 50

_CODE_FENCE = re.compile(r"^\s*```[\w-]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)
_PREAMBLE = re.compile(
    r"^\s*(?:here (?:are|is)[^:：\n]*|suggested tags|tags|keywords|标签|关键词)\s*[:：]\s*",
    re.IGNORECASE,
)
_DELIMITERS = re.compile(r"[,;|\n，；、]+")
_BULLET = re.compile(r"^\s*(?:[-*•+]|\d+[.)]|\(\d+\))\s+")
_HASHTAG = re.compile(r"(?<![\w&])#([^\s#,;，。.!?()\[\]{}\"']+)")
_CAPITALIZED = re.compile(r"\b[A-Z][A-Za-z0-9]*(?:[-_][A-Za-z0-9]+)*\b")
_KEY_VALUE = re.compile(r"^\s*[-*]?\s*\**([A-Za-z]+)\**\s*[:：]\s*(.*)$")
_TAG_KEYS = ("tags", "keywords", "tag")

_STOPWORDS = {
    "a", "an", "and", "are", "as", "at", "be", "but", "by", "for", "from",
    "here", "how", "i", "if", "in", "into", "is", "it", "its", "of", "on",
    "or", "our", "so", "sure", "that", "the", "their", "these", "this",
    "those", "to", "was", "we", "what", "when", "which", "with", "you",
    "your", "tag", "tags", "note", "json",
}


def strip_code_fence(raw: str) -> str:
    match = _CODE_FENCE.match(raw)
    return match.group(1) if match else raw


def load_json_fragment(raw: str) -> Any:
    """Decode the answer as JSON, or the first bracketed span inside it.

    Returns ``None`` when nothing decodes.
    """
    text = strip_code_fence(raw).strip()
    candidates = [text]
    for open_char, close_char in (("[", "]"), ("{", "}")):
        start = text.find(open_char)
        end = text.rfind(close_char)
        if start != -1 and end > start:
            candidates.append(text[start : end + 1])

    for candidate in candidates:
        try:
            return json.loads(candidate)
        except (json.JSONDecodeError, ValueError):
            continue
    return None


def _tags_from_json(data: Any) -> list[str] | None:
    if isinstance(data, dict):
        data = next((data[k] for k in _TAG_KEYS if data.get(k)), None)
    if isinstance(data, str):
        data = _split_delimited(data)
    if isinstance(data, list):
        return [str(item) for item in data if isinstance(item, (str, int, float))]
    return None


def _looks_like_tag(item: str) -> bool:
    return 0 < len(item) <= MAX_TAG_CHARS and len(item.split()) <= MAX_TAG_WORDS


def _split_delimited(text: str) -> list[str]:
    text = _PREAMBLE.sub("", strip_code_fence(text).strip())
    items = []
    for piece in _DELIMITERS.split(text):
        piece = _BULLET.sub("", piece).strip().strip("\"'`[]").strip()
        # "#a #b #c" on one line is a space-delimited hashtag list
        if piece.count("#") > 1 and all(w.startswith("#") for w in piece.split()):
            items.extend(piece.split())
            continue
        piece = piece.rstrip(".")
        if _looks_like_tag(piece):
            items.append(piece)
    return items


def heuristic_tags(text: str) -> list[str]:
    """Last-resort extraction: hashtags first, then capitalized words."""
    hashtags = _HASHTAG.findall(text)
    if hashtags:
        return hashtags
    return [
        word
        for word in _CAPITALIZED.findall(text)
        if word.lower() not in _STOPWORDS and len(word) > 1
    ]


def parse_tags(raw: str, tag_count: int) -> list[str]:
    """Turn a model answer into at most ``tag_count`` normalized tags.

    Raises:
        ParseError: If no stage yields a single tag
    """
    if not raw or not raw.strip():
        raise ParseError("model returned an empty answer")

    data = load_json_fragment(raw)
    candidates = _tags_from_json(data) if data is not None else None
    if candidates:
        tags = unique_tags(candidates, limit=tag_count)
        if tags:
            return tags
    if isinstance(data, dict):
        raise ParseError("model answered with a JSON object without tags")

    tags = unique_tags(_split_delimited(raw), limit=tag_count)
    if tags:
        return tags

    logger.warning("Model output is not a tag list, using heuristic extraction")
    tags = unique_tags(heuristic_tags(raw), limit=tag_count)
    if tags:
        return tags

    raise ParseError(f"could not find tags in model output: {raw[:80]!r}")


def _properties_from_lines(raw: str) -> dict[str, Any]:
    """Read ``Key: value`` lines, the usual non-JSON answer shape."""
    fields: dict[str, Any] = {}
    for line in strip_code_fence(raw).splitlines():
        match = _KEY_VALUE.match(line)
        if not match:
            continue
        key, value = match.group(1).lower(), match.group(2).strip()
        if key in ("tag", "keywords"):
            key = "tags"
        elif key == "alias":
            key = "aliases"
        if key not in PROPERTY_KEYS or not value:
            continue
        if key in ("tags", "aliases"):
            fields[key] = _split_delimited(value)
        else:
            fields[key] = value.strip("\"'")
    return fields


def parse_properties(raw: str, tag_count: int) -> GeneratedProperties:
    """Turn a model answer into ``GeneratedProperties``.

    Optional fields the model did not supply stay ``None``. An answer with
    no recognizable fields is treated as a bare tag list.

    Raises:
        ParseError: If neither fields nor tags can be recovered
    """
    if not raw or not raw.strip():
        raise ParseError("model returned an empty answer")

    data = load_json_fragment(raw)
    if isinstance(data, dict):
        fields = {k: v for k, v in data.items() if k in PROPERTY_KEYS}
    else:
        fields = _properties_from_lines(raw)

    if isinstance(fields.get("aliases"), str):
        fields["aliases"] = _split_delimited(fields["aliases"])
    for key in ("title", "author", "date", "source", "url", "summary"):
        if fields.get(key) is not None and not isinstance(fields[key], str):
            fields[key] = str(fields[key])

    if not fields:
        # No structure at all: the model most likely answered with bare tags
        return GeneratedProperties(tags=parse_tags(raw, tag_count))

    tags = _tags_from_json(data if isinstance(data, dict) else fields) or []
    fields["tags"] = unique_tags(tags, limit=tag_count)
    try:
        return GeneratedProperties.model_validate(fields)
    except (ValidationError, TypeError) as e:
        raise ParseError(f"unusable properties in model answer: {e}") from e
