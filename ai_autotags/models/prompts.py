"""Prompt templates for tag and property generation."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .schemas import GenerationRequest

DEFAULT_MAX_INPUT_CHARS = 8000

PROPERTY_KEYS = ("tags", "title", "author", "date", "source", "url", "aliases", "summary")

SYSTEM_PROMPT = (
    "You are an assistant that organizes notes in a personal knowledge base. "
    "You read a note and describe it with concise metadata. "
    "Answer with JSON only, without explanations or code fences."
)

TAGS_TEMPLATE = """Suggest at most {tag_count} tags for the following note.
Tags must be lowercase, use hyphens instead of spaces, and have at most two words.
Prefer specific concepts over generic words. Use the language of the note.

Return ONLY a JSON array of strings, for example: ["tag-one", "tag-two"]

Note:
---
{text}
---"""

PROPERTIES_TEMPLATE = """Describe the following note with metadata.
Return ONLY a JSON object with these keys:
- "tags": array of at most {tag_count} lowercase tags (hyphens instead of spaces)
- "title": a short title
- "author": the author, if the note names one
- "date": the date the content refers to, formatted YYYY-MM-DD, if known
- "source": the publication or origin, if known
- "url": the original URL, if the note contains one
- "aliases": array of alternative names for the note
- "summary": one or two sentences
Omit a key or use null when the note does not contain the information.

Note:
---
{text}
---"""


def truncate(text: str, max_chars: int = DEFAULT_MAX_INPUT_CHARS) -> str:
    text = text.strip()
    if len(text) <= max_chars:
        return text
    return text[:max_chars].rstrip() + "\n[...]"


def build_system_prompt(request: GenerationRequest) -> str:
    return SYSTEM_PROMPT


def build_user_prompt(request: GenerationRequest) -> str:
    """User prompt for an already-truncated request."""
    template = PROPERTIES_TEMPLATE if request.wants_all_properties else TAGS_TEMPLATE
    return template.format(tag_count=request.tag_count, text=request.text)
