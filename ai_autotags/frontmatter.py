"""Frontmatter parsing, merging and write-back.

A merge is parse -> immutable merge -> serialize. The parsed block keeps the
exact text it came from, and an untouched block is written back from that
text, so a document whose metadata did not change is left byte-for-byte
identical.
"""

from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

import yaml

from .errors import FrontmatterError
from .models.schemas import GeneratedProperties, MergeResult
from .tagging import tag_identity
from .telemetry import trace_span
from .vault import Vault

logger = logging.getLogger(__name__)

DEFAULT_MAX_EXISTING_TAGS = 5
SCALAR_FIELDS = ("title", "author", "date", "source", "url", "summary")

_BLOCK = re.compile(
    r"\A---[ \t]*(\r?\n)(.*?)(?:\r?\n)?^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)
_TAG_STRING_SPLIT = re.compile(r"[,\s]+")


@dataclass(frozen=True)
class FrontmatterBlock:
    """Parsed metadata block of one document.

    ``raw`` is the exact block text including both ``---`` lines, or ``""``
    when the document had no block.
    """

    data: dict[str, Any] = field(default_factory=dict)
    raw: str = ""
    newline: str = "\n"

    def with_data(self, data: dict[str, Any]) -> FrontmatterBlock:
        return FrontmatterBlock(data=data, raw=self.raw, newline=self.newline)

    def serialize(self, original: FrontmatterBlock | None = None) -> str:
        """Render the block; returns ``raw`` unchanged when data is untouched."""
        reference = original or self
        if self.raw and self.data == reference.data:
            return self.raw
        if not self.data and not self.raw:
            return ""

        dumped = yaml.safe_dump(
            self.data,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
            width=1000,
        )
        if dumped.strip() == "{}":
            dumped = ""
        if self.newline != "\n":
            dumped = dumped.replace("\n", self.newline)
        return f"---{self.newline}{dumped}---{self.newline}"


def parse_block(raw: str) -> FrontmatterBlock:
    """Parse a complete ``---`` delimited block (no trailing body)."""
    block, _ = split_document(raw)
    return block


def split_document(content: str) -> tuple[FrontmatterBlock, str]:
    """Split a document into its frontmatter block and the remaining body.

    Raises:
        FrontmatterError: If the block is not valid YAML or not a mapping
    """
    match = _BLOCK.match(content)
    if not match:
        newline = "\r\n" if "\r\n" in content else "\n"
        return FrontmatterBlock(newline=newline), content

    newline, inner = match.group(1), match.group(2)
    try:
        data = yaml.safe_load(inner) if inner.strip() else {}
    except yaml.YAMLError as e:
        raise FrontmatterError(f"frontmatter is not valid YAML: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontmatterError("frontmatter is not a key/value mapping")

    return FrontmatterBlock(data=data, raw=match.group(0), newline=newline), content[match.end() :]


def render_document(block: FrontmatterBlock, body: str, original: FrontmatterBlock) -> str:
    return block.serialize(original) + body


def read_list(value: Any) -> list[str]:
    """Existing tags/aliases as a list, whatever shape the user wrote them in."""
    if value is None:
        return []
    if isinstance(value, str):
        return [item for item in _TAG_STRING_SPLIT.split(value) if item]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None and str(item).strip()]
    return [str(value)]


def union(existing: list[str], new: list[str], key=tag_identity) -> tuple[list[str], list[str]]:
    """Append items of ``new`` not already in ``existing``.

    Returns the merged list and the items that were added.
    """
    seen = {key(item) for item in existing}
    added = []
    for item in new:
        k = key(item)
        if k and k not in seen:
            seen.add(k)
            added.append(item)
    return existing + added, added


@dataclass
class MergeOutcome:
    data: dict[str, Any]
    added_tags: list[str] = field(default_factory=list)
    tags_skipped: bool = False
    existing_tag_count: int = 0
    updated_fields: list[str] = field(default_factory=list)
    added_aliases: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added_tags or self.updated_fields or self.added_aliases)


def merge_tags(
    data: dict[str, Any],
    tags: list[str],
    force_update: bool = False,
    max_existing_tags: int = DEFAULT_MAX_EXISTING_TAGS,
) -> MergeOutcome:
    """Union ``tags`` into the block's tags without mutating ``data``."""
    merged = copy.deepcopy(data)
    existing = read_list(merged.get("tags"))
    outcome = MergeOutcome(data=merged, existing_tag_count=len(existing))

    if not force_update and len(existing) >= max_existing_tags:
        outcome.tags_skipped = True
        return outcome

    combined, added = union(existing, tags)
    if added:
        merged["tags"] = combined
        outcome.added_tags = added
    return outcome


def _as_yaml_value(field_name: str, value: str) -> Any:
    if field_name == "date":
        try:
            return date.fromisoformat(value)
        except ValueError:
            return value
    return value


def merge_properties(
    data: dict[str, Any],
    properties: GeneratedProperties,
    force_update: bool = False,
    max_existing_tags: int = DEFAULT_MAX_EXISTING_TAGS,
) -> MergeOutcome:
    """Merge a full property set.

    Tags follow ``merge_tags``; non-empty scalar values overwrite existing
    ones; aliases are unioned without a cap.
    """
    outcome = merge_tags(data, properties.tags, force_update, max_existing_tags)
    merged = outcome.data

    for name in SCALAR_FIELDS:
        value = getattr(properties, name)
        if not value:
            continue
        current = merged.get(name)
        if current is not None and str(current).strip() == value:
            continue
        merged[name] = _as_yaml_value(name, value)
        outcome.updated_fields.append(name)

    if properties.aliases:
        existing = read_list_preserving_spaces(merged.get("aliases"))
        combined, added = union(existing, properties.aliases, key=lambda a: a.strip().casefold())
        if added:
            merged["aliases"] = combined
            outcome.added_aliases = added

    return outcome


def read_list_preserving_spaces(value: Any) -> list[str]:
    """Like ``read_list`` but a plain string is one item (aliases have spaces)."""
    if isinstance(value, str):
        return [value] if value.strip() else []
    return read_list(value)


def _plural(count: int, word: str, plural: str | None = None) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {plural or word + 's'}"


def describe_tags(outcome: MergeOutcome, max_existing_tags: int) -> str:
    if outcome.tags_skipped:
        return (
            f"Note already has {outcome.existing_tag_count} tags "
            f"({max_existing_tags} or more), skipped"
        )
    if outcome.added_tags:
        return f"Added {_plural(len(outcome.added_tags), 'tag')}: {', '.join(outcome.added_tags)}"
    return "Tags already up to date"


def describe_properties(outcome: MergeOutcome, max_existing_tags: int) -> str:
    parts = []
    if outcome.added_tags:
        parts.append(f"added {_plural(len(outcome.added_tags), 'tag')}")
    if outcome.updated_fields:
        parts.append(f"updated {', '.join(outcome.updated_fields)}")
    if outcome.added_aliases:
        parts.append(f"added {_plural(len(outcome.added_aliases), 'alias', 'aliases')}")

    skipped = ""
    if outcome.tags_skipped:
        skipped = f"tags skipped (already has {max_existing_tags}+ tags)"

    if not parts:
        return "Properties already up to date" + (f"; {skipped}" if skipped else "")
    message = "Updated properties: " + "; ".join(parts)
    return message + (f"; {skipped}" if skipped else "")


class FrontmatterService:
    """Reads, merges and writes back frontmatter for one document at a time."""

    def __init__(self, vault: Vault, max_existing_tags: int = DEFAULT_MAX_EXISTING_TAGS):
        self.vault = vault
        self.max_existing_tags = max_existing_tags

    async def update_tags(
        self, document: Path | str, tags: list[str], force_update: bool = False
    ) -> MergeResult:
        """Add generated tags to a document."""

        def merge(data: dict[str, Any]) -> tuple[MergeOutcome, str]:
            outcome = merge_tags(data, tags, force_update, self.max_existing_tags)
            return outcome, describe_tags(outcome, self.max_existing_tags)

        return await self._apply(document, merge)

    async def update_frontmatter(
        self,
        document: Path | str,
        properties: GeneratedProperties,
        force_update: bool = False,
    ) -> MergeResult:
        """Merge a full generated property set into a document."""

        def merge(data: dict[str, Any]) -> tuple[MergeOutcome, str]:
            outcome = merge_properties(data, properties, force_update, self.max_existing_tags)
            return outcome, describe_properties(outcome, self.max_existing_tags)

        return await self._apply(document, merge)

    async def _apply(self, document: Path | str, merge) -> MergeResult:
        with trace_span("frontmatter.merge", document=str(document)):
            try:
                content = await self.vault.read(document)
            except OSError as e:
                logger.error(f"Could not read {document}: {e}")
                return MergeResult(updated=False, message=f"Could not read note: {e.strerror or e}")
            except UnicodeDecodeError as e:
                logger.error(f"Could not decode {document}: {e}")
                return MergeResult(updated=False, message="Could not read note: note is not valid UTF-8")

            try:
                block, body = split_document(content)
            except FrontmatterError as e:
                logger.warning(f"Leaving {document} unchanged: {e}")
                return MergeResult(
                    updated=False,
                    message="Frontmatter could not be parsed, note left unchanged",
                )

            outcome, message = merge(block.data)
            if not outcome.changed:
                return MergeResult(updated=False, message=message)

            new_content = render_document(block.with_data(outcome.data), body, block)
            try:
                await self.vault.write(document, new_content)
            except OSError as e:
                logger.error(f"Could not write {document}: {e}")
                return MergeResult(updated=False, message=f"Could not write note: {e.strerror or e}")

            logger.info(f"Updated frontmatter of {document}: {message}")
            return MergeResult(updated=True, message=message)
