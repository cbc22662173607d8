"""Tests for the frontmatter merge engine."""

from __future__ import annotations

from datetime import date

import pytest
import yaml

from ai_autotags.errors import FrontmatterError
from ai_autotags.frontmatter import (
    FrontmatterService,
    merge_properties,
    merge_tags,
    parse_block,
    read_list,
    split_document,
)
from ai_autotags.models.schemas import GeneratedProperties
from ai_autotags.vault import FileVault

NOTE_WITH_TAGS = """---
title: Container notes
tags:
- docker
- Linux
---
# Containers

Body text stays exactly as it is.
"""

FIVE_TAGS = """---
tags: [a, b, c, d, e]
---
Body
"""


@pytest.fixture
def vault(tmp_path):
    return FileVault(tmp_path)


@pytest.fixture
def service(vault):
    return FrontmatterService(vault)


def write(tmp_path, name, content):
    (tmp_path / name).write_bytes(content.encode("utf-8"))
    return name


def read(tmp_path, name):
    return (tmp_path / name).read_bytes().decode("utf-8")


class TestParsing:
    def test_split_document(self):
        block, body = split_document(NOTE_WITH_TAGS)

        assert block.data == {"title": "Container notes", "tags": ["docker", "Linux"]}
        assert body.startswith("# Containers")
        assert block.raw + body == NOTE_WITH_TAGS

    def test_document_without_frontmatter(self):
        block, body = split_document("Just text\n")

        assert block.data == {}
        assert block.raw == ""
        assert body == "Just text\n"

    def test_empty_block(self):
        block, body = split_document("---\n---\nBody")

        assert block.data == {}
        assert body == "Body"

    def test_untouched_block_round_trips_byte_for_byte(self):
        raw = "---\ntitle:   'Odd   spacing'   # comment\ntags: [b, a]\n---\n"

        block = parse_block(raw)

        assert block.serialize() == raw

    def test_invalid_yaml(self):
        with pytest.raises(FrontmatterError):
            split_document("---\ntags: [unclosed\n---\nBody")

    def test_block_must_be_mapping(self):
        with pytest.raises(FrontmatterError):
            split_document("---\n- just\n- a list\n---\nBody")

    def test_read_list_accepts_strings(self):
        assert read_list("python, rust go") == ["python", "rust", "go"]
        assert read_list(None) == []
        assert read_list(["a", None, ""]) == ["a"]


class TestMergeRules:
    def test_union_preserves_order_and_ignores_case(self):
        data = {"tags": ["Docker", "#linux"]}

        outcome = merge_tags(data, ["docker", "linux", "kubernetes"])

        assert outcome.data["tags"] == ["Docker", "#linux", "kubernetes"]
        assert outcome.added_tags == ["kubernetes"]

    def test_input_is_not_mutated(self):
        data = {"tags": ["a"]}

        merge_tags(data, ["b"])

        assert data == {"tags": ["a"]}

    def test_cap_skips_tags(self):
        outcome = merge_tags({"tags": list("abcde")}, ["new"])

        assert outcome.tags_skipped is True
        assert outcome.changed is False

    def test_force_overrides_cap(self):
        outcome = merge_tags({"tags": list("abcde")}, ["new", "a"], force_update=True)

        assert outcome.data["tags"] == ["a", "b", "c", "d", "e", "new"]

    def test_scalars_overwrite_and_aliases_union(self):
        data = {"title": "Old", "date": date(2024, 1, 5), "aliases": "K8s"}
        props = GeneratedProperties(
            tags=["kubernetes"],
            title="New title",
            date="2024-01-05",
            aliases=["k8s", "Kube"],
        )

        outcome = merge_properties(data, props)

        assert outcome.data["title"] == "New title"
        assert outcome.updated_fields == ["title"]
        assert outcome.data["aliases"] == ["K8s", "Kube"]

    def test_missing_scalars_leave_existing_values(self):
        outcome = merge_properties({"author": "Ada"}, GeneratedProperties(tags=["x"]))

        assert outcome.data["author"] == "Ada"
        assert outcome.updated_fields == []

    def test_iso_date_written_as_date(self):
        outcome = merge_properties({}, GeneratedProperties(tags=["x"], date="2023-11-02"))

        assert outcome.data["date"] == date(2023, 11, 2)


class TestUpdateTags:
    @pytest.mark.asyncio
    async def test_adds_tags_and_preserves_body(self, tmp_path, service):
        name = write(tmp_path, "note.md", NOTE_WITH_TAGS)

        result = await service.update_tags(name, ["kubernetes", "docker"])

        assert result.updated is True
        assert result.message == "Added 1 tag: kubernetes"
        content = read(tmp_path, name)
        block, body = split_document(content)
        assert block.data["tags"] == ["docker", "Linux", "kubernetes"]
        assert block.data["title"] == "Container notes"
        assert body == "# Containers\n\nBody text stays exactly as it is.\n"

    @pytest.mark.asyncio
    async def test_creates_block_when_missing(self, tmp_path, service):
        name = write(tmp_path, "plain.md", "A tutorial on Kubernetes\n")

        result = await service.update_tags(name, ["kubernetes", "tutorial"])

        assert result.updated is True
        assert read(tmp_path, name) == (
            "---\ntags:\n- kubernetes\n- tutorial\n---\nA tutorial on Kubernetes\n"
        )

    @pytest.mark.asyncio
    async def test_second_run_is_idempotent(self, tmp_path, service):
        name = write(tmp_path, "note.md", NOTE_WITH_TAGS)
        await service.update_tags(name, ["kubernetes"])
        after_first = read(tmp_path, name)

        result = await service.update_tags(name, ["kubernetes"])

        assert result.updated is False
        assert result.message == "Tags already up to date"
        assert read(tmp_path, name) == after_first

    @pytest.mark.asyncio
    async def test_cap_reached(self, tmp_path, service):
        name = write(tmp_path, "full.md", FIVE_TAGS)

        result = await service.update_tags(name, ["new"])

        assert result.updated is False
        assert "skipped" in result.message
        assert read(tmp_path, name) == FIVE_TAGS

    @pytest.mark.asyncio
    async def test_force_update(self, tmp_path, service):
        name = write(tmp_path, "full.md", FIVE_TAGS)

        result = await service.update_tags(name, ["new"], force_update=True)

        assert result.updated is True
        block, _ = split_document(read(tmp_path, name))
        assert block.data["tags"] == ["a", "b", "c", "d", "e", "new"]

    @pytest.mark.asyncio
    async def test_crlf_line_endings_survive(self, tmp_path, service):
        original = "---\r\ntitle: Win\r\n---\r\nLine one\r\nLine two\r\n"
        name = write(tmp_path, "win.md", original)

        await service.update_tags(name, ["windows"])

        content = read(tmp_path, name)
        assert content == "---\r\ntitle: Win\r\ntags:\r\n- windows\r\n---\r\nLine one\r\nLine two\r\n"

    @pytest.mark.asyncio
    async def test_string_tags_are_understood(self, tmp_path, service):
        name = write(tmp_path, "str.md", "---\ntags: python, rust\n---\nBody\n")

        result = await service.update_tags(name, ["Python", "go"])

        assert result.message == "Added 1 tag: go"
        block, _ = split_document(read(tmp_path, name))
        assert block.data["tags"] == ["python", "rust", "go"]

    @pytest.mark.asyncio
    async def test_malformed_frontmatter_left_untouched(self, tmp_path, service):
        original = "---\ntags: [unclosed\n---\nBody\n"
        name = write(tmp_path, "bad.md", original)

        result = await service.update_tags(name, ["x"])

        assert result.updated is False
        assert "could not be parsed" in result.message
        assert read(tmp_path, name) == original

    @pytest.mark.asyncio
    async def test_missing_document(self, service):
        result = await service.update_tags("nope.md", ["x"])

        assert result.updated is False
        assert result.message.startswith("Could not read note")

    @pytest.mark.asyncio
    async def test_invalid_utf8_document(self, tmp_path, service):
        (tmp_path / "latin1.md").write_bytes(b"caf\xe9\n")

        result = await service.update_tags("latin1.md", ["x"])

        assert result.updated is False
        assert result.message == "Could not read note: note is not valid UTF-8"
        assert (tmp_path / "latin1.md").read_bytes() == b"caf\xe9\n"

    @pytest.mark.asyncio
    async def test_custom_cap(self, tmp_path, vault):
        service = FrontmatterService(vault, max_existing_tags=2)
        name = write(tmp_path, "two.md", "---\ntags: [a, b]\n---\n")

        result = await service.update_tags(name, ["c"])

        assert result.updated is False
        assert result.message == "Note already has 2 tags (2 or more), skipped"


class TestUpdateFrontmatter:
    @pytest.mark.asyncio
    async def test_writes_properties(self, tmp_path, service):
        name = write(tmp_path, "article.md", "Some article text\n")
        props = GeneratedProperties(
            tags=["rust"],
            title="Ownership in Rust",
            author="Jane Doe",
            date="2024-03-01",
            url="https://example.com/rust",
            aliases=["Rust ownership"],
            summary="How ownership works.",
        )

        result = await service.update_frontmatter(name, props)

        assert result.updated is True
        assert result.message == (
            "Updated properties: added 1 tag; "
            "updated title, author, date, url, summary; added 1 alias"
        )
        block, body = split_document(read(tmp_path, name))
        assert block.data["date"] == date(2024, 3, 1)
        assert block.data["aliases"] == ["Rust ownership"]
        assert "source" not in block.data
        assert body == "Some article text\n"

    @pytest.mark.asyncio
    async def test_idempotent(self, tmp_path, service):
        name = write(tmp_path, "article.md", "Text\n")
        props = GeneratedProperties(tags=["a"], title="T", date="2024-03-01")
        await service.update_frontmatter(name, props)
        after_first = read(tmp_path, name)

        result = await service.update_frontmatter(name, props)

        assert result.updated is False
        assert result.message == "Properties already up to date"
        assert read(tmp_path, name) == after_first

    @pytest.mark.asyncio
    async def test_tags_skipped_but_properties_written(self, tmp_path, service):
        name = write(tmp_path, "full.md", FIVE_TAGS)

        result = await service.update_frontmatter(
            name, GeneratedProperties(tags=["new"], title="Title")
        )

        assert result.updated is True
        assert result.message == (
            "Updated properties: updated title; tags skipped (already has 5+ tags)"
        )
        block, _ = split_document(read(tmp_path, name))
        assert block.data["tags"] == ["a", "b", "c", "d", "e"]

    @pytest.mark.asyncio
    async def test_unicode_values(self, tmp_path, service):
        name = write(tmp_path, "zh.md", "机器学习笔记\n")

        await service.update_frontmatter(
            name, GeneratedProperties(tags=["机器学习"], title="机器学习入门")
        )

        content = read(tmp_path, name)
        assert "title: 机器学习入门" in content
        assert yaml.safe_load(content.split("---")[1])["tags"] == ["机器学习"]
