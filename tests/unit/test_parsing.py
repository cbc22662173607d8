"""Tests for turning model output into tags and properties."""

import json

import pytest

from ai_autotags.errors import ParseError
from ai_autotags.parsing import (
    heuristic_tags,
    load_json_fragment,
    parse_properties,
    parse_tags,
    strip_code_fence,
)


class TestParseTags:
    def test_json_array(self):
        tags = parse_tags('["Machine Learning", "python", "PYTHON"]', 5)

        assert tags == ["machine-learning", "python"]

    def test_json_inside_code_fence(self):
        raw = '```json\n["kubernetes", "containers"]\n```'

        assert parse_tags(raw, 5) == ["kubernetes", "containers"]

    def test_json_embedded_in_prose(self):
        raw = 'Sure! Here are the tags: ["rust", "ownership"] Hope this helps.'

        assert parse_tags(raw, 5) == ["rust", "ownership"]

    def test_json_object_with_tags_key(self):
        assert parse_tags('{"tags": ["go", "concurrency"]}', 5) == ["go", "concurrency"]

    def test_json_object_without_tags_is_an_error(self):
        with pytest.raises(ParseError):
            parse_tags('{"title": "Something"}', 5)

    def test_comma_separated_with_preamble(self):
        tags = parse_tags("Tags: python, asyncio, web development", 5)

        assert tags == ["python", "asyncio", "web-development"]

    def test_numbered_list(self):
        raw = "1. Kubernetes\n2. Container Orchestration\n3. DevOps"

        assert parse_tags(raw, 5) == ["kubernetes", "container-orchestration", "devops"]

    def test_bulleted_list(self):
        raw = "- databases\n- postgres\n* indexing"

        assert parse_tags(raw, 5) == ["databases", "postgres", "indexing"]

    def test_space_separated_hashtags(self):
        tags = parse_tags("Here are some tags: #python #asyncio", 5)

        assert tags == ["python", "asyncio"]

    def test_chinese_separators(self):
        assert parse_tags("机器学习、深度学习，神经网络", 5) == ["机器学习", "深度学习", "神经网络"]

    def test_heuristic_fallback_on_prose(self):
        raw = (
            "I think this note is about Kubernetes and Docker deployments in general, "
            "mostly for beginners who want to learn more."
        )

        assert parse_tags(raw, 5) == ["kubernetes", "docker"]

    def test_caps_at_tag_count(self):
        tags = parse_tags('["a1", "b2", "c3", "d4", "e5", "f6"]', 3)

        assert tags == ["a1", "b2", "c3"]

    def test_empty_answer_is_an_error(self):
        with pytest.raises(ParseError):
            parse_tags("   ", 5)

    def test_unusable_prose_is_an_error(self):
        with pytest.raises(ParseError):
            parse_tags("all lowercase prose with no capitals whatsoever in this sentence", 5)


class TestParseProperties:
    def test_json_object(self):
        raw = """{
            "tags": ["Rust", "memory-safety"],
            "title": "Ownership in Rust",
            "date": "2024-03-01",
            "aliases": ["Rust ownership", "rust ownership"],
            "summary": "How ownership works."
        }"""

        props = parse_properties(raw, 5)

        assert props.tags == ["rust", "memory-safety"]
        assert props.title == "Ownership in Rust"
        assert props.date == "2024-03-01"
        assert props.aliases == ["Rust ownership"]
        assert props.summary == "How ownership works."
        # Fields the model did not supply stay unset
        assert props.author is None
        assert props.url is None

    def test_null_and_blank_fields_stay_unset(self):
        props = parse_properties('{"tags": ["x"], "author": null, "source": "  "}', 5)

        assert props.author is None
        assert props.source is None

    def test_key_value_lines(self):
        raw = "Title: Intro to Rust\nTags: rust, programming\nAuthor: Jane Doe\nUrl: https://example.com/rust"

        props = parse_properties(raw, 5)

        assert props.title == "Intro to Rust"
        assert props.author == "Jane Doe"
        assert props.url == "https://example.com/rust"
        assert props.tags == ["rust", "programming"]

    @pytest.mark.parametrize("value,expected", [(5, ["5"]), (True, ["True"])])
    def test_scalar_aliases_are_coerced(self, value, expected):
        raw = json.dumps({"tags": ["k8s"], "aliases": value})

        props = parse_properties(raw, 5)

        assert props.tags == ["k8s"]
        assert props.aliases == expected

    def test_bare_tag_list_is_accepted(self):
        props = parse_properties('["databases", "sql"]', 5)

        assert props.tags == ["databases", "sql"]
        assert props.title is None

    def test_tags_capped(self):
        props = parse_properties('{"tags": ["a1", "b2", "c3"], "title": "T"}', 2)

        assert props.tags == ["a1", "b2"]

    def test_empty_answer_is_an_error(self):
        with pytest.raises(ParseError):
            parse_properties("", 5)


def test_strip_code_fence_leaves_plain_text_alone():
    assert strip_code_fence("plain") == "plain"
    assert strip_code_fence("```\n[1]\n```") == "[1]"


def test_load_json_fragment_returns_none_for_prose():
    assert load_json_fragment("no json here") is None


def test_heuristic_prefers_hashtags():
    assert heuristic_tags("Notes on #python and Django") == ["python"]
