"""Tests for tag normalization."""

from ai_autotags.tagging import normalize_tag, tag_identity, unique_tags


def test_normalize_tag_lowercases_and_hyphenates():
    assert normalize_tag("Machine Learning") == "machine-learning"
    assert normalize_tag("  #Python ") == "python"
    assert normalize_tag('"DevOps"') == "devops"


def test_normalize_tag_strips_punctuation():
    assert normalize_tag("c++!") == "c"
    assert normalize_tag("web/frontend") == "web/frontend"
    assert normalize_tag("--edge--") == "edge"
    assert normalize_tag("...") == ""


def test_normalize_tag_keeps_non_latin_letters():
    assert normalize_tag("机器学习") == "机器学习"
    assert normalize_tag("Café Culture") == "café-culture"


def test_tag_identity_ignores_hash_and_case():
    assert tag_identity("#Python") == tag_identity("python")


def test_unique_tags_dedupes_case_insensitively():
    tags = unique_tags(["Python", "python", "#PYTHON", "Rust", ""])

    assert tags == ["python", "rust"]


def test_unique_tags_respects_limit():
    tags = unique_tags(["a", "b", "c", "d", "e", "f", "g"], limit=5)

    assert tags == ["a", "b", "c", "d", "e"]
