import pytest

from app.utils import distinct_language_tags, normalize_language_tag, split_setting_list


def test_normalize_language_tag():
    assert normalize_language_tag("  EN-us ") == "en-us"
    assert normalize_language_tag(None) == ""


def test_distinct_language_tags_drops_blanks():
    assert distinct_language_tags(["eng", "ENG", "", None, " jpn"]) == frozenset(
        {"eng", "jpn"}
    )
    assert distinct_language_tags(None) == frozenset()


def test_split_setting_list_keeps_first_occurrence():
    assert split_setting_list("b, a,,b", name="X") == ["b", "a"]
    assert split_setting_list(["x", " y "], name="X") == ["x", "y"]


def test_split_setting_list_rejects_other_types():
    with pytest.raises(TypeError):
        split_setting_list(42, name="X")
