# tests/test_levels.py

import pytest

from src.cedict_importer.levels import map_level


@pytest.mark.parametrize("level", [None, "", "   ", "\t\n"])
def test_absent_or_blank_level_is_common(level):
    assert map_level(level) == (None, "Common")


@pytest.mark.parametrize("n", [1, 2, 3, 4, 5, 6])
def test_hsk_levels_map_to_matching_category(n):
    mapping = map_level(f"HSK{n}")
    assert mapping.hsk_level == n
    assert mapping.category == f"HSK{n}"


def test_hsk_match_is_case_insensitive_and_trimmed():
    assert map_level("  hsk4 ") == (4, "HSK4")
    assert map_level("Hsk2") == (2, "HSK2")


@pytest.mark.parametrize("level", ["HSK0", "HSK7", "HSK10", "HSK", "HSK 3", "HSK3-4"])
def test_out_of_range_or_multi_digit_hsk_falls_through_to_common(level):
    assert map_level(level) == (None, "Common")


def test_advanced_is_exact_match_only():
    assert map_level("Advanced") == (None, "Advanced")
    assert map_level("ADVANCED") == (None, "Advanced")
    # not a prefix/substring match
    assert map_level("advanced learner") == (None, "Common")


@pytest.mark.parametrize(
    "level, expected",
    [
        ("beginner", (1, "HSK1")),
        ("Elementary", (2, "HSK2")),
        ("INTERMEDIATE", (3, "HSK3")),
        ("literary", (None, "Literary")),
        ("Technical", (None, "Technical")),
        ("informal", (None, "Informal")),
    ],
)
def test_named_levels_use_lookup_table(level, expected):
    assert map_level(level) == expected


def test_unknown_text_defaults_to_common():
    assert map_level("mystery-level") == (None, "Common")


@pytest.mark.parametrize("value", [3, 4.5, ["HSK1"], {"level": "HSK1"}, object()])
def test_non_string_input_never_raises(value):
    assert map_level(value) == (None, "Common")


@pytest.mark.parametrize(
    "level",
    ["HSK1", "hsk6", "beginner", "elementary", "intermediate", "advanced",
     "literary", "technical", "informal", "Common", "whatever", ""],
)
def test_hsk_level_and_category_always_pair_up(level):
    hsk_level, category = map_level(level)
    if category.startswith("HSK"):
        assert hsk_level == int(category[3:])
    else:
        assert hsk_level is None
